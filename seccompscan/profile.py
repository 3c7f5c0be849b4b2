from __future__ import annotations

import logging
from typing import Iterable, List, Mapping, Optional, Tuple

from ._types import Arch, Profile

logger = logging.getLogger("seccompscan")


def build_syscall_list(
        syscall_ids: Iterable[int],
        names: Mapping[int, str],
        extra_names: Iterable[str] = (),
) -> Tuple[List[str], List[int]]:
    """
    Map syscall IDs to names and return (sorted unique names, unknown IDs).

    IDs without an entry in ``names`` are logged and left out of the list.
    """
    found = set(extra_names)
    unknown: List[int] = []

    for syscall_id in sorted(set(syscall_ids)):
        name = names.get(syscall_id)
        if name is None:
            logger.warning("Syscall ID %d not available on the ID->name map", syscall_id)
            unknown.append(syscall_id)
            continue
        found.add(name)

    return sorted(found), unknown


def build_profile(
        arch: Arch,
        syscall_ids: Iterable[int],
        names: Mapping[int, str],
        default_action: str = "SCMP_ACT_ERRNO",
        allow_action: str = "SCMP_ACT_ALLOW",
        extra_names: Iterable[str] = (),
        metadata: Optional[dict] = None,
) -> Profile:
    syscalls, unknown = build_syscall_list(syscall_ids, names, extra_names)
    md = dict(metadata or {})
    md["unknown_ids"] = unknown
    return Profile(
        arch=arch,
        syscalls=tuple(syscalls),
        default_action=default_action,
        allow_action=allow_action,
        metadata=md,
    )
