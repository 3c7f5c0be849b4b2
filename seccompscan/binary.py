"""ELF header inspection: target architecture and Go toolchain markers."""

from __future__ import annotations

import logging
from pathlib import Path

from elftools.common.exceptions import ELFError
from elftools.elf.elffile import ELFFile

from ._types import Arch, BinaryInfo, UnsupportedArchitectureError, UnsupportedBinaryError

logger = logging.getLogger("seccompscan")

ELF_MACHINES = {
    "EM_X86_64": Arch.X86_64,
    "EM_386": Arch.X86,
    "EM_ARM": Arch.ARM,
}

GO_SECTIONS = (".note.go.buildid", ".go.buildinfo", ".gosymtab")


def inspect_binary(path: str | Path) -> BinaryInfo:
    path = Path(path)

    try:
        with path.open("rb") as f:
            try:
                elf = ELFFile(f)
            except ELFError as e:
                raise UnsupportedBinaryError(f"Not a valid ELF file: {path} ({e})") from e

            machine = elf["e_machine"]
            is_go = any(elf.get_section_by_name(name) is not None for name in GO_SECTIONS)
    except OSError as e:
        raise UnsupportedBinaryError(f"OS error while reading {path}: {e}") from e

    arch = ELF_MACHINES.get(machine)
    logger.debug("%s: machine=%s arch=%s go=%s", path, machine, arch, is_go)
    return BinaryInfo(path=str(path), arch=arch, machine=machine, is_go=is_go)


def require_go_binary(path: str | Path) -> BinaryInfo:
    """Inspect ``path`` and fail unless it is a Go binary for a supported architecture."""
    info = inspect_binary(path)
    if not info.is_go:
        raise UnsupportedBinaryError(f"{path} doesn't seem to be a Go binary")
    if info.arch is None:
        raise UnsupportedArchitectureError(f"{info.machine} is not supported")
    return info
