import logging
import os
import shutil
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple

from ._types import Arch, Profile
from .arch import get_strategy
from .binary import require_go_binary
from .config import load_config
from .detector import SyscallSiteDetector
from .disassembler import Disassembly
from .profile import build_profile
from .syscall_table import DEFAULT_SYSCALLS, SYSCALL_NAMES
from .utils import ProfileSerializer, save_report

logger = logging.getLogger("seccompscan")


def scan(
        binary_path: str | Path,
        profile_path: Optional[str] = None,
        disassembly_file: Optional[str] = None,
        report_file: Optional[str] = None,
        overwrite: bool = False,
        config_path: Optional[str] = None,
        print_res: bool = True,
) -> Tuple[Profile, Dict[str, Any]]:
    config = load_config(config_path)
    info = require_go_binary(binary_path)
    logger.info("%s is a Go binary for %s", binary_path, info.arch.value)

    reuse = bool(disassembly_file) and os.path.exists(disassembly_file) and not overwrite
    if not reuse:
        _ensure_prereqs(config["go_command"])

    with Disassembly(binary_path, disassembly_file, go_command=config["go_command"], reuse=reuse) as lines:
        return scan_disassembly(
            lines,
            info.arch,
            config=config,
            profile_path=profile_path,
            report_file=report_file,
            print_res=print_res,
        )


def scan_disassembly(
        lines: Iterable[str],
        arch: Arch | str,
        config: Optional[Dict[str, Any]] = None,
        profile_path: Optional[str] = None,
        report_file: Optional[str] = None,
        print_res: bool = False,
) -> Tuple[Profile, Dict[str, Any]]:
    """Scan an objdump listing and build the allow-list profile for ``arch``."""
    config = config or load_config()
    strategy = get_strategy(arch)

    detector = SyscallSiteDetector(strategy, DEFAULT_SYSCALLS[strategy.arch])
    syscall_ids = detector.scan(lines)

    profile = build_profile(
        strategy.arch,
        syscall_ids,
        SYSCALL_NAMES[strategy.arch],
        default_action=config["default_action"],
        allow_action=config["allow_action"],
        extra_names=config["extra_syscalls"],
    )

    report = detector.get_report()
    report["unknown_ids"] = profile.metadata["unknown_ids"]
    report["syscalls"] = list(profile.syscalls)

    if profile_path:
        ProfileSerializer.dump(profile, profile_path)

    if report_file:
        save_report(report, report_file)

    if print_res:
        print(profile)

    return profile, report


def _ensure_prereqs(go_command: str) -> None:
    """
    The Go toolchain must be on PATH to disassemble the binary.
    On failure: logs a clear error and exits the process.
    """
    if shutil.which(go_command) is None:
        logger.error(
            f"Missing dependency: '{go_command}' not found in PATH.\n"
            "Fix: install the Go toolchain, or pass an existing listing with --disassembly-file"
        )
        raise SystemExit(1)

    logger.info("Disassembly prerequisites OK (%s present).", go_command)
