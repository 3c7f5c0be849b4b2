from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Set

from ._types import SyscallResolutionError, UnresolvedSite
from .arch import ArchStrategy, is_function_boundary, parse_function_name
from .window import InstructionWindow, LOOKBACK_WINDOW_SIZE

logger = logging.getLogger("detector")


class SyscallSiteDetector:
    """
    Single forward pass over a disassembly listing.

    Every line goes into the lookback window; syscall sites found by the
    strategy are resolved against it. A site that cannot be resolved is
    logged and recorded, the scan carries on.
    """

    def __init__(self, strategy: ArchStrategy, baseline: Iterable[int] = (), window_size: int = LOOKBACK_WINDOW_SIZE):
        self.strategy = strategy
        self.window = InstructionWindow(window_size)
        self.syscalls: Set[int] = set(baseline)
        self.current_function = ""
        self.unresolved: List[UnresolvedSite] = []

        self._baseline_size = len(self.syscalls)
        self._counts: Dict[str, int] = {
            "explicit_sites": 0,
            "implicit_sites": 0,
            "resolved": 0,
            "unresolved": 0,
        }

    @property
    def instructions_scanned(self) -> int:
        return self.window.position

    def feed(self, instruction: str) -> None:
        instruction = instruction.rstrip("\r\n")
        position = self.window.append(instruction)

        if is_function_boundary(instruction):
            self.current_function = parse_function_name(instruction)

        # calls into the syscall package wrappers
        if self.strategy.is_explicit_site(instruction):
            self._counts["explicit_sites"] += 1
            if not self._resolve(self.strategy.resolve_explicit_id, position, instruction, "explicit"):
                return

        # the runtime package traps directly instead of using the wrappers
        if self.strategy.is_implicit_site(instruction, self.current_function):
            self._counts["implicit_sites"] += 1
            self._resolve(self.strategy.resolve_implicit_id, position, instruction, "implicit")

    def scan(self, lines: Iterable[str]) -> Set[int]:
        logger.info("Scanning disassembled binary for syscall IDs (%s)", self.strategy.arch.value)
        for line in lines:
            self.feed(line)
        logger.info(
            "Scan complete: %d instructions, %d sites resolved, %d unresolved.",
            self.instructions_scanned, self._counts["resolved"], self._counts["unresolved"],
        )
        return self.syscalls

    def _resolve(self, resolver, position: int, instruction: str, kind: str) -> bool:
        try:
            syscall_id = resolver(self.window, position)
        except SyscallResolutionError as e:
            site = UnresolvedSite(position + 1, instruction, kind, str(e))
            self.unresolved.append(site)
            self._counts["unresolved"] += 1
            logger.warning("Failed to find syscall ID for line %d: %s, reason: %s", position + 1, instruction, e)
            return False

        logger.debug("Line %d in %s resolved to syscall %d", position + 1, self.current_function, syscall_id)
        self.syscalls.add(syscall_id)
        self._counts["resolved"] += 1
        return True

    def get_report(self) -> Dict[str, Any]:
        return {
            "metadata": {
                "timestamp": datetime.now().isoformat(),
                "architecture": self.strategy.arch.value,
                "instructions_total": self.instructions_scanned,
                "sites_by_kind": {
                    "explicit": self._counts["explicit_sites"],
                    "implicit": self._counts["implicit_sites"],
                },
                "sites_resolved": self._counts["resolved"],
                "sites_unresolved": self._counts["unresolved"],
                "baseline_total": self._baseline_size,
                "syscall_ids_total": len(self.syscalls),
            },
            "syscall_ids": sorted(self.syscalls),
            "unresolved": [site.to_dict() for site in self.unresolved],
        }
