from __future__ import annotations

from dataclasses import dataclass, asdict, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class Arch(str, Enum):
    X86_64 = "SCMP_ARCH_X86_64"
    X86 = "SCMP_ARCH_X86"
    ARM = "SCMP_ARCH_ARM"


class UnsupportedArchitectureError(Exception):
    pass


class UnsupportedBinaryError(Exception):
    pass


class DisassemblyError(RuntimeError):
    pass


class SyscallResolutionError(Exception):
    def __init__(self, message: str, line: Optional[str] = None):
        super().__init__(message)
        self.line = line


class SyscallNotFoundError(SyscallResolutionError):
    pass


class MalformedSyscallIDError(SyscallResolutionError):
    pass


@dataclass(frozen=True)
class BinaryInfo:
    path: str
    arch: Optional[Arch]
    machine: str
    is_go: bool


@dataclass(frozen=True)
class UnresolvedSite:
    line_number: int
    instruction: str
    kind: str
    reason: str

    def __str__(self):
        return f"line {self.line_number} [{self.kind}]: {self.instruction.strip()} ({self.reason})"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Profile:
    arch: Arch
    syscalls: Tuple[str, ...]
    default_action: str = "SCMP_ACT_ERRNO"
    allow_action: str = "SCMP_ACT_ALLOW"
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False)

    def __str__(self):
        return f"Syscalls detected (total: {len(self.syscalls)}): {list(self.syscalls)}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "defaultAction": self.default_action,
            "architectures": [self.arch.value],
            "syscalls": [
                {
                    "names": list(self.syscalls),
                    "action": self.allow_action,
                }
            ],
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Profile":
        archs = d.get("architectures") or []
        if len(archs) != 1:
            raise ValueError(f"Expected exactly one architecture, got: {archs!r}")
        rules = d.get("syscalls") or [{}]
        return cls(
            arch=Arch(archs[0]),
            syscalls=tuple(name for rule in rules for name in rule.get("names", [])),
            default_action=d["defaultAction"],
            allow_action=rules[0].get("action", "SCMP_ACT_ALLOW"),
        )
