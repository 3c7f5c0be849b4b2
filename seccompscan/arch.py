"""
Per-architecture syscall site classification and syscall ID resolution
=======================================================================

Works on the text produced by ``go tool objdump``:

    TEXT main.main(SB) /src/main.go
      main.go:11	0x4a0e49	48c7042427000000	MOVQ $0x27, 0(SP)
      main.go:11	0x4a0e51	e8aa3cffff		CALL syscall.Syscall(SB)

- Explicit sites: calls into the syscall package wrappers. The syscall number
  is the first wrapper argument (0(SP) on x86/x86-64, R0 on ARM).
- Implicit sites: the runtime package does not go through the wrappers, it
  issues the trap instruction directly with the number in AX (x86/x86-64) or
  R7 (ARM).

Resolution walks backwards from the site through the lookback window and
stops at the first instruction that loads the syscall number.
"""

from __future__ import annotations

import re
from typing import Callable, Dict, FrozenSet, Iterator, Tuple, Type

from ._types import (
    Arch,
    MalformedSyscallIDError,
    SyscallNotFoundError,
    UnsupportedArchitectureError,
)
from .window import InstructionWindow

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1

SYSCALL_WRAPPERS: Tuple[str, ...] = (
    "syscall.Syscall(SB)",
    "syscall.Syscall6(SB)",
    "syscall.RawSyscall(SB)",
    "syscall.RawSyscall6(SB)",
    "syscall.rawSyscallNoError(SB)",
)

# runtime routines from runtime/sys_linux_*.s that trap directly
RUNTIME_SYSCALL_FUNCTIONS: FrozenSet[str] = frozenset({
    "runtime.access",
    "runtime.clone",
    "runtime.closefd",
    "runtime.closeonexec",
    "runtime.connect",
    "runtime.epollcreate",
    "runtime.epollcreate1",
    "runtime.epollctl",
    "runtime.epollwait",
    "runtime.exit",
    "runtime.exitThread",
    "runtime.futex",
    "runtime.getpid",
    "runtime.gettid",
    "runtime.madvise",
    "runtime.mincore",
    "runtime.mmap",
    "runtime.munmap",
    "runtime.nanotime",
    "runtime.nanotime1",
    "runtime.open",
    "runtime.osyield",
    "runtime.pipe",
    "runtime.pipe2",
    "runtime.raise",
    "runtime.raiseproc",
    "runtime.read",
    "runtime.rt_sigaction",
    "runtime.rtsigprocmask",
    "runtime.sbrk0",
    "runtime.sched_getaffinity",
    "runtime.setNonblock",
    "runtime.setitimer",
    "runtime.sigaltstack",
    "runtime.sigreturn",
    "runtime.sigreturn__sigaction",
    "runtime.socket",
    "runtime.sysMmap",
    "runtime.sysMunmap",
    "runtime.tgkill",
    "runtime.timer_create",
    "runtime.timer_delete",
    "runtime.timer_settime",
    "runtime.usleep",
    "runtime.walltime",
    "runtime.walltime1",
    "runtime.write",
    "runtime.write1",
})

_LEGACY_OCTAL_RE = re.compile(r"^([+-]?)0(_?[0-7][0-7_]*)$")
_ABI0_SUFFIX = ".abi0"


def parse_function_name(line: str) -> str:
    """Return the symbol name of a ``TEXT <name>(SB) <file>`` boundary line."""
    rest = line[len("TEXT"):].strip()
    end = rest.find("(SB)")
    if end == -1:
        name = rest.split()[0] if rest else ""
    else:
        name = rest[:end]
    # assembly routines carry an ABI suffix in newer toolchains
    if name.endswith(_ABI0_SUFFIX):
        name = name[:-len(_ABI0_SUFFIX)]
    return name


def is_function_boundary(line: str) -> bool:
    return len(line) > 5 and line.startswith("TEXT")


def parse_int_literal(literal: str) -> int:
    """
    Parse an integer literal the way base-prefixed literals are read by
    compilers: 0x/0o/0b prefixes, a bare leading 0 meaning octal, optional
    sign and digit separators. The value must fit in a signed 64-bit integer.
    """
    if not literal or not literal.isascii() or literal != literal.strip():
        raise ValueError(f"invalid syntax: {literal!r}")

    m = _LEGACY_OCTAL_RE.match(literal)
    text = f"{m.group(1)}0o{m.group(2)}" if m else literal

    value = int(text, 0)
    if not INT64_MIN <= value <= INT64_MAX:
        raise ValueError(f"value out of range: {literal!r}")
    return value


def _extract_id(instruction: str, operand: str) -> int:
    begin = instruction.find("$")
    if begin == -1:
        raise MalformedSyscallIDError(f"Failed to find syscall ID on line: {instruction}", line=instruction)
    end = instruction.find(operand)

    literal = instruction[begin + 1:end]
    try:
        return parse_int_literal(literal)
    except ValueError as e:
        raise MalformedSyscallIDError(f"Error parsing syscall id {literal!r}: {e}", line=instruction) from e


def _lookback(window: InstructionWindow, position: int) -> Iterator[str]:
    for step in range(window.capacity):
        yield window.at(position - step)


def _find_immediate(
        window: InstructionWindow,
        position: int,
        matches: Callable[[str], bool],
        operand: str,
) -> int:
    for instruction in _lookback(window, position):
        if matches(instruction):
            return _extract_id(instruction, operand)
    raise SyscallNotFoundError(
        f"Failed to find syscall ID within {window.capacity} instructions", line=window.at(position)
    )


class ArchStrategy:
    """Syscall site patterns and ID resolvers for one architecture."""

    arch: Arch
    call_mnemonic: str = "CALL"
    runtime_functions: FrozenSet[str] = RUNTIME_SYSCALL_FUNCTIONS

    def is_explicit_site(self, instruction: str) -> bool:
        if self.call_mnemonic not in instruction:
            return False
        return any(f"{self.call_mnemonic} {target}" in instruction for target in SYSCALL_WRAPPERS)

    def is_implicit_site(self, instruction: str, current_function: str) -> bool:
        if current_function not in self.runtime_functions:
            return False
        return self._is_trap(instruction)

    def _is_trap(self, instruction: str) -> bool:
        raise NotImplementedError

    def resolve_explicit_id(self, window: InstructionWindow, position: int) -> int:
        raise NotImplementedError

    def resolve_implicit_id(self, window: InstructionWindow, position: int) -> int:
        raise NotImplementedError

    def __repr__(self):
        return f"{type(self).__name__}({self.arch.value})"


class X86_64Strategy(ArchStrategy):
    arch = Arch.X86_64
    explicit_mov = "MOVQ"

    def _is_trap(self, instruction: str) -> bool:
        return "SYSCALL" in instruction.split()

    def resolve_explicit_id(self, window: InstructionWindow, position: int) -> int:
        # MOVQ $ID, 0(SP) stores the trap number as the first wrapper argument
        return _find_immediate(
            window,
            position,
            lambda ins: self.explicit_mov in ins and ", 0(SP)" in ins,
            ", 0(SP)",
        )

    def resolve_implicit_id(self, window: InstructionWindow, position: int) -> int:
        for instruction in _lookback(window, position):
            # the compiler zeroes AX with XORL AX, AX instead of MOVL $0, AX (read)
            if "XOR" in instruction and " AX, AX" in instruction:
                return 0
            if "MOV" in instruction and ", AX" in instruction:
                return _extract_id(instruction, ", AX")
        raise SyscallNotFoundError(
            f"Failed to find syscall ID within {window.capacity} instructions", line=window.at(position)
        )


class X86Strategy(X86_64Strategy):
    arch = Arch.X86
    explicit_mov = "MOVL"
    runtime_functions = RUNTIME_SYSCALL_FUNCTIONS | {"runtime.setldt"}

    def _is_trap(self, instruction: str) -> bool:
        return "INT $0x80" in instruction

    # resolve_implicit_id is inherited from X86_64Strategy unchanged. This
    # assumes the 386 runtime loads the number into AX the same way; it has
    # not been checked against every 386 routine.


class ARMStrategy(ArchStrategy):
    arch = Arch.ARM
    call_mnemonic = "BL"
    runtime_functions = RUNTIME_SYSCALL_FUNCTIONS | {"runtime.cacheflush", "runtime.settls"}

    def _is_trap(self, instruction: str) -> bool:
        tokens = instruction.split()
        return "SWI" in tokens or "SVC" in tokens

    def resolve_explicit_id(self, window: InstructionWindow, position: int) -> int:
        # MOVW without an immediate is a register copy into R0, keep looking
        return _find_immediate(
            window,
            position,
            lambda ins: "MOVW" in ins and ", R0" in ins and "$" in ins,
            ", R0",
        )

    def resolve_implicit_id(self, window: InstructionWindow, position: int) -> int:
        # "), R7" is a load from memory such as MOVW 0x2c(R15), R7
        return _find_immediate(
            window,
            position,
            lambda ins: ", R7" in ins and ")," not in ins,
            ", R7",
        )


STRATEGIES: Dict[Arch, Type[ArchStrategy]] = {
    Arch.X86_64: X86_64Strategy,
    Arch.X86: X86Strategy,
    Arch.ARM: ARMStrategy,
}


def get_strategy(arch: Arch | str) -> ArchStrategy:
    try:
        return STRATEGIES[Arch(arch)]()
    except (KeyError, ValueError):
        raise UnsupportedArchitectureError(f"{arch} is not supported") from None
