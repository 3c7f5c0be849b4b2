from __future__ import annotations

from typing import List

# MOVs to 0(SP) have been seen up to 10 instructions ahead of the call
LOOKBACK_WINDOW_SIZE = 15


class InstructionWindow:
    """
    Fixed-capacity ring buffer of the most recently scanned instructions.

    Positions are absolute line indexes; the slot for a position is
    ``position % capacity``. Slots that were never written read as "".
    """

    def __init__(self, capacity: int = LOOKBACK_WINDOW_SIZE):
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.position = 0
        self._buffer: List[str] = [""] * capacity

    def append(self, instruction: str) -> int:
        """Store the instruction and return the position it was written at."""
        written_at = self.position
        self._buffer[written_at % self.capacity] = instruction
        self.position += 1
        return written_at

    def at(self, position: int) -> str:
        return self._buffer[position % self.capacity]

    def __len__(self) -> int:
        return min(self.position, self.capacity)

    def __repr__(self):
        return f"InstructionWindow(capacity={self.capacity}, position={self.position})"
