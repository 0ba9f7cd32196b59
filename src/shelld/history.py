# shelld — Line-Editing Command Shell Server
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Fixed-capacity recall history for a shell session.

Lines are written into a ring of slots, overwriting the oldest slot once
the ring is full. Browsing walks the ring backwards from the top slot and
wraps around, so empty slots are visited too. Browsing down does not
walk forward; it returns to a fresh line.
"""

from __future__ import annotations


class HistoryRing:
    """Circular store of submitted lines plus a browse cursor."""

    def __init__(self, length: int, line_capacity: int) -> None:
        if length < 1:
            raise ValueError(f"history length must be >= 1, got {length}")
        self.length = length
        # A slot holds at most line_capacity - 1 bytes, like the input buffer
        self.line_capacity = line_capacity
        self.slots: list[bytes] = [b""] * length
        self.write_index = 0
        self.browse_index = -1

    def record(self, line: bytes) -> None:
        """Store a non-empty line in the next slot."""
        if not line:
            return
        self.slots[self.write_index] = bytes(line[: self.line_capacity - 1])
        self.write_index = (self.write_index + 1) % self.length

    def up(self) -> bytes | None:
        """Step the browse cursor back one slot.

        Returns:
            The slot content, or None when the slot is empty.
        """
        self.browse_index -= 1
        if self.browse_index < 0:
            self.browse_index = self.length - 1
        line = self.slots[self.browse_index]
        return line or None

    def down(self) -> None:
        """Stop browsing. The caller clears the live line."""
        self.browse_index = -1

    def __len__(self) -> int:
        return sum(1 for slot in self.slots if slot)
