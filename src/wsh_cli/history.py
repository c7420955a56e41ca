# wsh - Line-Oriented Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Bounded command history.

History is a fixed-capacity ring buffer:
- ``_slots`` holds ``capacity`` physical slots
- ``_start`` is the physical index of the oldest retained entry
- ``_count`` is the number of live entries

Logical position 1 is the most recent entry, ``len(history)`` the oldest.
An entry equal to the most recent one is dropped instead of stored.
"""

from __future__ import annotations

DEFAULT_HISTORY_SIZE = 5


class History:
    """Fixed-capacity ring buffer of command lines."""

    def __init__(self, capacity: int = DEFAULT_HISTORY_SIZE) -> None:
        if capacity <= 0:
            raise ValueError(f"invalid history size: {capacity}")
        self._slots: list[str | None] = [None] * capacity
        self._start = 0
        self._count = 0

    @property
    def capacity(self) -> int:
        return len(self._slots)

    def __len__(self) -> int:
        return self._count

    def _physical(self, offset: int) -> int:
        """Physical slot of the entry ``offset`` places after the oldest."""
        return (self._start + offset) % self.capacity

    def add(self, command: str) -> bool:
        """Append a command line.

        Returns:
            False if the line repeats the most recent entry and was dropped
        """
        if self._count > 0:
            last = self._slots[self._physical(self._count - 1)]
            if last == command:
                return False

        if self._count == self.capacity:
            # Overwrite the oldest entry in place and advance the start
            self._slots[self._start] = command
            self._start = self._physical(1)
        else:
            self._slots[self._physical(self._count)] = command
            self._count += 1
        return True

    def get(self, n: int) -> str:
        """Return entry ``n``, counting from the most recent as 1.

        Raises:
            IndexError: If ``n`` is outside ``[1, len(self)]``
        """
        if n < 1 or n > self._count:
            raise IndexError(n)
        entry = self._slots[self._physical(self._count - n)]
        assert entry is not None
        return entry

    def newest_first(self) -> list[str]:
        return [self.get(n) for n in range(1, self._count + 1)]

    def oldest_first(self) -> list[str]:
        return list(reversed(self.newest_first()))

    def resize(self, capacity: int) -> None:
        """Change capacity, keeping the most recent entries.

        Surviving entries are laid out from physical slot 0, oldest first.

        Raises:
            ValueError: If ``capacity`` is not positive
        """
        if capacity <= 0:
            raise ValueError(f"invalid history size: {capacity}")

        keep = min(self._count, capacity)
        kept = self.oldest_first()[self._count - keep:]

        self._slots = [None] * capacity
        self._slots[:keep] = kept
        self._start = 0
        self._count = keep

    def clear(self) -> None:
        self._slots = [None] * self.capacity
        self._start = 0
        self._count = 0
