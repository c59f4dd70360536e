"""Dense integer-indexed counter set over ledger entries.

Every ValueInformation gets an arena slot id when it is created. A
CounterSet keeps one int per slot id instead of hashing entries, which
keeps the scoring loops fast on sessions with many parameters and values.

A CounterSet works both as a set (membership means a positive count)
and as a count map (``get``/``add``/``increase``/``decrease``). Iteration
yields the entries with a positive count, in arena order.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lazypick.core.ledger import ValueInformation, ValueLedger


class CounterSet:
    """Counts per ledger entry, backed by a list indexed by slot id.

    Attributes:
        ledger: The arena that resolves slot ids back to entries.
        initial_value: Count reported for entries never touched. Size and
            removal are only meaningful when this is 0.
    """

    __slots__ = ("ledger", "initial_value", "_counts", "_size")

    def __init__(self, ledger: ValueLedger, initial_value: int = 0) -> None:
        self.ledger = ledger
        self.initial_value = initial_value
        self._counts: list[int] = []
        self._size = 0

    def _grow(self) -> None:
        missing = len(self.ledger) - len(self._counts)
        if missing > 0:
            self._counts.extend([self.initial_value] * missing)

    def add(self, info: ValueInformation, delta: int = 1) -> int:
        """Add ``delta`` to the count of ``info`` and return the new count."""
        if len(self._counts) <= info.slot_id:
            self._grow()
        new_count = self._counts[info.slot_id] + delta
        self._counts[info.slot_id] = new_count
        if new_count == 1:
            self._size += 1
        return new_count

    def increase(self, info: ValueInformation) -> int:
        return self.add(info, 1)

    def decrease(self, info: ValueInformation) -> int:
        return self.add(info, -1)

    def get(self, info: ValueInformation) -> int:
        if len(self._counts) <= info.slot_id:
            return self.initial_value
        return self._counts[info.slot_id]

    def add_member(self, info: ValueInformation) -> bool:
        """Set-style add. Returns True if ``info`` was not a member before."""
        return self.add(info, 1) == 1

    def discard(self, info: ValueInformation) -> bool:
        """Drop ``info`` from the set. Returns True if it was a member."""
        if self.initial_value != 0:
            raise TypeError("Removal is only supported when counts start at 0")
        slot = info.slot_id
        if len(self._counts) <= slot or self._counts[slot] == 0:
            return False
        self._counts[slot] = 0
        self._size -= 1
        return True

    def __contains__(self, info: object) -> bool:
        slot = getattr(info, "slot_id", None)
        if slot is None or len(self._counts) <= slot:
            return False
        return self._counts[slot] > 0

    def __iter__(self) -> Iterator[ValueInformation]:
        counts = self._counts
        entries = self.ledger.entries
        for slot, count in enumerate(counts):
            if count > 0:
                yield entries[slot]

    def __bool__(self) -> bool:
        return any(count > 0 for count in self._counts)

    def __len__(self) -> int:
        if self.initial_value != 0:
            raise TypeError("Size is only supported when counts start at 0")
        return self._size

    def __repr__(self) -> str:
        return f"CounterSet(size={self._size}, initial_value={self.initial_value})"
