"""Crumb Trail: the values picked so far in the current run."""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lazypick.core.ledger import ParameterDefinition, ValueInformation


class CrumbTrail:
    """Ordered picks of the current run plus their compact key.

    The key is the tuple of picked value indices. It identifies a position
    in the run's decision tree and is used for consistency reservations and
    end-of-line bookkeeping.

    Attributes:
        values: Picked ValueInformation entries, oldest first.
        key: Tuple of the picked indices.
        parked_primary_count: How many primary-value parkings were granted
            in the current run.
    """

    __slots__ = ("values", "key", "parked_primary_count")

    def __init__(self) -> None:
        self.values: list[ValueInformation] = []
        self.key: tuple[int, ...] = ()
        self.parked_primary_count = 0

    def reset(self) -> None:
        self.values.clear()
        self.key = ()
        self.parked_primary_count = 0

    def append(self, info: ValueInformation) -> None:
        self.values.append(info)
        self.key = self.key + (info.index,)

    def pop(self) -> ValueInformation:
        """Remove the last value and shorten the key accordingly."""
        info = self.values.pop()
        self.key = self.key[:-1]
        return info

    def find(self, definition: ParameterDefinition) -> ValueInformation | None:
        """Return the value already picked for ``definition`` in this run."""
        for info in self.values:
            if info.definition is definition:
                return info
        return None

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> Iterator[ValueInformation]:
        return iter(self.values)

    def __repr__(self) -> str:
        return f"CrumbTrail({list(self.key)})"
