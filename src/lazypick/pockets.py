"""Cartesian pockets: groups of parameters that are fully cross-combined.

Parameters picked on the same CartesianPocket get all their value
combinations covered between themselves, while each fully combined record
is still pairwise-combined with the rest of the test's parameters.

Example:
    >>> pocket = CartesianPocket("payment")
    >>> session.start_new_run()
    >>> method = pocket.pick(session, "method", 3)
    >>> currency = pocket.pick(session, "currency", 4)
"""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass
from typing import TYPE_CHECKING, NamedTuple

if TYPE_CHECKING:
    from lazypick.core.session import PickSession


class PocketSeedId(NamedTuple):
    """Core parameter id of a pocket pick: earlier pocket picks plus the seed id."""

    previous_picks: tuple[int, ...]
    seed_id: Hashable


@dataclass(frozen=True)
class CartesianPocket:
    """A named hub on which parameter values are fully combined.

    Pockets compare equal by name, so a test may create its pocket anew on
    every run.
    """

    name: str | None = None

    def pick(self, session: PickSession, seed_id: Hashable, value_count: int) -> int:
        """Make a fully combined pick in ``range(value_count)``.

        The core pick is made under an id that includes the preliminary
        picks of the parameters picked earlier on this pocket in the same
        run, which is what makes the pocket a cartesian product. The result
        is offset by the sum of those picks so that later parameters do not
        sit on their primary value until the earlier ones are exhausted.
        """
        crumbs: dict[Hashable, int] = session.scoped_item(("cartesian-pocket", self), dict)

        previous: list[int] = []
        for key, preliminary in crumbs.items():
            if key == seed_id:
                # Already picked on this pocket in the current run
                return self._pick_with_offset(session, seed_id, previous, value_count)
            previous.append(preliminary)

        result = self._pick_with_offset(session, seed_id, previous, value_count)
        crumbs[seed_id] = previous[-1]
        return result

    def _pick_with_offset(
        self,
        session: PickSession,
        seed_id: Hashable,
        previous: list[int],
        value_count: int,
    ) -> int:
        offset = sum(previous)
        core_id = PocketSeedId(tuple(previous), seed_id)
        preliminary = session.pick(core_id, True, value_count)
        previous.append(preliminary)
        return (offset + preliminary) % value_count

    def __str__(self) -> str:
        return f"CartesianPocket: {self.name}" if self.name else "CartesianPocket"


GLOBAL_POCKET = CartesianPocket()
