"""Seed Decomposition: composite parameters on top of the pairwise core.

Composite parameters (permutations, sub-lists, records) ask for indices
through ``CombiningSeeds.next(bound)`` instead of picking directly. Large
bounds are factored into smaller, separately picked seeds once the
parameter's combine budget runs low, so huge domains degrade from full
pairwise combination into independent sub-picks instead of ballooning the
number of repetitions.

Example:
    >>> seeds = CombiningSeeds.combined(session, "permutation", 5)
    >>> first = seeds.next(5)
    >>> second = seeds.next(4)
"""

from __future__ import annotations

import logging
from collections.abc import Hashable
from enum import Enum
from typing import TYPE_CHECKING, NamedTuple

from lazypick.errors import ErrorCode, PickUsageError

if TYPE_CHECKING:
    from lazypick.core.session import PickSession
    from lazypick.pockets import CartesianPocket

logger = logging.getLogger(__name__)

# Initial pairwise countdown of a combined launch is this plus the value count
PAIRWISE_CAP_BASE = 12
# Initial slice budget of a combined launch is this plus twice the value count
POCKET_SLICE_BASE = 10

_UNBOUNDED = 2**31 - 1


class SeedMode(Enum):
    """How a seed decomposition hands its picks to the engine."""

    PLAIN = "plain"
    PAIRWISE = "pairwise"
    POCKETED = "pocketed"


class TrailingSeedId(NamedTuple):
    """Parameter id of the second and later seeds of a composite parameter."""

    ordinal: int
    base_id: Hashable


class CombiningSeeds:
    """Stateful seed source for one composite parameter pick.

    Attributes:
        session: Session the core picks are made on.
        base_id: Identity of the composite parameter.
        mode: Current SeedMode; POCKETED falls back to PAIRWISE once the
            pocket's slice budget is used up.
        pairwise_countdown: Remaining budget of pairwise-combined values.
        slice_budget: Remaining budget of the pocket sub-domain.
        pocket: Live cartesian pocket, if any.
        seed_count: Number of core seeds consumed so far.
    """

    def __init__(
        self,
        session: PickSession,
        base_id: Hashable,
        mode: SeedMode,
        pairwise_countdown: int,
        slice_budget: int,
        pocket: CartesianPocket | None = None,
    ) -> None:
        if mode is SeedMode.POCKETED and pocket is None:
            raise ValueError("POCKETED seeds require a pocket")
        self.session = session
        self.base_id = base_id
        self.mode = mode
        self.pairwise_countdown = pairwise_countdown
        self.slice_budget = slice_budget
        self.pocket = pocket
        self.seed_count = 0

    @classmethod
    def uncombined(cls, session: PickSession, base_id: Hashable, value_count: int) -> CombiningSeeds:
        """Seeds for an uncombined composite of ``value_count`` values.

        A small slice budget still allows some pairwise combining, for a
        better distribution on list-like composites.
        """
        return cls(session, base_id, SeedMode.PLAIN, 0, value_count - 1)

    @classmethod
    def combined(
        cls,
        session: PickSession,
        base_id: Hashable,
        value_count: int,
        pocket: CartesianPocket | None = None,
    ) -> CombiningSeeds:
        """Seeds for a combined composite, optionally fully combined on ``pocket``."""
        return cls(
            session,
            base_id,
            SeedMode.POCKETED if pocket is not None else SeedMode.PAIRWISE,
            PAIRWISE_CAP_BASE + value_count,
            POCKET_SLICE_BASE + 2 * value_count,
            pocket,
        )

    def next(self, bound: int) -> int:
        """Return an index in ``range(bound)``.

        Raises:
            PickUsageError: ``bound`` is not positive.
        """
        if bound <= 0:
            raise PickUsageError(
                f"Seed bound must be a positive int - but was {bound}",
                error_code=ErrorCode.INVALID_SEED_BOUND,
                bound=bound,
            )

        factor = self._separate_factor(bound)
        if factor is not None:
            return self.next(factor) + factor * self.next(bound // factor)

        self.pairwise_countdown -= bound
        if self.pairwise_countdown < 0 and bound == 1:
            # Trivial seed that is not combined
            return 0

        self.seed_count += 1
        seed_id = self.base_id if self.seed_count == 1 else TrailingSeedId(self.seed_count, self.base_id)

        self.slice_budget //= bound
        if self.mode is SeedMode.POCKETED:
            if self.slice_budget >= 1:
                return self.pocket.pick(self.session, seed_id, bound)
            logger.debug(f"Pocket budget of {self.base_id!r} exhausted, falling back to pairwise")
            self.mode = SeedMode.PAIRWISE
            self.pocket = None

        return self.session.pick(
            seed_id,
            self.pairwise_countdown >= 0 or self.slice_budget >= 1,
            bound,
        )

    def _separate_factor(self, bound: int) -> int | None:
        """Find a factor of ``bound`` that should be picked separately.

        Factors are first searched up to the active budget (slice budget
        while a pocket is live, else the pairwise countdown) and then up to
        the pairwise countdown.
        """
        limit = self.slice_budget if self.mode is SeedMode.POCKETED else self.pairwise_countdown
        while limit < bound:
            for factor in range(limit, 1, -1):
                if bound % factor == 0:
                    return factor
            limit = self.pairwise_countdown if limit < self.pairwise_countdown else _UNBOUNDED
        return None

    def __repr__(self) -> str:
        return (
            f"CombiningSeeds({self.base_id!r}, mode={self.mode.value}, "
            f"countdown={self.pairwise_countdown}, slice={self.slice_budget})"
        )
