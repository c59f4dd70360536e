"""Scoring Algorithm: decides which value option best advances coverage.

Candidates are compared pairwise against the best option found so far,
walking the options from the last index down to the primary value. Each
rule only breaks ties left by the previous one:

1. Dead-end avoidance: an option whose end-of-line keys contain the
   current crumb key only wins when nothing else was seen yet.
2. First touch: never-picked options win, unless primary-value parking
   keeps the primary value in place a little longer.
3. Forward requests: the option with more pending forward requests wins,
   since picking it lets those combos be satisfied downstream.
4. Level-0 coverage score.
5. Weighted enabler count, then raw enabler count.
6. Higher-level scores (level >= 1).
7. Lower total count.

Evaluating a combined candidate also registers the combos it could form
with the crumb trail as pending, so the bookkeeping grows as the session
discovers which values meet each other.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from lazypick.core.counters import CounterSet
from lazypick.core.ledger import SCORE_BUDGET, LevelScores, ValueInformation, ValueStats
from lazypick.core.trail import CrumbTrail

logger = logging.getLogger(__name__)

# Parking only applies to the first few picks of a primary value
PARKING_MAX_TOTAL_COUNT = 10
# Parking is only considered against unpicked options with a low index
PARKING_MAX_RIVAL_INDEX = 10


def parking_lookback(lookback_seed: int, parked_so_far: int) -> int:
    """Number of combined crumbs to look back before parking a primary value.

    Empirically tuned; the intent is to delay full diversification of
    high-cardinality parameters until other parameters have diversified.
    """
    return lookback_seed - lookback_seed // 5 + parked_so_far // (lookback_seed - 1)


class ValueScorer:
    """Chooses value options and applies pick side effects for one session.

    Attributes:
        trail: The session's crumb trail, read for every comparison.
    """

    def __init__(self, trail: CrumbTrail) -> None:
        self.trail = trail

    def choose(self, options: Sequence[ValueInformation]) -> ValueInformation:
        """Pick the best option, evaluating from last index to primary value."""
        best: ValueInformation | None = None
        for info in reversed(options):
            if self.is_better_than(info, best):
                best = info
        assert best is not None
        return best

    def is_better_than(self, candidate: ValueInformation, best: ValueInformation | None) -> bool:
        trail = self.trail
        stats = candidate.stats
        if trail.values and trail.key in stats.end_of_line_keys:
            return best is None

        stats.level_scores.clear()
        if stats.combined:
            self._register_pending_combos(stats)
        elif stats.total_count <= 0:
            enablers = stats.pending_combos[None]
            for enabler in trail.values:
                if enablers.add_member(enabler):
                    enabler.stats.enabler_count += 1

        if (
            best is None
            or stats.total_count == 0
            or (
                best.stats.total_count == 0
                and best.index < PARKING_MAX_RIVAL_INDEX
                and self.is_parked_on_primary(stats)
            )
            or trail.key in best.stats.end_of_line_keys
        ):
            return True

        best_stats = best.stats
        if best_stats.total_count == 0 or stats.forward_request_count < best_stats.forward_request_count:
            return False
        elif best_stats.forward_request_count < stats.forward_request_count:
            return True

        levels = self.evaluate_levels(stats)
        best_levels = self.evaluate_levels(best_stats)
        if levels:
            level0_diff = levels.level(0) - best_levels.level(0)
            if level0_diff != 0:
                return level0_diff > 0

        weighted = stats.weighted_enabler_count()
        best_weighted = best_stats.weighted_enabler_count()
        if weighted != best_weighted:
            return best_weighted < weighted
        if stats.enabler_count != best_stats.enabler_count:
            return best_stats.enabler_count < stats.enabler_count

        for level in range(1, len(levels)):
            diff = levels.level(level) - best_levels.level(level)
            if diff != 0:
                return diff > 0

        # Total count is the final tie breaker
        return stats.total_count <= best_stats.total_count

    def _register_pending_combos(self, stats: ValueStats) -> None:
        """Walk the crumbs for upstream combined values not yet met by ``stats``."""
        crumbs = self.trail.values
        for upstream in crumbs:
            if not upstream.stats.combined or stats.satisfied_combo_counts.get(upstream) != 0:
                continue
            enablers = stats.pending_combos.get(upstream)
            if enablers is None:
                enablers = CounterSet(stats.satisfied_combo_counts.ledger)
                stats.pending_combos[upstream] = enablers
                upstream.stats.forward_request_count += 1
            for enabler in crumbs:
                if enabler is not upstream and enablers.add_member(enabler):
                    enabler.stats.enabler_count += 1
                    stats.combo_enabler_counts.increase(enabler)

    def evaluate_levels(self, stats: ValueStats) -> LevelScores:
        """Compute (once per evaluation) the level scores of ``stats``.

        Each crumb value contributes an equal share of SCORE_BUDGET, minus
        its forward score, to the level given by how often it has already
        preceded ``stats``. Level 0 therefore rewards meeting new upstream
        values; it is then reduced for combos already pending on ``stats``
        and for enablers that no longer have pending combos of their own.
        """
        levels = stats.level_scores
        crumbs = self.trail.values
        if crumbs and not levels:
            crumb_share = SCORE_BUDGET // len(crumbs)
            for upstream in crumbs:
                level = stats.satisfied_combo_counts.get(upstream)
                if level == 0 and not upstream.stats.combined:
                    level = 1
                levels.bump(level, crumb_share - upstream.stats.forward_score())
            level0 = levels.level(0)
            if level0 > 0:
                level0 -= crumb_share // (1 + len(stats.pending_combos))
                for enabler in stats.combo_enabler_counts:
                    level0 -= enabler.stats.forward_score()
                levels[0] = level0
        return levels

    def is_parked_on_primary(self, stats: ValueStats) -> bool:
        """Check whether a primary value should stand in for another run.

        Looks back over the most recent combined crumbs. Parking is granted
        when the lookback countdown runs out on values that have been picked
        at most once; a twice-picked combined value in the window means the
        window is already used up.
        """
        if stats.lookback_seed <= stats.total_count or stats.total_count >= PARKING_MAX_TOTAL_COUNT:
            return False

        trail = self.trail
        countdown = parking_lookback(stats.lookback_seed, trail.parked_primary_count)
        position = len(trail.values)
        while countdown <= position:
            position -= 1
            lookback = trail.values[position].stats
            if not lookback.combined or lookback.lookback_seed == 1:
                continue
            elif lookback.total_count >= 2:
                return False
            countdown -= 1
            if countdown == 0:
                trail.parked_primary_count += 1
                return True
        return False

    def register_pick(self, info: ValueInformation) -> None:
        """Apply the side effects of picking ``info`` and append it to the trail."""
        stats = info.stats
        stats.total_count += 1
        if stats.total_count == 1 and not stats.combined:
            for enabler in stats.pending_combos.pop(None):
                enabler.stats.enabler_count -= 1

        for upstream in self.trail.values:
            if stats.satisfied_combo_counts.increase(upstream) == 1 and not upstream.stats.combined:
                # Uncombined crumbs default to level 1, so a real increase ends at 2
                stats.satisfied_combo_counts.increase(upstream)
            enablers = stats.pending_combos.pop(upstream, None)
            if enablers is not None:
                upstream.stats.forward_request_count -= 1
                stats.combo_enabler_counts.add(upstream, SCORE_BUDGET)
                for retired in enablers:
                    stats.combo_enabler_counts.decrease(retired)
                    retired.stats.enabler_count -= 1

        self.trail.append(info)
        logger.debug(
            f"Picked {info.definition.parameter_id!r}={info.index} "
            f"at depth {len(self.trail)} (total {stats.total_count})"
        )
