"""Post-hoc coverage measurement of recorded runs.

Checks what a session actually achieved: every value pair of every two
combined parameters that always appeared together, and every single value
of uncombined parameters.

Example:
    >>> result = RepetitionRunner().run(test_checkout)
    >>> stats = measure_coverage(result.runs, combined={"method": 3, "express": 2})
    >>> print(stats)
    CoverageStats(t=2, 6/6 tuples covered (100.0%), 4 tests)
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Hashable, Iterable, Mapping
from dataclasses import dataclass, field

from lazypick.runner import RunRecord

logger = logging.getLogger(__name__)

ValueTuple = tuple[tuple[Hashable, int], ...]


@dataclass
class CoverageStats:
    """Statistics about how well the recorded runs cover the parameter values.

    Attributes:
        strength: 2 when value pairs were measured, else 1.
        total_tuples: Total number of value tuples that should be covered.
        covered_tuples: Number of those tuples seen in some run.
        coverage_pct: Percentage coverage (0-100).
        test_count: Number of runs measured.
        missing: Uncovered tuples of ``(parameter_id, index)`` pairs.
    """

    strength: int
    total_tuples: int
    covered_tuples: int
    coverage_pct: float
    test_count: int
    missing: list[ValueTuple] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return self.covered_tuples == self.total_tuples

    def __repr__(self) -> str:
        return (
            f"CoverageStats(t={self.strength}, "
            f"{self.covered_tuples}/{self.total_tuples} tuples covered "
            f"({self.coverage_pct:.1f}%), "
            f"{self.test_count} tests)"
        )


def measure_coverage(
    runs: Iterable[RunRecord],
    combined: Mapping[Hashable, int] | None = None,
    uncombined: Mapping[Hashable, int] | None = None,
) -> CoverageStats:
    """Measure the coverage achieved by a sequence of runs.

    A pair of combined parameters is measured only if the two were
    introduced together in every run where either of them appeared; a
    combined parameter without any such partner is measured value by
    value, like an uncombined one.

    Args:
        runs: Run records, typically ``RepetitionResult.runs``.
        combined: Value count per combined parameter id.
        uncombined: Value count per uncombined parameter id.

    Returns:
        CoverageStats for the measured tuples.
    """
    combined = dict(combined or {})
    uncombined = dict(uncombined or {})
    picks_per_run = [dict(run.picks) for run in runs]

    required: list[ValueTuple] = []
    paired: set[Hashable] = set()
    for a, b in itertools.combinations(combined, 2):
        if not _always_together(picks_per_run, a, b):
            logger.debug(f"Skipping pair {a!r}/{b!r}: not introduced together in every run")
            continue
        paired.update((a, b))
        for i in range(combined[a]):
            for j in range(combined[b]):
                required.append(((a, i), (b, j)))

    singles = {pid: count for pid, count in combined.items() if pid not in paired}
    singles.update(uncombined)
    for pid, count in singles.items():
        required.extend(((pid, i),) for i in range(count))

    seen: set[ValueTuple] = set()
    for picks in picks_per_run:
        items = list(picks.items())
        seen.update(((pid, index),) for pid, index in items)
        for first, second in itertools.combinations(items, 2):
            seen.add((first, second))
            seen.add((second, first))

    missing = [t for t in required if t not in seen]
    total = len(required)
    covered = total - len(missing)
    pct = (covered / total * 100) if total > 0 else 100.0

    return CoverageStats(
        strength=2 if paired else 1,
        total_tuples=total,
        covered_tuples=covered,
        coverage_pct=pct,
        test_count=len(picks_per_run),
        missing=missing,
    )


def _always_together(picks_per_run: list[dict[Hashable, int]], a: Hashable, b: Hashable) -> bool:
    appeared = False
    for picks in picks_per_run:
        has_a = a in picks
        if has_a != (b in picks):
            return False
        appeared = appeared or has_a
    return appeared
