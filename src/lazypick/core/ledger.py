"""Value Ledger: parameter definitions and per-value coverage statistics.

The ledger is an append-only arena. Each ParameterDefinition owns one
ValueInformation per possible index, and every ValueInformation gets a
dense slot id used by CounterSet. Entries live for the whole
multi-repetition session; nothing is ever removed.

Example:
    >>> ledger = ValueLedger()
    >>> options = ledger.create_options(ParameterDefinition("auth", True, 3))
    >>> [info.index for info in options]
    [0, 1, 2]
"""

from __future__ import annotations

from collections.abc import Hashable, Iterator
from dataclasses import dataclass, field

from lazypick.core.counters import CounterSet

# Scale of the level-0 score budget that is shared across the crumb trail.
SCORE_BUDGET = 2**31 - 1


@dataclass(frozen=True)
class ParameterDefinition:
    """Identity of a lazily introduced parameter.

    Two picks refer to the same parameter only if all three fields are
    equal, so a parameter whose value count or combine mode changes
    between repetitions is a different parameter.

    Attributes:
        parameter_id: Caller-supplied hashable token.
        combined: Whether values are pairwise-combined with other
            combined parameters.
        value_count: Number of possible value indices.
    """

    parameter_id: Hashable
    combined: bool
    value_count: int

    def __repr__(self) -> str:
        mode = "combined" if self.combined else "uncombined"
        return f"ParameterDefinition({self.parameter_id!r}, {mode}, {self.value_count})"


class LevelScores(list):
    """List of per-level scores that grows with zeros on access."""

    def level(self, index: int) -> int:
        if len(self) <= index:
            self.extend([0] * (index + 1 - len(self)))
        return self[index]

    def bump(self, index: int, delta: int) -> None:
        self[index] = self.level(index) + delta


class ValueStats:
    """Mutable coverage statistics of one value option.

    Attributes:
        combined: Copied from the owning parameter definition.
        lookback_seed: Value count of the owning parameter when this is
            the primary value of a combined parameter, otherwise 0. Drives
            primary-value parking.
        total_count: Number of runs in which this value has been picked.
        forward_request_count: Number of downstream values that still wait
            for a run combining them with this value.
        enabler_count: Number of pending combos this value could help
            satisfy by being on the crumb trail.
        pending_combos: Per unsatisfied upstream value, the crumb values that
            were seen as enablers of that combo. An uncombined value keeps
            its first-touch enablers under the ``None`` key until picked.
        combo_enabler_counts: Enabler occurrences in ``pending_combos``. Counts
            start at ``-SCORE_BUDGET`` and are lifted by ``SCORE_BUDGET`` when
            the entry's own combo gets satisfied, so iteration yields the
            enablers that are no longer pending combos themselves.
        satisfied_combo_counts: How often each crumb value has preceded this
            value. Uncombined crumb values jump straight to 2.
        level_scores: Transient scores, reset whenever this value is
            evaluated as a candidate.
        end_of_line_keys: Crumb keys after which picking this value can no
            longer lead to new coverage.
    """

    __slots__ = (
        "combined",
        "lookback_seed",
        "total_count",
        "forward_request_count",
        "enabler_count",
        "pending_combos",
        "combo_enabler_counts",
        "satisfied_combo_counts",
        "level_scores",
        "end_of_line_keys",
    )

    def __init__(self, ledger: ValueLedger, combined: bool, lookback_seed: int) -> None:
        self.combined = combined
        self.lookback_seed = lookback_seed
        self.total_count = 0
        self.forward_request_count = 0
        self.enabler_count = 0
        self.pending_combos: dict[ValueInformation | None, CounterSet] = {}
        if not combined:
            self.pending_combos[None] = CounterSet(ledger)
        self.combo_enabler_counts = CounterSet(ledger, -SCORE_BUDGET)
        self.satisfied_combo_counts = CounterSet(ledger)
        self.level_scores = LevelScores()
        self.end_of_line_keys: set[tuple[int, ...]] = set()

    def forward_score(self) -> int:
        """Weighted combination of forward requests and enabler count."""
        return (1 + self.forward_request_count) * (2 + self.enabler_count)

    def weighted_enabler_count(self) -> float:
        """Enabler count, halved per pick for uncombined values."""
        if self.combined:
            return self.enabler_count
        return (1 + self.enabler_count) * 0.5**self.total_count

    def __repr__(self) -> str:
        return (
            f"ValueStats(total={self.total_count}, "
            f"forward={self.forward_request_count}, "
            f"enablers={self.enabler_count})"
        )


@dataclass(eq=False)
class ValueInformation:
    """One value option of a parameter, identified by its arena slot."""

    definition: ParameterDefinition
    index: int
    slot_id: int
    stats: ValueStats = field(repr=False)

    @property
    def combined(self) -> bool:
        return self.definition.combined


class ValueLedger:
    """Append-only arena of every ValueInformation created in a session."""

    def __init__(self) -> None:
        self.entries: list[ValueInformation] = []

    def create_options(self, definition: ParameterDefinition) -> list[ValueInformation]:
        """Append one entry per value index of ``definition``."""
        options = []
        for index in range(definition.value_count):
            # The primary value of a combined parameter seeds the parking lookback
            lookback_seed = definition.value_count if definition.combined and index == 0 else 0
            info = ValueInformation(
                definition=definition,
                index=index,
                slot_id=len(self.entries),
                stats=ValueStats(self, definition.combined, lookback_seed),
            )
            self.entries.append(info)
            options.append(info)
        return options

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[ValueInformation]:
        return iter(self.entries)
