"""Session Sequencer: one multi-repetition pairwise session.

A session is driven as a sequence of runs:

    >>> session = PickSession()
    >>> while True:
    ...     session.start_new_run()
    ...     a = session.pick("a", True, 2)
    ...     b = session.pick("b", True, 3)
    ...     if not session.has_pending_combinations():
    ...         break

Each run is a transaction without an explicit commit: ``pick`` applies
its effects immediately and ``has_pending_combinations`` tells the caller
whether another run is needed.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Hashable
from typing import Any, TypeVar

from lazypick.core.ledger import ParameterDefinition, ValueInformation, ValueLedger
from lazypick.core.registry import ParameterRegistry
from lazypick.core.scoring import ValueScorer
from lazypick.core.trail import CrumbTrail
from lazypick.errors import ErrorCode, ErrorContext, PickUsageError

logger = logging.getLogger(__name__)

MAX_VALUE_COUNT = 65480

T = TypeVar("T")


class PickSession:
    """Lazy pairwise combiner for the repetitions of one logical test.

    Attributes:
        ledger: Arena of all value options seen in this session.
        registry: Parameter definitions and crumb reservations.
        trail: Picks of the current run.
        run_count: Number of runs started so far.
    """

    def __init__(self) -> None:
        self.ledger = ValueLedger()
        self.registry = ParameterRegistry(self.ledger)
        self.trail = CrumbTrail()
        self.scorer = ValueScorer(self.trail)
        self.run_count = 0
        self._scoped_items: dict[Hashable, Any] = {}
        self._lock = threading.RLock()

    def start_new_run(self) -> None:
        """Close out the previous run and clear per-run state.

        Must be called before every run, including the first.
        """
        with self._lock:
            self._register_end_of_line()
            self.trail.reset()
            self._scoped_items.clear()
            self.run_count += 1

    def pick(self, parameter_id: Hashable, combine: bool, value_count: int) -> int:
        """Choose a value index for a parameter.

        Args:
            parameter_id: Hashable token that identifies the parameter on
                every run.
            combine: True to pairwise-combine the values with other
                combined parameters, False to only try each value once.
            value_count: Number of possible values, 1 to MAX_VALUE_COUNT.

        Returns:
            The chosen index in ``range(value_count)``.

        Raises:
            PickUsageError: Invalid arguments; nothing was recorded.
            InconsistentRepetitionError: An earlier run introduced a
                different parameter after the same picks.
        """
        self._validate(parameter_id, value_count)
        with self._lock:
            definition = ParameterDefinition(parameter_id, bool(combine), value_count)
            crumbs = self.trail.key
            options = self.registry.resolve(definition)
            if options is None:
                self.registry.check_reservation(crumbs, definition)
                options = self.registry.register(definition, crumbs)
            else:
                definition = options[0].definition
                already_picked = self.trail.find(definition)
                if already_picked is not None:
                    return already_picked.index
            self.registry.reserve(crumbs, definition)

            picked = self.scorer.choose(options)
            self.scorer.register_pick(picked)
            return picked.index

    def has_pending_combinations(self) -> bool:
        """Check whether another run is needed.

        Returns:
            True while some combined value has unmet forward requests or
            some value has never been picked.

        Raises:
            InconsistentRepetitionError: The current run ended at a crumb
                key after which an earlier run introduced a parameter.
        """
        with self._lock:
            self.registry.check_reservation(self.trail.key, None)
            return self.registry.has_pending_values()

    def scoped_item(self, key: Hashable, factory: Callable[[], T]) -> T:
        """Get a per-run item, creating it with ``factory`` on first access.

        Items are dropped by ``start_new_run``.
        """
        with self._lock:
            item = self._scoped_items.get(key)
            if item is None:
                item = factory()
                self._scoped_items[key] = item
            return item

    @property
    def run_picks(self) -> list[tuple[Hashable, int]]:
        """Picks of the current run as ``(parameter_id, index)`` pairs."""
        return [(info.definition.parameter_id, info.index) for info in self.trail]

    def options_of(self, parameter_id: Hashable, combine: bool, value_count: int) -> list[ValueInformation]:
        """Ledger entries of a registered parameter (empty if unknown)."""
        options = self.registry.resolve(ParameterDefinition(parameter_id, bool(combine), value_count))
        return list(options or [])

    def _validate(self, parameter_id: Hashable, value_count: int) -> None:
        if parameter_id is None:
            raise PickUsageError(
                "Non-null parameter id required",
                error_code=ErrorCode.MISSING_PARAMETER_ID,
                context=ErrorContext(crumbs=self.trail.key, run_number=self.run_count),
            )
        if value_count <= 0:
            raise PickUsageError(
                "Parameter must have at least one possible value",
                context=ErrorContext(
                    parameter_id=parameter_id, crumbs=self.trail.key, run_number=self.run_count
                ),
                value_count=value_count,
            )
        if value_count > MAX_VALUE_COUNT:
            raise PickUsageError(
                f"At most {MAX_VALUE_COUNT} values are supported - but was {value_count}",
                context=ErrorContext(
                    parameter_id=parameter_id, crumbs=self.trail.key, run_number=self.run_count
                ),
                value_count=value_count,
            )

    def _register_end_of_line(self) -> None:
        """Mark the last crumb as a dead end and propagate up the trail.

        A dead end propagates one level up when every sibling option of the
        same parameter is either dead-ended at the same key or an already
        picked uncombined value that enables nothing. Unused siblings stop
        the propagation.
        """
        trail = self.trail
        while len(trail) >= 2:
            last = trail.pop()
            last.stats.end_of_line_keys.add(trail.key)
            logger.debug(f"End of line for {last.definition.parameter_id!r}={last.index} at {list(trail.key)}")
            if len(trail) <= 1:
                return
            if not self._siblings_exhausted(last, trail.key):
                return

    def _siblings_exhausted(self, info: ValueInformation, crumbs: tuple[int, ...]) -> bool:
        for peer in self.registry.resolve(info.definition) or ():
            if peer is info:
                continue
            peer_stats = peer.stats
            if peer_stats.total_count <= 0:
                return False
            elif not peer_stats.combined and peer_stats.enabler_count <= 0:
                continue
            elif crumbs not in peer_stats.end_of_line_keys:
                return False
        return True

    def __repr__(self) -> str:
        return (
            f"PickSession(runs={self.run_count}, parameters={len(self.registry)}, "
            f"values={len(self.ledger)})"
        )
