"""Core pairwise decision engine.

Modules:
    counters: CounterSet
    ledger: ParameterDefinition, ValueInformation, ValueStats, ValueLedger
    trail: CrumbTrail
    registry: ParameterRegistry, IntroductionRecord
    scoring: ValueScorer
    session: PickSession
"""

from lazypick.core.counters import CounterSet
from lazypick.core.ledger import (
    SCORE_BUDGET,
    ParameterDefinition,
    ValueInformation,
    ValueLedger,
    ValueStats,
)
from lazypick.core.registry import IntroductionRecord, ParameterRegistry
from lazypick.core.scoring import ValueScorer, parking_lookback
from lazypick.core.session import MAX_VALUE_COUNT, PickSession
from lazypick.core.trail import CrumbTrail

__all__ = [
    "CounterSet",
    "CrumbTrail",
    "IntroductionRecord",
    "MAX_VALUE_COUNT",
    "ParameterDefinition",
    "ParameterRegistry",
    "PickSession",
    "SCORE_BUDGET",
    "ValueInformation",
    "ValueLedger",
    "ValueScorer",
    "ValueStats",
    "parking_lookback",
]
