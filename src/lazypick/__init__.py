"""lazypick - Lazy pairwise combinations for repeated test runs.

A parametrized test asks a session for value indices while it runs. The
session picks values so that, over as few repetitions as it can manage,
every pair of values of two combined parameters shows up in some run.

Quick Start:
    from lazypick import PickSession

    session = PickSession()
    while True:
        session.start_new_run()
        method = ["card", "invoice", "voucher"][session.pick("method", True, 3)]
        express = session.pick("express", True, 2) == 1
        run_checkout(method, express)
        if not session.has_pending_combinations():
            break

Or let a RepetitionRunner drive the loop:
    result = RepetitionRunner().run(lambda session: ...)
"""

from __future__ import annotations

from lazypick.config import PickConfig, load_config
from lazypick.core import MAX_VALUE_COUNT, PickSession
from lazypick.coverage import CoverageStats, measure_coverage
from lazypick.errors import (
    ConfigValidationError,
    ErrorCode,
    ErrorContext,
    InconsistentRepetitionError,
    LazyPickError,
    MaxRepetitionError,
    PickUsageError,
)
from lazypick.pockets import GLOBAL_POCKET, CartesianPocket
from lazypick.runner import RepetitionResult, RepetitionRunner, RunRecord
from lazypick.seeds import CombiningSeeds, SeedMode, TrailingSeedId

__version__ = "0.1.0"

__all__ = [
    # Session
    "PickSession",
    "MAX_VALUE_COUNT",
    # Composite parameters
    "CombiningSeeds",
    "SeedMode",
    "TrailingSeedId",
    "CartesianPocket",
    "GLOBAL_POCKET",
    # Repetition
    "RepetitionRunner",
    "RepetitionResult",
    "RunRecord",
    "CoverageStats",
    "measure_coverage",
    # Configuration
    "PickConfig",
    "load_config",
    # Errors
    "LazyPickError",
    "ErrorCode",
    "ErrorContext",
    "PickUsageError",
    "InconsistentRepetitionError",
    "MaxRepetitionError",
    "ConfigValidationError",
]
