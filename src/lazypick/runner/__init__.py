"""Repetition driver for parametrized tests."""

from lazypick.runner.repetition import (
    ParametrizedTest,
    RepetitionResult,
    RepetitionRunner,
    RunRecord,
)

__all__ = [
    "ParametrizedTest",
    "RepetitionResult",
    "RepetitionRunner",
    "RunRecord",
]
