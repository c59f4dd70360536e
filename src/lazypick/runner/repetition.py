"""Repetition driver that runs a parametrized test until coverage is reached.

The runner owns the session loop: it starts every run, calls the test with
the session, records what was picked and asks the session whether another
run is needed.

Example:
    >>> def test_checkout(session):
    ...     method = ["card", "invoice", "voucher"][session.pick("method", True, 3)]
    ...     express = session.pick("express", True, 2) == 1
    ...     assert checkout(method, express).ok
    >>> result = RepetitionRunner(PickConfig()).run(test_checkout)
    >>> print(f"{result.total_runs} runs, {result.failed_runs} failed")
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from lazypick.config import PickConfig
from lazypick.core.session import PickSession
from lazypick.errors import (
    ErrorCode,
    ErrorContext,
    InconsistentRepetitionError,
    MaxRepetitionError,
    PickUsageError,
)

logger = logging.getLogger(__name__)

ParametrizedTest = Callable[[PickSession], Any]


class RunRecord(BaseModel):
    """Outcome of one run of a parametrized test.

    Attributes:
        run_number: 1-based number of the run within its session.
        picks: ``(parameter_id, index)`` pairs in introduction order.
        success: Whether the test returned without raising.
        error: Exception type and message if the run failed.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        extra="forbid",
    )

    run_number: int = Field(..., ge=1, description="Run number within the session")
    picks: list[tuple[Any, int]] = Field(default_factory=list, description="Picks of the run")
    success: bool = Field(..., description="Whether the run passed")
    error: str | None = Field(default=None, description="Error text if failed")

    def value_of(self, parameter_id: Any) -> int | None:
        """Index picked for ``parameter_id`` in this run, if it was introduced."""
        for picked_id, index in self.picks:
            if picked_id == parameter_id:
                return index
        return None


class RepetitionResult(BaseModel):
    """Result of all runs of one parametrized test.

    Attributes:
        runs: One record per run, in execution order.
        completed: True when no combinations were pending after the last run.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        extra="forbid",
    )

    runs: list[RunRecord] = Field(default_factory=list, description="Run records")
    completed: bool = Field(default=False, description="Whether all combinations were covered")

    @property
    def total_runs(self) -> int:
        """Number of runs executed."""
        return len(self.runs)

    @property
    def passed_runs(self) -> int:
        """Number of passed runs."""
        return sum(1 for r in self.runs if r.success)

    @property
    def failed_runs(self) -> int:
        """Number of failed runs."""
        return sum(1 for r in self.runs if not r.success)

    @property
    def all_passed(self) -> bool:
        """Whether every run passed."""
        return all(r.success for r in self.runs)

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary for serialization."""
        return {
            "completed": self.completed,
            "total_runs": self.total_runs,
            "passed_runs": self.passed_runs,
            "failed_runs": self.failed_runs,
            "runs": [
                {
                    "run_number": r.run_number,
                    "picks": [[str(pid), index] for pid, index in r.picks],
                    "success": r.success,
                    "error": r.error,
                }
                for r in self.runs
            ],
        }


class RepetitionRunner:
    """Repeats a parametrized test until all pairwise combinations are covered."""

    def __init__(self, config: PickConfig | None = None, session: PickSession | None = None) -> None:
        self.config = config or PickConfig()
        self.session = session or PickSession()

    def run(self, test: ParametrizedTest) -> RepetitionResult:
        """Run ``test`` repeatedly on this runner's session.

        Args:
            test: Callable that takes the session and makes its picks on it.

        Returns:
            RepetitionResult with one record per run.

        Raises:
            InconsistentRepetitionError: The test did not introduce its
                parameters consistently across runs.
            PickUsageError: The test made an invalid pick.
            MaxRepetitionError: max_failure_count or max_total_count was
                reached while combinations were still pending.
        """
        result = RepetitionResult()
        session = self.session

        while True:
            session.start_new_run()
            run_number = len(result.runs) + 1
            record = self._execute(test, run_number)
            result.runs.append(record)

            try:
                pending = session.has_pending_combinations()
            except InconsistentRepetitionError as e:
                e.context.run_number = run_number
                raise

            if not pending:
                result.completed = True
                logger.info(
                    f"All combinations covered after {result.total_runs} run(s), "
                    f"{result.failed_runs} failed"
                )
                return result

            if not self.config.parametrization_enabled:
                logger.debug("Parametrization disabled, stopping after first run")
                return result

            self._check_limits(result)

    def _execute(self, test: ParametrizedTest, run_number: int) -> RunRecord:
        session = self.session
        try:
            test(session)
        except (InconsistentRepetitionError, PickUsageError) as e:
            e.context.run_number = run_number
            raise
        except Exception as e:
            logger.debug(f"Run {run_number} failed: {type(e).__name__}: {e}")
            return RunRecord(
                run_number=run_number,
                picks=session.run_picks,
                success=False,
                error=f"{type(e).__name__}: {e}",
            )
        return RunRecord(run_number=run_number, picks=session.run_picks, success=True)

    def _check_limits(self, result: RepetitionResult) -> None:
        if result.failed_runs >= self.config.max_failure_count:
            logger.warning(
                f"Max failure count {self.config.max_failure_count} reached "
                f"after {result.total_runs} run(s) with combinations pending"
            )
            raise MaxRepetitionError(
                f"Failure count has reached its max: {self.config.max_failure_count}",
                result=result,
                error_code=ErrorCode.MAX_FAILURE_COUNT,
                context=ErrorContext(run_number=result.total_runs),
            )
        if result.total_runs >= self.config.max_total_count:
            logger.warning(
                f"Max total count {self.config.max_total_count} reached "
                f"with combinations pending"
            )
            raise MaxRepetitionError(
                f"Repetition count has reached its max: {self.config.max_total_count}",
                result=result,
                error_code=ErrorCode.MAX_TOTAL_COUNT,
                context=ErrorContext(run_number=result.total_runs),
            )
