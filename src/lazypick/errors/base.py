"""Custom exception hierarchy for lazypick.

lazypick errors carry:
- Structured error codes for programmatic handling
- Context about the session state when the error was raised
- Actionable suggestions for recovery

All lazypick errors inherit from LazyPickError and include:
- error_code: A unique ErrorCode enum for categorization
- context: ErrorContext with parameter/crumb-trail details
- suggestions: List of actionable steps to resolve the issue

Example:
    try:
        runner.run(test)
    except InconsistentRepetitionError as e:
        print(e.format_verbose())
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from lazypick.runner.repetition import RepetitionResult


class ErrorCode(Enum):
    """Standardized error codes for lazypick.

    Error codes are organized by category:
    - E1xx: Usage errors (bad pick arguments)
    - E2xx: Configuration errors
    - E3xx: Repetition consistency errors
    - E4xx: Repetition limits
    - E9xx: Unknown/internal errors
    """

    # Usage errors (E1xx)
    MISSING_PARAMETER_ID = "E101"
    INVALID_VALUE_COUNT = "E102"
    INVALID_SEED_BOUND = "E103"

    # Configuration errors (E2xx)
    INVALID_CONFIG = "E201"

    # Consistency errors (E3xx)
    INCONSISTENT_REPETITION = "E301"

    # Repetition limits (E4xx)
    MAX_TOTAL_COUNT = "E401"
    MAX_FAILURE_COUNT = "E402"

    # Unknown/internal errors (E9xx)
    UNKNOWN = "E999"

    @property
    def category(self) -> str:
        """Get the error category name."""
        code_num = int(self.value[1:])
        if code_num < 200:
            return "usage"
        elif code_num < 300:
            return "config"
        elif code_num < 400:
            return "consistency"
        elif code_num < 500:
            return "repetition"
        else:
            return "unknown"


@dataclass
class ErrorContext:
    """Structured context describing where in a session an error occurred.

    Attributes:
        parameter_id: Id of the parameter being picked (if any)
        crumbs: Value indices already picked in the current run
        run_number: 1-based number of the run (if known)
        extra: Additional context-specific information
        timestamp: When the error occurred
    """

    parameter_id: Any = None
    crumbs: tuple[int, ...] | None = None
    run_number: int | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary for serialization."""
        result = {
            "parameter_id": repr(self.parameter_id) if self.parameter_id is not None else None,
            "crumbs": list(self.crumbs) if self.crumbs is not None else None,
            "run_number": self.run_number,
            "extra": self.extra,
            "timestamp": self.timestamp.isoformat(),
        }
        return {k: v for k, v in result.items() if v is not None}

    def format_location(self) -> str:
        """Format the error location as a readable string."""
        parts = []
        if self.run_number is not None:
            parts.append(f"run={self.run_number}")
        if self.crumbs is not None:
            parts.append(f"crumbs={list(self.crumbs)}")
        if self.parameter_id is not None:
            parts.append(f"parameter={self.parameter_id!r}")
        return " > ".join(parts) if parts else "unknown location"


class LazyPickError(Exception):
    """Base exception for all lazypick errors.

    Attributes:
        error_code: Unique ErrorCode for this error type
        message: Human-readable error description
        context: ErrorContext with session details
        suggestions: List of actionable steps to resolve the issue
        recoverable: Whether the session can carry on after this error
        cause: The underlying exception (if any)
    """

    error_code: ErrorCode = ErrorCode.UNKNOWN
    default_message: str = "An unexpected error occurred"
    default_suggestions: list[str] = []

    def __init__(
        self,
        message: str | None = None,
        error_code: ErrorCode | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
        recoverable: bool = True,
        suggestions: list[str] | None = None,
        **extra_context: Any,
    ) -> None:
        self.message = message or self.default_message
        self.error_code = error_code or self.error_code
        self.context = context or ErrorContext()
        self.cause = cause
        self.recoverable = recoverable
        self._suggestions = suggestions

        if extra_context:
            self.context.extra.update(extra_context)

        super().__init__(self.message)

    @property
    def suggestions(self) -> list[str]:
        """Get actionable suggestions for resolving this error."""
        if self._suggestions is not None:
            return self._suggestions
        return self.default_suggestions.copy()

    def __str__(self) -> str:
        parts = [f"[{self.error_code.value}] {self.message}"]

        location = self.context.format_location()
        if location != "unknown location":
            parts.append(f"at {location}")

        return " | ".join(parts)

    def format_verbose(self) -> str:
        """Format error with full details including suggestions."""
        lines = [
            f"Error [{self.error_code.value}]: {self.message}",
            "",
        ]

        location = self.context.format_location()
        if location != "unknown location":
            lines.append(f"Location: {location}")

        if self.suggestions:
            lines.append("")
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  - {suggestion}")

        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error_code": self.error_code.value,
            "error_type": self.__class__.__name__,
            "message": self.message,
            "recoverable": self.recoverable,
            "suggestions": self.suggestions,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
        }


class PickUsageError(LazyPickError, ValueError):
    """A pick was requested with arguments the engine cannot accept.

    Raised synchronously at the offending call, before any session state
    is touched. Common causes:
    - Missing (None) parameter id
    - Value count of zero or less, or above MAX_VALUE_COUNT
    - Non-positive bound passed to a seed decomposition
    """

    error_code = ErrorCode.INVALID_VALUE_COUNT
    default_message = "Invalid pick request"
    default_suggestions = [
        "Parameters must have between 1 and 65480 possible values",
        "Pass a non-None, hashable parameter id",
    ]

    def __init__(self, message: str | None = None, **kwargs: Any) -> None:
        kwargs.setdefault("recoverable", False)
        super().__init__(message, **kwargs)


class InconsistentRepetitionError(LazyPickError):
    """A repeated run did not re-introduce a parameter at the same place.

    Every crumb-trail prefix is reserved by the parameter that was first
    introduced after it. When a later run introduces a different parameter
    at that prefix, or ends right there although a parameter was expected,
    the test's control flow is no longer deterministic with respect to its
    parameters and the session cannot be continued.

    Attributes:
        introduction_site: Where the expected parameter was first introduced.
        conflicting_sites: One marker per detection, newest last.
    """

    error_code = ErrorCode.INCONSISTENT_REPETITION
    default_message = "Inconsistent parameter value pick"
    default_suggestions = [
        "Make sure the test introduces the same parameters in the same order "
        "when earlier picks are the same",
        "Avoid parameter ids that depend on time, randomness or object identity",
        "Do not reuse a session after this error",
    ]

    def __init__(
        self,
        introduction_site: str,
        conflicting_sites: list[str] | None = None,
        **kwargs: Any,
    ) -> None:
        self.introduction_site = introduction_site
        self.conflicting_sites = list(conflicting_sites or [])
        kwargs.setdefault("recoverable", False)
        super().__init__(self._compose_message(), **kwargs)

    def _compose_message(self) -> str:
        lines = [
            self.default_message,
            "... probably because a parameter that was introduced at ...",
            self.introduction_site,
            "... was not recognized when test was repeated!",
        ]
        for site in self.conflicting_sites:
            lines.append(f"INCONSISTENCY DETECTED! {site}")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["introduction_site"] = self.introduction_site
        data["conflicting_sites"] = list(self.conflicting_sites)
        return data


class MaxRepetitionError(LazyPickError):
    """A configured repetition limit was reached with combinations pending."""

    error_code = ErrorCode.MAX_TOTAL_COUNT
    default_message = "Repetition count has reached its max"
    default_suggestions = [
        "Raise max_total_count (LAZYPICK_MAX_TOTAL_COUNT) for larger parameter spaces",
        "Mark parameters as uncombined when pairwise coverage is not needed",
    ]

    def __init__(
        self,
        message: str | None = None,
        result: RepetitionResult | None = None,
        **kwargs: Any,
    ) -> None:
        self.result = result
        kwargs.setdefault("recoverable", False)
        super().__init__(message, **kwargs)


class ConfigValidationError(LazyPickError):
    """Configuration value failed validation."""

    error_code = ErrorCode.INVALID_CONFIG
    default_message = "Configuration validation failed"
    default_suggestions = [
        "Check the YAML config file and LAZYPICK_* environment variables",
    ]

    def __init__(
        self,
        message: str | None = None,
        field: str | None = None,
        value: Any = None,
        **kwargs: Any,
    ) -> None:
        self.field = field
        self.value = value
        super().__init__(message, **kwargs)
        if field:
            self.context.extra["field"] = field
