"""lazypick error handling.

- Custom exception hierarchy with error codes
- Structured session context for debugging
- Call-site discovery pointing at user test code
"""

from lazypick.errors.base import (
    ConfigValidationError,
    ErrorCode,
    ErrorContext,
    InconsistentRepetitionError,
    LazyPickError,
    MaxRepetitionError,
    PickUsageError,
)
from lazypick.errors.debug import StackTraceFilter

__all__ = [
    # Base exceptions
    "LazyPickError",
    "ErrorCode",
    "ErrorContext",
    # Usage and configuration
    "PickUsageError",
    "ConfigValidationError",
    # Session errors
    "InconsistentRepetitionError",
    "MaxRepetitionError",
    # Debug utilities
    "StackTraceFilter",
]
