"""Call-site discovery for lazypick error messages.

When a parameter is first introduced the engine remembers where in the
user's test code that happened, so an inconsistency detected on a later
repetition can point at the line whose control flow diverged.
"""

from __future__ import annotations

import inspect
from pathlib import Path

_PACKAGE_DIR = str(Path(__file__).resolve().parent.parent)


class StackTraceFilter:
    """Filters the call stack to locate user code and hide framework internals."""

    # Patterns for framework code to hide
    FRAMEWORK_PATTERNS = [
        _PACKAGE_DIR,
        "_pytest",
        "pluggy",
        "importlib",
        "<frozen",
        "concurrent/futures",
        "threading",
    ]

    @classmethod
    def is_framework(cls, filename: str) -> bool:
        """Check whether a file belongs to lazypick or the test machinery."""
        return any(p in filename for p in cls.FRAMEWORK_PATTERNS)

    @classmethod
    def get_user_frame(cls) -> tuple[str, int, str] | None:
        """Get the innermost user code frame from the current stack.

        Returns:
            Tuple of (filename, lineno, function) or None if not found.
        """
        for frame_info in inspect.stack(0):
            filename = frame_info.filename
            if not cls.is_framework(filename):
                return (filename, frame_info.lineno, frame_info.function)
        return None

    @classmethod
    def describe_call_site(cls, fallback: str) -> str:
        """Describe the innermost user call site as ``file:line in function``.

        Args:
            fallback: Description used when no user frame is on the stack.
        """
        frame = cls.get_user_frame()
        if frame is None:
            return fallback
        filename, lineno, function = frame
        return f"{filename}:{lineno} in {function}"
