"""
Exceptions for the unicycle lifecycle framework.

Every failure raised by the lifecycle core is a ``LifecycleError``; the
shared base class carries context and cause information so that log
formatters and callers can inspect what went wrong.
"""

import time
from typing import Any, Dict, Optional


class UnicycleError(Exception):
    """Base exception class with enhanced error context."""

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        """
        Initialize the exception with context and cause tracking.

        Args:
            message: Error message
            context: Additional context information
            cause: Root cause exception if this is a wrapped exception
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.cause = cause
        self.timestamp = time.time()

    def __str__(self) -> str:
        """Return a detailed string representation of the exception."""
        parts = [self.message]

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"Context: {context_str}")

        if self.cause:
            parts.append(f"Caused by: {self.cause}")

        return " | ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "cause": str(self.cause) if self.cause else None,
            "timestamp": self.timestamp,
        }


class LifecycleError(UnicycleError):
    """
    Error raised by the lifecycle core.

    Used for unresolvable transition targets, identifier reassignment,
    malformed states, missing required properties and duplicate ids in a
    strict store.
    """
    pass
