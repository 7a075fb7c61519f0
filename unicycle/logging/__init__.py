"""
Logging framework for the unicycle lifecycle framework.
"""

from .manager import LogFormatter, LoggingManager, context_prefix

__all__ = [
    "LogFormatter",
    # Main classes
    "LoggingManager",
    "context_prefix",
]
