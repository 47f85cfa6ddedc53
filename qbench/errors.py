"""
Exception hierarchy for qbench.

All exceptions inherit from QBenchError and carry:
- message: Human-readable error message
- details: Optional additional context
- context: Additional key-value pairs for debugging
"""
import builtins
from typing import Any, Optional


class QBenchError(Exception):
    """Base exception for all qbench errors."""

    def __init__(self, message: str, details: Optional[str] = None, **context: Any):
        self.message = message
        self.details = details
        self.context = context if context else None
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message

    def to_dict(self) -> dict:
        """Convert exception to dictionary for JSON serialization."""
        return {
            "type": type(self).__name__,
            "message": self.message,
            "details": self.details,
            "context": self.context,
        }


class ConfigError(QBenchError):
    """Invalid or unreadable benchmark configuration."""


class ConnectionError(QBenchError, builtins.ConnectionError):
    """A database session could not be opened."""


class ScriptExecutionError(QBenchError):
    """A statement of a pre/post script failed."""

    def __init__(self, stage: str, cause: BaseException, statement_index: Optional[int] = None):
        self.stage = stage
        self.cause = cause
        self.statement_index = statement_index
        where = f" (statement {statement_index + 1})" if statement_index is not None else ""
        super().__init__(f"{stage} failed{where}", details=str(cause),
                         stage=stage, statement_index=statement_index)


class QueryExecutionError(QBenchError):
    """A single timed query execution failed."""

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__("query execution failed", details=str(cause))


class EmptySampleSet(QBenchError):
    """Statistics were requested for zero samples."""

    def __init__(self):
        super().__init__("cannot summarize an empty sample set")
