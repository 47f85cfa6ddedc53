"""
Database session interface.

A session owns exactly one live connection for its lifetime. The benchmark
core only talks to this interface and never branches on the engine behind it.
"""
from abc import ABC, abstractmethod
from typing import Optional

from qbench.config.connection import ConnectionDescriptor
from qbench.errors import ConnectionError

# Rows are fetched and dropped in batches of this size so that large result
# sets never have to be held in memory.
FETCH_BATCH_SIZE = 2048

TRANSIENT_ERROR_PATTERNS = (
    "connection refused",
    "the database system is starting up",
    "server closed the connection unexpectedly",
    "connection reset by peer",
    "connection timed out",
    "timeout expired",
    "could not connect to server",
    "too many connections",
    "database is locked",
)


def looks_like_transient_connect_error(error: BaseException) -> bool:
    if isinstance(error, (ConnectionRefusedError, ConnectionResetError, TimeoutError)):
        return True
    text = str(error).lower()
    return any(p in text for p in TRANSIENT_ERROR_PATTERNS)


def connection_error(descriptor: ConnectionDescriptor, cause: BaseException) -> ConnectionError:
    err = ConnectionError(
        f"Cannot connect to {descriptor.redacted()}",
        details=str(cause) or type(cause).__name__,
        engine=descriptor.engine.value,
    )
    err.transient = looks_like_transient_connect_error(cause)
    return err


class DatabaseSession(ABC):
    """Abstract base session.

    Subclasses implement the engine specific `open`, `execute_script`,
    `execute_timed_query` and `close`. Sessions are async context managers;
    leaving the context closes the connection on success and failure paths.
    """

    def __init__(self, descriptor: ConnectionDescriptor, rollback: bool = False) -> None:
        self.descriptor = descriptor
        self.rollback = rollback

    @abstractmethod
    async def open(self) -> None:
        """Connect, raising qbench.errors.ConnectionError on failure."""

    @abstractmethod
    async def execute_script(self, script: str, stage: str) -> float:
        """
        Run every statement of `script` in order and return the elapsed seconds.

        Raises ScriptExecutionError carrying `stage` and the failing statement
        index. Statements that already ran are not rolled back.
        """

    @abstractmethod
    async def execute_timed_query(self, query: str) -> float:
        """
        Execute exactly one query, discard its rows and return the elapsed
        seconds from submission until the result stream is exhausted.

        Raises QueryExecutionError on failure.
        """

    @abstractmethod
    async def close(self) -> None:
        """Release the connection. Safe to call more than once."""

    async def __aenter__(self) -> "DatabaseSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> Optional[bool]:
        await self.close()
        return None
