"""Database sessions, one implementation per engine."""
import importlib

from qbench.config.connection import ConnectionDescriptor
from qbench.consts.EngineType import EngineType
from qbench.service.session.session import DatabaseSession

# Driver modules are imported on first use so that e.g. a SQLite-only run
# does not need asyncpg to be importable.
SESSION_CLASSES = {
    EngineType.POSTGRES: ("qbench.service.session.postgres_session", "PostgresSession"),
    EngineType.SQLITE: ("qbench.service.session.sqlite_session", "SQLiteSession"),
    EngineType.DUCKDB: ("qbench.service.session.duckdb_session", "DuckDBSession"),
}


def session_class(engine: EngineType) -> type:
    module_name, class_name = SESSION_CLASSES[engine]
    return getattr(importlib.import_module(module_name), class_name)


async def open_session(descriptor: ConnectionDescriptor, rollback: bool = False) -> DatabaseSession:
    """Create and open a session for the descriptor's engine."""
    session = session_class(descriptor.engine)(descriptor, rollback=rollback)
    await session.open()
    return session


__all__ = ["DatabaseSession", "open_session", "session_class"]
