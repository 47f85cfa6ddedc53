import duckdb

from qbench.config.connection import ConnectionDescriptor
from qbench.errors import ConfigError
from qbench.service.session.threaded_session import ThreadedSession


class DuckDBSession(ThreadedSession):
    """DuckDB session; the connection object doubles as its own cursor."""

    driver_errors = (duckdb.Error,)

    def __init__(self, descriptor: ConnectionDescriptor, rollback: bool = False) -> None:
        if rollback:
            raise ConfigError("Rollback mode is not supported for DuckDB",
                              details="DuckDB has no savepoints to isolate failed iterations")
        super().__init__(descriptor, rollback)

    def _connect(self) -> duckdb.DuckDBPyConnection:
        return duckdb.connect(database=self.descriptor.database)
