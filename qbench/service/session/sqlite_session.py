import sqlite3

from qbench.service.session.threaded_session import ThreadedSession


class SQLiteSession(ThreadedSession):
    """SQLite session on the stdlib sqlite3 driver, in autocommit mode."""

    driver_errors = (sqlite3.Error,)

    def _connect(self) -> sqlite3.Connection:
        # isolation_level=None: the driver must not open implicit transactions
        return sqlite3.connect(self.descriptor.database, isolation_level=None)
