import time
from typing import Optional

import asyncpg

from qbench.config.connection import ConnectionDescriptor
from qbench.errors import QueryExecutionError, ScriptExecutionError
from qbench.service.session.session import FETCH_BATCH_SIZE, DatabaseSession, connection_error
from qbench.util.log_config import setup_logger
from qbench.util.sql_utils import split_statements

logger = setup_logger(__name__)

DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)
CONNECT_TIMEOUT = 30.0


class PostgresSession(DatabaseSession):
    """PostgreSQL session on a single asyncpg connection."""

    def __init__(self, descriptor: ConnectionDescriptor, rollback: bool = False) -> None:
        super().__init__(descriptor, rollback)
        self._conn: Optional[asyncpg.Connection] = None
        self._tx = None

    async def open(self) -> None:
        try:
            self._conn = await asyncpg.connect(self.descriptor.to_url(), timeout=CONNECT_TIMEOUT)
        except DRIVER_ERRORS as e:
            raise connection_error(self.descriptor, e) from e

        if self.rollback:
            self._tx = self._conn.transaction()
            try:
                await self._tx.start()
            except DRIVER_ERRORS as e:
                await self._conn.close()
                self._conn = None
                raise connection_error(self.descriptor, e) from e
        logger.debug(f"Opened PostgreSQL session: {self.descriptor.redacted()}")

    async def execute_script(self, script: str, stage: str) -> float:
        start = time.perf_counter()
        statements = split_statements(script)
        # in rollback mode the script runs in a savepoint so a failure does
        # not abort the enclosing transaction
        if self.rollback:
            async with self._conn.transaction():
                await self._run_statements(statements, stage)
        else:
            await self._run_statements(statements, stage)
        return time.perf_counter() - start

    async def _run_statements(self, statements, stage: str) -> None:
        for index, statement in enumerate(statements):
            try:
                await self._conn.execute(statement)
            except DRIVER_ERRORS as e:
                raise ScriptExecutionError(stage, e, index) from e

    async def execute_timed_query(self, query: str) -> float:
        # cursors need a transaction; inside the rollback transaction this is a savepoint.
        # BEGIN and COMMIT happen outside the timed window.
        tx = self._conn.transaction()
        try:
            await tx.start()
        except DRIVER_ERRORS as e:
            raise QueryExecutionError(e) from e

        try:
            start = time.perf_counter()
            await self._drain(query)
            elapsed = time.perf_counter() - start
        except DRIVER_ERRORS as e:
            await self._abandon(tx)
            raise QueryExecutionError(e) from e

        try:
            await tx.commit()
        except DRIVER_ERRORS as e:
            raise QueryExecutionError(e) from e
        return elapsed

    async def _drain(self, query: str) -> None:
        statement = await self._conn.prepare(query)
        if statement.get_attributes():
            cursor = await statement.cursor()
            while True:
                rows = await cursor.fetch(FETCH_BATCH_SIZE)
                if not rows:
                    break
        else:
            await statement.fetch()

    async def _abandon(self, tx) -> None:
        try:
            await tx.rollback()
        except DRIVER_ERRORS as e:
            logger.warning(f"Rolling back failed query transaction failed: {e}")

    async def close(self) -> None:
        if self._conn is None:
            return
        conn, self._conn = self._conn, None
        try:
            if self._tx is not None and not conn.is_closed():
                await self._tx.rollback()
        except DRIVER_ERRORS as e:
            logger.warning(f"Rollback on close failed: {e}")
        finally:
            self._tx = None
            try:
                await conn.close()
            except DRIVER_ERRORS as e:
                logger.warning(f"Closing connection failed, terminating it: {e}")
                conn.terminate()
        logger.debug(f"Closed PostgreSQL session: {self.descriptor.redacted()}")
