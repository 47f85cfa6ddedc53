"""
Base class for engines whose Python drivers are synchronous (SQLite, DuckDB).

Every driver call runs on one dedicated worker thread, so the connection is
created, used and closed on the same thread and the event loop is free while
the database works. Query timing is taken on the worker thread around the
driver calls only.
"""
import asyncio
import time
from abc import abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Optional, Tuple, Type

from qbench.config.connection import ConnectionDescriptor
from qbench.errors import QueryExecutionError, ScriptExecutionError
from qbench.service.session.session import FETCH_BATCH_SIZE, DatabaseSession, connection_error
from qbench.util.log_config import setup_logger
from qbench.util.sql_utils import split_statements

logger = setup_logger(__name__)

SAVEPOINT = "qbench_iteration"


class ThreadedSession(DatabaseSession):

    driver_errors: Tuple[Type[BaseException], ...] = ()

    def __init__(self, descriptor: ConnectionDescriptor, rollback: bool = False) -> None:
        super().__init__(descriptor, rollback)
        self._conn: Any = None
        self._executor: Optional[ThreadPoolExecutor] = None

    # --- driver hooks, always called on the worker thread ---

    @abstractmethod
    def _connect(self) -> Any:
        pass

    def _execute(self, statement: str) -> Any:
        """Execute one statement and return the object holding its result set."""
        return self._conn.execute(statement)

    def _close(self) -> None:
        self._conn.close()

    # --- async API ---

    async def _call(self, fn: Callable, *args) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, fn, *args)

    async def open(self) -> None:
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"qbench-{self.descriptor.engine.value}")
        try:
            self._conn = await self._call(self._connect)
            if self.rollback:
                await self._call(self._execute, "BEGIN")
        except self.driver_errors as e:
            if self._conn is not None:
                await self._call(self._close)
                self._conn = None
            self._executor.shutdown(wait=False)
            self._executor = None
            raise connection_error(self.descriptor, e) from e
        logger.debug(f"Opened {self.descriptor.engine.value} session: {self.descriptor.database}")

    def _run_script(self, statements, stage: str) -> float:
        start = time.perf_counter()
        for index, statement in enumerate(statements):
            try:
                self._execute(statement)
            except self.driver_errors as e:
                raise ScriptExecutionError(stage, e, index) from e
        return time.perf_counter() - start

    async def execute_script(self, script: str, stage: str) -> float:
        return await self._call(self._run_script, split_statements(script), stage)

    def _drain(self, query: str) -> float:
        start = time.perf_counter()
        result = self._execute(query)
        if result.description is not None:
            while result.fetchmany(FETCH_BATCH_SIZE):
                pass
        return time.perf_counter() - start

    def _run_query(self, query: str) -> float:
        if not self.rollback:
            try:
                return self._drain(query)
            except self.driver_errors as e:
                raise QueryExecutionError(e) from e

        try:
            self._execute(f"SAVEPOINT {SAVEPOINT}")
            try:
                elapsed = self._drain(query)
            except self.driver_errors:
                self._execute(f"ROLLBACK TO SAVEPOINT {SAVEPOINT}")
                self._execute(f"RELEASE SAVEPOINT {SAVEPOINT}")
                raise
            self._execute(f"RELEASE SAVEPOINT {SAVEPOINT}")
        except self.driver_errors as e:
            # includes savepoint bookkeeping failing after the query ended the transaction
            raise QueryExecutionError(e) from e
        return elapsed

    async def execute_timed_query(self, query: str) -> float:
        return await self._call(self._run_query, query)

    def _rollback_and_close(self) -> None:
        try:
            if self.rollback:
                self._execute("ROLLBACK")
        except self.driver_errors as e:
            logger.warning(f"Rollback on close failed: {e}")
        finally:
            self._close()

    async def close(self) -> None:
        if self._executor is None:
            return
        executor, self._executor = self._executor, None
        try:
            if self._conn is not None:
                loop = asyncio.get_running_loop()
                await loop.run_in_executor(executor, self._rollback_and_close)
        finally:
            self._conn = None
            executor.shutdown(wait=False)
        logger.debug(f"Closed {self.descriptor.engine.value} session: {self.descriptor.database}")
