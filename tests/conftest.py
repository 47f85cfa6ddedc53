"""
Shared pytest fixtures for qbench tests.

FakeSession stands in for a database: it records every call and replays
scripted query durations and failures, so runner, orchestrator and comparator
behaviour can be checked without a server.
"""
import inspect
from typing import Dict, Iterable, List, Optional, Union

import pytest

from qbench.config.connection import ConnectionDescriptor
from qbench.consts.EngineType import EngineType
from qbench.errors import QueryExecutionError, ScriptExecutionError
from qbench.service.session.session import DatabaseSession

FAIL = object()  # scripted query outcome: raise QueryExecutionError


class FakeSession(DatabaseSession):

    def __init__(self, durations: Iterable[Union[float, object]] = (), fail_scripts: Iterable[str] = (),
                 descriptor: Optional[ConnectionDescriptor] = None, on_query=None) -> None:
        super().__init__(descriptor or ConnectionDescriptor(EngineType.SQLITE, ":memory:"))
        self.durations = list(durations)
        self.fail_scripts = set(fail_scripts)
        self.on_query = on_query
        self.calls: List[tuple] = []
        self.opened = False
        self.closed = False

    async def open(self) -> None:
        self.opened = True

    async def execute_script(self, script: str, stage: str) -> float:
        self.calls.append(("script", stage, script))
        if script in self.fail_scripts:
            raise ScriptExecutionError(stage, RuntimeError(f"boom in {script}"), 0)
        return 0.001

    async def execute_timed_query(self, query: str) -> float:
        self.calls.append(("query", query))
        if self.on_query:
            # the hook may be a coroutine function to hold the session busy
            pending = self.on_query()
            if inspect.isawaitable(pending):
                await pending
        outcome = self.durations.pop(0) if self.durations else 0.01
        if outcome is FAIL:
            raise QueryExecutionError(RuntimeError("query failed"))
        return outcome

    async def close(self) -> None:
        self.closed = True

    def query_calls(self) -> List[tuple]:
        return [c for c in self.calls if c[0] == "query"]

    def stages(self) -> List[str]:
        return [c[1] for c in self.calls if c[0] == "script"]


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class SessionFactory:
    """Hands out FakeSessions keyed by the query they will time."""

    def __init__(self, durations_by_query: Optional[Dict[str, list]] = None, on_query=None) -> None:
        self.on_query = on_query
        self.durations_by_query = durations_by_query or {}
        self.sessions: List[FakeSession] = []
        self.failures: List[BaseException] = []

    async def __call__(self, descriptor, rollback=False) -> DatabaseSession:
        if self.failures:
            raise self.failures.pop(0)
        session = _QueryKeyedSession(self.durations_by_query, descriptor=descriptor, on_query=self.on_query)
        session.rollback = rollback
        await session.open()
        self.sessions.append(session)
        return session


class _QueryKeyedSession(FakeSession):

    def __init__(self, durations_by_query: Dict[str, list], **kwargs) -> None:
        super().__init__(**kwargs)
        self.durations_by_query = durations_by_query
        self._loaded = False

    async def execute_timed_query(self, query: str) -> float:
        # one session benchmarks one revision, so the first query decides the script
        if not self._loaded:
            self.durations = list(self.durations_by_query.get(query, ()))
            self._loaded = True
        return await super().execute_timed_query(query)


@pytest.fixture
def sqlite_descriptor():
    return ConnectionDescriptor(EngineType.SQLITE, ":memory:")


@pytest.fixture
def fake_clock():
    return FakeClock()
