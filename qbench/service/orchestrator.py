"""
Benchmark orchestrator.

Runs every query group, and within a group every revision in declaration
order, each on a freshly opened session. Groups may run concurrently up to
`max_concurrency`; revisions of one group never do.
"""
import asyncio
from datetime import datetime
from typing import Awaitable, Callable, List, Sequence

from qbench.config.benchmark_config import BenchmarkSettings
from qbench.config.connection import ConnectionDescriptor
from qbench.config.query_group import QueryGroup, Revision
from qbench.consts.RevisionStatus import RevisionStatus
from qbench.errors import ConnectionError
from qbench.models.benchmark_result import BenchmarkReport, ComparisonReport, RevisionResult
from qbench.service.comparator import Comparator
from qbench.service.runner.deadline import RunDeadline
from qbench.service.runner.revision_runner import RevisionRunner
from qbench.service.session import DatabaseSession, open_session
from qbench.util.log_config import setup_logger

logger = setup_logger(__name__)

SessionFactory = Callable[..., Awaitable[DatabaseSession]]


class BenchmarkOrchestrator:

    def __init__(self, descriptor: ConnectionDescriptor, settings: BenchmarkSettings = BenchmarkSettings(),
                 session_factory: SessionFactory = open_session) -> None:
        self.descriptor = descriptor
        self.settings = settings
        self.session_factory = session_factory
        self.comparator = Comparator(settings.threshold, settings.statistic)

    async def run(self, groups: Sequence[QueryGroup]) -> BenchmarkReport:
        deadline = RunDeadline(self.settings.timeout)
        semaphore = asyncio.Semaphore(self.settings.max_concurrency)
        report = BenchmarkReport(groups=[], settings=self.settings.to_dict())

        logger.info("=" * 60)
        logger.info(f"Benchmarking {len(groups)} query group(s) on {self.descriptor.redacted()}")
        logger.info("=" * 60)

        async def bounded(group: QueryGroup) -> ComparisonReport:
            async with semaphore:
                return await self.run_group(group, deadline)

        report.groups = list(await asyncio.gather(*(bounded(g) for g in groups)))
        report.timed_out = deadline.tripped
        report.finished_at = datetime.now().isoformat()
        if report.timed_out:
            logger.warning(f"Run timeout of {self.settings.timeout}s reached; remaining revisions were skipped")
        return report

    async def run_group(self, group: QueryGroup, deadline: RunDeadline) -> ComparisonReport:
        logger.info("-" * 60)
        logger.info(f"Query group: {group.name} ({len(group.revisions)} revision(s))")
        remaining = deadline.remaining()
        if remaining is not None:
            logger.info(f"Run budget left: {remaining:.1f}s")
        logger.info("-" * 60)

        # every revision finishes before the comparison, never a partial group
        results: List[RevisionResult] = []
        for idx, revision in enumerate(group.revisions, 1):
            if deadline.expired():
                results.append(RevisionResult(revision.name, RevisionStatus.SKIPPED,
                                              error="run timeout reached before start"))
                continue
            logger.info(f"Revision {idx}/{len(group.revisions)}: {revision.name}")
            result = await self.run_revision(revision, deadline)
            stats = result.statistics
            if stats:
                logger.info(f"✓ {revision.name}: {result.status.value}, "
                            f"mean={stats.mean * 1000:.3f}ms, median={stats.median * 1000:.3f}ms "
                            f"({stats.count} sample(s), {result.failed_iterations} failed)")
            else:
                logger.info(f"✗ {revision.name}: {result.status.value}")
            results.append(result)

        return self.comparator.compare(group.name, results)

    async def run_revision(self, revision: Revision, deadline: RunDeadline) -> RevisionResult:
        try:
            session = await self.open_session()
        except ConnectionError as e:
            logger.error(f"  {revision.name}: {e}")
            return RevisionResult(revision.name, RevisionStatus.CONNECTION_FAILED, error=str(e))

        async with session:
            runner = RevisionRunner(session, iterations=self.settings.iterations,
                                    warmup=self.settings.warmup, deadline=deadline)
            return await runner.run(revision)

    async def open_session(self) -> DatabaseSession:
        """Open a session, retrying connection errors that look transient."""
        attempts = self.settings.connect_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                return await self.session_factory(self.descriptor, rollback=self.settings.rollback)
            except ConnectionError as e:
                if attempt < attempts and getattr(e, "transient", False):
                    logger.info(f"  Connection attempt {attempt}/{attempts} failed ({e.details}); "
                                f"retrying in {self.settings.retry_delay:.1f}s")
                    await asyncio.sleep(self.settings.retry_delay)
                    continue
                raise
