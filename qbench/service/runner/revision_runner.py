"""
Revision runner.

Drives one revision through pre-script, timed iterations and post-script on a
session it does not own:

    Init -> PreScript -> Timing -> PostScript -> Done
                 |           |
                 +-----------+--> Failed(stage)

A failed pre-script skips timing entirely. Failed iterations are counted and
the loop carries on. The post-script always gets one attempt, and its failure
is kept as a warning on the result.
"""
from enum import Enum
from typing import List, Optional, Tuple

from qbench.config.benchmark_config import DEFAULT_ITERATIONS
from qbench.config.query_group import Revision
from qbench.consts.RevisionStatus import RevisionStatus
from qbench.errors import QueryExecutionError, ScriptExecutionError
from qbench.models.benchmark_result import RevisionResult
from qbench.service.runner.deadline import RunDeadline
from qbench.service.session.session import DatabaseSession
from qbench.util.log_config import setup_logger

logger = setup_logger(__name__)

PRE_SCRIPT = "pre_script"
TIMING = "timing"
POST_SCRIPT = "post_script"


class RunnerState(Enum):
    INIT = "Init"
    PRE_SCRIPT = "PreScript"
    TIMING = "Timing"
    POST_SCRIPT = "PostScript"
    DONE = "Done"
    FAILED = "Failed"


class RevisionRunner:

    def __init__(self, session: DatabaseSession, iterations: int = DEFAULT_ITERATIONS,
                 warmup: int = 0, deadline: Optional[RunDeadline] = None) -> None:
        self.session = session
        self.iterations = iterations
        self.warmup = warmup
        self.deadline = deadline or RunDeadline()
        self.state = RunnerState.INIT
        self.failed_stage: Optional[str] = None

    async def run(self, revision: Revision) -> RevisionResult:
        self.state = RunnerState.INIT
        self.failed_stage = None
        pre_duration = None

        if revision.pre_script:
            self.state = RunnerState.PRE_SCRIPT
            try:
                pre_duration = await self.session.execute_script(revision.pre_script, stage=PRE_SCRIPT)
            except ScriptExecutionError as e:
                self._fail(PRE_SCRIPT)
                logger.error(f"  {revision.name}: {e}; skipping timed runs")
                # still try to clean up whatever the partial pre-script created
                post_duration, post_error = await self._run_post_script(revision)
                return RevisionResult(
                    revision_name=revision.name,
                    status=RevisionStatus.SETUP_FAILED,
                    error=str(e),
                    post_script_duration=post_duration,
                    post_script_error=post_error,
                )

        self.state = RunnerState.TIMING
        samples, failures, last_error, interrupted = await self._time_query(revision)

        if revision.post_script:
            self.state = RunnerState.POST_SCRIPT
        post_duration, post_error = await self._run_post_script(revision)

        if samples:
            status = RevisionStatus.COMPLETED
            self.state = RunnerState.DONE
        elif failures:
            status = RevisionStatus.ALL_ITERATIONS_FAILED
            self._fail(TIMING)
            logger.error(f"  {revision.name}: all {failures} iteration(s) failed: {last_error}")
        else:
            # deadline hit before the first iteration
            status = RevisionStatus.SKIPPED
            self.state = RunnerState.DONE

        return RevisionResult(
            revision_name=revision.name,
            status=status,
            samples=tuple(samples),
            failed_iterations=failures,
            pre_script_duration=pre_duration,
            post_script_duration=post_duration,
            error=last_error,
            post_script_error=post_error,
            interrupted=interrupted,
        )

    def _fail(self, stage: str) -> None:
        self.state = RunnerState.FAILED
        self.failed_stage = stage

    async def _time_query(self, revision: Revision) -> Tuple[List[float], int, Optional[str], bool]:
        samples: List[float] = []
        failures = 0
        last_error = None

        for i in range(self.warmup):
            if self.deadline.expired():
                logger.warning(f"  {revision.name}: run timeout reached during warm-up")
                return samples, failures, last_error, True
            try:
                elapsed = await self.session.execute_timed_query(revision.query)
                logger.debug(f"  Warm-up {i + 1}/{self.warmup}: Time={elapsed * 1000:.3f}ms (discarded)")
            except QueryExecutionError as e:
                logger.warning(f"  Warm-up {i + 1}/{self.warmup}: {e}")

        for i in range(self.iterations):
            if self.deadline.expired():
                logger.warning(f"  {revision.name}: run timeout reached after {i}/{self.iterations} run(s)")
                return samples, failures, last_error, True
            try:
                elapsed = await self.session.execute_timed_query(revision.query)
            except QueryExecutionError as e:
                failures += 1
                last_error = str(e)
                logger.warning(f"  Run {i + 1}/{self.iterations}: {e}")
                continue
            samples.append(elapsed)
            logger.debug(f"  Run {i + 1}/{self.iterations}: Time={elapsed * 1000:.3f}ms")

        return samples, failures, last_error, False

    async def _run_post_script(self, revision: Revision) -> Tuple[Optional[float], Optional[str]]:
        if not revision.post_script:
            return None, None
        try:
            return await self.session.execute_script(revision.post_script, stage=POST_SCRIPT), None
        except ScriptExecutionError as e:
            logger.warning(f"  {revision.name}: {e}")
            return None, str(e)
