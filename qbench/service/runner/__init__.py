from .deadline import RunDeadline
from .revision_runner import RevisionRunner, RunnerState

__all__ = ["RevisionRunner", "RunDeadline", "RunnerState"]
