from enum import Enum


class RevisionStatus(Enum):
    COMPLETED = "Completed"
    SETUP_FAILED = "SetupFailed"
    ALL_ITERATIONS_FAILED = "AllIterationsFailed"
    CONNECTION_FAILED = "ConnectionFailed"
    SKIPPED = "Skipped"
