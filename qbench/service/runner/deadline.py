import time
from typing import Optional


class RunDeadline:
    """Run-level time budget, checked between iterations and revisions."""

    def __init__(self, timeout: Optional[float] = None, clock=time.monotonic) -> None:
        self._clock = clock
        self.timeout = timeout
        self.deadline = None if timeout is None else clock() + timeout
        self.tripped = False

    def expired(self) -> bool:
        if self.deadline is None:
            return False
        if self._clock() >= self.deadline:
            self.tripped = True
        return self.tripped

    def remaining(self) -> Optional[float]:
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - self._clock())
