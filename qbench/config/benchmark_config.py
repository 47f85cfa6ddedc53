from dataclasses import dataclass
from typing import Optional

from qbench.consts.Classification import Statistic
from qbench.errors import ConfigError

DEFAULT_ITERATIONS = 5
DEFAULT_THRESHOLD = 0.05


@dataclass(frozen=True)
class BenchmarkSettings:
    iterations: int = DEFAULT_ITERATIONS
    warmup: int = 0
    threshold: float = DEFAULT_THRESHOLD  # fraction, 0.05 == 5%
    statistic: Statistic = Statistic.MEAN
    max_concurrency: int = 1
    timeout: Optional[float] = None  # seconds for the whole run
    connect_retries: int = 0
    retry_delay: float = 1.0
    rollback: bool = False

    def __post_init__(self):
        if self.iterations < 1:
            raise ConfigError("iterations must be at least 1", received=self.iterations)
        if self.warmup < 0:
            raise ConfigError("warmup must not be negative", received=self.warmup)
        if self.threshold < 0:
            raise ConfigError("threshold must not be negative", received=self.threshold)
        if self.max_concurrency < 1:
            raise ConfigError("max concurrency must be at least 1", received=self.max_concurrency)
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigError("timeout must be positive", received=self.timeout)
        if self.connect_retries < 0:
            raise ConfigError("connect retries must not be negative", received=self.connect_retries)

    def to_dict(self) -> dict:
        return {
            "iterations": self.iterations,
            "warmup": self.warmup,
            "threshold": self.threshold,
            "statistic": self.statistic.value,
            "max_concurrency": self.max_concurrency,
            "timeout": self.timeout,
            "connect_retries": self.connect_retries,
            "retry_delay": self.retry_delay,
            "rollback": self.rollback,
        }
