import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from qbench.errors import EmptySampleSet


@dataclass(frozen=True)
class Statistics:
    """Distributional summary of latency samples (seconds)."""
    count: int
    min: float
    max: float
    mean: float
    median: float
    stddev: float
    p90: Optional[float]
    p99: Optional[float]
    samples: Tuple[float, ...]  # original order

    def to_summary_dict(self):
        """Convert to dictionary for JSON serialization, without raw samples"""
        return {
            "count": self.count,
            "min": self.min,
            "max": self.max,
            "mean": self.mean,
            "median": self.median,
            "stddev": self.stddev,
            "p90": self.p90,
            "p99": self.p99,
        }


def summarize(samples: Sequence[float]) -> Statistics:
    """Calculate statistical summary from a list of latency samples"""
    if len(samples) == 0:
        raise EmptySampleSet()

    values = tuple(float(s) for s in samples)
    n = len(values)

    # fsum is exactly rounded, so mean and variance do not depend on sample order
    mean = math.fsum(values) / n
    if n > 1:
        variance = math.fsum((v - mean) ** 2 for v in values) / (n - 1)
        stddev = math.sqrt(variance)
    else:
        stddev = 0.0

    sorted_values = np.sort(np.asarray(values, dtype=float))
    p90, p99 = np.percentile(sorted_values, [90, 99])
    # rounding of the final division must not push the mean outside [min, max]
    mean = min(max(mean, float(sorted_values[0])), float(sorted_values[-1]))

    return Statistics(
        count=n,
        min=float(sorted_values[0]),
        max=float(sorted_values[-1]),
        mean=mean,
        median=float(np.median(sorted_values)),
        stddev=stddev,
        p90=float(p90),
        p99=float(p99),
        samples=values,
    )
