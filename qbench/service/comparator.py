import math
from typing import List, Optional, Sequence

from qbench.config.benchmark_config import DEFAULT_THRESHOLD
from qbench.consts.Classification import Classification, Statistic
from qbench.models.benchmark_result import ComparisonEntry, ComparisonReport, RevisionResult
from qbench.util.cal_utils import Statistics
from qbench.util.log_config import setup_logger

logger = setup_logger(__name__)

# relative slack when comparing a delta with the threshold
REL_TOLERANCE = 1e-9


def relative_delta(baseline: float, candidate: float) -> float:
    """(candidate - baseline) / baseline; a zero baseline gives 0 or +/-inf."""
    if baseline == 0:
        if candidate == 0:
            return 0.0
        return math.copysign(math.inf, candidate)
    return (candidate - baseline) / baseline


class Comparator:
    """Classifies every revision of a group against the group's baseline.

    The baseline is the first revision, in declaration order, that produced
    statistics. Revisions without statistics are reported as inconclusive.
    """

    def __init__(self, threshold: float = DEFAULT_THRESHOLD, statistic: Statistic = Statistic.MEAN) -> None:
        self.threshold = threshold
        self.statistic = statistic

    def value_of(self, stats: Statistics) -> float:
        return stats.median if self.statistic is Statistic.MEDIAN else stats.mean

    def _reaches_threshold(self, magnitude: float) -> bool:
        # deltas are ratios of float latencies, so 0.7 -> 0.665 lands a hair short of 5%
        return magnitude >= self.threshold or math.isclose(magnitude, self.threshold, rel_tol=REL_TOLERANCE)

    def classify(self, delta: float) -> Classification:
        # the threshold itself counts as a change; a zero delta never does
        if delta > 0 and self._reaches_threshold(delta):
            return Classification.REGRESSED
        if delta < 0 and self._reaches_threshold(-delta):
            return Classification.IMPROVED
        return Classification.NEUTRAL

    def compare(self, group_name: str, results: Sequence[RevisionResult]) -> ComparisonReport:
        stats: List[Optional[Statistics]] = [r.statistics for r in results]
        baseline_index = next((i for i, s in enumerate(stats) if s is not None), None)

        if baseline_index is None:
            logger.warning(f"{group_name}: no revision produced samples, nothing to compare")
            entries = tuple(ComparisonEntry(r, Classification.INCONCLUSIVE) for r in results)
            return ComparisonReport(group_name, None, self.statistic, self.threshold, entries)

        baseline_value = self.value_of(stats[baseline_index])
        entries = []
        for i, (result, result_stats) in enumerate(zip(results, stats)):
            if i == baseline_index:
                entries.append(ComparisonEntry(result, Classification.BASELINE, 0.0))
            elif result_stats is None:
                entries.append(ComparisonEntry(result, Classification.INCONCLUSIVE))
            else:
                delta = relative_delta(baseline_value, self.value_of(result_stats))
                entries.append(ComparisonEntry(result, self.classify(delta), delta))

        report = ComparisonReport(group_name, results[baseline_index].revision_name,
                                  self.statistic, self.threshold, tuple(entries))
        for entry in report.entries:
            if entry.classification is Classification.REGRESSED:
                logger.warning(f"{group_name}: {entry.revision_name} regressed by "
                               f"{entry.delta_percent:+.1f}% vs {report.baseline}")
        return report
