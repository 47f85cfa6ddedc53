"""Benchmark result data models."""

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from qbench.consts.Classification import Classification, Statistic
from qbench.consts.RevisionStatus import RevisionStatus
from qbench.util.cal_utils import Statistics, summarize


@dataclass(frozen=True)
class RevisionResult:
    """
    Outcome of benchmarking one revision.

    `samples` holds the elapsed seconds of the successful iterations in
    execution order; failed iterations are only counted.
    """
    revision_name: str
    status: RevisionStatus
    samples: Tuple[float, ...] = ()
    failed_iterations: int = 0
    pre_script_duration: Optional[float] = None
    post_script_duration: Optional[float] = None
    error: Optional[str] = None              # connection / setup / last query error
    post_script_error: Optional[str] = None  # cleanup failure, a warning only
    interrupted: bool = False                # timing cut short by the run deadline

    @property
    def statistics(self) -> Optional[Statistics]:
        """Summary of the samples, or None when there is nothing to summarize."""
        if not self.samples:
            return None
        return summarize(self.samples)

    def to_dict(self) -> Dict[str, Any]:
        stats = self.statistics
        return {
            "revision_name": self.revision_name,
            "status": self.status.value,
            "failed_iterations": self.failed_iterations,
            "pre_script_duration": self.pre_script_duration,
            "post_script_duration": self.post_script_duration,
            "error": self.error,
            "post_script_error": self.post_script_error,
            "interrupted": self.interrupted,
            "statistics": stats.to_summary_dict() if stats else None,
            "samples": list(self.samples),
        }


@dataclass(frozen=True)
class ComparisonEntry:
    result: RevisionResult
    classification: Classification
    delta: Optional[float] = None  # relative, 0.10 == +10%

    @property
    def revision_name(self) -> str:
        return self.result.revision_name

    @property
    def delta_percent(self) -> Optional[float]:
        return None if self.delta is None else self.delta * 100

    def to_dict(self) -> Dict[str, Any]:
        data = self.result.to_dict()
        data["classification"] = self.classification.value
        data["delta"] = self.delta
        return data


@dataclass(frozen=True)
class ComparisonReport:
    """Per query group comparison against the baseline revision."""
    group_name: str
    baseline: Optional[str]
    statistic: Statistic
    threshold: float
    entries: Tuple[ComparisonEntry, ...]

    @property
    def no_baseline(self) -> bool:
        return self.baseline is None

    @property
    def has_regression(self) -> bool:
        return any(e.classification is Classification.REGRESSED for e in self.entries)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.group_name,
            "baseline": self.baseline,
            "statistic": self.statistic.value,
            "threshold": self.threshold,
            "revisions": [e.to_dict() for e in self.entries],
        }


@dataclass
class BenchmarkReport:
    """
    Complete benchmark result for one run.

    This is the top-level structure that gets rendered and serialized to JSON.
    """
    groups: List[ComparisonReport]
    settings: Dict[str, Any] = field(default_factory=dict)
    timed_out: bool = False
    started_at: str = field(default_factory=lambda: datetime.now().isoformat())
    finished_at: Optional[str] = None

    @property
    def has_regression(self) -> bool:
        return any(g.has_regression for g in self.groups)

    @property
    def revision_results(self) -> List[RevisionResult]:
        return [e.result for g in self.groups for e in g.entries]

    @property
    def connection_failed(self) -> bool:
        """True when revisions were attempted but none of them could connect."""
        attempted = [r for r in self.revision_results if r.status is not RevisionStatus.SKIPPED]
        return bool(attempted) and all(r.status is RevisionStatus.CONNECTION_FAILED for r in attempted)

    @property
    def post_script_warnings(self) -> List[Tuple[str, str, str]]:
        """(group, revision, error) for every failed post-script."""
        return [
            (g.group_name, e.revision_name, e.result.post_script_error)
            for g in self.groups for e in g.entries
            if e.result.post_script_error
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "timed_out": self.timed_out,
            "has_regression": self.has_regression,
            "settings": self.settings,
            "queries": [g.to_dict() for g in self.groups],
        }

    def save_to_file(self, file_path: Union[str, Path]) -> None:
        """Save the report to a JSON file."""
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, ensure_ascii=False, indent=2)
