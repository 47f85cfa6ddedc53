"""Models for benchmark result data structures."""

from .benchmark_result import BenchmarkReport, ComparisonEntry, ComparisonReport, RevisionResult
from .plot_params import PlotParams

__all__ = ["BenchmarkReport", "ComparisonEntry", "ComparisonReport", "PlotParams", "RevisionResult"]
