"""Configuration module for revision benchmarks."""

from .benchmark_config import BenchmarkSettings
from .connection import ConnectionDescriptor
from .query_group import QueryGroup, Revision

__all__ = ["BenchmarkSettings", "ConnectionDescriptor", "QueryGroup", "Revision"]
