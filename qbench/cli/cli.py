"""
Command-line interface definition for qbench.
"""
import argparse
from typing import Optional, Sequence

from qbench import __version__
from qbench.config.benchmark_config import BenchmarkSettings, DEFAULT_ITERATIONS, DEFAULT_THRESHOLD
from qbench.config.config_loader import DEFAULT_PATTERN
from qbench.config.connection import ConnectionDescriptor, SCHEME_ALIASES, parse_engine
from qbench.consts.Classification import Statistic
from qbench.consts.EngineType import EngineType
from qbench.errors import ConfigError


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="qbench",
        description="Benchmark revisions of SQL queries against each other and flag regressions",
    )
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    conn = ap.add_argument_group("connection")
    conn.add_argument("-u", "--url", type=str, default=None,
                      help="Connection URL, e.g. postgres://user:pw@host:5432/db or sqlite:///bench.db")
    conn.add_argument("--engine", choices=sorted(SCHEME_ALIASES), default=None,
                      help="Database engine when no --url is given")
    conn.add_argument("--host", type=str, default=None)
    conn.add_argument("--port", type=int, default=None)
    conn.add_argument("--user", type=str, default=None)
    conn.add_argument("--password", type=str, default=None)
    conn.add_argument("--database", type=str, default=None,
                      help="Database name, or file path for sqlite/duckdb")
    conn.add_argument("--connect-retries", type=int, default=0,
                      help="Extra attempts for transient connection errors (default: 0)")
    conn.add_argument("--rollback", action="store_true",
                      help="Run every revision inside a transaction that is rolled back at the end")

    bench = ap.add_argument_group("benchmark")
    bench.add_argument("-d", "--bench-dir", type=str, default="./",
                       help="Directory holding benchmark files (default: ./)")
    bench.add_argument("-p", "--pattern", type=str, default=DEFAULT_PATTERN,
                       help=f"Glob for benchmark files (default: {DEFAULT_PATTERN})")
    bench.add_argument("-c", "--max-connections", type=int, default=1,
                       help="Query groups benchmarked concurrently (default: 1)")
    bench.add_argument("-i", "--iterations", type=int, default=DEFAULT_ITERATIONS,
                       help=f"Timed executions per revision (default: {DEFAULT_ITERATIONS})")
    bench.add_argument("--warmup", type=int, default=0,
                       help="Untimed executions before measuring (default: 0)")
    bench.add_argument("--threshold", type=float, default=DEFAULT_THRESHOLD * 100,
                       help=f"Regression threshold in percent (default: {DEFAULT_THRESHOLD * 100:g})")
    bench.add_argument("--statistic", choices=[s.value for s in Statistic], default=Statistic.MEAN.value,
                       help="Statistic used for comparison (default: mean)")
    bench.add_argument("--timeout", type=float, default=None,
                       help="Overall run timeout in seconds")

    out = ap.add_argument_group("output")
    out.add_argument("--output", type=str, default=None, help="Write the report as JSON to this path")
    out.add_argument("--csv", type=str, default=None, help="Write one CSV row per revision to this path")
    out.add_argument("--plot-dir", type=str, default=None, help="Write one bar chart per query group here")
    out.add_argument("--log-file", type=str, default=None, help="Also write detailed logs to this file")
    out.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return ap


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def descriptor_from_args(args: argparse.Namespace) -> ConnectionDescriptor:
    """Build the connection descriptor from --url or the discrete options."""
    if args.url:
        return ConnectionDescriptor.from_url(args.url)
    if not args.engine:
        raise ConfigError("No database given", details="pass --url or --engine with --database")
    engine = parse_engine(args.engine)
    database = args.database
    if not database:
        if engine is not EngineType.POSTGRES:
            raise ConfigError(f"--database is required for {engine.value}")
        database = "postgres"
    return ConnectionDescriptor(engine=engine, database=database, host=args.host, port=args.port,
                                user=args.user, password=args.password)


def settings_from_args(args: argparse.Namespace) -> BenchmarkSettings:
    return BenchmarkSettings(
        iterations=args.iterations,
        warmup=args.warmup,
        threshold=args.threshold / 100,
        statistic=Statistic(args.statistic),
        max_concurrency=args.max_connections,
        timeout=args.timeout,
        connect_retries=args.connect_retries,
        rollback=args.rollback,
    )
