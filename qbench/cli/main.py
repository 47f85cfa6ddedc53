#!/usr/bin/env python3
"""
qbench entry point.

Exit codes:
    0  no regression
    1  at least one revision regressed
    2  configuration error, or no revision could connect
    3  run timed out (without regressions)
"""
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from qbench.cli.cli import descriptor_from_args, parse_args, settings_from_args
from qbench.config.config_loader import ConfigLoader
from qbench.errors import ConfigError, QBenchError
from qbench.models.benchmark_result import BenchmarkReport
from qbench.report.console import render_report
from qbench.report.export import export_csv
from qbench.service.orchestrator import BenchmarkOrchestrator
from qbench.util.log_config import PACKAGE_LOGGER, setup_logger

EXIT_OK = 0
EXIT_REGRESSION = 1
EXIT_FAILURE = 2
EXIT_TIMEOUT = 3


def exit_code(report: BenchmarkReport) -> int:
    if report.connection_failed:
        return EXIT_FAILURE
    if report.has_regression:
        return EXIT_REGRESSION
    if report.timed_out:
        return EXIT_TIMEOUT
    return EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    logger = setup_logger(PACKAGE_LOGGER,
                          level=logging.DEBUG if args.verbose else logging.INFO,
                          log_file=Path(args.log_file) if args.log_file else None)

    try:
        descriptor = descriptor_from_args(args)
        settings = settings_from_args(args)
        groups = ConfigLoader(args.bench_dir, args.pattern).query_groups
    except QBenchError as e:
        logger.error(str(e))
        return EXIT_FAILURE

    try:
        report = asyncio.run(BenchmarkOrchestrator(descriptor, settings).run(groups))
    except ConfigError as e:
        # engine options that are only checked when a session is created
        logger.error(str(e))
        return EXIT_FAILURE

    print()
    print(render_report(report))
    for group, revision, error in report.post_script_warnings:
        logger.warning(f"Post-script of {group}/{revision} failed: {error}")

    if args.output:
        report.save_to_file(args.output)
        logger.info(f"✓ Report saved: {args.output}")
    if args.csv:
        export_csv(report, args.csv)
        logger.info(f"✓ CSV saved: {args.csv}")
    if args.plot_dir:
        # matplotlib is only imported when charts are requested
        from qbench.report.plot import plot_report
        plot_report(report, args.plot_dir)

    code = exit_code(report)
    if code == EXIT_FAILURE:
        logger.error("No revision could connect to the database")
    elif code == EXIT_REGRESSION:
        logger.warning("Regressions detected")
    return code


if __name__ == "__main__":
    sys.exit(main())
