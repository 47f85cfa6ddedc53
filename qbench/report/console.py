from typing import List, Optional

from tabulate import tabulate

from qbench.consts.Classification import Classification
from qbench.models.benchmark_result import BenchmarkReport, ComparisonEntry, ComparisonReport

HEADERS = ["Revision", "Status", "Samples", "Failed", "Setup", "Cleanup",
           "Mean", "Median", "StdDev", "Delta", "Result"]

MARKERS = {
    Classification.BASELINE: "baseline",
    Classification.IMPROVED: "✓ Improved",
    Classification.REGRESSED: "✗ Regressed",
    Classification.NEUTRAL: "~ Neutral",
    Classification.INCONCLUSIVE: "? Inconclusive",
}


def format_duration(seconds: Optional[float]) -> str:
    if seconds is None:
        return "-"
    if seconds < 1e-3:
        return f"{seconds * 1e6:.1f}µs"
    if seconds < 1:
        return f"{seconds * 1e3:.3f}ms"
    return f"{seconds:.3f}s"


def format_delta(entry: ComparisonEntry) -> str:
    if entry.delta is None or entry.classification is Classification.BASELINE:
        return "-"
    return f"{entry.delta_percent:+.1f}%"


def _row(entry: ComparisonEntry) -> List[str]:
    result = entry.result
    stats = result.statistics
    status = result.status.value + (" (interrupted)" if result.interrupted else "")
    return [
        entry.revision_name,
        status,
        str(len(result.samples)),
        str(result.failed_iterations),
        format_duration(result.pre_script_duration),
        format_duration(result.post_script_duration),
        format_duration(stats.mean if stats else None),
        format_duration(stats.median if stats else None),
        format_duration(stats.stddev if stats else None),
        format_delta(entry),
        MARKERS[entry.classification],
    ]


def render_group(group: ComparisonReport, tablefmt: str = "heavy_grid") -> str:
    lines = [f"Query: {group.group_name}"]
    if group.no_baseline:
        lines.append("  NoBaseline: no revision produced samples")
    else:
        lines.append(f"  baseline={group.baseline}  statistic={group.statistic.value}  "
                     f"threshold={group.threshold * 100:.1f}%")
    lines.append(tabulate([_row(e) for e in group.entries], headers=HEADERS,
                          tablefmt=tablefmt, stralign="right", numalign="right"))
    for entry in group.entries:
        if entry.result.error and entry.classification is Classification.INCONCLUSIVE:
            lines.append(f"  ✗ {entry.revision_name}: {entry.result.error}")
        if entry.result.post_script_error:
            lines.append(f"  ⚠ {entry.revision_name}: {entry.result.post_script_error}")
    return "\n".join(lines)


def render_report(report: BenchmarkReport, tablefmt: str = "heavy_grid") -> str:
    sections = [render_group(g, tablefmt) for g in report.groups]
    if report.timed_out:
        sections.append("⚠ Run timeout reached; some revisions were interrupted or skipped")
    return "\n\n".join(sections)
