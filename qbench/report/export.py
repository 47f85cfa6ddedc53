import csv
from pathlib import Path
from typing import Union

from qbench.models.benchmark_result import BenchmarkReport

CSV_COLUMNS = [
    "query", "revision", "status", "classification", "delta",
    "count", "failed", "min", "max", "mean", "median", "stddev", "p90", "p99",
    "pre_script_duration", "post_script_duration", "error", "post_script_error",
]


def export_csv(report: BenchmarkReport, file_path: Union[str, Path]) -> Path:
    """Write one row per revision; durations are in seconds."""
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_COLUMNS)
        writer.writeheader()
        for group in report.groups:
            for entry in group.entries:
                result = entry.result
                row = {
                    "query": group.group_name,
                    "revision": entry.revision_name,
                    "status": result.status.value,
                    "classification": entry.classification.value,
                    "delta": entry.delta,
                    "failed": result.failed_iterations,
                    "pre_script_duration": result.pre_script_duration,
                    "post_script_duration": result.post_script_duration,
                    "error": result.error,
                    "post_script_error": result.post_script_error,
                }
                stats = result.statistics
                if stats:
                    row.update(stats.to_summary_dict())
                else:
                    row["count"] = 0
                writer.writerow(row)
    return path
