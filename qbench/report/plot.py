"""
Bar charts of revision latencies, one image per query group.
"""
from pathlib import Path
from typing import List, Union

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402

from qbench.consts.Classification import Classification, Statistic  # noqa: E402
from qbench.models.benchmark_result import BenchmarkReport, ComparisonReport  # noqa: E402
from qbench.models.plot_params import PlotParams  # noqa: E402
from qbench.util.log_config import setup_logger  # noqa: E402

logger = setup_logger(__name__)

# Deterministic colors per classification
CLASSIFICATION_COLORS = {
    Classification.BASELINE: "#7f7f7f",   # gray
    Classification.IMPROVED: "#2ca02c",   # green
    Classification.REGRESSED: "#d62728",  # red
    Classification.NEUTRAL: "#1f77b4",    # blue
    Classification.INCONCLUSIVE: "#ff7f0e",
}


def plot_bar_chart(params: PlotParams) -> Path:

    x = np.arange(len(params.values))
    fig, ax = plt.subplots(figsize=params.figsize)

    ax.bar(x, params.values, yerr=params.errors, color=params.colors,
           edgecolor="black", linewidth=1, capsize=4)

    # y axis label and title
    ax.set_ylabel(params.ylabel)
    ax.set_title(params.title)
    ax.set_xticks(x)
    ax.set_xticklabels(params.labels, rotation=params.rotation, ha="right")

    # add grid
    ax.grid(True, alpha=0.3, axis="y")

    if params.annotate and params.values:
        top = max(params.values)
        for i, v in enumerate(params.values):
            ax.text(i, v + top * 0.01, f"{v:.2f}", ha="center", va="bottom", fontsize=9)

    fig.tight_layout()

    output_path = Path(params.output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=160)
    plt.close(fig)
    return output_path


def group_plot_params(group: ComparisonReport, output_dir: Path) -> PlotParams:
    """Chart of the chosen statistic (ms) for revisions that have samples."""
    values, errors, labels, colors = [], [], [], []
    for entry in group.entries:
        stats = entry.result.statistics
        if stats is None:
            continue
        value = stats.median if group.statistic is Statistic.MEDIAN else stats.mean
        values.append(value * 1000)
        errors.append(stats.stddev * 1000)
        labels.append(entry.revision_name)
        colors.append(CLASSIFICATION_COLORS[entry.classification])

    safe_name = "".join(c if c.isalnum() or c in "-_" else "_" for c in group.group_name)
    return PlotParams(
        values=values,
        labels=labels,
        colors=colors,
        errors=errors,
        ylabel=f"{group.statistic.value} latency (ms)",
        title=f"{group.group_name} (baseline: {group.baseline})",
        output_path=str(output_dir / f"{safe_name}.png"),
    )


def plot_report(report: BenchmarkReport, output_dir: Union[str, Path]) -> List[Path]:
    output_dir = Path(output_dir)
    written = []
    for group in report.groups:
        if group.no_baseline:
            logger.info(f"Skipping chart for {group.group_name}: no samples")
            continue
        path = plot_bar_chart(group_plot_params(group, output_dir))
        logger.info(f"✓ Saved chart: {path}")
        written.append(path)
    return written
