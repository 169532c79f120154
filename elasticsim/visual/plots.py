"""Static charts of a finished run.

Renders the output series of a SimulationResult as a 2x2 grid: capacity
with scale actions, utilization against the target band, missed jobs, and
running cost.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402

if TYPE_CHECKING:
    from elasticsim.instrumentation.summary import SimulationResult

logger = logging.getLogger(__name__)


def plot_result(
    result: SimulationResult,
    path: str | Path,
    band: Optional[tuple[float, float]] = None,
    title: str = "Elastic box pool",
    dpi: int = 150,
) -> Path:
    """Save a 2x2 overview figure of ``result`` to ``path``.

    Args:
        result: Output of Simulation.run().
        path: Image file to write. Parent directories are created.
        band: Optional (low, high) utilization band to shade.
        title: Figure title.
        dpi: Output resolution.

    Returns:
        The path written.
    """
    df = result.to_dataframe()
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fig, axes = plt.subplots(2, 2, figsize=(14, 9), sharex=True)
    fig.suptitle(title)

    ax = axes[0][0]
    ax.step(df["time"], df["capacity"], where="post", label="capacity")
    for action in result.scaling_history:
        color = "tab:green" if action.action == "scale_out" else "tab:red"
        ax.axvline(action.time, color=color, alpha=0.3, linewidth=1)
    ax.set_ylabel("boxes")
    ax.set_title("Capacity")
    ax.legend(loc="upper left")

    ax = axes[0][1]
    finite = df["utilization"].replace([float("inf")], float("nan"))
    ax.plot(df["time"], finite, label="utilization")
    if band is not None:
        ax.axhspan(band[0], band[1], color="tab:green", alpha=0.15, label="target band")
    ax.set_title("Utilization")
    ax.legend(loc="upper left")

    ax = axes[1][0]
    ax.bar(df["time"], df["missed"], width=0.8 * _spacing(df["time"]), label="missed per interval")
    ax.plot(df["time"], df["missed_count"], color="tab:red", label="cumulative")
    ax.set_xlabel("time")
    ax.set_title("Missed jobs")
    ax.legend(loc="upper left")

    ax = axes[1][1]
    ax.plot(df["time"], df["cost"])
    ax.set_xlabel("time")
    ax.set_title("Running cost")

    fig.tight_layout()
    fig.savefig(path, dpi=dpi)
    plt.close(fig)
    logger.info("Saved result plot to %s", path)
    return path


def _spacing(times) -> float:
    if len(times) < 2:
        return 1.0
    return float(times.iloc[1] - times.iloc[0])
