"""Run outputs: the final summary record and the full result bundle.

SimulationResult is what Simulation.run() returns. Its sample series can be
exported as a pandas DataFrame or CSV; two runs with the same configuration
and seed export byte-identical CSV.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

import pandas as pd

if TYPE_CHECKING:
    from elasticsim.components.auto_scaler import ScalingAction
    from elasticsim.instrumentation.metrics import Sample, UtilizationSample

SAMPLE_COLUMNS = [
    "time",
    "capacity",
    "throughput",
    "job_rate",
    "utilization",
    "arrivals",
    "completions",
    "missed",
    "missed_count",
    "cost",
]


@dataclass(frozen=True)
class SimulationSummary:
    """Final figures of a run. Read-only."""

    duration: float
    arrivals: int
    completed: int
    missed: int
    in_flight: int
    average_utilization: float
    total_cost: float
    box_time: float
    achieved_throughput: float
    mean_latency: float
    peak_capacity: int
    final_capacity: int
    scale_actions: int
    stop_reason: str

    def __str__(self) -> str:
        return "\n".join(
            [
                "Simulation Summary",
                f"  Duration: {self.duration:.2f} ({self.stop_reason})",
                f"  Jobs: {self.arrivals} arrived, {self.completed} completed, "
                f"{self.missed} missed, {self.in_flight} in flight",
                f"  Average utilization: {self.average_utilization:.3f}",
                f"  Achieved throughput: {self.achieved_throughput:.3f} jobs/unit",
                f"  Mean latency: {self.mean_latency:.3f}",
                f"  Capacity: peak={self.peak_capacity}, final={self.final_capacity}, "
                f"scale actions={self.scale_actions}",
                f"  Cost: {self.total_cost:.3f} ({self.box_time:.3f} box-time)",
            ]
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class SimulationResult:
    """Everything a run produced."""

    summary: SimulationSummary
    samples: list[Sample] = field(default_factory=list)
    utilization_samples: list[UtilizationSample] = field(default_factory=list)
    scaling_history: list[ScalingAction] = field(default_factory=list)

    def to_dataframe(self) -> pd.DataFrame:
        """Output series as a DataFrame, one row per reporting interval."""
        return pd.DataFrame([s.to_dict() for s in self.samples], columns=SAMPLE_COLUMNS)

    def to_csv(self, path: Optional[str | Path] = None) -> str:
        """Render the output series as CSV, optionally writing it to ``path``."""
        text = self.to_dataframe().to_csv(index=False, lineterminator="\n")
        if path is not None:
            path = Path(path)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        return text

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary.to_dict(),
            "samples": [s.to_dict() for s in self.samples],
            "scaling_history": [a.to_dict() for a in self.scaling_history],
        }
