"""Measurement components and run outputs."""

from elasticsim.instrumentation.data import Data
from elasticsim.instrumentation.metrics import MetricsCollector, Sample, UtilizationSample
from elasticsim.instrumentation.summary import SAMPLE_COLUMNS, SimulationResult, SimulationSummary

__all__ = [
    "Data",
    "MetricsCollector",
    "SAMPLE_COLUMNS",
    "Sample",
    "SimulationResult",
    "SimulationSummary",
    "UtilizationSample",
]
