"""elasticsim: discrete-event simulation of an elastic box pool with autoscaling.

Jobs arrive according to a rate profile, identical boxes serve one job at a
time for a fixed duration, arrivals that find no idle box are missed, and an
autoscaler keeps utilization inside a target band while the capacity ledger
tracks cost.

Logging is silent by default; see ``elasticsim.logging_config``.
"""

import logging

from elasticsim.components import (
    Autoscaler,
    AutoscalerStats,
    Box,
    BoxPool,
    BoxState,
    CapacityLedger,
    Dispatcher,
    RemovalResult,
    ScalingAction,
    ScalingPolicy,
    TargetBand,
)
from elasticsim.config import SimulationConfig
from elasticsim.core import (
    Arrival,
    Clock,
    Completion,
    Duration,
    Entity,
    Event,
    EventKind,
    EventQueue,
    Instant,
    ReportTick,
    ScaleTick,
)
from elasticsim.errors import (
    BoxStateError,
    CausalityError,
    ConfigError,
    EmptyQueueError,
    MetricsFinalizedError,
    SimulationError,
)
from elasticsim.instrumentation import (
    Data,
    MetricsCollector,
    Sample,
    SimulationResult,
    SimulationSummary,
    UtilizationSample,
)
from elasticsim.load import (
    ConstantArrivalTimeProvider,
    ConstantRateProfile,
    FunctionProfile,
    Job,
    JobSource,
    LinearRampProfile,
    PiecewiseConstantProfile,
    PoissonArrivalTimeProvider,
    Profile,
    SinusoidProfile,
    SpikeProfile,
    SquareWaveProfile,
    StepProfile,
)
from elasticsim.logging_config import (
    configure_from_env,
    disable_logging,
    enable_console_logging,
    enable_file_logging,
    enable_json_logging,
    set_level,
    set_module_level,
)
from elasticsim.simulation import Simulation, run_simulation

logging.getLogger("elasticsim").addHandler(logging.NullHandler())

__all__ = [
    # Simulation
    "Simulation",
    "SimulationConfig",
    "run_simulation",
    # Core
    "Arrival",
    "Clock",
    "Completion",
    "Duration",
    "Entity",
    "Event",
    "EventKind",
    "EventQueue",
    "Instant",
    "ReportTick",
    "ScaleTick",
    # Load
    "ConstantArrivalTimeProvider",
    "ConstantRateProfile",
    "FunctionProfile",
    "Job",
    "JobSource",
    "LinearRampProfile",
    "PiecewiseConstantProfile",
    "PoissonArrivalTimeProvider",
    "Profile",
    "SinusoidProfile",
    "SpikeProfile",
    "SquareWaveProfile",
    "StepProfile",
    # Components
    "Autoscaler",
    "AutoscalerStats",
    "Box",
    "BoxPool",
    "BoxState",
    "CapacityLedger",
    "Dispatcher",
    "RemovalResult",
    "ScalingAction",
    "ScalingPolicy",
    "TargetBand",
    # Instrumentation
    "Data",
    "MetricsCollector",
    "Sample",
    "SimulationResult",
    "SimulationSummary",
    "UtilizationSample",
    # Errors
    "BoxStateError",
    "CausalityError",
    "ConfigError",
    "EmptyQueueError",
    "MetricsFinalizedError",
    "SimulationError",
    # Logging
    "configure_from_env",
    "disable_logging",
    "enable_console_logging",
    "enable_file_logging",
    "enable_json_logging",
    "set_level",
    "set_module_level",
]
