"""Load generation components for simulations."""

from elasticsim.load.arrival_time_provider import (
    ArrivalTimeProvider,
    ConstantArrivalTimeProvider,
    PoissonArrivalTimeProvider,
)
from elasticsim.load.job_source import Job, JobSource
from elasticsim.load.profile import (
    ConstantRateProfile,
    FunctionProfile,
    LinearRampProfile,
    PiecewiseConstantProfile,
    Profile,
    SecondsProfile,
    SinusoidProfile,
    SpikeProfile,
    SquareWaveProfile,
    StepProfile,
    as_profile,
)

__all__ = [
    "ArrivalTimeProvider",
    "ConstantArrivalTimeProvider",
    "ConstantRateProfile",
    "FunctionProfile",
    "Job",
    "JobSource",
    "LinearRampProfile",
    "PiecewiseConstantProfile",
    "PoissonArrivalTimeProvider",
    "Profile",
    "SecondsProfile",
    "SinusoidProfile",
    "SpikeProfile",
    "SquareWaveProfile",
    "StepProfile",
    "as_profile",
]
