"""Simulation configuration.

All options are validated when the config is built, so a bad setting fails
fast with ConfigError before any event is processed.

Example:
    config = SimulationConfig(
        job_rate=StepProfile(before=5, after=50, at=100),
        service_duration=1.0,
        initial_capacity=10,
        horizon=200.0,
        autoscale=False,
    )
"""

from __future__ import annotations

import math
from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Optional

from elasticsim.core.temporal import Duration, Instant
from elasticsim.errors import ConfigError
from elasticsim.load.job_source import ArrivalProcess
from elasticsim.load.profile import Profile, RateInput, as_profile

_ARRIVAL_PROCESSES = ("deterministic", "poisson")

# Accepted alternative spellings for from_dict().
_ALIASES = {
    "jobRate": "job_rate",
    "jobRateFunction": "job_rate",
    "job_rate_function": "job_rate",
    "serviceDuration": "service_duration",
    "initialCapacity": "initial_capacity",
    "minCapacity": "min_capacity",
    "maxCapacity": "max_capacity",
    "targetLow": "target_low",
    "targetMid": "target_mid",
    "targetHigh": "target_high",
    "scaleCooldown": "scale_cooldown",
    "scaleInterval": "scale_interval",
    "reportInterval": "report_interval",
    "costPerBoxPerTime": "cost_per_box_per_time",
    "arrivalProcess": "arrival_process",
    "missedAbortThreshold": "missed_abort_threshold",
}


@dataclass(frozen=True)
class SimulationConfig:
    """Every recognized option of a simulation run.

    Attributes:
        job_rate: Profile, ``t -> rate`` callable, constant, or ``[(t, rate), ...]``.
        service_duration: Fixed time one job occupies one box.
        initial_capacity: Boxes provisioned at time zero.
        min_capacity: Scale-in floor.
        max_capacity: Optional scale-out ceiling.
        target_low: Scale in below this utilization.
        target_mid: Utilization a scale action aims for.
        target_high: Scale out above this utilization.
        scale_cooldown: Minimum time before a scale action may reverse the
            previous one.
        scale_interval: Time between autoscaler ticks.
        report_interval: Time between output samples (defaults to scale_interval).
        cost_per_box_per_time: Price of one box for one unit of time.
        horizon: Simulation end time.
        seed: Seed for poisson arrivals.
        arrival_process: "deterministic" or "poisson".
        autoscale: Run the autoscaler; when False capacity stays fixed.
        missed_abort_threshold: Hard stop once more jobs than this are missed.
    """

    job_rate: RateInput
    service_duration: float = 1.0
    initial_capacity: int = 1
    min_capacity: int = 1
    max_capacity: Optional[int] = None
    target_low: float = 0.4
    target_mid: float = 0.5
    target_high: float = 0.6
    scale_cooldown: float = 0.0
    scale_interval: float = 1.0
    report_interval: Optional[float] = None
    cost_per_box_per_time: float = 1.0
    horizon: float = 100.0
    seed: Optional[int] = None
    arrival_process: ArrivalProcess = "deterministic"
    autoscale: bool = True
    missed_abort_threshold: Optional[int] = None

    def __post_init__(self):
        try:
            profile = as_profile(self.job_rate)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid job rate: {exc}") from exc
        object.__setattr__(self, "job_rate", profile)
        if self.report_interval is None:
            object.__setattr__(self, "report_interval", self.scale_interval)
        self._validate()

    def _validate(self) -> None:
        def number(name: str, allow_zero: bool = False) -> None:
            value = getattr(self, name)
            if not (
                isinstance(value, (int, float))
                and math.isfinite(value)
                and (value >= 0 if allow_zero else value > 0)
            ):
                kind = "non-negative" if allow_zero else "positive"
                raise ConfigError(f"{name} must be a {kind} number, got {value!r}")

        for name in ("service_duration", "horizon", "scale_interval", "report_interval"):
            number(name)

        if Duration.from_seconds(self.service_duration).nanoseconds <= 0:
            raise ConfigError(f"service_duration {self.service_duration} is below clock resolution")

        for name in ("initial_capacity", "min_capacity"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise ConfigError(f"{name} must be a non-negative integer, got {value!r}")
        if self.min_capacity > self.initial_capacity:
            raise ConfigError(
                f"min_capacity ({self.min_capacity}) exceeds initial_capacity ({self.initial_capacity})"
            )
        if self.max_capacity is not None:
            if not isinstance(self.max_capacity, int) or self.max_capacity < self.initial_capacity:
                raise ConfigError(
                    f"max_capacity must be an integer >= initial_capacity, got {self.max_capacity!r}"
                )

        for name in ("target_low", "target_mid", "target_high"):
            number(name)
        if not 0 < self.target_low < self.target_high:
            raise ConfigError(
                f"Utilization band needs 0 < target_low < target_high, "
                f"got [{self.target_low}, {self.target_high}]"
            )
        if not self.target_low <= self.target_mid <= self.target_high:
            raise ConfigError(
                f"target_mid ({self.target_mid}) must lie in [{self.target_low}, {self.target_high}]"
            )

        for name in ("scale_cooldown", "cost_per_box_per_time"):
            number(name, allow_zero=True)
        if self.arrival_process not in _ARRIVAL_PROCESSES:
            raise ConfigError(
                f"arrival_process must be one of {_ARRIVAL_PROCESSES}, got {self.arrival_process!r}"
            )
        if self.missed_abort_threshold is not None:
            number("missed_abort_threshold", allow_zero=True)

    @property
    def profile(self) -> Profile:
        return self.job_rate

    @property
    def service(self) -> Duration:
        return Duration.from_seconds(self.service_duration)

    @property
    def end_time(self) -> Instant:
        return Instant.from_seconds(self.horizon)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SimulationConfig:
        """Build a config from snake_case or camelCase keys.

        Raises:
            ConfigError: On unknown or missing keys, or invalid values.
        """
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            name = _ALIASES.get(key, key)
            if name not in known:
                raise ConfigError(f"Unknown configuration option: {key!r}")
            if name in kwargs:
                raise ConfigError(f"Configuration option given twice: {name!r}")
            kwargs[name] = value
        if "job_rate" not in kwargs:
            raise ConfigError("Missing required option: job_rate")
        return cls(**kwargs)

    def with_overrides(self, **changes: Any) -> SimulationConfig:
        return replace(self, **changes)
