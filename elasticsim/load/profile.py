"""Job-rate profiles: the externally supplied ``jobRate(t)`` capability.

A profile maps simulation time to an instantaneous arrival rate (jobs per
unit time). Arrival-time providers also need the area under the rate
curve; profiles with a closed form override ``integral`` and everything
else falls back to adaptive Simpson integration.

Rates are clamped at zero: a negative rate means "no arrivals".
"""

from __future__ import annotations

import bisect
import math
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Union

from elasticsim.core.temporal import Instant
from elasticsim.numerics import integrate_adaptive_simpson


class Profile(ABC):
    @abstractmethod
    def get_rate(self, time: Instant) -> float:
        pass

    def rate_at(self, t: float) -> float:
        """Rate at ``t`` seconds, clamped to be non-negative."""
        return max(0.0, float(self.get_rate(Instant.from_seconds(t))))

    def integral(self, start: float, end: float) -> float:
        """Expected number of arrivals in ``[start, end]`` (seconds)."""
        return integrate_adaptive_simpson(
            self.rate_at, start, end, tol=1e-9 * max(1.0, abs(end - start))
        )


class SecondsProfile(Profile):
    """A profile defined directly on float seconds.

    Numerical integration then evaluates the formula without rounding time
    to the clock's nanosecond grid.
    """

    @abstractmethod
    def rate_seconds(self, t: float) -> float:
        pass

    def get_rate(self, time: Instant) -> float:
        return self.rate_seconds(time.to_seconds())

    def rate_at(self, t: float) -> float:
        return max(0.0, float(self.rate_seconds(t)))


@dataclass(frozen=True)
class ConstantRateProfile(SecondsProfile):
    rate: float

    def rate_seconds(self, t: float) -> float:
        return self.rate

    def integral(self, start: float, end: float) -> float:
        return max(0.0, self.rate) * (end - start)


@dataclass(frozen=True)
class PiecewiseConstantProfile(SecondsProfile):
    """Time series of ``(t, rate)`` points; each rate holds until the next point.

    The rate is zero before the first point.
    """

    points: tuple[tuple[float, float], ...]
    _times: tuple[float, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        points = tuple((float(t), float(r)) for t, r in self.points)
        if not points:
            raise ValueError("time series must contain at least one (time, rate) point")
        times = tuple(t for t, _ in points)
        if any(b <= a for a, b in zip(times, times[1:])):
            raise ValueError("time series points must be strictly increasing in time")
        if any(r < 0 for _, r in points):
            raise ValueError("time series rates must be non-negative")
        object.__setattr__(self, "points", points)
        object.__setattr__(self, "_times", times)

    def rate_seconds(self, t: float) -> float:
        idx = bisect.bisect_right(self._times, t) - 1
        if idx < 0:
            return 0.0
        return self.points[idx][1]

    def integral(self, start: float, end: float) -> float:
        if end < start:
            return -self.integral(end, start)
        total = 0.0
        cursor = start
        idx = bisect.bisect_right(self._times, start)
        while cursor < end:
            boundary = self._times[idx] if idx < len(self._times) else end
            segment_end = min(boundary, end)
            total += self.rate_seconds(cursor) * (segment_end - cursor)
            cursor = segment_end
            idx += 1
        return total


class StepProfile(PiecewiseConstantProfile):
    """``before`` until ``at``, then ``after``."""

    def __init__(self, before: float, after: float, at: float):
        points = ((0.0, before), (at, after)) if at > 0 else ((0.0, after),)
        super().__init__(points=points)
        object.__setattr__(self, "before", before)
        object.__setattr__(self, "after", after)
        object.__setattr__(self, "at", at)


class SpikeProfile(PiecewiseConstantProfile):
    """``base_rate`` with a burst of ``spike_rate`` over ``[spike_start, spike_end)``."""

    def __init__(self, base_rate: float, spike_rate: float, spike_start: float, spike_end: float):
        if spike_end <= spike_start:
            raise ValueError("spike_end must be after spike_start")
        points = [(0.0, base_rate)] if spike_start > 0 else []
        points += [(spike_start, spike_rate), (spike_end, base_rate)]
        super().__init__(points=tuple(points))
        object.__setattr__(self, "base_rate", base_rate)
        object.__setattr__(self, "spike_rate", spike_rate)


@dataclass(frozen=True)
class SquareWaveProfile(SecondsProfile):
    """Alternates between ``high`` and ``low`` every half ``period``, starting high."""

    low: float
    high: float
    period: float

    def __post_init__(self):
        if self.period <= 0:
            raise ValueError(f"period must be positive, got {self.period}")

    def rate_seconds(self, t: float) -> float:
        phase = t % self.period
        return self.high if phase < self.period / 2.0 else self.low

    def _cumulative(self, t: float) -> float:
        half = self.period / 2.0
        cycles, phase = divmod(t, self.period)
        hi, lo = max(0.0, self.high), max(0.0, self.low)
        total = cycles * half * (hi + lo)
        if phase < half:
            return total + phase * hi
        return total + half * hi + (phase - half) * lo

    def integral(self, start: float, end: float) -> float:
        return self._cumulative(end) - self._cumulative(start)


@dataclass(frozen=True)
class LinearRampProfile(SecondsProfile):
    """Ramps linearly from ``start_rate`` to ``end_rate`` over ``[ramp_start, ramp_end]``."""

    start_rate: float
    end_rate: float
    ramp_start: float
    ramp_end: float

    def __post_init__(self):
        if self.ramp_end <= self.ramp_start:
            raise ValueError("ramp_end must be after ramp_start")

    def rate_seconds(self, t: float) -> float:
        if t <= self.ramp_start:
            return self.start_rate
        if t >= self.ramp_end:
            return self.end_rate
        frac = (t - self.ramp_start) / (self.ramp_end - self.ramp_start)
        return self.start_rate + frac * (self.end_rate - self.start_rate)

    def integral(self, start: float, end: float) -> float:
        if self.start_rate < 0 or self.end_rate < 0:
            return super().integral(start, end)
        if end < start:
            return -self.integral(end, start)
        total = 0.0
        for lo, hi in (
            (start, min(end, self.ramp_start)),
            (max(start, self.ramp_start), min(end, self.ramp_end)),
            (max(start, self.ramp_end), end),
        ):
            if hi > lo:
                # Rate is linear on each piece, so the trapezoid rule is exact.
                total += (self.rate_seconds(lo) + self.rate_seconds(hi)) / 2.0 * (hi - lo)
        return total


@dataclass(frozen=True)
class SinusoidProfile(SecondsProfile):
    """``mean + amplitude * sin(2*pi*t/period + phase)``, clamped at zero."""

    mean: float
    amplitude: float
    period: float
    phase: float = 0.0

    def __post_init__(self):
        if self.period <= 0:
            raise ValueError(f"period must be positive, got {self.period}")

    def rate_seconds(self, t: float) -> float:
        return self.mean + self.amplitude * math.sin(2.0 * math.pi * t / self.period + self.phase)

    def integral(self, start: float, end: float) -> float:
        if abs(self.amplitude) > self.mean:
            # Clamping makes the closed form invalid.
            return super().integral(start, end)
        omega = 2.0 * math.pi / self.period
        oscillation = (
            math.cos(omega * start + self.phase) - math.cos(omega * end + self.phase)
        ) * self.amplitude / omega
        return self.mean * (end - start) + oscillation


@dataclass(frozen=True)
class FunctionProfile(SecondsProfile):
    """Wraps a plain ``t_seconds -> rate`` callable."""

    fn: Callable[[float], float]

    def rate_seconds(self, t: float) -> float:
        return float(self.fn(t))


RateInput = Union[Profile, Callable[[float], float], float, int, Sequence[tuple[float, float]]]


def as_profile(rate: RateInput) -> Profile:
    """Normalize any accepted job-rate input into a Profile."""
    if isinstance(rate, Profile):
        return rate
    if isinstance(rate, bool):
        raise TypeError("job rate cannot be a bool")
    if isinstance(rate, (int, float)):
        return ConstantRateProfile(float(rate))
    if callable(rate):
        return FunctionProfile(rate)
    if isinstance(rate, Sequence) and not isinstance(rate, str):
        return PiecewiseConstantProfile(points=tuple(tuple(p) for p in rate))
    raise TypeError(f"Unsupported job rate input: {type(rate).__name__}")
