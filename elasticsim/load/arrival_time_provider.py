"""Computing job arrival times from rate profiles.

The next arrival is the time t at which the area under the rate curve,
measured from the previous arrival, reaches a target value. Subclasses
decide the target:

- ConstantArrivalTimeProvider: target = 1.0, so a constant rate r gives
  arrivals exactly 1/r apart.
- PoissonArrivalTimeProvider: target ~ Exp(1), which yields a
  (non-homogeneous) Poisson process.

When a horizon is known, a target that cannot be reached before it means
the stream is exhausted and ``next_arrival_time`` returns None.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import numpy as np

from elasticsim.core.temporal import Duration, Instant
from elasticsim.load.profile import ConstantRateProfile, Profile
from elasticsim.numerics import find_root

logger = logging.getLogger(__name__)

_MAX_BRACKET_ITERATIONS = 60
_ONE_NANOSECOND = Duration(1)


class ArrivalTimeProvider(ABC):
    """Computes arrival times by integrating a rate profile.

    Arrivals are solved in unrounded seconds and only the result is rounded
    to the clock's nanosecond grid, so rounding never accumulates from one
    arrival to the next. Under a constant rate the k-th arrival lands at
    ``start + (sum of targets) / rate`` exactly.

    Attributes:
        profile: Rate function over time.
        current_time: Time of the last arrival (updated after each call).
        horizon: Optional time after which no arrivals are produced.
    """

    def __init__(
        self,
        profile: Profile,
        start_time: Instant = Instant.Epoch,
        horizon: Optional[Instant] = None,
    ):
        self.profile = profile
        self.horizon = horizon
        self._start_time = start_time
        self.current_time = start_time
        self._solved_time = start_time.to_seconds()
        self._cumulative_target = 0.0

    def reset(self) -> None:
        """Rewind to the start time."""
        self.current_time = self._start_time
        self._solved_time = self._start_time.to_seconds()
        self._cumulative_target = 0.0

    @abstractmethod
    def _get_target_integral_value(self) -> float:
        """Return the area under the rate curve between consecutive arrivals."""

    def next_arrival_time(self) -> Optional[Instant]:
        """Compute the next arrival time, or None once the stream is exhausted.

        Raises:
            RuntimeError: If there is no horizon and the rate stays at zero
                for as far as the bracket search looks.
        """
        target_area = self._get_target_integral_value()
        cumulative = self._cumulative_target + target_area

        if isinstance(self.profile, ConstantRateProfile):
            if self.profile.rate <= 0:
                return self._exhausted(target_area)
            t_next = self._start_time.to_seconds() + cumulative / self.profile.rate
        else:
            t_next = self._solve(self._solved_time, target_area)
            if t_next is None:
                return self._exhausted(target_area)

        candidate = Instant.from_seconds(t_next)
        if candidate <= self.current_time:
            candidate = self.current_time + _ONE_NANOSECOND
        if self.horizon is not None and candidate > self.horizon:
            return self._exhausted(target_area)

        self.current_time = candidate
        self._solved_time = t_next
        self._cumulative_target = cumulative
        logger.debug("Next arrival: time=%.9f target_area=%.4f", t_next, target_area)
        return candidate

    def _exhausted(self, target_area: float) -> None:
        logger.debug(
            "Arrival stream exhausted at %r (target_area=%.4f)", self.current_time, target_area
        )
        return None

    def _solve(self, t_start: float, target_area: float) -> Optional[float]:
        def objective(t: float) -> float:
            return self.profile.integral(t_start, t) - target_area

        t_high = self._bracket(t_start, target_area, objective)
        if t_high is None:
            return None

        result = find_root(objective, t_start, t_high, xtol=max(1e-10, abs(t_high) * 1e-13))
        if not result.converged:
            logger.warning(
                "Arrival root finding did not fully converge after %d iterations", result.iterations
            )
        return result.root

    def _bracket(self, t_start: float, target_area: float, objective) -> Optional[float]:
        """Grow a window from ``t_start`` until it holds ``target_area`` of rate mass.

        The window never extends past the horizon; if even the full window
        up to the horizon falls short, there is no next arrival.
        """
        limit = self.horizon.to_seconds() if self.horizon is not None else None
        if limit is not None and limit <= t_start:
            return None

        rate = self.profile.rate_at(t_start)
        step = target_area / rate * 2.0 if rate > 0 else 0.1
        step = min(max(step, 1e-9), 3600.0)

        for _ in range(_MAX_BRACKET_ITERATIONS):
            t_high = t_start + step
            if limit is not None and t_high >= limit:
                return limit if objective(limit) >= 0 else None
            if objective(t_high) >= 0:
                return t_high
            step *= 2.0

        logger.error("Could not bracket arrival time: target_area=%.4f start=%.4f", target_area, t_start)
        raise RuntimeError(
            f"Could not find an arrival with target area {target_area} after t={t_start}"
        )


class ConstantArrivalTimeProvider(ArrivalTimeProvider):
    """Deterministic arrivals: exactly one unit of rate mass between jobs."""

    def _get_target_integral_value(self) -> float:
        return 1.0


class PoissonArrivalTimeProvider(ArrivalTimeProvider):
    """Stochastic arrivals from a seeded exponential draw.

    Resetting reseeds the generator, so the arrival sequence replays exactly.
    """

    def __init__(
        self,
        profile: Profile,
        start_time: Instant = Instant.Epoch,
        horizon: Optional[Instant] = None,
        seed: Optional[int] = None,
    ):
        super().__init__(profile, start_time, horizon)
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def reset(self) -> None:
        super().reset()
        self._rng = np.random.default_rng(self.seed)

    def _get_target_integral_value(self) -> float:
        return float(self._rng.exponential(1.0))
