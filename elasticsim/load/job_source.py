"""Job arrivals.

A JobSource turns a rate profile into a lazy, restartable stream of Jobs.
Every job carries the same fixed service duration. Iterating a source
always starts over from time zero with the random generator reseeded, so
two iterations (and two runs with the same seed) see identical arrivals.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Literal, Optional

from elasticsim.core.temporal import Duration, Instant
from elasticsim.load.arrival_time_provider import (
    ArrivalTimeProvider,
    ConstantArrivalTimeProvider,
    PoissonArrivalTimeProvider,
)
from elasticsim.load.profile import Profile, RateInput, as_profile

logger = logging.getLogger(__name__)

ArrivalProcess = Literal["deterministic", "poisson"]


@dataclass(frozen=True)
class Job:
    """A unit of work. Immutable once created."""

    id: int
    arrival_time: Instant
    service_duration: Duration


class JobSource:
    """Produces strictly time-ordered job arrivals up to a horizon.

    Args:
        job_rate: Rate profile, ``t -> rate`` callable, constant, or time series.
        service_duration: Fixed service time given to every job.
        horizon: No arrivals after this instant.
        arrival_process: "deterministic" spacing or "poisson" draws.
        seed: Seed for the poisson generator.
    """

    def __init__(
        self,
        job_rate: RateInput,
        service_duration: Duration,
        horizon: Optional[Instant] = None,
        arrival_process: ArrivalProcess = "deterministic",
        seed: Optional[int] = None,
    ):
        self.profile: Profile = as_profile(job_rate)
        self.service_duration = service_duration
        self.horizon = horizon
        self.arrival_process = arrival_process
        self.seed = seed
        self._provider = self._make_provider()
        self._next_id = 0
        self._exhausted = False

    def _make_provider(self) -> ArrivalTimeProvider:
        if self.arrival_process == "deterministic":
            return ConstantArrivalTimeProvider(self.profile, Instant.Epoch, self.horizon)
        if self.arrival_process == "poisson":
            return PoissonArrivalTimeProvider(self.profile, Instant.Epoch, self.horizon, seed=self.seed)
        raise ValueError(f"Unknown arrival process: {self.arrival_process!r}")

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    @property
    def emitted(self) -> int:
        return self._next_id

    def reset(self) -> None:
        """Rewind to time zero and reseed."""
        self._provider.reset()
        self._next_id = 0
        self._exhausted = False

    def next_job(self) -> Optional[Job]:
        """Return the next job, or None once the source is exhausted."""
        if self._exhausted:
            return None
        arrival = self._provider.next_arrival_time()
        if arrival is None:
            self._exhausted = True
            logger.debug("JobSource exhausted after %d jobs", self._next_id)
            return None
        job = Job(id=self._next_id, arrival_time=arrival, service_duration=self.service_duration)
        self._next_id += 1
        return job

    def __iter__(self) -> Iterator[Job]:
        self.reset()
        while (job := self.next_job()) is not None:
            yield job
