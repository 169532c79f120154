"""Aggregation of throughput, latency, utilization, missed jobs and cost.

The collector is fed by the Dispatcher (arrivals, starts, completions,
misses) and by the Autoscaler (utilization samples). It also samples the
system on its own ReportTick, once per reporting interval, producing the
output series. ``finalize`` freezes it and returns the summary.
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Optional

from elasticsim.core.entity import Entity
from elasticsim.core.event import Event, ReportTick
from elasticsim.core.temporal import Duration, Instant
from elasticsim.errors import MetricsFinalizedError
from elasticsim.instrumentation.data import Data
from elasticsim.instrumentation.summary import SimulationSummary

if TYPE_CHECKING:
    from elasticsim.components.box_pool import BoxPool
    from elasticsim.load.job_source import Job

logger = logging.getLogger(__name__)


def utilization_of(job_rate: float, throughput: float) -> float:
    """JobRate / Throughput; zero with no demand, infinite with demand and no capacity."""
    if throughput > 0:
        return job_rate / throughput
    return math.inf if job_rate > 0 else 0.0


@dataclass(frozen=True)
class UtilizationSample:
    """What the autoscaler saw at one tick."""

    time: float
    throughput: float
    job_rate_estimate: float
    capacity: int

    @property
    def utilization(self) -> float:
        return utilization_of(self.job_rate_estimate, self.throughput)


@dataclass(frozen=True)
class Sample:
    """One row of the output series, covering the interval ending at ``time``."""

    time: float
    capacity: int
    throughput: float
    job_rate: float
    utilization: float
    arrivals: int
    completions: int
    missed: int
    missed_count: int
    cost: float

    def to_dict(self) -> dict:
        return asdict(self)


class MetricsCollector(Entity):
    """Counts outcomes and samples the pool once per reporting interval.

    Args:
        name: Entity name.
        pool: Pool whose capacity and ledger are sampled.
        service_duration: Fixed job service time, for throughput.
        cost_per_box_per_time: Price of one box for one unit of time.
        report_interval: Spacing of ReportTick events.
        horizon: Last reporting instant; the final tick lands exactly here.
    """

    def __init__(
        self,
        name: str,
        pool: BoxPool,
        service_duration: Duration,
        cost_per_box_per_time: float,
        report_interval: Duration,
        horizon: Optional[Instant] = None,
    ):
        super().__init__(name)
        self._pool = pool
        self._service_seconds = service_duration.to_seconds()
        self._cost_per_box = cost_per_box_per_time
        self._report_interval = report_interval
        self._horizon = horizon

        self.arrivals = 0
        self.started = 0
        self.completed = 0
        self.missed = 0
        self.latency = Data()
        self.samples: list[Sample] = []
        self.utilization_samples: list[UtilizationSample] = []
        self._peak_capacity = pool.capacity

        self._last_report_time = Instant.Epoch
        self._last_report_counts = (0, 0, 0)
        self._summary: Optional[SimulationSummary] = None

    @property
    def finalized(self) -> bool:
        return self._summary is not None

    @property
    def in_flight(self) -> int:
        return self.started - self.completed

    @property
    def cost(self) -> float:
        """Running cost up to the current time."""
        self._pool.ledger.advance(self.now)
        return self._pool.ledger.cost(self._cost_per_box)

    def _check_open(self) -> None:
        if self._summary is not None:
            raise MetricsFinalizedError(f"[{self.name}] metrics are read-only after finalize()")

    def record_arrival(self, job: Job) -> None:
        self._check_open()
        self.arrivals += 1

    def record_started(self, job: Job, box_id: int) -> None:
        self._check_open()
        self.started += 1

    def record_missed(self, job: Job) -> None:
        self._check_open()
        self.missed += 1

    def record_completion(self, job: Job, latency: Duration) -> None:
        self._check_open()
        self.completed += 1
        self.latency.add_stat(latency.to_seconds(), self.now)

    def record_utilization(self, sample: UtilizationSample) -> None:
        self._check_open()
        self.utilization_samples.append(sample)

    def note_capacity(self) -> None:
        """Track peak capacity after a scale action."""
        self._peak_capacity = max(self._peak_capacity, self._pool.capacity)

    def start(self) -> Optional[ReportTick]:
        """First ReportTick, one interval after the current time."""
        self._last_report_time = self.now
        return self._next_tick()

    def _next_tick(self) -> Optional[ReportTick]:
        next_time = self.now + self._report_interval
        if self._horizon is not None:
            if self.now >= self._horizon:
                return None
            if next_time > self._horizon:
                next_time = self._horizon
        return ReportTick(next_time, self)

    def handle_event(self, event: Event) -> Optional[Event]:
        if isinstance(event, ReportTick):
            self.report()
            return self._next_tick()
        return None

    def report(self) -> Sample:
        """Append one Sample covering the time since the previous report."""
        self._check_open()
        now = self.now
        elapsed = (now - self._last_report_time).to_seconds()
        arrivals0, completed0, missed0 = self._last_report_counts
        arrivals = self.arrivals - arrivals0

        capacity = self._pool.active_capacity
        throughput = capacity / self._service_seconds
        job_rate = arrivals / elapsed if elapsed > 0 else 0.0

        sample = Sample(
            time=now.to_seconds(),
            capacity=self._pool.capacity,
            throughput=throughput,
            job_rate=job_rate,
            utilization=utilization_of(job_rate, throughput),
            arrivals=arrivals,
            completions=self.completed - completed0,
            missed=self.missed - missed0,
            missed_count=self.missed,
            cost=self.cost,
        )
        self.samples.append(sample)
        self._last_report_time = now
        self._last_report_counts = (self.arrivals, self.completed, self.missed)
        logger.debug(
            "[%s] t=%.3f capacity=%d utilization=%.3f missed=%d",
            self.name,
            sample.time,
            sample.capacity,
            sample.utilization,
            sample.missed_count,
        )
        return sample

    def finalize(self, end_time: Instant, stop_reason: str, scale_actions: int = 0) -> SimulationSummary:
        """Close the books at ``end_time`` and return the summary.

        Calling it again returns the same summary.
        """
        if self._summary is not None:
            return self._summary

        ledger = self._pool.ledger
        ledger.advance(end_time)
        duration = end_time.to_seconds()

        finite = [s.utilization for s in self.samples if math.isfinite(s.utilization)]
        average_utilization = sum(finite) / len(finite) if finite else 0.0

        self._summary = SimulationSummary(
            duration=duration,
            arrivals=self.arrivals,
            completed=self.completed,
            missed=self.missed,
            in_flight=self.in_flight,
            average_utilization=average_utilization,
            total_cost=ledger.cost(self._cost_per_box),
            box_time=ledger.box_time,
            achieved_throughput=self.completed / duration if duration > 0 else 0.0,
            mean_latency=self.latency.mean(),
            peak_capacity=self._peak_capacity,
            final_capacity=self._pool.capacity,
            scale_actions=scale_actions,
            stop_reason=stop_reason,
        )
        logger.info(
            "[%s] Finalized: %d arrivals, %d completed, %d missed, cost=%.3f",
            self.name,
            self.arrivals,
            self.completed,
            self.missed,
            self._summary.total_cost,
        )
        return self._summary

    @property
    def summary(self) -> Optional[SimulationSummary]:
        return self._summary
