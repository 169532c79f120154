"""Autoscaling control loop.

On every ScaleTick the autoscaler estimates the job rate from the arrivals
since the previous tick, computes utilization against the current active
capacity, asks its policy for a desired box count, and adds or removes
boxes. After a scale action, an action in the opposite direction is blocked
until the cooldown has elapsed, which keeps noisy rate estimates from
flapping the pool back and forth. Consecutive actions in the same direction
are not held back, so a pool can keep growing under a rising load.

Example:
    scaler = Autoscaler(
        name="scaler", pool=pool, metrics=metrics,
        service_duration=Duration.from_seconds(1),
        policy=TargetBand(low=0.4, mid=0.5, high=0.6),
        min_capacity=1, interval=Duration.from_seconds(1),
        cooldown=Duration.from_seconds(10),
    )
    queue.schedule(scaler.start())
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from typing import Optional, Protocol, runtime_checkable

from elasticsim.components.box_pool import BoxPool
from elasticsim.core.entity import Entity
from elasticsim.core.event import Event, ScaleTick
from elasticsim.core.temporal import Duration, Instant
from elasticsim.instrumentation.metrics import MetricsCollector, UtilizationSample

logger = logging.getLogger(__name__)

# Absorbs float noise so that e.g. 5 * 1 / 0.5 asks for 10 boxes, not 11.
_CEIL_EPSILON = 1e-9


@runtime_checkable
class ScalingPolicy(Protocol):
    """Protocol for scaling decision algorithms."""

    def evaluate(
        self,
        sample: UtilizationSample,
        service_seconds: float,
        min_capacity: int,
        max_capacity: Optional[int],
    ) -> int:
        """Return the desired active capacity."""
        ...


class TargetBand:
    """Keep utilization inside ``[low, high]``, re-centering on ``mid``.

    Above ``high`` the pool grows to the smallest size that brings
    utilization down to ``mid``; below ``low`` it shrinks toward the same
    size, never below the minimum. Inside the band nothing changes.
    """

    def __init__(self, low: float, mid: float, high: float):
        if not 0 < low < high:
            raise ValueError(f"Need 0 < low < high, got low={low}, high={high}")
        if not low <= mid <= high:
            raise ValueError(f"mid must lie in [low, high], got {mid}")
        self.low = low
        self.mid = mid
        self.high = high

    def size_for(self, job_rate: float, service_seconds: float) -> int:
        return math.ceil(job_rate * service_seconds / self.mid - _CEIL_EPSILON)

    def evaluate(
        self,
        sample: UtilizationSample,
        service_seconds: float,
        min_capacity: int,
        max_capacity: Optional[int],
    ) -> int:
        current = sample.capacity
        utilization = sample.utilization

        if utilization > self.high:
            desired = max(current, self.size_for(sample.job_rate_estimate, service_seconds))
        elif utilization < self.low:
            desired = min(current, self.size_for(sample.job_rate_estimate, service_seconds))
        else:
            desired = current

        desired = max(min_capacity, desired)
        if max_capacity is not None:
            desired = min(max_capacity, desired)
        return desired


@dataclass(frozen=True)
class ScalingAction:
    """Record of a scaling action."""

    time: float
    action: str  # "scale_out" or "scale_in"
    from_count: int
    to_count: int
    utilization: float
    reason: str

    @property
    def delta(self) -> int:
        return self.to_count - self.from_count

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class AutoscalerStats:
    """Statistics tracked by Autoscaler."""

    evaluations: int = 0
    scale_out_count: int = 0
    scale_in_count: int = 0
    boxes_added: int = 0
    boxes_removed: int = 0
    cooldown_blocks: int = 0


class Autoscaler(Entity):
    """Periodic controller that resizes the BoxPool.

    Attributes:
        name: Scaler identifier.
        scaling_history: Every action taken, in order.
    """

    def __init__(
        self,
        name: str,
        pool: BoxPool,
        metrics: MetricsCollector,
        service_duration: Duration,
        policy: ScalingPolicy,
        min_capacity: int = 1,
        max_capacity: Optional[int] = None,
        interval: Duration = Duration.from_seconds(1),
        cooldown: Duration = Duration(0),
        horizon: Optional[Instant] = None,
    ):
        """Initialize the autoscaler.

        Args:
            name: Scaler identifier.
            pool: Pool to resize.
            metrics: Source of the arrival count; receives utilization samples.
            service_duration: Fixed job service time.
            policy: Decides the desired capacity from a utilization sample.
            min_capacity: Scale-in floor.
            max_capacity: Optional scale-out ceiling.
            interval: Time between ticks.
            cooldown: Minimum time before an action may reverse the previous one.
            horizon: No ticks are scheduled past this instant.
        """
        super().__init__(name)
        self._pool = pool
        self._metrics = metrics
        self._service_seconds = service_duration.to_seconds()
        self._policy = policy
        self._min_capacity = min_capacity
        self._max_capacity = max_capacity
        self._interval = interval
        self._cooldown = cooldown
        self._horizon = horizon

        self._is_running = False
        self._last_tick_time: Optional[Instant] = None
        self._last_tick_arrivals = 0
        self._last_scale_time: Optional[Instant] = None
        self._last_scale_direction = 0

        self._evaluations = 0
        self._scale_out_count = 0
        self._scale_in_count = 0
        self._boxes_added = 0
        self._boxes_removed = 0
        self._cooldown_blocks = 0
        self.scaling_history: list[ScalingAction] = []

        logger.debug(
            "[%s] Autoscaler initialized: min=%d, max=%s, interval=%.3f, cooldown=%.3f",
            name,
            min_capacity,
            max_capacity,
            interval.to_seconds(),
            cooldown.to_seconds(),
        )

    @property
    def stats(self) -> AutoscalerStats:
        """Return a frozen snapshot of current statistics."""
        return AutoscalerStats(
            evaluations=self._evaluations,
            scale_out_count=self._scale_out_count,
            scale_in_count=self._scale_in_count,
            boxes_added=self._boxes_added,
            boxes_removed=self._boxes_removed,
            cooldown_blocks=self._cooldown_blocks,
        )

    @property
    def policy(self) -> ScalingPolicy:
        return self._policy

    @property
    def is_running(self) -> bool:
        return self._is_running

    def start(self) -> Optional[ScaleTick]:
        """Start ticking. Returns the first tick, one interval from now."""
        self._is_running = True
        self._last_tick_time = self.now
        self._last_tick_arrivals = self._metrics.arrivals
        return self._next_tick()

    def stop(self) -> None:
        self._is_running = False

    def _next_tick(self) -> Optional[ScaleTick]:
        next_time = self.now + self._interval
        if self._horizon is not None and next_time > self._horizon:
            return None
        return ScaleTick(next_time, self)

    def handle_event(self, event: Event) -> Optional[Event]:
        if isinstance(event, ScaleTick):
            return self._evaluate()
        return None

    def observe(self) -> UtilizationSample:
        """Estimate the job rate since the previous tick and build a sample."""
        now = self.now
        elapsed = (
            (now - self._last_tick_time).to_seconds() if self._last_tick_time is not None else 0.0
        )
        arrivals = self._metrics.arrivals - self._last_tick_arrivals
        job_rate = arrivals / elapsed if elapsed > 0 else 0.0
        capacity = self._pool.active_capacity

        self._last_tick_time = now
        self._last_tick_arrivals = self._metrics.arrivals
        return UtilizationSample(
            time=now.to_seconds(),
            throughput=capacity / self._service_seconds,
            job_rate_estimate=job_rate,
            capacity=capacity,
        )

    def _evaluate(self) -> Optional[ScaleTick]:
        """Run a scaling evaluation cycle."""
        if not self._is_running:
            return None

        self._evaluations += 1
        sample = self.observe()
        self._metrics.record_utilization(sample)

        desired = self._policy.evaluate(
            sample, self._service_seconds, self._min_capacity, self._max_capacity
        )
        if desired > sample.capacity:
            self._try_scale_out(desired - sample.capacity, sample)
        elif desired < sample.capacity:
            self._try_scale_in(sample.capacity - desired, sample)

        return self._next_tick()

    def _in_cooldown(self, direction: int) -> bool:
        """True if ``direction`` would reverse the last action inside the cooldown."""
        if self._last_scale_time is None or direction == self._last_scale_direction:
            return False
        return self.now - self._last_scale_time < self._cooldown

    def _try_scale_out(self, count: int, sample: UtilizationSample) -> None:
        if self._in_cooldown(+1):
            self._cooldown_blocks += 1
            logger.debug("[%s] Scale out by %d blocked by cooldown", self.name, count)
            return

        current = self._pool.active_capacity
        self._pool.add_boxes(count)
        self._metrics.note_capacity()
        self._record("scale_out", current, current + count, sample, f"Added {count} boxes")
        self._scale_out_count += 1
        self._boxes_added += count

    def _try_scale_in(self, count: int, sample: UtilizationSample) -> None:
        if self._in_cooldown(-1):
            self._cooldown_blocks += 1
            logger.debug("[%s] Scale in by %d blocked by cooldown", self.name, count)
            return

        current = self._pool.active_capacity
        count = min(count, current - self._min_capacity)
        if count <= 0:
            return

        result = self._pool.remove_boxes(count)
        self._record(
            "scale_in",
            current,
            current - result.count,
            sample,
            f"Removed {len(result.removed)} idle boxes, draining {len(result.draining)}",
        )
        self._scale_in_count += 1
        self._boxes_removed += result.count

    def _record(
        self, action: str, from_count: int, to_count: int, sample: UtilizationSample, reason: str
    ) -> None:
        self._last_scale_time = self.now
        self._last_scale_direction = 1 if action == "scale_out" else -1
        self.scaling_history.append(
            ScalingAction(
                time=self.now.to_seconds(),
                action=action,
                from_count=from_count,
                to_count=to_count,
                utilization=sample.utilization,
                reason=reason,
            )
        )
        logger.info(
            "[%s] %s: %d -> %d (utilization=%.3f, %s)",
            self.name,
            action.replace("_", " ").capitalize(),
            from_count,
            to_count,
            sample.utilization,
            reason,
        )
