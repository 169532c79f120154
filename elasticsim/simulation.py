"""Simulation: wires the components together and runs the event loop.

Events are processed strictly one at a time in (time, kind, schedule
order). Only one arrival is pending at any moment: after an Arrival is
handled the next job is pulled from the JobSource and scheduled, so the
queue stays small regardless of the horizon.

The run stops at the first of:
- the horizon (events after it are never processed),
- the missed-job count exceeding ``missed_abort_threshold``,
- ``stop()`` being called or the ``stop_when`` predicate returning True.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Optional

from elasticsim.components.auto_scaler import Autoscaler, TargetBand
from elasticsim.components.box_pool import BoxPool
from elasticsim.components.dispatcher import Dispatcher
from elasticsim.config import SimulationConfig
from elasticsim.core.clock import Clock
from elasticsim.core.event import Arrival
from elasticsim.core.event_queue import EventQueue
from elasticsim.core.temporal import Duration
from elasticsim.instrumentation.metrics import MetricsCollector
from elasticsim.instrumentation.summary import SimulationResult
from elasticsim.load.job_source import JobSource
from elasticsim.logging_config import bind_clock

logger = logging.getLogger(__name__)

STOP_HORIZON = "horizon"
STOP_MISSED_THRESHOLD = "missed_threshold"
STOP_REQUESTED = "stopped"


class Simulation:
    """One run of the elastic box-pool model.

    Args:
        config: Validated configuration.
        stop_when: Optional predicate checked after every event; returning
            True stops the run.

    Example:
        result = Simulation(SimulationConfig(job_rate=5, initial_capacity=10)).run()
        print(result.summary)
    """

    def __init__(
        self,
        config: SimulationConfig,
        stop_when: Optional[Callable[[Simulation], bool]] = None,
    ):
        self.config = config
        self._stop_when = stop_when
        self._stop_requested = False
        self._result: Optional[SimulationResult] = None
        self._events_processed = 0

        self.clock = Clock()
        self.queue = EventQueue(self.clock)
        self.horizon = config.end_time

        self.pool = BoxPool(self.clock)
        self.metrics = MetricsCollector(
            name="metrics",
            pool=self.pool,
            service_duration=config.service,
            cost_per_box_per_time=config.cost_per_box_per_time,
            report_interval=Duration.from_seconds(config.report_interval),
            horizon=self.horizon,
        )
        self.dispatcher = Dispatcher("dispatcher", self.pool, self.metrics)
        self.autoscaler: Optional[Autoscaler] = None
        if config.autoscale:
            self.autoscaler = Autoscaler(
                name="autoscaler",
                pool=self.pool,
                metrics=self.metrics,
                service_duration=config.service,
                policy=TargetBand(config.target_low, config.target_mid, config.target_high),
                min_capacity=config.min_capacity,
                max_capacity=config.max_capacity,
                interval=Duration.from_seconds(config.scale_interval),
                cooldown=Duration.from_seconds(config.scale_cooldown),
                horizon=self.horizon,
            )
        self.source = JobSource(
            job_rate=config.profile,
            service_duration=config.service,
            horizon=self.horizon,
            arrival_process=config.arrival_process,
            seed=config.seed,
        )

        for entity in (self.metrics, self.dispatcher, self.autoscaler):
            if entity is not None:
                entity.set_clock(self.clock)

    @property
    def events_processed(self) -> int:
        return self._events_processed

    @property
    def result(self) -> Optional[SimulationResult]:
        return self._result

    def stop(self) -> None:
        """Request a stop after the event currently being processed."""
        self._stop_requested = True

    def _schedule_next_arrival(self) -> None:
        job = self.source.next_job()
        if job is not None:
            self.queue.schedule(Arrival(job.arrival_time, self.dispatcher, job))

    def _bootstrap(self) -> None:
        self.source.reset()
        self.pool.add_boxes(self.config.initial_capacity)
        self.metrics.note_capacity()
        self._schedule_next_arrival()
        ticks = [self.metrics.start()]
        if self.autoscaler is not None:
            ticks.append(self.autoscaler.start())
        self.queue.schedule([tick for tick in ticks if tick is not None])

    def _should_abort(self) -> bool:
        threshold = self.config.missed_abort_threshold
        return threshold is not None and self.metrics.missed > threshold

    def run(self) -> SimulationResult:
        """Run to completion and return the result.

        Raises:
            RuntimeError: If the simulation was already run.
            CausalityError: If an event was scheduled in the past.
            EmptyQueueError: If the queue ran dry before the horizon.
        """
        if self._result is not None:
            raise RuntimeError("Simulation has already been run; build a new one to rerun")

        logger.info(
            "Simulation starting: horizon=%.3f capacity=%d autoscale=%s",
            self.horizon.to_seconds(),
            self.config.initial_capacity,
            self.config.autoscale,
        )
        bind_clock(self.clock)
        try:
            self._bootstrap()
            stop_reason = self._loop()
        finally:
            bind_clock(None)

        self.queue.end()
        if self.autoscaler is not None:
            self.autoscaler.stop()

        end_time = self.clock.now
        if stop_reason == STOP_HORIZON and end_time < self.horizon:
            end_time = self.horizon
            self.clock.update(end_time)

        scaling_history = list(self.autoscaler.scaling_history) if self.autoscaler else []
        summary = self.metrics.finalize(end_time, stop_reason, scale_actions=len(scaling_history))
        self._result = SimulationResult(
            summary=summary,
            samples=list(self.metrics.samples),
            utilization_samples=list(self.metrics.utilization_samples),
            scaling_history=scaling_history,
        )
        logger.info(
            "Simulation finished at %.3f (%s) after %d events",
            end_time.to_seconds(),
            stop_reason,
            self._events_processed,
        )
        return self._result

    def _loop(self) -> str:
        while True:
            upcoming = self.queue.peek()
            if upcoming is None and self.clock.now >= self.horizon:
                return STOP_HORIZON
            if upcoming is not None and upcoming.time > self.horizon:
                return STOP_HORIZON

            event = self.queue.next()
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("Processing %s", event.describe())
            self.queue.schedule(event.invoke())
            self._events_processed += 1

            if isinstance(event, Arrival):
                self._schedule_next_arrival()

            if self._should_abort():
                logger.warning(
                    "Aborting at %.3f: %d missed jobs exceeds threshold %d",
                    self.clock.now.to_seconds(),
                    self.metrics.missed,
                    self.config.missed_abort_threshold,
                )
                return STOP_MISSED_THRESHOLD
            if self._stop_requested or (self._stop_when is not None and self._stop_when(self)):
                logger.info("Stop requested at %.3f", self.clock.now.to_seconds())
                return STOP_REQUESTED


def run_simulation(config: SimulationConfig, **kwargs) -> SimulationResult:
    """Build and run a Simulation in one call."""
    return Simulation(config, **kwargs).run()
