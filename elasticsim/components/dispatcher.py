"""Matches arriving jobs to idle boxes.

There is no queue: a job that finds every box occupied is missed, which is
a terminal outcome recorded by the MetricsCollector, not an error.
"""

import logging
from typing import Optional

from elasticsim.components.box_pool import BoxPool
from elasticsim.core.entity import Entity
from elasticsim.core.event import Arrival, Completion, Event
from elasticsim.instrumentation.metrics import MetricsCollector

logger = logging.getLogger(__name__)


class Dispatcher(Entity):
    def __init__(self, name: str, pool: BoxPool, metrics: MetricsCollector):
        super().__init__(name)
        self._pool = pool
        self._metrics = metrics

    def handle_event(self, event: Event) -> Optional[Event]:
        if isinstance(event, Arrival):
            return self._on_arrival(event)
        if isinstance(event, Completion):
            self._on_completion(event)
            return None
        logger.warning("[%s] Ignoring unexpected event %r", self.name, event)
        return None

    def _on_arrival(self, event: Arrival) -> Optional[Completion]:
        job = event.job
        self._metrics.record_arrival(job)

        box = self._pool.try_acquire_idle(job)
        if box is None:
            self._metrics.record_missed(job)
            logger.debug("[%s] Job %d missed: no idle box", self.name, job.id)
            return None

        self._metrics.record_started(job, box.id)
        logger.debug("[%s] Job %d -> box %d", self.name, job.id, box.id)
        return Completion(self.now + job.service_duration, self, box_id=box.id, job=job)

    def _on_completion(self, event: Completion) -> None:
        removed = self._pool.release(event.box_id)
        self._metrics.record_completion(event.job, self.now - event.job.arrival_time)
        if removed:
            logger.debug("[%s] Box %d finished job %d and left the pool", self.name, event.box_id, event.job.id)
