"""The set of boxes, their lifecycle, and the capacity cost integral.

Capacity (every provisioned box, draining ones included) changes only
through ``add_boxes``, ``remove_boxes`` and the deferred removal of a
draining box when its job completes. Each change first advances the
CapacityLedger, so the ledger holds the exact integral of capacity over
time.

Example:
    pool = BoxPool(clock)
    pool.add_boxes(3)
    box = pool.try_acquire_idle(job)
    pool.remove_boxes(3)   # two idle removed now, the busy one drains
    pool.release(box.id)   # drained box is removed here
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from elasticsim.components.box import Box, BoxState
from elasticsim.core.clock import Clock
from elasticsim.core.temporal import Instant
from elasticsim.errors import BoxStateError, CausalityError

if TYPE_CHECKING:
    from elasticsim.load.job_source import Job

logger = logging.getLogger(__name__)

_NANOS_PER_SECOND = 1_000_000_000


class CapacityLedger:
    """Running integral of capacity x elapsed time, in box-nanoseconds.

    Integer arithmetic keeps the integral exact. The integral never
    decreases; advancing to an earlier time raises CausalityError.
    """

    def __init__(self, start_time: Instant = Instant.Epoch, capacity: int = 0):
        self._last_update = start_time
        self._capacity = capacity
        self._box_nanoseconds = 0
        self.changes: list[tuple[Instant, int]] = [(start_time, capacity)]

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def last_update(self) -> Instant:
        return self._last_update

    @property
    def box_nanoseconds(self) -> int:
        return self._box_nanoseconds

    @property
    def box_time(self) -> float:
        """Integral of capacity over time, in box x seconds."""
        return self._box_nanoseconds / _NANOS_PER_SECOND

    def advance(self, now: Instant) -> None:
        if now < self._last_update:
            raise CausalityError(
                f"Ledger cannot move back from {self._last_update!r} to {now!r}"
            )
        self._box_nanoseconds += self._capacity * (now - self._last_update).nanoseconds
        self._last_update = now

    def set_capacity(self, now: Instant, capacity: int) -> None:
        self.advance(now)
        if capacity != self._capacity:
            self._capacity = capacity
            self.changes.append((now, capacity))

    def cost(self, cost_per_box_per_time: float) -> float:
        return self.box_time * cost_per_box_per_time


@dataclass(frozen=True)
class RemovalResult:
    """Outcome of a scale-down request.

    Attributes:
        removed: Ids of idle boxes removed immediately.
        draining: Ids of busy boxes marked draining; removed at completion.
    """

    removed: tuple[int, ...] = ()
    draining: tuple[int, ...] = ()

    @property
    def count(self) -> int:
        return len(self.removed) + len(self.draining)


class BoxPool:
    """Owns every box and its state.

    Idle boxes are handed out oldest-idle first; scale-down removes the
    most recently idled boxes first, then drains the busy boxes whose jobs
    finish soonest.
    """

    def __init__(self, clock: Clock):
        self._clock = clock
        self._boxes: dict[int, Box] = {}
        self._idle: deque[int] = deque()
        self._busy = 0
        self._draining = 0
        self._next_id = 0
        self._removed_total = 0
        self.ledger = CapacityLedger(clock.now)

    @property
    def now(self) -> Instant:
        return self._clock.now

    @property
    def capacity(self) -> int:
        """Provisioned boxes, draining ones included. This is what costs money."""
        return len(self._boxes)

    @property
    def active_capacity(self) -> int:
        """Boxes that can still take work: idle plus busy."""
        return len(self._boxes) - self._draining

    @property
    def idle_count(self) -> int:
        return len(self._idle)

    @property
    def busy_count(self) -> int:
        return self._busy

    @property
    def draining_count(self) -> int:
        return self._draining

    @property
    def created_total(self) -> int:
        return self._next_id

    @property
    def removed_total(self) -> int:
        return self._removed_total

    def get(self, box_id: int) -> Box:
        try:
            return self._boxes[box_id]
        except KeyError:
            raise BoxStateError(f"Unknown box {box_id}") from None

    def add_boxes(self, n: int) -> list[int]:
        """Create ``n`` idle boxes, effective immediately."""
        if n < 0:
            raise ValueError(f"Cannot add a negative number of boxes: {n}")
        now = self.now
        ids = []
        for _ in range(n):
            box = Box(self._next_id)
            self._next_id += 1
            self._boxes[box.id] = box
            self._idle.append(box.id)
            ids.append(box.id)
        self.ledger.set_capacity(now, self.capacity)
        if n:
            logger.debug("Added %d boxes, capacity=%d", n, self.capacity)
        return ids

    def remove_boxes(self, n: int) -> RemovalResult:
        """Scale down by ``n`` boxes of active capacity.

        Idle boxes go first and disappear immediately. Any shortfall is
        covered by draining busy boxes. The request is clamped to the
        active capacity.
        """
        if n < 0:
            raise ValueError(f"Cannot remove a negative number of boxes: {n}")
        n = min(n, self.active_capacity)
        now = self.now

        removed = []
        while len(removed) < n and self._idle:
            box_id = self._idle.pop()
            del self._boxes[box_id]
            removed.append(box_id)
        self._removed_total += len(removed)

        draining = []
        shortfall = n - len(removed)
        if shortfall:
            busy = sorted(
                (b for b in self._boxes.values() if b.state is BoxState.BUSY),
                key=lambda b: (b.finishes_at.nanoseconds, b.id),
            )
            for box in busy[:shortfall]:
                box.drain()
                self._busy -= 1
                self._draining += 1
                draining.append(box.id)

        self.ledger.set_capacity(now, self.capacity)
        if n:
            logger.debug(
                "Removed %d idle boxes, draining %d, capacity=%d",
                len(removed),
                len(draining),
                self.capacity,
            )
        return RemovalResult(removed=tuple(removed), draining=tuple(draining))

    def try_acquire_idle(self, job: Job) -> Optional[Box]:
        """Hand the job to an idle box, or return None if every box is occupied."""
        if not self._idle:
            return None
        box = self._boxes[self._idle.popleft()]
        box.assign(job, self.now)
        self._busy += 1
        return box

    def release(self, box_id: int) -> bool:
        """Finish the job on a box.

        Returns:
            True if the box was draining and has now been removed.
        """
        box = self.get(box_id)
        box.finish()
        if box.state is BoxState.DRAINING:
            del self._boxes[box_id]
            self._draining -= 1
            self._removed_total += 1
            self.ledger.set_capacity(self.now, self.capacity)
            logger.debug("Box %d drained and removed, capacity=%d", box_id, self.capacity)
            return True
        self._busy -= 1
        self._idle.append(box_id)
        return False
