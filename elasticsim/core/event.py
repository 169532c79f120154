"""Event types that drive the simulation forward.

Each event happens at a specific instant and targets the entity that
handles it. Events at the same instant are ordered by kind so that
capacity frees up before new demand is evaluated:

    COMPLETION < ARRIVAL < SCALE_TICK < REPORT_TICK

Events of the same kind at the same instant keep the order in which they
were scheduled (FIFO), using a sequence number assigned by the EventQueue.
"""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import TYPE_CHECKING, Any, Optional

from elasticsim.core.temporal import Instant

if TYPE_CHECKING:
    from elasticsim.core.entity import Entity
    from elasticsim.load.job_source import Job

logger = logging.getLogger(__name__)


class EventKind(IntEnum):
    """Event kinds; the integer value is the tie-break priority."""

    COMPLETION = 0
    ARRIVAL = 1
    SCALE_TICK = 2
    REPORT_TICK = 3


class Event:
    """The fundamental unit of simulation work.

    Attributes:
        time: When this event should be processed.
        kind: Which variant this is; also its tie-break priority.
        target: Entity whose ``handle_event`` processes the event.
    """

    __slots__ = ("_sequence", "kind", "target", "time")

    kind_default: EventKind

    def __init__(self, time: Instant, target: Optional["Entity"], kind: EventKind | None = None):
        if target is None:
            raise ValueError(f"{type(self).__name__} must have a 'target'.")
        self.time = time
        self.target = target
        self.kind = kind if kind is not None else self.kind_default
        self._sequence: int | None = None

    def invoke(self) -> list[Event]:
        """Dispatch to the target entity and normalize its reaction."""
        result = self.target.handle_event(self)
        if result is None:
            return []
        if isinstance(result, Event):
            return [result]
        return list(result)

    def sort_key(self) -> tuple[int, int, int]:
        seq = self._sequence if self._sequence is not None else -1
        return (self.time.nanoseconds, int(self.kind), seq)

    def __lt__(self, other: Event) -> bool:
        return self.sort_key() < other.sort_key()

    def describe(self) -> dict[str, Any]:
        return {"time": self.time.to_seconds(), "kind": self.kind.name}

    def __repr__(self) -> str:
        target_name = getattr(self.target, "name", None) or type(self.target).__name__
        return f"{type(self).__name__}({self.time!r}, target={target_name})"


class Arrival(Event):
    """A job shows up and needs a box."""

    __slots__ = ("job",)

    kind_default = EventKind.ARRIVAL

    def __init__(self, time: Instant, target: "Entity", job: "Job"):
        super().__init__(time, target)
        self.job = job

    def describe(self) -> dict[str, Any]:
        return {**super().describe(), "job_id": self.job.id}


class Completion(Event):
    """A box finished serving its job."""

    __slots__ = ("box_id", "job")

    kind_default = EventKind.COMPLETION

    def __init__(self, time: Instant, target: "Entity", box_id: int, job: "Job"):
        super().__init__(time, target)
        self.box_id = box_id
        self.job = job

    def describe(self) -> dict[str, Any]:
        return {**super().describe(), "box_id": self.box_id, "job_id": self.job.id}


class ScaleTick(Event):
    """Periodic autoscaler evaluation."""

    __slots__ = ()

    kind_default = EventKind.SCALE_TICK


class ReportTick(Event):
    """Periodic metrics sampling; runs after everything else at its instant."""

    __slots__ = ()

    kind_default = EventKind.REPORT_TICK
