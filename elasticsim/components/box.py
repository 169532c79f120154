"""A single unit of processing capacity.

Each box runs an explicit three-state machine:

    IDLE --assign--> BUSY --finish--> IDLE
                     BUSY --drain---> DRAINING --finish--> (removed by pool)

An idle box that is scaled down is removed directly by the pool and never
enters DRAINING. A draining box never accepts another job.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Optional

from elasticsim.errors import BoxStateError

if TYPE_CHECKING:
    from elasticsim.core.temporal import Instant
    from elasticsim.load.job_source import Job


class BoxState(Enum):
    IDLE = "idle"
    BUSY = "busy"
    DRAINING = "draining"


class Box:
    __slots__ = ("busy_since", "id", "job", "state")

    def __init__(self, box_id: int):
        self.id = box_id
        self.state = BoxState.IDLE
        self.job: Optional[Job] = None
        self.busy_since: Optional[Instant] = None

    @property
    def finishes_at(self) -> Optional[Instant]:
        """When the current job completes, if the box holds one."""
        if self.job is None or self.busy_since is None:
            return None
        return self.busy_since + self.job.service_duration

    def assign(self, job: Job, now: Instant) -> None:
        if self.state is not BoxState.IDLE:
            raise BoxStateError(f"Box {self.id} is {self.state.value}; cannot take job {job.id}")
        self.state = BoxState.BUSY
        self.job = job
        self.busy_since = now

    def drain(self) -> None:
        if self.state is not BoxState.BUSY:
            raise BoxStateError(f"Box {self.id} is {self.state.value}; only busy boxes drain")
        self.state = BoxState.DRAINING

    def finish(self) -> Job:
        """Give up the current job. A busy box goes idle; a draining box stays draining."""
        if self.job is None:
            raise BoxStateError(f"Box {self.id} is {self.state.value} and holds no job")
        job = self.job
        self.job = None
        self.busy_since = None
        if self.state is BoxState.BUSY:
            self.state = BoxState.IDLE
        return job

    def __repr__(self) -> str:
        held = f", job={self.job.id}" if self.job is not None else ""
        return f"Box({self.id}, {self.state.value}{held})"
