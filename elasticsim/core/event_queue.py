import heapq
import logging
from itertools import count
from typing import Iterable, Optional, Union

from elasticsim.core.clock import Clock
from elasticsim.core.event import Event
from elasticsim.errors import CausalityError, EmptyQueueError

logger = logging.getLogger(__name__)


class EventQueue:
    """Time-ordered event heap bound to the simulation clock.

    Events compare by (time, kind priority, schedule order), so the heap
    stores them directly. Popping an event advances the clock to its time.
    """

    def __init__(self, clock: Optional[Clock] = None):
        self._clock = clock if clock is not None else Clock()
        self._heap: list[Event] = []
        self._sequence = count()
        self._ended = False

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def ended(self) -> bool:
        return self._ended

    def schedule(self, events: Union[Event, Iterable[Event]]) -> None:
        """Push one event or several.

        Raises:
            CausalityError: If an event is timestamped before the current time.
        """
        if isinstance(events, Event):
            events = [events]
        now = self._clock.now
        for event in events:
            if event.time < now:
                logger.error("Rejected %r scheduled before now=%r", event, now)
                raise CausalityError(
                    f"{event!r} is scheduled at {event.time!r}, before the current time {now!r}"
                )
            event._sequence = next(self._sequence)
            heapq.heappush(self._heap, event)

    def next(self) -> Optional[Event]:
        """Pop the earliest event and advance the clock to it.

        Returns None only when the queue is empty and has been ended.

        Raises:
            EmptyQueueError: If no events are pending and the queue was not ended.
        """
        if not self._heap:
            if self._ended:
                return None
            raise EmptyQueueError(f"No pending events at {self._clock.now!r}")
        event = heapq.heappop(self._heap)
        self._clock.update(event.time)
        return event

    def peek(self) -> Optional[Event]:
        return self._heap[0] if self._heap else None

    def end(self) -> None:
        """Mark the run as explicitly over; draining the queue is then legal."""
        self._ended = True

    def has_events(self) -> bool:
        return bool(self._heap)

    def size(self) -> int:
        return len(self._heap)

    def __len__(self) -> int:
        return len(self._heap)
