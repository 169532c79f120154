"""Base class for simulation actors that respond to events.

Entities receive events through handle_event() and return the events they
cause. The simulation injects the shared clock before the run starts.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from elasticsim.core.clock import Clock
    from elasticsim.core.event import Event
    from elasticsim.core.temporal import Instant

logger = logging.getLogger(__name__)


class Entity(ABC):
    """Abstract base class for all simulation actors.

    Attributes:
        name: Identifier for logging and debugging.
    """

    def __init__(self, name: str):
        self.name = name
        self._clock: Clock | None = None

    def set_clock(self, clock: Clock) -> None:
        """Inject the simulation clock. Called automatically during setup."""
        self._clock = clock
        logger.debug("[%s] Clock injected", self.name)

    @property
    def now(self) -> Instant:
        """Current simulation time from the injected clock.

        Raises:
            RuntimeError: If accessed before clock injection.
        """
        if self._clock is None:
            logger.error("[%s] Attempted to access time before clock injection", self.name)
            raise RuntimeError(
                f"Entity {self.name} is not attached to a simulation (Clock is None)."
            )
        return self._clock.now

    @abstractmethod
    def handle_event(self, event: Event) -> Union[list[Event], Event, None]:
        """Process an incoming event and return any resulting events."""
        raise NotImplementedError
