from elasticsim.core.temporal import Instant
from elasticsim.errors import CausalityError


class Clock:
    """Shared simulation clock. Only moves forward."""

    def __init__(self, start_time: Instant = Instant.Epoch):
        self._current_time = start_time

    @property
    def now(self) -> Instant:
        return self._current_time

    def update(self, time: Instant) -> None:
        if time < self._current_time:
            raise CausalityError(
                f"Clock cannot move backwards from {self._current_time!r} to {time!r}"
            )
        self._current_time = time
