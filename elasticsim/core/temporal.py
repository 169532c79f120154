"""Simulation time types.

Time is stored as integer nanoseconds so that event ordering, tie
detection and the capacity integral are exact. ``Instant`` is a point on
the simulation timeline; ``Duration`` is the distance between two points.
"""

from __future__ import annotations

from functools import total_ordering
from typing import Union

_NANOS_PER_SECOND = 1_000_000_000


def _to_nanos(seconds: Union[int, float]) -> int:
    if isinstance(seconds, int):
        return seconds * _NANOS_PER_SECOND
    return int(round(seconds * _NANOS_PER_SECOND))


@total_ordering
class Duration:
    """A span of simulation time."""

    __slots__ = ("nanoseconds",)

    def __init__(self, nanoseconds: int):
        self.nanoseconds = int(nanoseconds)

    @classmethod
    def from_seconds(cls, seconds: Union[int, float]) -> Duration:
        return cls(_to_nanos(seconds))

    def to_seconds(self) -> float:
        return self.nanoseconds / _NANOS_PER_SECOND

    def __add__(self, other):
        if isinstance(other, Duration):
            return Duration(self.nanoseconds + other.nanoseconds)
        if isinstance(other, Instant):
            return Instant(self.nanoseconds + other.nanoseconds)
        return NotImplemented

    def __sub__(self, other):
        if isinstance(other, Duration):
            return Duration(self.nanoseconds - other.nanoseconds)
        return NotImplemented

    def __mul__(self, factor: int) -> Duration:
        if isinstance(factor, int):
            return Duration(self.nanoseconds * factor)
        return NotImplemented

    __rmul__ = __mul__

    def __eq__(self, other):
        if not isinstance(other, Duration):
            return NotImplemented
        return self.nanoseconds == other.nanoseconds

    def __lt__(self, other):
        if not isinstance(other, Duration):
            return NotImplemented
        return self.nanoseconds < other.nanoseconds

    def __hash__(self):
        return hash(("Duration", self.nanoseconds))

    def __bool__(self):
        return self.nanoseconds != 0

    def __repr__(self):
        return f"Duration({self.to_seconds():g}s)"


@total_ordering
class Instant:
    """A point on the simulation timeline."""

    __slots__ = ("nanoseconds",)

    Epoch: Instant

    def __init__(self, nanoseconds: int):
        self.nanoseconds = int(nanoseconds)

    @classmethod
    def from_seconds(cls, seconds: Union[int, float]) -> Instant:
        return cls(_to_nanos(seconds))

    def to_seconds(self) -> float:
        return self.nanoseconds / _NANOS_PER_SECOND

    def __add__(self, other: Duration) -> Instant:
        if isinstance(other, Duration):
            return Instant(self.nanoseconds + other.nanoseconds)
        return NotImplemented

    def __sub__(self, other):
        if isinstance(other, Instant):
            return Duration(self.nanoseconds - other.nanoseconds)
        if isinstance(other, Duration):
            return Instant(self.nanoseconds - other.nanoseconds)
        return NotImplemented

    def __eq__(self, other):
        if not isinstance(other, Instant):
            return NotImplemented
        return self.nanoseconds == other.nanoseconds

    def __lt__(self, other):
        if not isinstance(other, Instant):
            return NotImplemented
        return self.nanoseconds < other.nanoseconds

    def __hash__(self):
        return hash(("Instant", self.nanoseconds))

    def __repr__(self):
        return f"Instant({self.to_seconds():g}s)"


Instant.Epoch = Instant(0)
