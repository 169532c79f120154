"""Core simulation engine components."""

from elasticsim.core.clock import Clock
from elasticsim.core.entity import Entity
from elasticsim.core.event import Arrival, Completion, Event, EventKind, ReportTick, ScaleTick
from elasticsim.core.event_queue import EventQueue
from elasticsim.core.temporal import Duration, Instant

__all__ = [
    "Arrival",
    "Clock",
    "Completion",
    "Duration",
    "Entity",
    "Event",
    "EventKind",
    "EventQueue",
    "Instant",
    "ReportTick",
    "ScaleTick",
]
