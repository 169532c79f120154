"""Simulation actors: boxes, the pool that owns them, and their controllers."""

from elasticsim.components.auto_scaler import (
    Autoscaler,
    AutoscalerStats,
    ScalingAction,
    ScalingPolicy,
    TargetBand,
)
from elasticsim.components.box import Box, BoxState
from elasticsim.components.box_pool import BoxPool, CapacityLedger, RemovalResult
from elasticsim.components.dispatcher import Dispatcher

__all__ = [
    "Autoscaler",
    "AutoscalerStats",
    "Box",
    "BoxPool",
    "BoxState",
    "CapacityLedger",
    "Dispatcher",
    "RemovalResult",
    "ScalingAction",
    "ScalingPolicy",
    "TargetBand",
]
