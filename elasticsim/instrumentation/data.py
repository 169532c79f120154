"""Timestamped samples with a few aggregations.

Used for the per-job latency series. Samples are stored in append order,
which during a run is also time order.
"""

from __future__ import annotations

from typing import Any

import numpy as np

from elasticsim.core.temporal import Instant


class Data:
    """Container for (time_seconds, value) samples."""

    def __init__(self) -> None:
        self._samples: list[tuple[float, Any]] = []

    def add_stat(self, value: Any, time: Instant) -> None:
        self._samples.append((time.to_seconds(), value))

    @property
    def values(self) -> list[tuple[float, Any]]:
        return self._samples

    def times(self) -> list[float]:
        return [t for t, _ in self._samples]

    def raw_values(self) -> list[float]:
        return [v for _, v in self._samples]

    def between(self, start_s: float, end_s: float) -> Data:
        """Samples with ``start_s <= t < end_s``."""
        result = Data()
        result._samples = [(t, v) for t, v in self._samples if start_s <= t < end_s]
        return result

    def mean(self) -> float:
        if not self._samples:
            return 0.0
        return float(np.mean(self.raw_values()))

    def max(self) -> float:
        if not self._samples:
            return 0.0
        return float(np.max(self.raw_values()))

    def percentile(self, p: float) -> float:
        """Linear-interpolated percentile, ``p`` in [0, 1]."""
        if not self._samples:
            return 0.0
        return float(np.percentile(self.raw_values(), min(max(p, 0.0), 1.0) * 100.0))

    def count(self) -> int:
        return len(self._samples)

    def __len__(self) -> int:
        return len(self._samples)

    def __bool__(self) -> bool:
        return bool(self._samples)
