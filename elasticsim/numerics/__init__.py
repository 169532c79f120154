"""Numerical methods used to turn rate profiles into arrival times."""

from elasticsim.numerics.integration import integrate_adaptive_simpson
from elasticsim.numerics.root_finding import RootResult, find_root

__all__ = [
    "RootResult",
    "find_root",
    "integrate_adaptive_simpson",
]
