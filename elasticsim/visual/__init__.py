"""Rendering helpers for simulation results."""

from elasticsim.visual.plots import plot_result

__all__ = ["plot_result"]
