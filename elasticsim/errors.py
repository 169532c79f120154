"""Error taxonomy for the simulation core.

Only structural violations of the model are errors. Missed jobs and
utilization excursions are ordinary outcomes and are reported through
the MetricsCollector instead.
"""


class SimulationError(Exception):
    """Base class for all elasticsim errors."""


class CausalityError(SimulationError):
    """An event (or ledger update) was placed before the current time.

    Always indicates a logic bug; never retried.
    """


class EmptyQueueError(SimulationError):
    """The event queue ran dry before the simulation was ended."""


class ConfigError(SimulationError, ValueError):
    """Invalid simulation configuration, raised before the run starts."""


class BoxStateError(SimulationError):
    """A box was asked to make a transition its state machine forbids."""


class MetricsFinalizedError(SimulationError):
    """A metric was recorded after the collector was finalized."""
