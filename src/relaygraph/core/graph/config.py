"""Configuration for compiled graphs."""

from pydantic import BaseModel, Field

from relaygraph.core.logging import RelayLoggingConfig

DEFAULT_MAX_ITERATIONS = 100


class GraphConfig(BaseModel):
    """
    Settings applied when a StateGraph is compiled.

    Attributes:
        max_iterations: Visits allowed per run, START included, before the run
            is aborted as runaway
        collect_history: Keep a snapshot of each finished run's execution
            context on the compiled graph
        history_limit: Number of run snapshots kept when collecting history
        logging: Controls how much of each run is logged
    """
    max_iterations: int = Field(default=DEFAULT_MAX_ITERATIONS, ge=1)
    collect_history: bool = Field(default=False)
    history_limit: int = Field(default=50, ge=1)
    logging: RelayLoggingConfig = Field(default_factory=RelayLoggingConfig)
