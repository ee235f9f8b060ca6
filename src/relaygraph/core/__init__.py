"""Core modules for relaygraph."""

from relaygraph.core.errors import GraphError, ConfigurationError, RunawayExecutionError
from relaygraph.core.logging import configure_logging, LogLevel, LogComponent

__all__ = [
    'GraphError',
    'ConfigurationError',
    'RunawayExecutionError',
    'configure_logging',
    'LogLevel',
    'LogComponent'
]
