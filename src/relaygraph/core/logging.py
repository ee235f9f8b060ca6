"""Logging setup for relaygraph.

Each part of the engine logs through its own component logger (see
``LogComponent``), so levels can be tuned per part. Importing the library
configures nothing; applications call ``configure_logging`` once at startup.
"""

import logging
from typing import Optional, Dict, Any
from enum import Enum, IntEnum
from pydantic import BaseModel, Field

VERBOSE = 15
logging.addLevelName(VERBOSE, "VERBOSE")


class Colors:
    """ANSI escapes shared by the console formatter and the examples."""
    DIM = "\033[2m"
    BOLD = "\033[1m"
    INFO = "\033[36m"
    SUCCESS = "\033[32m"
    WARNING = "\033[33m"
    ERROR = "\033[31m"
    RESET = "\033[0m"


PLAIN_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
CONSOLE_FORMAT = "%(asctime)s %(colored_level)s %(component)s: %(message)s"


class LogComponent(str, Enum):
    """Logger names of the engine's parts."""
    GRAPH = "relaygraph.core.graph"
    NODES = "relaygraph.core.graph.nodes"
    EXECUTOR = "relaygraph.core.graph.executor"
    CONTEXT = "relaygraph.core.graph.context"
    WORKFLOW = "relaygraph.core.workflow"


class LogLevel(IntEnum):
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


class VerbosityLevel(IntEnum):
    """Levels for per-node chatter; VERBOSE sits between DEBUG and INFO."""
    DEBUG = logging.DEBUG
    VERBOSE = VERBOSE
    INFO = logging.INFO
    WARNING = logging.WARNING


class PrettyFormatter(logging.Formatter):
    """Colours the level name and shows only the last part of the logger name."""

    level_colors = {
        logging.DEBUG: Colors.DIM,
        VERBOSE: Colors.DIM,
        logging.WARNING: Colors.WARNING,
        logging.ERROR: Colors.ERROR,
        logging.CRITICAL: Colors.BOLD + Colors.ERROR,
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.level_colors.get(record.levelno, Colors.INFO)
        record.colored_level = f"{color}{record.levelname:<8}{Colors.RESET}"
        record.component = record.name.rsplit(".", 1)[-1]
        return super().format(record)


class RelayLoggingConfig(BaseModel):
    """How much of a run the executor reports.

    Attributes:
        level: Level of the per-node "Executing node" line.
        show_node_transitions: Log each hop at INFO instead of DEBUG.
        show_state_updates: Dump the merged update of every node at DEBUG.
    """
    level: VerbosityLevel = Field(default=VerbosityLevel.INFO)
    show_node_transitions: bool = Field(default=False)
    show_state_updates: bool = Field(default=False)


def configure_logging(
    default_level: LogLevel = LogLevel.INFO,
    component_levels: Optional[Dict[LogComponent, LogLevel]] = None,
    pretty: bool = True,
    log_file: Optional[str] = None
) -> None:
    """Replace the root handlers with a console handler and an optional file.

    Args:
        default_level: Level of the root logger and of every component
            not listed in ``component_levels``
        component_levels: Per-component overrides
        pretty: Coloured console output; plain text otherwise
        log_file: Path of an additional uncoloured log file
    """
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    console = logging.StreamHandler()
    if pretty:
        console.setFormatter(PrettyFormatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
    else:
        console.setFormatter(logging.Formatter(PLAIN_FORMAT))
    root.addHandler(console)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
        root.addHandler(file_handler)

    root.setLevel(default_level)
    overrides = component_levels or {}
    for component in LogComponent:
        set_component_level(component, overrides.get(component, default_level))


def get_logger(component: LogComponent) -> logging.Logger:
    return logging.getLogger(component.value)


def set_component_level(component: LogComponent, level: LogLevel) -> None:
    logging.getLogger(component.value).setLevel(level)


def log_verbose(logger: logging.Logger, message: str) -> None:
    """Log ``message`` at the VERBOSE level."""
    logger.log(VERBOSE, message)


def log_state(logger: logging.Logger, state: Dict[str, Any], prefix: str = "") -> None:
    """Log a state mapping one key per line at DEBUG, indenting nested dicts."""
    for key, value in state.items():
        if isinstance(value, dict):
            logger.debug(f"{prefix}{key}:")
            log_state(logger, value, prefix + "  ")
        else:
            logger.debug(f"{prefix}{key}: {value}")
