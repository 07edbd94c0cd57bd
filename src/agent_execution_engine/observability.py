"""Logging setup for the agent execution engine."""

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = "INFO", log_file: Path | None = None) -> None:
    """
    Configure root logging for the engine.

    Args:
        level: Logging level name
        log_file: Optional file that receives a copy of every record
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, handlers=handlers, force=True)
    logging.getLogger(__name__).debug("Logging configured at %s", level.upper())
