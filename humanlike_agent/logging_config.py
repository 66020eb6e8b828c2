"""Logging configuration for the behavior core.

Library modules only ever call get_logger(__name__). Handlers are installed
by whoever runs the agent, through setup_logging():
- console handler (INFO and above by default)
- optional file handler with timestamps (DEBUG and above)
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union


ROOT_LOGGER = "humanlike_agent"


def setup_logging(level: int = logging.INFO,
                  log_file: Optional[Union[str, Path]] = None) -> logging.Logger:
    """Configure logging for a new run. Replaces previously installed handlers."""
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter('[%(name)s] %(message)s'))
    logger.addHandler(console_handler)

    # File handler for the full tick narrative (overwrites each run)
    if log_file is not None:
        file_handler = logging.FileHandler(log_file, mode='w')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s [%(name)s] %(levelname)s: %(message)s',
            datefmt='%H:%M:%S'
        ))
        logger.addHandler(file_handler)

    logger.info(f"=== Agent run started: {datetime.now().isoformat()} ===")
    return logger


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """Get a logger inside the package hierarchy."""
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def log_transition(tick: int, old_state: str, new_state: str, **kwargs):
    """Log a behavior state change."""
    logger = logging.getLogger(f"{ROOT_LOGGER}.transitions")
    parts = [f"t={tick}", f"{old_state} -> {new_state}"]
    parts.extend(f"{key}={value}" for key, value in kwargs.items())
    logger.info(" | ".join(parts))


def log_interrupt(tick: int, kind: str, duration: int, **kwargs):
    """Log a panic or hesitation interrupt firing."""
    logger = logging.getLogger(f"{ROOT_LOGGER}.interrupts")
    parts = [f"t={tick}", f"event={kind}", f"duration={duration}"]
    for key, value in kwargs.items():
        if isinstance(value, float):
            value = f"{value:.2f}"
        parts.append(f"{key}={value}")
    logger.debug(" | ".join(parts))


def log_death(tick: int, x: float, deaths: int, confidence: float, caution: float):
    """Log death events for post-mortem analysis."""
    logger = logging.getLogger(ROOT_LOGGER)
    logger.warning(
        f"DEATH t={tick} | x={x:.1f} consecutive_deaths={deaths} "
        f"confidence={confidence:.2f} caution={caution:.2f}"
    )
