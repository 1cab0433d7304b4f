"""Logging setup for the netscore engine and its component loggers."""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

# Component loggers, all children of the 'netscore' logger
COMPONENT_LOGGERS = (
    'roster',
    'dedup',
    'aggregation',
    'reconciler',
    'performance',
    'standings',
    'provider',
    'engine',
    'schemas',
    'utils',
)


def setup_logging(
    log_dir: Optional[Path] = None,
    level: int = logging.INFO,
    log_to_file: bool = True,
    log_to_console: bool = True,
    component_levels: Optional[dict[str, int]] = None,
) -> logging.Logger:
    """
    Configure logging for the engine.

    Creates file and console handlers on the 'netscore' logger. Component
    loggers ('netscore.reconciler', 'netscore.dedup', ...) propagate to it.
    Data-quality warnings (dropped stat records, one-sided official scores,
    incomplete rosters) come through at WARNING; source decisions at DEBUG.

    Args:
        log_dir: Directory for log files (default: ./logs)
        level: Logging level (default: INFO)
        log_to_file: Whether to log to file (default: True)
        log_to_console: Whether to log to console (default: True)
        component_levels: Per-component overrides, e.g. {'reconciler': logging.DEBUG}

    Returns:
        Configured logger instance

    Raises:
        ValueError: Unknown component name in component_levels

    Example:
        from netscore.logging_config import setup_logging
        logger = setup_logging(log_to_file=False, component_levels={'reconciler': logging.DEBUG})
        logger.info("Reconciling round 5 scores")
    """
    logger = logging.getLogger('netscore')
    logger.setLevel(level)

    # Clear any existing handlers
    logger.handlers = []

    detailed_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )
    simple_formatter = logging.Formatter('%(levelname)s: %(name)s: %(message)s')

    if log_to_file:
        if log_dir is None:
            log_dir = Path('logs')
        log_dir.mkdir(parents=True, exist_ok=True)

        log_file = log_dir / f'netscore_{datetime.now().strftime("%Y%m%d_%H%M%S")}.log'
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(detailed_formatter)
        logger.addHandler(file_handler)

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(simple_formatter)
        logger.addHandler(console_handler)

    for component, component_level in (component_levels or {}).items():
        if component not in COMPONENT_LOGGERS:
            raise ValueError(
                f'Unknown component {component!r}; expected one of {", ".join(COMPONENT_LOGGERS)}'
            )
        logging.getLogger(f'netscore.{component}').setLevel(component_level)

    return logger


def get_logger(name: str = 'netscore') -> logging.Logger:
    """
    Get a logger instance.

    If setup_logging() hasn't been called, returns an unconfigured logger.

    Args:
        name: Logger name (default: 'netscore')

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
