"""
Plane-Wave Turbulence — Logging Setup
======================================

Library modules only call ``logging.getLogger(__name__)`` and never attach
handlers themselves.  ``setup_logging`` is for applications: the
command-line entry point calls it once, batch scripts may do the same.

What gets logged
----------------
INFO     field construction (modes, type, seed actually used, strategy)
DEBUG    mode-grid range, accelerated-kernel availability
WARNING  accelerated strategy requested but unavailable
ERROR    failed field reads absorbed by ``field_access.sample_field``
"""
import logging
import sys
from typing import Optional, TextIO, Union

from . import config
from .errors import ConfigError

PACKAGE_LOGGER = "planewave_turbulence"

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%H:%M:%S'

# matplotlib's font manager is chatty at DEBUG while figures are built
_NOISY_LOGGERS = ('matplotlib', 'PIL')


def _resolve_level(level: Union[int, str, None]) -> int:
    if level is None:
        return config.LOG_LEVEL
    if isinstance(level, str):
        resolved = logging.getLevelName(level.strip().upper())
        if not isinstance(resolved, int):
            raise ConfigError(f"Unknown logging level {level!r}")
        return resolved
    return int(level)


def setup_logging(level: Union[int, str, None] = None,
                  log_file: Optional[str] = None,
                  stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Attach console (and optionally file) handlers to the package logger.

    Args:
        level: Level as int or name ('DEBUG', 'info', ...). Defaults to
            ``config.LOG_LEVEL`` (env ``PWTURB_LOG_LEVEL``).
        log_file: Optional path; the log is also written there
            (overwritten on each call).
        stream: Console stream, sys.stdout by default.

    Returns:
        The configured ``planewave_turbulence`` logger.  Calling again
        replaces the handlers instead of duplicating them.
    """
    level = _resolve_level(level)
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers = [logging.StreamHandler(stream if stream is not None else sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='w', encoding='utf-8'))
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logger.debug("Logging to %s at %s", log_file or "console",
                 logging.getLevelName(level))
    return logger
