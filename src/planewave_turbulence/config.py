"""
Plane-Wave Turbulence — Configuration
======================================

Central registry of package-wide defaults. Every value can be overridden
through an environment variable so that batch jobs do not have to thread
options through every call:

=====================  ===========================  ====================
Variable               Meaning                      Default
=====================  ===========================  ====================
PWTURB_STRATEGY        auto | reference |           auto
                       accelerated
PWTURB_CHUNK_SIZE      positions per evaluation     4096
                       chunk in ``get_fields``
PWTURB_OUTPUT_DIR      directory for figures        current directory
PWTURB_LOG_LEVEL       logging level name           INFO
=====================  ===========================  ====================

Values are read once at import time. Code that needs a different value
for a single object passes it explicitly (e.g. ``strategy=``).
"""

from __future__ import annotations

import logging
import os

from .errors import ConfigError

_STRATEGY_NAMES = ('auto', 'reference', 'accelerated')


def _read_strategy() -> str:
    name = os.environ.get('PWTURB_STRATEGY', 'auto').strip().lower()
    if name not in _STRATEGY_NAMES:
        raise ConfigError(
            f"PWTURB_STRATEGY={name!r} is not one of {_STRATEGY_NAMES}")
    return name


def _read_chunk_size() -> int:
    raw = os.environ.get('PWTURB_CHUNK_SIZE', '4096')
    try:
        size = int(raw)
    except ValueError as exc:
        raise ConfigError(f"PWTURB_CHUNK_SIZE={raw!r} is not an integer") from exc
    if size < 1:
        raise ConfigError(f"PWTURB_CHUNK_SIZE must be >= 1, got {size}")
    return size


def _read_log_level() -> int:
    name = os.environ.get('PWTURB_LOG_LEVEL', 'INFO').strip().upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise ConfigError(f"PWTURB_LOG_LEVEL={name!r} is not a logging level")
    return level


DEFAULT_STRATEGY: str = _read_strategy()
CHUNK_SIZE: int = _read_chunk_size()
OUTPUT_DIR: str = os.environ.get('PWTURB_OUTPUT_DIR', os.getcwd())
LOG_LEVEL: int = _read_log_level()
