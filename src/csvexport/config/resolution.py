from __future__ import annotations

import logging
import os
from typing import Any

LOG_LEVEL_ENV = "CSVEXPORT_LOG_LEVEL"
PACKAGE_LOGGER = "csvexport"


def _level_name(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, int):
        return logging.getLevelName(value)
    text = str(value).strip().upper()
    return text or None


def configure_logging(level: Any = None, *, profile_level: Any = None) -> int:
    """Set the ``csvexport`` logger level and return it.

    First usable value wins: ``level``, ``$CSVEXPORT_LOG_LEVEL``,
    ``profile_level``, then WARNING. Unknown names count as unset.
    """
    value = logging.WARNING
    for candidate in (level, os.environ.get(LOG_LEVEL_ENV), profile_level):
        name = _level_name(candidate)
        if name in logging._nameToLevel:
            value = logging._nameToLevel[name]
            break
    logging.getLogger(PACKAGE_LOGGER).setLevel(value)
    return value
