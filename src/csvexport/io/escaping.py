from datetime import date, datetime, time
from typing import Any

from csvexport.domain.rules import MISSING

QUOTE = '"'
EMPTY_CELL = QUOTE * 2


def cell_text(value: Any) -> str:
    """String form of a scalar, using JSON spelling for booleans."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def escape(value: Any) -> str:
    """Quote a value as a CSV cell; inner quotes are doubled, every cell is quoted."""
    if value is None or value is MISSING:
        return EMPTY_CELL
    text = cell_text(value).replace(QUOTE, QUOTE * 2)
    return f"{QUOTE}{text}{QUOTE}"


sanitize_csv_value = escape
