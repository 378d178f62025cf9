"""Row materialization: resolve every (row, header) pair into an escaped CSV cell.

Resolution order per cell:
1. field lookup through the label -> field-key index
2. static fallback, only when the field value is missing (``None`` is a value)
3. ``None``/missing becomes ``""``
4. per-header formatter
5. printable coercion (containers to JSON, scalars untouched)
6. escaping
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, is_dataclass
from datetime import date, time
from decimal import Decimal
from typing import Any, Literal, Mapping, Sequence

from csvexport.config.dialect import DEFAULT_DIALECT, CsvDialect
from csvexport.domain.rules import MISSING, Row, Rules
from csvexport.errors import CsvSerializationError, DuplicateLabelError
from csvexport.io.escaping import escape

logger = logging.getLogger(__name__)

DuplicatePolicy = Literal["last", "error"]

_EMPTY_RULES = Rules()
_SCALARS = (str, int, float, date, time, Decimal)


def build_label_index(
    field_label_map: Mapping[str, str],
    *,
    on_duplicate_label: DuplicatePolicy = "last",
) -> dict[str, str]:
    """Reverse ``field -> label`` into ``label -> field``.

    When two fields share a label the one seen last while iterating the
    mapping wins, unless ``on_duplicate_label='error'``.
    """
    if on_duplicate_label not in {"last", "error"}:
        raise ValueError("on_duplicate_label must be 'last' or 'error'")
    index: dict[str, str] = {}
    for field_key, label in field_label_map.items():
        previous = index.get(label)
        if previous is not None and previous != field_key:
            if on_duplicate_label == "error":
                raise DuplicateLabelError(label, previous, field_key)
            logger.warning(
                "header label %r mapped by %r and %r; keeping %r",
                label,
                previous,
                field_key,
                field_key,
            )
        index[label] = field_key
    return index


def _json_default(value: Any) -> Any:
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def printable(value: Any) -> Any:
    """Serialize structured values to JSON; scalars pass through unchanged.

    Nested dates become ISO strings and Decimals their string form. Raises
    ``TypeError``/``ValueError`` for values with no JSON form (including NaN
    and circular containers).
    """
    if value is None or isinstance(value, _SCALARS):
        return value
    if is_dataclass(value) and not isinstance(value, type):
        value = asdict(value)
    return json.dumps(
        value,
        ensure_ascii=False,
        allow_nan=False,
        separators=(",", ":"),
        default=_json_default,
    )


def resolve_value(
    row: Row,
    label: str,
    label_index: Mapping[str, str],
    rules: Rules = _EMPTY_RULES,
) -> Any:
    """Field value, else static fallback, else empty string (pre-formatting)."""
    field_key = label_index.get(label)
    value = row.get(field_key, MISSING) if field_key is not None else MISSING

    if value is MISSING:
        rule = rules.static_by_header.get(label)
        if rule is not None:
            value = rule.resolve(row)

    if value is None or value is MISSING:
        value = ""
    return value


def format_value(value: Any, row: Row, label: str, rules: Rules = _EMPTY_RULES) -> Any:
    formatter = rules.format_by_header.get(label)
    if formatter is None:
        return value
    return formatter(value, row)


def resolve_cell(
    row: Row,
    label: str,
    label_index: Mapping[str, str],
    rules: Rules = _EMPTY_RULES,
    *,
    row_index: int = 0,
) -> str:
    """Final escaped text for one cell."""
    value = resolve_value(row, label, label_index, rules)
    value = format_value(value, row, label, rules)
    try:
        value = printable(value)
    except (TypeError, ValueError) as exc:
        raise CsvSerializationError(label, row_index, exc) from exc
    return escape(value)


def generate(
    rows: Sequence[Row],
    field_label_map: Mapping[str, str],
    ordered_header_labels: Sequence[str],
    rules: Rules | None = None,
    *,
    dialect: CsvDialect | None = None,
    on_duplicate_label: DuplicatePolicy = "last",
) -> str:
    """Build CSV text with columns in ``ordered_header_labels`` order.

    The result is the header line, a line separator, then the body lines
    joined by the separator. Nothing trails the last row, so an empty
    ``rows`` yields the header line followed by a single separator.

    Errors from static callables and formatters propagate unchanged; values
    that cannot be JSON serialized raise ``CsvSerializationError``.
    """
    dialect = dialect or DEFAULT_DIALECT
    rules = rules or _EMPTY_RULES
    headers = list(ordered_header_labels)
    label_index = build_label_index(
        field_label_map, on_duplicate_label=on_duplicate_label
    )
    sep = dialect.delimiter

    header_line = sep.join(escape(label) for label in headers)
    body = [
        sep.join(
            resolve_cell(row, label, label_index, rules, row_index=idx)
            for label in headers
        )
        for idx, row in enumerate(rows)
    ]
    logger.debug("generated csv with %d columns and %d rows", len(headers), len(body))
    return f"{header_line}{dialect.line_separator}{dialect.line_separator.join(body)}"
