from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Union

Row = Mapping[str, Any]
Formatter = Callable[[Any, Row], Any]


class _Missing:
    """Marker for a value that was never produced (absent key, unmapped label)."""

    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


def is_missing(value: Any) -> bool:
    return value is MISSING


@dataclass(frozen=True)
class ConstantValue:
    """Literal fallback used as-is for every row."""

    value: Any

    def resolve(self, row: Row) -> Any:
        return self.value


@dataclass(frozen=True)
class DerivedValue:
    """Fallback computed from the row being materialized."""

    compute: Callable[[Row], Any]

    def resolve(self, row: Row) -> Any:
        return self.compute(row)


StaticRule = Union[ConstantValue, DerivedValue]


def static_rule(value: Any) -> StaticRule:
    """Wrap a plain value or callable into the matching static rule variant."""
    if isinstance(value, (ConstantValue, DerivedValue)):
        return value
    if callable(value):
        return DerivedValue(compute=value)
    return ConstantValue(value=value)


@dataclass(frozen=True)
class Rules:
    """Per-call static fallbacks and formatters, both keyed by header label.

    - static_by_header: used only when the field-mapped value is missing.
    - format_by_header: ``(value, row) -> str``; runs after value resolution.
    """

    static_by_header: dict[str, StaticRule] = field(default_factory=dict)
    format_by_header: dict[str, Formatter] = field(default_factory=dict)

    def __post_init__(self) -> None:
        statics = {
            label: static_rule(value)
            for label, value in (self.static_by_header or {}).items()
        }
        formats = dict(self.format_by_header or {})
        for label, fmt in formats.items():
            if not callable(fmt):
                raise TypeError(
                    f"formatter for header {label!r} must be callable, got {type(fmt).__name__}"
                )
        object.__setattr__(self, "static_by_header", statics)
        object.__setattr__(self, "format_by_header", formats)

    @classmethod
    def build(
        cls,
        *,
        static_by_header: Mapping[str, Any] | None = None,
        format_by_header: Mapping[str, Formatter] | None = None,
    ) -> "Rules":
        return cls(
            static_by_header=dict(static_by_header or {}),
            format_by_header=dict(format_by_header or {}),
        )

    def merged(self, other: "Rules") -> "Rules":
        """Return new rules where entries from ``other`` win on conflicts."""
        return Rules(
            static_by_header={**self.static_by_header, **other.static_by_header},
            format_by_header={**self.format_by_header, **other.format_by_header},
        )
