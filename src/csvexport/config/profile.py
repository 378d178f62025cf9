from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Mapping, Optional, Sequence

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from csvexport.config.dialect import CsvDialect
from csvexport.domain.rules import Formatter, Row, Rules
from csvexport.io.materialize import build_label_index, generate
from csvexport.io.transport import DEFAULT_FILE_NAME


class ExportProfile(BaseModel):
    """Declarative description of one CSV export.

    ``headers`` defaults to the mapped labels in mapping order. ``static``
    holds constant fallbacks only; derived values and formatters are code and
    are supplied through ``rules()``/``render()``.
    """

    field_labels: dict[str, str] = Field(default_factory=dict)
    headers: list[str] = Field(default_factory=list)
    static: dict[str, Any] = Field(default_factory=dict)
    dialect: CsvDialect = Field(default_factory=CsvDialect)
    file_name: Optional[str] = Field(default=None, description="DOWNLOAD FILE NAME")
    on_duplicate_label: Literal["last", "error"] = "last"
    log_level: Optional[str] = Field(default=None, description="DEFAULT LOG LEVEL")

    @field_validator("file_name", "log_level", mode="before")
    @classmethod
    def _normalize(cls, value: object):
        if value is None:
            return None
        if isinstance(value, str):
            text = value.strip()
            return text if text else None
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: Optional[str]):
        return value.upper() if value else value

    @field_validator("on_duplicate_label", mode="before")
    @classmethod
    def _normalize_policy(cls, value: object):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @model_validator(mode="after")
    def _default_headers(self) -> "ExportProfile":
        if not self.headers:
            seen: list[str] = []
            for label in self.field_labels.values():
                if label not in seen:
                    seen.append(label)
            self.headers = seen
        if not self.headers:
            raise ValueError("export profile needs headers or field_labels")
        build_label_index(self.field_labels, on_duplicate_label=self.on_duplicate_label)
        return self

    @property
    def download_name(self) -> str:
        return self.file_name or DEFAULT_FILE_NAME

    def rules(
        self,
        *,
        derived: Mapping[str, Any] | None = None,
        formatters: Mapping[str, Formatter] | None = None,
    ) -> Rules:
        """Constants from the profile, overridden by code-supplied entries."""
        base = Rules.build(static_by_header=self.static)
        extra = Rules.build(static_by_header=derived, format_by_header=formatters)
        return base.merged(extra)

    def render(
        self,
        rows: Sequence[Row],
        *,
        derived: Mapping[str, Any] | None = None,
        formatters: Mapping[str, Formatter] | None = None,
    ) -> str:
        return generate(
            rows,
            self.field_labels,
            self.headers,
            self.rules(derived=derived, formatters=formatters),
            dialect=self.dialect,
            on_duplicate_label=self.on_duplicate_label,
        )


def load_export_profile(path: Path) -> ExportProfile:
    """Read an export profile from YAML; an empty file is an empty mapping."""
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except FileNotFoundError as exc:
        raise FileNotFoundError(f"Export profile not found: {path}") from exc
    except yaml.YAMLError as exc:
        raise ValueError(f"Export profile {path} is not valid YAML: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise TypeError(
            f"Export profile {path} must be a mapping with field_labels/headers, "
            f"got {type(data).__name__}"
        )
    return ExportProfile.model_validate(data)
