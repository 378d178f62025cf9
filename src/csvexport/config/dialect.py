from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

LINE_SEPARATORS = ("\n", "\r\n")
_SEPARATOR_ALIASES = {"lf": "\n", "crlf": "\r\n", "\\n": "\n", "\\r\\n": "\r\n"}


class CsvDialect(BaseModel):
    """Delimiter and line separator for generated CSV text."""

    model_config = ConfigDict(frozen=True)

    delimiter: str = ","
    line_separator: str = "\n"

    @field_validator("delimiter", mode="before")
    @classmethod
    def _validate_delimiter(cls, value: object):
        if value is None:
            return ","
        text = str(value)
        if len(text) != 1:
            raise ValueError(f"delimiter must be a single character, got {value!r}")
        if text == '"':
            raise ValueError("delimiter cannot be the quote character")
        return text

    @field_validator("line_separator", mode="before")
    @classmethod
    def _normalize_line_separator(cls, value: object):
        if value is None:
            return "\n"
        text = str(value)
        text = _SEPARATOR_ALIASES.get(text.strip().lower(), text)
        if text not in LINE_SEPARATORS:
            raise ValueError(
                f"line_separator must be LF or CRLF, got {value!r}"
            )
        return text


DEFAULT_DIALECT = CsvDialect()
