"""Materialize records into quoted CSV text and offer it as a file download."""

from csvexport.config.dialect import CsvDialect
from csvexport.config.profile import ExportProfile, load_export_profile
from csvexport.domain.rules import (
    MISSING,
    ConstantValue,
    DerivedValue,
    Rules,
    static_rule,
)
from csvexport.errors import CsvExportError, CsvSerializationError, DuplicateLabelError
from csvexport.io.escaping import escape, sanitize_csv_value
from csvexport.io.hosts import LocalHost
from csvexport.io.materialize import build_label_index, generate, resolve_cell
from csvexport.io.protocols import HostEnvironment
from csvexport.io.transport import download

__all__ = [
    "MISSING",
    "ConstantValue",
    "CsvDialect",
    "CsvExportError",
    "CsvSerializationError",
    "DerivedValue",
    "DuplicateLabelError",
    "ExportProfile",
    "HostEnvironment",
    "LocalHost",
    "Rules",
    "build_label_index",
    "download",
    "escape",
    "generate",
    "load_export_profile",
    "resolve_cell",
    "sanitize_csv_value",
    "static_rule",
]
