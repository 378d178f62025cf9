class CsvExportError(Exception):
    """Base class for errors raised by csvexport."""


class DuplicateLabelError(CsvExportError, ValueError):
    """Raised when two field keys share a header label and collisions are rejected."""

    def __init__(self, label: str, first_key: str, second_key: str) -> None:
        self.label = label
        self.first_key = first_key
        self.second_key = second_key
        super().__init__(
            f"Header label {label!r} is mapped by both {first_key!r} and {second_key!r}"
        )


class CsvSerializationError(CsvExportError, ValueError):
    """Raised when a cell value cannot be converted into printable text."""

    def __init__(self, label: str, row_index: int, cause: Exception) -> None:
        self.label = label
        self.row_index = row_index
        super().__init__(
            f"Cannot serialize value for header {label!r} in row {row_index}: {cause}"
        )
