"""Fatal import errors.

Every error here aborts the whole import; the stored collection is never
touched when one is raised. Messages are meant to be shown to the user as-is.
"""

from __future__ import annotations

from collections.abc import Sequence


class CsvImportError(ValueError):
    """Base class for errors that abort an import."""


class EmptyFileError(CsvImportError):
    def __init__(self, message: str = "The CSV file contains no data rows.") -> None:
        super().__init__(message)


class MissingColumnsError(CsvImportError):
    """The header row lacks an alias for a mandatory logical field."""

    def __init__(self, missing: Sequence[str], header: Sequence[str]) -> None:
        self.missing = tuple(missing)
        self.header = tuple(header)
        super().__init__(
            "Could not locate required columns in the header row: "
            + ", ".join(self.missing)
            + ". Please check the CSV file."
        )


class AmountParseError(CsvImportError):
    """An amount cell could not be read as a finite number.

    ``row_number`` is 1-based and counts the header line, so it matches the
    line a user sees when opening the file in a spreadsheet.
    """

    def __init__(self, row_number: int, raw_value: str) -> None:
        self.row_number = row_number
        self.raw_value = raw_value
        super().__init__(f"Amount in row {row_number} could not be read: {raw_value!r}")


class ImportSupersededError(CsvImportError):
    """A newer import started before this one finished."""

    def __init__(self, ticket: int, current: int) -> None:
        self.ticket = ticket
        self.current = current
        super().__init__(f"import #{ticket} was superseded by import #{current}")


__all__ = [
    "CsvImportError",
    "EmptyFileError",
    "MissingColumnsError",
    "AmountParseError",
    "ImportSupersededError",
]
