"""Structural parse failures.

Every error aborts the whole parse. ``code`` is the short machine-readable
identifier used in transport; ``str(error)`` is the human-readable detail.
"""

from __future__ import annotations


class ParseError(Exception):
    code = "PARSE_ERROR"

    def to_dict(self) -> dict:
        return {"code": self.code, "message": str(self)}


class BadXlsError(ParseError):
    """The buffer could not be decoded as a workbook."""

    code = "BAD_XLS"

    def __init__(self, error: Exception):
        super().__init__(f"{error!r}: Failed to read XLS file.")
        self.error = error


class NoWorkSheetsError(ParseError):
    code = "NO_WORK_SHEETS"

    def __init__(self):
        super().__init__("No work sheets found.")


class UnknownWorkSheetRangeError(ParseError):
    code = "UNKNOWN_WORK_SHEET_RANGE"

    def __init__(self):
        super().__init__("There is no data on work sheet boundaries.")


class NoDayDatesError(ParseError):
    """None of the weekday markers carries a readable date."""

    code = "NO_DAY_DATES"

    def __init__(self):
        super().__init__("No weekday marker has a readable date.")


class LessonBoundariesError(ParseError):
    """A cell of the lesson-time column does not read as ``H.MM-H.MM``."""

    code = "GLOBAL_TIME"

    def __init__(self, row: int, column: int, data: str):
        super().__init__(
            f"Failed to read lesson start and end from '{data}' at row {row}, column {column}."
        )
        self.row = row
        self.column = column
        self.data = data


class LessonTimeNotFoundError(ParseError):
    """No slot of the day ends on the same row as the lesson cell."""

    code = "LESSON_TIME_NOT_FOUND"

    def __init__(self, row: int, column: int):
        super().__init__(
            f"No start and end times matching the lesson (at row {row}, column {column}) was found."
        )
        self.row = row
        self.column = column
