"""Extract group and teacher timetables from a weekly schedule workbook."""

from .errors import ParseError
from .parser import parse_schedule, parse_worksheet
from .schema import ParsedSchedule

__all__ = ["ParseError", "ParsedSchedule", "parse_schedule", "parse_worksheet"]
