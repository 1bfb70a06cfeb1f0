"""Parse the weekly schedule workbook into per-group and per-teacher weeks."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from .cabinets import assign_cabinets, parse_cabinets
from .config import Settings, get_settings
from .errors import (
    LessonBoundariesError,
    LessonTimeNotFoundError,
    NoDayDatesError,
    UnknownWorkSheetRangeError,
)
from .names import parse_name_and_subgroups
from .schema import (
    Day,
    Lesson,
    LessonBoundaries,
    LessonType,
    ParsedSchedule,
    ScheduleEntry,
)
from .teachers import convert_groups_to_teachers
from .worksheet import CellRange, WorkSheet, load_worksheet

log = logging.getLogger(__name__)

# Cyrillic weekday names that open a day block in column A.
DAY_MARKERS: dict[str, int] = {
    "ПОНЕДЕЛЬНИК": 0,
    "ВТОРНИК": 1,
    "СРЕДА": 2,
    "ЧЕТВЕРГ": 3,
    "ПЯТНИЦА": 4,
    "СУББОТА": 5,
}

DAYS_IN_WEEK = len(DAY_MARKERS)

# Lesson times in the sheet are shifted by this many hours against the
# midnight UTC of the day's date.
BOUNDARY_HOUR_OFFSET = 4

# Time slot like "1 пара 8.00-9.30".
_TIME_RE = re.compile(r"(\d+)\.(\d+)-(\d+)\.(\d+)")

_INDEX_RE = re.compile(r"^(\d)")

# A cell holding an address ("Кирова, 41") instead of a lesson.
_STREET_RE = re.compile(r"^[А-ЯЁ][а-яё]+,?\s?\d+$")


@dataclass(frozen=True)
class GroupMarkup:
    column: int
    name: str


@dataclass(frozen=True)
class DayMarkup:
    row: int
    name: str
    date: datetime
    column: int = 0


@dataclass(frozen=True)
class BoundariesData:
    """One slot of the lesson-time column."""

    time_range: LessonBoundaries
    lesson_type: LessonType
    default_index: Optional[int]
    range: CellRange


@dataclass(frozen=True)
class Street:
    address: str


def _split_day_cell(text: str) -> Optional[tuple[str, Optional[datetime]]]:
    """Weekday name and date of a column-A cell, or None if it is not a day."""
    name, _, date_slice = text.partition(" ")
    if name.upper() not in DAY_MARKERS:
        return None

    try:
        date = datetime.strptime(date_slice.strip(), "%d.%m.%Y").replace(tzinfo=timezone.utc)
    except ValueError:
        date = None
    return name, date


def _fill_dates(dates: list[Optional[datetime]]) -> list[datetime]:
    """Derive unreadable dates from their neighbours."""
    if dates and all(date is None for date in dates):
        raise NoDayDatesError()

    filled = list(dates)
    for i in range(1, len(filled)):
        if filled[i] is None and filled[i - 1] is not None:
            filled[i] = filled[i - 1] + timedelta(days=1)
    for i in range(len(filled) - 2, -1, -1):
        if filled[i] is None and filled[i + 1] is not None:
            filled[i] = filled[i + 1] - timedelta(days=1)
    return filled


def parse_skeleton(worksheet: WorkSheet) -> tuple[list[DayMarkup], list[GroupMarkup]]:
    """Locate the weekday rows and the group columns.

    The group header row is the row right above the first weekday marker.
    """
    if worksheet.start is None or worksheet.end is None:
        raise UnknownWorkSheetRangeError()
    start_row, start_col = worksheet.start
    end_row, end_col = worksheet.end

    groups: list[GroupMarkup] = []
    rows: list[int] = []
    names: list[str] = []
    dates: list[Optional[datetime]] = []

    for row in range(start_row + 1, end_row + 1):
        text = worksheet.cell_text(row, 0)
        if text is None:
            continue

        split = _split_day_cell(text)
        if split is None:
            if rows:
                break
            continue

        if not rows:
            for column in range(start_col + 2, end_col + 1):
                group_name = worksheet.cell_text(row - 1, column)
                if group_name is None:
                    continue
                groups.append(GroupMarkup(column=column, name=group_name.replace(" ", "")))

        rows.append(row)
        names.append(split[0])
        dates.append(split[1])

        if len(rows) == DAYS_IN_WEEK:
            break

    for name, date in zip(names, dates):
        if date is None:
            log.warning("Unreadable date for %s, deriving it from a neighbouring day", name)

    days = [
        DayMarkup(row=row, name=name, date=date)
        for row, name, date in zip(rows, names, _fill_dates(dates))
    ]
    return days, groups


def parse_boundaries_cell(cell_data: str, date: datetime) -> Optional[LessonBoundaries]:
    """Start and end of a slot from its "H.MM-H.MM" text."""
    m = _TIME_RE.search(cell_data)
    if not m:
        return None

    start_h, start_m, end_h, end_m = (int(part) for part in m.groups())
    return LessonBoundaries(
        start=date + timedelta(hours=start_h - BOUNDARY_HOUR_OFFSET, minutes=start_m),
        end=date + timedelta(hours=end_h - BOUNDARY_HOUR_OFFSET, minutes=end_m),
    )


def parse_day_boundaries(
    worksheet: WorkSheet,
    date: datetime,
    row_range: tuple[int, int],
    column: int,
) -> list[BoundariesData]:
    """Slots of one day from the lesson-time column.

    Raises:
        LessonBoundariesError: If a non-empty cell is not a readable slot.
    """
    day_times: list[BoundariesData] = []

    for row in range(*row_range):
        time_cell = worksheet.cell_text(row, column)
        if time_cell is None:
            continue

        lesson_time = parse_boundaries_cell(time_cell, date)
        if lesson_time is None:
            raise LessonBoundariesError(row, column, time_cell)

        if "пара" in time_cell:
            lesson_type = LessonType.DEFAULT
            index_match = _INDEX_RE.match(time_cell)
            if index_match is None:
                raise LessonBoundariesError(row, column, time_cell)
            default_index: Optional[int] = int(index_match.group(1))
        else:
            lesson_type = LessonType.ADDITIONAL
            default_index = None

        day_times.append(
            BoundariesData(
                time_range=lesson_time,
                lesson_type=lesson_type,
                default_index=default_index,
                range=worksheet.merge_extent(row, column),
            )
        )

    return day_times


def parse_week_boundaries(
    worksheet: WorkSheet, week_markup: list[DayMarkup]
) -> list[list[BoundariesData]]:
    """Slots of every day; a day spans the rows up to the next day's row."""
    if not week_markup:
        return []

    last_row = worksheet.end[0] + 1
    lesson_time_column = week_markup[0].column + 1

    result = []
    for index, day_markup in enumerate(week_markup):
        if index + 1 < len(week_markup):
            end_row = week_markup[index + 1].row
        else:
            end_row = last_row

        day_boundaries = parse_day_boundaries(
            worksheet, day_markup.date, (day_markup.row, end_row), lesson_time_column
        )
        log.debug("%s: %d lesson slots", day_markup.name, len(day_boundaries))
        result.append(day_boundaries)
    return result


def parse_lesson(
    worksheet: WorkSheet,
    day: Day,
    day_boundaries: list[BoundariesData],
    lesson_boundaries: BoundariesData,
    group_column: int,
    settings: Optional[Settings] = None,
) -> Union[list[Lesson], Street]:
    """Read the cell of one group at one slot.

    Returns:
        A ``Street`` if the cell holds an address. Otherwise the lessons to
        append to the day: nothing for an empty cell, the lesson itself for
        the first lesson of the day, or a break followed by the lesson.

    Raises:
        LessonTimeNotFoundError: If no slot ends where the lesson cell ends.
    """
    row = lesson_boundaries.range.start.row

    cell_data = worksheet.cell_text(row, group_column)
    if cell_data is None:
        return []
    if _STREET_RE.match(cell_data):
        return Street(cell_data)

    cell_range = worksheet.merge_extent(row, group_column)

    # A lesson merged over several slots ends with the slot whose cell ends
    # on the same row.
    end_time = next(
        (b for b in day_boundaries if b.range.end.row == cell_range.end.row),
        None,
    )
    if end_time is None:
        raise LessonTimeNotFoundError(row, group_column)

    default_range = None
    if lesson_boundaries.default_index is not None and end_time.default_index is not None:
        default_range = (lesson_boundaries.default_index, end_time.default_index)

    lesson_time = LessonBoundaries(
        start=lesson_boundaries.time_range.start,
        end=end_time.time_range.end,
    )

    parsed = parse_name_and_subgroups(cell_data, settings)

    cabinets = parse_cabinets(
        worksheet,
        (cell_range.start.row, cell_range.end.row),
        group_column + 1,
        len(parsed.subgroups),
    )
    subgroups = assign_cabinets(parsed.subgroups, cabinets)

    lesson = Lesson(
        type=parsed.type or lesson_boundaries.lesson_type,
        range=default_range,
        name=parsed.name,
        time=lesson_time,
        subgroups=tuple(subgroups),
    )

    if not day.lessons:
        return [lesson]

    prev_lesson = day.lessons[-1]
    lesson_break = Lesson(
        type=LessonType.BREAK,
        time=LessonBoundaries(start=prev_lesson.time.end, end=lesson.time.start),
    )
    return [lesson_break, lesson]


def parse_worksheet(worksheet: WorkSheet, settings: Optional[Settings] = None) -> ParsedSchedule:
    """Build the group and teacher schedules of one worksheet."""
    settings = settings or get_settings()

    week_markup, groups_markup = parse_skeleton(worksheet)
    week_boundaries = parse_week_boundaries(worksheet, week_markup)

    groups: dict[str, ScheduleEntry] = {}

    for group_markup in groups_markup:
        group = ScheduleEntry(name=group_markup.name)

        for day_markup, day_boundaries in zip(week_markup, week_boundaries):
            day = Day(name=day_markup.name, date=day_markup.date)

            for lesson_boundaries in day_boundaries:
                result = parse_lesson(
                    worksheet,
                    day,
                    day_boundaries,
                    lesson_boundaries,
                    group_markup.column,
                    settings,
                )
                if isinstance(result, Street):
                    day.street = result.address
                else:
                    day.lessons.extend(result)

            group.days.append(day)

        groups[group.name] = group

    teachers = convert_groups_to_teachers(groups)
    log.info("Parsed %d groups and %d teachers", len(groups), len(teachers))
    return ParsedSchedule(groups=groups, teachers=teachers)


def parse_schedule(buffer: bytes, settings: Optional[Settings] = None) -> ParsedSchedule:
    """Parse a schedule workbook.

    Args:
        buffer: Raw ``.xls`` (or ``.xlsx``) bytes.
        settings: Parser thresholds; read from the environment when omitted.

    Returns:
        Schedules of every group and every teacher found in the first sheet.

    Raises:
        ParseError: On any structural problem; no partial result is returned.
    """
    return parse_worksheet(load_worksheet(buffer), settings)
