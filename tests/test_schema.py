import json
from datetime import datetime, timezone

from conftest import GROUP_A, GROUP_B
from schedule_parser.errors import (
    BadXlsError,
    LessonBoundariesError,
    LessonTimeNotFoundError,
    NoWorkSheetsError,
)
from schedule_parser.parser import parse_worksheet
from schedule_parser.schema import (
    InconsistentSubGroup,
    Lesson,
    LessonBoundaries,
    LessonSubGroup,
    LessonType,
    ParsedSchedule,
)

START = datetime(2025, 9, 1, 4, 0, tzinfo=timezone.utc)
END = datetime(2025, 9, 1, 5, 30, tzinfo=timezone.utc)


def test_lesson_to_dict():
    lesson = Lesson(
        type=LessonType.EXAM_WITH_GRADE,
        range=(1, 2),
        name="История",
        time=LessonBoundaries(start=START, end=END),
        subgroups=(
            LessonSubGroup(number=1, teacher="Кузнецов Д.Д.", cabinet="5"),
            InconsistentSubGroup(number=2, cabinet="6"),
        ),
    )

    assert lesson.to_dict() == {
        "type": "EXAM_WITH_GRADE",
        "range": [1, 2],
        "name": "История",
        "time": {"start": "2025-09-01T04:00:00+00:00", "end": "2025-09-01T05:30:00+00:00"},
        "subgroups": [
            {"number": 1, "cabinet": "5", "teacher": "Кузнецов Д.Д."},
            {"number": 2, "cabinet": "6", "teacher": None, "inconsistent": True},
        ],
        "group": None,
    }


def test_break_to_dict():
    lesson_break = Lesson(type=LessonType.BREAK, time=LessonBoundaries(start=START, end=END))

    data = lesson_break.to_dict()
    assert data["type"] == "BREAK"
    assert data["name"] is None
    assert data["range"] is None
    assert data["subgroups"] == []


def test_schedule_is_json_serializable(sample_sheet, settings):
    data = parse_worksheet(sample_sheet, settings).to_dict()
    decoded = json.loads(json.dumps(data, ensure_ascii=False))

    assert set(decoded) == {"groups", "teachers"}
    assert decoded["groups"][GROUP_B]["days"][1]["street"] == "Кирова, 41"
    assert decoded["teachers"]["Иванов А.Б."]["days"][0]["lessons"][0]["group"] == GROUP_A


def test_fingerprint_ignores_map_order(sample_sheet, settings):
    schedule = parse_worksheet(sample_sheet, settings)
    reordered = ParsedSchedule(
        groups=dict(reversed(list(schedule.groups.items()))),
        teachers=dict(reversed(list(schedule.teachers.items()))),
    )

    assert reordered.fingerprint() == schedule.fingerprint()


def test_fingerprint_changes_with_content(sample_rows, sample_sheet, settings):
    from conftest import SAMPLE_MERGES
    from schedule_parser.worksheet import WorkSheet

    sample_rows[8][3] = "6"
    changed = parse_worksheet(WorkSheet.from_rows(sample_rows, SAMPLE_MERGES), settings)

    assert changed.fingerprint() != parse_worksheet(sample_sheet, settings).fingerprint()


def test_error_codes():
    assert BadXlsError(ValueError("x")).to_dict()["code"] == "BAD_XLS"
    assert NoWorkSheetsError().to_dict() == {
        "code": "NO_WORK_SHEETS",
        "message": "No work sheets found.",
    }
    assert LessonBoundariesError(5, 1, "abc").code == "GLOBAL_TIME"
    assert "row 5, column 1" in str(LessonBoundariesError(5, 1, "abc"))
    assert LessonTimeNotFoundError(1, 2).code == "LESSON_TIME_NOT_FOUND"
