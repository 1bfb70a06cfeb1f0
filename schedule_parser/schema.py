"""Typed schedule produced by the parser."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Union


class LessonType(Enum):
    DEFAULT = 0  # обычная пара
    ADDITIONAL = 1  # доп. занятие
    BREAK = 2  # перемена
    CONSULTATION = 3
    INDEPENDENT_WORK = 4
    EXAM = 5  # зачёт
    EXAM_WITH_GRADE = 6  # зачёт с оценкой
    EXAM_DEFAULT = 7  # экзамен
    COURSE_PROJECT = 8
    COURSE_PROJECT_DEFENSE = 9
    PRACTICE = 10


@dataclass(frozen=True)
class LessonBoundaries:
    """Start and end instants of a lesson (UTC)."""

    start: datetime
    end: datetime

    def to_dict(self) -> dict:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


@dataclass(frozen=True)
class LessonSubGroup:
    """A subgroup with a known teacher."""

    number: int  # 1 or 2
    teacher: str
    cabinet: Optional[str] = None

    def to_dict(self) -> dict:
        return {"number": self.number, "cabinet": self.cabinet, "teacher": self.teacher}


@dataclass(frozen=True)
class InconsistentSubGroup:
    """A subgroup slot implied by the sheet whose teacher is unknown.

    Appears when a cell lists more rooms than teachers, or names only the
    second subgroup. Never treated as a teacher by the teacher view.
    """

    number: int
    cabinet: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "number": self.number,
            "cabinet": self.cabinet,
            "teacher": None,
            "inconsistent": True,
        }


SubGroup = Union[LessonSubGroup, InconsistentSubGroup]


@dataclass(frozen=True)
class Lesson:
    type: LessonType
    time: LessonBoundaries
    name: Optional[str] = None  # None for breaks
    range: Optional[tuple[int, int]] = None  # nominal lesson indices
    subgroups: tuple[SubGroup, ...] = ()
    group: Optional[str] = None  # only in the teacher view

    def to_dict(self) -> dict:
        return {
            "type": self.type.name,
            "range": list(self.range) if self.range is not None else None,
            "name": self.name,
            "time": self.time.to_dict(),
            "subgroups": [subgroup.to_dict() for subgroup in self.subgroups],
            "group": self.group,
        }


@dataclass
class Day:
    name: str
    date: datetime
    street: Optional[str] = None  # address of another building
    lessons: list[Lesson] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "street": self.street,
            "date": self.date.isoformat(),
            "lessons": [lesson.to_dict() for lesson in self.lessons],
        }


@dataclass
class ScheduleEntry:
    """The week of a single group or teacher."""

    name: str
    days: list[Day] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"name": self.name, "days": [day.to_dict() for day in self.days]}


@dataclass
class ParsedSchedule:
    groups: dict[str, ScheduleEntry]
    teachers: dict[str, ScheduleEntry]

    def to_dict(self) -> dict:
        return {
            "groups": {name: entry.to_dict() for name, entry in self.groups.items()},
            "teachers": {name: entry.to_dict() for name, entry in self.teachers.items()},
        }

    def fingerprint(self) -> str:
        """SHA-1 of the canonical JSON form; independent of map ordering."""
        payload = json.dumps(self.to_dict(), sort_keys=True, ensure_ascii=False)
        return hashlib.sha1(payload.encode("utf-8")).hexdigest()
