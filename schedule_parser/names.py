"""Split the text of a lesson cell into title, teacher roster and type.

A lesson cell usually reads like::

    Информатика Иванов А.Б.(1 подгруппа), Петров В.Г.(2 подгруппа) Экзамен

i.e. the title, then one or two "Surname I.O." records with an optional
subgroup marker, then an optional modifier naming a special lesson type.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

from .config import Settings, get_settings
from .schema import InconsistentSubGroup, LessonSubGroup, LessonType, SubGroup

log = logging.getLogger(__name__)

# One roster record:
#   [А-ЯЁ][а-яё]+                  surname
#   \s?                            optional space
#   (?:[А-ЯЁ][\s.]*){2}            two initials, dots and spaces are optional
#   (?:\(\s*\d\s*[а-яё\s./]*\))?   optional "(1)" / "(1 подгруппа)" / "(1 п/г)"
#   [\s,]*                         separator before the next record
_RECORD = r"[А-ЯЁ][а-яё]+\s?(?:[А-ЯЁ][\s.]*){2}(?:\(\s*\d\s*[а-яё\s./]*\))?[\s,]*"

_ROSTER_RE = re.compile(rf"(?:{_RECORD}){{1,2}}[\s.]*")

_TEACHER_RE = re.compile(
    r"([А-ЯЁ][а-яё]+)\s?([А-ЯЁ])[\s.]*([А-ЯЁ])[\s.]*(?:\(\s*(\d)\s*[а-яё\s./]*\))?"
)

_SPACES_RE = re.compile(r"\s+")

# Modifiers that mark a special lesson, matched fuzzily against the text that
# follows the roster.
LESSON_TYPES: dict[str, LessonType] = {
    "консультация": LessonType.CONSULTATION,
    "самостоятельная работа": LessonType.INDEPENDENT_WORK,
    "зачет": LessonType.EXAM,
    "зачет с оценкой": LessonType.EXAM_WITH_GRADE,
    "экзамен": LessonType.EXAM_DEFAULT,
    "курсовой проект": LessonType.COURSE_PROJECT,
    "защита курсового проекта": LessonType.COURSE_PROJECT_DEFENSE,
    "практическое занятие": LessonType.PRACTICE,
}

# Longest modifier, in words.
_MAX_TYPE_WORDS = max(len(name.split()) for name in LESSON_TYPES)


@dataclass(frozen=True)
class ParsedLessonName:
    name: str
    subgroups: list[SubGroup]
    type: Optional[LessonType]


def levenshtein(a: str, b: str) -> int:
    """Edit distance between two strings."""
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current.append(
                min(
                    previous[j] + 1,  # deletion
                    current[j - 1] + 1,  # insertion
                    previous[j - 1] + cost,  # substitution
                )
            )
        previous = current
    return previous[-1]


def guess_lesson_type(text: str, max_distance: int = 4) -> Optional[LessonType]:
    """Closest special lesson type within ``max_distance`` edits, if any."""
    needle = text.lower().replace("ё", "е").strip(" .,")

    best: Optional[LessonType] = None
    best_score = max_distance + 1
    for name, lesson_type in LESSON_TYPES.items():
        score = levenshtein(name, needle)
        if score < best_score:
            best, best_score = lesson_type, score
    return best


def _parse_roster(roster: str) -> list[tuple[int, str]]:
    """(subgroup number, "Surname I.O.") pairs; 0 means no explicit number."""
    records = []
    for m in _TEACHER_RE.finditer(roster):
        surname, first, middle, number = m.groups()
        number = int(number) if number else 0
        if number > 2:
            number = (number - 1) % 2 + 1
        records.append((number, f"{surname} {first}.{middle}."))
    return records


def _number_subgroups(records: list[tuple[int, str]]) -> list[SubGroup]:
    """Fill in missing subgroup numbers and order the subgroups."""
    if len(records) == 1:
        number, teacher = records[0]
        if number == 0:
            # One teacher for the whole group.
            return [LessonSubGroup(number=1, teacher=teacher)]

        # Only one half of the group is listed.
        other = InconsistentSubGroup(number=2 if number == 1 else 1)
        subgroups: list[SubGroup] = [LessonSubGroup(number=number, teacher=teacher), other]
        return sorted(subgroups, key=lambda subgroup: subgroup.number)

    if len(records) == 2:
        (first_number, first_teacher), (second_number, second_teacher) = records

        if first_number == 0 and second_number == 0:
            first_number, second_number = 1, 2
        elif first_number == 0:
            first_number = 2 if second_number == 1 else 1
        elif second_number == 0:
            second_number = 2 if first_number == 1 else 1

        subgroups = [
            LessonSubGroup(number=first_number, teacher=first_teacher),
            LessonSubGroup(number=second_number, teacher=second_teacher),
        ]
        if first_number == 2 and second_number == 1:
            subgroups.reverse()
        return subgroups

    return []


def _split_trailing_type(
    title: str, settings: Settings
) -> tuple[str, Optional[LessonType]]:
    """Peel a special lesson type off the last words of a title.

    Cells without a modifier after the roster may still end with one, e.g.
    "История Экзамен" or just "Консультация". A title made of the modifier
    alone is kept whole.
    """
    words = title.split(" ")
    for count in range(min(_MAX_TYPE_WORDS, len(words)), 0, -1):
        tail = " ".join(words[-count:])
        if len(tail) <= settings.type_guess_min_length:
            continue

        lesson_type = guess_lesson_type(tail, settings.type_guess_max_distance)
        if lesson_type is not None:
            head = " ".join(words[:-count]).strip(" ,")
            return head or title, lesson_type
    return title, None


def parse_name_and_subgroups(
    text: str, settings: Optional[Settings] = None
) -> ParsedLessonName:
    """Separate the lesson title from the teacher roster.

    Args:
        text: Normalized text of the lesson cell.
        settings: Thresholds for lesson type guessing.

    Returns:
        The title, the numbered subgroups (without cabinets) and the special
        lesson type guessed from the text after the roster, if any. When the
        roster comes first or is missing, the type is guessed from the last
        words of the title instead.
    """
    settings = settings or get_settings()
    text = _SPACES_RE.sub(" ", text).strip()

    m = _ROSTER_RE.search(text)
    if not m:
        name, lesson_type = _split_trailing_type(text, settings)
        return ParsedLessonName(name=name, subgroups=[], type=lesson_type)

    name = text[: m.start()].strip(" ,")
    extra = text[m.end() :].strip(" ,")
    subgroups = _number_subgroups(_parse_roster(m.group(0)))

    if not name:
        # Roster written before the title.
        name, lesson_type = _split_trailing_type(extra, settings)
        return ParsedLessonName(name=name, subgroups=subgroups, type=lesson_type)

    lesson_type = None
    if len(extra) > settings.type_guess_min_length:
        lesson_type = guess_lesson_type(extra, settings.type_guess_max_distance)
        if lesson_type is None:
            log.warning("Could not guess lesson type from %r", extra)

    return ParsedLessonName(name=name, subgroups=subgroups, type=lesson_type)
