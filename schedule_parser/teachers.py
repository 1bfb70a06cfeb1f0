"""Teacher view of a group schedule."""

from __future__ import annotations

import logging
from dataclasses import replace

from .schema import Day, Lesson, LessonSubGroup, LessonType, ScheduleEntry

log = logging.getLogger(__name__)


def _empty_week(template: ScheduleEntry) -> list[Day]:
    return [Day(name=day.name, date=day.date, street=day.street) for day in template.days]


def _sort_day(teacher: str, day: Day) -> None:
    if all(lesson.range is not None for lesson in day.lessons):
        day.lessons.sort(key=lambda lesson: lesson.range[1])
        return

    log.warning(
        "Lesson without a range in %s's %s, sorting by start time", teacher, day.name
    )
    day.lessons.sort(key=lambda lesson: lesson.time.start)


def convert_groups_to_teachers(groups: dict[str, ScheduleEntry]) -> dict[str, ScheduleEntry]:
    """Regroup the lessons of every group by teacher.

    Each teacher lesson is a copy of a group lesson with ``group`` set to the
    group's name. Breaks and unresolved subgroups are skipped.
    """
    teachers: dict[str, ScheduleEntry] = {}
    if not groups:
        return teachers

    template = next(iter(groups.values()))

    for group in groups.values():
        for index, day in enumerate(group.days):
            for lesson in day.lessons:
                if lesson.type == LessonType.BREAK or not lesson.subgroups:
                    continue

                seen: set[str] = set()
                for subgroup in lesson.subgroups:
                    if not isinstance(subgroup, LessonSubGroup):
                        continue
                    if subgroup.teacher in seen:
                        continue
                    seen.add(subgroup.teacher)

                    entry = teachers.get(subgroup.teacher)
                    if entry is None:
                        entry = ScheduleEntry(name=subgroup.teacher, days=_empty_week(template))
                        teachers[subgroup.teacher] = entry

                    entry.days[index].lessons.append(_copy_for_group(lesson, group.name))

    for name, entry in teachers.items():
        for day in entry.days:
            _sort_day(name, day)

    return teachers


def _copy_for_group(lesson: Lesson, group: str) -> Lesson:
    return replace(lesson, group=group)
