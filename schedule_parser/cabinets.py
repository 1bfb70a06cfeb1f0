"""Distribute the rooms written next to a lesson cell over its subgroups."""

from __future__ import annotations

from dataclasses import replace

from .schema import InconsistentSubGroup, SubGroup
from .worksheet import WorkSheet

# Cabinet of a subgroup whose room column is empty.
UNKNOWN_CABINET = "??"


def parse_cabinets(
    worksheet: WorkSheet,
    row_range: tuple[int, int],
    column: int,
    subgroup_count: int,
) -> list[str]:
    """Rooms from the first non-empty cell of ``column`` within ``row_range``.

    With two subgroups only the first two tokens are taken.
    """
    for row in range(*row_range):
        raw = worksheet.cell_text(row, column)
        if raw is None:
            continue

        cabinets = raw.split()
        if subgroup_count == 2:
            cabinets = cabinets[:2]
        return cabinets
    return []


def assign_cabinets(subgroups: list[SubGroup], cabinets: list[str]) -> list[SubGroup]:
    """Return the subgroups with cabinets filled in.

    - no rooms: every subgroup gets ``UNKNOWN_CABINET``;
    - one room: shared by every subgroup;
    - as many rooms as subgroups: by subgroup number;
    - more rooms than subgroups: in order, surplus rooms get
      ``InconsistentSubGroup`` records of their own.
    """
    if not cabinets:
        return [replace(subgroup, cabinet=UNKNOWN_CABINET) for subgroup in subgroups]

    if len(cabinets) == 1:
        return [replace(subgroup, cabinet=cabinets[0]) for subgroup in subgroups]

    if len(cabinets) == len(subgroups):
        return [
            replace(subgroup, cabinet=cabinets[subgroup.number - 1]) for subgroup in subgroups
        ]

    if len(cabinets) > len(subgroups):
        result = [
            replace(subgroup, cabinet=cabinets[index]) for index, subgroup in enumerate(subgroups)
        ]
        while len(result) < len(cabinets):
            result.append(
                InconsistentSubGroup(number=len(result) + 1, cabinet=cabinets[len(result)])
            )
        return result

    return list(subgroups)
