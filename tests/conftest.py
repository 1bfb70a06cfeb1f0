import io

import openpyxl
import pytest
import xlwt

from schedule_parser.config import Settings
from schedule_parser.worksheet import WorkSheet

GROUP_A = "ИС-214/23"
GROUP_B = "ИС215/23"

DAY_CELLS = [
    "Понедельник 01.09.2025",
    "Вторник",
    "Среда 03.09.2025",
    "Четверг 04.09.2025",
    "Пятница 05.09.2025",
    "Суббота 06.09.2025",
]

SLOT_CELLS = ["1 пара 8.00-9.30", "2 пара 9.50-11.20", "3 пара 11.00-12.20"]

# (row, column) -> value of the lesson and room cells.
LESSON_CELLS = {
    # Monday
    (1, 2): "Информатика Иванов А.Б.(1 подгруппа), Петров В.Г.(2 подгруппа)",
    (1, 3): "44 43",
    (2, 2): "Математика Сидорова Е.Е.",
    (2, 3): "12",
    (1, 4): "Физика\nИванов  А.Б.",
    (1, 5): 21.0,
    (3, 4): "ИвановАБ(1), ПетровВГ(2) Информатика",
    (3, 5): "30",
    # Tuesday
    (4, 2): "Физкультура",
    (5, 4): "Кирова, 41",
    (6, 4): "История Кузнецов Д.Д.",
    # Wednesday
    (8, 2): "История Кузнецов Д.Д. Экзамен",
    (8, 3): "5",
    # Thursday
    (10, 2): "Химия Петров В.Г.(2 подгруппа)",
    (10, 3): "7",
    # Friday
    (13, 4): "Черчение Сидорова Е.Е.",
    (13, 5): "1 2 3",
}

# Mathematics on Monday spans the 2nd and 3rd slots.
SAMPLE_MERGES = [((2, 2), (3, 2)), ((1, 0), (3, 0))]


def build_rows(
    day_cells=DAY_CELLS, slot_cells=SLOT_CELLS, lesson_cells=LESSON_CELLS, columns=6
):
    rows = [[None, None, GROUP_A, None, "ИС 215/23", None]]
    for day in day_cells:
        for index, slot in enumerate(slot_cells):
            row = [None] * columns
            if index == 0:
                row[0] = day
            row[1] = slot
            rows.append(row)

    for (r, c), value in lesson_cells.items():
        rows[r][c] = value
    return rows


def build_xlsx(rows, merges=()) -> bytes:
    wb = openpyxl.Workbook()
    ws = wb.active
    for r, row in enumerate(rows, start=1):
        for c, value in enumerate(row, start=1):
            if value is not None:
                ws.cell(r, c, value)
    for (r0, c0), (r1, c1) in merges:
        ws.merge_cells(start_row=r0 + 1, start_column=c0 + 1, end_row=r1 + 1, end_column=c1 + 1)

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def build_xls(rows, merges=()) -> bytes:
    wb = xlwt.Workbook(encoding="utf-8")
    ws = wb.add_sheet("Расписание", cell_overwrite_ok=True)
    for r, row in enumerate(rows):
        for c, value in enumerate(row):
            if value is not None:
                ws.write(r, c, value)
    for (r0, c0), (r1, c1) in merges:
        value = rows[r0][c0]
        ws.write_merge(r0, r1, c0, c1, "" if value is None else value)

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def sample_rows():
    return build_rows()


@pytest.fixture
def sample_sheet(sample_rows):
    return WorkSheet.from_rows(sample_rows, SAMPLE_MERGES)
