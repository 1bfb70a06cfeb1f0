"""Read-only view of the first worksheet of a schedule workbook.

Both decoders (xlrd for legacy ``.xls``, openpyxl for ``.xlsx``) are reduced
to the same dense grid of raw values plus a list of merge rectangles, so the
parser never touches a decoder type directly.
"""

from __future__ import annotations

import io
import re
import zipfile
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence

import openpyxl
import xlrd
from openpyxl.utils.exceptions import InvalidFileException

from .errors import BadXlsError, NoWorkSheetsError

_NL_RE = re.compile(r"[\n\r]+")
_SP_RE = re.compile(r"\s+")

_ZIP_MAGIC = b"PK\x03\x04"


@dataclass(frozen=True)
class CellPos:
    row: int
    column: int


@dataclass(frozen=True)
class CellRange:
    """Rectangle of cells; ``end`` is exclusive in both dimensions."""

    start: CellPos
    end: CellPos


def _value_to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def normalize_text(raw: str) -> str:
    """Collapse line breaks and whitespace runs to single spaces and trim."""
    return _SP_RE.sub(" ", _NL_RE.sub(" ", raw)).strip()


class WorkSheet:
    def __init__(self, rows: Sequence[Sequence[Any]], merges: Iterable[CellRange] = ()):
        self._rows = [list(row) for row in rows]
        self._merges = {merge.start: merge for merge in merges}

        # Bounding box of the cells that hold any text.
        used = [
            (r, c)
            for r, row in enumerate(self._rows)
            for c, value in enumerate(row)
            if _value_to_text(value).strip()
        ]
        if used:
            self.start: Optional[tuple[int, int]] = (
                min(r for r, _ in used),
                min(c for _, c in used),
            )
            self.end: Optional[tuple[int, int]] = (
                max(r for r, _ in used),
                max(c for _, c in used),
            )
        else:
            self.start = None
            self.end = None

    @classmethod
    def from_rows(
        cls,
        rows: Sequence[Sequence[Any]],
        merges: Iterable[tuple[tuple[int, int], tuple[int, int]]] = (),
    ) -> "WorkSheet":
        """Build a sheet from plain lists.

        ``merges`` holds ``((first_row, first_col), (last_row, last_col))``
        pairs with inclusive ends, the way they read in a spreadsheet.
        """
        return cls(
            rows,
            [
                CellRange(CellPos(r0, c0), CellPos(r1 + 1, c1 + 1))
                for (r0, c0), (r1, c1) in merges
            ],
        )

    def cell_text(self, row: int, col: int) -> Optional[str]:
        """Normalized text of a cell, or None when the cell is blank."""
        if row < 0 or col < 0 or row >= len(self._rows):
            return None
        cells = self._rows[row]
        if col >= len(cells):
            return None

        text = normalize_text(_value_to_text(cells[col]))
        return text or None

    def merge_extent(self, row: int, col: int) -> CellRange:
        """Merge rectangle whose top-left corner is at (row, col).

        A cell that starts no merge is its own 1x1 rectangle.
        """
        merge = self._merges.get(CellPos(row, col))
        if merge is not None:
            return merge
        return CellRange(CellPos(row, col), CellPos(row + 1, col + 1))


def load_xls(buffer: bytes) -> WorkSheet:
    """Decode the first worksheet of a legacy BIFF workbook."""
    if not buffer:
        raise BadXlsError(ValueError("empty buffer"))

    try:
        book = xlrd.open_workbook(file_contents=buffer, formatting_info=True)
    except Exception as exc:  # xlrd has no common base for corrupt-file errors
        raise BadXlsError(exc) from exc

    if book.nsheets == 0:
        raise NoWorkSheetsError()
    sh = book.sheet_by_index(0)

    rows = [sh.row_values(r) for r in range(sh.nrows)]
    # xlrd reports (rlo, rhi, clo, chi) with exclusive upper bounds.
    merges = [
        CellRange(CellPos(rlo, clo), CellPos(rhi, chi))
        for rlo, rhi, clo, chi in sh.merged_cells
    ]
    return WorkSheet(rows, merges)


def load_xlsx(buffer: bytes) -> WorkSheet:
    """Decode the first worksheet of an Office Open XML workbook."""
    try:
        wb = openpyxl.load_workbook(io.BytesIO(buffer), data_only=True)
    except (zipfile.BadZipFile, InvalidFileException, KeyError, OSError) as exc:
        raise BadXlsError(exc) from exc

    if not wb.worksheets:
        raise NoWorkSheetsError()
    ws = wb.worksheets[0]

    # openpyxl rows/cols are 1-based, the grid is 0-based.
    rows = [
        [ws.cell(r, c).value for c in range(1, ws.max_column + 1)]
        for r in range(1, ws.max_row + 1)
    ]
    merges = [
        CellRange(
            CellPos(merge_range.min_row - 1, merge_range.min_col - 1),
            CellPos(merge_range.max_row, merge_range.max_col),
        )
        for merge_range in ws.merged_cells.ranges
    ]
    return WorkSheet(rows, merges)


def load_worksheet(buffer: bytes) -> WorkSheet:
    """Pick the decoder by the buffer signature."""
    if buffer[:4] == _ZIP_MAGIC:
        return load_xlsx(buffer)
    return load_xls(buffer)
