"""Row and column lookups inside free-form availability grids.

Sheets are laid out by hand, so nothing sits at a fixed position. Rows are
recognized by markers in their first cell (``ROW_MARKERS``) and the day
header by a ``HeaderLayout``; supporting a new sheet layout means adding a
table entry rather than another branch in the record builders.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from .errors import MissingHeaderError

logger = logging.getLogger(__name__)

Cell = Any
Row = List[Cell]
Grid = List[Row]
RowPredicate = Callable[[Row], bool]

UNKNOWN_NAME = "Unknown"
NO_TIME_OFF = "None"
FILENAME_TOKEN_RE = re.compile(r"_(\w+)\.")

# role -> lowercase substrings searched for in a row's first cell
ROW_MARKERS: Dict[str, Tuple[str, ...]] = {
    "name": ("initial",),
    "time_off": ("vacation", "planned vacation", "time off"),
    "address": ("address",),
    "school": ("school",),
}


@dataclass(frozen=True)
class HeaderLayout:
    """Shape of the row that carries the day abbreviations.

    ``required_cells`` must all appear as whole cells of the row; when
    ``label_column`` is set, that cell must also equal ``label``.
    """

    name: str
    required_cells: Tuple[str, ...]
    label_column: Optional[int] = None
    label: Optional[str] = None
    exact_day_match: bool = True

    def matches(self, row: Row) -> bool:
        if self.label_column is not None and cell_text(row, self.label_column) != self.label:
            return False
        values = {cell_text(row, i) for i in range(len(row))}
        return all(req in values for req in self.required_cells)


CLIENT_HEADER = HeaderLayout(
    "client", ("Mon",), label_column=1, label="Home/School", exact_day_match=False
)
STAFF_HEADER = HeaderLayout("staff", ("Mon", "Tue"))


# ----------------- cell helpers -----------------


def cell_at(row: Optional[Row], index: int) -> Cell:
    if row is None or index < 0 or index >= len(row):
        return None
    return row[index]


def cell_text(row: Optional[Row], index: int) -> str:
    """Stripped string form of a cell; empty string for missing cells."""
    value = cell_at(row, index)
    if value is None:
        return ""
    return str(value).strip()


def first_cell_has(role: str) -> RowPredicate:
    markers = ROW_MARKERS[role]

    def predicate(row: Row) -> bool:
        text = cell_text(row, 0).lower()
        return bool(text) and any(m in text for m in markers)

    return predicate


def is_school_row(row: Row) -> bool:
    return first_cell_has("school")(row)


# ----------------- row search -----------------


def find_row_index(grid: Grid, predicate: RowPredicate) -> Optional[int]:
    """Index of the first row (top to bottom) matching ``predicate``, else None."""
    for idx, row in enumerate(grid):
        if row and predicate(row):
            return idx
    return None


def find_row(grid: Grid, predicate: RowPredicate) -> Optional[Row]:
    idx = find_row_index(grid, predicate)
    return None if idx is None else grid[idx]


def find_rows(grid: Grid, predicate: RowPredicate) -> List[Row]:
    return [row for row in grid if row and predicate(row)]


def find_header_index(grid: Grid, layout: HeaderLayout) -> int:
    idx = find_row_index(grid, layout.matches)
    if idx is None:
        raise MissingHeaderError(f"No {layout.name} header row found")
    logger.debug("Found %s header row at index %d", layout.name, idx)
    return idx


def find_day_column(header: Row, abbreviation: str, exact: bool = True) -> Optional[int]:
    """Column of ``abbreviation`` in the header row.

    Exact mode needs the whole cell to equal the abbreviation; otherwise the
    first cell containing it wins (``Monday`` or ``Mon 3/4`` both match ``Mon``).
    """
    for idx in range(len(header)):
        text = cell_text(header, idx)
        if (exact and text == abbreviation) or (not exact and abbreviation in text):
            return idx
    return None


# ----------------- field resolution -----------------


def name_from_filename(filename: str) -> Optional[str]:
    m = FILENAME_TOKEN_RE.search(filename or "")
    return m.group(1) if m else None


def resolve_name(grid: Grid, filename: str) -> str:
    """Value next to the initials marker, else ``Unknown``.

    The filename token is only consulted when the sheet has no initials row;
    a present but blank initials cell stays ``Unknown``.
    """
    row = find_row(grid, first_cell_has("name"))
    if row is not None:
        return cell_text(row, 1) or UNKNOWN_NAME
    return name_from_filename(filename) or UNKNOWN_NAME


def resolve_time_off(grid: Grid) -> str:
    row = find_row(grid, first_cell_has("time_off"))
    return cell_text(row, 1) or NO_TIME_OFF
