"""Time-label parsing and per-day slot extraction.

Availability sheets label each row with a range such as ``9:00am - 9:30am``
and tick a checkbox per day column. Checkbox cells arrive either as real
booleans or as the string ``"TRUE"`` depending on how the sheet was exported;
both count as available.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import List, Optional, Tuple

from .errors import SlotParseError
from .locator import Cell, Grid, Row, cell_at, cell_text

logger = logging.getLogger(__name__)

# every slot lives on this date; only hour and minute are meaningful
ANCHOR_DATE = date(2000, 1, 3)
MARKER_RE = re.compile(r"(am|pm)", re.IGNORECASE)
LABEL_SEPARATOR_RE = re.compile(r"\s*[-–—]\s*")


@dataclass(frozen=True)
class TimeSlot:
    start: datetime
    end: datetime
    location: str = ""


def is_available(cell: Cell) -> bool:
    return cell is True or cell == "TRUE"


def is_time_label(cell: Cell) -> bool:
    return cell is not None and ":" in str(cell)


def parse_clock(text: str) -> time:
    """Parse ``H:MM`` with an optional am/pm marker into a 24-hour time.

    ``12am`` is midnight and ``12pm`` is noon; without a marker the hour is
    taken as written.
    """
    raw = str(text or "").strip()
    m = MARKER_RE.search(raw)
    marker = m.group(1).lower() if m else None
    parts = MARKER_RE.sub("", raw).strip().split(":")
    if len(parts) != 2:
        raise SlotParseError(f"Expected H:MM time, got {text!r}")
    try:
        hours, minutes = int(parts[0]), int(parts[1])
    except ValueError:
        raise SlotParseError(f"Non-numeric hour or minute in {text!r}")
    if marker == "pm" and hours < 12:
        hours += 12
    elif marker == "am" and hours == 12:
        hours = 0
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise SlotParseError(f"Time out of range: {text!r}")
    return time(hours, minutes)


def convert_to_24hr(text: str) -> str:
    t = parse_clock(text)
    return f"{t.hour:02d}:{t.minute:02d}"


def split_label(text: str) -> Tuple[str, str]:
    parts = LABEL_SEPARATOR_RE.split(str(text or "").strip())
    if len(parts) != 2 or not all(parts):
        raise SlotParseError(f"Expected 'start - end' label, got {text!r}")
    return parts[0], parts[1]


def parse_label(text: str, location: str = "") -> TimeSlot:
    start_text, end_text = split_label(text)
    start = datetime.combine(ANCHOR_DATE, parse_clock(start_text))
    end = datetime.combine(ANCHOR_DATE, parse_clock(end_text))
    if end <= start:
        raise SlotParseError(f"Slot {text!r} does not end after it starts")
    return TimeSlot(start, end, location)


def extract_day_slots(grid: Grid, header_index: int, column: int) -> List[TimeSlot]:
    """Slots ticked in ``column`` among the time-labelled rows below the header.

    Column 0 holds the label and column 1 the location. Raises
    ``SlotParseError`` for a ticked row whose label cannot be parsed.
    """
    slots: List[TimeSlot] = []
    for row in grid[header_index + 1 :]:
        if not row or not is_time_label(cell_at(row, 0)):
            continue
        if not is_available(cell_at(row, column)):
            continue
        slots.append(parse_label(cell_text(row, 0), cell_text(row, 1)))
    return slots


def available_range(rows: List[Row], column: int) -> Optional[str]:
    """``HH:MM - HH:MM`` spanning the first to the last ticked row, or None.

    Only the start of the first ticked label and the end of the last one are
    read; gaps in between are not reported.
    """
    labels = [cell_text(row, 0) for row in rows if row and is_available(cell_at(row, column))]
    if not labels:
        return None
    start, _ = split_label(labels[0])
    _, end = split_label(labels[-1])
    return f"{convert_to_24hr(start)} - {convert_to_24hr(end)}"
