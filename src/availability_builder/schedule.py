"""Consolidate one day's available slots into an AM window and a PM window.

The largest gap between consecutive slots is taken to be the day's break.
When it is longer than an hour the slots split there; otherwise they form a
single block that lands in AM or PM by its start hour. Schedules with more
than one long break come out imprecise, which callers accept.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Sequence, Tuple

from .timeslots import TimeSlot

logger = logging.getLogger(__name__)

BREAK_THRESHOLD = timedelta(minutes=60)
NOON_HOUR = 12


@dataclass(frozen=True)
class ScheduleWindow:
    range: str = ""
    location_code: str = ""


@dataclass(frozen=True)
class DaySchedule:
    am: ScheduleWindow = ScheduleWindow()
    pm: ScheduleWindow = ScheduleWindow()


def format_location(location: str) -> str:
    """``S`` for school/program locations, ``H`` otherwise, blank when unknown."""
    if not location:
        return ""
    return "S" if "school" in location.lower() else "H"


def format_clock(value: datetime) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"


def collapse(slots: Sequence[TimeSlot]) -> ScheduleWindow:
    """Single window from the first slot's start to the last slot's end.

    The location code comes from the first slot only.
    """
    if not slots:
        return ScheduleWindow()
    first, last = slots[0], slots[-1]
    return ScheduleWindow(
        f"{format_clock(first.start)}-{format_clock(last.end)}",
        format_location(first.location),
    )


def find_largest_gap(slots: Sequence[TimeSlot]) -> Tuple[int, timedelta]:
    """Index of the slot before the largest positive gap, and that gap.

    Returns ``(-1, timedelta(0))`` when no two slots are separated. Ties keep
    the earliest gap.
    """
    best_index, best_gap = -1, timedelta(0)
    for i in range(len(slots) - 1):
        gap = slots[i + 1].start - slots[i].end
        if gap > best_gap:
            best_index, best_gap = i, gap
    return best_index, best_gap


def find_schedule_breaks(slots: Sequence[TimeSlot]) -> DaySchedule:
    if not slots:
        return DaySchedule()
    ordered: List[TimeSlot] = sorted(slots, key=lambda s: s.start)
    index, gap = find_largest_gap(ordered)
    if gap > BREAK_THRESHOLD:
        result = DaySchedule(collapse(ordered[: index + 1]), collapse(ordered[index + 1 :]))
    else:
        block = collapse(ordered)
        if ordered[0].start.hour < NOON_HOUR:
            result = DaySchedule(am=block)
        else:
            result = DaySchedule(pm=block)
    logger.debug(
        "Consolidated %d slots (largest gap %s) -> AM %r PM %r",
        len(ordered),
        gap,
        result.am.range,
        result.pm.range,
    )
    return result
