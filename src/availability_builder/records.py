"""Build export rows from decoded availability grids.

One grid yields one client record, one staff record, or any number of
address records. Client and staff rows are plain dicts keyed by export
column name, always carrying every column of their record type in the
declared order so they can be written straight to a sheet.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List

from .locator import (
    CLIENT_HEADER,
    STAFF_HEADER,
    Grid,
    cell_text,
    find_day_column,
    find_header_index,
    find_rows,
    first_cell_has,
    is_school_row,
    resolve_name,
    resolve_time_off,
)
from .schedule import find_schedule_breaks
from .timeslots import available_range, extract_day_slots

logger = logging.getLogger(__name__)

DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
DAY_ABBREVIATIONS = [d[:3] for d in DAYS]
UNAVAILABLE = "Unavailable"
CLIENT_TYPE = "Client"
STAFF_TYPE = "Staff"

Record = Dict[str, Any]


def client_columns() -> List[str]:
    columns = ["Name"]
    for day in DAYS:
        columns.extend(
            [
                f"AM {day}",
                f"AM {day} Location",
                f"Pref Therapist AM {day}",
                f"PM {day}",
                f"PM {day} Location",
                f"Pref Therapist PM {day}",
            ]
        )
    columns.append("Time Off")
    return columns


CLIENT_COLUMNS = client_columns()
STAFF_COLUMNS = ["Name", "ProgramSupervisor"] + DAY_ABBREVIATIONS + ["Time Off"]
ADDRESS_COLUMNS = ["Initials", "Type", "Address"]


@dataclass(frozen=True)
class AddressRecord:
    initials: str
    record_type: str
    address: str

    def as_row(self) -> Record:
        return {"Initials": self.initials, "Type": self.record_type, "Address": self.address}


def project(record: Record, columns: Iterable[str]) -> Record:
    """New dict holding exactly ``columns`` in order; missing values become ""."""
    out = {}
    for col in columns:
        value = record.get(col)
        out[col] = "" if value is None else value
    return out


# ----------------- clients -----------------


def build_client_record(grid: Grid, filename: str) -> Record:
    """Weekly AM/PM schedule for one client sheet.

    Raises ``MissingHeaderError`` when the ``Home/School`` day header is
    absent and ``SlotParseError`` for an unparseable ticked time label.
    Preferred-therapist columns stay blank for manual fill-in.
    """
    header_index = find_header_index(grid, CLIENT_HEADER)
    header = grid[header_index]
    record: Record = dict.fromkeys(CLIENT_COLUMNS, "")
    record["Name"] = resolve_name(grid, filename)
    for day in DAYS:
        column = find_day_column(header, day[:3], exact=CLIENT_HEADER.exact_day_match)
        if column is None:
            logger.debug("%s: no %s column", filename, day)
            continue
        schedule = find_schedule_breaks(extract_day_slots(grid, header_index, column))
        record[f"AM {day}"] = schedule.am.range
        record[f"AM {day} Location"] = schedule.am.location_code
        record[f"PM {day}"] = schedule.pm.range
        record[f"PM {day} Location"] = schedule.pm.location_code
    record["Time Off"] = resolve_time_off(grid)
    return project(record, CLIENT_COLUMNS)


# ----------------- staff -----------------


def build_staff_record(grid: Grid, filename: str, is_supervisor: bool) -> Record:
    header_index = find_header_index(grid, STAFF_HEADER)
    header = grid[header_index]
    rows = grid[header_index + 1 :]
    record: Record = {
        "Name": resolve_name(grid, filename),
        "ProgramSupervisor": is_supervisor,
    }
    for abbr in DAY_ABBREVIATIONS:
        column = find_day_column(header, abbr, exact=STAFF_HEADER.exact_day_match)
        if column is None:
            record[abbr] = UNAVAILABLE
            continue
        record[abbr] = available_range(rows, column) or UNAVAILABLE
    record["Time Off"] = resolve_time_off(grid)
    return project(record, STAFF_COLUMNS)


# ----------------- addresses -----------------


def build_address_records(grid: Grid, filename: str, record_type: str) -> List[AddressRecord]:
    """Address rows of one sheet.

    Client initials get an ``H`` (home) or ``S`` (school) suffix; staff keep
    bare initials and only their home address.
    """
    if record_type not in (CLIENT_TYPE, STAFF_TYPE):
        raise ValueError(f"Unknown address record type: {record_type}")
    initials = resolve_name(grid, filename)
    records: List[AddressRecord] = []
    for row in find_rows(grid, first_cell_has("address")):
        address = cell_text(row, 1)
        if not address:
            continue
        school = is_school_row(row)
        if record_type == CLIENT_TYPE:
            records.append(AddressRecord(f"{initials}{'S' if school else 'H'}", record_type, address))
        elif not school:
            records.append(AddressRecord(initials, record_type, address))
    return records


def sort_address_records(records: Iterable[AddressRecord]) -> List[AddressRecord]:
    return sorted(
        records,
        key=lambda r: (0 if r.record_type == CLIENT_TYPE else 1, r.initials.lower()),
    )
