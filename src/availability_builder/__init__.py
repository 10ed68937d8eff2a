"""availability_builder package initialization.

Public API surface:
 - find_schedule_breaks: consolidate a day's slots into AM/PM windows
 - build_client_record / build_staff_record / build_address_records:
   turn one decoded availability grid into export rows
 - collect_client_records / collect_staff_records / collect_address_records:
   run those builders over whole Drive folders
 - export_all: build and write every record type in one go

Additional utilities are internal.
"""
from .aggregate import (
    FolderSelection,
    collect_address_records,
    collect_client_records,
    collect_staff_records,
    export_all,
)
from .grid import GridCache, clear_cache, fetch_grid
from .records import build_address_records, build_client_record, build_staff_record
from .schedule import find_schedule_breaks
from .timeslots import convert_to_24hr, parse_label

__all__ = [
    "FolderSelection",
    "GridCache",
    "build_address_records",
    "build_client_record",
    "build_staff_record",
    "clear_cache",
    "collect_address_records",
    "collect_client_records",
    "collect_staff_records",
    "convert_to_24hr",
    "export_all",
    "fetch_grid",
    "find_schedule_breaks",
    "parse_label",
]
