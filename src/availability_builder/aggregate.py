"""Run the record builders across every file of the selected Drive folders.

Files of one folder are processed concurrently (bounded by
``AVAILABILITY_CONCURRENCY``); the blocking Drive calls run in the default
executor. A file that fails to download or parse is logged and skipped,
leaving its siblings untouched, unless ``strict`` is set, in which case the
error propagates and aborts that record type. Listing failures always
propagate.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, TypeVar

from .config import get_concurrency, get_strict
from .drive import DriveFile, list_files
from .errors import FetchError, NoFolderSelected, ParseError
from .export import write_export
from .grid import GridCache, fetch_grid
from .locator import Grid
from .records import (
    ADDRESS_COLUMNS,
    CLIENT_COLUMNS,
    CLIENT_TYPE,
    STAFF_COLUMNS,
    STAFF_TYPE,
    build_address_records,
    build_client_record,
    build_staff_record,
    sort_address_records,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
ProgressCallback = Optional[Callable[[str], None]]
FileHandler = Callable[[Grid, DriveFile], T]


@dataclass
class FolderSelection:
    clients: Optional[str] = None
    therapists: Optional[str] = None
    supervisors: Optional[str] = None


@dataclass
class ExportResult:
    title: str
    rows: int = 0
    path: Optional[str] = None
    error: Optional[str] = None


def _raise_first(results: List[Any]) -> None:
    for result in results:
        if isinstance(result, BaseException):
            raise result


async def process_folder(
    token: str,
    folder_id: str,
    handler: FileHandler,
    progress: ProgressCallback = None,
    cache: Optional[GridCache] = None,
    strict: Optional[bool] = None,
    concurrency: Optional[int] = None,
) -> List[T]:
    """Apply ``handler`` to the grid of every file in ``folder_id``.

    Results keep listing order; skipped files are simply absent.
    """
    strict = get_strict() if strict is None else strict
    loop = asyncio.get_running_loop()
    files = await loop.run_in_executor(None, list_files, token, folder_id)
    semaphore = asyncio.Semaphore(concurrency or get_concurrency())

    async def process_one(file: DriveFile):
        async with semaphore:
            if progress:
                progress(f"Processing file: {file.name}...")
            logger.info("Processing file: %s (%s)", file.name, file.id)
            try:
                grid = await loop.run_in_executor(None, fetch_grid, token, file, cache)
                return handler(grid, file)
            except (FetchError, ParseError) as e:
                if strict:
                    logger.error("Error processing file (%s): %s", file.name, e)
                    raise
                logger.warning("Skipping file %s: %s", file.name, e)
                return None

    # every sibling finishes before a strict-mode failure is re-raised
    results = await asyncio.gather(*[process_one(f) for f in files], return_exceptions=True)
    _raise_first(results)
    return [r for r in results if r is not None]


async def collect_client_records(
    token: str,
    selection: FolderSelection,
    progress: ProgressCallback = None,
    cache: Optional[GridCache] = None,
    strict: Optional[bool] = None,
) -> List[Dict[str, Any]]:
    if not selection.clients:
        raise NoFolderSelected("No client folder selected")
    rows = await process_folder(
        token,
        selection.clients,
        lambda grid, file: build_client_record(grid, file.name),
        progress=progress,
        cache=cache,
        strict=strict,
    )
    logger.info("Built %d client records", len(rows))
    return rows


async def collect_staff_records(
    token: str,
    selection: FolderSelection,
    progress: ProgressCallback = None,
    cache: Optional[GridCache] = None,
    strict: Optional[bool] = None,
) -> List[Dict[str, Any]]:
    """Therapist records followed by supervisor records."""
    if not selection.therapists and not selection.supervisors:
        raise NoFolderSelected("No therapist or supervisor folder selected")
    rows: List[Dict[str, Any]] = []
    for folder_id, is_supervisor in (
        (selection.therapists, False),
        (selection.supervisors, True),
    ):
        if not folder_id:
            logger.warning(
                "No folder selected for %s; skipping",
                "supervisors" if is_supervisor else "therapists",
            )
            continue
        rows.extend(
            await process_folder(
                token,
                folder_id,
                lambda grid, file, sup=is_supervisor: build_staff_record(grid, file.name, sup),
                progress=progress,
                cache=cache,
                strict=strict,
            )
        )
    logger.info("Built %d staff records", len(rows))
    return rows


async def collect_address_records(
    token: str,
    selection: FolderSelection,
    progress: ProgressCallback = None,
    cache: Optional[GridCache] = None,
    strict: Optional[bool] = None,
) -> List[Dict[str, Any]]:
    """Addresses from every selected folder, clients first, then by initials."""
    folders = [
        (folder_id, record_type)
        for folder_id, record_type in (
            (selection.clients, CLIENT_TYPE),
            (selection.therapists, STAFF_TYPE),
            (selection.supervisors, STAFF_TYPE),
        )
        if folder_id
    ]
    if not folders:
        raise NoFolderSelected("No folders selected for address processing")
    per_folder = await asyncio.gather(
        *[
            process_folder(
                token,
                folder_id,
                lambda grid, file, kind=record_type: build_address_records(grid, file.name, kind),
                progress=progress,
                cache=cache,
                strict=strict,
            )
            for folder_id, record_type in folders
        ],
        return_exceptions=True,
    )
    _raise_first(per_folder)
    records = [rec for per_file in per_folder for recs in per_file for rec in recs]
    rows = [r.as_row() for r in sort_address_records(records)]
    logger.info("Built %d address records", len(rows))
    return rows


COLLECTORS = {
    "Clients": (collect_client_records, CLIENT_COLUMNS),
    "Staff": (collect_staff_records, STAFF_COLUMNS),
    "Addresses": (collect_address_records, ADDRESS_COLUMNS),
}


async def export_all(
    token: str,
    selection: FolderSelection,
    out_dir: str,
    progress: ProgressCallback = None,
    cache: Optional[GridCache] = None,
    strict: Optional[bool] = None,
    as_csv: bool = False,
) -> List[ExportResult]:
    """Build and write every record type concurrently.

    A record type that fails reports one error message carrying the cause;
    the others are still written.
    """
    titles = list(COLLECTORS)
    outcomes = await asyncio.gather(
        *[
            COLLECTORS[title][0](token, selection, progress=progress, cache=cache, strict=strict)
            for title in titles
        ],
        return_exceptions=True,
    )
    results: List[ExportResult] = []
    for title, outcome in zip(titles, outcomes):
        if isinstance(outcome, Exception):
            logger.error("Error processing %s: %s", title.lower(), outcome)
            results.append(ExportResult(title, error=f"Error processing {title.lower()}: {outcome}"))
            continue
        if isinstance(outcome, BaseException):
            raise outcome
        path = write_export(outcome, COLLECTORS[title][1], title, out_dir, as_csv)
        results.append(ExportResult(title, rows=len(outcome), path=path))
    return results
