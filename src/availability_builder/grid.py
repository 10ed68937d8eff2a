"""Grid source: download a sheet, decode its first worksheet, cache the result.

A grid is a list of rows, each a list of plain Python cell values
(``str``, ``bool``, ``int``/``float``, dates, or ``None`` for empty cells)
with trailing empty cells trimmed.
"""

from __future__ import annotations

import csv
import io
import logging
from typing import Dict, Optional

import pandas as pd

from .config import CSV_MIME
from .drive import DriveFile, download_file
from .errors import ParseError
from .locator import Cell, Grid, Row

logger = logging.getLogger(__name__)


class GridCache:
    """Decoded grids keyed by Drive file id.

    Lives for the whole process, across exports, until ``clear`` is called.
    Two concurrent first reads of one file may both download it; the later
    ``put`` simply replaces an identical grid.
    """

    def __init__(self) -> None:
        self._grids: Dict[str, Grid] = {}

    def get(self, file_id: str) -> Optional[Grid]:
        return self._grids.get(file_id)

    def put(self, file_id: str, grid: Grid) -> None:
        self._grids[file_id] = grid

    def clear(self) -> None:
        self._grids.clear()

    def __contains__(self, file_id: object) -> bool:
        return file_id in self._grids

    def __len__(self) -> int:
        return len(self._grids)


_default_cache = GridCache()


def default_cache() -> GridCache:
    return _default_cache


def clear_cache() -> None:
    _default_cache.clear()
    logger.info("Cache cleared.")


# ----------------- decoding -----------------


def normalize_cell(value: Cell) -> Cell:
    if value is None:
        return None
    if isinstance(value, str):
        return value if value.strip() else None
    if type(value).__module__ == "numpy":
        value = value.item()
    if pd.isna(value):
        return None
    return value


def _trim(row: Row) -> Row:
    cells = [normalize_cell(v) for v in row]
    while cells and cells[-1] is None:
        cells.pop()
    return cells


def decode_grid(content: bytes, mime_type: str = "") -> Grid:
    """Decode spreadsheet bytes into a grid (first worksheet only)."""
    if mime_type == CSV_MIME:
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ParseError(f"Could not decode CSV: {e}") from e
        try:
            return [_trim(r) for r in csv.reader(io.StringIO(text))]
        except csv.Error as e:
            raise ParseError(f"Could not decode CSV: {e}") from e
    try:
        df = pd.read_excel(io.BytesIO(content), sheet_name=0, header=None, dtype=object)
    except Exception as e:
        raise ParseError(f"Could not decode spreadsheet: {e}") from e
    return [_trim(list(r)) for r in df.itertuples(index=False, name=None)]


def fetch_grid(token: str, file: DriveFile, cache: Optional[GridCache] = None) -> Grid:
    """Grid for ``file``, downloading and decoding it only on a cache miss.

    Raises ``FetchError`` when the download fails and ``ParseError`` when the
    content is not a readable spreadsheet.
    """
    cache = _default_cache if cache is None else cache
    grid = cache.get(file.id)
    if grid is not None:
        logger.debug("Cache hit for file: %s", file.name)
        return grid
    grid = decode_grid(download_file(token, file), file.mime_type)
    cache.put(file.id, grid)
    logger.debug("Fetched and cached file: %s", file.name)
    return grid
