"""FastAPI service exposing the availability exports.

Endpoints:
  GET /folders?parent_id= -> subfolders available for selection
  POST /export/{clients|staff|addresses} {clients, therapists, supervisors}
      -> xlsx workbook download (one sheet)
  GET /cache -> number of cached grids
  POST /cache/clear -> drop every cached grid

Every Drive-backed endpoint expects ``Authorization: Bearer <token>``.
Folder ids omitted from the request body fall back to the
AVAILABILITY_*_FOLDER_ID environment variables.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import FastAPI, Header, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse

from ..aggregate import COLLECTORS, FolderSelection
from ..config import get_default_folders, get_parent_folder_id
from ..drive import list_folders
from ..errors import FetchError, NoFolderSelected, ParseError
from ..export import XLSX_MEDIA_TYPE, export_filename, workbook_bytes
from ..grid import clear_cache, default_cache
from .schemas import CacheStatus, FolderOut, FolderSelectionIn

app = FastAPI(title="Availability Builder API", version="0.1.0")
logger = logging.getLogger("availability_builder")
if not logger.handlers:
    _h = logging.StreamHandler()
    _h.setFormatter(logging.Formatter("[%(asctime)s] %(levelname)s %(message)s"))
    logger.addHandler(_h)
logger.setLevel(logging.INFO)

EXPORT_TITLES = {"clients": "Clients", "staff": "Staff", "addresses": "Addresses"}


def _bearer_token(authorization: Optional[str]) -> str:
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(401, "Bearer token required")
    return token.strip()


def _selection(body: Optional[FolderSelectionIn]) -> FolderSelection:
    defaults = get_default_folders()
    return FolderSelection(
        **{k: (getattr(body, k) if body else None) or v for k, v in defaults.items()}
    )


@app.get("/folders", response_model=List[FolderOut])
def get_folders(parent_id: Optional[str] = None, authorization: Optional[str] = Header(None)):
    token = _bearer_token(authorization)
    parent = parent_id or get_parent_folder_id()
    if not parent:
        raise HTTPException(400, "parent_id required")
    try:
        folders = list_folders(token, parent)
    except FetchError as e:
        raise HTTPException(502, str(e))
    return [FolderOut(id=f.id, name=f.name) for f in folders]


@app.post("/export/{record_type}")
async def export_records(
    record_type: str,
    body: Optional[FolderSelectionIn] = None,
    authorization: Optional[str] = Header(None),
):
    title = EXPORT_TITLES.get(record_type)
    if title is None:
        raise HTTPException(404, f"Unknown record type: {record_type}")
    token = _bearer_token(authorization)
    collector, columns = COLLECTORS[title]
    try:
        rows = await collector(token, _selection(body))
    except NoFolderSelected as e:
        raise HTTPException(400, str(e))
    except FetchError as e:
        logger.error("Error processing %s: %s", title.lower(), e)
        raise HTTPException(502, f"Error processing {title.lower()}: {e}")
    except ParseError as e:
        logger.error("Error processing %s: %s", title.lower(), e)
        raise HTTPException(422, f"Error processing {title.lower()}: {e}")
    bio = await run_in_threadpool(workbook_bytes, rows, columns, title)
    return StreamingResponse(
        bio,
        media_type=XLSX_MEDIA_TYPE,
        headers={
            "Content-Disposition": f'attachment; filename="{export_filename(title)}"',
            "X-Record-Count": str(len(rows)),
        },
    )


@app.get("/cache", response_model=CacheStatus)
def get_cache_status():
    return CacheStatus(entries=len(default_cache()))


@app.post("/cache/clear", response_model=CacheStatus)
def post_cache_clear():
    clear_cache()
    return CacheStatus(entries=len(default_cache()))


if __name__ == "__main__":  # pragma: no cover
    import uvicorn

    uvicorn.run("availability_builder.web.app:app", host="0.0.0.0", port=8000, reload=True)
