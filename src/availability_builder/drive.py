"""Google Drive v3 REST calls: folder listing and file download.

All calls are blocking ``requests`` calls authorized with a bearer token;
the aggregator moves them off the event loop.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from .config import (
    GOOGLE_FOLDER_MIME,
    GOOGLE_SHEET_MIME,
    LISTING_PAGE_SIZE,
    XLSX_MIME,
    get_drive_api,
    get_http_timeout,
)
from .errors import FetchError

logger = logging.getLogger(__name__)

LISTING_FIELDS = "nextPageToken, files(id, name, mimeType)"


@dataclass(frozen=True)
class DriveFolder:
    id: str
    name: str


@dataclass(frozen=True)
class DriveFile:
    id: str
    name: str
    mime_type: str = ""


def _get(url: str, token: str, what: str, params: Optional[Dict[str, Any]] = None):
    headers = {"Authorization": f"Bearer {token}"}
    try:
        resp = requests.get(url, headers=headers, params=params, timeout=get_http_timeout())
    except requests.RequestException as e:
        raise FetchError(f"Failed to fetch {what}: {e}") from e
    if not 200 <= resp.status_code < 300:
        raise FetchError(
            f"Failed to fetch {what}: HTTP {resp.status_code} {resp.text[:200]}",
            status_code=resp.status_code,
        )
    return resp


def _list(token: str, query: str, what: str) -> List[Dict[str, Any]]:
    items: List[Dict[str, Any]] = []
    page_token = None
    while True:
        params = {"q": query, "pageSize": LISTING_PAGE_SIZE, "fields": LISTING_FIELDS}
        if page_token:
            params["pageToken"] = page_token
        resp = _get(f"{get_drive_api()}/files", token, what, params)
        try:
            data = resp.json()
        except ValueError:
            raise FetchError(f"Failed to fetch {what}: response was not JSON")
        items.extend(data.get("files") or [])
        page_token = data.get("nextPageToken")
        if not page_token:
            break
    logger.info("Listed %d entries in %s", len(items), what)
    return items


def list_folders(token: str, parent_id: str) -> List[DriveFolder]:
    query = f"'{parent_id}' in parents and mimeType = '{GOOGLE_FOLDER_MIME}' and trashed = false"
    items = _list(token, query, f"folder {parent_id}")
    return [DriveFolder(it["id"], it.get("name", "")) for it in items]


def list_files(token: str, folder_id: str) -> List[DriveFile]:
    query = f"'{folder_id}' in parents and mimeType != '{GOOGLE_FOLDER_MIME}' and trashed = false"
    items = _list(token, query, f"folder {folder_id}")
    return [DriveFile(it["id"], it.get("name", ""), it.get("mimeType", "")) for it in items]


def download_url(file: DriveFile) -> str:
    """Native Google Sheets are exported as xlsx; anything else is fetched as-is."""
    if file.mime_type == GOOGLE_SHEET_MIME:
        return f"{get_drive_api()}/files/{file.id}/export?mimeType={XLSX_MIME}"
    return f"{get_drive_api()}/files/{file.id}?alt=media"


def download_file(token: str, file: DriveFile) -> bytes:
    resp = _get(download_url(file), token, f"file {file.name}")
    return resp.content
