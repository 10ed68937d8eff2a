"""Environment-driven configuration.

Values are read lazily through getter functions so a ``.env`` file and
per-test ``monkeypatch.setenv`` overrides both take effect.
"""

from __future__ import annotations

import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()  # must come BEFORE reading env-based configuration so values are populated

DEFAULT_DRIVE_API = "https://www.googleapis.com/drive/v3"
DEFAULT_HTTP_TIMEOUT = 30
DEFAULT_CONCURRENCY = 8
DEFAULT_OUTPUT_DIR = "exports"
LISTING_PAGE_SIZE = 100

GOOGLE_SHEET_MIME = "application/vnd.google-apps.spreadsheet"
GOOGLE_FOLDER_MIME = "application/vnd.google-apps.folder"
XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
CSV_MIME = "text/csv"


def _get_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def get_access_token() -> Optional[str]:
    return os.environ.get("AVAILABILITY_ACCESS_TOKEN") or None


def get_parent_folder_id() -> Optional[str]:
    return os.environ.get("AVAILABILITY_PARENT_FOLDER_ID") or None


def get_default_folders() -> dict:
    """Folder ids preselected through the environment (missing ones are None)."""
    return {
        "clients": os.environ.get("AVAILABILITY_CLIENTS_FOLDER_ID") or None,
        "therapists": os.environ.get("AVAILABILITY_THERAPISTS_FOLDER_ID") or None,
        "supervisors": os.environ.get("AVAILABILITY_SUPERVISORS_FOLDER_ID") or None,
    }


def get_drive_api() -> str:
    return (os.environ.get("AVAILABILITY_DRIVE_API") or DEFAULT_DRIVE_API).rstrip("/")


def get_http_timeout() -> int:
    return _get_int("AVAILABILITY_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT)


def get_concurrency() -> int:
    return max(1, _get_int("AVAILABILITY_CONCURRENCY", DEFAULT_CONCURRENCY))


def get_strict() -> bool:
    return os.environ.get("AVAILABILITY_STRICT") == "1"


def get_output_dir() -> str:
    return os.environ.get("AVAILABILITY_OUTPUT_DIR") or DEFAULT_OUTPUT_DIR
