"""Write record rows to xlsx or CSV, one sheet per record type.

Columns are written in the order given, header row first, one data row per
record in the order produced.
"""

from __future__ import annotations

import csv
import io
import logging
import os
from typing import Any, Dict, List, Sequence

import pandas as pd

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def export_filename(title: str, as_csv: bool = False) -> str:
    return f"{title}_Processed.{'csv' if as_csv else 'xlsx'}"


def records_frame(rows: List[Dict[str, Any]], columns: Sequence[str]) -> pd.DataFrame:
    if not rows:
        return pd.DataFrame(columns=list(columns))
    return pd.DataFrame([[r.get(c, "") for c in columns] for r in rows], columns=list(columns))


def workbook_bytes(rows: List[Dict[str, Any]], columns: Sequence[str], sheet_name: str) -> io.BytesIO:
    bio = io.BytesIO()
    with pd.ExcelWriter(bio, engine="openpyxl") as writer:
        records_frame(rows, columns).to_excel(writer, index=False, sheet_name=sheet_name)
    bio.seek(0)
    return bio


def write_workbook(
    rows: List[Dict[str, Any]], columns: Sequence[str], sheet_name: str, path: str
) -> str:
    with open(path, "wb") as f:
        f.write(workbook_bytes(rows, columns, sheet_name).getvalue())
    return path


def write_csv(rows: List[Dict[str, Any]], columns: Sequence[str], path: str) -> str:
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=list(columns), extrasaction="ignore")
        w.writeheader()
        for r in rows:
            w.writerow(r)
    return path


def write_export(
    rows: List[Dict[str, Any]],
    columns: Sequence[str],
    title: str,
    out_dir: str,
    as_csv: bool = False,
) -> str:
    os.makedirs(out_dir, exist_ok=True)
    path = os.path.join(out_dir, export_filename(title, as_csv))
    if as_csv:
        write_csv(rows, columns, path)
    else:
        write_workbook(rows, columns, title, path)
    logger.info("Wrote %d %s rows to %s", len(rows), title.lower(), path)
    return path
