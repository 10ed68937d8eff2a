import asyncio
import io

import pandas as pd
from fastapi.testclient import TestClient

import availability_builder.aggregate as aggregate
import availability_builder.web.app as webapp
from availability_builder.drive import DriveFile, DriveFolder
from availability_builder.errors import FetchError
from availability_builder.grid import default_cache
from availability_builder.web.app import app

client = TestClient(app)
AUTH = {"Authorization": "Bearer tok"}


def _patch_drive(monkeypatch, grids):
    files = [DriveFile(file_id, f"Availability_{file_id}.xlsx") for file_id in grids]
    monkeypatch.setattr(aggregate, "list_files", lambda token, folder_id: files)
    monkeypatch.setattr(aggregate, "fetch_grid", lambda token, file, cache=None: grids[file.id])


def test_missing_token_is_rejected():
    resp = client.get("/folders", params={"parent_id": "p1"})
    assert resp.status_code == 401
    resp = client.post("/export/clients", json={"clients": "c"})
    assert resp.status_code == 401


def test_unknown_record_type():
    resp = client.post("/export/vendors", json={}, headers=AUTH)
    assert resp.status_code == 404


def test_list_folders(monkeypatch):
    seen = {}

    def fake_list_folders(token, parent_id):
        seen["args"] = (token, parent_id)
        return [DriveFolder("f1", "Clients")]

    monkeypatch.setattr(webapp, "list_folders", fake_list_folders)
    resp = client.get("/folders", params={"parent_id": "p1"}, headers=AUTH)
    assert resp.status_code == 200
    assert resp.json() == [{"id": "f1", "name": "Clients"}]
    assert seen["args"] == ("tok", "p1")


def test_list_folders_needs_parent():
    resp = client.get("/folders", headers=AUTH)
    assert resp.status_code == 400


def test_list_folders_drive_failure(monkeypatch):
    def failing(token, parent_id):
        raise FetchError("HTTP 403", status_code=403)

    monkeypatch.setattr(webapp, "list_folders", failing)
    resp = client.get("/folders", params={"parent_id": "p1"}, headers=AUTH)
    assert resp.status_code == 502


def test_export_clients_xlsx(monkeypatch, client_grid):
    _patch_drive(monkeypatch, {"AB": client_grid})
    resp = client.post("/export/clients", json={"clients": "folder-c"}, headers=AUTH)
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    assert "Clients_Processed.xlsx" in resp.headers["content-disposition"]
    assert resp.headers["x-record-count"] == "1"
    df = pd.read_excel(io.BytesIO(resp.content), sheet_name="Clients")
    assert df["Name"].tolist() == ["AB"]
    assert df["AM Monday"].tolist() == ["09:00-11:00"]


def test_export_without_folder_is_bad_request():
    resp = client.post("/export/staff", json={}, headers=AUTH)
    assert resp.status_code == 400


def test_export_folder_from_environment(monkeypatch, staff_grid):
    _patch_drive(monkeypatch, {"JD": staff_grid})
    monkeypatch.setenv("AVAILABILITY_THERAPISTS_FOLDER_ID", "folder-t")
    resp = client.post("/export/staff", headers=AUTH)
    assert resp.status_code == 200
    assert resp.headers["x-record-count"] == "1"


def test_export_listing_failure_is_bad_gateway(monkeypatch):
    def failing(token, folder_id):
        raise FetchError("HTTP 500", status_code=500)

    monkeypatch.setattr(aggregate, "list_files", failing)
    resp = client.post("/export/addresses", json={"clients": "folder-c"}, headers=AUTH)
    assert resp.status_code == 502
    assert resp.json()["detail"].startswith("Error processing addresses:")


def test_cache_status_and_clear():
    default_cache().put("f1", [["x"]])
    resp = client.get("/cache")
    assert resp.json() == {"entries": 1}
    resp = client.post("/cache/clear")
    assert resp.status_code == 200
    assert resp.json() == {"entries": 0}


def test_workbook_written_off_event_loop(monkeypatch, client_grid):
    _patch_drive(monkeypatch, {"AB": client_grid})
    real_workbook_bytes = webapp.workbook_bytes
    seen = {}

    def tracking_workbook_bytes(rows, columns, sheet_name):
        try:
            asyncio.get_running_loop()
            seen["on_loop"] = True
        except RuntimeError:
            seen["on_loop"] = False
        return real_workbook_bytes(rows, columns, sheet_name)

    monkeypatch.setattr(webapp, "workbook_bytes", tracking_workbook_bytes)
    resp = client.post("/export/clients", json={"clients": "folder-c"}, headers=AUTH)
    assert resp.status_code == 200
    assert seen == {"on_loop": False}
