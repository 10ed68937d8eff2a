"""Pytest configuration isolating tests from a developer's Drive settings.

Drive-related variables are blanked BEFORE the package is imported, so a
local .env (loaded by availability_builder.config) cannot point tests at real
folders or tokens: python-dotenv never overrides variables already present.
"""

import os

import pytest

for _name in (
    "AVAILABILITY_ACCESS_TOKEN",
    "AVAILABILITY_PARENT_FOLDER_ID",
    "AVAILABILITY_CLIENTS_FOLDER_ID",
    "AVAILABILITY_THERAPISTS_FOLDER_ID",
    "AVAILABILITY_SUPERVISORS_FOLDER_ID",
    "AVAILABILITY_DRIVE_API",
    "AVAILABILITY_STRICT",
    "AVAILABILITY_OUTPUT_DIR",
):
    os.environ[_name] = ""
os.environ["AVAILABILITY_CONCURRENCY"] = "4"

from availability_builder.grid import clear_cache  # noqa: E402


@pytest.fixture(autouse=True)
def _empty_grid_cache():
    clear_cache()
    yield
    clear_cache()


@pytest.fixture
def client_grid():
    return [
        ["Client Initials", "AB"],
        ["Home Address", "12 Elm St"],
        ["School Address", "Lincoln Elementary"],
        ["Planned Vacation / Time Off", "Dec 20 - Jan 2"],
        [],
        ["Time", "Home/School", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"],
        ["9:00am - 10:00am", "Home", True, "TRUE", False, None, None, None, None],
        ["10:15am - 11:00am", "Home", True, False, False, None, None, None, None],
        ["1:00pm - 2:00pm", "School", True, False, False, None, None, None, None],
        ["3:00pm - 4:00pm", "School", False, "TRUE", False, None, None, None, "TRUE"],
    ]


@pytest.fixture
def staff_grid():
    return [
        ["Therapist Initials", "JD"],
        ["Home Address", "5 Oak Ave"],
        ["School Address", "District Office"],
        ["Vacation", "July 4"],
        [None, "Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"],
        ["8:00am - 12:00pm", True, "TRUE", False, False, False, False, False],
        ["12:00pm - 4:00pm", True, False, False, False, False, False, False],
    ]
