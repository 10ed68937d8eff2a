import pytest

from availability_builder.errors import MissingHeaderError, SlotParseError
from availability_builder.records import (
    ADDRESS_COLUMNS,
    CLIENT_COLUMNS,
    STAFF_COLUMNS,
    AddressRecord,
    build_address_records,
    build_client_record,
    build_staff_record,
    project,
    sort_address_records,
)


def test_client_columns_fixed_order():
    assert CLIENT_COLUMNS[0] == "Name"
    assert CLIENT_COLUMNS[-1] == "Time Off"
    assert len(CLIENT_COLUMNS) == 44
    assert CLIENT_COLUMNS[1:7] == [
        "AM Monday",
        "AM Monday Location",
        "Pref Therapist AM Monday",
        "PM Monday",
        "PM Monday Location",
        "Pref Therapist PM Monday",
    ]


def test_build_client_record(client_grid):
    record = build_client_record(client_grid, "Availability_AB.xlsx")
    assert list(record) == CLIENT_COLUMNS
    assert record["Name"] == "AB"
    assert record["AM Monday"] == "09:00-11:00"
    assert record["AM Monday Location"] == "H"
    assert record["PM Monday"] == "13:00-14:00"
    assert record["PM Monday Location"] == "S"
    assert record["AM Tuesday"] == "09:00-10:00"
    assert record["PM Tuesday"] == "15:00-16:00"
    assert record["AM Wednesday"] == "" and record["PM Wednesday"] == ""
    assert record["AM Sunday"] == ""
    assert record["PM Sunday"] == "15:00-16:00"
    assert record["PM Sunday Location"] == "S"
    assert record["Pref Therapist AM Monday"] == ""
    assert record["Time Off"] == "Dec 20 - Jan 2"


def test_client_records_share_key_order_even_with_missing_days(client_grid):
    partial = [
        ["Client Initials", "CD"],
        ["Time", "Home/School", "Mon"],
        ["9:00am - 10:00am", "Home", True],
    ]
    a = build_client_record(client_grid, "a.xlsx")
    b = build_client_record(partial, "b.xlsx")
    assert list(a) == list(b) == CLIENT_COLUMNS
    assert b["AM Monday"] == "09:00-10:00"
    assert b["AM Friday"] == ""
    assert b["Time Off"] == "None"


def test_client_record_requires_home_school_header():
    grid = [["Client Initials", "AB"], ["Time", "", "Mon", "Tue"]]
    with pytest.raises(MissingHeaderError):
        build_client_record(grid, "x.xlsx")


def test_client_record_bad_ticked_label_raises():
    grid = [["Time", "Home/School", "Mon"], ["9:00 - ", "Home", True]]
    with pytest.raises(SlotParseError):
        build_client_record(grid, "x.xlsx")


def test_build_staff_record(staff_grid):
    record = build_staff_record(staff_grid, "Availability_JD.xlsx", is_supervisor=True)
    assert list(record) == STAFF_COLUMNS
    assert record["Name"] == "JD"
    assert record["ProgramSupervisor"] is True
    assert record["Mon"] == "08:00 - 16:00"
    assert record["Tue"] == "08:00 - 12:00"
    assert record["Wed"] == "Unavailable"
    assert record["Time Off"] == "July 4"


def test_staff_single_wednesday_end_to_end():
    grid = [
        ["", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"],
        ["8:00am - 4:00pm", False, False, "TRUE", False, False, False, False],
    ]
    record = build_staff_record(grid, "Avail_MK.xlsx", is_supervisor=False)
    assert record["Wed"] == "08:00 - 16:00"
    for day in ("Mon", "Tue", "Thu", "Fri", "Sat", "Sun"):
        assert record[day] == "Unavailable"
    assert record["Name"] == "MK"
    assert record["ProgramSupervisor"] is False


def test_staff_missing_day_column_is_unavailable():
    grid = [["", "Mon", "Tue"], ["9:00am - 5:00pm", True, True]]
    record = build_staff_record(grid, "x.xlsx", False)
    assert record["Mon"] == "09:00 - 17:00"
    assert record["Sat"] == "Unavailable"
    assert record["Name"] == "Unknown"


def test_staff_missing_header_raises():
    with pytest.raises(MissingHeaderError):
        build_staff_record([["Initials", "JD"]], "x.xlsx", False)


def test_client_addresses_get_suffix(client_grid):
    records = build_address_records(client_grid, "a.xlsx", "Client")
    assert records == [
        AddressRecord("ABH", "Client", "12 Elm St"),
        AddressRecord("ABS", "Client", "Lincoln Elementary"),
    ]


def test_staff_addresses_home_only(staff_grid):
    records = build_address_records(staff_grid, "a.xlsx", "Staff")
    assert records == [AddressRecord("JD", "Staff", "5 Oak Ave")]


def test_empty_address_rows_skipped():
    grid = [["Initials", "QQ"], ["Home Address", None], ["Address", "  "]]
    assert build_address_records(grid, "a.xlsx", "Client") == []


def test_unknown_address_type_rejected():
    with pytest.raises(ValueError):
        build_address_records([], "a.xlsx", "Vendor")


def test_address_sort_clients_first():
    records = [
        AddressRecord("BZ", "Staff", "x"),
        AddressRecord("AA", "Client", "y"),
        AddressRecord("AB", "Client", "z"),
    ]
    ordered = sort_address_records(records)
    assert [(r.record_type, r.initials) for r in ordered] == [
        ("Client", "AA"),
        ("Client", "AB"),
        ("Staff", "BZ"),
    ]


def test_address_sort_is_case_insensitive():
    records = [AddressRecord("bcH", "Client", "x"), AddressRecord("ABH", "Client", "y")]
    assert [r.initials for r in sort_address_records(records)] == ["ABH", "bcH"]


def test_address_record_as_row():
    row = AddressRecord("ABH", "Client", "12 Elm St").as_row()
    assert list(row) == ADDRESS_COLUMNS


def test_project_fills_and_orders():
    assert project({"b": None, "a": 1, "z": 9}, ["a", "b", "c"]) == {"a": 1, "b": "", "c": ""}
    assert list(project({"b": 2, "a": 1}, ["a", "b"])) == ["a", "b"]


def test_client_record_rejects_label_running_past_midnight():
    grid = [["Time", "Home/School", "Mon"], ["11:30pm - 12:00am", "Home", True]]
    with pytest.raises(SlotParseError):
        build_client_record(grid, "x.xlsx")
