from import_engine import preview_import
from import_engine.row_validator import DUPLICATE_NATIONAL_ID


def test_preview_reports_every_row(make_xlsx):
    content = make_xlsx([
        ("1001", "Ahmed Ali", "29012345678901", 27, "active"),
        ("1002", "Sara", "29012345678901", 20, "ABSENT"),
        ("1003", "Omar", "29012345678903", "xx", "hide"),
    ])

    report = preview_import(content)

    assert (report.total_rows, report.valid_rows, report.invalid_rows) == (3, 1, 2)
    first, second, third = report.rows
    assert first["valid"] and first["grade"] == 27
    assert second["reasons"] == [DUPLICATE_NATIONAL_ID]
    assert second["status"] == "absent"
    assert third["grade"] is None
    assert third["row_number"] == 4


def test_preview_of_unreadable_file():
    report = preview_import(b"garbage")

    assert report.error
    assert report.rows == []


def test_preview_never_writes(db, make_xlsx, rows_factory):
    from services.record_store import RecordStore

    preview_import(make_xlsx(rows_factory(5)))

    assert RecordStore().select("students")[1] == 0


def test_preview_of_corrupt_sheet(make_corrupt_xlsx, rows_factory):
    report = preview_import(make_corrupt_xlsx(rows_factory(20)))

    assert report.error
    assert report.rows == []
