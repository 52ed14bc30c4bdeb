from src.services.normalizer import normalize_order
from src.services.writer import (
    DualSinkWriter,
    MirrorFailed,
    PrimaryStoreFailed,
    WriteOutcome,
)

from tests.conftest import FakeSheets, FakeStore


def test_full_success_writes_same_records_to_both_sinks(writer, store, sheets, order_payload):
    records = normalize_order(order_payload)

    report = writer.write("EmailTest", records, "Sheet1")

    assert report.outcome is WriteOutcome.FULL_SUCCESS
    assert report.ok
    assert report.record_count == 3
    assert [row["id"] for row in report.stored] == [1, 2, 3]
    assert report.updated_range == "Sheet1!A2:K4"

    (table, rows), = store.calls
    assert table == "EmailTest"
    assert rows == [r.to_row() for r in records]

    (spreadsheet_id, range_name, sheet_rows), = sheets.calls
    assert spreadsheet_id == "sheet-id"
    assert range_name == "Sheet1"
    assert sheet_rows == [r.to_sheet_row() for r in records]


def test_store_failure_skips_mirror(sheets, order_payload):
    store = FakeStore(fail=True)
    writer = DualSinkWriter(store, sheets, "sheet-id")

    report = writer.write("EmailTest", normalize_order(order_payload), "Sheet1")

    assert report.outcome is WriteOutcome.FATAL
    assert isinstance(report.error, PrimaryStoreFailed)
    assert "duplicate key" in report.error.details
    assert len(store.calls) == 1
    assert sheets.calls == []


def test_mirror_failure_keeps_stored_rows(store, order_payload):
    sheets = FakeSheets(fail=True)
    writer = DualSinkWriter(store, sheets, "sheet-id")

    report = writer.write("EmailTest", normalize_order(order_payload), "Sheet1")

    assert report.outcome is WriteOutcome.PARTIAL_SUCCESS
    assert isinstance(report.error, MirrorFailed)
    assert len(sheets.calls) == 1
    assert len(store.rows) == 3
    assert len(report.stored) == 3


def test_empty_records_touch_no_sink(writer, store, sheets):
    report = writer.write("EmailTest", [], "Sheet1")

    assert report.outcome is WriteOutcome.FULL_SUCCESS
    assert report.record_count == 0
    assert store.calls == []
    assert sheets.calls == []


def test_custom_sheet_row_mapping(writer, sheets, order_payload):
    records = normalize_order(order_payload)

    writer.write("EmailTest", records, "Orders!A:B", to_sheet_row=lambda r: [r.email, r.quantity])

    assert sheets.calls[0][1] == "Orders!A:B"
    assert sheets.calls[0][2] == [["buyer@example.com", 1]] * 3
