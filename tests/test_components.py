from __future__ import annotations

import pytest
from openpyxl import Workbook

from core.alloc import InvalidArgument
from ui.components import clear_all, on_export, on_file_change, on_preview, validate_inputs


@pytest.fixture
def sheet_path(tmp_path) -> str:
    wb = Workbook()
    ws = wb.active
    ws.append(["Name", "Math(50%)", "English(30%)", "Physics(20%)", "Total"])
    ws.append(["Alice", None, None, None, 245])
    ws.append(["Bob", None, None, None, 198])
    path = tmp_path / "class.xlsx"
    wb.save(path)
    return str(path)


@pytest.mark.parametrize("min_each, max_frac", [(-1, 0.5), (1.5, 0.5), ("x", 0.5), (1, 0), (1, 1.2), (1, None)])
def test_validate_inputs_rejects(min_each, max_frac) -> None:
    with pytest.raises(InvalidArgument):
        validate_inputs(min_each, max_frac)


def test_validate_inputs_accepts() -> None:
    assert validate_inputs(2.0, "0.5") == (2, 0.5)
    assert validate_inputs(0, 1) == (0, 1.0)


def test_on_file_change(sheet_path) -> None:
    sheet, rows, _, msg = on_file_change(sheet_path)

    assert sheet.subjects == ["Math", "English", "Physics"]
    assert rows == []
    assert "**2** students" in msg


def test_on_file_change_without_file() -> None:
    assert on_file_change(None)[0] is None


def test_on_preview_and_export(sheet_path, tmp_path) -> None:
    sheet, _, _, _ = on_file_change(sheet_path)

    rows, html_out, msg = on_preview(sheet, "Weighted (fraction cap)", True, "Fixed per row", 1, 0.6, 0.25)

    assert [r.checksum for r in rows] == [245, 198]
    assert "Alice" in html_out
    assert msg.startswith("✅")

    update, export_msg = on_export(sheet_path, sheet, rows)
    assert update["visible"] is True
    assert update["value"] == str(tmp_path / "class_allocated.xlsx")
    assert "Exported" in export_msg


def test_on_preview_reports_errors(sheet_path) -> None:
    sheet, _, _, _ = on_file_change(sheet_path)

    rows, _, msg = on_preview(sheet, "Weighted (fraction cap)", True, "Random every run", 70, 0.6, 0.25)
    assert rows == []
    assert "Bob" in msg

    rows, _, msg = on_preview(sheet, "Absolute max scores", True, "Random every run", 0, 0.6, 0.25)
    assert rows == []
    assert "Max score missing" in msg


def test_on_export_without_preview(sheet_path) -> None:
    sheet, _, _, _ = on_file_change(sheet_path)

    update, msg = on_export(sheet_path, sheet, [])

    assert update["visible"] is False
    assert msg.startswith("❌")


def test_clear_all_matches_outputs() -> None:
    assert len(clear_all()) == 12


def _write_sheet(path, header, totals) -> str:
    wb = Workbook()
    ws = wb.active
    ws.append(header)
    for name, total in totals:
        ws.append([name, *([None] * (len(header) - 2)), total])
    wb.save(path)
    return str(path)


def test_new_upload_drops_previous_preview(sheet_path, tmp_path) -> None:
    sheet_a, _, _, _ = on_file_change(sheet_path)
    rows_a, _, _ = on_preview(sheet_a, "Weighted (fraction cap)", True, "Fixed per row", 1, 0.6, 0.25)
    assert rows_a
    other = _write_sheet(tmp_path / "other.xlsx", ["Name", "Chemistry", "Biology", "Total"], [("Dan", 120)])

    sheet_b, rows, html_out, msg = on_file_change(other)

    assert sheet_b.subjects == ["Chemistry", "Biology"]
    assert rows == []
    assert "sa-empty" in html_out
    update, export_msg = on_export(other, sheet_b, rows)
    assert update["visible"] is False
    assert export_msg.startswith("❌")


def test_export_with_rows_from_another_sheet(sheet_path, tmp_path) -> None:
    sheet_a, _, _, _ = on_file_change(sheet_path)
    rows_a, _, _ = on_preview(sheet_a, "Weighted (fraction cap)", True, "Fixed per row", 1, 0.6, 0.25)
    other = _write_sheet(tmp_path / "other.xlsx", ["Name", "Chemistry", "Biology", "Total"], [("Dan", 120)])
    sheet_b, _, _, _ = on_file_change(other)

    update, msg = on_export(other, sheet_b, rows_a)

    assert update["visible"] is False
    assert "new preview" in msg


def test_on_file_change_reports_unreadable_file(tmp_path) -> None:
    bad = tmp_path / "broken.xlsx"
    bad.write_bytes(b"not a zip")

    sheet, rows, _, msg = on_file_change(str(bad))

    assert sheet is None
    assert rows == []
    assert msg.startswith("❌ Read failed")
