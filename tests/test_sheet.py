from __future__ import annotations

import pytest
from openpyxl import Workbook

from core.sheet import SheetError, load_sheet, parse_rows
from core.utils import cell_text, parse_int, parse_subject_header


def _write_xlsx(path, rows) -> str:
    wb = Workbook()
    ws = wb.active
    for r in rows:
        ws.append(list(r))
    wb.save(path)
    return str(path)


@pytest.mark.parametrize(
    "title, expected",
    [
        ("Math(50%)", ("Math", 50.0, None)),
        ("数学（30%）", ("数学", 30.0, None)),
        ("English ( 12.5 % )", ("English", 12.5, None)),
        ("Physics[100]", ("Physics", 1.0, 100)),
        ("Art", ("Art", 1.0, None)),
    ],
)
def test_parse_subject_header(title, expected) -> None:
    assert parse_subject_header(title) == expected


@pytest.mark.parametrize(
    "value, expected",
    [(85, 85), (85.0, 85), ("85", 85), (" 85.0 ", 85), (85.5, None), ("abc", None), (None, None), (True, None)],
)
def test_parse_int(value, expected) -> None:
    assert parse_int(value) == expected


def test_cell_text() -> None:
    assert cell_text(None) == ""
    assert cell_text(3.0) == "3"
    assert cell_text("  Bob ") == "Bob"


def test_parse_rows_weights_and_students() -> None:
    rows = [
        ("Name", "Math(50%)", "English(30%)", "Art", "总分"),
        ("Alice", None, None, None, 240),
        (None, None, None, None, None),
        ("Bob", None, None, None, "180"),
    ]

    data = parse_rows(rows)

    assert data.subjects == ["Math", "English", "Art"]
    assert data.weights == [50.0, 30.0, 1.0]
    assert data.students == [("Alice", 240), ("Bob", 180)]
    assert not data.has_max_scores
    assert data.paper_max is None


def test_parse_rows_total_column_not_a_subject() -> None:
    rows = [("Name", "Total", "Math[100]", "English[50]"), ("Alice", 120, None, None)]

    data = parse_rows(rows)

    assert data.subjects == ["Math", "English"]
    assert data.max_scores == [100, 50]
    assert data.has_max_scores
    assert data.paper_max == 150


def test_parse_rows_missing_total_column() -> None:
    with pytest.raises(SheetError, match="No total column"):
        parse_rows([("Name", "Math", "English"), ("Alice", 1, 2)])


def test_parse_rows_invalid_total_names_student() -> None:
    rows = [("Name", "Math", "Total"), ("Alice", None, 100), ("Bob", None, "n/a")]

    with pytest.raises(SheetError, match="Bob"):
        parse_rows(rows)


def test_parse_rows_rejects_zero_total() -> None:
    with pytest.raises(SheetError):
        parse_rows([("Name", "Math", "Total"), ("Alice", None, 0)])


def test_parse_rows_needs_students_and_subjects() -> None:
    with pytest.raises(SheetError, match="No student rows"):
        parse_rows([("Name", "Math", "Total")])
    with pytest.raises(SheetError, match="No subject columns"):
        parse_rows([("Name", "Total"), ("Alice", 10)])
    with pytest.raises(SheetError):
        parse_rows([])


def test_parse_rows_duplicate_subject() -> None:
    with pytest.raises(SheetError, match="Duplicate"):
        parse_rows([("Name", "Math(50%)", "Math[100]", "Total"), ("Alice", None, None, 10)])


def test_load_sheet_from_xlsx(tmp_path) -> None:
    path = _write_xlsx(
        tmp_path / "scores.xlsx",
        [
            ("Name", "Math(50%)", "English(30%)", "Physics(20%)", "合计"),
            ("Alice", None, None, None, 245),
            ("Bob", None, None, None, 198),
        ],
    )

    data = load_sheet(path)

    assert data.subjects == ["Math", "English", "Physics"]
    assert data.students == [("Alice", 245), ("Bob", 198)]


def test_load_sheet_rejects_non_zip_file(tmp_path) -> None:
    bad = tmp_path / "broken.xlsx"
    bad.write_bytes(b"not a zip")

    with pytest.raises(SheetError, match="broken.xlsx"):
        load_sheet(str(bad))


def test_load_sheet_rejects_unsupported_extension(tmp_path) -> None:
    bad = tmp_path / "scores.txt"
    bad.write_text("Name,Math,Total\n")

    with pytest.raises(SheetError):
        load_sheet(str(bad))


def test_load_sheet_missing_file(tmp_path) -> None:
    with pytest.raises(SheetError):
        load_sheet(str(tmp_path / "missing.xlsx"))
