# core/sheet.py
"""
Read subjects and per-student totals from the first worksheet of an .xlsx file.

Layout
------
Row 1:   Name | Math(50%) | English(30%) | Physics[100] | ... | Total
Row 2+:  Alice | ...       | ...          | ...          | ... | 412

Column 1 holds student names; the total column is matched by title
(cfg.TOTAL_COLUMN_TITLES). Every other header becomes a subject.
"""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

import config as cfg
from core.utils import cell_text, parse_int, parse_subject_header

logger = logging.getLogger("sheet")


class SheetError(ValueError):
    """Spreadsheet content cannot be turned into an allocation input."""


@dataclass
class SheetData:
    subjects: List[str] = field(default_factory=list)
    weights: List[float] = field(default_factory=list)
    max_scores: List[Optional[int]] = field(default_factory=list)
    students: List[Tuple[str, int]] = field(default_factory=list)   # (name, total)

    @property
    def has_max_scores(self) -> bool:
        return bool(self.max_scores) and all(m is not None for m in self.max_scores)

    @property
    def paper_max(self) -> Optional[int]:
        return sum(self.max_scores) if self.has_max_scores else None  # type: ignore[arg-type]


def parse_rows(rows: List[Tuple]) -> SheetData:
    """Build SheetData from raw row tuples (header first)."""
    if not rows:
        raise SheetError("The sheet is empty.")
    header = [cell_text(c) for c in rows[0]]

    total_col = next((i for i, t in enumerate(header) if i > 0 and t in cfg.TOTAL_COLUMN_TITLES), -1)
    if total_col < 0:
        raise SheetError(f"No total column found; expected one of: {', '.join(cfg.TOTAL_COLUMN_TITLES)}")

    data = SheetData()
    for i, title in enumerate(header):
        if i == 0 or i == total_col or not title:
            continue
        name, weight, max_score = parse_subject_header(title)
        if name in data.subjects:
            raise SheetError(f"Duplicate subject column: {name}")
        data.subjects.append(name)
        data.weights.append(weight)
        data.max_scores.append(max_score)
    if not data.subjects:
        raise SheetError("No subject columns found in the header row.")

    for row in rows[1:]:
        if not row:
            continue
        name = cell_text(row[0])
        if not name:
            continue
        raw = row[total_col] if total_col < len(row) else None
        total = parse_int(raw)
        if total is None or total <= 0:
            raise SheetError(f"Invalid total for student {name}: {cell_text(raw) or 'empty'} (must be a positive integer)")
        data.students.append((name, total))
    if not data.students:
        raise SheetError("No student rows found.")
    return data


def load_sheet(path: str) -> SheetData:
    try:
        wb = load_workbook(path, read_only=True, data_only=True)
    except (InvalidFileException, BadZipFile, OSError, KeyError) as e:
        raise SheetError(f"Cannot open {os.path.basename(path)} as an .xlsx workbook: {e}") from e
    try:
        ws = wb.worksheets[0]
        rows = list(ws.iter_rows(values_only=True))
    finally:
        wb.close()
    data = parse_rows(rows)
    logger.info("Loaded %s: %d students, %d subjects", path, len(data.students), len(data.subjects))
    return data
