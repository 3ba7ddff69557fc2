# core/export.py
from __future__ import annotations
import logging
import os
from typing import List, Sequence

from openpyxl import Workbook
from openpyxl.utils import get_column_letter

import config as cfg
from core.batch import AllocatedRow
from core.sheet import SheetError

logger = logging.getLogger("export")

def export_path_for(source_path: str, suffix: str = cfg.EXPORT_SUFFIX) -> str:
    """<dir>/<stem><suffix>.xlsx next to the source workbook."""
    folder = os.path.dirname(os.path.abspath(source_path))
    stem = os.path.splitext(os.path.basename(source_path))[0]
    return os.path.join(folder, f"{stem}{suffix}.xlsx")

def export_rows(subjects: Sequence[str], rows: List[AllocatedRow], out_path: str) -> str:
    if not rows:
        raise SheetError("Nothing to export; generate a preview first.")
    stale = [r.name for r in rows if set(r.scores) != set(subjects)]
    if stale:
        raise SheetError(f"Preview does not match the loaded sheet ({stale[0]}); generate a new preview.")

    wb = Workbook()
    ws = wb.active
    ws.title = cfg.EXPORT_SHEET_TITLE
    header = ["Name", *subjects, "Target", "Sum"]
    ws.append(header)
    for r in rows:
        ws.append([r.name, *(r.scores[s] for s in subjects), r.target, r.checksum])

    # fit column widths to content
    for col_idx, title in enumerate(header, start=1):
        width = max(len(str(title)), *(len(str(ws.cell(row=i, column=col_idx).value or "")) for i in range(2, ws.max_row + 1)))
        ws.column_dimensions[get_column_letter(col_idx)].width = width + 2

    wb.save(out_path)
    logger.info("Exported %d rows to %s", len(rows), out_path)
    return out_path
