from __future__ import annotations
import logging
from typing import Any, List, Optional, Tuple

import gradio as gr

import config as cfg
from core.alloc import AllocationError, InvalidArgument
from core.batch import AllocatedRow, allocate_students
from core.export import export_path_for, export_rows
from core.render import render_preview_html, render_summary
from core.sheet import SheetData, SheetError, load_sheet

logger = logging.getLogger("ui")

HELP_MD = """
**Sheet format** (first worksheet, row 1 is the header):

| Name | Math(50%) | English(30%) | Physics(20%) | Total |
|------|-----------|--------------|--------------|-------|
| Alice | | | | 245 |

- Column 1 holds student names; the total column must be titled one of: `""" + "`, `".join(cfg.TOTAL_COLUMN_TITLES) + """`.
- `Subject(50%)` sets a relative weight; a bare `Subject` gets weight 1.
- `Subject[100]` sets an absolute max score (required for *Absolute max scores* mode).

**Preview** never modifies the source file. **Export** writes a new workbook next to it.
"""

# ---------------- UI builders ----------------
def build_header():
    gr.Markdown(f"# {cfg.APP_TITLE}")

def build_controls():
    with gr.Group():
        with gr.Row():
            sheet_file = gr.File(label="Excel file (.xlsx)", file_types=[".xlsx"], type="filepath")
            with gr.Column():
                mode = gr.Radio(choices=list(cfg.MODES.keys()), value="Weighted (fraction cap)", label="Mode")
                use_weights = gr.Checkbox(value=True, label="Use header weights")
                seed_policy = gr.Radio(choices=list(cfg.SEED_POLICIES.keys()), value="Random every run", label="Seed")

        with gr.Row():
            min_each = gr.Number(value=cfg.DEFAULT_MIN_EACH, precision=0, label="Min per subject")
            max_frac = gr.Number(value=cfg.DEFAULT_MAX_FRACTION, label="Max share per subject (0-1]")
            randomness = gr.Slider(0, 1, value=cfg.DEFAULT_RANDOMNESS, step=0.01, label="Randomness")

        with gr.Accordion("Help", open=False):
            gr.Markdown(HELP_MD)

        with gr.Row():
            btn_preview = gr.Button("🎲 Preview", variant="primary")
            btn_export = gr.Button("💾 Export")
            btn_clear = gr.Button("↺ Clear")

    return (
        sheet_file, mode, use_weights, seed_policy,
        min_each, max_frac, randomness,
        btn_preview, btn_export, btn_clear,
    )

# ---------------- Validation ----------------
def validate_inputs(min_each: Any, max_frac: Any) -> Tuple[int, float]:
    try:
        m = float(min_each)
    except (TypeError, ValueError):
        raise InvalidArgument("Min per subject must be an integer >= 0.") from None
    if m < 0 or not m.is_integer():
        raise InvalidArgument("Min per subject must be an integer >= 0.")
    try:
        f = float(max_frac)
    except (TypeError, ValueError):
        raise InvalidArgument("Max share per subject must be a decimal in (0, 1].") from None
    if not (0.0 < f <= 1.0):
        raise InvalidArgument("Max share per subject must be a decimal in (0, 1].")
    return int(m), f

# ---------------- Callbacks ----------------
def on_file_change(path: Optional[str]):
    """Load a new sheet; any preview built from the previous sheet is dropped."""
    empty = render_preview_html([], [])
    if not path:
        return None, [], empty, "Choose an .xlsx file to begin."
    try:
        sheet = load_sheet(path)
    except SheetError as e:
        logger.warning("Read failed for %s: %s", path, e)
        return None, [], empty, f"❌ Read failed: {e}"
    extra = f" Paper maximum: **{sheet.paper_max}**." if sheet.has_max_scores else ""
    return sheet, [], empty, f"Loaded **{len(sheet.students)}** students and **{len(sheet.subjects)}** subjects.{extra}"

def on_preview(sheet: Optional[SheetData], mode_label: str, use_weights: bool, seed_label: str,
               min_each: Any, max_frac: Any, randomness: float):
    if sheet is None:
        return [], render_preview_html([], []), "Choose an .xlsx file first."
    try:
        m, f = validate_inputs(min_each, max_frac)
        rows = allocate_students(
            sheet,
            mode_name=cfg.MODES.get(mode_label, "weighted"),
            min_each=m,
            max_fraction=f,
            randomness=float(randomness),
            seed_policy=cfg.SEED_POLICIES.get(seed_label, "none"),
            use_weights=bool(use_weights),
        )
    except AllocationError as e:
        return [], render_preview_html([], []), f"❌ {e}"
    return rows, render_preview_html(sheet.subjects, rows), render_summary(rows, len(sheet.subjects))

def on_export(path: Optional[str], sheet: Optional[SheetData], rows: List[AllocatedRow]):
    if not path or sheet is None:
        return gr.update(value=None, visible=False), "No source file selected."
    try:
        out = export_rows(sheet.subjects, rows or [], export_path_for(path))
    except SheetError as e:
        return gr.update(value=None, visible=False), f"❌ {e}"
    return gr.update(value=out, visible=True), f"💾 Exported to `{out}`"

def clear_all():
    return (
        None,                                   # sheet_file
        "Weighted (fraction cap)",              # mode
        True,                                   # use_weights
        "Random every run",                     # seed_policy
        cfg.DEFAULT_MIN_EACH,
        cfg.DEFAULT_MAX_FRACTION,
        cfg.DEFAULT_RANDOMNESS,
        None, [],                               # sheet_state, rows_state
        render_preview_html([], []),
        "Choose an .xlsx file to begin.",
        gr.update(value=None, visible=False),  # download
    )
