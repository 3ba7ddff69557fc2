# app.py
from __future__ import annotations
import logging

import gradio as gr

import config as cfg
from core.render import render_preview_html
from ui.components import (
    build_controls, build_header, clear_all,
    on_export, on_file_change, on_preview,
)

LOG_FMT = "[%(levelname)s] %(name)s: %(message)s"

def setup_logging(debug: bool) -> None:
    logging.basicConfig(level=(logging.DEBUG if debug else logging.INFO), format=LOG_FMT)

# -------------------- Theme & CSS --------------------
theme = gr.themes.Soft(
    primary_hue=gr.themes.colors.indigo,
    secondary_hue=gr.themes.colors.blue,
    neutral_hue=gr.themes.colors.gray,
)

CUSTOM_CSS = """
.sa-container { max-width: 1300px; margin: 0 auto; }
.sa-table-wrap { overflow-x: auto; }
.sa-table { border-collapse: collapse; width: 100%; font-size: 14px; }
.sa-table th, .sa-table td { border: 1px solid rgba(127,127,127,0.35); padding: 4px 8px; text-align: right; }
.sa-table th { background: rgba(99,102,241,0.15); text-align: center; }
.sa-table td.sa-name { text-align: left; font-weight: 600; }
.sa-sum { font-weight: 700; }
.sa-sum--clamped { color: #d97706; }
.sa-empty { opacity: .8; padding: 6px 2px; }
"""

# -------------------- UI --------------------
with gr.Blocks(title="Score Allocator", theme=theme, css=CUSTOM_CSS, analytics_enabled=False) as demo:
    with gr.Column(elem_classes=["sa-container"]):
        build_header()
        (sheet_file, mode, use_weights, seed_policy,
         min_each, max_frac, randomness,
         btn_preview, btn_export, btn_clear) = build_controls()

        status = gr.Markdown("Choose an .xlsx file to begin.")
        preview_html = gr.HTML(render_preview_html([], []))
        download = gr.File(label="Exported workbook", visible=False)

    sheet_state = gr.State(None)
    rows_state = gr.State([])

    sheet_file.change(
        on_file_change,
        inputs=[sheet_file],
        outputs=[sheet_state, rows_state, preview_html, status],
        queue=False,
    )

    btn_preview.click(
        on_preview,
        inputs=[sheet_state, mode, use_weights, seed_policy, min_each, max_frac, randomness],
        outputs=[rows_state, preview_html, status],
    )

    btn_export.click(
        on_export,
        inputs=[sheet_file, sheet_state, rows_state],
        outputs=[download, status],
    )

    btn_clear.click(
        clear_all,
        inputs=None,
        outputs=[sheet_file, mode, use_weights, seed_policy,
                 min_each, max_frac, randomness,
                 sheet_state, rows_state, preview_html, status, download],
        queue=False,
    )

if __name__ == "__main__":
    setup_logging(cfg.DEBUG)
    demo.launch(server_name=cfg.SERVER_NAME, server_port=cfg.SERVER_PORT)
