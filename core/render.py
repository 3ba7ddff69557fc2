# core/render.py
from __future__ import annotations
import html
from typing import List, Sequence

from core.batch import AllocatedRow

def _cell(value, cls: str = "") -> str:
    attr = f' class="{cls}"' if cls else ""
    return f"<td{attr}>{html.escape(str(value))}</td>"

def render_preview_html(subjects: Sequence[str], rows: List[AllocatedRow]) -> str:
    if not rows:
        return "<div class='sa-empty'>No preview yet. Load a sheet and press Preview.</div>"

    head = "".join(f"<th>{html.escape(s)}</th>" for s in ["Name", *subjects, "Target", "Sum"])
    body = []
    for r in rows:
        # a sum that differs from the target means the total was adjusted
        sum_cls = "sa-sum" if r.checksum == r.target else "sa-sum sa-sum--clamped"
        cells = [_cell(r.name, "sa-name")]
        cells.extend(_cell(r.scores.get(s, "")) for s in subjects)
        cells.append(_cell(r.target))
        cells.append(_cell(r.checksum, sum_cls))
        body.append("<tr>" + "".join(cells) + "</tr>")

    return f"""
<div class="sa-table-wrap">
<table class="sa-table">
  <thead><tr>{head}</tr></thead>
  <tbody>
{chr(10).join(body)}
  </tbody>
</table>
</div>
"""

def render_summary(rows: List[AllocatedRow], n_subjects: int) -> str:
    lowered = sum(1 for r in rows if r.checksum < r.target)
    raised = sum(1 for r in rows if r.checksum > r.target)
    msg = f"✅ Allocated **{len(rows)}** students across **{n_subjects}** subjects."
    if lowered:
        msg += f" {lowered} row(s) had their total lowered to the paper maximum."
    if raised:
        msg += f" {raised} row(s) had their total raised to meet the per-subject minimum."
    return msg
