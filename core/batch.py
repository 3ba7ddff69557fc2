# core/batch.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

import config as cfg
from core.alloc import AbsoluteCapMode, AllocationError, InvalidArgument, Mode, WeightedFractionMode, allocate
from core.sheet import SheetData

logger = logging.getLogger("batch")


class StudentAllocationError(AllocationError):
    def __init__(self, student: str, cause: Exception) -> None:
        super().__init__(f"Student {student}: {cause}")
        self.student = student


@dataclass
class AllocatedRow:
    name: str
    target: int
    scores: Dict[str, int]

    @property
    def checksum(self) -> int:
        return sum(self.scores.values())


def seed_for(policy: str, index: int, total: int) -> Optional[int]:
    """Per-row seed. index is 0-based; 'row' matches i + 1."""
    if policy == "none":
        return None
    if policy == "row":
        return index + 1
    if policy == "row_total":
        return (index + 1) * 100_003 + total
    raise InvalidArgument(f"unknown seed policy: {policy}")


def build_mode(sheet: SheetData, mode_name: str, min_each: int, max_fraction: float,
               use_weights: bool = True) -> Mode:
    if mode_name == "weighted":
        weights = list(sheet.weights) if use_weights else None
        return WeightedFractionMode(weights=weights, min_each=min_each, max_each_fraction=max_fraction)
    if mode_name == "absolute":
        if not sheet.has_max_scores:
            missing = [s for s, m in zip(sheet.subjects, sheet.max_scores) if m is None]
            raise InvalidArgument(f"Max score missing for: {', '.join(missing)} (use headers like 'Math[100]')")
        return AbsoluteCapMode(max_scores=[int(m) for m in sheet.max_scores], min_each=min_each)  # type: ignore[arg-type]
    raise InvalidArgument(f"unknown mode: {mode_name}")


def allocate_students(
    sheet: SheetData,
    mode_name: str = "weighted",
    min_each: int = cfg.DEFAULT_MIN_EACH,
    max_fraction: float = cfg.DEFAULT_MAX_FRACTION,
    randomness: float = cfg.DEFAULT_RANDOMNESS,
    seed_policy: str = "none",
    use_weights: bool = True,
) -> List[AllocatedRow]:
    mode = build_mode(sheet, mode_name, min_each, max_fraction, use_weights)
    rows: List[AllocatedRow] = []
    for i, (name, total) in enumerate(sheet.students):
        try:
            scores = allocate(total, sheet.subjects, mode, randomness=randomness,
                              seed=seed_for(seed_policy, i, total))
        except AllocationError as e:
            logger.warning("Allocation failed for %s (total=%d): %s", name, total, e)
            raise StudentAllocationError(name, e) from e
        rows.append(AllocatedRow(name=name, target=total, scores=scores))
    logger.info("Allocated %d students (mode=%s, seed_policy=%s)", len(rows), mode_name, seed_policy)
    return rows
