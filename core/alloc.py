# core/alloc.py
"""
Random score allocation.

Splits an integer total across ordered subjects so that:
- scores sum exactly to the (effective) total
- every score stays inside [min_each, cap]
- scores roughly follow the subject weights (or max scores)
- a seeded Gaussian jitter keeps rows from looking identical

Two modes, picked explicitly by the caller:
  WeightedFractionMode  -> cap = floor(total * max_each_fraction), strict feasibility
  AbsoluteCapMode       -> cap = max_scores[i], lenient total clamping
"""
from __future__ import annotations
import logging
import math
import random
from dataclasses import dataclass
from typing import Dict, List, NamedTuple, Optional, Sequence, Union

import config as cfg

logger = logging.getLogger("alloc")


# ---- errors ----
class AllocationError(Exception):
    """Base class for allocation failures."""

class InvalidArgument(AllocationError, ValueError):
    pass

class InfeasibleRequest(AllocationError, ValueError):
    pass

class AllocationInvariantViolated(AllocationError, RuntimeError):
    pass


# ---- modes ----
@dataclass(frozen=True)
class WeightedFractionMode:
    weights: Optional[Sequence[float]] = None   # None => uniform
    min_each: int = cfg.DEFAULT_MIN_EACH
    max_each_fraction: float = cfg.DEFAULT_MAX_FRACTION

@dataclass(frozen=True)
class AbsoluteCapMode:
    max_scores: Sequence[int]
    min_each: int = 0

Mode = Union[WeightedFractionMode, AbsoluteCapMode]

@dataclass(frozen=True)
class AllocationRequest:
    total_score: int
    subjects: Sequence[str]
    mode: Mode
    randomness: float = cfg.DEFAULT_RANDOMNESS
    seed: Optional[int] = None

class RepairOutcome(NamedTuple):
    remaining: int   # unresolved difference (target - sum)
    steps: int       # unit moves applied


# ---- helpers ----
def round_half_up(x: float) -> int:
    """Round half away from zero (inputs here are never negative)."""
    return int(math.floor(x + 0.5)) if x >= 0 else -int(math.floor(-x + 0.5))

def next_gaussian(rng: random.Random, mean: float, stddev: float) -> float:
    """Box-Muller; consumes exactly two uniform draws."""
    u1 = 1.0 - rng.random()
    u2 = 1.0 - rng.random()
    z0 = math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
    return mean + z0 * stddev

def _can_move(value: int, sign: int, min_each: int, cap: int) -> bool:
    return value < cap if sign > 0 else value > min_each

def _validate_common(total_score: int, subjects: Sequence[str], min_each: int, randomness: float) -> None:
    if not subjects:
        raise InvalidArgument("subjects must not be empty")
    if len(set(subjects)) != len(subjects):
        raise InvalidArgument("subject names must be unique")
    if min_each < 0:
        raise InvalidArgument(f"min_each must be >= 0, got {min_each}")
    if randomness < 0:
        raise InvalidArgument(f"randomness must be >= 0, got {randomness}")


# ---- repair ----
def repair_random_probe(values: List[int], diff: int, min_each: int, caps: Sequence[int],
                        rng: random.Random) -> RepairOutcome:
    """
    Apply |diff| unit moves at randomly probed subjects (up to 5n probes each),
    falling back to the first eligible subject. Stops early if nothing can move.
    """
    n = len(values)
    sign = 1 if diff > 0 else -1
    steps = 0
    for _ in range(abs(diff)):
        idx = None
        for _ in range(5 * n):
            i = rng.randrange(n)
            if _can_move(values[i], sign, min_each, caps[i]):
                idx = i
                break
        if idx is None:
            idx = next((i for i in range(n) if _can_move(values[i], sign, min_each, caps[i])), None)
        if idx is None:
            break
        values[idx] += sign
        steps += 1
    return RepairOutcome(diff - sign * steps, steps)

def repair_back_to_front(values: List[int], target: int, min_each: int, caps: Sequence[int],
                         max_iterations: int = cfg.MAX_REPAIR_ITERATIONS) -> RepairOutcome:
    """
    Nudge one unit at a time, always at the last eligible subject, until the
    sum hits target, no subject can move, or max_iterations is reached.
    """
    diff = target - sum(values)
    steps = 0
    while diff != 0:
        if steps >= max_iterations:
            logger.warning("Repair hit iteration cap (%d), %d units unresolved", max_iterations, diff)
            break
        sign = 1 if diff > 0 else -1
        for i in reversed(range(len(values))):
            if _can_move(values[i], sign, min_each, caps[i]):
                values[i] += sign
                diff -= sign
                steps += 1
                break
        else:
            break
    return RepairOutcome(diff, steps)


# ---- core ----
def _noisy_ints(effective: int, proportions: Sequence[float], caps: Sequence[int], min_each: int,
                randomness: float, rng: random.Random) -> List[int]:
    n = len(proportions)
    sigma = randomness * effective / math.sqrt(n)
    out: List[int] = []
    for p, cap in zip(proportions, caps):
        noise = next_gaussian(rng, 0.0, sigma)
        noisy = max(min_each, min(cap, effective * p + noise))
        out.append(round_half_up(noisy))
    return out

def _allocate_weighted(total: int, subjects: Sequence[str], mode: WeightedFractionMode,
                       randomness: float, rng: random.Random) -> List[int]:
    n = len(subjects)
    min_each = mode.min_each
    if not (0.0 < mode.max_each_fraction <= 1.0):
        raise InvalidArgument(f"max_each_fraction must be in (0, 1], got {mode.max_each_fraction}")
    if mode.weights is not None and len(mode.weights) != n:
        raise InvalidArgument(f"expected {n} weights, got {len(mode.weights)}")
    if total < n * min_each:
        raise InfeasibleRequest(f"total_score={total} is too small for n*min_each={n * min_each}")

    raw = [1.0] * n if mode.weights is None else [max(cfg.WEIGHT_FLOOR, float(w)) for w in mode.weights]
    w_sum = sum(raw)
    proportions = [w / w_sum for w in raw]

    max_each = max(int(math.floor(total * mode.max_each_fraction)), min_each + 1)
    caps = [max_each] * n

    ints = _noisy_ints(total, proportions, caps, min_each, randomness, rng)
    diff = total - sum(ints)
    if diff != 0:
        outcome = repair_random_probe(ints, diff, min_each, caps, rng)
        logger.debug("Random-probe repair: diff=%d steps=%d remaining=%d", diff, outcome.steps, outcome.remaining)

    # all-equal rows look fabricated; shift one unit to a neighbour
    if n >= 2 and all(x == ints[0] for x in ints):
        a = rng.randrange(n)
        b = (a + 1) % n
        if ints[a] > min_each and ints[b] < max_each:
            ints[a] -= 1
            ints[b] += 1

    if sum(ints) != total:
        raise AllocationInvariantViolated(f"allocation sums to {sum(ints)}, expected {total}")
    return ints

def _allocate_absolute(total: int, subjects: Sequence[str], mode: AbsoluteCapMode,
                       randomness: float, rng: random.Random) -> List[int]:
    n = len(subjects)
    min_each = mode.min_each
    if len(mode.max_scores) != n:
        raise InvalidArgument(f"expected {n} max scores, got {len(mode.max_scores)}")
    caps = [int(m) for m in mode.max_scores]
    if any(c < 0 for c in caps):
        raise InvalidArgument("max scores must be >= 0")

    if total <= 0:
        return [0] * n

    below = [s for s, c in zip(subjects, caps) if c < min_each]
    if below:
        logger.warning("min_each=%d exceeds the max score of %s; those scores will exceed their cap",
                       min_each, ", ".join(below))

    paper_max = sum(caps)
    effective = min(total, paper_max)
    effective = max(effective, n * min_each)
    if effective != total:
        logger.debug("Effective total clamped: %d -> %d (paper max %d)", total, effective, paper_max)

    cap_sum = max(paper_max, 1)
    proportions = [c / cap_sum for c in caps]

    ints = _noisy_ints(effective, proportions, caps, min_each, randomness, rng)
    outcome = repair_back_to_front(ints, effective, min_each, caps)
    if outcome.remaining != 0:
        logger.warning("Best-effort allocation: %d units short of %d", outcome.remaining, effective)
    return ints

def allocate(
    total_score: int,
    subjects: Sequence[str],
    mode: Mode,
    randomness: float = cfg.DEFAULT_RANDOMNESS,
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> Dict[str, int]:
    """
    Allocate total_score across subjects according to mode.

    A fresh generator is created per call (seeded if seed is given) unless
    rng is supplied; generators are never shared between calls implicitly.
    """
    if not isinstance(mode, (WeightedFractionMode, AbsoluteCapMode)):
        raise InvalidArgument(f"unknown allocation mode: {type(mode).__name__}")
    total_score = int(total_score)
    _validate_common(total_score, subjects, mode.min_each, randomness)
    if rng is None:
        rng = random.Random(seed) if seed is not None else random.Random()

    if isinstance(mode, WeightedFractionMode):
        ints = _allocate_weighted(total_score, subjects, mode, randomness, rng)
    else:
        ints = _allocate_absolute(total_score, subjects, mode, randomness, rng)
    return dict(zip(subjects, ints))

def allocate_request(req: AllocationRequest) -> Dict[str, int]:
    return allocate(req.total_score, req.subjects, req.mode, randomness=req.randomness, seed=req.seed)
