"""Confidence for rule-only scoring.

Weighted geometric mean of three signals in [0, 1]:

- length factor: grows with answer length until ``CONFIDENCE_FULL_LENGTH``;
- flag factor: shrinks with every triggered red flag;
- model confidence: fixed for the rule engine.

Weights are 0.45 / 0.35 / 0.20.
"""
from __future__ import annotations
from typing import List, Tuple

from . import config

_W_LENGTH, _W_FLAGS, _W_MODEL = 0.45, 0.35, 0.20


def _clamp01(x: float) -> float:
    return max(0.0, min(1.0, float(x)))


def length_factor(answer_length: int) -> float:
    return _clamp01(max(0, answer_length) / float(max(1, config.CONFIDENCE_FULL_LENGTH)))


def flag_factor(red_flag_count: int) -> float:
    return 1.0 / (1.0 + 0.35 * max(0, red_flag_count))


def _reasons(length: float, flags: float, model: float) -> List[str]:
    reasons: List[str] = []
    if length < 0.15:
        reasons.append("answer too short for a reliable read")
    elif length < 0.5:
        reasons.append("limited detail available in the answer")
    elif length >= 1.0:
        reasons.append("full-length answer with enough material to judge")
    else:
        reasons.append("moderate answer length")

    if flags >= 1.0:
        reasons.append("no red flags detected")
    elif flags > 0.5:
        reasons.append("a red flag lowers trust in the score")
    else:
        reasons.append("several red flags make the score less stable")

    if model > 0.9:
        reasons.append("high model confidence in assessment")
    elif model < 0.7:
        reasons.append("model uncertainty in evaluation")
    else:
        reasons.append("standard rule-based confidence level")

    if length < 0.15 and flags < 0.6:
        reasons[0] = "insufficient content and too many red flags for reliable assessment"
    return reasons


def compute_confidence(answer_length: int, red_flag_count: int,
                       model_confidence: float | None = None) -> Tuple[float, List[str]]:
    """Return (confidence, three reasons). Non-decreasing in length, non-increasing in flag count."""
    lf = length_factor(answer_length)
    ff = flag_factor(red_flag_count)
    mc = _clamp01(config.RULE_MODEL_CONFIDENCE if model_confidence is None else model_confidence)
    conf = (lf ** _W_LENGTH) * (ff ** _W_FLAGS) * (mc ** _W_MODEL)
    return round(_clamp01(conf), 4), _reasons(lf, ff, mc)
