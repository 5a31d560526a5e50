"""Ceiling rules: caps that can only lower a composite score.

Each rule is a total function over :class:`CeilingContext`; it returns the
base score untouched when its trigger does not fire. Rules are applied in
list order, each one seeing the output of the previous one.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Iterable, List, Tuple

from .types import CeilingContext, CeilingRule


def ceiling_rule_insufficient_length(ctx: CeilingContext) -> float:
    if ctx.answer_length < 50: return min(ctx.base_score, 40)
    if ctx.answer_length < 100: return min(ctx.base_score, 60)
    return ctx.base_score


def ceiling_rule_high_red_flags(ctx: CeilingContext) -> float:
    if ctx.red_flag_count >= 4: return min(ctx.base_score, 45)
    if ctx.red_flag_count == 3: return min(ctx.base_score, 60)
    if ctx.red_flag_count == 2: return min(ctx.base_score, 75)
    return ctx.base_score


def ceiling_rule_dimension_imbalance(ctx: CeilingContext) -> float:
    # strong on one axis, collapsed on another: the mean is the most we trust
    scores = list(ctx.dimension_scores.values())
    if not scores:
        return ctx.base_score
    avg = sum(scores) / len(scores)
    if min(scores) < avg - 50:
        return min(ctx.base_score, avg)
    return ctx.base_score


def ceiling_rule_persona_mismatch(ctx: CeilingContext) -> float:
    persona_score = ctx.dimension_scores.get("persona")
    if persona_score is None:
        return ctx.base_score
    if persona_score < 40: return min(ctx.base_score, 70)
    if persona_score < 55: return min(ctx.base_score, 85)
    return ctx.base_score


CEILING_RULES: Tuple[CeilingRule, ...] = (
    ceiling_rule_insufficient_length,
    ceiling_rule_high_red_flags,
    ceiling_rule_dimension_imbalance,
    ceiling_rule_persona_mismatch,
)


def rule_name(rule: CeilingRule) -> str:
    name = getattr(rule, "__name__", None) or type(rule).__name__
    return name[len("ceiling_rule_"):] if name.startswith("ceiling_rule_") else name


def apply_ceiling_rules(ctx: CeilingContext, rules: Iterable[CeilingRule]) -> Tuple[float, List[str]]:
    """Run ``rules`` in order; return the lowest score reached and the rules that lowered it."""

    score = float(ctx.base_score)
    capped_by: List[str] = []
    for rule in rules:
        out = float(rule(replace(ctx, base_score=score)))
        if out < score:
            capped_by.append(rule_name(rule))
            score = out
    return score, capped_by
