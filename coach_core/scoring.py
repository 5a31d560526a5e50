from __future__ import annotations
import logging
import math
from typing import Dict, List, Optional, Union

from .ceilings import apply_ceiling_rules
from .confidence import compute_confidence
from .heuristics import score_dimension
from .red_flags import detect_red_flags, total_penalty
from .types import (
    AnswerItem,
    CeilingContext,
    DimensionName,
    Persona,
    ScoreResult,
    ScoreV2Config,
    ScoringContext,
    normalize_persona,
)

log = logging.getLogger(__name__)


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def _weakest(per_dimension: Dict[DimensionName, int]) -> DimensionName:
    # first minimum in rubric order
    return min(per_dimension, key=lambda name: per_dimension[name])


def score(context: ScoringContext) -> ScoreResult:
    """Score one answer under one persona.

    Steps: per-dimension heuristics, persona-weighted composite, bounded
    red-flag penalty, ceiling rules in order, clamp and round. Never raises for
    any answer text once ``context.config`` exists (it is validated on
    construction).
    """
    cfg = context.config
    persona = normalize_persona(context.persona)
    answer = context.answer
    text = answer.text if isinstance(answer.text, str) else ""
    length = len(text.strip())

    per_dimension: Dict[DimensionName, int] = {
        d.name: score_dimension(answer, d, persona) for d in cfg.dimensions
    }
    weights = cfg.weights_for(persona)
    composite = sum(weights.get(name, 0.0) * val for name, val in per_dimension.items())

    flags = detect_red_flags(text, cfg.red_flags)
    penalty = total_penalty(flags, cfg.max_penalties)
    penalized = composite + penalty

    ctx = CeilingContext(
        base_score=penalized,
        dimension=_weakest(per_dimension),
        persona=persona,
        answer_length=length,
        red_flag_count=len(flags),
        dimension_scores=dict(per_dimension),
    )
    capped, capped_by = apply_ceiling_rules(ctx, cfg.ceiling_rules)
    overall = _round_half_up(max(0.0, min(100.0, min(capped, penalized))))

    confidence, reasons = compute_confidence(length, len(flags))

    rationale: List[str] = [f"composite {composite:.1f} for {persona} persona"]
    if flags:
        rationale.append(
            f"red flags {', '.join(f.name for f in flags)} cost {abs(penalty)} pts"
            + (" (penalty floor reached)" if penalty == cfg.max_penalties and penalty != sum(f.penalty for f in flags) else "")
        )
    for name in capped_by:
        rationale.append(f"capped by {name}")
    rationale.append(f"weakest dimension: {ctx.dimension} ({per_dimension[ctx.dimension]})")
    rationale.extend(reasons)

    log.debug("score persona=%s overall=%s capped_by=%s flags=%d", persona, overall, capped_by, len(flags))
    return ScoreResult(
        overall=overall,
        per_dimension=per_dimension,
        red_flags_triggered=flags,
        capped_by=tuple(capped_by),
        confidence=confidence,
        rationale=tuple(rationale),
        persona=persona,
        version=cfg.version,
    )


def score_answer(answer: Union[AnswerItem, str], persona: Persona, config: ScoreV2Config,
                 answer_id: Optional[str] = None) -> ScoreResult:
    if not isinstance(answer, AnswerItem):
        answer = AnswerItem(id=answer_id or "answer", text=str(answer or ""))
    return score(ScoringContext(answer=answer, persona=persona, config=config))
