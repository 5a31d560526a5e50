"""Per-theme answer selection with the 70/30 rule.

The first ``ceil(0.7 * len(themes))`` themes are primary: they draw only from
answers carrying quantified evidence whenever such answers exist. The rest
are gap themes: they take the best available answer so no theme is left
without a story. Ranking is deterministic; ties fall back to input order.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from . import config as settings
from .errors import InsufficientAnswersError, InsufficientThemesError
from .heuristics import has_quantified_evidence
from .scoring import score
from .types import AnswerItem, Persona, ScoreResult, ScoreV2Config, ScoringContext, ThemeSelection

log = logging.getLogger(__name__)

MIN_ANSWERS = 3
MIN_THEMES = 2


@dataclass(frozen=True)
class AnswerEvidence:
    answer: AnswerItem
    index: int
    result: ScoreResult
    quantified: bool

    @property
    def strength(self) -> int:
        return self.result.overall + (settings.EVIDENCE_BONUS if self.quantified else 0)

    def tagged(self, theme: str) -> bool:
        return theme in self.answer.metadata.themes


def check_contract(answers: Sequence[AnswerItem], themes: Sequence[str]) -> None:
    if len(answers) < MIN_ANSWERS:
        raise InsufficientAnswersError(f"Need at least {MIN_ANSWERS} answers to synthesize stories (got {len(answers)})")
    if len(themes) < MIN_THEMES:
        raise InsufficientThemesError(f"Need at least {MIN_THEMES} themes to synthesize stories (got {len(themes)})")


def assess_answers(answers: Sequence[AnswerItem], persona: Persona, config: ScoreV2Config) -> List[AnswerEvidence]:
    return [
        AnswerEvidence(
            answer=a,
            index=i,
            result=score(ScoringContext(answer=a, persona=persona, config=config)),
            quantified=has_quantified_evidence(a.text),
        )
        for i, a in enumerate(answers)
    ]


def strong_theme_count(n_themes: int) -> int:
    return min(n_themes, math.ceil(round(n_themes * settings.STRONG_THEME_RATIO, 6)))


def rank_for_theme(evidence: Sequence[AnswerEvidence], theme: str,
                   used: Optional[Dict[str, int]] = None) -> List[AnswerEvidence]:
    used = used or {}
    return sorted(
        evidence,
        key=lambda ev: (0 if ev.tagged(theme) else 1, used.get(ev.answer.id, 0), -ev.strength, ev.index),
    )


def select_top_answers_for_themes(
    answers: Sequence[AnswerItem],
    themes: Sequence[str],
    *,
    persona: Persona = "hiring-manager",
    config: Optional[ScoreV2Config] = None,
    per_theme: int = settings.SYNTH_PER_THEME,
    evidence: Optional[Sequence[AnswerEvidence]] = None,
) -> List[ThemeSelection]:
    check_contract(answers, themes)
    if evidence is None:
        if config is None:
            from .rubrics import default_score_config
            config = default_score_config()
        evidence = assess_answers(answers, persona, config)
    return pick_for_themes(evidence, themes, per_theme)


def pick_for_themes(evidence: Sequence[AnswerEvidence], themes: Sequence[str],
                    per_theme: int = settings.SYNTH_PER_THEME) -> List[ThemeSelection]:
    """Selection loop without the input-size contract; any theme count works."""
    take = max(1, int(per_theme))
    strong_pool = [ev for ev in evidence if ev.quantified]
    primary_count = strong_theme_count(len(themes))
    used: Dict[str, int] = {}
    out: List[ThemeSelection] = []

    for i, theme in enumerate(themes):
        primary = i < primary_count
        if primary and strong_pool:
            pool, strong = strong_pool, True
        else:
            pool, strong = list(evidence), False
        chosen: List[str] = []
        for ev in rank_for_theme(pool, theme, used):
            if ev.answer.id in chosen:
                continue
            chosen.append(ev.answer.id)
            if len(chosen) >= take:
                break
        for aid in chosen:
            used[aid] = used.get(aid, 0) + 1
        out.append(ThemeSelection(theme=theme, answer_ids=tuple(chosen), strong=strong, gap=not primary))
        log.debug("theme=%s primary=%s strong=%s picked=%s", theme, primary, strong, chosen)
    return out
