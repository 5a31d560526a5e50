from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from . import config as settings
from .composer import compose_story, group_selections
from .embellish import EmbellishFn, with_optional_embellish
from .rubrics import default_score_config
from .selection import assess_answers, check_contract, pick_for_themes
from .types import (
    AnswerItem,
    CoreStory,
    ScoreV2Config,
    SynthesisInput,
    SynthesisOutput,
    normalize_persona,
)
from .variants import VariantSettings, variantize_all

log = logging.getLogger(__name__)


def _theme_keys(themes: Sequence[str]) -> Dict[str, str]:
    """Stripped selection key -> first caller spelling, in input order."""
    keys: Dict[str, str] = {}
    for t in themes:
        keys.setdefault(str(t).strip(), t)
    return keys


def story_band(min_stories: int, max_stories: int) -> Tuple[int, int]:
    lo = max(1, int(min_stories))
    hi = max(lo, int(max_stories))
    return lo, hi


def synthesize(inp: SynthesisInput, config: Optional[ScoreV2Config] = None,
               variant_settings: Optional[VariantSettings] = None) -> SynthesisOutput:
    """Build 3-4 reusable core stories from a candidate's answers.

    Deterministic: the same input and rubric always give the same stories,
    ids, coverage map and rationale. Raises ContractError subclasses when
    fewer than 3 answers or 2 themes are supplied.
    """
    persona = normalize_persona(inp.persona)
    check_contract(inp.answers, inp.themes)
    keys = _theme_keys(inp.themes)
    themes = list(keys)
    config = config or default_score_config()
    lo, hi = story_band(inp.min_stories, inp.max_stories)

    evidence = assess_answers(inp.answers, persona, config)
    selections = pick_for_themes(evidence, themes, inp.per_theme)
    groups, notes = group_selections(selections, evidence, themes, lo, hi)

    by_id: Dict[str, AnswerItem] = {}
    for a in inp.answers:
        by_id.setdefault(a.id, a)

    stories: List[CoreStory] = []
    coverage: Dict[str, List[str]] = {t: [] for t in themes}
    for n, group in enumerate(groups, start=1):
        sid = f"cs_{n}"
        items = [by_id[aid] for aid in group.answer_ids if aid in by_id]
        star = compose_story(items, group.themes)
        stories.append(CoreStory(
            id=sid,
            title=star.title,
            coverage=tuple(keys[t] for t in group.themes),
            source_answer_ids=tuple(group.answer_ids),
            star=star,
            variants=variantize_all(star, variant_settings),
        ))
        for theme in group.themes:
            if sid not in coverage[theme]:
                coverage[theme].append(sid)

    # every caller spelling is its own key; repeats share their story ids
    coverage_map = {t: tuple(coverage[str(t).strip()]) for t in inp.themes}
    covered = sum(1 for t in inp.themes if coverage_map[t])
    ratio = covered / len(inp.themes)
    primary = sum(1 for s in selections if not s.gap)
    strong = sum(1 for s in selections if s.strong)

    rationale: List[str] = [
        f"Synthesized {len(stories)} core stories covering {round(ratio * 100)}% of themes",
        f"{primary} primary themes ({strong} backed by quantified answers), {len(themes) - primary} gap themes",
    ]
    rationale.extend(notes)
    placeholders = [s.id for s in stories if s.star.placeholders]
    if placeholders:
        rationale.append(f"Stories with placeholder STAR fields: {', '.join(placeholders)}")
    if ratio < settings.COVERAGE_TARGET:
        rationale.append(
            f"Coverage below {round(settings.COVERAGE_TARGET * 100)}%; add answers tagged for the uncovered themes"
        )

    log.info("synthesized stories=%d themes=%d coverage=%.2f persona=%s", len(stories), len(themes), ratio, persona)
    return SynthesisOutput(
        core_stories=tuple(stories),
        coverage_map=coverage_map,
        rationale=tuple(rationale),
        version=settings.SYNTHESIS_VERSION,
    )


async def synthesize_async(inp: SynthesisInput, config: Optional[ScoreV2Config] = None,
                           embellish: Optional[EmbellishFn] = None,
                           timeout: float = settings.EMBELLISH_TIMEOUT_SEC) -> SynthesisOutput:
    output = synthesize(inp, config)
    return await with_optional_embellish(output, embellish, timeout=timeout)
