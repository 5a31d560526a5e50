from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .heuristics import ACTION_RX, RESULT_RX, SITUATION_RX, TASK_RX, metric_tokens, split_clauses
from .selection import AnswerEvidence, rank_for_theme
from .types import AnswerItem, StarDraft, ThemeSelection

log = logging.getLogger(__name__)

PLACEHOLDERS: Dict[str, str] = {
    "s": "Faced a challenging situation requiring strategic action.",
    "t": "Needed to deliver results under constraints.",
    "a": "Implemented a comprehensive solution.",
    "r": "Achieved measurable impact and learned valuable lessons.",
}
_LIMITS: Dict[str, int] = {"s": 150, "t": 150, "a": 200, "r": 150}


def _clip(text: str, limit: int) -> str:
    text = " ".join(text.split())
    if len(text) <= limit:
        return text
    cut = text[:limit].rsplit(" ", 1)[0].rstrip(",;:")
    return cut + "..."


def theme_label(themes: Union[str, Sequence[str]]) -> str:
    if isinstance(themes, str):
        themes = [themes]
    return " & ".join(t.replace("_", " ").replace("-", " ").strip() for t in themes if t) or "General"


def _first_words(text: str, n: int) -> str:
    return " ".join(text.split()[:n]).rstrip(",;:")


def _pick(clauses: List[str], used: set, test, reverse: bool = False, window: Optional[int] = None) -> str:
    idxs = list(range(len(clauses) if window is None else min(window, len(clauses))))
    if reverse:
        idxs.reverse()
    for i in idxs:
        if i not in used and test(clauses[i]):
            used.add(i)
            return clauses[i]
    return ""


def compose_story(items: Sequence[AnswerItem], themes: Union[str, Sequence[str]]) -> StarDraft:
    """Heuristic STAR draft from the answers selected for one story.

    Every field comes back non-empty: fields no clause could fill hold a
    placeholder sentence and are listed in ``placeholders``.
    """
    clauses: List[str] = []
    for item in items:
        clauses.extend(split_clauses(item.text if isinstance(item.text, str) else ""))

    used: set = set()
    s = _pick(clauses, used, lambda c: bool(SITUATION_RX.search(c)), window=3)
    a = _pick(clauses, used, lambda c: bool(ACTION_RX.search(c)))
    r = (_pick(clauses, used, lambda c: bool(RESULT_RX.search(c) and metric_tokens(c)), reverse=True)
         or _pick(clauses, used, lambda c: bool(RESULT_RX.search(c)), reverse=True)
         or _pick(clauses, used, lambda c: bool(metric_tokens(c)), reverse=True))
    t = _pick(clauses, used, lambda c: bool(TASK_RX.search(c)))
    if not s:
        s = _pick(clauses, used, lambda c: True, window=2)
    if not a:
        a = _pick(clauses, used, lambda c: c.lower().startswith("i ") or " i " in f" {c.lower()} ")

    raw = {"s": s, "t": t, "a": a, "r": r}
    fields: Dict[str, str] = {}
    placeholders: List[str] = []
    for key in ("s", "t", "a", "r"):
        if raw[key]:
            fields[key] = _clip(raw[key], _LIMITS[key])
        else:
            fields[key] = PLACEHOLDERS[key]
            placeholders.append(key)

    result_words = _first_words(fields["r"], 3) if "r" not in placeholders else "Achieved Results"
    action_words = _first_words(fields["a"], 3) if "a" not in placeholders else "Strategic Action"
    title = f"{result_words[:1].upper()}{result_words[1:]} via {action_words} under {theme_label(themes)}"
    return StarDraft(title=title, placeholders=tuple(placeholders), **fields)


@dataclass
class StoryGroup:
    """Working unit while fitting themes into the story band; not part of the output."""
    themes: List[str]
    answer_ids: List[str] = field(default_factory=list)


def _strength_map(evidence: Iterable[AnswerEvidence]) -> Dict[str, int]:
    out: Dict[str, int] = {}
    for ev in evidence:
        out.setdefault(ev.answer.id, ev.strength)
    return out


def _group_strength(group: StoryGroup, strengths: Dict[str, int]) -> float:
    vals = [strengths.get(aid, 0) for aid in group.answer_ids]
    return sum(vals) / len(vals) if vals else 0.0


def _merge(a: StoryGroup, b: StoryGroup) -> StoryGroup:
    ids = list(a.answer_ids)
    ids.extend(x for x in b.answer_ids if x not in ids)
    return StoryGroup(themes=a.themes + [t for t in b.themes if t not in a.themes], answer_ids=ids)


def _least_covered_theme(themes: Sequence[str], groups: List[StoryGroup], strengths: Dict[str, int]) -> str:
    def key(item: Tuple[int, str]):
        idx, theme = item
        covering = [g for g in groups if theme in g.themes]
        best = max((_group_strength(g, strengths) for g in covering), default=0.0)
        return (len(covering), best, idx)
    return min(enumerate(themes), key=key)[1]


def group_selections(
    selections: Sequence[ThemeSelection],
    evidence: Sequence[AnswerEvidence],
    themes: Sequence[str],
    min_stories: int,
    max_stories: int,
) -> Tuple[List[StoryGroup], List[str]]:
    """Fit per-theme selections into ``[min_stories, max_stories]`` story groups.

    Themes that picked the same answers share a group. Above the band, the
    adjacent pair with the lowest combined evidence merges first. Below it,
    multi-theme groups are split onto unused answers, then unused answers get
    their own story, then multi-answer groups are split, and as a last resort
    a placeholder gap-filler group is added.
    """
    order = {t: i for i, t in reversed(list(enumerate(themes)))}
    strengths = _strength_map(evidence)
    notes: List[str] = []
    groups: List[StoryGroup] = []

    for sel in selections:
        key = list(sel.answer_ids)
        same = next((g for g in groups if key and g.answer_ids == key), None)
        if same is not None:
            same.themes.append(sel.theme)
            notes.append(f"Merged theme {sel.theme} into the {same.themes[0]} story (same source answers)")
        else:
            groups.append(StoryGroup(themes=[sel.theme], answer_ids=key))

    while len(groups) > max_stories:
        best_i, best_cost = 0, None
        for i in range(len(groups) - 1):
            cost = _group_strength(groups[i], strengths) + _group_strength(groups[i + 1], strengths)
            if best_cost is None or cost < best_cost:
                best_i, best_cost = i, cost
        a, b = groups[best_i], groups[best_i + 1]
        groups[best_i:best_i + 2] = [_merge(a, b)]
        notes.append(f"Merged low-evidence themes {' + '.join(a.themes + b.themes)} to stay within {max_stories} stories")

    ranked = sorted(evidence, key=lambda ev: (-ev.strength, ev.index))
    while len(groups) < min_stories:
        in_use = {aid for g in groups for aid in g.answer_ids}
        unused: List[AnswerEvidence] = []
        for ev in ranked:
            if ev.answer.id not in in_use and all(u.answer.id != ev.answer.id for u in unused):
                unused.append(ev)
        multi_theme = [g for g in groups if len(g.themes) > 1]
        multi_answer = [g for g in groups if len(g.answer_ids) > 1]

        if multi_theme and unused:
            g = max(multi_theme, key=lambda g: (len(g.themes), -groups.index(g)))
            theme = g.themes.pop()
            ev = rank_for_theme(unused, theme)[0]
            new = StoryGroup(themes=[theme], answer_ids=[ev.answer.id])
            notes.append(f"Split theme {theme} onto answer {ev.answer.id}")
        elif unused:
            ev = unused[0]
            tagged = [t for t in themes if ev.tagged(t)]
            theme = tagged[0] if tagged else _least_covered_theme(themes, groups, strengths)
            new = StoryGroup(themes=[theme], answer_ids=[ev.answer.id])
            notes.append(f"Added a story from unused answer {ev.answer.id} for theme {theme}")
        elif multi_answer:
            g = max(multi_answer, key=lambda g: (len(g.answer_ids), -groups.index(g)))
            aid = g.answer_ids.pop()
            ev = next((e for e in evidence if e.answer.id == aid), None)
            covered = [t for t in g.themes if ev is not None and ev.tagged(t)] or [g.themes[-1]]
            new = StoryGroup(themes=covered, answer_ids=[aid])
            notes.append(f"Split answer {aid} into its own story")
        else:
            theme = _least_covered_theme(themes, groups, strengths)
            new = StoryGroup(themes=[theme], answer_ids=[])
            notes.append(f"Added gap-filler story for theme {theme}")
        groups.append(new)
        groups.sort(key=lambda g: min(order.get(t, len(order)) for t in g.themes))

    log.debug("grouped %d themes into %d stories", len(themes), len(groups))
    return groups, notes
