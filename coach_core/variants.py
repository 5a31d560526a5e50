from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Tuple

from . import config as cfg_defaults
from .heuristics import DECISION_RX, LEARNING_RX, STAKEHOLDER_RX, TECH_RX, TRADEOFF_RX, metric_tokens
from .types import PERSONAS, Persona, StarDraft, StoryVariant

_HARD_MIN, _HARD_MAX = 4, 6


@dataclass(frozen=True)
class VariantSettings:
    bullets_min: int
    bullets_max: int

    @staticmethod
    def from_cfg(cfg: Mapping[str, Any] | None) -> "VariantSettings":
        def _cfg_value(name: str, default: Any) -> Any:
            if isinstance(cfg, Mapping) and name in cfg:
                return cfg[name]
            return default

        lo = int(_cfg_value("VARIANT_BULLETS_MIN", cfg_defaults.VARIANT_BULLETS_MIN))
        hi = int(_cfg_value("VARIANT_BULLETS_MAX", cfg_defaults.VARIANT_BULLETS_MAX))
        lo = max(_HARD_MIN, min(_HARD_MAX, lo))
        hi = max(lo, min(_HARD_MAX, hi))
        return VariantSettings(bullets_min=lo, bullets_max=hi)

    def accepts(self, count: int) -> bool:
        return self.bullets_min <= count <= self.bullets_max


def _words(text: str, n: int = 14) -> str:
    parts = text.split()
    out = " ".join(parts[:n]).rstrip(",;:.")
    return out + ("..." if len(parts) > n else "")


def _filled(star: StarDraft, key: str) -> str:
    return "" if key in star.placeholders else getattr(star, key)


def _search_fields(star: StarDraft, rx: re.Pattern, keys: str = "atsr") -> str:
    for key in keys:
        text = _filled(star, key)
        if text and rx.search(text):
            return text
    return ""


def _collect(star: StarDraft, rx: re.Pattern, limit: int = 3) -> List[str]:
    found: List[str] = []
    for key in "star":
        for m in rx.finditer(_filled(star, key)):
            word = m.group(0).lower()
            if word not in found:
                found.append(word)
    return found[:limit]


def _join(words: List[str]) -> str:
    if len(words) <= 1:
        return "".join(words)
    return ", ".join(words[:-1]) + " and " + words[-1]


def _role(star: StarDraft) -> str:
    return f"Role: {_words(star.a)}" if _filled(star, "a") else "Role: Owned the initiative end to end"


def _scope(star: StarDraft) -> str:
    text = _filled(star, "t") or _filled(star, "s")
    return f"Scope: {_words(text, 16)}" if text else "Scope: Delivered under real constraints of time and resources"


def _decision(star: StarDraft) -> str:
    text = _search_fields(star, DECISION_RX, "at") or _filled(star, "a")
    return f"Decision: {_words(text)}" if text else "Decision: Chose the approach with the clearest path to impact"


def _impact(star: StarDraft) -> str:
    return f"Impact: {_words(star.r, 16)}" if _filled(star, "r") else "Impact: Delivered measurable results"


def _outcome(star: StarDraft) -> str:
    return f"Outcome: {_words(star.r, 16)}" if _filled(star, "r") else "Outcome: Delivered on the goal and captured lessons"


def _metrics(star: StarDraft) -> str:
    tokens: List[str] = []
    for key in "rast":
        for tok in metric_tokens(_filled(star, key)):
            if tok not in tokens:
                tokens.append(tok)
    return f"Metrics: {', '.join(tokens[:4])}" if tokens else "Metrics: Add a before/after number for this result"


def _stakeholders(star: StarDraft) -> str:
    who = _collect(star, STAKEHOLDER_RX)
    return f"Stakeholders: Worked with {_join(who)}" if who else "Stakeholders: Kept the team and partners aligned throughout"


def _learning(star: StarDraft) -> str:
    text = _search_fields(star, LEARNING_RX, "rats")
    return f"Learning: {_words(text)}" if text else "Learning: Reflected on what to repeat and what to change next time"


def _technical(star: StarDraft) -> str:
    tech = _collect(star, TECH_RX, limit=4)
    if tech:
        return f"Technical: {_join(tech)}"
    return f"Technical: {_words(star.a)}" if _filled(star, "a") else "Technical: Chose tools that fit the constraints"


def _tradeoffs(star: StarDraft) -> str:
    text = _search_fields(star, TRADEOFF_RX)
    return f"Trade-offs: {_words(text)}" if text else "Trade-offs: Balanced delivery speed against long-term maintainability"


_BULLETS: Dict[Persona, Tuple[Callable[[StarDraft], str], ...]] = {
    "recruiter": (_role, _scope, _decision, _impact, _stakeholders, _learning),
    "hiring-manager": (_role, _scope, _decision, _metrics, _stakeholders, _outcome),
    "peer": (_role, _scope, _decision, _technical, _tradeoffs, _outcome),
}


def long_form(star: StarDraft) -> str:
    return f"Situation: {star.s}\n\nTask: {star.t}\n\nAction: {star.a}\n\nResult: {star.r}"


def variantize_persona(star: StarDraft, persona: Persona, settings: VariantSettings | None = None) -> StoryVariant:
    """Render a STAR draft as a labelled long form plus the persona's bullet cheat sheet."""
    settings = settings or VariantSettings.from_cfg(None)
    short = [build(star) for build in _BULLETS[persona]]
    if len(short) > settings.bullets_max:
        short = short[: settings.bullets_max]
    return StoryVariant(long=long_form(star), short=tuple(short))


def variantize_all(star: StarDraft, settings: VariantSettings | None = None) -> Dict[Persona, StoryVariant]:
    return {p: variantize_persona(star, p, settings) for p in PERSONAS}
