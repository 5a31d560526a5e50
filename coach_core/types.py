from __future__ import annotations
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Literal, Mapping, Optional, Tuple

from .errors import ContractError

Persona = Literal["recruiter", "hiring-manager", "peer"]
PERSONAS: Tuple[Persona, ...] = ("recruiter", "hiring-manager", "peer")
_PERSONA_ALIASES: Dict[str, Persona] = {"hm": "hiring-manager", "hiring_manager": "hiring-manager"}

DimensionName = Literal["structure", "specificity", "outcome", "role", "company", "persona", "risks"]
DIMENSION_NAMES: Tuple[DimensionName, ...] = (
    "structure", "specificity", "outcome", "role", "company", "persona", "risks",
)


def normalize_persona(value: Any) -> Persona:
    key = str(value or "").strip().lower()
    key = _PERSONA_ALIASES.get(key, key)
    if key not in PERSONAS:
        raise ContractError(f"unknown persona {value!r}; expected one of {', '.join(PERSONAS)}")
    return key  # type: ignore[return-value]


def _frozen(mapping: Mapping) -> Mapping:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class AnswerMetadata:
    themes: Tuple[str, ...] = ()
    question_id: Optional[str] = None
    timestamp: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "themes", tuple(self.themes or ()))


@dataclass(frozen=True)
class AnswerItem:
    id: str; text: str
    persona: Optional[Persona] = None
    metadata: AnswerMetadata = field(default_factory=AnswerMetadata)

    @staticmethod
    def from_dict(raw: Mapping[str, Any]) -> "AnswerItem":
        meta = raw.get("metadata") or raw.get("meta") or {}
        persona = raw.get("persona")
        return AnswerItem(
            id=str(raw.get("id", "")),
            text=str(raw.get("text") or ""),
            persona=normalize_persona(persona) if persona else None,
            metadata=AnswerMetadata(
                themes=tuple(meta.get("themes") or ()),
                question_id=meta.get("questionId", meta.get("question_id")),
                timestamp=meta.get("timestamp", meta.get("when")),
            ),
        )


@dataclass(frozen=True)
class Dimension:
    name: DimensionName; label: str; description: str
    weight: float
    max_score: int = 100


@dataclass(frozen=True)
class RedFlag:
    name: str; description: str
    penalty: int
    keywords: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "keywords", tuple(self.keywords or ()))


@dataclass(frozen=True)
class CeilingContext:
    base_score: float
    dimension: DimensionName
    persona: Persona
    answer_length: int
    red_flag_count: int
    dimension_scores: Mapping[DimensionName, int]


CeilingRule = Callable[[CeilingContext], float]


@dataclass(frozen=True)
class ScoreV2Config:
    """Validated rubric. Construction fails with ConfigError on any invalid field."""

    version: str
    dimensions: Tuple[Dimension, ...]
    persona_weights: Mapping[Persona, Mapping[DimensionName, float]]
    red_flags: Tuple[RedFlag, ...]
    ceiling_rules: Tuple[CeilingRule, ...]
    min_answer_length: int = 50
    max_penalties: int = -30

    def __post_init__(self):
        from .validators import validate_config

        object.__setattr__(self, "dimensions", tuple(self.dimensions))
        object.__setattr__(self, "red_flags", tuple(self.red_flags))
        object.__setattr__(self, "ceiling_rules", tuple(self.ceiling_rules))
        object.__setattr__(
            self,
            "persona_weights",
            _frozen({p: _frozen(w) for p, w in dict(self.persona_weights).items()}),
        )
        validate_config(self)

    def weights_for(self, persona: Persona) -> Mapping[DimensionName, float]:
        return self.persona_weights[persona]

    def dimension(self, name: DimensionName) -> Optional[Dimension]:
        return next((d for d in self.dimensions if d.name == name), None)


@dataclass(frozen=True)
class ScoringContext:
    answer: AnswerItem
    persona: Persona
    config: ScoreV2Config


@dataclass(frozen=True)
class ScoreResult:
    overall: int
    per_dimension: Mapping[DimensionName, int]
    red_flags_triggered: Tuple[RedFlag, ...]
    capped_by: Tuple[str, ...]
    confidence: float
    rationale: Tuple[str, ...] = ()
    persona: Optional[Persona] = None
    version: str = "2.0"

    def __post_init__(self):
        object.__setattr__(self, "per_dimension", _frozen(self.per_dimension))

    @property
    def flag_names(self) -> List[str]:
        return [f.name for f in self.red_flags_triggered]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overall": self.overall,
            "per_dimension": dict(self.per_dimension),
            "red_flags": [
                {"name": f.name, "description": f.description, "penalty": f.penalty}
                for f in self.red_flags_triggered
            ],
            "capped_by": list(self.capped_by),
            "confidence": self.confidence,
            "rationale": list(self.rationale),
            "persona": self.persona,
            "version": self.version,
        }


@dataclass(frozen=True)
class StarDraft:
    title: str; s: str; t: str; a: str; r: str
    placeholders: Tuple[str, ...] = ()

    def fields(self) -> Dict[str, str]:
        return {"s": self.s, "t": self.t, "a": self.a, "r": self.r}


@dataclass(frozen=True)
class StoryVariant:
    long: str
    short: Tuple[str, ...]

    def __post_init__(self):
        object.__setattr__(self, "short", tuple(self.short))

    def to_dict(self) -> Dict[str, Any]:
        return {"long": self.long, "short": list(self.short)}


@dataclass(frozen=True)
class CoreStory:
    id: str
    title: str
    coverage: Tuple[str, ...]
    source_answer_ids: Tuple[str, ...]
    star: StarDraft
    variants: Mapping[Persona, StoryVariant]

    def __post_init__(self):
        object.__setattr__(self, "coverage", tuple(self.coverage))
        object.__setattr__(self, "source_answer_ids", tuple(self.source_answer_ids))
        object.__setattr__(self, "variants", _frozen(self.variants))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "coverage": list(self.coverage),
            "source_answer_ids": list(self.source_answer_ids),
            "star": self.star.fields(),
            "variants": {p: v.to_dict() for p, v in self.variants.items()},
        }


CoverageMap = Mapping[str, Tuple[str, ...]]


@dataclass(frozen=True)
class ThemeSelection:
    theme: str
    answer_ids: Tuple[str, ...]
    strong: bool
    gap: bool = False


@dataclass(frozen=True)
class SynthesisInput:
    answers: Tuple[AnswerItem, ...]
    themes: Tuple[str, ...]
    persona: Persona = "hiring-manager"
    max_stories: int = 4
    min_stories: int = 3
    per_theme: int = 1

    def __post_init__(self):
        object.__setattr__(self, "answers", tuple(self.answers))
        object.__setattr__(self, "themes", tuple(self.themes))


@dataclass(frozen=True)
class SynthesisOutput:
    core_stories: Tuple[CoreStory, ...]
    coverage_map: CoverageMap
    rationale: Tuple[str, ...]
    version: str = "v2"

    def __post_init__(self):
        object.__setattr__(self, "core_stories", tuple(self.core_stories))
        object.__setattr__(self, "rationale", tuple(self.rationale))
        object.__setattr__(
            self, "coverage_map", _frozen({k: tuple(v) for k, v in dict(self.coverage_map).items()})
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "core_stories": [s.to_dict() for s in self.core_stories],
            "coverage_map": {k: list(v) for k, v in self.coverage_map.items()},
            "rationale": list(self.rationale),
            "version": self.version,
        }
