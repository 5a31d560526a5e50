from __future__ import annotations
from typing import Any, Dict, Tuple

from . import config
from .ceilings import CEILING_RULES
from .types import Dimension, DimensionName, Persona, RedFlag, ScoreV2Config

DIMENSIONS: Tuple[Dimension, ...] = (
    Dimension("structure", "Structure & Organization", "Answer follows STAR format (Situation, Task, Action, Result)", 0.15),
    Dimension("specificity", "Specificity & Detail", "Answer includes concrete details, numbers, and specific examples", 0.20),
    Dimension("outcome", "Outcomes & Impact", "Answer clearly demonstrates results and business impact", 0.20),
    Dimension("role", "Role Relevance", "Answer shows personal ownership and the responsibilities of the target role", 0.15),
    Dimension("company", "Company Fit", "Answer demonstrates understanding of customers, mission and culture", 0.10),
    Dimension("persona", "Persona Alignment", "Answer resonates with the specific interviewer persona", 0.10),
    Dimension("risks", "Risk Assessment", "Answer avoids red flags and potential concerns", 0.10),
)

PERSONA_WEIGHTS: Dict[Persona, Dict[DimensionName, float]] = {
    "recruiter": {
        "structure": 0.12, "specificity": 0.18, "outcome": 0.22, "role": 0.15,
        "company": 0.08, "persona": 0.15, "risks": 0.10,  # cultural fit weighs more
    },
    "hiring-manager": {
        "structure": 0.15, "specificity": 0.22, "outcome": 0.22, "role": 0.20,
        "company": 0.08, "persona": 0.08, "risks": 0.05,
    },
    "peer": {
        "structure": 0.15, "specificity": 0.20, "outcome": 0.18, "role": 0.18,
        "company": 0.12, "persona": 0.10, "risks": 0.07,
    },
}

RED_FLAGS: Tuple[RedFlag, ...] = (
    RedFlag("weak-ownership", 'Answer lacks personal accountability (uses "we" instead of "I")', -5,
            ("we", "team did", "others helped", "it was a group effort")),
    RedFlag("vague-outcome", "Outcome is unclear or unquantified", -8,
            ("improved", "better", "good results", "successful", "worked out")),
    RedFlag("negative-framing", "Answer emphasizes problems without solutions", -10,
            ("failed", "problem", "issue", "mistake", "bad", "wrong")),
    RedFlag("generic-answer", "Answer could apply to any role or company", -8,
            ("generally", "typically", "usually", "in general", "always")),
    RedFlag("excessive-criticism", "Answer includes excessive criticism of previous employer or colleagues", -15,
            ("terrible", "awful", "incompetent", "stupid", "hate", "disrespect")),
    RedFlag("overconfidence", "Answer shows arrogance or unrealistic claims", -8,
            ("best", "genius", "perfect", "only one", "nobody else")),
    # no keywords: short answers are capped by the length ceiling instead
    RedFlag("incomplete-answer", "Answer is too short or missing key STAR elements", -12, ()),
)


def default_score_config(**overrides: Any) -> ScoreV2Config:
    """Build the validated default rubric; keyword overrides replace individual fields."""
    fields: Dict[str, Any] = {
        "version": config.SCORE_CONFIG_VERSION,
        "dimensions": DIMENSIONS,
        "persona_weights": PERSONA_WEIGHTS,
        "red_flags": RED_FLAGS,
        "ceiling_rules": CEILING_RULES,
        "min_answer_length": config.MIN_ANSWER_LENGTH,
        "max_penalties": config.MAX_PENALTIES,
    }
    fields.update(overrides)
    return ScoreV2Config(**fields)
