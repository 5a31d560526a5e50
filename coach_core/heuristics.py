# coach_core/heuristics.py
from __future__ import annotations
import re
from typing import Dict, List, Optional, Union

from . import config
from .types import DIMENSION_NAMES, AnswerItem, Dimension, DimensionName, Persona

_DIGIT_RX       = re.compile(r'\d')
_NUMBER_RX      = re.compile(r'\d[\d,]*(?:\.\d+)?')
_QUANT_WORD_RX  = re.compile(r'\b(percent|doubled|tripled|halved)\b', re.I)
_METRIC_RX      = re.compile(
    r'(?:[$€£]\s?\d[\d,]*(?:\.\d+)?\s?(?:k|m|mm|bn|million|billion|thousand)?\b'
    r'|\b\d[\d,]*(?:\.\d+)?\s?(?:%|percent\b|x\b|k\b|m\b|bn\b|million\b|billion\b|thousand\b|ms\b'
    r'|seconds?\b|minutes?\b|hours?\b|days?\b|weeks?\b|months?\b|users\b|customers\b|clients\b'
    r'|engineers\b|people\b|requests\b|tickets\b))', re.I)

SITUATION_RX = re.compile(r'^(when|while|during|at\b|in\b|on\b|last\b|back in|previously|early|i was|i had|i joined|'
                          r'we were|we had|our\b|my\b|the team|working|faced|given|assigned|after|before|as (?:a|the|part))', re.I)
TASK_RX      = re.compile(r'\b(goal|objective|responsib\w*|challenge|needed to|need to|had to|tasked|task|mandate|'
                          r'asked to|aim(?:ed)? to|target(?:ed)?|my job was|in order to)\b', re.I)
ACTION_RX    = re.compile(r'\bI\s+(?:then\s+|also\s+|\w+ly\s+)?(?!need\b|feed\b)(\w+ed|led|built|ran|wrote|rewrote|drove|chose|'
                          r'made|took|set|cut|got|found|began|brought|taught|sent|spent|held|kept|won|shipped|put|gave|met|'
                          r'drew|grew|sought|fought|thought|bought)\b', re.I)
RESULT_RX    = re.compile(r'\b(result(?:ed|s|ing)?|achiev\w*|improv\w*|increas\w*|reduc\w*|decreas\w*|sav(?:ed|ing|ings)|'
                          r'deliver(?:ed|y)|grew|growth|boost\w*|lift(?:ed)?|outcome|impact|led to|cut|halved|doubled|'
                          r'tripled|completed|launched|won|so that|which meant|ended up)\b', re.I)
DECISION_RX  = re.compile(r'\b(decided|decision|chose|choose|opted|prioriti[sz]ed|instead of|rather than|over)\b', re.I)
TRADEOFF_RX  = re.compile(r'\b(trade-?offs?|instead of|rather than|at the cost of|balanc\w*|versus|vs\.?|compromise)\b', re.I)
LEARNING_RX  = re.compile(r'\b(learn\w*|lesson|taught me|realized|realised|next time|in hindsight)\b', re.I)
STAKEHOLDER_RX = re.compile(r'\b(stakeholders?|customers?|clients?|users?|leadership|executives?|product|design|sales|'
                            r'marketing|support|partners?|engineering|legal|finance|ops|operations)\b', re.I)
TECH_RX      = re.compile(r'\b(api|apis|database|sql|cache|caching|queue|kafka|pipeline|microservices?|monolith|kubernetes|'
                          r'docker|cloud|aws|gcp|azure|python|java|go|react|latency|throughput|architecture|schema|'
                          r'migration|ci/cd|monitoring|observability|tests?|infrastructure|algorithm)\b', re.I)

_SEQUENCE_RX   = re.compile(r'\b(first(?:ly)?|then|next|after that|afterwards|finally|ultimately|as a result|in the end|subsequently)\b', re.I)
_TIMEFRAME_RX  = re.compile(r'\b(\d+\s*(?:days?|weeks?|months?|quarters?|years?|hours?|sprints?)|q[1-4]|quarter|deadline|sprint)\b', re.I)
_VAGUE_RX      = re.compile(r'\b(stuff|things?|something|somehow|various|etc|a lot|lots of|kind of|sort of|basically|some)\b', re.I)
_BUSINESS_RX   = re.compile(r'\b(revenue|costs?|users?|customers?|retention|conversion|latency|churn|nps|sla|margin|profit|'
                            r'sales|throughput|uptime|adoption|engagement)\b', re.I)
_FIRST_PERSON_RX = re.compile(r'\b(I|me|my|myself)\b', re.I)
_WE_RX         = re.compile(r'\b(we|us|our|the team)\b', re.I)
_LEADERSHIP_RX = re.compile(r'\b(led|lead|owned|own|drove|decided|managed|spearheaded|accountable|responsible for|initiated|'
                            r'championed|mentored|coordinated|directed)\b', re.I)
_COMPANY_RX    = re.compile(r'\b(customers?|clients?|users?|mission|values?|culture|business|company|organi[sz]ation|product|'
                            r'market|stakeholders?|partners?|brand|community)\b', re.I)
_RISK_RX       = re.compile(r"\b(blame\w*|fault|incompetent|terrible|awful|stupid|lazy|hate|useless|never|always|nobody|"
                            r"not my|wasn'?t my|maybe|i guess|i think|kind of|sort of|hopefully|tried to|try to|perfect)\b", re.I)
_PERSONA_CUES: Dict[str, re.Pattern] = {
    "recruiter": re.compile(r'\b(team|culture|collaborat\w*|communicat\w*|relationships?|learn\w*|values?|motivat\w*|'
                            r'feedback|mentor\w*|growth|trust|empath\w*|together)\b', re.I),
    "hiring-manager": re.compile(r'\b(impact|revenue|cost|deadline|priorit\w*|budget|roi|business|metrics?|kpis?|deliver\w*|'
                                 r'stakeholders?|scope|roadmap|results?|ownership|accountab\w*)\b', re.I),
    "peer": re.compile(r'\b(architecture|design|trade-?offs?|latency|scal\w*|code|tests?|testing|debug\w*|apis?|systems?|'
                       r'database|cache|pipeline|deploy\w*|refactor\w*|performance|infrastructure|algorithm\w*)\b', re.I),
}

_CLAUSE_SPLIT_RX = re.compile(r'(?<=[.!?;])\s+|\n+')


def _clamp(score: float) -> int:
    return int(max(0, min(100, round(score))))


def _distinct(rx: re.Pattern, text: str) -> int:
    return len({m.group(0).lower() for m in rx.finditer(text)})


def split_clauses(text: str) -> List[str]:
    """Sentence-level clauses with trailing punctuation removed."""
    if not isinstance(text, str): return []
    out = []
    for part in _CLAUSE_SPLIT_RX.split(text.strip()):
        part = part.strip().rstrip('.!?;').strip()
        if part:
            out.append(part)
    return out


def has_quantified_evidence(text: str) -> bool:
    if not isinstance(text, str): return False
    return bool(_DIGIT_RX.search(text) or _QUANT_WORD_RX.search(text))


def metric_tokens(text: str) -> List[str]:
    if not isinstance(text, str): return []
    seen: List[str] = []
    for m in _METRIC_RX.finditer(text):
        tok = m.group(0).strip()
        if tok not in seen:
            seen.append(tok)
    return seen


def _proper_nouns(clauses: List[str]) -> int:
    count = 0
    for clause in clauses:
        for word in clause.split()[1:]:
            w = word.strip(',:()"\'')
            if w and w[0].isupper() and w != "I":
                count += 1
    return count


def _structure(t: str, clauses: List[str]) -> float:
    markers = [
        any(SITUATION_RX.search(c) for c in clauses),
        bool(TASK_RX.search(t)),
        bool(ACTION_RX.search(t)),
        bool(RESULT_RX.search(t)),
    ]
    score = config.DIMENSION_BASELINE + 10 * sum(markers)
    if len(clauses) >= 3: score += 5
    if _SEQUENCE_RX.search(t): score += 5
    return score


def _specificity(t: str, clauses: List[str]) -> float:
    score = config.DIMENSION_BASELINE
    numbers = _NUMBER_RX.findall(t)
    if numbers: score += 15
    if len(numbers) >= 3: score += 5
    if _proper_nouns(clauses) >= 2: score += 5
    if _TIMEFRAME_RX.search(t): score += 5
    score -= min(30, 6 * _distinct(_VAGUE_RX, t))
    return score


def _outcome(t: str) -> float:
    score = config.DIMENSION_BASELINE
    metrics = metric_tokens(t)
    has_result = bool(RESULT_RX.search(t))
    if metrics: score += 20
    if len(metrics) >= 2: score += 10
    if has_result: score += 10
    if _BUSINESS_RX.search(t): score += 5
    if not metrics and not has_result and not _DIGIT_RX.search(t):
        score -= 15
    return score


def _role(t: str) -> float:
    score = config.DIMENSION_BASELINE
    first_person = bool(_FIRST_PERSON_RX.search(t))
    if first_person: score += 10
    if ACTION_RX.search(t): score += 10
    if _LEADERSHIP_RX.search(t): score += 10
    if _WE_RX.search(t) and not first_person:
        score -= 20
    return score


def _company(t: str) -> float:
    return config.DIMENSION_BASELINE + min(40, 8 * _distinct(_COMPANY_RX, t))


def _persona(t: str, persona: Persona) -> float:
    hits = _distinct(_PERSONA_CUES[persona], t)
    if not hits:
        return config.DIMENSION_BASELINE - 10
    return config.DIMENSION_BASELINE + min(40, 8 * hits)


def _risks(t: str) -> float:
    return 100 - 15 * _distinct(_RISK_RX, t)


def score_dimension(
    answer: Union[AnswerItem, str],
    dimension: Union[Dimension, DimensionName],
    persona: Optional[Persona] = None,
) -> int:
    """Raw 0-100 score of one answer on one rubric dimension.

    Pure function of the text and the static cue tables above. Blank or
    near-blank text scores 0; everything else starts from a neutral baseline.
    """
    text = answer.text if isinstance(answer, AnswerItem) else answer
    name = dimension.name if isinstance(dimension, Dimension) else dimension
    if persona is None:
        persona = (answer.persona if isinstance(answer, AnswerItem) else None) or "hiring-manager"
    t = text.strip() if isinstance(text, str) else ""
    if len(t) < config.MIN_SCORABLE_CHARS:
        return 0

    clauses = split_clauses(t)
    if name == "structure": return _clamp(_structure(t, clauses))
    if name == "specificity": return _clamp(_specificity(t, clauses))
    if name == "outcome": return _clamp(_outcome(t))
    if name == "role": return _clamp(_role(t))
    if name == "company": return _clamp(_company(t))
    if name == "persona": return _clamp(_persona(t, persona))
    if name == "risks": return _clamp(_risks(t))
    return 0


def score_dimensions(answer: Union[AnswerItem, str], persona: Optional[Persona] = None) -> Dict[DimensionName, int]:
    return {name: score_dimension(answer, name, persona) for name in DIMENSION_NAMES}
