from __future__ import annotations

import pytest

from coach_core.rubrics import default_score_config
from coach_core.types import AnswerItem, AnswerMetadata

NUMERIC_ANSWERS: list[str] = [
    "At a fintech startup our checkout latency was hurting conversion. I was asked to cut P95 latency before "
    "the holiday launch. I profiled the API and decided to add a Redis cache instead of scaling the database. "
    "As a result P95 dropped by 38% for 2.4M users and conversion rose 6%.",
    "When our support queue hit 1,200 open tickets, leadership asked me to fix triage. My goal was to halve "
    "response time within one quarter. I built a routing model with the support team and rewrote the "
    "escalation playbook. Response time fell from 20 hours to 9 hours and CSAT improved by 12 points.",
    "During a data migration at Acme Corp the legacy pipeline failed nightly. I had to move 40 TB to the new "
    "warehouse in 6 weeks. I led three engineers, wrote the validation tests and chose a phased cutover rather "
    "than a big bang. We finished two weeks early and saved $180k in licence costs.",
    "Last year our onboarding flow lost 30% of new customers in week one. I was responsible for activation. "
    "I interviewed 25 customers, redesigned the setup checklist with design and shipped it behind a flag. "
    "Activation increased from 42% to 58% and churn dropped 9%.",
]

PLAIN_ANSWERS: list[str] = [
    "I like working with people and I think communication matters a lot in any team. Usually things work out "
    "when everyone is aligned and talks openly about stuff.",
    "Once I helped a colleague who was struggling with a difficult customer. I listened to the concerns, stayed "
    "calm, and together we found a way forward that everyone was happy with.",
]

SCENARIO_THEMES: list[str] = [
    "leadership", "impact", "collaboration", "technical-depth", "conflict", "learning",
]


def build_answers(
    texts: list[str],
    *,
    themes: list[list[str]] | None = None,
    prefix: str = "a",
) -> list[AnswerItem]:
    """Deterministic answer records; ids are ``<prefix>1..n`` in input order."""

    out: list[AnswerItem] = []
    for idx, text in enumerate(texts, start=1):
        tags = themes[idx - 1] if themes and idx - 1 < len(themes) else []
        out.append(
            AnswerItem(
                id=f"{prefix}{idx}",
                text=text,
                metadata=AnswerMetadata(themes=tuple(tags), question_id=f"q{idx}"),
            )
        )
    return out


@pytest.fixture
def score_config():
    return default_score_config()


@pytest.fixture
def scenario_answers() -> list[AnswerItem]:
    """Four answers with numeric outcomes (a1-a4) and two without (a5, a6)."""
    return build_answers(NUMERIC_ANSWERS + PLAIN_ANSWERS)


@pytest.fixture
def numeric_ids() -> set[str]:
    return {f"a{i}" for i in range(1, len(NUMERIC_ANSWERS) + 1)}
