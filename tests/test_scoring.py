from __future__ import annotations

import pytest

from coach_core.confidence import compute_confidence
from coach_core.errors import ContractError
from coach_core.rubrics import default_score_config
from coach_core.scoring import score, score_answer
from coach_core.types import PERSONAS, AnswerItem, ScoringContext

from tests.conftest import NUMERIC_ANSWERS, PLAIN_ANSWERS

SHORT_30 = "I shipped the new billing page"
MEDIUM_75 = "I shipped the new billing page and moved every invoice into the new ledger."
FLAGGED = (
    "We had a problem with the release and it was a terrible week. Usually the team did the testing, "
    "but the best plan failed and results improved only a little after that."
)
FLAGGED_30 = "We failed. Usually best. Hate."


def test_fixture_lengths():
    assert len(SHORT_30) == 30
    assert len(MEDIUM_75) == 75
    assert len(FLAGGED_30) == 30


@pytest.mark.parametrize("persona", PERSONAS)
def test_thirty_char_answer_scores_exactly_forty(score_config, persona):
    res = score_answer(SHORT_30, persona, score_config)
    assert res.overall == 40
    assert "insufficient_length" in res.capped_by


@pytest.mark.parametrize("persona", PERSONAS)
def test_seventy_five_char_answer_caps_at_sixty(score_config, persona):
    res = score_answer(MEDIUM_75, persona, score_config)
    assert res.overall <= 60


def test_four_flags_cap_at_forty_five(score_config):
    res = score_answer(FLAGGED, "hiring-manager", score_config)
    assert len(res.red_flags_triggered) >= 4
    assert res.overall <= 45
    assert 0 <= res.overall <= 100


@pytest.mark.parametrize("persona", PERSONAS)
def test_flagged_thirty_char_answer_lands_below_the_length_ceiling(score_config, persona):
    res = score_answer(FLAGGED_30, persona, score_config)
    assert len(res.red_flags_triggered) == 5
    assert res.capped_by == ()
    assert 0 <= res.overall < 40
    assert any("penalty floor reached" in line for line in res.rationale)


def test_empty_answer_scores_zero(score_config):
    res = score_answer("", "peer", score_config)
    assert res.overall == 0
    assert set(res.per_dimension.values()) == {0}
    assert res.confidence == 0.0


def test_score_is_pure(score_config):
    ctx = ScoringContext(answer=AnswerItem(id="a1", text=NUMERIC_ANSWERS[0]), persona="peer", config=score_config)
    first, second = score(ctx), score(ctx)
    assert first == second
    assert first.to_dict() == second.to_dict()


def test_strong_answer_beats_plain_answer(score_config):
    strong = score_answer(NUMERIC_ANSWERS[0], "hiring-manager", score_config)
    plain = score_answer(PLAIN_ANSWERS[0], "hiring-manager", score_config)
    assert strong.overall > plain.overall
    assert strong.version == "2.0"
    assert strong.persona == "hiring-manager"


def test_persona_alias_and_unknown_persona(score_config):
    assert score_answer(SHORT_30, "hm", score_config).persona == "hiring-manager"
    with pytest.raises(ContractError):
        score_answer(SHORT_30, "ceo", score_config)


def test_result_serializes(score_config):
    body = score_answer(FLAGGED, "recruiter", score_config).to_dict()
    assert set(body) >= {"overall", "per_dimension", "red_flags", "capped_by", "confidence", "rationale"}
    assert all({"name", "penalty"} <= set(flag) for flag in body["red_flags"])
    assert len(body["per_dimension"]) == 7


def test_confidence_monotonic():
    by_length = [compute_confidence(n, 0)[0] for n in (0, 50, 200, 600, 1200)]
    assert by_length == sorted(by_length)
    by_flags = [compute_confidence(400, k)[0] for k in range(6)]
    assert by_flags == sorted(by_flags, reverse=True)
    conf, reasons = compute_confidence(600, 0)
    assert 0.0 <= conf <= 1.0
    assert len(reasons) == 3


def test_min_answer_length_does_not_change_scores(score_config):
    strict = default_score_config(min_answer_length=500)
    for text in (SHORT_30, MEDIUM_75, NUMERIC_ANSWERS[0]):
        assert score_answer(text, "peer", strict).to_dict() == score_answer(text, "peer", score_config).to_dict()
