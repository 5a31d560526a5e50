from __future__ import annotations

import pytest

from coach_core.heuristics import (
    has_quantified_evidence,
    metric_tokens,
    score_dimension,
    score_dimensions,
    split_clauses,
)
from coach_core.types import DIMENSION_NAMES, AnswerItem

from tests.conftest import NUMERIC_ANSWERS, PLAIN_ANSWERS


@pytest.mark.parametrize("text", ["", "  ", "ok", "\n\t"])
def test_blank_text_scores_zero_everywhere(text):
    assert set(score_dimensions(text).values()) == {0}


def test_scores_are_bounded_integers():
    for text in NUMERIC_ANSWERS + PLAIN_ANSWERS + ["x" * 5000]:
        for name in DIMENSION_NAMES:
            value = score_dimension(text, name, "peer")
            assert isinstance(value, int)
            assert 0 <= value <= 100


def test_numbers_raise_specificity_and_outcome():
    strong = score_dimensions(NUMERIC_ANSWERS[0], "hiring-manager")
    plain = score_dimensions(PLAIN_ANSWERS[0], "hiring-manager")
    assert strong["specificity"] > plain["specificity"]
    assert strong["outcome"] > plain["outcome"]
    assert strong["structure"] >= plain["structure"]


def test_team_only_language_lowers_role():
    mine = score_dimension("I decided to rewrite the deploy scripts and I led the rollout.", "role")
    ours = score_dimension("We decided to rewrite the deploy scripts and the team did the rollout.", "role")
    assert mine > ours


def test_persona_cues_depend_on_persona():
    text = "I redesigned the cache architecture and cut API latency, then refactored the tests."
    assert score_dimension(text, "persona", "peer") > score_dimension(text, "persona", "recruiter")


def test_answer_persona_used_when_none_given():
    answer = AnswerItem(id="x", text="I mentored two juniors and built trust across the team.", persona="recruiter")
    assert score_dimension(answer, "persona") == score_dimension(answer.text, "persona", "recruiter")


def test_hedging_lowers_risks():
    assert score_dimension("I guess it was maybe fine, hopefully.", "risks") < score_dimension("I shipped it on time.", "risks")


def test_metric_tokens_and_quantified_evidence():
    toks = metric_tokens("We cut costs by 38% and saved $2M over 3 months for 1,200 users.")
    assert "38%" in toks
    assert "$2M" in toks
    assert any(t.startswith("3 months") for t in toks)
    assert has_quantified_evidence("doubled throughput")
    assert has_quantified_evidence("in 2 weeks")
    assert not has_quantified_evidence("made things better")


def test_split_clauses_drops_punctuation():
    assert split_clauses("First. Then this!  Finally; done\nNew line") == ["First", "Then this", "Finally", "done", "New line"]
    assert split_clauses("Grew 2.4M users. Next") == ["Grew 2.4M users", "Next"]
