from __future__ import annotations

import pytest

from coach_core.errors import ContractError, InsufficientAnswersError, InsufficientThemesError
from coach_core.selection import assess_answers, select_top_answers_for_themes, strong_theme_count

from tests.conftest import NUMERIC_ANSWERS, PLAIN_ANSWERS, SCENARIO_THEMES, build_answers


@pytest.mark.parametrize("n, expected", [(1, 1), (2, 2), (3, 3), (4, 3), (5, 4), (6, 5), (8, 6), (10, 7)])
def test_strong_theme_count(n, expected):
    assert strong_theme_count(n) == expected


def test_contract_errors(score_config):
    two = build_answers(NUMERIC_ANSWERS[:2])
    with pytest.raises(InsufficientAnswersError):
        select_top_answers_for_themes(two, ["a", "b"], config=score_config)
    three = build_answers(NUMERIC_ANSWERS[:3])
    with pytest.raises(InsufficientThemesError):
        select_top_answers_for_themes(three, ["only"], config=score_config)
    assert issubclass(InsufficientThemesError, ContractError)


def test_primary_themes_draw_from_numeric_answers(score_config, scenario_answers, numeric_ids):
    picks = select_top_answers_for_themes(scenario_answers, SCENARIO_THEMES, persona="hiring-manager", config=score_config)
    assert [p.theme for p in picks] == SCENARIO_THEMES
    primary = [p for p in picks if not p.gap]
    assert len(primary) == 5
    for p in primary:
        assert p.strong
        assert set(p.answer_ids) <= numeric_ids
    assert all(len(p.answer_ids) == 1 for p in picks)


def test_gap_theme_prefers_unused_answer(score_config, scenario_answers, numeric_ids):
    picks = select_top_answers_for_themes(scenario_answers, SCENARIO_THEMES, config=score_config)
    gap = picks[-1]
    assert gap.gap and not gap.strong
    assert gap.answer_ids[0] not in numeric_ids


def test_tagged_answers_win_their_theme(score_config):
    answers = build_answers(
        NUMERIC_ANSWERS[:3] + PLAIN_ANSWERS[:1],
        themes=[[], [], ["migration"], ["culture"]],
    )
    picks = select_top_answers_for_themes(answers, ["migration", "culture"], config=score_config)
    by_theme = {p.theme: p.answer_ids for p in picks}
    assert by_theme["migration"] == ("a3",)
    # both themes are primary; numeric answers exist, so the untagged-but-numeric pool wins
    assert set(by_theme["culture"]) <= {"a1", "a2", "a3"}


def test_selection_without_numeric_answers_uses_everything(score_config):
    answers = build_answers(PLAIN_ANSWERS + ["I organised a reading group and people enjoyed sharing ideas weekly."])
    picks = select_top_answers_for_themes(answers, ["teamwork", "growth", "initiative"], config=score_config)
    assert not any(p.strong for p in picks)
    assert len({p.answer_ids for p in picks}) == 3


def test_selection_is_deterministic(score_config, scenario_answers):
    a = select_top_answers_for_themes(scenario_answers, SCENARIO_THEMES, config=score_config)
    b = select_top_answers_for_themes(scenario_answers, SCENARIO_THEMES, config=score_config)
    assert a == b


def test_evidence_strength_bonus(score_config, scenario_answers):
    evidence = assess_answers(scenario_answers, "peer", score_config)
    for ev in evidence:
        bonus = 20 if ev.quantified else 0
        assert ev.strength == ev.result.overall + bonus
    assert [ev.quantified for ev in evidence] == [True, True, True, True, False, False]
