from __future__ import annotations

import pytest

from coach_core.errors import InsufficientAnswersError, InsufficientThemesError
from coach_core.synthesis import story_band, synthesize
from coach_core.types import PERSONAS, SynthesisInput

from tests.conftest import NUMERIC_ANSWERS, SCENARIO_THEMES, build_answers

EXTRA_THEMES = ["ownership", "ambiguity"]


def _run(answers, themes, config, **kw):
    return synthesize(SynthesisInput(answers=answers, themes=themes, **kw), config)


@pytest.mark.parametrize("n_themes", range(2, 9))
def test_story_count_and_coverage_for_any_theme_count(score_config, scenario_answers, n_themes):
    themes = (SCENARIO_THEMES + EXTRA_THEMES)[:n_themes]
    out = _run(scenario_answers, themes, score_config)
    assert 3 <= len(out.core_stories) <= 4
    assert set(out.coverage_map) == set(themes)
    covered = sum(1 for t in themes if out.coverage_map[t])
    assert covered / len(themes) >= 0.8
    for story in out.core_stories:
        assert story.coverage
        for theme in story.coverage:
            assert story.id in out.coverage_map[theme]


def test_every_story_has_three_variants(score_config, scenario_answers):
    out = _run(scenario_answers, SCENARIO_THEMES, score_config)
    for story in out.core_stories:
        assert set(story.variants) == set(PERSONAS)
        for variant in story.variants.values():
            assert variant.long.strip()
            assert 4 <= len(variant.short) <= 6


def test_hiring_manager_scenario(score_config, scenario_answers, numeric_ids):
    out = _run(scenario_answers, SCENARIO_THEMES, score_config, persona="hiring-manager")
    assert 3 <= len(out.core_stories) <= 4
    assert [s.id for s in out.core_stories] == [f"cs_{i}" for i in range(1, len(out.core_stories) + 1)]
    assert any(s.source_answer_ids and set(s.source_answer_ids) <= numeric_ids for s in out.core_stories)
    for story in out.core_stories:
        assert story.variants["hiring-manager"].short[3].startswith("Metrics")
    assert out.rationale[0].startswith(f"Synthesized {len(out.core_stories)} core stories covering 100%")
    assert out.version == "v2"


def test_synthesize_is_deterministic(score_config, scenario_answers):
    first = _run(scenario_answers, SCENARIO_THEMES, score_config).to_dict()
    second = _run(scenario_answers, SCENARIO_THEMES, score_config).to_dict()
    assert first == second


def test_contract_errors_only_for_too_little_input(score_config, scenario_answers):
    with pytest.raises(InsufficientAnswersError):
        _run(scenario_answers[:2], SCENARIO_THEMES, score_config)
    with pytest.raises(InsufficientThemesError):
        _run(scenario_answers, ["leadership"], score_config)
    out = _run(scenario_answers[:3], ["leadership", "impact"], score_config)
    assert len(out.core_stories) == 3


def test_minimal_numeric_input(score_config):
    answers = build_answers(NUMERIC_ANSWERS[:3])
    out = _run(answers, SCENARIO_THEMES, score_config)
    assert 3 <= len(out.core_stories) <= 4
    assert all(out.coverage_map[t] for t in SCENARIO_THEMES)


def test_custom_band(score_config, scenario_answers):
    out = _run(scenario_answers, SCENARIO_THEMES, score_config, min_stories=2, max_stories=2)
    assert len(out.core_stories) == 2
    assert story_band(0, -1) == (1, 1)
    assert story_band(3, 2) == (3, 3)


def test_output_serializes(score_config, scenario_answers):
    body = _run(scenario_answers, SCENARIO_THEMES, score_config).to_dict()
    story = body["core_stories"][0]
    assert set(story) == {"id", "title", "coverage", "source_answer_ids", "star", "variants"}
    assert set(story["star"]) == {"s", "t", "a", "r"}
    assert set(story["variants"]) == set(PERSONAS)
    assert isinstance(body["coverage_map"][SCENARIO_THEMES[0]], list)


@pytest.mark.parametrize("themes", [["impact", "impact"], [" leadership", "impact"], ["leadership", " leadership "]])
def test_repeated_or_padded_themes_keep_caller_keys(score_config, scenario_answers, themes):
    out = _run(scenario_answers, themes, score_config)
    assert 3 <= len(out.core_stories) <= 4
    assert set(out.coverage_map) == set(themes)
    assert all(out.coverage_map[t] for t in themes)
    for story in out.core_stories:
        assert set(story.coverage) <= set(themes)
    assert out.rationale[0].endswith("covering 100% of themes")
