from __future__ import annotations

from dataclasses import replace

import pytest

from coach_core.errors import ConfigError
from coach_core.rubrics import DIMENSIONS, PERSONA_WEIGHTS, RED_FLAGS, default_score_config
from coach_core.types import DIMENSION_NAMES, PERSONAS, RedFlag
from coach_core.validators import (
    config_problems,
    dimension_weights_valid,
    persona_weights_valid,
    red_flag_penalties_valid,
)


def test_default_rubric_is_valid(score_config):
    assert config_problems(score_config) == []
    assert dimension_weights_valid(score_config)
    assert persona_weights_valid(score_config)
    assert red_flag_penalties_valid(score_config)
    assert [d.name for d in score_config.dimensions] == list(DIMENSION_NAMES)
    assert score_config.version == "2.0"
    assert score_config.max_penalties == -30


def test_persona_weights_are_read_only(score_config):
    with pytest.raises(TypeError):
        score_config.persona_weights["peer"]["risks"] = 0.5  # type: ignore[index]
    for persona in PERSONAS:
        assert abs(sum(score_config.weights_for(persona).values()) - 1.0) < 1e-9


def test_dimension_weights_must_sum_to_one():
    dims = (replace(DIMENSIONS[0], weight=0.5),) + DIMENSIONS[1:]
    with pytest.raises(ConfigError) as exc:
        default_score_config(dimensions=dims)
    assert any("dimension weights sum" in p for p in exc.value.problems)


def test_persona_weights_must_cover_every_dimension():
    weights = {p: dict(w) for p, w in PERSONA_WEIGHTS.items()}
    weights["peer"].pop("risks")
    with pytest.raises(ConfigError) as exc:
        default_score_config(persona_weights=weights)
    assert any("persona peer missing weights for risks" in p for p in exc.value.problems)


def test_missing_persona_is_rejected():
    weights = {p: w for p, w in PERSONA_WEIGHTS.items() if p != "recruiter"}
    with pytest.raises(ConfigError):
        default_score_config(persona_weights=weights)


@pytest.mark.parametrize("penalty", [0, -21, 5])
def test_red_flag_penalty_range(penalty):
    flags = RED_FLAGS + (RedFlag("rambling", "Too long", penalty, ("anyway",)),)
    with pytest.raises(ConfigError) as exc:
        default_score_config(red_flags=flags)
    assert "rambling" in str(exc.value)


def test_duplicate_flag_and_bad_pattern_are_both_reported():
    flags = RED_FLAGS + (
        RedFlag("weak-ownership", "dup", -5, ("we",)),
        RedFlag("hedging", "Hedges", -4, ("/(unclosed/",)),
    )
    with pytest.raises(ConfigError) as exc:
        default_score_config(red_flags=flags)
    joined = "\n".join(exc.value.problems)
    assert "defined twice" in joined
    assert "does not compile" in joined


def test_config_error_is_value_error():
    with pytest.raises(ValueError, match="invalid score config"):
        default_score_config(max_penalties=10)


def test_non_callable_ceiling_rule_rejected():
    with pytest.raises(ConfigError):
        default_score_config(ceiling_rules=("not a rule",))
