from __future__ import annotations
import re
from typing import List

from . import config
from .errors import ConfigError
from .types import DIMENSION_NAMES, PERSONAS


def _close_to_one(total: float) -> bool:
    return abs(total - 1.0) <= config.WEIGHT_TOLERANCE


def dimension_weights_valid(cfg) -> bool:
    return _close_to_one(sum(d.weight for d in cfg.dimensions))


def persona_weights_valid(cfg) -> bool:
    for persona in PERSONAS:
        weights = cfg.persona_weights.get(persona)
        if not weights or not _close_to_one(sum(weights.values())):
            return False
    return True


def red_flag_penalties_valid(cfg) -> bool:
    lo, hi = config.PENALTY_RANGE
    return all(lo <= f.penalty <= hi for f in cfg.red_flags)


def regex_keyword(keyword: str) -> str | None:
    """Keywords written as /pattern/ are regular expressions."""
    if len(keyword) > 2 and keyword.startswith("/") and keyword.endswith("/"):
        return keyword[1:-1]
    return None


def config_problems(cfg) -> List[str]:
    problems: List[str] = []

    names = [d.name for d in cfg.dimensions]
    if sorted(names) != sorted(DIMENSION_NAMES):
        problems.append(f"dimensions must be exactly {', '.join(DIMENSION_NAMES)} (got {', '.join(names) or 'none'})")
    for d in cfg.dimensions:
        if not 0.0 < d.weight <= 1.0:
            problems.append(f"dimension {d.name} weight {d.weight} outside (0, 1]")
    if not dimension_weights_valid(cfg):
        total = sum(d.weight for d in cfg.dimensions)
        problems.append(f"dimension weights sum to {total:.4f}, expected 1.0")

    for persona in PERSONAS:
        weights = cfg.persona_weights.get(persona)
        if not weights:
            problems.append(f"persona {persona} has no weights")
            continue
        missing = [n for n in DIMENSION_NAMES if n not in weights]
        extra = [n for n in weights if n not in DIMENSION_NAMES]
        if missing:
            problems.append(f"persona {persona} missing weights for {', '.join(missing)}")
        if extra:
            problems.append(f"persona {persona} has unknown dimensions {', '.join(map(str, extra))}")
        if any(w < 0 for w in weights.values()):
            problems.append(f"persona {persona} has negative weights")
        total = sum(weights.values())
        if not _close_to_one(total):
            problems.append(f"persona {persona} weights sum to {total:.4f}, expected 1.0")
    unknown = [p for p in cfg.persona_weights if p not in PERSONAS]
    if unknown:
        problems.append(f"unknown personas {', '.join(map(str, unknown))}")

    seen = set()
    lo, hi = config.PENALTY_RANGE
    for flag in cfg.red_flags:
        if flag.name in seen:
            problems.append(f"red flag {flag.name} defined twice")
        seen.add(flag.name)
        if not lo <= flag.penalty <= hi:
            problems.append(f"red flag {flag.name} penalty {flag.penalty} outside [{lo}, {hi}]")
        for kw in flag.keywords:
            pattern = regex_keyword(kw)
            if pattern is None:
                continue
            try:
                re.compile(pattern)
            except re.error as exc:
                problems.append(f"red flag {flag.name} pattern {kw!r} does not compile: {exc}")

    for rule in cfg.ceiling_rules:
        if not callable(rule):
            problems.append(f"ceiling rule {rule!r} is not callable")
    if cfg.min_answer_length < 0:
        problems.append("min_answer_length must be >= 0")
    if cfg.max_penalties > 0:
        problems.append("max_penalties must be <= 0")
    return problems


def validate_config(cfg):
    problems = config_problems(cfg)
    if problems:
        raise ConfigError(problems)
    return cfg
