from __future__ import annotations
from typing import Iterable


class CoachError(Exception):
    """Base class for every error raised by the coach engine."""


class ConfigError(CoachError, ValueError):
    """Rubric configuration failed validation; the engine must not be used with it."""

    def __init__(self, problems: Iterable[str]):
        self.problems = tuple(problems)
        super().__init__("invalid score config: " + "; ".join(self.problems))


class ContractError(CoachError, ValueError):
    """Caller passed input the engine refuses to coerce."""


class InsufficientAnswersError(ContractError):
    pass


class InsufficientThemesError(ContractError):
    pass
