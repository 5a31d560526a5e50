from __future__ import annotations
import re
from functools import lru_cache
from typing import Iterable, List, Tuple

from .types import RedFlag
from .validators import regex_keyword


@lru_cache(maxsize=512)
def _keyword_rx(keyword: str) -> re.Pattern:
    pattern = regex_keyword(keyword)
    if pattern is not None:
        return re.compile(pattern, re.I)
    return re.compile(r'(?<!\w)' + re.escape(keyword.strip()) + r'(?!\w)', re.I)


def flag_matches(text: str, flag: RedFlag) -> bool:
    return any(kw.strip() and _keyword_rx(kw).search(text) for kw in flag.keywords)


def detect_red_flags(text: str, catalogue: Iterable[RedFlag]) -> Tuple[RedFlag, ...]:
    """Flags whose keywords hit ``text``; each name counted once, catalogue order kept."""
    if not isinstance(text, str) or not text.strip():
        return ()
    hit: List[RedFlag] = []
    seen = set()
    for flag in catalogue:
        if flag.name in seen:
            continue
        if flag_matches(text, flag):
            hit.append(flag)
            seen.add(flag.name)
    return tuple(hit)


def total_penalty(flags: Iterable[RedFlag], floor: int) -> int:
    """Sum of penalties, never below ``floor`` (a negative number)."""
    return max(sum(f.penalty for f in flags), floor)
