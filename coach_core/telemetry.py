from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Union

from . import config

log = logging.getLogger("coach.telemetry")

ANSWER_REDACT_OVER = 200
QUESTION_REDACT_OVER = 150


@dataclass
class CoachEvent:
    route: str
    persona: str
    duration_ms: float
    score: Optional[int] = None
    confidence: Optional[float] = None
    stories_count: Optional[int] = None
    flags: List[str] = field(default_factory=list)
    error: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


def redact(text: Any, limit: int) -> Any:
    """Replace text longer than ``limit`` with ``[redacted:<md5-8>:<len>]``."""
    if not isinstance(text, str) or len(text) <= limit:
        return text
    digest = hashlib.md5(text.encode("utf-8")).hexdigest()[:8]
    return f"[redacted:{digest}:{len(text)}]"


def sanitize_metadata(metadata: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    clean = dict(metadata or {})
    if "answer" in clean:
        clean["answer"] = redact(clean["answer"], ANSWER_REDACT_OVER)
    if "question" in clean:
        clean["question"] = redact(clean["question"], QUESTION_REDACT_OVER)
    return clean


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def log_coach_event(event: CoachEvent) -> None:
    if not config.TELEMETRY_ENABLED:
        return
    try:
        payload = asdict(event)
        payload["metadata"] = sanitize_metadata(event.metadata)
        payload.update({"event": "interview_coach_usage", "timestamp": _now()})
        log.info("coach event %s", json.dumps(payload, default=str, sort_keys=True))
    except Exception as exc:
        log.warning("telemetry logging failed: %s", exc)


def log_coach_error(route: str, persona: str, error: Union[BaseException, str],
                    context: Optional[Mapping[str, Any]] = None) -> None:
    if not config.TELEMETRY_ENABLED:
        return
    try:
        payload = {
            "event": "interview_coach_error",
            "timestamp": _now(),
            "route": route,
            "persona": persona,
            "error": str(error),
            "error_type": type(error).__name__ if isinstance(error, BaseException) else "str",
            "context": sanitize_metadata(context),
        }
        log.error("coach error %s", json.dumps(payload, default=str, sort_keys=True))
    except Exception as exc:
        log.warning("telemetry error logging failed: %s", exc)
