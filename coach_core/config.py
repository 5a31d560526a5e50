from __future__ import annotations
import os, json, pathlib
from dataclasses import dataclass


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


SCORE_CONFIG_VERSION: str = "2.0"
SYNTHESIS_VERSION: str = "v2"

MIN_ANSWER_LENGTH: int = 50
MAX_PENALTIES: int = -30
WEIGHT_TOLERANCE: float = 1e-3
PENALTY_RANGE: tuple[int, int] = (-20, -1)

DIMENSION_BASELINE: int = 60
MIN_SCORABLE_CHARS: int = 3

EVIDENCE_BONUS: int = 20
STRONG_THEME_RATIO: float = 0.70
SYNTH_MIN_STORIES: int = 3
SYNTH_MAX_STORIES: int = 4
SYNTH_PER_THEME: int = 1
COVERAGE_TARGET: float = 0.80

VARIANT_BULLETS_MIN: int = 4
VARIANT_BULLETS_MAX: int = 6

CONFIDENCE_FULL_LENGTH: int = 600
RULE_MODEL_CONFIDENCE: float = 0.85

EMBELLISH_ENABLED: bool = False
EMBELLISH_TIMEOUT_SEC: float = 8.0

TELEMETRY_ENABLED: bool = True
# // env overrides for staging/ops; defaults remain conservative.
MAX_PENALTIES = _env_int("MAX_PENALTIES", MAX_PENALTIES)
SYNTH_MIN_STORIES = _env_int("SYNTH_MIN_STORIES", SYNTH_MIN_STORIES)
SYNTH_MAX_STORIES = _env_int("SYNTH_MAX_STORIES", SYNTH_MAX_STORIES)
EMBELLISH_ENABLED = _env_bool("EMBELLISH_ENABLED", EMBELLISH_ENABLED)
EMBELLISH_TIMEOUT_SEC = _env_float("EMBELLISH_TIMEOUT_SEC", EMBELLISH_TIMEOUT_SEC)
TELEMETRY_ENABLED = _env_bool("TELEMETRY_ENABLED", TELEMETRY_ENABLED)

_AZURE_KEYS = ("AZURE_OPENAI_ENDPOINT", "AZURE_OPENAI_API_KEY", "AZURE_OPENAI_API_VERSION", "AZURE_OPENAI_DEPLOYMENT")


def load_config(path: str = "config.json") -> dict:
    """Merge an optional JSON file with the environment keys that steer the LLM backend."""
    cfg = {}
    p = pathlib.Path(path)
    if p.exists():
        try: cfg = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError): cfg = {}
    e = os.environ
    if e.get("EMBELLISH_ENABLED"): cfg["EMBELLISH_ENABLED"] = _env_bool("EMBELLISH_ENABLED", False)
    if e.get("LLM_BACKEND"): cfg["LLM_BACKEND"] = e.get("LLM_BACKEND")
    if e.get("EMBELLISH_TIMEOUT_SEC"): cfg["EMBELLISH_TIMEOUT_SEC"] = _env_float("EMBELLISH_TIMEOUT_SEC", EMBELLISH_TIMEOUT_SEC)
    for k in _AZURE_KEYS:
        if e.get(k): cfg[k] = e.get(k)
    return cfg


def get_backend(cfg: dict) -> str | None:
    if not cfg.get("EMBELLISH_ENABLED", EMBELLISH_ENABLED): return None
    b = (cfg.get("LLM_BACKEND") or "").lower().strip()
    return b if b == "azure" else None


@dataclass(frozen=True)
class AzureSettings:
    endpoint: str
    api_key: str
    deployment: str
    api_version: str


def _azure_from_json(path: str = ".azure_config.json") -> dict[str, str]:
    p = pathlib.Path(path)
    if not p.exists(): return {}
    try:
        j = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return {
        "endpoint":   str(j.get("endpoint", "")),
        "api_key":    str(j.get("api_key", "")),
        "api_version":str(j.get("api_version", "")),
        "deployment": str(j.get("deployment", "")),
    }


def azure_settings(cfg: dict | None = None) -> AzureSettings:
    cfg = cfg or {}
    vals = {
        "endpoint":   cfg.get("AZURE_OPENAI_ENDPOINT") or os.getenv("AZURE_OPENAI_ENDPOINT", ""),
        "api_key":    cfg.get("AZURE_OPENAI_API_KEY") or os.getenv("AZURE_OPENAI_API_KEY", ""),
        "api_version":cfg.get("AZURE_OPENAI_API_VERSION") or os.getenv("AZURE_OPENAI_API_VERSION", ""),
        "deployment": cfg.get("AZURE_OPENAI_DEPLOYMENT") or os.getenv("AZURE_OPENAI_DEPLOYMENT", ""),
    }
    if not all(vals.values()):
        for k, v in _azure_from_json().items():
            if not vals.get(k): vals[k] = v
    missing = [k for k, v in vals.items() if not v]
    if missing:
        raise RuntimeError(f"Azure OpenAI not configured. Missing: {', '.join(missing)}")
    return AzureSettings(**vals)
