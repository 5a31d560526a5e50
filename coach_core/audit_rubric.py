from __future__ import annotations

import json
from pathlib import Path

from . import config
from .ceilings import rule_name
from .errors import ConfigError
from .rubrics import default_score_config
from .scoring import score_answer
from .types import PERSONAS, ScoreV2Config
from .validators import config_problems

# fixed probes: how the rubric treats a too-short answer and a strong one
PROBES: dict[str, str] = {
    "short": "I fixed a bug in the checkout.",
    "strong": (
        "At a fintech startup our checkout latency hurt conversion. I was asked to cut P95 latency before "
        "the holiday launch. I profiled the API, decided to add a Redis cache and rewrote the slowest query "
        "with the data team. As a result P95 dropped by 38% for 2.4M users and conversion rose 6%. "
        "I learned to measure before optimizing."
    ),
}


def audit_config(cfg: ScoreV2Config) -> dict[str, object]:
    warnings: list[str] = list(config_problems(cfg))

    dimensions = {d.name: d.weight for d in cfg.dimensions}
    personas = {p: round(sum(cfg.weights_for(p).values()), 6) for p in PERSONAS}
    flags: dict[str, dict[str, object]] = {}
    inert: list[str] = []
    for flag in cfg.red_flags:
        flags[flag.name] = {"penalty": flag.penalty, "keywords": len(flag.keywords)}
        if not flag.keywords:
            inert.append(flag.name)
    worst = sum(f.penalty for f in cfg.red_flags)
    if worst > cfg.max_penalties:
        warnings.append(f"penalty floor {cfg.max_penalties} is unreachable (all flags sum to {worst})")

    probes: dict[str, dict[str, int]] = {}
    for label, text in PROBES.items():
        probes[label] = {p: score_answer(text, p, cfg).overall for p in PERSONAS}
    if any(v > 40 for v in probes["short"].values()):
        warnings.append(f"short probe scored above 40: {probes['short']}")

    return {
        "version": cfg.version,
        "dimensions": dimensions,
        "persona_weight_sums": personas,
        "red_flags": flags,
        "inert_flags": inert,
        "ceiling_rules": [rule_name(r) for r in cfg.ceiling_rules],
        "probes": probes,
        "warnings": warnings,
    }


def print_report(summary: dict[str, object]) -> None:
    print(f"=== Rubric Audit (v{summary['version']}) ===")
    print("\nDimensions:")
    for name, weight in summary["dimensions"].items():  # type: ignore[union-attr]
        print(f"  {name:<12} {weight:.2f}")
    print("\nPersona weight sums:", summary["persona_weight_sums"])
    print("\nRed flags:")
    for name, data in summary["red_flags"].items():  # type: ignore[union-attr]
        print(f"  {name:<20} {data['penalty']:+d}  keywords={data['keywords']}")
    print("\nCeiling rules:", ", ".join(summary["ceiling_rules"]))  # type: ignore[arg-type]
    print("\nProbes:")
    for label, scores in summary["probes"].items():  # type: ignore[union-attr]
        print(f"  {label:<7} " + "  ".join(f"{p}={s}" for p, s in scores.items()))

    warnings: list[str] = summary["warnings"]  # type: ignore[assignment]
    if warnings:
        print("\nWarnings:")
        for msg in warnings:
            print(f" - {msg}")
    else:
        print("\nNo warnings.")


def write_summary(summary: dict[str, object], path: Path = Path("/tmp/rubric_audit.json")) -> str:
    text = json.dumps(summary, indent=2, sort_keys=True)
    path.write_text(text + "\n", encoding="utf-8")
    print(text)
    return text


def main(_argv: list[str] | None = None) -> int:
    try:
        cfg = default_score_config()
    except ConfigError as exc:
        print(f"Rubric failed validation (MAX_PENALTIES={config.MAX_PENALTIES}):")
        for msg in exc.problems:
            print(f" - {msg}")
        return 2
    summary = audit_config(cfg)
    print_report(summary)
    write_summary(summary)
    return 2 if summary["warnings"] else 0


if __name__ == "__main__":
    raise SystemExit(main())
