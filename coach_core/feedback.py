from __future__ import annotations
from typing import Dict, Iterable, List, Mapping

_DIM_TIPS: Dict[str, str] = {
    "structure": "Walk through Situation, Task, Action and Result in that order.",
    "specificity": "Add 1-2 concrete KPIs (before/after, time, cost, users).",
    "outcome": 'State the result in business/user terms (e.g., "cut P95 by 38% for 2.4M users").',
    "role": 'Call out your decision and direct contribution ("I decided...", "I changed...").',
    "company": "Tie the story to the customers, product or mission of the company.",
    "persona": "Frame the story in the language this interviewer cares about.",
    "risks": "Drop blame, hedging and absolutes; own the outcome.",
}

_FLAG_TIPS: Dict[str, str] = {
    "weak-ownership": "Reads like team-wide effort; add a first-person decision you made.",
    "vague-outcome": "States actions, not results; add the effect on users/revenue/latency.",
    "negative-framing": "Pair every problem with what you did about it.",
    "generic-answer": "Replace general statements with the specific situation you handled.",
    "excessive-criticism": "Describe constraints neutrally instead of criticising people.",
    "overconfidence": "Let the numbers carry the claim instead of superlatives.",
}


def summarize_improvements(per_dimension: Mapping[str, float], flags: Iterable[str] = ()) -> Dict[str, object]:
    """Target the two weakest dimensions; flags matching those dimensions sharpen the advice."""
    dims = sorted(
        ((k, v) for k, v in per_dimension.items() if isinstance(v, (int, float))),
        key=lambda kv: kv[1],
    )
    targeted = [k for k, _ in dims[:2]]
    flag_set = [f for f in flags if f]

    parts: List[str] = []
    for flag in flag_set:
        tip = _FLAG_TIPS.get(flag)
        if tip and tip not in parts:
            parts.append(tip)
    for dim in targeted:
        tip = _DIM_TIPS.get(dim)
        if tip and tip not in parts:
            parts.append(tip)

    summary = " ".join(parts[:2])
    cta = f"Answer the prompts on {' & '.join(targeted)} to unlock +8-12 pts." if targeted else ""
    return {"summary": summary, "cta": cta, "targeted": targeted}


def score_deltas(old: Mapping[str, float], new: Mapping[str, float]) -> Dict[str, float]:
    return {k: float(new[k]) - float(old[k]) for k in new if k in old}


def delta_rationales(old: Mapping[str, float], new: Mapping[str, float], flags: Iterable[str] = ()) -> List[str]:
    """Explain the two dimensions that moved least (or fell) since the previous attempt."""
    flag_set = set(flags)
    deltas = sorted(score_deltas(old, new).items(), key=lambda kv: kv[1])
    out: List[str] = []
    for dim, delta in deltas[:2]:
        if delta > 0:
            continue
        if dim == "specificity":
            out.append("Still missing a before/after KPI (time/cost/users). Add a number or timeframe."
                       if "vague-outcome" in flag_set
                       else "Specificity score unchanged. Add concrete metrics and measurable outcomes.")
        elif dim == "role":
            out.append(_FLAG_TIPS["weak-ownership"] if "weak-ownership" in flag_set
                       else "Role clarity unchanged. Specify your personal contribution and decision-making authority.")
        elif dim == "outcome":
            out.append(_FLAG_TIPS["vague-outcome"] if "vague-outcome" in flag_set
                       else "Outcome impact unchanged. Add specific results and business impact.")
        else:
            out.append(f"{dim.capitalize()} score unchanged. {_DIM_TIPS.get(dim, '')}".strip())
    return out
