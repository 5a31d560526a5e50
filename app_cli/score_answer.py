from __future__ import annotations
import json, sys
from coach_core.errors import ContractError
from coach_core.feedback import summarize_improvements
from coach_core.rubrics import default_score_config
from coach_core.scoring import score_answer
from coach_core.types import PERSONAS, normalize_persona
def ask(prompt: str, options=None) -> str:
    if options:
        print(prompt)
        for i,opt in enumerate(options): print(f"  [{i}] {opt}")
        while True:
            v = input("Your choice (index): ").strip()
            if v.isdigit() and int(v) < len(options): return options[int(v)]
            print("Enter a number index.")
    else:
        return input(prompt + " ").strip()
def read_answer() -> str:
    print("Paste your answer; finish with an empty line.")
    lines = []
    while True:
        try: line = input()
        except EOFError: break
        if not line.strip(): break
        lines.append(line)
    return "\n".join(lines)
def main(argv: list[str] | None = None) -> int:
    print("Interview Coach: answer scoring")
    cfg = default_score_config()
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        persona = normalize_persona(args[0]) if args else ask("Which interviewer?", list(PERSONAS))
    except ContractError as exc:
        print(exc); return 2
    text = read_answer()
    res = score_answer(text, persona, cfg)
    print(json.dumps(res.to_dict(), indent=2))
    tips = summarize_improvements(res.per_dimension, res.flag_names)
    print(f"\nOverall: {res.overall}/100 (confidence {res.confidence:.2f})")
    if tips["summary"]: print(f"Next step: {tips['summary']}")
    if tips["cta"]: print(tips["cta"])
    return 0
if __name__ == "__main__": raise SystemExit(main())
