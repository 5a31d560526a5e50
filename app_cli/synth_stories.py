from __future__ import annotations
import argparse, asyncio, json, logging, pathlib
from coach_core import config
from coach_core.embellish import embellisher_from_env
from coach_core.errors import ContractError
from coach_core.rubrics import default_score_config
from coach_core.synthesis import synthesize_async
from coach_core.types import AnswerItem, SynthesisInput


def load_input(path: str) -> SynthesisInput:
    raw = json.loads(pathlib.Path(path).read_text(encoding="utf-8"))
    return SynthesisInput(
        answers=tuple(AnswerItem.from_dict(a) for a in raw.get("answers") or []),
        themes=tuple(raw.get("themes") or []),
        persona=raw.get("persona") or "hiring-manager",
        max_stories=int(raw.get("maxStories", config.SYNTH_MAX_STORIES)),
        min_stories=int(raw.get("minStories", config.SYNTH_MIN_STORIES)),
    )


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Synthesize core interview stories from a JSON file of answers.")
    ap.add_argument("path", help="JSON file with {answers, themes, persona}")
    ap.add_argument("--embellish", action="store_true", help="polish variants with the configured LLM backend")
    ap.add_argument("--out", help="write the result here instead of stdout")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    try:
        inp = load_input(args.path)
        fn = embellisher_from_env() if args.embellish else None
        out = asyncio.run(synthesize_async(inp, default_score_config(), fn))
    except ContractError as exc:
        print(f"Cannot synthesize: {exc}")
        return 2
    text = json.dumps(out.to_dict(), indent=2, ensure_ascii=False)
    if args.out:
        pathlib.Path(args.out).write_text(text + "\n", encoding="utf-8")
        print(f"Done. Stories saved to: {args.out}")
    else:
        print(text)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
