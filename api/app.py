from __future__ import annotations
from fastapi import FastAPI, HTTPException, Path
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
import asyncio, os, time, typing as t

# ---- Engine imports ----
from coach_core import config as coach_config
from coach_core.embellish import embellisher_from_env
from coach_core.errors import ContractError
from coach_core.feedback import delta_rationales, score_deltas, summarize_improvements
from coach_core.rubrics import default_score_config
from coach_core.scoring import score
from coach_core.synthesis import synthesize, synthesize_async
from coach_core.telemetry import CoachEvent, log_coach_error, log_coach_event
from coach_core.types import AnswerItem, AnswerMetadata, ScoringContext, SynthesisInput, normalize_persona

SCORE_CONFIG = default_score_config()
JOB_ID = r"^[A-Za-z0-9_-]+$"

app = FastAPI(title="Interview Coach API")


@app.get("/")
def root():
    return {"status": "ok", "service": "interview-coach-api"}


ALLOWED_ORIGINS = [
    "http://localhost:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)


# ---- Schemas ----
class PreviousAttempt(BaseModel):
    overall: int | None = None
    subscores: dict[str, float] | None = None


class ScoreReq(BaseModel):
    answer: str
    persona: str = "hiring-manager"
    question: str | None = None
    questionId: str | None = None
    previous: PreviousAttempt | None = None


class AnswerIn(BaseModel):
    id: str
    text: str
    themes: list[str] = Field(default_factory=list)
    questionId: str | None = None


class StoriesReq(BaseModel):
    answers: list[AnswerIn]
    themes: list[str]
    persona: str = "hiring-manager"
    maxStories: int | None = None
    minStories: int | None = None
    embellish: bool = True


# ---- Helpers ----
def _elapsed_ms(t0: float) -> float:
    return round((time.perf_counter() - t0) * 1000.0, 1)


def _persona_or_400(value: str, route: str):
    try:
        return normalize_persona(value)
    except ContractError as exc:
        log_coach_error(route, value, exc)
        raise HTTPException(400, str(exc))


# ---- Health ----
@app.get("/health")
def health():
    return {
        "score_config_version": SCORE_CONFIG.version,
        "synthesis_version": coach_config.SYNTHESIS_VERSION,
        "llm_backend": os.getenv("LLM_BACKEND", "none"),
        "embellish_enabled": coach_config.EMBELLISH_ENABLED,
        "azure_config_present": all(os.getenv(k) for k in [
            "AZURE_OPENAI_ENDPOINT", "AZURE_OPENAI_API_KEY", "AZURE_OPENAI_API_VERSION", "AZURE_OPENAI_DEPLOYMENT"
        ]),
    }


# ---- Interview coach ----
@app.post("/interview-coach/{job_id}/score-answer")
def score_answer_endpoint(req: ScoreReq, job_id: str = Path(..., pattern=JOB_ID)):
    route = "score-answer"
    t0 = time.perf_counter()
    persona = _persona_or_400(req.persona, route)
    answer = AnswerItem(
        id=req.questionId or f"{job_id}_answer",
        text=req.answer,
        persona=persona,
        metadata=AnswerMetadata(question_id=req.questionId),
    )
    result = score(ScoringContext(answer=answer, persona=persona, config=SCORE_CONFIG))

    body: dict[str, t.Any] = {"job_id": job_id, **result.to_dict()}
    body["feedback"] = summarize_improvements(result.per_dimension, result.flag_names)
    if req.previous and req.previous.subscores:
        body["deltas"] = score_deltas(req.previous.subscores, result.per_dimension)
        body["delta_rationales"] = delta_rationales(req.previous.subscores, result.per_dimension, result.flag_names)

    log_coach_event(CoachEvent(
        route=route,
        persona=persona,
        duration_ms=_elapsed_ms(t0),
        score=result.overall,
        confidence=result.confidence,
        flags=result.flag_names,
        metadata={"job_id": job_id, "answer": req.answer, "question": req.question},
    ))
    return body


@app.post("/interview-coach/{job_id}/extract-core-stories")
async def extract_core_stories(req: StoriesReq, job_id: str = Path(..., pattern=JOB_ID)):
    route = "extract-core-stories"
    t0 = time.perf_counter()
    persona = _persona_or_400(req.persona, route)
    inp = SynthesisInput(
        answers=tuple(
            AnswerItem(id=a.id, text=a.text, metadata=AnswerMetadata(themes=tuple(a.themes), question_id=a.questionId))
            for a in req.answers
        ),
        themes=tuple(req.themes),
        persona=persona,
        max_stories=req.maxStories if req.maxStories is not None else coach_config.SYNTH_MAX_STORIES,
        min_stories=req.minStories if req.minStories is not None else coach_config.SYNTH_MIN_STORIES,
    )
    embellish = embellisher_from_env() if req.embellish else None
    try:
        if embellish is None:
            # pure CPU work; keep it off the event loop
            out = await asyncio.to_thread(synthesize, inp, SCORE_CONFIG)
        else:
            out = await synthesize_async(inp, SCORE_CONFIG, embellish)
    except ContractError as exc:
        log_coach_error(route, persona, exc, {"job_id": job_id, "answers": len(req.answers), "themes": len(req.themes)})
        raise HTTPException(400, str(exc))

    log_coach_event(CoachEvent(
        route=route,
        persona=persona,
        duration_ms=_elapsed_ms(t0),
        stories_count=len(out.core_stories),
        metadata={"job_id": job_id, "answers": len(req.answers), "themes": len(req.themes)},
    ))
    return {"job_id": job_id, **out.to_dict()}
