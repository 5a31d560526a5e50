"""Optional natural-language polish for synthesized stories.

The synthesis output is complete without this module. A hook receives one
story and one persona and returns a replacement variant; anything that goes
wrong (timeout, exception, cancellation, malformed reply) keeps the templated
variant. Selection, grouping and coverage are never touched here.
"""
from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import replace
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple, Union

from . import config as settings
from .types import PERSONAS, CoreStory, Persona, StoryVariant, SynthesisOutput
from .variants import VariantSettings

log = logging.getLogger(__name__)

EmbellishResult = Union[StoryVariant, Mapping[str, Any]]
EmbellishFn = Callable[[CoreStory, Persona], Awaitable[EmbellishResult]]


def coerce_variant(raw: Any, bounds: Optional[VariantSettings] = None) -> Optional[StoryVariant]:
    """Accept a StoryVariant or a ``{long, short}`` mapping; None when unusable."""
    bounds = bounds or VariantSettings.from_cfg(None)
    if isinstance(raw, StoryVariant):
        long, short = raw.long, list(raw.short)
    elif isinstance(raw, Mapping):
        long, short = raw.get("long"), raw.get("short")
    else:
        return None
    if not isinstance(long, str) or not long.strip():
        return None
    if not isinstance(short, (list, tuple)) or not all(isinstance(b, str) and b.strip() for b in short):
        return None
    if not bounds.accepts(len(short)):
        return None
    return StoryVariant(long=long, short=tuple(short))


async def _one(fn: EmbellishFn, story: CoreStory, persona: Persona, timeout: float,
               bounds: VariantSettings) -> StoryVariant:
    fallback = story.variants[persona]
    try:
        raw = await asyncio.wait_for(fn(story, persona), timeout=timeout)
    except asyncio.TimeoutError:
        log.debug("embellish timeout story=%s persona=%s", story.id, persona)
        return fallback
    except asyncio.CancelledError:
        # only a hook that cancels itself falls back; cancelling the caller propagates
        task = asyncio.current_task()
        if task is not None and task.cancelling():
            raise
        log.debug("embellish cancelled story=%s persona=%s", story.id, persona)
        return fallback
    except Exception as exc:
        log.debug("embellish fallback story=%s persona=%s: %s", story.id, persona, exc)
        return fallback
    variant = coerce_variant(raw, bounds)
    if variant is None:
        log.debug("embellish malformed result story=%s persona=%s", story.id, persona)
        return fallback
    return variant


async def with_optional_embellish(
    output: SynthesisOutput,
    fn: Optional[EmbellishFn] = None,
    timeout: float = settings.EMBELLISH_TIMEOUT_SEC,
    bounds: Optional[VariantSettings] = None,
) -> SynthesisOutput:
    if fn is None or not output.core_stories:
        return output
    bounds = bounds or VariantSettings.from_cfg(None)

    jobs: List[Tuple[int, Persona]] = []
    coros = []
    for i, story in enumerate(output.core_stories):
        for persona in PERSONAS:
            if persona not in story.variants:
                continue
            jobs.append((i, persona))
            coros.append(_one(fn, story, persona, timeout, bounds))
    results = await asyncio.gather(*coros, return_exceptions=True)

    updated: Dict[int, Dict[Persona, StoryVariant]] = {}
    for (i, persona), res in zip(jobs, results):
        story = output.core_stories[i]
        variant = res if isinstance(res, StoryVariant) else story.variants[persona]
        updated.setdefault(i, dict(story.variants))[persona] = variant

    stories = [
        replace(story, variants=updated.get(i, story.variants))
        for i, story in enumerate(output.core_stories)
    ]
    return replace(output, core_stories=tuple(stories))


_SYSTEM_PROMPT = (
    "You polish interview stories. Keep every fact, number and name from the input. "
    "Respond strictly with JSON: {\"long\": string, \"short\": [4-6 strings]}. "
    "Keep each bullet's leading label (e.g. \"Metrics:\")."
)


def _azure_client(azure: settings.AzureSettings):
    from openai import AzureOpenAI

    return AzureOpenAI(
        azure_endpoint=azure.endpoint,
        api_key=azure.api_key,
        api_version=azure.api_version,
    )


def make_azure_embellisher(azure: Optional[settings.AzureSettings] = None) -> EmbellishFn:
    """EmbellishFn backed by an Azure OpenAI chat deployment.

    The SDK call is blocking, so it runs in a worker thread. Errors propagate to
    ``with_optional_embellish``, which falls back to the templated variant.
    """
    azure = azure or settings.azure_settings()
    cli = _azure_client(azure)

    def _call(story: CoreStory, persona: Persona) -> Dict[str, Any]:
        current = story.variants[persona]
        payload = {
            "persona": persona,
            "title": story.title,
            "star": story.star.fields(),
            "long": current.long,
            "short": list(current.short),
        }
        prompt = (
            f"Rewrite this story for a {persona} interviewer so it reads naturally. "
            "Return ONLY JSON matching the input's long/short structure.\n"
            f"Input: {json.dumps(payload, ensure_ascii=False)}"
        )
        resp = cli.chat.completions.create(
            model=azure.deployment,
            messages=[
                {"role": "system", "content": _SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=0.2,
            top_p=0.9,
            max_tokens=700,
        )
        content = resp.choices[0].message.content if resp.choices else None
        return json.loads(content) if content else {}

    async def embellish(story: CoreStory, persona: Persona) -> Dict[str, Any]:
        return await asyncio.to_thread(_call, story, persona)

    return embellish


def embellisher_from_env(cfg: Optional[dict] = None) -> Optional[EmbellishFn]:
    cfg = settings.load_config() if cfg is None else cfg
    if settings.get_backend(cfg) != "azure":
        return None
    try:
        return make_azure_embellisher(settings.azure_settings(cfg))
    except RuntimeError as exc:
        log.warning("embellishment disabled: %s", exc)
        return None
