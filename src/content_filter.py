# src/content_filter.py

import asyncio
import json
import logging
import re
from typing import Any, Optional, Protocol

from google import genai
from google.genai import types

from src import config, constants
from src.errors import (
    FilterBackendError,
    FilterBackendUnavailable,
    FilterParseError,
    ValidationError,
)
from src.models import FilterOutcome, FilterRequest

logger = logging.getLogger(__name__)

_JSON_ARRAY_RE = re.compile(r"\[.*\]", re.DOTALL)


class FilterBackend(Protocol):
    async def generate(self, prompt: str) -> str: ...


class GeminiFilterBackend:
    """
    Gemini text backend built from an explicit API key.

    The owner rebuilds this object when the key changes; nothing here is
    shared module state.
    """

    def __init__(self, api_key: str, model: Optional[str] = None):
        self.model = model or config.GEMINI_MODEL
        self._client = genai.Client(api_key=api_key)

    def _generate_sync(self, prompt: str) -> str:
        contents = [
            types.Content(
                role="user",
                parts=[
                    types.Part(text=prompt),
                ],
            )
        ]
        generate_content_config = types.GenerateContentConfig(
            safety_settings=[
                types.SafetySetting(category="HARM_CATEGORY_HARASSMENT", threshold="BLOCK_NONE"),
                types.SafetySetting(category="HARM_CATEGORY_HATE_SPEECH", threshold="BLOCK_NONE"),
                types.SafetySetting(category="HARM_CATEGORY_SEXUALLY_EXPLICIT", threshold="BLOCK_NONE"),
                types.SafetySetting(category="HARM_CATEGORY_DANGEROUS_CONTENT", threshold="BLOCK_NONE"),
            ],
            response_mime_type="text/plain",
        )
        response = self._client.models.generate_content(
            model=self.model,
            contents=contents,
            config=generate_content_config,
        )

        if not response.candidates or not response.candidates[0].content or not response.candidates[0].content.parts:
            logger.warning("No content part in Gemini response")
            return ""
        return response.candidates[0].content.parts[0].text or ""

    async def generate(self, prompt: str) -> str:
        # The SDK call is synchronous; keep it off the event loop.
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, lambda: self._generate_sync(prompt))
        except Exception as e:
            logger.error(f"Gemini request failed: {e}", exc_info=True)
            raise FilterBackendError(str(e)) from e


def build_filter_backend(api_key: Optional[str], model: Optional[str] = None) -> Optional[GeminiFilterBackend]:
    """Returns None when no key is configured."""
    if not api_key:
        return None
    return GeminiFilterBackend(api_key, model)


def build_filter_request(titles: Any, dedupe: bool = False, exclude_disallowed: bool = False) -> FilterRequest:
    if not isinstance(titles, list):
        raise ValidationError("Invalid titles array")
    return FilterRequest(titles=[str(t) for t in titles], dedupe=dedupe,
                         exclude_disallowed=exclude_disallowed)


def build_filter_prompt(titles: list[str], dedupe: bool, exclude_disallowed: bool) -> str:
    prompt = "You are a content filter. "

    if dedupe:
        prompt += "Deduplicate this list of recipe titles. Remove exact and near duplicates. "

    if exclude_disallowed:
        ingredients = ", ".join(constants.DISALLOWED_INGREDIENTS)
        prompt += f"Exclude any recipes containing {ingredients}, or alcoholic ingredients. "

    prompt += "Return the cleaned list as a JSON array of strings (just the titles). "
    prompt += "Here is the list:\n\n" + json.dumps(titles, indent=2, ensure_ascii=False)
    return prompt


def _extract_title_list(text: str) -> list:
    """
    Stage 1: the first `[` to the last `]`.
    Stage 2: the whole reply as JSON.
    """
    match = _JSON_ARRAY_RE.search(text)
    if match:
        try:
            return json.loads(match.group(0))
        except json.JSONDecodeError as e:
            logger.warning(f"Bracketed span in Gemini reply is not valid JSON: {e}")

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise FilterParseError(f"Gemini reply is not JSON: {e}") from e


def parse_filter_reply(text: str, fallback: list[str]) -> list:
    """
    Parsed title list, or `fallback` unchanged when the reply is unusable.
    Never raises.

    `fallback` is the input title list: parsed entries not in it are dropped,
    so the backend can only remove titles, never add or rewrite them.
    """
    try:
        parsed = _extract_title_list(text or "")
    except FilterParseError as e:
        logger.warning(f"{e}; returning original titles. Response: {(text or '')[:100]}...")
        return list(fallback)

    if not isinstance(parsed, list):
        logger.warning(f"Gemini reply parsed to {type(parsed).__name__}, not a list; returning original titles")
        return list(fallback)
    if not all(isinstance(t, str) for t in parsed):
        logger.warning("Gemini reply list holds non-string entries; returning original titles")
        return list(fallback)

    known = set(fallback)
    kept = [t for t in parsed if t in known]
    if len(kept) < len(parsed):
        logger.warning(f"Dropped {len(parsed) - len(kept)} titles not present in the input")
    return kept


async def filter_titles(request: FilterRequest, backend: Optional[FilterBackend]) -> FilterOutcome:
    """
    Optionally dedupe and/or policy-filter titles through the Gemini backend.

    No toggles set means a pass-through with no backend call. An unparsable
    reply degrades to the original titles; only a missing backend or a failed
    backend call raise.
    """
    titles = request.titles
    original_count = len(titles)

    if not request.requested:
        return FilterOutcome(filtered=list(titles), original_count=original_count,
                             filtered_count=original_count)

    if backend is None:
        raise FilterBackendUnavailable(
            "Gemini AI not configured. Please set GEMINI_API_KEY in environment variables."
        )

    prompt = build_filter_prompt(titles, request.dedupe, request.exclude_disallowed)
    logger.info(f"Sending {original_count} titles to Gemini for filtering "
                f"(dedupe={request.dedupe}, exclude_disallowed={request.exclude_disallowed})")

    text = await backend.generate(prompt)
    logger.debug(f"Gemini response: {text}")

    filtered = parse_filter_reply(text, titles)
    logger.info(f"Filter kept {len(filtered)} of {original_count} titles")
    return FilterOutcome(filtered=filtered, original_count=original_count,
                         filtered_count=len(filtered))
