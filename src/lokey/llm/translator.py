"""
OpenAI-backed translation, source copy review and key recommendation.

Batch translation asks for one JSON object {lang_code: translation} covering
every target language. Models often wrap JSON in markdown fences or run out
of tokens mid-object, so responses are de-fenced and, when truncated, cut
back to the last complete entry before parsing.
"""

import json
import re
from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from openai import AsyncOpenAI, OpenAIError

from lokey.config import DEFAULT_MODEL, Settings
from lokey.errors import ConfigurationError, TranslationError
from lokey.llm import prompts

logger = structlog.get_logger(__name__)

REVIEW_MODEL = "gpt-4.1"
KEYS_MODEL = "gpt-3.5-turbo"

LANGUAGE_NAMES = {
    "en": "English",
    "ko": "Korean",
    "ja": "Japanese",
    "zh_CN": "Simplified Chinese",
    "zh_TW": "Traditional Chinese",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "ru": "Russian",
    "ar": "Arabic",
    "hi": "Hindi",
    "th": "Thai",
    "vi": "Vietnamese",
}

# Model families that reject temperature and take max_completion_tokens
_REASONING_PREFIXES = ("gpt-5", "o1", "o3", "o4")

ProgressCallback = Callable[[str, int, str | None], Awaitable[None] | None]


def language_name(code: str) -> str:
    """Map a Lokalise language ISO code to a name the model understands."""
    return LANGUAGE_NAMES.get(code, code)


def max_tokens_for(model: str, batch: bool = False) -> int:
    if "gpt-4" in model:
        return 12000 if batch else 4000
    return 8000 if batch else 2000


def completion_params(model: str, max_tokens: int, temperature: float) -> dict[str, Any]:
    if model.startswith(_REASONING_PREFIXES):
        return {"model": model, "max_completion_tokens": max_tokens}
    return {"model": model, "max_tokens": max_tokens, "temperature": temperature}


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ```json ... ``` or ``` ... ``` block."""
    text = text.strip()
    if text.startswith("```json"):
        text = re.sub(r"^```json\s*", "", text)
        text = re.sub(r"\s*```$", "", text)
    elif text.startswith("```"):
        text = re.sub(r"^```\s*", "", text)
        text = re.sub(r"\s*```$", "", text)
    return text.strip()


def parse_translation_map(text: str) -> dict[str, str]:
    """
    Parse a batch translation response.

    If the JSON is cut off, keep everything up to the last complete
    `"code": "text",` pair and close the object.

    Raises:
        TranslationError: when neither the full nor the truncated text parses
    """
    cleaned = strip_code_fences(text)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as parse_error:
        last_complete = cleaned.rfind('",')
        if last_complete <= 0:
            raise TranslationError(
                "JSON parsing failed, will use individual translation fallback"
            ) from parse_error
        truncated = cleaned[: last_complete + 1] + "\n}"
        logger.warning("batch_response_truncated", kept_chars=len(truncated))
        try:
            parsed = json.loads(truncated)
        except json.JSONDecodeError as recovery_error:
            raise TranslationError(
                "JSON parsing failed, will use individual translation fallback"
            ) from recovery_error

    if not isinstance(parsed, dict):
        raise TranslationError("Batch translation response is not a JSON object")
    return {str(code): str(value) for code, value in parsed.items()}


def fallback_key_slug(text: str) -> str:
    slug = re.sub(r"[^\w\s]", "", text.lower())
    slug = re.sub(r"\s+", "_", slug)
    return slug[:50]


def fallback_recommendations(text: str, prefix: str = "") -> list[dict[str, str]]:
    slug = fallback_key_slug(text)
    lead = f"{prefix}_" if prefix else ""
    return [
        {
            "key": f"{lead}ui_{slug}",
            "reasoning": "Generic UI key based on text content (fallback)",
            "category": "UI",
        },
        {
            "key": f"{lead}common_{slug}",
            "reasoning": "Common text key for reusable content (fallback)",
            "category": "General",
        },
    ]


def _valid_recommendation(rec: Any) -> bool:
    if not isinstance(rec, dict):
        return False
    return all(
        isinstance(rec.get(field), str) and rec[field].strip()
        for field in ("key", "reasoning", "category")
    )


async def _report(on_progress: ProgressCallback | None, sub_step: str, progress: int, details: str | None = None):
    if on_progress is None:
        return
    result = on_progress(sub_step, progress, details)
    if result is not None:
        await result


class Translator:
    """
    Wraps an AsyncOpenAI client.

    The client only needs `chat.completions.create`, so tests can pass any
    object with that shape.
    """

    def __init__(self, client: AsyncOpenAI, default_model: str = DEFAULT_MODEL):
        self.client = client
        self.default_model = default_model

    @classmethod
    def from_settings(cls, settings: Settings) -> "Translator":
        if not settings.openai_api_key:
            raise ConfigurationError("OPENAI_API_KEY is not set in environment variables")
        return cls(AsyncOpenAI(api_key=settings.openai_api_key), settings.default_model)

    async def aclose(self) -> None:
        await self.client.close()

    async def _complete(
        self,
        system: str,
        user: str,
        model: str,
        max_tokens: int,
        temperature: float,
    ) -> str:
        response = await self.client.chat.completions.create(
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            **completion_params(model, max_tokens, temperature),
        )
        if not response.choices:
            return ""
        return (response.choices[0].message.content or "").strip()

    async def translate(
        self,
        text: str,
        source_lang: str,
        target_lang: str,
        context: str | None = None,
        model: str | None = None,
    ) -> str:
        """
        Translate text into one language.

        Args:
            text: Source copy
            source_lang: Language name, e.g. "English"
            target_lang: Language name, e.g. "Korean"
            context: Optional key description passed to the model
            model: Chat model; defaults to the configured model

        Returns:
            The translation, or the source text if the model answered nothing
        """
        model = model or self.default_model
        prompt = prompts.TRANSLATE_PROMPT.format(
            source_lang=source_lang,
            target_lang=target_lang,
            context_line=f"Context: {context}\n" if context else "",
            text=text,
        )
        try:
            translation = await self._complete(
                prompts.TRANSLATE_SYSTEM, prompt, model, max_tokens_for(model), 0.3
            )
        except OpenAIError as e:
            logger.error("translation_failed", model=model, target=target_lang, error=str(e))
            raise TranslationError(f"Translation failed: {e}") from e

        return translation or text

    async def batch_translate(
        self,
        text: str,
        source_lang: str,
        targets: list[tuple[str, str]],
        context: str | None = None,
        model: str | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> dict[str, str]:
        """
        Translate text into every target language with one request.

        Args:
            targets: (language code, language name) pairs
            on_progress: Optional callback(sub_step, percent, details)

        Returns:
            {language code: translation}

        Raises:
            TranslationError: on API failure, empty output or unparseable JSON
        """
        model = model or self.default_model
        max_tokens = max_tokens_for(model, batch=True)

        await _report(on_progress, "Preparing target languages", 10, f"Preparing {len(targets)} target languages")
        language_list = "\n".join(f"{code}: {name}" for code, name in targets)
        prompt = prompts.BATCH_PROMPT.format(
            text=text,
            source_lang=source_lang,
            language_list=language_list,
            context_line=f"Context: {context}" if context else "",
        )

        await _report(on_progress, "Creating batch request", 20, f"Using {model}")
        logger.info(
            "batch_translation_started",
            model=model,
            targets=[code for code, _ in targets],
            max_tokens=max_tokens,
        )

        await _report(on_progress, "Calling OpenAI API", 30, "Waiting for the model response")
        try:
            response = await self._complete(prompts.BATCH_SYSTEM, prompt, model, max_tokens, 0.3)
        except OpenAIError as e:
            logger.error("batch_translation_failed", model=model, error=str(e))
            raise TranslationError(f"Batch translation failed: {e}") from e

        if not response:
            raise TranslationError("Batch translation failed: Empty response from OpenAI")

        await _report(on_progress, "Validating results", 80, "Parsing translations")
        try:
            translations = parse_translation_map(response)
        except TranslationError as e:
            logger.error("batch_response_unparseable", model=model, response=response[:500])
            raise TranslationError(f"Batch translation failed: {e}") from e

        await _report(on_progress, "Organizing data", 95, f"Received {len(translations)} translations")
        logger.info("batch_translation_completed", model=model, languages=len(translations))
        return translations

    async def review_source(self, text: str, source_lang: str = "English") -> dict[str, Any]:
        """Review source copy for tone; unparseable answers mean "no issues"."""
        prompt = prompts.REVIEW_PROMPT.format(text=text, source_lang=source_lang)
        try:
            response = await self._complete(
                prompts.REVIEW_SYSTEM, prompt, REVIEW_MODEL, max_tokens_for(REVIEW_MODEL), 0.3
            )
        except OpenAIError as e:
            raise TranslationError(f"Source text validation failed: {e}") from e

        if not response:
            raise TranslationError("Source text validation failed: Empty response from OpenAI")

        try:
            feedback = json.loads(strip_code_fences(response))
        except json.JSONDecodeError:
            logger.warning("review_response_unparseable", response=response[:500])
            return {"has_issues": False}

        if not isinstance(feedback, dict):
            return {"has_issues": False}
        return feedback

    async def recommend_keys(self, text: str, prefix: str = "") -> list[dict[str, str]]:
        """Suggest snake_case translation key names for a piece of copy."""
        prefix = prefix.strip()
        prompt = prompts.KEYS_PROMPT.format(
            text=text,
            prefix_line=f'Every key must start with the prefix "{prefix}_".\n' if prefix else "",
        )
        try:
            response = await self._complete(prompts.KEYS_SYSTEM, prompt, KEYS_MODEL, 1000, 0.7)
        except OpenAIError as e:
            raise TranslationError(f"Failed to generate key recommendations: {e}") from e

        if not response:
            raise TranslationError("Failed to generate key recommendations: Empty response from OpenAI")

        try:
            parsed = json.loads(strip_code_fences(response))
            candidates = parsed.get("recommendations", []) if isinstance(parsed, dict) else []
        except json.JSONDecodeError:
            candidates = []

        recommendations = [rec for rec in candidates if _valid_recommendation(rec)] if isinstance(candidates, list) else []
        if not recommendations:
            logger.warning("key_recommendations_fallback", text=text[:100])
            return fallback_recommendations(text, prefix)

        return [
            {"key": rec["key"], "reasoning": rec["reasoning"], "category": rec["category"]}
            for rec in recommendations
        ]
