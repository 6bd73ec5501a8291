"""
Key creation flow shared by the plain and the progress-streaming routes.

Steps, in order:
    validation -> languages -> translation (only with AI) -> creation -> complete

Translation tries one batch request for every non-English project language.
If that fails, the first INDIVIDUAL_FALLBACK_LIMIT languages are translated
one by one and individual failures are skipped.
"""

import asyncio
import json
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field

from lokey.errors import LokeyError, ValidationError
from lokey.llm import Translator, language_name
from lokey.lokalise import LokaliseClient, parse_tags

logger = structlog.get_logger(__name__)

SOURCE_LANG = "en"
INDIVIDUAL_FALLBACK_LIMIT = 5


class KeyCreateRequest(BaseModel):
    """Body of POST /api/keys and /api/keys/create-with-progress."""

    model_config = ConfigDict(populate_by_name=True)

    key_name: str | None = Field(None, alias="keyName")
    description: str | None = None
    source_text: str | None = Field(None, alias="sourceText")
    tags: str | list[str] | None = None
    platforms: list[str] | None = None
    use_ai: bool = Field(False, alias="useAI")
    gpt_model: str | None = Field(None, alias="gptModel")


@dataclass
class ProgressEvent:
    step: str
    status: str
    progress: int | float | None = None
    details: str | None = None
    current_sub_step: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "step": self.step,
            "status": self.status,
            "progress": self.progress,
            "details": self.details,
            "currentSubStep": self.current_sub_step,
            **self.extra,
            "timestamp": self.timestamp,
        }
        return {k: v for k, v in data.items() if v is not None}

    def to_sse(self) -> str:
        return f"data: {json.dumps(self.to_dict(), ensure_ascii=False)}\n\n"


def target_languages(languages: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [lang for lang in languages if lang.get("lang_iso") != SOURCE_LANG]


async def translate_for_languages(
    translator: Translator,
    text: str,
    languages: list[dict[str, Any]],
    context: str | None = None,
    model: str | None = None,
    on_event: Callable[[ProgressEvent], None] | None = None,
) -> tuple[dict[str, str], bool]:
    """
    Batch-translate into every non-source language, falling back to
    individual translation of the first few languages.

    Progress events are passed to `on_event` when given.

    Returns:
        ({language code: translation}, whether the individual fallback ran)
    """
    targets = target_languages(languages)

    def emit(status: str, progress: float, details: str, sub_step: str | None = None):
        if on_event is not None:
            on_event(ProgressEvent("translation", status, progress, details, sub_step))

    async def on_progress(sub_step: str, progress: int, details: str | None):
        emit("in_progress", progress, details or sub_step, sub_step)

    try:
        translations = await translator.batch_translate(
            text,
            language_name(SOURCE_LANG),
            [(lang["lang_iso"], language_name(lang["lang_iso"])) for lang in targets],
            context=context,
            model=model,
            on_progress=on_progress,
        )
        return translations, False
    except Exception as e:
        logger.warning("batch_translation_fallback", error=str(e), error_type=type(e).__name__)
        emit(
            "in_progress",
            50,
            "Batch translation failed. Proceeding with individual translations...",
            "Preparing individual translation",
        )

    translations = {}
    individual = targets[:INDIVIDUAL_FALLBACK_LIMIT]
    for i, lang in enumerate(individual):
        iso = lang["lang_iso"]
        progress = 50 + ((i + 1) / len(individual)) * 50
        emit("in_progress", progress, f"Translating to {iso}...", f"Individual translation to {iso}")
        try:
            translations[iso] = await translator.translate(
                text,
                language_name(SOURCE_LANG),
                language_name(iso),
                context=context,
                model=model,
            )
        except Exception as e:
            logger.error("individual_translation_failed", language=iso, error=str(e), error_type=type(e).__name__)
            emit("in_progress", progress, f"Translation to {iso} failed, proceeding to next language.")

    return translations, True


def build_key_payload(request: KeyCreateRequest, translations: dict[str, str], platforms: list[str]) -> dict[str, Any]:
    key_translations = [{"language_iso": SOURCE_LANG, "translation": request.source_text}]
    key_translations += [
        {"language_iso": iso, "translation": text} for iso, text in translations.items() if iso != SOURCE_LANG
    ]
    return {
        "keys": [
            {
                "key_name": request.key_name,
                "description": request.description or "",
                "platforms": platforms,
                "tags": parse_tags(request.tags),
                "translations": key_translations,
            }
        ]
    }


async def create_key(lokalise: LokaliseClient, translator: Translator | None, request: KeyCreateRequest) -> int:
    """
    Create a key without progress reporting.

    Returns:
        The new key id
    """
    if not request.key_name or not request.source_text:
        raise ValidationError("Key name and source text are required")

    languages = await lokalise.get_languages()

    translations: dict[str, str] = {}
    if request.use_ai and translator is None:
        logger.warning("ai_translation_skipped", reason="openai_not_configured", key_name=request.key_name)
    elif request.use_ai:
        translations, _ = await translate_for_languages(
            translator,
            request.source_text,
            languages,
            context=request.description,
            model=request.gpt_model,
        )
        logger.info("translations_prepared", count=len(translations) + 1)

    created = await lokalise.create_keys(
        build_key_payload(request, translations, request.platforms or ["web"])
    )
    if not created:
        raise LokeyError("Failed to create key", error_code="KEY_NOT_CREATED")

    key_id = created[0]["key_id"]
    logger.info("key_created", key_id=key_id, translations=len(translations) + 1)
    return key_id


async def _drain(queue: asyncio.Queue, task: asyncio.Task) -> AsyncIterator[ProgressEvent]:
    """Yield queued events as they arrive until the task finishes."""
    while True:
        getter = asyncio.ensure_future(queue.get())
        await asyncio.wait({getter, task}, return_when=asyncio.FIRST_COMPLETED)
        if getter.done():
            yield getter.result()
            continue
        getter.cancel()
        break
    while not queue.empty():
        yield queue.get_nowait()


async def create_key_with_progress(
    lokalise: LokaliseClient,
    translator: Translator | None,
    request: KeyCreateRequest,
) -> AsyncIterator[ProgressEvent]:
    """Run the creation flow, yielding one ProgressEvent per status change."""
    try:
        if not request.key_name or not request.source_text:
            yield ProgressEvent("validation", "error", 0, "Key name and source text are required.")
            return

        if not request.platforms:
            yield ProgressEvent("validation", "error", 0, "At least one platform must be selected.")
            return

        yield ProgressEvent("validation", "in_progress", 50, "Validating input values...")
        yield ProgressEvent(
            "validation",
            "completed",
            100,
            f"Input values are valid. (Platforms: {', '.join(request.platforms)})",
        )

        yield ProgressEvent("languages", "in_progress", 50, "Fetching supported language list from Lokalise...")
        languages = await lokalise.get_languages()
        yield ProgressEvent("languages", "completed", 100, f"Found {len(languages)} supported languages.")

        translations: dict[str, str] = {}
        if request.use_ai and translator is None:
            logger.warning("ai_translation_skipped", reason="openai_not_configured", key_name=request.key_name)
            yield ProgressEvent(
                "translation", "in_progress", 0, "OpenAI is not configured. Skipping AI translation..."
            )
            yield ProgressEvent(
                "translation", "completed", 100, "Translation completed for 0 languages. (OpenAI not configured)"
            )
        elif request.use_ai:
            yield ProgressEvent(
                "translation", "in_progress", 0, "Starting translation process...", "Preparing target languages"
            )
            queue: asyncio.Queue[ProgressEvent] = asyncio.Queue()
            task = asyncio.create_task(
                translate_for_languages(
                    translator,
                    request.source_text,
                    languages,
                    context=request.description,
                    model=request.gpt_model,
                    on_event=queue.put_nowait,
                )
            )
            try:
                async for event in _drain(queue, task):
                    yield event
            finally:
                if not task.done():
                    task.cancel()
            translations, individual = task.result()
            label = "Individual translation" if individual else "Translation"
            yield ProgressEvent(
                "translation", "completed", 100, f"{label} completed for {len(translations)} languages."
            )

        yield ProgressEvent("creation", "in_progress", 25, "Creating translation key in Lokalise...")
        payload = build_key_payload(request, translations, request.platforms)
        yield ProgressEvent("creation", "in_progress", 50, "Preparing translation data...")
        created = await lokalise.create_keys(payload)

        if not created:
            yield ProgressEvent("creation", "error", 0, "Failed to create translation key.")
            return

        key_id = created[0]["key_id"]
        yield ProgressEvent("creation", "completed", 100, f"Translation key created successfully. (ID: {key_id})")
        logger.info("key_created", key_id=key_id, translations=len(translations) + 1, streamed=True)

        yield ProgressEvent(
            "complete",
            "completed",
            100,
            extra={"keyId": key_id, "translated": request.use_ai},
        )
    except Exception as e:
        logger.exception("key_creation_failed", key_name=request.key_name)
        yield ProgressEvent("error", "error", 0, str(e) or "Unknown error")
