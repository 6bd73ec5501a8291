"""
Screenshot routes.

Endpoints:
- GET    /api/screenshots          list project screenshots
- POST   /api/screenshots          upload screenshots (multipart form)
- GET    /api/screenshots/{id}     fetch one screenshot
- DELETE /api/screenshots/{id}     delete one screenshot
- POST   /api/keys-with-screenshots  create keys and attach screenshots
"""

import json
from typing import Any

import structlog
from fastapi import APIRouter, Depends, Request

from lokey.dependencies import get_lokalise, get_optional_translator
from lokey.errors import LokeyError, NotFoundError, ValidationError
from lokey.llm import Translator, language_name
from lokey.lokalise import LokaliseClient
from lokey.routers._base import parse_screenshot_id, screenshots_from_form
from lokey.services.key_creation import SOURCE_LANG, target_languages

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/screenshots")
async def list_screenshots(lokalise: LokaliseClient = Depends(get_lokalise)):
    return {"screenshots": await lokalise.get_screenshots()}


@router.post("/screenshots")
async def upload_screenshots(request: Request, lokalise: LokaliseClient = Depends(get_lokalise)):
    form = await request.form()
    screenshots = screenshots_from_form(form)
    if not screenshots:
        raise ValidationError("No screenshots provided")

    return await lokalise.create_screenshots(screenshots)


@router.get("/screenshots/{screenshot_id}")
async def get_screenshot(screenshot_id: str, lokalise: LokaliseClient = Depends(get_lokalise)):
    sid = parse_screenshot_id(screenshot_id)
    try:
        screenshot = await lokalise.get_screenshot(sid)
    except NotFoundError as e:
        raise NotFoundError("Screenshot not found", screenshot_id=sid) from e
    return {"screenshot": screenshot}


@router.delete("/screenshots/{screenshot_id}")
async def delete_screenshot(screenshot_id: str, lokalise: LokaliseClient = Depends(get_lokalise)):
    sid = parse_screenshot_id(screenshot_id)
    try:
        result = await lokalise.delete_screenshot(sid)
    except NotFoundError as e:
        raise NotFoundError("Screenshot not found", screenshot_id=sid) from e
    return {"success": True, "result": result}


async def add_ai_translations(
    lokalise: LokaliseClient,
    translator: Translator | None,
    keys_data: dict[str, Any],
    model: str | None,
) -> None:
    """
    Replace the first key's translations with its source text plus AI
    translations for every project language. Leaves keys_data untouched when
    there is no source text or translation fails.
    """
    keys = keys_data.get("keys") or []
    if not keys:
        return
    source_text = ((keys[0].get("translations") or [{}])[0]).get("translation")
    if not source_text:
        return
    if translator is None:
        logger.warning("ai_translation_skipped", reason="openai_not_configured")
        return

    try:
        languages = await lokalise.get_languages()
        targets = [(lang["lang_iso"], language_name(lang["lang_iso"])) for lang in target_languages(languages)]
        translations = await translator.batch_translate(
            source_text, language_name(SOURCE_LANG), targets, model=model
        )
    except LokeyError as e:
        logger.warning("ai_translation_failed", error=str(e))
        return

    keys[0]["translations"] = [{"language_iso": SOURCE_LANG, "translation": source_text}] + [
        {"language_iso": iso, "translation": text}
        for iso, text in translations.items()
        if iso != SOURCE_LANG
    ]
    logger.info("ai_translation_completed", translations=len(keys[0]["translations"]))


@router.post("/keys-with-screenshots")
async def create_keys_with_screenshots(
    request: Request,
    lokalise: LokaliseClient = Depends(get_lokalise),
    translator: Translator | None = Depends(get_optional_translator),
):
    content_type = request.headers.get("content-type", "")
    screenshots: list[dict[str, Any]] | None = None

    if "multipart/form-data" in content_type:
        form = await request.form()
        raw = form.get("keysData")
        if not raw or not isinstance(raw, str):
            raise ValidationError("Keys data is required")
        try:
            keys_data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValidationError("Keys data must be valid JSON") from e
        screenshots = screenshots_from_form(form, with_key_ids=False) or None
    else:
        try:
            body = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ValidationError("Invalid JSON") from e
        if not isinstance(body, dict):
            raise ValidationError("Keys data is required")
        keys_data = body.get("keysData")
        screenshots = body.get("screenshots") or None
        if body.get("useAI") and isinstance(keys_data, dict):
            await add_ai_translations(lokalise, translator, keys_data, body.get("gptModel"))

    if not isinstance(keys_data, dict) or not keys_data.get("keys"):
        raise ValidationError("Keys data is required")

    return await lokalise.create_keys_with_screenshots(keys_data, screenshots)
