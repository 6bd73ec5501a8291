"""
Translation routes.

Endpoints:
- POST /api/translate       translate existing keys (OpenAI or Lokalise AI)
- POST /api/translate-text  batch-translate free text, nothing is stored
- POST /api/test-openai     connectivity check against the OpenAI API
"""

from typing import Any

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from lokey.dependencies import get_lokalise, get_optional_translator, get_translator
from lokey.errors import ConfigurationError, LokeyError, TranslationError, ValidationError
from lokey.llm import Translator, language_name
from lokey.lokalise import LokaliseClient, key_display_name

logger = structlog.get_logger(__name__)

router = APIRouter()


class TranslateKeysRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    key_ids: list[int] | None = Field(None, alias="keyIds")
    source_lang: str = Field("en", alias="sourceLang")
    target_langs: list[str] | None = Field(None, alias="targetLangs")
    use_openai: bool = Field(False, alias="useOpenAI")


class TranslateTextRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str | None = None
    target_languages: list[str] | None = Field(None, alias="targetLanguages")
    gpt_model: str | None = Field(None, alias="gptModel")


async def translate_key_with_openai(
    lokalise: LokaliseClient,
    translator: Translator,
    key: dict[str, Any],
    source_lang: str,
    target_langs: list[str],
) -> dict[str, Any] | None:
    """
    Translate one key's source text into each target and write it back.

    Returns None when the key has no translation in the source language.
    Failures are recorded per language instead of aborting the key.
    """
    source = next(
        (t for t in key.get("translations") or [] if t.get("language_iso") == source_lang),
        None,
    )
    if source is None:
        return None

    key_id = key["key_id"]
    result: dict[str, Any] = {
        "keyId": key_id,
        "keyName": key_display_name(key),
        "translations": [],
    }

    for target in target_langs:
        try:
            translated = await translator.translate(
                source["translation"],
                language_name(source_lang),
                language_name(target),
                context=key.get("description") or None,
            )
            await lokalise.update_translation(key_id, target, translated)
        except LokeyError as e:
            logger.error("key_translation_failed", key_id=key_id, language=target, error=str(e))
            result["translations"].append(
                {"language": target, "translation": None, "success": False, "error": str(e)}
            )
            continue

        result["translations"].append({"language": target, "translation": translated, "success": True})

    return result


@router.post("/translate")
async def translate_keys(
    body: TranslateKeysRequest,
    lokalise: LokaliseClient = Depends(get_lokalise),
    translator: Translator | None = Depends(get_optional_translator),
):
    if not body.key_ids:
        raise ValidationError("Key IDs are required")
    if not body.target_langs:
        raise ValidationError("Target languages are required")

    results: list[dict[str, Any]] = []

    if body.use_openai:
        if translator is None:
            raise ConfigurationError("OPENAI_API_KEY is not set in environment variables")
        keys = {k["key_id"]: k for k in await lokalise.get_keys()}
        for key_id in body.key_ids:
            key = keys.get(key_id)
            if key is None:
                logger.warning("key_not_found", key_id=key_id)
                continue
            result = await translate_key_with_openai(
                lokalise, translator, key, body.source_lang, body.target_langs
            )
            if result is not None:
                results.append(result)
    else:
        response = await lokalise.translate_keys(body.source_lang, body.target_langs, body.key_ids)
        results.append(
            {"success": True, "message": "Lokalise AI translation completed", "response": response}
        )

    return {"message": "Translation completed", "results": results}


@router.post("/translate-text")
async def translate_text(
    body: TranslateTextRequest,
    translator: Translator = Depends(get_translator),
):
    if not body.text:
        raise ValidationError("Text is required and must be a string")
    if not body.target_languages:
        raise ValidationError("Target languages are required and must be an array")

    model = body.gpt_model or translator.default_model
    targets = [(code, language_name(code)) for code in body.target_languages]
    translations = await translator.batch_translate(
        body.text, language_name("en"), targets, model=model
    )

    return {
        "success": True,
        "translations": translations,
        "model": model,
        "sourceText": body.text,
        "targetLanguageCount": len(body.target_languages),
    }


@router.post("/test-openai")
async def test_openai(translator: Translator = Depends(get_translator)):
    try:
        translation = await translator.translate("Hello World", "English", "Korean", model="gpt-4o-mini")
    except TranslationError as e:
        logger.error("openai_check_failed", error=str(e))
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": str(e), "message": "OpenAI connection failed"},
        )
    return {"success": True, "translation": translation, "message": "OpenAI connection successful"}
