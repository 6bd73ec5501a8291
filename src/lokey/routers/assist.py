"""
Copywriting helpers backed by the language model.

Endpoints:
- POST /api/recommend-keys   suggest key names for a piece of copy
- POST /api/validate-source  review source copy before it is translated
"""

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from lokey.dependencies import get_translator
from lokey.errors import ValidationError
from lokey.llm import Translator
from lokey.llm.translator import KEYS_MODEL

logger = structlog.get_logger(__name__)

router = APIRouter()


class RecommendKeysRequest(BaseModel):
    text: str | None = None
    prefix: str = ""


class ValidateSourceRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str | None = None
    source_lang: str = Field("English", alias="sourceLang")


@router.post("/recommend-keys")
async def recommend_keys(
    body: RecommendKeysRequest,
    translator: Translator = Depends(get_translator),
):
    if not body.text or not body.text.strip():
        raise ValidationError("Text is required and must be a non-empty string")

    recommendations = await translator.recommend_keys(body.text, body.prefix)
    logger.info("keys_recommended", count=len(recommendations))

    return {
        "success": True,
        "recommendations": recommendations,
        "inputText": body.text,
        "model": KEYS_MODEL,
    }


@router.post("/validate-source")
async def validate_source(
    body: ValidateSourceRequest,
    translator: Translator = Depends(get_translator),
):
    if not body.text or not body.text.strip():
        raise ValidationError("Source text is required")

    feedback = await translator.review_source(body.text, body.source_lang)
    return {"success": True, "feedback": feedback}
