"""
Translation key routes.

Endpoints:
- GET  /api/keys                       list keys with translations
- POST /api/keys                       create a key (optionally AI-translated)
- POST /api/keys/create-with-progress  same, streamed as server-sent events
"""

import json

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError as PydanticValidationError

from lokey.dependencies import get_lokalise, get_optional_translator
from lokey.llm import Translator
from lokey.lokalise import LokaliseClient
from lokey.routers._base import sse_response
from lokey.services.key_creation import (
    KeyCreateRequest,
    ProgressEvent,
    create_key,
    create_key_with_progress,
)

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/keys")
async def list_keys(lokalise: LokaliseClient = Depends(get_lokalise)):
    keys = await lokalise.get_keys()
    return {"keys": keys}


@router.post("/keys")
async def add_key(
    body: KeyCreateRequest,
    lokalise: LokaliseClient = Depends(get_lokalise),
    translator: Translator | None = Depends(get_optional_translator),
):
    logger.info("key_create_requested", key_name=body.key_name, use_ai=body.use_ai, model=body.gpt_model)
    key_id = await create_key(lokalise, translator, body)
    return {
        "message": "Key created successfully",
        "keyId": key_id,
        "translated": body.use_ai,
    }


@router.post("/keys/create-with-progress")
async def add_key_with_progress(
    request: Request,
    lokalise: LokaliseClient = Depends(get_lokalise),
    translator: Translator | None = Depends(get_optional_translator),
):
    # Body is parsed by hand so that field problems become stream events
    try:
        data = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return PlainTextResponse("Invalid JSON", status_code=400)

    try:
        body = KeyCreateRequest.model_validate(data)
    except PydanticValidationError as e:
        logger.warning("key_create_invalid_body", errors=e.error_count())

        async def invalid():
            yield ProgressEvent("validation", "error", 0, "Invalid request body.")

        return sse_response(invalid())

    logger.info("key_create_stream_started", key_name=body.key_name, use_ai=body.use_ai)
    return sse_response(create_key_with_progress(lokalise, translator, body))
