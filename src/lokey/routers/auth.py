import secrets

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from lokey.auth import AUTH_COOKIE, AUTH_MAX_AGE, AUTH_VALUE
from lokey.config import Settings
from lokey.dependencies import get_settings
from lokey.errors import AuthenticationError

logger = structlog.get_logger(__name__)

router = APIRouter()


class LoginRequest(BaseModel):
    id: str = ""
    password: str = ""


@router.post("/login")
async def login(body: LoginRequest, settings: Settings = Depends(get_settings)):
    expected = settings.users.get(body.id)
    if expected is None or not secrets.compare_digest(expected, body.password):
        logger.warning("login_failed", user=body.id)
        raise AuthenticationError()

    response = JSONResponse({"success": True})
    response.set_cookie(
        AUTH_COOKIE,
        AUTH_VALUE,
        max_age=AUTH_MAX_AGE,
        path="/",
        httponly=True,
        secure=settings.is_production,
    )
    logger.info("login_succeeded", user=body.id)
    return response


@router.post("/logout")
async def logout():
    response = JSONResponse({"success": True})
    response.delete_cookie(AUTH_COOKIE, path="/")
    return response
