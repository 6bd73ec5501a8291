"""
Cookie-based login gate.

A successful login sets `auth=authenticated`. Every page and API route
except the public ones below requires that cookie.
"""

from fastapi import Request
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

AUTH_COOKIE = "auth"
AUTH_VALUE = "authenticated"
AUTH_MAX_AGE = 86400  # 24 hours

PUBLIC_PATHS = {"/login", "/health", "/docs", "/openapi.json", "/favicon.ico"}
PUBLIC_PREFIXES = ("/api/auth/", "/static/")


def is_public(path: str) -> bool:
    return path in PUBLIC_PATHS or path.startswith(PUBLIC_PREFIXES)


def is_authenticated(request: Request) -> bool:
    return request.cookies.get(AUTH_COOKIE) == AUTH_VALUE


class AuthMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        path = request.url.path
        if request.method == "OPTIONS" or is_public(path) or is_authenticated(request):
            return await call_next(request)

        if path.startswith("/api/"):
            return JSONResponse(
                status_code=401,
                content={"error_code": "UNAUTHORIZED", "message": "Authentication required"},
            )
        return RedirectResponse("/login", status_code=307)
