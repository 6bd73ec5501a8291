"""
FastAPI dependencies for shared clients.

Clients are built on first use and cached on app.state so that a missing
API key only fails the routes that need it. Tests replace these through
app.dependency_overrides.
"""

import httpx
from fastapi import Request

from lokey.config import Settings
from lokey.errors import ConfigurationError
from lokey.llm import Translator
from lokey.lokalise import LokaliseClient

DOWNLOAD_TIMEOUT = 30.0


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_lokalise(request: Request) -> LokaliseClient:
    state = request.app.state
    if getattr(state, "lokalise", None) is None:
        state.lokalise = LokaliseClient.from_settings(state.settings)
    return state.lokalise


def get_translator(request: Request) -> Translator:
    state = request.app.state
    if getattr(state, "translator", None) is None:
        state.translator = Translator.from_settings(state.settings)
    return state.translator


def get_optional_translator(request: Request) -> Translator | None:
    """Translator, or None when OpenAI is not configured."""
    try:
        return get_translator(request)
    except ConfigurationError:
        return None


def get_http_client(request: Request) -> httpx.AsyncClient:
    state = request.app.state
    if getattr(state, "http", None) is None:
        state.http = httpx.AsyncClient(timeout=DOWNLOAD_TIMEOUT, follow_redirects=True)
    return state.http


async def close_clients(state) -> None:
    """Release whatever clients were created during the app's lifetime."""
    lokalise = getattr(state, "lokalise", None)
    if lokalise is not None:
        await lokalise.aclose()
    translator = getattr(state, "translator", None)
    if translator is not None:
        await translator.aclose()
    http = getattr(state, "http", None)
    if http is not None:
        await http.aclose()
