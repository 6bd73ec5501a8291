"""
Lokalise API v2 client.

Thin async wrapper over the project-scoped REST endpoints used by the app:
languages, keys, translations and screenshots. Responses are returned as the
plain JSON objects Lokalise sends; only the envelope ("keys", "languages", ...)
is unwrapped.
"""

from typing import Any

import httpx
import structlog

from lokey.config import Settings
from lokey.errors import ConfigurationError, LokaliseError, NotFoundError

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT = 30.0


def key_display_name(key: dict[str, Any]) -> str:
    """Pick the web, then ios, then android name of a key."""
    name = key.get("key_name")
    if isinstance(name, dict):
        return name.get("web") or name.get("ios") or name.get("android") or ""
    return name or ""


def parse_tags(tags: str | list[str] | None) -> list[str]:
    """Turn "ui, button,,nav" into ["ui", "button", "nav"]."""
    if not tags:
        return []
    if isinstance(tags, str):
        tags = tags.split(",")
    return [t.strip() for t in tags if t and t.strip()]


class LokaliseClient:
    """
    Client for a single Lokalise project.

    All paths are relative to /projects/{project_id}.
    """

    def __init__(
        self,
        api_token: str,
        project_id: str,
        base_url: str = "https://api.lokalise.com/api2",
        http: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.project_id = project_id
        self.base_url = base_url.rstrip("/")
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=timeout)
        self._headers = {
            "X-Api-Token": api_token,
            "Content-Type": "application/json",
        }

    @classmethod
    def from_settings(cls, settings: Settings, http: httpx.AsyncClient | None = None) -> "LokaliseClient":
        if not settings.lokalise_api_token or not settings.lokalise_project_id:
            raise ConfigurationError("Lokalise API token and project ID are required")
        return cls(
            settings.lokalise_api_token,
            settings.lokalise_project_id,
            base_url=settings.lokalise_api_base,
            http=http,
        )

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    def _url(self, path: str = "") -> str:
        return f"{self.base_url}/projects/{self.project_id}{path}"

    async def _request(self, method: str, path: str = "", **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self._http.request(
                method, self._url(path), headers=self._headers, **kwargs
            )
        except httpx.HTTPError as e:
            logger.error("lokalise_unreachable", method=method, path=path, error=str(e))
            raise LokaliseError(f"Failed to reach Lokalise: {e}") from e

        if response.status_code == 404:
            raise NotFoundError(f"Lokalise resource not found: {path or '/'}")

        if response.is_error:
            message = _error_message(response)
            logger.error(
                "lokalise_request_failed",
                method=method,
                path=path,
                status=response.status_code,
                detail=message,
            )
            raise LokaliseError(
                f"Lokalise {method} {path or '/'} failed: {message}",
                upstream_status=response.status_code,
            )

        if not response.content:
            return {}
        return response.json()

    async def get_project(self) -> dict[str, Any]:
        data = await self._request("GET")
        return data.get("project", data)

    async def get_languages(self) -> list[dict[str, Any]]:
        data = await self._request("GET", "/languages")
        return data.get("languages", [])

    async def get_keys(self, limit: int = 100) -> list[dict[str, Any]]:
        data = await self._request(
            "GET", "/keys", params={"include_translations": 1, "limit": limit}
        )
        return data.get("keys", [])

    async def create_keys(self, keys_data: dict[str, Any]) -> list[dict[str, Any]]:
        """
        Create keys.

        Args:
            keys_data: {"keys": [{"key_name", "description", "platforms",
                "tags", "translations": [{"language_iso", "translation"}]}]}

        Returns:
            The created key objects
        """
        data = await self._request("POST", "/keys", json=keys_data)
        return data.get("keys", [])

    async def translate_keys(
        self, source_lang_iso: str, target_lang_isos: list[str], keys: list[int]
    ) -> dict[str, Any]:
        """Ask Lokalise AI to translate existing keys."""
        return await self._request(
            "POST",
            "/translations/translate",
            json={
                "source_lang_iso": source_lang_iso,
                "target_lang_isos": target_lang_isos,
                "keys": keys,
            },
        )

    async def update_translation(self, key_id: int, language_iso: str, translation: str) -> dict[str, Any]:
        """Create or overwrite one translation of a key."""
        logger.info("updating_translation", key_id=key_id, language=language_iso)
        return await self._request(
            "POST",
            "/translations",
            json={
                "translations": [
                    {
                        "key_id": key_id,
                        "language_iso": language_iso,
                        "translation": translation,
                        "is_reviewed": False,
                        "is_fuzzy": False,
                    }
                ]
            },
        )

    async def get_screenshots(self) -> list[dict[str, Any]]:
        data = await self._request("GET", "/screenshots")
        return data.get("screenshots", [])

    async def get_screenshot(self, screenshot_id: int) -> dict[str, Any]:
        data = await self._request("GET", f"/screenshots/{screenshot_id}")
        return data.get("screenshot", data)

    async def create_screenshots(self, screenshots: list[dict[str, Any]]) -> dict[str, Any]:
        """
        Upload screenshots.

        Each entry carries base64 "data" (a data URI), optional "title",
        "description" and "key_ids".
        """
        payload = [{k: v for k, v in s.items() if v not in (None, "", [])} for s in screenshots]
        return await self._request("POST", "/screenshots", json={"screenshots": payload})

    async def delete_screenshot(self, screenshot_id: int) -> dict[str, Any]:
        return await self._request("DELETE", f"/screenshots/{screenshot_id}")

    async def create_keys_with_screenshots(
        self,
        keys_data: dict[str, Any],
        screenshots: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        """
        Create keys, then attach screenshots to every created key.

        A screenshot failure does not undo the keys; it is reported under
        "screenshotError" instead.
        """
        keys = await self.create_keys(keys_data)
        result: dict[str, Any] = {"keys": keys, "screenshots": None}

        if not screenshots:
            return result

        key_ids = [k["key_id"] for k in keys if "key_id" in k]
        bound = [{**s, "key_ids": list(s.get("key_ids") or []) + key_ids} for s in screenshots]
        try:
            uploaded = await self.create_screenshots(bound)
            result["screenshots"] = uploaded.get("screenshots", uploaded)
        except (LokaliseError, NotFoundError) as e:
            logger.warning("screenshot_upload_failed", key_ids=key_ids, error=str(e))
            result["screenshotError"] = str(e)

        logger.info(
            "keys_with_screenshots_created",
            keys=len(keys),
            screenshots=len(screenshots),
            screenshot_error="screenshotError" in result,
        )
        return result


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return error.get("message") or str(error)
    return str(error or body)
