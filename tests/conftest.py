"""
Shared fixtures.

Route tests run the real app with the Lokalise client swapped for an
in-memory fake and the OpenAI client swapped for a scripted one.
"""

import json
from types import SimpleNamespace
from typing import Any

import pytest
from fastapi.testclient import TestClient

from lokey.config import Settings
from lokey.dependencies import get_lokalise, get_optional_translator, get_translator
from lokey.errors import NotFoundError
from lokey.llm import Translator
from lokey.main import create_app


class FakeCompletions:
    """Scripted chat.completions: each call pops the next reply.

    A reply may be a string, an exception to raise, or a callable taking the
    request kwargs and returning a string.
    """

    def __init__(self, replies):
        self.replies = list(replies)
        self.calls: list[dict[str, Any]] = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        reply = self.replies.pop(0) if self.replies else ""
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            reply = reply(kwargs)
        message = SimpleNamespace(content=reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeOpenAI:
    def __init__(self, *replies):
        self.chat = SimpleNamespace(completions=FakeCompletions(replies))
        self.closed = False

    @property
    def calls(self):
        return self.chat.completions.calls

    def queue(self, *replies):
        self.chat.completions.replies.extend(replies)

    async def close(self):
        self.closed = True


class FakeLokalise:
    def __init__(self):
        self.languages = [
            {"lang_id": 640, "lang_iso": "en", "lang_name": "English"},
            {"lang_id": 777, "lang_iso": "ko", "lang_name": "Korean"},
            {"lang_id": 778, "lang_iso": "ja", "lang_name": "Japanese"},
        ]
        self.keys = [
            {
                "key_id": 11,
                "key_name": {"ios": "home_title", "android": "home_title", "web": "home_title"},
                "description": "Home screen title",
                "translations": [
                    {"language_iso": "en", "translation": "Welcome"},
                    {"language_iso": "ko", "translation": ""},
                ],
            },
            {
                "key_id": 12,
                "key_name": {"ios": "", "android": "", "web": "no_source"},
                "description": "",
                "translations": [{"language_iso": "ko", "translation": "안녕"}],
            },
        ]
        self.screenshots = {5: {"screenshot_id": 5, "title": "Home"}}
        self.created: list[dict[str, Any]] = []
        self.updated: list[tuple[int, str, str]] = []
        self.translate_calls: list[tuple] = []
        self.uploaded: list[list[dict[str, Any]]] = []
        self.next_key_id = 100

    async def get_project(self):
        return {"project_id": "proj.1", "name": "Mobile App"}

    async def get_languages(self):
        return self.languages

    async def get_keys(self, limit=100):
        return self.keys

    async def create_keys(self, keys_data):
        self.created.append(keys_data)
        created = []
        for key in keys_data["keys"]:
            self.next_key_id += 1
            created.append({"key_id": self.next_key_id, **key})
        return created

    async def translate_keys(self, source_lang_iso, target_lang_isos, keys):
        self.translate_calls.append((source_lang_iso, target_lang_isos, keys))
        return {"process": {"status": "queued"}}

    async def update_translation(self, key_id, language_iso, translation):
        self.updated.append((key_id, language_iso, translation))
        return {"translations": [{"key_id": key_id, "language_iso": language_iso}]}

    async def get_screenshots(self):
        return list(self.screenshots.values())

    async def get_screenshot(self, screenshot_id):
        if screenshot_id not in self.screenshots:
            raise NotFoundError(f"Lokalise resource not found: /screenshots/{screenshot_id}")
        return self.screenshots[screenshot_id]

    async def create_screenshots(self, screenshots):
        self.uploaded.append(screenshots)
        return {"screenshots": [{"screenshot_id": 50 + i} for i, _ in enumerate(screenshots)]}

    async def delete_screenshot(self, screenshot_id):
        if screenshot_id not in self.screenshots:
            raise NotFoundError(f"Lokalise resource not found: /screenshots/{screenshot_id}")
        del self.screenshots[screenshot_id]
        return {"screenshot_deleted": True}

    async def create_keys_with_screenshots(self, keys_data, screenshots=None):
        keys = await self.create_keys(keys_data)
        result = {"keys": keys, "screenshots": None}
        if screenshots:
            result["screenshots"] = (await self.create_screenshots(screenshots))["screenshots"]
        return result


def batch_reply(translations: dict[str, str]) -> str:
    return json.dumps(translations, ensure_ascii=False)


def sse_events(body: str) -> list[dict[str, Any]]:
    return [
        json.loads(frame[len("data: "):])
        for frame in body.split("\n\n")
        if frame.startswith("data: ")
    ]


@pytest.fixture
def settings():
    return Settings(
        lokalise_api_token="test-token",
        lokalise_project_id="proj.1",
        openai_api_key="sk-test",
        admin_password="secret-admin",
        user_password="secret-user",
        environment="test",
        log_format="dev",
    )


@pytest.fixture
def fake_openai():
    return FakeOpenAI()


@pytest.fixture
def translator(fake_openai):
    return Translator(fake_openai, default_model="gpt-4o-mini")


@pytest.fixture
def lokalise():
    return FakeLokalise()


@pytest.fixture
def app(settings, lokalise, translator):
    app = create_app(settings)
    app.dependency_overrides[get_lokalise] = lambda: lokalise
    app.dependency_overrides[get_translator] = lambda: translator
    app.dependency_overrides[get_optional_translator] = lambda: translator
    return app


@pytest.fixture
def client(app):
    return TestClient(app, cookies={"auth": "authenticated"})


@pytest.fixture
def anon_client(app):
    return TestClient(app, follow_redirects=False)
