"""Tests for the key creation flow and its progress events."""

import json

import pytest
from openai import OpenAIError

from conftest import FakeLokalise, FakeOpenAI, batch_reply
from lokey.errors import LokaliseError, ValidationError
from lokey.llm import Translator
from lokey.services.key_creation import (
    INDIVIDUAL_FALLBACK_LIMIT,
    KeyCreateRequest,
    ProgressEvent,
    build_key_payload,
    create_key,
    create_key_with_progress,
    target_languages,
    translate_for_languages,
)

MANY_LANGUAGES = [{"lang_iso": iso} for iso in ("en", "ko", "ja", "es", "fr", "de", "it", "pt")]


def request(**overrides) -> KeyCreateRequest:
    body = {
        "keyName": "home_welcome_title",
        "description": "Home screen title",
        "sourceText": "Welcome",
        "tags": "ui, home",
        "platforms": ["ios", "android"],
        "useAI": True,
        "gptModel": "gpt-4o-mini",
    }
    body.update(overrides)
    return KeyCreateRequest.model_validate(body)


async def collect(events) -> list[dict]:
    return [event.to_dict() async for event in events]


class TestProgressEvent:
    def test_to_dict_drops_none_and_uses_camel_case(self):
        event = ProgressEvent("translation", "in_progress", 30, "Calling", "Calling OpenAI API")
        data = event.to_dict()
        assert data["currentSubStep"] == "Calling OpenAI API"
        assert "timestamp" in data

        bare = ProgressEvent("validation", "error", 0, "bad").to_dict()
        assert "currentSubStep" not in bare

    def test_extra_fields(self):
        data = ProgressEvent("complete", "completed", 100, extra={"keyId": 5, "translated": True}).to_dict()
        assert data["keyId"] == 5
        assert data["translated"] is True
        assert "details" not in data

    def test_to_sse_frame(self):
        frame = ProgressEvent("validation", "completed", 100, "안녕").to_sse()
        assert frame.startswith("data: ")
        assert frame.endswith("\n\n")
        assert json.loads(frame[6:])["details"] == "안녕"


class TestRequestModel:
    def test_aliases_and_defaults(self):
        body = KeyCreateRequest.model_validate({"keyName": "a", "sourceText": "b"})
        assert body.key_name == "a"
        assert body.source_text == "b"
        assert body.use_ai is False
        assert body.platforms is None

    def test_populate_by_name(self):
        assert KeyCreateRequest(key_name="a", source_text="b").key_name == "a"


class TestPayload:
    def test_source_first_and_tags_parsed(self):
        payload = build_key_payload(request(), {"ko": "환영합니다", "en": "ignored"}, ["ios"])
        key = payload["keys"][0]
        assert key["key_name"] == "home_welcome_title"
        assert key["platforms"] == ["ios"]
        assert key["tags"] == ["ui", "home"]
        assert key["translations"] == [
            {"language_iso": "en", "translation": "Welcome"},
            {"language_iso": "ko", "translation": "환영합니다"},
        ]

    def test_target_languages_exclude_source(self):
        assert [lang["lang_iso"] for lang in target_languages(MANY_LANGUAGES)][0] == "ko"
        assert len(target_languages(MANY_LANGUAGES)) == len(MANY_LANGUAGES) - 1


class TestTranslateForLanguages:
    async def test_batch_success(self):
        client = FakeOpenAI(batch_reply({"ko": "환영합니다", "ja": "ようこそ"}))
        events = []
        translations, individual = await translate_for_languages(
            Translator(client),
            "Welcome",
            [{"lang_iso": "en"}, {"lang_iso": "ko"}, {"lang_iso": "ja"}],
            on_event=events.append,
        )

        assert translations == {"ko": "환영합니다", "ja": "ようこそ"}
        assert individual is False
        assert len(client.calls) == 1
        assert [e.progress for e in events] == [10, 20, 30, 80, 95]

    async def test_fallback_translates_first_five(self):
        client = FakeOpenAI(OpenAIError("timeout"), "한국어", "日本語", "español", "français", "deutsch")
        events = []
        translations, individual = await translate_for_languages(
            Translator(client), "Welcome", MANY_LANGUAGES, on_event=events.append
        )

        assert individual is True
        assert list(translations) == ["ko", "ja", "es", "fr", "de"]
        assert len(client.calls) == 1 + INDIVIDUAL_FALLBACK_LIMIT
        fallback = [e for e in events if e.progress >= 50]
        assert fallback[0].details.startswith("Batch translation failed")
        assert fallback[-1].progress == 100

    async def test_fallback_skips_failed_language(self):
        client = FakeOpenAI("garbage", "한국어", OpenAIError("boom"))
        translations, _ = await translate_for_languages(
            Translator(client), "Welcome", [{"lang_iso": "en"}, {"lang_iso": "ko"}, {"lang_iso": "ja"}]
        )
        assert translations == {"ko": "한국어"}

    async def test_unexpected_client_error_still_falls_back(self):
        client = FakeOpenAI(
            AttributeError("'NoneType' object has no attribute 'choices'"),
            "한국어",
            RuntimeError("connection reset"),
        )
        translations, individual = await translate_for_languages(
            Translator(client), "Welcome", [{"lang_iso": "en"}, {"lang_iso": "ko"}, {"lang_iso": "ja"}]
        )
        assert individual is True
        assert translations == {"ko": "한국어"}

    async def test_no_targets(self):
        client = FakeOpenAI("{}")
        translations, individual = await translate_for_languages(Translator(client), "Welcome", [{"lang_iso": "en"}])
        assert translations == {}
        assert individual is False


class TestCreateKey:
    async def test_with_ai(self):
        lokalise = FakeLokalise()
        translator = Translator(FakeOpenAI(batch_reply({"ko": "환영합니다", "ja": "ようこそ"})))

        key_id = await create_key(lokalise, translator, request())

        assert key_id == 101
        key = lokalise.created[0]["keys"][0]
        assert {t["language_iso"] for t in key["translations"]} == {"en", "ko", "ja"}

    async def test_without_ai_defaults_to_web(self):
        lokalise = FakeLokalise()
        await create_key(lokalise, None, request(useAI=False, platforms=None))
        key = lokalise.created[0]["keys"][0]
        assert key["platforms"] == ["web"]
        assert key["translations"] == [{"language_iso": "en", "translation": "Welcome"}]

    async def test_requires_name_and_text(self):
        with pytest.raises(ValidationError, match="Key name and source text are required"):
            await create_key(FakeLokalise(), None, request(sourceText=""))

    async def test_ai_without_translator_creates_source_only(self):
        lokalise = FakeLokalise()

        key_id = await create_key(lokalise, None, request())

        assert key_id == 101
        assert lokalise.created[0]["keys"][0]["translations"] == [{"language_iso": "en", "translation": "Welcome"}]

    async def test_null_fields_are_missing(self):
        with pytest.raises(ValidationError, match="Key name and source text are required"):
            await create_key(FakeLokalise(), None, request(keyName=None))


class TestCreateKeyWithProgress:
    async def test_full_flow(self):
        lokalise = FakeLokalise()
        translator = Translator(FakeOpenAI(batch_reply({"ko": "환영합니다", "ja": "ようこそ"})))

        events = await collect(create_key_with_progress(lokalise, translator, request()))

        steps = [(e["step"], e["status"]) for e in events]
        assert steps[0] == ("validation", "in_progress")
        assert ("languages", "completed") in steps
        assert ("translation", "completed") in steps
        assert ("creation", "completed") in steps
        assert steps[-1] == ("complete", "completed")
        assert events[-1]["keyId"] == 101
        assert events[-1]["translated"] is True

        order = [s for s, _ in steps]
        assert order.index("languages") < order.index("translation") < order.index("creation")
        sub_steps = [e.get("currentSubStep") for e in events if e["step"] == "translation"]
        assert "Calling OpenAI API" in sub_steps

    async def test_without_ai_skips_translation(self):
        events = await collect(create_key_with_progress(FakeLokalise(), None, request(useAI=False)))
        assert "translation" not in {e["step"] for e in events}
        assert events[-1]["translated"] is False

    async def test_missing_fields(self):
        events = await collect(create_key_with_progress(FakeLokalise(), None, request(keyName="")))
        assert events == [
            {
                "step": "validation",
                "status": "error",
                "progress": 0,
                "details": "Key name and source text are required.",
                "timestamp": events[0]["timestamp"],
            }
        ]

    async def test_no_platforms(self):
        events = await collect(create_key_with_progress(FakeLokalise(), None, request(platforms=[])))
        assert len(events) == 1
        assert events[0]["details"] == "At least one platform must be selected."

    async def test_fallback_is_streamed(self):
        translator = Translator(FakeOpenAI(OpenAIError("timeout"), "환영합니다", "ようこそ"))
        events = await collect(create_key_with_progress(FakeLokalise(), translator, request()))

        details = [e.get("details", "") for e in events if e["step"] == "translation"]
        assert any(d.startswith("Batch translation failed") for d in details)
        assert "Translating to ko..." in details
        assert events[-1]["step"] == "complete"

    async def test_lokalise_failure_becomes_error_event(self):
        lokalise = FakeLokalise()

        async def broken(keys_data):
            raise LokaliseError("Lokalise POST /keys failed: duplicate")

        lokalise.create_keys = broken
        events = await collect(create_key_with_progress(lokalise, None, request(useAI=False)))

        assert events[-1]["step"] == "error"
        assert events[-1]["status"] == "error"
        assert "duplicate" in events[-1]["details"]

    async def test_missing_translator_still_creates_key(self):
        lokalise = FakeLokalise()

        events = await collect(create_key_with_progress(lokalise, None, request()))

        translation = [(e["status"], e["details"]) for e in events if e["step"] == "translation"]
        assert [status for status, _ in translation] == ["in_progress", "completed"]
        assert "0 languages" in translation[-1][1]
        assert "error" not in {e["status"] for e in events}
        assert events[-1]["step"] == "complete"
        assert events[-1]["keyId"] == 101
        assert lokalise.created[0]["keys"][0]["translations"] == [{"language_iso": "en", "translation": "Welcome"}]

    async def test_null_source_text_event(self):
        events = await collect(create_key_with_progress(FakeLokalise(), None, request(sourceText=None)))
        assert len(events) == 1
        assert events[0]["details"] == "Key name and source text are required."

    async def test_completion_message_names_fallback(self):
        translator = Translator(FakeOpenAI(OpenAIError("timeout"), "환영합니다", "ようこそ"))
        events = await collect(create_key_with_progress(FakeLokalise(), translator, request()))

        completed = [e for e in events if e["step"] == "translation" and e["status"] == "completed"]
        assert completed[0]["details"] == "Individual translation completed for 2 languages."

    async def test_completion_message_after_batch(self):
        translator = Translator(FakeOpenAI(batch_reply({"ko": "환영합니다", "ja": "ようこそ"})))
        events = await collect(create_key_with_progress(FakeLokalise(), translator, request()))

        completed = [e for e in events if e["step"] == "translation" and e["status"] == "completed"]
        assert completed[0]["details"] == "Translation completed for 2 languages."
