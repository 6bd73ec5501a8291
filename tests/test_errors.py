"""Tests for error hierarchy and FastAPI exception handlers."""

from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel

from lokey.errors import (
    AuthenticationError,
    ConfigurationError,
    ImageDownloadError,
    LokaliseError,
    LokeyError,
    NotFoundError,
    TranslationError,
    ValidationError,
    register_error_handlers,
)


class TestExceptionHierarchy:
    def test_base_error(self):
        err = LokeyError("something broke", error_code="KEY_NOT_CREATED", key_name="home")
        assert str(err) == "something broke"
        assert err.error_code == "KEY_NOT_CREATED"
        assert err.context == {"key_name": "home"}
        assert err.status_code == 500

    def test_base_error_defaults(self):
        err = LokeyError("oops")
        assert err.error_code == "INTERNAL_ERROR"
        assert err.context == {}

    def test_codes_and_statuses(self):
        cases = [
            (ValidationError("bad"), "VALIDATION_ERROR", 400),
            (AuthenticationError(), "INVALID_CREDENTIALS", 401),
            (NotFoundError("gone"), "NOT_FOUND", 404),
            (ConfigurationError("missing"), "CONFIGURATION_ERROR", 500),
            (LokaliseError("upstream"), "LOKALISE_ERROR", 502),
            (TranslationError("model"), "TRANSLATION_FAILED", 502),
        ]
        for err, code, status in cases:
            assert isinstance(err, LokeyError)
            assert err.error_code == code
            assert err.status_code == status

    def test_authentication_default_message(self):
        assert str(AuthenticationError()) == "Invalid credentials"

    def test_image_download_status_is_per_instance(self):
        err = ImageDownloadError("too big", status_code=413)
        assert err.status_code == 413
        assert err.error_code == "IMAGE_DOWNLOAD_FAILED"
        assert ImageDownloadError("x").status_code == 500


class Item(BaseModel):
    name: str


def _app() -> FastAPI:
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/lokalise")
    async def lokalise():
        raise LokaliseError("Lokalise POST /keys failed: quota", upstream_status=429)

    @app.get("/missing")
    async def missing():
        raise NotFoundError("Screenshot not found", screenshot_id=7)

    @app.post("/items")
    async def items(item: Item):
        return item

    return app


class TestHandlers:
    def test_lokey_error_body(self):
        client = TestClient(_app())
        resp = client.get("/lokalise")
        assert resp.status_code == 502
        assert resp.json() == {
            "error_code": "LOKALISE_ERROR",
            "message": "Lokalise POST /keys failed: quota",
            "upstream_status": 429,
        }

    def test_not_found_body(self):
        resp = TestClient(_app()).get("/missing")
        assert resp.status_code == 404
        assert resp.json()["screenshot_id"] == 7

    def test_request_validation_is_400(self):
        resp = TestClient(_app()).post("/items", json={})
        assert resp.status_code == 400
        body = resp.json()
        assert body["error_code"] == "VALIDATION_ERROR"
        assert body["message"].startswith("Invalid request body: name")
