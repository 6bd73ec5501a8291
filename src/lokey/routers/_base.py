# routers/_base.py
"""
Shared helpers for API routes.

Provides server-sent-event streaming and multipart screenshot parsing.
"""

from collections.abc import AsyncIterator
from typing import Any

from fastapi.responses import StreamingResponse
from starlette.datastructures import FormData, UploadFile

from lokey.errors import ValidationError
from lokey.services.key_creation import ProgressEvent

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def sse_response(events: AsyncIterator[ProgressEvent]) -> StreamingResponse:
    """
    Stream progress events as `data: {...}\\n\\n` frames.

    Args:
        events: Async iterator of ProgressEvent

    Returns:
        text/event-stream response
    """

    async def frames():
        async for event in events:
            yield event.to_sse()

    return StreamingResponse(frames(), media_type="text/event-stream", headers=SSE_HEADERS)


def screenshots_from_form(form: FormData, with_key_ids: bool = True) -> list[dict[str, Any]]:
    """
    Collect screenshots sent as indexed form fields.

    Fields per screenshot i:
        screenshots[i][data]         base64 data URI (required)
        screenshots[i][title]        optional
        screenshots[i][description]  optional
        screenshots[i][key_ids][]    repeated, optional

    Raises:
        ValidationError: if a screenshot is sent as a file part or a key id
            is not an integer
    """
    screenshots = []
    index = 0

    while form.get(f"screenshots[{index}][data]"):
        data = form.get(f"screenshots[{index}][data]")
        if isinstance(data, UploadFile):
            raise ValidationError("File upload not supported. Use base64 data strings.")

        screenshot: dict[str, Any] = {
            "data": data,
            "title": form.get(f"screenshots[{index}][title]") or None,
            "description": form.get(f"screenshots[{index}][description]") or None,
        }

        if with_key_ids:
            raw_ids = form.getlist(f"screenshots[{index}][key_ids][]")
            try:
                key_ids = [int(v) for v in raw_ids]
            except (TypeError, ValueError) as e:
                raise ValidationError(f"Invalid key id for screenshot {index}") from e
            screenshot["key_ids"] = key_ids or None

        screenshots.append(screenshot)
        index += 1

    return screenshots


def parse_screenshot_id(raw: str) -> int:
    try:
        return int(raw)
    except ValueError as e:
        raise ValidationError("Invalid screenshot ID") from e
