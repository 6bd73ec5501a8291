"""
Image download proxy.

The browser cannot fetch arbitrary screenshot URLs because of CORS, so the
server downloads them and hands back the raw bytes.
"""

from urllib.parse import urlparse

import httpx
import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import Response
from pydantic import BaseModel, ConfigDict, Field

from lokey.dependencies import DOWNLOAD_TIMEOUT, get_http_client
from lokey.errors import ImageDownloadError, ValidationError

logger = structlog.get_logger(__name__)

router = APIRouter()

MAX_IMAGE_BYTES = 10 * 1024 * 1024
USER_AGENT = "Lokalise-Translation-Manager/1.0"


class ImageDownloadRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image_url: str | None = Field(None, alias="imageUrl")


def validate_image_url(url: str | None) -> str:
    if not url:
        raise ValidationError("Image URL is required")
    parsed = urlparse(url)
    if not parsed.scheme:
        raise ValidationError("Invalid URL format")
    if parsed.scheme not in ("http", "https"):
        raise ValidationError("Only HTTP and HTTPS URLs are allowed")
    if not parsed.netloc:
        raise ValidationError("Invalid URL format")
    return url


@router.post("/download-image")
async def download_image(
    body: ImageDownloadRequest,
    http: httpx.AsyncClient = Depends(get_http_client),
):
    url = validate_image_url(body.image_url)
    logger.info("image_download_started", url=url)

    try:
        async with http.stream(
            "GET",
            url,
            headers={"User-Agent": USER_AGENT, "Accept": "image/*"},
            timeout=DOWNLOAD_TIMEOUT,
        ) as response:
            if response.is_error:
                raise ImageDownloadError(
                    f"Failed to download image: {response.status_code} {response.reason_phrase}",
                    status_code=response.status_code,
                )

            content_type = response.headers.get("content-type", "")
            if not content_type.startswith("image/"):
                raise ImageDownloadError("URL does not point to an image", status_code=400)

            length = response.headers.get("content-length")
            if length and length.isdigit() and int(length) > MAX_IMAGE_BYTES:
                raise ImageDownloadError("Image is too large (max 10MB)", status_code=413)

            content = bytearray()
            async for chunk in response.aiter_bytes():
                content.extend(chunk)
                if len(content) > MAX_IMAGE_BYTES:
                    raise ImageDownloadError("Image is too large (max 10MB)", status_code=413)

    except httpx.TimeoutException as e:
        raise ImageDownloadError("Download timeout (max 30 seconds)", status_code=408) from e
    except httpx.TransportError as e:
        raise ImageDownloadError("Network error: Unable to reach the image URL", status_code=502) from e

    logger.info("image_downloaded", url=url, size=len(content))
    return Response(content=bytes(content), media_type=content_type)
