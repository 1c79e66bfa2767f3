"""Helpers for turning image references into raw bytes."""

import httpx

from imagegen_bot.domain.images import ImageBackendError, ImageRef


async def load_image_bytes(
    image: ImageRef, http_client: httpx.AsyncClient, vendor: str
) -> bytes:
    """Return the image bytes, downloading them when only a URL is known."""
    if image.data:
        return image.data
    if not image.url:
        raise ImageBackendError("No image data found for edit", vendor=vendor)
    response = await http_client.get(image.url, timeout=30)
    response.raise_for_status()
    return response.content
