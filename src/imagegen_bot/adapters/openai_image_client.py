"""OpenAI Images API client for generation and editing."""

from dataclasses import dataclass

import httpx
from openai import AsyncOpenAI

from imagegen_bot.adapters.image_fetch import load_image_bytes
from imagegen_bot.domain.images import ImageBackendError, ImageRef, detect_mime_type
from imagegen_bot.services.router import ImageBackend

_VENDOR = "openai"


@dataclass
class OpenAIImageClient(ImageBackend):
    """Image backend backed by the OpenAI Images API."""

    client: AsyncOpenAI
    model: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, api_key: str, model: str, timeout: float) -> "OpenAIImageClient":
        """Create an OpenAI image client."""
        return cls(
            client=AsyncOpenAI(api_key=api_key, timeout=timeout),
            model=model,
            http_client=httpx.AsyncClient(),
        )

    async def generate_image(self, prompt: str) -> ImageRef:
        """Generate an image from a text prompt."""
        response = await self.client.images.generate(model=self.model, prompt=prompt)
        return _first_image(response)

    async def edit_image(self, image: ImageRef, prompt: str) -> ImageRef:
        """Edit a prior image according to the prompt."""
        image_bytes = await load_image_bytes(image, self.http_client, _VENDOR)
        mime_type = detect_mime_type(image_bytes)
        response = await self.client.images.edit(
            model=self.model,
            image=(f"image.{mime_type.split('/')[-1]}", image_bytes, mime_type),
            prompt=prompt,
        )
        return _first_image(response)

    async def close(self) -> None:
        """Close the underlying clients."""
        await self.client.close()
        await self.http_client.aclose()


def _first_image(response: object) -> ImageRef:
    data = getattr(response, "data", None) or []
    for item in data:
        encoded = getattr(item, "b64_json", None)
        if encoded:
            return ImageRef.from_base64(encoded)
        url = getattr(item, "url", None)
        if url:
            return ImageRef(url=url)
    raise ImageBackendError("No image data found in OpenAI response", vendor=_VENDOR)
