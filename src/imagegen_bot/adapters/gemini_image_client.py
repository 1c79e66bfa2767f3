"""Gemini generateContent client for image generation and editing."""

import base64
import re
from dataclasses import dataclass

import httpx

from imagegen_bot.adapters.image_fetch import load_image_bytes
from imagegen_bot.domain.images import ImageBackendError, ImageRef, detect_mime_type
from imagegen_bot.services.router import ImageBackend

_VENDOR = "gemini"
_DATA_URL = re.compile(r"data:image/[^;]+;base64,([A-Za-z0-9+/=]+)")
_BLOCKED_FINISH_REASONS = {"SAFETY", "IMAGE_SAFETY", "PROHIBITED_CONTENT", "BLOCKLIST"}


@dataclass
class HttpxGeminiImageClient(ImageBackend):
    """Image backend calling the Gemini REST API with httpx."""

    api_key: str
    model: str
    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(
        cls, api_key: str, model: str, base_url: str, timeout: float
    ) -> "HttpxGeminiImageClient":
        """Create a Gemini client with a managed httpx session."""
        return cls(
            api_key=api_key,
            model=model,
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(timeout=timeout),
        )

    async def generate_image(self, prompt: str) -> ImageRef:
        """Generate an image from a text prompt."""
        parts: list[dict[str, object]] = [
            {"text": f"Generate an image based on this prompt: {prompt}"}
        ]
        return await self._generate_content(parts)

    async def edit_image(self, image: ImageRef, prompt: str) -> ImageRef:
        """Edit a prior image according to the prompt."""
        image_bytes = await load_image_bytes(image, self.http_client, _VENDOR)
        parts: list[dict[str, object]] = [
            {"text": f"Edit this image based on this prompt: {prompt}"},
            {
                "inline_data": {
                    "mime_type": detect_mime_type(image_bytes),
                    "data": base64.b64encode(image_bytes).decode("ascii"),
                }
            },
        ]
        return await self._generate_content(parts)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _generate_content(self, parts: list[dict[str, object]]) -> ImageRef:
        response = await self.http_client.post(
            f"{self.base_url}/models/{self.model}:generateContent",
            headers={"x-goog-api-key": self.api_key},
            json={
                "contents": [{"role": "user", "parts": parts}],
                "generationConfig": {"responseModalities": ["TEXT", "IMAGE"]},
            },
        )
        if response.is_error:
            raise ImageBackendError(
                f"Gemini API request failed with status {response.status_code}: "
                f"{_error_detail(response)}",
                status_code=response.status_code,
                vendor=_VENDOR,
            )
        return extract_image(response.json())


def extract_image(payload: dict[str, object]) -> ImageRef:
    """Normalise a generateContent response into a single image reference.

    Image data may arrive as ``inlineData`` or ``inline_data`` parts, as a
    ``fileData``/``imageUrl`` reference, or embedded as a data URL in text.
    """
    feedback = payload.get("promptFeedback")
    if isinstance(feedback, dict) and feedback.get("blockReason"):
        raise ImageBackendError(
            f"Gemini blocked the prompt by safety filters ({feedback['blockReason']})",
            vendor=_VENDOR,
        )
    candidates = payload.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        raise ImageBackendError(
            "Unexpected response format from Gemini API", vendor=_VENDOR
        )
    candidate = candidates[0] if isinstance(candidates[0], dict) else {}
    finish_reason = candidate.get("finishReason")
    if finish_reason in _BLOCKED_FINISH_REASONS:
        raise ImageBackendError(
            f"Gemini response blocked by safety filters ({finish_reason})",
            vendor=_VENDOR,
        )
    content = candidate.get("content")
    parts = content.get("parts", []) if isinstance(content, dict) else []
    saw_text = False
    for part in parts:
        if not isinstance(part, dict):
            continue
        inline = part.get("inlineData") or part.get("inline_data")
        if isinstance(inline, dict) and inline.get("data"):
            return ImageRef(data=base64.b64decode(str(inline["data"])))
        file_data = part.get("fileData") or part.get("file_data")
        if isinstance(file_data, dict) and file_data.get("fileUri"):
            return ImageRef(url=str(file_data["fileUri"]))
        if part.get("imageUrl"):
            return ImageRef(url=str(part["imageUrl"]))
        text = part.get("text")
        if isinstance(text, str):
            match = _DATA_URL.search(text)
            if match:
                return ImageRef(data=base64.b64decode(match.group(1)))
            saw_text = True
    if saw_text:
        raise ImageBackendError(
            "Model returned text instead of image", vendor=_VENDOR
        )
    raise ImageBackendError("No image data found in Gemini response", vendor=_VENDOR)


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, list):
        body = body[0] if body else None
    if not isinstance(body, dict):
        return response.text[:200]
    error = body.get("error", {})
    if isinstance(error, dict):
        return f"{error.get('status', '')} {error.get('message', '')}".strip()
    return str(error)
