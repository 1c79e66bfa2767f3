"""Canonical image payloads exchanged with image backends."""

import base64
from dataclasses import dataclass


@dataclass(frozen=True)
class ImageRef:
    """An image held either as raw bytes or as a retrievable URL."""

    data: bytes | None = None
    url: str | None = None

    @classmethod
    def from_base64(cls, encoded: str | None, url: str | None = None) -> "ImageRef":
        """Build a reference from stored base64 text and/or a URL."""
        data = base64.b64decode(encoded) if encoded else None
        return cls(data=data, url=url or None)

    @property
    def is_empty(self) -> bool:
        return not self.data and not self.url

    @property
    def base64(self) -> str | None:
        if not self.data:
            return None
        return base64.b64encode(self.data).decode("ascii")

    @property
    def mime_type(self) -> str:
        return detect_mime_type(self.data or b"")


class ImageBackendError(Exception):
    """Failure reported by an image backend adapter."""

    def __init__(
        self, message: str, *, status_code: int | None = None, vendor: str = ""
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.vendor = vendor


def detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
