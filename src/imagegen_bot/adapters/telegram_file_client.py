"""Telegram file download client."""

from dataclasses import dataclass
from typing import Protocol

import httpx


@dataclass(frozen=True)
class TelegramFile:
    """Downloaded Telegram file contents and its server-side path."""

    file_path: str
    content: bytes


class TelegramFileClient(Protocol):
    """Interface for downloading Telegram files."""

    async def download_file(self, file_id: str) -> TelegramFile:
        """Resolve a Telegram file id and download its contents."""


@dataclass
class HttpxTelegramFileClient(TelegramFileClient):
    """Telegram file client using httpx."""

    bot_token: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, bot_token: str) -> "HttpxTelegramFileClient":
        """Create a Telegram file client with a managed httpx session."""
        return cls(bot_token=bot_token, http_client=httpx.AsyncClient())

    async def download_file(self, file_id: str) -> TelegramFile:
        """Look up the file path via getFile and fetch the bytes."""
        response = await self.http_client.get(
            f"https://api.telegram.org/bot{self.bot_token}/getFile",
            params={"file_id": file_id},
            timeout=10,
        )
        response.raise_for_status()
        payload = response.json()
        if not payload.get("ok"):
            raise RuntimeError(f"Telegram getFile failed for {file_id}")
        file_path = payload["result"]["file_path"]
        file_response = await self.http_client.get(
            f"https://api.telegram.org/file/bot{self.bot_token}/{file_path}",
            timeout=30,
        )
        file_response.raise_for_status()
        return TelegramFile(file_path=file_path, content=file_response.content)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
