"""Telegram Bot API client adapter."""

import json
from dataclasses import dataclass
from typing import Protocol

import httpx

from imagegen_bot.domain.images import ImageRef

_API_BASE = "https://api.telegram.org"


class TelegramClient(Protocol):
    """Interface for Telegram API interactions."""

    async def send_message(
        self, chat_id: int, text: str, reply_markup: dict | None = None
    ) -> None:
        """Send a text message to a Telegram chat."""

    async def send_photo(
        self,
        chat_id: int,
        image: ImageRef,
        caption: str | None = None,
        reply_markup: dict | None = None,
    ) -> None:
        """Send an image, uploading bytes or passing a URL through."""

    async def answer_callback_query(
        self, callback_query_id: str, text: str | None = None, show_alert: bool = False
    ) -> None:
        """Answer a Telegram callback query."""

    async def set_my_commands(self, commands: list[dict[str, str]]) -> None:
        """Set the bot command list."""

    async def set_chat_menu_button(
        self, menu_button: dict[str, object] | None = None
    ) -> None:
        """Set the chat menu button."""


@dataclass
class HttpxTelegramClient:
    """Telegram client implemented with httpx."""

    bot_token: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, bot_token: str) -> "HttpxTelegramClient":
        """Create a Telegram client with a managed httpx session."""
        return cls(bot_token=bot_token, http_client=httpx.AsyncClient())

    async def send_message(
        self, chat_id: int, text: str, reply_markup: dict | None = None
    ) -> None:
        """Send a message using Telegram's sendMessage API."""
        payload: dict[str, object] = {"chat_id": chat_id, "text": text}
        if reply_markup is not None:
            payload["reply_markup"] = reply_markup
        await self._post_json("sendMessage", payload)

    async def send_photo(
        self,
        chat_id: int,
        image: ImageRef,
        caption: str | None = None,
        reply_markup: dict | None = None,
    ) -> None:
        """Send a photo; bytes go as multipart upload, URLs as JSON."""
        if image.data:
            form: dict[str, str] = {"chat_id": str(chat_id)}
            if caption is not None:
                form["caption"] = caption
            if reply_markup is not None:
                form["reply_markup"] = json.dumps(reply_markup)
            extension = image.mime_type.split("/")[-1]
            response = await self.http_client.post(
                self._method_url("sendPhoto"),
                data=form,
                files={"photo": (f"image.{extension}", image.data, image.mime_type)},
                timeout=30,
            )
            response.raise_for_status()
            return
        if not image.url:
            raise ValueError("Cannot send an empty image")
        payload: dict[str, object] = {"chat_id": chat_id, "photo": image.url}
        if caption is not None:
            payload["caption"] = caption
        if reply_markup is not None:
            payload["reply_markup"] = reply_markup
        await self._post_json("sendPhoto", payload)

    async def answer_callback_query(
        self, callback_query_id: str, text: str | None = None, show_alert: bool = False
    ) -> None:
        """Answer a callback query using Telegram's API."""
        payload: dict[str, object] = {"callback_query_id": callback_query_id}
        if text is not None:
            payload["text"] = text
            payload["show_alert"] = show_alert
        await self._post_json("answerCallbackQuery", payload)

    async def set_my_commands(self, commands: list[dict[str, str]]) -> None:
        """Set the bot command list."""
        await self._post_json("setMyCommands", {"commands": commands})

    async def set_chat_menu_button(
        self, menu_button: dict[str, object] | None = None
    ) -> None:
        """Set the chat menu button."""
        await self._post_json(
            "setChatMenuButton", {"menu_button": menu_button or {"type": "commands"}}
        )

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()

    def _method_url(self, method: str) -> str:
        return f"{_API_BASE}/bot{self.bot_token}/{method}"

    async def _post_json(self, method: str, payload: dict[str, object]) -> None:
        response = await self.http_client.post(
            self._method_url(method), json=payload, timeout=10
        )
        response.raise_for_status()
