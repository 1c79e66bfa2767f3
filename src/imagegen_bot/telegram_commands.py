"""Telegram bot command configuration."""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class TelegramCommand:
    """Declarative bot command definition."""

    command: str
    description: str

    @property
    def text(self) -> str:
        return f"/{self.command}"


class BotCommand(Enum):
    """Enum of bot commands (single source of truth)."""

    START = TelegramCommand("start", "Welcome message and admin menu")
    CANCEL = TelegramCommand("cancel", "Cancel the active image session")
    HELP = TelegramCommand("help", "How to generate and edit images")


def telegram_commands() -> list[dict[str, str]]:
    """Return commands formatted for Telegram API."""
    return [
        {"command": entry.value.command, "description": entry.value.description}
        for entry in BotCommand
    ]


def parse_command(text: str) -> BotCommand | None:
    """Match a message like ``/start`` or ``/start@my_bot`` to a command."""
    if not text.startswith("/"):
        return None
    head = text.split(maxsplit=1)[0].split("@", maxsplit=1)[0]
    for entry in BotCommand:
        if head == entry.value.text:
            return entry
    return None


CHAT_MENU_BUTTON: dict[str, object] = {"type": "commands"}
