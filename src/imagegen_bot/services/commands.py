"""Command handlers for Telegram updates."""

from dataclasses import dataclass

from imagegen_bot.adapters.telegram_client import TelegramClient
from imagegen_bot.services.access import AccessDecision
from imagegen_bot.services.users import UserService
from imagegen_bot.telegram_keyboards import admin_keyboard

WELCOME_ROOT_ADMIN = "Welcome! You are a root admin. Choose an option:"
WELCOME_USER = (
    "Welcome! Send me a prompt to generate an image, "
    "or send an image with a prompt to edit it."
)
HELP_TEXT = (
    "How it works:\n"
    "- Send a text prompt to generate a new image.\n"
    "- Send another prompt to edit the last image.\n"
    "- Send a photo (optionally with a caption) to edit your own image.\n"
    "- Send /cancel to start over."
)


@dataclass
class StartCommandHandler:
    """Handle the /start Telegram command."""

    user_service: UserService
    telegram_client: TelegramClient

    async def handle(
        self, telegram_id: int, chat_id: int, access: AccessDecision
    ) -> None:
        """Create the user if needed and send a welcome message."""
        await self.user_service.ensure_user(
            telegram_id, is_admin=access.is_root_admin
        )
        if access.is_root_admin:
            await self.telegram_client.send_message(
                chat_id=chat_id,
                text=WELCOME_ROOT_ADMIN,
                reply_markup=admin_keyboard(),
            )
            return
        await self.telegram_client.send_message(chat_id=chat_id, text=WELCOME_USER)


@dataclass
class HelpCommandHandler:
    """Handle the /help Telegram command."""

    telegram_client: TelegramClient

    async def handle(self, chat_id: int) -> None:
        await self.telegram_client.send_message(chat_id=chat_id, text=HELP_TEXT)
