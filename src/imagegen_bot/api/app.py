"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Request

from imagegen_bot.api.admin import router as admin_router
from imagegen_bot.api.telegram_models import (
    TelegramCallbackQuery,
    TelegramMessage,
    TelegramPhotoSize,
    TelegramUpdate,
)
from imagegen_bot.app_logging import configure_logging
from imagegen_bot.containers import AppContainer
from imagegen_bot.domain.images import ImageRef
from imagegen_bot.services.admin_menu import ADMIN_CALLBACKS
from imagegen_bot.services.router import GENERIC_FAILURE
from imagegen_bot.telegram_commands import (
    CHAT_MENU_BUTTON,
    BotCommand,
    parse_command,
    telegram_commands,
)
from imagegen_bot.telegram_keyboards import CANCEL_SESSION, START_GENERATION

NO_ACCESS = "You do not have access to this bot."
IMAGE_DOWNLOAD_FAILED = (
    "An error occurred while processing the image. Please try again."
)
START_GENERATION_TEXT = (
    "Send me a prompt to generate an image, "
    "or send an image with a prompt to edit it."
)

logger = logging.getLogger(__name__)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        try:
            await state_container.telegram_client.set_my_commands(
                telegram_commands()
            )
            await state_container.telegram_client.set_chat_menu_button(
                CHAT_MENU_BUTTON
            )
        except Exception:
            logger.exception("Failed to sync Telegram bot commands")
        try:
            await state_container.user_service.ensure_root_admins(
                state_container.root_admin_ids
            )
        except Exception:
            logger.exception("Failed to initialize root admins")
        yield
        await state_container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok", "timestamp": datetime.now(tz=UTC).isoformat()}

    @app.post("/telegram/webhook")
    async def telegram_webhook(
        update: TelegramUpdate, request: Request
    ) -> dict[str, str]:
        """Handle Telegram webhook updates."""
        state_container: AppContainer = request.app.state.container
        try:
            if update.callback_query:
                await _handle_callback(state_container, update.callback_query)
            elif update.message:
                await _handle_message(state_container, update.message)
        except Exception:
            logger.exception(
                "Failed to handle Telegram update",
                extra={"update_id": update.update_id},
            )
            chat_id = _update_chat_id(update)
            if chat_id is not None:
                await _notify_failure(state_container, chat_id)
        return {"status": "ok"}

    return app


async def _handle_message(  # noqa: PLR0911
    container: AppContainer, message: TelegramMessage
) -> None:
    """Dispatch a user message to commands, admin replies or the router."""
    telegram_id = message.from_user.id
    chat_id = message.chat.id
    access = await container.access_policy.check_access(telegram_id)
    if not access.has_access:
        await container.telegram_client.send_message(chat_id=chat_id, text=NO_ACCESS)
        return

    text = message.text
    command = parse_command(text) if text else None
    if command is BotCommand.START:
        await container.start_command_handler.handle(telegram_id, chat_id, access)
        return
    if command is BotCommand.HELP:
        await container.help_command_handler.handle(chat_id)
        return
    if command is BotCommand.CANCEL:
        if access.is_root_admin:
            await container.admin_service.clear_action(telegram_id)
        await container.request_router.cancel(telegram_id, chat_id)
        return
    if text and text.startswith("/"):
        return

    if (
        text
        and access.is_root_admin
        and await container.admin_menu_handler.handle_pending_reply(
            telegram_id, chat_id, text
        )
    ):
        return

    user = await container.user_service.ensure_user(
        telegram_id, is_admin=access.is_root_admin
    )
    if message.photo:
        photo = _select_largest_photo(message.photo)
        try:
            downloaded = await container.telegram_file_client.download_file(
                photo.file_id
            )
        except Exception:
            logger.exception(
                "Failed to download Telegram photo",
                extra={"file_id": photo.file_id},
            )
            await container.telegram_client.send_message(
                chat_id=chat_id, text=IMAGE_DOWNLOAD_FAILED
            )
            return
        await container.request_router.handle_image(
            user, chat_id, ImageRef(data=downloaded.content), message.caption
        )
        return
    if text:
        await container.request_router.handle_text(user, chat_id, text)


async def _handle_callback(
    container: AppContainer, callback: TelegramCallbackQuery
) -> None:
    """Handle inline button presses."""
    telegram_id = callback.from_user.id
    chat_id = callback.message.chat.id if callback.message else telegram_id
    data = callback.data or ""
    access = await container.access_policy.check_access(telegram_id)
    telegram_client = container.telegram_client

    if data in ADMIN_CALLBACKS:
        if not access.is_root_admin:
            await telegram_client.answer_callback_query(
                callback.id,
                text="You do not have permission to access this section.",
                show_alert=True,
            )
            return
        await telegram_client.answer_callback_query(callback.id)
        try:
            await container.admin_menu_handler.handle_callback(
                telegram_id, chat_id, data
            )
        except Exception:
            logger.exception(
                "Admin menu action failed",
                extra={"telegram_id": telegram_id, "action": data},
            )
            await telegram_client.send_message(
                chat_id=chat_id, text="An error occurred. Please try again."
            )
        return

    if not access.has_access:
        await telegram_client.answer_callback_query(
            callback.id, text="You do not have access.", show_alert=True
        )
        return
    await telegram_client.answer_callback_query(callback.id)
    if data == CANCEL_SESSION:
        await container.request_router.cancel(telegram_id, chat_id)
    elif data == START_GENERATION:
        await telegram_client.send_message(chat_id=chat_id, text=START_GENERATION_TEXT)


def _select_largest_photo(photos: list[TelegramPhotoSize]) -> TelegramPhotoSize:
    """Select the largest photo size from the Telegram payload."""
    return max(photos, key=lambda photo: (photo.width * photo.height))


def _update_chat_id(update: TelegramUpdate) -> int | None:
    if update.message:
        return update.message.chat.id
    if update.callback_query:
        callback = update.callback_query
        return callback.message.chat.id if callback.message else callback.from_user.id
    return None


async def _notify_failure(container: AppContainer, chat_id: int) -> None:
    try:
        await container.telegram_client.send_message(
            chat_id=chat_id, text=GENERIC_FAILURE
        )
    except Exception:
        logger.exception("Failed to notify user about an error")
