"""Root-admin menu driven by inline buttons and follow-up replies."""

import logging
from dataclasses import dataclass

from imagegen_bot.adapters.telegram_client import TelegramClient
from imagegen_bot.domain.admin import PendingAction
from imagegen_bot.services.admin import AdminService, format_user_list
from imagegen_bot.telegram_keyboards import (
    ADMIN_ADD_USER,
    ADMIN_BACK,
    ADMIN_LIST_USERS,
    ADMIN_REMOVE_USER,
    ADMIN_USERS,
    admin_keyboard,
    user_management_keyboard,
)

logger = logging.getLogger(__name__)

ACTION_FAILED = (
    "An error occurred while updating the user. Send the user ID again to retry."
)

ADMIN_CALLBACKS = frozenset(
    {ADMIN_USERS, ADMIN_ADD_USER, ADMIN_REMOVE_USER, ADMIN_LIST_USERS, ADMIN_BACK}
)


@dataclass
class AdminMenuHandler:
    """Route admin menu callbacks and consume pending admin replies."""

    admin_service: AdminService
    telegram_client: TelegramClient

    async def handle_callback(self, telegram_id: int, chat_id: int, data: str) -> None:
        """Handle an admin menu button press from a root admin."""
        if data == ADMIN_USERS:
            await self._send_with_menu(
                chat_id, "User management:\n\nChoose an option:"
            )
        elif data == ADMIN_ADD_USER:
            await self.admin_service.begin_action(
                telegram_id, PendingAction.AWAITING_ADD_USER
            )
            await self.telegram_client.send_message(
                chat_id=chat_id,
                text=(
                    "To add a user, please send their Telegram user ID.\n\n"
                    "You can get a user ID by forwarding a message from them "
                    "to @userinfobot."
                ),
            )
        elif data == ADMIN_REMOVE_USER:
            await self.admin_service.begin_action(
                telegram_id, PendingAction.AWAITING_REMOVE_USER
            )
            await self.telegram_client.send_message(
                chat_id=chat_id,
                text="To remove a user, please send their Telegram user ID.",
            )
        elif data == ADMIN_LIST_USERS:
            users = await self.admin_service.list_users()
            await self._send_with_menu(chat_id, format_user_list(users))
        elif data == ADMIN_BACK:
            await self.admin_service.clear_action(telegram_id)
            await self.telegram_client.send_message(
                chat_id=chat_id, text="Main menu:", reply_markup=admin_keyboard()
            )

    async def handle_pending_reply(
        self, telegram_id: int, chat_id: int, text: str
    ) -> bool:
        """Consume a reply to a pending admin action; return whether one existed."""
        action = await self.admin_service.get_pending_action(telegram_id)
        if action is PendingAction.NONE:
            return False
        try:
            if action is PendingAction.AWAITING_ADD_USER:
                result = await self.admin_service.add_user(text)
            else:
                result = await self.admin_service.remove_user(text)
        except Exception:
            logger.exception(
                "Admin action failed",
                extra={"telegram_id": telegram_id, "action": action.value},
            )
            await self._send_with_menu(chat_id, ACTION_FAILED)
            return True
        await self.admin_service.clear_action(telegram_id)
        logger.info(
            "Admin action completed",
            extra={"telegram_id": telegram_id, "action": action.value},
        )
        await self._send_with_menu(chat_id, result)
        return True

    async def _send_with_menu(self, chat_id: int, text: str) -> None:
        await self.telegram_client.send_message(
            chat_id=chat_id, text=text, reply_markup=user_management_keyboard()
        )
