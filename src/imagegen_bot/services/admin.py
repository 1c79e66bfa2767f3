"""Admin service for user management and reporting."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from imagegen_bot.domain.admin import PendingAction
from imagegen_bot.domain.interactions import InteractionRecord
from imagegen_bot.domain.models import UserRecord
from imagegen_bot.domain.sessions import SessionRecord
from imagegen_bot.services.interactions import InteractionRepository
from imagegen_bot.services.sessions import SessionRepository
from imagegen_bot.services.users import UserRepository

logger = logging.getLogger(__name__)


class PendingActionRepository(Protocol):
    """Persistence interface for per-identity pending admin actions."""

    def get_pending_action(self, telegram_id: int) -> PendingAction:
        """Return the pending action, or NONE."""

    def set_pending_action(self, telegram_id: int, action: PendingAction) -> None:
        """Replace the pending action for an identity."""

    def clear_pending_action(self, telegram_id: int) -> None:
        """Remove any pending action for an identity."""


@dataclass
class AdminService:
    """Root-admin operations over users, sessions and history."""

    user_repository: UserRepository
    session_repository: SessionRepository
    interaction_repository: InteractionRepository
    pending_action_repository: PendingActionRepository
    root_admin_ids: frozenset[int]

    async def get_pending_action(self, telegram_id: int) -> PendingAction:
        return await asyncio.to_thread(
            self.pending_action_repository.get_pending_action, telegram_id
        )

    async def begin_action(self, telegram_id: int, action: PendingAction) -> None:
        await asyncio.to_thread(
            self.pending_action_repository.set_pending_action, telegram_id, action
        )

    async def clear_action(self, telegram_id: int) -> None:
        await asyncio.to_thread(
            self.pending_action_repository.clear_pending_action, telegram_id
        )

    async def add_user(self, raw_id: str) -> str:
        """Create or re-activate a user and return the outcome message."""
        telegram_id = _parse_telegram_id(raw_id)
        if telegram_id is None:
            return _INVALID_ID
        existing = await asyncio.to_thread(
            self.user_repository.get_by_telegram_id, telegram_id
        )
        if existing:
            await asyncio.to_thread(self.user_repository.set_active, telegram_id, True)
            logger.info("User re-activated", extra={"telegram_id": telegram_id})
            return f"User {telegram_id} already exists and has been activated."
        await asyncio.to_thread(self.user_repository.create_user, telegram_id, False)
        logger.info("User added", extra={"telegram_id": telegram_id})
        return f"User {telegram_id} has been added successfully."

    async def remove_user(self, raw_id: str) -> str:
        """Deactivate a user and return the outcome message."""
        telegram_id = _parse_telegram_id(raw_id)
        if telegram_id is None:
            return _INVALID_ID
        if telegram_id in self.root_admin_ids:
            return "Cannot remove root admin users."
        updated = await asyncio.to_thread(
            self.user_repository.set_active, telegram_id, False
        )
        if updated is None:
            return f"User {telegram_id} not found."
        logger.info("User deactivated", extra={"telegram_id": telegram_id})
        return f"User {telegram_id} has been removed (deactivated) successfully."

    async def list_users(self) -> list[UserRecord]:
        return await asyncio.to_thread(self.user_repository.list_users)

    async def list_sessions(self, limit: int = 20) -> list[SessionRecord]:
        return await asyncio.to_thread(
            self.session_repository.list_recent_sessions, limit
        )

    async def list_interactions(
        self, telegram_id: int, limit: int = 20
    ) -> list[InteractionRecord]:
        return await asyncio.to_thread(
            self.interaction_repository.list_for_user, telegram_id, limit
        )


_INVALID_ID = "Invalid user ID format. Please send a numeric Telegram user ID."


def _parse_telegram_id(raw: str) -> int | None:
    value = raw.strip()
    return int(value) if value.isascii() and value.isdigit() else None


def format_user_list(users: list[UserRecord]) -> str:
    """Format users for a Telegram message."""
    if not users:
        return "No users found."
    lines = ["Users list:", ""]
    for index, user in enumerate(users, start=1):
        created = user.created_at.date().isoformat() if user.created_at else "unknown"
        lines.extend(
            [
                f"{index}. ID: {user.telegram_id}",
                f"   Status: {'Active' if user.is_active else 'Inactive'}",
                f"   Admin: {'Yes' if user.is_admin else 'No'}",
                f"   Created: {created}",
                "",
            ]
        )
    return "\n".join(lines).rstrip()
