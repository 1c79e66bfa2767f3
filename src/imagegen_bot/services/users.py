"""User-related business logic."""

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from imagegen_bot.domain.models import UserRecord

logger = logging.getLogger(__name__)


class UserRepository(Protocol):
    """Persistence interface for user data."""

    def get_by_telegram_id(self, telegram_id: int) -> UserRecord | None:
        """Return the user for a Telegram id, if present."""

    def create_user(self, telegram_id: int, is_admin: bool) -> UserRecord:
        """Create and return a new active user record."""

    def set_active(self, telegram_id: int, is_active: bool) -> UserRecord | None:
        """Toggle the activation flag and return the updated user."""

    def list_users(self) -> list[UserRecord]:
        """Return all users, newest first."""

    def upsert_root_admin(self, telegram_id: int) -> None:
        """Create or promote a user to an active admin."""


@dataclass
class UserService:
    """Application service for user lifecycle actions."""

    repository: UserRepository

    async def ensure_user(self, telegram_id: int, is_admin: bool = False) -> UserRecord:
        """Ensure a user exists for the Telegram id and return it."""
        existing = await asyncio.to_thread(
            self.repository.get_by_telegram_id, telegram_id
        )
        if existing:
            return existing
        logger.info("Creating user", extra={"telegram_id": telegram_id})
        return await asyncio.to_thread(
            self.repository.create_user, telegram_id, is_admin
        )

    async def ensure_root_admins(self, telegram_ids: Iterable[int]) -> None:
        """Persist the configured root admins as active admins."""
        for telegram_id in sorted(telegram_ids):
            await asyncio.to_thread(self.repository.upsert_root_admin, telegram_id)
        logger.info("Root admins initialized")
