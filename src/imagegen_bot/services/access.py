"""Access policy over the static root-admin set and persisted users."""

import asyncio
import logging
from dataclasses import dataclass

from imagegen_bot.services.users import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of an access check for one identity."""

    has_access: bool
    is_root_admin: bool
    is_admin: bool


DENIED = AccessDecision(has_access=False, is_root_admin=False, is_admin=False)


@dataclass
class AccessPolicy:
    """Decides whether an identity may use the bot and with which privileges."""

    repository: UserRepository
    root_admin_ids: frozenset[int]

    async def check_access(self, telegram_id: int) -> AccessDecision:
        """Return the access decision, failing closed on lookup errors."""
        try:
            user = await asyncio.to_thread(
                self.repository.get_by_telegram_id, telegram_id
            )
        except Exception:
            logger.exception(
                "Access lookup failed", extra={"telegram_id": telegram_id}
            )
            return DENIED
        is_root_admin = telegram_id in self.root_admin_ids
        return AccessDecision(
            has_access=is_root_admin or (user is not None and user.is_active),
            is_root_admin=is_root_admin,
            is_admin=user is not None and user.is_admin,
        )
