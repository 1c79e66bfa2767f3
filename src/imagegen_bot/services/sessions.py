"""Session store: at most one active image session per identity."""

import asyncio
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from imagegen_bot.domain.images import ImageRef
from imagegen_bot.domain.sessions import SessionRecord


class SessionRepository(Protocol):
    """Persistence interface for image sessions."""

    def get_active_session(self, telegram_id: int) -> SessionRecord | None:
        """Return the active session for an identity, if present."""

    def start_session(self, user_id: UUID, telegram_id: int) -> SessionRecord:
        """Deactivate any active session and insert a new one atomically."""

    def update_last_image(
        self, session_id: UUID, image_url: str | None, image_base64: str | None
    ) -> SessionRecord:
        """Attach the latest image to a session and return it."""

    def cancel_session(self, session_id: UUID) -> None:
        """Mark a single session inactive."""

    def cancel_active_sessions(self, telegram_id: int) -> int:
        """Mark every active session of an identity inactive."""

    def list_recent_sessions(self, limit: int) -> list[SessionRecord]:
        """Return recently updated sessions."""


@dataclass
class SessionStore:
    """Async facade running session persistence off the event loop."""

    repository: SessionRepository

    async def get_active(self, telegram_id: int) -> SessionRecord | None:
        return await asyncio.to_thread(self.repository.get_active_session, telegram_id)

    async def start(self, user_id: UUID, telegram_id: int) -> SessionRecord:
        return await asyncio.to_thread(
            self.repository.start_session, user_id, telegram_id
        )

    async def attach_image(self, session_id: UUID, image: ImageRef) -> SessionRecord:
        return await asyncio.to_thread(
            self.repository.update_last_image, session_id, image.url, image.base64
        )

    async def cancel(self, session_id: UUID) -> None:
        await asyncio.to_thread(self.repository.cancel_session, session_id)

    async def cancel_active(self, telegram_id: int) -> bool:
        """Cancel the identity's active session; return whether one existed."""
        canceled = await asyncio.to_thread(
            self.repository.cancel_active_sessions, telegram_id
        )
        return canceled > 0
