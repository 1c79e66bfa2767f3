"""Append-only interaction history."""

import asyncio
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from imagegen_bot.domain.images import ImageRef
from imagegen_bot.domain.interactions import InteractionRecord, InteractionType
from imagegen_bot.domain.sessions import SessionRecord


class InteractionRepository(Protocol):
    """Persistence interface for interaction records."""

    def create_interaction(  # noqa: PLR0913
        self,
        user_id: UUID,
        telegram_id: int,
        session_id: UUID | None,
        interaction_type: InteractionType,
        prompt: str,
        input_image_base64: str | None,
        output_image_url: str | None,
        output_image_base64: str | None,
    ) -> InteractionRecord:
        """Insert an interaction row and return it."""

    def list_for_user(self, telegram_id: int, limit: int) -> list[InteractionRecord]:
        """Return the most recent interactions for an identity."""


@dataclass
class InteractionLog:
    """Write-only audit log of successful generate and edit calls."""

    repository: InteractionRepository

    async def record(
        self,
        session: SessionRecord,
        interaction_type: InteractionType,
        prompt: str,
        output: ImageRef,
        input_image: ImageRef | None = None,
    ) -> InteractionRecord:
        """Append one interaction for the given session."""
        return await asyncio.to_thread(
            self.repository.create_interaction,
            session.user_id,
            session.telegram_id,
            session.id,
            interaction_type,
            prompt,
            input_image.base64 if input_image else None,
            output.url,
            output.base64,
        )