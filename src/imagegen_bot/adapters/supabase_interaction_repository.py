"""Supabase repository for the interaction history."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from imagegen_bot.adapters.supabase_user_repository import parse_timestamp
from imagegen_bot.domain.interactions import InteractionRecord, InteractionType
from imagegen_bot.services.interactions import InteractionRepository


@dataclass
class SupabaseInteractionRepository(InteractionRepository):
    """Supabase-backed append-only interaction log."""

    client: Client

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
        response = (
            self.client.table("interactions")
            .insert(
                {
                    "user_id": str(user_id),
                    "telegram_id": telegram_id,
                    "session_id": str(session_id) if session_id else None,
                    "interaction_type": interaction_type.value,
                    "prompt": prompt,
                    "input_image_base64": input_image_base64,
                    "output_image_url": output_image_url,
                    "output_image_base64": output_image_base64,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to record interaction")
        return _to_interaction(response.data[0])

    def list_for_user(self, telegram_id: int, limit: int) -> list[InteractionRecord]:
        """Return recent interactions for an identity without image payloads."""
        response = (
            self.client.table("interactions")
            .select(
                "id, user_id, telegram_id, session_id, interaction_type, prompt, "
                "output_image_url, created_at"
            )
            .eq("telegram_id", telegram_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_to_interaction(row) for row in response.data or []]


def _to_interaction(row: dict[str, object]) -> InteractionRecord:
    session_id = row.get("session_id")
    return InteractionRecord(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        telegram_id=int(row["telegram_id"]),
        session_id=UUID(str(session_id)) if session_id else None,
        interaction_type=InteractionType(row["interaction_type"]),
        prompt=str(row.get("prompt") or ""),
        input_image_base64=row.get("input_image_base64"),
        output_image_url=row.get("output_image_url"),
        output_image_base64=row.get("output_image_base64"),
        created_at=parse_timestamp(row.get("created_at")),
    )
