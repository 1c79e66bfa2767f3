"""Supabase-backed image session repository."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from imagegen_bot.adapters.supabase_user_repository import parse_timestamp
from imagegen_bot.domain.sessions import SessionRecord
from imagegen_bot.services.sessions import SessionRepository

_COLUMNS = (
    "id, user_id, telegram_id, last_image_url, last_image_base64, "
    "session_active, created_at, updated_at"
)


@dataclass
class SupabaseSessionRepository(SessionRepository):
    """Supabase implementation for image sessions."""

    client: Client

    def get_active_session(self, telegram_id: int) -> SessionRecord | None:
        """Return the active session for an identity, if present."""
        response = (
            self.client.table("image_sessions")
            .select(_COLUMNS)
            .eq("telegram_id", telegram_id)
            .eq("session_active", True)
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _to_session(response.data[0])

    def start_session(self, user_id: UUID, telegram_id: int) -> SessionRecord:
        """Supersede any active session and create a new one in one transaction."""
        response = self.client.rpc(
            "start_image_session",
            {"p_user_id": str(user_id), "p_telegram_id": telegram_id},
        ).execute()
        data = response.data
        row = data[0] if isinstance(data, list) and data else data
        if not isinstance(row, dict):
            raise RuntimeError("Failed to start image session")
        return _to_session(row)

    def update_last_image(
        self, session_id: UUID, image_url: str | None, image_base64: str | None
    ) -> SessionRecord:
        """Attach the latest image to a session and return the updated row."""
        response = (
            self.client.table("image_sessions")
            .update(
                {
                    "last_image_url": image_url,
                    "last_image_base64": image_base64,
                    "updated_at": _now(),
                }
            )
            .eq("id", str(session_id))
            .execute()
        )
        if not response.data:
            raise RuntimeError(f"Session {session_id} not found")
        return _to_session(response.data[0])

    def cancel_session(self, session_id: UUID) -> None:
        """Mark a single session inactive."""
        self.client.table("image_sessions").update(
            {"session_active": False, "updated_at": _now()}
        ).eq("id", str(session_id)).execute()

    def cancel_active_sessions(self, telegram_id: int) -> int:
        """Mark every active session of an identity inactive."""
        response = (
            self.client.table("image_sessions")
            .update({"session_active": False, "updated_at": _now()})
            .eq("telegram_id", telegram_id)
            .eq("session_active", True)
            .execute()
        )
        return len(response.data or [])

    def list_recent_sessions(self, limit: int) -> list[SessionRecord]:
        """Return recently updated sessions without image payloads."""
        response = (
            self.client.table("image_sessions")
            .select(
                "id, user_id, telegram_id, last_image_url, session_active, "
                "created_at, updated_at"
            )
            .order("updated_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_to_session(row) for row in response.data or []]


def _now() -> str:
    return datetime.now(tz=UTC).isoformat()


def _to_session(row: dict[str, object]) -> SessionRecord:
    return SessionRecord(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        telegram_id=int(row["telegram_id"]),
        last_image_url=row.get("last_image_url") or None,
        last_image_base64=row.get("last_image_base64") or None,
        session_active=bool(row.get("session_active", False)),
        created_at=parse_timestamp(row.get("created_at")),
        updated_at=parse_timestamp(row.get("updated_at")),
    )
