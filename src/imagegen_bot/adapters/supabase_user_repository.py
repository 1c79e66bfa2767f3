"""Supabase-backed user repository."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from imagegen_bot.domain.models import UserRecord
from imagegen_bot.services.users import UserRepository

_COLUMNS = "id, telegram_id, is_active, is_admin, created_at, updated_at"


@dataclass
class SupabaseUserRepository(UserRepository):
    """Supabase implementation for user persistence."""

    client: Client

    def get_by_telegram_id(self, telegram_id: int) -> UserRecord | None:
        """Return the user for a Telegram id, if present."""
        response = (
            self.client.table("users")
            .select(_COLUMNS)
            .eq("telegram_id", telegram_id)
            .limit(1)
            .execute()
        )
        if response.data:
            return _to_user(response.data[0])
        return None

    def create_user(self, telegram_id: int, is_admin: bool) -> UserRecord:
        """Create a new active user row and return it."""
        response = (
            self.client.table("users")
            .insert(
                {"telegram_id": telegram_id, "is_active": True, "is_admin": is_admin}
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create user in Supabase")
        return _to_user(response.data[0])

    def set_active(self, telegram_id: int, is_active: bool) -> UserRecord | None:
        """Update the activation flag; return None when no user matched."""
        response = (
            self.client.table("users")
            .update(
                {
                    "is_active": is_active,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .eq("telegram_id", telegram_id)
            .execute()
        )
        if not response.data:
            return None
        return _to_user(response.data[0])

    def list_users(self) -> list[UserRecord]:
        """Return all users, newest first."""
        response = (
            self.client.table("users")
            .select(_COLUMNS)
            .order("created_at", desc=True)
            .execute()
        )
        return [_to_user(row) for row in response.data or []]

    def upsert_root_admin(self, telegram_id: int) -> None:
        """Create or promote a configured root admin."""
        self.client.table("users").upsert(
            {
                "telegram_id": telegram_id,
                "is_active": True,
                "is_admin": True,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="telegram_id",
        ).execute()


def _to_user(row: dict[str, object]) -> UserRecord:
    return UserRecord(
        id=UUID(str(row["id"])),
        telegram_id=int(row["telegram_id"]),
        is_active=bool(row.get("is_active", False)),
        is_admin=bool(row.get("is_admin", False)),
        created_at=parse_timestamp(row.get("created_at")),
        updated_at=parse_timestamp(row.get("updated_at")),
    )


def parse_timestamp(value: object) -> datetime | None:
    """Parse an ISO timestamp column, tolerating missing values."""
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return None
