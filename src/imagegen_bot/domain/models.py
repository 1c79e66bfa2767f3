"""Domain models for bot users."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class UserRecord:
    """Represents a bot user stored in the database."""

    id: UUID
    telegram_id: int
    is_active: bool
    is_admin: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None
