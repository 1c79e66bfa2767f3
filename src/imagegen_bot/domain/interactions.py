"""Domain models for the interaction audit log."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID


class InteractionType(str, Enum):
    """Kinds of backend requests recorded in history."""

    GENERATE = "generate"
    EDIT = "edit"


@dataclass(frozen=True)
class InteractionRecord:
    """Write-once record of a successful generate or edit request."""

    id: UUID
    user_id: UUID
    telegram_id: int
    session_id: UUID | None
    interaction_type: InteractionType
    prompt: str
    input_image_base64: str | None
    output_image_url: str | None
    output_image_base64: str | None
    created_at: datetime | None = None
