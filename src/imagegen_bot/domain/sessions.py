"""Domain models for image sessions."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from imagegen_bot.domain.images import ImageRef


class SessionState(Enum):
    """Per-identity state reconstructed from the active session row."""

    NO_ACTIVE_SESSION = "no_active_session"
    ACTIVE_EMPTY = "active_empty"
    ACTIVE_WITH_IMAGE = "active_with_image"


@dataclass(frozen=True)
class SessionRecord:
    """Represents a persisted image session."""

    id: UUID
    user_id: UUID
    telegram_id: int
    last_image_url: str | None
    last_image_base64: str | None
    session_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def has_image(self) -> bool:
        return bool(self.last_image_base64 or self.last_image_url)

    @property
    def last_image(self) -> ImageRef | None:
        """Return the image being iterated on, if any."""
        if not self.has_image:
            return None
        return ImageRef.from_base64(self.last_image_base64, url=self.last_image_url)


def session_state(session: SessionRecord | None) -> SessionState:
    """Derive the routing state for an identity from its active session."""
    if session is None or not session.session_active:
        return SessionState.NO_ACTIVE_SESSION
    if session.has_image:
        return SessionState.ACTIVE_WITH_IMAGE
    return SessionState.ACTIVE_EMPTY
