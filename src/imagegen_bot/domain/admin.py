"""Admin domain models."""

from enum import Enum


class PendingAction(str, Enum):
    """Admin menu action awaiting a follow-up text reply."""

    NONE = "none"
    AWAITING_ADD_USER = "awaiting_add_user"
    AWAITING_REMOVE_USER = "awaiting_remove_user"
