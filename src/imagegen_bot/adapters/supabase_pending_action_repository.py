"""Supabase repository for pending admin menu actions."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from imagegen_bot.domain.admin import PendingAction
from imagegen_bot.services.admin import PendingActionRepository


@dataclass
class SupabasePendingActionRepository(PendingActionRepository):
    """Stores at most one pending admin action per identity."""

    client: Client

    def get_pending_action(self, telegram_id: int) -> PendingAction:
        """Return the pending action, or NONE."""
        response = (
            self.client.table("pending_admin_actions")
            .select("action")
            .eq("telegram_id", telegram_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return PendingAction.NONE
        try:
            return PendingAction(response.data[0]["action"])
        except ValueError:
            return PendingAction.NONE

    def set_pending_action(self, telegram_id: int, action: PendingAction) -> None:
        """Replace the pending action for an identity."""
        if action is PendingAction.NONE:
            self.clear_pending_action(telegram_id)
            return
        self.client.table("pending_admin_actions").upsert(
            {
                "telegram_id": telegram_id,
                "action": action.value,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="telegram_id",
        ).execute()

    def clear_pending_action(self, telegram_id: int) -> None:
        """Remove any pending action for an identity."""
        self.client.table("pending_admin_actions").delete().eq(
            "telegram_id", telegram_id
        ).execute()
