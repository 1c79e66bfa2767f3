"""Inline keyboards and their callback data."""

CANCEL_SESSION = "session:cancel"
START_GENERATION = "menu:start_generation"
ADMIN_USERS = "admin:users"
ADMIN_ADD_USER = "admin:add_user"
ADMIN_REMOVE_USER = "admin:remove_user"
ADMIN_LIST_USERS = "admin:list_users"
ADMIN_BACK = "admin:back"


def inline_keyboard(buttons: list[tuple[str, str]]) -> dict:
    """Build a Telegram inline keyboard payload with one button per row."""
    return {
        "inline_keyboard": [
            [{"text": label, "callback_data": callback}] for label, callback in buttons
        ]
    }


def cancel_session_keyboard() -> dict:
    return inline_keyboard([("Cancel session", CANCEL_SESSION)])


def admin_keyboard() -> dict:
    return inline_keyboard(
        [
            ("User management", ADMIN_USERS),
            ("Start image generation", START_GENERATION),
        ]
    )


def user_management_keyboard() -> dict:
    return inline_keyboard(
        [
            ("Add user", ADMIN_ADD_USER),
            ("Remove user", ADMIN_REMOVE_USER),
            ("List users", ADMIN_LIST_USERS),
            ("Back to main menu", ADMIN_BACK),
        ]
    )
