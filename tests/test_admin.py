"""Tests for admin user management and the admin menu."""

import asyncio

from imagegen_bot.domain.admin import PendingAction
from imagegen_bot.services.admin import AdminService, format_user_list
from imagegen_bot.services.admin_menu import ACTION_FAILED, AdminMenuHandler
from imagegen_bot.telegram_keyboards import (
    ADMIN_ADD_USER,
    ADMIN_BACK,
    ADMIN_LIST_USERS,
    ADMIN_REMOVE_USER,
    admin_keyboard,
    user_management_keyboard,
)
from tests.conftest import (
    ROOT_ADMIN_ID,
    FakeTelegramClient,
    InMemoryPendingActionRepository,
    InMemoryUserRepository,
    make_user,
)


def test_add_user_creates_or_reactivates(
    admin_service: AdminService, user_repository: InMemoryUserRepository
) -> None:
    user_repository.users[42] = make_user(42, is_active=False)

    created = asyncio.run(admin_service.add_user(" 555 "))
    reactivated = asyncio.run(admin_service.add_user("42"))

    assert created == "User 555 has been added successfully."
    assert reactivated == "User 42 already exists and has been activated."
    assert user_repository.users[555].is_active
    assert user_repository.users[42].is_active


def test_add_user_rejects_non_numeric_id(
    admin_service: AdminService, user_repository: InMemoryUserRepository
) -> None:
    result = asyncio.run(admin_service.add_user("@someone"))

    assert result.startswith("Invalid user ID format")
    assert user_repository.users == {}


def test_remove_user_outcomes(
    admin_service: AdminService, user_repository: InMemoryUserRepository
) -> None:
    user_repository.users[42] = make_user(42)

    assert asyncio.run(admin_service.remove_user(str(ROOT_ADMIN_ID))) == (
        "Cannot remove root admin users."
    )
    assert asyncio.run(admin_service.remove_user("43")) == "User 43 not found."
    assert asyncio.run(admin_service.remove_user("42")) == (
        "User 42 has been removed (deactivated) successfully."
    )
    assert not user_repository.users[42].is_active


def test_format_user_list() -> None:
    assert format_user_list([]) == "No users found."

    text = format_user_list([make_user(7), make_user(8, is_active=False)])

    assert "1. ID: 7" in text
    assert "2. ID: 8" in text
    assert "Status: Inactive" in text


def test_add_user_flow_through_menu(
    admin_service: AdminService,
    user_repository: InMemoryUserRepository,
    pending_action_repository: InMemoryPendingActionRepository,
    telegram_client: FakeTelegramClient,
) -> None:
    handler = AdminMenuHandler(admin_service, telegram_client)

    asyncio.run(handler.handle_callback(ROOT_ADMIN_ID, 1, ADMIN_ADD_USER))
    assert pending_action_repository.actions[ROOT_ADMIN_ID] is (
        PendingAction.AWAITING_ADD_USER
    )

    consumed = asyncio.run(handler.handle_pending_reply(ROOT_ADMIN_ID, 1, "777"))

    assert consumed
    assert 777 in user_repository.users
    assert ROOT_ADMIN_ID not in pending_action_repository.actions
    assert telegram_client.messages[-1] == (
        1,
        "User 777 has been added successfully.",
    )
    assert telegram_client.markups[-1] == user_management_keyboard()


def test_remove_user_flow_through_menu(
    admin_service: AdminService,
    user_repository: InMemoryUserRepository,
    telegram_client: FakeTelegramClient,
) -> None:
    user_repository.users[9] = make_user(9)
    handler = AdminMenuHandler(admin_service, telegram_client)

    asyncio.run(handler.handle_callback(ROOT_ADMIN_ID, 1, ADMIN_REMOVE_USER))
    asyncio.run(handler.handle_pending_reply(ROOT_ADMIN_ID, 1, "9"))

    assert not user_repository.users[9].is_active


def test_reply_without_pending_action_is_not_consumed(
    admin_service: AdminService, telegram_client: FakeTelegramClient
) -> None:
    handler = AdminMenuHandler(admin_service, telegram_client)

    consumed = asyncio.run(handler.handle_pending_reply(ROOT_ADMIN_ID, 1, "a cat"))

    assert not consumed
    assert telegram_client.messages == []


def test_list_and_back_callbacks(
    admin_service: AdminService,
    user_repository: InMemoryUserRepository,
    pending_action_repository: InMemoryPendingActionRepository,
    telegram_client: FakeTelegramClient,
) -> None:
    user_repository.users[3] = make_user(3)
    pending_action_repository.actions[ROOT_ADMIN_ID] = PendingAction.AWAITING_ADD_USER
    handler = AdminMenuHandler(admin_service, telegram_client)

    asyncio.run(handler.handle_callback(ROOT_ADMIN_ID, 1, ADMIN_LIST_USERS))
    asyncio.run(handler.handle_callback(ROOT_ADMIN_ID, 1, ADMIN_BACK))

    assert "1. ID: 3" in telegram_client.messages[0][1]
    assert telegram_client.messages[1] == (1, "Main menu:")
    assert telegram_client.markups[1] == admin_keyboard()
    assert ROOT_ADMIN_ID not in pending_action_repository.actions


def test_add_user_rejects_non_ascii_digits(
    admin_service: AdminService, user_repository: InMemoryUserRepository
) -> None:
    result = asyncio.run(admin_service.add_user("²"))

    assert result.startswith("Invalid user ID format")
    assert asyncio.run(admin_service.remove_user("١٢")).startswith(
        "Invalid user ID format"
    )
    assert user_repository.users == {}


def test_failed_admin_action_keeps_pending_action(
    admin_service: AdminService,
    user_repository: InMemoryUserRepository,
    pending_action_repository: InMemoryPendingActionRepository,
    telegram_client: FakeTelegramClient,
) -> None:
    pending_action_repository.actions[ROOT_ADMIN_ID] = PendingAction.AWAITING_ADD_USER
    user_repository.fail_creates = True
    handler = AdminMenuHandler(admin_service, telegram_client)

    consumed = asyncio.run(handler.handle_pending_reply(ROOT_ADMIN_ID, 1, "777"))

    assert consumed
    assert pending_action_repository.actions[ROOT_ADMIN_ID] is (
        PendingAction.AWAITING_ADD_USER
    )
    assert telegram_client.messages == [(1, ACTION_FAILED)]

    user_repository.fail_creates = False
    asyncio.run(handler.handle_pending_reply(ROOT_ADMIN_ID, 1, "777"))

    assert 777 in user_repository.users
    assert ROOT_ADMIN_ID not in pending_action_repository.actions
