"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from imagegen_bot.adapters.gemini_image_client import HttpxGeminiImageClient
from imagegen_bot.adapters.openai_image_client import OpenAIImageClient
from imagegen_bot.adapters.supabase_interaction_repository import (
    SupabaseInteractionRepository,
)
from imagegen_bot.adapters.supabase_pending_action_repository import (
    SupabasePendingActionRepository,
)
from imagegen_bot.adapters.supabase_session_repository import (
    SupabaseSessionRepository,
)
from imagegen_bot.adapters.supabase_user_repository import SupabaseUserRepository
from imagegen_bot.adapters.telegram_client import (
    HttpxTelegramClient,
    TelegramClient,
)
from imagegen_bot.adapters.telegram_file_client import (
    HttpxTelegramFileClient,
    TelegramFileClient,
)
from imagegen_bot.config import Settings, parse_root_admin_ids
from imagegen_bot.services.access import AccessPolicy
from imagegen_bot.services.admin import AdminService
from imagegen_bot.services.admin_menu import AdminMenuHandler
from imagegen_bot.services.commands import HelpCommandHandler, StartCommandHandler
from imagegen_bot.services.interactions import InteractionLog
from imagegen_bot.services.router import RequestRouter
from imagegen_bot.services.sessions import SessionStore
from imagegen_bot.services.users import UserService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    root_admin_ids: frozenset[int]
    telegram_client: TelegramClient
    telegram_file_client: TelegramFileClient
    user_service: UserService
    access_policy: AccessPolicy
    session_store: SessionStore
    interaction_log: InteractionLog
    request_router: RequestRouter
    admin_service: AdminService
    admin_menu_handler: AdminMenuHandler
    start_command_handler: StartCommandHandler
    help_command_handler: HelpCommandHandler
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    root_admin_ids = parse_root_admin_ids(resolved_settings.root_admin_ids)
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    user_repository = SupabaseUserRepository(supabase_client)
    session_repository = SupabaseSessionRepository(supabase_client)
    interaction_repository = SupabaseInteractionRepository(supabase_client)
    pending_action_repository = SupabasePendingActionRepository(supabase_client)

    telegram_client = HttpxTelegramClient.create(resolved_settings.telegram_bot_token)
    telegram_file_client = HttpxTelegramFileClient.create(
        resolved_settings.telegram_bot_token
    )
    image_backend = _build_image_backend(resolved_settings)

    user_service = UserService(user_repository)
    session_store = SessionStore(session_repository)
    interaction_log = InteractionLog(interaction_repository)
    request_router = RequestRouter(
        session_store=session_store,
        interaction_log=interaction_log,
        image_backend=image_backend,
        telegram_client=telegram_client,
    )
    admin_service = AdminService(
        user_repository=user_repository,
        session_repository=session_repository,
        interaction_repository=interaction_repository,
        pending_action_repository=pending_action_repository,
        root_admin_ids=root_admin_ids,
    )

    async def close_resources() -> None:
        await telegram_client.close()
        await telegram_file_client.close()
        await image_backend.close()

    return AppContainer(
        settings=resolved_settings,
        root_admin_ids=root_admin_ids,
        telegram_client=telegram_client,
        telegram_file_client=telegram_file_client,
        user_service=user_service,
        access_policy=AccessPolicy(user_repository, root_admin_ids),
        session_store=session_store,
        interaction_log=interaction_log,
        request_router=request_router,
        admin_service=admin_service,
        admin_menu_handler=AdminMenuHandler(admin_service, telegram_client),
        start_command_handler=StartCommandHandler(user_service, telegram_client),
        help_command_handler=HelpCommandHandler(telegram_client),
        close_resources=close_resources,
    )


def _build_image_backend(
    settings: Settings,
) -> HttpxGeminiImageClient | OpenAIImageClient:
    """Create the configured image backend."""
    backend = settings.image_backend.strip().lower()
    if backend == "openai":
        if not settings.openai_api_key:
            raise RuntimeError("OPENAI_API_KEY is required for the openai backend")
        return OpenAIImageClient.create(
            api_key=settings.openai_api_key,
            model=settings.openai_image_model,
            timeout=settings.backend_timeout_seconds,
        )
    if backend == "gemini":
        if not settings.gemini_api_key:
            raise RuntimeError("GEMINI_API_KEY is required for the gemini backend")
        return HttpxGeminiImageClient.create(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            base_url=settings.gemini_base_url,
            timeout=settings.backend_timeout_seconds,
        )
    raise RuntimeError(f"Unknown image backend: {settings.image_backend}")

