"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status

if TYPE_CHECKING:
    from imagegen_bot.containers import AppContainer
    from imagegen_bot.domain.interactions import InteractionRecord
    from imagegen_bot.domain.models import UserRecord
    from imagegen_bot.domain.sessions import SessionRecord

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.get("/users", dependencies=[Depends(require_admin)])
async def list_users(request: Request) -> dict[str, object]:
    """Return all bot users."""
    container: AppContainer = request.app.state.container
    users = await container.admin_service.list_users()
    return {
        "users": [_serialize_user(user, container.root_admin_ids) for user in users]
    }


@router.get("/sessions", dependencies=[Depends(require_admin)])
async def list_sessions(
    request: Request, limit: int = Query(default=20, ge=1, le=200)
) -> dict[str, object]:
    """Return recently updated image sessions."""
    container: AppContainer = request.app.state.container
    sessions = await container.admin_service.list_sessions(limit)
    return {"sessions": [_serialize_session(session) for session in sessions]}


@router.get(
    "/users/{telegram_id}/interactions", dependencies=[Depends(require_admin)]
)
async def list_interactions(
    telegram_id: int, request: Request, limit: int = Query(default=20, ge=1, le=200)
) -> dict[str, object]:
    """Return the generate/edit history of a user."""
    container: AppContainer = request.app.state.container
    interactions = await container.admin_service.list_interactions(telegram_id, limit)
    return {
        "telegram_id": telegram_id,
        "interactions": [_serialize_interaction(item) for item in interactions],
    }


def _serialize_user(
    user: UserRecord, root_admin_ids: frozenset[int]
) -> dict[str, object]:
    return {
        "id": str(user.id),
        "telegram_id": user.telegram_id,
        "is_active": user.is_active,
        "is_admin": user.is_admin,
        "is_root_admin": user.telegram_id in root_admin_ids,
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }


def _serialize_session(session: SessionRecord) -> dict[str, object]:
    return {
        "id": str(session.id),
        "telegram_id": session.telegram_id,
        "session_active": session.session_active,
        "last_image_url": session.last_image_url,
        "updated_at": session.updated_at.isoformat() if session.updated_at else None,
    }


def _serialize_interaction(interaction: InteractionRecord) -> dict[str, object]:
    return {
        "id": str(interaction.id),
        "session_id": str(interaction.session_id) if interaction.session_id else None,
        "interaction_type": interaction.interaction_type.value,
        "prompt": interaction.prompt,
        "output_image_url": interaction.output_image_url,
        "created_at": (
            interaction.created_at.isoformat() if interaction.created_at else None
        ),
    }
