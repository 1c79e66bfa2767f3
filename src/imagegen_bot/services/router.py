"""Request routing for image sessions.

Each inbound message is interpreted against the identity's active session:

* no active session, or an active session without an image: start a fresh
  session and generate from the prompt;
* an active session with an image: edit that image with the prompt;
* an uploaded image: attach it to the (possibly new) session and, when a
  caption is present, edit it right away.

A failed backend call cancels the session so the next message starts fresh.
Only successful calls are written to the interaction log.
"""

import logging
from dataclasses import dataclass
from typing import Protocol

from imagegen_bot.adapters.telegram_client import TelegramClient
from imagegen_bot.domain.images import ImageRef
from imagegen_bot.domain.interactions import InteractionType
from imagegen_bot.domain.models import UserRecord
from imagegen_bot.domain.sessions import SessionRecord, SessionState, session_state
from imagegen_bot.services.error_classifier import (
    ImageOperation,
    classify_error,
    format_failure_message,
)
from imagegen_bot.services.interactions import InteractionLog
from imagegen_bot.services.sessions import SessionStore
from imagegen_bot.telegram_keyboards import cancel_session_keyboard

logger = logging.getLogger(__name__)

_CAPTION_LIMIT = 1024

GENERATING_NOTICE = "Generating image... Please wait."
EDITING_NOTICE = "Editing image... Please wait."
IMAGE_RECEIVED = "Image received! Now send me a prompt to edit this image."
NO_PREVIOUS_IMAGE = (
    "No previous image found.\n\n"
    "Please send a new image or start a new generation by sending a prompt."
)
SESSION_CANCELED = (
    "Session canceled. You can now start a new image generation or editing session."
)
NO_ACTIVE_SESSION = "No active session to cancel."
GENERIC_FAILURE = (
    "An error occurred while processing your request.\n\nPlease try again."
)


class ImageBackend(Protocol):
    """Interface for image generation backends."""

    async def generate_image(self, prompt: str) -> ImageRef:
        """Produce a new image from a text prompt."""

    async def edit_image(self, image: ImageRef, prompt: str) -> ImageRef:
        """Produce a new image from a prior image and a text prompt."""


@dataclass
class RequestRouter:
    """Decides between generate and edit and drives the session lifecycle."""

    session_store: SessionStore
    interaction_log: InteractionLog
    image_backend: ImageBackend
    telegram_client: TelegramClient

    async def handle_text(self, user: UserRecord, chat_id: int, prompt: str) -> None:
        """Handle a text prompt from a user."""
        try:
            session = await self.session_store.get_active(user.telegram_id)
            state = session_state(session)
            if state is SessionState.ACTIVE_WITH_IMAGE and session is not None:
                await self._edit(chat_id, session, prompt)
                return
            if state is SessionState.ACTIVE_EMPTY:
                logger.info(
                    "Active session has no image, starting a new generation",
                    extra={"telegram_id": user.telegram_id},
                )
            session = await self.session_store.start(user.id, user.telegram_id)
            await self._generate(chat_id, session, prompt)
        except Exception:
            logger.exception(
                "Failed to handle text prompt",
                extra={"telegram_id": user.telegram_id},
            )
            await self._recover(user.telegram_id, chat_id)

    async def handle_image(
        self,
        user: UserRecord,
        chat_id: int,
        image: ImageRef,
        caption: str | None = None,
    ) -> None:
        """Attach an uploaded image to the session, editing it if captioned."""
        try:
            session = await self.session_store.get_active(user.telegram_id)
            if session is None:
                session = await self.session_store.start(user.id, user.telegram_id)
            session = await self.session_store.attach_image(session.id, image)
            prompt = (caption or "").strip()
            if prompt:
                await self._edit(chat_id, session, prompt)
                return
            await self.telegram_client.send_message(
                chat_id=chat_id, text=IMAGE_RECEIVED
            )
        except Exception:
            logger.exception(
                "Failed to handle uploaded image",
                extra={"telegram_id": user.telegram_id},
            )
            await self._recover(user.telegram_id, chat_id)

    async def cancel(self, telegram_id: int, chat_id: int) -> bool:
        """Cancel the active session; return whether one was active."""
        try:
            canceled = await self.session_store.cancel_active(telegram_id)
        except Exception:
            logger.exception(
                "Failed to cancel session", extra={"telegram_id": telegram_id}
            )
            await self._notify_failure(telegram_id, chat_id)
            return False
        await self.telegram_client.send_message(
            chat_id=chat_id,
            text=SESSION_CANCELED if canceled else NO_ACTIVE_SESSION,
        )
        return canceled

    async def _generate(
        self, chat_id: int, session: SessionRecord, prompt: str
    ) -> None:
        await self.telegram_client.send_message(chat_id=chat_id, text=GENERATING_NOTICE)
        try:
            output = await self.image_backend.generate_image(prompt)
        except Exception as exc:
            await self._fail(chat_id, session, exc, ImageOperation.GENERATE)
            return
        await self._complete(
            chat_id,
            session,
            InteractionType.GENERATE,
            prompt,
            output,
            caption=_caption("Generated image for", prompt),
        )

    async def _edit(self, chat_id: int, session: SessionRecord, prompt: str) -> None:
        prior = session.last_image
        if prior is None or prior.is_empty:
            logger.warning(
                "Edit requested without a prior image",
                extra={"telegram_id": session.telegram_id},
            )
            await self._cancel_quietly(session.telegram_id)
            await self.telegram_client.send_message(
                chat_id=chat_id, text=NO_PREVIOUS_IMAGE
            )
            return
        await self.telegram_client.send_message(chat_id=chat_id, text=EDITING_NOTICE)
        try:
            output = await self.image_backend.edit_image(prior, prompt)
        except Exception as exc:
            await self._fail(chat_id, session, exc, ImageOperation.EDIT)
            return
        await self._complete(
            chat_id,
            session,
            InteractionType.EDIT,
            prompt,
            output,
            caption=_caption("Edited image with", prompt),
            input_image=prior,
        )

    async def _complete(  # noqa: PLR0913
        self,
        chat_id: int,
        session: SessionRecord,
        interaction_type: InteractionType,
        prompt: str,
        output: ImageRef,
        caption: str,
        input_image: ImageRef | None = None,
    ) -> None:
        await self.session_store.attach_image(session.id, output)
        await self.interaction_log.record(
            session, interaction_type, prompt, output, input_image=input_image
        )
        await self.telegram_client.send_photo(
            chat_id=chat_id,
            image=output,
            caption=caption,
            reply_markup=cancel_session_keyboard(),
        )

    async def _fail(
        self,
        chat_id: int,
        session: SessionRecord,
        exc: Exception,
        operation: ImageOperation,
    ) -> None:
        classification = classify_error(exc)
        logger.warning(
            "Image %s failed: %s",
            operation.value,
            classification.kind.value,
            extra={
                "telegram_id": session.telegram_id,
                "session_id": str(session.id),
                "error": repr(exc),
                "retryable": classification.retryable,
            },
        )
        try:
            await self.session_store.cancel(session.id)
        except Exception:
            logger.exception(
                "Failed to cancel session after backend error",
                extra={"session_id": str(session.id)},
            )
        await self.telegram_client.send_message(
            chat_id=chat_id,
            text=format_failure_message(classification, operation),
        )

    async def _cancel_quietly(self, telegram_id: int) -> None:
        try:
            await self.session_store.cancel_active(telegram_id)
        except Exception:
            logger.exception(
                "Failed to cancel session", extra={"telegram_id": telegram_id}
            )

    async def _recover(self, telegram_id: int, chat_id: int) -> None:
        await self._cancel_quietly(telegram_id)
        await self._notify_failure(telegram_id, chat_id)

    async def _notify_failure(self, telegram_id: int, chat_id: int) -> None:
        try:
            await self.telegram_client.send_message(
                chat_id=chat_id, text=GENERIC_FAILURE
            )
        except Exception:
            logger.exception(
                "Failed to notify user about an error",
                extra={"telegram_id": telegram_id},
            )


def _caption(prefix: str, prompt: str) -> str:
    """Build a photo caption within Telegram's length limit."""
    caption = f'{prefix}: "{prompt}"'
    if len(caption) <= _CAPTION_LIMIT:
        return caption
    return caption[: _CAPTION_LIMIT - 4] + '..."'
