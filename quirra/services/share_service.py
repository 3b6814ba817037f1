"""Public share links for conversation snapshots."""

import secrets
import string
from datetime import UTC, datetime

import structlog

from quirra.core.exceptions import SessionNotFoundError, ShareGoneError, ShareNotFoundError
from quirra.core.settings import AppConfig
from quirra.models.share import Share
from quirra.repositories.chat_repo import ChatRepository
from quirra.repositories.share_repo import ShareRepository
from quirra.schemas.share_schema import (
    CreateShareRequest,
    SharedMessage,
    ShareLinkResponse,
    ShareSnapshot,
)

logger = structlog.get_logger()

BASE62_ALPHABET = string.digits + string.ascii_uppercase + string.ascii_lowercase
SLUG_BYTES = 8
DEFAULT_SHARE_TITLE = "Conversation"


def encode_base62(data: bytes) -> str:
    """Big-endian base62 rendering of ``data``."""
    number = int.from_bytes(data, "big")
    if number == 0:
        return BASE62_ALPHABET[0]
    digits: list[str] = []
    while number:
        number, remainder = divmod(number, 62)
        digits.append(BASE62_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_slug() -> str:
    return encode_base62(secrets.token_bytes(SLUG_BYTES))


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timezone-aware columns back naive.
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def check_share_access(share: Share, now: datetime) -> None:
    """Raise ShareGoneError if the link may no longer be opened."""
    if share.revoked:
        raise ShareGoneError("This link has been revoked.")
    if share.expire_at is not None and _as_utc(share.expire_at) < now:
        raise ShareGoneError("This link has expired.")
    if share.max_views and (share.view_count or 0) >= share.max_views:
        raise ShareGoneError("View limit reached.")


class ShareService:
    """Creates, opens and revokes share links."""

    def __init__(
        self,
        share_repo: ShareRepository,
        chat_repo: ChatRepository,
        app_config: AppConfig,
    ) -> None:
        self._share_repo = share_repo
        self._chat_repo = chat_repo
        self._app_config = app_config

    async def create_share(
        self, owner_user_id: str, request: CreateShareRequest
    ) -> ShareLinkResponse:
        """Snapshot an owned conversation and publish it under a fresh slug."""
        session = await self._chat_repo.find_session_by_id(request.conversation_id)
        if session is None or session.user_id != owner_user_id:
            raise SessionNotFoundError()

        messages = await self._chat_repo.find_messages_by_session_id(session.id)
        snapshot = ShareSnapshot(
            conversation_id=session.id,
            title=session.title or DEFAULT_SHARE_TITLE,
            shared_at=datetime.now(UTC),
            messages=[
                SharedMessage(
                    id=m.id,
                    role=m.role,
                    content=m.content,
                    created_at=m.created_at,
                )
                for m in messages
            ],
        )

        slug = generate_slug()
        await self._share_repo.create(
            conversation_id=session.id,
            owner_user_id=owner_user_id,
            slug=slug,
            snapshot=snapshot.model_dump(mode="json"),
            expire_at=request.expire_at,
            max_views=request.max_views,
        )
        logger.info(
            "Share created",
            slug=slug,
            conversation_id=session.id,
            message_count=len(messages),
        )
        return ShareLinkResponse(slug=slug, url=self._app_config.share_url(slug))

    async def open_share(self, slug: str) -> ShareSnapshot:
        """Return the snapshot behind a slug and count the view."""
        share = await self._share_repo.find_by_slug(slug)
        if share is None:
            raise ShareNotFoundError()
        check_share_access(share, datetime.now(UTC))
        await self._share_repo.record_view(share)
        return ShareSnapshot.model_validate(share.snapshot)

    async def revoke_share(self, owner_user_id: str, slug: str) -> None:
        """Disable one of the caller's links."""
        if not await self._share_repo.revoke(slug, owner_user_id):
            raise ShareNotFoundError()
        logger.info("Share revoked", slug=slug)
