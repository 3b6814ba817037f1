"""Access token verification and Redis-backed revocation."""

from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

import jwt
import redis.asyncio as redis

from quirra.core.config import settings
from quirra.core.exceptions import InvalidTokenError, TokenExpiredError
from quirra.schemas.auth_schema import TokenPayload

REVOKED_BEFORE_PREFIX = "tokens_revoked_before:"
REVOKED_SESSIONS_PREFIX = "revoked_sessions:"


def decode_access_token(token: str) -> TokenPayload:
    """Verify a Supabase access token and return its claims."""
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.auth.jwt_secret.get_secret_value(),
            algorithms=[settings.auth.algorithm],
            audience=settings.auth.audience,
            options={"require": ["sub", "exp", "iat"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise TokenExpiredError from e
    except jwt.InvalidTokenError as e:
        raise InvalidTokenError from e

    return TokenPayload(
        sub=str(payload["sub"]),
        email=payload.get("email"),
        role=payload.get("role", "authenticated"),
        exp=int(payload["exp"]),
        iat=int(payload["iat"]),
        session_id=payload.get("session_id"),
    )


class TokenService:
    """Track per-user revocation markers in Redis.

    The auth provider owns refresh tokens; access tokens stay valid until
    they expire. A revoke-all request stores the current second so that the
    gateway rejects every access token issued before it. ``iat`` has
    whole-second precision, so a token issued within that same second is
    rejected only when its auth session was one of those revoked.
    """

    def __init__(self, redis_client: redis.Redis) -> None:  # type: ignore[type-arg]
        self._redis = redis_client
        self._ttl = settings.auth.max_token_lifetime_seconds

    async def revoke_all(
        self, user_id: str, session_ids: Iterable[str | None] = ()
    ) -> int:
        """Reject all access tokens issued to the user up to now."""
        now = int(datetime.now(UTC).timestamp())
        sessions_key = f"{REVOKED_SESSIONS_PREFIX}{user_id}"
        revoked = [s for s in session_ids if s]

        async with self._redis.pipeline(transaction=True) as pipe:
            pipe.setex(f"{REVOKED_BEFORE_PREFIX}{user_id}", self._ttl, str(now))
            pipe.delete(sessions_key)
            if revoked:
                pipe.sadd(sessions_key, *revoked)
                pipe.expire(sessions_key, self._ttl)
            await pipe.execute()
        return now

    async def revoked_before(self, user_id: str) -> int | None:
        """Return the revocation marker for a user, if any."""
        result = await self._redis.get(f"{REVOKED_BEFORE_PREFIX}{user_id}")
        return int(result) if result else None

    async def is_revoked(self, payload: TokenPayload) -> bool:
        """Check whether a token predates the user's revocation marker."""
        marker = await self.revoked_before(payload.sub)
        if marker is None or payload.iat > marker:
            return False
        if payload.iat < marker or payload.session_id is None:
            return True
        # Issued in the revocation second: only the sessions revoked then.
        return bool(
            await self._redis.sismember(
                f"{REVOKED_SESSIONS_PREFIX}{payload.sub}", payload.session_id
            )
        )
