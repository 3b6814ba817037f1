"""ASGI authentication middleware."""

import json

import structlog
from starlette.types import ASGIApp, Receive, Scope, Send

from quirra.core import redis as redis_state
from quirra.core.exceptions import AppException, TokenRevokedError
from quirra.services.token_service import TokenService, decode_access_token

logger = structlog.get_logger()

PUBLIC_PATHS: set[str] = {
    "",
    "/",
    "/health",
    "/docs",
    "/openapi.json",
    "/redoc",
}

SHARE_PREFIX = "/api/shares/"


def is_public(method: str, path: str) -> bool:
    """Decide whether a request may skip token verification."""
    normalized = path.rstrip("/") or "/"
    if normalized in PUBLIC_PATHS or path.startswith(("/docs", "/redoc")):
        return True
    # Shared conversation snapshots are readable by anyone holding the slug.
    if method == "GET" and normalized.startswith(SHARE_PREFIX):
        slug = normalized[len(SHARE_PREFIX) :]
        return bool(slug) and "/" not in slug
    return False


class AuthMiddleware:
    """Pure ASGI middleware validating Supabase bearer tokens."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "")
        if method == "OPTIONS" or is_public(method, scope["path"]):
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        auth_header = headers.get(b"authorization", b"").decode()

        if not auth_header.startswith("Bearer ") or not auth_header[7:].strip():
            await self._send_error(
                send, 401, "MISSING_TOKEN", "Authorization header required"
            )
            return

        token = auth_header[7:].strip()

        try:
            payload = decode_access_token(token)
        except AppException as exc:
            await self._send_error(send, exc.status_code, exc.code, exc.message)
            return

        client = redis_state.redis_client
        if client is not None and await TokenService(client).is_revoked(payload):
            revoked = TokenRevokedError()
            logger.info("Rejected revoked token", user_id=payload.sub)
            await self._send_error(send, 401, revoked.code, revoked.message)
            return

        scope.setdefault("state", {})
        scope["state"]["user_id"] = payload.sub
        scope["state"]["email"] = payload.email
        scope["state"]["role"] = payload.role
        scope["state"]["exp"] = payload.exp
        scope["state"]["session_id"] = payload.session_id
        scope["state"]["access_token"] = token

        await self.app(scope, receive, send)

    @staticmethod
    async def _send_error(send: Send, status: int, code: str, message: str) -> None:
        """Send a JSON error response directly."""
        body = json.dumps({"status": status, "message": message, "code": code}).encode()

        await send(
            {
                "type": "http.response.start",
                "status": status,
                "headers": [
                    [b"content-type", b"application/json"],
                    [b"content-length", str(len(body)).encode()],
                ],
            }
        )
        await send({"type": "http.response.body", "body": body})
