"""HTTP client for the Supabase auth (GoTrue) admin and user APIs."""

from typing import Any, Literal

import httpx
import structlog

from quirra.core.exceptions import AuthProviderError
from quirra.core.settings import SupabaseConfig

logger = structlog.get_logger()

SignOutScope = Literal["global", "local", "others"]


class SupabaseAuthClient:
    """Calls the auth provider on behalf of the backend.

    Admin calls authenticate with the service role key. User calls (sign
    out) carry the user's own access token. A fresh ``httpx.AsyncClient`` is
    opened per call; ``transport`` lets tests plug in ``httpx.MockTransport``.
    """

    def __init__(
        self,
        config: SupabaseConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport

    async def update_user_email(self, user_id: str, new_email: str) -> None:
        """Change a user's sign-in email."""
        await self._request(
            "PUT",
            f"/admin/users/{user_id}",
            json={"email": new_email},
            headers=self._service_headers(),
        )

    async def delete_user(self, user_id: str) -> None:
        """Delete a user from the auth provider."""
        await self._request(
            "DELETE",
            f"/admin/users/{user_id}",
            headers=self._service_headers(),
        )

    async def sign_out(self, access_token: str, scope: SignOutScope = "global") -> None:
        """Invalidate the refresh tokens of the token owner's sessions."""
        await self._request(
            "POST",
            "/logout",
            params={"scope": scope},
            headers=self._user_headers(access_token),
        )

    async def send_email_otp(self, email: str) -> None:
        """Email a one-time verification code."""
        await self._request(
            "POST",
            "/otp",
            json={"email": email, "create_user": False},
            headers=self._anon_headers(),
        )

    async def verify_email_otp(self, email: str, code: str) -> bool:
        """Check a one-time code. Returns False when the provider rejects it."""
        response = await self._send(
            "POST",
            "/verify",
            json={"type": "email", "email": email, "token": code},
            headers=self._anon_headers(),
        )
        if response.is_success:
            return True
        if response.is_client_error:
            return False
        raise self._error(response)

    def _service_headers(self) -> dict[str, str]:
        key = self._config.service_role_key.get_secret_value()
        return {"apikey": key, "Authorization": f"Bearer {key}"}

    def _anon_headers(self) -> dict[str, str]:
        return {"apikey": self._config.anon_key.get_secret_value()}

    def _user_headers(self, access_token: str) -> dict[str, str]:
        return {
            "apikey": self._config.anon_key.get_secret_value(),
            "Authorization": f"Bearer {access_token}",
        }

    async def _request(self, method: str, path: str, **kwargs: Any) -> None:
        response = await self._send(method, path, **kwargs)
        if not response.is_success:
            raise self._error(response)

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        if not self._config.url:
            raise AuthProviderError("Auth provider is not configured")
        try:
            async with httpx.AsyncClient(
                base_url=self._config.auth_url,
                timeout=self._config.timeout_seconds,
                transport=self._transport,
            ) as client:
                return await client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("Auth provider unreachable", path=path, error=str(exc))
            raise AuthProviderError("Auth provider is unavailable") from exc

    @staticmethod
    def _error(response: httpx.Response) -> AuthProviderError:
        message = response.reason_phrase or "Auth provider error"
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = str(
                body.get("msg")
                or body.get("message")
                or body.get("error_description")
                or message
            )
        logger.warning(
            "Auth provider rejected request",
            path=response.request.url.path,
            status_code=response.status_code,
            error=message,
        )
        return AuthProviderError(message)
