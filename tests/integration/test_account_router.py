"""Integration tests for account and profile endpoints."""

from datetime import UTC, datetime, timedelta

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from quirra.core.config import settings
from quirra.repositories.chat_repo import ChatRepository
from quirra.repositories.library_repo import LibraryRepository
from quirra.repositories.profile_repo import ProfileRepository
from quirra.services.token_service import TokenService
from tests.conftest import OTHER_USER_ID, USER_EMAIL, USER_ID, AuthProviderStub


class TestProfile:
    """Tests for profile read and update."""

    async def test_created_on_first_read(self, authed_client: AsyncClient) -> None:
        resp = await authed_client.get("/api/account/profile")

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["id"] == USER_ID
        assert data["email"] == USER_EMAIL
        assert data["is_pending_deletion"] is False

    async def test_partial_update(self, authed_client: AsyncClient) -> None:
        await authed_client.post(
            "/api/account/update", json={"full_name": "Ada Lovelace", "region": "UK"}
        )

        resp = await authed_client.post(
            "/api/account/update", json={"learning_style": "visual"}
        )

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["full_name"] == "Ada Lovelace"
        assert data["learning_style"] == "visual"
        assert resp.json()["message"] == "Profile updated"

    async def test_unknown_preference_rejected(self, authed_client: AsyncClient) -> None:
        resp = await authed_client.post(
            "/api/account/update", json={"learning_style": "telepathic"}
        )
        assert resp.status_code == 400
        assert resp.json()["code"] == "VALIDATION_ERROR"


class TestDeactivation:
    """Tests for deactivate, reactivate and cancel-deletion."""

    async def test_deactivate_then_reactivate(self, authed_client: AsyncClient) -> None:
        resp = await authed_client.post("/api/account/deactivate")

        assert resp.status_code == 200
        deletion_date = resp.json()["data"]["deletion_date"]
        assert deletion_date[:10] in resp.json()["message"]
        profile = (await authed_client.get("/api/account/profile")).json()["data"]
        assert profile["is_pending_deletion"] is True

        resp = await authed_client.post("/api/account/reactivate")

        assert resp.json()["message"] == "Account reactivated"
        profile = (await authed_client.get("/api/account/profile")).json()["data"]
        assert profile["is_pending_deletion"] is False
        assert profile["deletion_date"] is None

    async def test_cancel_deletion(self, authed_client: AsyncClient) -> None:
        await authed_client.post("/api/account/deactivate")

        resp = await authed_client.post("/api/account/cancel-deletion")

        assert resp.status_code == 200
        profile = (await authed_client.get("/api/account/profile")).json()["data"]
        assert profile["is_pending_deletion"] is False

    async def test_grace_period(self, authed_client: AsyncClient) -> None:
        resp = await authed_client.post("/api/account/deactivate")

        deletion_date = datetime.fromisoformat(resp.json()["data"]["deletion_date"])
        expected = datetime.now(UTC) + timedelta(days=settings.app.deletion_grace_days)
        assert abs(deletion_date - expected) < timedelta(minutes=1)


class TestChangeEmail:
    async def test_provider_and_profile_updated(
        self, authed_client: AsyncClient, auth_provider: AuthProviderStub
    ) -> None:
        resp = await authed_client.post(
            "/api/change-email", json={"newEmail": "New@Example.com"}
        )

        assert resp.status_code == 200
        assert auth_provider.paths() == [f"PUT /auth/v1/admin/users/{USER_ID}"]
        profile = (await authed_client.get("/api/account/profile")).json()["data"]
        assert profile["email"] == "new@example.com"

    async def test_provider_rejection(
        self, authed_client: AsyncClient, auth_provider: AuthProviderStub
    ) -> None:
        auth_provider.respond(
            "PUT", f"/admin/users/{USER_ID}", 422, {"msg": "Email address already registered"}
        )

        resp = await authed_client.post(
            "/api/change-email", json={"newEmail": "taken@example.com"}
        )

        assert resp.status_code == 502
        assert resp.json()["message"] == "Email address already registered"

    async def test_invalid_email(self, authed_client: AsyncClient) -> None:
        resp = await authed_client.post("/api/change-email", json={"newEmail": "nope"})
        assert resp.status_code == 400


class TestDeleteUserAccount:
    async def test_rows_removed_and_token_revoked(
        self,
        authed_client: AsyncClient,
        auth_provider: AuthProviderStub,
        db_session: AsyncSession,
        token_service: TokenService,
    ) -> None:
        chat_repo = ChatRepository(db_session)
        await chat_repo.create_session("mine", USER_ID)
        await chat_repo.create_message(USER_ID, "mine", "user", "hello")
        await chat_repo.create_session("theirs", OTHER_USER_ID)
        await ProfileRepository(db_session).upsert(USER_ID, full_name="Ada")
        await LibraryRepository(db_session).create(USER_ID, title="Notes", type="note")
        await db_session.commit()

        resp = await authed_client.post("/api/delete-user-account")

        assert resp.status_code == 200
        assert auth_provider.paths() == [f"DELETE /auth/v1/admin/users/{USER_ID}"]
        assert await token_service.revoked_before(USER_ID) is not None
        db_session.expire_all()
        assert await chat_repo.find_session_by_id("mine") is None
        assert await chat_repo.find_session_by_id("theirs") is not None
        assert await ProfileRepository(db_session).find_by_id(USER_ID) is None
        assert await LibraryRepository(db_session).find_by_user(USER_ID) == []

        resp = await authed_client.get("/api/account/profile")
        assert resp.status_code == 401
        assert resp.json()["code"] == "TOKEN_REVOKED"

    async def test_provider_failure_keeps_data(
        self,
        authed_client: AsyncClient,
        auth_provider: AuthProviderStub,
        db_session: AsyncSession,
    ) -> None:
        await ChatRepository(db_session).create_session("mine", USER_ID)
        await ProfileRepository(db_session).upsert(USER_ID, full_name="Ada")
        await LibraryRepository(db_session).create(USER_ID, title="Notes", type="note")
        await db_session.commit()
        auth_provider.respond("DELETE", f"/admin/users/{USER_ID}", 500, {"msg": "boom"})

        resp = await authed_client.post("/api/delete-user-account")

        assert resp.status_code == 502
        db_session.expire_all()
        assert await ChatRepository(db_session).find_session_by_id("mine") is not None
        assert await ProfileRepository(db_session).find_by_id(USER_ID) is not None
        assert len(await LibraryRepository(db_session).find_by_user(USER_ID)) == 1

        resp = await authed_client.get("/api/account/profile")
        assert resp.status_code == 200
