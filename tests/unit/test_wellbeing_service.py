"""Unit tests for WellbeingService and LibraryService."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from quirra.core.exceptions import LibraryItemNotFoundError
from quirra.repositories.library_repo import LibraryRepository
from quirra.repositories.wellbeing_repo import WellbeingRepository
from quirra.schemas.library_schema import CreateLibraryItemRequest
from quirra.services.library_service import LibraryService
from quirra.services.wellbeing_service import WellbeingService, today
from tests.conftest import OTHER_USER_ID, USER_ID


class TestWellbeingService:
    @pytest.fixture
    def service(self, db_session: AsyncSession) -> WellbeingService:
        return WellbeingService(WellbeingRepository(db_session), USER_ID)

    async def test_nothing_logged(self, service: WellbeingService) -> None:
        assert await service.get_today_mood() is None
        assert await service.get_today_focus() is None

    async def test_mood_overwritten_same_day(
        self, service: WellbeingService, db_session: AsyncSession
    ) -> None:
        await service.log_mood("tired", -0.3)
        await service.log_mood("calm", 0.4)

        mood = await service.get_today_mood()
        assert mood is not None
        assert mood.date == today()
        assert (mood.mood_label, mood.sentiment_score) == ("calm", 0.4)
        moods = await WellbeingRepository(db_session).find_moods_since(USER_ID, today())
        assert len(moods) == 1

    async def test_focus_trimmed(self, service: WellbeingService) -> None:
        await service.set_focus("  Finish chapter 3  ")

        focus = await service.get_today_focus()
        assert focus is not None
        assert focus.focus_text == "Finish chapter 3"

    async def test_users_isolated(
        self, service: WellbeingService, db_session: AsyncSession
    ) -> None:
        await WellbeingService(WellbeingRepository(db_session), OTHER_USER_ID).log_mood(
            "happy", 0.8
        )

        assert await service.get_today_mood() is None


class TestLibraryService:
    @pytest.fixture
    def service(self, db_session: AsyncSession) -> LibraryService:
        return LibraryService(LibraryRepository(db_session), USER_ID)

    async def test_create_and_get(self, service: LibraryService) -> None:
        item = await service.create_item(
            CreateLibraryItemRequest(title="Lecture notes", type="note", content="...")
        )

        fetched = await service.get_item(item.id)
        assert fetched.title == "Lecture notes"
        assert fetched.type == "note"

    async def test_type_filter(self, service: LibraryService) -> None:
        await service.create_item(CreateLibraryItemRequest(title="A", type="note"))
        await service.create_item(CreateLibraryItemRequest(title="B", type="image"))

        assert [i.title for i in await service.list_items("image")] == ["B"]
        assert len(await service.list_items()) == 2

    async def test_foreign_item_hidden(
        self, service: LibraryService, db_session: AsyncSession
    ) -> None:
        other = LibraryService(LibraryRepository(db_session), OTHER_USER_ID)
        item = await other.create_item(CreateLibraryItemRequest(title="X", type="file"))

        with pytest.raises(LibraryItemNotFoundError):
            await service.get_item(item.id)
        with pytest.raises(LibraryItemNotFoundError):
            await service.delete_item(item.id)
        assert await service.list_items() == []

    async def test_delete(self, service: LibraryService) -> None:
        item = await service.create_item(CreateLibraryItemRequest(title="A", type="note"))

        await service.delete_item(item.id)

        with pytest.raises(LibraryItemNotFoundError):
            await service.get_item(item.id)
