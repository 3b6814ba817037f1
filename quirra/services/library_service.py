"""Owner-scoped library items."""

import structlog

from quirra.core.exceptions import LibraryItemNotFoundError
from quirra.models.library_item import LibraryItem
from quirra.repositories.library_repo import LibraryRepository
from quirra.schemas.library_schema import CreateLibraryItemRequest

logger = structlog.get_logger()


class LibraryService:
    """CRUD over the user's saved notes, files, projects and images."""

    def __init__(self, library_repo: LibraryRepository, user_id: str) -> None:
        self._library_repo = library_repo
        self._user_id = user_id

    async def list_items(self, item_type: str | None = None) -> list[LibraryItem]:
        return await self._library_repo.find_by_user(self._user_id, item_type)

    async def get_item(self, item_id: str) -> LibraryItem:
        item = await self._library_repo.find_by_id(item_id, self._user_id)
        if item is None:
            raise LibraryItemNotFoundError()
        return item

    async def create_item(self, request: CreateLibraryItemRequest) -> LibraryItem:
        item = await self._library_repo.create(self._user_id, **request.model_dump())
        logger.info("Library item created", user_id=self._user_id, item_id=item.id)
        return item

    async def delete_item(self, item_id: str) -> None:
        if not await self._library_repo.delete(item_id, self._user_id):
            raise LibraryItemNotFoundError()
        logger.info("Library item deleted", user_id=self._user_id, item_id=item_id)
