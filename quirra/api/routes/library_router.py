"""Library API router."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from quirra.dependencies import get_library_service, require_role
from quirra.schemas.library_schema import (
    CreateLibraryItemRequest,
    LibraryItemResponse,
    LibraryItemType,
)
from quirra.schemas.response_schema import ApiResponse, success_response
from quirra.services.library_service import LibraryService

router = APIRouter(
    prefix="/api/library",
    tags=["library"],
    dependencies=[Depends(require_role("authenticated"))],
)

LibraryServiceDep = Annotated[LibraryService, Depends(get_library_service)]


@router.get("", response_model=ApiResponse[list[LibraryItemResponse]])
async def list_library_items(
    service: LibraryServiceDep,
    item_type: LibraryItemType | None = Query(default=None, alias="type"),
) -> dict:
    """List the caller's items, newest first."""
    items = await service.list_items(item_type)
    return success_response([LibraryItemResponse.model_validate(i) for i in items])


@router.get("/{item_id}", response_model=ApiResponse[LibraryItemResponse])
async def get_library_item(item_id: str, service: LibraryServiceDep) -> dict:
    item = await service.get_item(item_id)
    return success_response(LibraryItemResponse.model_validate(item))


@router.post("", response_model=ApiResponse[LibraryItemResponse], status_code=201)
async def create_library_item(
    body: CreateLibraryItemRequest,
    service: LibraryServiceDep,
) -> dict:
    item = await service.create_item(body)
    return success_response(
        LibraryItemResponse.model_validate(item), status=201, message="Item saved"
    )


@router.delete("/{item_id}", response_model=ApiResponse[None])
async def delete_library_item(item_id: str, service: LibraryServiceDep) -> dict:
    await service.delete_item(item_id)
    return success_response(None, message="Item deleted")
