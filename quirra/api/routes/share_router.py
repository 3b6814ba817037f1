"""Share link API router."""

from typing import Annotated

from fastapi import APIRouter, Depends

from quirra.dependencies import CurrentUser, get_share_service, require_role
from quirra.schemas.response_schema import ApiResponse, success_response
from quirra.schemas.share_schema import (
    CreateShareRequest,
    ShareLinkApiResponse,
    ShareSnapshot,
)
from quirra.services.share_service import ShareService

router = APIRouter(prefix="/api/shares", tags=["shares"])

ShareServiceDep = Annotated[ShareService, Depends(get_share_service)]
OwnerDep = Annotated[CurrentUser, Depends(require_role("authenticated"))]


@router.post("", response_model=ShareLinkApiResponse, status_code=201)
async def create_share(
    body: CreateShareRequest,
    service: ShareServiceDep,
    owner: OwnerDep,
) -> dict:
    """Publish a snapshot of one of the caller's conversations."""
    link = await service.create_share(owner.id, body)
    return success_response(
        link, status=201, message="Share link created", slug=link.slug, url=link.url
    )


@router.get("/{slug}", response_model=ApiResponse[ShareSnapshot])
async def open_share(slug: str, service: ShareServiceDep) -> dict:
    """Public: return a shared snapshot and count the view."""
    snapshot = await service.open_share(slug)
    return success_response(snapshot)


@router.delete("/{slug}/revoke", response_model=ApiResponse[None])
async def revoke_share(
    slug: str,
    service: ShareServiceDep,
    owner: OwnerDep,
) -> dict:
    """Disable a share link owned by the caller."""
    await service.revoke_share(owner.id, slug)
    return success_response(None, message="Share link revoked")
