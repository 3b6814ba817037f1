"""Account and profile API router."""

from typing import Annotated

from fastapi import APIRouter, Depends

from quirra.dependencies import (
    CurrentUser,
    get_account_deletion_service,
    get_account_service,
    get_current_user,
    require_role,
)
from quirra.schemas.account_schema import (
    ChangeEmailRequest,
    DeactivationResponse,
    ProfileResponse,
    UpdateProfileRequest,
)
from quirra.schemas.response_schema import ApiResponse, success_response
from quirra.services.account_service import AccountDeletionService, AccountService

router = APIRouter(
    prefix="/api",
    tags=["account"],
    dependencies=[Depends(require_role("authenticated"))],
)

AccountServiceDep = Annotated[AccountService, Depends(get_account_service)]
AccountDeletionServiceDep = Annotated[
    AccountDeletionService, Depends(get_account_deletion_service)
]
CurrentUserDep = Annotated[CurrentUser, Depends(get_current_user)]


@router.get("/account/profile", response_model=ApiResponse[ProfileResponse])
async def get_profile(service: AccountServiceDep, current_user: CurrentUserDep) -> dict:
    """Return the caller's profile, creating it on first access."""
    profile = await service.get_profile(email=current_user.email)
    return success_response(ProfileResponse.model_validate(profile))


@router.post("/account/update", response_model=ApiResponse[ProfileResponse])
async def update_profile(
    body: UpdateProfileRequest,
    service: AccountServiceDep,
) -> dict:
    """Update profile details and personality preferences."""
    profile = await service.update_profile(body)
    return success_response(
        ProfileResponse.model_validate(profile), message="Profile updated"
    )


@router.post("/account/deactivate", response_model=ApiResponse[DeactivationResponse])
async def deactivate_account(service: AccountServiceDep) -> dict:
    """Schedule the account for deletion after the grace period."""
    deletion_date = await service.deactivate()
    return success_response(
        DeactivationResponse(deletion_date=deletion_date),
        message=(
            "Account deactivated. It will be permanently deleted on "
            f"{deletion_date:%Y-%m-%d} unless you reactivate it."
        ),
    )


@router.post("/account/reactivate", response_model=ApiResponse[None])
async def reactivate_account(service: AccountServiceDep) -> dict:
    """Reactivate a deactivated account."""
    await service.cancel_deletion()
    return success_response(None, message="Account reactivated")


@router.post("/account/cancel-deletion", response_model=ApiResponse[None])
async def cancel_account_deletion(service: AccountServiceDep) -> dict:
    """Cancel a scheduled account deletion."""
    await service.cancel_deletion()
    return success_response(None, message="Account deletion cancelled")


@router.post("/change-email", response_model=ApiResponse[None])
async def change_email(body: ChangeEmailRequest, service: AccountServiceDep) -> dict:
    """Change the sign-in email address."""
    await service.change_email(body.new_email)
    return success_response(None, message="Email updated")


@router.post("/delete-user-account", response_model=ApiResponse[None])
async def delete_user_account(service: AccountDeletionServiceDep) -> dict:
    """Delete the account and all data owned by it."""
    await service.delete_account()
    return success_response(None, message="Account deleted")
