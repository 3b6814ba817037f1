"""Security settings and recovery email API router."""

from typing import Annotated

from fastapi import APIRouter, Depends

from quirra.dependencies import get_security_service, require_role
from quirra.schemas.response_schema import ApiResponse, success_response
from quirra.schemas.security_schema import (
    RecoverySendRequest,
    RecoveryVerifyRequest,
    SecurityActionRequest,
    SecurityFieldUpdate,
    SecuritySettingsResponse,
)
from quirra.services.security_service import SecurityService

router = APIRouter(
    prefix="/api",
    tags=["security"],
    dependencies=[Depends(require_role("authenticated"))],
)

SecurityServiceDep = Annotated[SecurityService, Depends(get_security_service)]


@router.get("/security/codes", response_model=ApiResponse[SecuritySettingsResponse])
async def get_security_settings(service: SecurityServiceDep) -> dict:
    """Return two-factor settings and backup codes."""
    security = await service.get_settings()
    return success_response(SecuritySettingsResponse.model_validate(security))


@router.post("/security/codes", response_model=ApiResponse[SecuritySettingsResponse])
async def run_security_action(
    body: SecurityActionRequest,
    service: SecurityServiceDep,
) -> dict:
    """Regenerate backup codes, set the two-factor method or save a recovery email."""
    security = await service.handle_action(body)
    return success_response(
        SecuritySettingsResponse.model_validate(security),
        message="Security settings updated",
    )


@router.patch("/security/codes", response_model=ApiResponse[SecuritySettingsResponse])
async def update_security_field(
    body: SecurityFieldUpdate,
    service: SecurityServiceDep,
) -> dict:
    """Set a single client-writable security field."""
    security = await service.update_field(body.field, body.value)
    return success_response(
        SecuritySettingsResponse.model_validate(security),
        message="Security settings updated",
    )


@router.post("/recovery/send", response_model=ApiResponse[None])
async def send_recovery_code(
    body: RecoverySendRequest,
    service: SecurityServiceDep,
) -> dict:
    """Email a verification code for a new recovery address."""
    await service.send_recovery_code(body.email)
    return success_response(None, message="Verification code sent")


@router.post("/recovery/verify", response_model=ApiResponse[SecuritySettingsResponse])
async def verify_recovery_code(
    body: RecoveryVerifyRequest,
    service: SecurityServiceDep,
) -> dict:
    """Confirm the recovery address with the emailed code."""
    security = await service.verify_recovery_code(body.email, body.code)
    return success_response(
        SecuritySettingsResponse.model_validate(security),
        message="Recovery email verified",
    )
