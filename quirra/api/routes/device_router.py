"""Remembered device and login session API router."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from quirra.dependencies import (
    get_access_token,
    get_client_ip,
    get_device_service,
    get_session_service,
    require_role,
)
from quirra.schemas.device_schema import (
    DeviceResponse,
    RegisterDeviceRequest,
    RevokeAllResponse,
    RevokeSessionRequest,
    UserSessionResponse,
)
from quirra.schemas.response_schema import ApiResponse, success_response
from quirra.services.device_service import DeviceService, SessionService

router = APIRouter(
    prefix="/api",
    tags=["devices"],
    dependencies=[Depends(require_role("authenticated"))],
)

DeviceServiceDep = Annotated[DeviceService, Depends(get_device_service)]
SessionServiceDep = Annotated[SessionService, Depends(get_session_service)]
AccessTokenDep = Annotated[str, Depends(get_access_token)]
ClientIpDep = Annotated[str | None, Depends(get_client_ip)]


@router.get("/devices", response_model=ApiResponse[list[DeviceResponse]])
async def list_devices(service: DeviceServiceDep) -> dict:
    """List remembered devices, most recently used first."""
    devices = await service.list_devices()
    return success_response([DeviceResponse.model_validate(d) for d in devices])


@router.post("/devices", response_model=ApiResponse[DeviceResponse], status_code=201)
async def register_device(
    request: Request,
    body: RegisterDeviceRequest,
    service: DeviceServiceDep,
    client_ip: ClientIpDep,
) -> dict:
    """Remember the device making this request."""
    device = await service.register_device(
        name=body.device_name,
        user_agent=request.headers.get("user-agent"),
        ip_address=client_ip,
    )
    return success_response(
        DeviceResponse.model_validate(device), status=201, message="Device registered"
    )


@router.delete("/devices", response_model=ApiResponse[None])
async def remove_device(
    service: DeviceServiceDep,
    device_id: int = Query(alias="id"),
) -> dict:
    """Forget a remembered device."""
    await service.remove_device(device_id)
    return success_response(None, message="Device removed")


@router.get("/sessions", response_model=ApiResponse[list[UserSessionResponse]])
async def list_sessions(service: SessionServiceDep) -> dict:
    """List active sign-ins, most recently active first."""
    sessions = await service.list_sessions()
    return success_response([UserSessionResponse.model_validate(s) for s in sessions])


@router.put("/sessions", response_model=ApiResponse[UserSessionResponse])
async def record_session(
    request: Request,
    service: SessionServiceDep,
    client_ip: ClientIpDep,
) -> dict:
    """Record activity for the current user agent."""
    user_session = await service.record_activity(
        user_agent=request.headers.get("user-agent"),
        ip_address=client_ip,
    )
    return success_response(UserSessionResponse.model_validate(user_session))


@router.post("/sessions", response_model=ApiResponse[None])
async def revoke_session(
    body: RevokeSessionRequest,
    service: SessionServiceDep,
    access_token: AccessTokenDep,
) -> dict:
    """Remove a sign-in and sign out the user's other sessions."""
    signed_out = await service.revoke_session(body.session_id, access_token)
    message = (
        "Session revoked"
        if signed_out
        else "Session removed, but other devices could not be signed out"
    )
    return success_response(None, message=message)


@router.post("/sessions/revoke-all", response_model=ApiResponse[RevokeAllResponse])
async def revoke_all_sessions(
    service: SessionServiceDep,
    access_token: AccessTokenDep,
) -> dict:
    """Sign out everywhere, including this session."""
    revoked_before = await service.revoke_all(access_token)
    return success_response(
        RevokeAllResponse(revoked_before=revoked_before),
        message="All sessions revoked",
    )
