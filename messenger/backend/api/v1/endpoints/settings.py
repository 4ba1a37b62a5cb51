"""
Settings Endpoints.
"""

from fastapi import APIRouter

from messenger.backend.core.dependencies import CurrentAccount, DbSession, RequestId
from messenger.backend.schemas.base import ApiResponse, ResponseMetadata
from messenger.backend.schemas.settings import SettingsResponse, SettingsUpdate
from messenger.backend.services.settings import SettingsService

router = APIRouter()


@router.get(
    "",
    response_model=ApiResponse[SettingsResponse],
    summary="Get settings",
)
async def get_settings(
    account: CurrentAccount,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[SettingsResponse]:
    return ApiResponse(
        data=await SettingsService(db).get_settings(account),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.put(
    "",
    response_model=ApiResponse[SettingsResponse],
    summary="Update settings",
)
async def update_settings(
    data: SettingsUpdate,
    account: CurrentAccount,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[SettingsResponse]:
    """Update profile fields. A ``saved_responses`` list replaces the stored one."""
    return ApiResponse(
        data=await SettingsService(db).update_settings(account, data),
        metadata=ResponseMetadata(request_id=request_id),
    )
