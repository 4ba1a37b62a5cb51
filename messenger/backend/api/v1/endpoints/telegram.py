"""
Telegram Link Endpoints.
"""

from fastapi import APIRouter

from messenger.backend.core.dependencies import CurrentAccount, DbSession, RequestId
from messenger.backend.schemas.base import ApiResponse, OkResult, ResponseMetadata
from messenger.backend.schemas.telegram import TelegramConnectResponse
from messenger.backend.services.telegram_link import TelegramLinkService

router = APIRouter()


@router.post(
    "/connect",
    response_model=ApiResponse[TelegramConnectResponse],
    summary="Issue a Telegram link",
)
async def connect(
    account: CurrentAccount,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[TelegramConnectResponse]:
    """Return a deep link that binds the opening chat to this account."""
    service = TelegramLinkService(db)
    token, expires_at = await service.issue(account.id)
    return ApiResponse(
        data=TelegramConnectResponse(url=service.connect_url(token), expires_at=expires_at),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.delete(
    "/disconnect",
    response_model=ApiResponse[OkResult],
    summary="Unlink Telegram",
)
async def disconnect(
    account: CurrentAccount,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[OkResult]:
    await TelegramLinkService(db).unbind(account.id)
    return ApiResponse(data=OkResult(), metadata=ResponseMetadata(request_id=request_id))
