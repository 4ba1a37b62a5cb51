"""
Message Endpoints.
"""

from fastapi import APIRouter

from messenger.backend.core.dependencies import CurrentAccount, DbSession, RequestId
from messenger.backend.schemas.base import ApiResponse, ResponseMetadata
from messenger.backend.schemas.message import MessageCreate, MessageResponse
from messenger.backend.services.message import MessageService

router = APIRouter()


@router.get(
    "/{client_id}",
    response_model=ApiResponse[list[MessageResponse]],
    summary="List a client's messages",
)
async def list_messages(
    client_id: str,
    account: CurrentAccount,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[list[MessageResponse]]:
    messages = await MessageService(db).list_messages(account, client_id)
    return ApiResponse(
        data=[MessageResponse.model_validate(m) for m in messages],
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.post(
    "",
    response_model=ApiResponse[MessageResponse],
    status_code=201,
    summary="Log a message",
)
async def create_message(
    data: MessageCreate,
    account: CurrentAccount,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[MessageResponse]:
    """
    Append a message to a client thread.

    Returns 429 with code LIMIT_EXCEEDED when the client's message ceiling is reached.
    """
    message, decision = await MessageService(db).add_message(
        account, data.client_id, data.direction, data.text,
    )
    decision.raise_if_denied()
    return ApiResponse(
        data=MessageResponse.model_validate(message),
        metadata=ResponseMetadata(request_id=request_id),
    )
