"""
Usage Endpoint.
"""

from fastapi import APIRouter

from messenger.backend.core.dependencies import CurrentAccount, DbSession, RequestId
from messenger.backend.repositories.client import ClientRepository
from messenger.backend.schemas.base import ApiResponse, ResponseMetadata
from messenger.backend.schemas.usage import UsageCounter, UsageResponse
from messenger.backend.services.usage import UsageLedger

router = APIRouter()


@router.get(
    "",
    response_model=ApiResponse[UsageResponse],
    summary="Usage for the current month",
)
async def get_usage(
    account: CurrentAccount,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[UsageResponse]:
    snapshot = await UsageLedger(db).get_usage(account)
    client_count = await ClientRepository(db).count_for_account(account.id)
    return ApiResponse(
        data=UsageResponse(
            plan=snapshot.plan,
            month=snapshot.month,
            reset_at=snapshot.reset_at,
            ai_respond=UsageCounter(used=snapshot.counts["ai_respond"], limit=snapshot.limits["ai_respond"]),
            ai_improve=UsageCounter(used=snapshot.counts["ai_improve"], limit=snapshot.limits["ai_improve"]),
            transcribe=UsageCounter(used=snapshot.counts["transcribe"], limit=snapshot.limits["transcribe"]),
            clients=UsageCounter(used=client_count, limit=snapshot.limits["clients"]),
        ),
        metadata=ResponseMetadata(request_id=request_id),
    )
