"""
Client Endpoints.

CRUD for the authenticated account's clients.
"""

from fastapi import APIRouter

from messenger.backend.core.dependencies import CurrentAccount, DbSession, RequestId
from messenger.backend.schemas.base import ApiResponse, OkResult, ResponseMetadata
from messenger.backend.schemas.client import ClientCreate, ClientResponse, ClientUpdate
from messenger.backend.services.client import ClientService

router = APIRouter()


@router.get(
    "",
    response_model=ApiResponse[list[ClientResponse]],
    summary="List clients",
)
async def list_clients(
    account: CurrentAccount,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[list[ClientResponse]]:
    clients = await ClientService(db).list_clients(account)
    return ApiResponse(
        data=[ClientResponse.model_validate(c) for c in clients],
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.post(
    "",
    response_model=ApiResponse[ClientResponse],
    status_code=201,
    summary="Create a client",
)
async def create_client(
    data: ClientCreate,
    account: CurrentAccount,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[ClientResponse]:
    """
    Create a client.

    Returns 429 with code LIMIT_EXCEEDED when the plan's client ceiling is reached.
    """
    client, decision = await ClientService(db).create_client(account, data)
    decision.raise_if_denied()
    return ApiResponse(
        data=ClientResponse.model_validate(client),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.put(
    "/{client_id}",
    response_model=ApiResponse[ClientResponse],
    summary="Update a client",
)
async def update_client(
    client_id: str,
    data: ClientUpdate,
    account: CurrentAccount,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[ClientResponse]:
    client = await ClientService(db).update_client(account, client_id, data)
    return ApiResponse(
        data=ClientResponse.model_validate(client),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.delete(
    "/{client_id}",
    response_model=ApiResponse[OkResult],
    summary="Delete a client",
)
async def delete_client(
    client_id: str,
    account: CurrentAccount,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[OkResult]:
    await ClientService(db).delete_client(account, client_id)
    return ApiResponse(data=OkResult(), metadata=ResponseMetadata(request_id=request_id))
