"""
AI Endpoints.

Metered endpoints follow one order: authenticate, validate, check client
ownership, check the capability is configured, consume a credit, then
call the provider. A credit is not refunded if the provider call fails.
"""

from fastapi import APIRouter

from messenger.backend.core.dependencies import AI, CurrentAccount, DbSession, RequestId
from messenger.backend.schemas.ai import (
    AIStatusResponse,
    DraftResponse,
    ImproveRequest,
    RespondRequest,
    TranscribeRequest,
    TranscriptionResponse,
)
from messenger.backend.schemas.base import ApiResponse, ResponseMetadata
from messenger.backend.services.client import ClientService
from messenger.backend.services.message import MessageService
from messenger.backend.services.usage import UsageLedger

router = APIRouter()


@router.get(
    "/status",
    response_model=ApiResponse[AIStatusResponse],
    summary="Which AI capabilities are configured",
)
async def ai_status(
    account: CurrentAccount,
    ai: AI,
    request_id: RequestId,
) -> ApiResponse[AIStatusResponse]:
    return ApiResponse(
        data=AIStatusResponse(
            drafting_available=ai.is_available(),
            transcription_available=ai.is_transcription_available(),
        ),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.post(
    "/respond",
    response_model=ApiResponse[DraftResponse],
    summary="Draft a reply for a client thread",
)
async def respond(
    data: RespondRequest,
    account: CurrentAccount,
    db: DbSession,
    ai: AI,
    request_id: RequestId,
) -> ApiResponse[DraftResponse]:
    client = await ClientService(db).get_client(account, data.client_id)
    ai.ensure_available()

    decision = await UsageLedger(db).check_and_consume(account, "ai_respond")
    decision.raise_if_denied()
    await db.commit()

    messages = await MessageService(db).list_messages(account, client.id)
    text = await ai.generate_response(account, client, messages)
    return ApiResponse(data=DraftResponse(text=text), metadata=ResponseMetadata(request_id=request_id))


@router.post(
    "/improve",
    response_model=ApiResponse[DraftResponse],
    summary="Improve a draft reply",
)
async def improve(
    data: ImproveRequest,
    account: CurrentAccount,
    db: DbSession,
    ai: AI,
    request_id: RequestId,
) -> ApiResponse[DraftResponse]:
    client = await ClientService(db).get_client(account, data.client_id)
    ai.ensure_available()

    decision = await UsageLedger(db).check_and_consume(account, "ai_improve")
    decision.raise_if_denied()
    await db.commit()

    messages = await MessageService(db).list_messages(account, client.id)
    text = await ai.improve_message(account, client, messages, data.draft)
    return ApiResponse(data=DraftResponse(text=text), metadata=ResponseMetadata(request_id=request_id))


@router.post(
    "/transcribe",
    response_model=ApiResponse[TranscriptionResponse],
    summary="Transcribe a voice note",
)
async def transcribe(
    data: TranscribeRequest,
    account: CurrentAccount,
    db: DbSession,
    ai: AI,
    request_id: RequestId,
) -> ApiResponse[TranscriptionResponse]:
    audio = ai.decode_audio(data.audio)
    ai.ensure_transcription_available()

    decision = await UsageLedger(db).check_and_consume(account, "transcribe")
    decision.raise_if_denied()
    await db.commit()

    text = await ai.transcribe(audio, data.mime_type)
    return ApiResponse(
        data=TranscriptionResponse(text=text),
        metadata=ResponseMetadata(request_id=request_id),
    )
