"""
AI Drafting Service.

Drafts replies and improves drafts with a PydanticAI agent on an Anthropic
model, and transcribes voice notes through Groq's Whisper endpoint.

Both capabilities are optional: an empty ANTHROPIC_API_KEY or GROQ_API_KEY
disables the matching feature and the status checks report it. Provider
calls run behind a circuit breaker and are never retried.

Usage:
    from messenger.backend.services.ai import AIService

    ai = AIService()
    if ai.is_available():
        text = await ai.generate_response(account, client, messages)
"""

import base64
import binascii
from dataclasses import dataclass, field
from typing import Any

import aiobreaker
import httpx
from pydantic_ai import Agent, RunContext

from messenger.backend.core.config import get_app_config, get_settings
from messenger.backend.core.exceptions import (
    ExternalServiceError,
    ServiceUnavailableError,
    ValidationError,
)
from messenger.backend.core.logging import get_logger
from messenger.backend.core.resilience import create_circuit_breaker
from messenger.backend.models.account import Account
from messenger.backend.models.client import Client
from messenger.backend.models.message import INBOUND, Message

logger = get_logger(__name__)


@dataclass
class DraftDeps:
    """Context injected into the drafting agent for one run."""

    account: Account
    client: Client
    messages: list[Message] = field(default_factory=list)
    draft: str | None = None


def build_instructions(deps: DraftDeps) -> str:
    """System instructions describing the photographer, the client and the tone."""
    account = deps.account
    tone = account.tone or get_app_config().ai.drafting.default_tone
    lines = [
        f"You are helping {account.name or 'a photographer'}, "
        f"a {account.specialty or 'photographer'}, write messages to clients.",
    ]
    if account.notes:
        lines.append(f"About {account.name or 'them'}: {account.notes}")
    if deps.client.notes:
        lines.append(f"About this client ({deps.client.name}): {deps.client.notes}")
    lines.append(f"Write in a {tone} tone. Sound like a real person, not a company.")
    if deps.draft is None:
        lines.append("Reply with the message text only.")
    else:
        lines.append(
            "Improve the draft: keep its meaning, fix awkward phrasing, "
            "and return only the improved message text."
        )
    return "\n\n".join(lines)


def format_history(deps: DraftDeps) -> str:
    """Render the thread as ``Speaker: text`` blocks, oldest first."""
    photographer = deps.account.name or "Me"
    return "\n\n".join(
        f"{deps.client.name if m.direction == INBOUND else photographer}: {m.text}"
        for m in deps.messages
    )


def build_prompt(deps: DraftDeps) -> str:
    """User prompt for a draft or improve run."""
    history = format_history(deps) or "(no messages yet)"
    prompt = f"Conversation with {deps.client.name}:\n\n{history}"
    if deps.draft is None:
        return f"{prompt}\n\nWrite my next reply."
    return f"{prompt}\n\nMy draft reply:\n\"{deps.draft}\""


def audio_extension(mime_type: str) -> str:
    """File extension Whisper should see for the upload."""
    return "mp4" if "mp4" in mime_type or "m4a" in mime_type else "webm"


_agent: Agent[DraftDeps, str] | None = None
_breakers: dict[str, aiobreaker.CircuitBreaker] = {}


def _get_breaker(dependency: str) -> aiobreaker.CircuitBreaker:
    if dependency not in _breakers:
        cb = get_app_config().ai.circuit_breaker
        _breakers[dependency] = create_circuit_breaker(
            dependency,
            fail_max=cb.fail_max,
            timeout_duration=cb.timeout_duration,
        )
    return _breakers[dependency]


def _get_agent() -> Agent[DraftDeps, str]:
    """Lazy initialization: the agent is built on first use."""
    global _agent
    if _agent is not None:
        return _agent

    from pydantic_ai.models.anthropic import AnthropicModel
    from pydantic_ai.providers.anthropic import AnthropicProvider

    drafting = get_app_config().ai.drafting
    model = AnthropicModel(
        drafting.model,
        provider=AnthropicProvider(api_key=get_settings().anthropic_api_key),
    )
    agent = Agent(
        model,
        deps_type=DraftDeps,
        output_type=str,
        model_settings={"max_tokens": drafting.max_tokens},
    )

    @agent.instructions
    def drafting_instructions(ctx: RunContext[DraftDeps]) -> str:
        return build_instructions(ctx.deps)

    _agent = agent
    logger.info("Drafting agent initialized", model=drafting.model)
    return _agent


class AIService:
    """
    AI capabilities for the HTTP API and the Telegram bridge.

    ``agent`` and ``http_client`` can be injected; by default the lazily
    built Anthropic agent and a short-lived httpx client are used.
    """

    def __init__(
        self,
        agent: Agent[DraftDeps, Any] | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._agent = agent
        self._http_client = http_client

    def is_available(self) -> bool:
        """Whether drafting is configured."""
        return self._agent is not None or bool(get_settings().anthropic_api_key)

    def is_transcription_available(self) -> bool:
        """Whether transcription is configured."""
        return bool(get_settings().groq_api_key)

    def ensure_available(self) -> None:
        if not self.is_available():
            raise ServiceUnavailableError("AI drafting is not configured", code="AI_UNAVAILABLE")

    def ensure_transcription_available(self) -> None:
        if not self.is_transcription_available():
            raise ServiceUnavailableError("Transcription is not configured", code="AI_UNAVAILABLE")

    async def generate_response(
        self,
        account: Account,
        client: Client,
        messages: list[Message],
    ) -> str:
        """Draft the photographer's next reply in the thread."""
        return await self._run(DraftDeps(account=account, client=client, messages=messages))

    async def improve_message(
        self,
        account: Account,
        client: Client,
        messages: list[Message],
        draft: str,
    ) -> str:
        """Rewrite ``draft`` in the account's tone, keeping its meaning."""
        return await self._run(
            DraftDeps(account=account, client=client, messages=messages, draft=draft)
        )

    async def _run(self, deps: DraftDeps) -> str:
        self.ensure_available()
        agent = self._agent or _get_agent()
        kind = "improve" if deps.draft is not None else "respond"
        try:
            result = await _get_breaker("anthropic").call_async(
                agent.run, build_prompt(deps), deps=deps,
            )
        except Exception as e:
            logger.error("Drafting failed", kind=kind, error_type=type(e).__name__)
            raise ExternalServiceError("AI provider request failed") from e

        text = (result.output or "").strip()
        logger.info("Draft generated", kind=kind, client_id=deps.client.id, length=len(text))
        return text

    def decode_audio(self, audio_base64: str) -> bytes:
        """
        Decode and size-check a base64 voice note.

        Raises:
            ValidationError: If the payload is not valid base64, empty, or too large
        """
        max_bytes = get_app_config().ai.transcription.max_audio_bytes
        try:
            audio = base64.b64decode(audio_base64, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValidationError("Audio must be base64-encoded") from e
        if not audio:
            raise ValidationError("Audio is empty")
        if len(audio) > max_bytes:
            raise ValidationError("Audio too large", details={"max_bytes": max_bytes})
        return audio

    async def transcribe(self, audio: bytes, mime_type: str) -> str:
        """
        Transcribe a decoded voice note.

        Raises:
            ExternalServiceError: If the provider call fails
        """
        self.ensure_transcription_available()
        timeout = float(get_app_config().application.timeouts.external_api)

        try:
            text = await _get_breaker("groq").call_async(
                self._post_transcription, audio, mime_type, timeout,
            )
        except Exception as e:
            logger.error("Transcription failed", error_type=type(e).__name__)
            raise ExternalServiceError("Transcription provider request failed") from e

        logger.info("Audio transcribed", audio_bytes=len(audio), length=len(text))
        return text

    async def _post_transcription(self, audio: bytes, mime_type: str, timeout: float) -> str:
        transcription = get_app_config().ai.transcription
        files = {"file": (f"audio.{audio_extension(mime_type)}", audio, mime_type)}
        data = {"model": transcription.model, "language": transcription.language}
        headers = {"Authorization": f"Bearer {get_settings().groq_api_key}"}

        if self._http_client is not None:
            response = await self._http_client.post(
                transcription.endpoint, files=files, data=data, headers=headers, timeout=timeout,
            )
        else:
            async with httpx.AsyncClient(timeout=timeout) as client:
                response = await client.post(
                    transcription.endpoint, files=files, data=data, headers=headers,
                )
        response.raise_for_status()
        return str(response.json().get("text", "")).strip()
