"""
Unit tests for the AI drafting service.

The drafting agent is replaced with a PydanticAI ``TestModel`` agent and
the transcription HTTP client with a mock; no provider is contacted.
"""

import base64
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic_ai import Agent
from pydantic_ai.models.test import TestModel

from messenger.backend.core.config import get_app_config, get_settings
from messenger.backend.core.exceptions import (
    ExternalServiceError,
    ServiceUnavailableError,
    ValidationError,
)
from messenger.backend.models.account import Account
from messenger.backend.models.client import Client
from messenger.backend.models.message import INBOUND, OUTBOUND, Message
from messenger.backend.services import ai as ai_module
from messenger.backend.services.ai import (
    AIService,
    DraftDeps,
    audio_extension,
    build_instructions,
    build_prompt,
    format_history,
)


@pytest.fixture(autouse=True)
def fresh_breakers(monkeypatch):
    """Breaker state must not leak between tests."""
    monkeypatch.setattr(ai_module, "_breakers", {})


@pytest.fixture
def account() -> Account:
    return Account(
        id="acc-1",
        email="ana@example.com",
        name="Ana",
        specialty="wedding photographer",
        notes="Shoots mostly outdoors",
        tone="warm and upbeat",
    )


@pytest.fixture
def client() -> Client:
    return Client(id="cli-1", account_id="acc-1", name="Maya", notes="Prefers email")


@pytest.fixture
def messages() -> list[Message]:
    return [
        Message(client_id="cli-1", direction=INBOUND, text="Are you free on June 3?"),
        Message(client_id="cli-1", direction=OUTBOUND, text="Let me check!"),
    ]


def _agent(text: str) -> Agent:
    return Agent(TestModel(custom_output_text=text), deps_type=DraftDeps, output_type=str)


class TestPromptBuilders:
    def test_instructions_include_profile_client_and_tone(self, account, client):
        instructions = build_instructions(DraftDeps(account=account, client=client))

        assert "Ana" in instructions
        assert "wedding photographer" in instructions
        assert "Shoots mostly outdoors" in instructions
        assert "Prefers email" in instructions
        assert "warm and upbeat tone" in instructions

    def test_instructions_fall_back_to_default_tone(self, client):
        account = Account(email="x@example.com", name="", specialty="", notes="", tone="")

        instructions = build_instructions(DraftDeps(account=account, client=client))

        assert f"{get_app_config().ai.drafting.default_tone} tone" in instructions

    def test_history_labels_speakers(self, account, client, messages):
        history = format_history(DraftDeps(account=account, client=client, messages=messages))

        assert history == "Maya: Are you free on June 3?\n\nAna: Let me check!"

    def test_prompt_for_empty_thread(self, account, client):
        prompt = build_prompt(DraftDeps(account=account, client=client))

        assert "(no messages yet)" in prompt
        assert prompt.endswith("Write my next reply.")

    def test_prompt_for_improve_contains_draft(self, account, client, messages):
        prompt = build_prompt(
            DraftDeps(account=account, client=client, messages=messages, draft="yes june 3 ok")
        )

        assert 'My draft reply:\n"yes june 3 ok"' in prompt

    @pytest.mark.parametrize(
        ("mime_type", "extension"),
        [("audio/webm", "webm"), ("audio/mp4", "mp4"), ("audio/x-m4a", "mp4"), ("audio/ogg", "webm")],
    )
    def test_audio_extension(self, mime_type, extension):
        assert audio_extension(mime_type) == extension


class TestDrafting:
    async def test_generate_response(self, account, client, messages):
        service = AIService(agent=_agent("  June 3 works great!  "))

        text = await service.generate_response(account, client, messages)

        assert text == "June 3 works great!"

    async def test_improve_message(self, account, client, messages):
        service = AIService(agent=_agent("Yes, June 3 works for me!"))

        text = await service.improve_message(account, client, messages, "yes june 3 ok")

        assert text == "Yes, June 3 works for me!"

    async def test_provider_failure_becomes_external_error(self, account, client):
        agent = MagicMock()
        agent.run = AsyncMock(side_effect=RuntimeError("overloaded"))
        service = AIService(agent=agent)

        with pytest.raises(ExternalServiceError):
            await service.generate_response(account, client, [])

    async def test_provider_called_once_per_request(self, account, client):
        """Provider calls are never retried."""
        agent = MagicMock()
        agent.run = AsyncMock(side_effect=RuntimeError("overloaded"))
        service = AIService(agent=agent)

        with pytest.raises(ExternalServiceError):
            await service.improve_message(account, client, [], "draft")

        assert agent.run.await_count == 1

    def test_unconfigured_drafting(self):
        service = AIService()

        assert service.is_available() is False
        with pytest.raises(ServiceUnavailableError) as exc_info:
            service.ensure_available()
        assert exc_info.value.code == "AI_UNAVAILABLE"

    def test_configured_by_api_key(self, monkeypatch):
        monkeypatch.setattr(get_settings(), "anthropic_api_key", "sk-ant-test")

        assert AIService().is_available() is True


class TestTranscription:
    def test_decode_audio(self):
        audio = AIService().decode_audio(base64.b64encode(b"voice-bytes").decode())

        assert audio == b"voice-bytes"

    @pytest.mark.parametrize("payload", ["not base64!!", ""])
    def test_decode_rejects_bad_payload(self, payload):
        with pytest.raises(ValidationError):
            AIService().decode_audio(payload)

    def test_decode_rejects_oversized_audio(self, monkeypatch):
        monkeypatch.setattr(get_app_config().ai.transcription, "max_audio_bytes", 4)

        with pytest.raises(ValidationError) as exc_info:
            AIService().decode_audio(base64.b64encode(b"12345").decode())

        assert exc_info.value.details == {"max_bytes": 4}

    async def test_transcribe(self, monkeypatch, mock_http_client, mock_response):
        monkeypatch.setattr(get_settings(), "groq_api_key", "gsk-test")
        mock_http_client.post.return_value = mock_response(200, {"text": " See you at noon. "})
        service = AIService(http_client=mock_http_client)

        text = await service.transcribe(b"voice-bytes", "audio/mp4")

        assert text == "See you at noon."
        call = mock_http_client.post.await_args
        transcription = get_app_config().ai.transcription
        assert call.args[0] == transcription.endpoint
        assert call.kwargs["files"]["file"] == ("audio.mp4", b"voice-bytes", "audio/mp4")
        assert call.kwargs["data"]["model"] == transcription.model
        assert call.kwargs["headers"]["Authorization"] == "Bearer gsk-test"

    async def test_transcribe_provider_error(self, monkeypatch, mock_http_client, mock_response):
        monkeypatch.setattr(get_settings(), "groq_api_key", "gsk-test")
        mock_http_client.post.return_value = mock_response(500)
        service = AIService(http_client=mock_http_client)

        with pytest.raises(ExternalServiceError):
            await service.transcribe(b"voice-bytes", "audio/webm")

    async def test_transcribe_unconfigured(self):
        with pytest.raises(ServiceUnavailableError):
            await AIService().transcribe(b"voice-bytes", "audio/webm")
