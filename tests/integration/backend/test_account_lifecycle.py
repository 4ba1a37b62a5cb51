"""
Integration tests for accounts, clients, messages and settings services.
"""

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from messenger.backend.core.exceptions import AuthenticationError, ConflictError, NotFoundError
from messenger.backend.core.utils import utc_now
from messenger.backend.models.client import Client
from messenger.backend.models.message import Message
from messenger.backend.models.saved_response import SavedResponse
from messenger.backend.models.token import TelegramLinkToken
from messenger.backend.models.usage import UsageRecord
from messenger.backend.repositories.token import TelegramLinkTokenRepository
from messenger.backend.schemas.auth import ChangePasswordRequest, LoginRequest, SignupRequest
from messenger.backend.schemas.client import ClientCreate, ClientUpdate
from messenger.backend.schemas.settings import SavedResponseItem, SettingsUpdate
from messenger.backend.services.account import AccountService
from messenger.backend.services.client import ClientService
from messenger.backend.services.message import MessageService
from messenger.backend.services.settings import SettingsService
from messenger.backend.services.usage import UsageLedger


async def _count(session: AsyncSession, model) -> int:
    return (await session.execute(select(func.count()).select_from(model))).scalar_one()


class TestAccountService:
    async def test_signup_defaults(self, db_session: AsyncSession):
        account = await AccountService(db_session).signup(
            SignupRequest(email="Ana@Example.com", password="long-enough", name=" Ana ")
        )

        assert account.email == "ana@example.com"
        assert account.name == "Ana"
        assert account.plan == "free"
        assert account.tone == "friendly and casual"
        assert account.password_hash != "long-enough"

    async def test_duplicate_email(self, db_session: AsyncSession, account):
        with pytest.raises(ConflictError, match="Email already registered"):
            await AccountService(db_session).signup(
                SignupRequest(email="ANA@example.com", password="long-enough")
            )

    async def test_login_failures_look_the_same(self, db_session: AsyncSession, account):
        service = AccountService(db_session)

        with pytest.raises(AuthenticationError) as wrong_password:
            await service.authenticate(LoginRequest(email="ana@example.com", password="nope"))
        with pytest.raises(AuthenticationError) as unknown_email:
            await service.authenticate(LoginRequest(email="who@example.com", password="nope"))

        assert wrong_password.value.message == unknown_email.value.message

    async def test_change_password_checks_current(self, db_session: AsyncSession, account):
        service = AccountService(db_session)

        with pytest.raises(AuthenticationError, match="Current password is incorrect"):
            await service.change_password(
                account, ChangePasswordRequest(current_password="wrong", new_password="new-password-1")
            )

        await service.change_password(
            account,
            ChangePasswordRequest(current_password="correct-horse-battery", new_password="new-password-1"),
        )
        await service.authenticate(LoginRequest(email="ana@example.com", password="new-password-1"))

    async def test_delete_cascades(self, db_session: AsyncSession, account):
        """Deleting an account removes everything it owns."""
        ledger = UsageLedger(db_session)
        client, _ = await ClientService(db_session, ledger).create_client(account, ClientCreate(name="Maya"))
        await MessageService(db_session, ledger).add_message(account, client.id, "inbound", "hi")
        await SettingsService(db_session).update_settings(
            account, SettingsUpdate(saved_responses=[SavedResponseItem(trigger="price", text="From $2k")])
        )
        await ledger.check_and_consume(account, "ai_respond")
        await TelegramLinkTokenRepository(db_session).add("tok", account.id, utc_now())
        await db_session.commit()

        await AccountService(db_session).delete_account(account)
        await db_session.commit()

        for model in (Client, Message, SavedResponse, UsageRecord, TelegramLinkToken):
            assert await _count(db_session, model) == 0, model.__name__


class TestClientService:
    async def test_list_in_creation_order(self, db_session: AsyncSession, account):
        service = ClientService(db_session)
        for name in ("Maya", "Leo", "Zoe"):
            await service.create_client(account, ClientCreate(name=name))

        assert [c.name for c in await service.list_clients(account)] == ["Maya", "Leo", "Zoe"]

    async def test_other_accounts_client_is_not_found(self, db_session: AsyncSession, make_account):
        owner = await make_account(email="owner@example.com")
        other = await make_account(email="other@example.com")
        client, _ = await ClientService(db_session).create_client(owner, ClientCreate(name="Maya"))

        with pytest.raises(NotFoundError):
            await ClientService(db_session).get_client(other, client.id)
        with pytest.raises(NotFoundError):
            await MessageService(db_session).add_message(other, client.id, "inbound", "hi")

    async def test_find_or_create_is_case_insensitive(self, db_session: AsyncSession, account):
        service = ClientService(db_session)

        created, decision = await service.find_or_create_by_name(account, "Maya Chen")
        found, no_decision = await service.find_or_create_by_name(account, "  maya chen ")

        assert decision is not None and decision.allowed
        assert no_decision is None
        assert found.id == created.id

    async def test_update_and_delete(self, db_session: AsyncSession, account):
        service = ClientService(db_session)
        client, _ = await service.create_client(account, ClientCreate(name="Maya"))
        await MessageService(db_session).add_message(account, client.id, "inbound", "hi")

        updated = await service.update_client(account, client.id, ClientUpdate(notes="Beach wedding"))
        assert updated.name == "Maya" and updated.notes == "Beach wedding"

        await service.delete_client(account, client.id)
        assert await _count(db_session, Message) == 0


class TestSettingsService:
    async def test_partial_update_and_ordered_saved_responses(self, db_session: AsyncSession, account):
        service = SettingsService(db_session)
        items = [SavedResponseItem(trigger=t, title=t.title(), text=f"{t} text") for t in ("zeta", "alpha", "mid")]

        await service.update_settings(account, SettingsUpdate(tone="playful", saved_responses=items))
        result = await service.get_settings(account)

        assert result.tone == "playful"
        assert result.name == "Ana"
        assert [s.trigger for s in result.saved_responses] == ["zeta", "alpha", "mid"]

    async def test_saved_responses_replaced_wholesale(self, db_session: AsyncSession, account):
        service = SettingsService(db_session)
        await service.update_settings(
            account, SettingsUpdate(saved_responses=[SavedResponseItem(trigger="a"), SavedResponseItem(trigger="b")])
        )

        await service.update_settings(account, SettingsUpdate(saved_responses=[SavedResponseItem(trigger="c")]))
        kept = await service.update_settings(account, SettingsUpdate(name="Ana B."))

        assert [s.trigger for s in kept.saved_responses] == ["c"]
        assert kept.name == "Ana B."
        assert await _count(db_session, SavedResponse) == 1
