"""
Settings Service.

Profile fields and saved responses for the drafting prompts.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from messenger.backend.models.account import Account
from messenger.backend.repositories.account import AccountRepository
from messenger.backend.repositories.saved_response import SavedResponseRepository
from messenger.backend.schemas.settings import SavedResponseItem, SettingsResponse, SettingsUpdate
from messenger.backend.services.base import BaseService

PROFILE_FIELDS = ("name", "specialty", "notes", "tone")


class SettingsService(BaseService):
    """Service for account settings."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.accounts = AccountRepository(session)
        self.saved_responses = SavedResponseRepository(session)

    async def get_settings(self, account: Account) -> SettingsResponse:
        saved = await self.saved_responses.list_for_account(account.id)
        return self._to_response(account, [SavedResponseItem.model_validate(s) for s in saved])

    async def update_settings(self, account: Account, data: SettingsUpdate) -> SettingsResponse:
        """
        Update profile fields and, when given, replace the saved responses.

        Both changes share the request transaction, so a failure leaves
        neither applied.
        """
        profile = data.model_dump(include=set(PROFILE_FIELDS), exclude_none=True)
        if profile:
            await self._execute_db_operation(
                "update_profile",
                self.accounts.update_instance(account, **profile),
            )

        if data.saved_responses is not None:
            items = [item.model_dump() for item in data.saved_responses]
            await self._execute_db_operation(
                "replace_saved_responses",
                self.saved_responses.replace_for_account(account.id, items),
            )
            saved = data.saved_responses
        else:
            saved = [
                SavedResponseItem.model_validate(s)
                for s in await self.saved_responses.list_for_account(account.id)
            ]

        self._log_operation(
            "Settings updated",
            account_id=account.id,
            fields=list(profile),
            saved_responses_replaced=data.saved_responses is not None,
        )
        return self._to_response(account, list(saved))

    @staticmethod
    def _to_response(account: Account, saved: list[SavedResponseItem]) -> SettingsResponse:
        return SettingsResponse(
            name=account.name,
            specialty=account.specialty,
            notes=account.notes,
            tone=account.tone,
            plan=account.plan,
            telegram_username=account.telegram_username,
            telegram_connected=account.telegram_chat_id is not None,
            saved_responses=saved,
        )
