"""
Account Service.

Signup, login, password changes and account deletion.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from messenger.backend.core.exceptions import AuthenticationError, ConflictError
from messenger.backend.core.security import hash_password, verify_password
from messenger.backend.models.account import Account
from messenger.backend.repositories.account import AccountRepository
from messenger.backend.schemas.auth import ChangePasswordRequest, LoginRequest, SignupRequest
from messenger.backend.services.base import BaseService


class AccountService(BaseService):
    """
    Service for account lifecycle.

    Login failures never reveal whether the email exists.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = AccountRepository(session)

    async def signup(self, data: SignupRequest) -> Account:
        """
        Create an account on the free plan.

        Raises:
            ConflictError: If the email is already registered
        """
        if await self.repo.email_exists(data.email):
            raise ConflictError("Email already registered")

        account = await self._execute_db_operation(
            "signup",
            self.repo.create(
                email=data.email,
                password_hash=hash_password(data.password),
                name=data.name.strip(),
            ),
        )
        self._log_operation("Account created", account_id=account.id)
        return account

    async def authenticate(self, data: LoginRequest) -> Account:
        """
        Verify credentials.

        Raises:
            AuthenticationError: On unknown email or wrong password
        """
        account = await self.repo.get_by_email(data.email)
        if account is None or not verify_password(data.password, account.password_hash):
            self._log_debug("Login rejected")
            raise AuthenticationError("Invalid email or password")

        self._log_operation("Account logged in", account_id=account.id)
        return account

    async def get_account(self, account_id: str) -> Account | None:
        return await self.repo.get_by_id_or_none(account_id)

    async def change_password(self, account: Account, data: ChangePasswordRequest) -> None:
        """
        Replace the password after verifying the current one.

        Raises:
            AuthenticationError: If the current password is wrong
        """
        if not verify_password(data.current_password, account.password_hash):
            raise AuthenticationError("Current password is incorrect")

        await self._execute_db_operation(
            "change_password",
            self.repo.update_instance(account, password_hash=hash_password(data.new_password)),
        )
        self._log_operation("Password changed", account_id=account.id)

    async def set_password(self, account_id: str, new_password: str) -> None:
        """Replace the password without checking the old one (reset flow)."""
        account = await self.repo.get_by_id(account_id)
        await self._execute_db_operation(
            "set_password",
            self.repo.update_instance(account, password_hash=hash_password(new_password)),
        )

    async def delete_account(self, account: Account) -> None:
        """Delete the account and, through cascades, everything it owns."""
        account_id = account.id
        await self._execute_db_operation(
            "delete_account",
            self.repo.delete_instance(account),
        )
        self._log_operation("Account deleted", account_id=account_id)
