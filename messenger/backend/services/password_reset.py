"""
Password Reset Service.

Forgot-password issues a one-hour single-use token; reset-password redeems
it atomically and replaces the password hash.

Email delivery is not part of this system. The reset link is logged; the
raw token only appears in the log when the application runs in debug mode.
"""

from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from messenger.backend.core.config import get_app_config
from messenger.backend.core.exceptions import ValidationError
from messenger.backend.core.security import generate_token
from messenger.backend.core.utils import utc_now
from messenger.backend.repositories.account import AccountRepository
from messenger.backend.repositories.token import PasswordResetTokenRepository
from messenger.backend.services.account import AccountService
from messenger.backend.services.base import BaseService


class PasswordResetService(BaseService):
    """Service for the forgot/reset password flow."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.accounts = AccountRepository(session)
        self.tokens = PasswordResetTokenRepository(session)

    async def request_reset(self, email: str) -> str | None:
        """
        Issue a reset token when the email belongs to an account.

        Callers must respond identically whether or not a token was issued.

        Returns:
            The raw token, or None when no account matched
        """
        account = await self.accounts.get_by_email(email)
        if account is None:
            self._log_debug("Password reset requested for unknown email")
            return None

        config = get_app_config()
        now = utc_now()
        lifetime = timedelta(minutes=config.security.tokens.password_reset_minutes)

        await self._execute_db_operation("purge_reset_tokens", self.tokens.purge_stale(now))
        token = generate_token()
        await self._execute_db_operation(
            "issue_reset_token",
            self.tokens.add(token, account.id, now + lifetime),
        )

        app = config.application
        if app.debug:
            self._log_operation(
                "Password reset link issued",
                account_id=account.id,
                reset_url=f"{app.app_url.rstrip('/')}/reset-password?token={token}",
            )
        else:
            self._log_operation("Password reset link issued", account_id=account.id)
        return token

    async def reset_password(self, token: str, new_password: str) -> None:
        """
        Redeem a reset token and set the new password.

        Raises:
            ValidationError: If the token is unknown, used or expired
        """
        account_id = await self._execute_db_operation(
            "redeem_reset_token",
            self.tokens.consume(token, utc_now()),
        )
        if account_id is None:
            raise ValidationError("Invalid or expired reset token")

        await AccountService(self.session).set_password(account_id, new_password)
        self._log_operation("Password reset completed", account_id=account_id)
