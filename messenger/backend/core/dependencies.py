"""
FastAPI Dependencies.

Shared dependencies for request handling.
"""

import uuid
from typing import Annotated

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from messenger.backend.core.config import get_app_config
from messenger.backend.core.database import get_db_session
from messenger.backend.core.exceptions import AuthenticationError
from messenger.backend.core.logging import get_logger
from messenger.backend.core.security import decode_session_token
from messenger.backend.models.account import Account
from messenger.backend.repositories.account import AccountRepository
from messenger.backend.services.ai import AIService

logger = get_logger(__name__)

DbSession = Annotated[AsyncSession, Depends(get_db_session)]


async def get_request_id(x_request_id: str | None = Header(None)) -> str:
    """
    Extract or generate request ID from headers.

    Used for request tracing and correlation.
    """
    return x_request_id or str(uuid.uuid4())


RequestId = Annotated[str, Depends(get_request_id)]


async def get_current_account(request: Request, db: DbSession) -> Account:
    """
    Resolve the account from the session cookie.

    Raises:
        AuthenticationError: If the cookie is missing, invalid, expired,
            or points at a deleted account
    """
    cookie_name = get_app_config().security.session_cookie.name
    token = request.cookies.get(cookie_name)
    if not token:
        raise AuthenticationError("Not authenticated")

    account_id = decode_session_token(token)
    account = await AccountRepository(db).get_by_id_or_none(account_id)
    if account is None:
        logger.warning("Session for missing account", account_id=str(account_id))
        raise AuthenticationError("Not authenticated")
    return account


CurrentAccount = Annotated[Account, Depends(get_current_account)]


def get_ai_service() -> AIService:
    """AI service dependency. Overridden in tests."""
    return AIService()


AI = Annotated[AIService, Depends(get_ai_service)]
