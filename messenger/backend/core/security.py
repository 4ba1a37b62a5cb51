"""
Security Utilities.

Password hashing, session tokens, and single-use token generation.
"""

import secrets
from datetime import timedelta
from typing import Any
from uuid import UUID

import bcrypt
from jose import JWTError, jwt

from messenger.backend.core.config import get_app_config, get_settings
from messenger.backend.core.exceptions import AuthenticationError
from messenger.backend.core.logging import get_logger
from messenger.backend.core.utils import utc_now

logger = get_logger(__name__)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    rounds = get_app_config().security.password.bcrypt_rounds
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return bcrypt.checkpw(
        plain_password.encode("utf-8"),
        hashed_password.encode("utf-8"),
    )


def create_session_token(account_id: str | UUID, expires_delta: timedelta | None = None) -> str:
    """
    Create a signed session token for an account.

    Args:
        account_id: Account the session belongs to
        expires_delta: Optional custom lifetime

    Returns:
        Encoded JWT
    """
    settings = get_settings()
    jwt_config = get_app_config().security.jwt

    if expires_delta is None:
        expires_delta = timedelta(days=jwt_config.session_expire_days)

    payload: dict[str, Any] = {
        "sub": str(account_id),
        "exp": utc_now() + expires_delta,
        "type": "session",
        "aud": jwt_config.audience,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=jwt_config.algorithm)


def decode_session_token(token: str) -> UUID:
    """
    Decode and validate a session token.

    Returns:
        The account id carried by the token

    Raises:
        AuthenticationError: If token is invalid, expired, or not a session token
    """
    settings = get_settings()
    jwt_config = get_app_config().security.jwt
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[jwt_config.algorithm],
            audience=jwt_config.audience,
        )
    except JWTError as e:
        logger.warning("Session token decode failed", error=str(e))
        raise AuthenticationError("Invalid or expired session") from e

    if payload.get("type") != "session" or "sub" not in payload:
        raise AuthenticationError("Invalid or expired session")

    try:
        return UUID(payload["sub"])
    except ValueError as e:
        raise AuthenticationError("Invalid or expired session") from e


def generate_token() -> str:
    """Generate an unguessable single-use token (link and password reset tokens)."""
    return secrets.token_urlsafe(32)
