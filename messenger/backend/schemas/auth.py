"""
Auth Schemas.

Request and response bodies for signup, login, password changes and
password reset.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class _Credentials(BaseModel):
    email: EmailStr = Field(..., description="Account email", examples=["ana@example.com"])

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class SignupRequest(_Credentials):
    """Schema for creating an account."""

    password: str = Field(..., min_length=8, max_length=128)
    name: str = Field(default="", max_length=255)


class LoginRequest(_Credentials):
    """Schema for logging in."""

    password: str = Field(..., min_length=1, max_length=128)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., min_length=8, max_length=128)


class ForgotPasswordRequest(_Credentials):
    pass


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., min_length=8, max_length=128)


class AccountResponse(BaseModel):
    """Schema for the authenticated account in API responses."""

    id: str
    email: str
    name: str
    specialty: str
    notes: str
    tone: str
    plan: str
    telegram_username: str | None
    telegram_connected: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_account(cls, account) -> "AccountResponse":
        return cls(
            id=account.id,
            email=account.email,
            name=account.name,
            specialty=account.specialty,
            notes=account.notes,
            tone=account.tone,
            plan=account.plan,
            telegram_username=account.telegram_username,
            telegram_connected=account.telegram_chat_id is not None,
            created_at=account.created_at,
        )
