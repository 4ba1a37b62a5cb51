"""
Configuration Schemas.

Pydantic models defining the expected structure of each YAML config file.
Used by AppConfig to validate configuration at load time. If a YAML file
has missing keys, wrong types, or unknown fields, a clear ValidationError
is raised at startup instead of a cryptic KeyError deep in application code.

Each top-level class corresponds to one file in config/settings/:
    ApplicationSchema  → application.yaml
    DatabaseSchema     → database.yaml
    LoggingSchema      → logging.yaml
    FeaturesSchema     → features.yaml
    SecuritySchema     → security.yaml
    PlansSchema        → plans.yaml
    AISchema           → ai.yaml
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class _StrictBase(BaseModel):
    """Base with extra='forbid' so unknown YAML keys are caught immediately."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# application.yaml
# =============================================================================


class ServerSchema(_StrictBase):
    host: str
    port: int


class CorsSchema(_StrictBase):
    origins: list[str]


class TimeoutsSchema(_StrictBase):
    database: int
    external_api: int


class TelegramAppSchema(_StrictBase):
    webhook_path: str
    bot_username: str


class ApplicationSchema(_StrictBase):
    name: str
    version: str
    description: str
    environment: str
    debug: bool
    docs_enabled: bool
    app_url: str
    server: ServerSchema
    cors: CorsSchema
    timeouts: TimeoutsSchema
    telegram: TelegramAppSchema


# =============================================================================
# database.yaml
# =============================================================================


class DatabaseSchema(_StrictBase):
    driver: Literal["sqlite", "postgresql"]
    sqlite_path: str
    host: str
    port: int
    name: str
    user: str
    pool_size: int
    max_overflow: int
    pool_timeout: int
    pool_recycle: int
    echo: bool


# =============================================================================
# logging.yaml
# =============================================================================


class ConsoleHandlerSchema(_StrictBase):
    enabled: bool


class FileHandlerSchema(_StrictBase):
    enabled: bool
    path: str
    max_bytes: int
    backup_count: int


class HandlersSchema(_StrictBase):
    console: ConsoleHandlerSchema
    file: FileHandlerSchema


class LoggingSchema(_StrictBase):
    level: str
    format: str
    handlers: HandlersSchema


# =============================================================================
# features.yaml
# =============================================================================


class FeaturesSchema(_StrictBase):
    api_detailed_errors: bool
    channel_telegram_enabled: bool
    telegram_webhook_enabled: bool
    security_startup_checks_enabled: bool


# =============================================================================
# security.yaml
# =============================================================================


class JwtSchema(_StrictBase):
    algorithm: str
    session_expire_days: int
    audience: str


class SessionCookieSchema(_StrictBase):
    name: str
    secure: bool
    samesite: Literal["lax", "strict", "none"]


class PasswordPolicySchema(_StrictBase):
    min_length: int
    bcrypt_rounds: int


class TokenLifetimesSchema(_StrictBase):
    telegram_link_minutes: int
    password_reset_minutes: int


class ChannelRateLimitSchema(_StrictBase):
    messages_per_minute: int


class RateLimitingSchema(_StrictBase):
    telegram: ChannelRateLimitSchema


class SecretsValidationSchema(_StrictBase):
    jwt_secret_min_length: int
    webhook_secret_min_length: int


class SecuritySchema(_StrictBase):
    jwt: JwtSchema
    session_cookie: SessionCookieSchema
    password: PasswordPolicySchema
    tokens: TokenLifetimesSchema
    rate_limiting: RateLimitingSchema
    secrets_validation: SecretsValidationSchema


# =============================================================================
# plans.yaml
# =============================================================================


class PlanLimitsSchema(_StrictBase):
    """Ceilings for one plan tier. ``None`` means unlimited."""

    clients: int | None
    messages_per_client: int | None
    ai_respond: int | None
    ai_improve: int | None
    transcribe: int | None


class PlansSchema(_StrictBase):
    free: PlanLimitsSchema
    paid: PlanLimitsSchema
    power: PlanLimitsSchema


# =============================================================================
# ai.yaml
# =============================================================================


class CircuitBreakerSchema(_StrictBase):
    fail_max: int
    timeout_duration: int


class DraftingSchema(_StrictBase):
    model: str
    max_tokens: int
    default_tone: str


class TranscriptionSchema(_StrictBase):
    endpoint: str
    model: str
    language: str
    max_audio_bytes: int = Field(gt=0)


class AISchema(_StrictBase):
    drafting: DraftingSchema
    transcription: TranscriptionSchema
    circuit_breaker: CircuitBreakerSchema
