"""
Usage Ledger.

Per-account, per-calendar-month counters for metered operations, and the
plan ceilings that gate them.

The ledger never raises for a denial. ``check_and_consume`` and the
``check_*_limit`` helpers return a ``UsageDecision``; each transport turns
a denial into its own shape (a 429 for HTTP, a chat reply for Telegram).

Consumption is one upsert followed by one guarded UPDATE, so two
concurrent callers can never both take the last credit.
"""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from messenger.backend.core.config import get_app_config
from messenger.backend.core.config_schema import PlanLimitsSchema, PlansSchema
from messenger.backend.core.exceptions import LimitExceededError
from messenger.backend.core.utils import month_key, next_month_start, utc_now
from messenger.backend.models.account import Account
from messenger.backend.repositories.client import ClientRepository
from messenger.backend.repositories.message import MessageRepository
from messenger.backend.repositories.usage import COUNTER_COLUMNS, UsageRepository
from messenger.backend.services.base import BaseService

METERED_OPERATIONS = tuple(COUNTER_COLUMNS)

_OPERATION_LABELS = {
    "ai_respond": "AI response",
    "ai_improve": "AI improve",
    "transcribe": "transcription",
}


@dataclass(frozen=True)
class UsageDecision:
    """Outcome of a limit check. ``limit`` is None for unlimited tiers."""

    allowed: bool
    limit_type: str
    current: int
    limit: int | None
    reset_at: datetime
    message: str = ""

    def raise_if_denied(self) -> None:
        """Convert a denial into ``LimitExceededError`` for the HTTP layer."""
        if not self.allowed:
            raise LimitExceededError(
                self.message,
                limit_type=self.limit_type,
                current=self.current,
                limit=self.limit,
                reset_at=self.reset_at,
            )


@dataclass(frozen=True)
class UsageSnapshot:
    """Counters and ceilings for one account and month."""

    plan: str
    month: str
    counts: dict[str, int]
    limits: dict[str, int | None]
    reset_at: datetime


class UsageLedger(BaseService):
    """Metered operation counters and plan ceiling checks."""

    def __init__(self, session: AsyncSession, plans: PlansSchema | None = None) -> None:
        super().__init__(session)
        self.usage = UsageRepository(session)
        self.clients = ClientRepository(session)
        self.messages = MessageRepository(session)
        self._plans = plans

    @property
    def plans(self) -> PlansSchema:
        if self._plans is None:
            self._plans = get_app_config().plans
        return self._plans

    def limits_for(self, account: Account) -> PlanLimitsSchema:
        """Ceilings for the account's plan tier."""
        return getattr(self.plans, account.plan)

    async def check_and_consume(self, account: Account, operation: str) -> UsageDecision:
        """
        Atomically consume one credit of ``operation`` for the current month.

        Unlimited tiers are always allowed and still counted.
        """
        if operation not in METERED_OPERATIONS:
            raise ValueError(f"Unknown metered operation: {operation}")

        now = utc_now()
        month = month_key(now)
        reset_at = next_month_start(now)
        limit = getattr(self.limits_for(account), operation)

        await self._execute_db_operation(
            "ensure_usage_record",
            self.usage.ensure_record(account.id, month),
        )
        new_value = await self._execute_db_operation(
            "consume_usage",
            self.usage.increment_if_below(account.id, month, operation, limit),
        )

        if new_value is not None:
            self._log_debug("Usage consumed", operation=operation, count=new_value, month=month)
            return UsageDecision(
                allowed=True,
                limit_type=operation,
                current=new_value,
                limit=limit,
                reset_at=reset_at,
            )

        counts = await self._execute_db_operation(
            "read_usage",
            self.usage.get_counts(account.id, month),
        )
        self._log_operation(
            "Usage limit reached",
            account_id=account.id,
            metered_operation=operation,
            current=counts[operation],
            limit=limit,
        )
        return UsageDecision(
            allowed=False,
            limit_type=operation,
            current=counts[operation],
            limit=limit,
            reset_at=reset_at,
            message=f"You've used all {limit} {_OPERATION_LABELS[operation]} credits this month",
        )

    async def check_client_limit(self, account: Account) -> UsageDecision:
        """Compare the account's client count to its ceiling. Consumes nothing."""
        limit = self.limits_for(account).clients
        current = await self.clients.count_for_account(account.id)
        allowed = limit is None or current < limit
        return UsageDecision(
            allowed=allowed,
            limit_type="clients",
            current=current,
            limit=limit,
            reset_at=next_month_start(utc_now()),
            message="" if allowed else (
                f"You've reached the limit of {limit} clients on your {account.plan} plan"
            ),
        )

    async def check_message_limit(self, account: Account, client_id: str) -> UsageDecision:
        """Compare a client's message count to the messages-per-client ceiling."""
        limit = self.limits_for(account).messages_per_client
        current = await self.messages.count_for_client(client_id)
        allowed = limit is None or current < limit
        return UsageDecision(
            allowed=allowed,
            limit_type="messages_per_client",
            current=current,
            limit=limit,
            reset_at=next_month_start(utc_now()),
            message="" if allowed else (
                f"This client has reached the limit of {limit} messages on your {account.plan} plan"
            ),
        )

    async def get_usage(self, account: Account) -> UsageSnapshot:
        """Snapshot of this month's counters and the plan's ceilings."""
        now = utc_now()
        month = month_key(now)
        limits = self.limits_for(account)
        return UsageSnapshot(
            plan=account.plan,
            month=month,
            counts=await self.usage.get_counts(account.id, month),
            limits=limits.model_dump(),
            reset_at=next_month_start(now),
        )
