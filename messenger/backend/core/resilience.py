"""
Resilience Infrastructure.

Circuit breaker with structured event logging, wrapped around calls to
external AI providers. Provider calls are never retried: a credit is
consumed before the call and a retry would double-bill the provider.

Usage:
    from messenger.backend.core.resilience import create_circuit_breaker

    breaker = create_circuit_breaker("anthropic", fail_max=5, timeout_duration=60)
    result = await breaker.call_async(agent.run, prompt)
"""

from datetime import timedelta
from typing import Any

import aiobreaker

from messenger.backend.core.logging import get_logger

logger = get_logger(__name__)


class ResilienceLogger(aiobreaker.CircuitBreakerListener):
    """Circuit breaker listener that emits structured resilience events.

    Every state transition is logged with a standardized set of fields
    so that resilience events can be filtered and aggregated:

        jq 'select(.resilience_event != null)' logs/system.jsonl
    """

    def __init__(self, dependency: str) -> None:
        self.dependency = dependency

    def state_change(self, cb: aiobreaker.CircuitBreaker, old_state: Any, new_state: Any) -> None:
        event_map = {
            "open": "circuit_breaker_opened",
            "half-open": "circuit_breaker_half_open",
            "closed": "circuit_breaker_closed",
        }
        state = getattr(new_state, "state", new_state)
        new_str = getattr(state, "name", str(state)).lower().replace("_", "-")
        event = event_map.get(new_str, f"circuit_breaker_{new_str}")
        log_level = "error" if new_str == "open" else "info"

        getattr(logger, log_level)(
            f"Circuit breaker {self.dependency}: {old_state} -> {new_state}",
            resilience_event=event,
            dependency=self.dependency,
            failure_count=cb.fail_counter,
        )

    def failure(self, cb: aiobreaker.CircuitBreaker, exception: Exception) -> None:
        logger.warning(
            f"Circuit breaker {self.dependency}: failure recorded",
            resilience_event="circuit_breaker_failure",
            dependency=self.dependency,
            failure_count=cb.fail_counter,
            error_type=type(exception).__name__,
        )


def create_circuit_breaker(
    dependency: str,
    fail_max: int = 5,
    timeout_duration: int = 60,
) -> aiobreaker.CircuitBreaker:
    """Create a circuit breaker with structured logging.

    Args:
        dependency: Name of the external dependency (for logging)
        fail_max: Number of consecutive failures before opening
        timeout_duration: Seconds to wait before the half-open test

    Returns:
        Configured CircuitBreaker instance
    """
    return aiobreaker.CircuitBreaker(
        fail_max=fail_max,
        timeout_duration=timedelta(seconds=timeout_duration),
        listeners=[ResilienceLogger(dependency)],
    )
