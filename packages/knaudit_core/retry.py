"""Fixed-schedule retry around a single delivery operation.

The schedule is a pre-declared list of delays consumed front to back, so the
worst-case wall-clock cost is known up front (1 + 3 + 5 = 9s by default). There
is no jitter and no exponential growth.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from packages.knaudit_core.errors import DeliveryError
from packages.knaudit_shared.config import RetrySettings
from packages.knaudit_shared.logging import get_logger, log_fields

_LOGGER = get_logger(__name__)

T = TypeVar("T")

DEFAULT_DELAYS_SECONDS: tuple[float, ...] = (1.0, 3.0, 5.0)


@dataclass(frozen=True)
class RetryPolicy:
    """Ordered backoff delays; total attempts is ``1 + len(delays_seconds)``."""

    delays_seconds: tuple[float, ...] = DEFAULT_DELAYS_SECONDS
    retry_on: tuple[type[Exception], ...] = (DeliveryError,)

    def __post_init__(self) -> None:
        if any(delay < 0 for delay in self.delays_seconds):
            raise ValueError("retry delays must be >= 0")

    @property
    def max_attempts(self) -> int:
        return 1 + len(self.delays_seconds)

    @staticmethod
    def from_settings(settings: RetrySettings) -> "RetryPolicy":
        """Build a policy from the ``retry`` settings section."""
        return RetryPolicy(delays_seconds=tuple(settings.delays_seconds))


@dataclass(frozen=True)
class RetryOutcome(Generic[T]):
    """Result of a successful retried call and how many attempts it took."""

    value: T
    attempts: int


def with_retry(
    policy: RetryPolicy,
    operation: Callable[[], T],
    *,
    sleep: Callable[[float], None] = time.sleep,
    description: str = "operation",
) -> T:
    """Call ``operation`` until it succeeds or the policy's delays run out.

    Only exceptions listed in ``policy.retry_on`` are retried; others propagate
    at once. After the last attempt the final exception is re-raised unchanged.
    """
    outcome = run_with_retry(policy, operation, sleep=sleep, description=description)
    return outcome.value


def run_with_retry(
    policy: RetryPolicy,
    operation: Callable[[], T],
    *,
    sleep: Callable[[float], None] = time.sleep,
    description: str = "operation",
) -> RetryOutcome[T]:
    """Same as ``with_retry`` but also report the number of attempts made."""
    pending: Sequence[float] = policy.delays_seconds
    attempt = 0
    while True:
        attempt += 1
        try:
            value = operation()
        except policy.retry_on as exc:
            if attempt > len(pending):
                raise
            delay = pending[attempt - 1]
            _LOGGER.warning(
                "%s failed (%s); retrying in %gs (attempt %d/%d)",
                description,
                exc,
                delay,
                attempt,
                policy.max_attempts,
                extra=log_fields(
                    attempt=attempt,
                    max_attempts=policy.max_attempts,
                    delay_seconds=delay,
                ),
            )
            sleep(delay)
            continue
        return RetryOutcome(value=value, attempts=attempt)
