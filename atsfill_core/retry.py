"""
Retry Logic for Page Interactions

Provides a generic "retry an async operation under a policy" combinator with
exponential backoff. The combinator knows nothing about what it retries.

Usage:
    from atsfill_core.retry import RetryPolicy, with_retry

    policy = RetryPolicy(attempts=3, initial_delay_ms=150, backoff_multiplier=1.5)
    await with_retry(open_dropdown, policy, log_step, scope="Globex", step="open dropdown")
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from .errors import RetryExhaustedError, error_message

logger = logging.getLogger(__name__)

T = TypeVar("T")

LogStep = Callable[[str, str], None]
Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """
    How a fallible operation is retried.

    Args:
        attempts: Total number of calls allowed (1 means no retry)
        initial_delay_ms: Delay before the first retry
        backoff_multiplier: Growth factor applied per retry
        should_retry: Optional predicate; returning False stops immediately,
            even with attempts remaining
    """

    attempts: int = 1
    initial_delay_ms: int = 0
    backoff_multiplier: float = 1.0
    should_retry: Optional[Callable[[BaseException], bool]] = None

    def __post_init__(self):
        if self.attempts < 1:
            raise ValueError(f"attempts must be >= 1, got {self.attempts}")
        if self.initial_delay_ms < 0:
            raise ValueError(f"initial_delay_ms must be >= 0, got {self.initial_delay_ms}")
        if self.backoff_multiplier < 1:
            raise ValueError(f"backoff_multiplier must be >= 1, got {self.backoff_multiplier}")

    def with_predicate(self, should_retry: Callable[[BaseException], bool]) -> "RetryPolicy":
        return RetryPolicy(
            attempts=self.attempts,
            initial_delay_ms=self.initial_delay_ms,
            backoff_multiplier=self.backoff_multiplier,
            should_retry=should_retry,
        )


def compute_backoff_delay(initial_delay_ms: float, backoff_multiplier: float, attempt_index: int) -> int:
    """Delay in milliseconds before retry number ``attempt_index`` (0-based)."""
    safe_initial = max(0.0, initial_delay_ms)
    safe_backoff = backoff_multiplier if backoff_multiplier > 0 else 1.0
    return round(safe_initial * safe_backoff ** attempt_index)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    log_step: LogStep,
    *,
    scope: str,
    step: str,
    sleep: Optional[Sleep] = None,
) -> T:
    """
    Run ``operation`` until it succeeds or ``policy`` gives up.

    Emits one ``log_step`` line per retry (never on success). The predicate is
    consulted before the attempt budget, so a policy can refuse to retry some
    error classes even with attempts left.

    Raises:
        RetryExhaustedError: chained to the last underlying error
    """
    sleep = sleep or asyncio.sleep
    max_attempts = policy.attempts

    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()
        except Exception as e:
            allowed_by_predicate = policy.should_retry(e) if policy.should_retry else True
            allowed_by_count = attempt < max_attempts

            if not (allowed_by_predicate and allowed_by_count):
                logger.debug(f"[{scope}] giving up on {step!r} at attempt {attempt}/{max_attempts}")
                raise RetryExhaustedError(scope, step, attempt, max_attempts, e) from e

            delay_ms = compute_backoff_delay(
                policy.initial_delay_ms, policy.backoff_multiplier, attempt - 1
            )
            log_step(
                scope,
                f'Retrying step "{step}" after failed attempt {attempt}/{max_attempts}: '
                f"{error_message(e)}. Waiting {delay_ms}ms.",
            )
            await sleep(delay_ms / 1000)

    # Unreachable: the loop either returns or raises.
    raise RuntimeError(f'[{scope}] Step "{step}" failed without a successful attempt.')


async def with_optional_retry(
    operation: Callable[[], Awaitable[T]],
    context,
    policy: RetryPolicy,
    *,
    scope: str,
    step: str,
) -> T:
    """Retry under ``policy`` unless the run disabled retries, then call once."""
    if not context.options.features.enable_retries:
        return await operation()
    return await with_retry(operation, policy, context.log_step, scope=scope, step=step)
