"""Named retry policies and pause ranges shared by the handlers."""

from dataclasses import dataclass

from .errors import is_retryable
from .retry import RetryPolicy


@dataclass(frozen=True)
class PauseRange:
    min_ms: int
    max_ms: int


ACTION_PAUSE = PauseRange(min_ms=40, max_ms=120)
PRE_SUBMIT_PAUSE = PauseRange(min_ms=120, max_ms=220)

SINGLE_ATTEMPT_RETRY_PROFILE = RetryPolicy(attempts=1, initial_delay_ms=0, backoff_multiplier=1)

# Section transitions refuse to retry structural mismatches (missing container).
ACME_STEP_TRANSITION_RETRY_PROFILE = RetryPolicy(
    attempts=2, initial_delay_ms=120, backoff_multiplier=1.4, should_retry=is_retryable
)
ACME_TYPEAHEAD_RETRY_PROFILE = RetryPolicy(
    attempts=3, initial_delay_ms=150, backoff_multiplier=1.5, should_retry=is_retryable
)
ACME_SUBMIT_RETRY_PROFILE = RetryPolicy(
    attempts=2, initial_delay_ms=180, backoff_multiplier=1.6, should_retry=is_retryable
)

GLOBEX_SECTION_OPEN_RETRY_PROFILE = RetryPolicy(
    attempts=2, initial_delay_ms=100, backoff_multiplier=1.3, should_retry=is_retryable
)
GLOBEX_TYPEAHEAD_RETRY_PROFILE = RetryPolicy(
    attempts=3, initial_delay_ms=180, backoff_multiplier=1.6, should_retry=is_retryable
)
GLOBEX_SUBMIT_RETRY_PROFILE = RetryPolicy(
    attempts=2, initial_delay_ms=180, backoff_multiplier=1.6, should_retry=is_retryable
)
