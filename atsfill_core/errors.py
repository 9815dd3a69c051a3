"""
Error taxonomy for form automation.

Every failure raised by the core falls into one of four categories:

- ``transient``: an element or condition did not show up in time (retryable)
- ``structural``: the page does not look like the handler expects (fatal)
- ``submission``: the form was sent but no confirmation appeared
- ``data``: the candidate record itself is invalid

Mapping gaps (unknown skill, unknown referral source) are not errors at all.
"""

from typing import Optional

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

TRANSIENT = "transient"
STRUCTURAL = "structural"
SUBMISSION = "submission"
DATA = "data"
UNKNOWN = "unknown"


class AutomationError(Exception):
    """Base class for all form automation errors"""
    category = UNKNOWN


class UITimingError(AutomationError):
    """Expected element or state did not appear within its timeout"""
    category = TRANSIENT


class StructuralMismatchError(AutomationError):
    """Expected selector or option is fundamentally absent"""
    category = STRUCTURAL


class SectionActivationError(StructuralMismatchError):
    """A step/section never became active across all attempts"""

    def __init__(self, scope: str, section: str, message: str):
        super().__init__(f"[{scope}] Section {section} did not activate: {message}")
        self.scope = scope
        self.section = section


class SubmissionConfirmationError(AutomationError):
    """Submission was triggered but the confirmation marker never appeared"""
    category = SUBMISSION


class ProfileError(AutomationError, ValueError):
    """Candidate profile violates its invariants"""
    category = DATA


class UnsupportedTargetError(StructuralMismatchError):
    """No registered handler recognises the target"""


class RetryExhaustedError(AutomationError):
    """The retry policy gave up on an operation"""

    def __init__(
        self,
        scope: str,
        step: str,
        attempt: int,
        max_attempts: int,
        last_error: BaseException,
    ):
        super().__init__(
            f'[{scope}] Step "{step}" failed after {attempt}/{max_attempts} attempts: '
            f"{error_message(last_error)}"
        )
        self.scope = scope
        self.step = step
        self.attempt = attempt
        self.max_attempts = max_attempts
        self.last_error = last_error

    @property
    def category(self) -> str:  # type: ignore[override]
        return classify_error(self.last_error)


def error_message(error: BaseException) -> str:
    return str(error) or error.__class__.__name__


def classify_error(error: Optional[BaseException]) -> str:
    """Return the taxonomy category for any exception."""
    if error is None:
        return UNKNOWN
    category = getattr(error, "category", None)
    if isinstance(category, str):
        return category
    if isinstance(error, (TimeoutError, PlaywrightTimeoutError)):
        return TRANSIENT
    return UNKNOWN


def is_retryable(error: BaseException) -> bool:
    """Default retry predicate: everything except structural and data errors."""
    return classify_error(error) not in (STRUCTURAL, DATA)
