"""
atsfill_core package: form automation for the supported ATS targets

Usage:
    from atsfill_core import ApplicationOrchestrator, SAMPLE_PROFILE, Target

    orchestrator = ApplicationOrchestrator(base_seed="demo")
    outcomes, total_ms = await orchestrator.run(
        [Target("Acme Corp", "http://localhost:3939/acme.html")], SAMPLE_PROFILE
    )
"""
from .config import Config
from .diagnostics import StepRecorder, get_logger, logging_sink
from .errors import (
    AutomationError,
    ProfileError,
    RetryExhaustedError,
    SectionActivationError,
    StructuralMismatchError,
    SubmissionConfirmationError,
    UITimingError,
    UnsupportedTargetError,
)
from .handlers import HANDLERS, AcmeHandler, ATSHandler, GlobexHandler, HandlerContext, detect_handler
from .human_like import HumanLikeEngine
from .mappings import PlatformId
from .orchestrator import ApplicationOrchestrator, ApplicationResult, Target, format_run_summary
from .profile import SAMPLE_PROFILE, CandidateProfile, load_profile
from .retry import RetryPolicy, with_optional_retry, with_retry
from .runtime import RuntimeOptions

__version__ = "0.1.0"

__all__ = [
    # Core
    "ApplicationOrchestrator",
    "ApplicationResult",
    "Target",
    "format_run_summary",
    "Config",
    "RuntimeOptions",
    # Profile
    "CandidateProfile",
    "SAMPLE_PROFILE",
    "load_profile",
    "PlatformId",
    # Handlers
    "ATSHandler",
    "AcmeHandler",
    "GlobexHandler",
    "HANDLERS",
    "HandlerContext",
    "detect_handler",
    # Engines
    "HumanLikeEngine",
    "RetryPolicy",
    "with_retry",
    "with_optional_retry",
    # Logging
    "StepRecorder",
    "get_logger",
    "logging_sink",
    # Errors
    "AutomationError",
    "ProfileError",
    "RetryExhaustedError",
    "SectionActivationError",
    "StructuralMismatchError",
    "SubmissionConfirmationError",
    "UITimingError",
    "UnsupportedTargetError",
]
