"""
Application orchestrator.

Handles:
- Browser lifecycle (one Chromium per target, optional video recording)
- Handler detection (URL marker, then DOM probe)
- Per-target seeded pacing engine
- Failure classification and screenshot capture
- Run summary across targets
"""

import time
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from playwright.async_api import async_playwright

from .diagnostics import LogStep, logging_sink
from .errors import UnsupportedTargetError, classify_error, error_message
from .handlers import HANDLERS, ATSHandler, HandlerContext, detect_handler
from .human_like import HumanLikeEngine
from .profile import CandidateProfile
from .runtime import RuntimeOptions
from .screenshots import capture_failure_screenshot

ORCHESTRATOR_SCOPE = "Automator"
DEFAULT_RESUME_PATH = "fixtures/sample-resume.pdf"


@dataclass(frozen=True)
class Target:
    name: str
    url: str


@dataclass(frozen=True)
class ApplicationResult:
    success: bool
    duration_ms: int
    confirmation_id: Optional[str] = None
    error: Optional[str] = None
    error_category: Optional[str] = None
    screenshot_path: Optional[str] = None


def scoped_seed(base_seed: Optional[str], url: str) -> Optional[str]:
    """Derive the per-target seed so targets never share a delay stream."""
    seed = (base_seed or "").strip()
    return f"{seed}:{url}" if seed else None


def infer_scope_from_url(url: str, handlers: Sequence[ATSHandler] = HANDLERS) -> str:
    for handler in handlers:
        if handler.url_marker and handler.url_marker in url:
            return handler.scope
    return ORCHESTRATOR_SCOPE


def _elapsed_ms(started: float) -> int:
    return round((time.monotonic() - started) * 1000)


class ApplicationOrchestrator:
    """
    Runs one application per target, sequentially.

    Args:
        options: Immutable runtime options shared by every target
        resume_path: File uploaded by the handlers
        base_seed: Optional pacing seed; scoped per target URL
        log_step: Step sink; defaults to the ``atsfill.steps`` logger
        headless: Launch Chromium headless
        handlers: Ordered handler registry
    """

    def __init__(
        self,
        options: Optional[RuntimeOptions] = None,
        resume_path: str = DEFAULT_RESUME_PATH,
        base_seed: Optional[str] = None,
        log_step: Optional[LogStep] = None,
        headless: bool = True,
        handlers: Sequence[ATSHandler] = HANDLERS,
    ):
        self.options = options or RuntimeOptions()
        self.resume_path = resume_path
        self.base_seed = base_seed
        self.log_step = log_step or logging_sink()
        self.headless = headless
        self.handlers = handlers

    def build_engine(self, url: str) -> HumanLikeEngine:
        return HumanLikeEngine(scoped_seed(self.base_seed, url))

    async def apply_to_job(
        self,
        url: str,
        profile: CandidateProfile,
        page,
        human: Optional[HumanLikeEngine] = None,
    ) -> ApplicationResult:
        """
        Navigate ``page`` to ``url``, fill and submit the detected form.

        Never raises for automation failures: the error is classified and a
        screenshot is captured when enabled.
        """
        started = time.monotonic()
        scope = infer_scope_from_url(url, self.handlers)
        human = human or self.build_engine(url)
        self.log_step(
            scope,
            f"Human-like profile: {human.profile.name}, seed mode: {'seeded' if human.seeded else 'random'}.",
        )

        try:
            self.log_step(scope, f"Navigating to {url}.")
            await page.goto(url, wait_until="domcontentloaded")

            handler = await detect_handler(url, page, self.handlers)
            if handler is None:
                raise UnsupportedTargetError(f"Unsupported ATS URL: {url}")

            scope = handler.scope
            context = HandlerContext(
                resume_path=self.resume_path,
                log_step=self.log_step,
                human=human,
                options=self.options,
            )
            await handler.fill_form(page, profile, context)
            confirmation_id = (await handler.submit(page, context)).strip()
        except Exception as e:
            message = error_message(e)
            screenshot_path = None
            if self.options.features.capture_failure_screenshots:
                screenshot_path = await capture_failure_screenshot(
                    page, self.options.artifacts.failure_screenshot_dir, scope
                )
                if screenshot_path:
                    self.log_step(scope, f"Captured failure screenshot: {screenshot_path}")
                else:
                    self.log_step(scope, "Failed to capture screenshot.")
            self.log_step(scope, f"Application flow failed: {message}")
            return ApplicationResult(
                success=False,
                duration_ms=_elapsed_ms(started),
                error=message,
                error_category=classify_error(e),
                screenshot_path=screenshot_path,
            )

        self.log_step(scope, "Application flow finished successfully.")
        return ApplicationResult(
            success=True,
            duration_ms=_elapsed_ms(started),
            confirmation_id=confirmation_id,
        )

    async def run_target(self, playwright, target: Target, profile: CandidateProfile) -> ApplicationResult:
        scope = infer_scope_from_url(target.url, self.handlers)
        self.log_step(scope, f"Launching browser in {'headless' if self.headless else 'headed'} mode.")
        browser = await playwright.chromium.launch(headless=self.headless)
        try:
            context_kwargs = {}
            if self.options.features.capture_video:
                context_kwargs["record_video_dir"] = self.options.artifacts.video_dir
            browser_context = await browser.new_context(**context_kwargs)
            page = await browser_context.new_page()
            result = await self.apply_to_job(target.url, profile, page)
            await browser_context.close()
            return result
        finally:
            await browser.close()

    async def run(
        self, targets: Sequence[Target], profile: CandidateProfile
    ) -> Tuple[List[Tuple[Target, ApplicationResult]], int]:
        """Apply to every target in order. Returns (target, result) pairs and total duration."""
        started = time.monotonic()
        outcomes: List[Tuple[Target, ApplicationResult]] = []
        async with async_playwright() as p:
            for target in targets:
                self.log_step(ORCHESTRATOR_SCOPE, f"Applying to {target.name}.")
                target_started = time.monotonic()
                try:
                    result = await self.run_target(p, target, profile)
                except Exception as e:
                    # Browser launch or teardown failed; the target still gets a result.
                    result = ApplicationResult(
                        success=False,
                        duration_ms=_elapsed_ms(target_started),
                        error=error_message(e),
                        error_category=classify_error(e),
                    )
                outcomes.append((target, result))
        return outcomes, _elapsed_ms(started)


def format_run_summary(outcomes: Sequence[Tuple[Target, ApplicationResult]], total_duration_ms: int) -> str:
    successes = sum(1 for _, result in outcomes if result.success)
    lines = [
        "=== Run Summary ===",
        f"Targets: {len(outcomes)}",
        f"Successes: {successes}",
        f"Failures: {len(outcomes) - successes}",
        f"Total Duration: {total_duration_ms}ms",
    ]
    for target, result in outcomes:
        if result.success:
            lines.append(f"- {target.name}: success ({result.duration_ms}ms, confirmation={result.confirmation_id})")
            continue
        lines.append(
            f"- {target.name}: failed ({result.duration_ms}ms, "
            f"category={result.error_category or 'unknown'}, error={result.error or 'unknown'})"
        )
        if result.screenshot_path:
            lines.append(f"  screenshot={result.screenshot_path}")
    return "\n".join(lines)
