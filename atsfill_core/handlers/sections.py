"""
Section controllers: make a step or section interactable before filling it.

Wizards activate by navigation (continue button of the previous step),
accordions by disclosure (clicking the header). Both share the contract
"don't touch fields until the container is verifiably active".
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Awaitable, Callable, Dict, Generic, Optional, TypeVar, Union

from ..errors import (
    RetryExhaustedError,
    SectionActivationError,
    StructuralMismatchError,
    UITimingError,
    error_message,
)
from ..form_fill.field_filler import count_matches, read_attribute, wait_for_required_selector
from ..retry import RetryPolicy, with_optional_retry
from ..retry_profiles import ACTION_PAUSE
from .base import HandlerContext

SectionId = Union[int, str]
S = TypeVar("S", int, str)


class SectionState(str, Enum):
    UNKNOWN = "unknown"
    INACTIVE = "inactive"
    ACTIVE = "active"


class SectionController(ABC, Generic[S]):
    """State machine per platform: one ``ensure_active`` per section id."""

    def __init__(self, scope: str, transition_policy: RetryPolicy):
        self.scope = scope
        self.transition_policy = transition_policy
        self.states: Dict[S, SectionState] = {}

    def state_of(self, section_id: S) -> SectionState:
        return self.states.get(section_id, SectionState.UNKNOWN)

    @abstractmethod
    def active_selector(self, section_id: S) -> str:
        """Selector that matches only when the section is active/open."""

    @abstractmethod
    def timeout_ms(self, context: HandlerContext) -> int:
        """Per-attempt wait budget for the active marker."""

    @abstractmethod
    async def read_state(self, page, section_id: S) -> SectionState:
        """Inspect the DOM; raise StructuralMismatchError if the section is absent."""

    @abstractmethod
    async def activate(self, page, section_id: S, context: HandlerContext) -> None:
        """Perform one pacing-engine click on the section's toggle/continue control."""

    def describe(self, section_id: S) -> str:
        return str(section_id)

    async def ensure_active(self, page, section_id: S, context: HandlerContext) -> None:
        label = self.describe(section_id)

        async def attempt() -> None:
            state = await self.read_state(page, section_id)
            self.states[section_id] = state
            if state is not SectionState.ACTIVE:
                await self.activate(page, section_id, context)
            await wait_for_required_selector(
                page,
                self.active_selector(section_id),
                self.timeout_ms(context),
                f"{self.scope} section {label} did not become active",
            )
            self.states[section_id] = SectionState.ACTIVE

        try:
            await with_optional_retry(
                attempt,
                context,
                self.transition_policy,
                scope=self.scope,
                step=f"activate section {label}",
            )
        except (RetryExhaustedError, UITimingError, StructuralMismatchError) as e:
            self.states[section_id] = SectionState.INACTIVE
            raise SectionActivationError(self.scope, label, error_message(e)) from e


class StepSectionController(SectionController[int]):
    """Step wizard: step N is reached through step N-1's continue button."""

    step_selector_template = '.form-step[data-step="{step}"]'
    continue_selector_template = '.form-step[data-step="{step}"] .btn-primary'

    def step_selector(self, step: int) -> str:
        return self.step_selector_template.format(step=step)

    def active_selector(self, section_id: int) -> str:
        return f"{self.step_selector(section_id)}.active"

    def timeout_ms(self, context: HandlerContext) -> int:
        return context.options.timeouts.step_transition_ms

    def describe(self, section_id: int) -> str:
        return f"step {section_id}"

    async def read_state(self, page, section_id: int) -> SectionState:
        if await count_matches(page, self.step_selector(section_id)) == 0:
            raise StructuralMismatchError(f"{self.scope} form has no step {section_id}")
        if await count_matches(page, self.active_selector(section_id)) > 0:
            return SectionState.ACTIVE
        return SectionState.INACTIVE

    async def activate(self, page, section_id: int, context: HandlerContext) -> None:
        if section_id <= 1:
            raise StructuralMismatchError(f"{self.scope} step 1 is inactive and has no previous step")
        continue_selector = self.continue_selector_template.format(step=section_id - 1)
        if await count_matches(page, continue_selector) == 0:
            raise StructuralMismatchError(f"{self.scope} step {section_id - 1} has no continue control")
        context.log_step(self.scope, f"Step {section_id - 1} complete, continuing to step {section_id}.")
        await context.human.hover_then_click(page, continue_selector)


class AccordionSectionController(SectionController[str]):
    """Accordion: a section opens when its header carries ``open_class``."""

    header_selector_template = '.application-section[data-section="{section}"] .section-header'

    def __init__(self, scope: str, transition_policy: RetryPolicy, open_class: str = "open"):
        super().__init__(scope, transition_policy)
        self.open_class = open_class

    def header_selector(self, section_id: str) -> str:
        return self.header_selector_template.format(section=section_id)

    def active_selector(self, section_id: str) -> str:
        return f"{self.header_selector(section_id)}.{self.open_class}"

    def timeout_ms(self, context: HandlerContext) -> int:
        return context.options.timeouts.section_open_ms

    async def read_state(self, page, section_id: str) -> SectionState:
        header = self.header_selector(section_id)
        if await count_matches(page, header) == 0:
            raise StructuralMismatchError(f"{self.scope} form has no {section_id!r} section")
        classes = (await read_attribute(page, header, "class")) or ""
        if self.open_class in classes.split():
            return SectionState.ACTIVE
        return SectionState.INACTIVE

    async def activate(self, page, section_id: str, context: HandlerContext) -> None:
        await context.human.hover_then_click(page, self.header_selector(section_id))
        await context.human.pause(ACTION_PAUSE.min_ms, ACTION_PAUSE.max_ms)


async def run_section(
    page,
    section_id: SectionId,
    scope: str,
    context: HandlerContext,
    controller: SectionController,
    fill: Callable[[], Awaitable[None]],
    enter_log: Optional[str] = None,
) -> None:
    """Activate ``section_id`` and only then run ``fill``."""
    if enter_log:
        context.log_step(scope, enter_log)
    await controller.ensure_active(page, section_id, context)
    await context.measure_step(scope, f"fill section {controller.describe(section_id)}", fill)
