"""Interaction steps reused by more than one handler."""

from typing import List, Optional

from ..errors import SubmissionConfirmationError
from ..form_fill.field_filler import (
    check_by_value,
    count_matches,
    radio_selector,
    read_attribute,
    read_text,
    read_toggle_state,
    select_value,
    wait_for_required_selector,
)
from ..retry import RetryPolicy, with_optional_retry
from ..retry_profiles import PauseRange
from .base import HandlerContext


async def fill_optional_field_with_logs(
    page,
    selector: str,
    value: Optional[str],
    scope: str,
    label: str,
    context: HandlerContext,
) -> bool:
    """Type ``value`` when present, otherwise log the skip. Returns True if filled."""
    if value:
        context.log_step(scope, f"{label} provided, filling optional field.")
        await context.human.type_into(page, selector, value)
        return True
    context.log_step(scope, f"{label} not provided, skipping optional field.")
    return False


async def wait_visible_with_retry(
    page,
    selector: str,
    timeout_ms: int,
    error_message: str,
    retry_policy: RetryPolicy,
    scope: str,
    step: str,
    context: HandlerContext,
) -> None:
    await with_optional_retry(
        lambda: wait_for_required_selector(page, selector, timeout_ms, error_message),
        context,
        retry_policy,
        scope=scope,
        step=step,
    )


async def _maybe_pause(context: HandlerContext, pause_range: Optional[PauseRange]) -> None:
    if pause_range:
        await context.human.pause(pause_range.min_ms, pause_range.max_ms)


async def human_click_with_optional_pause(
    page,
    selector: str,
    context: HandlerContext,
    pause_range: Optional[PauseRange] = None,
) -> None:
    await context.human.hover_then_click(page, selector)
    await _maybe_pause(context, pause_range)


async def human_check_selector(
    page,
    selector: str,
    context: HandlerContext,
    pause_range: Optional[PauseRange] = None,
) -> None:
    await context.human.scroll_into_view(page, selector)
    await _maybe_pause(context, pause_range)
    await page.locator(selector).first.check()
    await _maybe_pause(context, pause_range)


async def human_select_value(
    page,
    selector: str,
    value: str,
    context: HandlerContext,
    pause_range: Optional[PauseRange] = None,
) -> None:
    await context.human.scroll_into_view(page, selector)
    await _maybe_pause(context, pause_range)
    await select_value(page, selector, value)
    await _maybe_pause(context, pause_range)


async def human_check_by_value(
    page,
    name: str,
    value: str,
    context: HandlerContext,
    pause_range: Optional[PauseRange] = None,
) -> None:
    await context.human.scroll_into_view(page, radio_selector(name, value))
    await _maybe_pause(context, pause_range)
    await check_by_value(page, name, value)
    await _maybe_pause(context, pause_range)


async def human_toggle_state(
    page,
    selector: str,
    should_be_active: bool,
    context: HandlerContext,
    pause_range: Optional[PauseRange] = None,
) -> None:
    """Flip a ``data-value`` toggle with a paced click unless it is already in the wanted state."""
    if await read_toggle_state(page, selector) == should_be_active:
        return
    await human_click_with_optional_pause(page, selector, context, pause_range)


async def select_skills(
    page,
    skills,
    scope: str,
    context: HandlerContext,
    map_skill,
    option_selector,
    select_option,
) -> List[str]:
    """
    Map each profile skill to the form's vocabulary and select it.

    Unmapped skills and mapped skills missing from the UI are skipped with a
    log line naming the token. Returns the platform tokens that were selected.
    """
    selected: List[str] = []
    for skill in skills:
        mapped = map_skill(skill)
        if mapped is None:
            context.log_step(scope, f'Skill "{skill}" has no mapping for {scope}, skipping.')
            continue
        selector = option_selector(mapped)
        if await count_matches(page, selector) == 0:
            context.log_step(scope, f'Mapped skill "{mapped}" not present in UI, skipping.')
            continue
        if mapped in selected:
            continue
        if await select_option(selector):
            selected.append(mapped)
    context.log_step(scope, f"Selected {len(selected)} matching skills.")
    return selected


async def read_confirmation(page, selector: str, scope: str) -> str:
    confirmation = await read_text(page, selector)
    if not confirmation:
        raise SubmissionConfirmationError(f"{scope} confirmation marker {selector!r} is empty")
    return confirmation


async def has_markers(page, *selectors: str) -> bool:
    for selector in selectors:
        if await count_matches(page, selector) == 0:
            return False
    return True


async def attribute_contains(page, selector: str, name: str, token: str) -> bool:
    value = (await read_attribute(page, selector, name)) or ""
    return token in value.split()
