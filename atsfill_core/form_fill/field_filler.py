"""Thin wrappers over the page-automation primitives used by the handlers"""

from typing import Optional

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..errors import UITimingError

# In-page snippets. Kept as constants so every caller injects the same code.
APPEND_VALUE_JS = """(el, chunk) => {
  el.value += chunk;
  el.dispatchEvent(new Event('input', {bubbles:true}));
  el.dispatchEvent(new Event('change', {bubbles:true}));
}"""

SET_VALUE_JS = """(el, value) => {
  el.value = value;
  el.dispatchEvent(new Event('input', {bubbles:true}));
  el.dispatchEvent(new Event('change', {bubbles:true}));
}"""


async def fill_text(page, selector: str, value: str) -> None:
    await page.locator(selector).first.fill(value)


async def select_value(page, selector: str, value: str) -> None:
    await page.locator(selector).first.select_option(value)


async def set_file(page, selector: str, file_path: str) -> None:
    await page.locator(selector).first.set_input_files(file_path)


def radio_selector(name: str, value: str) -> str:
    return f'input[name="{name}"][value="{value}"]'


async def check_by_value(page, name: str, value: str) -> None:
    await page.locator(radio_selector(name, value)).first.check()


async def set_value_with_events(page, selector: str, value: str) -> None:
    """Set ``value`` directly in the DOM and fire input/change for reactive forms."""
    await page.locator(selector).first.evaluate(SET_VALUE_JS, value)


async def read_attribute(page, selector: str, name: str) -> Optional[str]:
    return await page.locator(selector).first.get_attribute(name)


async def count_matches(page, selector: str) -> int:
    return await page.locator(selector).count()


async def read_text(page, selector: str) -> str:
    return (await page.locator(selector).first.inner_text()).strip()


async def read_toggle_state(page, selector: str) -> bool:
    """Current state of a ``data-value`` toggle; anything but ``"true"`` is off."""
    return (await read_attribute(page, selector, "data-value")) == "true"


async def wait_for_required_selector(page, selector: str, timeout_ms: int, error_message: str) -> None:
    """Wait for ``selector`` to be visible; a timeout becomes :class:`UITimingError`."""
    try:
        await page.wait_for_selector(selector, state="visible", timeout=timeout_ms)
    except PlaywrightTimeoutError as e:
        raise UITimingError(f"{error_message}. {e}") from e
