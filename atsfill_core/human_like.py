"""
Human-like interaction engine.

Wraps raw field/click primitives with randomized but optionally reproducible
timing. A seeded engine hashes its seed to 32 bits and drives an xorshift32
generator, so the same seed and the same sequence of calls always produce the
same delays. Unseeded engines draw from a private ``random.Random``.

Usage:
    human = HumanLikeEngine(seed="ci:http://localhost:3939/globex.html")
    await human.type_into(page, "#g-fname", "Jane")
    await human.hover_then_click(page, "#globex-submit")
"""

import asyncio
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional

from .form_fill.field_filler import APPEND_VALUE_JS

LOW_OVERHEAD_PROFILE_NAME = "low-overhead"

_UINT32 = 0xFFFFFFFF
_FNV_OFFSET = 2166136261
_FNV_PRIME = 16777619
_ZERO_STATE_REPLACEMENT = 0x9E3779B9


@dataclass(frozen=True)
class DelayProfile:
    """Delay bands in milliseconds plus the long-text typing trade-off knobs."""

    name: str = LOW_OVERHEAD_PROFILE_NAME
    hover_dwell_min_ms: int = 35
    hover_dwell_max_ms: int = 90
    letter_type_min_ms: int = 12
    letter_type_max_ms: int = 28
    digit_type_min_ms: int = 24
    digit_type_max_ms: int = 40
    symbol_type_min_ms: int = 28
    symbol_type_max_ms: int = 48
    # Above this length only a prefix is typed key by key, the rest is injected.
    long_text_threshold: int = 120
    long_text_typed_prefix: int = 12


DEFAULT_DELAY_PROFILE = DelayProfile()


def hash_string_to_uint32(value: str) -> int:
    """
    Order-dependent XOR/multiply hash of ``value`` into 32 bits.

    Folds UTF-16 code units, so characters outside the BMP contribute both
    halves of their surrogate pair and seeds hash the same as in a browser.
    """
    data = value.encode("utf-16-le", "surrogatepass")
    h = _FNV_OFFSET
    for i in range(0, len(data), 2):
        h ^= data[i] | (data[i + 1] << 8)
        h = (h * _FNV_PRIME) & _UINT32
    return h


class Xorshift32:
    """32-bit xorshift generator yielding floats in [0, 1)."""

    def __init__(self, seed: int):
        state = seed & _UINT32
        self.state = state or _ZERO_STATE_REPLACEMENT

    def __call__(self) -> float:
        s = self.state
        s ^= (s << 13) & _UINT32
        s ^= s >> 17
        s ^= (s << 5) & _UINT32
        self.state = s
        return s / 0x100000000


def to_delay(min_ms: float, max_ms: float, rnd: Callable[[], float]) -> int:
    low, high = min(min_ms, max_ms), max(min_ms, max_ms)
    if low == high:
        return round(low)
    return round(low + rnd() * (high - low))


def character_class(ch: str) -> str:
    if ch.isascii() and ch.isalpha():
        return "letter"
    if ch.isascii() and ch.isdigit():
        return "digit"
    return "symbol"


class HumanLikeEngine:
    """
    Pacing engine owned by a single run.

    Args:
        seed: Optional seed string; ``None`` or empty means non-deterministic
        profile: Delay bands and long-text constants
        sleep: Awaitable sleep taking seconds (``asyncio.sleep`` by default)
    """

    def __init__(
        self,
        seed: Optional[str] = None,
        profile: DelayProfile = DEFAULT_DELAY_PROFILE,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        self.seed = seed or None
        self.profile = profile
        self._sleep = sleep or asyncio.sleep
        if self.seed:
            self._random: Callable[[], float] = Xorshift32(hash_string_to_uint32(self.seed))
        else:
            self._random = random.Random().random
        self.delays: List[int] = []

    @property
    def seeded(self) -> bool:
        return self.seed is not None

    def next_delay(self, min_ms: float, max_ms: float) -> int:
        delay = to_delay(min_ms, max_ms, self._random)
        self.delays.append(delay)
        return delay

    def keystroke_delay(self, ch: str) -> int:
        p = self.profile
        kind = character_class(ch)
        if kind == "letter":
            return self.next_delay(p.letter_type_min_ms, p.letter_type_max_ms)
        if kind == "digit":
            return self.next_delay(p.digit_type_min_ms, p.digit_type_max_ms)
        return self.next_delay(p.symbol_type_min_ms, p.symbol_type_max_ms)

    async def _wait(self, delay_ms: int) -> None:
        await self._sleep(delay_ms / 1000)

    async def pause(self, min_ms: float, max_ms: float) -> None:
        await self._wait(self.next_delay(min_ms, max_ms))

    async def scroll_into_view(self, page, selector: str) -> None:
        await page.locator(selector).first.scroll_into_view_if_needed()

    async def hover_then_click(self, page, selector: str) -> None:
        """Scroll, hover, dwell, click. The order never depends on the seed."""
        locator = page.locator(selector).first
        await locator.scroll_into_view_if_needed()
        await locator.hover()
        await self._wait(self.next_delay(self.profile.hover_dwell_min_ms, self.profile.hover_dwell_max_ms))
        await locator.click()

    async def type_into(self, page, selector: str, text: str) -> None:
        """Clear the field, then type ``text`` with per-character delays."""
        locator = page.locator(selector).first
        await locator.scroll_into_view_if_needed()
        await locator.fill("")
        if not text:
            return

        typed = text
        remainder = ""
        if len(text) > self.profile.long_text_threshold:
            typed = text[: self.profile.long_text_typed_prefix]
            remainder = text[self.profile.long_text_typed_prefix:]

        for ch in typed:
            await locator.press_sequentially(ch, delay=self.keystroke_delay(ch))

        if remainder:
            await locator.evaluate(APPEND_VALUE_JS, remainder)
