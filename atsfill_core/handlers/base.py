"""Handler contract shared by every target form."""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from ..diagnostics import LogStep
from ..human_like import HumanLikeEngine
from ..mappings import PlatformId
from ..profile import CandidateProfile
from ..runtime import RuntimeOptions

T = TypeVar("T")


@dataclass(frozen=True)
class HandlerContext:
    """Everything a handler may use besides the page and the profile."""

    resume_path: str
    log_step: LogStep
    human: HumanLikeEngine
    options: RuntimeOptions

    async def measure_step(self, scope: str, step: str, action: Callable[[], Awaitable[T]]) -> T:
        self.log_step(scope, f"Start: {step}.")
        started = time.monotonic()
        result = await action()
        elapsed_ms = round((time.monotonic() - started) * 1000)
        self.log_step(scope, f"Done: {step} ({elapsed_ms}ms).")
        return result


class ATSHandler(ABC):
    """Interface for filling and submitting one target form variant."""

    platform: PlatformId
    scope: str = "generic"
    url_marker: str = ""

    async def matches(self, url: str, page) -> bool:
        """URL pattern first, then a DOM probe when the URL is not conclusive."""
        if self.url_marker and url and self.url_marker in url:
            return True
        return await self.probe_dom(page)

    @abstractmethod
    async def probe_dom(self, page) -> bool:
        """Return True when the page carries this platform's form markers."""

    @abstractmethod
    async def fill_form(self, page, profile: CandidateProfile, context: HandlerContext) -> None:
        """Fill every section in the target's structural order."""

    @abstractmethod
    async def submit(self, page, context: HandlerContext) -> str:
        """Submit and return the confirmation token read from the page."""

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return f"{self.__class__.__name__}(platform={self.platform.value!r})"
