"""
Platform handlers and the first-match handler registry.

Adding a target form means adding one handler class and one registry entry;
existing handlers stay untouched.
"""

from typing import Optional, Sequence

from .acme import AcmeHandler
from .base import ATSHandler, HandlerContext
from .globex import GlobexHandler

HANDLERS: Sequence[ATSHandler] = (AcmeHandler(), GlobexHandler())


async def detect_handler(url: str, page, handlers: Sequence[ATSHandler] = HANDLERS) -> Optional[ATSHandler]:
    """Return the first handler whose ``matches`` accepts the target."""
    for handler in handlers:
        if await handler.matches(url, page):
            return handler
    return None


__all__ = [
    "ATSHandler",
    "AcmeHandler",
    "GlobexHandler",
    "HANDLERS",
    "HandlerContext",
    "detect_handler",
]
