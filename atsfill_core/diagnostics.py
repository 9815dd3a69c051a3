import logging
import os
from typing import Callable, Dict, List, Optional, Tuple

LogStep = Callable[[str, str], None]

_LOGGER_CACHE: Dict[str, logging.Logger] = {}

STEP_LOGGER_NAME = "atsfill.steps"


def get_logger(name: str) -> logging.Logger:
    """Return a configured logger.

    Respects ATSFILL_DEBUG env var to set DEBUG/INFO level.
    Ensures we don't duplicate handlers across multiple imports.
    """
    lg = _LOGGER_CACHE.get(name)
    if lg:
        return lg
    lg = logging.getLogger(name)
    if not lg.handlers:
        level = logging.DEBUG if str(os.getenv("ATSFILL_DEBUG", "false")).lower() == "true" else logging.INFO
        lg.setLevel(level)
        handler = logging.StreamHandler()
        handler.setLevel(level)
        fmt = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        handler.setFormatter(fmt)
        lg.addHandler(handler)
        lg.propagate = False
    _LOGGER_CACHE[name] = lg
    return lg


def format_step(scope: str, message: str) -> str:
    return f"[{scope}] {message}"


def logging_sink(logger: Optional[logging.Logger] = None) -> LogStep:
    """Step sink that forwards ``[scope] message`` lines to a stdlib logger."""
    target = logger or get_logger(STEP_LOGGER_NAME)

    def log_step(scope: str, message: str) -> None:
        target.info(format_step(scope, message))

    return log_step


class StepRecorder:
    """Append-only step sink that keeps every line, optionally forwarding it."""

    def __init__(self, forward: Optional[LogStep] = None):
        self._entries: List[Tuple[str, str]] = []
        self._forward = forward

    def __call__(self, scope: str, message: str) -> None:
        self._entries.append((scope, message))
        if self._forward is not None:
            self._forward(scope, message)

    @property
    def lines(self) -> List[str]:
        return [format_step(scope, message) for scope, message in self._entries]

    def contains(self, fragment: str) -> bool:
        return any(fragment in line for line in self.lines)
