"""
Shared fixtures: silent pacing engine, recording log sink, handler context.
"""

import pytest

from atsfill_core.diagnostics import StepRecorder
from atsfill_core.handlers.base import HandlerContext
from atsfill_core.human_like import HumanLikeEngine
from atsfill_core.runtime import FeatureFlags, RuntimeOptions


async def no_sleep(_seconds: float) -> None:
    return None


class SleepRecorder:
    """Awaitable sleep replacement that remembers every requested duration."""

    def __init__(self):
        self.calls = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def recorder():
    return StepRecorder()


@pytest.fixture
def human():
    return HumanLikeEngine(seed="tests", sleep=no_sleep)


def make_context(
    recorder: StepRecorder,
    human: HumanLikeEngine = None,
    enable_retries: bool = True,
    resume_path: str = "fixtures/sample-resume.pdf",
    options: RuntimeOptions = None,
) -> HandlerContext:
    return HandlerContext(
        resume_path=resume_path,
        log_step=recorder,
        human=human or HumanLikeEngine(seed="tests", sleep=no_sleep),
        options=options or RuntimeOptions(features=FeatureFlags(enable_retries=enable_retries)),
    )


@pytest.fixture
def context(recorder, human):
    return make_context(recorder, human)
