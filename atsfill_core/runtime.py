"""
Runtime options threaded through every handler call.

Constructed once per run by the orchestrator and never mutated afterwards.
Presets mirror common environments; ``with_preset`` returns a new object.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict


@dataclass(frozen=True)
class FeatureFlags:
    enable_retries: bool = True
    capture_failure_screenshots: bool = True
    capture_video: bool = False


@dataclass(frozen=True)
class PhaseTimeouts:
    step_transition_ms: int = 3000
    section_open_ms: int = 2000
    typeahead_ms: int = 6000
    conditional_reveal_ms: int = 2000
    confirmation_ms: int = 7000


@dataclass(frozen=True)
class ArtifactPaths:
    failure_screenshot_dir: str = "artifacts/failures"
    video_dir: str = "artifacts/videos"


@dataclass(frozen=True)
class RuntimeOptions:
    features: FeatureFlags = field(default_factory=FeatureFlags)
    timeouts: PhaseTimeouts = field(default_factory=PhaseTimeouts)
    artifacts: ArtifactPaths = field(default_factory=ArtifactPaths)

    @property
    def artifacts_enabled(self) -> bool:
        return self.features.capture_failure_screenshots or self.features.capture_video


RUNTIME_PRESETS: Dict[str, Dict[str, Any]] = {
    "fast": {
        "step_transition_ms": 1500,
        "section_open_ms": 1000,
        "typeahead_ms": 3000,
        "conditional_reveal_ms": 1000,
        "confirmation_ms": 4000,
    },
    "patient": {
        "step_transition_ms": 8000,
        "section_open_ms": 5000,
        "typeahead_ms": 12000,
        "conditional_reveal_ms": 5000,
        "confirmation_ms": 15000,
    },
}


def with_preset(options: RuntimeOptions, preset: str) -> RuntimeOptions:
    """Return ``options`` with the timeouts of a named preset applied."""
    if preset not in RUNTIME_PRESETS:
        raise ValueError(f"Unknown runtime preset {preset!r}; choose from {sorted(RUNTIME_PRESETS)}")
    return replace(options, timeouts=replace(options.timeouts, **RUNTIME_PRESETS[preset]))
