#!/usr/bin/env python3
import os
from dataclasses import dataclass, fields, replace
from typing import Optional

from dotenv import load_dotenv

from .runtime import ArtifactPaths, FeatureFlags, PhaseTimeouts, RuntimeOptions, with_preset

load_dotenv()

DEFAULT_BASE_URL = "http://localhost:3939"

_TRUE_VALUES = ("1", "true", "yes", "y", "on")


def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None or str(v).strip() == "":
        return default
    return str(v).strip().lower() in _TRUE_VALUES


def _env_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or str(v).strip() == "":
        return default
    try:
        return int(str(v).strip())
    except ValueError:
        return default


def _env_str(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    if v is None or not v.strip():
        return default
    return v.strip()


@dataclass
class Config:
    """Application configuration"""
    base_url: str = DEFAULT_BASE_URL
    headless: bool = True
    human_seed: Optional[str] = None
    resume_path: str = "fixtures/sample-resume.pdf"
    profile_path: Optional[str] = None
    enable_retries: bool = True
    capture_screenshots: bool = True
    capture_video: bool = False
    artifacts_dir: str = "artifacts"
    runtime_preset: Optional[str] = None

    # Per-phase timeout overrides (ms); None keeps the preset/default value
    step_transition_ms: Optional[int] = None
    section_open_ms: Optional[int] = None
    typeahead_ms: Optional[int] = None
    conditional_reveal_ms: Optional[int] = None
    confirmation_ms: Optional[int] = None

    @classmethod
    def from_env(cls) -> "Config":
        defaults = cls()

        def timeout(name: str) -> Optional[int]:
            value = _env_int(name, -1)
            return value if value >= 0 else None

        return cls(
            base_url=(_env_str("ATSFILL_BASE_URL", defaults.base_url) or defaults.base_url).rstrip("/"),
            headless=_env_bool("ATSFILL_HEADLESS", defaults.headless),
            human_seed=_env_str("HUMAN_SEED"),
            resume_path=_env_str("ATSFILL_RESUME_PATH", defaults.resume_path),
            profile_path=_env_str("ATSFILL_PROFILE_PATH"),
            enable_retries=_env_bool("ATSFILL_ENABLE_RETRIES", defaults.enable_retries),
            capture_screenshots=_env_bool("ATSFILL_CAPTURE_SCREENSHOTS", defaults.capture_screenshots),
            capture_video=_env_bool("ATSFILL_CAPTURE_VIDEO", defaults.capture_video),
            artifacts_dir=_env_str("ATSFILL_ARTIFACTS_DIR", defaults.artifacts_dir),
            runtime_preset=_env_str("ATSFILL_RUNTIME_PRESET"),
            step_transition_ms=timeout("ATSFILL_STEP_TRANSITION_MS"),
            section_open_ms=timeout("ATSFILL_SECTION_OPEN_MS"),
            typeahead_ms=timeout("ATSFILL_TYPEAHEAD_MS"),
            conditional_reveal_ms=timeout("ATSFILL_CONDITIONAL_REVEAL_MS"),
            confirmation_ms=timeout("ATSFILL_CONFIRMATION_MS"),
        )

    def runtime_options(self) -> RuntimeOptions:
        """Build immutable runtime options: defaults, then preset, then explicit overrides."""
        options = RuntimeOptions(
            features=FeatureFlags(
                enable_retries=self.enable_retries,
                capture_failure_screenshots=self.capture_screenshots,
                capture_video=self.capture_video,
            ),
            artifacts=ArtifactPaths(
                failure_screenshot_dir=os.path.join(self.artifacts_dir, "failures"),
                video_dir=os.path.join(self.artifacts_dir, "videos"),
            ),
        )
        if self.runtime_preset:
            options = with_preset(options, self.runtime_preset)

        overrides = {
            f.name: getattr(self, f.name)
            for f in fields(PhaseTimeouts)
            if getattr(self, f.name) is not None
        }
        if overrides:
            options = replace(options, timeouts=replace(options.timeouts, **overrides))
        return options
