"""
Failure artifacts.

Screenshots are organized as::

    artifacts/failures/
    ├── acme-1718000000000.png
    └── globex-1718000004211.png
"""
import logging
import re
import time
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_SCOPE_SLUG = "automator"


def scope_slug(scope: str) -> str:
    """Lower-case ``scope`` and collapse every non-alphanumeric run into ``-``."""
    slug = re.sub(r"[^a-z0-9]+", "-", scope.lower()).strip("-")
    return slug or DEFAULT_SCOPE_SLUG


def build_failure_screenshot_path(
    target_dir: Union[str, Path],
    scope: str,
    timestamp_ms: Optional[int] = None,
) -> Path:
    stamp = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
    return Path(target_dir) / f"{scope_slug(scope)}-{stamp}.png"


async def capture_failure_screenshot(page, target_dir: Union[str, Path], scope: str) -> Optional[str]:
    """
    Save a full-page screenshot for a failed run.

    Returns the path on success and ``None`` when the capture itself fails,
    so a broken page never masks the original error.
    """
    path = build_failure_screenshot_path(target_dir, scope)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        await page.screenshot(path=str(path), full_page=True)
    except Exception as e:
        logger.warning(f"Failed to capture screenshot for {scope}: {e}")
        return None
    return str(path)
