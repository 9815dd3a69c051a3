#!/usr/bin/env python3
"""
atsfill - fill and submit job applications on the supported ATS forms

Usage:
    atsfill [--target NAME=URL ...] [--profile profile.json] [--resume cv.pdf]
            [--seed SEED] [--headless | --headed] [--no-retries] [--verbose]
"""

import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from typing import List, Optional, Sequence

from .config import Config
from .diagnostics import STEP_LOGGER_NAME, get_logger
from .errors import ProfileError
from .orchestrator import ApplicationOrchestrator, Target, format_run_summary
from .profile import SAMPLE_PROFILE, load_profile

logger = get_logger(__name__)

DEFAULT_TARGETS = (
    ("Acme Corp", "/acme.html"),
    ("Globex Corporation", "/globex.html"),
)


def default_targets(base_url: str) -> List[Target]:
    return [Target(name, f"{base_url.rstrip('/')}{path}") for name, path in DEFAULT_TARGETS]


def parse_target(raw: str) -> Target:
    if "=" not in raw:
        raise argparse.ArgumentTypeError(f"Invalid target format: {raw} (use NAME=URL)")
    name, url = raw.split("=", 1)
    if not name.strip() or not url.strip():
        raise argparse.ArgumentTypeError(f"Invalid target format: {raw} (use NAME=URL)")
    return Target(name.strip(), url.strip())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="atsfill",
        description="Fill and submit job applications on supported ATS forms",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--target", "-t", action="append", type=parse_target, metavar="NAME=URL",
        help="Target form (repeatable); defaults to Acme and Globex under ATSFILL_BASE_URL",
    )
    parser.add_argument("--profile", "-p", help="Candidate profile JSON file")
    parser.add_argument("--resume", "-r", help="Resume file to upload")
    parser.add_argument("--seed", help="Pacing seed for reproducible delays (overrides HUMAN_SEED)")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--headless", dest="headless", action="store_true", default=None, help="Run headless")
    mode.add_argument("--headed", dest="headless", action="store_false", help="Show the browser window")
    parser.set_defaults(headless=None)
    parser.add_argument("--no-retries", action="store_true", help="Run every step exactly once")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    return parser


def config_from_args(args, base: Optional[Config] = None) -> Config:
    cfg = base or Config.from_env()
    changes = {}
    if args.profile:
        changes["profile_path"] = args.profile
    if args.resume:
        changes["resume_path"] = args.resume
    if args.seed:
        changes["human_seed"] = args.seed
    if args.headless is not None:
        changes["headless"] = args.headless
    if args.no_retries:
        changes["enable_retries"] = False
    return replace(cfg, **changes) if changes else cfg


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        logger.setLevel(logging.DEBUG)
        get_logger(STEP_LOGGER_NAME).setLevel(logging.DEBUG)

    cfg = config_from_args(args)
    try:
        profile = load_profile(cfg.profile_path) if cfg.profile_path else SAMPLE_PROFILE
        options = cfg.runtime_options()
    except (ProfileError, OSError, ValueError) as e:
        logger.error(e)
        return 1

    targets = args.target or default_targets(cfg.base_url)
    orchestrator = ApplicationOrchestrator(
        options=options,
        resume_path=cfg.resume_path,
        base_seed=cfg.human_seed,
        headless=cfg.headless,
    )
    outcomes, total_ms = asyncio.run(orchestrator.run(targets, profile))
    print(format_run_summary(outcomes, total_ms))
    return 0 if outcomes and all(result.success for _, result in outcomes) else 1


if __name__ == "__main__":
    sys.exit(main())
