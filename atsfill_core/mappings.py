"""
Field Mapping Registry

Static per-platform tables translating candidate-profile vocabulary into each
form's option values. Lookups are pure; callers decide how to log omissions.

Families:
    experience_level, education  closed enum -> closed enum, total
    referral_source              free text -> closed enum, falls back to "other"
    skill                        free token -> closed enum, or None (omit)
"""

import re
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from .profile import EDUCATION_LEVELS, EXPERIENCE_LEVELS


class PlatformId(str, Enum):
    ACME = "acme"
    GLOBEX = "globex"


@dataclass(frozen=True)
class PlatformMappings:
    experience_level: Mapping[str, str]
    education: Mapping[str, str]
    referral_source: Mapping[str, str]
    referral_fallback: str
    skill: Mapping[str, str]


_NON_ALNUM = re.compile(r"[^a-z0-9]+")

# Spelling variants collapse onto one canonical skill key.
SKILL_ALIASES: Mapping[str, str] = MappingProxyType({
    "js": "javascript",
    "ecmascript": "javascript",
    "ts": "typescript",
    "py": "python",
    "python3": "python",
    "reactjs": "react",
    "node": "nodejs",
    "postgres": "sql",
    "postgresql": "sql",
    "mysql": "sql",
    "amazonwebservices": "aws",
    "gql": "graphql",
})


def _frozen(table) -> Mapping[str, str]:
    return MappingProxyType(dict(table))


MAPPING_REGISTRY: Mapping[PlatformId, PlatformMappings] = MappingProxyType({
    PlatformId.ACME: PlatformMappings(
        experience_level=_frozen({level: level for level in EXPERIENCE_LEVELS}),
        education=_frozen({level: level for level in EDUCATION_LEVELS}),
        referral_source=_frozen({
            "linkedin": "linkedin",
            "company-website": "company-website",
            "job-board": "job-board",
            "referral": "referral",
            "university": "university",
            "other": "other",
        }),
        referral_fallback="other",
        skill=_frozen({
            "javascript": "javascript",
            "typescript": "typescript",
            "python": "python",
            "react": "react",
            "nodejs": "nodejs",
            "sql": "sql",
            "git": "git",
            "docker": "docker",
            "aws": "aws",
            "graphql": "graphql",
        }),
    ),
    PlatformId.GLOBEX: PlatformMappings(
        experience_level=_frozen({
            "0-1": "intern",
            "1-3": "junior",
            "3-5": "mid",
            "5-10": "senior",
            "10+": "staff",
        }),
        education=_frozen({
            "high-school": "hs",
            "associates": "assoc",
            "bachelors": "bs",
            "masters": "ms",
            "phd": "phd",
        }),
        referral_source=_frozen({
            "linkedin": "linkedin",
            "company-website": "website",
            "job-board": "board",
            "referral": "referral",
            "university": "university",
            "other": "other",
        }),
        referral_fallback="other",
        skill=_frozen({
            "javascript": "js",
            "typescript": "ts",
            "python": "py",
            "react": "react",
            "nodejs": "node",
            "sql": "sql",
            "git": "git",
            "docker": "docker",
            "aws": "aws",
            "graphql": "graphql",
        }),
    ),
})


def _registry(platform) -> PlatformMappings:
    return MAPPING_REGISTRY[PlatformId(platform)]


def normalize_skill_key(raw_skill: str) -> str:
    """Case-insensitive, non-alphanumeric-stripped key with aliases resolved."""
    key = _NON_ALNUM.sub("", raw_skill.lower())
    return SKILL_ALIASES.get(key, key)


def map_experience_level(platform, value: str) -> str:
    return _registry(platform).experience_level[value]


def map_education(platform, value: str) -> str:
    return _registry(platform).education[value]


def referral_other_value(platform) -> str:
    return _registry(platform).referral_fallback


def map_referral_source(platform, value: str) -> str:
    mappings = _registry(platform)
    return mappings.referral_source.get(value.strip().lower(), mappings.referral_fallback)


def map_skill(platform, raw_skill: str) -> Optional[str]:
    """Platform token for ``raw_skill`` or ``None`` when the form has no equivalent."""
    return _registry(platform).skill.get(normalize_skill_key(raw_skill))
