"""Candidate profile: the single source of truth fed into every handler."""

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .errors import ProfileError

EDUCATION_LEVELS: Tuple[str, ...] = ("high-school", "associates", "bachelors", "masters", "phd")
EXPERIENCE_LEVELS: Tuple[str, ...] = ("0-1", "1-3", "3-5", "5-10", "10+")

_REQUIRED_TEXT = (
    "first_name",
    "last_name",
    "email",
    "phone",
    "location",
    "school",
    "earliest_start_date",
    "referral_source",
    "cover_letter",
)
_OPTIONAL_TEXT = ("linkedin", "portfolio", "salary_expectation")

# camelCase keys accepted by from_dict
_ALIASES = {
    "firstName": "first_name",
    "lastName": "last_name",
    "experienceLevel": "experience_level",
    "workAuthorized": "work_authorized",
    "requiresVisa": "requires_visa",
    "earliestStartDate": "earliest_start_date",
    "salaryExpectation": "salary_expectation",
    "referralSource": "referral_source",
    "coverLetter": "cover_letter",
    "linkedIn": "linkedin",
}


@dataclass(frozen=True)
class CandidateProfile:
    """Immutable candidate record. Optional fields are ``None`` or non-empty."""

    first_name: str
    last_name: str
    email: str
    phone: str
    location: str
    school: str
    education: str
    experience_level: str
    skills: Tuple[str, ...]
    work_authorized: bool
    requires_visa: bool
    earliest_start_date: str
    referral_source: str
    cover_letter: str
    linkedin: Optional[str] = None
    portfolio: Optional[str] = None
    salary_expectation: Optional[str] = None

    def __post_init__(self):
        for name in _REQUIRED_TEXT:
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ProfileError(f"Required profile field {name!r} is missing or empty")
        for name in _OPTIONAL_TEXT:
            value = getattr(self, name)
            if value is not None and (not isinstance(value, str) or not value.strip()):
                raise ProfileError(f"Optional profile field {name!r} must be a non-empty string or absent")
        if self.education not in EDUCATION_LEVELS:
            raise ProfileError(f"Unknown education level {self.education!r}")
        if self.experience_level not in EXPERIENCE_LEVELS:
            raise ProfileError(f"Unknown experience level {self.experience_level!r}")
        for name in ("work_authorized", "requires_visa"):
            if not isinstance(getattr(self, name), bool):
                raise ProfileError(f"Profile field {name!r} must be true or false")
        if not isinstance(self.skills, (list, tuple)):
            raise ProfileError("Profile field 'skills' must be a list of strings")
        if any(not isinstance(skill, str) or not skill.strip() for skill in self.skills):
            raise ProfileError("Profile skills must be non-empty strings")
        if not isinstance(self.skills, tuple):
            object.__setattr__(self, "skills", tuple(self.skills))

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CandidateProfile":
        """Build a profile from snake_case or camelCase keys; blank optionals become ``None``."""
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            name = _ALIASES.get(key, key)
            if name not in known:
                continue
            kwargs[name] = value
        for name in _OPTIONAL_TEXT:
            value = kwargs.get(name)
            if isinstance(value, str) and not value.strip():
                kwargs[name] = None
        if kwargs.get("skills") is None:
            kwargs["skills"] = ()
        missing = [f.name for f in fields(cls) if f.name not in kwargs and f.name not in _OPTIONAL_TEXT]
        if missing:
            raise ProfileError(f"Profile is missing fields: {', '.join(missing)}")
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["skills"] = list(self.skills)
        return data

    def replace(self, **changes: Any) -> "CandidateProfile":
        data = self.to_dict()
        data.update(changes)
        return CandidateProfile.from_dict(data)


def load_profile(path) -> CandidateProfile:
    """Load a profile from a JSON file."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ProfileError(f"Invalid profile JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ProfileError(f"Profile file {path} must contain a JSON object")
    return CandidateProfile.from_dict(data)


SAMPLE_PROFILE = CandidateProfile(
    first_name="Jane",
    last_name="Doe",
    email="jane.doe@email.com",
    phone="+1 (555) 123-4567",
    location="San Francisco, CA",
    linkedin="https://linkedin.com/in/janedoe",
    portfolio="https://github.com/janedoe",
    school="Stanford University",
    education="bachelors",
    experience_level="0-1",
    skills=("javascript", "typescript", "react", "git"),
    work_authorized=True,
    requires_visa=False,
    earliest_start_date="2026-06-01",
    salary_expectation="85000",
    referral_source="linkedin",
    cover_letter=(
        "I'm excited to apply for the Software Engineer role. As a recent CS graduate "
        "with experience building full-stack applications in TypeScript and React, I'm "
        "eager to contribute to a team that values clean code and user-first design. My "
        "recent internship gave me hands-on experience with agile development, CI/CD "
        "pipelines, and shipping features that impacted thousands of users."
    ),
)
