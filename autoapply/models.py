"""Data models for listings, candidates and application records."""
from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Union

Synonym = Union[str, "re.Pattern[str]"]

DEFAULT_PHONE = "0612345678"
DEFAULT_MOTIVATION = (
    "Ik ben enthousiast over deze functie en ik denk dat mijn vaardigheden "
    "goed aansluiten bij de eisen."
)


class FieldKind(str, Enum):
    TEXT = "text"
    PHONE = "phone"
    FILE = "file"
    CHOICE = "choice"


class Strategy(str, Enum):
    NATIVE_LABEL = "native-label"
    ADJACENT_TEXT = "adjacent-text"
    TYPE_BASED = "type-based"


class OutcomeStatus(str, Enum):
    APPLIED = "applied"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class CandidateProfile:
    first_name: str = ""
    middle_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    city: str = ""
    postal_code: str = ""
    motivation: str = ""
    cv_file: str = ""

    @property
    def phone_or_default(self) -> str:
        return self.phone or DEFAULT_PHONE

    @property
    def motivation_or_default(self) -> str:
        return self.motivation or DEFAULT_MOTIVATION

    def value_for(self, field_name: str) -> str:
        """Value to write into the form field named *field_name*."""
        if field_name == "phone":
            return self.phone_or_default
        if field_name == "motivation":
            return self.motivation_or_default
        return getattr(self, field_name, "") or ""


@dataclass(frozen=True)
class FieldDescriptor:
    name: str
    synonyms: tuple[Synonym, ...]
    kind: FieldKind = FieldKind.TEXT
    fallback_selector: str | None = None


@dataclass
class Listing:
    title: str
    location: str
    link: str
    salary: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Listing:
        return cls(
            title=str(data.get("title") or ""),
            location=str(data.get("location") or ""),
            link=str(data.get("link") or ""),
            salary=str(data.get("salary") or ""),
        )


@dataclass
class ApplicationRecord:
    title: str
    location: str
    link: str
    submitted_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(timespec="seconds")
    )

    @classmethod
    def for_listing(cls, listing: Listing) -> ApplicationRecord:
        return cls(title=listing.title, location=listing.location, link=listing.link)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ApplicationRecord:
        return cls(
            title=str(data.get("title") or ""),
            location=str(data.get("location") or ""),
            link=str(data["link"]),
            submitted_at=str(data.get("submittedAt") or data.get("submitted_at") or ""),
        )

    def to_dict(self) -> dict[str, str]:
        data = asdict(self)
        data["submittedAt"] = data.pop("submitted_at")
        return data


@dataclass
class ResolutionResult:
    """A located form element and how it was found. Never persisted."""

    locator: Any
    strategy: Strategy
    synonym: Synonym | None = None


@dataclass
class ListingOutcome:
    listing: Listing
    status: OutcomeStatus
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.APPLIED
