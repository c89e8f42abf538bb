"""Shared data models for citations."""

import re
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from unidecode import unidecode

from bibkit.core.taxonomy import EntryType, Role

PLACEHOLDER_KEY = "placeholder"

_KEY_WORDS = 4
_NON_KEY_RE = re.compile(r"[^a-z0-9\s]")
_PARTIAL_DATE_RE = re.compile(r"^(\d{4})(?:-(\d{1,2}))?(?:-(\d{1,2}))?$")


class Contributor(BaseModel):
    """A person credited on a work; no role means plain authorship."""

    model_config = ConfigDict(frozen=True)

    name: str
    role: Optional[Role] = None


class CitationDate(BaseModel):
    """Calendar date with year, month or day precision."""

    model_config = ConfigDict(frozen=True)

    year: int
    month: Optional[int] = Field(default=None, ge=1, le=12)
    day: Optional[int] = Field(default=None, ge=1, le=31)

    @model_validator(mode="after")
    def day_needs_month(self) -> "CitationDate":
        if self.day is not None and self.month is None:
            raise ValueError("A day requires a month")
        return self

    @classmethod
    def parse(cls, text: str) -> "CitationDate | None":
        """Parse ``YYYY``, ``YYYY-MM``, ``YYYY-MM-DD`` or an ISO 8601 timestamp.

        Returns None when the text is not a recognizable date.
        """
        text = text.strip()
        m = _PARTIAL_DATE_RE.match(text)
        if m:
            year, month, day = (int(g) if g else None for g in m.groups())
            try:
                date(year, month or 1, day or 1)
            except ValueError:
                return None
            return cls(year=year, month=month, day=day)

        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None
        return cls(year=parsed.year, month=parsed.month, day=parsed.day)

    def isoformat(self) -> str:
        if self.month is None:
            return f"{self.year:04d}"
        if self.day is None:
            return f"{self.year:04d}-{self.month:02d}"
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"


class Citation(BaseModel):
    """A classified, attributed bibliographic entry."""

    model_config = ConfigDict(frozen=True)

    type: EntryType
    title: str
    contributors: tuple[Contributor, ...] = ()
    date: Optional[CitationDate] = None
    url: Optional[str] = None
    publisher: Optional[str] = None
    language: Optional[str] = None
    identifiers: dict[str, str] = Field(default_factory=dict)
    parent: Optional["Citation"] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Citation title must not be blank")
        return v

    @property
    def key(self) -> str:
        """Short bibliography key derived from the first words of the title."""
        return citation_key(self.title)


def citation_key(title: str) -> str:
    """Lowercase ASCII key of up to four title words joined by dashes.

    Non-Latin text is transliterated first, so "Über" keys as "uber".
    """
    ascii_title = unidecode(title).lower()
    words = _NON_KEY_RE.sub("", ascii_title).split()
    if not words:
        return PLACEHOLDER_KEY
    return "-".join(words[:_KEY_WORDS])
