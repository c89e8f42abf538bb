"""Shared data models for signal extraction."""

from enum import IntEnum
from typing import Iterator, Optional

from pydantic import BaseModel, Field


class Provenance(IntEnum):
    """How trustworthy a signal source is; higher wins."""

    HEURISTIC = 1  # visible text, URL shape
    SEMANTIC = 2  # semantic HTML elements, microdata, link tags
    STRUCTURED = 3  # explicit metadata: meta tags, JSON-LD


class Candidate(BaseModel):
    """One extracted value for a semantic field."""

    value: str
    weight: Provenance
    source: str = Field(description="Where the value came from, e.g. 'meta[og:title]'")
    context: Optional[str] = Field(
        default=None, description="Credit phrase or property name for contributors"
    )


class SignalBag(BaseModel):
    """Raw Signal Bag: field name -> every candidate found, in discovery order."""

    fields: dict[str, list[Candidate]] = Field(default_factory=dict)

    # ── Building ─────────────────────────────────────────────────

    def add(
        self,
        field: str,
        value: str | None,
        weight: Provenance,
        source: str,
        context: str | None = None,
    ) -> None:
        """Record a candidate; blank values are treated as absent."""
        if value is None:
            return
        value = " ".join(str(value).split())
        if not value:
            return
        self.fields.setdefault(field, []).append(
            Candidate(value=value, weight=weight, source=source, context=context)
        )

    # ── Queries ──────────────────────────────────────────────────

    def has(self, field: str) -> bool:
        return bool(self.fields.get(field))

    def candidates(self, field: str) -> list[Candidate]:
        return list(self.fields.get(field, []))

    def ranked(self, field: str) -> list[Candidate]:
        """Candidates by descending weight; discovery order breaks ties."""
        return sorted(self.candidates(field), key=lambda c: -c.weight)

    def best(self, field: str) -> Optional[Candidate]:
        ranked = self.ranked(field)
        return ranked[0] if ranked else None

    def best_value(self, field: str) -> Optional[str]:
        cand = self.best(field)
        return cand.value if cand else None

    def values(self, field: str) -> list[str]:
        return [c.value for c in self.candidates(field)]

    def iter_prefixed(self, prefix: str) -> Iterator[tuple[str, list[Candidate]]]:
        for name, cands in self.fields.items():
            if name.startswith(prefix) and cands:
                yield name, cands

    def contributors(self) -> list[Candidate]:
        """Ordered contributor input for role assignment.

        Author candidates of the highest weight present come first, then
        every tagged contributor candidate, each in discovery order.
        """
        authors = self.candidates("author")
        if authors:
            top = max(c.weight for c in authors)
            authors = [c for c in authors if c.weight == top]
        return authors + self.candidates("contributor")
