"""YAML bibliography export and the matching reader."""

import logging
import re
from datetime import date
from pathlib import Path

import yaml

from bibkit.citation.models import Citation, CitationDate, Contributor
from bibkit.core.taxonomy import EntryType, Role, parse_role

logger = logging.getLogger(__name__)

# Emission order of the fixed fields; identifiers go between these and parent
FIELD_ORDER = ("type", "title", "author", "date", "url", "publisher", "language")
RESERVED_KEYS = set(FIELD_ORDER) | {"parent"}

_ROLE_SUFFIX_RE = re.compile(r"^(.*\S)\s+\(([a-z][a-z-]*)\)$")


# ── Serializer ───────────────────────────────────────────────────────


def citation_to_dict(citation: Citation) -> dict:
    """Ordered mapping of one citation; absent fields are left out."""
    data: dict = {"type": citation.type.value, "title": citation.title}
    if citation.contributors:
        data["author"] = [format_contributor(c) for c in citation.contributors]
    if citation.date is not None:
        data["date"] = citation.date.isoformat()
    for field in ("url", "publisher", "language"):
        value = getattr(citation, field)
        if value:
            data[field] = value
    for kind in sorted(citation.identifiers):
        data[kind] = citation.identifiers[kind]
    if citation.parent is not None:
        data["parent"] = citation_to_dict(citation.parent)
    return data


def format_contributor(contributor: Contributor) -> str | dict:
    """``"Name"`` or ``"Name (role)"``.

    A plain name that itself reads as ``"Name (role)"`` is written as a
    ``{name: ...}`` mapping so the reader does not mistake it for a role.
    """
    if contributor.role is not None:
        return f"{contributor.name} ({contributor.role.value})"
    if _split_role_suffix(contributor.name) is not None:
        return {"name": contributor.name}
    return contributor.name


def to_yaml_str(*citations: Citation) -> str:
    """Render citations as a YAML document keyed by citation key.

    Colliding keys get a numeric suffix in order of appearance.
    """
    entries: dict[str, dict] = {}
    for citation in citations:
        key = citation.key
        n = 2
        while key in entries:
            key = f"{citation.key}-{n}"
            n += 1
        entries[key] = citation_to_dict(citation)
    return yaml.safe_dump(entries, sort_keys=False, allow_unicode=True, default_flow_style=False)


def export_citation(citation: Citation, output_path: str | Path) -> None:
    """Write a single citation as YAML."""
    Path(output_path).write_text(to_yaml_str(citation), encoding="utf-8")
    logger.info("Citation '%s' exported to %s", citation.key, output_path)


# ── Reader ───────────────────────────────────────────────────────────


def from_yaml_str(text: str) -> list[Citation]:
    """Parse a YAML bibliography back into Citations, in document order."""
    raw = yaml.safe_load(text)
    if not isinstance(raw, dict):
        raise ValueError("Bibliography YAML must be a mapping of key -> entry")
    return [citation_from_dict(entry) for entry in raw.values()]


def citation_from_dict(data: dict) -> Citation:
    if not isinstance(data, dict):
        raise ValueError(f"Citation entry must be a mapping, got {type(data).__name__}")

    authors = data.get("author") or []
    if isinstance(authors, (str, dict)):
        authors = [authors]

    identifiers = {
        str(k): str(v) for k, v in data.items() if k not in RESERVED_KEYS and v is not None
    }
    parent = data.get("parent")

    return Citation(
        type=EntryType(str(data["type"]).lower()),
        title=str(data["title"]),
        contributors=tuple(parse_contributor(a) for a in authors),
        date=_parse_date(data.get("date")),
        url=data.get("url"),
        publisher=_optional_str(data.get("publisher")),
        language=_optional_str(data.get("language")),
        identifiers=identifiers,
        parent=citation_from_dict(parent) if parent is not None else None,
    )


def parse_contributor(value: str | dict) -> Contributor:
    """Read ``"Name"``, ``"Name (role)"`` or a ``{name, role}`` mapping."""
    if isinstance(value, dict):
        if "name" not in value:
            raise ValueError(f"Author mapping needs a name: {value!r}")
        raw_role = value.get("role")
        role = parse_role(str(raw_role)) if raw_role else None
        if raw_role and role is None:
            raise ValueError(f"Unknown contributor role: {raw_role!r}")
        return Contributor(name=str(value["name"]), role=role)

    text = str(value)
    split = _split_role_suffix(text)
    if split is not None:
        return Contributor(name=split[0], role=split[1])
    return Contributor(name=text)


def _split_role_suffix(text: str) -> tuple[str, Role] | None:
    m = _ROLE_SUFFIX_RE.match(text)
    if m:
        role = parse_role(m.group(2))
        if role is not None:
            return m.group(1), role
    return None


def _optional_str(value) -> str | None:
    return str(value) if value is not None else None


def _parse_date(value) -> CitationDate | None:
    if value is None:
        return None
    if isinstance(value, date):
        return CitationDate(year=value.year, month=value.month, day=value.day)
    if isinstance(value, int):
        return CitationDate(year=value)
    parsed = CitationDate.parse(str(value))
    if parsed is None:
        raise ValueError(f"Unrecognized date: {value!r}")
    return parsed
