"""Citation Builder: assemble the immutable Citation from pipeline outputs."""

import logging
from typing import Optional

from bibkit.citation.models import Citation, CitationDate, Contributor
from bibkit.classify.parent import container_identifiers
from bibkit.classify.roles import assign_roles
from bibkit.core.errors import MissingTitleError
from bibkit.core.taxonomy import EntryType
from bibkit.extract.models import SignalBag

logger = logging.getLogger(__name__)

_IDENTIFIER_PREFIX = "identifier-"


def build_citation(
    entry_type: EntryType,
    bag: SignalBag,
    parent: Optional[Citation] = None,
    contributors: Optional[list[Contributor]] = None,
) -> Citation:
    """Combine type, parent, contributors and scalar signals into a Citation.

    Raises MissingTitleError when the bag holds no title candidate.
    """
    title = bag.best_value("title")
    if not title:
        raise MissingTitleError("No title signal found on the page")

    if contributors is None:
        contributors = assign_roles(bag.contributors())

    citation = Citation(
        type=entry_type,
        title=title,
        contributors=tuple(contributors),
        date=_best_date(bag),
        url=bag.best_value("url"),
        publisher=bag.best_value("publisher"),
        language=_best_language(bag),
        identifiers=_entry_identifiers(entry_type, bag, parent),
        parent=parent,
    )
    logger.info(
        "Built %s citation '%s' (%d contributors, parent=%s)",
        citation.type.value,
        citation.title,
        len(citation.contributors),
        citation.parent.type.value if citation.parent else None,
    )
    return citation


# ── Helpers ──────────────────────────────────────────────────────────


def _best_date(bag: SignalBag) -> Optional[CitationDate]:
    """First parseable date among candidates, highest weight first."""
    for cand in bag.ranked("date"):
        parsed = CitationDate.parse(cand.value)
        if parsed is not None:
            return parsed
        logger.debug("Unparseable date '%s' from %s", cand.value, cand.source)
    return None


def _best_language(bag: SignalBag) -> Optional[str]:
    """Highest-weight language tag, with "en_US" style locales hyphenated."""
    value = bag.best_value("language")
    return value.replace("_", "-") if value else None


def _entry_identifiers(
    entry_type: EntryType, bag: SignalBag, parent: Optional[Citation]
) -> dict[str, str]:
    moved = set(container_identifiers(entry_type, bag)) if parent is not None else set()
    identifiers = {}
    for field, _ in bag.iter_prefixed(_IDENTIFIER_PREFIX):
        kind = field[len(_IDENTIFIER_PREFIX):]
        if kind in moved:
            continue
        identifiers[kind] = bag.best_value(field)
    return identifiers
