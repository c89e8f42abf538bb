"""Parent Resolver: synthesize the container citation an entry belongs to."""

import logging
from typing import Optional

from bibkit.citation.models import Citation
from bibkit.core.taxonomy import EntryType, default_parent, parse_entry_type
from bibkit.extract.models import SignalBag

logger = logging.getLogger(__name__)

# Signals that name a container, most specific first
CONTAINER_TITLE_FIELDS = ("container-title", "site-name", "publisher")

# schema.org container types that differ from entry type values
CONTAINER_SCHEMA_TYPES: dict[str, EntryType] = {
    "Periodical": EntryType.PERIODICAL,
    "PublicationVolume": EntryType.PERIODICAL,
    "PublicationIssue": EntryType.PERIODICAL,
    "Newspaper": EntryType.PERIODICAL,
    "Blog": EntryType.BLOG,
    "Book": EntryType.BOOK,
    "BookSeries": EntryType.BOOK,
    "Collection": EntryType.ANTHOLOGY,
    "WebSite": EntryType.WEB,
    "TVSeries": EntryType.VIDEO,
    "Movie": EntryType.VIDEO,
}

# Identifiers that describe the container rather than the entry itself
CONTAINER_IDENTIFIERS = ("issn",)
BOOK_LEVEL_IDENTIFIERS = ("isbn",)


def resolve_parent(entry_type: EntryType, bag: SignalBag) -> Optional[Citation]:
    """Build a minimal parent citation from container signals, if any.

    Types without a default parent never get one. An explicit container
    type in the signals replaces the default. Without any container title
    no parent is produced.
    """
    parent_type = default_parent(entry_type)
    if parent_type is None:
        return None

    title = _container_title(bag)
    if title is None:
        logger.debug("No container signals for %s; parent omitted", entry_type.value)
        return None

    parent_type = _explicit_container_type(entry_type, bag) or parent_type
    parent = Citation(
        type=parent_type,
        title=title,
        identifiers=container_identifiers(entry_type, bag),
    )
    logger.debug("Resolved parent %s '%s'", parent.type.value, parent.title)
    return parent


def container_identifiers(entry_type: EntryType, bag: SignalBag) -> dict[str, str]:
    """Identifier kind -> value for identifiers owned by the parent."""
    kinds = list(CONTAINER_IDENTIFIERS)
    if default_parent(entry_type) in (EntryType.BOOK, EntryType.ANTHOLOGY):
        kinds.extend(BOOK_LEVEL_IDENTIFIERS)

    identifiers = {}
    for kind in kinds:
        value = bag.best_value(f"identifier-{kind}")
        if value:
            identifiers[kind] = value
    return identifiers


# ── Helpers ──────────────────────────────────────────────────────────


def _container_title(bag: SignalBag) -> Optional[str]:
    for field in CONTAINER_TITLE_FIELDS:
        value = bag.best_value(field)
        if value:
            return value
    return None


def _explicit_container_type(entry_type: EntryType, bag: SignalBag) -> Optional[EntryType]:
    if entry_type == EntryType.ARTICLE and bag.has("conference-title"):
        return EntryType.PROCEEDINGS

    for cand in bag.ranked("container-type"):
        container = CONTAINER_SCHEMA_TYPES.get(cand.value) or parse_entry_type(cand.value)
        if container is not None and container != entry_type:
            return container

    if entry_type == EntryType.ARTICLE and "BlogPosting" in bag.values("schema-type"):
        return EntryType.BLOG
    return None
