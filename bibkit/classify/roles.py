"""Role Assigner: map contributor context tags to roles."""

import logging
import re
from typing import Mapping, Optional

from bibkit.citation.models import Contributor
from bibkit.core.taxonomy import ROLE_PHRASES, Role
from bibkit.extract.models import Candidate

logger = logging.getLogger(__name__)

_CAMEL_RE = re.compile(r"(?<=[a-z])(?=[A-Z])")
_PUNCT_RE = re.compile(r"[^\w\s-]")


def assign_roles(
    candidates: list[Candidate],
    extra_phrases: Mapping[str, Role] | None = None,
) -> list[Contributor]:
    """Turn ordered contributor candidates into Contributors.

    Untagged or unmatched candidates become plain authors. Input order is
    kept; repeated (name, role) pairs keep their first position.
    """
    phrases = dict(ROLE_PHRASES)
    if extra_phrases:
        phrases.update({normalize_context(k): v for k, v in extra_phrases.items()})

    contributors: list[Contributor] = []
    seen: set[tuple[str, Optional[Role]]] = set()

    for cand in candidates:
        role = match_role(cand.context, phrases)
        if cand.context and role is None:
            logger.debug("Unmatched credit '%s' for %s; treating as author", cand.context, cand.value)
        key = (cand.value.casefold(), role)
        if key in seen:
            continue
        seen.add(key)
        contributors.append(Contributor(name=cand.value, role=role))

    return contributors


def match_role(context: str | None, phrases: Mapping[str, Role] = ROLE_PHRASES) -> Optional[Role]:
    """Exact phrase match first, then the longest phrase found as whole words."""
    if not context:
        return None
    tag = normalize_context(context)
    if not tag:
        return None
    if tag in phrases:
        return phrases[tag]

    padded = f" {tag} "
    for phrase in sorted(phrases, key=len, reverse=True):
        if f" {phrase} " in padded:
            return phrases[phrase]
    return None


def normalize_context(context: str) -> str:
    """'musicBy' / 'Translated  by:' -> 'music by' / 'translated by'."""
    text = _CAMEL_RE.sub(" ", context)
    text = _PUNCT_RE.sub(" ", text.lower()).replace("-", " ")
    return " ".join(text.split())
