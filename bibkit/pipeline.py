"""Pipeline entry point: one page in, one citation (or a defined error) out."""

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict

from bibkit.citation.builder import build_citation
from bibkit.citation.models import Citation
from bibkit.classify.classifier import classify
from bibkit.classify.parent import resolve_parent
from bibkit.classify.roles import assign_roles
from bibkit.core.config import PipelineConfig
from bibkit.core.errors import BibKitError
from bibkit.exporters.yaml_export import to_yaml_str
from bibkit.extract.document import load_document
from bibkit.extract.signals import extract_signals

logger = logging.getLogger(__name__)


# ── Result Model ─────────────────────────────────────────────────────


class CitationResult(BaseModel):
    """Outcome of one classify-and-build invocation."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    url: str
    citation: Optional[Citation] = None
    error: Optional[BibKitError] = None

    @property
    def ok(self) -> bool:
        return self.citation is not None

    @property
    def yaml(self) -> Optional[str]:
        """The citation pre-rendered as YAML, or None on failure."""
        return to_yaml_str(self.citation) if self.citation is not None else None

    def unwrap(self) -> Citation:
        """Return the citation, re-raising the captured error on failure."""
        if self.error is not None:
            raise self.error
        return self.citation


# ── Public API ───────────────────────────────────────────────────────


def classify_and_build(dom, url: str, config: PipelineConfig | None = None) -> CitationResult:
    """Extract, classify, attribute and assemble a citation for one page.

    Never raises for pipeline failures: ExtractionError and
    MissingTitleError come back inside the result.
    """
    config = config or PipelineConfig()
    try:
        document = load_document(dom, url)
        bag = extract_signals(document)
        entry_type = classify(bag, config)
        parent = resolve_parent(entry_type, bag)
        contributors = assign_roles(bag.contributors(), config.role_phrases)
        citation = build_citation(entry_type, bag, parent=parent, contributors=contributors)
    except BibKitError as exc:
        logger.warning("Citation failed for %s: %s", url, exc)
        return CitationResult(url=str(url), error=exc)

    return CitationResult(url=url, citation=citation)
