"""Tests for citation models and the citation builder."""

import pytest

from bibkit.citation.builder import build_citation
from bibkit.citation.models import (
    PLACEHOLDER_KEY,
    Citation,
    CitationDate,
    Contributor,
    citation_key,
)
from bibkit.core.errors import MissingTitleError
from bibkit.core.taxonomy import EntryType, Role
from bibkit.extract.models import Provenance, SignalBag

S = Provenance.STRUCTURED
M = Provenance.SEMANTIC
H = Provenance.HEURISTIC


# ── Citation Key ─────────────────────────────────────────────────────


@pytest.mark.parametrize("title,key", [
    ("War and Peace", "war-and-peace"),
    ("Deep Learning: A Survey of Methods", "deep-learning-a-survey"),
    ("Café Society", "cafe-society"),
    ("Über die Natur", "uber-die-natur"),
    ("Война и мир", "voina-i-mir"),
    ("  Spaced   Out  ", "spaced-out"),
    ("2023 Annual Report", "2023-annual-report"),
    ("!!!", PLACEHOLDER_KEY),
    ("日本語", "ri-ben-yu"),
])
def test_citation_key(title, key):
    assert citation_key(title) == key


def test_key_is_derived_from_title():
    assert Citation(type=EntryType.WEB, title="Example Domain").key == "example-domain"


# ── Dates ────────────────────────────────────────────────────────────


@pytest.mark.parametrize("text,expected", [
    ("2024", CitationDate(year=2024)),
    ("2024-03", CitationDate(year=2024, month=3)),
    ("2024-03-05", CitationDate(year=2024, month=3, day=5)),
    ("2024-03-05T08:00:00Z", CitationDate(year=2024, month=3, day=5)),
    ("2024-03-05T23:30:00+02:00", CitationDate(year=2024, month=3, day=5)),
])
def test_date_parse(text, expected):
    assert CitationDate.parse(text) == expected


@pytest.mark.parametrize("text", ["March 2024", "2024-13", "2024-02-30", "", "yesterday"])
def test_date_parse_rejects(text):
    assert CitationDate.parse(text) is None


def test_date_isoformat_keeps_precision():
    assert CitationDate(year=2024).isoformat() == "2024"
    assert CitationDate(year=2024, month=3).isoformat() == "2024-03"
    assert CitationDate(year=2024, month=3, day=5).isoformat() == "2024-03-05"


def test_day_without_month_rejected():
    with pytest.raises(Exception):
        CitationDate(year=2024, day=5)


# ── Citation Model ───────────────────────────────────────────────────


def test_blank_title_rejected():
    with pytest.raises(Exception):
        Citation(type=EntryType.WEB, title="   ")


def test_citation_is_frozen():
    citation = Citation(type=EntryType.WEB, title="Example")
    with pytest.raises(Exception):
        citation.title = "Other"


def test_parent_is_nested_value():
    parent = Citation(type=EntryType.PERIODICAL, title="Journal of AI")
    child = Citation(type=EntryType.ARTICLE, title="Deep Learning", parent=parent)
    assert child.parent == Citation(type=EntryType.PERIODICAL, title="Journal of AI")


# ── Builder ──────────────────────────────────────────────────────────


def _bag():
    bag = SignalBag()
    bag.add("title", "Heading Title", M, "h1")
    bag.add("title", "Structured Title", S, "meta[og:title]")
    bag.add("url", "https://example.com/a", H, "page-url")
    bag.add("url", "https://example.com/canonical", M, "link[canonical]")
    return bag


def test_highest_provenance_title():
    citation = build_citation(EntryType.WEB, _bag())
    assert citation.title == "Structured Title"
    assert citation.url == "https://example.com/canonical"


def test_missing_title_raises():
    bag = SignalBag()
    bag.add("url", "https://example.com", H, "page-url")
    with pytest.raises(MissingTitleError):
        build_citation(EntryType.WEB, bag)


def test_date_skips_unparseable_candidates():
    bag = _bag()
    bag.add("date", "last Tuesday", S, "meta[date]")
    bag.add("date", "2021-06-01", M, "time[datetime]")
    assert build_citation(EntryType.WEB, bag).date == CitationDate(year=2021, month=6, day=1)


def test_no_date():
    assert build_citation(EntryType.WEB, _bag()).date is None


def test_contributors_from_bag():
    bag = _bag()
    bag.add("author", "Leo Tolstoy", H, "byline")
    bag.add("contributor", "Jane Smith", H, "credit-line", context="Translated by")
    citation = build_citation(EntryType.BOOK, bag)
    assert citation.contributors == (
        Contributor(name="Leo Tolstoy"),
        Contributor(name="Jane Smith", role=Role.TRANSLATOR),
    )


def test_lower_weight_authors_dropped_when_stronger_exist():
    bag = _bag()
    bag.add("author", "Byline Name", H, "byline")
    bag.add("author", "Meta Name", S, "meta[author]")
    citation = build_citation(EntryType.WEB, bag)
    assert [c.name for c in citation.contributors] == ["Meta Name"]


def test_explicit_contributors_used():
    bag = _bag()
    bag.add("author", "Ignored", S, "meta[author]")
    given = [Contributor(name="Given", role=Role.NARRATOR)]
    citation = build_citation(EntryType.AUDIO, bag, contributors=given)
    assert citation.contributors == (Contributor(name="Given", role=Role.NARRATOR),)


def test_identifiers_collected():
    bag = _bag()
    bag.add("identifier-doi", "10.1000/xyz", S, "meta[citation_doi]")
    bag.add("identifier-pmid", "12345", S, "meta[citation_pmid]")
    citation = build_citation(EntryType.ARTICLE, bag)
    assert citation.identifiers == {"doi": "10.1000/xyz", "pmid": "12345"}


def test_container_identifiers_move_to_parent():
    bag = _bag()
    bag.add("identifier-doi", "10.1000/xyz", S, "meta[citation_doi]")
    bag.add("identifier-issn", "1234-5678", S, "meta[citation_issn]")
    parent = Citation(type=EntryType.PERIODICAL, title="J", identifiers={"issn": "1234-5678"})

    with_parent = build_citation(EntryType.ARTICLE, bag, parent=parent)
    assert with_parent.identifiers == {"doi": "10.1000/xyz"}
    assert with_parent.parent.identifiers == {"issn": "1234-5678"}

    without_parent = build_citation(EntryType.ARTICLE, bag)
    assert without_parent.identifiers == {"doi": "10.1000/xyz", "issn": "1234-5678"}


def test_build_is_repeatable():
    bag = _bag()
    assert build_citation(EntryType.WEB, bag) == build_citation(EntryType.WEB, bag)


def test_publisher_and_language():
    bag = _bag()
    bag.add("publisher", "ACM", S, "meta[citation_publisher]")
    bag.add("language", "en_US", S, "meta[og:locale]")
    bag.add("language", "fr", M, "html[lang]")
    citation = build_citation(EntryType.ARTICLE, bag)
    assert citation.publisher == "ACM"
    assert citation.language == "en-US"


def test_publisher_and_language_absent():
    citation = build_citation(EntryType.WEB, _bag())
    assert citation.publisher is None
    assert citation.language is None
