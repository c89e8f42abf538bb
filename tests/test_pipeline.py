"""End-to-end tests for classify_and_build."""

import pytest
import yaml

from bibkit.citation.models import CitationDate, Contributor
from bibkit.core.config import PipelineConfig, load_config
from bibkit.core.errors import BibKitError, ExtractionError, MissingTitleError
from bibkit.core.taxonomy import EntryType, Role
from bibkit.pipeline import CitationResult, classify_and_build


# ── Pages ────────────────────────────────────────────────────────────


PLAIN_PAGE = "<html><head><title>Example Domain</title></head><body></body></html>"

SCHOLARLY_PAGE = """
<html><head>
  <meta name="citation_title" content="Deep Learning">
  <meta name="citation_author" content="Jane Doe">
  <meta name="citation_journal_title" content="Journal of AI">
</head><body><h1>Deep Learning</h1></body></html>
"""

TRANSLATED_PAGE = """
<html><head>
  <meta property="og:type" content="book">
  <title>War and Peace | Example Books</title>
</head><body>
  <h1>War and Peace</h1>
  <p class="byline">By Leo Tolstoy</p>
  <p class="credits">Translated by Jane Smith</p>
</body></html>
"""

NEWS_PAGE = """
<html lang="en"><head>
<script type="application/ld+json">
{"@context": "https://schema.org", "@graph": [
  {"@type": "WebSite", "name": "Ledger Online"},
  {"@type": "NewsArticle",
   "headline": "Rates rise again",
   "author": [{"@type": "Person", "name": "Ann Lee"}],
   "translator": {"@type": "Person", "name": "Cy Diaz"},
   "datePublished": "2024-03-05T08:00:00Z",
   "isPartOf": {"@type": "Periodical", "name": "The Daily Ledger", "issn": "1234-5679"}}
]}
</script>
<meta property="og:url" content="https://ledger.example.com/rates">
</head><body><h1>Rates rise again</h1></body></html>
"""

POST_PAGE = """
<html><head>
  <meta property="og:site_name" content="X">
  <meta property="og:title" content="Someone on X: hello world">
  <meta property="og:type" content="article">
</head><body></body></html>
"""


# ── Reference Scenarios ──────────────────────────────────────────────


def test_plain_page_becomes_web_citation():
    result = classify_and_build(PLAIN_PAGE, "http://example.com")
    assert result.ok
    citation = result.citation
    assert citation.type == EntryType.WEB
    assert citation.title == "Example Domain"
    assert citation.contributors == ()
    assert citation.parent is None
    assert citation.url == "http://example.com"


def test_scholarly_tags_become_article_with_periodical():
    citation = classify_and_build(SCHOLARLY_PAGE, "https://journal.example.org/a/1").unwrap()
    assert citation.type == EntryType.ARTICLE
    assert citation.title == "Deep Learning"
    assert citation.contributors == (Contributor(name="Jane Doe"),)
    assert citation.parent.type == EntryType.PERIODICAL
    assert citation.parent.title == "Journal of AI"


def test_credit_lines_become_ordered_contributors():
    citation = classify_and_build(TRANSLATED_PAGE, "https://books.example.com/wp").unwrap()
    assert citation.type == EntryType.BOOK
    assert citation.title == "War and Peace"
    assert citation.contributors == (
        Contributor(name="Leo Tolstoy"),
        Contributor(name="Jane Smith", role=Role.TRANSLATOR),
    )
    assert citation.parent is None


def test_news_article_from_json_ld():
    citation = classify_and_build(NEWS_PAGE, "https://ledger.example.com/rates?ref=home").unwrap()
    assert citation.type == EntryType.ARTICLE
    assert citation.url == "https://ledger.example.com/rates"
    assert citation.date == CitationDate(year=2024, month=3, day=5)
    assert citation.contributors == (
        Contributor(name="Ann Lee"),
        Contributor(name="Cy Diaz", role=Role.TRANSLATOR),
    )
    assert citation.identifiers == {}
    assert citation.parent.type == EntryType.PERIODICAL
    assert citation.parent.title == "The Daily Ledger"
    assert citation.parent.identifiers == {"issn": "1234-5679"}


def test_post_becomes_tweet_in_thread():
    citation = classify_and_build(POST_PAGE, "https://x.com/someone/status/1234").unwrap()
    assert citation.type == EntryType.TWEET
    assert citation.parent.type == EntryType.THREAD
    assert citation.parent.title == "X"


# ── YAML Output ──────────────────────────────────────────────────────


def test_result_yaml():
    result = classify_and_build(PLAIN_PAGE, "http://example.com")
    assert yaml.safe_load(result.yaml) == {
        "example-domain": {"type": "web", "title": "Example Domain", "url": "http://example.com"}
    }


def test_result_yaml_role_suffix():
    result = classify_and_build(TRANSLATED_PAGE, "https://books.example.com/wp")
    entry = yaml.safe_load(result.yaml)["war-and-peace"]
    assert entry["author"] == ["Leo Tolstoy", "Jane Smith (translator)"]


def test_result_yaml_publisher_and_language():
    page = """
    <html lang="en"><head>
      <meta name="citation_title" content="Deep Learning">
      <meta name="citation_publisher" content="ACM">
      <meta name="citation_journal_title" content="Journal of AI">
    </head><body></body></html>
    """
    result = classify_and_build(page, "https://dl.example.org/doi/abs/1")
    assert result.citation.publisher == "ACM"
    assert result.citation.language == "en"
    entry = yaml.safe_load(result.yaml)["deep-learning"]
    assert entry["publisher"] == "ACM"
    assert entry["language"] == "en"
    assert list(entry).index("language") < list(entry).index("parent")


def test_og_locale_language_hyphenated():
    page = """
    <html lang="fr"><head>
      <meta property="og:title" content="Rates rise again">
      <meta property="og:locale" content="en_US">
    </head><body></body></html>
    """
    assert classify_and_build(page, "https://news.example.com/r").citation.language == "en-US"


# ── Classification ───────────────────────────────────────────────────


@pytest.mark.parametrize("media", [
    '<meta property="og:video" content="https://cdn.example.com/v.mp4">',
    '<meta property="og:video:secure_url" content="https://cdn.example.com/v.mp4">',
])
def test_og_website_with_og_video_is_video(media):
    page = f"""
    <html><head>
      <meta property="og:type" content="website">
      <meta property="og:title" content="Launch Trailer">
      {media}
    </head><body></body></html>
    """
    assert classify_and_build(page, "https://studio.example.com/trailer").citation.type == EntryType.VIDEO


def test_og_website_with_video_element_is_video():
    page = """
    <html><head>
      <meta property="og:type" content="website">
      <title>Launch Trailer</title>
    </head><body><video src="trailer.mp4"></video></body></html>
    """
    assert classify_and_build(page, "https://studio.example.com/trailer").citation.type == EntryType.VIDEO


def test_og_website_alone_is_web():
    page = """
    <html><head>
      <meta property="og:type" content="website">
      <meta property="og:title" content="Studio Home">
    </head><body></body></html>
    """
    assert classify_and_build(page, "https://studio.example.com/").citation.type == EntryType.WEB


def test_invalid_isbn_does_not_make_book():
    page = """
    <html><head>
      <meta name="citation_title" content="Reading List">
      <meta name="citation_isbn" content="see below">
    </head><body></body></html>
    """
    citation = classify_and_build(page, "https://library.example.org/list").unwrap()
    assert citation.type == EntryType.WEB
    assert citation.identifiers == {}


def test_valid_isbn_makes_book():
    page = """
    <html><head>
      <meta name="citation_title" content="The Odyssey">
      <meta name="citation_isbn" content="978-0-14-044793-4">
    </head><body></body></html>
    """
    citation = classify_and_build(page, "https://books.example.com/odyssey").unwrap()
    assert citation.type == EntryType.BOOK
    assert citation.identifiers == {"isbn": "9780140447934"}


# ── Errors ───────────────────────────────────────────────────────────


@pytest.mark.parametrize("dom,url", [
    (None, "http://example.com"),
    ("", "http://example.com"),
    (PLAIN_PAGE, "not a url"),
])
def test_extraction_error_returned(dom, url):
    result = classify_and_build(dom, url)
    assert not result.ok
    assert isinstance(result.error, ExtractionError)
    assert result.citation is None
    assert result.yaml is None
    with pytest.raises(ExtractionError):
        result.unwrap()


def test_missing_title_returned():
    result = classify_and_build("<html><body><p>no heading here</p></body></html>", "http://example.com")
    assert isinstance(result.error, MissingTitleError)
    with pytest.raises(MissingTitleError):
        result.unwrap()


def _ld(payload: str) -> str:
    return (
        '<html><head><title>Fallback Title</title>'
        f'<script type="application/ld+json">{payload}</script>'
        '</head><body></body></html>'
    )


MALFORMED_PAGES = [
    '<html><body><div itemscope itemtype=""><h1 itemprop="headline">Blank Type</h1></div></body></html>',
    '<html><body><div itemscope itemtype><h1>No Type Value</h1></div></body></html>',
    '<html><body><div itemscope><span>no type</span></div><h1>Scope Only</h1></body></html>',
    '<html><body><div itemscope itemtype="https://schema.org/Book"></div><h1>Empty Item</h1></body></html>',
    '<html><body><span itemprop="">x</span><h1>Blank Prop</h1></body></html>',
    _ld('{"@graph": [{"@type": "WebSite", "name": "S"}, {"@type": "Organization", "name": "O"}]}'),
    _ld('{"@graph": null}'),
    _ld('["just", "strings"]'),
    _ld('{"@type": 42, "headline": ["x"]}'),
    _ld('{"@type": "", "author": [null, 7, {"name": null}]}'),
    _ld('{"@type": "Article", "isPartOf": [], "issn": ["bad"], "isbn": {"@value": "none"}}'),
    _ld('{"@type": "Article", "headline": {"@value": null}, "datePublished": true}'),
    '<html><head><meta property="og:type"><meta property="og:title"></head><body><h1>T</h1></body></html>',
    '<html lang=""><body><video></video><audio></audio><h1>Bare Media</h1></body></html>',
    '<html><body><time datetime="not-a-date">soon</time><h1>Bad Time</h1></body></html>',
    '<html><body><time datetime="2024-02-30">x</time><h1>Impossible Day</h1></body></html>',
    '<html><body><p class="byline">By</p><p class="credits">Translated by</p><h1>Empty Credits</h1></body></html>',
    '<html><head><link rel="canonical"><meta name="citation_doi" content=""></head><body><h1>T</h1></body></html>',
]


@pytest.mark.parametrize("dom", MALFORMED_PAGES)
def test_malformed_pages_never_raise(dom):
    result = classify_and_build(dom, "https://example.com/item")
    assert result.ok or isinstance(result.error, BibKitError)


def test_malformed_url_returns_error():
    result = classify_and_build(PLAIN_PAGE, "http://[::1")
    assert isinstance(result.error, ExtractionError)


def test_auxiliary_only_json_ld_falls_back():
    dom = _ld('{"@graph": [{"@type": "WebSite", "name": "S"}, {"@type": "Organization", "name": "O"}]}')
    citation = classify_and_build(dom, "https://example.com/item").unwrap()
    assert citation.type == EntryType.WEB
    assert citation.title == "Fallback Title"


def test_result_is_frozen():
    result = classify_and_build(PLAIN_PAGE, "http://example.com")
    assert isinstance(result, CitationResult)
    with pytest.raises(Exception):
        result.citation = None


# ── Configuration ────────────────────────────────────────────────────


def test_config_microblog_host():
    url = "https://social.example/@someone/42"
    assert classify_and_build(POST_PAGE, url).citation.type == EntryType.ARTICLE
    config = PipelineConfig(microblog_hosts=["social.example"])
    assert classify_and_build(POST_PAGE, url, config).citation.type == EntryType.TWEET


def test_config_role_phrases():
    page = """
    <html><head>
      <meta name="DC.title" content="Field Recording">
      <meta name="DC.contributor" content="Lin Wu">
    </head><body></body></html>
    """
    url = "https://archive.example.org/rec/9"
    default = classify_and_build(page, url).unwrap()
    assert default.contributors == (Contributor(name="Lin Wu"),)

    config = PipelineConfig(role_phrases={"contributor": Role.PRODUCER})
    custom = classify_and_build(page, url, config).unwrap()
    assert custom.contributors == (Contributor(name="Lin Wu", role=Role.PRODUCER),)


def test_bundled_config():
    result = classify_and_build(PLAIN_PAGE, "http://example.com", load_config())
    assert result.citation.type == EntryType.WEB


# ── Properties ───────────────────────────────────────────────────────


def test_idempotent():
    first = classify_and_build(NEWS_PAGE, "https://ledger.example.com/rates")
    second = classify_and_build(NEWS_PAGE, "https://ledger.example.com/rates")
    assert first.citation == second.citation
    assert first.yaml == second.yaml


def test_no_parent_for_standalone_types():
    page = """
    <html><head>
      <meta name="citation_title" content="Quantum Widgets">
      <meta name="citation_dissertation_institution" content="MIT">
      <meta name="citation_journal_title" content="Should Not Matter">
    </head><body></body></html>
    """
    citation = classify_and_build(page, "https://dspace.example.edu/t/1").unwrap()
    assert citation.type == EntryType.THESIS
    assert citation.parent is None
