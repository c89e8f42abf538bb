"""Metadata Signal Extractor: walk a parsed page and collect raw candidates.

Signal sources, strongest first:
1. Explicit structured metadata (Highwire ``citation_*`` tags, JSON-LD,
   Open Graph, Twitter cards, Dublin Core, generic ``<meta>``)
2. Semantic HTML (canonical link, microdata, ``rel=author`` anchors,
   headings, ``<title>``, media elements, ``<time>``)
3. Heuristics on visible credit lines and the URL shape
"""

import json
import logging
import re

from bs4 import Tag
from stdnum import isbn, issn

from bibkit.extract.document import Document
from bibkit.extract.models import Provenance, SignalBag

logger = logging.getLogger(__name__)

STRUCTURED = Provenance.STRUCTURED
SEMANTIC = Provenance.SEMANTIC
HEURISTIC = Provenance.HEURISTIC


# ── Meta Tag Tables ──────────────────────────────────────────────────

# Highwire Press / Google Scholar tags
HIGHWIRE_FIELDS: dict[str, str] = {
    "citation_title": "title",
    "citation_author": "author",
    "citation_publication_date": "date",
    "citation_date": "date",
    "citation_online_date": "date",
    "citation_journal_title": "container-title",
    "citation_book_title": "container-title",
    "citation_inbook_title": "container-title",
    "citation_publisher": "publisher",
    "citation_doi": "identifier-doi",
    "citation_isbn": "identifier-isbn",
    "citation_issn": "identifier-issn",
    "citation_patent_number": "identifier-patent",
    "citation_pmid": "identifier-pmid",
    "citation_arxiv_id": "identifier-arxiv",
    "citation_dissertation_institution": "thesis-institution",
    "citation_technical_report_institution": "report-institution",
    "citation_language": "language",
    "citation_abstract": "description",
    "citation_keywords": "keywords",
}

# Open Graph, with "og:article:*" style keys normalized to "article:*"
OGP_FIELDS: dict[str, str] = {
    "og:title": "title",
    "og:type": "og-type",
    "og:url": "url",
    "og:site_name": "site-name",
    "og:description": "description",
    "og:locale": "language",
    "og:video": "media-video",
    "og:video:url": "media-video",
    "og:video:secure_url": "media-video",
    "og:audio": "media-audio",
    "og:audio:url": "media-audio",
    "og:audio:secure_url": "media-audio",
    "article:published_time": "date",
    "article:author": "author",
    "article:tag": "keywords",
    "book:author": "author",
    "book:isbn": "identifier-isbn",
    "book:release_date": "date",
    "book:tag": "keywords",
    "video:release_date": "date",
    "music:release_date": "date",
    "music:creator": "author",
    "twitter:title": "title",
}

# Open Graph contributor properties -> context tag
OGP_CONTRIBUTORS: dict[str, str] = {
    "video:director": "director",
    "video:writer": "writer",
    "video:actor": "actor",
    "music:musician": "performed by",
}

_OGP_NAMESPACES = ("article:", "book:", "video:", "music:", "profile:")

# Dublin Core element names (after the "dc." / "dcterms." prefix)
DUBLIN_CORE_FIELDS: dict[str, str] = {
    "title": "title",
    "creator": "author",
    "date": "date",
    "issued": "date",
    "created": "date",
    "type": "dc-type",
    "publisher": "publisher",
    "language": "language",
    "description": "description",
    "ispartof": "container-title",
}

GENERIC_FIELDS: dict[str, str] = {
    "title": "title",
    "author": "author",
    "description": "description",
    "keywords": "keywords",
    "language": "language",
    "content-language": "language",
    "application-name": "site-name",
    "date": "date",
}


# ── Structured Data Tables ───────────────────────────────────────────

# schema.org person-valued properties -> context tag (None = author)
SCHEMA_PERSON_PROPS: dict[str, str | None] = {
    "author": None,
    "creator": None,
    "translator": "translator",
    "director": "director",
    "illustrator": "illustrator",
    "musicBy": "musicBy",
    "composer": "composer",
    "producer": "producer",
    "actor": "actor",
    "contributor": "contributor",
    "readBy": "readBy",
}

SCHEMA_DATE_PROPS = ("datePublished", "dateCreated", "uploadDate", "dateModified")

# Types that describe the site or its furniture rather than the cited work
_AUXILIARY_TYPES = {
    "WebSite", "Organization", "Person", "BreadcrumbList", "ListItem",
    "ImageObject", "SearchAction", "SiteNavigationElement", "WPHeader",
    "WPFooter", "WPSideBar", "NewsMediaOrganization", "Corporation",
}

# ── Patterns ─────────────────────────────────────────────────────────

_DOI_RE = re.compile(r"\b(10\.\d{4,9}/[^\s?#\"'<>]+)")
_ARXIV_PATH_RE = re.compile(r"^/(?:abs|pdf)/([\w.\-/]+?)(?:v\d+)?(?:\.pdf)?$")
_PATENT_PATH_RE = re.compile(r"^/patent/([A-Z]{2}[\dA-Z]+)")
_CREDIT_CLASS_RE = re.compile(r"byline|credit|contributor", re.IGNORECASE)
_CREDIT_PHRASES = (
    "translated by", "translation by", "afterword by", "foreword by", "preface by",
    "introduction by", "introduced by", "annotated by", "commentary by",
    "compiled by", "founded by", "in collaboration with", "organized by",
    "performed by", "starring", "music by", "composed by", "executive produced by",
    "produced by", "screenplay by", "cinematography by", "directed by",
    "illustrated by", "illustrations by", "narrated by", "read by",
)
# A capitalized word that does not open the next credit phrase
_PHRASE_STARTS = "|".join(sorted({p.split()[0] for p in _CREDIT_PHRASES}))
_NAME_WORD = rf"(?!(?i:{_PHRASE_STARTS})\b)[A-Z][\w.'\-]*"
_NAME = rf"{_NAME_WORD}(?:\s+(?:{_NAME_WORD}|(?:de|van|von|der|la|le)(?=\s)))*"
_NAME_LIST = rf"{_NAME}(?:\s*(?:,|&|\band\b)\s*{_NAME})*"
_NAME_SPLIT_RE = re.compile(r"\s*(?:,|&|\band\b)\s*")
_CREDIT_RE = re.compile(
    r"(?i:\b(" + "|".join(sorted(_CREDIT_PHRASES, key=len, reverse=True)) + r"))"
    r"\s*:?\s+(" + _NAME_LIST + ")"
)
_BYLINE_RE = re.compile(r"^\s*(?i:by)\s+(" + _NAME_LIST + ")")


# ── Public API ───────────────────────────────────────────────────────


def extract_signals(document: Document) -> SignalBag:
    """Collect every metadata candidate the page offers.

    Missing sources leave fields absent; nothing here raises on partial
    or malformed metadata.
    """
    bag = SignalBag()
    soup = document.soup

    metas = _meta_pairs(soup)
    _extract_highwire(metas, bag)
    _extract_json_ld(soup, bag)
    _extract_ogp(metas, bag)
    _extract_dublin_core(metas, bag)
    _extract_generic(metas, bag)

    _extract_links(soup, bag)
    _extract_microdata(soup, bag)
    _extract_headings(soup, bag)
    _extract_media(soup, bag)

    _extract_credit_lines(soup, bag)
    _extract_url_shape(document, bag)

    logger.info(
        "Extracted %d signal fields (%d candidates) from %s",
        len(bag.fields),
        sum(len(c) for c in bag.fields.values()),
        document.url,
    )
    return bag


# ── Meta Tags ────────────────────────────────────────────────────────


def _meta_pairs(soup) -> list[tuple[str, str]]:
    """(lowercased key, content) for every keyed <meta> in document order."""
    pairs = []
    for meta in soup.find_all("meta"):
        key = meta.get("property") or meta.get("name") or meta.get("http-equiv")
        content = meta.get("content")
        if key and content is not None:
            pairs.append((key.strip().lower(), content))
    return pairs


def _extract_highwire(metas: list[tuple[str, str]], bag: SignalBag) -> None:
    for key, content in metas:
        field = HIGHWIRE_FIELDS.get(key)
        if field:
            bag.add(field, _clean_identifier(field, content), STRUCTURED, f"meta[{key}]")
        if key == "citation_conference_title":
            bag.add("conference-title", content, STRUCTURED, f"meta[{key}]")
            bag.add("container-title", content, STRUCTURED, f"meta[{key}]")
        if key in ("citation_book_title", "citation_inbook_title"):
            bag.add("container-type", "book", STRUCTURED, f"meta[{key}]")


def _extract_ogp(metas: list[tuple[str, str]], bag: SignalBag) -> None:
    for key, content in metas:
        if key not in OGP_FIELDS and key.startswith("og:") and key[3:].startswith(_OGP_NAMESPACES):
            key = key[3:]
        source = f"meta[{key}]"
        if key in OGP_CONTRIBUTORS:
            bag.add("contributor", content, STRUCTURED, source, context=OGP_CONTRIBUTORS[key])
            continue
        field = OGP_FIELDS.get(key)
        if not field:
            continue
        if field == "author" and _looks_like_url(content):
            # profile links carry no usable name
            continue
        bag.add(field, _clean_identifier(field, content), STRUCTURED, source)


def _extract_dublin_core(metas: list[tuple[str, str]], bag: SignalBag) -> None:
    for key, content in metas:
        prefix, _, element = key.partition(".")
        if prefix not in ("dc", "dcterms") or not element:
            continue
        source = f"meta[{key}]"
        if element == "contributor":
            bag.add("contributor", content, STRUCTURED, source, context="contributor")
        elif element == "identifier":
            doi = _find_doi(content)
            if doi:
                bag.add("identifier-doi", doi, STRUCTURED, source)
        elif element in DUBLIN_CORE_FIELDS:
            bag.add(DUBLIN_CORE_FIELDS[element], content, STRUCTURED, source)


def _extract_generic(metas: list[tuple[str, str]], bag: SignalBag) -> None:
    for key, content in metas:
        field = GENERIC_FIELDS.get(key)
        if field:
            bag.add(field, content, STRUCTURED, f"meta[{key}]")


# ── JSON-LD ──────────────────────────────────────────────────────────


def _extract_json_ld(soup, bag: SignalBag) -> None:
    items = []
    for script in soup.find_all("script", type="application/ld+json"):
        try:
            data = json.loads(script.string or "")
        except (json.JSONDecodeError, TypeError) as exc:
            logger.debug("Skipping malformed JSON-LD block: %s", exc)
            continue
        items.extend(_flatten_json_ld(data))

    if not items:
        return

    for item in items:
        if "WebSite" in _types(item):
            bag.add("site-name", _text(item.get("name")), STRUCTURED, "json-ld[WebSite]")

    main = _main_item(items)
    if main is None:
        return

    source = "json-ld"
    for t in _types(main):
        bag.add("schema-type", t, STRUCTURED, source)
    bag.add("title", _text(main.get("headline") or main.get("name")), STRUCTURED, source)

    for prop, context in SCHEMA_PERSON_PROPS.items():
        for name in _person_names(main.get(prop)):
            if context is None:
                bag.add("author", name, STRUCTURED, f"{source}[{prop}]")
            else:
                bag.add("contributor", name, STRUCTURED, f"{source}[{prop}]", context=context)

    for prop in SCHEMA_DATE_PROPS:
        bag.add("date", _text(main.get(prop)), STRUCTURED, f"{source}[{prop}]")

    for name in _person_names(main.get("publisher")):
        bag.add("publisher", name, STRUCTURED, f"{source}[publisher]")

    part_of = main.get("isPartOf")
    if isinstance(part_of, list):
        part_of = part_of[0] if part_of else None
    if isinstance(part_of, dict):
        bag.add("container-title", _text(part_of.get("name")), STRUCTURED, f"{source}[isPartOf]")
        for t in _types(part_of):
            bag.add("container-type", t, STRUCTURED, f"{source}[isPartOf]")
        value = _clean_identifier("identifier-issn", _text(part_of.get("issn")))
        bag.add("identifier-issn", value, STRUCTURED, f"{source}[isPartOf]")
    elif isinstance(part_of, str) and not _looks_like_url(part_of):
        bag.add("container-title", part_of, STRUCTURED, f"{source}[isPartOf]")

    bag.add("url", _text(main.get("url")), STRUCTURED, source)
    bag.add("language", _text(main.get("inLanguage")), STRUCTURED, source)
    for kind in ("isbn", "issn"):
        field = f"identifier-{kind}"
        bag.add(field, _clean_identifier(field, _text(main.get(kind))), STRUCTURED, source)
    for ident in _as_list(main.get("identifier")) + _as_list(main.get("sameAs")):
        doi = _find_doi(_text(ident) or "")
        if doi:
            bag.add("identifier-doi", doi, STRUCTURED, f"{source}[identifier]")


def _flatten_json_ld(data) -> list[dict]:
    if isinstance(data, list):
        return [item for entry in data for item in _flatten_json_ld(entry)]
    if isinstance(data, dict):
        if "@graph" in data:
            return _flatten_json_ld(data["@graph"])
        return [data]
    return []


def _main_item(items: list[dict]) -> dict | None:
    """The item describing the cited work: first non-auxiliary typed item."""
    typed = [i for i in items if _types(i)]
    for item in typed:
        types = set(_types(item))
        if not types & _AUXILIARY_TYPES and not types <= {"WebPage"}:
            return item
    for item in typed:
        if "WebPage" in _types(item):
            return item
    return None


def _types(item: dict) -> list[str]:
    return [t.rsplit("/", 1)[-1] for t in _as_list(item.get("@type")) if isinstance(t, str)]


def _person_names(value) -> list[str]:
    names = []
    for entry in _as_list(value):
        if isinstance(entry, dict):
            name = _text(entry.get("name"))
        else:
            name = _text(entry)
        if name and not _looks_like_url(name):
            names.append(name)
    return names


# ── Semantic HTML ────────────────────────────────────────────────────


def _extract_links(soup, bag: SignalBag) -> None:
    for link in soup.find_all("link", rel=True, href=True):
        if "canonical" in _rels(link):
            bag.add("url", link["href"], SEMANTIC, "link[canonical]")
    for anchor in soup.find_all("a", rel=True):
        if "author" in _rels(anchor):
            bag.add("author", anchor.get_text(" ", strip=True), SEMANTIC, "a[rel=author]")


def _extract_microdata(soup, bag: SignalBag) -> None:
    scope = None
    for el in soup.find_all(attrs={"itemscope": True, "itemtype": True}):
        if el.has_attr("itemprop"):
            # property value of an enclosing item, not a top-level item
            continue
        itemtypes = el["itemtype"].split()
        if not itemtypes:
            continue
        t = itemtypes[0].rstrip("/").rsplit("/", 1)[-1]
        if t and t not in _AUXILIARY_TYPES:
            scope = el
            bag.add("schema-type", t, SEMANTIC, "microdata")
            break
    if scope is None:
        return

    for el in scope.find_all(attrs={"itemprop": True}):
        for prop in el["itemprop"].split():
            source = f"microdata[{prop}]"
            if prop == "headline":
                bag.add("title", _itemprop_value(el), SEMANTIC, source)
            elif prop in SCHEMA_PERSON_PROPS:
                context = SCHEMA_PERSON_PROPS[prop]
                if context is None:
                    bag.add("author", _itemprop_value(el), SEMANTIC, source)
                else:
                    bag.add("contributor", _itemprop_value(el), SEMANTIC, source, context=context)
            elif prop in SCHEMA_DATE_PROPS:
                bag.add("date", _itemprop_value(el), SEMANTIC, source)
            elif prop == "isbn":
                value = _clean_identifier("identifier-isbn", _itemprop_value(el))
                bag.add("identifier-isbn", value, SEMANTIC, source)


def _itemprop_value(el: Tag) -> str | None:
    if el.has_attr("itemscope"):
        name = el.find(attrs={"itemprop": "name"})
        return _itemprop_value(name) if name is not None else el.get_text(" ", strip=True)
    if el.name == "meta":
        return el.get("content")
    if el.name == "time" and el.has_attr("datetime"):
        return el["datetime"]
    return el.get("content") or el.get_text(" ", strip=True)


def _extract_headings(soup, bag: SignalBag) -> None:
    h1 = soup.find("h1")
    if h1 is not None:
        bag.add("title", h1.get_text(" ", strip=True), SEMANTIC, "h1")
    if soup.title is not None and soup.title.string:
        bag.add("title", soup.title.string, SEMANTIC, "title")
    html = soup.find("html")
    if html is not None:
        bag.add("language", html.get("lang"), SEMANTIC, "html[lang]")
    time = soup.find("time", datetime=True)
    if time is not None:
        bag.add("date", time["datetime"], SEMANTIC, "time[datetime]")


def _extract_media(soup, bag: SignalBag) -> None:
    for kind in ("video", "audio"):
        el = soup.find(kind)
        if el is None:
            continue
        src = el.get("src")
        if not src:
            source_el = el.find("source", src=True)
            src = source_el["src"] if source_el is not None else kind
        bag.add(f"media-{kind}", src, SEMANTIC, kind)


# ── Heuristics ───────────────────────────────────────────────────────


def _extract_credit_lines(soup, bag: SignalBag) -> None:
    """Credit phrases ("Translated by X") in byline and credit blocks."""
    seen: set[int] = set()
    for el in soup.find_all(class_=_CREDIT_CLASS_RE):
        if any(id(p) in seen for p in el.parents):
            continue
        seen.add(id(el))
        text = el.get_text(" ", strip=True)

        byline = _BYLINE_RE.match(text)
        if byline:
            for name in _split_names(byline.group(1)):
                bag.add("author", name, HEURISTIC, "byline")

        for m in _CREDIT_RE.finditer(text):
            for name in _split_names(m.group(2)):
                bag.add("contributor", name, HEURISTIC, "credit-line", context=m.group(1))


def _extract_url_shape(document: Document, bag: SignalBag) -> None:
    bag.add("url", document.url, HEURISTIC, "page-url")
    bag.add("page-host", document.host, HEURISTIC, "page-url")
    bag.add("page-path", document.path, HEURISTIC, "page-url")

    doi = _find_doi(document.path)
    if doi:
        bag.add("identifier-doi", doi, HEURISTIC, "page-url")

    if document.host == "arxiv.org":
        m = _ARXIV_PATH_RE.match(document.path)
        if m:
            bag.add("identifier-arxiv", m.group(1), HEURISTIC, "page-url")

    m = _PATENT_PATH_RE.match(document.path)
    if m and document.host.startswith("patents."):
        bag.add("identifier-patent", m.group(1), HEURISTIC, "page-url")


# ── Helpers ──────────────────────────────────────────────────────────


def _clean_identifier(field: str, value: str | None) -> str | None:
    """Normalize an identifier value; None when it fails validation."""
    if value is None:
        return None
    if field == "identifier-doi":
        return _find_doi(value) or value
    if field == "identifier-isbn":
        value = re.sub(r"^isbn[:\s]*", "", value.strip(), flags=re.IGNORECASE)
        if not isbn.is_valid(value):
            logger.debug("Dropping invalid ISBN '%s'", value)
            return None
        return isbn.compact(value)
    if field == "identifier-issn":
        value = re.sub(r"^issn[:\s]*", "", value.strip(), flags=re.IGNORECASE)
        if not issn.is_valid(value):
            logger.debug("Dropping invalid ISSN '%s'", value)
            return None
        return issn.format(value)
    return value


def _find_doi(text: str) -> str | None:
    m = _DOI_RE.search(text)
    return m.group(1).rstrip(".,;") if m else None


def _split_names(text: str) -> list[str]:
    names = []
    for name in _NAME_SPLIT_RE.split(text):
        name = name.rstrip(",;")
        # sentence period, but keep initials like "J."
        if name.endswith(".") and len(name.rsplit(" ", 1)[-1]) > 2:
            name = name[:-1]
        if name:
            names.append(name)
    return names


def _looks_like_url(text: str) -> bool:
    return text.strip().lower().startswith(("http://", "https://", "//"))


def _rels(el: Tag) -> list[str]:
    rel = el.get("rel") or []
    if isinstance(rel, str):
        rel = rel.split()
    return [r.lower() for r in rel]


def _as_list(value) -> list:
    if value is None:
        return []
    return value if isinstance(value, list) else [value]


def _text(value) -> str | None:
    if isinstance(value, (str, int, float)) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, dict):
        return _text(value.get("@value") or value.get("name"))
    if isinstance(value, list) and value:
        return _text(value[0])
    return None
