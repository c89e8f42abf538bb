"""Type Classifier: decide one entry type from a Raw Signal Bag."""

import logging
import re
from typing import Callable, NamedTuple, Optional

from bibkit.core.config import PipelineConfig
from bibkit.core.taxonomy import EntryType, parse_entry_type
from bibkit.extract.models import SignalBag

logger = logging.getLogger(__name__)


# ── Type Tables ──────────────────────────────────────────────────────

SCHEMA_TYPES: dict[str, EntryType] = {
    "Article": EntryType.ARTICLE,
    "NewsArticle": EntryType.ARTICLE,
    "AnalysisNewsArticle": EntryType.ARTICLE,
    "OpinionNewsArticle": EntryType.ARTICLE,
    "ReportageNewsArticle": EntryType.ARTICLE,
    "ScholarlyArticle": EntryType.ARTICLE,
    "MedicalScholarlyArticle": EntryType.ARTICLE,
    "TechArticle": EntryType.ARTICLE,
    "BlogPosting": EntryType.ARTICLE,
    "Report": EntryType.REPORT,
    "Thesis": EntryType.THESIS,
    "Book": EntryType.BOOK,
    "Chapter": EntryType.CHAPTER,
    "DefinedTerm": EntryType.ENTRY,
    "Collection": EntryType.ANTHOLOGY,
    "Manuscript": EntryType.MANUSCRIPT,
    "Patent": EntryType.PATENT,
    "Legislation": EntryType.LEGISLATION,
    "LegislationObject": EntryType.LEGISLATION,
    "Periodical": EntryType.PERIODICAL,
    "PublicationVolume": EntryType.PERIODICAL,
    "Newspaper": EntryType.NEWSPAPER,
    "Blog": EntryType.BLOG,
    "SoftwareSourceCode": EntryType.REPOSITORY,
    "DiscussionForumPosting": EntryType.THREAD,
    "SocialMediaPosting": EntryType.THREAD,
    "QAPage": EntryType.THREAD,
    "Movie": EntryType.VIDEO,
    "VideoObject": EntryType.VIDEO,
    "TVEpisode": EntryType.VIDEO,
    "TVSeries": EntryType.VIDEO,
    "Clip": EntryType.SCENE,
    "AudioObject": EntryType.AUDIO,
    "MusicRecording": EntryType.AUDIO,
    "MusicAlbum": EntryType.AUDIO,
    "PodcastEpisode": EntryType.AUDIO,
    "Audiobook": EntryType.AUDIO,
    "VisualArtwork": EntryType.ARTWORK,
    "Painting": EntryType.ARTWORK,
    "Sculpture": EntryType.ARTWORK,
    "Photograph": EntryType.ARTWORK,
    "ExhibitionEvent": EntryType.EXHIBITION,
}

OGP_TYPES: dict[str, EntryType] = {
    "article": EntryType.ARTICLE,
    "book": EntryType.BOOK,
    "books.book": EntryType.BOOK,
}

# Site-wide og:type values; weaker than media evidence on the page
_OGP_WEB_TYPES = {"website", "profile"}

_OGP_PREFIXES: dict[str, EntryType] = {
    "video.": EntryType.VIDEO,
    "music.": EntryType.AUDIO,
}

_STATUS_PATH_RE = re.compile(r"/(?:status|statuses|post)/\w+|^/@[\w.]+/\d+")
_THESIS_HINTS = {"thesis", "dissertation", "doctoral thesis", "master thesis"}


# ── Rules ────────────────────────────────────────────────────────────


class Rule(NamedTuple):
    """A named test returning the entry type it detects, or None."""

    name: str
    test: Callable[[SignalBag, PipelineConfig], Optional[EntryType]]


def _patent(bag: SignalBag, config: PipelineConfig) -> Optional[EntryType]:
    if bag.has("identifier-patent") or _host_in(bag, config.patent_hosts):
        return EntryType.PATENT
    return None


def _thesis(bag: SignalBag, config: PipelineConfig) -> Optional[EntryType]:
    if bag.has("thesis-institution"):
        return EntryType.THESIS
    if any(h.lower() in _THESIS_HINTS for h in _type_hints(bag)):
        return EntryType.THESIS
    return None


def _report(bag: SignalBag, config: PipelineConfig) -> Optional[EntryType]:
    return EntryType.REPORT if bag.has("report-institution") else None


def _tweet(bag: SignalBag, config: PipelineConfig) -> Optional[EntryType]:
    if not _host_in(bag, config.microblog_hosts):
        return None
    path = bag.best_value("page-path") or ""
    return EntryType.TWEET if _STATUS_PATH_RE.search(path) else None


def _repository(bag: SignalBag, config: PipelineConfig) -> Optional[EntryType]:
    if "SoftwareSourceCode" in bag.values("schema-type"):
        return EntryType.REPOSITORY
    if not _host_in(bag, config.repository_hosts):
        return None
    segments = [s for s in (bag.best_value("page-path") or "").split("/") if s]
    return EntryType.REPOSITORY if len(segments) >= 2 else None


def _schema_type(bag: SignalBag, config: PipelineConfig) -> Optional[EntryType]:
    for cand in bag.ranked("schema-type"):
        if cand.value in SCHEMA_TYPES:
            return SCHEMA_TYPES[cand.value]
    return None


def _explicit_hint(bag: SignalBag, config: PipelineConfig) -> Optional[EntryType]:
    for hint in _type_hints(bag):
        entry_type = parse_entry_type(hint)
        if entry_type is not None:
            return entry_type
    return None


def _chapter(bag: SignalBag, config: PipelineConfig) -> Optional[EntryType]:
    if any(v.lower() == "book" for v in bag.values("container-type")):
        return EntryType.CHAPTER
    return None


def _book(bag: SignalBag, config: PipelineConfig) -> Optional[EntryType]:
    if bag.has("identifier-isbn"):
        return EntryType.BOOK
    if any(v.lower() in ("book", "books.book") for v in bag.values("og-type")):
        return EntryType.BOOK
    return None


def _scholarly_container(bag: SignalBag, config: PipelineConfig) -> Optional[EntryType]:
    if bag.has("conference-title"):
        return EntryType.ARTICLE
    if any(c.source.startswith("meta[citation_") for c in bag.candidates("container-title")):
        return EntryType.ARTICLE
    return None


def _ogp_type(bag: SignalBag, config: PipelineConfig) -> Optional[EntryType]:
    for cand in bag.ranked("og-type"):
        kind = cand.value.lower()
        if kind in OGP_TYPES:
            return OGP_TYPES[kind]
        for prefix, entry_type in _OGP_PREFIXES.items():
            if kind.startswith(prefix):
                return entry_type
    return None


def _ogp_website(bag: SignalBag, config: PipelineConfig) -> Optional[EntryType]:
    if any(v.lower() in _OGP_WEB_TYPES for v in bag.values("og-type")):
        return EntryType.WEB
    return None


def _doi(bag: SignalBag, config: PipelineConfig) -> Optional[EntryType]:
    return EntryType.ARTICLE if bag.has("identifier-doi") else None


def _video(bag: SignalBag, config: PipelineConfig) -> Optional[EntryType]:
    if bag.has("media-video") or _host_in(bag, config.video_hosts):
        return EntryType.VIDEO
    return None


def _audio(bag: SignalBag, config: PipelineConfig) -> Optional[EntryType]:
    if bag.has("media-audio") or _host_in(bag, config.audio_hosts):
        return EntryType.AUDIO
    return None


def _container(bag: SignalBag, config: PipelineConfig) -> Optional[EntryType]:
    return EntryType.ARTICLE if bag.has("container-title") else None


def _web_page(bag: SignalBag, config: PipelineConfig) -> Optional[EntryType]:
    if bag.has("page-host"):
        return EntryType.WEB
    if any(v.lower().startswith(("http://", "https://")) for v in bag.values("url")):
        return EntryType.WEB
    return None


# Most specific first; the first rule that returns a type wins.
RULES: tuple[Rule, ...] = (
    Rule("patent", _patent),
    Rule("thesis", _thesis),
    Rule("report", _report),
    Rule("tweet", _tweet),
    Rule("repository", _repository),
    Rule("schema-type", _schema_type),
    Rule("explicit-hint", _explicit_hint),
    Rule("chapter", _chapter),
    Rule("book", _book),
    Rule("scholarly-container", _scholarly_container),
    Rule("og-type", _ogp_type),
    Rule("doi", _doi),
    Rule("video", _video),
    Rule("audio", _audio),
    Rule("og-website", _ogp_website),
    Rule("container", _container),
    Rule("web-page", _web_page),
)


# ── Public API ───────────────────────────────────────────────────────


def classify(bag: SignalBag, config: PipelineConfig | None = None) -> EntryType:
    """Return the first matching rule's entry type, or Misc."""
    config = config or PipelineConfig()
    for rule in RULES:
        entry_type = rule.test(bag, config)
        if entry_type is not None:
            logger.debug("Rule '%s' classified entry as %s", rule.name, entry_type.value)
            return entry_type
    logger.debug("No classification rule matched; falling back to misc")
    return EntryType.MISC


# ── Helpers ──────────────────────────────────────────────────────────


def _host_in(bag: SignalBag, hosts: list[str]) -> bool:
    host = (bag.best_value("page-host") or "").lower().removeprefix("www.")
    if not host:
        return False
    return any(host == h or host.endswith("." + h) for h in hosts)


def _type_hints(bag: SignalBag) -> list[str]:
    return bag.values("dc-type") + bag.values("schema-type")
