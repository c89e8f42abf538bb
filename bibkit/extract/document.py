"""Parse a page's DOM and URL into a traversable document."""

import logging
from urllib.parse import urlparse

from bs4 import BeautifulSoup
from pydantic import BaseModel, ConfigDict

from bibkit.core.errors import ExtractionError

logger = logging.getLogger(__name__)

_PARSER = "html.parser"
_SCHEMES = ("http", "https")


class Document(BaseModel):
    """A parsed page together with the URL it was captured from."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    soup: BeautifulSoup
    url: str

    @property
    def host(self) -> str:
        host = (urlparse(self.url).hostname or "").lower()
        return host.removeprefix("www.")

    @property
    def path(self) -> str:
        return urlparse(self.url).path or "/"


def load_document(dom, url: str) -> Document:
    """Validate the (dom, url) pair and parse the markup.

    *dom* may be an HTML string, bytes, or an already parsed BeautifulSoup
    tree. Raises ExtractionError when either input cannot be used at all.
    """
    soup = _parse_dom(dom)
    _check_url(url)
    logger.debug("Loaded document for %s", url)
    return Document(soup=soup, url=url.strip())


def _parse_dom(dom) -> BeautifulSoup:
    if dom is None:
        raise ExtractionError("No document supplied")

    if isinstance(dom, BeautifulSoup):
        soup = dom
    elif isinstance(dom, (str, bytes)):
        if not dom.strip():
            raise ExtractionError("Document is empty")
        soup = BeautifulSoup(dom, _PARSER)
    else:
        raise ExtractionError(f"Unsupported document type: {type(dom).__name__}")

    if soup.find(True) is None:
        raise ExtractionError("Document contains no elements")
    return soup


def _check_url(url: str) -> None:
    if not isinstance(url, str) or not url.strip():
        raise ExtractionError("No page URL supplied")
    try:
        parsed = urlparse(url.strip())
    except ValueError as exc:
        raise ExtractionError(f"Malformed URL {url!r}: {exc}") from exc
    if parsed.scheme not in _SCHEMES or not parsed.hostname:
        raise ExtractionError(f"Not an absolute http(s) URL: {url!r}")
