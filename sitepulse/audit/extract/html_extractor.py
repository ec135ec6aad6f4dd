"""HTML extraction capability for page signals and links.

This module parses markup with BeautifulSoup and exposes the handful of
extractions the popularity pipeline needs: hyperlinks (optionally limited
to the navigation or footer region), the title, meta description presence
and visible text length.
"""

import logging
import re
from typing import List, Optional, Union
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup
from bs4.element import CData, Comment, Declaration, Doctype, ProcessingInstruction


logger = logging.getLogger(__name__)


class ParseError(Exception):
    """Raised when a markup document cannot be parsed."""
    pass


# Elements whose links count as a given homepage region
REGION_TAGS = {
    'nav': ('nav', 'header'),
    'footer': ('footer',),
}

# Elements whose text is never visible
INVISIBLE_TAGS = ('script', 'style', 'noscript', 'template', 'head')

NON_TEXT_STRINGS = (Comment, CData, Declaration, Doctype, ProcessingInstruction)

SKIP_HREF_PREFIXES = ('mailto:', 'tel:', 'javascript:', 'data:', '#')

_WHITESPACE_RE = re.compile(r'\s+')


class HtmlDocument:
    """A parsed markup document.

    Parse once, extract many times: the page analyzer and the homepage
    reader both create one document per fetched page.
    """

    def __init__(
        self,
        html: Optional[Union[str, bytes]],
        parser: str = 'html.parser',
        encoding: Optional[str] = None
    ):
        """Parse markup.

        Raw bytes are decoded by BeautifulSoup, which honours a
        ``<meta charset>`` declaration; ``encoding`` (typically the
        Content-Type charset) is tried first when given.

        Args:
            html: Markup to parse (None is treated as an empty document)
            parser: BeautifulSoup tree builder
            encoding: Declared encoding of byte input

        Raises:
            ParseError: If the markup cannot be parsed
        """
        try:
            if isinstance(html, bytes) and encoding:
                self._soup = BeautifulSoup(html, parser, from_encoding=encoding)
            else:
                self._soup = BeautifulSoup(html or '', parser)
        except Exception as e:
            logger.debug(f"Markup parse failure: {e}")
            raise ParseError(f"Failed to parse document: {e}")

    def links(self) -> List[str]:
        """Raw ``href`` values of every hyperlink, in document order."""
        return self._hrefs(self._soup)

    def region_links(self, region: str) -> List[str]:
        """Raw ``href`` values of hyperlinks inside a navigation or footer region.

        Args:
            region: ``"nav"`` (``<nav>`` and ``<header>``) or ``"footer"``

        Raises:
            ValueError: If the region is unknown
        """
        if region not in REGION_TAGS:
            raise ValueError(f"Unknown region: {region}")

        hrefs: List[str] = []
        for container in self._soup.find_all(REGION_TAGS[region]):
            # Nested regions (a <nav> inside a <header>) are visited twice
            for href in self._hrefs(container):
                if href not in hrefs:
                    hrefs.append(href)
        return hrefs

    def title(self) -> str:
        """Text of the first ``<title>`` element, whitespace collapsed."""
        tag = self._soup.find('title')
        if tag is None:
            return ''
        return _WHITESPACE_RE.sub(' ', tag.get_text()).strip()

    def base_href(self) -> Optional[str]:
        """``href`` of the first ``<base>`` element, if any."""
        tag = self._soup.find('base', href=True)
        if tag is None:
            return None
        return tag['href'].strip() or None

    def link_base(self, page_url: str) -> str:
        """URL relative links resolve against: ``<base href>`` (itself relative
        to ``page_url``) when present and usable, otherwise ``page_url``."""
        base_href = self.base_href()
        if base_href:
            resolved = urljoin(page_url, base_href)
            if urlparse(resolved).scheme in ('http', 'https'):
                return resolved
        return page_url

    def has_meta_description(self) -> bool:
        """Whether a meta description with non-empty content is present."""
        for meta in self._soup.find_all('meta'):
            name = (meta.get('name') or '').strip().lower()
            if name == 'description' and (meta.get('content') or '').strip():
                return True
        return False

    def visible_text_length(self) -> int:
        """Length of the plaintext content, markup stripped and whitespace collapsed."""
        body = self._soup.body or self._soup
        parts = []
        for text in body.find_all(string=True):
            if text.find_parent(INVISIBLE_TAGS) is not None:
                continue
            if isinstance(text, NON_TEXT_STRINGS):
                continue
            parts.append(text)
        return len(_WHITESPACE_RE.sub(' ', ' '.join(parts)).strip())

    @staticmethod
    def _hrefs(container) -> List[str]:
        hrefs = []
        for anchor in container.find_all('a', href=True):
            href = anchor['href'].strip()
            if not href or href.lower().startswith(SKIP_HREF_PREFIXES):
                continue
            hrefs.append(href)
        return hrefs


def extract_links(html: str) -> List[str]:
    """Return every hyperlink ``href`` in a document."""
    return HtmlDocument(html).links()


def extract_region_links(html: str, region: str) -> List[str]:
    """Return hyperlink ``href`` values inside the ``nav`` or ``footer`` region."""
    return HtmlDocument(html).region_links(region)


def extract_title(html: str) -> str:
    """Return the first ``<title>`` text, or an empty string."""
    return HtmlDocument(html).title()


def has_meta_description(html: str) -> bool:
    """Return whether a non-empty meta description is present."""
    return HtmlDocument(html).has_meta_description()


def extract_visible_text_length(html: str) -> int:
    """Return the visible text length of a document."""
    return HtmlDocument(html).visible_text_length()
