"""Single-page analysis: fetch a page and extract its popularity signals.

This module turns one canonical URL into a ``PageRecord`` carrying the
page's title, structural signals and outbound internal links. Failures are
never fatal: a page that cannot be fetched or is not a 2xx response is
simply excluded from the run.
"""

import asyncio
import logging
from typing import AbstractSet, Optional
from urllib.parse import urlparse

from .extract.html_extractor import HtmlDocument, ParseError
from .fetch.http_fetcher import Fetcher, FetchError
from .models.popularity import NavPosition, PageRecord, PageSignals
from .utils.scope_matcher import PageScope
from .utils.url_normalizer import (
    canonicalize,
    is_valid_http_url,
    url_depth,
    with_trailing_slash,
    URLNormalizationError
)


logger = logging.getLogger(__name__)


MAX_TITLE_LENGTH = 100


class PageAnalyzer:
    """Fetches pages and extracts per-page signals.

    Navigation and sitemap membership are looked up in the canonical URL
    sets produced by the discovery readers, so a page analyzer instance
    belongs to exactly one popularity run.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        scope: PageScope,
        navigation_urls: AbstractSet[str] = frozenset(),
        footer_urls: AbstractSet[str] = frozenset(),
        sitemap_urls: AbstractSet[str] = frozenset(),
        directory_urls: AbstractSet[str] = frozenset(),
        timeout: float = 10.0
    ):
        """Initialize the analyzer.

        Args:
            fetcher: Fetch capability
            scope: Admissibility predicate applied to outbound links
            navigation_urls: Canonical URLs linked from the homepage navigation
            footer_urls: Canonical URLs linked from the homepage footer
            sitemap_urls: Canonical URLs listed in the sitemap
            directory_urls: Canonical URLs discovered with a trailing slash
            timeout: Per-page timeout in seconds
        """
        self.fetcher = fetcher
        self.scope = scope
        self.navigation_urls = frozenset(navigation_urls)
        self.footer_urls = frozenset(footer_urls)
        self.sitemap_urls = frozenset(sitemap_urls)
        self.directory_urls = frozenset(directory_urls)
        self.timeout = timeout

        self._stats = {
            "pages_analyzed": 0,
            "pages_failed": 0,
            "timeouts": 0,
            "http_errors": 0,
        }

    async def analyze(self, url: str) -> Optional[PageRecord]:
        """Fetch and analyze one page.

        Args:
            url: Canonical URL of the page

        Returns:
            PageRecord, or None when the page cannot be fetched, returns a
            non-2xx status or times out
        """
        try:
            response = await asyncio.wait_for(
                self.fetcher.fetch(url, timeout=self.timeout),
                timeout=self.timeout
            )
        except asyncio.TimeoutError:
            self._stats["timeouts"] += 1
            self._stats["pages_failed"] += 1
            logger.warning(f"Timed out analyzing page: {url}")
            return None
        except FetchError as e:
            if e.timed_out:
                self._stats["timeouts"] += 1
            self._stats["pages_failed"] += 1
            logger.warning(f"Failed to fetch page {url}: {e}")
            return None

        if not response.ok:
            self._stats["http_errors"] += 1
            self._stats["pages_failed"] += 1
            logger.warning(f"HTTP {response.status} for page: {url}")
            return None

        try:
            document = HtmlDocument(response.body, encoding=response.charset)
        except ParseError as e:
            # Unparsable markup is treated as an empty document
            logger.warning(f"Failed to parse page {url}: {e}")
            document = HtmlDocument('')

        record = self.build_record(url, document, final_url=response.url)
        self._stats["pages_analyzed"] += 1
        logger.debug(
            f"Analyzed {url}: depth={record.signals.url_depth}, "
            f"nav={record.signals.nav_position.value}, links={len(record.outbound_links)}"
        )
        return record

    def build_record(
        self,
        url: str,
        document: HtmlDocument,
        final_url: Optional[str] = None
    ) -> PageRecord:
        """Extract a PageRecord from an already parsed document.

        Args:
            url: Canonical URL of the page, used as the record key
            document: Parsed page markup
            final_url: URL the page was served from after redirects
        """
        depth = url_depth(url)
        served_from = self.served_from(url, final_url)

        title = document.title()
        if not title:
            title = urlparse(url).path or '/'

        signals = PageSignals(
            is_homepage=depth == 0,
            nav_position=self.nav_position(url),
            url_depth=depth,
            has_meta_description=document.has_meta_description(),
            content_length=document.visible_text_length(),
            in_sitemap=url in self.sitemap_urls,
        )

        return PageRecord(
            url=url,
            title=title[:MAX_TITLE_LENGTH],
            signals=signals,
            outbound_links=self._outbound_links(url, document, served_from),
        )

    def served_from(self, url: str, final_url: Optional[str] = None) -> str:
        """URL a page's relative links are relative to.

        A redirect target wins. Without one, a page discovered as
        ``/blog/`` is treated as served from ``/blog/`` even though its
        canonical key is ``/blog``.
        """
        if final_url and final_url != url and is_valid_http_url(final_url):
            return final_url
        if url in self.directory_urls:
            return with_trailing_slash(url)
        return url

    def nav_position(self, url: str) -> NavPosition:
        """Homepage region membership, main navigation winning over footer."""
        if url in self.navigation_urls:
            return NavPosition.MAIN_NAV
        if url in self.footer_urls:
            return NavPosition.FOOTER
        return NavPosition.NONE

    def _outbound_links(self, url: str, document: HtmlDocument, served_from: str):
        """Canonical, admissible, de-duplicated internal links, self excluded."""
        base = document.link_base(served_from)
        links = []
        seen = set()
        for href in document.links():
            try:
                target = canonicalize(href, base=base)
            except URLNormalizationError:
                logger.debug(f"Skipping invalid link on {url}: {href}")
                continue

            if target == url or target in seen:
                continue
            if not self.scope.is_admissible(target):
                continue

            seen.add(target)
            links.append(target)
        return links

    def get_stats(self) -> dict:
        """Get analyzer statistics."""
        return {"analyzer": "page", **self._stats}

