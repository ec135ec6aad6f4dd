"""Homepage link reader for URL discovery and navigation membership.

This module fetches a site's homepage once and extracts its internal links,
separately recording the links found in the navigation/header region and in
the footer region. Those region memberships later drive each page's
navigation signal.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Set

from ..extract.html_extractor import HtmlDocument, ParseError
from ..fetch.http_fetcher import Fetcher, FetchError, FetchResponse
from ..utils.scope_matcher import PageScope
from ..utils.url_normalizer import canonicalize, has_directory_path, URLNormalizationError


logger = logging.getLogger(__name__)


class HomepageProviderError(Exception):
    """Raised when the homepage cannot be read."""
    pass


@dataclass
class HomepageLinks:
    """Canonical internal links found on the homepage."""
    all_links: List[str] = field(default_factory=list)
    navigation_links: List[str] = field(default_factory=list)
    footer_links: List[str] = field(default_factory=list)
    # Canonical URLs of links written with a trailing slash
    directory_links: Set[str] = field(default_factory=set)

    @property
    def discovered(self) -> List[str]:
        """Navigation links followed by footer links, de-duplicated."""
        return _dedupe(self.navigation_links + self.footer_links)

    def is_empty(self) -> bool:
        return not (self.all_links or self.navigation_links or self.footer_links)


def _dedupe(urls: Iterable[str]) -> List[str]:
    seen: Set[str] = set()
    result = []
    for url in urls:
        if url not in seen:
            seen.add(url)
            result.append(url)
    return result


class HomepageLinkProvider:
    """Provider for URLs linked from a site's homepage.

    Features:
    - Single homepage fetch
    - Separate navigation (``<nav>``/``<header>``) and footer link sets
    - Canonicalization against the homepage URL
    - Admissibility filtering and deduplication
    - Fetch/parse failures yield empty link sets
    """

    def __init__(
        self,
        fetcher: Fetcher,
        homepage_url: str,
        scope: PageScope,
        timeout: float = 10.0
    ):
        """Initialize homepage link provider.

        Args:
            fetcher: Fetch capability used for the homepage request
            homepage_url: Canonical homepage URL
            scope: Admissibility predicate for discovered URLs
            timeout: Fetch timeout in seconds
        """
        self.fetcher = fetcher
        self.homepage_url = homepage_url
        self.scope = scope
        self.timeout = timeout

        self._directory_links: Set[str] = set()
        self._stats = {
            "pages_processed": 0,
            "pages_failed": 0,
            "links_discovered": 0,
            "invalid_urls": 0,
            "out_of_scope_urls": 0,
        }

    async def discover_links(self) -> HomepageLinks:
        """Fetch the homepage and extract its links.

        Returns:
            HomepageLinks (empty when the homepage cannot be fetched or parsed)
        """
        try:
            response = await self._fetch_homepage()
            document = HtmlDocument(response.body, encoding=response.charset)
        except (HomepageProviderError, ParseError) as e:
            self._stats["pages_failed"] += 1
            logger.warning(f"Homepage link discovery failed for {self.homepage_url}: {e}")
            return HomepageLinks()

        base = document.link_base(response.url or self.homepage_url)
        links = HomepageLinks(
            all_links=self._process_links(document.links(), base),
            navigation_links=self._process_links(document.region_links('nav'), base),
            footer_links=self._process_links(document.region_links('footer'), base),
            directory_links=set(self._directory_links),
        )

        self._stats["pages_processed"] += 1
        self._stats["links_discovered"] = len(links.all_links)
        logger.info(
            f"Homepage discovery completed: {len(links.all_links)} links, "
            f"{len(links.navigation_links)} navigation, {len(links.footer_links)} footer"
        )
        return links

    async def _fetch_homepage(self) -> FetchResponse:
        """Fetch the homepage.

        Raises:
            HomepageProviderError: On fetch failure or non-2xx status
        """
        logger.debug(f"Fetching homepage: {self.homepage_url}")
        try:
            response = await self.fetcher.fetch(self.homepage_url, timeout=self.timeout)
        except FetchError as e:
            raise HomepageProviderError(str(e))

        if not response.ok:
            raise HomepageProviderError(f"HTTP {response.status} fetching homepage")

        return response

    def _process_links(self, hrefs: List[str], base: str) -> List[str]:
        """Canonicalize raw hrefs against the page base and keep admissible ones."""
        urls = []
        for href in hrefs:
            try:
                url = canonicalize(href, base=base)
            except URLNormalizationError:
                self._stats["invalid_urls"] += 1
                logger.debug(f"Invalid link on homepage: {href}")
                continue

            if not self.scope.is_admissible(url):
                self._stats["out_of_scope_urls"] += 1
                continue

            if has_directory_path(href, base=base):
                self._directory_links.add(url)

            urls.append(url)

        return _dedupe(urls)

    def get_stats(self) -> dict:
        """Get provider statistics."""
        return {
            "provider": "homepage",
            **self._stats,
            "homepage_url": self.homepage_url
        }
