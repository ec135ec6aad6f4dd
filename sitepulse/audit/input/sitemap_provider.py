"""Sitemap XML reader for URL discovery.

This module discovers page URLs from the conventional sitemap locations of a
site, supporting plain and gzip-compressed sitemaps. Discovery is
best-effort: an unreachable or malformed sitemap yields no URLs rather than
an error.
"""

import gzip
import logging
import xml.etree.ElementTree as ET
from typing import List, Optional, Set

from ..fetch.http_fetcher import Fetcher, FetchError
from ..utils.scope_matcher import PageScope
from ..utils.url_normalizer import canonicalize, has_directory_path, URLNormalizationError


logger = logging.getLogger(__name__)


class SitemapUnavailableError(Exception):
    """Raised when a sitemap candidate cannot be fetched or parsed."""
    pass


class SitemapProvider:
    """Reader for page URLs listed in a site's sitemap.

    Features:
    - Tries candidate locations in order, stopping at the first usable one
    - Gzip-compressed sitemap support
    - Namespace-agnostic ``<loc>`` extraction
    - Canonicalization, admissibility filtering and deduplication
    """

    def __init__(
        self,
        fetcher: Fetcher,
        candidates: List[str],
        scope: PageScope,
        timeout: float = 10.0,
        max_urls: int = 50000
    ):
        """Initialize sitemap provider.

        Args:
            fetcher: Fetch capability used for sitemap requests
            candidates: Absolute sitemap URLs, tried in order
            scope: Admissibility predicate for discovered URLs
            timeout: Per-sitemap fetch timeout in seconds
            max_urls: Maximum URLs to return
        """
        self.fetcher = fetcher
        self.candidates = list(candidates)
        self.scope = scope
        self.timeout = timeout
        self.max_urls = max_urls

        self.source_url: Optional[str] = None
        # Canonical URLs whose sitemap entry ended in a slash
        self.directory_urls: Set[str] = set()
        self._stats = {
            "sitemaps_tried": 0,
            "sitemaps_failed": 0,
            "locs_found": 0,
            "urls_discovered": 0,
            "invalid_urls": 0,
            "out_of_scope_urls": 0,
            "duplicate_urls": 0,
            "compressed_sitemaps": 0
        }

    async def discover_urls(self) -> List[str]:
        """Discover page URLs from the first usable sitemap candidate.

        Returns:
            Canonical, admissible, de-duplicated URLs in document order
            (empty when no candidate is usable)
        """
        for sitemap_url in self.candidates:
            self._stats["sitemaps_tried"] += 1
            try:
                locs = await self._read_locs(sitemap_url)
            except SitemapUnavailableError as e:
                self._stats["sitemaps_failed"] += 1
                logger.debug(f"Sitemap candidate unusable: {e}")
                continue

            if not locs:
                logger.debug(f"Sitemap has no <loc> entries: {sitemap_url}")
                continue

            self.source_url = sitemap_url
            urls = self._filter_locs(locs, sitemap_url)
            logger.info(
                f"Sitemap discovery completed from {sitemap_url}: "
                f"{len(urls)} URLs ({self._stats})"
            )
            return urls

        logger.info(f"No usable sitemap found among {len(self.candidates)} candidates")
        return []

    async def _read_locs(self, sitemap_url: str) -> List[str]:
        """Fetch and parse one sitemap, returning its raw ``<loc>`` values.

        Raises:
            SitemapUnavailableError: On fetch failure, non-2xx status or invalid XML
        """
        content = await self._fetch_sitemap(sitemap_url)

        try:
            root = ET.fromstring(content)
        except ET.ParseError as e:
            raise SitemapUnavailableError(f"Invalid XML in sitemap {sitemap_url}: {e}")

        locs = []
        for element in root.iter():
            if not isinstance(element.tag, str):
                continue
            if (element.tag == 'loc' or element.tag.endswith('}loc')) and element.text:
                locs.append(element.text.strip())

        self._stats["locs_found"] += len(locs)
        return locs

    async def _fetch_sitemap(self, sitemap_url: str) -> bytes:
        """Fetch sitemap content, decompressing gzip payloads.

        Raises:
            SitemapUnavailableError: On fetch failure or non-2xx status
        """
        logger.debug(f"Fetching sitemap: {sitemap_url}")

        try:
            response = await self.fetcher.fetch(sitemap_url, timeout=self.timeout)
        except FetchError as e:
            raise SitemapUnavailableError(str(e))

        if not response.ok:
            raise SitemapUnavailableError(f"HTTP {response.status} fetching sitemap: {sitemap_url}")

        content = response.body
        if self._is_gzipped_content(content):
            try:
                content = gzip.decompress(content)
                self._stats["compressed_sitemaps"] += 1
                logger.debug(f"Decompressed gzipped sitemap: {sitemap_url}")
            except (OSError, EOFError) as e:
                raise SitemapUnavailableError(f"Failed to decompress gzipped sitemap: {e}")

        return content

    def _is_gzipped_content(self, content: bytes) -> bool:
        """Check for the gzip magic number.

        Transfer-level gzip is already decoded by the HTTP client, so only
        gzip files (such as sitemap.xml.gz) still carry the magic number.
        """
        return content.startswith(b'\x1f\x8b')

    def _filter_locs(self, locs: List[str], sitemap_url: str) -> List[str]:
        """Canonicalize, filter and de-duplicate raw sitemap locations."""
        seen_urls: Set[str] = set()
        urls: List[str] = []

        for loc in locs:
            if len(urls) >= self.max_urls:
                logger.warning(f"Reached maximum URL limit ({self.max_urls})")
                break

            try:
                url = canonicalize(loc, base=sitemap_url)
            except URLNormalizationError:
                self._stats["invalid_urls"] += 1
                logger.debug(f"Invalid URL from sitemap: {loc}")
                continue

            if not self.scope.is_admissible(url):
                self._stats["out_of_scope_urls"] += 1
                continue

            if has_directory_path(loc, base=sitemap_url):
                self.directory_urls.add(url)

            if url in seen_urls:
                self._stats["duplicate_urls"] += 1
                continue

            seen_urls.add(url)
            urls.append(url)

        self._stats["urls_discovered"] = len(urls)
        return urls

    def get_stats(self) -> dict:
        """Get provider statistics."""
        return {
            "provider": "sitemap",
            **self._stats,
            "sitemap_url": self.source_url,
            "max_urls": self.max_urls
        }
