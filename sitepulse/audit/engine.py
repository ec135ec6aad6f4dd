"""Popularity analysis engine orchestrating discovery, analysis and scoring.

This module coordinates the discovery readers, the page analyzer, the link
graph and the scoring stages to turn a domain into a ranked, immutable
``PopularityResult``. Every piece of run state (discovery set, analysis
set, link graph) is created per call, so concurrent runs never share
mutable state.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import List, Optional, Tuple

from .analyzer import PageAnalyzer
from .fetch.http_fetcher import Fetcher, HttpFetcher
from .graph.link_graph import LinkGraph
from .input.homepage_provider import HomepageLinkProvider, HomepageLinks
from .input.sitemap_provider import SitemapProvider
from .models.config import PopularityConfig
from .models.popularity import DiscoveryResult, PageRecord, PopularityResult
from .scoring.confidence import estimate_confidence
from .scoring.popularity import score_pages
from .scoring.traffic import normalize_traffic_share
from .utils.scope_matcher import PageScope
from .utils.url_normalizer import canonicalize_domain, InvalidDomainError


logger = logging.getLogger(__name__)


class SitePopularityAnalyzer:
    """Estimates the most popular pages of a site and their traffic shares.

    Pipeline:
    - Sitemap and homepage discovery (concurrently, best-effort)
    - Bounded analysis set, homepage first
    - Concurrent page analysis behind a semaphore
    - Link graph build after all fetches join
    - Scoring, ranking, traffic share normalization and confidence
    """

    def __init__(
        self,
        config: Optional[PopularityConfig] = None,
        fetcher: Optional[Fetcher] = None
    ):
        """Initialize the analyzer.

        Args:
            config: Run configuration (defaults when omitted)
            fetcher: Fetch capability; an aiohttp fetcher is created per run
                when omitted
        """
        self.config = config or PopularityConfig()
        self.fetcher = fetcher

    async def analyze(self, domain: str) -> PopularityResult:
        """Run a full popularity analysis for a domain.

        Args:
            domain: Domain or site URL (``example.com``, ``https://www.example.com/``)

        Returns:
            PopularityResult; an empty low-confidence result when the domain is
            invalid or nothing could be analyzed
        """
        try:
            homepage_url = canonicalize_domain(domain)
        except InvalidDomainError as e:
            logger.warning(f"Invalid domain, skipping analysis: {e}")
            return PopularityResult.empty(domain)

        logger.info(f"Analyzing page popularity for: {homepage_url}")

        try:
            async with self._fetcher_context() as fetcher:
                return await self._run(domain, homepage_url, fetcher)
        except Exception:
            logger.exception(f"Popularity analysis failed for {homepage_url}")
            return PopularityResult.empty(domain)

    @asynccontextmanager
    async def _fetcher_context(self):
        """Yield the injected fetcher, or an aiohttp fetcher closed on exit."""
        if self.fetcher is not None:
            yield self.fetcher
            return

        fetcher = HttpFetcher(
            timeout=self.config.page_timeout,
            user_agent=self.config.user_agent,
            connection_limit=self.config.max_concurrency * 2
        )
        async with fetcher:
            yield fetcher

    async def _run(self, domain: str, homepage_url: str, fetcher: Fetcher) -> PopularityResult:
        scope = PageScope(homepage_url, self.config.extra_exclude_patterns)

        discovery, homepage_links = await self.discover(homepage_url, fetcher, scope)
        analysis_set = discovery.analysis_set(self.config.max_analyzed_pages)
        logger.info(
            f"Discovered {discovery.size} URLs, analyzing {len(analysis_set)} "
            f"(sources: {discovery.source_counts()})"
        )

        analyzer = PageAnalyzer(
            fetcher=fetcher,
            scope=scope,
            navigation_urls=set(homepage_links.navigation_links),
            footer_urls=set(homepage_links.footer_links),
            sitemap_urls=set(discovery.sitemap_urls),
            directory_urls=discovery.directory_urls,
            timeout=self.config.page_timeout
        )
        pages = await self.analyze_pages(analyzer, analysis_set)

        graph = LinkGraph(analysis_set)
        graph.add_pages(pages)
        graph.apply(pages)

        score_pages(pages, self.config.weights)
        ranked = sorted(pages, key=lambda page: page.popularity_score, reverse=True)
        top_pages = ranked[:self.config.top_pages]
        normalize_traffic_share(top_pages, self.config.homepage_share_cap)

        confidence = estimate_confidence(len(pages), discovery.size, self.config.confidence)
        logger.info(
            f"Popularity analysis completed for {homepage_url}: "
            f"{len(pages)}/{len(analysis_set)} pages analyzed, confidence={confidence.value}"
        )

        return PopularityResult(
            domain=domain,
            pages=[page.freeze() for page in top_pages],
            confidence=confidence,
            discovered_pages=discovery.size,
            analyzed_pages=len(pages),
            sources=discovery.source_counts(),
            sitemap_source=discovery.sitemap_source or None,
        )

    async def discover(
        self,
        homepage_url: str,
        fetcher: Fetcher,
        scope: PageScope
    ) -> Tuple[DiscoveryResult, HomepageLinks]:
        """Run both discovery readers and union their URLs.

        Returns:
            The discovery set (homepage first, then sitemap, navigation and
            footer URLs in that order) and the homepage links
        """
        sitemap_provider = SitemapProvider(
            fetcher=fetcher,
            candidates=self.config.sitemap_candidates(homepage_url),
            scope=scope,
            timeout=self.config.sitemap_timeout
        )
        homepage_provider = HomepageLinkProvider(
            fetcher=fetcher,
            homepage_url=homepage_url,
            scope=scope,
            timeout=self.config.page_timeout
        )

        sitemap_urls, homepage_links = await asyncio.gather(
            sitemap_provider.discover_urls(),
            homepage_provider.discover_links()
        )

        urls: List[str] = [homepage_url]
        seen = {homepage_url}
        for url in list(sitemap_urls) + homepage_links.discovered:
            if url not in seen:
                seen.add(url)
                urls.append(url)

        discovery = DiscoveryResult(
            homepage=homepage_url,
            urls=urls,
            sitemap_urls=sitemap_urls,
            homepage_urls=homepage_links.discovered,
            sitemap_source=sitemap_provider.source_url or "",
            directory_urls=sitemap_provider.directory_urls | homepage_links.directory_links,
        )
        return discovery, homepage_links

    async def analyze_pages(self, analyzer: PageAnalyzer, urls: List[str]) -> List[PageRecord]:
        """Analyze URLs concurrently, preserving input order and dropping failures."""
        semaphore = asyncio.Semaphore(self.config.max_concurrency)

        async def analyze_bounded(url: str) -> Optional[PageRecord]:
            async with semaphore:
                return await analyzer.analyze(url)

        results = await asyncio.gather(*(analyze_bounded(url) for url in urls))
        pages = [page for page in results if page is not None]

        failed = len(urls) - len(pages)
        if failed:
            logger.info(f"{failed} of {len(urls)} pages could not be analyzed")
        return pages


async def analyze_site_popularity(
    domain: str,
    config: Optional[PopularityConfig] = None,
    fetcher: Optional[Fetcher] = None
) -> PopularityResult:
    """Estimate the most popular pages of ``domain``.

    Example:
        >>> result = await analyze_site_popularity("example.com")
        >>> [(page.url, page.traffic_share_percent) for page in result.pages]
    """
    return await SitePopularityAnalyzer(config=config, fetcher=fetcher).analyze(domain)
