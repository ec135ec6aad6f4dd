"""Unit tests for sitemap URL discovery."""

import gzip

import pytest

from sitepulse.audit.fetch.http_fetcher import FetchError
from sitepulse.audit.input.sitemap_provider import SitemapProvider


CANDIDATES = [
    "https://example.com/sitemap.xml",
    "https://example.com/sitemap_index.xml",
    "https://example.com/sitemap.xml.gz",
]


def urlset(*locs):
    entries = "".join(f"<url><loc>{loc}</loc></url>" for loc in locs)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f'<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">{entries}</urlset>'
    )


def make_provider(fetcher, scope, **kwargs):
    return SitemapProvider(fetcher=fetcher, candidates=CANDIDATES, scope=scope, **kwargs)


class TestSitemapProvider:
    """Test cases for SitemapProvider."""

    @pytest.mark.asyncio
    async def test_first_candidate_is_used(self, fetcher_factory, example_scope):
        fetcher = fetcher_factory({
            CANDIDATES[0]: (200, urlset("https://example.com/about", "https://www.example.com/blog/")),
            CANDIDATES[1]: (200, urlset("https://example.com/ignored")),
        })
        provider = make_provider(fetcher, example_scope)

        urls = await provider.discover_urls()

        assert urls == ["https://example.com/about", "https://example.com/blog"]
        assert provider.source_url == CANDIDATES[0]
        assert provider.directory_urls == {"https://example.com/blog"}
        assert CANDIDATES[1] not in fetcher.requested

    @pytest.mark.asyncio
    async def test_falls_back_in_order(self, fetcher_factory, example_scope):
        fetcher = fetcher_factory({
            CANDIDATES[0]: (500, "error"),
            CANDIDATES[1]: (200, urlset("https://example.com/from-index")),
        })
        provider = make_provider(fetcher, example_scope)

        urls = await provider.discover_urls()

        assert urls == ["https://example.com/from-index"]
        assert provider.source_url == CANDIDATES[1]
        assert fetcher.requested == CANDIDATES[:2]

    @pytest.mark.asyncio
    async def test_candidate_without_locs_is_skipped(self, fetcher_factory, example_scope):
        fetcher = fetcher_factory({
            CANDIDATES[0]: (200, urlset()),
            CANDIDATES[1]: (200, "this is not xml <"),
            CANDIDATES[2]: (200, gzip.compress(urlset("https://example.com/zipped").encode("utf-8"))),
        })
        provider = make_provider(fetcher, example_scope)

        urls = await provider.discover_urls()

        assert urls == ["https://example.com/zipped"]
        assert provider.source_url == CANDIDATES[2]
        assert provider.get_stats()["compressed_sitemaps"] == 1

    @pytest.mark.asyncio
    async def test_no_usable_sitemap_returns_empty(self, fetcher_factory, example_scope):
        fetcher = fetcher_factory({
            CANDIDATES[0]: FetchError(CANDIDATES[0], "Timed out", timed_out=True),
        })
        provider = make_provider(fetcher, example_scope)

        assert await provider.discover_urls() == []
        assert provider.source_url is None
        assert provider.get_stats()["sitemaps_failed"] == 3

    @pytest.mark.asyncio
    async def test_locs_are_filtered_and_deduplicated(self, fetcher_factory, example_scope):
        fetcher = fetcher_factory({
            CANDIDATES[0]: (200, urlset(
                "https://example.com/about",
                "https://example.com/about/",
                "https://other.com/page",
                "https://example.com/brochure.pdf",
                "https://example.com/wp-admin/",
                "https://example.com/post-sitemap.xml",
                "/relative-page",
                "ftp://example.com/file",
            )),
        })
        provider = make_provider(fetcher, example_scope)

        urls = await provider.discover_urls()

        assert urls == ["https://example.com/about", "https://example.com/relative-page"]
        stats = provider.get_stats()
        assert stats["duplicate_urls"] == 1
        assert stats["out_of_scope_urls"] == 4
        assert stats["invalid_urls"] == 1
        assert provider.directory_urls == {"https://example.com/about"}

    @pytest.mark.asyncio
    async def test_sitemap_index_locs_are_read(self, fetcher_factory, example_scope):
        index = (
            '<sitemapindex xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">'
            "<sitemap><loc>https://example.com/post-sitemap.xml</loc></sitemap>"
            "<sitemap><loc>https://example.com/news</loc></sitemap>"
            "</sitemapindex>"
        )
        fetcher = fetcher_factory({CANDIDATES[0]: (200, index)})
        provider = make_provider(fetcher, example_scope)

        urls = await provider.discover_urls()

        # Nested sitemap files are not followed, only admissible page locs kept
        assert urls == ["https://example.com/news"]

    @pytest.mark.asyncio
    async def test_max_urls_limit(self, fetcher_factory, example_scope):
        locs = [f"https://example.com/page-{i}" for i in range(10)]
        fetcher = fetcher_factory({CANDIDATES[0]: (200, urlset(*locs))})
        provider = make_provider(fetcher, example_scope, max_urls=3)

        urls = await provider.discover_urls()

        assert urls == locs[:3]
