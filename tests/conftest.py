"""Shared test fixtures and configuration for SitePulse tests."""

import pytest
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union
import sys

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sitepulse.audit.fetch.http_fetcher import FetchResponse
from sitepulse.audit.models.config import PopularityConfig
from sitepulse.audit.utils.scope_matcher import PageScope


Route = Union[Tuple[int, Union[str, bytes]], FetchResponse, Exception]


class FakeFetcher:
    """In-memory fetcher serving canned responses keyed by URL.

    Routes map a URL to ``(status, body)``, to a ready ``FetchResponse``
    (for redirects or headers), or to an exception instance that is raised
    instead. Unknown URLs answer 404.
    """

    def __init__(self, routes: Optional[Dict[str, Route]] = None):
        self.routes: Dict[str, Route] = dict(routes or {})
        self.requested: List[str] = []

    async def fetch(self, url: str, timeout: Optional[float] = None) -> FetchResponse:
        self.requested.append(url)
        route = self.routes.get(url)

        if route is None:
            return FetchResponse(url=url, status=404, body=b"Not Found")
        if isinstance(route, Exception):
            raise route
        if isinstance(route, FetchResponse):
            return route

        status, body = route
        if isinstance(body, str):
            body = body.encode('utf-8')
        return FetchResponse(url=url, status=status, body=body)

    def request_count(self, url: str) -> int:
        return self.requested.count(url)


def make_page(
    title: str = "",
    nav_links: Optional[List[str]] = None,
    footer_links: Optional[List[str]] = None,
    body_links: Optional[List[str]] = None,
    text: str = "",
    meta_description: Optional[str] = None
) -> str:
    """Build a small HTML page with optional navigation, footer and body links."""
    head = f"<title>{title}</title>" if title else ""
    if meta_description is not None:
        head += f'<meta name="description" content="{meta_description}">'

    def anchors(links):
        return "".join(f'<a href="{href}">{href}</a>' for href in links or [])

    nav = f"<nav>{anchors(nav_links)}</nav>" if nav_links else ""
    footer = f"<footer>{anchors(footer_links)}</footer>" if footer_links else ""
    main = f"<main><p>{text}</p>{anchors(body_links)}</main>"

    return f"<html><head>{head}</head><body>{nav}{main}{footer}</body></html>"


@pytest.fixture
def fake_fetcher():
    """Empty in-memory fetcher; tests add routes as needed."""
    return FakeFetcher()


@pytest.fixture
def fetcher_factory():
    """Build an in-memory fetcher from a route table."""
    return FakeFetcher


@pytest.fixture
def page_html():
    """HTML page builder."""
    return make_page


@pytest.fixture
def example_scope():
    """Scope for https://example.com/."""
    return PageScope("https://example.com/")


@pytest.fixture
def fast_config():
    """Popularity configuration with short timeouts for tests."""
    return PopularityConfig(page_timeout=2.0, sitemap_timeout=2.0)


@pytest.fixture
def nav_site_routes():
    """Homepage with three navigation pages that each link back home; no sitemap."""
    return {
        "https://example.com/": (200, make_page(
            title="Example Home",
            nav_links=["/about", "/products", "/contact"],
            text="Welcome to the example site",
            meta_description="Example homepage"
        )),
        "https://example.com/about": (200, make_page(
            title="About", body_links=["/"], text="About us"
        )),
        "https://example.com/products": (200, make_page(
            title="Products", body_links=["/"], text="Our products"
        )),
        "https://example.com/contact": (200, make_page(
            title="Contact", body_links=["/"], text="Contact us"
        )),
    }


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )

