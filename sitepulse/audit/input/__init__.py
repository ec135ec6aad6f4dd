"""Input providers package for URL discovery."""

from .sitemap_provider import SitemapProvider, SitemapUnavailableError
from .homepage_provider import HomepageLinkProvider, HomepageLinks, HomepageProviderError

__all__ = [
    'SitemapProvider',
    'SitemapUnavailableError',
    'HomepageLinkProvider',
    'HomepageLinks',
    'HomepageProviderError'
]
