"""Page-URL admissibility matching for discovered links.

This module decides which discovered URLs are worth analyzing as pages:
same-host HTML documents, excluding static assets, administrative areas
and sitemap files.
"""

import re
from typing import Dict, Iterable, List, Optional, Any
from urllib.parse import urlparse

from .url_normalizer import canonicalize, get_host, URLNormalizationError


class ScopeMatcherError(Exception):
    """Raised when scope matcher encounters an error."""
    pass


NON_PAGE_EXTENSIONS = (
    '.pdf', '.jpg', '.jpeg', '.png', '.gif', '.svg', '.css',
    '.js', '.ico', '.txt', '.gz', '.zip',
)

ADMIN_PATH_PATTERNS = (
    r'/wp-admin/',
    r'/admin/',
    r'/api/',
    r'/feed/',
    r'/wp-content/',
    r'/wp-includes/',
)

SITEMAP_FILE_PATTERN = r'sitemap[^/]*\.xml$'
ATTACHMENT_QUERY_PATTERN = r'(^|&)attachment_id='


class PageScope:
    """Admissibility predicate for page URLs of a single site.

    A URL is admissible when:
    1. It canonicalizes successfully
    2. Its host (after ``www.`` stripping) equals the target host
    3. Its path does not end with a non-HTML resource extension
    4. Its path is not an administrative path or a sitemap file
    5. It is not a WordPress attachment URL
    """

    def __init__(
        self,
        base_url: str,
        extra_exclude_patterns: Optional[List[str]] = None
    ):
        """Initialize the scope for a target site.

        Args:
            base_url: Canonical homepage URL of the target site
            extra_exclude_patterns: Additional regex patterns matched against the path

        Raises:
            ScopeMatcherError: If the base URL or a pattern is invalid
        """
        try:
            self._host = get_host(base_url)
        except URLNormalizationError as e:
            raise ScopeMatcherError(f"Invalid base URL '{base_url}': {e}")

        self._path_patterns = []
        for pattern in list(ADMIN_PATH_PATTERNS) + [SITEMAP_FILE_PATTERN] + list(extra_exclude_patterns or []):
            try:
                self._path_patterns.append((pattern, re.compile(pattern, re.IGNORECASE)))
            except re.error as e:
                raise ScopeMatcherError(f"Invalid exclude pattern '{pattern}': {e}")

        self._query_pattern = re.compile(ATTACHMENT_QUERY_PATTERN)

    @property
    def host(self) -> str:
        """Canonical host of the target site."""
        return self._host

    def is_admissible(self, url: str) -> bool:
        """Check if a URL should be treated as an analyzable page.

        Args:
            url: Canonical (or raw absolute) URL to check

        Returns:
            True if the URL passes every admissibility rule
        """
        try:
            canonical = canonicalize(url)
        except URLNormalizationError:
            return False

        parsed = urlparse(canonical)
        if parsed.netloc.split(':')[0] != self._host:
            return False

        path = parsed.path.lower()
        if path.endswith(NON_PAGE_EXTENSIONS):
            return False

        # Admin patterns carry trailing slashes, so match against "path/"
        slashed = path if path.endswith('/') else path + '/'
        for _, pattern in self._path_patterns:
            if pattern.search(slashed) or pattern.search(path):
                return False

        if parsed.query and self._query_pattern.search(parsed.query):
            return False

        return True

    def filter_urls(self, urls: Iterable[str]) -> List[str]:
        """Return admissible URLs, preserving input order."""
        return [url for url in urls if self.is_admissible(url)]

    def get_scope_info(self) -> Dict[str, Any]:
        """Get information about the current scope configuration."""
        return {
            "host": self._host,
            "excluded_extensions": list(NON_PAGE_EXTENSIONS),
            "exclude_patterns": [pattern for pattern, _ in self._path_patterns],
        }
