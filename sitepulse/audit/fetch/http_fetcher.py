"""HTTP fetch capability used by discovery readers and the page analyzer.

This module wraps an aiohttp session behind a small ``Fetcher`` protocol so
that the popularity pipeline never deals with transport details, and so
tests can substitute an in-memory fetcher.
"""

import asyncio
import codecs
import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol

import aiohttp

from ..models.config import DEFAULT_USER_AGENT


logger = logging.getLogger(__name__)


_CHARSET_RE = re.compile(r"""charset=["']?([\w.:-]+)""", re.IGNORECASE)


class FetchError(Exception):
    """Raised when a URL cannot be fetched (network failure or timeout)."""

    def __init__(self, url: str, message: str, timed_out: bool = False):
        super().__init__(f"{message}: {url}")
        self.url = url
        self.timed_out = timed_out


@dataclass
class FetchResponse:
    """Status and body of a completed HTTP request."""
    url: str
    status: int
    body: bytes = b""
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """True for 2xx responses."""
        return 200 <= self.status < 300

    @property
    def charset(self) -> Optional[str]:
        """Charset declared in the Content-Type header, if it names a known codec."""
        match = _CHARSET_RE.search(self.headers.get('content-type', ''))
        if not match:
            return None
        try:
            return codecs.lookup(match.group(1)).name
        except LookupError:
            return None

    @property
    def text(self) -> str:
        """Body decoded with the declared charset (UTF-8 when absent), replacing undecodable bytes."""
        return self.body.decode(self.charset or 'utf-8', errors='replace')


class Fetcher(Protocol):
    """Anything that can fetch a URL and return a ``FetchResponse``."""

    async def fetch(self, url: str, timeout: Optional[float] = None) -> FetchResponse:
        ...


class HttpFetcher:
    """aiohttp-backed fetcher with a per-request timeout.

    Features:
    - Lazily created, reusable client session
    - Follows redirects
    - Response body size cap
    - Timeouts and connection errors surfaced as ``FetchError``
    """

    def __init__(
        self,
        timeout: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
        max_body_bytes: int = 5 * 1024 * 1024,
        connection_limit: int = 10
    ):
        """Initialize the fetcher.

        Args:
            timeout: Default total timeout per request in seconds
            user_agent: User-Agent header for every request
            max_body_bytes: Bodies larger than this are truncated
            connection_limit: Maximum open connections in the pool
        """
        self.timeout = timeout
        self.user_agent = user_agent
        self.max_body_bytes = max_body_bytes
        self.connection_limit = connection_limit

        self._session: Optional[aiohttp.ClientSession] = None
        self._stats = {
            "requests": 0,
            "failures": 0,
            "timeouts": 0,
        }

    async def __aenter__(self):
        """Async context manager entry."""
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def _ensure_session(self):
        """Ensure HTTP session is available."""
        if self._session is None:
            headers = {
                'User-Agent': self.user_agent,
                'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
            }
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers=headers,
                connector=aiohttp.TCPConnector(limit=self.connection_limit)
            )

    async def close(self):
        """Close HTTP session and cleanup resources."""
        if self._session:
            await self._session.close()
            self._session = None

    async def fetch(self, url: str, timeout: Optional[float] = None) -> FetchResponse:
        """Fetch a URL.

        Args:
            url: Absolute URL to fetch
            timeout: Total timeout override in seconds

        Returns:
            FetchResponse for any HTTP status (callers decide what is a failure)

        Raises:
            FetchError: On timeout or connection/protocol failure
        """
        await self._ensure_session()
        self._stats["requests"] += 1
        request_timeout = aiohttp.ClientTimeout(total=timeout or self.timeout)

        logger.debug(f"Fetching: {url}")
        try:
            async with self._session.get(url, timeout=request_timeout, allow_redirects=True) as response:
                body = await response.content.read(self.max_body_bytes)
                return FetchResponse(
                    url=str(response.url),
                    status=response.status,
                    body=body,
                    headers={key.lower(): value for key, value in response.headers.items()}
                )
        except asyncio.TimeoutError:
            self._stats["timeouts"] += 1
            raise FetchError(url, "Timed out", timed_out=True)
        except (aiohttp.ClientError, ValueError) as e:
            self._stats["failures"] += 1
            raise FetchError(url, f"Request failed ({type(e).__name__}: {e})")

    def get_stats(self) -> dict:
        """Get fetcher statistics."""
        return {"fetcher": "http", **self._stats}
