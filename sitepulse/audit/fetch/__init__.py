"""HTTP fetch capability package."""

from .http_fetcher import HttpFetcher, Fetcher, FetchResponse, FetchError

__all__ = [
    'HttpFetcher',
    'Fetcher',
    'FetchResponse',
    'FetchError'
]
