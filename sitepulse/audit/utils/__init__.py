"""Audit utilities package."""

from .url_normalizer import (
    canonicalize,
    canonicalize_domain,
    get_host,
    get_base_url,
    url_depth,
    is_valid_http_url,
    URLNormalizationError,
    InvalidURLError,
    InvalidDomainError,
)
from .scope_matcher import PageScope, ScopeMatcherError

__all__ = [
    'canonicalize',
    'canonicalize_domain',
    'get_host',
    'get_base_url',
    'url_depth',
    'is_valid_http_url',
    'URLNormalizationError',
    'InvalidURLError',
    'InvalidDomainError',
    'PageScope',
    'ScopeMatcherError'
]
