"""URL canonicalization utility for consistent deduplication and graph keys.

This module maps any URL string onto a single canonical form. Discovery
deduplication, the link graph and sitemap/navigation membership checks all
compare canonical strings produced here, so two spellings of the same page
(``www.`` prefix, trailing slash, scheme/host case) always collapse to one key.
"""

from urllib.parse import urljoin, urlparse, urlunparse
from typing import Optional


class URLNormalizationError(Exception):
    """Raised when URL normalization fails."""
    pass


class InvalidURLError(URLNormalizationError):
    """Raised when a raw URL cannot be turned into a canonical URL."""
    pass


class InvalidDomainError(URLNormalizationError):
    """Raised when a domain or site URL cannot be used as an analysis target."""
    pass


_DEFAULT_PORTS = {'http': 80, 'https': 443}


def _normalize_host(host: str) -> str:
    """Lower-case a hostname, strip ``www.`` and convert IDN labels to punycode."""
    host = host.lower().rstrip('.')
    if host.startswith('www.'):
        host = host[4:]
    if host.startswith('['):
        # IPv6 literal, nothing else to do
        return host
    try:
        host = host.encode('idna').decode('ascii')
    except UnicodeError:
        # IDN encoding failed, keep original
        pass
    return host


def canonicalize(raw: str, base: Optional[str] = None) -> str:
    """Map a raw URL onto its canonical form.

    Rules, in order: resolve relative references against ``base``; lower-case
    scheme and host; strip a leading ``www.`` from the host; strip a trailing
    ``/`` from the path unless the path is exactly ``/``; drop the fragment;
    keep the query string untouched. Default ports are dropped.

    Args:
        raw: The URL to canonicalize (absolute or relative)
        base: Canonical URL used to resolve relative references

    Returns:
        The canonical URL string

    Raises:
        InvalidURLError: If the URL cannot be canonicalized

    Example:
        >>> canonicalize("HTTP://WWW.Example.COM:80/Path/?q=1#top")
        "http://example.com/Path?q=1"
        >>> canonicalize("../about/", base="https://example.com/blog/post")
        "https://example.com/about"
    """
    if not raw or not isinstance(raw, str):
        raise InvalidURLError("URL must be a non-empty string")

    raw = raw.strip()
    if not raw:
        raise InvalidURLError("URL cannot be empty or whitespace only")

    try:
        url = urljoin(base, raw) if base else raw
        parsed = urlparse(url)

        scheme = parsed.scheme.lower()
        if not scheme:
            raise InvalidURLError(f"URL missing scheme: {raw}")
        if scheme not in _DEFAULT_PORTS:
            raise InvalidURLError(f"Unsupported URL scheme: {scheme}")
        if not parsed.hostname:
            raise InvalidURLError(f"URL missing host: {raw}")

        host = parsed.hostname
        if any(char.isspace() for char in host):
            raise InvalidURLError(f"Whitespace in host: {raw}")
        if ':' in host:
            host = f"[{host}]"
        host = _normalize_host(host)

        port = parsed.port
        if port is not None and port != _DEFAULT_PORTS[scheme]:
            netloc = f"{host}:{port}"
        else:
            netloc = host

        path = parsed.path or '/'
        if path != '/':
            path = path.rstrip('/') or '/'

        return urlunparse((scheme, netloc, path, parsed.params, parsed.query, ''))

    except InvalidURLError:
        raise
    except (ValueError, TypeError) as e:
        # urlparse raises ValueError for invalid ports and malformed IPv6
        raise InvalidURLError(f"Failed to canonicalize URL '{raw}': {e}")


def canonicalize_domain(domain: str) -> str:
    """Turn a user-supplied domain or site URL into the homepage canonical URL.

    Accepts bare hosts (``example.com``) as well as full URLs; only the host
    (and a non-default port) is kept. The scheme defaults to ``https``.

    Raises:
        InvalidDomainError: If no usable host can be extracted
    """
    if not domain or not isinstance(domain, str) or not domain.strip():
        raise InvalidDomainError("Domain must be a non-empty string")

    candidate = domain.strip()
    if '://' not in candidate:
        candidate = 'https://' + candidate.lstrip('/')

    try:
        canonical = canonicalize(candidate)
    except InvalidURLError as e:
        raise InvalidDomainError(f"Invalid domain '{domain}': {e}")

    parsed = urlparse(canonical)
    if '.' not in parsed.hostname and parsed.hostname != 'localhost':
        raise InvalidDomainError(f"Invalid domain '{domain}': host has no dot")

    return urlunparse((parsed.scheme, parsed.netloc, '/', '', '', ''))


def get_host(url: str) -> str:
    """Return the canonical host (``www.`` stripped, lower-cased) of a URL."""
    return urlparse(canonicalize(url)).netloc.split(':')[0]


def url_depth(url: str) -> int:
    """Count the non-empty path segments of a URL (root = 0)."""
    path = urlparse(url).path
    return len([segment for segment in path.split('/') if segment])


def get_base_url(url: str) -> str:
    """Extract the base URL (scheme + netloc) from a full URL.

    Example:
        >>> get_base_url("https://www.example.com/path/to/page?param=value")
        "https://example.com"
    """
    parsed = urlparse(canonicalize(url))
    return f"{parsed.scheme}://{parsed.netloc}"


def is_valid_http_url(url: str) -> bool:
    """Check if a URL is a valid HTTP/HTTPS URL."""
    try:
        canonicalize(url)
        return True
    except URLNormalizationError:
        return False


def has_directory_path(raw: str, base: Optional[str] = None) -> bool:
    """Whether a URL, once resolved against ``base``, has a non-root path ending in ``/``.

    Canonical keys drop that slash, so callers record it separately to know
    what relative links on the page are relative to.
    """
    path = urlparse(urljoin(base, raw) if base else raw).path
    return path.endswith('/') and path != '/'


def with_trailing_slash(url: str) -> str:
    """Append ``/`` to a URL's path unless it already ends in one."""
    parsed = urlparse(url)
    if parsed.path.endswith('/'):
        return url
    return urlunparse(parsed._replace(path=parsed.path + '/'))
