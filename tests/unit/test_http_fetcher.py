"""Unit tests for the aiohttp-backed fetcher."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from sitepulse.audit.fetch.http_fetcher import FetchError, FetchResponse, HttpFetcher


def mock_response(status=200, body=b"<html></html>", url="https://example.com/"):
    response = MagicMock()
    response.status = status
    response.url = url
    response.headers = {"Content-Type": "text/html"}
    response.content.read = AsyncMock(return_value=body)

    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=response)
    context.__aexit__ = AsyncMock(return_value=False)
    return context


class TestFetchResponse:
    """Test cases for FetchResponse."""

    def test_ok_range(self):
        assert FetchResponse(url="u", status=200).ok
        assert FetchResponse(url="u", status=204).ok
        assert not FetchResponse(url="u", status=301).ok
        assert not FetchResponse(url="u", status=404).ok

    def test_text_replaces_undecodable_bytes(self):
        response = FetchResponse(url="u", status=200, body=b"caf\xc3\xa9 \xff")

        assert response.text.startswith("café")

    @pytest.mark.parametrize("content_type,expected", [
        ("text/html; charset=ISO-8859-1", "iso8859-1"),
        ('text/html; charset="windows-1252"', "cp1252"),
        ("text/html;charset=utf-8", "utf-8"),
        ("text/html", None),
        ("text/html; charset=no-such-codec", None),
    ])
    def test_charset_from_content_type(self, content_type, expected):
        response = FetchResponse(url="u", status=200, headers={"content-type": content_type})

        assert response.charset == expected

    def test_text_uses_declared_charset(self):
        response = FetchResponse(
            url="u",
            status=200,
            body="Café".encode('latin-1'),
            headers={"content-type": "text/html; charset=iso-8859-1"}
        )

        assert response.text == "Café"

    def test_unknown_charset_falls_back_to_utf8(self):
        response = FetchResponse(
            url="u",
            status=200,
            body="Café".encode('utf-8'),
            headers={"content-type": "text/html; charset=bogus"}
        )

        assert response.text == "Café"


class TestHttpFetcher:
    """Test cases for HttpFetcher."""

    @pytest.mark.asyncio
    async def test_successful_fetch(self):
        fetcher = HttpFetcher(timeout=5.0)
        fetcher._session = MagicMock()
        fetcher._session.get = MagicMock(return_value=mock_response(body=b"<p>hi</p>"))

        response = await fetcher.fetch("https://example.com/")

        assert response.status == 200
        assert response.body == b"<p>hi</p>"
        assert response.headers == {"content-type": "text/html"}
        assert fetcher.get_stats()["requests"] == 1

    @pytest.mark.asyncio
    async def test_non_2xx_is_returned_not_raised(self):
        fetcher = HttpFetcher()
        fetcher._session = MagicMock()
        fetcher._session.get = MagicMock(return_value=mock_response(status=404))

        response = await fetcher.fetch("https://example.com/missing")

        assert response.status == 404
        assert not response.ok

    @pytest.mark.asyncio
    async def test_timeout_raises_fetch_error(self):
        fetcher = HttpFetcher()
        fetcher._session = MagicMock()
        fetcher._session.get = MagicMock(side_effect=asyncio.TimeoutError())

        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch("https://example.com/slow")

        assert exc_info.value.timed_out
        assert exc_info.value.url == "https://example.com/slow"
        assert fetcher.get_stats()["timeouts"] == 1

    @pytest.mark.asyncio
    async def test_client_error_raises_fetch_error(self):
        fetcher = HttpFetcher()
        fetcher._session = MagicMock()
        fetcher._session.get = MagicMock(side_effect=aiohttp.ClientConnectionError("refused"))

        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch("https://example.com/")

        assert not exc_info.value.timed_out
        assert fetcher.get_stats()["failures"] == 1

    @pytest.mark.asyncio
    async def test_context_manager_closes_session(self):
        async with HttpFetcher() as fetcher:
            session = fetcher._session
            assert session is not None

        assert fetcher._session is None
        assert session.closed
