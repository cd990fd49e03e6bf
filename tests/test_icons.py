"""Tests for favicon derivation and loading."""

import httpx
import pytest

from rssfeed_reader.errors import IconDecodeError, IconDerivationError, IconFetchError
from rssfeed_reader.icons import decode_icon, derive_icon_url, fetch_icon


class TestDeriveIconUrl:
    def test_uses_scheme_and_host_of_first_link(self):
        links = ["https://news.example.com/rss", "http://other.example.org/"]
        assert derive_icon_url(links) == "https://news.example.com/favicon.ico"

    def test_drops_port_path_and_query(self):
        assert (
            derive_icon_url(["http://example.com:8080/a/b?c=d#e"])
            == "http://example.com/favicon.ico"
        )

    def test_ipv6_host_is_bracketed(self):
        assert derive_icon_url(["http://[::1]:8000/feed"]) == "http://[::1]/favicon.ico"

    @pytest.mark.parametrize("links", [[], [""], ["/relative/path"], ["example.com/feed"]])
    def test_unusable_links(self, links):
        with pytest.raises(IconDerivationError):
            derive_icon_url(links)


class TestDecodeIcon:
    def test_png(self, png_icon):
        assert decode_icon(png_icon).size == (16, 16)

    @pytest.mark.parametrize("data", [b"", b"plain text"])
    def test_garbage(self, data):
        with pytest.raises(IconDecodeError):
            decode_icon(data)


class TestFetchIcon:
    def test_success(self, client_factory, png_icon):
        client = client_factory({
            "https://example.com/favicon.ico": httpx.Response(200, content=png_icon),
        })
        assert fetch_icon(client, "https://example.com/favicon.ico").size == (16, 16)

    def test_not_found(self, client_factory):
        client = client_factory({})
        with pytest.raises(IconFetchError, match="404"):
            fetch_icon(client, "https://example.com/favicon.ico")

    def test_timeout(self, client_factory):
        client = client_factory({
            "https://example.com/favicon.ico": httpx.ReadTimeout("timed out"),
        })
        with pytest.raises(IconFetchError):
            fetch_icon(client, "https://example.com/favicon.ico")

    @pytest.mark.parametrize("icon_url", [
        "http://xn--a.com/favicon.ico",
        "http://a\x00b.com/favicon.ico",
    ])
    def test_rejected_host(self, client_factory, icon_url):
        client = client_factory({})
        with pytest.raises(IconFetchError):
            fetch_icon(client, icon_url)
