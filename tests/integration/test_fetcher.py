"""
Integration tests for HTTP retrieval with mocked origins.

Uses the `responses` library to mock requests.
"""

import pytest
import requests
import responses

from lookanalyst.errors import NetworkError
from lookanalyst.fetcher import IMAGE_HEADERS, PAGE_HEADERS, USER_AGENT, build_headers, fetch, open_url


class TestBuildHeaders:
    """Tests for build_headers()"""

    def test_pinterest_gets_referer_and_origin(self):
        headers = build_headers("https://i.pinimg.com/736x/a.jpg", IMAGE_HEADERS)

        assert headers['Referer'] == 'https://www.pinterest.com/'
        assert headers['Origin'] == 'https://www.pinterest.com'
        assert headers['Sec-Fetch-Dest'] == 'image'

    def test_other_hosts_get_plain_headers(self):
        headers = build_headers("https://example.com/page")

        assert 'Referer' not in headers
        assert headers['Sec-Fetch-Mode'] == 'navigate'

    def test_base_is_not_mutated(self):
        build_headers("https://www.pinterest.com/pin/1/")
        assert 'Referer' not in PAGE_HEADERS


class TestFetch:
    """Tests for fetch() with mocked HTTP responses."""

    @responses.activate
    def test_success_returns_html(self):
        test_url = "https://www.pinterest.com/pin/1/"
        responses.add(responses.GET, test_url, body="<html>pin</html>", status=200, content_type="text/html")

        resource = fetch(test_url)

        assert resource.text == "<html>pin</html>"
        assert resource.status_code == 200
        assert resource.content_type.startswith("text/html")

    @responses.activate
    def test_missing_charset_decodes_as_utf8(self):
        test_url = "https://www.pinterest.com/pin/2/"
        body = "<html><title>Vestido rosé | Pinterest</title></html>".encode("utf-8")
        responses.add(responses.GET, test_url, body=body, status=200, content_type="text/html")

        resource = fetch(test_url)

        assert "Vestido rosé" in resource.text
        assert resource.encoding is None

    @responses.activate
    def test_declared_charset_is_honoured(self):
        test_url = "https://www.pinterest.com/pin/3/"
        body = "<html>rosé</html>".encode("iso-8859-1")
        responses.add(
            responses.GET, test_url, body=body, status=200,
            content_type="text/html; charset=ISO-8859-1",
        )

        assert fetch(test_url).text == "<html>rosé</html>"

    @responses.activate
    def test_sends_browser_headers(self):
        test_url = "https://www.pinterest.com/pin/1/"
        responses.add(responses.GET, test_url, body="ok", status=200)

        fetch(test_url)

        sent = responses.calls[0].request.headers
        assert sent['User-Agent'] == USER_AGENT
        assert sent['Referer'] == 'https://www.pinterest.com/'
        assert sent['Sec-Fetch-Dest'] == 'document'

    @responses.activate
    def test_explicit_headers_used_as_is(self):
        test_url = "https://example.com/page"
        responses.add(responses.GET, test_url, body="ok", status=200)

        fetch(test_url, headers={'User-Agent': 'custom-agent'})

        sent = responses.calls[0].request.headers
        assert sent['User-Agent'] == 'custom-agent'
        assert 'Sec-Fetch-Dest' not in sent

    @pytest.mark.parametrize("status", [403, 404, 500, 503])
    @responses.activate
    def test_error_status_raises(self, status):
        test_url = "https://www.pinterest.com/pin/missing/"
        responses.add(responses.GET, test_url, status=status)

        with pytest.raises(NetworkError) as exc_info:
            fetch(test_url)

        assert exc_info.value.status_code == status
        assert exc_info.value.url == test_url
        assert str(status) in str(exc_info.value)

    @responses.activate
    def test_304_accepted(self):
        test_url = "https://example.com/cached"
        responses.add(responses.GET, test_url, status=304)

        assert fetch(test_url).status_code == 304

    @responses.activate
    def test_redirect_followed(self):
        short_url = "https://pin.it/4xYz9Ab"
        final_url = "https://www.pinterest.com/pin/1/"
        responses.add(responses.GET, short_url, status=301, headers={'Location': final_url})
        responses.add(responses.GET, final_url, body="<html>final</html>", status=200)

        resource = fetch(short_url)

        assert resource.text == "<html>final</html>"
        assert resource.url == final_url

    @responses.activate
    def test_redirect_loop_raises(self):
        test_url = "https://example.com/loop"
        responses.add(responses.GET, test_url, status=302, headers={'Location': test_url})

        with pytest.raises(NetworkError, match='Too many redirects'):
            fetch(test_url)

    @responses.activate
    def test_timeout_raises(self):
        test_url = "https://example.com/slow"
        responses.add(responses.GET, test_url, body=requests.exceptions.Timeout("timed out"))

        with pytest.raises(NetworkError, match='timed out') as exc_info:
            fetch(test_url)

        assert exc_info.value.status_code is None

    @responses.activate
    def test_connection_error_raises(self):
        test_url = "https://unreachable.example.com"
        responses.add(responses.GET, test_url, body=requests.exceptions.ConnectionError("refused"))

        with pytest.raises(NetworkError, match='Request failed'):
            fetch(test_url)


class TestOpenUrl:
    """Tests for the streaming open_url() context manager."""

    @responses.activate
    def test_streams_body(self):
        test_url = "https://i.pinimg.com/736x/a.jpg"
        responses.add(responses.GET, test_url, body=b"jpeg-bytes", status=200, content_type="image/jpeg")

        with open_url(test_url, headers=IMAGE_HEADERS) as response:
            assert b"".join(response.iter_content(4)) == b"jpeg-bytes"
            assert response.headers['Content-Type'] == "image/jpeg"
