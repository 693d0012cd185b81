"""
Unit tests for request-head parsing and TransferRequest.
"""

import asyncio

import pytest

from httpsend.http.request import (
    HTTPParseError,
    TransferRequest,
    parse_request_head,
)


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request with a Range header."""
    return (
        b"GET /media/movie.mp4?t=10 HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"Range: bytes=0-1023\r\n"
        b"If-None-Match: \"abc\"\r\n"
        b"\r\n"
    )


class TestParseRequestHead:
    """Tests for parse_request_head()."""

    def test_parse_simple_get(self, sample_get_request: bytes):
        """Test parsing the request line."""
        request = parse_request_head(sample_get_request, ("127.0.0.1", 12345))

        assert request.method == "GET"
        assert request.path == "/media/movie.mp4"
        assert request.client_address == ("127.0.0.1", 12345)

    def test_headers_are_lowercased(self, sample_get_request: bytes):
        """Test that header names are normalized to lowercase."""
        request = parse_request_head(sample_get_request)

        assert request.headers["range"] == "bytes=0-1023"
        assert request.headers["if-none-match"] == '"abc"'
        assert request.get_header("User-Agent") == "pytest"

    def test_path_stays_percent_encoded(self):
        """Test that the path is not decoded by the parser."""
        request = parse_request_head(b"GET /a%20b/%2e%2e/c HTTP/1.1\r\n\r\n")

        assert request.path == "/a%20b/%2e%2e/c"

    def test_double_slash_path_is_not_a_host(self):
        """Test that '//x' stays a path."""
        request = parse_request_head(b"GET //etc/passwd HTTP/1.1\r\n\r\n")

        assert request.path == "//etc/passwd"

    def test_query_only_target(self):
        """Test that a bare query string maps to '/'."""
        request = parse_request_head(b"GET ?x=1 HTTP/1.1\r\n\r\n")

        assert request.path == "/"

    def test_repeated_headers_are_folded(self):
        """Test that repeated headers join with a comma."""
        raw = (
            b"GET / HTTP/1.1\r\n"
            b"If-None-Match: \"a\"\r\n"
            b"If-None-Match: \"b\"\r\n"
            b"\r\n"
        )
        request = parse_request_head(raw)

        assert request.headers["if-none-match"] == '"a", "b"'

    def test_malformed_header_lines_skipped(self):
        """Test lenient handling of header lines without a colon."""
        raw = b"GET / HTTP/1.1\r\nnot a header\r\nHost: x\r\n\r\n"
        request = parse_request_head(raw)

        assert request.headers == {"host": "x"}

    def test_body_is_ignored(self):
        """Test that bytes after the head are ignored."""
        raw = b"GET / HTTP/1.1\r\nHost: x\r\n\r\nGARBAGE: yes\r\n"
        request = parse_request_head(raw)

        assert "garbage" not in request.headers

    def test_parse_invalid_method(self):
        """Test that unknown methods are rejected with 405."""
        with pytest.raises(HTTPParseError) as exc_info:
            parse_request_head(b"BREW /pot HTTP/1.1\r\n\r\n")

        assert exc_info.value.status_code == 405

    def test_parse_invalid_request_line(self):
        """Test handling of a malformed request line."""
        with pytest.raises(HTTPParseError) as exc_info:
            parse_request_head(b"GET\r\nHost: test\r\n\r\n")

        assert exc_info.value.status_code == 400


class TestTransferRequest:
    """Tests for the TransferRequest dataclass."""

    def test_method_is_uppercased(self):
        assert TransferRequest(method="head").method == "HEAD"

    def test_is_head(self):
        assert TransferRequest(method="HEAD").is_head is True
        assert TransferRequest(method="GET").is_head is False

    def test_header_keys_normalized(self):
        request = TransferRequest(headers={"If-Modified-Since": "x"})

        assert request.headers == {"if-modified-since": "x"}
        assert request.get_header("IF-MODIFIED-SINCE") == "x"
        assert request.get_header("range") is None
        assert request.get_header("range", "none") == "none"

    def test_each_request_gets_its_own_event(self):
        """Test that disconnect events are not shared between requests."""
        first, second = TransferRequest(), TransferRequest()
        first.disconnected.set()

        assert isinstance(second.disconnected, asyncio.Event)
        assert not second.disconnected.is_set()
