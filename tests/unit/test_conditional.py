"""
Unit tests for conditional request evaluation.
"""

import pytest

from conftest import RecordingResponse
from httpsend.transfer import conditional


LAST_MODIFIED = "Sat, 15 Jun 2024 10:00:00 GMT"


@pytest.fixture
def response() -> RecordingResponse:
    response = RecordingResponse()
    response.set_header("ETag", '"a-1"')
    response.set_header("Last-Modified", LAST_MODIFIED)
    response.set_header("Content-Type", "text/plain")
    response.set_header("Content-Length", "10")
    response.set_header("Cache-Control", "public, max-age=0")
    return response


class TestIsConditional:

    def test_validators(self):
        assert conditional.is_conditional({"if-none-match": '"x"'})
        assert conditional.is_conditional({"if-modified-since": LAST_MODIFIED})
        assert not conditional.is_conditional({"range": "bytes=0-0"})
        assert not conditional.is_conditional({"if-none-match": ""})


class TestIsCacheable:

    @pytest.mark.parametrize("status", [200, 206, 299, 304])
    def test_cacheable(self, status):
        assert conditional.is_cacheable(status)

    @pytest.mark.parametrize("status", [199, 301, 404, 416, 500])
    def test_not_cacheable(self, status):
        assert not conditional.is_cacheable(status)


class TestEtagMatches:

    def test_exact(self):
        assert conditional.etag_matches('"a-1"', '"a-1"')

    def test_list(self):
        assert conditional.etag_matches('"zz", "a-1" , "yy"', '"a-1"')

    def test_weak_comparison(self):
        assert conditional.etag_matches('W/"a-1"', '"a-1"')
        assert conditional.etag_matches('"a-1"', 'W/"a-1"')

    def test_star(self):
        assert conditional.etag_matches(" * ", '"a-1"')
        assert conditional.etag_matches("*", None)

    def test_mismatch(self):
        assert not conditional.etag_matches('"a-2"', '"a-1"')
        assert not conditional.etag_matches('"a-1"', None)


class TestNotModifiedSince:

    def test_same_second(self):
        assert conditional.not_modified_since(LAST_MODIFIED, LAST_MODIFIED)

    def test_later_since(self):
        assert conditional.not_modified_since("Sat, 15 Jun 2024 10:00:01 GMT", LAST_MODIFIED)

    def test_modified_after(self):
        assert not conditional.not_modified_since("Sat, 15 Jun 2024 09:59:59 GMT", LAST_MODIFIED)

    def test_unparsable(self):
        assert not conditional.not_modified_since("not a date", LAST_MODIFIED)
        assert not conditional.not_modified_since(LAST_MODIFIED, None)


class TestIsFresh:

    def test_matching_etag(self, response):
        assert conditional.is_fresh({"if-none-match": '"a-1"'}, response)

    def test_if_none_match_takes_precedence(self, response):
        """Test that a stale ETag wins over a fresh date."""
        headers = {"if-none-match": '"old"', "if-modified-since": LAST_MODIFIED}

        assert not conditional.is_fresh(headers, response)

    def test_if_modified_since_alone(self, response):
        assert conditional.is_fresh({"if-modified-since": LAST_MODIFIED}, response)

    def test_no_validators(self, response):
        assert not conditional.is_fresh({}, response)


class TestNotModified:

    def test_strips_content_headers(self, response):
        conditional.not_modified(response)

        assert response.status == 304
        assert [name for name in response.headers if name.lower().startswith("content")] == []
        assert response.get_header("ETag") == '"a-1"'
        assert response.get_header("Cache-Control") == "public, max-age=0"

    def test_any_case(self):
        response = RecordingResponse()
        response.set_header("content-encoding", "gzip")
        response.set_header("CONTENT-LANGUAGE", "en")

        conditional.remove_content_headers(response)

        assert len(response.headers) == 0
