"""
Unit tests for access logging.
"""

import json
import logging

from tollgate.http.request import HTTPRequest
from tollgate.http.response import HTTPResponse
from tollgate.log import RequestLog, log_request


def make_entry(**overrides) -> RequestLog:
    request = HTTPRequest(
        method="GET",
        path="/blogs/1",
        query_string="page=2",
        headers={"user-agent": "curl/8.0"},
        client_address=("10.0.0.5", 40000),
    )
    response = HTTPResponse(status=200, body=b"hello")
    entry = RequestLog.create(request, response, "a1b2c3d4", 1.8361)
    for key, value in overrides.items():
        setattr(entry, key, value)
    return entry


class TestRequestLog:
    """Tests for RequestLog formatting."""

    def test_create(self):
        """Test fields are taken from the request and response."""
        entry = make_entry()

        assert entry.client_ip == "10.0.0.5"
        assert entry.user_agent == "curl/8.0"
        assert entry.content_length == 5
        assert entry.status_code == 200

    def test_to_text(self):
        """Test the Apache-like line."""
        entry = make_entry(timestamp="18/Oct/2026:10:15:02 +0000")

        assert entry.to_text() == (
            '10.0.0.5 - - [18/Oct/2026:10:15:02 +0000] '
            '"GET /blogs/1?page=2" 200 5 1.84ms a1b2c3d4'
        )

    def test_to_text_without_query(self):
        """Test no "?" is added when there is no query string."""
        entry = make_entry(query="")
        assert '"GET /blogs/1" 200' in entry.to_text()

    def test_missing_user_agent(self):
        """Test an absent User-Agent is logged as "-"."""
        entry = RequestLog.create(HTTPRequest("GET", "/"), HTTPResponse(), "x", 0.0)
        assert entry.user_agent == "-"

    def test_to_dict(self):
        """Test the dict form rounds the duration."""
        data = make_entry().to_dict()

        assert data["request_id"] == "a1b2c3d4"
        assert data["duration_ms"] == 1.84
        assert data["query"] == "page=2"


class TestLogRequest:
    """Tests for log_request()."""

    def test_text(self, caplog):
        """Test text lines go to tollgate.access."""
        with caplog.at_level(logging.INFO, logger="tollgate.access"):
            log_request(make_entry(), "text")

        assert caplog.records[-1].name == "tollgate.access"
        assert caplog.records[-1].getMessage().endswith("a1b2c3d4")

    def test_json(self, caplog):
        """Test json lines are parseable objects."""
        with caplog.at_level(logging.INFO, logger="tollgate.access"):
            log_request(make_entry(), "json")

        data = json.loads(caplog.records[-1].getMessage())
        assert data["method"] == "GET"
        assert data["status_code"] == 200
