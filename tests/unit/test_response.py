"""
Unit tests for HTTP response building.
"""

import pytest
import json

from tollgate.http.response import (
    HTTPResponse,
    ResponseBuilder,
    build_cookie,
    created,
    error_response,
    format_http_date,
    internal_error,
    make_response,
    no_content,
    not_found,
    ok,
    redirect,
)
from tollgate.http.status_codes import HTTPStatus, reason_phrase, status_line


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_status_line(self):
        """Test WSGI status line generation."""
        assert HTTPResponse(status=HTTPStatus.OK).status_line == "200 OK"
        assert HTTPResponse(status=404).status_line == "404 Not Found"

    def test_header_list_sets_content_length(self):
        """Test Content-Length is filled in."""
        response = HTTPResponse(body=b"hello world", headers={"X-Custom": "value"})

        headers = dict(response.header_list())
        assert headers["Content-Length"] == "11"
        assert headers["X-Custom"] == "value"

    def test_header_list_keeps_every_cookie(self):
        """Test each Set-Cookie line becomes its own header."""
        response = HTTPResponse()
        response.add_cookie("a=1; Path=/").add_cookie("b=2; Path=/")

        cookies = [v for k, v in response.header_list() if k == "Set-Cookie"]
        assert cookies == ["a=1; Path=/", "b=2; Path=/"]

    def test_to_wsgi(self):
        """Test to_wsgi() calls start_response and returns the body."""
        calls = []
        response = HTTPResponse(status=201, body=b"made")

        chunks = response.to_wsgi(lambda status, headers: calls.append((status, headers)))

        assert chunks == [b"made"]
        assert calls[0][0] == "201 Created"
        assert ("Content-Length", "4") in calls[0][1]

    def test_set_header_chaining(self):
        """Test method chaining for headers."""
        response = (HTTPResponse()
            .set_header("X-One", "1")
            .set_header("X-Two", "2"))

        assert response.headers == {"X-One": "1", "X-Two": "2"}

    def test_set_body_encodes_text(self):
        """Test string bodies are UTF-8 encoded."""
        response = HTTPResponse().set_body("héllo")
        assert response.body == "héllo".encode("utf-8")


class TestResponseBuilder:
    """Tests for ResponseBuilder class."""

    def test_status(self):
        """Test setting status."""
        response = ResponseBuilder().status(HTTPStatus.CREATED).build()
        assert response.status == 201

    def test_json_body(self):
        """Test JSON body."""
        response = ResponseBuilder().json({"key": "value"}).build()

        assert response.headers["Content-Type"] == "application/json; charset=utf-8"
        assert json.loads(response.body) == {"key": "value"}

    def test_html_body(self):
        """Test HTML body."""
        response = ResponseBuilder().html("<h1>Hello</h1>").build()

        assert response.headers["Content-Type"] == "text/html; charset=utf-8"
        assert response.body == b"<h1>Hello</h1>"

    def test_text_body(self):
        """Test plain text body."""
        response = ResponseBuilder().text("Hello").build()

        assert response.headers["Content-Type"] == "text/plain; charset=utf-8"
        assert response.body == b"Hello"

    def test_redirect(self):
        """Test redirect defaults to 302."""
        response = ResponseBuilder().redirect("/login").build()

        assert response.status == 302
        assert response.headers["Location"] == "/login"

    def test_redirect_any_code(self):
        """Test a non-3xx code still carries Location."""
        response = ResponseBuilder().redirect("/users", 403).build()

        assert response.status == 403
        assert response.headers["Location"] == "/users"

    def test_cache_headers(self):
        """Test no_cache() headers."""
        response = ResponseBuilder().no_cache().build()

        assert "no-store" in response.headers["Cache-Control"]
        assert response.headers["Pragma"] == "no-cache"

    def test_cookie(self):
        """Test cookie() queues a Set-Cookie line."""
        response = ResponseBuilder().cookie("theme", "dark").build()

        assert response.cookies == ["theme=dark; Path=/; HttpOnly"]

    def test_method_chaining(self):
        """Test full method chaining."""
        response = (ResponseBuilder()
            .status(HTTPStatus.CREATED)
            .header("X-Request-Id", "abc")
            .json({"id": 1})
            .build())

        assert response.status == 201
        assert response.headers["X-Request-Id"] == "abc"
        assert json.loads(response.body) == {"id": 1}


class TestMakeResponse:
    """Tests for handler return value coercion."""

    def test_response_copied(self):
        """Test an HTTPResponse comes back as an equal, independent copy."""
        response = HTTPResponse(status=204, headers={"X-A": "1"}, cookies=["a=1"])
        result = make_response(response)

        assert result == response
        assert result is not response
        result.add_cookie("b=2")
        result.set_header("X-B", "2")
        assert response.cookies == ["a=1"]
        assert response.headers == {"X-A": "1"}

    def test_tuple_does_not_touch_original(self):
        """Test (response, status) sets the status on the copy only."""
        response = HTTPResponse(status=200, body=b"x")

        assert make_response((response, 201)).status == 201
        assert response.status == 200

    def test_str_is_html(self):
        """Test a string becomes a 200 HTML page."""
        response = make_response("<p>hi</p>")

        assert response.status == 200
        assert response.headers["Content-Type"].startswith("text/html")
        assert response.body == b"<p>hi</p>"

    def test_bytes_is_octet_stream(self):
        """Test bytes are sent as is."""
        response = make_response(b"\x00\x01")

        assert response.body == b"\x00\x01"
        assert response.headers["Content-Type"] == "application/octet-stream"

    @pytest.mark.parametrize("value", [{"a": 1}, [1, 2]])
    def test_dict_and_list_are_json(self, value):
        """Test dicts and lists become JSON."""
        response = make_response(value)
        assert json.loads(response.body) == value

    def test_none_is_empty(self):
        """Test None gives an empty 200."""
        response = make_response(None)

        assert response.status == 200
        assert response.body == b""

    def test_tuple_sets_status(self):
        """Test (body, status) replaces the status."""
        response = make_response(({"error": "nope"}, 422))

        assert response.status == 422
        assert json.loads(response.body) == {"error": "nope"}

    def test_unsupported_type(self):
        """Test other return types are rejected."""
        with pytest.raises(TypeError, match="Handler returned int"):
            make_response(42)


class TestConvenienceFunctions:
    """Tests for convenience response functions."""

    def test_ok(self):
        """Test ok() for text and JSON."""
        assert ok("Success").body == b"Success"
        assert json.loads(ok({"ok": True}).body) == {"ok": True}

    def test_created(self):
        """Test created() with a Location header."""
        response = created({"id": 1}, location="/users/1")

        assert response.status == 201
        assert response.headers["Location"] == "/users/1"

    def test_no_content(self):
        """Test no_content()."""
        response = no_content()

        assert response.status == 204
        assert response.body == b""

    def test_redirect(self):
        """Test redirect()."""
        response = redirect("/new", HTTPStatus.MOVED_PERMANENTLY)

        assert response.status == 301
        assert response.headers["Location"] == "/new"

    def test_error_response(self):
        """Test error bodies are {"error": message} JSON."""
        response = error_response(403, "Forbidden")

        assert response.status == 403
        assert json.loads(response.body) == {"error": "Forbidden"}

    def test_not_found(self):
        """Test not_found()."""
        response = not_found()

        assert response.status == 404
        assert json.loads(response.body) == {"error": "Not Found"}

    def test_internal_error(self):
        """Test internal_error()."""
        assert internal_error().status == 500


class TestCookies:
    """Tests for build_cookie()."""

    def test_session_cookie(self):
        """Test expire=0 gives a session cookie."""
        assert build_cookie("sid", "abc") == "sid=abc; Path=/; HttpOnly"

    def test_expiring_cookie(self):
        """Test a positive expire sets Max-Age and Expires."""
        line = build_cookie("sid", "abc", expire=3600, path="/app")

        assert line.startswith("sid=abc; Path=/app; Max-Age=3600; Expires=")
        assert line.endswith("GMT; HttpOnly")

    def test_delete_cookie(self):
        """Test a negative expire deletes the cookie."""
        line = build_cookie("sid", "", expire=-1)

        assert "Max-Age=0" in line


class TestStatusCodes:
    """Tests for status code helpers."""

    def test_status_phrases(self):
        """Test reason phrases."""
        assert HTTPStatus.OK.phrase == "OK"
        assert HTTPStatus.NOT_FOUND.phrase == "Not Found"
        assert reason_phrase(403) == "Forbidden"

    def test_unknown_code(self):
        """Test arbitrary codes still get a status line."""
        assert reason_phrase(599) == "Unknown"
        assert status_line(599) == "599 Unknown"

    def test_status_categories(self):
        """Test status code categories."""
        assert HTTPStatus.FOUND.is_redirect
        assert not HTTPStatus.OK.is_redirect
        assert HTTPStatus.NOT_FOUND.is_error
        assert not HTTPStatus.CREATED.is_error


class TestHTTPDate:
    """Tests for HTTP date formatting."""

    def test_format(self):
        """Test HTTP date format."""
        from datetime import datetime, timezone

        dt = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        assert format_http_date(dt) == "Thu, 01 Jan 2026 12:00:00 GMT"
