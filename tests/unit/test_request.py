"""
Unit tests for the HTTP request model.
"""

import pytest

from tollgate.errors import BadRequest
from tollgate.http.request import HTTPRequest, parse_cookie_header

from conftest import make_environ


class TestFromEnviron:
    """Tests for HTTPRequest.from_environ()."""

    def test_simple_get(self):
        """Test method, path and client address."""
        request = HTTPRequest.from_environ(make_environ("get", "/api/users"))

        assert request.method == "GET"
        assert request.path == "/api/users"
        assert request.client_address == ("127.0.0.1", 54321)

    def test_headers(self):
        """Test HTTP_* keys become lower-cased headers."""
        request = HTTPRequest.from_environ(make_environ(
            headers={"User-Agent": "pytest", "Accept": "application/json"},
        ))

        assert request.get_header("User-Agent") == "pytest"
        assert request.get_header("accept") == "application/json"
        assert request.user_agent == "pytest"

    def test_query_params(self):
        """Test the query string is parsed."""
        request = HTTPRequest.from_environ(make_environ(query="page=1&limit=10&tag=a&tag=b"))

        assert request.query_string == "page=1&limit=10&tag=a&tag=b"
        assert request.get_query("page") == "1"
        assert request.query_params["tag"] == ["a", "b"]
        assert request.get_query("missing", "x") == "x"

    def test_body(self):
        """Test exactly CONTENT_LENGTH bytes are read."""
        body = b'{"name": "Ann"}'
        request = HTTPRequest.from_environ(make_environ(
            "POST", "/users", body=body, content_type="application/json",
        ))

        assert request.body == body
        assert request.is_json
        assert request.json == {"name": "Ann"}

    def test_empty_path(self):
        """Test an empty PATH_INFO becomes '/'."""
        request = HTTPRequest.from_environ(make_environ(path=""))
        assert request.path == "/"

    def test_utf8_path(self):
        """Test PATH_INFO bytes are read back as UTF-8."""
        raw = "/tags/café".encode("utf-8").decode("latin-1")
        request = HTTPRequest.from_environ(make_environ(path=raw))
        assert request.path == "/tags/café"

    def test_unicode_path_kept(self):
        """Test a path that is already text passes through."""
        request = HTTPRequest.from_environ(make_environ(path="/tags/日本"))
        assert request.path == "/tags/日本"

    def test_cookies(self):
        """Test the Cookie header is parsed."""
        request = HTTPRequest.from_environ(make_environ(headers={"Cookie": "a=1; b=two"}))
        assert request.cookies == {"a": "1", "b": "two"}


class TestRequestBody:
    """Tests for body helpers."""

    def test_invalid_json(self):
        """Test an invalid JSON body raises BadRequest."""
        request = HTTPRequest(method="POST", path="/", body=b"{nope",
                              headers={"content-type": "application/json"})

        with pytest.raises(BadRequest, match="Invalid JSON"):
            request.json

    def test_json_empty_body(self):
        """Test an empty body has no JSON."""
        assert HTTPRequest(method="POST", path="/").json is None

    def test_form(self):
        """Test urlencoded bodies are parsed."""
        request = HTTPRequest(
            method="POST", path="/",
            body=b"name=Ann&role=",
            headers={"content-type": "application/x-www-form-urlencoded; charset=utf-8"},
        )

        assert request.form == {"name": ["Ann"], "role": [""]}

    def test_form_ignores_other_types(self):
        """Test non-form bodies give an empty form."""
        request = HTTPRequest(method="POST", path="/", body=b"name=Ann",
                              headers={"content-type": "text/plain"})
        assert request.form == {}

    def test_params_query_then_form(self):
        """Test params() prefers the query string over the form."""
        request = HTTPRequest(
            method="POST", path="/", query_string="page=2&name=q",
            body=b"name=Ann&page=9&extra=1",
            headers={"content-type": "application/x-www-form-urlencoded"},
        )

        assert request.params("page") == "2"
        assert request.params("name") == "q"
        assert request.params("extra") == "1"
        assert request.params("missing", "d") == "d"


class TestMethodOverride:
    """Tests for HTML form method override."""

    def test_form_field(self):
        """Test _method in a POST form."""
        request = HTTPRequest(
            method="POST", path="/users/1", body=b"_method=put",
            headers={"content-type": "application/x-www-form-urlencoded"},
        )
        assert request.method_override == "PUT"

    def test_header(self):
        """Test the X-HTTP-Method-Override header."""
        request = HTTPRequest(method="POST", path="/",
                              headers={"x-http-method-override": "DELETE"})
        assert request.method_override == "DELETE"

    def test_only_post(self):
        """Test GET requests are never overridden."""
        request = HTTPRequest(method="GET", path="/", query_string="_method=DELETE")
        assert request.method_override is None


class TestParseCookieHeader:
    """Tests for parse_cookie_header()."""

    def test_quoted_value(self):
        """Test quoted values are unquoted."""
        assert parse_cookie_header('msg="hello world"') == {"msg": "hello world"}

    def test_empty(self):
        """Test an empty header."""
        assert parse_cookie_header("") == {}
