"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Everything a dispatch can end in is an HTTPResponse:

    ┌──────────────────────────┬──────────────────────────────────────────┐
    │  Outcome                 │  Response                                │
    ├──────────────────────────┼──────────────────────────────────────────┤
    │  handler returned        │  make_response(return value)             │
    │  redirect signal         │  302 (or given code) + Location          │
    │  error signal            │  error handler output, or JSON error     │
    │  routing miss            │  not-found handler output, or 404 JSON   │
    │  uncaught exception      │  500 JSON (Application only)             │
    └──────────────────────────┴──────────────────────────────────────────┘

=============================================================================
BUILDER PATTERN
=============================================================================

    ResponseBuilder()
        .status(HTTPStatus.CREATED)
        .json({"id": 42})
        .header("X-Custom", "value")
        .cookie("theme", "dark", expire=3600)
        .build()

Each method returns `self`; build() produces the final HTTPResponse.

=============================================================================
RETURN VALUE COERCION
=============================================================================

Handlers may return plain values; make_response() turns them into
responses the same way every time:

    HTTPResponse    → copied
    str             → 200 text/html
    bytes           → 200 application/octet-stream
    dict / list     → 200 application/json
    None            → 200 empty body
    (body, status)  → body coerced as above, status replaced

=============================================================================
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any, List, Union, Callable, Iterable
import json

from .status_codes import HTTPStatus, status_line


StartResponse = Callable[..., Any]


@dataclass
class HTTPResponse:
    """
    Represents an HTTP response to be handed back to the host.

    Set-Cookie lines are kept apart from `headers` because a response may
    carry several of them, and a plain dict can only hold one.
    """

    status: int = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    cookies: List[str] = field(default_factory=list)

    @property
    def status_line(self) -> str:
        """WSGI status string, e.g. "302 Found"."""
        return status_line(self.status)

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """Set a response header. Returns self for chaining."""
        self.headers[name] = value
        return self

    def set_body(self, body: Union[str, bytes]) -> "HTTPResponse":
        """Set the body, encoding strings as UTF-8."""
        self.body = body.encode("utf-8") if isinstance(body, str) else body
        return self

    def copy(self) -> "HTTPResponse":
        """Independent copy: headers and cookies are new containers."""
        return replace(self, headers=dict(self.headers), cookies=list(self.cookies))

    def add_cookie(self, line: str) -> "HTTPResponse":
        """Append a pre-built Set-Cookie value (see build_cookie)."""
        self.cookies.append(line)
        return self

    def header_list(self) -> List[tuple[str, str]]:
        """
        Headers as the (name, value) list WSGI expects.

        Content-Length is filled in when the handler did not set one.
        """
        headers = dict(self.headers)
        if "Content-Length" not in headers:
            headers["Content-Length"] = str(len(self.body))
        items = list(headers.items())
        items.extend(("Set-Cookie", line) for line in self.cookies)
        return items

    def to_wsgi(self, start_response: StartResponse) -> Iterable[bytes]:
        """
        Write status and headers through start_response, return the body.

        Args:
            start_response: The WSGI start_response callable

        Returns:
            Iterable of body chunks (a single chunk)
        """
        start_response(self.status_line, self.header_list())
        return [self.body]


class ResponseBuilder:
    """
    Fluent builder for constructing HTTP responses.

    Usage:
        response = ResponseBuilder().status(HTTPStatus.OK).json({"ok": True}).build()

        response = (ResponseBuilder()
            .html("<h1>Welcome</h1>")
            .no_cache()
            .build())
    """

    def __init__(self):
        self._status: int = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""
        self._cookies: List[str] = []

    def status(self, status: int) -> "ResponseBuilder":
        """Set the HTTP status code."""
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        """Add a single response header."""
        self._headers[name] = value
        return self

    def headers(self, headers: Dict[str, str]) -> "ResponseBuilder":
        """Add multiple headers at once."""
        self._headers.update(headers)
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        return self.header("Content-Type", content_type)

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """Set a raw body; strings are encoded as UTF-8."""
        self._body = body.encode("utf-8") if isinstance(body, str) else body
        return self

    def text(self, text: str, content_type: str = "text/plain; charset=utf-8") -> "ResponseBuilder":
        """Set a plain text body."""
        self._body = text.encode("utf-8")
        self._headers["Content-Type"] = content_type
        return self

    def html(self, html: str) -> "ResponseBuilder":
        """Set an HTML body."""
        self._body = html.encode("utf-8")
        self._headers["Content-Type"] = "text/html; charset=utf-8"
        return self

    def json(self, data: Any, pretty: bool = False) -> "ResponseBuilder":
        """
        Set a JSON body.

        Args:
            data: Any JSON-serializable value
            pretty: Indent the output for readability
        """
        indent = 2 if pretty else None
        self._body = json.dumps(data, indent=indent, ensure_ascii=False).encode("utf-8")
        self._headers["Content-Type"] = "application/json; charset=utf-8"
        return self

    def redirect(self, location: str, status: int = HTTPStatus.FOUND) -> "ResponseBuilder":
        """
        Turn the response into a redirect.

        Any code is accepted, so a redirect signal raised with 403 still
        carries a Location header to its target.
        """
        self._status = status
        self._headers["Location"] = location
        return self

    def no_cache(self) -> "ResponseBuilder":
        """Add headers that prevent caching (HTTP/1.1 and 1.0 clients)."""
        self._headers["Cache-Control"] = "no-store, no-cache, must-revalidate"
        self._headers["Pragma"] = "no-cache"
        self._headers["Expires"] = "0"
        return self

    def cookie(self, name: str, value: str, expire: int = 0, path: str = "/") -> "ResponseBuilder":
        """Queue a Set-Cookie line; see build_cookie for `expire`."""
        self._cookies.append(build_cookie(name, value, expire=expire, path=path))
        return self

    def build(self) -> HTTPResponse:
        """Build and return the HTTPResponse object."""
        return HTTPResponse(
            status=self._status,
            headers=self._headers,
            body=self._body,
            cookies=self._cookies,
        )


def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 7231).

    Example: Wed, 01 Jan 2026 12:00:00 GMT

    HTTP dates are always GMT; pass a UTC datetime.
    """
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


def build_cookie(
    name: str,
    value: str,
    expire: int = 0,
    path: str = "/",
    http_only: bool = True,
) -> str:
    """
    Build a Set-Cookie header value.

    Args:
        name: Cookie name
        value: Cookie value (must already be cookie-safe)
        expire: Lifetime in seconds. 0 = session cookie,
                negative = delete the cookie now
        path: Cookie path
        http_only: Hide the cookie from client-side scripts

    Returns:
        e.g. "flash=abc; Path=/; Max-Age=3600; Expires=...; HttpOnly"
    """
    parts = [f"{name}={value}", f"Path={path}"]
    if expire:
        when = datetime.now(timezone.utc) + timedelta(seconds=expire)
        parts.append(f"Max-Age={max(expire, 0)}")
        parts.append(f"Expires={format_http_date(when)}")
    if http_only:
        parts.append("HttpOnly")
    return "; ".join(parts)


def make_response(rv: Any) -> HTTPResponse:
    """
    Coerce a handler's return value into an HTTPResponse.

    A returned HTTPResponse is copied, so a response object built once and
    returned by many requests never collects per-request cookies.

    Raises:
        TypeError: For return values that have no response form.
    """
    if isinstance(rv, HTTPResponse):
        return rv.copy()
    if isinstance(rv, tuple) and len(rv) == 2 and isinstance(rv[1], int):
        response = make_response(rv[0])
        response.status = rv[1]
        return response
    if rv is None:
        return HTTPResponse()
    if isinstance(rv, str):
        return ResponseBuilder().html(rv).build()
    if isinstance(rv, bytes):
        return ResponseBuilder().body(rv).content_type("application/octet-stream").build()
    if isinstance(rv, (dict, list)):
        return ResponseBuilder().json(rv).build()
    raise TypeError(
        f"Handler returned {type(rv).__name__}; expected HTTPResponse, "
        f"str, bytes, dict, list, tuple or None"
    )


def ok(body: Union[str, bytes, dict, list] = "", content_type: Optional[str] = None) -> HTTPResponse:
    """
    Create a 200 OK response.

    dict/list become JSON, str becomes text/plain, bytes are sent as is.
    """
    builder = ResponseBuilder().status(HTTPStatus.OK)
    if isinstance(body, (dict, list)):
        builder.json(body)
    elif isinstance(body, str):
        builder.text(body, content_type or "text/plain; charset=utf-8")
    else:
        builder.body(body)
        if content_type:
            builder.content_type(content_type)
    return builder.build()


def created(body: Union[str, bytes, dict, list] = "", location: Optional[str] = None) -> HTTPResponse:
    """Create a 201 Created response, optionally with a Location header."""
    builder = ResponseBuilder().status(HTTPStatus.CREATED)
    if isinstance(body, (dict, list)):
        builder.json(body)
    elif body:
        builder.body(body)
    if location:
        builder.header("Location", location)
    return builder.build()


def no_content() -> HTTPResponse:
    """Create a 204 No Content response."""
    return ResponseBuilder().status(HTTPStatus.NO_CONTENT).build()


def redirect(location: str, status: int = HTTPStatus.FOUND) -> HTTPResponse:
    """Create a redirect response (302 unless told otherwise)."""
    return ResponseBuilder().redirect(location, status).build()


def error_response(status: int, message: str) -> HTTPResponse:
    """JSON error body {"error": message} with the given status."""
    return ResponseBuilder().status(status).json({"error": message}).build()


def not_found(message: str = "Not Found") -> HTTPResponse:
    """Create a 404 Not Found response."""
    return error_response(HTTPStatus.NOT_FOUND, message)


def internal_error(message: str = "Internal Server Error") -> HTTPResponse:
    """Create a 500 response. Keep the message generic in production."""
    return error_response(HTTPStatus.INTERNAL_SERVER_ERROR, message)
