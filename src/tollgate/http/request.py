"""
=============================================================================
HTTP REQUEST MODEL
=============================================================================

The host (a WSGI server) hands us an environ dict. This module turns it
into an HTTPRequest the dispatcher and handlers can work with:

    WSGI environ                   HTTPRequest                Dispatcher
    {REQUEST_METHOD,   ──build──►   dataclass    ──route──►   (method, path)
     PATH_INFO, ...}                    │
                                        └── filters/handlers read it through
                                            tollgate.context.request()

=============================================================================
WHAT GETS NORMALIZED
=============================================================================

    method:   upper-cased ("get" → "GET")
    headers:  lower-cased names, from HTTP_* keys plus CONTENT_TYPE and
              CONTENT_LENGTH ("HTTP_USER_AGENT" → "user-agent")
    cookies:  parsed from the Cookie header, raw (still encrypted) values
    query:    parse_qs dict of lists ("?a=1&a=2" → {"a": ["1", "2"]})
    body:     read exactly CONTENT_LENGTH bytes from wsgi.input

The path is NOT normalized here. Base-prefix stripping and trailing-slash
handling belong to the dispatcher.

=============================================================================
"""

from dataclasses import dataclass, field
from http.cookies import SimpleCookie, CookieError
from typing import Optional, Dict, Any
from urllib.parse import parse_qs
import json

from ..errors import BadRequest


FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


@dataclass
class HTTPRequest:
    """
    Represents one incoming HTTP request.

    =========================================================================
    ATTRIBUTES
    =========================================================================

        method:         HTTP method (GET, POST, PUT, DELETE, ...)
        path:           Request path without query string
        query_string:   Raw query string ("page=1&limit=10")
        headers:        Header name (lower-case) → value
        query_params:   Parsed query string, dict of lists
        body:           Raw body bytes
        cookies:        Cookie name → raw cookie value
        client_address: (ip, port) of the client, for access logs

    =========================================================================
    """

    method: str
    path: str
    query_string: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    query_params: Dict[str, list[str]] = field(default_factory=dict)
    body: bytes = b""
    cookies: Dict[str, str] = field(default_factory=dict)
    client_address: tuple[str, int] = ("", 0)

    _body_json: Optional[Any] = field(default=None, repr=False)
    _form: Optional[Dict[str, list[str]]] = field(default=None, repr=False)

    def __post_init__(self):
        self.method = self.method.upper()
        if self.query_string and not self.query_params:
            self.query_params = parse_qs(self.query_string, keep_blank_values=True)
        if not self.cookies and "cookie" in self.headers:
            self.cookies = parse_cookie_header(self.headers["cookie"])

    @classmethod
    def from_environ(cls, environ: Dict[str, Any]) -> "HTTPRequest":
        """
        Build a request from a WSGI environ (PEP 3333).

        Args:
            environ: The WSGI environment dict

        Returns:
            HTTPRequest with headers, query, body and cookies populated
        """
        headers: Dict[str, str] = {}
        for key, value in environ.items():
            if key.startswith("HTTP_"):
                headers[key[5:].replace("_", "-").lower()] = value
        if environ.get("CONTENT_TYPE"):
            headers["content-type"] = environ["CONTENT_TYPE"]
        if environ.get("CONTENT_LENGTH"):
            headers["content-length"] = environ["CONTENT_LENGTH"]

        try:
            length = int(environ.get("CONTENT_LENGTH") or 0)
        except ValueError:
            length = 0
        stream = environ.get("wsgi.input")
        body = stream.read(length) if stream is not None and length > 0 else b""

        try:
            port = int(environ.get("REMOTE_PORT") or 0)
        except ValueError:
            port = 0

        # PATH_INFO arrives as latin-1 decoded bytes; URLs are UTF-8.
        path = environ.get("PATH_INFO", "") or "/"
        try:
            path = path.encode("latin-1").decode("utf-8", "replace")
        except UnicodeEncodeError:
            # Host already handed over decoded text.
            path = environ["PATH_INFO"]

        return cls(
            method=environ.get("REQUEST_METHOD", "GET"),
            path=path,
            query_string=environ.get("QUERY_STRING", ""),
            headers=headers,
            body=body,
            client_address=(environ.get("REMOTE_ADDR", ""), port),
        )

    @property
    def content_type(self) -> Optional[str]:
        """Content-Type without parameters ("application/json")."""
        ct = self.headers.get("content-type", "")
        return ct.split(";")[0].strip().lower() or None

    @property
    def user_agent(self) -> str:
        return self.headers.get("user-agent", "")

    @property
    def is_json(self) -> bool:
        return self.content_type == "application/json"

    @property
    def json(self) -> Any:
        """
        Parse the body as JSON (lazily, once).

        Raises:
            BadRequest: If the body is not valid JSON.
        """
        if self._body_json is None and self.body:
            try:
                self._body_json = json.loads(self.body.decode("utf-8"))
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise BadRequest(f"Invalid JSON body: {e}")
        return self._body_json

    @property
    def form(self) -> Dict[str, list[str]]:
        """
        Parse an urlencoded form body (lazily, once).

        Anything that is not application/x-www-form-urlencoded yields {}.
        """
        if self._form is None:
            if self.content_type == FORM_CONTENT_TYPE and self.body:
                self._form = parse_qs(
                    self.body.decode("utf-8", errors="replace"),
                    keep_blank_values=True,
                )
            else:
                self._form = {}
        return self._form

    def get_header(self, name: str, default: str = "") -> str:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower(), default)

    def get_query(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """First value of a query parameter."""
        values = self.query_params.get(name, [])
        return values[0] if values else default

    def params(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """
        Look a request parameter up in the query string, then the form body.

        Example:
            POST /users?page=2   body: name=ann
            request.params("page")  # "2"
            request.params("name")  # "ann"
        """
        values = self.query_params.get(name) or self.form.get(name)
        return values[0] if values else default

    @property
    def method_override(self) -> Optional[str]:
        """
        Method an HTML form asked for via `_method` or X-HTTP-Method-Override.

        Browsers can only send GET and POST from a form, so PUT and DELETE
        routes are reached by POSTing `_method=PUT`. Only POST may be
        overridden.
        """
        if self.method != "POST":
            return None
        override = self.get_header("x-http-method-override") or self.params("_method")
        return override.upper() if override else None


def parse_cookie_header(header: str) -> Dict[str, str]:
    """
    Parse a Cookie header into name → raw value.

    A malformed header yields an empty mapping.
    """
    jar = SimpleCookie()
    try:
        jar.load(header)
    except CookieError:
        return {}
    return {name: morsel.value for name, morsel in jar.items()}
