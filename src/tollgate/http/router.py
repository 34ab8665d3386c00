"""
=============================================================================
URL ROUTER
=============================================================================

Maps (method, path) to a registered handler:
- Static paths:      /users, /api/health
- Symbols:           /users/:id, /blogs/:blog_id/posts/:post_id
- Trailing wildcard: /static/*  or  /static/*path
- One route table per HTTP method

=============================================================================
ROUTING ARCHITECTURE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        ROUTING FLOW                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   GET /users/123                                                    │
    │        │                                                            │
    │        ▼                                                            │
    │   tables["GET"]  (registration order)                               │
    │   ┌─────────────────────────────────────────────────────────────┐   │
    │   │  /users          → list_users                               │   │
    │   │  /users/new      → new_user_form                            │   │
    │   │  /users/:id      → show_user        ← FIRST MATCH WINS      │   │
    │   │  /users/*        → catch_all           (never tested)       │   │
    │   └─────────────────────────────────────────────────────────────┘   │
    │        │                                                            │
    │        ▼                                                            │
    │   MatchResult(entry=<show_user>, values=("123",))                   │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

There is no scoring and no "most specific route" heuristic. When two
templates overlap, the one registered first wins. Register /users/new
before /users/:id, or "new" will be captured as an id.

=============================================================================
PATTERN COMPILATION
=============================================================================

    Template:  /blogs/:blog_id/files/*
                  │       │       │   │
                  ▼       ▼       ▼   ▼
    Regex:     /blogs/([^/]+)/files(?:/(.*))?
               ──────────────       ─────────
               literal segments     wildcard remainder,
               are re.escape()d     slashes included

    symbols  = ("blog_id",)
    wildcard = True

Literal segments are escaped, so "/v1.0/feed" only matches a literal dot.
Matching is always against the whole path (fullmatch), never a prefix,
except for what the wildcard swallows.

The dispatcher strips a trailing "/" before matching, so the remainder
never ends in one: /blogs/7/files/a/ captures "a", not "a/".

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Callable, Optional, Dict, Any, List, Union, Iterable
from urllib.parse import quote
import logging
import re

from ..errors import ConfigurationError


logger = logging.getLogger(__name__)


Handler = Callable[..., Any]

SUPPORTED_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")

_SYMBOL_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class RoutePattern:
    """
    A compiled route template.

    Attributes:
        template:      The template as registered ("/users/:id")
        regex:         Compiled matcher, one group per symbol (+ wildcard)
        symbols:       Symbol names in declaration order
        wildcard:      True when the template ends in "*" or "*name"
        wildcard_name: Name given to the wildcard ("*path" → "path")
    """

    template: str
    regex: re.Pattern = field(repr=False)
    symbols: tuple[str, ...] = ()
    wildcard: bool = False
    wildcard_name: Optional[str] = None

    @property
    def names(self) -> tuple[Optional[str], ...]:
        """
        One name per captured value, aligned with match() output.

        A bare "*" wildcard contributes None: it has a value but no symbol,
        so no filters can be attached to it.
        """
        if self.wildcard:
            return self.symbols + (self.wildcard_name,)
        return self.symbols

    def match(self, path: str) -> Optional[tuple[str, ...]]:
        """
        Test the whole path against this pattern.

        Returns:
            Captured values in declaration order (wildcard remainder last,
            "" when nothing follows), or None on mismatch.
        """
        m = self.regex.fullmatch(path)
        if m is None:
            return None
        return tuple(value if value is not None else "" for value in m.groups())


def compile_pattern(template: str) -> RoutePattern:
    """
    Compile a route template into a RoutePattern.

    Segments:
        ":name"       → one path segment, bound to symbol `name`
        "*" / "*name" → the rest of the path (must be the last segment)
        anything else → matched literally, case-sensitive

    Raises:
        ConfigurationError: Duplicate symbol, invalid symbol name, or a
                            wildcard that is not the last segment.
    """
    if not template.startswith("/"):
        template = "/" + template

    segments = [seg for seg in template.split("/") if seg]
    regex_parts: List[str] = []
    symbols: List[str] = []
    wildcard = False
    wildcard_name: Optional[str] = None

    def claim(name: str) -> None:
        if not _SYMBOL_NAME.match(name):
            raise ConfigurationError(f"Invalid symbol name {name!r} in route {template!r}")
        if name in symbols or name == wildcard_name:
            raise ConfigurationError(f"Duplicate symbol {name!r} in route {template!r}")

    for i, segment in enumerate(segments):
        if segment.startswith("*"):
            if i != len(segments) - 1:
                raise ConfigurationError(
                    f"Wildcard must be the last segment in route {template!r}"
                )
            name = segment[1:] or None
            if name is not None:
                claim(name)
            wildcard, wildcard_name = True, name
            regex_parts.append(r"(?:/(.*))?")

        elif segment.startswith(":"):
            name = segment[1:]
            claim(name)
            symbols.append(name)
            regex_parts.append(r"/([^/]+)")

        else:
            regex_parts.append("/" + re.escape(segment))

    source = "".join(regex_parts)
    if not segments:
        source = "/"
    elif wildcard and len(segments) == 1:
        source = r"/(.*)"  # "/*" matches "/" itself with an empty remainder

    return RoutePattern(
        template=template,
        regex=re.compile(source, re.DOTALL),
        symbols=tuple(symbols),
        wildcard=wildcard,
        wildcard_name=wildcard_name,
    )


@dataclass(frozen=True)
class RouteEntry:
    """One registered route: (method, compiled pattern, handler)."""

    method: str
    pattern: RoutePattern
    handler: Handler = field(repr=False)
    name: Optional[str] = None

    @property
    def template(self) -> str:
        return self.pattern.template


@dataclass(frozen=True)
class MatchResult:
    """
    Result of a successful route match, valid for one dispatch.

    Example:
        Template: /users/:id
        Path:     /users/123
        Result:   MatchResult(entry=<Route>, values=("123",))
    """

    entry: RouteEntry
    values: tuple[str, ...]

    @property
    def symbols(self) -> Dict[str, str]:
        """Named values only: {"id": "123"}."""
        return {
            name: value
            for name, value in zip(self.entry.pattern.names, self.values)
            if name is not None
        }


class Router:
    """
    Per-method ordered route tables.

    =========================================================================
    USAGE
    =========================================================================

        router = Router()

        @router.get("/users")
        def list_users():
            ...

        @router.get("/users/:id", name="show_user")
        def show_user(id):
            ...

        router.add_route("POST", "/users", create_user)
        router.url_for("show_user", id="42")    # "/users/42"

    Handlers receive captured values as positional arguments, in the order
    the symbols appear in the template.

    Tables are built during setup and only read while serving. No locks:
    register everything before the first request is dispatched.

    =========================================================================
    """

    def __init__(self):
        self._tables: Dict[str, List[RouteEntry]] = {m: [] for m in SUPPORTED_METHODS}
        self._named: Dict[str, RouteEntry] = {}
        self._ordered: List[RouteEntry] = []

    def add_route(
        self,
        method: str,
        template: str,
        handler: Handler,
        name: Optional[str] = None,
    ) -> RouteEntry:
        """
        Compile `template` and append it to the table for `method`.

        Raises:
            ConfigurationError: Unknown method, malformed template, or a
                                handler that is not callable.
        """
        method = method.upper()
        if method not in self._tables:
            raise ConfigurationError(f"Unsupported HTTP method: {method}")
        if not callable(handler):
            raise ConfigurationError(f"Handler for {method} {template} is not callable")

        entry = RouteEntry(
            method=method,
            pattern=compile_pattern(template),
            handler=handler,
            name=name,
        )
        self._tables[method].append(entry)
        self._ordered.append(entry)
        if name:
            self._named[name] = entry

        logger.debug(f"Registered {method} {entry.template} -> {_handler_name(handler)}")
        return entry

    def on(
        self,
        methods: Union[str, Iterable[str]],
        template: str,
        handler: Handler,
        name: Optional[str] = None,
    ) -> List[RouteEntry]:
        """
        Register one handler for several methods at once.

        `methods` is a method name, an iterable of names, or "*" for every
        supported method.
        """
        if isinstance(methods, str):
            methods = SUPPORTED_METHODS if methods == "*" else [methods]
        return [self.add_route(m, template, handler, name) for m in methods]

    def match(self, method: str, path: str) -> Optional[MatchResult]:
        """
        Find the first route in `method`'s table whose pattern matches.

        `path` must already be normalized (see Dispatcher). An unsupported
        method simply has no table, so it never matches.
        """
        for entry in self._tables.get(method.upper(), ()):
            values = entry.pattern.match(path)
            if values is not None:
                return MatchResult(entry=entry, values=values)
        return None

    def table(self, method: str) -> tuple[RouteEntry, ...]:
        """Read-only view of one method's table, in registration order."""
        return tuple(self._tables.get(method.upper(), ()))

    def route(
        self,
        template: str,
        method: Union[str, Iterable[str]] = "GET",
        name: Optional[str] = None,
    ) -> Callable[[Handler], Handler]:
        """
        Decorator form of on().

        Usage:
            @router.route("/ping", method=["GET", "HEAD"])
            def ping():
                return "pong"
        """
        def decorator(handler: Handler) -> Handler:
            self.on(method, template, handler, name)
            return handler  # unchanged, so decorators stack
        return decorator

    def get(self, template: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        """Register a GET route."""
        return self.route(template, "GET", name)

    def post(self, template: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        """Register a POST route."""
        return self.route(template, "POST", name)

    def put(self, template: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        """Register a PUT route."""
        return self.route(template, "PUT", name)

    def patch(self, template: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        """Register a PATCH route."""
        return self.route(template, "PATCH", name)

    def delete(self, template: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        """Register a DELETE route."""
        return self.route(template, "DELETE", name)

    def head(self, template: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        """Register a HEAD route."""
        return self.route(template, "HEAD", name)

    def options(self, template: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        """Register an OPTIONS route."""
        return self.route(template, "OPTIONS", name)

    def url_for(self, name: str, **symbols: Any) -> str:
        """
        Rebuild a path from a named route (reverse routing).

        A named wildcard is filled from its name, a bare "*" from the
        `wildcard` keyword.

        Example:
            @router.get("/users/:id/posts/:post_id", name="user_post")
            ...
            router.url_for("user_post", id=1, post_id=7)  # "/users/1/posts/7"

        Raises:
            KeyError: No route has that name.
            ConfigurationError: A symbol value is missing.
        """
        entry = self._named[name]
        parts = []
        for segment in entry.template.split("/"):
            if segment.startswith(":"):
                key = segment[1:]
                if key not in symbols:
                    raise ConfigurationError(f"url_for({name!r}) is missing symbol {key!r}")
                parts.append(quote(str(symbols[key]), safe=""))
            elif segment.startswith("*"):
                rest = symbols.get(segment[1:] or "wildcard", "")
                parts.append(quote(str(rest), safe="/"))
            else:
                parts.append(segment)
        return "/".join(parts).rstrip("/") or "/"

    def routes(self) -> List[RouteEntry]:
        """All entries, in registration order across methods."""
        return list(self._ordered)

    def print_routes(self) -> None:
        """
        Print the route table (used by `python -m tollgate --routes`).

        Example output:
            Registered Routes:
            ------------------------------------------------------------
              GET      /users
              GET      /users/:id
              POST     /users
            ------------------------------------------------------------
        """
        print("\nRegistered Routes:")
        print("-" * 60)
        for entry in self._ordered:
            print(f"  {entry.method:8} {entry.template}")
        print("-" * 60)

    def __len__(self) -> int:
        return len(self._ordered)


def _handler_name(handler: Handler) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)
