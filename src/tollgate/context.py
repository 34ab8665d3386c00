"""
=============================================================================
PER-REQUEST CONTEXT
=============================================================================

Handlers receive only the captured path values as arguments. Everything
else about the current request is reached through this module:

    from tollgate import request, stash, params, cookie, set_cookie, flash

    @app.filter("blog_id")
    def load_blog(blog_id):
        stash("blog", Blog.get(blog_id))

    @app.get("/blogs/:blog_id")
    def show_blog(blog_id):
        blog = stash("blog")
        page = params("page", "1")
        ...

=============================================================================
LIFETIME
=============================================================================

    Application.handle(request)
        │
        ├── push RequestContext      (ContextVar.set)
        │      stash = {}            fresh mapping, nothing leaks between
        │      flash ← cookie        requests
        │
        ├── dispatch ...             filters/handlers call the helpers
        │
        ├── finalize(response)       queued Set-Cookie lines + flash cookie
        │
        └── pop RequestContext       (ContextVar.reset)

A ContextVar is per thread (and per asyncio task), so concurrent requests
served by a threaded host each see only their own context. Calling a
helper outside a request raises RuntimeError.

=============================================================================
"""

from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote, unquote
import uuid

from .config import Config
from .crypto import encrypt, decrypt
from .flash import Flash
from .http.request import HTTPRequest
from .http.response import HTTPResponse, build_cookie


_MISSING = object()


@dataclass
class RequestContext:
    """
    Everything scoped to one request.

    Attributes:
        request:    The request being handled
        config:     The application's configuration
        stash:      Scratch mapping shared by filters and the handler
        flash:      Flash messages in and out
        symbols:    Named values captured by the matched route
        request_id: Short id echoed as X-Request-ID
        app:        The Application handling the request
    """

    request: HTTPRequest
    config: Config
    app: Any = field(default=None, repr=False)
    stash: Dict[str, Any] = field(default_factory=dict)
    flash: Optional[Flash] = None
    symbols: Dict[str, str] = field(default_factory=dict)
    request_id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    _cookies: List[str] = field(default_factory=list, repr=False)

    def __post_init__(self):
        if self.flash is None:
            name = self.config.get("dispatch.flash_cookie", "_F")
            self.flash = Flash.from_cookie(name, self.request.cookies.get(name), self.config.secret)

    def cookie(self, name: str) -> Optional[str]:
        """
        Request cookie `name`, decrypted when cookies.secret is set and
        percent-decoded otherwise.

        None when the cookie is absent or fails to decrypt.
        """
        value = self.request.cookies.get(name)
        if value is None:
            return None
        secret = self.config.secret
        if not secret:
            return unquote(value)
        return decrypt(value, secret)

    def set_cookie(self, name: str, value: str, expire: int = 0, path: str = "/") -> None:
        """
        Queue a cookie on the response.

        The value is encrypted when a secret is set and percent-encoded
        otherwise, so ";", "," and spaces never reach the header raw.
        """
        secret = self.config.secret
        if secret:
            value = encrypt(value, secret)
        else:
            value = quote(str(value), safe="")
        self._cookies.append(build_cookie(name, value, expire=expire, path=path))

    def finalize(self, response: HTTPResponse) -> HTTPResponse:
        """Attach queued cookies, the flash cookie and X-Request-ID."""
        for line in self._cookies:
            response.add_cookie(line)
        flash_line = self.flash.cookie_line()
        if flash_line:
            response.add_cookie(flash_line)
        response.headers.setdefault("X-Request-ID", self.request_id)
        return response


_request_ctx: ContextVar[RequestContext] = ContextVar("tollgate_request_ctx")


def push(ctx: RequestContext) -> Token:
    return _request_ctx.set(ctx)


def pop(token: Token) -> None:
    _request_ctx.reset(token)


def get_context() -> Optional[RequestContext]:
    """The active context, or None outside a request."""
    return _request_ctx.get(None)


def current() -> RequestContext:
    """
    The active context.

    Raises:
        RuntimeError: When called outside a request.
    """
    ctx = _request_ctx.get(None)
    if ctx is None:
        raise RuntimeError("Working outside of a request: no request context is active")
    return ctx


def request() -> HTTPRequest:
    """The request being handled."""
    return current().request


def stash(name: Optional[str] = None, value: Any = _MISSING) -> Any:
    """
    Read or write the per-request stash.

        stash("user", user)   # write, returns user
        stash("user")         # read, None if unset
        stash()               # the whole mapping
    """
    data = current().stash
    if name is None:
        return data
    if value is _MISSING:
        return data.get(name)
    data[name] = value
    return value


def params(name: str, default: Optional[str] = None) -> Optional[str]:
    """
    Request parameter `name`: route symbols first, then query, then form.
    """
    ctx = current()
    if name in ctx.symbols:
        return ctx.symbols[name]
    return ctx.request.params(name, default)


def cookie(name: str) -> Optional[str]:
    """Request cookie `name` (see RequestContext.cookie)."""
    return current().cookie(name)


def set_cookie(name: str, value: str, expire: int = 0, path: str = "/") -> None:
    """Queue a cookie on the response (see RequestContext.set_cookie)."""
    current().set_cookie(name, value, expire=expire, path=path)


def flash(name: str, message: Any = _MISSING) -> Optional[str]:
    """
    Read a message from the previous request, or queue one for the next.

        flash("notice", "Saved")   # queue
        flash("notice")            # read, None if absent
    """
    state = current().flash
    if message is _MISSING:
        return state.get(name)
    state.set(name, message)
    return None


def cache(key: str, loader: Callable[[], Any], ttl: float = 0) -> Any:
    """The current application's cache (see Application.cache)."""
    return current_app().cache(key, loader, ttl)


def invalidate(*keys: str) -> None:
    current_app().invalidate(*keys)


def current_app() -> Any:
    """The Application handling the current request."""
    ctx = current()
    if ctx.app is None:
        raise RuntimeError("No application is bound to the current request")
    return ctx.app
