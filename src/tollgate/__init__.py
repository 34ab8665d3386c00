"""
=============================================================================
TOLLGATE - A Small Front Controller for WSGI
=============================================================================

Maps an HTTP method and path to a handler, extracts named path segments,
runs interceptors keyed to those segments, and stops early on redirect or
error signals.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    tollgate/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m tollgate)
    ├── app.py               # Application: registration + WSGI adapter
    ├── dispatcher.py        # match → filters → handler pipeline
    ├── config.py            # Config store (INI + environment)
    ├── context.py           # Per-request context and helpers
    ├── flash.py             # One-shot flash messages
    ├── crypto.py            # Cookie encryption
    ├── cache.py             # Loader-on-miss cache
    ├── views.py             # Jinja2 rendering helpers
    ├── log.py               # Logging setup and access log
    ├── errors.py            # Exception taxonomy
    └── http/
        ├── request.py       # HTTPRequest (from a WSGI environ)
        ├── response.py      # HTTPResponse, ResponseBuilder
        ├── router.py        # Pattern compiler and route tables
        ├── filters.py       # Symbol filter registry
        ├── resource.py      # restify()
        ├── signals.py       # redirect(), error(), tagged outcomes
        └── status_codes.py  # HTTPStatus

=============================================================================
QUICK START
=============================================================================

    from tollgate import Application, redirect, error, stash, render

    app = Application()

    @app.filter("blog_id")
    def load_blog(blog_id):
        blog = Blog.get(blog_id)
        if blog is None:
            error(404, "No such blog")
        stash("blog", blog)

    @app.get("/blogs/:blog_id")
    def show_blog(blog_id):
        return render("blogs/show.html", {"blog": stash("blog")})

    @app.post("/admin")
    def admin():
        redirect("/login", condition=not logged_in())
        ...

    if __name__ == "__main__":
        app.run(port=8080)

=============================================================================
"""

from .app import Application, create_app
from .cache import Cache
from .config import Config
from .context import (
    RequestContext,
    cache,
    cookie,
    current_app,
    flash,
    invalidate,
    params,
    request,
    set_cookie,
    stash,
)
from .crypto import decrypt, encrypt
from .dispatcher import Dispatcher, Miss
from .errors import BadRequest, ConfigurationError, TollgateError
from .http.filters import FilterRegistry
from .http.request import HTTPRequest
from .http.resource import Resource, restify
from .http.response import HTTPResponse, ResponseBuilder, make_response
from .http.router import Router, compile_pattern
from .http.signals import Continue, ErrorSignal, RedirectSignal, Signal, Terminal, error, redirect
from .http.status_codes import HTTPStatus
from .log import setup_logging
from .views import h, json_out, partial, render, u

__version__ = "1.0.0"

__all__ = [
    # Application
    "Application",
    "create_app",
    "Config",
    "Dispatcher",
    "Miss",
    "Router",
    "FilterRegistry",
    "compile_pattern",
    "Resource",
    "restify",

    # Control flow
    "redirect",
    "error",
    "Signal",
    "RedirectSignal",
    "ErrorSignal",
    "Continue",
    "Terminal",

    # Request helpers
    "RequestContext",
    "request",
    "stash",
    "params",
    "cookie",
    "set_cookie",
    "flash",
    "cache",
    "invalidate",
    "current_app",

    # Views
    "render",
    "partial",
    "json_out",
    "h",
    "u",

    # HTTP
    "HTTPRequest",
    "HTTPResponse",
    "ResponseBuilder",
    "make_response",
    "HTTPStatus",

    # Collaborators
    "Cache",
    "encrypt",
    "decrypt",
    "setup_logging",

    # Errors
    "TollgateError",
    "ConfigurationError",
    "BadRequest",

    "__version__",
]
