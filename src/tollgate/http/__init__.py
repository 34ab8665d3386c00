"""
=============================================================================
ROUTING AND HTTP PRIMITIVES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │ ROUTER (router.py)                                                  │
    │   Template compiler (:name symbols, trailing *), per-method ordered │
    │   tables, first-match lookup, reverse routing                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │ RESTIFY (resource.py)                                               │
    │   Seven conventional routes from one capability descriptor          │
    ├─────────────────────────────────────────────────────────────────────┤
    │ FILTERS (filters.py)                                                │
    │   Symbol name → interceptors run before the handler                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │ SIGNALS (signals.py)                                                │
    │   redirect()/error() and the Continue/Terminal outcome type         │
    ├─────────────────────────────────────────────────────────────────────┤
    │ REQUEST / RESPONSE (request.py, response.py, status_codes.py)       │
    │   WSGI environ → HTTPRequest, HTTPResponse → WSGI                   │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .request import HTTPRequest
from .response import (
    HTTPResponse,
    ResponseBuilder,
    make_response,
    ok,
    created,
    no_content,
    error_response,
    not_found,
    internal_error,
)
from .router import Router, RoutePattern, RouteEntry, MatchResult, compile_pattern
from .resource import Resource, restify
from .filters import FilterRegistry
from .signals import Signal, RedirectSignal, ErrorSignal, Continue, Terminal, run_step
from .status_codes import HTTPStatus

__all__ = [
    # Request / response
    "HTTPRequest",
    "HTTPResponse",
    "ResponseBuilder",
    "make_response",
    "ok",
    "created",
    "no_content",
    "error_response",
    "not_found",
    "internal_error",

    # Routing
    "Router",
    "RoutePattern",
    "RouteEntry",
    "MatchResult",
    "compile_pattern",
    "Resource",
    "restify",
    "FilterRegistry",

    # Signals
    "Signal",
    "RedirectSignal",
    "ErrorSignal",
    "Continue",
    "Terminal",
    "run_step",

    # Status codes
    "HTTPStatus",
]
