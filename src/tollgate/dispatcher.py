"""
=============================================================================
DISPATCHER
=============================================================================

One request, one pass:

    (method, raw path)
          │
          ▼
    normalize_path          strip dispatch.router prefix, trailing "/"
          │
          ▼
    Router.match            first registered entry that matches wins
          │                 ──── no entry ───► Miss ──► not-found handler
          ▼
    filters                 per symbol in pattern order, then per filter
          │                 in registration order
          │                 ──── signal ─────► Terminal
          ▼
    handler(*values)        named values, then the wildcard remainder
          │                 ──── signal ─────► Terminal
          ▼
    Continue(return value)

=============================================================================
STATE MACHINE
=============================================================================

    Idle ──► Matching ──► Filtering ──► Dispatching ──► Continue
                 │            │              │
                 │            └──────┬───────┘
                 ▼                   ▼
               Miss          Terminal(signal)

Every filter and handler call goes through run_step(), and the outcome is
checked before the next step runs. A Terminal outcome means no later
filter and no handler code runs for this request.

Exceptions other than signals are not caught here; the Application turns
them into 500 responses.

=============================================================================
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union
import logging

from .config import Config
from .context import get_context
from .http.filters import FilterRegistry
from .http.response import HTTPResponse, ResponseBuilder, error_response, make_response
from .http.router import Router
from .http.signals import Continue, RedirectSignal, Signal, Terminal, run_step
from .http.status_codes import HTTPStatus, reason_phrase


logger = logging.getLogger(__name__)


NotFoundHandler = Callable[[str, str], Any]
ErrorHandler = Callable[[int, str], Any]


@dataclass(frozen=True)
class Miss:
    """No route matched `path` for `method`."""

    method: str
    path: str


Result = Union[Continue, Terminal, Miss]


def default_not_found(method: str, path: str) -> HTTPResponse:
    return error_response(HTTPStatus.NOT_FOUND, "Not Found")


def coerce(rv: Any, status: int) -> HTTPResponse:
    """
    make_response() for handler-supplied error pages.

    Plain return values take `status` instead of 200; an HTTPResponse or a
    (body, status) tuple keeps its own status.
    """
    response = make_response(rv)
    if not isinstance(rv, (HTTPResponse, tuple)):
        response.status = status
    return response


class Dispatcher:
    """
    Routes one (method, path) pair through filters to a handler.

    Args:
        router: Route tables to match against
        filters: Symbol filters to run before handlers
        config: Source of dispatch.router (the base prefix)
    """

    def __init__(self, router: Router, filters: FilterRegistry, config: Optional[Config] = None):
        self.router = router
        self.filters = filters
        self.config = config or Config()
        self.not_found_handler: NotFoundHandler = default_not_found
        self.error_handlers: Dict[int, ErrorHandler] = {}

    def normalize_path(self, raw_path: str) -> str:
        """
        Path as the route tables see it.

            prefix "mysite":  /mysite/users  → /users
                              /mysite        → /
                              /mysiteusers   → /mysiteusers
                              /users/        → /users
        """
        path = raw_path or "/"
        if not path.startswith("/"):
            path = "/" + path

        prefix = self.config.router_prefix
        if prefix and (path == prefix or path.startswith(prefix + "/")):
            path = path[len(prefix):]

        path = path.rstrip("/")
        return path or "/"

    def run(self, method: str, raw_path: str) -> Result:
        """
        Match, filter and call the handler.

        Returns:
            Continue with the handler's return value, Terminal with the
            signal that stopped the request, or Miss.
        """
        method = method.upper()
        path = self.normalize_path(raw_path)

        match = self.router.match(method, path)
        if match is None:
            logger.debug(f"No route for {method} {path}")
            return Miss(method, path)

        ctx = get_context()
        if ctx is not None:
            ctx.symbols = match.symbols

        # ═══════════════════════════════════════════════════════════════════
        # FILTERS
        # ═══════════════════════════════════════════════════════════════════
        for entry, args in self.filters.plan(match.entry.pattern.names, match.values):
            outcome = run_step(entry.func, *args)
            if isinstance(outcome, Terminal):
                logger.debug(f"Filter on :{entry.symbol} stopped {method} {path}: {outcome.signal!r}")
                return outcome

        # ═══════════════════════════════════════════════════════════════════
        # HANDLER
        # ═══════════════════════════════════════════════════════════════════
        return run_step(match.entry.handler, *match.values)

    def respond(self, result: Result) -> HTTPResponse:
        """Turn a dispatch result into the response to send."""
        if isinstance(result, Continue):
            return make_response(result.value)
        if isinstance(result, Miss):
            return self.handle_not_found(result.method, result.path)
        return self.handle_signal(result.signal)

    def dispatch(self, method: str, raw_path: str) -> HTTPResponse:
        """run() and respond() in one call."""
        return self.respond(self.run(method, raw_path))

    def handle_not_found(self, method: str, path: str) -> HTTPResponse:
        outcome = run_step(self.not_found_handler, method, path)
        if isinstance(outcome, Terminal):
            return self.handle_signal(outcome.signal)
        return coerce(outcome.value, HTTPStatus.NOT_FOUND)

    def handle_signal(self, signal: Signal) -> HTTPResponse:
        """
        Response for a redirect or error signal.

        An error handler registered for the code renders the page. A signal
        raised from inside that handler is answered directly, without
        consulting the error handlers again.
        """
        if isinstance(signal, RedirectSignal):
            return ResponseBuilder().redirect(signal.target, signal.code).build()

        handler = self.error_handlers.get(signal.code)
        if handler is None:
            return error_response(signal.code, signal.message or reason_phrase(signal.code))

        outcome = run_step(handler, signal.code, signal.message)
        if isinstance(outcome, Continue):
            return coerce(outcome.value, signal.code)

        inner = outcome.signal
        if isinstance(inner, RedirectSignal):
            return ResponseBuilder().redirect(inner.target, inner.code).build()
        return error_response(inner.code, inner.message or reason_phrase(inner.code))
