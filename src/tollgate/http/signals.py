"""
=============================================================================
CONTROL-FLOW SIGNALS
=============================================================================

A filter or handler can end a request early by redirecting or by failing
with an explicit status:

    @app.get("/admin")
    def admin():
        redirect(403, "/login", lambda: not logged_in())
        error(503, "Down for maintenance")
        return "never reached"

Once a signal fires, nothing else in the pipeline runs: remaining filters
are skipped, the handler is never called, and the signal decides the
response.

=============================================================================
TWO WAYS IN, ONE WAY THROUGH
=============================================================================

    redirect()/error()            return RedirectSignal(...)
    raise a Signal                  (returned, not raised)
          │                               │
          └──────────────┬────────────────┘
                         ▼
                   run_step(fn, *args)
                         │
            ┌────────────┴─────────────┐
            ▼                          ▼
      Continue(value)          Terminal(signal)
      next step runs           pipeline stops,
                               signal → response

The helpers raise, so control never returns to the caller. Inside the
dispatcher every step goes through run_step(), which folds both the raised
and the returned form into a tagged Outcome that is checked after every
filter and after the handler. Application code never needs to catch a
Signal; doing so defeats the point.

=============================================================================
"""

from dataclasses import dataclass
from typing import Any, Callable, Union
import logging

from .status_codes import HTTPStatus


logger = logging.getLogger(__name__)


Condition = Union[bool, Callable[[], bool]]


class Signal(Exception):
    """Base class for terminal redirect/error outcomes."""

    def __init__(self, code: int, message: str = ""):
        super().__init__(message)
        self.code = code
        self.message = message


class RedirectSignal(Signal):
    """Terminal redirect to `target` with status `code`."""

    def __init__(self, code: int, target: str):
        super().__init__(code, f"Redirect to {target}")
        self.target = target

    def __repr__(self) -> str:
        return f"RedirectSignal(code={self.code}, target={self.target!r})"


class ErrorSignal(Signal):
    """Terminal error with status `code` and a human-readable message."""

    def __repr__(self) -> str:
        return f"ErrorSignal(code={self.code}, message={self.message!r})"


def redirect(code: Union[int, str], target: Any = None, condition: Condition = True) -> None:
    """
    Redirect if `condition` holds, otherwise do nothing.

    The status code comes first and defaults to 302, so both forms work:

        redirect("/login")                       # 302 to /login
        redirect(301, "/new-home")               # 301 to /new-home
        redirect(403, "/users", False)           # no-op
        redirect(302, "/login", lambda: not user)  # predicate, called once

    Args:
        code: Status code, or the target when called with one argument
        target: Redirect target
        condition: A bool, or a zero-argument callable returning one

    Raises:
        RedirectSignal: When the condition is true.
    """
    if target is None and isinstance(code, str):
        code, target = HTTPStatus.FOUND, code
    if target is None:
        raise TypeError("redirect() needs a target")

    holds = condition() if callable(condition) else condition
    if not holds:
        return

    logger.debug(f"Redirect signal: {code} -> {target}")
    raise RedirectSignal(int(code), str(target))


def error(code: int, message: str = "") -> None:
    """
    Abort the request with status `code`.

    Raises:
        ErrorSignal: Always.
    """
    logger.debug(f"Error signal: {code} {message}")
    raise ErrorSignal(int(code), message)


# ═══════════════════════════════════════════════════════════════════════════
# TAGGED OUTCOMES
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class Continue:
    """The step finished normally; `value` is whatever it returned."""

    value: Any = None


@dataclass(frozen=True)
class Terminal:
    """A signal fired; the rest of the pipeline must not run."""

    signal: Signal


Outcome = Union[Continue, Terminal]


def run_step(fn: Callable[..., Any], *args: Any) -> Outcome:
    """
    Call one pipeline step and fold its result into an Outcome.

    Only Signal is intercepted. Any other exception propagates to the
    host, which is responsible for turning it into a 500.
    """
    try:
        rv = fn(*args)
    except Signal as signal:
        return Terminal(signal)
    if isinstance(rv, Signal):
        return Terminal(rv)
    return Continue(rv)
