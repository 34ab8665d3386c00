"""
=============================================================================
SYMBOL FILTERS
=============================================================================

A filter is bound to a symbol name, not to a route. It runs before the
handler of ANY route whose template contains that symbol:

    @app.filter("blog_id")
    def load_blog(blog_id):
        stash("blog", Blog.get(blog_id))

    @app.get("/blogs/:blog_id")             # load_blog("42") runs first
    def show_blog(blog_id): ...

    @app.get("/blogs/:blog_id/edit")        # ...and here too
    def edit_blog(blog_id): ...

=============================================================================
WHAT A FILTER RECEIVES
=============================================================================

Its own symbol's value first, then (if it asks for them) the values of
the symbols that precede it in the matched route:

    Route: /users/:user_id/posts/:post_id     Path: /users/7/posts/42

    def f(post_id): ...                 → f("42")
    def f(post_id, user_id): ...        → f("42", "7")
    def f(post_id, *earlier): ...       → f("42", "7")

How many earlier values a filter takes is worked out once from its
signature when it is registered, not on every request.

=============================================================================
ORDERING
=============================================================================

    for each symbol in the matched route, in template order:
        for each filter on that symbol, in registration order:
            run it; stop everything if it raised a signal

Filters are not memoized: they run on every dispatch that matches.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Any, Iterator
import inspect
import logging

from ..errors import ConfigurationError


logger = logging.getLogger(__name__)


Filter = Callable[..., Any]


@dataclass(frozen=True)
class FilterEntry:
    """
    A registered filter plus how many earlier symbol values it accepts.

    `extra` is None when the filter takes *args (it gets all of them).
    """

    symbol: str
    func: Filter = field(repr=False)
    extra: Optional[int] = 0

    def bind(self, value: str, earlier: tuple[str, ...]) -> tuple[str, ...]:
        """Positional arguments for one call."""
        if self.extra is None:
            return (value,) + earlier
        return (value,) + earlier[: self.extra]


def _extra_arity(func: Filter) -> Optional[int]:
    """
    Count positional parameters beyond the first.

    Returns None for a var-positional signature. Callables whose signature
    cannot be inspected (some builtins) get the value only.
    """
    try:
        params = inspect.signature(func).parameters.values()
    except (TypeError, ValueError):
        return 0

    positional = 0
    for p in params:
        if p.kind == p.VAR_POSITIONAL:
            return None
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD):
            positional += 1
    return max(positional - 1, 0)


class FilterRegistry:
    """
    Symbol name → ordered list of filters.

    Built during setup, read-only while serving.
    """

    def __init__(self):
        self._filters: Dict[str, List[FilterEntry]] = {}

    def add(self, symbol: str, func: Filter) -> FilterEntry:
        """
        Register `func` as a filter for `symbol`.

        Raises:
            ConfigurationError: If `func` is not callable.
        """
        if not callable(func):
            raise ConfigurationError(f"Filter for symbol {symbol!r} is not callable")
        entry = FilterEntry(symbol=symbol, func=func, extra=_extra_arity(func))
        self._filters.setdefault(symbol, []).append(entry)
        logger.debug(f"Registered filter on :{symbol} -> {getattr(func, '__qualname__', func)!r}")
        return entry

    def filter(self, symbol: str) -> Callable[[Filter], Filter]:
        """
        Decorator form of add().

        Usage:
            @filters.filter("user_id")
            def load_user(user_id): ...
        """
        def decorator(func: Filter) -> Filter:
            self.add(symbol, func)
            return func
        return decorator

    def get(self, symbol: str) -> tuple[FilterEntry, ...]:
        """Filters for one symbol, in registration order."""
        return tuple(self._filters.get(symbol, ()))

    def plan(
        self,
        names: tuple[Optional[str], ...],
        values: tuple[str, ...],
    ) -> Iterator[tuple[FilterEntry, tuple[str, ...]]]:
        """
        Yield (filter, call arguments) for one matched route, in run order.

        Args:
            names: Pattern names aligned with values (None for a bare "*")
            values: Captured values
        """
        for i, (name, value) in enumerate(zip(names, values)):
            if name is None:
                continue
            earlier = values[:i]
            for entry in self._filters.get(name, ()):
                yield entry, entry.bind(value, earlier)

    def __contains__(self, symbol: str) -> bool:
        return bool(self._filters.get(symbol))

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._filters.values())
