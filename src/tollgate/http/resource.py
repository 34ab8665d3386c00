"""
=============================================================================
RESTIFY: CONVENTIONAL RESOURCE ROUTES
=============================================================================

restify("/pages", resource) registers up to seven routes in one call:

    ┌──────────┬────────┬──────────────────┬──────────────────────────────┐
    │ action   │ method │ path             │ handler receives             │
    ├──────────┼────────┼──────────────────┼──────────────────────────────┤
    │ index    │ GET    │ /pages           │ ()                           │
    │ new      │ GET    │ /pages/new       │ ()                           │
    │ create   │ POST   │ /pages           │ ()                           │
    │ show     │ GET    │ /pages/:id       │ (id,)                        │
    │ edit     │ GET    │ /pages/:id/edit  │ (id,)                        │
    │ update   │ PUT    │ /pages/:id       │ (id,)                        │
    │ delete   │ DELETE │ /pages/:id       │ (id,)                        │
    └──────────┴────────┴──────────────────┴──────────────────────────────┘

Only the actions the resource actually implements are registered. A
missing action leaves no route behind, so requests for it are plain
NotFound outcomes rather than handlers that blow up at dispatch time.

"new" is registered before "show", otherwise /pages/new would be
captured by /pages/:id.

=============================================================================
CAPABILITY DESCRIPTORS
=============================================================================

What a resource can do is stated explicitly with a Resource:

    restify("/pages", Resource(index=list_pages, show=show_page))

Plain objects and mappings are accepted too; they are converted into a
Resource once, at registration time:

    class Pages:
        def index(self): ...
        def show(self, id): ...

    restify("/pages", Pages())
    restify("/pages", {"index": list_pages, "show": show_page})

=============================================================================
"""

from dataclasses import dataclass, fields
from typing import Any, Callable, Iterator, List, Mapping, Optional

from ..errors import ConfigurationError
from .router import Router, RouteEntry


REST_ACTIONS = (
    ("index", "GET", ""),
    ("new", "GET", "/new"),
    ("create", "POST", ""),
    ("show", "GET", "/:id"),
    ("edit", "GET", "/:id/edit"),
    ("update", "PUT", "/:id"),
    ("delete", "DELETE", "/:id"),
)


@dataclass(frozen=True)
class Resource:
    """The set of REST actions a resource implements."""

    index: Optional[Callable[..., Any]] = None
    new: Optional[Callable[..., Any]] = None
    create: Optional[Callable[..., Any]] = None
    show: Optional[Callable[..., Any]] = None
    edit: Optional[Callable[..., Any]] = None
    update: Optional[Callable[..., Any]] = None
    delete: Optional[Callable[..., Any]] = None

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None and not callable(value):
                raise ConfigurationError(f"Resource action {f.name!r} is not callable")

    @classmethod
    def of(cls, target: Any) -> "Resource":
        """
        Describe `target` as a Resource.

        Args:
            target: A Resource, a mapping of action → callable, or any
                    object whose callable attributes are named after actions

        Raises:
            ConfigurationError: Unknown action names in a mapping, or
                                non-callable actions.
        """
        if isinstance(target, Resource):
            return target
        if isinstance(target, Mapping):
            known = {name for name, _, _ in REST_ACTIONS}
            unknown = set(target) - known
            if unknown:
                raise ConfigurationError(f"Unknown REST actions: {', '.join(sorted(unknown))}")
            return cls(**dict(target))

        actions = {}
        for name, _, _ in REST_ACTIONS:
            attr = getattr(target, name, None)
            if callable(attr):
                actions[name] = attr
        return cls(**actions)

    def actions(self) -> Iterator[tuple[str, str, str, Callable[..., Any]]]:
        """Yield (action, method, path suffix, handler) for implemented actions."""
        for name, method, suffix in REST_ACTIONS:
            handler = getattr(self, name)
            if handler is not None:
                yield name, method, suffix, handler


def restify(router: Router, base: str, target: Any) -> List[RouteEntry]:
    """
    Register the conventional REST routes for `target` under `base`.

    Returns:
        The entries that were registered, in registration order.

    Raises:
        ConfigurationError: See Resource.of.
    """
    resource = Resource.of(target)
    root = "/" + base.strip("/") if base.strip("/") else ""

    entries = []
    for action, method, suffix, handler in resource.actions():
        entries.append(router.add_route(method, root + suffix or "/", handler))
    return entries
