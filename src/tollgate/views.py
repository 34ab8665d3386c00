"""
=============================================================================
VIEWS
=============================================================================

Jinja2 templates loaded from the dispatch.views directory:

    views/
    ├── layout.html        {{ content }} marks where the view goes
    ├── blogs/show.html
    └── _comment.html

    @app.get("/blogs/:blog_id")
    def show_blog(blog_id):
        return render("blogs/show.html", {"blog": stash("blog")})

=============================================================================
LAYOUTS
=============================================================================

    render(view, locals)                layout from dispatch.layout, if set
    render(view, locals, "alt.html")    this layout
    render(view, locals, False)         no layout
    partial(view, locals)               never a layout

    ┌──────────────┐   output   ┌──────────────────────────────┐
    │ blogs/show   │ ─────────► │ layout.html                  │
    │ (locals)     │            │ (locals + content=<output>)  │
    └──────────────┘            └──────────────────────────────┘

The view output is passed as Markup, so the layout's {{ content }} does
not escape it a second time.

=============================================================================
TEMPLATE GLOBALS
=============================================================================

    h(text)          HTML-escape
    u(text)          URL-encode a path segment or query value
    site(path="")    dispatch.url joined with path
    url_for(name)    path of a named route

=============================================================================
"""

from typing import Any, Callable, Dict, Mapping, Optional, Union
from urllib.parse import quote
import json
import logging
import re

import jinja2
from markupsafe import Markup, escape

from .config import Config
from .context import current_app
from .errors import BadRequest
from .http.response import HTTPResponse, ResponseBuilder


logger = logging.getLogger(__name__)


_JSONP_CALLBACK = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$.]*$")


def h(text: Any) -> Markup:
    """HTML-escape `text`. The result is Markup, so templates keep it as is."""
    return escape("" if text is None else text)


def u(text: Any) -> str:
    """URL-encode `text`; "/" is encoded too."""
    return quote("" if text is None else str(text), safe="")


def json_out(obj: Any, callback: Optional[str] = None) -> HTTPResponse:
    """
    JSON response for `obj`, or JSONP when `callback` is given.

    Raises:
        BadRequest: If `callback` is not a plain JavaScript identifier path.
    """
    if callback is None:
        return ResponseBuilder().json(obj).build()
    if not _JSONP_CALLBACK.match(callback):
        raise BadRequest(f"Invalid JSONP callback: {callback!r}")
    payload = json.dumps(obj)
    return (
        ResponseBuilder()
        .text(f"{callback}({payload});", content_type="application/javascript; charset=utf-8")
        .build()
    )


class Views:
    """
    Template rendering for one application.

    The Jinja2 environment is created on first use, so dispatch.views may
    be changed freely during setup.

    Args:
        config: Application configuration
        template_globals: Extra globals (site, url_for) added by the app
    """

    def __init__(self, config: Config, template_globals: Optional[Dict[str, Callable[..., Any]]] = None):
        self.config = config
        self._globals: Dict[str, Any] = {"h": h, "u": u}
        self._globals.update(template_globals or {})
        self._env: Optional[jinja2.Environment] = None

    @property
    def environment(self) -> jinja2.Environment:
        if self._env is None:
            folder = self.config.get("dispatch.views", "views")
            self._env = jinja2.Environment(
                loader=jinja2.FileSystemLoader(folder),
                autoescape=jinja2.select_autoescape(["html", "htm", "xml"]),
            )
            self._env.globals.update(self._globals)
            logger.debug(f"Template environment created for {folder}")
        return self._env

    def add_global(self, name: str, value: Any) -> None:
        self._globals[name] = value
        if self._env is not None:
            self._env.globals[name] = value

    def partial(self, view: str, locals: Optional[Mapping[str, Any]] = None) -> str:
        """Render `view` on its own."""
        template = self.environment.get_template(view)
        return template.render(dict(locals or {}))

    def render(
        self,
        view: str,
        locals: Optional[Mapping[str, Any]] = None,
        layout: Union[str, bool, None] = None,
    ) -> str:
        """
        Render `view`, wrapped in a layout when one applies.

        Args:
            view: Template name relative to dispatch.views
            locals: Template variables
            layout: Layout template name, None for dispatch.layout, False
                    for no layout

        Raises:
            jinja2.TemplateNotFound: If the view or layout does not exist.
        """
        context = dict(locals or {})
        content = self.partial(view, context)

        if layout is None:
            layout = self.config.get("dispatch.layout")
        if not layout:
            return content

        context["content"] = Markup(content)
        return self.environment.get_template(layout).render(context)


def _current_views() -> Views:
    return current_app().views


def render(
    view: str,
    locals: Optional[Mapping[str, Any]] = None,
    layout: Union[str, bool, None] = None,
) -> str:
    """Render with the current application's views (see Views.render)."""
    return _current_views().render(view, locals, layout)


def partial(view: str, locals: Optional[Mapping[str, Any]] = None) -> str:
    """Render without a layout using the current application's views."""
    return _current_views().partial(view, locals)
