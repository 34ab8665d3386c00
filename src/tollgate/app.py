"""
=============================================================================
APPLICATION
=============================================================================

The Application owns every piece of routing state for one site and is the
WSGI callable that a host server talks to.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         APPLICATION                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │                      ┌─────────────────┐                            │
    │                      │   Application   │                            │
    │                      │  (WSGI adapter) │                            │
    │                      └────────┬────────┘                            │
    │                               │                                     │
    │      ┌──────────────┬─────────┼──────────┬──────────────┐           │
    │      ▼              ▼         ▼          ▼              ▼           │
    │  ┌────────┐   ┌──────────┐ ┌──────┐  ┌───────┐   ┌────────────┐     │
    │  │ Router │   │ Filters  │ │Config│  │ Cache │   │   Views    │     │
    │  └───┬────┘   └────┬─────┘ └──┬───┘  └───────┘   └────────────┘     │
    │      └─────────────┼──────────┘                                     │
    │                    ▼                                                │
    │             ┌────────────┐                                          │
    │             │ Dispatcher │                                          │
    │             └────────────┘                                          │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    1. BUILD REQUEST
       └── HTTPRequest.from_environ(environ)

    2. PUSH CONTEXT
       └── fresh stash, flash read from its cookie, request id

    3. METHOD OVERRIDE
       └── POST with _method=PUT is dispatched as PUT

    4. BEFORE HOOKS
       └── may redirect()/error() to stop the request

    5. DISPATCH
       └── match → filters → handler (see dispatcher.py)

    6. AFTER HOOKS
       └── only when the handler returned normally

    7. RESPONSE
       └── coerce return value, attach cookies, flash, X-Request-ID

    8. ACCESS LOG
       └── one line on tollgate.access

=============================================================================
USAGE
=============================================================================

    app = Application()
    app.config.set("dispatch.router", "mysite")

    @app.filter("blog_id")
    def load_blog(blog_id):
        stash("blog", Blog.get(blog_id))

    @app.get("/blogs/:blog_id")
    def show_blog(blog_id):
        return render("blogs/show.html", {"blog": stash("blog")})

    app.restify("/pages", PagesResource())

    app.run(port=8080)          # development server
    # or hand `app` to any WSGI server

=============================================================================
"""

from socketserver import ThreadingMixIn
from typing import Any, Callable, Dict, Iterable, List, Optional, Union
from wsgiref.simple_server import WSGIServer, make_server
import logging
import time

from .cache import Cache
from .config import Config
from .context import RequestContext, pop, push
from .dispatcher import Dispatcher, ErrorHandler, NotFoundHandler, Result
from .errors import BadRequest
from .http.filters import Filter, FilterRegistry
from .http.request import HTTPRequest
from .http.resource import restify
from .http.response import HTTPResponse, error_response, internal_error
from .http.router import SUPPORTED_METHODS, Handler, RouteEntry, Router
from .http.signals import Continue, Terminal, run_step
from .log import RequestLog, log_request, setup_logging
from .views import Views


logger = logging.getLogger(__name__)


Hook = Callable[[str, str], Any]
Methods = Union[str, Iterable[str]]


class ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    """wsgiref server handling each request on its own thread."""

    daemon_threads = True


class Application:
    """
    A tollgate site: routes, filters, hooks, configuration and views.

    Args:
        config: Configuration store (a default one when omitted)
    """

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()
        self.router = Router()
        self.filters = FilterRegistry()
        self.dispatcher = Dispatcher(self.router, self.filters, self.config)
        self.store = Cache()
        self.views = Views(self.config, {"site": self.site, "url_for": self.url_for})

        self._before: List[Hook] = []
        self._after: List[Hook] = []
        self._serving = False

    # =========================================================================
    # REGISTRATION
    # =========================================================================

    def _check_setup(self, what: str) -> None:
        if self._serving:
            logger.warning(f"{what} registered after the first request was handled")

    def on(
        self,
        methods: Methods,
        template: str,
        handler: Optional[Handler] = None,
        name: Optional[str] = None,
    ):
        """
        Register `handler` for `methods` on `template`.

        Works directly or as a decorator:

            app.on("GET", "/", index)
            app.on(["GET", "POST"], "/search", search)

            @app.on("*", "/ping")
            def ping():
                return "pong"

        Raises:
            ConfigurationError: Unknown method or malformed template.
        """
        def decorator(fn: Handler) -> Handler:
            self._check_setup(f"Route {template}")
            self.router.on(methods, template, fn, name)
            return fn

        if handler is not None:
            return decorator(handler)
        return decorator

    def route(self, template: str, methods: Methods = "GET", name: Optional[str] = None):
        """Decorator: @app.route("/ping", methods=["GET", "HEAD"])."""
        return self.on(methods, template, name=name)

    def get(self, template: str, handler: Optional[Handler] = None, name: Optional[str] = None):
        return self.on("GET", template, handler, name)

    def post(self, template: str, handler: Optional[Handler] = None, name: Optional[str] = None):
        return self.on("POST", template, handler, name)

    def put(self, template: str, handler: Optional[Handler] = None, name: Optional[str] = None):
        return self.on("PUT", template, handler, name)

    def patch(self, template: str, handler: Optional[Handler] = None, name: Optional[str] = None):
        return self.on("PATCH", template, handler, name)

    def delete(self, template: str, handler: Optional[Handler] = None, name: Optional[str] = None):
        return self.on("DELETE", template, handler, name)

    def head(self, template: str, handler: Optional[Handler] = None, name: Optional[str] = None):
        return self.on("HEAD", template, handler, name)

    def options(self, template: str, handler: Optional[Handler] = None, name: Optional[str] = None):
        return self.on("OPTIONS", template, handler, name)

    def filter(self, symbol: str, func: Optional[Filter] = None):
        """
        Register a filter for `symbol`, directly or as a decorator.

            @app.filter("blog_id")
            def load_blog(blog_id):
                stash("blog", Blog.get(blog_id))
        """
        def decorator(fn: Filter) -> Filter:
            self._check_setup(f"Filter on :{symbol}")
            self.filters.add(symbol, fn)
            return fn

        if func is not None:
            return decorator(func)
        return decorator

    def restify(self, base: str, target: Any) -> List[RouteEntry]:
        """Register the REST routes `target` implements under `base`."""
        self._check_setup(f"Resource {base}")
        return restify(self.router, base, target)

    def before(self, fn: Hook) -> Hook:
        """Run `fn(method, path)` before every request is matched."""
        self._before.append(fn)
        return fn

    def after(self, fn: Hook) -> Hook:
        """Run `fn(method, path)` after every handler that returns normally."""
        self._after.append(fn)
        return fn

    def not_found(self, fn: NotFoundHandler) -> NotFoundHandler:
        """Install `fn(method, path)` as the handler for routing misses."""
        self.dispatcher.not_found_handler = fn
        return fn

    def error_handler(self, code: int) -> Callable[[ErrorHandler], ErrorHandler]:
        """
        Install `fn(code, message)` for error(code, ...) signals.

            @app.error_handler(403)
            def forbidden(code, message):
                return render("403.html", {"message": message})
        """
        def decorator(fn: ErrorHandler) -> ErrorHandler:
            self.dispatcher.error_handlers[int(code)] = fn
            return fn
        return decorator

    # =========================================================================
    # HELPERS
    # =========================================================================

    def url_for(self, name: str, **symbols: Any) -> str:
        """Public path of a named route, including dispatch.router."""
        path = self.router.url_for(name, **symbols)
        prefix = self.config.router_prefix
        if not prefix:
            return path
        return prefix if path == "/" else prefix + path

    def site(self, path: str = "") -> str:
        """
        dispatch.url joined with `path`.

            config dispatch.url = "https://example.com/"
            site("blogs/1")   # "https://example.com/blogs/1"
        """
        base = str(self.config.get("dispatch.url", "")).rstrip("/")
        if not path:
            return base + "/"
        return base + "/" + path.lstrip("/")

    def cache(self, key: str, loader: Callable[[], Any], ttl: float = 0) -> Any:
        """Cached value for `key`, calling `loader` on a miss (see Cache.get)."""
        return self.store.get(key, loader, ttl)

    def invalidate(self, *keys: str) -> None:
        self.store.invalidate(*keys)

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Handle one request from start to finish.

        Never raises: uncaught exceptions become a 500 response.
        """
        self._serving = True
        start_time = time.time()

        ctx = RequestContext(request=request, config=self.config, app=self)
        token = push(ctx)
        try:
            response = self._process(request)
            ctx.finalize(response)
        finally:
            pop(token)

        duration_ms = (time.time() - start_time) * 1000
        entry = RequestLog.create(request, response, ctx.request_id, duration_ms)
        log_request(entry, self.config.get("log.format", "text"))
        return response

    def _process(self, request: HTTPRequest) -> HTTPResponse:
        override = request.method_override
        if override:
            if override in SUPPORTED_METHODS:
                request.method = override
            else:
                logger.debug(f"Ignoring unsupported method override {override!r}")

        try:
            return self.dispatcher.respond(self._run(request.method, request.path))
        except BadRequest as e:
            logger.info(f"Bad request: {request.method} {request.path} - {e}")
            return error_response(e.status_code, str(e))
        except Exception as e:
            logger.exception(
                f"Unhandled exception in {request.method} {request.path}: "
                f"{type(e).__name__}: {e}"
            )
            return internal_error()

    def _run(self, method: str, raw_path: str) -> Result:
        path = self.dispatcher.normalize_path(raw_path)

        for hook in self._before:
            outcome = run_step(hook, method, path)
            if isinstance(outcome, Terminal):
                return outcome

        result = self.dispatcher.run(method, raw_path)
        if not isinstance(result, Continue):
            return result

        for hook in self._after:
            outcome = run_step(hook, method, path)
            if isinstance(outcome, Terminal):
                return outcome
        return result

    def __call__(self, environ: Dict[str, Any], start_response: Callable[..., Any]) -> Iterable[bytes]:
        """WSGI entry point."""
        request = HTTPRequest.from_environ(environ)
        response = self.handle(request)
        chunks = response.to_wsgi(start_response)
        if request.method == "HEAD":
            return []  # headers (Content-Length included) but no body
        return chunks

    # =========================================================================
    # DEVELOPMENT SERVER
    # =========================================================================

    def run(self, host: str = "127.0.0.1", port: int = 8080, show_routes: bool = True) -> None:
        """
        Serve the application with wsgiref (blocking, development only).

        Args:
            host: Interface to bind
            port: Port to bind
            show_routes: Print the route table before serving
        """
        self.config.validate()
        setup_logging(self.config.get("log.level", "INFO"), self.config.get("log.format", "text"))

        server = make_server(host, port, self, server_class=ThreadingWSGIServer)
        logger.info(f"Starting tollgate on http://{host}:{port}")
        self._print_startup_banner(host, port, show_routes)

        try:
            server.serve_forever()
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            server.server_close()
            logger.info("Server stopped")

    def _print_startup_banner(self, host: str, port: int, show_routes: bool) -> None:
        print()
        print(f"  tollgate serving on http://{host}:{port}")
        if self.config.router_prefix:
            print(f"  base prefix: {self.config.router_prefix}")
        print("  Press Ctrl+C to stop")
        if show_routes:
            self.router.print_routes()
        print()


def create_app(config: Optional[Config] = None, config_file: Optional[str] = None) -> Application:
    """
    Build an Application from the environment, an INI file, or both.

    Args:
        config: Starting configuration (Config.from_env() when omitted)
        config_file: INI file loaded on top of it

    Raises:
        ConfigurationError: If the file cannot be read or a value is invalid.
    """
    config = config or Config.from_env()
    if config_file:
        config.load(config_file)
    config.validate()
    return Application(config)
