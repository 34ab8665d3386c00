"""
=============================================================================
TOLLGATE CLI ENTRY POINT
=============================================================================

Serve an application with the development server:

    # module:attribute of an Application
    python -m tollgate mysite.app:app

    # custom interface and port
    python -m tollgate mysite.app:app --host 0.0.0.0 --port 3000

    # load an INI file first
    python -m tollgate mysite.app:app --config app.ini

    # print the route table and exit
    python -m tollgate mysite.app:app --routes

The attribute defaults to "app", so `python -m tollgate mysite.app` works
too. If the attribute is a callable that is not an Application (a
factory), it is called with no arguments.

The server is wsgiref with one thread per request. Use a real WSGI server
in production.

=============================================================================
"""

import argparse
import importlib
import logging
import sys

from . import __version__
from .app import Application
from .errors import ConfigurationError
from .log import setup_logging


logger = logging.getLogger(__name__)


def load_app(target: str) -> Application:
    """
    Import "module:attribute" and return the Application it names.

    Raises:
        ConfigurationError: If the module or attribute cannot be found, or
                            it is not an Application.
    """
    module_name, _, attr = target.partition(":")
    attr = attr or "app"
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import {module_name!r}: {e}")

    try:
        obj = getattr(module, attr)
    except AttributeError:
        raise ConfigurationError(f"Module {module_name!r} has no attribute {attr!r}")

    if not isinstance(obj, Application) and callable(obj):
        obj = obj()
    if not isinstance(obj, Application):
        raise ConfigurationError(f"{target!r} is not a tollgate Application")
    return obj


def main(argv=None) -> int:
    """
    Main entry point for the CLI.

    Returns:
        Process exit status
    """
    parser = argparse.ArgumentParser(
        prog="tollgate",
        description="Serve a tollgate application with the development server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m tollgate mysite.app:app
  python -m tollgate mysite.app:app --port 3000 --config app.ini
  python -m tollgate mysite.app:app --routes
        """,
    )

    parser.add_argument(
        "app",
        help="Application to serve, as module:attribute",
    )
    parser.add_argument(
        "--host", "-H",
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=8080,
        help="Port to bind to (default: 8080)",
    )
    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="INI file loaded into the application's configuration",
    )
    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Override log.level",
    )
    parser.add_argument(
        "--routes",
        action="store_true",
        help="Print the route table and exit",
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"tollgate {__version__}",
    )

    args = parser.parse_args(argv)

    # =========================================================================
    # LOAD APPLICATION
    # =========================================================================
    # The working directory is importable, like `python -m` itself.
    if "" not in sys.path:
        sys.path.insert(0, "")

    try:
        app = load_app(args.app)
        if args.config:
            app.config.load(args.config)
        if args.log_level:
            app.config.set("log.level", args.log_level)
        app.config.validate()
    except ConfigurationError as e:
        setup_logging()
        logger.error(str(e))
        return 2

    if args.routes:
        app.router.print_routes()
        return 0

    # =========================================================================
    # SERVE
    # =========================================================================
    app.run(host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
