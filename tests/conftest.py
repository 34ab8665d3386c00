"""
pytest configuration and fixtures.
"""

from io import BytesIO
from typing import Any, Dict, List, Optional, Tuple
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tollgate import Application, Config
from tollgate.http import HTTPRequest, FilterRegistry, Router


def make_environ(
    method: str = "GET",
    path: str = "/",
    query: str = "",
    body: bytes = b"",
    content_type: str = "",
    headers: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """Minimal PEP 3333 environ for driving an Application directly."""
    environ = {
        "REQUEST_METHOD": method,
        "PATH_INFO": path,
        "QUERY_STRING": query,
        "REMOTE_ADDR": "127.0.0.1",
        "REMOTE_PORT": "54321",
        "SERVER_NAME": "localhost",
        "SERVER_PORT": "8080",
        "wsgi.input": BytesIO(body),
        "wsgi.url_scheme": "http",
    }
    if body:
        environ["CONTENT_LENGTH"] = str(len(body))
    if content_type:
        environ["CONTENT_TYPE"] = content_type
    for name, value in (headers or {}).items():
        environ["HTTP_" + name.upper().replace("-", "_")] = value
    return environ


class WSGICall:
    """Result of calling an Application as a WSGI app."""

    def __init__(self, app: Application, environ: Dict[str, Any]):
        self.status: str = ""
        self.headers: List[Tuple[str, str]] = []

        def start_response(status, headers, exc_info=None):
            self.status = status
            self.headers = headers

        self.body = b"".join(app(environ, start_response))

    @property
    def status_code(self) -> int:
        return int(self.status.split(" ", 1)[0])

    def header(self, name: str) -> Optional[str]:
        for key, value in self.headers:
            if key.lower() == name.lower():
                return value
        return None

    def cookies(self) -> List[str]:
        return [value for key, value in self.headers if key == "Set-Cookie"]


@pytest.fixture
def app() -> Application:
    """Fresh application with default configuration."""
    return Application(Config())


@pytest.fixture
def router() -> Router:
    return Router()


@pytest.fixture
def filters() -> FilterRegistry:
    return FilterRegistry()


@pytest.fixture
def call(app: Application):
    """call(method, path, ...) → WSGICall against the `app` fixture."""
    def _call(method: str = "GET", path: str = "/", **kwargs) -> WSGICall:
        return WSGICall(app, make_environ(method, path, **kwargs))
    return _call


def make_request(method: str, path: str, **kwargs) -> HTTPRequest:
    """Helper to create a request for testing."""
    return HTTPRequest(method=method, path=path, **kwargs)


class FakeClock:
    """Manually advanced clock for cache expiry tests."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
