"""
=============================================================================
LOGGING
=============================================================================

Two loggers matter:

    tollgate            framework diagnostics (route registration, cache
                        misses, configuration, unhandled exceptions)
    tollgate.access     one line per handled request

Configure them like any stdlib logger:

    logging.getLogger("tollgate.access").addHandler(file_handler)

or let setup_logging() install the default console format.

=============================================================================
ACCESS LOG FORMATS
=============================================================================

text (Apache-like):

    127.0.0.1 - - [18/Oct/2026:10:15:02 +0000] "GET /blogs/1" 200 512 1.84ms a1b2c3d4

json (one object per line, for log aggregators):

    {"request_id": "a1b2c3d4", "method": "GET", "path": "/blogs/1", ...}

Every response carries the same id in X-Request-ID, so a client report
can be matched to its log line.

=============================================================================
"""

from dataclasses import dataclass
import json
import logging
import time

from .http.request import HTTPRequest
from .http.response import HTTPResponse


access_logger = logging.getLogger("tollgate.access")


def setup_logging(level: str = "INFO", fmt: str = "text") -> None:
    """
    Configure root logging for a tollgate process.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        fmt: Access log format; "json" leaves messages unadorned so each
             line is a valid JSON object
    """
    numeric = getattr(logging, str(level).upper(), logging.INFO)
    if fmt == "json":
        line_format = "%(message)s"
    else:
        line_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    logging.basicConfig(
        level=numeric,
        format=line_format,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("tollgate").setLevel(numeric)


@dataclass
class RequestLog:
    """
    Structured access log entry for one request.

    request_id:     Id echoed in X-Request-ID
    method:         Request method after any override
    path:           Request path as received
    query:          Raw query string
    client_ip:      Remote address
    user_agent:     User-Agent header, "-" if absent
    status_code:    Response status
    content_length: Response body size in bytes
    duration_ms:    Handling time
    timestamp:      When the request finished
    """

    request_id: str
    method: str
    path: str
    query: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    @classmethod
    def create(
        cls,
        request: HTTPRequest,
        response: HTTPResponse,
        request_id: str,
        duration_ms: float,
    ) -> "RequestLog":
        return cls(
            request_id=request_id,
            method=request.method,
            path=request.path,
            query=request.query_string,
            client_ip=request.client_address[0],
            user_agent=request.user_agent or "-",
            status_code=response.status,
            content_length=len(response.body),
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

    def to_dict(self) -> dict:
        return {
            "request_id": self.request_id,
            "method": self.method,
            "path": self.path,
            "query": self.query,
            "client_ip": self.client_ip,
            "user_agent": self.user_agent,
            "status_code": self.status_code,
            "content_length": self.content_length,
            "duration_ms": round(self.duration_ms, 2),
            "timestamp": self.timestamp,
        }

    def to_text(self) -> str:
        path = f"{self.path}?{self.query}" if self.query else self.path
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {path}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms {self.request_id}'
        )


def log_request(entry: RequestLog, fmt: str = "text") -> None:
    """Emit `entry` on the tollgate.access logger."""
    if fmt == "json":
        access_logger.info(json.dumps(entry.to_dict()))
    else:
        access_logger.info(entry.to_text())
