"""
=============================================================================
HTTP STATUS CODES (RFC 9110)
=============================================================================

The status codes a front controller actually produces, with the reason
phrases used on the WSGI status line ("302 Found", "404 Not Found").

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  2xx   │ SUCCESS: handler ran and produced output                  │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  3xx   │ REDIRECTION: a redirect signal fired                      │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  4xx   │ CLIENT ERROR: no route matched, or an error signal fired  │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  5xx   │ SERVER ERROR: a handler raised an unexpected exception    │
    └────────┴───────────────────────────────────────────────────────────┘

Signals may carry any integer code (an application can redirect with 403 if
it wants to), so `reason_phrase()` accepts plain ints as well as members.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200                    # Standard success response
    CREATED = 201               # New resource was created (POST)
    ACCEPTED = 202              # Request accepted, processing later
    NO_CONTENT = 204            # Success but no body to return (DELETE)

    MOVED_PERMANENTLY = 301     # Resource moved permanently
    FOUND = 302                 # Default redirect signal code
    SEE_OTHER = 303             # Redirect to GET another URL (after POST)
    NOT_MODIFIED = 304          # Cached version is still valid
    TEMPORARY_REDIRECT = 307    # Like 302 but preserves HTTP method
    PERMANENT_REDIRECT = 308    # Like 301 but preserves HTTP method

    BAD_REQUEST = 400           # Malformed request data
    UNAUTHORIZED = 401          # Authentication required
    FORBIDDEN = 403             # Authenticated but not permitted
    NOT_FOUND = 404             # Routing miss
    METHOD_NOT_ALLOWED = 405    # Method not supported for resource
    CONFLICT = 409              # Conflict with current resource state
    GONE = 410                  # Resource existed but was deleted
    UNPROCESSABLE_ENTITY = 422  # Well-formed but semantically wrong
    TOO_MANY_REQUESTS = 429     # Rate limited

    INTERNAL_SERVER_ERROR = 500 # Uncaught handler/collaborator failure
    NOT_IMPLEMENTED = 501       # Server doesn't support this feature
    SERVICE_UNAVAILABLE = 503   # Server overloaded or in maintenance

    @property
    def phrase(self) -> str:
        """Reason phrase for the status line ("Not Found" for 404)."""
        return _STATUS_PHRASES.get(self, "Unknown")

    @property
    def is_redirect(self) -> bool:
        """True for 3xx codes."""
        return 300 <= self < 400

    @property
    def is_error(self) -> bool:
        """True for 4xx and 5xx codes."""
        return self >= 400


def reason_phrase(code: int) -> str:
    """
    Reason phrase for any integer code.

    Unknown codes (e.g. 299 or 599) get "Unknown" rather than raising,
    because error and redirect signals may use arbitrary codes.
    """
    try:
        return HTTPStatus(code).phrase
    except ValueError:
        return "Unknown"


def status_line(code: int) -> str:
    """WSGI status string: "404 Not Found"."""
    return f"{int(code)} {reason_phrase(code)}"


_STATUS_PHRASES = {
    # 2xx Success
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.ACCEPTED: "Accepted",
    HTTPStatus.NO_CONTENT: "No Content",

    # 3xx Redirection
    HTTPStatus.MOVED_PERMANENTLY: "Moved Permanently",
    HTTPStatus.FOUND: "Found",
    HTTPStatus.SEE_OTHER: "See Other",
    HTTPStatus.NOT_MODIFIED: "Not Modified",
    HTTPStatus.TEMPORARY_REDIRECT: "Temporary Redirect",
    HTTPStatus.PERMANENT_REDIRECT: "Permanent Redirect",

    # 4xx Client Errors
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.UNAUTHORIZED: "Unauthorized",
    HTTPStatus.FORBIDDEN: "Forbidden",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.CONFLICT: "Conflict",
    HTTPStatus.GONE: "Gone",
    HTTPStatus.UNPROCESSABLE_ENTITY: "Unprocessable Entity",
    HTTPStatus.TOO_MANY_REQUESTS: "Too Many Requests",

    # 5xx Server Errors
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.NOT_IMPLEMENTED: "Not Implemented",
    HTTPStatus.SERVICE_UNAVAILABLE: "Service Unavailable",
}
