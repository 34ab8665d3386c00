"""
=============================================================================
EXCEPTION TAXONOMY
=============================================================================

    ┌──────────────────────┬──────────────────────────────────────────────┐
    │  Exception           │  When / who handles it                       │
    ├──────────────────────┼──────────────────────────────────────────────┤
    │  ConfigurationError  │  Registration time. Malformed route template,│
    │                      │  unknown method, bad config value. Fatal to  │
    │                      │  startup; the integrator catches it.         │
    ├──────────────────────┼──────────────────────────────────────────────┤
    │  BadRequest          │  Request time. Malformed request data        │
    │                      │  (invalid JSON body). Application turns it   │
    │                      │  into its status_code.                       │
    ├──────────────────────┼──────────────────────────────────────────────┤
    │  Signal (signals.py) │  Request time. Redirect/error raised by a    │
    │                      │  filter or handler. Terminal, never retried. │
    └──────────────────────┴──────────────────────────────────────────────┘

A routing miss is NOT an exception: it is a normal NotFound outcome.

=============================================================================
"""


class TollgateError(Exception):
    """Base class for every error raised by tollgate itself."""


class ConfigurationError(TollgateError):
    """
    Raised while the application is being set up.

    Examples:
        compile_pattern("/a/:id/b/:id")   # duplicate symbol "id"
        compile_pattern("/files/*/meta")  # wildcard must be last
        app.on("FETCH", "/", handler)     # unsupported method
    """


class BadRequest(TollgateError):
    """
    Raised when request data cannot be interpreted.

    Carries the HTTP status that should be returned to the client,
    400 unless stated otherwise.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code
