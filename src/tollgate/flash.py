"""
=============================================================================
FLASH MESSAGES
=============================================================================

One-shot messages that survive exactly one redirect:

    request 1:  POST /users        flash("notice", "User created")
                                   redirect("/users")
                                   → Set-Cookie: _F=<token>

    request 2:  GET /users         flash("notice")  # "User created"
                                   → Set-Cookie: _F=; Max-Age=0  (cleared)

    request 3:  GET /users         flash("notice")  # None

Messages written on a request are only readable on the next one. Whatever
arrived is dropped when that next request ends, read or not.

The cookie holds the JSON-encoded mapping, encrypted when cookies.secret
is set and base64-encoded otherwise.

=============================================================================
"""

from typing import Dict, Optional
import base64
import binascii
import json
import logging

from .crypto import encrypt, decrypt
from .http.response import build_cookie


logger = logging.getLogger(__name__)


def encode_messages(messages: Dict[str, str], secret: Optional[str]) -> str:
    payload = json.dumps(messages, separators=(",", ":"))
    if secret:
        return encrypt(payload, secret)
    return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii")


def decode_messages(value: Optional[str], secret: Optional[str]) -> Dict[str, str]:
    """Decode a flash cookie; anything unreadable is an empty mapping."""
    if not value:
        return {}
    if secret:
        payload = decrypt(value, secret)
    else:
        try:
            payload = base64.urlsafe_b64decode(value.encode("ascii")).decode("utf-8")
        except (binascii.Error, UnicodeError, ValueError):
            payload = None
    if payload is None:
        logger.debug("Discarding unreadable flash cookie")
        return {}
    try:
        messages = json.loads(payload)
    except json.JSONDecodeError:
        return {}
    if not isinstance(messages, dict):
        return {}
    return {str(k): str(v) for k, v in messages.items()}


class Flash:
    """
    Flash state for one request.

    Args:
        cookie_name: Name of the flash cookie
        incoming: Messages delivered by the previous request
        secret: cookies.secret, or None
        received: The request carried a flash cookie, readable or not
    """

    def __init__(
        self,
        cookie_name: str,
        incoming: Dict[str, str],
        secret: Optional[str] = None,
        received: bool = False,
    ):
        self.cookie_name = cookie_name
        self.secret = secret
        self.received = received or bool(incoming)
        self._incoming = dict(incoming)
        self._outgoing: Dict[str, str] = {}

    @classmethod
    def from_cookie(cls, cookie_name: str, value: Optional[str], secret: Optional[str] = None) -> "Flash":
        return cls(cookie_name, decode_messages(value, secret), secret, received=bool(value))

    def get(self, name: str) -> Optional[str]:
        """Message `name` from the previous request."""
        return self._incoming.get(name)

    def set(self, name: str, message: str) -> None:
        """Queue `message` for the next request."""
        self._outgoing[name] = str(message)

    @property
    def pending(self) -> Dict[str, str]:
        """Messages queued for the next request."""
        return dict(self._outgoing)

    def cookie_line(self) -> Optional[str]:
        """
        Set-Cookie value to send with this response, if any.

        Queued messages replace the cookie; otherwise a cookie that was
        delivered on this request is expired.
        """
        if self._outgoing:
            return build_cookie(self.cookie_name, encode_messages(self._outgoing, self.secret))
        if self.received:
            return build_cookie(self.cookie_name, "", expire=-1)
        return None
