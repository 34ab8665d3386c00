"""
=============================================================================
COOKIE ENCRYPTION
=============================================================================

    token = encrypt("user=42", secret)      # url-safe ASCII, cookie-safe
    decrypt(token, secret)                  # "user=42"
    decrypt(token, "wrong secret")          # None
    decrypt(token[:-2] + "xx", secret)      # None (tampered)

Tokens are Fernet tokens (AES-128-CBC + HMAC-SHA256, with a timestamp),
so they are both confidential and tamper-evident. The Fernet key is
derived from the application secret with HKDF-SHA256; any string works
as a secret.

decrypt() never raises on bad input. A forged, truncated, or foreign
cookie is indistinguishable from a missing one.

=============================================================================
"""

from functools import lru_cache
from typing import Optional, Union
import base64

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF


_KEY_INFO = b"tollgate cookie encryption"


@lru_cache(maxsize=16)
def _fernet(secret: str) -> Fernet:
    """Derive (once per secret) the Fernet instance for `secret`."""
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=32,
        salt=None,
        info=_KEY_INFO,
    )
    key = base64.urlsafe_b64encode(hkdf.derive(secret.encode("utf-8")))
    return Fernet(key)


def encrypt(plaintext: Union[str, bytes], secret: str) -> str:
    """
    Encrypt `plaintext` under `secret`.

    Returns:
        URL-safe base64 token (safe to store in a cookie as is)
    """
    if not secret:
        raise ValueError("encrypt() needs a non-empty secret")
    if isinstance(plaintext, str):
        plaintext = plaintext.encode("utf-8")
    return _fernet(secret).encrypt(plaintext).decode("ascii")


def decrypt(ciphertext: Optional[str], secret: str) -> Optional[str]:
    """
    Decrypt a token produced by encrypt().

    Returns:
        The plaintext, or None when the token is missing, tampered with,
        encrypted under another secret, or not valid UTF-8.
    """
    if not ciphertext or not secret:
        return None
    try:
        return _fernet(secret).decrypt(ciphertext.encode("ascii")).decode("utf-8")
    except (InvalidToken, UnicodeError):
        return None
