"""
Unit tests for cookie encryption.
"""

import pytest

from tollgate.crypto import decrypt, encrypt


SECRET = "change-me"


class TestCrypto:
    """Tests for encrypt()/decrypt()."""

    def test_round_trip(self):
        """Test a token decrypts to the original text."""
        token = encrypt("user=42", SECRET)

        assert token != "user=42"
        assert decrypt(token, SECRET) == "user=42"

    def test_unicode(self):
        """Test non-ASCII plaintext survives."""
        assert decrypt(encrypt("héllo ✓", SECRET), SECRET) == "héllo ✓"

    def test_token_is_cookie_safe(self):
        """Test tokens need no quoting in a cookie."""
        token = encrypt("a; b, c", SECRET)
        assert all(c.isalnum() or c in "-_=" for c in token)

    def test_wrong_secret(self):
        """Test another secret yields None."""
        token = encrypt("user=42", SECRET)
        assert decrypt(token, "other secret") is None

    def test_tampered(self):
        """Test a modified token yields None."""
        token = encrypt("user=42", SECRET)
        tampered = token[:-4] + ("AAAA" if not token.endswith("AAAA") else "BBBB")

        assert decrypt(tampered, SECRET) is None

    @pytest.mark.parametrize("token", ["", None, "not a token", "é"])
    def test_garbage(self, token):
        """Test missing or foreign values yield None."""
        assert decrypt(token, SECRET) is None

    def test_empty_secret(self):
        """Test encrypting needs a secret."""
        with pytest.raises(ValueError):
            encrypt("x", "")
