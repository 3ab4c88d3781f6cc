"""Salted password hashing helpers for local auth."""

import hashlib
import hmac
import secrets


def hash_password(password: str, salt: str | None = None) -> str:
    """Return ``salt$sha256(salt + password)``."""
    salt = salt or secrets.token_hex(8)
    digest = hashlib.sha256(f"{salt}{password}".encode("utf-8")).hexdigest()
    return f"{salt}${digest}"


def verify_password(password: str, hashed: str) -> bool:
    """Constant-time comparison against a stored ``salt$digest`` value."""
    salt, sep, _ = hashed.partition("$")
    if not sep:
        return False
    return hmac.compare_digest(hash_password(password, salt), hashed)
