"""Password hashing for User.pwd_hash (bcrypt over a SHA-256 digest).

bcrypt only reads the first 72 bytes of its input, so the password is
digested first and every character counts.
"""

import base64
import hashlib

import bcrypt


def _digest(password: str) -> bytes:
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def hash_password(password: str) -> str:
    """Return the bcrypt hash stored in pwd_hash."""
    return bcrypt.hashpw(_digest(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, pwd_hash: str) -> bool:
    """Return True if password matches pwd_hash; False for malformed hashes."""
    try:
        return bool(bcrypt.checkpw(_digest(password), pwd_hash.encode("utf-8")))
    except (ValueError, TypeError):
        return False
