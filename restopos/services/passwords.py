"""Password hashing for staff accounts.

New hashes are bcrypt through passlib, or salted PBKDF2 when bcrypt is not
usable. Two older formats still verify: PBKDF2 strings written by this
module and unsalted SHA-256 hex digests from browser-era backups.
"""

from __future__ import annotations

import hashlib
import hmac
import os
import re
from typing import Optional

from passlib.context import CryptContext

PBKDF2_PREFIX = "pbkdf2$"
PBKDF2_ITERATIONS = 120_000
PBKDF2_SALT_BYTES = 16

_LEGACY_SHA256 = re.compile(r"^[0-9a-f]{64}$")

_bcrypt_context: Optional[CryptContext]

try:
    _bcrypt_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
except Exception:
    _bcrypt_context = None


def _pbkdf2(password: str, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)


def _hash_pbkdf2(password: str) -> str:
    salt = os.urandom(PBKDF2_SALT_BYTES)
    digest = _pbkdf2(password, salt, PBKDF2_ITERATIONS)
    return f"{PBKDF2_PREFIX}{PBKDF2_ITERATIONS}${salt.hex()}${digest.hex()}"


def _verify_pbkdf2(password: str, stored: str) -> bool:
    try:
        _, iterations, salt_hex, digest_hex = stored.split("$", 3)
        expected = bytes.fromhex(digest_hex)
        computed = _pbkdf2(password, bytes.fromhex(salt_hex), int(iterations))
    except ValueError:
        return False
    return hmac.compare_digest(computed, expected)


def _verify_legacy(password: str, stored: str) -> bool:
    computed = hashlib.sha256(password.encode("utf-8")).hexdigest()
    return hmac.compare_digest(computed, stored)


def is_legacy_hash(password_hash: str) -> bool:
    return bool(password_hash) and bool(_LEGACY_SHA256.match(password_hash))


def hash_password(password: str) -> str:
    if _bcrypt_context is not None:
        try:
            return _bcrypt_context.hash(password)
        except Exception:
            # Broken bcrypt backends fail at hash time, not at import
            pass
    return _hash_pbkdf2(password)


def verify_password(password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    if is_legacy_hash(password_hash):
        return _verify_legacy(password, password_hash)
    if password_hash.startswith(PBKDF2_PREFIX):
        return _verify_pbkdf2(password, password_hash)
    if _bcrypt_context is None:
        return False
    try:
        return _bcrypt_context.verify(password, password_hash)
    except Exception:
        return False


def needs_rehash(password_hash: str) -> bool:
    """True for stored hashes that should be replaced after a successful login."""
    return is_legacy_hash(password_hash)
