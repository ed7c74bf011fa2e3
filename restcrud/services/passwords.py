"""Password Hashing — salted PBKDF2 transform for password-tagged fields.

Invariants:
    - hash_password is a one-argument str -> str transform (Controller contract)
    - Output format is '<salt>$<hex digest>'; verify_password parses it back

Design Decisions:
    - PBKDF2-SHA256 from hashlib: no native dependency
"""

import hashlib
import secrets

ITERATIONS = 100_000


def hash_password(password: str, salt: str | None = None) -> str:
    """Hash a password with salt."""
    if salt is None:
        salt = secrets.token_hex(16)
    key = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), ITERATIONS,
    )
    return f"{salt}${key.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash."""
    try:
        salt, _ = password_hash.split("$")
    except ValueError:
        return False
    return secrets.compare_digest(hash_password(password, salt), password_hash)
