"""Password hashing and verification.

New credentials are derived with scrypt from a per-user random salt. Accounts
created by the previous generation of the service carry self-salted bcrypt
hashes; those stay verifiable under the ``bcrypt`` algorithm tag and are
upgraded on the next successful sign-in.
"""

import hashlib
import hmac
import logging
import secrets

import bcrypt

from config import (
    MAX_PASSWORD_LEN,
    MIN_PASSWORD_LEN,
    PASSWORD_KEYLEN,
    SCRYPT_N,
    SCRYPT_P,
    SCRYPT_R,
)
from core.exceptions import ValidationError

logger = logging.getLogger(__name__)

CURRENT_ALGORITHM = "scrypt"
LEGACY_ALGORITHMS = ("bcrypt",)

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


def generate_salt() -> str:
    """Return 16 random bytes as a hex string."""
    return secrets.token_hex(16)


def validate_password(password: str) -> str:
    """Check the password policy.

    Args:
        password: Plain text password.

    Returns:
        The password with surrounding whitespace removed.

    Raises:
        ValidationError: If the password is shorter than 8 or longer than
            128 characters.
    """
    password = (password or "").strip()
    if len(password) < MIN_PASSWORD_LEN:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LEN} characters."
        )
    if len(password) > MAX_PASSWORD_LEN:
        raise ValidationError("Password is too long.")
    return password


def hash_password(password: str, salt: str) -> str:
    """Derive the scrypt hash of a password.

    Args:
        password: Plain text password.
        salt: Hex salt stored next to the hash.

    Returns:
        Hex-encoded derived key.
    """
    derived = hashlib.scrypt(
        password.encode("utf-8"),
        salt=salt.encode("utf-8"),
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
        maxmem=2 * 128 * SCRYPT_R * SCRYPT_N,
        dklen=PASSWORD_KEYLEN,
    )
    return derived.hex()


def verify_password(
    password: str,
    salt: str,
    expected_hash: str,
    algorithm: str = CURRENT_ALGORITHM,
) -> bool:
    """Verify a password against a stored credential.

    Comparison is constant-time. Any mismatch in length or format, and any
    unknown algorithm tag, yields False.

    Args:
        password: Plain text password to verify.
        salt: Salt stored with the credential (ignored for bcrypt).
        expected_hash: Stored hash.
        algorithm: Algorithm tag stored with the credential.

    Returns:
        True if the password matches, False otherwise.
    """
    if algorithm == CURRENT_ALGORITHM:
        try:
            expected = bytes.fromhex(expected_hash)
            actual = bytes.fromhex(hash_password(password, salt))
        except (AttributeError, TypeError, ValueError):
            return False
        if len(expected) != len(actual):
            return False
        return hmac.compare_digest(expected, actual)

    if algorithm == "bcrypt":
        try:
            password_bytes = password.encode("utf-8")[:BCRYPT_MAX_BYTES]
            return bcrypt.checkpw(password_bytes, expected_hash.encode("utf-8"))
        except (AttributeError, TypeError, ValueError):
            # missing or malformed stored hash
            return False

    logger.warning("Unknown password algorithm: %s", algorithm)
    return False


def needs_rehash(algorithm: str) -> bool:
    """Whether a credential should be re-derived with the current algorithm."""
    return algorithm != CURRENT_ALGORITHM
