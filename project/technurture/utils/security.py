# technurture/utils/security.py

"""
Password hashing and verification.

passlib with pbkdf2_sha256: an adaptive, salted hash whose C-backed
implementation is available on every interpreter (sha256_crypt falls back
to pure Python once the `crypt` module is gone, bcrypt backends break on
recent `bcrypt` releases).
"""

from passlib.context import CryptContext

# rounds is the work factor; verify() compares digests in constant time
pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
    pbkdf2_sha256__default_rounds=29000,
)


def hash_password(password: str) -> str:
    """
    Hash a password for storage.

    :param password: plaintext password
    :return: salted hash string
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Check a password against its stored hash.

    :param plain_password: plaintext password
    :param hashed_password: hash from storage
    :return: True when they match; False for a mismatch or an unreadable hash
    """
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


def dummy_verify() -> None:
    """Spend the same time as a real verification (used when the user does not exist)."""
    pwd_context.dummy_verify()
