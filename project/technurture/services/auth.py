# technurture/services/auth.py

"""
Authentication service: credential checks, password policy, JWT access and
refresh tokens, and symmetric encryption of sensitive strings.
"""

import hashlib
import os
import re
import secrets
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from technurture.config import Settings, settings
from technurture.storage.base import Storage
from technurture.utils.log import boot_log
from technurture.utils.security import dummy_verify, hash_password, verify_password

ALGORITHM = "HS256"
ACCESS = "access"
REFRESH = "refresh"
SPECIAL_CHARACTERS = '!@#$%^&*(),.?":{}|<>'
MIN_PASSWORD_LENGTH = 8


class AuthError(Exception):
    """Raised when a refresh cannot be honoured. The message is safe to show."""


@dataclass
class TokenPayload:
    user_id: str
    username: str
    role: str
    type: str
    exp: Optional[int] = None
    jti: Optional[str] = None


@dataclass
class TokenPair:
    access_token: str
    refresh_token: str

    def to_json(self) -> dict:
        return {"accessToken": self.access_token, "refreshToken": self.refresh_token}


@dataclass
class PasswordCheck:
    is_valid: bool
    errors: list[str] = field(default_factory=list)

    def to_json(self) -> dict:
        return {"isValid": self.is_valid, "errors": self.errors}


def load_secret(value: Optional[str], name: str, nbytes: int) -> str:
    """Configured secret, or a random one for this process only."""
    if value:
        return value
    boot_log.log_warning_sync("auth", f"{name} is not set; generated a random one, sessions end on restart")
    return secrets.token_hex(nbytes)


def derive_key(encryption_key: str) -> bytes:
    """
    64 hex characters are used as the raw AES-256 key. Anything else is
    hashed down to 32 bytes with SHA-256.
    """
    if re.fullmatch(r"[0-9a-fA-F]{64}", encryption_key):
        return bytes.fromhex(encryption_key)
    boot_log.log_warning_sync("auth", "ENCRYPTION_KEY is not 64 hex characters; deriving the key with SHA-256")
    return hashlib.sha256(encryption_key.encode("utf-8")).digest()


class AuthService:
    def __init__(
        self,
        jwt_secret: str,
        encryption_key: str,
        access_expires: timedelta = timedelta(minutes=15),
        refresh_expires: timedelta = timedelta(days=7),
    ):
        self.jwt_secret = jwt_secret
        self.access_expires = access_expires
        self.refresh_expires = refresh_expires
        self.encryption_key = encryption_key
        self._cipher: Optional[AESGCM] = None

    @classmethod
    def from_settings(cls, config: Settings) -> "AuthService":
        return cls(
            jwt_secret=load_secret(config.JWT_SECRET, "JWT_SECRET", 64),
            encryption_key=load_secret(config.ENCRYPTION_KEY, "ENCRYPTION_KEY", 32),
            access_expires=timedelta(minutes=config.JWT_ACCESS_EXPIRES_MINUTES),
            refresh_expires=timedelta(days=config.JWT_REFRESH_EXPIRES_DAYS),
        )

    # ────────────── Credentials ──────────────
    async def authenticate_user(self, storage: Storage, username: str, password: str) -> Optional[dict]:
        """
        Check a username/password pair.

        Both values are trimmed (copy-paste whitespace). Returns
        {id, username, role} or None; an unknown user and a wrong password
        are indistinguishable, including in timing.
        """
        username = (username or "").strip()
        password = (password or "").strip()

        user = await storage.get_user_by_username(username) if username else None
        if user is None:
            dummy_verify()
            return None
        if not verify_password(password, user.password):
            return None
        return {"id": user.id, "username": user.username, "role": user.role}

    @staticmethod
    def hash_password(password: str) -> str:
        return hash_password(password)

    @staticmethod
    def verify_password(password: str, hashed: str) -> bool:
        return verify_password(password, hashed)

    @staticmethod
    def validate_password(password: str) -> PasswordCheck:
        errors = []
        if len(password) < MIN_PASSWORD_LENGTH:
            errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
        if not re.search(r"[A-Z]", password):
            errors.append("Password must contain at least one uppercase letter")
        if not re.search(r"[a-z]", password):
            errors.append("Password must contain at least one lowercase letter")
        if not re.search(r"\d", password):
            errors.append("Password must contain at least one number")
        if not any(ch in SPECIAL_CHARACTERS for ch in password):
            errors.append("Password must contain at least one special character")
        return PasswordCheck(is_valid=not errors, errors=errors)

    # ────────────── Tokens ──────────────
    def issue_token(self, user: dict, token_type: str, expires_delta: Optional[timedelta] = None) -> str:
        now = datetime.now(timezone.utc)
        if expires_delta is None:
            expires_delta = self.access_expires if token_type == ACCESS else self.refresh_expires
        claims = {
            "userId": str(user["id"]),
            "username": user["username"],
            "role": user["role"],
            "type": token_type,
            "iat": now,
            "exp": now + expires_delta,
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(claims, self.jwt_secret, algorithm=ALGORITHM)

    def generate_tokens(self, user: dict) -> TokenPair:
        return TokenPair(
            access_token=self.issue_token(user, ACCESS),
            refresh_token=self.issue_token(user, REFRESH),
        )

    def verify_token(self, token: str, expected_type: Optional[str] = None) -> Optional[TokenPayload]:
        """
        Decoded claims, or None when the signature, expiry or shape is wrong,
        or when the token is not of expected_type.
        """
        try:
            claims = jwt.decode(
                token,
                self.jwt_secret,
                algorithms=[ALGORITHM],
                options={"require": ["exp", "type", "userId"]},
            )
        except jwt.InvalidTokenError:
            return None

        if claims.get("type") not in (ACCESS, REFRESH):
            return None
        if expected_type and claims["type"] != expected_type:
            return None
        return TokenPayload(
            user_id=str(claims["userId"]),
            username=claims.get("username", ""),
            role=claims.get("role", "user"),
            type=claims["type"],
            exp=claims.get("exp"),
            jti=claims.get("jti"),
        )

    async def refresh_access_token(self, storage: Storage, refresh_token: str) -> str:
        """New access token for a valid refresh token whose user still exists."""
        payload = self.verify_token(refresh_token, expected_type=REFRESH)
        if payload is None:
            raise AuthError("Invalid refresh token")

        user = await storage.get_user_by_username(payload.username)
        if user is None:
            raise AuthError("User not found")

        # role comes from the stored user, not from the token
        return self.issue_token({"id": user.id, "username": user.username, "role": user.role}, ACCESS)

    # ────────────── Encryption ──────────────
    @property
    def cipher(self) -> AESGCM:
        """AES-GCM cipher, built on first use."""
        if self._cipher is None:
            self._cipher = AESGCM(derive_key(self.encryption_key))
        return self._cipher

    def encrypt_data(self, text: str) -> str:
        """AES-256-GCM; the random nonce is prepended as hex `nonce:ciphertext`."""
        nonce = os.urandom(12)
        ciphertext = self.cipher.encrypt(nonce, text.encode("utf-8"), None)
        return f"{nonce.hex()}:{ciphertext.hex()}"

    def decrypt_data(self, blob: str) -> str:
        nonce_hex, ciphertext_hex = blob.split(":", 1)
        plaintext = self.cipher.decrypt(bytes.fromhex(nonce_hex), bytes.fromhex(ciphertext_hex), None)
        return plaintext.decode("utf-8")

    @staticmethod
    def generate_session_id() -> str:
        return secrets.token_hex(32)


auth_service = AuthService.from_settings(settings)
