# technurture/middleware/auth.py

"""
Request gates, used as FastAPI dependencies:

- require_token: bearer access token only (stateless API clients)
- require_auth: bearer token, else the server-side session (cookie flow)
- require_admin: an authenticated user with the admin role
- login_rate_limit: per-IP login attempt window
"""

import math
import time
from dataclasses import asdict, dataclass
from typing import Dict, Optional

from fastapi import Depends, HTTPException, Request, status

from technurture.config import settings
from technurture.services.auth import ACCESS, auth_service


@dataclass
class CurrentUser:
    id: str
    username: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def to_json(self) -> dict:
        return asdict(self)


def bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def user_from_token(token: str) -> Optional[CurrentUser]:
    payload = auth_service.verify_token(token, expected_type=ACCESS)
    if payload is None:
        return None
    return CurrentUser(id=payload.user_id, username=payload.username, role=payload.role)


async def require_token(request: Request) -> CurrentUser:
    token = bearer_token(request)
    if token is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Access token required")

    user = user_from_token(token)
    if user is None:
        await request.app.state.log.log_warning("auth", "Rejected token", {"path": request.url.path})
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid or expired token")

    request.state.user = user
    return user


async def require_auth(request: Request) -> CurrentUser:
    """Bearer token first, server-side session as the fallback."""
    token = bearer_token(request)
    if token:
        user = user_from_token(token)
        if user is not None:
            request.state.user = user
            return user

    session_user = request.session.get("user") if "session" in request.scope else None
    if session_user:
        user = CurrentUser(
            id=str(session_user["id"]),
            username=session_user["username"],
            role=session_user.get("role", "user"),
        )
        request.state.user = user
        return user

    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")


async def require_admin(request: Request, user: CurrentUser = Depends(require_auth)) -> CurrentUser:
    if not user.is_admin:
        await request.app.state.log.log_warning("auth", "Admin access denied", {"username": user.username})
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user


# ────────────── Login rate limiting ──────────────
@dataclass
class Attempts:
    count: int
    last_attempt: float


class LoginRateLimiter:
    """
    Fixed window per client IP. The window restarts once it has elapsed
    since the last attempt. State is process-local.
    """

    def __init__(self, max_attempts: int = 5, window_seconds: float = 15 * 60, clock=time.monotonic):
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self.clock = clock
        self.attempts: Dict[str, Attempts] = {}

    def hit(self, key: str) -> Optional[int]:
        """
        Record one attempt for key. Returns None when allowed, otherwise the
        number of seconds until the client may try again.
        """
        now = self.clock()
        entry = self.attempts.get(key)
        if entry is not None:
            elapsed = now - entry.last_attempt
            if elapsed > self.window_seconds:
                del self.attempts[key]
                entry = None
            elif entry.count >= self.max_attempts:
                return max(1, math.ceil(self.window_seconds - elapsed))

        self.attempts[key] = Attempts(count=(entry.count + 1) if entry else 1, last_attempt=now)
        return None

    def reset(self, key: str) -> None:
        self.attempts.pop(key, None)

    def sweep(self) -> int:
        """Drop entries idle for longer than the window; returns how many were removed."""
        now = self.clock()
        stale = [key for key, entry in self.attempts.items() if now - entry.last_attempt > self.window_seconds]
        for key in stale:
            del self.attempts[key]
        return len(stale)


login_limiter = LoginRateLimiter(
    max_attempts=settings.LOGIN_MAX_ATTEMPTS,
    window_seconds=settings.LOGIN_WINDOW_MINUTES * 60,
)


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


async def login_rate_limit(request: Request) -> str:
    ip = client_ip(request)
    retry_after = login_limiter.hit(ip)
    if retry_after is not None:
        await request.app.state.log.log_warning("auth", "Too many login attempts", {"ip": ip})
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={"message": "Too many login attempts. Please try again later.", "retryAfter": retry_after},
            headers={"Retry-After": str(retry_after)},
        )
    return ip
