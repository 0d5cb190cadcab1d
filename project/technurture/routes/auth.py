# technurture/routes/auth.py

from fastapi import APIRouter, Depends, HTTPException, Request, status

from technurture.middleware.auth import (
    CurrentUser,
    login_limiter,
    login_rate_limit,
    require_token,
)
from technurture.schemas.auth import (
    LoginRequest,
    PasswordCheckRequest,
    PasswordCheckResponse,
    RefreshRequest,
)
from technurture.services.auth import AuthError, auth_service

router = APIRouter()


# ────────────── LOGIN ──────────────
@router.post(
    "/login",
    summary="Log in with username and password",
    responses={
        200: {
            "description": "Credentials accepted. Returns the user and an access/refresh token pair.",
            "content": {
                "application/json": {
                    "example": {
                        "success": True,
                        "user": {"id": "1", "username": "admin", "role": "admin"},
                        "tokens": {
                            "accessToken": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                            "refreshToken": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                        },
                    }
                }
            },
        },
        400: {"description": "Missing username or password"},
        401: {"description": "Invalid credentials"},
        429: {"description": "Too many login attempts from this IP, see retryAfter"},
    },
)
async def login(
    request: Request,
    credentials: LoginRequest,
    ip: str = Depends(login_rate_limit),
):
    """
    Verify credentials and issue tokens.

    The same generic 401 is returned for an unknown user and for a wrong
    password. The user is also written to the server-side session so
    cookie-based admin pages keep working.
    """
    log = request.app.state.log
    user = await auth_service.authenticate_user(request.state.storage, credentials.username, credentials.password)
    if user is None:
        await log.log_warning("auth", "Failed login attempt", {"username": credentials.username.strip(), "ip": ip})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    login_limiter.reset(ip)
    tokens = auth_service.generate_tokens(user)
    request.session["user"] = user

    await log.log_info("auth", "User logged in", {"username": user["username"], "ip": ip})
    return {"success": True, "user": user, "tokens": tokens.to_json()}


# ────────────── REFRESH ──────────────
@router.post(
    "/refresh",
    summary="Exchange a refresh token for a new access token",
    responses={
        200: {"description": "New access token issued"},
        401: {"description": "Refresh token invalid, expired, or its user no longer exists"},
    },
)
async def refresh(request: Request, body: RefreshRequest):
    try:
        access_token = await auth_service.refresh_access_token(request.state.storage, body.refreshToken)
    except AuthError as e:
        await request.app.state.log.log_warning("auth", f"Refresh rejected: {e}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    return {"success": True, "accessToken": access_token}


# ────────────── ME ──────────────
@router.get("/me", summary="Current user from the access token")
async def me(user: CurrentUser = Depends(require_token)):
    return {"success": True, "user": user.to_json()}


# ────────────── LOGOUT ──────────────
@router.post("/logout", summary="Log out")
async def logout(request: Request, user: CurrentUser = Depends(require_token)):
    """
    Clears the server-side session. Tokens are not revoked: the client
    discards them and they lapse at their expiry.
    """
    request.session.clear()
    await request.app.state.log.log_info("auth", "User logged out", {"username": user.username})
    return {"success": True}


# ────────────── PASSWORD POLICY ──────────────
@router.post(
    "/validate-password",
    response_model=PasswordCheckResponse,
    summary="Check a password against the password policy",
)
async def validate_password(body: PasswordCheckRequest):
    return auth_service.validate_password(body.password).to_json()
