# technurture/schemas/auth.py

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    # not stripped here: AuthService trims both values itself
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RefreshRequest(BaseModel):
    refreshToken: str = Field(..., min_length=1)


class PasswordCheckRequest(BaseModel):
    password: str


class PasswordCheckResponse(BaseModel):
    isValid: bool
    errors: list[str]
