# technurture/schemas/user.py

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from technurture.schemas.base import CamelModel, NonEmpty, PartialModel

Role = Literal["user", "admin"]


class UserCreate(CamelModel):
    """
    Input for creating a user. The password arrives in plaintext and is
    hashed by the route before it reaches storage.
    """
    username: NonEmpty
    password: str = Field(..., min_length=1)
    role: Role = "user"


class UserUpdate(PartialModel):
    """
    Partial update. Only the fields that were sent are applied.
    """
    not_nullable = frozenset({"username", "password", "role"})

    username: Optional[NonEmpty] = None
    password: Optional[str] = None
    role: Optional[Role] = None


class User(CamelModel):
    """
    Stored user. `password` holds the hash and never leaves the server:
    responses go through UserPublic.
    """
    id: str
    username: str
    password: str
    role: Role = "user"
    created_at: datetime


class UserPublic(CamelModel):
    id: str
    username: str
    role: Role
    created_at: Optional[datetime] = None

    @classmethod
    def from_user(cls, user: User) -> "UserPublic":
        return cls(id=user.id, username=user.username, role=user.role, created_at=user.created_at)
