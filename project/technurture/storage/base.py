"""
Storage interface shared by the in-memory, relational and document backends.

Identifiers are opaque strings at this boundary: the memory and SQL backends
use integer counters, the document backend uses ObjectId hex strings.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Protocol

from technurture.schemas.blog import BlogPost, BlogPostCreate
from technurture.schemas.form import (
    DynamicForm,
    DynamicFormCreate,
    FormSubmission,
    FormSubmissionCreate,
)
from technurture.schemas.lead import Contact, ContactCreate, Enrollment, EnrollmentCreate
from technurture.schemas.user import User, UserCreate


class StorageError(Exception):
    """Base class for storage failures the route layer knows how to report."""


class NotFoundError(StorageError):
    def __init__(self, entity: str, id: str):
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.id = id


class DuplicateError(StorageError):
    def __init__(self, field: str, value: str):
        super().__init__(f"{field} '{value}' already exists")
        self.field = field
        self.value = value


def utcnow() -> datetime:
    # millisecond precision: the document store keeps no more than that
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Drivers hand back naive UTC datetimes; make them aware."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Storage(Protocol):
    """Async CRUD interface every backend implements."""

    name: str

    async def connect(self) -> None:
        ...

    async def close(self) -> None:
        ...

    # Users
    async def get_user(self, id: str) -> Optional[User]:
        ...

    async def get_user_by_username(self, username: str) -> Optional[User]:
        ...

    async def create_user(self, data: UserCreate) -> User:
        ...

    async def get_users(self) -> list[User]:
        ...

    async def update_user(self, id: str, changes: dict) -> User:
        ...

    async def delete_user(self, id: str) -> None:
        ...

    # Leads
    async def create_contact(self, data: ContactCreate) -> Contact:
        ...

    async def get_contacts(self) -> list[Contact]:
        ...

    async def create_enrollment(self, data: EnrollmentCreate) -> Enrollment:
        ...

    async def get_enrollments(self) -> list[Enrollment]:
        ...

    # Blog posts
    async def create_blog_post(self, data: BlogPostCreate) -> BlogPost:
        ...

    async def get_blog_posts(self, published: Optional[bool] = None) -> list[BlogPost]:
        ...

    async def get_blog_post(self, id: str) -> Optional[BlogPost]:
        ...

    async def update_blog_post(self, id: str, changes: dict) -> BlogPost:
        ...

    async def delete_blog_post(self, id: str) -> None:
        ...

    # Dynamic forms
    async def create_dynamic_form(self, data: DynamicFormCreate) -> DynamicForm:
        ...

    async def get_dynamic_forms(self, active: Optional[bool] = None) -> list[DynamicForm]:
        ...

    async def get_dynamic_form(self, id: str) -> Optional[DynamicForm]:
        ...

    async def update_dynamic_form(self, id: str, changes: dict) -> DynamicForm:
        ...

    async def delete_dynamic_form(self, id: str) -> None:
        ...

    # Form submissions
    async def create_form_submission(self, data: FormSubmissionCreate) -> FormSubmission:
        ...

    async def get_form_submissions(self, form_id: Optional[str] = None) -> list[FormSubmission]:
        ...
