"""
Process-local storage for development and tests.

State lives in dicts for the lifetime of the process; nothing is shared
between workers, so this backend only suits a single instance.
"""

from __future__ import annotations

import itertools
from typing import Dict, Optional, TypeVar

from pydantic import BaseModel

from technurture.schemas.blog import BlogPost, BlogPostCreate
from technurture.schemas.form import (
    DynamicForm,
    DynamicFormCreate,
    FormSubmission,
    FormSubmissionCreate,
)
from technurture.schemas.lead import Contact, ContactCreate, Enrollment, EnrollmentCreate
from technurture.schemas.user import User, UserCreate
from technurture.storage.base import DuplicateError, NotFoundError, utcnow
from technurture.utils.security import hash_password

R = TypeVar("R", bound=BaseModel)


def newest_first(records) -> list:
    # ids are increasing integers, so they break createdAt ties
    return sorted(records, key=lambda r: (r.created_at, int(r.id)), reverse=True)


class MemoryStorage:
    """Dict-per-entity store with monotonically increasing integer ids."""

    name = "memory"

    def __init__(self, admin_username: str | None = None, admin_password: str | None = None):
        self.admin_username = admin_username
        self.admin_password = admin_password
        self.reset()

    def reset(self) -> None:
        """Drop every record and re-seed the development admin (tests)."""
        self.users: Dict[str, User] = {}
        self.contacts: Dict[str, Contact] = {}
        self.enrollments: Dict[str, Enrollment] = {}
        self.blog_posts: Dict[str, BlogPost] = {}
        self.dynamic_forms: Dict[str, DynamicForm] = {}
        self.form_submissions: Dict[str, FormSubmission] = {}
        self._counters = {
            name: itertools.count(1)
            for name in ("users", "contacts", "enrollments", "blog_posts", "dynamic_forms", "form_submissions")
        }
        if self.admin_username and self.admin_password:
            self._seed_admin()

    def _seed_admin(self) -> None:
        id = self._next_id("users")
        self.users[id] = User(
            id=id,
            username=self.admin_username,
            password=hash_password(self.admin_password),
            role="admin",
            created_at=utcnow(),
        )

    def _next_id(self, table: str) -> str:
        return str(next(self._counters[table]))

    async def connect(self) -> None:
        return None

    async def close(self) -> None:
        return None

    def _insert(self, table: str, record_cls: type[R], data: dict, *, updated: bool = False) -> R:
        id = self._next_id(table)
        now = utcnow()
        fields = {**data, "id": id, "created_at": now}
        if updated:
            fields["updated_at"] = now
        record = record_cls(**fields)
        getattr(self, table)[id] = record
        return record.model_copy(deep=True)

    def _patch(self, table: str, entity: str, id: str, changes: dict):
        existing = getattr(self, table).get(id)
        if existing is None:
            raise NotFoundError(entity, id)
        fields = {**existing.model_dump(), **changes}
        if "updated_at" in type(existing).model_fields:
            fields["updated_at"] = max(utcnow(), existing.updated_at)
        updated = type(existing)(**fields)
        getattr(self, table)[id] = updated
        return updated.model_copy(deep=True)

    def _remove(self, table: str, entity: str, id: str) -> None:
        if getattr(self, table).pop(id, None) is None:
            raise NotFoundError(entity, id)

    def _get(self, table: str, id: str):
        record = getattr(self, table).get(str(id))
        return record.model_copy(deep=True) if record else None

    # ────────────── Users ──────────────
    async def get_user(self, id: str) -> Optional[User]:
        return self._get("users", id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        for user in self.users.values():
            if user.username == username:
                return user.model_copy()
        return None

    async def create_user(self, data: UserCreate) -> User:
        if await self.get_user_by_username(data.username):
            raise DuplicateError("username", data.username)
        return self._insert("users", User, data.model_dump())

    async def get_users(self) -> list[User]:
        return [u.model_copy() for u in newest_first(self.users.values())]

    async def update_user(self, id: str, changes: dict) -> User:
        username = changes.get("username")
        if username:
            other = await self.get_user_by_username(username)
            if other and other.id != id:
                raise DuplicateError("username", username)
        return self._patch("users", "User", id, changes)

    async def delete_user(self, id: str) -> None:
        self._remove("users", "User", id)

    # ────────────── Leads ──────────────
    async def create_contact(self, data: ContactCreate) -> Contact:
        return self._insert("contacts", Contact, data.model_dump())

    async def get_contacts(self) -> list[Contact]:
        return [c.model_copy() for c in newest_first(self.contacts.values())]

    async def create_enrollment(self, data: EnrollmentCreate) -> Enrollment:
        return self._insert("enrollments", Enrollment, data.model_dump())

    async def get_enrollments(self) -> list[Enrollment]:
        return [e.model_copy() for e in newest_first(self.enrollments.values())]

    # ────────────── Blog posts ──────────────
    async def create_blog_post(self, data: BlogPostCreate) -> BlogPost:
        return self._insert("blog_posts", BlogPost, data.model_dump(), updated=True)

    async def get_blog_posts(self, published: Optional[bool] = None) -> list[BlogPost]:
        posts = self.blog_posts.values()
        if published is not None:
            flag = 1 if published else 0
            posts = [p for p in posts if p.published == flag]
        return [p.model_copy(deep=True) for p in newest_first(posts)]

    async def get_blog_post(self, id: str) -> Optional[BlogPost]:
        return self._get("blog_posts", id)

    async def update_blog_post(self, id: str, changes: dict) -> BlogPost:
        return self._patch("blog_posts", "Blog post", id, changes)

    async def delete_blog_post(self, id: str) -> None:
        self._remove("blog_posts", "Blog post", id)

    # ────────────── Dynamic forms ──────────────
    async def create_dynamic_form(self, data: DynamicFormCreate) -> DynamicForm:
        return self._insert("dynamic_forms", DynamicForm, data.model_dump(), updated=True)

    async def get_dynamic_forms(self, active: Optional[bool] = None) -> list[DynamicForm]:
        forms = self.dynamic_forms.values()
        if active is not None:
            flag = 1 if active else 0
            forms = [f for f in forms if f.active == flag]
        return [f.model_copy(deep=True) for f in newest_first(forms)]

    async def get_dynamic_form(self, id: str) -> Optional[DynamicForm]:
        return self._get("dynamic_forms", id)

    async def update_dynamic_form(self, id: str, changes: dict) -> DynamicForm:
        return self._patch("dynamic_forms", "Dynamic form", id, changes)

    async def delete_dynamic_form(self, id: str) -> None:
        self._remove("dynamic_forms", "Dynamic form", id)

    # ────────────── Form submissions ──────────────
    async def create_form_submission(self, data: FormSubmissionCreate) -> FormSubmission:
        return self._insert("form_submissions", FormSubmission, data.model_dump())

    async def get_form_submissions(self, form_id: Optional[str] = None) -> list[FormSubmission]:
        submissions = self.form_submissions.values()
        if form_id is not None:
            submissions = [s for s in submissions if s.form_id == str(form_id)]
        return [s.model_copy(deep=True) for s in newest_first(submissions)]
