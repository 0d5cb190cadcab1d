"""
Relational backend on SQLAlchemy's asyncio extension.

Accepts any async SQLAlchemy URL: Postgres in production (asyncpg),
SQLite through aiosqlite for local runs and tests.
"""

from __future__ import annotations

from typing import Optional, TypeVar

from pydantic import BaseModel
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError

from technurture import models
from technurture.schemas.blog import BlogPost, BlogPostCreate
from technurture.schemas.form import (
    DynamicForm,
    DynamicFormCreate,
    FormSubmission,
    FormSubmissionCreate,
)
from technurture.schemas.lead import Contact, ContactCreate, Enrollment, EnrollmentCreate
from technurture.schemas.user import User, UserCreate
from technurture.storage.base import DuplicateError, NotFoundError, as_utc, utcnow
from technurture.utils.database import init_db, make_engine, make_session_factory

R = TypeVar("R", bound=BaseModel)


def to_pk(id: str) -> Optional[int]:
    try:
        return int(id)
    except (TypeError, ValueError):
        return None


def to_record(record_cls: type[R], row) -> R:
    data = {column.key: getattr(row, column.key) for column in row.__table__.columns}
    data["id"] = str(row.id)
    for key in ("created_at", "updated_at"):
        if key in data:
            data[key] = as_utc(data[key])
    return record_cls(**data)


class SqlStorage:
    """Table-per-entity store with serial integer ids."""

    name = "postgres"

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlStorage")
        self.engine = make_engine(database_url)
        self.Session = make_session_factory(self.engine)
        if self.engine.dialect.name == "sqlite":
            self.name = "sqlite"

    async def connect(self) -> None:
        await init_db(self.engine)

    async def close(self) -> None:
        await self.engine.dispose()

    # ────────────── generic helpers ──────────────
    async def _insert(self, row_cls, record_cls: type[R], data: dict, *, updated: bool = False) -> R:
        now = utcnow()
        row = row_cls(**data, created_at=now)
        if updated:
            row.updated_at = now
        async with self.Session() as session:
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return to_record(record_cls, row)

    async def _list(self, row_cls, record_cls: type[R], *criteria) -> list[R]:
        stmt = select(row_cls)
        if criteria:
            stmt = stmt.where(*criteria)
        stmt = stmt.order_by(row_cls.created_at.desc(), row_cls.id.desc())
        async with self.Session() as session:
            rows = (await session.execute(stmt)).scalars().all()
            return [to_record(record_cls, row) for row in rows]

    async def _get(self, row_cls, record_cls: type[R], id: str) -> Optional[R]:
        pk = to_pk(id)
        if pk is None:
            return None
        async with self.Session() as session:
            row = await session.get(row_cls, pk)
            return to_record(record_cls, row) if row else None

    async def _update(self, row_cls, record_cls: type[R], entity: str, id: str, changes: dict) -> R:
        pk = to_pk(id)
        if pk is None:
            raise NotFoundError(entity, id)
        async with self.Session() as session:
            row = await session.get(row_cls, pk)
            if row is None:
                raise NotFoundError(entity, id)
            for key, value in changes.items():
                setattr(row, key, value)
            if hasattr(row_cls, "updated_at"):
                previous = as_utc(row.updated_at)
                now = utcnow()
                row.updated_at = max(now, previous) if previous else now
            await session.commit()
            await session.refresh(row)
            return to_record(record_cls, row)

    async def _delete(self, row_cls, entity: str, id: str) -> None:
        pk = to_pk(id)
        if pk is None:
            raise NotFoundError(entity, id)
        async with self.Session() as session:
            result = await session.execute(delete(row_cls).where(row_cls.id == pk))
            await session.commit()
            if not result.rowcount:
                raise NotFoundError(entity, id)

    # ────────────── Users ──────────────
    async def get_user(self, id: str) -> Optional[User]:
        return await self._get(models.User, User, id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        async with self.Session() as session:
            result = await session.execute(select(models.User).where(models.User.username == username))
            row = result.scalar_one_or_none()
            return to_record(User, row) if row else None

    async def create_user(self, data: UserCreate) -> User:
        try:
            return await self._insert(models.User, User, data.model_dump())
        except IntegrityError:
            raise DuplicateError("username", data.username)

    async def get_users(self) -> list[User]:
        return await self._list(models.User, User)

    async def update_user(self, id: str, changes: dict) -> User:
        try:
            return await self._update(models.User, User, "User", id, changes)
        except IntegrityError:
            raise DuplicateError("username", changes.get("username", ""))

    async def delete_user(self, id: str) -> None:
        await self._delete(models.User, "User", id)

    # ────────────── Leads ──────────────
    async def create_contact(self, data: ContactCreate) -> Contact:
        return await self._insert(models.Contact, Contact, data.model_dump())

    async def get_contacts(self) -> list[Contact]:
        return await self._list(models.Contact, Contact)

    async def create_enrollment(self, data: EnrollmentCreate) -> Enrollment:
        return await self._insert(models.Enrollment, Enrollment, data.model_dump())

    async def get_enrollments(self) -> list[Enrollment]:
        return await self._list(models.Enrollment, Enrollment)

    # ────────────── Blog posts ──────────────
    async def create_blog_post(self, data: BlogPostCreate) -> BlogPost:
        return await self._insert(models.BlogPost, BlogPost, data.model_dump(), updated=True)

    async def get_blog_posts(self, published: Optional[bool] = None) -> list[BlogPost]:
        criteria = []
        if published is not None:
            criteria.append(models.BlogPost.published == (1 if published else 0))
        return await self._list(models.BlogPost, BlogPost, *criteria)

    async def get_blog_post(self, id: str) -> Optional[BlogPost]:
        return await self._get(models.BlogPost, BlogPost, id)

    async def update_blog_post(self, id: str, changes: dict) -> BlogPost:
        return await self._update(models.BlogPost, BlogPost, "Blog post", id, changes)

    async def delete_blog_post(self, id: str) -> None:
        await self._delete(models.BlogPost, "Blog post", id)

    # ────────────── Dynamic forms ──────────────
    async def create_dynamic_form(self, data: DynamicFormCreate) -> DynamicForm:
        return await self._insert(models.DynamicForm, DynamicForm, data.model_dump(), updated=True)

    async def get_dynamic_forms(self, active: Optional[bool] = None) -> list[DynamicForm]:
        criteria = []
        if active is not None:
            criteria.append(models.DynamicForm.active == (1 if active else 0))
        return await self._list(models.DynamicForm, DynamicForm, *criteria)

    async def get_dynamic_form(self, id: str) -> Optional[DynamicForm]:
        return await self._get(models.DynamicForm, DynamicForm, id)

    async def update_dynamic_form(self, id: str, changes: dict) -> DynamicForm:
        return await self._update(models.DynamicForm, DynamicForm, "Dynamic form", id, changes)

    async def delete_dynamic_form(self, id: str) -> None:
        await self._delete(models.DynamicForm, "Dynamic form", id)

    # ────────────── Form submissions ──────────────
    async def create_form_submission(self, data: FormSubmissionCreate) -> FormSubmission:
        return await self._insert(models.FormSubmission, FormSubmission, data.model_dump())

    async def get_form_submissions(self, form_id: Optional[str] = None) -> list[FormSubmission]:
        criteria = []
        if form_id is not None:
            criteria.append(models.FormSubmission.form_id == str(form_id))
        return await self._list(models.FormSubmission, FormSubmission, *criteria)
