"""
Document backend on motor (async MongoDB driver).

Documents keep the camelCase field names the API speaks; ids are ObjectId
hex strings.
"""

from __future__ import annotations

from typing import Optional, TypeVar

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorClient
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

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

R = TypeVar("R", bound=BaseModel)

NEWEST_FIRST = [("createdAt", DESCENDING), ("_id", DESCENDING)]
COLLECTIONS = ("users", "contacts", "enrollments", "blog_posts", "dynamic_forms", "form_submissions")


def to_oid(id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(str(id))
    except (InvalidId, TypeError):
        return None


def to_record(record_cls: type[R], doc: dict) -> R:
    data = {k: v for k, v in doc.items() if k != "_id"}
    data["id"] = str(doc["_id"])
    for key in ("createdAt", "updatedAt"):
        if key in data:
            data[key] = as_utc(data[key])
    return record_cls.model_validate(data)


def to_document(changes: dict) -> dict:
    return {to_camel(k): v for k, v in changes.items()}


class MongoStorage:
    """Collection-per-entity store."""

    name = "mongodb"

    def __init__(self, uri: str | None = None, db_name: str = "technurture", client=None):
        if client is None:
            if not uri:
                raise ValueError("MONGODB_URI is required for MongoStorage")
            client = AsyncIOMotorClient(uri, serverSelectionTimeoutMS=5000)
        self.client = client
        self.db = client[db_name]

    async def connect(self) -> None:
        await self.client.admin.command("ping")
        await self.ensure_indexes()

    async def ensure_indexes(self) -> None:
        await self.db.users.create_index("username", unique=True)
        for name in COLLECTIONS:
            await self.db[name].create_index([("createdAt", DESCENDING)])
        await self.db.form_submissions.create_index("formId")

    async def close(self) -> None:
        self.client.close()

    # ────────────── generic helpers ──────────────
    async def _insert(self, collection: str, record_cls: type[R], data: BaseModel, *, updated: bool = False) -> R:
        now = utcnow()
        doc = data.model_dump(by_alias=True)
        doc["createdAt"] = now
        if updated:
            doc["updatedAt"] = now
        result = await self.db[collection].insert_one(doc)
        doc["_id"] = result.inserted_id
        return to_record(record_cls, doc)

    async def _list(self, collection: str, record_cls: type[R], query: dict | None = None) -> list[R]:
        cursor = self.db[collection].find(query or {}).sort(NEWEST_FIRST)
        return [to_record(record_cls, doc) async for doc in cursor]

    async def _get(self, collection: str, record_cls: type[R], id: str) -> Optional[R]:
        oid = to_oid(id)
        if oid is None:
            return None
        doc = await self.db[collection].find_one({"_id": oid})
        return to_record(record_cls, doc) if doc else None

    async def _update(self, collection: str, record_cls: type[R], entity: str, id: str, changes: dict, *, touch: bool = True) -> R:
        oid = to_oid(id)
        if oid is None:
            raise NotFoundError(entity, id)
        update = to_document(changes)
        if touch:
            update["updatedAt"] = utcnow()
        doc = await self.db[collection].find_one_and_update(
            {"_id": oid},
            {"$set": update},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise NotFoundError(entity, id)
        return to_record(record_cls, doc)

    async def _delete(self, collection: str, entity: str, id: str) -> None:
        oid = to_oid(id)
        if oid is None:
            raise NotFoundError(entity, id)
        result = await self.db[collection].delete_one({"_id": oid})
        if not result.deleted_count:
            raise NotFoundError(entity, id)

    # ────────────── Users ──────────────
    async def get_user(self, id: str) -> Optional[User]:
        return await self._get("users", User, id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        doc = await self.db.users.find_one({"username": username})
        return to_record(User, doc) if doc else None

    async def create_user(self, data: UserCreate) -> User:
        try:
            return await self._insert("users", User, data)
        except DuplicateKeyError:
            raise DuplicateError("username", data.username)

    async def get_users(self) -> list[User]:
        return await self._list("users", User)

    async def update_user(self, id: str, changes: dict) -> User:
        try:
            return await self._update("users", User, "User", id, changes, touch=False)
        except DuplicateKeyError:
            raise DuplicateError("username", changes.get("username", ""))

    async def delete_user(self, id: str) -> None:
        await self._delete("users", "User", id)

    # ────────────── Leads ──────────────
    async def create_contact(self, data: ContactCreate) -> Contact:
        return await self._insert("contacts", Contact, data)

    async def get_contacts(self) -> list[Contact]:
        return await self._list("contacts", Contact)

    async def create_enrollment(self, data: EnrollmentCreate) -> Enrollment:
        return await self._insert("enrollments", Enrollment, data)

    async def get_enrollments(self) -> list[Enrollment]:
        return await self._list("enrollments", Enrollment)

    # ────────────── Blog posts ──────────────
    async def create_blog_post(self, data: BlogPostCreate) -> BlogPost:
        return await self._insert("blog_posts", BlogPost, data, updated=True)

    async def get_blog_posts(self, published: Optional[bool] = None) -> list[BlogPost]:
        query = {} if published is None else {"published": 1 if published else 0}
        return await self._list("blog_posts", BlogPost, query)

    async def get_blog_post(self, id: str) -> Optional[BlogPost]:
        return await self._get("blog_posts", BlogPost, id)

    async def update_blog_post(self, id: str, changes: dict) -> BlogPost:
        return await self._update("blog_posts", BlogPost, "Blog post", id, changes)

    async def delete_blog_post(self, id: str) -> None:
        await self._delete("blog_posts", "Blog post", id)

    # ────────────── Dynamic forms ──────────────
    async def create_dynamic_form(self, data: DynamicFormCreate) -> DynamicForm:
        return await self._insert("dynamic_forms", DynamicForm, data, updated=True)

    async def get_dynamic_forms(self, active: Optional[bool] = None) -> list[DynamicForm]:
        query = {} if active is None else {"active": 1 if active else 0}
        return await self._list("dynamic_forms", DynamicForm, query)

    async def get_dynamic_form(self, id: str) -> Optional[DynamicForm]:
        return await self._get("dynamic_forms", DynamicForm, id)

    async def update_dynamic_form(self, id: str, changes: dict) -> DynamicForm:
        return await self._update("dynamic_forms", DynamicForm, "Dynamic form", id, changes)

    async def delete_dynamic_form(self, id: str) -> None:
        await self._delete("dynamic_forms", "Dynamic form", id)

    # ────────────── Form submissions ──────────────
    async def create_form_submission(self, data: FormSubmissionCreate) -> FormSubmission:
        return await self._insert("form_submissions", FormSubmission, data)

    async def get_form_submissions(self, form_id: Optional[str] = None) -> list[FormSubmission]:
        query = {} if form_id is None else {"formId": str(form_id)}
        return await self._list("form_submissions", FormSubmission, query)
