import os
import shutil
import tempfile
import unittest

from bson import ObjectId
from mongomock_motor import AsyncMongoMockClient

from technurture.schemas.blog import BlogPostCreate
from technurture.schemas.form import DynamicFormCreate, FormSubmissionCreate
from technurture.schemas.lead import ContactCreate, EnrollmentCreate
from technurture.schemas.user import UserCreate
from technurture.storage import DuplicateError, NotFoundError
from technurture.storage.memory import MemoryStorage
from technurture.storage.mongo import MongoStorage
from technurture.storage.sql import SqlStorage


def blog_post(title: str, published: int = 0) -> BlogPostCreate:
    return BlogPostCreate(
        title=title,
        content=f"<p>{title}</p>",
        author="TechNurture Team",
        category="Web Development",
        read_time="5 min read",
        published=published,
    )


SIGNUP_FIELDS = [
    {"id": "name", "type": "text", "label": "Full name", "required": True},
    {"id": "track", "type": "select", "label": "Track", "options": ["Frontend", "Backend"]},
]


class StorageContract:
    """Behaviour every backend must share. Subclasses provide self.storage and missing_id."""

    missing_id = "999999"

    async def test_duplicate_username_is_rejected(self):
        await self.storage.create_user(UserCreate(username="alice", password="hash-1"))
        with self.assertRaises(DuplicateError):
            await self.storage.create_user(UserCreate(username="alice", password="hash-2"))

    async def test_user_lookup_by_id_and_name(self):
        created = await self.storage.create_user(UserCreate(username="bob", password="hash", role="admin"))
        self.assertIsInstance(created.id, str)

        by_id = await self.storage.get_user(created.id)
        by_name = await self.storage.get_user_by_username("bob")
        self.assertEqual(by_id.username, "bob")
        self.assertEqual(by_name.id, created.id)
        self.assertEqual(by_name.role, "admin")
        self.assertIsNone(await self.storage.get_user(self.missing_id))
        self.assertIsNone(await self.storage.get_user("not-an-id"))
        self.assertIsNone(await self.storage.get_user_by_username("nobody"))

    async def test_user_update_and_delete(self):
        created = await self.storage.create_user(UserCreate(username="carol", password="hash"))
        updated = await self.storage.update_user(created.id, {"role": "admin"})
        self.assertEqual(updated.role, "admin")
        self.assertEqual(updated.username, "carol")

        await self.storage.delete_user(created.id)
        self.assertIsNone(await self.storage.get_user(created.id))
        with self.assertRaises(NotFoundError):
            await self.storage.delete_user(created.id)

    async def test_contacts_come_back_newest_first(self):
        await self.storage.create_contact(ContactCreate(name="Old", email="old@example.com", message="first"))
        await self.storage.create_contact(
            ContactCreate(name="Jane", email="jane@example.com", message="Hi", newsletter=True)
        )

        contacts = await self.storage.get_contacts()
        self.assertEqual([c.name for c in contacts], ["Jane", "Old"])
        self.assertEqual(contacts[0].newsletter, 1)
        self.assertIsNone(contacts[0].phone)

    async def test_enrollments_are_stored(self):
        created = await self.storage.create_enrollment(
            EnrollmentCreate(name="Sam", email="sam@example.com", course="Frontend Bootcamp")
        )
        enrollments = await self.storage.get_enrollments()
        self.assertEqual(len(enrollments), 1)
        self.assertEqual(enrollments[0].id, created.id)
        self.assertEqual(enrollments[0].course, "Frontend Bootcamp")

    async def test_blog_published_filter(self):
        await self.storage.create_blog_post(blog_post("Draft", published=0))
        await self.storage.create_blog_post(blog_post("Live", published=1))

        published = await self.storage.get_blog_posts(True)
        drafts = await self.storage.get_blog_posts(False)
        everything = await self.storage.get_blog_posts()

        self.assertEqual([p.title for p in published], ["Live"])
        self.assertEqual([p.title for p in drafts], ["Draft"])
        self.assertEqual([p.title for p in everything], ["Live", "Draft"])

    async def test_blog_partial_update_keeps_other_fields(self):
        created = await self.storage.create_blog_post(blog_post("Original"))
        updated = await self.storage.update_blog_post(created.id, {"title": "X"})

        self.assertEqual(updated.title, "X")
        self.assertEqual(updated.content, created.content)
        self.assertEqual(updated.author, created.author)
        self.assertEqual(updated.read_time, "5 min read")
        self.assertEqual(updated.created_at, created.created_at)
        self.assertGreaterEqual(updated.updated_at, created.updated_at)

        fetched = await self.storage.get_blog_post(created.id)
        self.assertEqual(fetched.title, "X")

    async def test_missing_blog_post(self):
        self.assertIsNone(await self.storage.get_blog_post(self.missing_id))
        with self.assertRaises(NotFoundError):
            await self.storage.update_blog_post(self.missing_id, {"title": "X"})
        with self.assertRaises(NotFoundError):
            await self.storage.delete_blog_post(self.missing_id)

    async def test_blog_delete(self):
        created = await self.storage.create_blog_post(blog_post("Gone soon"))
        await self.storage.delete_blog_post(created.id)
        self.assertIsNone(await self.storage.get_blog_post(created.id))
        self.assertEqual(await self.storage.get_blog_posts(), [])

    async def test_dynamic_forms(self):
        inactive = await self.storage.create_dynamic_form(
            DynamicFormCreate(title="Old cohort", type="course", fields=SIGNUP_FIELDS, active=0)
        )
        active = await self.storage.create_dynamic_form(
            DynamicFormCreate(title="Spring cohort", type="course", fields=SIGNUP_FIELDS)
        )

        self.assertEqual([f.id for f in await self.storage.get_dynamic_forms(True)], [active.id])
        self.assertEqual([f.id for f in await self.storage.get_dynamic_forms(False)], [inactive.id])

        fetched = await self.storage.get_dynamic_form(active.id)
        self.assertEqual(fetched.fields[1].options, ["Frontend", "Backend"])
        self.assertTrue(fetched.fields[0].required)

        updated = await self.storage.update_dynamic_form(active.id, {"active": 0})
        self.assertEqual(updated.active, 0)
        self.assertEqual(updated.title, "Spring cohort")
        self.assertGreaterEqual(updated.updated_at, active.updated_at)

        await self.storage.delete_dynamic_form(inactive.id)
        self.assertIsNone(await self.storage.get_dynamic_form(inactive.id))
        with self.assertRaises(NotFoundError):
            await self.storage.update_dynamic_form(self.missing_id, {"title": "X"})

    async def test_submissions_filter_by_form(self):
        await self.storage.create_form_submission(
            FormSubmissionCreate(form_id="f1", submission_data={"name": "Ada", "track": "Backend"})
        )
        await self.storage.create_form_submission(FormSubmissionCreate(form_id="f2", submission_data={"name": "Lin"}))
        await self.storage.create_form_submission(FormSubmissionCreate(form_id="f1", submission_data={"name": "Bo"}))

        for_f1 = await self.storage.get_form_submissions("f1")
        self.assertEqual([s.submission_data["name"] for s in for_f1], ["Bo", "Ada"])
        self.assertEqual(len(await self.storage.get_form_submissions()), 3)
        self.assertEqual(await self.storage.get_form_submissions("nope"), [])


class MemoryStorageTests(StorageContract, unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.storage = MemoryStorage()

    async def test_seeds_hashed_admin(self):
        storage = MemoryStorage("admin", "admin123")
        admin = await storage.get_user_by_username("admin")
        self.assertEqual(admin.role, "admin")
        self.assertNotEqual(admin.password, "admin123")

    async def test_returned_records_are_copies(self):
        created = await self.storage.create_blog_post(blog_post("Mine"))
        created.title = "Mutated"
        self.assertEqual((await self.storage.get_blog_post(created.id)).title, "Mine")

    async def test_reset_clears_records(self):
        await self.storage.create_contact(ContactCreate(name="Jane", email="jane@example.com", message="Hi"))
        self.storage.reset()
        self.assertEqual(await self.storage.get_contacts(), [])


class SqlStorageTests(StorageContract, unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.storage = SqlStorage(f"sqlite:///{os.path.join(self.tmpdir, 'technurture.db')}")
        await self.storage.connect()

    async def asyncTearDown(self):
        await self.storage.close()
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    async def test_reports_dialect_name(self):
        self.assertEqual(self.storage.name, "sqlite")


class MongoStorageTests(StorageContract, unittest.IsolatedAsyncioTestCase):
    missing_id = str(ObjectId())

    async def asyncSetUp(self):
        self.storage = MongoStorage(client=AsyncMongoMockClient(), db_name="technurture_test")
        await self.storage.ensure_indexes()

    async def test_documents_use_camel_case(self):
        created = await self.storage.create_blog_post(blog_post("Stored"))
        doc = await self.storage.db.blog_posts.find_one({"_id": ObjectId(created.id)})
        self.assertIn("readTime", doc)
        self.assertIn("createdAt", doc)
        self.assertNotIn("read_time", doc)


if __name__ == "__main__":
    unittest.main()
