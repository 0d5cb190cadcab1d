import contextlib
import io
import unittest

from technurture.config import settings
from technurture.create_admin import create_admin, parse_args
from technurture.storage import close_storage


class CreateAdminTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        await close_storage()

    async def test_weak_password_is_refused(self):
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr):
            code = await create_admin("ops", "weak")
        self.assertEqual(code, 1)
        self.assertIn("at least 8 characters", stderr.getvalue())

    async def test_force_skips_the_policy(self):
        with contextlib.redirect_stdout(io.StringIO()) as stdout:
            code = await create_admin("ops", "weak", force=True)
        self.assertEqual(code, 0)
        self.assertIn("Admin 'ops' created on memory storage", stdout.getvalue())

    async def test_existing_user_is_reported(self):
        with contextlib.redirect_stdout(io.StringIO()) as stdout:
            code = await create_admin(settings.ADMIN_USERNAME, "Str0ng!Pass")
        self.assertEqual(code, 0)
        self.assertIn("already exists", stdout.getvalue())

    def test_arguments(self):
        args = parse_args(["--username", "ops", "--password", "x", "--force"])
        self.assertEqual((args.username, args.password, args.force), ("ops", "x", True))


if __name__ == "__main__":
    unittest.main()
