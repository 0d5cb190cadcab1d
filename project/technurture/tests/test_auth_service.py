import unittest
from datetime import timedelta

from technurture.config import Settings
from technurture.schemas.user import UserCreate
from technurture.services.auth import ACCESS, REFRESH, AuthError, AuthService, derive_key
from technurture.storage.memory import MemoryStorage


def make_service() -> AuthService:
    return AuthService(jwt_secret="unit-test-secret", encryption_key="11" * 32)


class PasswordPolicyTests(unittest.TestCase):
    def setUp(self):
        self.service = make_service()

    def test_strong_password_passes(self):
        result = self.service.validate_password("Str0ng!Pass")
        self.assertTrue(result.is_valid)
        self.assertEqual(result.errors, [])
        self.assertEqual(result.to_json(), {"isValid": True, "errors": []})

    def test_each_missing_rule_is_reported(self):
        cases = {
            "Sh0rt!": "at least 8 characters",
            "nouppercase1!": "uppercase",
            "NOLOWERCASE1!": "lowercase",
            "NoDigitsHere!": "number",
            "NoSymbols123": "special character",
        }
        for password, fragment in cases.items():
            with self.subTest(password=password):
                result = self.service.validate_password(password)
                self.assertFalse(result.is_valid)
                self.assertEqual(len(result.errors), 1)
                self.assertIn(fragment, result.errors[0])

    def test_hash_verifies_only_the_original(self):
        hashed = self.service.hash_password("Str0ng!Pass")
        self.assertNotEqual(hashed, "Str0ng!Pass")
        self.assertTrue(self.service.verify_password("Str0ng!Pass", hashed))
        self.assertFalse(self.service.verify_password("Str0ng!Pas", hashed))
        self.assertFalse(self.service.verify_password("Str0ng!Pass", ""))


class TokenTests(unittest.TestCase):
    def setUp(self):
        self.service = make_service()
        self.user = {"id": "7", "username": "alice", "role": "admin"}

    def test_generated_tokens_verify_with_their_type(self):
        tokens = self.service.generate_tokens(self.user)

        access = self.service.verify_token(tokens.access_token, expected_type=ACCESS)
        self.assertIsNotNone(access)
        self.assertEqual(access.user_id, "7")
        self.assertEqual(access.username, "alice")
        self.assertEqual(access.role, "admin")
        self.assertIsNotNone(access.jti)

        refresh = self.service.verify_token(tokens.refresh_token, expected_type=REFRESH)
        self.assertEqual(refresh.type, REFRESH)

    def test_refresh_token_is_not_an_access_token(self):
        tokens = self.service.generate_tokens(self.user)
        self.assertIsNone(self.service.verify_token(tokens.refresh_token, expected_type=ACCESS))
        self.assertIsNone(self.service.verify_token(tokens.access_token, expected_type=REFRESH))

    def test_expired_token_is_rejected(self):
        token = self.service.issue_token(self.user, ACCESS, expires_delta=timedelta(seconds=-5))
        self.assertIsNone(self.service.verify_token(token))

    def test_foreign_signature_is_rejected(self):
        other = AuthService(jwt_secret="someone-else", encryption_key="22" * 32)
        token = other.issue_token(self.user, ACCESS)
        self.assertIsNone(self.service.verify_token(token))
        self.assertIsNone(self.service.verify_token("not-a-jwt"))


class EncryptionTests(unittest.TestCase):
    def test_encrypt_then_decrypt(self):
        service = make_service()
        first = service.encrypt_data("+44 7700 900123")
        second = service.encrypt_data("+44 7700 900123")
        self.assertNotEqual(first, second)
        self.assertEqual(service.decrypt_data(first), "+44 7700 900123")

    def test_hex_key_is_used_as_is(self):
        self.assertEqual(derive_key("ab" * 32), bytes.fromhex("ab" * 32))

    def test_passphrase_key_is_derived(self):
        service = AuthService.from_settings(
            Settings(_env_file=None, JWT_SECRET="x", ENCRYPTION_KEY="my-encryption-secret")
        )
        key = derive_key("my-encryption-secret")
        self.assertEqual(len(key), 32)
        self.assertEqual(key, derive_key("my-encryption-secret"))
        self.assertEqual(service.decrypt_data(service.encrypt_data("hello")), "hello")

    def test_short_hex_key_is_derived_not_rejected(self):
        service = AuthService(jwt_secret="x", encryption_key="abcd")
        self.assertEqual(service.decrypt_data(service.encrypt_data("hello")), "hello")

    def test_session_ids_are_random_hex(self):
        first, second = AuthService.generate_session_id(), AuthService.generate_session_id()
        self.assertEqual(len(first), 64)
        self.assertNotEqual(first, second)


class AuthenticateUserTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.service = make_service()
        self.storage = MemoryStorage()
        await self.storage.create_user(
            UserCreate(username="alice", password=self.service.hash_password("Str0ng!Pass"), role="admin")
        )

    async def test_valid_credentials_return_sanitized_user(self):
        user = await self.service.authenticate_user(self.storage, "alice", "Str0ng!Pass")
        self.assertEqual(user, {"id": "1", "username": "alice", "role": "admin"})

    async def test_whitespace_is_trimmed(self):
        user = await self.service.authenticate_user(self.storage, "  alice ", " Str0ng!Pass\n")
        self.assertIsNotNone(user)

    async def test_wrong_password_and_unknown_user_look_the_same(self):
        wrong = await self.service.authenticate_user(self.storage, "alice", "nope")
        unknown = await self.service.authenticate_user(self.storage, "bob", "Str0ng!Pass")
        self.assertIsNone(wrong)
        self.assertIsNone(unknown)

    async def test_refresh_issues_access_token_with_stored_role(self):
        tokens = self.service.generate_tokens({"id": "1", "username": "alice", "role": "admin"})
        await self.storage.update_user("1", {"role": "user"})

        access = await self.service.refresh_access_token(self.storage, tokens.refresh_token)
        payload = self.service.verify_token(access, expected_type=ACCESS)
        self.assertEqual(payload.username, "alice")
        self.assertEqual(payload.role, "user")

    async def test_refresh_rejects_access_token_and_deleted_user(self):
        tokens = self.service.generate_tokens({"id": "1", "username": "alice", "role": "admin"})
        with self.assertRaisesRegex(AuthError, "Invalid refresh token"):
            await self.service.refresh_access_token(self.storage, tokens.access_token)

        await self.storage.delete_user("1")
        with self.assertRaisesRegex(AuthError, "User not found"):
            await self.service.refresh_access_token(self.storage, tokens.refresh_token)


if __name__ == "__main__":
    unittest.main()
