"""Unit tests for layout_library.core.security: bcrypt hashing, JWT issue/verify and role predicates."""

import unittest
from datetime import timedelta

import jwt

from layout_library.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    is_admin_or_owner,
    is_valid_role,
    verify_password,
)
from layout_library.models import User


class TestPasswordHashing(unittest.TestCase):
    """hash_password is salted per call; verify_password accepts only the original plaintext."""

    def test_hash_is_not_plaintext(self) -> None:
        digest = hash_password("secret123")
        self.assertNotEqual(digest, "secret123")
        self.assertNotIn("secret123", digest)

    def test_two_hashes_differ(self) -> None:
        self.assertNotEqual(hash_password("secret123"), hash_password("secret123"))

    def test_verify(self) -> None:
        digest = hash_password("secret123")
        self.assertTrue(verify_password("secret123", digest))
        self.assertFalse(verify_password("secret124", digest))

    def test_verify_malformed_hash_is_false(self) -> None:
        self.assertFalse(verify_password("secret123", "not-a-bcrypt-hash"))


class TestUserPasswordProperty(unittest.TestCase):
    """Assigning User.password stores only the hash."""

    def test_setter_hashes(self) -> None:
        user = User(username="a", email="a@example.com", role="user")
        user.password = "secret123"
        self.assertNotEqual(user.password_hash, "secret123")
        self.assertTrue(user.check_password("secret123"))
        self.assertFalse(user.check_password("wrong-one"))

    def test_password_is_write_only(self) -> None:
        user = User(username="a", email="a@example.com", role="user")
        user.password = "secret123"
        with self.assertRaises(AttributeError):
            _ = user.password


class TestAccessToken(unittest.TestCase):
    """create_access_token / decode_access_token round trip, expiry and tampering."""

    def test_round_trip(self) -> None:
        payload = decode_access_token(create_access_token(sub=42))
        self.assertEqual(payload["sub"], "42")
        self.assertIn("exp", payload)
        self.assertIn("iat", payload)

    def test_default_validity_is_seven_days(self) -> None:
        payload = decode_access_token(create_access_token(sub=1))
        self.assertEqual(payload["exp"] - payload["iat"], 7 * 24 * 60 * 60)

    def test_expired_token_rejected(self) -> None:
        token = create_access_token(sub=1, expires_delta=timedelta(seconds=-1))
        with self.assertRaises(jwt.ExpiredSignatureError):
            decode_access_token(token)

    def test_wrong_signature_rejected(self) -> None:
        token = jwt.encode({"sub": "1"}, "another-signing-secret-0123456789abcdef", algorithm="HS256")
        with self.assertRaises(jwt.InvalidSignatureError):
            decode_access_token(token)

    def test_garbage_rejected(self) -> None:
        with self.assertRaises(jwt.PyJWTError):
            decode_access_token("not.a.token")


class TestRolePredicates(unittest.TestCase):
    """is_valid_role and is_admin_or_owner."""

    def test_valid_roles(self) -> None:
        self.assertTrue(is_valid_role("admin"))
        self.assertTrue(is_valid_role("user"))
        self.assertFalse(is_valid_role("superuser"))
        self.assertFalse(is_valid_role("Admin"))
        self.assertFalse(is_valid_role(None))

    def test_admin_passes_for_any_owner(self) -> None:
        self.assertTrue(is_admin_or_owner(1, "admin", 99))

    def test_owner_passes(self) -> None:
        self.assertTrue(is_admin_or_owner(5, "user", 5))
        self.assertTrue(is_admin_or_owner(5, "user", "5"))

    def test_other_user_denied(self) -> None:
        self.assertFalse(is_admin_or_owner(5, "user", 6))
        self.assertFalse(is_admin_or_owner(5, "user", None))


if __name__ == "__main__":
    unittest.main()
