"""Tests for default-admin bootstrap, the create_user CLI and settings validation."""

import unittest
from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient
from pydantic import SecretStr, ValidationError

from layout_library.core.config import Settings, settings
from layout_library.core.database import SessionLocal
from layout_library.main import app
from layout_library.models import User
from layout_library.scripts.create_user import main as create_user_main
from layout_library.services.accounts import ensure_default_admin, find_conflicting_user
from tests.support import make_user, reset_database


def _bootstrap_settings() -> MagicMock:
    fake = MagicMock()
    fake.DEFAULT_ADMIN_USERNAME = "admin"
    fake.DEFAULT_ADMIN_EMAIL = "admin@busylayout.com"
    fake.DEFAULT_ADMIN_PASSWORD = SecretStr("admin123")
    return fake


class TestEnsureDefaultAdmin(unittest.TestCase):
    """The default admin is created once, only when no admin exists."""

    def setUp(self) -> None:
        reset_database()
        self.db = SessionLocal()

    def tearDown(self) -> None:
        self.db.close()

    def test_creates_admin_when_none(self) -> None:
        user = ensure_default_admin(self.db, _bootstrap_settings())
        self.assertIsNotNone(user)
        self.assertEqual(user.role, "admin")
        self.assertTrue(user.is_active)
        self.assertTrue(user.check_password("admin123"))

    def test_second_call_is_noop(self) -> None:
        ensure_default_admin(self.db, _bootstrap_settings())
        self.assertIsNone(ensure_default_admin(self.db, _bootstrap_settings()))
        self.assertEqual(self.db.query(User).count(), 1)

    def test_existing_admin_skips(self) -> None:
        make_user("root", role="admin")
        self.assertIsNone(ensure_default_admin(self.db, _bootstrap_settings()))
        self.assertIsNone(self.db.query(User).filter(User.username == "admin").first())


class TestFindConflictingUser(unittest.TestCase):
    """Username or email collisions, optionally ignoring one account."""

    def setUp(self) -> None:
        reset_database()
        self.db = SessionLocal()
        self.alice = make_user("alice")

    def tearDown(self) -> None:
        self.db.close()

    def test_matches_either_field(self) -> None:
        self.assertIsNotNone(find_conflicting_user(self.db, "alice", "x@example.com"))
        self.assertIsNotNone(find_conflicting_user(self.db, "x", "alice@example.com"))
        self.assertIsNone(find_conflicting_user(self.db, "x", "x@example.com"))

    def test_excludes_self(self) -> None:
        self.assertIsNone(
            find_conflicting_user(self.db, "alice", "alice@example.com", exclude_id=self.alice)
        )


class TestCreateUserScript(unittest.TestCase):
    """python -m layout_library.scripts.create_user."""

    def setUp(self) -> None:
        reset_database()

    def _users(self) -> list[User]:
        db = SessionLocal()
        try:
            return db.query(User).all()
        finally:
            db.close()

    def test_creates_user(self) -> None:
        code = create_user_main(["bob", "bob@example.com", "secret123", "admin"])
        self.assertEqual(code, 0)
        users = self._users()
        self.assertEqual([(u.username, u.role) for u in users], [("bob", "admin")])

    def test_rejects_short_password(self) -> None:
        self.assertEqual(create_user_main(["bob", "bob@example.com", "123"]), 1)
        self.assertEqual(self._users(), [])

    def test_rejects_duplicate(self) -> None:
        make_user("bob")
        self.assertEqual(create_user_main(["bob", "other@example.com", "secret123"]), 1)

    def test_default_admin_flag(self) -> None:
        self.assertEqual(create_user_main(["--default-admin"]), 0)
        self.assertEqual(create_user_main(["--default-admin"]), 0)
        users = self._users()
        self.assertEqual(len(users), 1)
        self.assertEqual(users[0].role, "admin")


class TestSettingsValidation(unittest.TestCase):
    """Settings validators reject out-of-range values."""

    def test_defaults(self) -> None:
        s = Settings(_env_file=None, DATABASE_URL="sqlite://")
        self.assertEqual(s.max_upload_file_bytes, s.MAX_UPLOAD_FILE_MB * 1024 * 1024)

    def test_rejects_unknown_database(self) -> None:
        with self.assertRaises(ValidationError):
            Settings(_env_file=None, DATABASE_URL="mysql://localhost/db")

    def test_rejects_token_lifetime_over_seven_days(self) -> None:
        with self.assertRaises(ValidationError):
            Settings(_env_file=None, DATABASE_URL="sqlite://", JWT_EXPIRE_MINUTES=10081)

    def test_api_prefix_normalized(self) -> None:
        s = Settings(_env_file=None, DATABASE_URL="sqlite://", API_PREFIX="/library/")
        self.assertEqual(s.API_PREFIX, "/library")
        with self.assertRaises(ValidationError):
            Settings(_env_file=None, DATABASE_URL="sqlite://", API_PREFIX="library")


class TestStartupBootstrap(unittest.TestCase):
    """App startup creates the upload directory and, when enabled, the default admin."""

    def setUp(self) -> None:
        reset_database()

    def _admins(self) -> list[str]:
        db = SessionLocal()
        try:
            return [u.email for u in db.query(User).filter(User.role == "admin").all()]
        finally:
            db.close()

    def test_startup_creates_default_admin(self) -> None:
        with patch.object(settings, "BOOTSTRAP_ADMIN", True):
            with TestClient(app):
                pass
        self.assertEqual(self._admins(), [settings.DEFAULT_ADMIN_EMAIL])

    def test_startup_without_bootstrap(self) -> None:
        with TestClient(app):
            pass
        self.assertEqual(self._admins(), [])


if __name__ == "__main__":
    unittest.main()
