"""Test environment: must run before any layout_library import reads settings."""

import os
import tempfile

os.environ["APP_ENV"] = "dev"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-signing-secret-0123456789abcdef"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["BOOTSTRAP_ADMIN"] = "false"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="layout-library-tests-")
