"""
Create an account (e.g. first admin). Run from project root:
  python -m layout_library.scripts.create_user USERNAME EMAIL PASSWORD [role]
  python -m layout_library.scripts.create_user --default-admin
Example:
  python -m layout_library.scripts.create_user admin admin@example.com your-secure-password admin
"""
import argparse
import logging
import sys

from layout_library.core.config import get_settings
from layout_library.core.database import SessionLocal
from layout_library.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN
from layout_library.services.accounts import create_user, ensure_default_admin, find_conflicting_user

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Create a layout library account.")
    parser.add_argument(
        "--default-admin",
        action="store_true",
        help="Create the configured default admin if no admin exists",
    )
    parser.add_argument("username", nargs="?", help="Username (1-255 chars)")
    parser.add_argument("email", nargs="?", help="Email address")
    parser.add_argument("password", nargs="?", help=f"Password ({PASSWORD_MIN_LEN}+ chars)")
    parser.add_argument("role", nargs="?", default="user", choices=["user", "admin"])
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        if args.default_admin:
            settings = get_settings()
            if ensure_default_admin(db, settings) is None:
                logger.info("Admin user already exists; nothing to do.")
            else:
                logger.info("Default admin created: %s", settings.DEFAULT_ADMIN_EMAIL)
            return 0

        if not args.username or not args.email or not args.password:
            parser.error("username, email and password are required")
        username = args.username.strip()
        if not username or len(username) > 255:
            logger.error("Invalid username length.")
            return 1
        if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
            logger.error(
                "Password must be %s-%s characters.", PASSWORD_MIN_LEN, PASSWORD_MAX_LEN
            )
            return 1
        if find_conflicting_user(db, username, args.email) is not None:
            logger.error("User with email or username '%s' already exists.", username)
            return 1
        create_user(db, username, args.email, args.password, args.role)
        logger.info("Created user '%s' with role '%s'.", username, args.role)
        return 0
    except Exception as e:
        db.rollback()
        logger.exception("Creating user failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
