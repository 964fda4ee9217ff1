"""
Creates an administrator account.

Usage: python scripts/create_admin.py --email admin@bank.io --password secret
"""
import argparse
import sys
from pathlib import Path

# Make the project root importable when run from a checkout
sys.path.insert(0, str(Path(__file__).parent.parent))

from fundflow.config import settings
from fundflow.database import Base, SessionLocal, engine
from fundflow.exceptions import DuplicateIdentity
from fundflow.logging_config import setup_logging
from fundflow.services.admin_service import create_admin

import fundflow.models  # noqa: F401


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Create an administrator account")
    parser.add_argument("--email", default=settings.ADMIN_EMAIL, help="administrator email")
    parser.add_argument("--password", default=settings.ADMIN_PASSWORD, help="administrator password")
    parser.add_argument("--name", default=settings.ADMIN_NAME)
    parser.add_argument("--mobile", default=settings.ADMIN_MOBILE)
    args = parser.parse_args(argv)
    if not args.email or not args.password:
        parser.error("--email and --password are required (or set ADMIN_EMAIL / ADMIN_PASSWORD)")
    return args


def main(argv=None):
    args = parse_args(argv)
    logger = setup_logging(settings.LOG_LEVEL)

    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        admin_user = create_admin(db, args.name, args.email, args.password, args.mobile)
        logger.info("administrator %s created with id %s", admin_user.email, admin_user.id)
    except DuplicateIdentity:
        logger.error("a user with email %s already exists", args.email)
        return 1
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
