"""
Create the admin account if it does not exist yet.

    ADMIN_EMAIL=... ADMIN_PASSWORD=... python -m app.seed_admin
"""
import logging
import os
import sys

from dotenv import load_dotenv

from app.core.config import get_settings
from app.core.database import build_engine, build_session_factory, init_db
from app.core.security import AccessPolicy
from app.services.auth_service import AuthService

logger = logging.getLogger(__name__)


def main() -> int:
    load_dotenv()
    logging.basicConfig(level=logging.INFO)

    email = os.getenv("ADMIN_EMAIL")
    password = os.getenv("ADMIN_PASSWORD")
    if not email or not password:
        logger.error("ADMIN_EMAIL and ADMIN_PASSWORD must be set")
        return 1

    settings = get_settings()
    engine = build_engine(settings)
    init_db(engine)

    db = build_session_factory(engine)()
    try:
        admin = AuthService(db, AccessPolicy(settings)).ensure_admin(email, password)
    finally:
        db.close()
        engine.dispose()

    if admin is None:
        logger.info("Admin already exists.")
    else:
        logger.info("Admin created successfully (id %s)", admin.id)
    return 0


if __name__ == "__main__":
    sys.exit(main())
