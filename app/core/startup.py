"""
Startup utilities for the application.
"""
import logging
from sqlalchemy import select, func, text
from sqlalchemy.exc import OperationalError, ProgrammingError

from app.core.config import settings
from app.core.database import engine, get_async_session_maker_instance
from app.core.security import get_password_hash
from app.models.registry import target_metadata
from app.models.user import User
from app.models.enums import Role

logger = logging.getLogger(__name__)


async def ensure_tables():
    """Create missing tables from the model metadata. Used when AUTO_CREATE_TABLES is set."""
    async with engine.begin() as conn:
        await conn.run_sync(target_metadata.create_all)
    logger.info("Database tables ensured")


async def ensure_users_table_exists(session):
    """Check if users table exists."""
    try:
        await session.execute(text("SELECT 1 FROM users LIMIT 1"))
        return True
    except (ProgrammingError, OperationalError):
        logger.warning("Users table not found. Please run 'alembic upgrade head' to create it.")
        return False


async def ensure_default_admin():
    """
    Create the default admin from DEFAULT_ADMIN_EMAIL / DEFAULT_ADMIN_PASSWORD
    when the users table holds no ADMIN.
    """
    try:
        async_session_maker = get_async_session_maker_instance()
        async with async_session_maker() as session:
            try:
                if not await ensure_users_table_exists(session):
                    return

                result = await session.execute(
                    select(func.count(User.id)).where(User.role == Role.ADMIN.value)
                )
                admin_count = result.scalar()

                if admin_count == 0:
                    logger.info("No admin found in database. Creating default admin...")
                    default_admin = User(
                        email=settings.DEFAULT_ADMIN_EMAIL.lower(),
                        name="Fleet Admin",
                        password_hash=get_password_hash(settings.DEFAULT_ADMIN_PASSWORD),
                        role=Role.ADMIN.value,
                        is_active=True,
                    )
                    session.add(default_admin)
                    await session.commit()
                    logger.info("Default admin created with email: %s", default_admin.email)
                else:
                    logger.info("Found %d admin(s) in database. Skipping default admin creation.", admin_count)

            except (OperationalError, ProgrammingError) as e:
                logger.warning(
                    "Database error during admin check/creation. Error: %s. "
                    "Please ensure database is accessible and migrations are run.", e
                )
            except Exception as e:
                logger.error("Unexpected error during admin check: %s", e, exc_info=True)

    except Exception as e:
        # The app still starts; the admin can be created by hand or via the seed script
        logger.error("Error during default admin creation: %s", e, exc_info=True)
