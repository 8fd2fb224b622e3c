# src/sitecms/core/initial_data.py
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.sitecms.core.config import Settings
from src.sitecms.crud import admin as crud_admin
from src.sitecms.models.admin import Admin

logger = logging.getLogger(__name__)


async def init_super_admin(session: AsyncSession, settings: Settings) -> Admin | None:
    """Create the bootstrap superadmin from FIRST_SUPERUSER_* unless it already exists."""
    if not settings.FIRST_SUPERUSER_EMAIL or not settings.FIRST_SUPERUSER_PASSWORD:
        logger.warning("FIRST_SUPERUSER_EMAIL/PASSWORD not set, skipping superadmin bootstrap")
        return None

    superadmin = await crud_admin.ensure_superuser(
        session, settings.FIRST_SUPERUSER_EMAIL, settings.FIRST_SUPERUSER_PASSWORD
    )
    logger.info("Bootstrap superadmin ready: %s", superadmin.email)
    return superadmin
