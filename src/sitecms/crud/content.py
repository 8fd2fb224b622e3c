#src.sitecms.crud.content.py

import logging
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from src.sitecms.core.exceptions import ValidationError
from src.sitecms.models.admin import Admin
from src.sitecms.models.base import utcnow
from src.sitecms.models.content import Content

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 20
MAX_HISTORY_LIMIT = 100


def clamp_history_limit(limit: Optional[int]) -> int:
    if not limit or limit < 1:
        return DEFAULT_HISTORY_LIMIT
    return min(limit, MAX_HISTORY_LIMIT)


def merge_content(current: dict[str, Any], partial: dict[str, Any]) -> dict[str, Any]:
    """Shallow merge: top-level keys of `partial` replace those of `current` wholesale."""
    return {**(current or {}), **partial}


async def get_content(session: AsyncSession) -> Content:
    result = await session.execute(select(Content).order_by(Content.id.desc()).limit(1))
    current = result.scalar_one_or_none()
    if current is not None:
        return current

    current = Content(content={})
    session.add(current)
    await session.commit()
    await session.refresh(current)
    logger.info("Created empty content row id=%s", current.id)
    return current


async def update_content(session: AsyncSession, new_content: Any, admin_id: Optional[int]) -> Content:
    """Append a new version; it becomes the current content."""
    if not isinstance(new_content, dict):
        raise ValidationError("Content must be an object")

    now = utcnow()
    version = Content(content=new_content, updated_by=admin_id, created_at=now, updated_at=now)
    session.add(version)
    await session.commit()
    await session.refresh(version)
    logger.info("Content version %s written by admin %s", version.id, admin_id)
    return version


async def patch_content(session: AsyncSession, partial: Any, admin_id: Optional[int]) -> Content:
    # read-then-write without a lock: concurrent patches are last-write-wins
    if not isinstance(partial, dict):
        raise ValidationError("Content must be an object")
    current = await get_content(session)
    return await update_content(session, merge_content(current.content, partial), admin_id)


def _history_query(limit: int):
    return (
        select(Content.id, Content.content, Content.updated_at, Admin.email)
        .outerjoin(Admin, Content.updated_by == Admin.id)
        .order_by(Content.updated_at.desc(), Content.id.desc())
        .limit(limit)
    )


def _history_rows(result) -> list[dict[str, Any]]:
    return [
        {"id": row.id, "content": row.content, "updated_at": row.updated_at, "email": row.email}
        for row in result.all()
    ]


async def get_content_history(session: AsyncSession, limit: Optional[int] = DEFAULT_HISTORY_LIMIT) -> list[dict[str, Any]]:
    result = await session.execute(_history_query(clamp_history_limit(limit)))
    return _history_rows(result)


async def get_admin_activity(session: AsyncSession, admin_id: int, limit: Optional[int] = DEFAULT_HISTORY_LIMIT) -> list[dict[str, Any]]:
    stmt = _history_query(clamp_history_limit(limit)).where(Content.updated_by == admin_id)
    result = await session.execute(stmt)
    return _history_rows(result)
