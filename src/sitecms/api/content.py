# src/sitecms/api/content.py
import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.sitecms.core.db import get_session
from src.sitecms.crud import content as crud_content
from src.sitecms.deps.auth import get_current_admin
from src.sitecms.models.admin import Admin
from src.sitecms.schemas.content import ContentHistoryEntry, ContentRead, ContentWrite

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/content", tags=["content"])


@router.get("", response_model=ContentRead)
async def get_content(
    db: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
):
    content = await crud_content.get_content(db)
    logger.debug("Content retrieved by: %s", current_admin.email)
    return content


# full replacement
@router.put("", response_model=ContentRead)
async def update_content(
    body: ContentWrite,
    db: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
):
    content = await crud_content.update_content(db, body.data, current_admin.id)
    logger.info("Content updated by: %s", current_admin.email)
    return content


# shallow merge into the current content
@router.patch("", response_model=ContentRead)
async def patch_content(
    body: ContentWrite,
    db: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
):
    content = await crud_content.patch_content(db, body.data, current_admin.id)
    logger.info("Content patched by: %s", current_admin.email)
    return content


@router.get("/history", response_model=list[ContentHistoryEntry])
async def get_content_history(
    limit: int = Query(default=crud_content.DEFAULT_HISTORY_LIMIT),
    db: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
):
    history = await crud_content.get_content_history(db, limit)
    logger.debug("Content history retrieved by: %s", current_admin.email)
    return history
