# src/sitecms/api/admin.py
import logging
from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.ext.asyncio import AsyncSession

from src.sitecms.core.config import Settings
from src.sitecms.core.db import get_session
from src.sitecms.core.email import EmailService, get_email_service
from src.sitecms.core.exceptions import Forbidden, NotFound, ValidationError
from src.sitecms.core.security import generate_reset_token
from src.sitecms.crud import admin as crud_admin
from src.sitecms.crud import content as crud_content
from src.sitecms.deps.auth import get_current_admin, get_settings
from src.sitecms.models.admin import Admin
from src.sitecms.models.base import utcnow
from src.sitecms.schemas.admin import AdminCreateRequest, AdminRead, AdminRole, AdminUpdate
from src.sitecms.schemas.content import ContentHistoryEntry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


async def _get_target(db: AsyncSession, admin_id: int) -> Admin:
    target = await crud_admin.get_admin_by_id(db, admin_id)
    if not target:
        raise NotFound("Admin not found")
    return target


#all admins
@router.get("", response_model=list[AdminRead])
async def list_admins(
    role: Optional[AdminRole] = None,
    db: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
):
    admins = await crud_admin.get_all_admins(db, role=role.value if role else None)
    logger.info("Admin list retrieved by: %s", current_admin.email)
    return admins


#create or invite
@router.post("", status_code=status.HTTP_201_CREATED)
async def create_admin(
    body: AdminCreateRequest,
    db: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
    settings: Settings = Depends(get_settings),
    email_service: EmailService = Depends(get_email_service),
):
    if body.role == AdminRole.SUPERADMIN and not current_admin.is_superadmin:
        raise Forbidden("Only a superadmin can create another superadmin")

    if body.password:
        admin = await crud_admin.create_admin(db, body.email, body.password, role=body.role.value)
        logger.info("Admin %s created by: %s", admin.email, current_admin.email)
        return {"message": "Admin created", "data": AdminRead.model_validate(admin)}

    reset_token = generate_reset_token()
    expires_at = utcnow() + timedelta(hours=settings.INVITE_TOKEN_EXPIRE_HOURS)
    admin = await crud_admin.create_admin_invite(db, body.email, reset_token, expires_at, role=body.role.value)

    # the account is kept even when the invitation mail cannot be delivered
    invite_sent = True
    try:
        await run_in_threadpool(email_service.send_password_invite_email, admin.email, reset_token)
    except Exception as e:
        invite_sent = False
        logger.error("Error sending password invite email to %s: %s", admin.email, e)

    logger.info("Admin %s invited by: %s", admin.email, current_admin.email)
    return {
        "message": "Admin invited" if invite_sent else "Admin invited, but the invitation email could not be sent",
        "data": AdminRead.model_validate(admin),
        "inviteSent": invite_sent,
    }


#single admin
@router.get("/{admin_id}", response_model=AdminRead)
async def get_admin(
    admin_id: int,
    db: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
):
    target = await _get_target(db, admin_id)
    logger.info("Admin %s retrieved by: %s", admin_id, current_admin.email)
    return target


#content versions written by the admin
@router.get("/{admin_id}/activity", response_model=list[ContentHistoryEntry])
async def get_admin_activity(
    admin_id: int,
    limit: int = Query(default=crud_content.DEFAULT_HISTORY_LIMIT),
    db: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
):
    await _get_target(db, admin_id)
    activity = await crud_content.get_admin_activity(db, admin_id, limit)
    logger.info("Admin %s activity retrieved by: %s", admin_id, current_admin.email)
    return activity


@router.patch("/{admin_id}", response_model=AdminRead)
async def update_admin(
    admin_id: int,
    body: AdminUpdate,
    db: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
):
    extra = body.model_extra or {}
    if "email" in extra or "password" in extra:
        raise ValidationError("Cannot update email or password via this endpoint")
    if body.is_active is None and body.role is None:
        raise ValidationError("No valid fields to update")

    target = await _get_target(db, admin_id)
    if target.is_superadmin:
        raise Forbidden("Superadmin accounts cannot be modified")
    if target.id == current_admin.id and body.is_active is False:
        raise Forbidden("You cannot deactivate your own account")
    if body.role == AdminRole.SUPERADMIN and not current_admin.is_superadmin:
        raise Forbidden("Only a superadmin can grant the superadmin role")

    updated = await crud_admin.update_admin(
        db,
        admin_id,
        is_active=body.is_active,
        role=body.role.value if body.role else None,
    )
    logger.info("Admin %s updated by: %s", admin_id, current_admin.email)
    return updated


@router.delete("/{admin_id}")
async def delete_admin(
    admin_id: int,
    db: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
):
    if admin_id == current_admin.id:
        raise Forbidden("You cannot delete your own account")

    target = await _get_target(db, admin_id)
    if target.is_superadmin:
        raise Forbidden("Superadmin accounts cannot be deleted")

    await crud_admin.delete_admin(db, admin_id)
    logger.info("Admin %s deleted by: %s", admin_id, current_admin.email)
    return {"message": "Admin deleted successfully"}
