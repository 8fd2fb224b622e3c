#src.sitecms.crud.admin.py

import logging
from datetime import datetime
from typing import Optional, Sequence

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from src.sitecms.core.exceptions import Conflict, NotFound, ValidationError, field_errors
from src.sitecms.core.security import hash_password
from src.sitecms.models.admin import Admin
from src.sitecms.models.base import utcnow
from src.sitecms.models.content import Content
from src.sitecms.schemas.admin import AdminCreate, AdminInvite, AdminRole, AdminUpdate

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _validated(schema, **data):
    try:
        return schema.model_validate(data)
    except PydanticValidationError as e:
        details = field_errors(e.errors())
        raise ValidationError(", ".join(d["message"] for d in details), details=details) from e


async def _ensure_email_free(session: AsyncSession, email: str) -> None:
    result = await session.execute(select(Admin.id).where(Admin.email == email))
    if result.first() is not None:
        raise Conflict("Email already exists")


async def _insert(session: AsyncSession, admin: Admin) -> Admin:
    session.add(admin)
    try:
        await session.commit()
    except IntegrityError as e:
        # lost the race against a concurrent insert of the same email
        await session.rollback()
        raise Conflict("Email already exists") from e
    await session.refresh(admin)
    return admin


async def create_admin(
    session: AsyncSession,
    email: str,
    password: str,
    role: str = AdminRole.ADMIN.value,
) -> Admin:
    admin_in = _validated(AdminCreate, email=email, password=password, role=role)
    email = normalize_email(admin_in.email)
    await _ensure_email_free(session, email)

    admin = Admin(
        email=email,
        password_hash=hash_password(admin_in.password),
        role=admin_in.role.value,
        is_active=True,
    )
    admin = await _insert(session, admin)
    logger.info("Admin created: id=%s email=%s role=%s", admin.id, admin.email, admin.role)
    return admin


async def create_admin_invite(
    session: AsyncSession,
    email: str,
    reset_token: str,
    expires_at: datetime,
    role: str = AdminRole.ADMIN.value,
) -> Admin:
    admin_in = _validated(AdminInvite, email=email, role=role)
    email = normalize_email(admin_in.email)
    await _ensure_email_free(session, email)

    admin = Admin(
        email=email,
        password_hash=None,
        role=admin_in.role.value,
        is_active=False,
        password_reset_token=reset_token,
        password_reset_expires=expires_at,
    )
    admin = await _insert(session, admin)
    logger.info("Admin invited: id=%s email=%s", admin.id, admin.email)
    return admin


async def get_admin_by_email(session: AsyncSession, email: str) -> Admin | None:
    result = await session.execute(select(Admin).where(Admin.email == normalize_email(email)))
    return result.scalar_one_or_none()


async def get_admin_by_id(session: AsyncSession, admin_id: int) -> Admin | None:
    return await session.get(Admin, admin_id)


async def get_all_admins(session: AsyncSession, role: Optional[str] = None) -> Sequence[Admin]:
    stmt = select(Admin)
    if role:
        stmt = stmt.where(Admin.role == role)
    result = await session.execute(stmt.order_by(Admin.created_at.desc(), Admin.id.desc()))
    return result.scalars().all()


async def get_admin_by_reset_token(session: AsyncSession, token: str) -> Admin | None:
    if not token:
        return None
    result = await session.execute(
        select(Admin).where(
            Admin.password_reset_token == token,
            Admin.password_reset_expires > utcnow(),
        )
    )
    return result.scalar_one_or_none()


async def _get_or_404(session: AsyncSession, admin_id: int) -> Admin:
    admin = await session.get(Admin, admin_id)
    if admin is None:
        raise NotFound("Admin not found")
    return admin


async def set_password_from_reset(session: AsyncSession, admin_id: int, password: str) -> Admin:
    admin = await _get_or_404(session, admin_id)
    # password, activation and token clearing go out in one commit
    admin.password_hash = hash_password(password)
    admin.password_reset_token = None
    admin.password_reset_expires = None
    admin.is_active = True
    admin.updated_at = utcnow()
    session.add(admin)
    await session.commit()
    await session.refresh(admin)
    logger.info("Admin password set from reset token: id=%s", admin_id)
    return admin


async def update_admin(
    session: AsyncSession,
    admin_id: int,
    is_active: Optional[bool] = None,
    role: Optional[str] = None,
) -> Admin:
    changes = _validated(AdminUpdate, is_active=is_active, role=role)
    admin = await _get_or_404(session, admin_id)
    if changes.is_active is not None:
        admin.is_active = changes.is_active
    if changes.role is not None:
        admin.role = changes.role.value
    admin.updated_at = utcnow()
    session.add(admin)
    await session.commit()
    await session.refresh(admin)
    logger.info("Admin updated: id=%s is_active=%s role=%s", admin.id, admin.is_active, admin.role)
    return admin


async def update_admin_status(session: AsyncSession, admin_id: int, is_active: bool) -> Admin:
    if not isinstance(is_active, bool):
        raise ValidationError("is_active must be a boolean")
    return await update_admin(session, admin_id, is_active=is_active)


async def delete_admin(session: AsyncSession, admin_id: int) -> None:
    admin = await _get_or_404(session, admin_id)
    # content history keeps its rows, only the author link is dropped
    await session.execute(
        update(Content).where(Content.updated_by == admin_id).values(updated_by=None)
    )
    await session.delete(admin)
    await session.commit()
    logger.info("Admin deleted: id=%s", admin_id)


async def ensure_superuser(session: AsyncSession, email: str, password: str) -> Admin:
    existing = await get_admin_by_email(session, email)
    if existing:
        return existing
    return await create_admin(session, email, password, role=AdminRole.SUPERADMIN.value)
