# src/sitecms/api/auth.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from src.sitecms.core.config import Settings
from src.sitecms.core.db import get_session
from src.sitecms.core.exceptions import Forbidden, NotFound, Unauthorized, ValidationError
from src.sitecms.core.redis_cache import blacklist_token, get_redis
from src.sitecms.core.security import (
    REFRESH_TOKEN_TYPE, create_access_token, create_refresh_token, seconds_until_expiry,
    verify_password, verify_token,
)
from src.sitecms.crud import admin as crud_admin
from src.sitecms.deps.auth import get_current_admin, get_settings, get_token_claims
from src.sitecms.models.admin import Admin
from src.sitecms.schemas.admin import AdminRead
from src.sitecms.schemas.auth import LoginRequest, RefreshRequest, RegisterRequest, SetPasswordRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _token_claims(admin: Admin) -> dict:
    return {"sub": str(admin.id), "email": admin.email, "role": admin.role}


def _issue_tokens(admin: Admin, settings: Settings) -> dict:
    claims = _token_claims(admin)
    return {
        "accessToken": create_access_token(claims, settings),
        "refreshToken": create_refresh_token(claims, settings),
    }


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register_admin(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
):
    if not settings.ALLOW_REGISTRATION:
        raise Forbidden("Registration is disabled")

    admin = await crud_admin.create_admin(db, body.email, body.password, role=body.role.value)
    logger.info("Admin registered: %s", admin.email)
    return {
        "message": "Registration successful",
        "data": AdminRead.model_validate(admin),
        **_issue_tokens(admin, settings),
    }


@router.post("/login")
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
):
    admin = await crud_admin.get_admin_by_email(db, body.email)

    # unknown email and wrong password are indistinguishable to the caller
    if not admin or not verify_password(body.password, admin.password_hash):
        raise Unauthorized("Invalid credentials")

    if not admin.is_active:
        raise Forbidden("Account is inactive")

    logger.info("Admin logged in: %s", admin.email)
    return {
        "message": "Login successful",
        **_issue_tokens(admin, settings),
        "admin": AdminRead.model_validate(admin),
    }


# Refresh Token Endpoint
@router.post("/refresh")
async def refresh(
    body: RefreshRequest,
    db: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
):
    if not body.refreshToken:
        raise ValidationError("Refresh token is required")

    payload = verify_token(
        body.refreshToken,
        settings.JWT_REFRESH_TOKEN_KEY,
        algorithm=settings.JWT_ALGORITHM,
        issuer=settings.JWT_ISSUER,
    )
    if not payload or payload.get("type") != REFRESH_TOKEN_TYPE:
        raise Unauthorized("Invalid or expired token")

    try:
        admin_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise Unauthorized("Invalid token payload")

    admin = await crud_admin.get_admin_by_id(db, admin_id)
    if not admin or not admin.is_active:
        raise Forbidden("Admin not found or inactive")

    # the refresh token itself is not rotated
    logger.info("Token refreshed for admin: %s", admin.email)
    return {
        "message": "Token refreshed",
        "accessToken": create_access_token(_token_claims(admin), settings),
    }


# Logout Endpoint
@router.post("/logout")
async def logout(
    admin: Admin = Depends(get_current_admin),
    claims: dict = Depends(get_token_claims),
    redis: Optional[Redis] = Depends(get_redis),
):
    # without redis logout is stateless: the client drops its tokens
    if redis is not None:
        await blacklist_token(redis, claims.get("jti"), seconds_until_expiry(claims))

    logger.info("Admin logged out: %s", admin.email)
    return {"message": "Logout successful"}


@router.post("/set-password")
async def set_password_from_invite(
    body: SetPasswordRequest,
    db: AsyncSession = Depends(get_session),
):
    admin = await crud_admin.get_admin_by_reset_token(db, body.token)
    if not admin:
        # unknown and expired tokens look the same
        raise ValidationError("Invalid or expired reset token")

    updated = await crud_admin.set_password_from_reset(db, admin.id, body.password)
    logger.info("Admin password set from invitation: %s", updated.email)
    return {"message": "Password set successfully", "data": AdminRead.model_validate(updated)}


@router.get("/me")
async def get_current_user(
    claims: dict = Depends(get_token_claims),
    db: AsyncSession = Depends(get_session),
):
    try:
        admin_id = int(claims.get("sub"))
    except (TypeError, ValueError):
        raise Unauthorized("Invalid token payload")

    admin = await crud_admin.get_admin_by_id(db, admin_id)
    if not admin:
        raise NotFound("Admin not found")
    return {"data": AdminRead.model_validate(admin)}
