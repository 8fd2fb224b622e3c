#src.sitecms.deps.auth.py

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from src.sitecms.core.config import Settings
from src.sitecms.core.db import get_session
from src.sitecms.core.exceptions import Forbidden, Unauthorized
from src.sitecms.core.redis_cache import get_redis, is_token_blacklisted
from src.sitecms.core.security import ACCESS_TOKEN_TYPE, verify_token
from src.sitecms.crud.admin import get_admin_by_id
from src.sitecms.models.admin import Admin

bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_token_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
    redis: Optional[Redis] = Depends(get_redis),
) -> dict:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise Unauthorized("Missing or invalid authorization header")

    payload = verify_token(
        credentials.credentials,
        settings.SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
        issuer=settings.JWT_ISSUER,
    )
    if not payload or payload.get("type") != ACCESS_TOKEN_TYPE:
        raise Unauthorized("Invalid or expired token")

    if await is_token_blacklisted(redis, payload.get("jti")):
        raise Unauthorized("Token revoked")
    return payload


async def get_current_admin(
    claims: dict = Depends(get_token_claims),
    db: AsyncSession = Depends(get_session),
) -> Admin:
    try:
        admin_id = int(claims.get("sub"))
    except (TypeError, ValueError):
        raise Unauthorized("Invalid token payload")

    admin = await get_admin_by_id(db, admin_id)
    if not admin:
        raise Unauthorized("Admin not found")
    if not admin.is_active:
        raise Forbidden("Account is inactive")
    return admin
