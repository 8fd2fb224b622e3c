# src/sitecms/core/security.py
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from uuid import uuid4

from jose import jwt, JWTError
from passlib.context import CryptContext

from src.sitecms.core.config import Settings
from src.sitecms.core.exceptions import PasswordHashingError

logger = logging.getLogger(__name__)

# argon2id, memory 19 MiB, 2 passes, 1 lane
pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
    argon2__type="ID",
    argon2__memory_cost=19456,
    argon2__rounds=2,
    argon2__parallelism=1,
)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


# Password
def hash_password(password: str) -> str:
    try:
        return pwd_context.hash(password)
    except Exception as e:
        logger.error("Password hashing failed: %s", e)
        raise PasswordHashingError() from e


def verify_password(password: str, hashed: Optional[str]) -> bool:
    if not hashed or password is None:
        return False
    try:
        return pwd_context.verify(password, hashed)
    except Exception as e:
        logger.debug("Password verification failed: %s", e)
        return False


def _now_ts() -> int:
    return int(datetime.now(timezone.utc).timestamp())


def _encode(data: dict, secret: str, lifetime: timedelta, token_type: str, settings: Settings) -> str:
    if "sub" not in data or not isinstance(data["sub"], str):
        raise ValueError("data must contain 'sub' as string")

    iat = _now_ts()
    payload = {
        **data,
        "jti": str(uuid4()),
        "iat": iat,
        "exp": iat + int(lifetime.total_seconds()),
        "iss": settings.JWT_ISSUER,
        "type": token_type,
    }
    return jwt.encode(payload, secret, algorithm=settings.JWT_ALGORITHM)


# create_access_token
def create_access_token(data: dict, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return _encode(data, settings.SECRET_KEY, lifetime, ACCESS_TOKEN_TYPE, settings)


# create_refresh_token
def create_refresh_token(data: dict, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    lifetime = expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    return _encode(data, settings.JWT_REFRESH_TOKEN_KEY, lifetime, REFRESH_TOKEN_TYPE, settings)


def verify_token(
    token: str,
    secret: str,
    algorithm: str = "HS256",
    issuer: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    """
    Decode and validate a JWT.

    Returns the claims, or None when the token is expired, malformed, signed
    with another secret or issued by someone else. Never raises.
    """
    if not token or not secret:
        return None
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            issuer=issuer,
            options={"verify_aud": False},
        )
    except JWTError:
        return None


def seconds_until_expiry(claims: Dict[str, Any]) -> int:
    return max(int(claims.get("exp", 0)) - _now_ts(), 0)


def generate_reset_token() -> str:
    return secrets.token_urlsafe(32)
