# src/sitecms/core/config.py
import os
import secrets
import warnings
import asyncio
import logging
import functools
from typing import Any, Awaitable, Callable, Optional, Union

import hvac

from pydantic import Field, PostgresDsn, computed_field, field_validator, model_validator
from pydantic_core.core_schema import ValidationInfo
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

INSECURE_VALUES = (None, "", "changethis")

# vault key -> settings attribute
VAULT_DB_FIELDS = {
    "username": "DATABASE_USER",
    "password": "DATABASE_PASSWORD",
    "host": "DATABASE_HOST",
    "port": "DATABASE_PORT",
    "dbname": "DATABASE_NAME",
}
VAULT_JWT_FIELDS = {
    "access_key": "SECRET_KEY",
    "refresh_key": "JWT_REFRESH_TOKEN_KEY",
}


def async_retry(
    max_attempts: int = 3,
    base_delay: float = 0.5,
    max_delay: float = 5.0,
    retry_on: tuple = (Exception,),
):
    """Retry a coroutine with exponential back-off, re-raising the last error."""
    def decorator(func: Callable[..., Awaitable[Any]]):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            for attempt in range(1, max_attempts + 1):
                try:
                    return await func(*args, **kwargs)
                except retry_on as e:
                    if attempt == max_attempts:
                        logger.exception("%s failed after %d attempts", func.__name__, attempt)
                        raise
                    delay = min(max_delay, base_delay * 2 ** (attempt - 1))
                    logger.warning("%s failed (%s), retrying in %.1fs", func.__name__, e, delay)
                    await asyncio.sleep(delay)
        return wrapper
    return decorator


def postgres_dsn(user, password, host, port, name) -> str:
    return str(PostgresDsn.build(
        scheme="postgresql+asyncpg",
        username=user or None,
        password=password or None,
        host=host or "localhost",
        port=int(port or 5432),
        path=str(name or "").lstrip("/"),
    ))


class Settings(BaseSettings):
    # ---------------- General ----------------
    MODE: str = "development"
    PROJECT_NAME: str = "sitecms"
    API_VERSION: str = "v1"
    LOG_LEVEL: Optional[str] = None

    # ---------------- JWT ----------------
    SECRET_KEY: Optional[str] = None
    JWT_REFRESH_TOKEN_KEY: Optional[str] = None
    JWT_ALGORITHM: str = "HS256"
    JWT_ISSUER: str = "sitecms"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    INVITE_TOKEN_EXPIRE_HOURS: int = 24
    ALLOW_REGISTRATION: bool = False

    # ---------------- Database ----------------
    DATABASE_USER: Optional[str] = None
    DATABASE_PASSWORD: Optional[str] = None
    DATABASE_HOST: Optional[str] = None
    DATABASE_PORT: int = 5432
    DATABASE_NAME: Optional[str] = None
    ASYNC_DATABASE_URI: Optional[Union[PostgresDsn, str]] = Field(default=None, validate_default=True)
    DB_POOL_SIZE: int = 10
    WEB_CONCURRENCY: int = 2

    # ---------------- Redis (token blacklist) ----------------
    REDIS_HOST: Optional[str] = None
    REDIS_PORT: int = 6379
    REDIS_URL: Optional[str] = None

    # ---------------- Vault ----------------
    VAULT_URL: Optional[str] = None
    VAULT_TOKEN: Optional[str] = None
    VAULT_DB_MAIN_PATH: Optional[str] = None
    VAULT_JWT_PATH: Optional[str] = None

    # ---------------- Mail ----------------
    SMTP_HOST: str = "localhost"
    SMTP_PORT: int = 1025
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_USE_TLS: bool = False
    EMAIL_FROM: str = "noreply@sitecms.local"
    CONTACT_RECIPIENT: str = "contact@sitecms.local"
    FRONTEND_URL: str = "http://localhost:5173"

    # ---------------- Bootstrap ----------------
    FIRST_SUPERUSER_EMAIL: Optional[str] = None
    FIRST_SUPERUSER_PASSWORD: Optional[str] = None

    # ---------------- HTTP ----------------
    BACKEND_CORS_ORIGINS: list[str] = ["*"]
    MAX_BODY_BYTES: int = 10 * 1024 * 1024

    model_config = SettingsConfigDict(
        env_file=os.path.expanduser(".env"),
        case_sensitive=True,
        extra="ignore",
    )

    @computed_field
    @property
    def POOL_SIZE(self) -> int:
        # the pool is shared out between uvicorn workers
        return max(self.DB_POOL_SIZE // max(1, self.WEB_CONCURRENCY), 2)

    @computed_field
    @property
    def redis_enabled(self) -> bool:
        return bool(self.REDIS_URL or self.REDIS_HOST)

    @computed_field
    @property
    def all_cors_origins(self) -> list[str]:
        return [origin.rstrip("/") for origin in self.BACKEND_CORS_ORIGINS or []]

    @property
    def is_production(self) -> bool:
        return self.MODE == "production"

    # ---------------- Validators ----------------
    @field_validator("ASYNC_DATABASE_URI", mode="after")
    @classmethod
    def assemble_async_db_uri(cls, v: Optional[str], info: ValidationInfo) -> str:
        if v:
            return str(v)
        data = info.data
        return postgres_dsn(
            data.get("DATABASE_USER"),
            data.get("DATABASE_PASSWORD"),
            data.get("DATABASE_HOST"),
            data.get("DATABASE_PORT"),
            data.get("DATABASE_NAME"),
        )

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def split_cors_origins(cls, v: Union[str, list[str]]) -> list[str]:
        if isinstance(v, list):
            return v
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        raise ValueError(f"Invalid cors origins: {v}")

    @model_validator(mode="after")
    def check_required_secrets(self) -> "Settings":
        names = ["SECRET_KEY", "JWT_REFRESH_TOKEN_KEY"]
        if not self.VAULT_DB_MAIN_PATH:
            names.append("DATABASE_PASSWORD")

        for name in names:
            if getattr(self, name) not in INSECURE_VALUES:
                continue
            if self.MODE != "development":
                raise ValueError(f"{name} is not set or insecure. Update in production!")
            warnings.warn(f"{name} is not set. Using insecure defaults in development.")

        # development without a .env still gets usable, per-process signing keys
        self.SECRET_KEY = self.SECRET_KEY or secrets.token_urlsafe(32)
        self.JWT_REFRESH_TOKEN_KEY = self.JWT_REFRESH_TOKEN_KEY or secrets.token_urlsafe(32)
        if self.SECRET_KEY == self.JWT_REFRESH_TOKEN_KEY:
            raise ValueError("SECRET_KEY and JWT_REFRESH_TOKEN_KEY must differ")
        return self

    def build_async_db_uri(self) -> str:
        return postgres_dsn(
            self.DATABASE_USER,
            self.DATABASE_PASSWORD,
            self.DATABASE_HOST,
            self.DATABASE_PORT,
            self.DATABASE_NAME,
        )

    # ---------------- Vault ----------------
    def _read_vault_secret(self, path: str) -> dict:
        if not self.VAULT_URL or not self.VAULT_TOKEN:
            raise RuntimeError("Vault URL and token must be provided")
        client = hvac.Client(url=self.VAULT_URL, token=self.VAULT_TOKEN)
        if not client.is_authenticated():
            raise RuntimeError("Vault authentication failed. Check VAULT_TOKEN/VAULT_URL.")
        try:
            response = client.secrets.kv.v2.read_secret_version(path=path)
        except Exception as e:
            raise RuntimeError(f"Vault read error for path {path}") from e
        return (response.get("data") or {}).get("data") or {}

    async def fetch_vault_secret_async(self, path: str) -> dict:
        """Read a KV v2 secret off the event loop; an unreadable path yields {}."""
        loop = asyncio.get_running_loop()

        @async_retry(max_attempts=4, base_delay=0.5, max_delay=3.0)
        async def read():
            return await loop.run_in_executor(None, self._read_vault_secret, path)

        try:
            return await read()
        except Exception as e:
            warnings.warn(f"Failed to fetch Vault secret at {path}: {e}")
            return {}

    async def _apply_vault_secret(self, path: str, fields: dict[str, str]) -> bool:
        secret = await self.fetch_vault_secret_async(path)
        changed = False
        for key, attr in fields.items():
            value = secret.get(key)
            if not value:
                continue
            if attr == "DATABASE_PORT":
                try:
                    value = int(value)
                except ValueError:
                    logger.warning("Invalid DB port from vault: %s", value)
                    continue
            setattr(self, attr, value)
            changed = True
        return changed

    async def load_secrets_from_vault_async(self) -> None:
        db_changed, _ = await asyncio.gather(
            self._apply_vault_secret(self.VAULT_DB_MAIN_PATH, VAULT_DB_FIELDS) if self.VAULT_DB_MAIN_PATH else _nothing(),
            self._apply_vault_secret(self.VAULT_JWT_PATH, VAULT_JWT_FIELDS) if self.VAULT_JWT_PATH else _nothing(),
        )
        if db_changed:
            self.ASYNC_DATABASE_URI = self.build_async_db_uri()


async def _nothing() -> bool:
    return False


def configure_logging(settings: Settings) -> None:
    level = settings.LOG_LEVEL or ("DEBUG" if settings.MODE == "development" else "INFO")
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


@functools.lru_cache
def get_settings() -> Settings:
    return Settings()
