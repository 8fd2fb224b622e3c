"""
Pytest configuration and fixtures.

The API runs against an in-memory SQLite database through aiosqlite; the
application receives it the same way production receives its PostgreSQL
engine, through create_app(database=...).
"""
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from src.sitecms.core.db import Database
from src.sitecms.crud import admin as crud_admin
from src.sitecms.main import create_app

from tests.helpers import PASSWORD, RecordingEmailService, auth_headers, make_settings


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
async def database():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    db = Database(engine)
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
async def session(database):
    async with database.session_factory() as s:
        yield s


@pytest.fixture
def email_service(settings):
    return RecordingEmailService(settings)


@pytest.fixture
def make_client(database, email_service):
    def factory(settings=None, redis_client=None) -> AsyncClient:
        app = create_app(
            settings or make_settings(),
            database=database,
            email_service=email_service,
            redis_client=redis_client,
        )
        return AsyncClient(
            transport=ASGITransport(app=app, raise_app_exceptions=False),
            base_url="http://test",
        )

    return factory


@pytest.fixture
async def client(make_client, settings):
    async with make_client(settings) as c:
        yield c


@pytest.fixture
def create_admin(database):
    async def factory(email, password=PASSWORD, role="admin", is_active=True):
        async with database.session_factory() as s:
            admin = await crud_admin.create_admin(s, email, password, role=role)
            if not is_active:
                admin = await crud_admin.update_admin_status(s, admin.id, False)
            return admin

    return factory


@pytest.fixture
async def superadmin(create_admin):
    return await create_admin("root@example.com", role="superadmin")


@pytest.fixture
async def admin(create_admin):
    return await create_admin("editor@example.com")


@pytest.fixture
async def super_headers(client, superadmin):
    return await auth_headers(client, superadmin.email)


@pytest.fixture
async def admin_headers(client, admin):
    return await auth_headers(client, admin.email)
