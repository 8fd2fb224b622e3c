from datetime import timedelta, timezone

import pytest

from src.sitecms.models.admin import Admin
from src.sitecms.models.base import utcnow
from src.sitecms.models.content import Content

TIMESTAMP_COLUMNS = [
    (Admin, "created_at"),
    (Admin, "updated_at"),
    (Admin, "password_reset_expires"),
    (Content, "created_at"),
    (Content, "updated_at"),
]


def test_utcnow_is_timezone_aware():
    now = utcnow()
    assert now.tzinfo is not None
    assert now.utcoffset() == timedelta(0)
    assert now.tzinfo == timezone.utc


@pytest.mark.parametrize("model, column", TIMESTAMP_COLUMNS)
def test_timestamp_columns_store_time_zone(model, column):
    assert model.__table__.c[column].type.timezone is True


async def test_each_table_accepts_a_row(session):
    admin = Admin(
        email="rows@example.com",
        password_hash=None,
        role="admin",
        is_active=False,
        password_reset_token="row-token",
        password_reset_expires=utcnow() + timedelta(hours=1),
    )
    session.add(admin)
    await session.commit()
    await session.refresh(admin)

    version = Content(content={"hero": {"title": "Rows"}}, updated_by=admin.id)
    session.add(version)
    await session.commit()
    await session.refresh(version)

    assert admin.id is not None
    assert admin.created_at is not None
    assert version.id is not None
    assert version.updated_at is not None
    assert version.content == {"hero": {"title": "Rows"}}
