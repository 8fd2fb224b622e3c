#src.sitecms.models.base.py

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def timestamp_column(nullable: bool = False, index: bool = False) -> Column:
    # TIMESTAMP WITH TIME ZONE; values are always aware UTC
    return Column(DateTime(timezone=True), nullable=nullable, index=index)
