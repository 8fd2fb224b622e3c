#src.sitecms.models.content.py

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, Column, ForeignKey, Integer
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import SQLModel, Field

from src.sitecms.models.base import timestamp_column, utcnow


class Content(SQLModel, table=True):
    """One version of the site content. The highest id is the current one."""

    __tablename__ = "content"

    id: Optional[int] = Field(default=None, primary_key=True)
    content: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False),
    )
    created_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())
    updated_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column(index=True))
    updated_by: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("admins.id", ondelete="SET NULL"), nullable=True),
    )
