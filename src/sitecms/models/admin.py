#src.sitecms.models.admin.py

from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, Column, String
from sqlmodel import SQLModel, Field

from src.sitecms.models.base import timestamp_column, utcnow


class Admin(SQLModel, table=True):
    __tablename__ = "admins"
    __table_args__ = (
        CheckConstraint("role IN ('admin', 'superadmin')", name="ck_admins_role"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(max_length=255, nullable=False, unique=True, index=True)
    # NULL while an invitation is pending
    password_hash: Optional[str] = Field(default=None, max_length=255, nullable=True)
    role: str = Field(default="admin", sa_column=Column(String(50), nullable=False, server_default="admin"))
    is_active: bool = Field(default=True)
    password_reset_token: Optional[str] = Field(default=None, max_length=255, index=True)
    password_reset_expires: Optional[datetime] = Field(default=None, sa_column=timestamp_column(nullable=True))
    created_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())
    updated_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())

    @property
    def is_superadmin(self) -> bool:
        return self.role == "superadmin"
