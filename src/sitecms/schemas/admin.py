#src.sitecms.schemas.admin.py

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class AdminRole(str, Enum):
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


class AdminBase(BaseModel):
    email: EmailStr
    role: AdminRole = AdminRole.ADMIN


class AdminCreate(AdminBase):
    password: str = Field(min_length=8, max_length=128)


class AdminInvite(AdminBase):
    pass


class AdminCreateRequest(AdminBase):
    """POST /admin: a password creates the account, no password sends an invite."""
    password: Optional[str] = Field(default=None, min_length=8, max_length=128)


class AdminUpdate(BaseModel):
    model_config = ConfigDict(extra="allow")

    is_active: Optional[bool] = Field(default=None, strict=True)
    role: Optional[AdminRole] = None


class AdminRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    role: AdminRole
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
