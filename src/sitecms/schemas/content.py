#src.sitecms.schemas.content.py

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class ContentWrite(BaseModel):
    """Body of PUT and PATCH /content."""
    data: dict[str, Any]


class ContentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    content: dict[str, Any]
    updated_at: datetime
    updated_by: Optional[int] = None


class ContentHistoryEntry(BaseModel):
    id: int
    content: dict[str, Any]
    updated_at: datetime
    email: Optional[str] = None
