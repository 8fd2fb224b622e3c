#src.sitecms.schemas.contact.py

from pydantic import BaseModel, EmailStr, Field

# no control characters: the name ends up in the Subject header
NAME_PATTERN = r"^[^\x00-\x1f\x7f]+$"


class ContactRequest(BaseModel):
    name: str = Field(min_length=2, max_length=100, pattern=NAME_PATTERN)
    email: EmailStr
    message: str = Field(min_length=10, max_length=2000)
