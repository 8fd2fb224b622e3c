#src.sitecms.schemas.auth.py

from typing import Optional

from pydantic import BaseModel, EmailStr, Field, model_validator

from src.sitecms.schemas.admin import AdminRole

MIN_PASSWORD_LENGTH = 8


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=MIN_PASSWORD_LENGTH, max_length=128)


class RegisterRequest(LoginRequest):
    role: AdminRole = AdminRole.ADMIN


class RefreshRequest(BaseModel):
    refreshToken: Optional[str] = None


class SetPasswordRequest(BaseModel):
    token: str = Field(min_length=1)
    password: str
    confirmPassword: str

    @model_validator(mode="after")
    def check_passwords(self) -> "SetPasswordRequest":
        if self.password != self.confirmPassword:
            raise ValueError("Passwords do not match")
        if len(self.password) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
        return self
