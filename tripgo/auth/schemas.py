"""Auth Pydantic schemas for request / response validation."""


from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from tripgo.tenants.schemas import TenantBrief
from tripgo.users.schemas import MAX_PASSWORD_BYTES, UserResponse, check_password_bytes


# ── Requests ────────────────────────────────────────────────────────

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=MAX_PASSWORD_BYTES)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)

    @field_validator("password")
    @classmethod
    def _password_bytes(cls, value: str) -> str:
        return check_password_bytes(value)

    @field_validator("first_name", "last_name")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ProfileUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)
    avatar: Optional[str] = Field(None, max_length=500)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=MAX_PASSWORD_BYTES)

    @field_validator("new_password")
    @classmethod
    def _password_bytes(cls, value: str) -> str:
        return check_password_bytes(value)


# ── Responses ───────────────────────────────────────────────────────

class AuthResponse(BaseModel):
    user: UserResponse
    tenant: TenantBrief
    token: str
    token_type: str = "bearer"
    expires_in: int


class MeResponse(BaseModel):
    user: UserResponse
    tenant: TenantBrief
    permissions: list[str]
