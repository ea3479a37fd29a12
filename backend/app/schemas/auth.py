"""Auth request/response schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.core.security import is_strong_password
from app.models.role import Capability, Role
from app.models.user import UserStatus

STRONG_PASSWORD_MESSAGE = (
    "Password must be at least 8 characters and contain uppercase, lowercase, "
    "number and special character"
)


def _check_strong(value: str) -> str:
    if not is_strong_password(value):
        raise ValueError(STRONG_PASSWORD_MESSAGE)
    return value


# ── Login ──────────────────────────────────────────
class LoginRequest(BaseModel):
    username: str = Field(min_length=1, description="Username or email")
    password: str = Field(min_length=1)


class UserProfile(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    full_name: str
    role: Role
    permissions: dict = Field(default_factory=dict)

    @field_validator("permissions", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return v or {}


class LoginResponse(BaseModel):
    message: str = "Login successful"
    user: UserProfile
    token: str
    refreshToken: str


class RefreshRequest(BaseModel):
    refreshToken: str | None = None


class RefreshResponse(BaseModel):
    accessToken: str
    user: UserProfile


# ── Register ───────────────────────────────────────
class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_]+$")
    email: EmailStr
    password: str
    full_name: str = Field(min_length=1, max_length=255)
    role: Role = Role.CASHIER

    @field_validator("password")
    @classmethod
    def check_password_strength(cls, v: str) -> str:
        return _check_strong(v)


class ChangePasswordRequest(BaseModel):
    currentPassword: str = Field(min_length=1)
    newPassword: str

    @field_validator("newPassword")
    @classmethod
    def check_password_strength(cls, v: str) -> str:
        return _check_strong(v)


# ── Current User ───────────────────────────────────
class CurrentUser(BaseModel):
    id: int
    username: str
    email: str
    full_name: str
    role: Role
    status: UserStatus = UserStatus.ACTIVE
    permissions: dict = Field(default_factory=dict)
    capabilities: frozenset[Capability] = frozenset()
    last_login: datetime | None = None
