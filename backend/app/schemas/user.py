"""User administration schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.models.role import Role
from app.models.user import UserStatus
from app.schemas.common import Pagination


class UserCreate(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6)
    full_name: str = Field(min_length=2, max_length=255)
    role: Role = Role.CASHIER
    phone: str | None = None
    address: str | None = None
    department: str | None = None
    position: str | None = None
    permissions: dict[str, bool] = Field(default_factory=dict)


class UserUpdate(BaseModel):
    full_name: str | None = Field(None, min_length=2, max_length=255)
    email: EmailStr | None = None
    role: Role | None = None
    status: UserStatus | None = None
    phone: str | None = None
    address: str | None = None
    department: str | None = None
    position: str | None = None
    permissions: dict[str, bool] | None = None


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    full_name: str
    role: Role
    status: UserStatus
    permissions: dict = Field(default_factory=dict)
    phone: str | None = None
    address: str | None = None
    department: str | None = None
    position: str | None = None
    is_locked: bool = False
    locked_at: datetime | None = None
    lock_reason: str | None = None
    failed_login_attempts: int = 0
    last_login: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("permissions", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return v or {}


class UserListResponse(BaseModel):
    users: list[UserResponse]
    pagination: Pagination


class LockRequest(BaseModel):
    reason: str = "Account locked by administrator"


class ResetPasswordRequest(BaseModel):
    new_password: str = Field(min_length=6)
