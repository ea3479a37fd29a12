"""User administration endpoints (admin only)."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.core.deps import repository, require_capability
from app.core.security import hash_password
from app.models.role import Capability, Role
from app.models.user import User, UserStatus
from app.repositories.users import UserRepository
from app.schemas.auth import CurrentUser
from app.schemas.common import MessageResponse, paginate
from app.schemas.user import (
    LockRequest,
    ResetPasswordRequest,
    UserCreate,
    UserListResponse,
    UserResponse,
    UserUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])

admin_only = require_capability(Capability.MANAGE_USERS)


async def _get_or_404(users: UserRepository, user_id: int) -> User:
    user = await users.get(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("", response_model=UserListResponse)
async def list_users(
    search: str | None = None,
    role: Role | None = None,
    status_filter: UserStatus | None = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    current_user: CurrentUser = Depends(admin_only),
    users: UserRepository = Depends(repository(UserRepository)),
):
    rows, total = await users.list_users(search, role, status_filter, limit, offset)
    return UserListResponse(
        users=[UserResponse.model_validate(u) for u in rows],
        pagination=paginate(total, limit, offset),
    )


@router.get("/stats/overview")
async def user_stats(
    current_user: CurrentUser = Depends(admin_only),
    users: UserRepository = Depends(repository(UserRepository)),
):
    return {"stats": await users.stats()}


@router.get("/{user_id}")
async def get_user(
    user_id: int,
    current_user: CurrentUser = Depends(admin_only),
    users: UserRepository = Depends(repository(UserRepository)),
):
    user = await _get_or_404(users, user_id)
    return {"user": UserResponse.model_validate(user)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    body: UserCreate,
    current_user: CurrentUser = Depends(admin_only),
    users: UserRepository = Depends(repository(UserRepository)),
):
    if await users.username_or_email_taken(body.username, body.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username or email already exists",
        )

    fields = body.model_dump(exclude={"password"})
    user = await users.create(**fields, password_hash=hash_password(body.password))
    logger.info("User %s created by %s", user.username, current_user.username)
    return {"message": "User created successfully", "user": UserResponse.model_validate(user)}


@router.put("/{user_id}", response_model=MessageResponse)
async def update_user(
    user_id: int,
    body: UserUpdate,
    current_user: CurrentUser = Depends(admin_only),
    users: UserRepository = Depends(repository(UserRepository)),
):
    changes = body.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")

    user = await _get_or_404(users, user_id)
    if changes.get("email") and await users.email_taken_by_other(changes["email"], user_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already exists")

    await users.update(user, changes)
    return MessageResponse(message="User updated successfully")


@router.post("/{user_id}/lock", response_model=MessageResponse)
async def lock_user(
    user_id: int,
    body: LockRequest,
    current_user: CurrentUser = Depends(admin_only),
    users: UserRepository = Depends(repository(UserRepository)),
):
    if user_id == current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot lock your own account")

    user = await _get_or_404(users, user_id)
    await users.lock(user, locked_by=current_user.id, reason=body.reason)
    logger.info("User %s locked by %s: %s", user.username, current_user.username, body.reason)
    return MessageResponse(message="User account locked successfully")


@router.post("/{user_id}/unlock", response_model=MessageResponse)
async def unlock_user(
    user_id: int,
    current_user: CurrentUser = Depends(admin_only),
    users: UserRepository = Depends(repository(UserRepository)),
):
    user = await _get_or_404(users, user_id)
    await users.unlock(user)
    logger.info("User %s unlocked by %s", user.username, current_user.username)
    return MessageResponse(message="User account unlocked successfully")


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: int,
    current_user: CurrentUser = Depends(admin_only),
    users: UserRepository = Depends(repository(UserRepository)),
):
    """Soft delete: the account is marked inactive. Repeating it is a no-op."""
    if user_id == current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot delete your own account")

    user = await _get_or_404(users, user_id)
    await users.deactivate(user)
    return MessageResponse(message="User deleted successfully")


@router.post("/{user_id}/reset-password", response_model=MessageResponse)
async def reset_password(
    user_id: int,
    body: ResetPasswordRequest,
    current_user: CurrentUser = Depends(admin_only),
    users: UserRepository = Depends(repository(UserRepository)),
):
    user = await _get_or_404(users, user_id)
    await users.set_password(user, hash_password(body.new_password))
    logger.info("Password of %s reset by %s", user.username, current_user.username)
    return MessageResponse(message="Password reset successfully")
