"""Authentication endpoints: login, token refresh, logout, password change, register."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from jose import JWTError

from app.core.config import settings
from app.core.deps import bearer_token, get_current_user, repository, require_capability
from app.core.rate_limit import LOGIN_LIMIT_MESSAGE, REGISTER_LIMIT_MESSAGE, limiter, login_limit, register_limit
from app.core.security import (
    REFRESH,
    access_token_expiry,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    hash_token,
    verify_password,
)
from app.models.role import Capability
from app.models.user import User, UserStatus
from app.repositories.users import UserRepository
from app.schemas.auth import (
    ChangePasswordRequest,
    CurrentUser,
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    RefreshResponse,
    RegisterRequest,
    UserProfile,
)
from app.schemas.common import MessageResponse
from app.schemas.user import UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

INVALID_CREDENTIALS = "Invalid credentials"


async def _issue_access_token(user: User, users: UserRepository) -> str:
    token = create_access_token(user.id, user.username, user.role.value)
    await users.add_session(user.id, hash_token(token), access_token_expiry())
    return token


@router.post("/login", response_model=LoginResponse)
@limiter.limit(login_limit, error_message=LOGIN_LIMIT_MESSAGE)
async def login(
    request: Request,
    body: LoginRequest,
    users: UserRepository = Depends(repository(UserRepository)),
):
    """Authenticate via username or email + password, return access and refresh tokens."""
    user = await users.find_active_by_login(body.username)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

    if user.is_locked:
        logger.info("Login refused for locked account %s", user.username)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Account is locked")

    if not verify_password(body.password, user.password_hash):
        if await users.record_failed_login(user, settings.MAX_FAILED_LOGIN_ATTEMPTS):
            logger.warning("Account %s locked after %s failed logins", user.username, user.failed_login_attempts)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

    await users.record_login(user)
    token = await _issue_access_token(user, users)
    refresh = create_refresh_token(user.id, user.username, user.role.value)
    logger.info("User %s logged in", user.username)
    return LoginResponse(
        user=UserProfile.model_validate(user),
        token=token,
        refreshToken=refresh,
    )


@router.post("/refresh", response_model=RefreshResponse)
async def refresh_token(
    body: RefreshRequest,
    users: UserRepository = Depends(repository(UserRepository)),
):
    """Exchange a refresh token for a new access token."""
    if not body.refreshToken:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Refresh token required")
    try:
        payload = decode_token(body.refreshToken, expected_type=REFRESH)
        user_id = int(payload["userId"])
    except (JWTError, KeyError, ValueError, TypeError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token")

    user = await users.get(user_id)
    if user is None or user.status != UserStatus.ACTIVE:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")

    token = await _issue_access_token(user, users)
    return RefreshResponse(accessToken=token, user=UserProfile.model_validate(user))


@router.post("/logout", response_model=MessageResponse)
async def logout(
    token: str | None = Depends(bearer_token),
    current_user: CurrentUser = Depends(get_current_user),
    users: UserRepository = Depends(repository(UserRepository)),
):
    """Revoke the session behind the presented access token."""
    await users.delete_session(hash_token(token))
    logger.info("User %s logged out", current_user.username)
    return MessageResponse(message="Logged out successfully")


@router.get("/me")
async def get_me(current_user: CurrentUser = Depends(get_current_user)):
    """Return the profile of the current authenticated user."""
    return {
        "user": {
            "id": current_user.id,
            "username": current_user.username,
            "email": current_user.email,
            "full_name": current_user.full_name,
            "role": current_user.role,
            "status": current_user.status,
            "permissions": current_user.permissions,
            "capabilities": sorted(c.value for c in current_user.capabilities),
            "last_login": current_user.last_login,
        }
    }


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest,
    current_user: CurrentUser = Depends(get_current_user),
    users: UserRepository = Depends(repository(UserRepository)),
):
    user = await users.get(current_user.id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    if not verify_password(body.currentPassword, user.password_hash):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Current password is incorrect")

    await users.set_password(user, hash_password(body.newPassword))
    logger.info("User %s changed their password", user.username)
    return MessageResponse(message="Password changed successfully")


@router.post("/register", status_code=status.HTTP_201_CREATED)
@limiter.limit(register_limit, error_message=REGISTER_LIMIT_MESSAGE)
async def register(
    request: Request,
    body: RegisterRequest,
    current_user: CurrentUser = Depends(require_capability(Capability.MANAGE_USERS)),
    users: UserRepository = Depends(repository(UserRepository)),
):
    """Create a staff account (admin only)."""
    if await users.username_or_email_taken(body.username, body.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username or email already exists",
        )

    user = await users.create(
        username=body.username,
        email=body.email,
        password_hash=hash_password(body.password),
        full_name=body.full_name,
        role=body.role,
        permissions={},
    )
    logger.info("User %s registered by %s", user.username, current_user.username)
    return {"message": "User created successfully", "user": UserResponse.model_validate(user)}
