"""Dependency injection: repositories, auth middleware, capability enforcement."""

import functools
import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.permissions import parse_grants, policy
from app.core.security import decode_token, hash_token
from app.db.base import Database, get_database, get_db
from app.models.role import Capability, Role
from app.models.user import UserStatus
from app.repositories.users import UserRepository
from app.schemas.auth import CurrentUser

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


@functools.cache
def repository(repo_cls):
    """Dependency factory: build ``repo_cls`` on the request's session and the store dialect."""

    async def provider(
        session: AsyncSession = Depends(get_db),
        database: Database = Depends(get_database),
    ):
        return repo_cls(session, database.dialect)

    provider.__name__ = f"get_{repo_cls.__name__}"
    return provider


async def get_current_user(
    token: str | None = Depends(oauth2_scheme),
    users: UserRepository = Depends(repository(UserRepository)),
) -> CurrentUser:
    """Decode the bearer token and load the live user.

    401 when the token is missing, revoked, or its user is gone/inactive;
    403 when the token itself is invalid or expired.
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        payload = decode_token(token)
        user_id = int(payload["userId"])
    except (JWTError, KeyError, ValueError, TypeError):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or expired token",
        )

    user = await users.get(user_id)
    if user is None or user.status != UserStatus.ACTIVE:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive",
        )
    if not await users.session_exists(hash_token(token)):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session expired or revoked",
        )

    grants = parse_grants(user.permissions)
    return CurrentUser(
        id=user.id,
        username=user.username,
        email=user.email,
        full_name=user.full_name,
        role=user.role,
        status=user.status,
        permissions=user.permissions or {},
        capabilities=policy.capabilities(user.role, grants),
        last_login=user.last_login,
    )


def require_capability(*required: Capability):
    """Dependency factory: admin passes, otherwise the user needs ANY of ``required``."""

    async def checker(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if not policy.allows(user, *required):
            logger.info("Denied %s (%s): needs one of %s", user.username, user.role.value, required)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return user

    return checker


def require_role(*allowed_roles: Role):
    """Dependency factory: checks the user has one of the allowed roles."""

    async def checker(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if not policy.has_role(user, *allowed_roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return user

    return checker


def bearer_token(token: str | None = Depends(oauth2_scheme)) -> str | None:
    return token
