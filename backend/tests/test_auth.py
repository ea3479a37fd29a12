"""Unit tests for auth: security utils, capability policy, login and token checks."""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import HTTPException
from jose import JWTError

from app.core.config import settings
from app.core.permissions import parse_grants, policy
from app.core.security import (
    REFRESH,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    hash_token,
    is_strong_password,
    verify_password,
)
from app.models.role import Capability, Role
from app.models.user import User, UserStatus
from conftest import make_user


# ── Password hashing ──────────────────────────────

def test_hash_and_verify():
    plain = "SecurePass123!"
    hashed = hash_password(plain)
    assert hashed != plain
    assert verify_password(plain, hashed)
    assert not verify_password("wrong", hashed)


@pytest.mark.parametrize(
    "password,strong",
    [
        ("Admin@123", True),
        ("admin@123", False),   # no uppercase
        ("ADMIN@123", False),   # no lowercase
        ("Admin@abc", False),   # no digit
        ("Admin1234", False),   # no special character
        ("Ad@1", False),        # too short
    ],
)
def test_strong_password_rule(password, strong):
    assert is_strong_password(password) is strong


# ── JWT ────────────────────────────────────────────

def test_access_token_carries_user_claims():
    token = create_access_token(user_id=42, username="jane", role="manager")
    payload = decode_token(token)
    assert payload["userId"] == 42
    assert payload["username"] == "jane"
    assert payload["role"] == "manager"


def test_expired_token():
    token = create_access_token(42, "jane", "cashier", expires_delta=timedelta(seconds=-1))
    with pytest.raises(JWTError):
        decode_token(token)


def test_refresh_token_is_not_an_access_token():
    refresh = create_refresh_token(42, "jane", "cashier")
    assert decode_token(refresh, expected_type=REFRESH)["userId"] == 42
    with pytest.raises(JWTError):
        decode_token(refresh)


def test_token_hash_is_stable():
    assert hash_token("abc") == hash_token("abc")
    assert hash_token("abc") != hash_token("abd")


# ── Capability policy ─────────────────────────────

def test_role_capabilities_are_nested():
    cashier = policy.capabilities(Role.CASHIER)
    manager = policy.capabilities(Role.MANAGER)
    admin = policy.capabilities(Role.ADMIN)
    assert cashier <= manager <= admin
    assert admin == frozenset(Capability)
    assert policy.capabilities(Role.EMPLOYEE) == frozenset()


def test_admin_passes_every_check():
    admin = make_user(Role.ADMIN, capabilities=frozenset())
    assert policy.allows(admin, Capability.MANAGE_SETTINGS)


def test_cashier_needs_any_of_required():
    cashier = make_user(Role.CASHIER)
    assert policy.allows(cashier, Capability.MANAGE_SALES, Capability.VIEW_REPORTS)
    assert not policy.allows(cashier, Capability.VIEW_REPORTS)
    assert not policy.allows(cashier, Capability.PROCESS_REFUNDS)


def test_explicit_grants_extend_role():
    grants = parse_grants({"view_reports": True, "manage_settings": False, "bogus": True})
    assert grants == frozenset({Capability.VIEW_REPORTS})

    employee = make_user(Role.EMPLOYEE, capabilities=policy.capabilities(Role.EMPLOYEE, grants))
    assert policy.allows(employee, Capability.VIEW_REPORTS)
    assert not policy.allows(employee, Capability.MANAGE_SALES)


# ── Login ─────────────────────────────────────────

def _stored_user(password: str = "Cashier@123", **overrides) -> User:
    fields = dict(
        id=5,
        username="cashier1",
        email="cashier1@pos.local",
        password_hash=hash_password(password),
        full_name="Cashier One",
        role=Role.CASHIER,
        status=UserStatus.ACTIVE,
        permissions={},
        is_locked=False,
        failed_login_attempts=0,
    )
    fields.update(overrides)
    return User(**fields)


@pytest.mark.asyncio
async def test_login_issues_tokens_and_session():
    from app.api.auth import login
    from app.schemas.auth import LoginRequest

    users = AsyncMock()
    users.find_active_by_login.return_value = _stored_user()

    result = await login(
        request=MagicMock(),
        body=LoginRequest(username="cashier1", password="Cashier@123"),
        users=users,
    )

    assert result.user.id == 5
    assert decode_token(result.token)["userId"] == 5
    assert decode_token(result.refreshToken, expected_type=REFRESH)["userId"] == 5
    users.record_login.assert_awaited_once()
    session_args = users.add_session.await_args.args
    assert session_args[0] == 5
    assert session_args[1] == hash_token(result.token)


@pytest.mark.asyncio
async def test_login_wrong_password_issues_nothing():
    from app.api.auth import login
    from app.schemas.auth import LoginRequest

    users = AsyncMock()
    users.find_active_by_login.return_value = _stored_user()

    with pytest.raises(HTTPException) as exc:
        await login(
            request=MagicMock(),
            body=LoginRequest(username="cashier1", password="nope"),
            users=users,
        )

    assert exc.value.status_code == 401
    assert exc.value.detail == "Invalid credentials"
    users.record_failed_login.assert_awaited_once_with(
        users.find_active_by_login.return_value, settings.MAX_FAILED_LOGIN_ATTEMPTS
    )
    users.add_session.assert_not_awaited()


@pytest.mark.asyncio
async def test_failed_logins_lock_account(session, dialect):
    from app.repositories.users import UserRepository

    user = _stored_user(failed_login_attempts=3)
    repo = UserRepository(session, dialect)

    assert await repo.record_failed_login(user, max_attempts=5) is False
    assert user.failed_login_attempts == 4
    assert not user.is_locked

    assert await repo.record_failed_login(user, max_attempts=5) is True
    assert user.failed_login_attempts == 5
    assert user.is_locked
    assert user.locked_at is not None
    assert user.lock_reason == "Too many failed login attempts"
    assert session.commit.await_count == 2


@pytest.mark.asyncio
async def test_failed_logins_without_threshold_never_lock(session, dialect):
    from app.repositories.users import UserRepository

    user = _stored_user(failed_login_attempts=40)

    assert await UserRepository(session, dialect).record_failed_login(user, max_attempts=0) is False
    assert user.failed_login_attempts == 41
    assert not user.is_locked


@pytest.mark.asyncio
async def test_login_unknown_user():
    from app.api.auth import login
    from app.schemas.auth import LoginRequest

    users = AsyncMock()
    users.find_active_by_login.return_value = None

    with pytest.raises(HTTPException) as exc:
        await login(
            request=MagicMock(),
            body=LoginRequest(username="ghost", password="whatever"),
            users=users,
        )
    assert exc.value.status_code == 401


@pytest.mark.asyncio
async def test_login_locked_account():
    from app.api.auth import login
    from app.schemas.auth import LoginRequest

    users = AsyncMock()
    users.find_active_by_login.return_value = _stored_user(is_locked=True)

    with pytest.raises(HTTPException) as exc:
        await login(
            request=MagicMock(),
            body=LoginRequest(username="cashier1", password="Cashier@123"),
            users=users,
        )
    assert exc.value.detail == "Account is locked"
    users.add_session.assert_not_awaited()


# ── Current user dependency ───────────────────────

@pytest.mark.asyncio
async def test_current_user_requires_token():
    from app.core.deps import get_current_user

    with pytest.raises(HTTPException) as exc:
        await get_current_user(token=None, users=AsyncMock())
    assert exc.value.status_code == 401


@pytest.mark.asyncio
async def test_current_user_rejects_bad_token():
    from app.core.deps import get_current_user

    with pytest.raises(HTTPException) as exc:
        await get_current_user(token="not-a-jwt", users=AsyncMock())
    assert exc.value.status_code == 403


@pytest.mark.asyncio
async def test_current_user_rejects_revoked_session():
    from app.core.deps import get_current_user

    users = AsyncMock()
    users.get.return_value = _stored_user()
    users.session_exists.return_value = False
    token = create_access_token(5, "cashier1", "cashier")

    with pytest.raises(HTTPException) as exc:
        await get_current_user(token=token, users=users)
    assert exc.value.status_code == 401


@pytest.mark.asyncio
async def test_current_user_loads_capabilities():
    from app.core.deps import get_current_user

    users = AsyncMock()
    users.get.return_value = _stored_user(permissions={"view_reports": True})
    users.session_exists.return_value = True
    token = create_access_token(5, "cashier1", "cashier")

    user = await get_current_user(token=token, users=users)

    assert user.id == 5
    assert Capability.MANAGE_SALES in user.capabilities
    assert Capability.VIEW_REPORTS in user.capabilities


@pytest.mark.asyncio
async def test_require_capability_denies():
    from app.core.deps import require_capability

    checker = require_capability(Capability.VIEW_REPORTS)
    with pytest.raises(HTTPException) as exc:
        await checker(user=make_user(Role.CASHIER))
    assert exc.value.status_code == 403


@pytest.mark.asyncio
async def test_logout_deletes_session():
    from app.api.auth import logout

    users = AsyncMock()
    result = await logout(token="tok", current_user=make_user(), users=users)

    users.delete_session.assert_awaited_once_with(hash_token("tok"))
    assert result.message == "Logged out successfully"


@pytest.mark.asyncio
async def test_register_rejects_duplicates():
    from app.api.auth import register
    from app.schemas.auth import RegisterRequest

    users = AsyncMock()
    users.username_or_email_taken.return_value = True
    body = RegisterRequest(
        username="newbie", email="newbie@pos.local", password="Newbie@123", full_name="New Bie"
    )

    with pytest.raises(HTTPException) as exc:
        await register(request=MagicMock(), body=body, current_user=make_user(), users=users)
    assert exc.value.detail == "Username or email already exists"
    users.create.assert_not_awaited()
