"""Unit tests for customers and staff accounts: codes, duplicates and soft deletes."""

import re
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from fastapi import HTTPException

from app.models.customer import Customer, CustomerStatus
from app.models.role import Role
from app.models.user import User, UserStatus
from app.repositories.customers import CustomerRepository, generate_customer_code, to_base36
from app.repositories.users import UserRepository
from conftest import make_user


def _customer(**overrides) -> Customer:
    fields = dict(
        id=4, customer_code="CUSTABC123", name="Ada", phone="+94770000000",
        loyalty_points=10, total_spent=Decimal("0"), status=CustomerStatus.ACTIVE,
    )
    fields.update(overrides)
    return Customer(**fields)


def test_base36():
    assert to_base36(0) == "0"
    assert to_base36(35) == "Z"
    assert to_base36(36) == "10"


def test_customer_code_shape():
    assert re.fullmatch(r"CUST[0-9A-Z]{11,}", generate_customer_code())


@pytest.mark.asyncio
async def test_create_customer_rejects_duplicate_phone():
    from app.api.customers import create_customer
    from app.schemas.customer import CustomerCreate

    customers = AsyncMock()
    customers.phone_taken.return_value = True

    with pytest.raises(HTTPException) as exc:
        await create_customer(
            CustomerCreate(name="Ada", phone="+94770000000"),
            current_user=make_user(Role.CASHIER),
            customers=customers,
        )
    assert exc.value.detail == "Customer with this phone number already exists"
    customers.create.assert_not_awaited()


@pytest.mark.asyncio
async def test_customer_delete_is_soft_and_idempotent(session, dialect):
    from app.api.customers import delete_customer

    customer = _customer()
    session.get.return_value = customer
    customers = CustomerRepository(session, dialect)

    first = await delete_customer(4, current_user=make_user(), customers=customers)
    second = await delete_customer(4, current_user=make_user(), customers=customers)

    assert first.message == second.message == "Customer deleted successfully"
    assert customer.status == CustomerStatus.INACTIVE
    session.delete.assert_not_awaited()
    session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_customer_delete_unknown():
    from app.api.customers import delete_customer

    customers = AsyncMock()
    customers.get.return_value = None
    with pytest.raises(HTTPException) as exc:
        await delete_customer(404, current_user=make_user(), customers=customers)
    assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_loyalty_subtract_floors_at_zero(session, dialect):
    from app.models.inventory import AdjustOperation

    customer = _customer(loyalty_points=3)
    await CustomerRepository(session, dialect).adjust_loyalty(customer, 10, AdjustOperation.SUBTRACT)
    assert customer.loyalty_points == 0


# ── Staff accounts ────────────────────────────────

def _account(**overrides) -> User:
    fields = dict(
        id=9, username="clerk", email="clerk@pos.local", password_hash="x", full_name="Clerk",
        role=Role.CASHIER, status=UserStatus.ACTIVE, is_locked=False, permissions={},
    )
    fields.update(overrides)
    return User(**fields)


@pytest.mark.asyncio
async def test_user_delete_is_soft_and_idempotent(session, dialect):
    from app.api.users import delete_user

    account = _account()
    session.get.return_value = account
    users = UserRepository(session, dialect)

    await delete_user(9, current_user=make_user(), users=users)
    await delete_user(9, current_user=make_user(), users=users)

    assert account.status == UserStatus.INACTIVE
    session.delete.assert_not_awaited()
    session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_cannot_delete_own_account():
    from app.api.users import delete_user

    with pytest.raises(HTTPException) as exc:
        await delete_user(1, current_user=make_user(user_id=1), users=AsyncMock())
    assert exc.value.detail == "Cannot delete your own account"


@pytest.mark.asyncio
async def test_lock_then_unlock(session, dialect):
    users = UserRepository(session, dialect)
    account = _account(failed_login_attempts=3)

    await users.lock(account, locked_by=1, reason="Suspicious activity")
    assert account.is_locked is True
    assert account.lock_reason == "Suspicious activity"

    await users.unlock(account)
    assert account.is_locked is False
    assert account.locked_by is None
    assert account.failed_login_attempts == 0


@pytest.mark.asyncio
async def test_cannot_lock_own_account():
    from app.api.users import lock_user
    from app.schemas.user import LockRequest

    with pytest.raises(HTTPException) as exc:
        await lock_user(1, LockRequest(), current_user=make_user(user_id=1), users=AsyncMock())
    assert exc.value.detail == "Cannot lock your own account"
