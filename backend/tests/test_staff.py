"""Unit tests for the time clock, employee reports, locations and the partner ledger."""

from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import HTTPException

from app.core.exceptions import DomainError
from app.models.location import Location, LocationStatus
from app.models.partner import InvestmentType, Partner, PartnerType
from app.models.user import TimeTracking
from app.repositories.employees import EmployeeRepository, hours
from app.repositories.locations import LocationRepository
from app.repositories.partners import PartnerRepository
from app.schemas.employee import ClockAction, ClockRequest
from conftest import make_user, scalar_result


def mapping_result(row):
    result = MagicMock()
    result.mappings.return_value.first.return_value = row
    result.mappings.return_value.all.return_value = [row] if row else []
    return result


# ── Time clock ────────────────────────────────────

@pytest.mark.asyncio
async def test_clock_in_opens_record(session, dialect):
    from app.api.employees import clock

    session.execute.return_value = scalar_result(None)

    result = await clock(
        ClockRequest(action=ClockAction.IN),
        current_user=make_user(user_id=5),
        employees=EmployeeRepository(session, dialect),
    )

    record = session.add.call_args.args[0]
    assert isinstance(record, TimeTracking)
    assert record.user_id == 5
    assert record.clock_out is None
    assert result["message"] == "Clocked in successfully"


@pytest.mark.asyncio
async def test_clock_in_twice_rejected(session, dialect):
    from app.api.employees import clock

    session.execute.return_value = scalar_result(TimeTracking(id=1, user_id=5, clock_in=datetime(2025, 1, 1, 9)))

    with pytest.raises(HTTPException) as exc:
        await clock(
            ClockRequest(action=ClockAction.IN),
            current_user=make_user(user_id=5),
            employees=EmployeeRepository(session, dialect),
        )
    assert exc.value.status_code == 400
    assert exc.value.detail == "Already clocked in"
    session.add.assert_not_called()


@pytest.mark.asyncio
async def test_clock_out_closes_open_record(session, dialect):
    from app.api.employees import clock

    record = TimeTracking(id=1, user_id=5, clock_in=datetime(2025, 1, 1, 9))
    session.execute.return_value = scalar_result(record)

    result = await clock(
        ClockRequest(action=ClockAction.OUT),
        current_user=make_user(user_id=5),
        employees=EmployeeRepository(session, dialect),
    )

    assert record.clock_out is not None
    assert result["record_id"] == 1
    session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_clock_out_without_open_record(session, dialect):
    session.execute.return_value = scalar_result(None)

    with pytest.raises(DomainError, match="Not currently clocked in"):
        await EmployeeRepository(session, dialect).clock_out(5)


# ── Employee reports ──────────────────────────────

def test_hours_from_minutes():
    assert hours(90) == 1.5
    assert hours(None) == 0.0


@pytest.mark.asyncio
async def test_commission_applies_rate(session, dialect):
    session.execute.return_value = mapping_result({"total_sales": 3, "total_sales_amount": Decimal("1250.00")})

    report = await EmployeeRepository(session, dialect).commission(5, commission_rate=4)

    assert report["commission_earned"] == 50.0
    assert report["commission_rate"] == 4
    assert report["total_sales"] == 3


@pytest.mark.asyncio
async def test_invalid_employee_status_filter():
    from app.api.employees import list_employees

    with pytest.raises(HTTPException) as exc:
        await list_employees(status_filter="retired", role=None, current_user=make_user(), employees=AsyncMock())
    assert exc.value.status_code == 400


@pytest.mark.asyncio
async def test_status_all_disables_filter():
    from app.api.employees import list_employees

    employees = AsyncMock()
    employees.list_employees.return_value = []

    await list_employees(status_filter="all", role=None, current_user=make_user(), employees=employees)
    employees.list_employees.assert_awaited_once_with(None, None)


# ── Locations ─────────────────────────────────────

@pytest.mark.asyncio
async def test_location_delete_is_soft_and_idempotent(session, dialect):
    from app.api.locations import delete_location

    location = Location(id=2, name="Branch", address="Galle Rd", status=LocationStatus.ACTIVE)
    session.get.return_value = location
    locations = LocationRepository(session, dialect)

    await delete_location(2, current_user=make_user(), locations=locations)
    await delete_location(2, current_user=make_user(), locations=locations)

    assert location.status == LocationStatus.INACTIVE
    session.delete.assert_not_awaited()
    session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_empty_location_update_rejected():
    from app.api.locations import update_location
    from app.schemas.location import LocationUpdate

    locations = AsyncMock()
    with pytest.raises(HTTPException) as exc:
        await update_location(2, LocationUpdate(), current_user=make_user(), locations=locations)
    assert exc.value.detail == "No fields to update"
    locations.update.assert_not_awaited()


@pytest.mark.asyncio
async def test_transfer_requires_known_locations():
    from app.api.locations import transfer_between_locations
    from app.schemas.location import LocationTransferRequest

    locations = AsyncMock()
    locations.get.side_effect = [Location(id=1, name="Main Store"), None]
    inventory = AsyncMock()

    with pytest.raises(HTTPException) as exc:
        await transfer_between_locations(
            1,
            9,
            LocationTransferRequest(item_id=3, quantity=2),
            current_user=make_user(),
            locations=locations,
            inventory=inventory,
        )
    assert exc.value.status_code == 404
    inventory.transfer.assert_not_awaited()


# ── Partners ──────────────────────────────────────

@pytest.mark.asyncio
async def test_investment_copies_partner_name(session, dialect):
    from app.api.partners import record_investment
    from app.schemas.partner import InvestmentCreate

    session.get.return_value = Partner(id=2, name="Kamal", type=PartnerType.INVESTOR)

    async def _refresh(obj):
        obj.id = 11

    session.refresh.side_effect = _refresh

    result = await record_investment(
        2,
        InvestmentCreate(type=InvestmentType.INVEST, amount=Decimal("500.00")),
        current_user=make_user(),
        partners=PartnerRepository(session, dialect),
    )

    assert result.id == 11
    assert result.partner_name == "Kamal"
    assert result.amount == Decimal("500.00")


def test_investment_amount_must_be_positive():
    from pydantic import ValidationError

    from app.schemas.partner import InvestmentCreate

    with pytest.raises(ValidationError):
        InvestmentCreate(type=InvestmentType.WITHDRAW, amount=Decimal("0"))


@pytest.mark.asyncio
async def test_partner_balance_nets_withdrawals(session, dialect):
    session.execute.return_value = mapping_result({"invested": Decimal("1000.00"), "withdrawn": Decimal("250.00")})

    balance = await PartnerRepository(session, dialect).balance(2)

    assert balance == {
        "invested": Decimal("1000.00"),
        "withdrawn": Decimal("250.00"),
        "net": Decimal("750.00"),
    }


@pytest.mark.asyncio
async def test_unknown_partner_is_404():
    from app.api.partners import partner_balance

    partners = AsyncMock()
    partners.get.return_value = None
    with pytest.raises(HTTPException) as exc:
        await partner_balance(99, current_user=make_user(), partners=partners)
    assert exc.value.status_code == 404
