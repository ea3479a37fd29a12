"""Employee performance, time clock and attendance endpoints."""

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.core.deps import get_current_user, repository, require_capability
from app.core.exceptions import DomainError
from app.models.role import Capability, Role
from app.models.user import UserStatus
from app.repositories.employees import EmployeeRepository
from app.schemas.auth import CurrentUser
from app.schemas.employee import ClockAction, ClockRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/employees", tags=["employees"])

managers = require_capability(Capability.MANAGE_EMPLOYEES)


@router.get("")
async def list_employees(
    status_filter: str = Query("active", alias="status"),
    role: Role | None = None,
    current_user: CurrentUser = Depends(managers),
    employees: EmployeeRepository = Depends(repository(EmployeeRepository)),
):
    """List staff; ``status=all`` disables the status filter."""
    if status_filter == "all":
        user_status = None
    else:
        try:
            user_status = UserStatus(status_filter)
        except ValueError:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid status")
    return {"employees": await employees.list_employees(user_status, role)}


@router.get("/attendance/summary")
async def attendance_summary(
    start_date: date | None = None,
    end_date: date | None = None,
    current_user: CurrentUser = Depends(managers),
    employees: EmployeeRepository = Depends(repository(EmployeeRepository)),
):
    return {
        "attendance_summary": await employees.attendance(start_date, end_date),
        "period": {"start_date": start_date, "end_date": end_date},
    }


@router.post("/clock")
async def clock(
    body: ClockRequest,
    current_user: CurrentUser = Depends(get_current_user),
    employees: EmployeeRepository = Depends(repository(EmployeeRepository)),
):
    """Clock the current user in or out."""
    try:
        if body.action is ClockAction.IN:
            record = await employees.clock_in(current_user.id)
            logger.info("User %s clocked in", current_user.username)
            return {"message": "Clocked in successfully", "record_id": record.id, "clock_in": record.clock_in}
        record = await employees.clock_out(current_user.id)
    except DomainError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    logger.info("User %s clocked out", current_user.username)
    return {"message": "Clocked out successfully", "record_id": record.id, "clock_out": record.clock_out}


@router.get("/{user_id}/performance")
async def employee_performance(
    user_id: int,
    start_date: date | None = None,
    end_date: date | None = None,
    current_user: CurrentUser = Depends(managers),
    employees: EmployeeRepository = Depends(repository(EmployeeRepository)),
):
    return await employees.performance(user_id, start_date, end_date)


@router.get("/{user_id}/timetracking")
async def employee_time_tracking(
    user_id: int,
    start_date: date | None = None,
    end_date: date | None = None,
    current_user: CurrentUser = Depends(managers),
    employees: EmployeeRepository = Depends(repository(EmployeeRepository)),
):
    return await employees.time_records(user_id, start_date, end_date)


@router.get("/{user_id}/commission")
async def employee_commission(
    user_id: int,
    commission_rate: float = Query(5, ge=0, le=100),
    start_date: date | None = None,
    end_date: date | None = None,
    current_user: CurrentUser = Depends(managers),
    employees: EmployeeRepository = Depends(repository(EmployeeRepository)),
):
    return {"commission_report": await employees.commission(user_id, commission_rate, start_date, end_date)}
