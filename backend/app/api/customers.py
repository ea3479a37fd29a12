"""Customer management endpoints with capability checks."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.core.deps import get_current_user, repository, require_capability
from app.models.customer import Customer, CustomerStatus
from app.models.role import Capability
from app.repositories.customers import CustomerRepository
from app.schemas.auth import CurrentUser
from app.schemas.common import MessageResponse, paginate
from app.schemas.customer import (
    CustomerCreate,
    CustomerDetailResponse,
    CustomerListResponse,
    CustomerResponse,
    CustomerUpdate,
    LoyaltyAdjustRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/customers", tags=["customers"])


async def _get_or_404(customers: CustomerRepository, customer_id: int) -> Customer:
    customer = await customers.get(customer_id)
    if customer is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Customer not found")
    return customer


@router.get("", response_model=CustomerListResponse)
async def list_customers(
    search: str | None = None,
    status_filter: str = Query("active", alias="status"),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    current_user: CurrentUser = Depends(get_current_user),
    customers: CustomerRepository = Depends(repository(CustomerRepository)),
):
    """List customers with pagination and optional search; ``status=all`` lists every row."""
    if status_filter == "all":
        customer_status = None
    else:
        try:
            customer_status = CustomerStatus(status_filter)
        except ValueError:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid status")

    rows, total = await customers.list_customers(search, customer_status, limit, offset)
    return CustomerListResponse(
        customers=[CustomerResponse.model_validate(c) for c in rows],
        pagination=paginate(total, limit, offset),
    )


@router.get("/code/{code}", response_model=CustomerResponse)
async def get_customer_by_code(
    code: str,
    current_user: CurrentUser = Depends(get_current_user),
    customers: CustomerRepository = Depends(repository(CustomerRepository)),
):
    customer = await customers.get_by_code(code)
    if customer is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Customer not found")
    return CustomerResponse.model_validate(customer)


@router.get("/{customer_id}", response_model=CustomerDetailResponse)
async def get_customer(
    customer_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    customers: CustomerRepository = Depends(repository(CustomerRepository)),
):
    """Single customer with their ten most recent sales."""
    customer = await _get_or_404(customers, customer_id)
    detail = CustomerDetailResponse.model_validate(customer)
    detail.recent_sales = await customers.recent_sales(customer_id)
    return detail


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_customer(
    body: CustomerCreate,
    current_user: CurrentUser = Depends(require_capability(Capability.MANAGE_CUSTOMERS)),
    customers: CustomerRepository = Depends(repository(CustomerRepository)),
):
    if body.phone and await customers.phone_taken(body.phone):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Customer with this phone number already exists",
        )
    if body.email and await customers.email_taken(body.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Customer with this email already exists",
        )

    customer = await customers.create(**body.model_dump())
    logger.info("Customer %s created by %s", customer.customer_code, current_user.username)
    return {"message": "Customer created successfully", "customer": CustomerResponse.model_validate(customer)}


@router.put("/{customer_id}")
async def update_customer(
    customer_id: int,
    body: CustomerUpdate,
    current_user: CurrentUser = Depends(require_capability(Capability.MANAGE_CUSTOMERS)),
    customers: CustomerRepository = Depends(repository(CustomerRepository)),
):
    changes = body.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")

    customer = await _get_or_404(customers, customer_id)
    if changes.get("phone") and await customers.phone_taken(changes["phone"], exclude_id=customer_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Another customer with this phone number already exists",
        )
    if changes.get("email") and await customers.email_taken(changes["email"], exclude_id=customer_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Another customer with this email already exists",
        )

    customer = await customers.update(customer, changes)
    return {"message": "Customer updated successfully", "customer": CustomerResponse.model_validate(customer)}


@router.patch("/{customer_id}/loyalty")
async def adjust_loyalty_points(
    customer_id: int,
    body: LoyaltyAdjustRequest,
    current_user: CurrentUser = Depends(require_capability(Capability.MANAGE_CUSTOMERS)),
    customers: CustomerRepository = Depends(repository(CustomerRepository)),
):
    customer = await _get_or_404(customers, customer_id)
    customer = await customers.adjust_loyalty(customer, body.points, body.action)
    return {"message": "Loyalty points updated successfully", "loyalty_points": customer.loyalty_points}


@router.get("/{customer_id}/analytics")
async def customer_analytics(
    customer_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    customers: CustomerRepository = Depends(repository(CustomerRepository)),
):
    await _get_or_404(customers, customer_id)
    return await customers.analytics(customer_id)


@router.delete("/{customer_id}", response_model=MessageResponse)
async def delete_customer(
    customer_id: int,
    current_user: CurrentUser = Depends(require_capability(Capability.DELETE_CUSTOMERS)),
    customers: CustomerRepository = Depends(repository(CustomerRepository)),
):
    """Soft delete: the customer is marked inactive. Repeating it is a no-op."""
    customer = await _get_or_404(customers, customer_id)
    await customers.deactivate(customer)
    logger.info("Customer %s deactivated by %s", customer.customer_code, current_user.username)
    return MessageResponse(message="Customer deleted successfully")
