from app.schemas.common import Pagination, MessageResponse, paginate
from app.schemas.customer import (
    CustomerCreate, CustomerUpdate, CustomerResponse, CustomerListResponse,
)
from app.schemas.inventory import (
    InventoryItemCreate, InventoryItemUpdate, InventoryItemResponse,
    QuantityAdjustRequest, TransferRequest, TransferResponse,
)
from app.schemas.sale import (
    SaleCreate, SaleResponse, SaleDetailResponse, SaleListResponse,
)
from app.schemas.payment import (
    PaymentProcessRequest, PaymentResponse, RefundRequest, RefundResponse,
)

__all__ = [
    "Pagination", "MessageResponse", "paginate",
    "CustomerCreate", "CustomerUpdate", "CustomerResponse", "CustomerListResponse",
    "InventoryItemCreate", "InventoryItemUpdate", "InventoryItemResponse",
    "QuantityAdjustRequest", "TransferRequest", "TransferResponse",
    "SaleCreate", "SaleResponse", "SaleDetailResponse", "SaleListResponse",
    "PaymentProcessRequest", "PaymentResponse", "RefundRequest", "RefundResponse",
]
