"""SQLAlchemy models for the POS backend."""

from app.models.user import User, UserSession, UserStatus, TimeTracking
from app.models.role import Role, Capability
from app.models.customer import Customer, CustomerStatus, Gender
from app.models.partner import Partner, Investment, PartnerType, InvestmentType
from app.models.inventory import AdjustOperation, InventoryItem, ItemStatus
from app.models.location import Location, LocationInventory, LocationStatus, InventoryTransfer
from app.models.sale import Sale, SaleItem, SaleStatus, DiscountType
from app.models.payment import Payment, PaymentMethodConfig, PaymentStatus, Refund, RefundStatus
from app.models.category import Category, Supplier, ReferenceStatus
from app.models.setting import ShopSettings, TaxRate, TaxType
from app.models.message_log import IntegrationLog, MessageLog, MessageStatus

__all__ = [
    "User",
    "UserSession",
    "UserStatus",
    "TimeTracking",
    "Role",
    "Capability",
    "Customer",
    "CustomerStatus",
    "Gender",
    "Partner",
    "Investment",
    "PartnerType",
    "InvestmentType",
    "InventoryItem",
    "ItemStatus",
    "AdjustOperation",
    "Location",
    "LocationInventory",
    "LocationStatus",
    "InventoryTransfer",
    "Sale",
    "SaleItem",
    "SaleStatus",
    "DiscountType",
    "Payment",
    "PaymentMethodConfig",
    "PaymentStatus",
    "Refund",
    "RefundStatus",
    "Category",
    "Supplier",
    "ReferenceStatus",
    "ShopSettings",
    "TaxRate",
    "TaxType",
    "IntegrationLog",
    "MessageLog",
    "MessageStatus",
]
