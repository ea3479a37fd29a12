"""Shop settings schemas (camelCase on the wire)."""

from decimal import Decimal

from pydantic import BaseModel, Field

from app.models.setting import DEFAULT_RECEIPT_FOOTER, DEFAULT_WARRANTY_TERMS

# wire name -> column
FIELD_COLUMNS = {
    "shopName": "shop_name",
    "shopPhone": "shop_phone",
    "shopEmail": "shop_email",
    "shopAddress": "shop_address",
    "shopCity": "shop_city",
    "shopState": "shop_state",
    "shopZipCode": "shop_zip_code",
    "shopLogoUrl": "shop_logo_url",
    "taxRate": "tax_rate",
    "currency": "currency",
    "countryCode": "country_code",
    "warrantyPeriod": "warranty_period",
    "warrantyTerms": "warranty_terms",
    "receiptFooter": "receipt_footer",
    "businessRegistration": "business_registration",
    "taxId": "tax_id",
}


class ShopSettingsResponse(BaseModel):
    shopName: str = "My POS Shop"
    shopPhone: str = ""
    shopEmail: str | None = ""
    shopAddress: str | None = ""
    shopCity: str | None = ""
    shopState: str | None = ""
    shopZipCode: str | None = ""
    shopLogoUrl: str | None = ""
    taxRate: Decimal = Field(Decimal("0"), ge=0, le=100)
    currency: str = "USD"
    countryCode: str = "+94"
    warrantyPeriod: int = Field(30, ge=0)
    warrantyTerms: str | None = DEFAULT_WARRANTY_TERMS
    receiptFooter: str | None = DEFAULT_RECEIPT_FOOTER
    businessRegistration: str | None = ""
    taxId: str | None = ""

    @classmethod
    def from_row(cls, row) -> "ShopSettingsResponse":
        values = {name: getattr(row, column) for name, column in FIELD_COLUMNS.items()}
        return cls(**{k: v for k, v in values.items() if v is not None})


class ShopSettingsUpdate(ShopSettingsResponse):
    shopName: str = Field(min_length=1)
    shopPhone: str = Field(min_length=1)

    def to_columns(self) -> dict:
        return {column: getattr(self, name) for name, column in FIELD_COLUMNS.items()}
