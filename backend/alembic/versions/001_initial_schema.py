"""Initial database schema - users, sessions, customers, partners, locations, inventory, sales, payments, settings, logs

Revision ID: 001_initial
Revises: None
Create Date: 2025-02-07
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column("id", sa.Integer, primary_key=True, autoincrement=True)


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime, server_default=sa.func.now(), nullable=False)


def _updated_at() -> sa.Column:
    return sa.Column("updated_at", sa.DateTime, server_default=sa.func.now(), nullable=False)


def upgrade() -> None:
    # --- Users ---
    op.create_table(
        "users",
        _id(),
        sa.Column("username", sa.String(50), nullable=False, unique=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="cashier"),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("permissions", sa.JSON),
        sa.Column("phone", sa.String(50)),
        sa.Column("address", sa.Text),
        sa.Column("department", sa.String(100)),
        sa.Column("position", sa.String(100)),
        sa.Column("is_locked", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("locked_at", sa.DateTime),
        sa.Column("locked_by", sa.Integer, sa.ForeignKey("users.id")),
        sa.Column("lock_reason", sa.Text),
        sa.Column("failed_login_attempts", sa.Integer, nullable=False, server_default="0"),
        sa.Column("last_login", sa.DateTime),
        sa.Column("reset_token", sa.String(255)),
        sa.Column("reset_token_expires", sa.DateTime),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint("role IN ('admin', 'manager', 'cashier', 'employee')", name="ck_users_role"),
        sa.CheckConstraint("status IN ('active', 'inactive', 'suspended')", name="ck_users_status"),
    )
    op.create_index("ix_users_username", "users", ["username"])
    op.create_index("ix_users_email", "users", ["email"])
    op.create_index("ix_users_status", "users", ["status"])

    # --- Sessions ---
    op.create_table(
        "user_sessions",
        _id(),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("token_hash", sa.String(255), nullable=False),
        sa.Column("expires_at", sa.DateTime, nullable=False),
        _created_at(),
    )
    op.create_index("ix_user_sessions_user_id", "user_sessions", ["user_id"])
    op.create_index("ix_user_sessions_token_hash", "user_sessions", ["token_hash"])
    op.create_index("ix_user_sessions_expires_at", "user_sessions", ["expires_at"])

    # --- Time tracking ---
    op.create_table(
        "time_tracking",
        _id(),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("clock_in", sa.DateTime, nullable=False),
        sa.Column("clock_out", sa.DateTime),
        sa.Column("notes", sa.Text),
        _created_at(),
    )
    op.create_index("ix_time_tracking_user_id", "time_tracking", ["user_id"])

    # --- Customers ---
    op.create_table(
        "customers",
        _id(),
        sa.Column("customer_code", sa.String(50), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255)),
        sa.Column("phone", sa.String(50)),
        sa.Column("address", sa.Text),
        sa.Column("date_of_birth", sa.Date),
        sa.Column("gender", sa.String(10)),
        sa.Column("loyalty_points", sa.Integer, nullable=False, server_default="0"),
        sa.Column("total_spent", sa.Numeric(12, 2), nullable=False, server_default=sa.text("0.00")),
        sa.Column("discount_percentage", sa.Numeric(5, 2), nullable=False, server_default=sa.text("0.00")),
        sa.Column("notes", sa.Text),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint("gender IN ('male', 'female', 'other')", name="ck_customers_gender"),
        sa.CheckConstraint("status IN ('active', 'inactive')", name="ck_customers_status"),
    )
    op.create_index("ix_customers_customer_code", "customers", ["customer_code"])
    op.create_index("ix_customers_email", "customers", ["email"])
    op.create_index("ix_customers_phone", "customers", ["phone"])
    op.create_index("ix_customers_status", "customers", ["status"])

    # --- Partners ---
    op.create_table(
        "partners",
        _id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("phone_no", sa.String(50)),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint("type IN ('investor', 'supplier')", name="ck_partners_type"),
    )
    op.create_table(
        "investments",
        _id(),
        sa.Column("partner_id", sa.Integer, sa.ForeignKey("partners.id"), nullable=False),
        sa.Column("partner_name", sa.String(255), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("notes", sa.Text),
        _created_at(),
        sa.CheckConstraint("type IN ('invest', 'withdraw')", name="ck_investments_type"),
    )
    op.create_index("ix_investments_partner_id", "investments", ["partner_id"])

    # --- Locations ---
    op.create_table(
        "locations",
        _id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("address", sa.Text),
        sa.Column("phone", sa.String(50)),
        sa.Column("manager_id", sa.Integer, sa.ForeignKey("users.id")),
        sa.Column("settings", sa.JSON),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint("status IN ('active', 'inactive')", name="ck_locations_status"),
    )

    # --- Inventory ---
    op.create_table(
        "inventory",
        _id(),
        sa.Column("item_name", sa.String(255), nullable=False),
        sa.Column("sku", sa.String(100), nullable=False, unique=True),
        sa.Column("barcode", sa.String(255)),
        sa.Column("qr_code", sa.Text),
        sa.Column("category", sa.String(255)),
        sa.Column("brand", sa.String(255)),
        sa.Column("supplier", sa.String(255)),
        sa.Column("unit", sa.String(50), nullable=False, server_default="pcs"),
        sa.Column("buy_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("sell_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("quantity", sa.Integer, nullable=False, server_default="0"),
        sa.Column("min_stock", sa.Integer, nullable=False, server_default="0"),
        sa.Column("max_stock", sa.Integer, nullable=False, server_default="1000"),
        sa.Column("description", sa.Text),
        sa.Column("image_url", sa.String(500)),
        sa.Column("warranty_days", sa.Integer, nullable=False, server_default="0"),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint("status IN ('active', 'inactive', 'discontinued')", name="ck_inventory_status"),
    )
    op.create_index("ix_inventory_item_name", "inventory", ["item_name"])
    op.create_index("ix_inventory_sku", "inventory", ["sku"])
    op.create_index("ix_inventory_barcode", "inventory", ["barcode"])
    op.create_index("ix_inventory_status", "inventory", ["status"])

    op.create_table(
        "location_inventory",
        _id(),
        sa.Column("location_id", sa.Integer, sa.ForeignKey("locations.id", ondelete="CASCADE"), nullable=False),
        sa.Column("item_id", sa.Integer, sa.ForeignKey("inventory.id", ondelete="CASCADE"), nullable=False),
        sa.Column("quantity", sa.Integer, nullable=False, server_default="0"),
        sa.Column("min_stock", sa.Integer, nullable=False, server_default="0"),
        sa.Column("max_stock", sa.Integer, nullable=False, server_default="1000"),
        _created_at(),
        _updated_at(),
        sa.UniqueConstraint("location_id", "item_id", name="uq_location_inventory_location_item"),
    )
    op.create_index("ix_location_inventory_location_id", "location_inventory", ["location_id"])
    op.create_index("ix_location_inventory_item_id", "location_inventory", ["item_id"])

    op.create_table(
        "inventory_transfers",
        _id(),
        sa.Column("item_id", sa.Integer, sa.ForeignKey("inventory.id"), nullable=False),
        sa.Column("from_location_id", sa.Integer, sa.ForeignKey("locations.id"), nullable=False),
        sa.Column("to_location_id", sa.Integer, sa.ForeignKey("locations.id"), nullable=False),
        sa.Column("quantity", sa.Integer, nullable=False),
        sa.Column("transferred_by", sa.Integer, sa.ForeignKey("users.id")),
        sa.Column("notes", sa.Text),
        _created_at(),
    )
    op.create_index("ix_inventory_transfers_item_id", "inventory_transfers", ["item_id"])

    # --- Sales ---
    op.create_table(
        "sales",
        _id(),
        sa.Column("invoice", sa.String(100), nullable=False, unique=True),
        sa.Column("date", sa.Date, nullable=False),
        sa.Column("customer_id", sa.Integer, sa.ForeignKey("customers.id")),
        sa.Column("customer_name", sa.String(255)),
        sa.Column("customer_phone", sa.String(50)),
        sa.Column("customer_email", sa.String(255)),
        sa.Column("cashier_id", sa.Integer, sa.ForeignKey("users.id")),
        sa.Column("cashier_name", sa.String(255)),
        sa.Column("location_id", sa.Integer, sa.ForeignKey("locations.id")),
        sa.Column("payment_method", sa.String(50), nullable=False, server_default="cash"),
        sa.Column("payment_reference", sa.String(255)),
        sa.Column("subtotal", sa.Numeric(10, 2), nullable=False, server_default=sa.text("0.00")),
        sa.Column("tax_amount", sa.Numeric(10, 2), nullable=False, server_default=sa.text("0.00")),
        sa.Column("discount_amount", sa.Numeric(10, 2), nullable=False, server_default=sa.text("0.00")),
        sa.Column("discount_type", sa.String(20), nullable=False, server_default="fixed"),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("paid_amount", sa.Numeric(10, 2), nullable=False, server_default=sa.text("0.00")),
        sa.Column("change_amount", sa.Numeric(10, 2), nullable=False, server_default=sa.text("0.00")),
        sa.Column("loyalty_points_earned", sa.Integer, nullable=False, server_default="0"),
        sa.Column("loyalty_points_redeemed", sa.Integer, nullable=False, server_default="0"),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("notes", sa.Text),
        sa.Column("synced_at", sa.DateTime),
        sa.Column("voided", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("voided_by", sa.Integer, sa.ForeignKey("users.id")),
        sa.Column("voided_at", sa.DateTime),
        sa.Column("void_reason", sa.Text),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint(
            "status IN ('paid', 'unpaid', 'partial', 'cancelled', 'refunded')", name="ck_sales_status"
        ),
        sa.CheckConstraint("discount_type IN ('fixed', 'percentage')", name="ck_sales_discount_type"),
    )
    op.create_index("ix_sales_invoice", "sales", ["invoice"])
    op.create_index("ix_sales_customer_id", "sales", ["customer_id"])
    op.create_index("ix_sales_cashier_id", "sales", ["cashier_id"])
    op.create_index("ix_sales_location_id", "sales", ["location_id"])
    op.create_index("ix_sales_status", "sales", ["status"])
    op.create_index("ix_sales_date_status", "sales", ["date", "status"])

    op.create_table(
        "sales_items",
        _id(),
        sa.Column("sale_id", sa.Integer, sa.ForeignKey("sales.id", ondelete="CASCADE"), nullable=False),
        sa.Column("item_id", sa.Integer, sa.ForeignKey("inventory.id"), nullable=False),
        sa.Column("item_name", sa.String(255), nullable=False),
        sa.Column("sku", sa.String(100), nullable=False),
        sa.Column("quantity", sa.Integer, nullable=False),
        sa.Column("unit_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("line_total", sa.Numeric(10, 2), nullable=False),
        _created_at(),
    )
    op.create_index("ix_sales_items_sale_id", "sales_items", ["sale_id"])
    op.create_index("ix_sales_items_item_id", "sales_items", ["item_id"])

    # --- Payments ---
    op.create_table(
        "payments",
        _id(),
        sa.Column("sale_id", sa.Integer, sa.ForeignKey("sales.id", ondelete="CASCADE"), nullable=False),
        sa.Column("payment_method", sa.String(50), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("transaction_id", sa.String(255)),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("stripe_payment_intent", sa.String(255)),
        sa.Column("notes", sa.Text),
        sa.Column("processed_by", sa.Integer, sa.ForeignKey("users.id")),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint(
            "payment_status IN ('pending', 'processing', 'completed', 'failed', 'refunded')",
            name="ck_payments_payment_status",
        ),
    )
    op.create_index("ix_payments_sale_id", "payments", ["sale_id"])
    op.create_index("ix_payments_transaction_id", "payments", ["transaction_id"])
    op.create_index("ix_payments_stripe_payment_intent", "payments", ["stripe_payment_intent"])
    op.create_index("ix_payments_status_created", "payments", ["payment_status", "created_at"])

    op.create_table(
        "refunds",
        _id(),
        sa.Column("payment_id", sa.Integer, sa.ForeignKey("payments.id", ondelete="CASCADE"), nullable=False),
        sa.Column("sale_id", sa.Integer, sa.ForeignKey("sales.id", ondelete="CASCADE"), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("reason", sa.Text),
        sa.Column("refund_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("stripe_refund_id", sa.String(255)),
        sa.Column("processed_by", sa.Integer, sa.ForeignKey("users.id")),
        _created_at(),
        sa.CheckConstraint(
            "refund_status IN ('pending', 'processing', 'completed', 'failed')",
            name="ck_refunds_refund_status",
        ),
    )
    op.create_index("ix_refunds_payment_id", "refunds", ["payment_id"])
    op.create_index("ix_refunds_sale_id", "refunds", ["sale_id"])

    op.create_table(
        "payment_methods",
        _id(),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("enabled", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("config", sa.JSON),
        _created_at(),
    )

    # --- Reference tables ---
    op.create_table(
        "tax_rates",
        _id(),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("rate", sa.Numeric(5, 2), nullable=False),
        sa.Column("type", sa.String(20), nullable=False, server_default="exclusive"),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        _created_at(),
    )
    op.create_table(
        "categories",
        _id(),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("description", sa.Text),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        _created_at(),
        _updated_at(),
    )
    op.create_index("ix_categories_name", "categories", ["name"])
    op.create_table(
        "suppliers",
        _id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("contact_person", sa.String(255)),
        sa.Column("email", sa.String(255)),
        sa.Column("phone", sa.String(50)),
        sa.Column("address", sa.Text),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        _created_at(),
        _updated_at(),
    )
    op.create_index("ix_suppliers_name", "suppliers", ["name"])

    # --- Settings ---
    op.create_table(
        "settings",
        _id(),
        sa.Column("shop_name", sa.String(255), nullable=False, server_default="My POS Shop"),
        sa.Column("shop_phone", sa.String(50), nullable=False, server_default=""),
        sa.Column("shop_email", sa.String(255)),
        sa.Column("shop_address", sa.Text),
        sa.Column("shop_city", sa.String(100)),
        sa.Column("shop_state", sa.String(100)),
        sa.Column("shop_zip_code", sa.String(20)),
        sa.Column("shop_logo_url", sa.String(500)),
        sa.Column("tax_rate", sa.Numeric(5, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("currency", sa.String(10), nullable=False, server_default="USD"),
        sa.Column("country_code", sa.String(10), nullable=False, server_default="+94"),
        sa.Column("warranty_period", sa.Integer, nullable=False, server_default="30"),
        sa.Column("warranty_terms", sa.Text),
        sa.Column("receipt_footer", sa.Text),
        sa.Column("business_registration", sa.String(255)),
        sa.Column("tax_id", sa.String(255)),
        _created_at(),
        _updated_at(),
    )

    # --- Logs ---
    op.create_table(
        "message_logs",
        _id(),
        sa.Column("recipient", sa.String(50), nullable=False),
        sa.Column("channel", sa.String(20), nullable=False, server_default="whatsapp"),
        sa.Column("template_name", sa.String(100)),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("provider_message_id", sa.String(255)),
        sa.Column("error", sa.Text),
        sa.Column("sale_id", sa.Integer, sa.ForeignKey("sales.id", ondelete="SET NULL")),
        sa.Column("sent_by", sa.Integer, sa.ForeignKey("users.id", ondelete="SET NULL")),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint("status IN ('sent', 'delivered', 'read', 'failed')", name="ck_message_logs_status"),
    )
    op.create_index("ix_message_logs_recipient", "message_logs", ["recipient"])
    op.create_index("ix_message_logs_template_name", "message_logs", ["template_name"])
    op.create_index("ix_message_logs_status", "message_logs", ["status"])
    op.create_index("ix_message_logs_provider_message_id", "message_logs", ["provider_message_id"])

    op.create_table(
        "integration_logs",
        _id(),
        sa.Column("integration", sa.String(50), nullable=False),
        sa.Column("event_type", sa.String(100)),
        sa.Column("payload", sa.JSON),
        sa.Column("status", sa.String(20), nullable=False, server_default="received"),
        _created_at(),
    )
    op.create_index("ix_integration_logs_integration", "integration_logs", ["integration"])


def downgrade() -> None:
    op.drop_table("integration_logs")
    op.drop_table("message_logs")
    op.drop_table("settings")
    op.drop_table("suppliers")
    op.drop_table("categories")
    op.drop_table("tax_rates")
    op.drop_table("payment_methods")
    op.drop_table("refunds")
    op.drop_table("payments")
    op.drop_table("sales_items")
    op.drop_table("sales")
    op.drop_table("inventory_transfers")
    op.drop_table("location_inventory")
    op.drop_table("inventory")
    op.drop_table("locations")
    op.drop_table("investments")
    op.drop_table("partners")
    op.drop_table("time_tracking")
    op.drop_table("user_sessions")
    op.drop_table("users")
