"""Relational layout of the fulfillment core (SQLAlchemy Core tables)."""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
)

metadata = MetaData()

Money = Numeric(12, 2, asdecimal=True)

# ---------------------------------------------------------------------------
# Catalogue (read-only collaborator)
# ---------------------------------------------------------------------------
products = Table(
    "products",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(255), nullable=False),
    Column("price", Money, nullable=False),
    Column("discount", Numeric(5, 2, asdecimal=True), nullable=False, default=0),
    Column("image", String(500), nullable=False, default=""),
)

product_variants = Table(
    "product_variants",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("product_id", Integer, ForeignKey("products.id"), nullable=False, index=True),
    Column("name", String(100), nullable=False),
)

# ---------------------------------------------------------------------------
# Inventory ledger
# ---------------------------------------------------------------------------
inventory_records = Table(
    "inventory_records",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("product_id", Integer, nullable=False),
    Column("variant_id", Integer, nullable=False),
    Column("available_quantity", Integer, nullable=False, default=0),
    Column("sold_quantity", Integer, nullable=False, default=0),
    UniqueConstraint("product_id", "variant_id", name="uq_inventory_product_variant"),
    CheckConstraint("available_quantity >= 0", name="ck_inventory_available_non_negative"),
    CheckConstraint("sold_quantity >= 0", name="ck_inventory_sold_non_negative"),
)

# ---------------------------------------------------------------------------
# Vouchers
# ---------------------------------------------------------------------------
vouchers = Table(
    "vouchers",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("code", String(50), nullable=False, unique=True),
    Column("discount_amount", Money, nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("starts_at", DateTime(timezone=True), nullable=False),
    Column("ends_at", DateTime(timezone=True), nullable=False),
    CheckConstraint("quantity >= 0", name="ck_voucher_quantity_non_negative"),
)

# ---------------------------------------------------------------------------
# Carts
# ---------------------------------------------------------------------------
carts = Table(
    "carts",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("user_id", Integer, nullable=False, unique=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
)

cart_line_items = Table(
    "cart_line_items",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("cart_id", Integer, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False),
    Column("product_id", Integer, nullable=False),
    Column("variant_id", Integer, nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("price_estimate", Money, nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    UniqueConstraint("cart_id", "product_id", "variant_id", name="uq_cart_line"),
    CheckConstraint("quantity > 0", name="ck_cart_line_quantity_positive"),
)

# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
orders = Table(
    "orders",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("order_code", String(20), nullable=False, unique=True),
    Column("user_id", Integer, nullable=False, index=True),
    Column("voucher_id", Integer, ForeignKey("vouchers.id"), nullable=True),
    Column("total_price", Money, nullable=False),
    Column("voucher_discount", Money, nullable=False),
    Column("amount_payable", Money, nullable=False),
    Column("payment_method", String(50), nullable=False),
    Column("delivery_address", Text, nullable=False),
    Column("status", String(20), nullable=False, index=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)

order_line_items = Table(
    "order_line_items",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("order_id", Integer, ForeignKey("orders.id"), nullable=False, index=True),
    Column("product_id", Integer, nullable=False),
    Column("variant_id", Integer, nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("unit_price", Money, nullable=False),
    Column("product_name", String(255), nullable=False),
    Column("variant_name", String(100), nullable=False),
    Column("product_image", String(500), nullable=False, default=""),
    Column("feedback_submitted", Boolean, nullable=False, default=False),
    CheckConstraint("quantity > 0", name="ck_order_line_quantity_positive"),
)
