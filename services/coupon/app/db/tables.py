"""
Relational schema of the coupon service (SQLAlchemy Core).
"""
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
)

metadata = MetaData()

products = Table(
    "products",
    metadata,
    Column("product_id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("description", Text, nullable=True),
    Column("category", String(64), nullable=False, index=True),
    Column("price", Float, nullable=False),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("created_at", DateTime, nullable=False),
)

purchase_orders = Table(
    "purchase_orders",
    metadata,
    Column("purchase_order_id", Integer, primary_key=True, autoincrement=True),
    Column("order_number", String(64), nullable=False, unique=True),
    Column("customer_name", String(255), nullable=False),
    Column("email", String(255), nullable=False, index=True),
    Column("phone", String(32), nullable=True),
    Column("total_amount", Float, nullable=False),
    Column("product_id", Integer, ForeignKey("products.product_id"), nullable=False),
    Column("serial_number", String(128), nullable=True, index=True),
    Column("created_at", DateTime, nullable=False),
)

coupons = Table(
    "coupons",
    metadata,
    Column("coupon_id", Integer, primary_key=True, autoincrement=True),
    Column("code", String(32), nullable=False, unique=True),
    Column("discount_type", String(16), nullable=False),
    Column("discount_value", Float, nullable=False),
    Column("minimum_order_value", Float, nullable=True),
    Column("max_discount_amount", Float, nullable=True),
    Column("expires_at", DateTime, nullable=False),
    Column("usage_limit", Integer, nullable=False, default=1),
    Column("used_count", Integer, nullable=False, default=0),
    Column("status", String(16), nullable=False, default="ACTIVE", index=True),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("product_id", Integer, ForeignKey("products.product_id"), nullable=True),
    Column(
        "purchase_order_id",
        Integer,
        ForeignKey("purchase_orders.purchase_order_id"),
        nullable=True,
        index=True,
    ),
    Column("created_at", DateTime, nullable=False),
)

coupon_usages = Table(
    "coupon_usages",
    metadata,
    Column("usage_id", Integer, primary_key=True, autoincrement=True),
    Column("coupon_id", Integer, ForeignKey("coupons.coupon_id"), nullable=False, index=True),
    Column("user_id", String(128), nullable=False),
    Column("order_value", Float, nullable=False),
    Column("discount", Float, nullable=False),
    Column("used_at", DateTime, nullable=False),
)
