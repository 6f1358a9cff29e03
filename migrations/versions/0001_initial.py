"""carts, cart_items, orders, order_items

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

cart_status = sa.Enum("active", "submitted", "abandoned", name="cart_status")
fulfillment_type = sa.Enum("pickup", "delivery", name="fulfillment_type")
order_status = sa.Enum(
    "requested", "confirmed", "ready", "out_for_delivery", "fulfilled", "cancelled", "completed",
    name="order_status"
)


def upgrade() -> None:
    op.create_table(
        "carts",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("customer_id", sa.String(), nullable=False),
        sa.Column("vendor_id", sa.String(), nullable=False),
        sa.Column("status", cart_status, nullable=False),
        sa.Column("fulfillment_type", fulfillment_type, nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_carts_customer_id", "carts", ["customer_id"])
    op.create_index("ix_carts_vendor_id", "carts", ["vendor_id"])
    op.create_index(
        "uq_carts_one_active_per_customer",
        "carts",
        ["customer_id"],
        unique=True,
        postgresql_where=sa.text("status = 'active'"),
    )

    op.create_table(
        "cart_items",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("cart_id", sa.String(), sa.ForeignKey("carts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("vendor_id", sa.String(), nullable=False),
        sa.Column("listing_id", sa.String(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("unit_price", sa.Numeric(10, 2), nullable=True),
        sa.Column("image_url", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint("cart_id", "listing_id", name="uq_cart_items_cart_listing"),
        sa.CheckConstraint("quantity >= 1", name="ck_cart_items_quantity_positive"),
    )
    op.create_index("ix_cart_items_cart_id", "cart_items", ["cart_id"])
    op.create_index("ix_cart_items_listing_id", "cart_items", ["listing_id"])

    op.create_table(
        "orders",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("order_number", sa.String(32), nullable=False),
        sa.Column("customer_id", sa.String(), nullable=False),
        sa.Column("vendor_id", sa.String(), nullable=False),
        sa.Column("cart_id", sa.String(), nullable=True),
        sa.Column("status", order_status, nullable=False),
        sa.Column("fulfillment_type", fulfillment_type, nullable=False),
        sa.Column("contact_name", sa.String(255), nullable=False),
        sa.Column("contact_phone", sa.String(64), nullable=False),
        sa.Column("contact_email", sa.String(255), nullable=True),
        sa.Column("delivery_address1", sa.String(255), nullable=True),
        sa.Column("delivery_address2", sa.String(255), nullable=True),
        sa.Column("delivery_city", sa.String(255), nullable=True),
        sa.Column("delivery_state", sa.String(64), nullable=True),
        sa.Column("delivery_postal_code", sa.String(32), nullable=True),
        sa.Column("delivery_instructions", sa.Text(), nullable=True),
        sa.Column("delivery_time", sa.String(64), nullable=True),
        sa.Column("pickup_time", sa.String(64), nullable=True),
        sa.Column("subtotal", sa.Numeric(10, 2), nullable=False),
        sa.Column("fees", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("total", sa.Numeric(10, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("confirmed_at", sa.DateTime(), nullable=True),
        sa.Column("fulfilled_at", sa.DateTime(), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_orders_order_number", "orders", ["order_number"], unique=True)
    op.create_index("ix_orders_customer_id", "orders", ["customer_id"])
    op.create_index("ix_orders_vendor_id", "orders", ["vendor_id"])
    op.create_index("ix_orders_cart_id", "orders", ["cart_id"], unique=True)

    op.create_table(
        "order_items",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("order_id", sa.String(), sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False),
        sa.Column("listing_id", sa.String(), nullable=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("unit_price", sa.Numeric(10, 2), nullable=True),
        sa.Column("image_url", sa.String(), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_order_items_order_id", "order_items", ["order_id"])


def downgrade() -> None:
    op.drop_table("order_items")
    op.drop_table("orders")
    op.drop_table("cart_items")
    op.drop_table("carts")

    bind = op.get_bind()
    order_status.drop(bind, checkfirst=True)
    fulfillment_type.drop(bind, checkfirst=True)
    cart_status.drop(bind, checkfirst=True)
