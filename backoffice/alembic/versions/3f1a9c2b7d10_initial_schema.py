"""initial schema

Revision ID: 3f1a9c2b7d10
Revises:
Create Date: 2026-10-19
"""
from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3f1a9c2b7d10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# SQLAlchemy stocke le NOM des membres d'enum (feet_20, pas "20_feet")
role = postgresql.ENUM("admin", "moderator", "user", name="role", create_type=False)
partner_status = postgresql.ENUM("active", "inactive", "pending", name="partner_status", create_type=False)
order_status = postgresql.ENUM(
    "draft", "confirmed", "in_progress", "completed", "cancelled", name="order_status", create_type=False
)
workflow_status = postgresql.ENUM("request", "approve", "procure", "receive", name="workflow_status", create_type=False)
container_type = postgresql.ENUM("feet_20", "feet_40", "groupage", name="container_type", create_type=False)
container_status = postgresql.ENUM(
    "available",
    "planning",
    "loading",
    "full",
    "departed",
    "in_transit",
    "arrived",
    "completed",
    name="container_status",
    create_type=False,
)
booking_status = postgresql.ENUM("pending", "confirmed", "cancelled", name="booking_status", create_type=False)

ENUMS = (role, partner_status, order_status, workflow_status, container_type, container_status, booking_status)


def _timestamps(updated: bool = True) -> list[sa.Column]:
    cols = [sa.Column("created_at", sa.DateTime(timezone=True), nullable=False)]
    if updated:
        cols.append(sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False))
    return cols


def upgrade() -> None:
    bind = op.get_bind()
    for enum_type in ENUMS:
        enum_type.create(bind, checkfirst=True)

    # ---------- MASTER DATA ----------
    op.create_table(
        "categories",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("name", sa.String(120), nullable=False, unique=True),
        sa.Column("description", sa.Text()),
        *_timestamps(),
    )

    op.create_table(
        "clients",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("type", sa.String(32)),
        sa.Column("status", partner_status, nullable=False),
        sa.Column("email", sa.String(255)),
        sa.Column("phone", sa.String(64)),
        sa.Column("address", sa.String(255)),
        sa.Column("city", sa.String(128)),
        sa.Column("country", sa.String(64)),
        sa.Column("delivery_address", sa.String(255)),
        sa.Column("main_contact_name", sa.String(200)),
        sa.Column("payment_conditions", sa.String(128)),
        sa.Column("notes", sa.Text()),
        *_timestamps(),
    )
    op.create_index("ix_clients_name", "clients", ["name"])

    op.create_table(
        "suppliers",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("status", partner_status, nullable=False),
        sa.Column("country", sa.String(64)),
        sa.Column("email", sa.String(255)),
        sa.Column("phone", sa.String(64)),
        sa.Column("main_contact_name", sa.String(200)),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("incoterm", sa.String(8)),
        sa.Column("payment_conditions", sa.String(128)),
        sa.Column("preparation_time", sa.Integer()),
        sa.Column("reliability_rating", sa.Integer()),
        sa.Column("minimum_order_amount", sa.Numeric(14, 2)),
        sa.Column("notes", sa.Text()),
        *_timestamps(),
        sa.CheckConstraint("reliability_rating >= 0 AND reliability_rating <= 5", name="ck_supplier_rating_0_5"),
        sa.CheckConstraint("preparation_time >= 0", name="ck_supplier_preparation_nonneg"),
    )

    op.create_table(
        "products",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("sku", sa.String(64), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("category", sa.String(120), nullable=False),
        sa.Column("unit", sa.String(32), nullable=False),
        sa.Column("cost", sa.Numeric(14, 2), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("dangerous", sa.Boolean(), nullable=False),
        sa.Column("imdg_class", sa.String(16)),
        sa.Column("units_per_package", sa.Integer()),
        sa.Column("packages_per_carton", sa.Integer()),
        sa.Column("cartons_per_palette", sa.Integer()),
        sa.Column("carton_weight", sa.Numeric(12, 3)),
        sa.Column("carton_volume", sa.Numeric(12, 4)),
        *_timestamps(),
        sa.CheckConstraint("cost >= 0", name="ck_product_cost_nonneg"),
    )

    op.create_table(
        "transitaires",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("code", sa.String(32)),
        sa.Column("status", partner_status, nullable=False),
        sa.Column("country", sa.String(64)),
        sa.Column("city", sa.String(128)),
        sa.Column("address", sa.String(255)),
        sa.Column("contact_name", sa.String(200)),
        sa.Column("contact_email", sa.String(255)),
        sa.Column("contact_phone", sa.String(64)),
        sa.Column("dangerous_goods_certified", sa.Boolean(), nullable=False),
        sa.Column("max_container_capacity", sa.Integer()),
        sa.Column("services", sa.JSON(), nullable=False),
        sa.Column("specialties", sa.JSON(), nullable=False),
        sa.Column("tracking_system_url", sa.String(255)),
        sa.Column("notes", sa.Text()),
        *_timestamps(),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("full_name", sa.String(200)),
        sa.Column("phone", sa.String(64)),
        sa.Column("department", sa.String(128)),
        sa.Column("role", role, nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.Column("last_login_at", sa.DateTime(timezone=True)),
        *_timestamps(),
    )

    # ---------- TRANSPORT ----------
    op.create_table(
        "containers",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("number", sa.String(32), nullable=False, unique=True),
        sa.Column("type", container_type, nullable=False),
        sa.Column("transitaire_id", sa.BigInteger(), sa.ForeignKey("transitaires.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("status", container_status, nullable=False),
        sa.Column("reservation_number", sa.String(32), unique=True),
        sa.Column("departure_port", sa.String(128)),
        sa.Column("arrival_port", sa.String(128)),
        sa.Column("etd", sa.Date()),
        sa.Column("eta", sa.Date()),
        sa.Column("port_cutoff", sa.Date()),
        sa.Column("max_pallets", sa.Integer()),
        sa.Column("max_weight", sa.Numeric(12, 3)),
        sa.Column("max_volume", sa.Numeric(12, 3)),
        sa.Column("dangerous_goods", sa.Boolean(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "groupages",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("container_id", sa.BigInteger(), sa.ForeignKey("containers.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("transitaire_id", sa.BigInteger(), sa.ForeignKey("transitaires.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("status", container_status, nullable=False),
        sa.Column("reservation_number", sa.String(32)),
        sa.Column("max_space_pallets", sa.Integer(), nullable=False),
        sa.Column("max_weight", sa.Numeric(12, 3), nullable=False),
        sa.Column("max_volume", sa.Numeric(12, 3), nullable=False),
        sa.Column("available_space_pallets", sa.Integer(), nullable=False),
        sa.Column("available_weight", sa.Numeric(12, 3), nullable=False),
        sa.Column("available_volume", sa.Numeric(12, 3), nullable=False),
        sa.Column("cost_per_palette", sa.Numeric(14, 2), nullable=False),
        sa.Column("cost_per_kg", sa.Numeric(14, 4), nullable=False),
        sa.Column("cost_per_m3", sa.Numeric(14, 2), nullable=False),
        sa.Column("allows_dangerous_goods", sa.Boolean(), nullable=False),
        sa.Column("departure_date", sa.Date()),
        sa.Column("arrival_date", sa.Date()),
        sa.Column("notes", sa.Text()),
        *_timestamps(),
        sa.CheckConstraint("available_space_pallets >= 0", name="ck_groupage_pallets_nonneg"),
        sa.CheckConstraint("available_weight >= 0", name="ck_groupage_weight_nonneg"),
        sa.CheckConstraint("available_volume >= 0", name="ck_groupage_volume_nonneg"),
        sa.CheckConstraint("available_space_pallets <= max_space_pallets", name="ck_groupage_pallets_le_max"),
    )
    op.create_index("ix_groupages_container_id", "groupages", ["container_id"])

    # ---------- COMMANDES ----------
    op.create_table(
        "orders",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("order_number", sa.String(32), nullable=False, unique=True),
        sa.Column("client_id", sa.BigInteger(), sa.ForeignKey("clients.id", ondelete="RESTRICT")),
        sa.Column("supplier_id", sa.BigInteger(), sa.ForeignKey("suppliers.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("transitaire_id", sa.BigInteger(), sa.ForeignKey("transitaires.id", ondelete="RESTRICT")),
        sa.Column("container_id", sa.BigInteger(), sa.ForeignKey("containers.id", ondelete="SET NULL")),
        sa.Column("status", order_status, nullable=False),
        sa.Column("order_date", sa.Date(), nullable=False),
        sa.Column("payment_type", sa.String(32), nullable=False),
        sa.Column("payment_date", sa.Date()),
        sa.Column("packaging", sa.String(128)),
        sa.Column("tva_rate", sa.Numeric(5, 2), nullable=False),
        sa.Column("total_ht", sa.Numeric(14, 2), nullable=False),
        sa.Column("total_ttc", sa.Numeric(14, 2), nullable=False),
        sa.Column("weight", sa.Numeric(12, 3)),
        sa.Column("volume", sa.Numeric(12, 3)),
        sa.Column("cartons", sa.Integer()),
        sa.Column("is_received", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("tva_rate >= 0", name="ck_order_tva_nonneg"),
    )
    op.create_index("ix_orders_client_id", "orders", ["client_id"])
    op.create_index("ix_orders_container_id", "orders", ["container_id"])

    op.create_table(
        "order_products",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("order_id", sa.BigInteger(), sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False),
        sa.Column("product_id", sa.BigInteger(), sa.ForeignKey("products.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Numeric(14, 2), nullable=False),
        sa.Column("total_price", sa.Numeric(14, 2), nullable=False),
        sa.Column("carton_quantity", sa.Integer()),
        sa.Column("palette_quantity", sa.Integer()),
        *_timestamps(updated=False),
        sa.CheckConstraint("quantity > 0", name="ck_order_line_qty_pos"),
        sa.CheckConstraint("unit_price >= 0", name="ck_order_line_unit_price_nonneg"),
    )
    op.create_index("ix_order_products_order_id", "order_products", ["order_id"])

    op.create_table(
        "order_workflows",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("order_id", sa.BigInteger(), sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("current_status", workflow_status, nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "workflow_approvals",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column(
            "workflow_id", sa.BigInteger(), sa.ForeignKey("order_workflows.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("status", workflow_status, nullable=False),
        sa.Column("approved_by", sa.BigInteger(), sa.ForeignKey("users.id", ondelete="SET NULL")),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("comments", sa.Text()),
    )
    op.create_index("ix_workflow_approvals_workflow_id", "workflow_approvals", ["workflow_id"])

    op.create_table(
        "groupage_bookings",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("groupage_id", sa.BigInteger(), sa.ForeignKey("groupages.id", ondelete="CASCADE"), nullable=False),
        sa.Column("order_id", sa.BigInteger(), sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False),
        sa.Column("palettes_booked", sa.Integer(), nullable=False),
        sa.Column("weight_booked", sa.Numeric(12, 3), nullable=False),
        sa.Column("volume_booked", sa.Numeric(12, 3), nullable=False),
        sa.Column("cost_calculated", sa.Numeric(14, 2), nullable=False),
        sa.Column("has_dangerous_goods", sa.Boolean(), nullable=False),
        sa.Column("booking_status", booking_status, nullable=False),
        sa.Column("confirmed_by_transitaire", sa.Boolean(), nullable=False),
        sa.Column("transitaire_notes", sa.Text()),
        sa.Column("booking_date", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("groupage_id", "order_id", name="uq_booking_groupage_order"),
        sa.CheckConstraint("palettes_booked >= 0", name="ck_booking_pallets_nonneg"),
        sa.CheckConstraint("weight_booked >= 0", name="ck_booking_weight_nonneg"),
        sa.CheckConstraint("volume_booked >= 0", name="ck_booking_volume_nonneg"),
    )
    op.create_index("ix_groupage_bookings_groupage_id", "groupage_bookings", ["groupage_id"])
    op.create_index("ix_groupage_bookings_order_id", "groupage_bookings", ["order_id"])

    op.create_table(
        "payments",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("client_id", sa.BigInteger(), sa.ForeignKey("clients.id", ondelete="CASCADE"), nullable=False),
        sa.Column("order_id", sa.BigInteger(), sa.ForeignKey("orders.id", ondelete="SET NULL")),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("payment_date", sa.Date(), nullable=False),
        sa.Column("payment_method", sa.String(32)),
        sa.Column("payment_status", sa.String(32), nullable=False),
        sa.Column("notes", sa.Text()),
        *_timestamps(updated=False),
        sa.CheckConstraint("amount >= 0", name="ck_payment_amount_nonneg"),
    )
    op.create_index("ix_payments_client_id", "payments", ["client_id"])

    # ---------- SYSTÈME ----------
    op.create_table(
        "number_counters",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("entity_type", sa.String(32), nullable=False, unique=True),
        sa.Column("prefix", sa.String(8), nullable=False),
        sa.Column("current_number", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "deleted_items",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("table_name", sa.String(64), nullable=False),
        sa.Column("item_id", sa.BigInteger(), nullable=False),
        sa.Column("item_data", sa.JSON(), nullable=False),
        sa.Column("reason", sa.String(255)),
        sa.Column("deleted_by", sa.BigInteger(), sa.ForeignKey("users.id", ondelete="SET NULL")),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_deleted_items_deleted_at", "deleted_items", ["deleted_at"])
    op.create_index("ix_deleted_items_table_item", "deleted_items", ["table_name", "item_id"])

    op.create_table(
        "documents",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("filename", sa.String(255), nullable=False),
        sa.Column("stored_path", sa.String(512), nullable=False, unique=True),
        sa.Column("content_type", sa.String(128)),
        sa.Column("size", sa.Integer(), nullable=False),
        sa.Column("sha256", sa.String(64), nullable=False),
        sa.Column("entity_type", sa.String(32), nullable=False),
        sa.Column("entity_id", sa.BigInteger()),
        sa.Column("uploaded_by", sa.BigInteger(), sa.ForeignKey("users.id", ondelete="SET NULL")),
        *_timestamps(updated=False),
    )
    op.create_index("ix_documents_entity", "documents", ["entity_type", "entity_id"])


def downgrade() -> None:
    for table in (
        "documents",
        "deleted_items",
        "number_counters",
        "payments",
        "groupage_bookings",
        "workflow_approvals",
        "order_workflows",
        "order_products",
        "orders",
        "groupages",
        "containers",
        "users",
        "transitaires",
        "products",
        "suppliers",
        "clients",
        "categories",
    ):
        op.drop_table(table)

    bind = op.get_bind()
    for enum_type in reversed(ENUMS):
        enum_type.drop(bind, checkfirst=True)
