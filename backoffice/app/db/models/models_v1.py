from __future__ import annotations

from datetime import datetime, date, timezone
from decimal import Decimal

from sqlalchemy import (
    JSON,
    String,
    Integer,
    DateTime,
    Date,
    Boolean,
    ForeignKey,
    Numeric,
    Text,
    Enum,
    UniqueConstraint,
    Index,
    CheckConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backoffice.app.db.base import Base
from backoffice.app.db.models.core_types import (
    BigIntPK,
    Role,
    PartnerStatus,
    OrderStatus,
    WorkflowStatus,
    ContainerType,
    ContainerStatus,
    BookingStatus,
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------- MASTER DATA ----------
class Category(Base):
    __tablename__ = "categories"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)


class Client(Base):
    __tablename__ = "clients"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    type: Mapped[str | None] = mapped_column(String(32))  # entreprise / particulier
    status: Mapped[PartnerStatus] = mapped_column(
        Enum(PartnerStatus, name="partner_status"),
        default=PartnerStatus.active,
        nullable=False,
    )
    email: Mapped[str | None] = mapped_column(String(255))
    phone: Mapped[str | None] = mapped_column(String(64))
    address: Mapped[str | None] = mapped_column(String(255))
    city: Mapped[str | None] = mapped_column(String(128))
    country: Mapped[str | None] = mapped_column(String(64))
    delivery_address: Mapped[str | None] = mapped_column(String(255))
    main_contact_name: Mapped[str | None] = mapped_column(String(200))
    payment_conditions: Mapped[str | None] = mapped_column(String(128))
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)


class Supplier(Base):
    __tablename__ = "suppliers"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    status: Mapped[PartnerStatus] = mapped_column(
        Enum(PartnerStatus, name="partner_status"),
        default=PartnerStatus.active,
        nullable=False,
    )
    country: Mapped[str | None] = mapped_column(String(64))
    email: Mapped[str | None] = mapped_column(String(255))
    phone: Mapped[str | None] = mapped_column(String(64))
    main_contact_name: Mapped[str | None] = mapped_column(String(200))
    currency: Mapped[str] = mapped_column(String(3), default="EUR", nullable=False)
    incoterm: Mapped[str | None] = mapped_column(String(8))
    payment_conditions: Mapped[str | None] = mapped_column(String(128))
    preparation_time: Mapped[int | None] = mapped_column(Integer)  # jours
    reliability_rating: Mapped[int | None] = mapped_column(Integer)  # 0..5
    minimum_order_amount: Mapped[Decimal | None] = mapped_column(Numeric(14, 2))
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("reliability_rating >= 0 AND reliability_rating <= 5", name="ck_supplier_rating_0_5"),
        CheckConstraint("preparation_time >= 0", name="ck_supplier_preparation_nonneg"),
    )


class Product(Base):
    __tablename__ = "products"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    sku: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    category: Mapped[str] = mapped_column(String(120), default="general", nullable=False)
    unit: Mapped[str] = mapped_column(String(32), default="unit", nullable=False)
    cost: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0, nullable=False)
    status: Mapped[str] = mapped_column(String(32), default="active", nullable=False)

    dangerous: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    imdg_class: Mapped[str | None] = mapped_column(String(16))  # "Classe 3", ...

    units_per_package: Mapped[int | None] = mapped_column(Integer)
    packages_per_carton: Mapped[int | None] = mapped_column(Integer)
    cartons_per_palette: Mapped[int | None] = mapped_column(Integer)
    carton_weight: Mapped[Decimal | None] = mapped_column(Numeric(12, 3))  # kg
    carton_volume: Mapped[Decimal | None] = mapped_column(Numeric(12, 4))  # m3

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (CheckConstraint("cost >= 0", name="ck_product_cost_nonneg"),)


class Transitaire(Base):
    __tablename__ = "transitaires"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    code: Mapped[str | None] = mapped_column(String(32))
    status: Mapped[PartnerStatus] = mapped_column(
        Enum(PartnerStatus, name="partner_status"),
        default=PartnerStatus.active,
        nullable=False,
    )
    country: Mapped[str | None] = mapped_column(String(64))
    city: Mapped[str | None] = mapped_column(String(128))
    address: Mapped[str | None] = mapped_column(String(255))
    contact_name: Mapped[str | None] = mapped_column(String(200))
    contact_email: Mapped[str | None] = mapped_column(String(255))
    contact_phone: Mapped[str | None] = mapped_column(String(64))
    dangerous_goods_certified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    max_container_capacity: Mapped[int | None] = mapped_column(Integer)
    services: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    specialties: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    tracking_system_url: Mapped[str | None] = mapped_column(String(255))
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)


# ---------- AUTH ----------
class User(Base):
    __tablename__ = "users"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    full_name: Mapped[str | None] = mapped_column(String(200))
    phone: Mapped[str | None] = mapped_column(String(64))
    department: Mapped[str | None] = mapped_column(String(128))
    role: Mapped[Role] = mapped_column(Enum(Role, name="role"), default=Role.user, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    permissions: Mapped[list["UserPermission"]] = relationship(back_populates="user", cascade="all, delete-orphan")


class UserPermission(Base):
    """Surcharge d'une permission (module, action) ; sinon le défaut du rôle s'applique."""

    __tablename__ = "user_permissions"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    module: Mapped[str] = mapped_column(String(32), nullable=False)
    action: Mapped[str] = mapped_column(String(32), nullable=False)
    granted: Mapped[bool] = mapped_column(Boolean, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    user: Mapped[User] = relationship(back_populates="permissions")

    __table_args__ = (UniqueConstraint("user_id", "module", "action", name="uq_user_permission"),)


# ---------- LOGISTIQUE ----------
class Container(Base):
    __tablename__ = "containers"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    number: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    type: Mapped[ContainerType] = mapped_column(Enum(ContainerType, name="container_type"), nullable=False)
    transitaire_id: Mapped[int] = mapped_column(ForeignKey("transitaires.id", ondelete="RESTRICT"), nullable=False)
    status: Mapped[ContainerStatus] = mapped_column(
        Enum(ContainerStatus, name="container_status"),
        default=ContainerStatus.planning,
        nullable=False,
    )
    reservation_number: Mapped[str | None] = mapped_column(String(32), unique=True)
    departure_port: Mapped[str | None] = mapped_column(String(128))
    arrival_port: Mapped[str | None] = mapped_column(String(128))
    etd: Mapped[date | None] = mapped_column(Date)
    eta: Mapped[date | None] = mapped_column(Date)
    port_cutoff: Mapped[date | None] = mapped_column(Date)
    max_pallets: Mapped[int | None] = mapped_column(Integer)
    max_weight: Mapped[Decimal | None] = mapped_column(Numeric(12, 3))
    max_volume: Mapped[Decimal | None] = mapped_column(Numeric(12, 3))
    dangerous_goods: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    transitaire: Mapped[Transitaire] = relationship()
    orders: Mapped[list["Order"]] = relationship(back_populates="container")


class Groupage(Base):
    __tablename__ = "groupages"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    container_id: Mapped[int] = mapped_column(ForeignKey("containers.id", ondelete="RESTRICT"), nullable=False, index=True)
    transitaire_id: Mapped[int] = mapped_column(ForeignKey("transitaires.id", ondelete="RESTRICT"), nullable=False)
    status: Mapped[ContainerStatus] = mapped_column(
        Enum(ContainerStatus, name="container_status"),
        default=ContainerStatus.available,
        nullable=False,
    )
    reservation_number: Mapped[str | None] = mapped_column(String(32))

    max_space_pallets: Mapped[int] = mapped_column(Integer, nullable=False)
    max_weight: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False)
    max_volume: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False)
    available_space_pallets: Mapped[int] = mapped_column(Integer, nullable=False)
    available_weight: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False)
    available_volume: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False)

    cost_per_palette: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0, nullable=False)
    cost_per_kg: Mapped[Decimal] = mapped_column(Numeric(14, 4), default=0, nullable=False)
    cost_per_m3: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0, nullable=False)
    allows_dangerous_goods: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    departure_date: Mapped[date | None] = mapped_column(Date)
    arrival_date: Mapped[date | None] = mapped_column(Date)
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    container: Mapped[Container] = relationship()
    transitaire: Mapped[Transitaire] = relationship()
    bookings: Mapped[list["GroupageBooking"]] = relationship(back_populates="groupage", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("available_space_pallets >= 0", name="ck_groupage_pallets_nonneg"),
        CheckConstraint("available_weight >= 0", name="ck_groupage_weight_nonneg"),
        CheckConstraint("available_volume >= 0", name="ck_groupage_volume_nonneg"),
        CheckConstraint("available_space_pallets <= max_space_pallets", name="ck_groupage_pallets_le_max"),
    )


# ---------- COMMANDES ----------
class Order(Base):
    __tablename__ = "orders"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    order_number: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    client_id: Mapped[int | None] = mapped_column(ForeignKey("clients.id", ondelete="RESTRICT"), index=True)
    supplier_id: Mapped[int] = mapped_column(ForeignKey("suppliers.id", ondelete="RESTRICT"), nullable=False)
    transitaire_id: Mapped[int | None] = mapped_column(ForeignKey("transitaires.id", ondelete="RESTRICT"))
    container_id: Mapped[int | None] = mapped_column(ForeignKey("containers.id", ondelete="SET NULL"), index=True)

    status: Mapped[OrderStatus] = mapped_column(
        Enum(OrderStatus, name="order_status"),
        default=OrderStatus.draft,
        nullable=False,
    )
    order_date: Mapped[date] = mapped_column(Date, nullable=False)
    payment_type: Mapped[str] = mapped_column(String(32), default="transfer", nullable=False)
    payment_date: Mapped[date | None] = mapped_column(Date)
    packaging: Mapped[str | None] = mapped_column(String(128))

    tva_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=20, nullable=False)
    total_ht: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0, nullable=False)
    total_ttc: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0, nullable=False)
    weight: Mapped[Decimal | None] = mapped_column(Numeric(12, 3))
    volume: Mapped[Decimal | None] = mapped_column(Numeric(12, 3))
    cartons: Mapped[int | None] = mapped_column(Integer)
    is_received: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    client: Mapped[Client | None] = relationship()
    supplier: Mapped[Supplier] = relationship()
    transitaire: Mapped[Transitaire | None] = relationship()
    container: Mapped[Container | None] = relationship(back_populates="orders")
    lines: Mapped[list["OrderLine"]] = relationship(back_populates="order", cascade="all, delete-orphan")
    workflow: Mapped["OrderWorkflow | None"] = relationship(back_populates="order", cascade="all, delete-orphan")

    __table_args__ = (CheckConstraint("tva_rate >= 0", name="ck_order_tva_nonneg"),)


class OrderLine(Base):
    __tablename__ = "order_products"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id", ondelete="RESTRICT"), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    carton_quantity: Mapped[int | None] = mapped_column(Integer)
    palette_quantity: Mapped[int | None] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    order: Mapped[Order] = relationship(back_populates="lines")
    product: Mapped[Product] = relationship()

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_line_qty_pos"),
        CheckConstraint("unit_price >= 0", name="ck_order_line_unit_price_nonneg"),
    )


class OrderWorkflow(Base):
    __tablename__ = "order_workflows"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id", ondelete="CASCADE"), unique=True, nullable=False)
    current_status: Mapped[WorkflowStatus] = mapped_column(
        Enum(WorkflowStatus, name="workflow_status"),
        default=WorkflowStatus.request,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    order: Mapped[Order] = relationship(back_populates="workflow")
    approvals: Mapped[list["WorkflowApproval"]] = relationship(
        back_populates="workflow",
        cascade="all, delete-orphan",
        order_by="WorkflowApproval.approved_at",
    )


class WorkflowApproval(Base):
    __tablename__ = "workflow_approvals"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    workflow_id: Mapped[int] = mapped_column(ForeignKey("order_workflows.id", ondelete="CASCADE"), nullable=False, index=True)
    status: Mapped[WorkflowStatus] = mapped_column(Enum(WorkflowStatus, name="workflow_status"), nullable=False)
    approved_by: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    approved_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    comments: Mapped[str | None] = mapped_column(Text)

    workflow: Mapped[OrderWorkflow] = relationship(back_populates="approvals")


class GroupageBooking(Base):
    __tablename__ = "groupage_bookings"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    groupage_id: Mapped[int] = mapped_column(ForeignKey("groupages.id", ondelete="CASCADE"), nullable=False, index=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    palettes_booked: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    weight_booked: Mapped[Decimal] = mapped_column(Numeric(12, 3), default=0, nullable=False)
    volume_booked: Mapped[Decimal] = mapped_column(Numeric(12, 3), default=0, nullable=False)
    cost_calculated: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0, nullable=False)
    has_dangerous_goods: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    booking_status: Mapped[BookingStatus] = mapped_column(
        Enum(BookingStatus, name="booking_status"),
        default=BookingStatus.pending,
        nullable=False,
    )
    confirmed_by_transitaire: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    transitaire_notes: Mapped[str | None] = mapped_column(Text)
    booking_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    groupage: Mapped[Groupage] = relationship(back_populates="bookings")
    order: Mapped[Order] = relationship()

    __table_args__ = (
        UniqueConstraint("groupage_id", "order_id", name="uq_booking_groupage_order"),
        CheckConstraint("palettes_booked >= 0", name="ck_booking_pallets_nonneg"),
        CheckConstraint("weight_booked >= 0", name="ck_booking_weight_nonneg"),
        CheckConstraint("volume_booked >= 0", name="ck_booking_volume_nonneg"),
    )


class Payment(Base):
    __tablename__ = "payments"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    client_id: Mapped[int] = mapped_column(ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    order_id: Mapped[int | None] = mapped_column(ForeignKey("orders.id", ondelete="SET NULL"))
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="EUR", nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    payment_method: Mapped[str | None] = mapped_column(String(32))
    payment_status: Mapped[str] = mapped_column(String(32), default="completed", nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (CheckConstraint("amount >= 0", name="ck_payment_amount_nonneg"),)


# ---------- SYSTÈME ----------
class NumberCounter(Base):
    __tablename__ = "number_counters"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    entity_type: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    prefix: Mapped[str] = mapped_column(String(8), nullable=False)
    current_number: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)


class DeletedItem(Base):
    __tablename__ = "deleted_items"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    table_name: Mapped[str] = mapped_column(String(64), nullable=False)
    item_id: Mapped[int] = mapped_column(BigIntPK, nullable=False)
    item_data: Mapped[dict] = mapped_column(JSON, nullable=False)
    reason: Mapped[str | None] = mapped_column(String(255))
    deleted_by: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    deleted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    __table_args__ = (Index("ix_deleted_items_table_item", "table_name", "item_id"),)


class Document(Base):
    __tablename__ = "documents"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    stored_path: Mapped[str] = mapped_column(String(512), unique=True, nullable=False)
    content_type: Mapped[str | None] = mapped_column(String(128))
    size: Mapped[int] = mapped_column(Integer, nullable=False)
    sha256: Mapped[str] = mapped_column(String(64), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(32), default="general", nullable=False)
    entity_id: Mapped[int | None] = mapped_column(BigIntPK)
    uploaded_by: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (Index("ix_documents_entity", "entity_type", "entity_id"),)
