from __future__ import annotations

from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.orm import Session

from backoffice.app.api.deps import check_permission, get_db, reject_nulls, require_permission, require_user
from backoffice.app.core.config import get_settings
from backoffice.app.db.models.core_types import NumberedEntity, OrderStatus, WorkflowStatus
from backoffice.app.db.models.models_v1 import (
    Client,
    Order,
    OrderLine,
    Product,
    Supplier,
    Transitaire,
    User,
)
from backoffice.app.schemas.orders import OrderDetailRead, OrderLineRead, OrderRead, WorkflowRead
from backoffice.services.loading import check_new_product, refresh_booking_flags, unload_order
from backoffice.services.numbering import generate_next_number
from backoffice.services.order_form import generate_order_pdf
from backoffice.services.orders import (
    add_order_line,
    advance_workflow,
    recalculate_order_totals,
    remove_order_line,
    start_workflow,
)
from backoffice.services.trash import move_to_trash

router = APIRouter(prefix="/orders")


class OrderLineCreate(BaseModel):
    product_id: int
    quantity: int = Field(gt=0)
    unit_price: Decimal = Field(ge=0)


class OrderCreate(BaseModel):
    supplier_id: int
    client_id: int | None = None
    transitaire_id: int | None = None
    status: OrderStatus = OrderStatus.draft
    order_date: date | None = None
    payment_type: str = "transfer"
    payment_date: date | None = None
    packaging: str | None = None
    tva_rate: Decimal | None = Field(default=None, ge=0)
    weight: Decimal | None = Field(default=None, ge=0)
    volume: Decimal | None = Field(default=None, ge=0)
    lines: list[OrderLineCreate] = Field(default_factory=list)


class OrderUpdate(BaseModel):
    supplier_id: int | None = None
    client_id: int | None = None
    transitaire_id: int | None = None
    status: OrderStatus | None = None
    order_date: date | None = None
    payment_type: str | None = None
    payment_date: date | None = None
    packaging: str | None = None
    tva_rate: Decimal | None = Field(default=None, ge=0)
    weight: Decimal | None = Field(default=None, ge=0)
    volume: Decimal | None = Field(default=None, ge=0)


class WorkflowAdvance(BaseModel):
    status: WorkflowStatus
    comments: str | None = None


def _get_order(db: Session, order_id: int) -> Order:
    order = db.get(Order, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


def _check_refs(db: Session, supplier_id: int | None, client_id: int | None, transitaire_id: int | None) -> None:
    # FK checks (fail fast, message clair)
    if supplier_id is not None and not db.get(Supplier, supplier_id):
        raise HTTPException(status_code=400, detail="Invalid supplier_id")
    if client_id is not None and not db.get(Client, client_id):
        raise HTTPException(status_code=400, detail="Invalid client_id")
    if transitaire_id is not None and not db.get(Transitaire, transitaire_id):
        raise HTTPException(status_code=400, detail="Invalid transitaire_id")


@router.get("", response_model=list[OrderRead])
def list_orders(
    q: str | None = None,
    status: OrderStatus | None = None,
    client_id: int | None = None,
    supplier_id: int | None = None,
    transitaire_id: int | None = None,
    db: Session = Depends(get_db),
):
    stmt = select(Order).order_by(Order.id.desc())
    if q:
        stmt = stmt.where(Order.order_number.ilike(f"%{q}%"))
    if status is not None:
        stmt = stmt.where(Order.status == status)
    if client_id is not None:
        stmt = stmt.where(Order.client_id == client_id)
    if supplier_id is not None:
        stmt = stmt.where(Order.supplier_id == supplier_id)
    if transitaire_id is not None:
        stmt = stmt.where(Order.transitaire_id == transitaire_id)
    return db.execute(stmt).scalars().all()


@router.get("/{order_id}", response_model=OrderDetailRead)
def get_order(order_id: int, db: Session = Depends(get_db)):
    return _get_order(db, order_id)


@router.post("")
def create_order(payload: OrderCreate, db: Session = Depends(get_db)):
    _check_refs(db, payload.supplier_id, payload.client_id, payload.transitaire_id)

    products = {}
    for ln in payload.lines:
        product = db.get(Product, ln.product_id)
        if not product:
            raise HTTPException(status_code=400, detail=f"Invalid product_id {ln.product_id}")
        products[ln.product_id] = product

    tva_rate = payload.tva_rate if payload.tva_rate is not None else Decimal(str(get_settings().default_tva_rate))
    order = Order(
        order_number=generate_next_number(db, NumberedEntity.order.value),
        supplier_id=payload.supplier_id,
        client_id=payload.client_id,
        transitaire_id=payload.transitaire_id,
        status=payload.status,
        order_date=payload.order_date or date.today(),
        payment_type=payload.payment_type,
        payment_date=payload.payment_date,
        packaging=payload.packaging,
        tva_rate=tva_rate,
        weight=payload.weight,
        volume=payload.volume,
    )
    db.add(order)
    db.flush()  # order.id

    for ln in payload.lines:
        add_order_line(db, order, products[ln.product_id], quantity=ln.quantity, unit_price=ln.unit_price)
    start_workflow(db, order)

    db.commit()
    db.refresh(order)
    return {
        "id": order.id,
        "order_number": order.order_number,
        "total_ht": float(order.total_ht),
        "total_ttc": float(order.total_ttc),
    }


@router.patch("/{order_id}", response_model=OrderRead)
def update_order(order_id: int, payload: OrderUpdate, db: Session = Depends(get_db)):
    order = _get_order(db, order_id)
    data = payload.model_dump(exclude_unset=True)
    reject_nulls(Order, data)
    _check_refs(db, data.get("supplier_id"), data.get("client_id"), data.get("transitaire_id"))

    # changement de transitaire : la commande quitte conteneur et groupages
    if "transitaire_id" in data and data["transitaire_id"] != order.transitaire_id:
        unload_order(db, order)

    for key, value in data.items():
        setattr(order, key, value)
    if "tva_rate" in data:
        recalculate_order_totals(db, order)

    db.commit()
    db.refresh(order)
    return order


@router.delete("/{order_id}")
def delete_order(
    order_id: int,
    reason: str | None = None,
    db: Session = Depends(get_db),
    user: User = Depends(require_permission("orders", "delete")),
):
    item = move_to_trash(db, "orders", order_id, reason=reason, deleted_by=user.id)
    db.commit()
    return {"trash_id": item.id}


# ---------- Lignes ----------
@router.post("/{order_id}/lines", response_model=OrderLineRead)
def create_order_line(order_id: int, payload: OrderLineCreate, db: Session = Depends(get_db)):
    order = _get_order(db, order_id)
    product = db.get(Product, payload.product_id)
    if not product:
        raise HTTPException(status_code=400, detail="Invalid product_id")

    check_new_product(db, order, product)
    line = add_order_line(db, order, product, quantity=payload.quantity, unit_price=payload.unit_price)
    refresh_booking_flags(db, order)
    db.commit()
    db.refresh(line)
    return line


@router.delete("/{order_id}/lines/{line_id}")
def delete_order_line(order_id: int, line_id: int, db: Session = Depends(get_db)):
    order = _get_order(db, order_id)
    line = db.get(OrderLine, line_id)
    if not line or line.order_id != order.id:
        raise HTTPException(status_code=404, detail="Order line not found")

    remove_order_line(db, order, line)
    refresh_booking_flags(db, order)
    db.commit()
    return {"total_ht": float(order.total_ht), "total_ttc": float(order.total_ttc)}


# ---------- Workflow ----------
@router.get("/{order_id}/workflow", response_model=WorkflowRead)
def get_workflow(order_id: int, db: Session = Depends(get_db)):
    order = _get_order(db, order_id)
    if not order.workflow:
        raise HTTPException(status_code=404, detail="Workflow not found")
    return order.workflow


@router.post("/{order_id}/workflow/advance", response_model=WorkflowRead)
def advance_order_workflow(
    order_id: int,
    payload: WorkflowAdvance,
    db: Session = Depends(get_db),
    user: User = Depends(require_user),
):
    order = _get_order(db, order_id)
    # étape visée = action : approve, procure, receive
    check_permission(db, user, "orders", payload.status.value)
    workflow = order.workflow or start_workflow(db, order)

    advance_workflow(db, workflow, payload.status, approver_id=user.id, comments=payload.comments)
    db.commit()
    db.refresh(workflow)
    return workflow


@router.get("/{order_id}/pdf")
def get_order_pdf(order_id: int, db: Session = Depends(get_db)):
    order = _get_order(db, order_id)
    content = generate_order_pdf(order)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{order.order_number}.pdf"'},
    )
