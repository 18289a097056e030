from __future__ import annotations

from dataclasses import asdict
from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.orm import Session

from backoffice.app.api.deps import current_user, get_db, reject_nulls
from backoffice.app.db.models.core_types import ContainerStatus, ContainerType, NumberedEntity
from backoffice.app.db.models.models_v1 import Container, Order, Transitaire, User
from backoffice.app.schemas.logistics import ContainerRead
from backoffice.services.loading import (
    TYPE_CONFIGS,
    assign_to_container,
    container_orders,
    container_totals,
    eligible_orders_for_container,
    order_pallets,
    remove_from_container,
)
from backoffice.services.numbering import generate_next_number
from backoffice.services.trash import move_to_trash

router = APIRouter(prefix="/containers")


class ContainerCreate(BaseModel):
    number: str = Field(min_length=1, max_length=32)
    type: ContainerType
    transitaire_id: int
    status: ContainerStatus = ContainerStatus.planning
    departure_port: str | None = None
    arrival_port: str | None = None
    etd: date | None = None
    eta: date | None = None
    port_cutoff: date | None = None
    max_pallets: int | None = Field(default=None, gt=0)
    max_weight: Decimal | None = Field(default=None, gt=0)
    max_volume: Decimal | None = Field(default=None, gt=0)
    dangerous_goods: bool = False


class ContainerUpdate(BaseModel):
    number: str | None = Field(default=None, min_length=1, max_length=32)
    status: ContainerStatus | None = None
    departure_port: str | None = None
    arrival_port: str | None = None
    etd: date | None = None
    eta: date | None = None
    port_cutoff: date | None = None
    max_pallets: int | None = Field(default=None, gt=0)
    max_weight: Decimal | None = Field(default=None, gt=0)
    max_volume: Decimal | None = Field(default=None, gt=0)
    dangerous_goods: bool | None = None


class ContainerAssign(BaseModel):
    order_id: int


def _get_container(db: Session, container_id: int) -> Container:
    container = db.get(Container, container_id)
    if not container:
        raise HTTPException(status_code=404, detail="Container not found")
    return container


def _order_summary(o: Order) -> dict:
    return {
        "id": o.id,
        "order_number": o.order_number,
        "client_id": o.client_id,
        "status": o.status,
        "weight": float(o.weight or 0),
        "volume": float(o.volume or 0),
        "cartons": o.cartons,
        "pallets": order_pallets(o),
        "total_ttc": float(o.total_ttc),
    }


@router.get("", response_model=list[ContainerRead])
def list_containers(
    q: str | None = None,
    status: ContainerStatus | None = None,
    type: ContainerType | None = None,
    transitaire_id: int | None = None,
    db: Session = Depends(get_db),
):
    stmt = select(Container).order_by(Container.id.desc())
    if q:
        stmt = stmt.where(Container.number.ilike(f"%{q}%"))
    if status is not None:
        stmt = stmt.where(Container.status == status)
    if type is not None:
        stmt = stmt.where(Container.type == type)
    if transitaire_id is not None:
        stmt = stmt.where(Container.transitaire_id == transitaire_id)
    return db.execute(stmt).scalars().all()


@router.get("/types")
def list_container_types():
    return [
        {
            "type": t,
            "max_pallets": cfg["pallets"],
            "max_weight": float(cfg["weight"]),
            "max_volume": float(cfg["volume"]),
        }
        for t, cfg in TYPE_CONFIGS.items()
    ]


@router.get("/{container_id}", response_model=ContainerRead)
def get_container(container_id: int, db: Session = Depends(get_db)):
    return _get_container(db, container_id)


@router.post("")
def create_container(payload: ContainerCreate, db: Session = Depends(get_db)):
    exists = db.execute(select(Container).where(Container.number == payload.number)).scalar_one_or_none()
    if exists:
        raise HTTPException(status_code=409, detail="Container number already exists")
    if not db.get(Transitaire, payload.transitaire_id):
        raise HTTPException(status_code=400, detail="Invalid transitaire_id")

    cfg = TYPE_CONFIGS[payload.type]
    data = payload.model_dump()
    data["max_pallets"] = payload.max_pallets or cfg["pallets"]
    data["max_weight"] = payload.max_weight or cfg["weight"]
    data["max_volume"] = payload.max_volume or cfg["volume"]

    c = Container(reservation_number=generate_next_number(db, NumberedEntity.reservation.value), **data)
    db.add(c)
    db.commit()
    db.refresh(c)
    return {"id": c.id, "number": c.number, "reservation_number": c.reservation_number}


@router.patch("/{container_id}", response_model=ContainerRead)
def update_container(container_id: int, payload: ContainerUpdate, db: Session = Depends(get_db)):
    c = _get_container(db, container_id)
    data = payload.model_dump(exclude_unset=True)
    reject_nulls(Container, data)
    if data.get("number") and data["number"] != c.number:
        if db.execute(select(Container).where(Container.number == data["number"])).scalar_one_or_none():
            raise HTTPException(status_code=409, detail="Container number already exists")
    if data.get("dangerous_goods") is False and c.dangerous_goods:
        loaded = container_orders(db, c)
        if any(ln.product.dangerous for o in loaded for ln in o.lines):
            raise HTTPException(status_code=409, detail="Container holds dangerous goods")
    if data.get("max_pallets") is not None:
        used = sum(order_pallets(o) for o in container_orders(db, c))
        if data["max_pallets"] < used:
            raise HTTPException(status_code=409, detail=f"{used} pallets already loaded")

    for key, value in data.items():
        setattr(c, key, value)
    db.commit()
    db.refresh(c)
    return c


@router.delete("/{container_id}")
def delete_container(
    container_id: int,
    reason: str | None = None,
    db: Session = Depends(get_db),
    user: User | None = Depends(current_user),
):
    item = move_to_trash(db, "containers", container_id, reason=reason, deleted_by=user.id if user else None)
    db.commit()
    return {"trash_id": item.id}


# ---------- Plan de chargement ----------
@router.get("/{container_id}/plan")
def get_loading_plan(container_id: int, db: Session = Depends(get_db)):
    c = _get_container(db, container_id)
    orders = container_orders(db, c)
    totals = container_totals(orders)
    return {
        "container_id": c.id,
        "number": c.number,
        "max_pallets": c.max_pallets,
        "max_weight": float(c.max_weight) if c.max_weight is not None else None,
        "max_volume": float(c.max_volume) if c.max_volume is not None else None,
        "orders": [_order_summary(o) for o in orders],
        "totals": {key: float(value) for key, value in asdict(totals).items()},
    }


@router.get("/{container_id}/eligible-orders")
def list_eligible_orders(container_id: int, db: Session = Depends(get_db)):
    c = _get_container(db, container_id)
    return [
        {**_order_summary(o), "can_add": elig.can_add, "reason": elig.reason}
        for o, elig in eligible_orders_for_container(db, c)
    ]


@router.post("/{container_id}/orders")
def add_order_to_container(container_id: int, payload: ContainerAssign, db: Session = Depends(get_db)):
    c = _get_container(db, container_id)
    order = db.get(Order, payload.order_id)
    if not order:
        raise HTTPException(status_code=400, detail="Invalid order_id")

    assign_to_container(db, order, c)
    db.commit()
    return {"order_id": order.id, "container_id": c.id}


@router.delete("/{container_id}/orders/{order_id}")
def remove_order_from_container(container_id: int, order_id: int, db: Session = Depends(get_db)):
    c = _get_container(db, container_id)
    order = db.get(Order, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")

    remove_from_container(order, c)
    db.commit()
    return {"order_id": order.id, "container_id": None}
