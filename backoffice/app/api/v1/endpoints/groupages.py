from __future__ import annotations

from dataclasses import asdict
from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.orm import Session

from backoffice.app.api.deps import current_user, get_db, reject_nulls
from backoffice.app.db.models.core_types import BookingStatus, ContainerStatus, ContainerType, NumberedEntity
from backoffice.app.db.models.models_v1 import Container, Groupage, GroupageBooking, Order, Transitaire, User
from backoffice.app.schemas.logistics import BookingRead, GroupageRead
from backoffice.services.loading import (
    TYPE_CONFIGS,
    book_groupage,
    confirm_booking,
    eligible_orders_for_groupage,
    groupage_totals,
    live_bookings,
    order_pallets,
    remove_booking,
)
from backoffice.services.numbering import generate_next_number
from backoffice.services.trash import move_to_trash

router = APIRouter(prefix="/groupages")


class GroupageCreate(BaseModel):
    container_id: int
    transitaire_id: int | None = None
    max_space_pallets: int | None = Field(default=None, gt=0)
    max_weight: Decimal | None = Field(default=None, gt=0)
    max_volume: Decimal | None = Field(default=None, gt=0)
    cost_per_palette: Decimal = Field(default=Decimal("0"), ge=0)
    cost_per_kg: Decimal = Field(default=Decimal("0"), ge=0)
    cost_per_m3: Decimal = Field(default=Decimal("0"), ge=0)
    allows_dangerous_goods: bool = False
    departure_date: date | None = None
    arrival_date: date | None = None
    notes: str | None = None


class GroupageUpdate(BaseModel):
    status: ContainerStatus | None = None
    cost_per_palette: Decimal | None = Field(default=None, ge=0)
    cost_per_kg: Decimal | None = Field(default=None, ge=0)
    cost_per_m3: Decimal | None = Field(default=None, ge=0)
    allows_dangerous_goods: bool | None = None
    departure_date: date | None = None
    arrival_date: date | None = None
    notes: str | None = None


class BookingCreate(BaseModel):
    order_id: int
    palettes: int | None = Field(default=None, gt=0)
    weight: Decimal | None = Field(default=None, ge=0)
    volume: Decimal | None = Field(default=None, ge=0)
    transitaire_notes: str | None = None


class BookingDecision(BaseModel):
    confirm: bool
    notes: str | None = None


def _get_groupage(db: Session, groupage_id: int) -> Groupage:
    groupage = db.get(Groupage, groupage_id)
    if not groupage:
        raise HTTPException(status_code=404, detail="Groupage not found")
    return groupage


def _get_booking(db: Session, groupage_id: int, booking_id: int) -> GroupageBooking:
    booking = db.get(GroupageBooking, booking_id)
    if not booking or booking.groupage_id != groupage_id:
        raise HTTPException(status_code=404, detail="Booking not found")
    return booking


@router.get("", response_model=list[GroupageRead])
def list_groupages(
    status: ContainerStatus | None = None,
    transitaire_id: int | None = None,
    container_id: int | None = None,
    db: Session = Depends(get_db),
):
    stmt = select(Groupage).order_by(Groupage.departure_date, Groupage.id)
    if status is not None:
        stmt = stmt.where(Groupage.status == status)
    if transitaire_id is not None:
        stmt = stmt.where(Groupage.transitaire_id == transitaire_id)
    if container_id is not None:
        stmt = stmt.where(Groupage.container_id == container_id)
    return db.execute(stmt).scalars().all()


@router.get("/{groupage_id}", response_model=GroupageRead)
def get_groupage(groupage_id: int, db: Session = Depends(get_db)):
    return _get_groupage(db, groupage_id)


@router.post("")
def create_groupage(payload: GroupageCreate, db: Session = Depends(get_db)):
    container = db.get(Container, payload.container_id)
    if not container:
        raise HTTPException(status_code=400, detail="Invalid container_id")

    # transitaire du conteneur par défaut
    transitaire_id = payload.transitaire_id or container.transitaire_id
    if not db.get(Transitaire, transitaire_id):
        raise HTTPException(status_code=400, detail="Invalid transitaire_id")

    cfg = TYPE_CONFIGS[ContainerType.groupage]
    max_pallets = payload.max_space_pallets or cfg["pallets"]
    max_weight = payload.max_weight or cfg["weight"]
    max_volume = payload.max_volume or cfg["volume"]

    g = Groupage(
        container_id=container.id,
        transitaire_id=transitaire_id,
        status=ContainerStatus.available,
        reservation_number=generate_next_number(db, NumberedEntity.reservation.value),
        max_space_pallets=max_pallets,
        max_weight=max_weight,
        max_volume=max_volume,
        available_space_pallets=max_pallets,
        available_weight=max_weight,
        available_volume=max_volume,
        cost_per_palette=payload.cost_per_palette,
        cost_per_kg=payload.cost_per_kg,
        cost_per_m3=payload.cost_per_m3,
        allows_dangerous_goods=payload.allows_dangerous_goods,
        departure_date=payload.departure_date,
        arrival_date=payload.arrival_date,
        notes=payload.notes,
    )
    db.add(g)
    db.commit()
    db.refresh(g)
    return {"id": g.id, "reservation_number": g.reservation_number, "transitaire_id": g.transitaire_id}


@router.patch("/{groupage_id}", response_model=GroupageRead)
def update_groupage(groupage_id: int, payload: GroupageUpdate, db: Session = Depends(get_db)):
    g = _get_groupage(db, groupage_id)
    data = payload.model_dump(exclude_unset=True)
    reject_nulls(Groupage, data)
    if data.get("allows_dangerous_goods") is False and any(b.has_dangerous_goods for b in live_bookings(db, g)):
        raise HTTPException(status_code=409, detail="Groupage holds dangerous goods")
    if data.get("status") == ContainerStatus.available and g.available_space_pallets == 0:
        raise HTTPException(status_code=409, detail="Groupage has no pallet left")

    for key, value in data.items():
        setattr(g, key, value)
    db.commit()
    db.refresh(g)
    return g


@router.delete("/{groupage_id}")
def delete_groupage(
    groupage_id: int,
    reason: str | None = None,
    db: Session = Depends(get_db),
    user: User | None = Depends(current_user),
):
    item = move_to_trash(db, "groupages", groupage_id, reason=reason, deleted_by=user.id if user else None)
    db.commit()
    return {"trash_id": item.id}


# ---------- Réservations ----------
@router.get("/{groupage_id}/bookings", response_model=list[BookingRead])
def list_bookings(groupage_id: int, status: BookingStatus | None = None, db: Session = Depends(get_db)):
    _get_groupage(db, groupage_id)
    stmt = select(GroupageBooking).where(GroupageBooking.groupage_id == groupage_id).order_by(GroupageBooking.id)
    if status is not None:
        stmt = stmt.where(GroupageBooking.booking_status == status)
    return db.execute(stmt).scalars().all()


@router.post("/{groupage_id}/bookings", response_model=BookingRead)
def create_booking(groupage_id: int, payload: BookingCreate, db: Session = Depends(get_db)):
    order = db.get(Order, payload.order_id)
    if not order:
        raise HTTPException(status_code=400, detail="Invalid order_id")

    # par défaut : ce que la commande occupe réellement
    booking = book_groupage(
        db,
        groupage_id,
        order,
        pallets=payload.palettes or order_pallets(order),
        weight=payload.weight if payload.weight is not None else Decimal(order.weight or 0),
        volume=payload.volume if payload.volume is not None else Decimal(order.volume or 0),
        transitaire_notes=payload.transitaire_notes,
    )
    db.commit()
    db.refresh(booking)
    return booking


@router.post("/{groupage_id}/bookings/{booking_id}/decision", response_model=BookingRead)
def decide_booking(groupage_id: int, booking_id: int, payload: BookingDecision, db: Session = Depends(get_db)):
    booking = _get_booking(db, groupage_id, booking_id)
    confirm_booking(db, booking, confirm=payload.confirm, notes=payload.notes)
    db.commit()
    db.refresh(booking)
    return booking


@router.delete("/{groupage_id}/bookings/{booking_id}")
def delete_booking(groupage_id: int, booking_id: int, db: Session = Depends(get_db)):
    booking = _get_booking(db, groupage_id, booking_id)
    remove_booking(db, booking)
    db.commit()
    return {"deleted": booking_id}


@router.get("/{groupage_id}/eligible-orders")
def list_eligible_orders(groupage_id: int, db: Session = Depends(get_db)):
    g = _get_groupage(db, groupage_id)
    return [
        {
            "id": o.id,
            "order_number": o.order_number,
            "pallets": order_pallets(o),
            "weight": float(o.weight or 0),
            "volume": float(o.volume or 0),
            "can_add": elig.can_add,
            "reason": elig.reason,
        }
        for o, elig in eligible_orders_for_groupage(db, g)
    ]


@router.get("/{groupage_id}/plan")
def get_groupage_plan(groupage_id: int, db: Session = Depends(get_db)):
    g = _get_groupage(db, groupage_id)
    bookings = live_bookings(db, g)
    totals = groupage_totals(bookings)
    return {
        "groupage_id": g.id,
        "status": g.status,
        "available_space_pallets": g.available_space_pallets,
        "available_weight": float(g.available_weight),
        "available_volume": float(g.available_volume),
        "bookings": [
            {
                "id": b.id,
                "order_id": b.order_id,
                "order_number": b.order.order_number,
                "palettes_booked": b.palettes_booked,
                "weight_booked": float(b.weight_booked),
                "volume_booked": float(b.volume_booked),
                "cost_calculated": float(b.cost_calculated),
                "booking_status": b.booking_status,
            }
            for b in bookings
        ],
        "totals": {key: float(value) for key, value in asdict(totals).items()},
    }
