from __future__ import annotations

from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from backoffice.app.api.deps import current_user, get_db, reject_nulls
from backoffice.app.db.models.core_types import PartnerStatus
from backoffice.app.db.models.models_v1 import Client, Order, Payment, User
from backoffice.app.schemas.orders import PaymentRead
from backoffice.app.schemas.partners import ClientRead
from backoffice.services.stats import client_stats
from backoffice.services.trash import move_to_trash

router = APIRouter(prefix="/clients")


class ClientCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    type: str | None = Field(default=None, max_length=32)
    status: PartnerStatus = PartnerStatus.active
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    country: str | None = None
    delivery_address: str | None = None
    main_contact_name: str | None = None
    payment_conditions: str | None = None
    notes: str | None = None


class ClientUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    type: str | None = Field(default=None, max_length=32)
    status: PartnerStatus | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    country: str | None = None
    delivery_address: str | None = None
    main_contact_name: str | None = None
    payment_conditions: str | None = None
    notes: str | None = None


class PaymentCreate(BaseModel):
    amount: Decimal = Field(ge=0, max_digits=14, decimal_places=2)
    currency: str = Field(default="EUR", min_length=3, max_length=3)
    payment_date: date
    order_id: int | None = None
    payment_method: str | None = None
    payment_status: str = "completed"
    notes: str | None = None


@router.get("", response_model=list[ClientRead])
def list_clients(q: str | None = None, db: Session = Depends(get_db)):
    stmt = select(Client).order_by(Client.name)
    if q:
        pattern = f"%{q}%"
        stmt = stmt.where(or_(Client.name.ilike(pattern), Client.email.ilike(pattern), Client.city.ilike(pattern)))
    return db.execute(stmt).scalars().all()


@router.get("/{client_id}")
def get_client(client_id: int, db: Session = Depends(get_db)):
    c = db.get(Client, client_id)
    if not c:
        raise HTTPException(status_code=404, detail="Client not found")
    return {**ClientRead.model_validate(c).model_dump(), "stats": client_stats(db, c.id)}


@router.get("/{client_id}/stats")
def get_client_stats(client_id: int, db: Session = Depends(get_db)):
    if not db.get(Client, client_id):
        raise HTTPException(status_code=404, detail="Client not found")
    return client_stats(db, client_id)


@router.post("")
def create_client(payload: ClientCreate, db: Session = Depends(get_db)):
    c = Client(**payload.model_dump())
    db.add(c)
    db.commit()
    db.refresh(c)
    return {"id": c.id, "name": c.name}


@router.patch("/{client_id}", response_model=ClientRead)
def update_client(client_id: int, payload: ClientUpdate, db: Session = Depends(get_db)):
    c = db.get(Client, client_id)
    if not c:
        raise HTTPException(status_code=404, detail="Client not found")
    data = payload.model_dump(exclude_unset=True)
    reject_nulls(Client, data)
    for key, value in data.items():
        setattr(c, key, value)
    db.commit()
    db.refresh(c)
    return c


@router.delete("/{client_id}")
def delete_client(
    client_id: int,
    reason: str | None = None,
    db: Session = Depends(get_db),
    user: User | None = Depends(current_user),
):
    item = move_to_trash(db, "clients", client_id, reason=reason, deleted_by=user.id if user else None)
    db.commit()
    return {"trash_id": item.id}


# ---------- Paiements ----------
@router.get("/{client_id}/payments", response_model=list[PaymentRead])
def list_payments(client_id: int, db: Session = Depends(get_db)):
    if not db.get(Client, client_id):
        raise HTTPException(status_code=404, detail="Client not found")
    return (
        db.execute(select(Payment).where(Payment.client_id == client_id).order_by(Payment.payment_date.desc()))
        .scalars()
        .all()
    )


@router.post("/{client_id}/payments")
def create_payment(client_id: int, payload: PaymentCreate, db: Session = Depends(get_db)):
    if not db.get(Client, client_id):
        raise HTTPException(status_code=404, detail="Client not found")
    if payload.order_id is not None:
        order = db.get(Order, payload.order_id)
        if not order or order.client_id != client_id:
            raise HTTPException(status_code=400, detail="Invalid order_id")

    p = Payment(client_id=client_id, **payload.model_dump())
    db.add(p)
    db.commit()
    db.refresh(p)
    return {"id": p.id, "amount": float(p.amount)}
