from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.orm import Session

from backoffice.app.api.deps import current_user, get_db, reject_nulls
from backoffice.app.db.models.core_types import PartnerStatus
from backoffice.app.db.models.models_v1 import Supplier, User
from backoffice.app.schemas.partners import SupplierRead
from backoffice.services.stats import supplier_activity, supplier_stats
from backoffice.services.trash import move_to_trash

router = APIRouter(prefix="/suppliers")


class SupplierCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    status: PartnerStatus = PartnerStatus.active
    country: str | None = Field(default=None, max_length=64)
    email: str | None = None
    phone: str | None = None
    main_contact_name: str | None = None
    currency: str = Field(default="EUR", min_length=3, max_length=3)
    incoterm: str | None = Field(default=None, max_length=8)
    payment_conditions: str | None = None
    preparation_time: int | None = Field(default=None, ge=0)
    reliability_rating: int | None = Field(default=None, ge=0, le=5)
    minimum_order_amount: float | None = Field(default=None, ge=0)
    notes: str | None = None


class SupplierUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    status: PartnerStatus | None = None
    country: str | None = Field(default=None, max_length=64)
    email: str | None = None
    phone: str | None = None
    main_contact_name: str | None = None
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    incoterm: str | None = Field(default=None, max_length=8)
    payment_conditions: str | None = None
    preparation_time: int | None = Field(default=None, ge=0)
    reliability_rating: int | None = Field(default=None, ge=0, le=5)
    minimum_order_amount: float | None = Field(default=None, ge=0)
    notes: str | None = None


@router.get("", response_model=list[SupplierRead])
def list_suppliers(q: str | None = None, status: PartnerStatus | None = None, db: Session = Depends(get_db)):
    stmt = select(Supplier).order_by(Supplier.name)
    if q:
        stmt = stmt.where(Supplier.name.ilike(f"%{q}%"))
    if status is not None:
        stmt = stmt.where(Supplier.status == status)
    return db.execute(stmt).scalars().all()


@router.get("/stats")
def get_supplier_stats(db: Session = Depends(get_db)):
    return supplier_stats(db)


@router.get("/{supplier_id}")
def get_supplier(supplier_id: int, db: Session = Depends(get_db)):
    s = db.get(Supplier, supplier_id)
    if not s:
        raise HTTPException(status_code=404, detail="Supplier not found")
    return {**SupplierRead.model_validate(s).model_dump(), **supplier_activity(db, s.id)}


@router.post("")
def create_supplier(payload: SupplierCreate, db: Session = Depends(get_db)):
    exists = db.execute(select(Supplier).where(Supplier.name == payload.name)).scalar_one_or_none()
    if exists:
        raise HTTPException(status_code=409, detail="Supplier already exists")

    s = Supplier(**payload.model_dump())
    db.add(s)
    db.commit()
    db.refresh(s)
    return {"id": s.id, "name": s.name}


@router.patch("/{supplier_id}", response_model=SupplierRead)
def update_supplier(supplier_id: int, payload: SupplierUpdate, db: Session = Depends(get_db)):
    s = db.get(Supplier, supplier_id)
    if not s:
        raise HTTPException(status_code=404, detail="Supplier not found")

    data = payload.model_dump(exclude_unset=True)
    reject_nulls(Supplier, data)
    if data.get("name") and data["name"] != s.name:
        clash = db.execute(select(Supplier).where(Supplier.name == data["name"])).scalar_one_or_none()
        if clash:
            raise HTTPException(status_code=409, detail="Supplier already exists")

    for key, value in data.items():
        setattr(s, key, value)
    db.commit()
    db.refresh(s)
    return s


@router.delete("/{supplier_id}")
def delete_supplier(
    supplier_id: int,
    reason: str | None = None,
    db: Session = Depends(get_db),
    user: User | None = Depends(current_user),
):
    item = move_to_trash(db, "suppliers", supplier_id, reason=reason, deleted_by=user.id if user else None)
    db.commit()
    return {"trash_id": item.id}
