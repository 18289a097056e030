from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from backoffice.app.api.deps import current_user, get_db, reject_nulls
from backoffice.app.db.models.core_types import PartnerStatus
from backoffice.app.db.models.models_v1 import Transitaire, User
from backoffice.app.schemas.partners import TransitaireRead
from backoffice.services.stats import transitaire_stats
from backoffice.services.trash import move_to_trash

router = APIRouter(prefix="/transitaires")


class TransitaireCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    code: str | None = Field(default=None, max_length=32)
    status: PartnerStatus = PartnerStatus.active
    country: str | None = None
    city: str | None = None
    address: str | None = None
    contact_name: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None
    dangerous_goods_certified: bool = False
    max_container_capacity: int | None = Field(default=None, ge=0)
    services: list[str] = Field(default_factory=list)
    specialties: list[str] = Field(default_factory=list)
    tracking_system_url: str | None = None
    notes: str | None = None


class TransitaireUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    code: str | None = Field(default=None, max_length=32)
    status: PartnerStatus | None = None
    country: str | None = None
    city: str | None = None
    address: str | None = None
    contact_name: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None
    dangerous_goods_certified: bool | None = None
    max_container_capacity: int | None = Field(default=None, ge=0)
    services: list[str] | None = None
    specialties: list[str] | None = None
    tracking_system_url: str | None = None
    notes: str | None = None


@router.get("", response_model=list[TransitaireRead])
def list_transitaires(
    q: str | None = None,
    status: PartnerStatus | None = None,
    dangerous_goods_certified: bool | None = None,
    db: Session = Depends(get_db),
):
    stmt = select(Transitaire).order_by(Transitaire.name)
    if q:
        pattern = f"%{q}%"
        stmt = stmt.where(
            or_(Transitaire.name.ilike(pattern), Transitaire.code.ilike(pattern), Transitaire.city.ilike(pattern))
        )
    if status is not None:
        stmt = stmt.where(Transitaire.status == status)
    if dangerous_goods_certified is not None:
        stmt = stmt.where(Transitaire.dangerous_goods_certified == dangerous_goods_certified)
    return db.execute(stmt).scalars().all()


@router.get("/stats")
def get_transitaire_stats(db: Session = Depends(get_db)):
    return transitaire_stats(db)


@router.get("/{transitaire_id}", response_model=TransitaireRead)
def get_transitaire(transitaire_id: int, db: Session = Depends(get_db)):
    t = db.get(Transitaire, transitaire_id)
    if not t:
        raise HTTPException(status_code=404, detail="Transitaire not found")
    return t


@router.post("")
def create_transitaire(payload: TransitaireCreate, db: Session = Depends(get_db)):
    exists = db.execute(select(Transitaire).where(Transitaire.name == payload.name)).scalar_one_or_none()
    if exists:
        raise HTTPException(status_code=409, detail="Transitaire already exists")

    t = Transitaire(**payload.model_dump())
    db.add(t)
    db.commit()
    db.refresh(t)
    return {"id": t.id, "name": t.name}


@router.patch("/{transitaire_id}", response_model=TransitaireRead)
def update_transitaire(transitaire_id: int, payload: TransitaireUpdate, db: Session = Depends(get_db)):
    t = db.get(Transitaire, transitaire_id)
    if not t:
        raise HTTPException(status_code=404, detail="Transitaire not found")

    data = payload.model_dump(exclude_unset=True)
    reject_nulls(Transitaire, data)
    if data.get("name") and data["name"] != t.name:
        if db.execute(select(Transitaire).where(Transitaire.name == data["name"])).scalar_one_or_none():
            raise HTTPException(status_code=409, detail="Transitaire already exists")
    for key, value in data.items():
        setattr(t, key, value)
    db.commit()
    db.refresh(t)
    return t


@router.delete("/{transitaire_id}")
def delete_transitaire(
    transitaire_id: int,
    reason: str | None = None,
    db: Session = Depends(get_db),
    user: User | None = Depends(current_user),
):
    item = move_to_trash(db, "transitaires", transitaire_id, reason=reason, deleted_by=user.id if user else None)
    db.commit()
    return {"trash_id": item.id}
