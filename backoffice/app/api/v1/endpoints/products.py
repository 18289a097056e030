from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from backoffice.app.api.deps import current_user, get_db, reject_nulls
from backoffice.app.db.models.models_v1 import Product, User
from backoffice.app.schemas.partners import ProductRead
from backoffice.services.imdg import is_known_class
from backoffice.services.trash import move_to_trash

router = APIRouter(prefix="/products")


class ProductCreate(BaseModel):
    sku: str = Field(min_length=1, max_length=64)
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    category: str = Field(default="general", max_length=120)
    unit: str = Field(default="unit", max_length=32)
    cost: float = Field(default=0, ge=0)
    status: str = "active"
    dangerous: bool = False
    imdg_class: str | None = None
    units_per_package: int | None = Field(default=None, gt=0)
    packages_per_carton: int | None = Field(default=None, gt=0)
    cartons_per_palette: int | None = Field(default=None, gt=0)
    carton_weight: float | None = Field(default=None, ge=0)
    carton_volume: float | None = Field(default=None, ge=0)


class ProductUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    category: str | None = Field(default=None, max_length=120)
    unit: str | None = Field(default=None, max_length=32)
    cost: float | None = Field(default=None, ge=0)
    status: str | None = None
    dangerous: bool | None = None
    imdg_class: str | None = None
    units_per_package: int | None = Field(default=None, gt=0)
    packages_per_carton: int | None = Field(default=None, gt=0)
    cartons_per_palette: int | None = Field(default=None, gt=0)
    carton_weight: float | None = Field(default=None, ge=0)
    carton_volume: float | None = Field(default=None, ge=0)


def _check_imdg(imdg_class: str | None) -> None:
    if imdg_class is not None and not is_known_class(imdg_class):
        raise HTTPException(status_code=400, detail=f"Unknown IMDG class {imdg_class}")


@router.get("", response_model=list[ProductRead])
def list_products(
    q: str | None = None,
    category: str | None = None,
    dangerous: bool | None = None,
    db: Session = Depends(get_db),
):
    stmt = select(Product).order_by(Product.sku)
    if q:
        stmt = stmt.where(or_(Product.sku.ilike(f"%{q}%"), Product.name.ilike(f"%{q}%")))
    if category:
        stmt = stmt.where(Product.category == category)
    if dangerous is not None:
        stmt = stmt.where(Product.dangerous == dangerous)
    return db.execute(stmt).scalars().all()


@router.get("/{product_id}", response_model=ProductRead)
def get_product(product_id: int, db: Session = Depends(get_db)):
    p = db.get(Product, product_id)
    if not p:
        raise HTTPException(status_code=404, detail="Product not found")
    return p


@router.post("")
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    exists = db.execute(select(Product).where(Product.sku == payload.sku)).scalar_one_or_none()
    if exists:
        raise HTTPException(status_code=409, detail="SKU already exists")
    _check_imdg(payload.imdg_class)

    p = Product(**payload.model_dump())
    db.add(p)
    db.commit()
    db.refresh(p)
    return {"id": p.id, "sku": p.sku, "name": p.name}


@router.patch("/{product_id}", response_model=ProductRead)
def update_product(product_id: int, payload: ProductUpdate, db: Session = Depends(get_db)):
    p = db.get(Product, product_id)
    if not p:
        raise HTTPException(status_code=404, detail="Product not found")

    data = payload.model_dump(exclude_unset=True)
    reject_nulls(Product, data)
    if "imdg_class" in data:
        _check_imdg(data["imdg_class"])
    for key, value in data.items():
        setattr(p, key, value)
    db.commit()
    db.refresh(p)
    return p


@router.delete("/{product_id}")
def delete_product(
    product_id: int,
    reason: str | None = None,
    db: Session = Depends(get_db),
    user: User | None = Depends(current_user),
):
    item = move_to_trash(db, "products", product_id, reason=reason, deleted_by=user.id if user else None)
    db.commit()
    return {"trash_id": item.id}
