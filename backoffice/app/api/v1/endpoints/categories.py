from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.orm import Session

from backoffice.app.api.deps import current_user, get_db, reject_nulls
from backoffice.app.db.models.models_v1 import Category, User
from backoffice.app.schemas.partners import CategoryRead
from backoffice.services.trash import move_to_trash

router = APIRouter(prefix="/categories")


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    description: str | None = None


class CategoryUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=120)
    description: str | None = None


@router.get("", response_model=list[CategoryRead])
def list_categories(db: Session = Depends(get_db)):
    return db.execute(select(Category).order_by(Category.name)).scalars().all()


@router.get("/{category_id}", response_model=CategoryRead)
def get_category(category_id: int, db: Session = Depends(get_db)):
    c = db.get(Category, category_id)
    if not c:
        raise HTTPException(status_code=404, detail="Category not found")
    return c


@router.post("")
def create_category(payload: CategoryCreate, db: Session = Depends(get_db)):
    exists = db.execute(select(Category).where(Category.name == payload.name)).scalar_one_or_none()
    if exists:
        raise HTTPException(status_code=409, detail="Category already exists")

    c = Category(name=payload.name, description=payload.description)
    db.add(c)
    db.commit()
    db.refresh(c)
    return {"id": c.id, "name": c.name}


@router.patch("/{category_id}", response_model=CategoryRead)
def update_category(category_id: int, payload: CategoryUpdate, db: Session = Depends(get_db)):
    c = db.get(Category, category_id)
    if not c:
        raise HTTPException(status_code=404, detail="Category not found")

    data = payload.model_dump(exclude_unset=True)
    reject_nulls(Category, data)
    if data.get("name") and data["name"] != c.name:
        if db.execute(select(Category).where(Category.name == data["name"])).scalar_one_or_none():
            raise HTTPException(status_code=409, detail="Category already exists")
    for key, value in data.items():
        setattr(c, key, value)
    db.commit()
    db.refresh(c)
    return c


@router.delete("/{category_id}")
def delete_category(
    category_id: int,
    reason: str | None = None,
    db: Session = Depends(get_db),
    user: User | None = Depends(current_user),
):
    item = move_to_trash(db, "categories", category_id, reason=reason, deleted_by=user.id if user else None)
    db.commit()
    return {"trash_id": item.id}
