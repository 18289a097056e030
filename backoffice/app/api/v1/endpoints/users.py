from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from backoffice.app.api.deps import get_db, reject_nulls, require_admin, require_user
from backoffice.app.db.models.core_types import Role
from backoffice.app.db.models.models_v1 import User
from backoffice.app.schemas.system import UserRead
from backoffice.services.permissions import effective_permissions, reset_permission, set_permission

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users")


class UserCreate(BaseModel):
    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    full_name: str | None = Field(default=None, max_length=200)
    phone: str | None = None
    department: str | None = None
    role: Role = Role.user


class UserUpdate(BaseModel):
    full_name: str | None = Field(default=None, max_length=200)
    phone: str | None = None
    department: str | None = None
    role: Role | None = None
    active: bool | None = None


class PermissionSet(BaseModel):
    module: str
    action: str
    granted: bool


@router.get("", response_model=list[UserRead])
def list_users(q: str | None = None, role: Role | None = None, db: Session = Depends(get_db)):
    stmt = select(User).order_by(User.email)
    if q:
        stmt = stmt.where(or_(User.email.ilike(f"%{q}%"), User.full_name.ilike(f"%{q}%")))
    if role is not None:
        stmt = stmt.where(User.role == role)
    return db.execute(stmt).scalars().all()


@router.get("/me", response_model=UserRead)
def get_me(user: User = Depends(require_user)):
    return user


@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: int, db: Session = Depends(get_db)):
    u = db.get(User, user_id)
    if not u:
        raise HTTPException(status_code=404, detail="User not found")
    return u


@router.post("")
def create_user(payload: UserCreate, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    email = payload.email.strip().lower()
    exists = db.execute(select(User).where(func.lower(User.email) == email)).scalar_one_or_none()
    if exists:
        raise HTTPException(status_code=409, detail="Email already exists")

    u = User(
        email=email,
        full_name=payload.full_name,
        phone=payload.phone,
        department=payload.department,
        role=payload.role,
    )
    db.add(u)
    db.commit()
    db.refresh(u)
    logger.info("User %s created by %s with role %s", u.email, admin.email, u.role.value)
    return {"id": u.id, "email": u.email, "role": u.role}


@router.patch("/{user_id}", response_model=UserRead)
def update_user(
    user_id: int,
    payload: UserUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    u = db.get(User, user_id)
    if not u:
        raise HTTPException(status_code=404, detail="User not found")

    data = payload.model_dump(exclude_unset=True)
    reject_nulls(User, data)
    # un admin ne peut pas se retirer ses propres droits
    if u.id == admin.id and (data.get("active") is False or data.get("role", Role.admin) != Role.admin):
        raise HTTPException(status_code=409, detail="Cannot demote or disable yourself")

    for key, value in data.items():
        setattr(u, key, value)
    db.commit()
    db.refresh(u)
    logger.info("User %s updated by %s: %s", u.email, admin.email, sorted(data))
    return u


@router.post("/{user_id}/disable", response_model=UserRead)
def disable_user(user_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    u = db.get(User, user_id)
    if not u:
        raise HTTPException(status_code=404, detail="User not found")
    if u.id == admin.id:
        raise HTTPException(status_code=409, detail="Cannot demote or disable yourself")

    u.active = False
    db.commit()
    db.refresh(u)
    logger.info("User %s disabled by %s", u.email, admin.email)
    return u


# ---------- Permissions ----------
def _get_user(db: Session, user_id: int) -> User:
    u = db.get(User, user_id)
    if not u:
        raise HTTPException(status_code=404, detail="User not found")
    return u


@router.get("/{user_id}/permissions")
def list_permissions(user_id: int, db: Session = Depends(get_db)):
    return effective_permissions(db, _get_user(db, user_id))


@router.put("/{user_id}/permissions")
def put_permission(
    user_id: int,
    payload: PermissionSet,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    u = _get_user(db, user_id)
    perm = set_permission(db, u, payload.module, payload.action, payload.granted)
    db.commit()
    return {"module": perm.module, "action": perm.action, "granted": perm.granted}


@router.delete("/{user_id}/permissions/{module}/{action}")
def delete_permission(
    user_id: int,
    module: str,
    action: str,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    reset_permission(db, _get_user(db, user_id), module, action)
    db.commit()
    return {"ok": True}
