from __future__ import annotations

from typing import Generator

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from backoffice.app.db.models.core_types import Role
from backoffice.app.db.models.models_v1 import User
from backoffice.app.db.session import SessionLocal
from backoffice.services.permissions import has_permission


def get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def current_user(
    x_user_id: int | None = Header(default=None, alias="X-User-Id"),
    db: Session = Depends(get_db),
) -> User | None:
    """Utilisateur appelant (en-tête X-User-Id), None si absent."""
    if x_user_id is None:
        return None
    user = db.get(User, x_user_id)
    if not user or not user.active:
        raise HTTPException(status_code=401, detail="Unknown or inactive user")
    return user


def require_user(user: User | None = Depends(current_user)) -> User:
    if user is None:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return user


def require_admin(user: User = Depends(require_user)) -> User:
    if user.role != Role.admin:
        raise HTTPException(status_code=403, detail="Admin role required")
    return user


def check_permission(db: Session, user: User, module: str, action: str) -> None:
    if not has_permission(db, user, module, action):
        raise HTTPException(status_code=403, detail=f"Permission {module}.{action} required")


def require_permission(module: str, action: str):
    def _dep(user: User = Depends(require_user), db: Session = Depends(get_db)) -> User:
        check_permission(db, user, module, action)
        return user

    return _dep


def reject_nulls(model, data: dict) -> None:
    """PATCH : un null explicite sur une colonne NOT NULL -> 400."""
    columns = model.__table__.columns
    for key, value in data.items():
        if value is None and key in columns and not columns[key].nullable:
            raise HTTPException(status_code=400, detail=f"{key} cannot be null")
