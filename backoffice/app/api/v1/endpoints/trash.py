from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.orm import Session

from backoffice.app.api.deps import current_user, get_db
from backoffice.app.core.config import get_settings
from backoffice.app.db.models.models_v1 import DeletedItem, User
from backoffice.services.trash import (
    TRASHABLE,
    cleanup_expired,
    days_until_expiry,
    delete_permanently,
    move_to_trash,
    restore_from_trash,
)

router = APIRouter(prefix="/trash")


class TrashMove(BaseModel):
    table_name: str
    item_id: int
    reason: str | None = None


def _item_out(item: DeletedItem, now: datetime, retention_days: int) -> dict:
    return {
        "id": item.id,
        "table_name": item.table_name,
        "item_id": item.item_id,
        "item_data": item.item_data,
        "reason": item.reason,
        "deleted_by": item.deleted_by,
        "deleted_at": item.deleted_at,
        "days_left": days_until_expiry(item.deleted_at, now, retention_days),
    }


@router.get("")
def list_trash(table_name: str | None = None, db: Session = Depends(get_db)):
    stmt = select(DeletedItem).order_by(DeletedItem.deleted_at.desc(), DeletedItem.id.desc())
    if table_name:
        stmt = stmt.where(DeletedItem.table_name == table_name)
    rows = db.execute(stmt).scalars().all()

    now = datetime.now(timezone.utc)
    retention_days = get_settings().trash_retention_days
    return [_item_out(item, now, retention_days) for item in rows]


@router.get("/tables")
def list_trashable_tables():
    return sorted(TRASHABLE)


@router.post("")
def create_trash_item(
    payload: TrashMove,
    db: Session = Depends(get_db),
    user: User | None = Depends(current_user),
):
    item = move_to_trash(
        db,
        payload.table_name,
        payload.item_id,
        reason=payload.reason,
        deleted_by=user.id if user else None,
    )
    db.commit()
    return {"trash_id": item.id}


@router.post("/cleanup")
def run_cleanup(db: Session = Depends(get_db)):
    result = cleanup_expired(db, retention_days=get_settings().trash_retention_days)
    db.commit()
    return result


@router.post("/{trash_id}/restore")
def restore_item(trash_id: int, db: Session = Depends(get_db)):
    item = db.get(DeletedItem, trash_id)
    if not item:
        raise HTTPException(status_code=404, detail="Trash item not found")
    table_name, item_id = item.table_name, item.item_id

    restore_from_trash(db, trash_id)
    db.commit()
    return {"table_name": table_name, "item_id": item_id}


@router.delete("/{trash_id}")
def delete_item(trash_id: int, db: Session = Depends(get_db)):
    delete_permanently(db, trash_id)
    db.commit()
    return {"deleted": trash_id}
