"""
Corbeille : suppression douce avec restauration pendant 45 jours.

move_to_trash copie la ligne (et ses lignes filles) en JSON dans
deleted_items puis supprime la source, dans la même transaction.
Une ligne encore référencée (FK RESTRICT / CASCADE hors lignes filles)
n'est pas supprimable ; les références SET NULL sont détachées.

Ne commit jamais : l'endpoint appelant valide la transaction.
"""

from __future__ import annotations

import enum
import logging
import math
from collections import Counter
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from sqlalchemy import Date, DateTime, Enum, Numeric, delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backoffice.app.db.base import Base
from backoffice.app.db.models.models_v1 import (
    Category,
    Client,
    Container,
    DeletedItem,
    Groupage,
    Order,
    Product,
    Supplier,
    Transitaire,
)
from backoffice.services.errors import ConflictError, DomainError, NotFoundError

logger = logging.getLogger(__name__)

RETENTION_DAYS = 45

# table -> (modèle, relations filles sauvegardées avec la ligne)
TRASHABLE = {
    "suppliers": (Supplier, ()),
    "clients": (Client, ()),
    "products": (Product, ()),
    "categories": (Category, ()),
    "transitaires": (Transitaire, ()),
    "orders": (Order, ("lines", "workflow")),
    "containers": (Container, ()),
    "groupages": (Groupage, ("bookings",)),
}


# ---------- Snapshot ----------
def _to_json(value):
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return value


def _from_json(column, value):
    if value is None:
        return None
    col_type = column.type
    if isinstance(col_type, Enum) and col_type.enum_class is not None:
        return col_type.enum_class(value)
    if isinstance(col_type, DateTime):
        return datetime.fromisoformat(value)
    if isinstance(col_type, Date):
        return date.fromisoformat(value)
    if isinstance(col_type, Numeric):
        return Decimal(value)
    return value


def row_to_dict(obj) -> dict:
    return {col.key: _to_json(getattr(obj, col.key)) for col in obj.__table__.columns}


def _dict_to_row(model, data: dict):
    columns = model.__table__.columns
    return model(**{key: _from_json(columns[key], value) for key, value in data.items() if key in columns})


def _snapshot(obj, children: tuple[str, ...]) -> dict:
    snap = {"row": row_to_dict(obj), "children": {}}
    for rel in children:
        value = getattr(obj, rel)
        if value is None:
            continue
        rows = value if isinstance(value, list) else [value]
        snap["children"][rel] = [row_to_dict(r) for r in rows]
    return snap


# ---------- Références ----------
def _child_tables(model, children: tuple[str, ...]) -> set[str]:
    mapper = model.__mapper__
    return {mapper.relationships[rel].mapper.local_table.name for rel in children}


def _detach_references(db: Session, model, item_id: int, children: tuple[str, ...]) -> None:
    target = model.__table__
    skip = _child_tables(model, children)

    nullable_refs = []
    for table in Base.metadata.sorted_tables:
        if table.name in skip:
            continue
        for fk in table.foreign_keys:
            if fk.column.table is not target:
                continue
            col = fk.parent
            if fk.ondelete == "SET NULL":
                nullable_refs.append((table, col))
                continue
            count = db.execute(select(func.count()).select_from(table).where(col == item_id)).scalar_one()
            if count:
                raise ConflictError(f"Still referenced by {count} row(s) in {table.name}")

    # rien n'est modifié tant qu'une référence bloquante existe
    for table, col in nullable_refs:
        db.execute(update(table).where(col == item_id).values({col.name: None}))


def _check_references(db: Session, row) -> None:
    """Avant restauration : les lignes référencées existent toujours."""
    for col in row.__table__.columns:
        value = getattr(row, col.key)
        if value is None:
            continue
        for fk in col.foreign_keys:
            found = db.execute(select(fk.column).where(fk.column == value)).first()
            if found:
                continue
            if fk.ondelete == "SET NULL":
                setattr(row, col.key, None)
            else:
                raise ConflictError(f"Referenced {fk.column.table.name} #{value} no longer exists")


# ---------- API ----------
def move_to_trash(
    db: Session,
    table_name: str,
    item_id: int,
    *,
    reason: str | None = None,
    deleted_by: int | None = None,
) -> DeletedItem:
    if table_name not in TRASHABLE:
        raise DomainError(f"Table {table_name} cannot be moved to trash")
    model, children = TRASHABLE[table_name]

    obj = db.get(model, item_id)
    if not obj:
        raise NotFoundError(f"{table_name} #{item_id} not found")

    _detach_references(db, model, item_id, children)
    db.flush()
    db.refresh(obj)

    item = DeletedItem(
        table_name=table_name,
        item_id=item_id,
        item_data=_snapshot(obj, children),
        reason=reason,
        deleted_by=deleted_by,
    )
    db.add(item)
    db.delete(obj)
    db.flush()

    logger.info("Moved %s #%s to trash (%s)", table_name, item_id, reason or "no reason")
    return item


def restore_from_trash(db: Session, trash_id: int):
    item = db.get(DeletedItem, trash_id)
    if not item:
        raise NotFoundError("Trash item not found")
    model, children = TRASHABLE[item.table_name]

    if db.get(model, item.item_id):
        raise ConflictError(f"{item.table_name} #{item.item_id} already exists")

    obj = _dict_to_row(model, item.item_data["row"])
    _check_references(db, obj)

    mapper = model.__mapper__
    restored_children = []
    for rel, rows in item.item_data.get("children", {}).items():
        child_model = mapper.relationships[rel].mapper.class_
        restored_children.extend(_dict_to_row(child_model, data) for data in rows)

    try:
        with db.begin_nested():
            db.add(obj)
            db.flush()
            for child in restored_children:
                _check_references(db, child)
                db.add(child)
            db.flush()
    except IntegrityError as exc:
        raise ConflictError(f"Cannot restore {item.table_name} #{item.item_id}: {exc.orig}") from exc

    db.delete(item)
    db.flush()
    logger.info("Restored %s #%s from trash", item.table_name, item.item_id)
    return obj


def delete_permanently(db: Session, trash_id: int) -> None:
    item = db.get(DeletedItem, trash_id)
    if not item:
        raise NotFoundError("Trash item not found")
    db.delete(item)
    logger.info("Permanently deleted %s #%s", item.table_name, item.item_id)


def _as_utc(value: datetime) -> datetime:
    # SQLite rend des datetimes naïfs, stockés en UTC
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def days_until_expiry(
    deleted_at: datetime,
    now: datetime | None = None,
    retention_days: int = RETENTION_DAYS,
) -> int:
    now = _as_utc(now or datetime.now(timezone.utc))
    expiry = _as_utc(deleted_at) + timedelta(days=retention_days)
    remaining = (expiry - now).total_seconds() / 86400
    return max(0, math.ceil(remaining))


def cleanup_expired(
    db: Session,
    now: datetime | None = None,
    retention_days: int = RETENTION_DAYS,
) -> dict:
    now = _as_utc(now or datetime.now(timezone.utc))
    cutoff = now - timedelta(days=retention_days)

    expired = db.execute(select(DeletedItem).where(DeletedItem.deleted_at < cutoff)).scalars().all()
    summary = Counter(item.table_name for item in expired)

    if expired:
        db.execute(delete(DeletedItem).where(DeletedItem.id.in_([item.id for item in expired])))

    logger.info("Trash cleanup: %s expired item(s) before %s %s", len(expired), cutoff.isoformat(), dict(summary))
    return {
        "deleted_count": len(expired),
        "cutoff_date": cutoff,
        "summary": dict(summary),
        "expired_items": [
            {
                "id": item.id,
                "table_name": item.table_name,
                "item_id": item.item_id,
                "deleted_at": item.deleted_at,
                "reason": item.reason,
            }
            for item in expired
        ],
    }
