from __future__ import annotations

from collections import Counter
from datetime import date
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from backoffice.app.db.models.models_v1 import (
    Client,
    Container,
    DeletedItem,
    Groupage,
    Order,
    OrderWorkflow,
    Payment,
    Product,
    Supplier,
    Transitaire,
)
from backoffice.app.db.models.core_types import PartnerStatus


def _count(db: Session, model) -> int:
    return db.execute(select(func.count()).select_from(model)).scalar_one()


def dashboard_summary(db: Session) -> dict:
    workflow_rows = db.execute(
        select(OrderWorkflow.current_status, func.count()).group_by(OrderWorkflow.current_status)
    ).all()
    return {
        "clients": _count(db, Client),
        "suppliers": _count(db, Supplier),
        "products": _count(db, Product),
        "transitaires": _count(db, Transitaire),
        "orders": _count(db, Order),
        "containers": _count(db, Container),
        "groupages": _count(db, Groupage),
        "trash": _count(db, DeletedItem),
        "orders_by_workflow": {status.value: int(n) for status, n in workflow_rows},
    }


def transitaire_stats(db: Session, top: int = 5) -> dict:
    rows = db.execute(select(Transitaire)).scalars().all()
    total = len(rows)
    services = Counter(s for t in rows for s in (t.services or []))
    specialties = Counter(s for t in rows for s in (t.specialties or []))
    countries = Counter(t.country or "Non spécifié" for t in rows)
    capacity = sum(t.max_container_capacity or 0 for t in rows)

    return {
        "total": total,
        "active": sum(1 for t in rows if t.status == PartnerStatus.active),
        "inactive": sum(1 for t in rows if t.status == PartnerStatus.inactive),
        "dangerous_goods_certified": sum(1 for t in rows if t.dangerous_goods_certified),
        "average_capacity": round(capacity / total, 1) if total else 0,
        "top_services": [{"name": k, "count": v} for k, v in services.most_common(top)],
        "top_specialties": [{"name": k, "count": v} for k, v in specialties.most_common(top)],
        "by_country": dict(countries),
    }


def supplier_stats(db: Session) -> dict:
    rows = db.execute(select(Supplier)).scalars().all()
    rated = [s.reliability_rating for s in rows if s.reliability_rating is not None]
    return {
        "total": len(rows),
        "by_status": dict(Counter(s.status.value for s in rows)),
        "average_rating": round(sum(rated) / len(rated), 2) if rated else None,
    }


def supplier_activity(db: Session, supplier_id: int) -> dict:
    count, last = db.execute(
        select(func.count(Order.id), func.max(Order.order_date)).where(Order.supplier_id == supplier_id)
    ).one()
    return {"total_orders": int(count), "last_order_date": last}


def client_stats(db: Session, client_id: int, today: date | None = None) -> dict:
    today = today or date.today()
    orders = db.execute(select(Order).where(Order.client_id == client_id)).scalars().all()
    payments = db.execute(select(Payment).where(Payment.client_id == client_id)).scalars().all()

    total_value = sum((Decimal(o.total_ttc or 0) for o in orders), Decimal("0"))
    received = sum((Decimal(p.amount) for p in payments if p.payment_status == "completed"), Decimal("0"))
    this_month = [o for o in orders if o.order_date.year == today.year and o.order_date.month == today.month]

    return {
        "total_orders": len(orders),
        "orders_this_month": len(this_month),
        "total_value": total_value,
        "average_order_value": (total_value / len(orders)).quantize(Decimal("0.01")) if orders else Decimal("0"),
        "total_received": received,
        "last_payment_date": max((p.payment_date for p in payments), default=None),
        "balance": total_value - received,
    }
