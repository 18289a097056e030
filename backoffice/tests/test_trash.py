from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from backoffice.app.db.models.core_types import PartnerStatus, WorkflowStatus
from backoffice.app.db.models.models_v1 import (
    Client,
    DeletedItem,
    Order,
    OrderLine,
    Payment,
    Supplier,
)
from backoffice.services.errors import ConflictError, DomainError, NotFoundError
from backoffice.services.trash import (
    cleanup_expired,
    days_until_expiry,
    delete_permanently,
    move_to_trash,
    restore_from_trash,
)

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


def test_supplier_round_trip(db_session, admin):
    s = Supplier(name="Shenzhen Tools", status=PartnerStatus.pending, reliability_rating=4, minimum_order_amount=Decimal("1500.50"))
    db_session.add(s)
    db_session.commit()
    supplier_id = s.id

    item = move_to_trash(db_session, "suppliers", supplier_id, reason="doublon", deleted_by=admin.id)
    db_session.commit()

    assert db_session.get(Supplier, supplier_id) is None
    assert item.item_data["row"]["name"] == "Shenzhen Tools"
    assert item.item_data["row"]["status"] == "pending"
    assert item.reason == "doublon"

    restored = restore_from_trash(db_session, item.id)
    db_session.commit()

    assert restored.id == supplier_id
    assert restored.status == PartnerStatus.pending
    assert restored.minimum_order_amount == Decimal("1500.50")
    assert db_session.get(DeletedItem, item.id) is None


def test_order_is_trashed_with_its_lines(db_session, make_transitaire, make_product, make_order):
    order = make_order(make_transitaire(), lines=[(make_product(), 10, "3.5"), (make_product(), 2, "1")])
    db_session.commit()
    order_id = order.id
    line_ids = sorted(ln.id for ln in order.lines)

    item = move_to_trash(db_session, "orders", order_id)
    db_session.commit()
    assert db_session.get(OrderLine, line_ids[0]) is None
    assert len(item.item_data["children"]["lines"]) == 2

    restore_from_trash(db_session, item.id)
    db_session.commit()

    order = db_session.get(Order, order_id)
    assert sorted(ln.id for ln in order.lines) == line_ids
    assert order.total_ht == Decimal("37.00")
    assert order.workflow.current_status == WorkflowStatus.request


def test_restore_conflicts_when_id_is_taken(db_session):
    s = Supplier(name="Original")
    db_session.add(s)
    db_session.commit()
    supplier_id = s.id

    item = move_to_trash(db_session, "suppliers", supplier_id)
    db_session.add(Supplier(id=supplier_id, name="Remplaçant"))
    db_session.commit()

    with pytest.raises(ConflictError):
        restore_from_trash(db_session, item.id)


def test_restore_conflicts_on_unique_name(db_session):
    s = Supplier(name="ACME Export")
    db_session.add(s)
    db_session.commit()

    item = move_to_trash(db_session, "suppliers", s.id)
    db_session.add(Supplier(name="ACME Export"))
    db_session.commit()

    with pytest.raises(ConflictError):
        restore_from_trash(db_session, item.id)
    # la corbeille reste intacte
    assert db_session.get(DeletedItem, item.id) is not None


def test_restore_needs_its_parents(db_session, make_order):
    order = make_order()
    supplier_id = order.supplier_id
    db_session.commit()

    order_item = move_to_trash(db_session, "orders", order.id)
    move_to_trash(db_session, "suppliers", supplier_id)
    db_session.commit()

    with pytest.raises(ConflictError, match="suppliers"):
        restore_from_trash(db_session, order_item.id)


def test_referenced_row_cannot_be_trashed(db_session, make_order):
    order = make_order()
    with pytest.raises(ConflictError, match="orders"):
        move_to_trash(db_session, "suppliers", order.supplier_id)


def test_set_null_references_are_detached(db_session, make_order):
    client = Client(name="Client Martin")
    db_session.add(client)
    db_session.flush()
    order = make_order(client_id=client.id)
    payment = Payment(client_id=client.id, order_id=order.id, amount=Decimal("50"), payment_date=NOW.date())
    db_session.add(payment)
    db_session.commit()

    move_to_trash(db_session, "orders", order.id)
    db_session.commit()
    db_session.refresh(payment)

    assert payment.order_id is None


def test_unknown_table_and_item(db_session):
    with pytest.raises(DomainError):
        move_to_trash(db_session, "users", 1)
    with pytest.raises(NotFoundError):
        move_to_trash(db_session, "suppliers", 999_999)
    with pytest.raises(NotFoundError):
        restore_from_trash(db_session, 999_999)
    with pytest.raises(NotFoundError):
        delete_permanently(db_session, 999_999)


def test_days_until_expiry():
    assert days_until_expiry(NOW - timedelta(days=10), NOW) == 35
    assert days_until_expiry(NOW - timedelta(days=44, hours=12), NOW) == 1
    assert days_until_expiry(NOW - timedelta(days=45), NOW) == 0
    assert days_until_expiry(NOW - timedelta(days=60), NOW) == 0
    # datetime naïf (SQLite) lu comme UTC
    assert days_until_expiry((NOW - timedelta(days=5)).replace(tzinfo=None), NOW) == 40


def test_cleanup_removes_only_expired_entries(db_session):
    old = DeletedItem(table_name="suppliers", item_id=1, item_data={"row": {}}, deleted_at=NOW - timedelta(days=50))
    older = DeletedItem(table_name="clients", item_id=2, item_data={"row": {}}, deleted_at=NOW - timedelta(days=46))
    recent = DeletedItem(table_name="suppliers", item_id=3, item_data={"row": {}}, deleted_at=NOW - timedelta(days=10))
    db_session.add_all([old, older, recent])
    db_session.commit()

    result = cleanup_expired(db_session, now=NOW)
    db_session.commit()

    assert result["deleted_count"] == 2
    assert result["summary"] == {"suppliers": 1, "clients": 1}
    assert result["cutoff_date"] == NOW - timedelta(days=45)
    assert {i["item_id"] for i in result["expired_items"]} == {1, 2}
    assert db_session.get(DeletedItem, recent.id) is not None
    assert db_session.get(DeletedItem, old.id) is None
