from decimal import Decimal

import pytest

from backoffice.app.db.models.core_types import WorkflowStatus
from backoffice.app.db.models.models_v1 import Product
from backoffice.services.errors import ConflictError
from backoffice.services.orders import (
    advance_workflow,
    compute_packing,
    compute_totals,
    line_total,
    remove_order_line,
)


def test_packing_rounds_up_at_each_level():
    p = Product(sku="X", name="X", units_per_package=10, packages_per_carton=5, cartons_per_palette=4)

    packing = compute_packing(p, 120)

    assert (packing.packages, packing.cartons, packing.palettes) == (12, 3, 1)
    assert compute_packing(p, 201).cartons == 5  # 21 paquets -> 5 cartons


def test_packing_missing_factors_default_to_one():
    p = Product(sku="Y", name="Y")
    packing = compute_packing(p, 7)
    assert (packing.packages, packing.cartons, packing.palettes) == (7, 7, 7)


def test_totals_ht_and_ttc():
    ht, ttc = compute_totals([Decimal("300.00"), Decimal("49.99")], Decimal("20"))
    assert ht == Decimal("349.99")
    assert ttc == Decimal("419.99")  # 419.988 arrondi

    assert line_total(3, Decimal("2.335")) == Decimal("7.01")
    assert compute_totals([], Decimal("20")) == (Decimal("0.00"), Decimal("0.00"))


def test_order_totals_follow_lines(db_session, make_product, make_order):
    p1 = make_product(units_per_package=10, packages_per_carton=5, carton_weight=Decimal("12.5"), carton_volume=Decimal("0.05"))
    p2 = make_product()

    order = make_order(lines=[(p1, 120, "2.50"), (p2, 4, "10")])

    assert order.total_ht == Decimal("340.00")
    assert order.total_ttc == Decimal("408.00")
    assert order.cartons == 3 + 4
    assert order.weight == Decimal("37.5")
    assert order.volume == Decimal("0.15")

    remove_order_line(db_session, order, order.lines[1])
    assert order.total_ht == Decimal("300.00")
    assert order.total_ttc == Decimal("360.00")
    assert order.cartons == 3


def test_workflow_moves_one_step_at_a_time(db_session, make_order, admin):
    order = make_order()
    wf = order.workflow
    assert wf.current_status == WorkflowStatus.request

    with pytest.raises(ConflictError):
        advance_workflow(db_session, wf, WorkflowStatus.receive, approver_id=admin.id)

    advance_workflow(db_session, wf, WorkflowStatus.approve, approver_id=admin.id, comments="OK budget")
    advance_workflow(db_session, wf, WorkflowStatus.procure, approver_id=admin.id)
    assert not order.is_received

    advance_workflow(db_session, wf, WorkflowStatus.receive, approver_id=None)
    db_session.flush()
    db_session.refresh(wf)

    assert order.is_received
    assert [a.status for a in wf.approvals] == [
        WorkflowStatus.approve,
        WorkflowStatus.procure,
        WorkflowStatus.receive,
    ]
    assert wf.approvals[0].comments == "OK budget"

    with pytest.raises(ConflictError):
        advance_workflow(db_session, wf, WorkflowStatus.approve, approver_id=admin.id)
