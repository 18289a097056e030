"""
Commandes : conditionnement des lignes, totaux HT/TTC, workflow.

Ne commit jamais : l'endpoint appelant valide la transaction.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy.orm import Session

from backoffice.app.db.models.models_v1 import (
    Order,
    OrderLine,
    OrderWorkflow,
    Product,
    WorkflowApproval,
)
from backoffice.app.db.models.core_types import WorkflowStatus, WORKFLOW_STEPS
from backoffice.services.errors import ConflictError

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


@dataclass(frozen=True)
class Packing:
    packages: int
    cartons: int
    palettes: int


def compute_packing(product: Product, quantity: int) -> Packing:
    """
    unités -> paquets -> cartons -> palettes, arrondi au supérieur à chaque étage.
    Un facteur absent (ou nul) vaut 1.
    """
    units_per_package = product.units_per_package or 1
    packages_per_carton = product.packages_per_carton or 1
    cartons_per_palette = product.cartons_per_palette or 1

    packages = math.ceil(quantity / units_per_package)
    cartons = math.ceil(packages / packages_per_carton)
    palettes = math.ceil(cartons / cartons_per_palette)
    return Packing(packages=packages, cartons=cartons, palettes=palettes)


def line_total(quantity: int, unit_price: Decimal) -> Decimal:
    return (Decimal(quantity) * Decimal(unit_price)).quantize(CENTS, rounding=ROUND_HALF_UP)


def compute_totals(line_totals: list[Decimal], tva_rate: Decimal) -> tuple[Decimal, Decimal]:
    total_ht = sum((Decimal(t) for t in line_totals), Decimal("0")).quantize(CENTS, rounding=ROUND_HALF_UP)
    total_ttc = (total_ht * (1 + Decimal(tva_rate) / 100)).quantize(CENTS, rounding=ROUND_HALF_UP)
    return total_ht, total_ttc


def recalculate_order_totals(db: Session, order: Order) -> None:
    db.flush()
    db.refresh(order, attribute_names=["lines"])

    order.total_ht, order.total_ttc = compute_totals([ln.total_price for ln in order.lines], order.tva_rate)
    order.cartons = sum(ln.carton_quantity or 0 for ln in order.lines) or None

    weight = Decimal("0")
    volume = Decimal("0")
    for ln in order.lines:
        cartons = ln.carton_quantity or 0
        if ln.product.carton_weight is not None:
            weight += Decimal(ln.product.carton_weight) * cartons
        if ln.product.carton_volume is not None:
            volume += Decimal(ln.product.carton_volume) * cartons
    if weight:
        order.weight = weight
    if volume:
        order.volume = volume


def add_order_line(
    db: Session,
    order: Order,
    product: Product,
    *,
    quantity: int,
    unit_price: Decimal,
) -> OrderLine:
    packing = compute_packing(product, quantity)
    line = OrderLine(
        order_id=order.id,
        product_id=product.id,
        quantity=quantity,
        unit_price=unit_price,
        total_price=line_total(quantity, unit_price),
        carton_quantity=packing.cartons,
        palette_quantity=packing.palettes,
    )
    db.add(line)
    recalculate_order_totals(db, order)
    return line


def remove_order_line(db: Session, order: Order, line: OrderLine) -> None:
    db.delete(line)
    recalculate_order_totals(db, order)


def order_is_dangerous(order: Order) -> bool:
    return any(ln.product.dangerous for ln in order.lines)


def order_imdg_classes(order: Order) -> list[str]:
    return sorted({ln.product.imdg_class for ln in order.lines if ln.product.dangerous and ln.product.imdg_class})


# ---------- WORKFLOW ----------
def start_workflow(db: Session, order: Order) -> OrderWorkflow:
    wf = OrderWorkflow(order_id=order.id, current_status=WorkflowStatus.request)
    db.add(wf)
    db.flush()
    return wf


def advance_workflow(
    db: Session,
    workflow: OrderWorkflow,
    new_status: WorkflowStatus,
    *,
    approver_id: int | None,
    comments: str | None = None,
) -> WorkflowApproval:
    """Avance d'une seule étape : request -> approve -> procure -> receive."""
    current = WORKFLOW_STEPS.index(workflow.current_status)
    target = WORKFLOW_STEPS.index(new_status)
    if target != current + 1:
        raise ConflictError(f"Cannot move workflow from {workflow.current_status.value} to {new_status.value}")

    workflow.current_status = new_status
    approval = WorkflowApproval(
        workflow_id=workflow.id,
        status=new_status,
        approved_by=approver_id,
        comments=comments,
    )
    db.add(approval)

    if new_status == WorkflowStatus.receive:
        workflow.order.is_received = True

    logger.info("Order %s workflow -> %s", workflow.order_id, new_status.value)
    return approval
