"""
Plan de chargement : conteneurs complets et groupages.

Règles d'éligibilité d'une commande :
    - même transitaire que le conteneur / groupage
    - produits dangereux seulement si la cible les accepte
    - groupage : statut "available"
    - classes IMDG compatibles avec ce qui est déjà chargé

La réservation en groupage verrouille la ligne groupage (FOR UPDATE) :
insert du booking + décrément de capacité dans la même transaction.
Ne commit jamais : l'endpoint appelant valide la transaction.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import select
from sqlalchemy.orm import Session

from backoffice.app.db.models.models_v1 import (
    Container,
    Groupage,
    GroupageBooking,
    Order,
    Product,
)
from backoffice.app.db.models.core_types import (
    BookingStatus,
    ContainerStatus,
    ContainerType,
)
from backoffice.services.errors import BookingError, ConflictError, NotFoundError
from backoffice.services.imdg import check_container_compatibility
from backoffice.services.orders import order_imdg_classes, order_is_dangerous

logger = logging.getLogger(__name__)

# capacités par défaut d'une réservation selon le type
TYPE_CONFIGS = {
    ContainerType.feet_20: {"pallets": 11, "weight": Decimal("21000"), "volume": Decimal("33")},
    ContainerType.feet_40: {"pallets": 25, "weight": Decimal("27000"), "volume": Decimal("67")},
    ContainerType.groupage: {"pallets": 33, "weight": Decimal("28000"), "volume": Decimal("76")},
}

# cartons par palette quand la commande n'a pas de détail palette
CARTONS_PER_PALLET = 20

REASON_TRANSITAIRE = "Transitaire différent"
REASON_DANGEROUS = "Produits dangereux non autorisés"
REASON_GROUPAGE_STATUS = "Groupage non disponible"
REASON_IMDG = "Classes IMDG incompatibles"
REASON_CAPACITY = "Capacité insuffisante"

LIVE_BOOKING_STATUSES = (BookingStatus.pending, BookingStatus.confirmed)


@dataclass(frozen=True)
class Eligibility:
    can_add: bool
    reason: str = ""


@dataclass(frozen=True)
class LoadingTotals:
    total_weight: Decimal
    total_volume: Decimal
    total_value: Decimal
    total_pallets: int


def order_pallets(order: Order) -> int:
    return math.ceil(order.cartons / CARTONS_PER_PALLET) if order.cartons else 1


def _eligibility(
    order: Order,
    *,
    transitaire_id: int,
    allows_dangerous: bool,
    loaded_classes: list[str],
    open_for_booking: bool = True,
) -> Eligibility:
    if order.transitaire_id != transitaire_id:
        return Eligibility(False, REASON_TRANSITAIRE)
    if order_is_dangerous(order) and not allows_dangerous:
        return Eligibility(False, REASON_DANGEROUS)
    if not open_for_booking:
        return Eligibility(False, REASON_GROUPAGE_STATUS)

    classes = order_imdg_classes(order)
    if classes:
        compatible, _ = check_container_compatibility(loaded_classes + classes)
        if not compatible:
            return Eligibility(False, REASON_IMDG)
    return Eligibility(True)


def container_orders(db: Session, container: Container) -> list[Order]:
    return list(
        db.execute(select(Order).where(Order.container_id == container.id).order_by(Order.id)).scalars().all()
    )


def live_bookings(db: Session, groupage: Groupage) -> list[GroupageBooking]:
    return list(
        db.execute(
            select(GroupageBooking)
            .where(GroupageBooking.groupage_id == groupage.id)
            .where(GroupageBooking.booking_status.in_(LIVE_BOOKING_STATUSES))
            .order_by(GroupageBooking.id)
        )
        .scalars()
        .all()
    )


def _loaded_classes(orders: list[Order], *, exclude_order_id: int | None = None) -> list[str]:
    classes: list[str] = []
    for o in orders:
        if o.id != exclude_order_id:
            classes.extend(order_imdg_classes(o))
    return classes


def can_add_to_container(db: Session, order: Order, container: Container) -> Eligibility:
    loaded = container_orders(db, container)
    return _eligibility(
        order,
        transitaire_id=container.transitaire_id,
        allows_dangerous=container.dangerous_goods,
        loaded_classes=_loaded_classes(loaded, exclude_order_id=order.id),
    )


def can_add_to_groupage(db: Session, order: Order, groupage: Groupage) -> Eligibility:
    booked = [b.order for b in live_bookings(db, groupage)]
    return _eligibility(
        order,
        transitaire_id=groupage.transitaire_id,
        allows_dangerous=groupage.allows_dangerous_goods,
        loaded_classes=_loaded_classes(booked, exclude_order_id=order.id),
        open_for_booking=groupage.status == ContainerStatus.available,
    )


# ---------- CONTENEUR COMPLET ----------
def assign_to_container(db: Session, order: Order, container: Container) -> None:
    if order.container_id == container.id:
        return

    elig = can_add_to_container(db, order, container)
    if not elig.can_add:
        raise BookingError(elig.reason)

    if container.max_pallets is not None:
        used = sum(order_pallets(o) for o in container_orders(db, container))
        if used + order_pallets(order) > container.max_pallets:
            raise BookingError(REASON_CAPACITY)

    order.container_id = container.id
    logger.info("Order %s loaded in container %s", order.order_number, container.number)


def remove_from_container(order: Order, container: Container) -> None:
    if order.container_id != container.id:
        raise NotFoundError("Order is not loaded in this container")
    order.container_id = None


# ---------- GROUPAGE ----------
def lock_groupage(db: Session, groupage_id: int) -> Groupage:
    groupage = (
        db.execute(select(Groupage).where(Groupage.id == groupage_id).with_for_update())
        .scalar_one_or_none()
    )
    if not groupage:
        raise NotFoundError("Groupage not found")
    return groupage


def booking_cost(groupage: Groupage, pallets: int, weight: Decimal, volume: Decimal) -> Decimal:
    cost = (
        Decimal(pallets) * Decimal(groupage.cost_per_palette or 0)
        + Decimal(weight) * Decimal(groupage.cost_per_kg or 0)
        + Decimal(volume) * Decimal(groupage.cost_per_m3 or 0)
    )
    return cost.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _release_capacity(groupage: Groupage, booking: GroupageBooking) -> None:
    groupage.available_space_pallets += booking.palettes_booked
    groupage.available_weight = Decimal(groupage.available_weight) + Decimal(booking.weight_booked)
    groupage.available_volume = Decimal(groupage.available_volume) + Decimal(booking.volume_booked)
    if groupage.status == ContainerStatus.full and groupage.available_space_pallets > 0:
        groupage.status = ContainerStatus.available


def book_groupage(
    db: Session,
    groupage_id: int,
    order: Order,
    *,
    pallets: int,
    weight: Decimal,
    volume: Decimal,
    transitaire_notes: str | None = None,
) -> GroupageBooking:
    groupage = lock_groupage(db, groupage_id)

    existing = db.execute(
        select(GroupageBooking)
        .where(GroupageBooking.groupage_id == groupage.id)
        .where(GroupageBooking.order_id == order.id)
    ).scalar_one_or_none()
    if existing and existing.booking_status in LIVE_BOOKING_STATUSES:
        raise ConflictError("Order already booked in this groupage")

    elig = can_add_to_groupage(db, order, groupage)
    if not elig.can_add:
        raise BookingError(elig.reason)

    weight = Decimal(weight)
    volume = Decimal(volume)
    if (
        pallets > groupage.available_space_pallets
        or weight > Decimal(groupage.available_weight)
        or volume > Decimal(groupage.available_volume)
    ):
        raise BookingError(REASON_CAPACITY)

    if existing:
        # réservation annulée réactivée
        booking = existing
        booking.booking_status = BookingStatus.pending
        booking.confirmed_by_transitaire = False
    else:
        booking = GroupageBooking(groupage_id=groupage.id, order_id=order.id)
        db.add(booking)

    booking.palettes_booked = pallets
    booking.weight_booked = weight
    booking.volume_booked = volume
    booking.cost_calculated = booking_cost(groupage, pallets, weight, volume)
    booking.has_dangerous_goods = order_is_dangerous(order)
    booking.transitaire_notes = transitaire_notes

    groupage.available_space_pallets -= pallets
    groupage.available_weight = Decimal(groupage.available_weight) - weight
    groupage.available_volume = Decimal(groupage.available_volume) - volume
    if groupage.available_space_pallets == 0:
        groupage.status = ContainerStatus.full

    db.flush()
    logger.info(
        "Order %s booked in groupage %s (%s pallets, %s kg, %s m3)",
        order.order_number,
        groupage.id,
        pallets,
        weight,
        volume,
    )
    return booking


def confirm_booking(db: Session, booking: GroupageBooking, *, confirm: bool, notes: str | None = None) -> None:
    """Réponse du transitaire. Un refus rend la capacité au groupage."""
    if booking.booking_status == BookingStatus.cancelled:
        raise ConflictError("Booking already cancelled")

    groupage = lock_groupage(db, booking.groupage_id)
    if confirm:
        booking.booking_status = BookingStatus.confirmed
        booking.confirmed_by_transitaire = True
    else:
        booking.booking_status = BookingStatus.cancelled
        booking.confirmed_by_transitaire = False
        _release_capacity(groupage, booking)
    if notes is not None:
        booking.transitaire_notes = notes


def remove_booking(db: Session, booking: GroupageBooking) -> None:
    groupage = lock_groupage(db, booking.groupage_id)
    if booking.booking_status != BookingStatus.cancelled:
        _release_capacity(groupage, booking)
    db.delete(booking)
    logger.info("Booking %s removed from groupage %s", booking.id, groupage.id)


# ---------- COMMANDE DÉJÀ CHARGÉE ----------
def order_live_bookings(db: Session, order: Order) -> list[GroupageBooking]:
    return list(
        db.execute(
            select(GroupageBooking)
            .where(GroupageBooking.order_id == order.id)
            .where(GroupageBooking.booking_status.in_(LIVE_BOOKING_STATUSES))
            .order_by(GroupageBooking.id)
        )
        .scalars()
        .all()
    )


def unload_order(db: Session, order: Order) -> None:
    """La commande quitte son conteneur et ses groupages (capacité rendue)."""
    order.container_id = None
    for booking in order_live_bookings(db, order):
        groupage = lock_groupage(db, booking.groupage_id)
        booking.booking_status = BookingStatus.cancelled
        booking.confirmed_by_transitaire = False
        _release_capacity(groupage, booking)
        logger.info("Booking %s cancelled: order %s unloaded", booking.id, order.order_number)


def check_new_product(db: Session, order: Order, product: Product) -> None:
    """
    Avant d'ajouter une ligne à une commande déjà chargée :
    le conteneur et les groupages doivent accepter le produit.
    """
    if not product.dangerous:
        return

    classes = order_imdg_classes(order)
    if product.imdg_class and product.imdg_class not in classes:
        classes = classes + [product.imdg_class]

    targets = []
    if order.container_id is not None:
        container = db.get(Container, order.container_id)
        others = _loaded_classes(container_orders(db, container), exclude_order_id=order.id)
        targets.append((container.dangerous_goods, others))
    for booking in order_live_bookings(db, order):
        groupage = lock_groupage(db, booking.groupage_id)
        booked = [b.order for b in live_bookings(db, groupage)]
        targets.append((groupage.allows_dangerous_goods, _loaded_classes(booked, exclude_order_id=order.id)))

    for allows_dangerous, loaded in targets:
        if not allows_dangerous:
            raise BookingError(REASON_DANGEROUS)
        if classes:
            compatible, _ = check_container_compatibility(loaded + classes)
            if not compatible:
                raise BookingError(REASON_IMDG)


def refresh_booking_flags(db: Session, order: Order) -> None:
    dangerous = order_is_dangerous(order)
    for booking in order_live_bookings(db, order):
        booking.has_dangerous_goods = dangerous


# ---------- SYNTHÈSE ----------
def container_totals(orders: list[Order]) -> LoadingTotals:
    return LoadingTotals(
        total_weight=sum((Decimal(o.weight or 0) for o in orders), Decimal("0")),
        total_volume=sum((Decimal(o.volume or 0) for o in orders), Decimal("0")),
        total_value=sum((Decimal(o.total_ttc or 0) for o in orders), Decimal("0")),
        total_pallets=sum(order_pallets(o) for o in orders),
    )


def groupage_totals(bookings: list[GroupageBooking]) -> LoadingTotals:
    return LoadingTotals(
        total_weight=sum((Decimal(b.weight_booked) for b in bookings), Decimal("0")),
        total_volume=sum((Decimal(b.volume_booked) for b in bookings), Decimal("0")),
        total_value=sum((Decimal(b.order.total_ttc or 0) for b in bookings), Decimal("0")),
        total_pallets=sum(b.palettes_booked for b in bookings),
    )


def eligible_orders_for_container(db: Session, container: Container) -> list[tuple[Order, Eligibility]]:
    rows = (
        db.execute(
            select(Order)
            .where(Order.transitaire_id == container.transitaire_id)
            .where(Order.container_id.is_(None))
            .order_by(Order.id)
        )
        .scalars()
        .all()
    )
    return [(o, can_add_to_container(db, o, container)) for o in rows]


def eligible_orders_for_groupage(db: Session, groupage: Groupage) -> list[tuple[Order, Eligibility]]:
    booked_ids = {b.order_id for b in live_bookings(db, groupage)}
    rows = (
        db.execute(
            select(Order)
            .where(Order.transitaire_id == groupage.transitaire_id)
            .order_by(Order.id)
        )
        .scalars()
        .all()
    )
    return [(o, can_add_to_groupage(db, o, groupage)) for o in rows if o.id not in booked_ids]
