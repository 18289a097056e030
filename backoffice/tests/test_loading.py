from decimal import Decimal

import pytest

from backoffice.app.db.models.core_types import BookingStatus, ContainerStatus
from backoffice.services.errors import BookingError, ConflictError
from backoffice.services.loading import (
    REASON_CAPACITY,
    REASON_DANGEROUS,
    REASON_GROUPAGE_STATUS,
    REASON_IMDG,
    REASON_TRANSITAIRE,
    assign_to_container,
    book_groupage,
    booking_cost,
    can_add_to_container,
    can_add_to_groupage,
    check_new_product,
    confirm_booking,
    container_totals,
    eligible_orders_for_groupage,
    order_pallets,
    refresh_booking_flags,
    remove_booking,
    remove_from_container,
    unload_order,
)
from backoffice.services.orders import add_order_line


@pytest.fixture()
def transitaire(make_transitaire):
    return make_transitaire(dangerous_goods_certified=True)


@pytest.fixture()
def flammable(make_product):
    return make_product(dangerous=True, imdg_class="Classe 3")


@pytest.fixture()
def oxidizer(make_product):
    return make_product(dangerous=True, imdg_class="Classe 5.1")


def _book(db, groupage, order, pallets=1, weight="100", volume="1"):
    return book_groupage(db, groupage.id, order, pallets=pallets, weight=Decimal(weight), volume=Decimal(volume))


def test_order_pallets_from_cartons(make_order, make_product):
    assert order_pallets(make_order()) == 1
    order = make_order(lines=[(make_product(), 41, 1)])
    assert order.cartons == 41
    assert order_pallets(order) == 3


def test_eligibility_reasons_in_order(db_session, transitaire, make_transitaire, make_groupage, make_order, flammable):
    groupage = make_groupage(transitaire, allows_dangerous_goods=False)

    other = make_order(make_transitaire())
    assert can_add_to_groupage(db_session, other, groupage).reason == REASON_TRANSITAIRE

    dangerous = make_order(transitaire, lines=[(flammable, 1, 1)])
    assert can_add_to_groupage(db_session, dangerous, groupage).reason == REASON_DANGEROUS

    plain = make_order(transitaire)
    assert can_add_to_groupage(db_session, plain, groupage).can_add

    groupage.status = ContainerStatus.departed
    elig = can_add_to_groupage(db_session, plain, groupage)
    assert not elig.can_add
    assert elig.reason == REASON_GROUPAGE_STATUS


def test_booking_decrements_capacity_and_prices(db_session, transitaire, make_groupage, make_order):
    groupage = make_groupage(
        transitaire,
        pallets=10,
        cost_per_palette=Decimal("100"),
        cost_per_kg=Decimal("0.5"),
        cost_per_m3=Decimal("20"),
    )
    order = make_order(transitaire)

    booking = _book(db_session, groupage, order, pallets=2, weight="300", volume="1.5")

    assert booking.booking_status == BookingStatus.pending
    assert booking.cost_calculated == Decimal("380.00")
    assert groupage.available_space_pallets == 8
    assert groupage.available_weight == Decimal("9700")
    assert groupage.available_volume == Decimal("28.5")
    assert groupage.status == ContainerStatus.available


def test_booking_same_order_twice_conflicts(db_session, transitaire, make_groupage, make_order):
    groupage = make_groupage(transitaire)
    order = make_order(transitaire)
    _book(db_session, groupage, order)

    with pytest.raises(ConflictError):
        _book(db_session, groupage, order)


def test_booking_over_capacity_is_rejected(db_session, transitaire, make_groupage, make_order):
    groupage = make_groupage(transitaire, pallets=2, weight="500")

    with pytest.raises(BookingError, match=REASON_CAPACITY):
        _book(db_session, groupage, make_order(transitaire), pallets=3)
    with pytest.raises(BookingError, match=REASON_CAPACITY):
        _book(db_session, groupage, make_order(transitaire), pallets=1, weight="501")

    assert groupage.available_space_pallets == 2
    assert groupage.available_weight == Decimal("500")


def test_last_pallet_fills_groupage_and_release_reopens_it(db_session, transitaire, make_groupage, make_order):
    groupage = make_groupage(transitaire, pallets=2)
    booking = _book(db_session, groupage, make_order(transitaire), pallets=2)
    assert groupage.available_space_pallets == 0
    assert groupage.status == ContainerStatus.full

    with pytest.raises(BookingError, match=REASON_GROUPAGE_STATUS):
        _book(db_session, groupage, make_order(transitaire))

    remove_booking(db_session, booking)
    db_session.flush()
    assert groupage.available_space_pallets == 2
    assert groupage.status == ContainerStatus.available


def test_rejected_booking_gives_capacity_back(db_session, transitaire, make_groupage, make_order):
    groupage = make_groupage(transitaire, pallets=5)
    order = make_order(transitaire)
    booking = _book(db_session, groupage, order, pallets=3, weight="200")

    confirm_booking(db_session, booking, confirm=False, notes="Plus de place sur ce départ")

    assert booking.booking_status == BookingStatus.cancelled
    assert not booking.confirmed_by_transitaire
    assert booking.transitaire_notes == "Plus de place sur ce départ"
    assert groupage.available_space_pallets == 5
    assert groupage.available_weight == Decimal("10000")

    with pytest.raises(ConflictError):
        confirm_booking(db_session, booking, confirm=True)

    # une réservation annulée peut être refaite
    again = _book(db_session, groupage, order, pallets=1)
    assert again.id == booking.id
    assert again.booking_status == BookingStatus.pending
    assert groupage.available_space_pallets == 4


def test_confirmed_booking(db_session, transitaire, make_groupage, make_order):
    groupage = make_groupage(transitaire)
    booking = _book(db_session, groupage, make_order(transitaire), pallets=2)

    confirm_booking(db_session, booking, confirm=True)

    assert booking.booking_status == BookingStatus.confirmed
    assert booking.confirmed_by_transitaire
    assert groupage.available_space_pallets == 8


def test_imdg_incompatible_orders_cannot_share_groupage(
    db_session, transitaire, make_groupage, make_order, flammable, oxidizer, make_product
):
    groupage = make_groupage(transitaire, allows_dangerous_goods=True)
    first = make_order(transitaire, lines=[(flammable, 1, 1)])
    booking = _book(db_session, groupage, first)
    assert booking.has_dangerous_goods

    second = make_order(transitaire, lines=[(oxidizer, 1, 1)])
    with pytest.raises(BookingError, match=REASON_IMDG):
        _book(db_session, groupage, second)

    lithium = make_order(transitaire, lines=[(make_product(dangerous=True, imdg_class="Classe 9"), 1, 1)])
    _book(db_session, groupage, lithium)


def test_eligible_orders_for_groupage(db_session, transitaire, make_transitaire, make_groupage, make_order, flammable):
    groupage = make_groupage(transitaire)
    booked = make_order(transitaire)
    free = make_order(transitaire)
    dangerous = make_order(transitaire, lines=[(flammable, 1, 1)])
    make_order(make_transitaire())
    _book(db_session, groupage, booked)

    rows = {o.id: elig for o, elig in eligible_orders_for_groupage(db_session, groupage)}

    assert set(rows) == {free.id, dangerous.id}
    assert rows[free.id].can_add
    assert rows[dangerous.id].reason == REASON_DANGEROUS


def test_booking_cost_rounding(make_transitaire, make_groupage):
    groupage = make_groupage(make_transitaire(), cost_per_kg=Decimal("0.0333"))
    assert booking_cost(groupage, 0, Decimal("100"), Decimal("0")) == Decimal("3.33")


def test_container_assignment(db_session, transitaire, make_transitaire, make_container, make_order, make_product):
    container = make_container(transitaire, max_pallets=2)
    order = make_order(transitaire, lines=[(make_product(), 20, 5)])

    assign_to_container(db_session, order, container)
    db_session.flush()
    assert order.container_id == container.id

    with pytest.raises(BookingError, match=REASON_TRANSITAIRE):
        assign_to_container(db_session, make_order(make_transitaire()), container)

    big = make_order(transitaire, lines=[(make_product(), 40, 1)])
    with pytest.raises(BookingError, match=REASON_CAPACITY):
        assign_to_container(db_session, big, container)

    totals = container_totals([order])
    assert totals.total_pallets == 1
    assert totals.total_value == Decimal("120.00")

    remove_from_container(order, container)
    assert order.container_id is None


def test_container_without_dangerous_goods(db_session, transitaire, make_container, make_order, flammable):
    container = make_container(transitaire, dangerous_goods=False)
    order = make_order(transitaire, lines=[(flammable, 1, 1)])
    assert can_add_to_container(db_session, order, container).reason == REASON_DANGEROUS


def test_unload_order_releases_bookings_and_container(
    db_session, transitaire, make_groupage, make_container, make_order, make_product
):
    groupage = make_groupage(transitaire, pallets=2)
    order = make_order(transitaire, lines=[(make_product(), 1, 1)])
    booking = _book(db_session, groupage, order, pallets=2)
    assert groupage.status == ContainerStatus.full
    container = make_container(transitaire)
    assign_to_container(db_session, order, container)

    unload_order(db_session, order)
    db_session.flush()

    assert order.container_id is None
    assert booking.booking_status == BookingStatus.cancelled
    assert groupage.available_space_pallets == 2
    assert groupage.available_weight == Decimal("10000")
    assert groupage.status == ContainerStatus.available


def test_dangerous_product_checked_against_loaded_container(
    db_session, transitaire, make_container, make_order, make_product, flammable
):
    container = make_container(transitaire)
    order = make_order(transitaire, lines=[(make_product(), 1, 1)])
    assign_to_container(db_session, order, container)

    with pytest.raises(BookingError, match=REASON_DANGEROUS):
        check_new_product(db_session, order, flammable)
    check_new_product(db_session, order, make_product())


def test_new_product_imdg_checked_against_groupage(
    db_session, transitaire, make_groupage, make_order, make_product, flammable, oxidizer
):
    groupage = make_groupage(transitaire, allows_dangerous_goods=True)
    _book(db_session, groupage, make_order(transitaire, lines=[(oxidizer, 1, 1)]))
    order = make_order(transitaire, lines=[(make_product(), 1, 1)])
    booking = _book(db_session, groupage, order)
    assert booking.has_dangerous_goods is False

    with pytest.raises(BookingError, match=REASON_IMDG):
        check_new_product(db_session, order, flammable)

    gas = make_product(dangerous=True, imdg_class="Classe 2.2")
    check_new_product(db_session, order, gas)
    add_order_line(db_session, order, gas, quantity=1, unit_price=Decimal("1"))
    refresh_booking_flags(db_session, order)
    assert booking.has_dangerous_goods is True
