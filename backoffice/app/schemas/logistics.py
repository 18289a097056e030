from datetime import date, datetime

from pydantic import BaseModel

from backoffice.app.db.models.core_types import BookingStatus, ContainerStatus, ContainerType


class ContainerRead(BaseModel):
    id: int
    number: str
    type: ContainerType
    transitaire_id: int
    status: ContainerStatus
    reservation_number: str | None
    departure_port: str | None
    arrival_port: str | None
    etd: date | None
    eta: date | None
    port_cutoff: date | None
    max_pallets: int | None
    max_weight: float | None
    max_volume: float | None
    dangerous_goods: bool

    class Config:
        from_attributes = True


class GroupageRead(BaseModel):
    id: int
    container_id: int
    transitaire_id: int
    status: ContainerStatus
    reservation_number: str | None
    max_space_pallets: int
    max_weight: float
    max_volume: float
    available_space_pallets: int
    available_weight: float
    available_volume: float
    cost_per_palette: float
    cost_per_kg: float
    cost_per_m3: float
    allows_dangerous_goods: bool
    departure_date: date | None
    arrival_date: date | None
    notes: str | None

    class Config:
        from_attributes = True


class BookingRead(BaseModel):
    id: int
    groupage_id: int
    order_id: int
    palettes_booked: int
    weight_booked: float
    volume_booked: float
    cost_calculated: float
    has_dangerous_goods: bool
    booking_status: BookingStatus
    confirmed_by_transitaire: bool
    transitaire_notes: str | None
    booking_date: datetime

    class Config:
        from_attributes = True
