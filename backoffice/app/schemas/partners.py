from datetime import datetime

from pydantic import BaseModel

from backoffice.app.db.models.core_types import PartnerStatus


class CategoryRead(BaseModel):
    id: int
    name: str
    description: str | None

    class Config:
        from_attributes = True


class ClientRead(BaseModel):
    id: int
    name: str
    type: str | None
    status: PartnerStatus
    email: str | None
    phone: str | None
    address: str | None
    city: str | None
    country: str | None
    delivery_address: str | None
    main_contact_name: str | None
    payment_conditions: str | None
    notes: str | None
    created_at: datetime

    class Config:
        from_attributes = True


class SupplierRead(BaseModel):
    id: int
    name: str
    status: PartnerStatus
    country: str | None
    email: str | None
    phone: str | None
    main_contact_name: str | None
    currency: str
    incoterm: str | None
    payment_conditions: str | None
    preparation_time: int | None
    reliability_rating: int | None
    minimum_order_amount: float | None
    notes: str | None

    class Config:
        from_attributes = True


class ProductRead(BaseModel):
    id: int
    sku: str
    name: str
    description: str | None
    category: str
    unit: str
    cost: float
    status: str
    dangerous: bool
    imdg_class: str | None
    units_per_package: int | None
    packages_per_carton: int | None
    cartons_per_palette: int | None
    carton_weight: float | None
    carton_volume: float | None

    class Config:
        from_attributes = True


class TransitaireRead(BaseModel):
    id: int
    name: str
    code: str | None
    status: PartnerStatus
    country: str | None
    city: str | None
    address: str | None
    contact_name: str | None
    contact_email: str | None
    contact_phone: str | None
    dangerous_goods_certified: bool
    max_container_capacity: int | None
    services: list[str]
    specialties: list[str]
    tracking_system_url: str | None
    notes: str | None

    class Config:
        from_attributes = True
