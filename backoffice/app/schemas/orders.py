from datetime import date, datetime

from pydantic import BaseModel

from backoffice.app.db.models.core_types import OrderStatus, WorkflowStatus


class OrderLineRead(BaseModel):
    id: int
    product_id: int
    quantity: int
    unit_price: float
    total_price: float
    carton_quantity: int | None
    palette_quantity: int | None

    class Config:
        from_attributes = True


class ApprovalRead(BaseModel):
    status: WorkflowStatus
    approved_by: int | None
    approved_at: datetime
    comments: str | None

    class Config:
        from_attributes = True


class WorkflowRead(BaseModel):
    id: int
    current_status: WorkflowStatus
    approvals: list[ApprovalRead]

    class Config:
        from_attributes = True


class OrderRead(BaseModel):
    id: int
    order_number: str
    client_id: int | None
    supplier_id: int
    transitaire_id: int | None
    container_id: int | None
    status: OrderStatus
    order_date: date
    payment_type: str
    payment_date: date | None
    packaging: str | None
    tva_rate: float
    total_ht: float
    total_ttc: float
    weight: float | None
    volume: float | None
    cartons: int | None
    is_received: bool
    created_at: datetime

    class Config:
        from_attributes = True


class OrderDetailRead(OrderRead):
    lines: list[OrderLineRead]
    workflow: WorkflowRead | None


class PaymentRead(BaseModel):
    id: int
    client_id: int
    order_id: int | None
    amount: float
    currency: str
    payment_date: date
    payment_method: str | None
    payment_status: str
    notes: str | None

    class Config:
        from_attributes = True
