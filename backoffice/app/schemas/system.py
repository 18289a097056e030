from datetime import datetime

from pydantic import BaseModel

from backoffice.app.db.models.core_types import Role


class UserRead(BaseModel):
    id: int
    email: str
    full_name: str | None
    phone: str | None
    department: str | None
    role: Role
    active: bool
    last_login_at: datetime | None
    created_at: datetime

    class Config:
        from_attributes = True


class DocumentRead(BaseModel):
    id: int
    filename: str
    content_type: str | None
    size: int
    sha256: str
    entity_type: str
    entity_id: int | None
    uploaded_by: int | None
    created_at: datetime

    class Config:
        from_attributes = True
