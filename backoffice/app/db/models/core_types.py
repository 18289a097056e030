import enum

from sqlalchemy import BigInteger, Integer

# SQLite only autoincrements INTEGER PRIMARY KEY
BigIntPK = BigInteger().with_variant(Integer, "sqlite")


class Role(str, enum.Enum):
    admin = "admin"
    moderator = "moderator"
    user = "user"

class PartnerStatus(str, enum.Enum):
    active = "active"
    inactive = "inactive"
    pending = "pending"

class OrderStatus(str, enum.Enum):
    draft = "draft"
    confirmed = "confirmed"
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"

class WorkflowStatus(str, enum.Enum):
    request = "request"
    approve = "approve"
    procure = "procure"
    receive = "receive"

# ordre des étapes du workflow commande
WORKFLOW_STEPS = [
    WorkflowStatus.request,
    WorkflowStatus.approve,
    WorkflowStatus.procure,
    WorkflowStatus.receive,
]

class ContainerType(str, enum.Enum):
    feet_20 = "20_feet"
    feet_40 = "40_feet"
    groupage = "groupage"

class ContainerStatus(str, enum.Enum):
    available = "available"
    planning = "planning"
    loading = "loading"
    full = "full"
    departed = "departed"
    in_transit = "in_transit"
    arrived = "arrived"
    completed = "completed"

class BookingStatus(str, enum.Enum):
    pending = "pending"
    confirmed = "confirmed"
    cancelled = "cancelled"

class NumberedEntity(str, enum.Enum):
    order = "order"
    reservation = "reservation"
