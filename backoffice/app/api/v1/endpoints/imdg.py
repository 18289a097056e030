from dataclasses import asdict

from fastapi import APIRouter
from pydantic import BaseModel, Field

from backoffice.services.imdg import IMDG_RULES, check_container_compatibility

router = APIRouter(prefix="/imdg")


class CompatibilityCheck(BaseModel):
    classes: list[str | None] = Field(default_factory=list)


@router.get("/rules")
def list_rules():
    return [asdict(rule) for rule in IMDG_RULES]


@router.post("/check")
def check_classes(payload: CompatibilityCheck):
    compatible, conflicts = check_container_compatibility(payload.classes)
    return {"compatible": compatible, "conflicts": [asdict(c) for c in conflicts]}
