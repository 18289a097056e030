from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from backoffice.app.api.deps import get_db
from backoffice.services.numbering import generate_next_number

router = APIRouter(prefix="/numbers")


class NumberRequest(BaseModel):
    entity_type: str


@router.post("")
def next_number(payload: NumberRequest, db: Session = Depends(get_db)):
    number = generate_next_number(db, payload.entity_type)
    db.commit()
    return {"number": number}
