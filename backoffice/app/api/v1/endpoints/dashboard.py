from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backoffice.app.api.deps import get_db
from backoffice.services.stats import dashboard_summary

router = APIRouter(prefix="/dashboard")


@router.get("/summary")
def get_summary(db: Session = Depends(get_db)):
    return dashboard_summary(db)
