from __future__ import annotations

import logging
import os

from sqlalchemy import select

from backoffice.app.core.logging_config import setup_logging
from backoffice.app.db.session import SessionLocal
from backoffice.app.db.models.models_v1 import Category, NumberCounter, Transitaire, User
from backoffice.app.db.models.core_types import NumberedEntity, Role
from backoffice.services.numbering import PREFIXES

logger = logging.getLogger(__name__)


def run_seed():
    db = SessionLocal()
    try:
        # 1) Admin (l'identité passe par l'en-tête X-User-Id)
        email = os.getenv("SEED_ADMIN_EMAIL", "admin@backoffice.local").lower()
        admin = db.scalar(select(User).where(User.email == email))
        if not admin:
            admin = User(email=email, full_name="Administrateur", role=Role.admin, active=True)
            db.add(admin)

        # 2) Compteurs de numérotation
        for entity, prefix in PREFIXES.items():
            if not db.scalar(select(NumberCounter).where(NumberCounter.entity_type == entity.value)):
                db.add(NumberCounter(entity_type=entity.value, prefix=prefix, current_number=0))

        # 3) Catégorie par défaut + un transitaire de démo
        if not db.scalar(select(Category).where(Category.name == "general")):
            db.add(Category(name="general", description="Catégorie par défaut"))
        if not db.scalar(select(Transitaire).where(Transitaire.name == "Transitaire Démo")):
            db.add(
                Transitaire(
                    name="Transitaire Démo",
                    code="DEMO",
                    country="France",
                    city="Le Havre",
                    services=["Fret maritime", "Dédouanement"],
                    specialties=["Groupage"],
                    max_container_capacity=10,
                )
            )

        db.commit()
        db.refresh(admin)
        logger.info("SEED OK: admin=%s (id=%s), counters=%s", admin.email, admin.id, [e.value for e in NumberedEntity])
    finally:
        db.close()


def main() -> None:
    setup_logging()
    run_seed()


if __name__ == "__main__":
    main()
