from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from backoffice.app.db.models.models_v1 import NumberCounter
from backoffice.app.db.models.core_types import NumberedEntity
from backoffice.services.errors import DomainError

logger = logging.getLogger(__name__)

PREFIXES = {
    NumberedEntity.order: "CMD",
    NumberedEntity.reservation: "RES",
}


def generate_next_number(db: Session, entity_type: str, *, today: date | None = None) -> str:
    """
    Numéro suivant pour une commande ou une réservation : CMD-2026-0001.

    Le compteur est verrouillé (FOR UPDATE) : deux appels concurrents
    ne peuvent pas obtenir le même numéro. Pas de commit ici, l'appelant
    valide avec l'entité numérotée.
    """
    try:
        entity = NumberedEntity(entity_type)
    except ValueError:
        raise DomainError('Invalid entity type, expected "reservation" or "order"') from None

    counter = (
        db.execute(
            select(NumberCounter)
            .where(NumberCounter.entity_type == entity.value)
            .with_for_update()
        )
        .scalar_one_or_none()
    )
    if not counter:
        counter = NumberCounter(entity_type=entity.value, prefix=PREFIXES[entity], current_number=0)
        db.add(counter)
        db.flush()

    counter.current_number += 1
    year = (today or date.today()).year
    number = f"{counter.prefix}-{year}-{counter.current_number:04d}"
    logger.info("Generated %s number %s", entity.value, number)
    return number
