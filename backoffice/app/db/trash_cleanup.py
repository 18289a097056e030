"""
Purge des éléments de corbeille expirés (planifier une fois par jour, ex. cron).

    python -m backoffice.app.db.trash_cleanup
"""

from __future__ import annotations

import logging

from backoffice.app.core.config import get_settings
from backoffice.app.core.logging_config import setup_logging
from backoffice.app.db.session import SessionLocal
from backoffice.services.trash import cleanup_expired

logger = logging.getLogger(__name__)


def run_cleanup() -> dict:
    db = SessionLocal()
    try:
        result = cleanup_expired(db, retention_days=get_settings().trash_retention_days)
        db.commit()
        return result
    except Exception:
        db.rollback()
        logger.exception("Trash cleanup failed")
        raise
    finally:
        db.close()


def main() -> None:
    setup_logging()
    result = run_cleanup()
    logger.info("Cleanup done: %s item(s) purged %s", result["deleted_count"], result["summary"])


if __name__ == "__main__":
    main()
