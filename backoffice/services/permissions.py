"""
Permissions par module / action.

Un admin a tout. Sinon une surcharge enregistrée pour l'utilisateur
l'emporte, à défaut le rôle décide (voir ROLE_DEFAULTS).
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from backoffice.app.db.models.core_types import Role
from backoffice.app.db.models.models_v1 import User, UserPermission
from backoffice.services.errors import DomainError, NotFoundError

logger = logging.getLogger(__name__)

CRUD_ACTIONS = ("read", "create", "update", "delete")

MODULES: dict[str, tuple[str, ...]] = {
    "orders": CRUD_ACTIONS + ("approve", "procure", "receive"),
    "products": CRUD_ACTIONS,
    "clients": CRUD_ACTIONS,
    "suppliers": CRUD_ACTIONS,
    "reports": ("read", "create"),
}

# moderator = gestionnaire, user = membre
ROLE_DEFAULTS: dict[Role, frozenset[str]] = {
    Role.moderator: frozenset({"read", "create", "update", "approve", "procure", "receive"}),
    Role.user: frozenset({"read", "create"}),
}


def check_known(module: str, action: str) -> None:
    if action not in MODULES.get(module, ()):
        raise DomainError(f"Unknown permission {module}.{action}")


def role_default(role: Role, action: str) -> bool:
    if role == Role.admin:
        return True
    return action in ROLE_DEFAULTS.get(role, frozenset())


def _override(db: Session, user_id: int, module: str, action: str) -> UserPermission | None:
    return db.execute(
        select(UserPermission)
        .where(UserPermission.user_id == user_id)
        .where(UserPermission.module == module)
        .where(UserPermission.action == action)
    ).scalar_one_or_none()


def has_permission(db: Session, user: User, module: str, action: str) -> bool:
    if user.role == Role.admin:
        return True
    override = _override(db, user.id, module, action)
    if override is not None:
        return override.granted
    return role_default(user.role, action)


def effective_permissions(db: Session, user: User) -> list[dict]:
    overrides = {
        (p.module, p.action): p.granted
        for p in db.execute(select(UserPermission).where(UserPermission.user_id == user.id)).scalars().all()
    }
    rows = []
    for module, actions in MODULES.items():
        for action in actions:
            key = (module, action)
            if user.role != Role.admin and key in overrides:
                rows.append({"module": module, "action": action, "granted": overrides[key], "source": "user"})
            else:
                rows.append(
                    {"module": module, "action": action, "granted": role_default(user.role, action), "source": "role"}
                )
    return rows


def set_permission(db: Session, user: User, module: str, action: str, granted: bool) -> UserPermission:
    check_known(module, action)
    perm = _override(db, user.id, module, action)
    if perm is None:
        perm = UserPermission(user_id=user.id, module=module, action=action, granted=granted)
        db.add(perm)
    else:
        perm.granted = granted
    db.flush()
    logger.info("Permission %s.%s=%s for user %s", module, action, granted, user.email)
    return perm


def reset_permission(db: Session, user: User, module: str, action: str) -> None:
    check_known(module, action)
    perm = _override(db, user.id, module, action)
    if perm is None:
        raise NotFoundError(f"No override for {module}.{action}")
    db.delete(perm)
    db.flush()
