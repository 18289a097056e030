from fastapi import APIRouter

from backoffice.app.api.v1.endpoints.health import router as health_router
from backoffice.app.api.v1.endpoints.categories import router as categories_router
from backoffice.app.api.v1.endpoints.clients import router as clients_router
from backoffice.app.api.v1.endpoints.suppliers import router as suppliers_router
from backoffice.app.api.v1.endpoints.products import router as products_router
from backoffice.app.api.v1.endpoints.transitaires import router as transitaires_router
from backoffice.app.api.v1.endpoints.orders import router as orders_router
from backoffice.app.api.v1.endpoints.containers import router as containers_router
from backoffice.app.api.v1.endpoints.groupages import router as groupages_router
from backoffice.app.api.v1.endpoints.users import router as users_router
from backoffice.app.api.v1.endpoints.documents import router as documents_router
from backoffice.app.api.v1.endpoints.trash import router as trash_router
from backoffice.app.api.v1.endpoints.numbers import router as numbers_router
from backoffice.app.api.v1.endpoints.imdg import router as imdg_router
from backoffice.app.api.v1.endpoints.dashboard import router as dashboard_router

router = APIRouter()
router.include_router(health_router, tags=["health"])
router.include_router(categories_router, tags=["categories"])
router.include_router(clients_router, tags=["clients"])
router.include_router(suppliers_router, tags=["suppliers"])
router.include_router(products_router, tags=["products"])
router.include_router(transitaires_router, tags=["transitaires"])
router.include_router(orders_router, tags=["orders"])
router.include_router(containers_router, tags=["containers"])
router.include_router(groupages_router, tags=["groupages"])
router.include_router(users_router, tags=["users"])
router.include_router(documents_router, tags=["documents"])
router.include_router(trash_router, tags=["trash"])
router.include_router(numbers_router, tags=["numbers"])
router.include_router(imdg_router, tags=["imdg"])
router.include_router(dashboard_router, tags=["dashboard"])
