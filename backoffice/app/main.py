import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from backoffice.app.api.v1.router import router as v1_router
from backoffice.app.core.logging_config import setup_logging
from backoffice.services.errors import DomainError

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Transit Back-Office", version="0.1.0")


@app.exception_handler(DomainError)
def domain_error_handler(request: Request, exc: DomainError):
    logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc)
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


app.include_router(v1_router, prefix="/v1")
