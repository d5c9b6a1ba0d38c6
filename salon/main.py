# salon/main.py

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .auth import ProviderDirectory
from .data import LOG_LEVEL
from .db import KeyValueStorage
from .errors import (
    Conflict,
    IllegalTransition,
    InvalidDate,
    InvalidDuration,
    InvalidTimeFormat,
    NotFound,
    PersistenceError,
    UnknownCategory,
)
from .ledger import FinanceLedger
from .routers import (
    appointments_routes,
    auth_routes,
    finances_routes,
    providers_routes,
    users_routes,
)
from .store import AppointmentStore

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# error class -> HTTP status
ERROR_STATUS = {
    InvalidTimeFormat: 422,
    InvalidDuration: 422,
    InvalidDate: 422,
    UnknownCategory: 422,
    Conflict: 409,
    IllegalTransition: 409,
    NotFound: 404,
    PersistenceError: 503,
}


def create_app(storage: Optional[KeyValueStorage] = None) -> FastAPI:
    """Build the API. Pass `storage` to run against an existing database (tests)."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        kv = storage if storage is not None else KeyValueStorage()
        ledger = FinanceLedger(kv)
        app.state.ledger = ledger
        app.state.store = AppointmentStore(kv, ledger)
        app.state.providers = ProviderDirectory(kv)
        logger.info("Salon API started")
        yield
        app.state.store.close()
        if storage is None:
            kv.close()

    app = FastAPI(title="Salon Scheduling API", lifespan=lifespan)

    def handle_salon_error(request: Request, exc: Exception) -> JSONResponse:
        status_code = ERROR_STATUS[type(exc)]
        if status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        content = {"detail": str(exc)}
        if isinstance(exc, Conflict):
            content["conflictingId"] = exc.existing.id
        return JSONResponse(status_code=status_code, content=content)

    for error_class in ERROR_STATUS:
        app.add_exception_handler(error_class, handle_salon_error)

    @app.get("/health")
    def health_check():
        return {"status": "ok"}

    app.include_router(auth_routes.router)
    app.include_router(users_routes.router)
    app.include_router(appointments_routes.router)
    app.include_router(providers_routes.router)
    app.include_router(finances_routes.router)

    return app


app = create_app()
