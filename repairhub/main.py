import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError

from repairhub.config import settings
from repairhub.database import check_db_connection
from repairhub.utils.exceptions import AppException
from repairhub.middleware.error_handler import (
    app_exception_handler,
    validation_exception_handler,
    integrity_error_handler,
    generic_exception_handler,
)

from repairhub.api.v1 import auth
from repairhub.api.v1 import users
from repairhub.api.v1 import companies
from repairhub.api.v1 import drivers
from repairhub.api.v1 import trucks
from repairhub.api.v1 import job_cards
from repairhub.api.v1 import store
from repairhub.api.v1 import cart
from repairhub.api.v1 import notifications

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version="1.0.0",
        description="Truck Repair Shop Management API",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # ─── CORS ─────────────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ─── Exception Handlers ───────────────────────────────────────────────────
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # ─── Routers ──────────────────────────────────────────────────────────────
    PREFIX = settings.API_PREFIX
    app.include_router(auth.router,          prefix=PREFIX, tags=["Auth"])
    app.include_router(users.router,         prefix=PREFIX, tags=["Users"])
    app.include_router(companies.router,     prefix=PREFIX, tags=["Companies"])
    app.include_router(drivers.router,       prefix=PREFIX, tags=["Drivers"])
    app.include_router(trucks.router,        prefix=PREFIX, tags=["Trucks"])
    app.include_router(job_cards.router,     prefix=PREFIX, tags=["Job Cards"])
    app.include_router(store.router,         prefix=PREFIX, tags=["Store"])
    app.include_router(cart.router,          prefix=PREFIX, tags=["Cart"])
    app.include_router(notifications.router, prefix=PREFIX, tags=["Notifications"])

    # ─── Startup ──────────────────────────────────────────────────────────────
    @app.on_event("startup")
    def on_startup():
        ok = check_db_connection()
        logger.info("✅ DB connected" if ok else "❌ DB connection FAILED")

    # ─── Health ───────────────────────────────────────────────────────────────
    @app.get("/health", tags=["Health"])
    def health():
        return {"status": "ok", "app": settings.APP_NAME, "version": "1.0.0"}

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("repairhub.main:app", host=settings.APP_HOST, port=settings.APP_PORT,
                reload=settings.is_development)
