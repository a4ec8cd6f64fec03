"""
RFID Library Desk — FastAPI application entry point.

Run with:
    uvicorn library_desk.main:app --reload --host 0.0.0.0 --port 3000
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from library_desk.api.routes import auth as auth_router
from library_desk.api.routes import catalog as catalog_router
from library_desk.api.routes import devices as devices_router
from library_desk.api.routes import loans as loans_router
from library_desk.api.routes import motor as motor_router
from library_desk.api.routes import scans as scans_router
from library_desk.api.routes import status as status_router
from library_desk.circulation import build_context
from library_desk.config import Settings, settings as default_settings

logging.basicConfig(
    level=default_settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)


class _MotorPollFilter(logging.Filter):
    """Drop uvicorn access-log lines for the motor controller's poll.

    The controller hits ``GET /api/motor`` every few hundred milliseconds,
    which would bury every other request in the access log.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        return "/api/motor " not in record.getMessage()


def _describe_validation_error(exc: RequestValidationError) -> str:
    """Flatten pydantic errors into one line, e.g. ``steps: Input should be ...``."""
    parts = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        msg = err.get("msg", "invalid")
        parts.append(f"{field}: {msg}" if field else msg)
    return "; ".join(parts) or "Invalid request"


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Answer malformed bodies with the same 400 envelope as ``InvalidArgument``."""
    message = _describe_validation_error(exc)
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, message)
    return JSONResponse(
        status_code=400,
        content={"detail": {"status": "invalid_argument", "message": message}},
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    _filter = _MotorPollFilter()
    access_logger = logging.getLogger("uvicorn.access")
    access_logger.addFilter(_filter)
    logger.info(
        "Library desk ready (device token %s)",
        "required" if app.state.settings.device_token else "not required",
    )
    try:
        yield
    finally:
        access_logger.removeFilter(_filter)
        logger.info("Library desk stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application with its own, freshly seeded circulation state."""
    settings = settings or default_settings

    app = FastAPI(
        title="RFID Library Desk API",
        description="Loans, shelf scans and motor control for the RFID library.",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.library = build_context(settings)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Routers ──────────────────────────────────────────────────────────────
    app.include_router(status_router.router, tags=["health"])
    app.include_router(auth_router.router, tags=["auth"])
    app.include_router(catalog_router.router, tags=["catalog"])
    app.include_router(loans_router.router, tags=["loans"])
    app.include_router(scans_router.router, tags=["shelf-scan"])
    app.include_router(motor_router.router, tags=["motor"])
    app.include_router(devices_router.router, tags=["devices"])
    return app


app = create_app()
