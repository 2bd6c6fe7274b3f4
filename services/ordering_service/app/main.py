"""FastAPI application for the Ordering Service."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from libs.common.config import get_settings
from libs.common.currency import ExchangeRates
from libs.common.logging import get_logger, get_request_id
from libs.common.middleware import add_observability_middleware
from libs.db.config import get_sessionmaker
from services.ordering_service.availability import InvalidStoreData
from services.ordering_service.routers import (
    admin_router,
    catalog_router,
    checkout_router,
    points_router,
    store_router,
)
from services.ordering_service.services.settings_ops import load_currency_rates
from sqlalchemy.exc import SQLAlchemyError

logger = get_logger(__name__)


async def _load_persisted_rates(rates: ExchangeRates) -> None:
    """Rates saved by an admin win over the configured defaults."""
    try:
        async with get_sessionmaker()() as session:
            saved = await load_currency_rates(session)
            await session.commit()
    except (OSError, SQLAlchemyError) as exc:
        logger.warning("Could not load saved exchange rates, using defaults: %s", exc)
        return
    except InvalidStoreData as exc:
        logger.error("Ignoring invalid saved exchange rates: %s", exc)
        return

    if saved:
        try:
            rates.replace(saved)
        except ValueError as exc:
            logger.error("Ignoring invalid saved exchange rates: %s", exc)
            return
        logger.info("Loaded saved exchange rates: %s", rates.table.as_dict())


@asynccontextmanager
async def lifespan(app: FastAPI):
    await _load_persisted_rates(app.state.exchange_rates)
    yield


async def invalid_store_data_handler(request: Request, exc: InvalidStoreData):
    """Stored data failed validation (e.g. working hours missing a day)."""
    logger.error("Invalid stored data on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "detail": {
                "code": "invalid_store_data",
                "message": "Store configuration is invalid, please try again later",
                "request_id": get_request_id(),
            }
        },
    )


def create_app() -> FastAPI:
    """Create and configure the Ordering Service FastAPI app."""
    settings = get_settings()

    app = FastAPI(
        title="Ordering Service",
        version="0.1.0",
        description="Restaurant ordering - customization, pricing, points and store hours.",
        lifespan=lifespan,
    )
    app.state.exchange_rates = ExchangeRates(settings.CURRENCY_RATES)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability (structured logging + request tracing)
    add_observability_middleware(app)

    app.add_exception_handler(InvalidStoreData, invalid_store_data_handler)

    @app.get("/ordering/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "ordering"}

    # Public routes
    app.include_router(store_router, prefix="/ordering")
    app.include_router(catalog_router, prefix="/ordering")
    app.include_router(checkout_router, prefix="/ordering")
    app.include_router(points_router, prefix="/ordering")

    # Admin routes
    app.include_router(admin_router, prefix="/admin/ordering")

    return app


app = create_app()
