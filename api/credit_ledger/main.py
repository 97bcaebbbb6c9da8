from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from credit_ledger.config import LedgerSettings
from credit_ledger.errors import InvalidArgument, OverlapConflict, SettlementUnavailable, UnknownContribution
from credit_ledger.routers import contributions, health, payments, subscriptions, valuations
from credit_ledger.services.license_service import License
from credit_ledger.services.settlement_engine import SettlementEngine
from credit_ledger.services.subscription_scheduler import SubscriptionScheduler
from credit_ledger.services.valuation_engine import ValuationEngine

logger = logging.getLogger("credit_ledger")


def _configure_logging() -> None:
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)


def create_app(settings: Optional[LedgerSettings] = None) -> FastAPI:
    """Build the HTTP app. Without explicit settings they are read from the environment.

    Run with ``uvicorn credit_ledger.main:create_app --factory``.
    """
    _configure_logging()
    settings = settings or LedgerSettings.from_env()
    app = FastAPI(title="Code Credit Ledger API", version=health.HEALTH_VERSION)

    license_ = License(settings.project_name, settings.license_key, settings.project_wallet)
    engine = SettlementEngine(
        settings.settlement_api_key,
        confirmation_delay_seconds=settings.confirmation_delay_seconds,
        max_workers=settings.max_workers,
    )
    app.state.settings = settings
    app.state.license = license_
    app.state.valuation_engine = ValuationEngine()
    app.state.settlement_engine = engine
    app.state.scheduler = SubscriptionScheduler(engine, settings.project_wallet, ledger=license_.ledger)

    @app.exception_handler(InvalidArgument)
    async def _invalid_argument(request: Request, exc: InvalidArgument) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(OverlapConflict)
    async def _overlap_conflict(request: Request, exc: OverlapConflict) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(UnknownContribution)
    async def _unknown_contribution(request: Request, exc: UnknownContribution) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": "Contribution not found"})

    @app.exception_handler(SettlementUnavailable)
    async def _settlement_unavailable(request: Request, exc: SettlementUnavailable) -> JSONResponse:
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.on_event("shutdown")
    async def _stop_settlement_workers() -> None:
        # workers already running finish in the background
        engine.shutdown(wait=False)

    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(valuations.router, prefix="/api", tags=["valuations"])
    app.include_router(contributions.router, prefix="/api", tags=["contributions"])
    app.include_router(payments.router, prefix="/api", tags=["payments"])
    app.include_router(subscriptions.router, prefix="/api", tags=["subscriptions"])
    logger.info("credit_ledger_app_created project=%s", settings.project_name)
    return app
