"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from atm_core.api.middleware import RequestIDMiddleware, MetricsMiddleware
from atm_core.api.v1 import auth, balance, withdrawal, deposit, history
from atm_core.infrastructure.observability.logging import setup_logging
from atm_core.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="ATM Core",
        description="Card authentication, balance inquiry and two-phase withdrawal/deposit service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(auth.router, prefix="/v1/atm", tags=["authentication"])
    app.include_router(balance.router, prefix="/v1/atm", tags=["balance"])
    app.include_router(withdrawal.router, prefix="/v1/atm", tags=["withdrawals"])
    app.include_router(deposit.router, prefix="/v1/atm", tags=["deposits"])
    app.include_router(history.router, prefix="/v1/atm", tags=["history"])

    return app


app = create_app()
