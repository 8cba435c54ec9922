"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from rent_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from rent_gateway.api.v1 import leases, payments, tenants
from rent_gateway.infrastructure.observability.logging import setup_logging
from rent_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Rent Gateway",
        description="Rent scheduling, payment status and invoicing service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(leases.router, prefix="/v1", tags=["leases"])
    app.include_router(tenants.router, prefix="/v1", tags=["tenants"])
    app.include_router(payments.router, prefix="/v1", tags=["payments"])

    return app


app = create_app()
