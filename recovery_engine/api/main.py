"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from recovery_engine.api.middleware import RequestIDMiddleware, MetricsMiddleware
from recovery_engine.api.v1 import allocation, analytics, cases, partners
from recovery_engine.infrastructure.observability.logging import setup_logging
from recovery_engine.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Recovery Engine",
        description="Case scoring and collection-agency allocation service",
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

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(cases.router, prefix="/v1", tags=["cases"])
    app.include_router(allocation.router, prefix="/v1", tags=["allocation"])
    app.include_router(partners.router, prefix="/v1", tags=["partners"])
    app.include_router(analytics.router, prefix="/v1", tags=["analytics"])

    return app


app = create_app()
