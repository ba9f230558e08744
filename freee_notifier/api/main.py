"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from freee_notifier.api.middleware import RequestIDMiddleware, MetricsMiddleware
from freee_notifier.api.v1 import receipts, scheduled, webhook
from freee_notifier.infrastructure.observability.logging import setup_logging
from freee_notifier.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="freee Notifier",
        description="Daily freee accounting reports delivered over LINE",
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
    app.include_router(webhook.router, tags=["webhook"])
    app.include_router(receipts.router, prefix="/v1", tags=["receipts"])
    app.include_router(scheduled.router, prefix="/v1", tags=["scheduled"])

    return app


app = create_app()
