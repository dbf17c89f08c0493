"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from debt_tracker.api.middleware import RequestIDMiddleware, MetricsMiddleware
from debt_tracker.api.v1 import debts, payments, simulations
from debt_tracker.infrastructure.observability.logging import setup_logging
from debt_tracker.infrastructure.observability.metrics import attach_metrics_sink
from debt_tracker.services.expense_book import ExpenseBook
from debt_tracker.config import settings

# Setup structured logging
setup_logging(settings.log_level)
attach_metrics_sink()


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Debt Tracker",
        description="Debt and subscription payments reconciled against a spreadsheet store",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Local copy of pending expenses, written only with verified remote state
    app.state.expense_book = ExpenseBook()

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
    app.include_router(debts.router, prefix="/v1", tags=["debts"])
    app.include_router(payments.router, prefix="/v1", tags=["payments"])
    app.include_router(simulations.router, prefix="/v1", tags=["simulations"])

    return app


app = create_app()
