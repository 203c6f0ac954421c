"""FastAPI application factory"""

import logging
from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.responses import Response

from mfi_backoffice.api.errors import register_error_handlers
from mfi_backoffice.api.middleware import RequestIDMiddleware, MetricsMiddleware
from mfi_backoffice.api.v1 import applications, documents, products, reports
from mfi_backoffice.infrastructure.database.session import get_db, init_db
from mfi_backoffice.infrastructure.observability.logging import setup_logging
from mfi_backoffice.config import settings

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.create_tables:
        init_db()
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="MFI Back Office",
        description="Loan products, applications, reporting and document management",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_error_handlers(app)

    # Health check endpoint
    @app.get("/health")
    def health_check(db: Session = Depends(get_db)):
        try:
            db.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logging.error(f"Health check database query failed: {e}")
            return JSONResponse(
                status_code=503,
                content={"status": "degraded", "service": settings.service_name, "database": "unavailable"},
            )
        return {"status": "ok", "service": settings.service_name, "database": "ok"}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(products.router, prefix="/v1", tags=["products"])
    app.include_router(applications.router, prefix="/v1", tags=["applications"])
    app.include_router(reports.router, prefix="/v1", tags=["reports"])
    app.include_router(documents.router, prefix="/v1", tags=["documents"])

    return app


app = create_app()
