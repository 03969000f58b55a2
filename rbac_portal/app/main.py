"""
RBAC Enterprise Portal

FastAPI application entry point.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rbac_portal.app.api import (
    auth,
    dashboard,
    employees,
    enterprises,
    health,
    products,
    roles,
    users,
)
from rbac_portal.app.api.error_handling import register_exception_handlers
from rbac_portal.app.core.config import get_settings
from rbac_portal.app.core.database import get_db_context
from rbac_portal.app.core.init_db import create_tables
from rbac_portal.app.core.logging import get_logger, setup_logging
from rbac_portal.app.middleware.trace import TracingMiddleware
from rbac_portal.app.services.bootstrap import seed_defaults

settings = get_settings()

# Initialize logging
setup_logging(level=settings.log_level)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info(f"🚀 Starting {settings.app_name} v{settings.app_version}")

    if settings.seed_on_startup:
        await create_tables()
        async with get_db_context() as session:
            await seed_defaults(session, settings)

    yield
    logger.info(f"👋 Shutting down {settings.app_name}")


app = FastAPI(
    title=settings.app_name,
    description="Multi-tenant administration with role-based access control",
    version=settings.app_version,
    lifespan=lifespan,
)

register_exception_handlers(app)

app.add_middleware(TracingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Correlation-ID"],
)

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(auth.router, prefix=f"{settings.api_prefix}/auth", tags=["Authentication"])
app.include_router(users.router, prefix=f"{settings.api_prefix}/users", tags=["Users"])
app.include_router(roles.router, prefix=f"{settings.api_prefix}/roles", tags=["Roles"])
app.include_router(enterprises.router, prefix=f"{settings.api_prefix}/enterprises", tags=["Enterprises"])
app.include_router(employees.router, prefix=f"{settings.api_prefix}/employees", tags=["Employees"])
app.include_router(products.router, prefix=f"{settings.api_prefix}/products", tags=["Products"])
app.include_router(dashboard.router, prefix=f"{settings.api_prefix}/dashboard", tags=["Dashboard"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }
