"""TripGo — FastAPI Application Factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from tripgo import __version__
from tripgo.auth.router import router as auth_router
from tripgo.blog.router import router as blog_router
from tripgo.bookings.router import admin_router as admin_bookings_router
from tripgo.bookings.router import router as bookings_router
from tripgo.catalog.router import (
    categories_router,
    cruises_router,
    hotels_router,
    packages_router,
)
from tripgo.checkout.router import router as checkout_router
from tripgo.common.exceptions import register_exception_handlers
from tripgo.common.logging import configure_logging
from tripgo.common.rate_limit import limiter, rate_limit_exceeded_handler
from tripgo.content.router import (
    admin_content_router,
    footer_router,
    hero_router,
    pages_router,
    settings_router,
)
from tripgo.config import settings
from tripgo.dashboard.router import router as dashboard_router
from tripgo.database import engine
from tripgo.hr.router import router as hr_router
from tripgo.media.router import router as media_router
from tripgo.tenants.router import router as tenants_router
from tripgo.users.router import router as users_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    configure_logging()
    logger.info("TripGo API %s starting (%s)", __version__, settings.ENVIRONMENT)
    yield
    await engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="TripGo",
        description="Multi-tenant travel booking platform — cruises, hotels, packages, content and HR",
        version=__version__,
        docs_url="/api/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/api/redoc" if settings.ENVIRONMENT != "production" else None,
        lifespan=lifespan,
    )

    # Exception handlers (error envelope)
    register_exception_handlers(app)

    # Rate limiting (slowapi)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check (no auth, no tenant)
    @app.get("/api/v1/health", tags=["system"])
    async def health_check():
        return {
            "status": "healthy",
            "version": __version__,
            "environment": settings.ENVIRONMENT,
        }

    # Register routers
    app.include_router(auth_router, prefix="/api/v1/auth")
    app.include_router(tenants_router, prefix="/api/v1/tenants")
    app.include_router(users_router, prefix="/api/v1/users")
    app.include_router(categories_router, prefix="/api/v1/cruise-categories")
    app.include_router(cruises_router, prefix="/api/v1/cruises")
    app.include_router(hotels_router, prefix="/api/v1/hotels")
    app.include_router(packages_router, prefix="/api/v1/packages")
    app.include_router(checkout_router, prefix="/api/v1/checkout")
    app.include_router(bookings_router, prefix="/api/v1/bookings")
    app.include_router(admin_bookings_router, prefix="/api/v1/admin/bookings")
    app.include_router(blog_router, prefix="/api/v1/blog")
    app.include_router(settings_router, prefix="/api/v1/settings")
    app.include_router(hero_router, prefix="/api/v1/hero")
    app.include_router(footer_router, prefix="/api/v1/footer")
    app.include_router(pages_router, prefix="/api/v1/pages")
    app.include_router(admin_content_router, prefix="/api/v1/admin/content")
    app.include_router(hr_router, prefix="/api/v1/hr")
    app.include_router(media_router, prefix="/api/v1/media")
    app.include_router(dashboard_router, prefix="/api/v1/dashboard")

    return app


app = create_app()
