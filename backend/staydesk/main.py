"""StayDesk — FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from staydesk.api.v1.activities import router as activities_router
from staydesk.api.v1.activity_bookings import router as activity_bookings_router
from staydesk.api.v1.add_ons import router as add_ons_router
from staydesk.api.v1.availability import router as availability_router
from staydesk.api.v1.blocked_dates import router as blocked_dates_router
from staydesk.api.v1.bookings import router as bookings_router
from staydesk.api.v1.price_overrides import router as price_overrides_router
from staydesk.api.v1.properties import router as properties_router
from staydesk.api.v1.public import router as public_router
from staydesk.api.v1.webhooks import router as webhooks_router
from staydesk.config import settings
from staydesk.database import Database

# Configure root logger so all staydesk.* loggers output to stderr (captured by Docker).
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup and shutdown events."""
    # Startup: one engine per process, shared by every request session
    database = Database.from_settings(settings)
    app.state.database = database
    yield
    # Shutdown: dispose engine connections
    await database.dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Availability, pricing and reservations for a vacation estate's lodgings and activities.",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(properties_router)
app.include_router(activities_router)
app.include_router(availability_router)
app.include_router(bookings_router)
app.include_router(activity_bookings_router)
app.include_router(public_router)
app.include_router(blocked_dates_router)
app.include_router(price_overrides_router)
app.include_router(add_ons_router)
app.include_router(webhooks_router)


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": settings.app_name}


@app.get("/", tags=["root"])
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
