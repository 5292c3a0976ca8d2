"""
FastAPI Application Entry Point
Main application setup and route registration
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from badgeforge import __version__
from badgeforge.config import settings
from badgeforge.core.logging import setup_logging
from badgeforge.database import connect_db, create_tables, disconnect_db
from badgeforge.routes import attendees, layouts, templates

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    create_tables()
    await connect_db()
    logger.info("%s started in %s mode", settings.APP_NAME, settings.APP_ENV)
    yield
    await disconnect_db()


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="ID card and badge layout engine",
    version=__version__,
    debug=settings.DEBUG,
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure this in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health check endpoint
@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": __version__
    }


app.include_router(attendees.router, prefix="/api/attendees", tags=["Attendees"])
app.include_router(templates.router, prefix="/api/templates", tags=["Templates"])
app.include_router(layouts.router, prefix="/api/layouts", tags=["Layouts"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "badgeforge.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
