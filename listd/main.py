"""
FastAPI main application for the Listd catalog API.
"""

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from listd.config import Settings, load_settings
from listd.db import init_db, close_db
from listd.error_handling import ConfigurationError, register_exception_handlers
from listd.routers import listings, reference, valuation

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def create_app(settings: Settings = None) -> FastAPI:
    """Build the application around one validated settings object."""
    settings = settings or load_settings()
    logging.getLogger().setLevel(settings.log_level.upper())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown events"""
        # Startup
        logger.info("Starting Listd catalog API...")
        try:
            await init_db(settings)
            logger.info("Database initialized")
        except ConfigurationError as e:
            # Requests needing the store answer with the configuration error
            logger.error(f"Listing store not configured: {e}")

        yield

        # Shutdown
        logger.info("Shutting down Listd catalog API...")
        await close_db()

    app = FastAPI(
        title="Listd Catalog API",
        description="Real-estate listing search and comparable-sales valuation",
        version=settings.version,
        lifespan=lifespan
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(listings.router, tags=["listings"])
    app.include_router(valuation.router, tags=["valuation"])
    app.include_router(reference.router, tags=["reference"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "version": settings.version
        }

    return app


app = create_app()
