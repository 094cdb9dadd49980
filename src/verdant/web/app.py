"""
Verdant Web API - FastAPI application.

Routes:
- /api/webhooks/stripe  payment events (care calendar generation)
- /api/care/*           care calendar for signed-in users
- /health               health check
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from verdant import __version__
from verdant.config import settings
from verdant.web.care_routes import router as care_router
from verdant.web.webhook_routes import router as webhook_router

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Build the FastAPI app with middleware and routers."""
    app = FastAPI(title="Verdant", version=__version__)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(webhook_router, prefix="/api")
    app.include_router(care_router, prefix="/api")

    @app.on_event("startup")
    async def startup_event():
        """Apply log level and log configuration on startup."""
        logging.basicConfig(
            level=settings.log_level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        logger.info("Verdant starting up...")
        logger.info(f"  Environment: {settings.verdant_env}")
        logger.info(f"  Care schedule: first task offset {settings.care_initial_offset_days}d, "
                    f"default frequency {settings.care_default_frequency_days}d")

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    return app


app = create_app()
