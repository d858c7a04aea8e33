"""FastAPI application entry point."""

import logging
from typing import Annotated

from fastapi import Depends, FastAPI

from vta.api.chat import router as chat_router
from vta.api.exceptions import install_exception_handlers
from vta.configs.config import get_app_config
from vta.core.retrieval import build_vector_index
from vta.core.service.metrics import install_metrics
from vta.infra.db_engine import build_db
from vta.infra.lifespan import inject
from vta.infra.logging import setup_logging
from vta.infra.telemetry import init_telemetry, shutdown_telemetry

logger = logging.getLogger(__name__)


@inject
async def lifespan(
    app: FastAPI,
    _db: Annotated[None, Depends(build_db)],
    _index: Annotated[None, Depends(build_vector_index)],
):
    """Open the interaction store and the vector index client."""
    logger.info("Starting VTA application...")
    yield
    logger.info("Shutting down VTA application...")
    shutdown_telemetry()


def get_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    config = get_app_config()
    setup_logging(config.logging)

    app = FastAPI(
        title="VTA",
        description="Retrieval-augmented teaching assistant for a cybersecurity course",
        version="0.1.0",
        lifespan=lifespan,
    )

    install_exception_handlers(app)
    install_metrics(app, config.metrics, config.tracing)
    init_telemetry(app, config.tracing)

    @app.get("/health", tags=["health"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(chat_router)

    return app


app = get_app()
