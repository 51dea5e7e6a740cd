"""
Thumbnail Proxy Server

Usage:
    cd backend
    python -m thumbnail_proxy.main
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

from .config import ProxyConfig
from .pipeline import ThumbnailPipeline
from .routes_fastapi import router

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[ProxyConfig] = None,
    pipeline: Optional[ThumbnailPipeline] = None,
) -> FastAPI:
    """
    Build the FastAPI app.

    The pipeline (and its cache) is created here, so a bad cache capacity
    fails before the server starts accepting requests.
    """
    config = config or ProxyConfig.from_env()
    pipeline = pipeline or ThumbnailPipeline.from_config(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await app.state.pipeline.aclose()
        logger.info("[Server] Shutdown complete")

    app = FastAPI(title="Thumbnail Proxy", lifespan=lifespan)
    app.state.pipeline = pipeline
    app.include_router(router)
    return app


def main() -> None:
    config = ProxyConfig.from_env()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = create_app(config)
    logger.info(f"[Server] Thumbnail proxy serving on {config.host}:{config.port}")
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    main()
