"""Startup and shutdown of the service clients shared by the API."""

import logging
from contextlib import asynccontextmanager

from configs.postgres import init_engine, shutdown_engine
from configs.redis import init_redis_client, shutdown_redis_client
from configs.supabase import init_supabase_client, shutdown_supabase_client

logger = logging.getLogger(__name__)


async def startup_all() -> None:
    logger.info("Initializing database engine...")
    init_engine()

    logger.info("Initializing redis client...")
    await init_redis_client()

    logger.info("Initializing supabase client...")
    await init_supabase_client()


async def shutdown_all() -> None:
    logger.info("Shutting down supabase client...")
    await shutdown_supabase_client()

    logger.info("Shutting down redis client...")
    await shutdown_redis_client()

    logger.info("Shutting down database engine...")
    await shutdown_engine()


@asynccontextmanager
async def app_lifespan():
    """Initialize every client for the duration of the block.

    Usage in FastAPI:
        async def lifespan(app: FastAPI):
            async with app_lifespan():
                yield
    """
    await startup_all()
    try:
        yield
    finally:
        await shutdown_all()
