import logging

from fastapi import APIRouter, Request, Response, status
from sqlalchemy import text

from configs import get_settings
from configs.postgres import use_db_session
from configs.rate_limiter import limiter
from configs.redis import get_redis_client
from configs.supabase import get_supabase_client

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


async def _check_database() -> bool:
    async with use_db_session() as session:
        result = await session.execute(text("SELECT 1"))
        return result.scalar() is not None


async def _check_redis() -> bool:
    redis_client = await get_redis_client()
    return bool(await redis_client.ping())


async def _check_supabase() -> bool:
    return await get_supabase_client() is not None


@router.get("/", status_code=status.HTTP_200_OK)
@limiter.limit("60/minute")
async def health_check(request: Request, response: Response) -> dict[str, str]:
    settings = get_settings()
    checks = {
        "database": _check_database,
        "redis": _check_redis,
        "supabase": _check_supabase,
    }

    report = {
        "status": "ok",
        "app": settings.APP_NAME,
        "environment": settings.ENVIRONMENT,
        "version": settings.VERSION,
    }
    for name, check in checks.items():
        try:
            healthy = await check()
        except Exception as e:
            logger.error(f"{name} health check error: {e}")
            healthy = False
        if not healthy:
            response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        report[name] = "ok" if healthy else "error"
    return report
