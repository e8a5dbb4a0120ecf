import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from api.admin import router as admin_router
from api.certifications import router as certifications_router
from api.health import router as health_router
from api.notifications import router as notifications_router
from api.skills import router as skills_router
from api.trainings import router as trainings_router
from api.users import router as users_router
from configs import get_settings
from configs.lifecycle import app_lifespan
from configs.rate_limiter import limiter

logger = logging.getLogger(__name__)


async def lifespan(app: FastAPI):
    logger.info("Starting the application...")
    async with app_lifespan():
        yield
    logger.info("Shutting down the application...")


def create_app() -> FastAPI:
    settings = get_settings()

    docs_kwargs = {}
    if settings.ENVIRONMENT == "production":
        docs_kwargs = {"openapi_url": None, "docs_url": None, "redoc_url": None}

    application = FastAPI(
        title=settings.APP_NAME,
        version=settings.VERSION,
        lifespan=lifespan,
        **docs_kwargs,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_methods=settings.CORS_ALLOW_METHODS,
        allow_headers=settings.CORS_ALLOW_HEADERS,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    )

    application.state.limiter = limiter
    if settings.ENVIRONMENT.lower() != "test":
        application.add_exception_handler(
            RateLimitExceeded, _rate_limit_exceeded_handler
        )
        application.add_middleware(SlowAPIMiddleware)

    application.include_router(health_router, prefix="/api/health")
    application.include_router(admin_router, prefix="/api/admin")
    application.include_router(notifications_router, prefix="/api/notifications")
    application.include_router(skills_router, prefix="/api/skills")
    application.include_router(certifications_router, prefix="/api/certifications")
    application.include_router(trainings_router, prefix="/api/trainings")
    application.include_router(users_router, prefix="/api/users")

    return application


app = create_app()
