from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware
from storefront.api.v1.api import api_router
from storefront.core.config import settings
from storefront.core.exception_handlers import register_exception_handlers
from storefront.core.rate_limit import limiter
from storefront.schemas.response import ValidationErrorResponse, HTTPErrorResponse

from contextlib import asynccontextmanager
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create tables on startup
    from sqlmodel import SQLModel
    from storefront.db.session import engine
    from storefront.models import User, Otp, Coupon, UserCoupon  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    if settings.TEST_USER_PHONE and not settings.is_production:
        logger.warning("Fixture identity enabled for %s", settings.TEST_USER_PHONE)
    logger.info("Application running, Swagger UI at /docs")
    yield
    await engine.dispose()

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan,
    responses={
        400: {"model": ValidationErrorResponse, "description": "Validation Error"},
        401: {"model": HTTPErrorResponse, "description": "Unauthorized"},
        403: {"model": HTTPErrorResponse, "description": "Forbidden"},
        404: {"model": HTTPErrorResponse, "description": "Not Found"},
        409: {"model": HTTPErrorResponse, "description": "Conflict"},
    }
)

app.state.limiter = limiter
register_exception_handlers(app)

# Set all CORS enabled origins
if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(api_router, prefix=settings.API_V1_STR)
