# backend/app/main.py
from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import settings
from .core.constants import API_DESCRIPTION, API_TITLE, API_VERSION, BRAND_NAME
from .database import init_db
from .errors import register_error_handlers
from .routes.v1 import (
    bookings as bookings_v1,
    content as content_v1,
    conversations as conversations_v1,
    streaming_sessions as streaming_sessions_v1,
    streaming_settings as streaming_settings_v1,
    subscriptions as subscriptions_v1,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown."""
    logger.info(f"{BRAND_NAME} API starting up...")
    logger.info(f"Environment: {settings.environment}")
    if not settings.is_production and not settings.is_testing:
        # Development convenience; production schemas come from migrations
        init_db()
    yield
    logger.info(f"{BRAND_NAME} API shutting down...")


app = FastAPI(
    title=API_TITLE,
    description=API_DESCRIPTION,
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=app_lifespan,
)
# Register unified error envelope handlers
register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

api_v1 = APIRouter(prefix="/api/v1")
api_v1.include_router(bookings_v1.router, prefix="/bookings")
api_v1.include_router(streaming_sessions_v1.router, prefix="/streaming-sessions")
api_v1.include_router(content_v1.router, prefix="/content")
api_v1.include_router(subscriptions_v1.router, prefix="/subscriptions")
api_v1.include_router(conversations_v1.router, prefix="/conversations")
api_v1.include_router(streaming_settings_v1.router, prefix="/streaming-settings")
app.include_router(api_v1)


@app.get("/health")
def health_check() -> dict:
    return {"status": "healthy", "service": f"{BRAND_NAME.lower()}-api"}
