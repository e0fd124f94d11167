"""FastAPI backend for the post scheduling dashboard."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from api.error_handlers import register_error_handlers
from api.middleware import (
    MetricsMiddleware,
    RequestContextMiddleware,
    get_metrics,
    get_metrics_content_type,
)
from api.routes import (
    auth,
    conversations,
    health,
    posts,
    social_accounts,
    upload,
    webhooks,
)
from api.services.upload_service import UPLOAD_URL_PATH
from postboard import __version__
from postboard.config import CORS_ORIGINS, LOG_LEVEL, UPLOAD_DIR
from postboard.db.engine import init_db

# Configure logging
logging.basicConfig(
    level=LOG_LEVEL, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Development convenience; production schemas come from Alembic
    init_db()
    UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
    logger.info("Postboard API %s started", __version__)
    yield


app = FastAPI(
    title="Postboard API",
    description="API for scheduling social media posts and managing conversations",
    version=__version__,
    lifespan=lifespan,
)

# Middleware is added in reverse order of execution
# Order of execution: CORS -> RequestContext -> Metrics -> Route

# Metrics middleware (captures all request metrics)
app.add_middleware(MetricsMiddleware)

# Request context middleware (binds request_id for structured logs)
app.add_middleware(RequestContextMiddleware)

# CORS for the dashboard client (outermost - handles preflight requests)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register global error handlers
register_error_handlers(app)

# Public routes
app.include_router(auth.router, prefix="/api", tags=["auth"])
app.include_router(health.router, prefix="/api", tags=["health"])
app.include_router(webhooks.router, prefix="/api", tags=["webhooks"])

# Authenticated routes
app.include_router(posts.router, prefix="/api", tags=["posts"])
app.include_router(social_accounts.router, prefix="/api", tags=["social-accounts"])
app.include_router(conversations.router, prefix="/api", tags=["conversations"])
app.include_router(upload.router, prefix="/api", tags=["upload"])

# Uploaded media, served back at the URLs the upload route returns
app.mount(
    UPLOAD_URL_PATH,
    StaticFiles(directory=str(UPLOAD_DIR), check_dir=False),
    name="uploads",
)


@app.get("/metrics", include_in_schema=False)
async def metrics():
    """Prometheus metrics endpoint for scraping."""
    return Response(
        content=get_metrics(),
        media_type=get_metrics_content_type(),
    )
