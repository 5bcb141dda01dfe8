"""Website functions - FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from app.config import APP_VERSION, settings
from app.errors import ApiError, api_error_handler, rate_limit_handler
from app.providers.kv import close_stores
from app.routers import contact, health, products, webhook

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_stores()


app = FastAPI(
    title="Website Functions",
    description="Pricing catalog, Stripe webhooks and contact intake for the marketing site",
    version=APP_VERSION,
    debug=settings.debug,
    lifespan=lifespan,
)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        {"success": False, "error": "Internal server error"},
        status_code=500,
        headers={"Access-Control-Allow-Origin": "*"},
    )


# Rate limiting
app.state.limiter = contact.limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)

# Errors
app.add_exception_handler(ApiError, api_error_handler)
app.add_exception_handler(Exception, unhandled_error_handler)

# CORS (browser preflights; bare OPTIONS are answered by each router)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", webhook.SIGNATURE_HEADER],
    max_age=86400,
)

# Routers (all public: the site calls them directly from the browser)
app.include_router(health.router)
app.include_router(products.router, prefix="/api", tags=["products"])
app.include_router(webhook.router, prefix="/api", tags=["webhook"])
app.include_router(contact.router, prefix="/api", tags=["contact"])
