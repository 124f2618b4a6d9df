import logging

from fastapi import FastAPI
from fastapi import Request as FastAPIRequest
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from beatstore.api import api_router
from beatstore.core.config import get_settings
from beatstore.core.rate_limit import limiter, rate_limit_exceeded_handler
from beatstore.services.search.filters import InvalidFilter
from beatstore.services.search.service import SearchUnavailable

settings = get_settings()

# Module loggers (search, cache, analytics) emit INFO-level diagnostics
logging.getLogger("beatstore").setLevel(logging.INFO)

CORS_ALLOW_METHODS = ["GET", "POST", "DELETE", "OPTIONS"]

app = FastAPI(
    title="Beatstore Search API",
    description="Search, filtering and autocomplete for the beat catalog",
    version="0.1.0",
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None if settings.is_production else "/redoc",
    openapi_url=None if settings.is_production else "/openapi.json",
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

logger = logging.getLogger(__name__)


@app.exception_handler(InvalidFilter)
async def invalid_filter_handler(request: FastAPIRequest, exc: InvalidFilter) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": exc.message, "field": exc.field})


@app.exception_handler(SearchUnavailable)
async def search_unavailable_handler(
    request: FastAPIRequest, exc: SearchUnavailable
) -> JSONResponse:
    return JSONResponse(
        status_code=503,
        content={"detail": "Search is temporarily unavailable. Please try again."},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: FastAPIRequest, exc: Exception) -> JSONResponse:
    """Catch unhandled exceptions and return a generic 500 response."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    content = {"detail": "Internal server error"}
    if not settings.is_production:
        content["debug"] = str(exc)
    return JSONResponse(status_code=500, content=content)


# CORS
if settings.cors_origins.strip() == "*":
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
else:
    origins = [origin.strip() for origin in settings.cors_origins.split(",")]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=CORS_ALLOW_METHODS,
        allow_headers=["Content-Type", "X-User-Id", "X-Admin-Api-Key"],
    )

app.include_router(api_router, prefix="/api")


@app.get("/health")
def health_check():
    return {"status": "ok"}
