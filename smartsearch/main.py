"""
SQL Smart Search HTTP service

Builds the FastAPI application: search and probe routers, CORS, per-request
Prometheus metrics and access logging, and a sanitized 500 handler.
Run with `python -m smartsearch.main` or `uvicorn smartsearch.main:app`.
"""

from contextlib import asynccontextmanager
from typing import Any, Dict, Optional
import time

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST, Counter, Histogram

from smartsearch.api import health, search
from smartsearch.config.settings import Settings, get_settings
from smartsearch.utils.errors import ErrorCode, create_error_response
from smartsearch.utils.logging import setup_logging

logger = structlog.get_logger(__name__)

SEARCH_PREFIX = "/api/v1/search"
HEALTH_PREFIX = "/health"

http_requests = Counter(
    "smart_search_http_requests_total",
    "HTTP requests served",
    ["method", "route", "status"],
)
http_latency = Histogram(
    "smart_search_http_request_seconds",
    "HTTP request latency in seconds",
    ["route"],
)


def _route_label(request: Request) -> str:
    # Templated path keeps label cardinality bounded; unknown paths share one label
    route = request.scope.get("route")
    return getattr(route, "path", "unmatched")


async def observe_request(request: Request, call_next):
    """Time, count and log every request."""
    started = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - started

    route = _route_label(request)
    http_requests.labels(method=request.method, route=route, status=response.status_code).inc()
    http_latency.labels(route=route).observe(elapsed)
    logger.info(
        "HTTP request served",
        method=request.method,
        route=route,
        status_code=response.status_code,
        duration_ms=round(elapsed * 1000, 1),
    )
    return response


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything unhandled becomes INTERNAL_ERROR; the exception text never leaves the process."""
    logger.error("Unhandled exception", exc_info=exc, path=request.url.path, method=request.method)

    details = None if get_settings().is_production else {"type": exc.__class__.__name__}
    return JSONResponse(
        status_code=500,
        content=create_error_response(ErrorCode.INTERNAL_ERROR, details=details),
    )


async def metrics() -> Response:
    """Prometheus exposition"""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


async def root() -> Dict[str, Any]:
    settings = get_settings()
    return {
        "service": settings.app_name,
        "version": health.VERSION,
        "search": f"{SEARCH_PREFIX}/smart",
        "health_check": HEALTH_PREFIX,
        "metrics": "/metrics",
        "docs_url": None if settings.is_production else "/docs",
    }


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.log_level, json_logs=settings.is_production)
        logger.info(
            "SQL Smart Search starting",
            environment=settings.environment,
            llm_enabled=settings.llm_enabled,
            model_id=settings.bedrock_model_id if settings.llm_enabled else None,
            max_query_length=settings.max_query_length,
        )
        yield
        logger.info("SQL Smart Search stopped")

    app = FastAPI(
        title=settings.app_name,
        description="Natural-language search over SQL performance telemetry",
        version=health.VERSION,
        debug=settings.debug,
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None if settings.is_production else "/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
    app.middleware("http")(observe_request)
    app.add_exception_handler(Exception, global_exception_handler)

    app.include_router(health.router, prefix=HEALTH_PREFIX, tags=["Health"])
    app.include_router(search.router, prefix=SEARCH_PREFIX, tags=["Search"])
    app.add_api_route("/metrics", metrics, methods=["GET"], include_in_schema=False)
    app.add_api_route("/", root, methods=["GET"])
    return app


app = create_app()


if __name__ == "__main__":
    _settings = get_settings()
    uvicorn.run(
        "smartsearch.main:app",
        host=_settings.host,
        port=_settings.port,
        reload=_settings.environment == "development",
        log_level=_settings.log_level.lower(),
    )
