"""FastAPI application factory"""

from datetime import datetime, timezone
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from spendio_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from spendio_gateway.api.v1 import ai, months, transactions, users
from spendio_gateway.infrastructure.observability.logging import setup_logging
from spendio_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Errors go out as {"error": message}"""
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies and parameters are caller errors: 400"""
    first = exc.errors()[0] if exc.errors() else {}
    error = (first.get("ctx") or {}).get("error")
    if error is not None:
        message = str(error)
    else:
        field = ".".join(str(part) for part in first.get("loc", ())[1:])
        message = f"{field}: {first.get('msg', 'Invalid request')}" if field else first.get("msg", "Invalid request")
    return JSONResponse(status_code=400, content={"error": message})


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Spendio Gateway",
        description="Personal finance metrics, plan quotas and AI advisor proxy",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    # Health check endpoints
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    @app.get("/api/ping")
    def ping():
        return {"message": settings.ping_message, "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.get("/api/health")
    def api_health():
        return {
            "status": "ok",
            "server": settings.service_name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "env": settings.environment,
            "hasOpenAIKey": bool(settings.openai_api_key),
        }

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(ai.router, prefix="/api", tags=["ai"])
    app.include_router(users.router, prefix="/api", tags=["users"])
    app.include_router(transactions.router, prefix="/api", tags=["transactions"])
    app.include_router(months.router, prefix="/api", tags=["months"])

    return app


app = create_app()
