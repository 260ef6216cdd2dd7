"""
Vehicle Marketplace Sales API - Main Application.

FastAPI application with CORS enabled for frontend communication. Domain
errors raised by the services are translated here into a uniform
ErrorResponse body:

- ValidationError -> 400
- NotFoundError   -> 404
- ConflictError   -> 409
- anything else   -> 500 (logged, details withheld)

Request-shape errors detected by pydantic keep FastAPI's default 422.
"""

import logging
import os
from typing import Dict, List, Optional
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api import __version__
from api.models import ErrorResponse
from domain.errors import ConflictError, DomainError, NotFoundError, ValidationError
from domain.time import utc_now

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

TRACE_HEADER = "X-Request-ID"

# Create FastAPI application
app = FastAPI(
    title="Vehicle Marketplace Sales API",
    description="REST API for registering marketplace vehicle sales and settling their payments",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Comma-separated list of allowed origins; "*" allows all (development default).
_cors_origins = [
    origin.strip()
    for origin in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",")
    if origin.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _trace_id(request: Request) -> str:
    return request.headers.get(TRACE_HEADER) or uuid4().hex


def _error_response(
    request: Request,
    status_code: int,
    message: str,
    details: Optional[str] = None,
    validation_errors: Optional[Dict[str, List[str]]] = None,
) -> JSONResponse:
    body = ErrorResponse(
        status_code=status_code,
        message=message,
        details=details,
        validation_errors=validation_errors,
        timestamp=utc_now(),
        trace_id=_trace_id(request),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@app.exception_handler(ValidationError)
async def handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return _error_response(request, 400, exc.message, validation_errors=exc.errors)


@app.exception_handler(NotFoundError)
async def handle_not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    return _error_response(request, 404, exc.message)


@app.exception_handler(ConflictError)
async def handle_conflict(request: Request, exc: ConflictError) -> JSONResponse:
    return _error_response(request, 409, exc.message)


@app.exception_handler(DomainError)
async def handle_domain_error(request: Request, exc: DomainError) -> JSONResponse:
    return _error_response(request, 400, exc.message)


@app.exception_handler(StarletteHTTPException)
async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error_response(request, exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error",
        extra={"path": request.url.path, "method": request.method},
    )
    return _error_response(
        request,
        500,
        "An unexpected error occurred",
        details="Please contact support if the problem persists",
    )


@app.get("/health", tags=["Health"])
def health_check():
    """
    Health check endpoint.

    Returns the API status and version.
    """
    return {
        "status": "healthy",
        "version": __version__,
        "service": "vehicle-marketplace-sales-api"
    }


@app.get("/", tags=["Root"])
def root():
    """
    Root endpoint with API information.
    """
    return {
        "message": "Vehicle Marketplace Sales API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health"
    }


# Import and include routers
from api.routers import payments, sales, vehicles

app.include_router(sales.router, prefix="/api/v1", tags=["Sales"])
app.include_router(payments.router, prefix="/api/v1", tags=["Payments"])
app.include_router(vehicles.router, prefix="/api/v1", tags=["Vehicles"])
