from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from stockpos.config.settings import Settings
from stockpos.core.exceptions import (
    StockPOSError, ValidationError, NotFound, InsufficientStock,
    ConflictRetryable, StorageFailure, DeadlineExceeded
)
import time
import logging

logger = logging.getLogger(__name__)

# Más específico primero
ERROR_STATUS = (
    (ValidationError, 400),
    (NotFound, 404),
    (InsufficientStock, 409),
    (ConflictRetryable, 409),
    (DeadlineExceeded, 504),
    (StorageFailure, 500),
)

def status_for(exc: StockPOSError) -> int:
    for error_type, status_code in ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code
    return 500

def setup_middleware(app: FastAPI, settings: Settings):
    """Configure all middleware for the application"""

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=[
            "Authorization",
            "Content-Type",
            "Accept",
            "Origin",
            "X-Requested-With"
        ],
        max_age=3600
    )

    @app.middleware("http")
    async def log_requests(request, call_next):
        start_time = time.time()

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(
            f"{request.method} {request.url.path} - "
            f"Status: {response.status_code} - "
            f"Time: {process_time:.4f}s"
        )

        return response

def setup_exception_handlers(app: FastAPI):
    """Traducir la taxonomía de errores a respuestas JSON"""

    @app.exception_handler(StockPOSError)
    async def handle_domain_error(request: Request, exc: StockPOSError):
        status_code = status_for(exc)
        body = {"error": exc.code, "detail": exc.message}

        if isinstance(exc, InsufficientStock):
            body.update({
                "product_id": exc.product_id,
                "available": exc.available,
                "requested": exc.requested
            })
        if isinstance(exc, ConflictRetryable):
            body["retryable"] = True

        if status_code >= 500:
            logger.error(f"{request.method} {request.url.path} - {exc.code}: {exc.message}")

        return JSONResponse(status_code=status_code, content=body)
