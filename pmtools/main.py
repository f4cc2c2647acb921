"""FastAPI application."""

import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from pmtools.api.errors import (
    ApiError,
    api_error_handler,
    unhandled_error_handler,
    validation_error_handler,
)
from pmtools.api.routes.ai import router as ai_router
from pmtools.api.routes.documents import prds_router, reviews_router
from pmtools.api.routes.health import router as health_router
from pmtools.api.routes.metrics import router as metrics_router

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI(title="PM Tools API", version="0.1.0")

app.add_exception_handler(ApiError, api_error_handler)  # type: ignore[arg-type]
app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
app.add_exception_handler(Exception, unhandled_error_handler)

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(reviews_router)
app.include_router(prds_router)
app.include_router(ai_router)
