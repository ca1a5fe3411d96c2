"""
FastAPI application for validating PDF documents against PDF/A profiles.
Accepts uploads or URLs and reports compliance as JSON, XML or HTML.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from pdfa_service.api.routes import health, profiles, validation
from pdfa_service.core.config import settings
from pdfa_service.core.logging import setup_logging
from pdfa_service.core.exceptions import http_exception_handler, validation_exception_handler
from pdfa_service.core.middleware import RequestIDMiddleware
from pdfa_service.services.validation_context import build_validation_context

# Configure logging
setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.validation_context = build_validation_context(settings)
    logger.info("PDF/A Validation Service started")
    yield
    logger.info("PDF/A Validation Service stopped")


app = FastAPI(
    title="PDF/A Validation Service",
    description="API for validating PDF documents against PDF/A validation profiles",
    version="1.0.0",
    lifespan=lifespan
)

# Middleware
app.add_middleware(RequestIDMiddleware)

# Add exception handlers
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)

# Include routers (validation last: it matches any single path segment)
app.include_router(health.router)
app.include_router(profiles.router)
app.include_router(validation.router)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000, workers=1)
