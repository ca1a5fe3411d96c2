"""
FastAPI dependencies for the validation routes.
"""
from fastapi import Depends, HTTPException, Request

from pdfa_service.core.config import settings
from pdfa_service.services.input_resolver import InputResolver
from pdfa_service.services.validation_context import ValidationContext
from pdfa_service.services.validation_service import ValidationService


def get_validation_context(request: Request) -> ValidationContext:
    """Return the context built at startup."""
    context = getattr(request.app.state, "validation_context", None)
    if context is None:
        raise HTTPException(status_code=503, detail="Validation context is not initialized")
    return context


def get_input_resolver() -> InputResolver:
    return InputResolver(timeout=settings.HTTP_CLIENT_TIMEOUT)


def get_validation_service(
    context: ValidationContext = Depends(get_validation_context),
    resolver: InputResolver = Depends(get_input_resolver),
) -> ValidationService:
    return ValidationService(context, resolver)
