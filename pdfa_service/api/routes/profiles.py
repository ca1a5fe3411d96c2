"""
Validation profile directory endpoints.
"""
from typing import List

from fastapi import APIRouter, Depends

from pdfa_service.api.dependencies import get_validation_context
from pdfa_service.core.error_handling import handle_validation_errors
from pdfa_service.engine.results import ProfileSummary
from pdfa_service.services.validation_context import ValidationContext

router = APIRouter(prefix="/profiles")


@router.get("", response_model=List[ProfileSummary], response_model_by_alias=True)
def list_profiles(context: ValidationContext = Depends(get_validation_context)):
    """List every registered validation profile."""
    return [profile.summary() for profile in context.profiles]


@router.get("/{profile_id}", response_model=ProfileSummary, response_model_by_alias=True)
@handle_validation_errors("Failed to load profile")
def get_profile(profile_id: str, context: ValidationContext = Depends(get_validation_context)):
    """Return one profile with its rules."""
    return context.profiles.get(profile_id).summary(include_rules=True)
