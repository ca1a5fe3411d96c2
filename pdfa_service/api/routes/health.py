import os
import tempfile

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/")
async def root():
    """Basic health check endpoint."""
    return {"message": "PDF/A Validation Service", "status": "healthy"}


@router.get("/health")
async def health_check(request: Request):
    """
    Comprehensive health check endpoint.

    Verifies:
    - Validation profiles are loaded
    - Report stylesheet is compiled
    - Staging directory is writable
    """
    health_status = {
        "status": "healthy",
        "service": "PDF/A Validation Service",
        "version": "1.0",
    }

    context = getattr(request.app.state, "validation_context", None)
    health_status["profiles_loaded"] = len(context.profiles) if context is not None else 0
    health_status["profiles"] = context.profiles.ids if context is not None else []
    health_status["report_stylesheet_loaded"] = context is not None and context.report_stylesheet is not None
    health_status["max_failed_checks"] = context.max_failed_checks if context is not None else None

    # Probe the directory the staging store actually writes to
    staging_dir = (context.staging_dir if context is not None else None) or tempfile.gettempdir()
    try:
        fd, test_file = tempfile.mkstemp(prefix=".health_check_", dir=staging_dir)
        with os.fdopen(fd, 'w') as f:
            f.write("test")
        os.remove(test_file)
        health_status["staging_writable"] = True
        health_status["staging_directory"] = staging_dir
    except OSError as e:
        health_status["staging_writable"] = False
        health_status["staging_error"] = str(e)
        health_status["status"] = "degraded"

    if context is None:
        health_status["status"] = "degraded"
        health_status["warning"] = "Validation context not initialized"

    return health_status
