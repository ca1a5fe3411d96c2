"""
PDF/A validation API endpoint.

Accepts a document as a multipart upload or a URL and returns the
validation result as JSON or XML, or a rendered HTML report, depending on
the Accept header.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Header, Response, UploadFile

from pdfa_service.api.dependencies import get_validation_service
from pdfa_service.core.constants import MEDIA_TYPE_HTML, MEDIA_TYPE_XML
from pdfa_service.core.error_handling import handle_validation_errors
from pdfa_service.core.utils import negotiate_media_type
from pdfa_service.models.validation_models import ValidationRequest
from pdfa_service.services.validation_service import ValidationService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/{profile_id}")
@handle_validation_errors("Failed to validate PDF")
def validate_pdf(
    profile_id: str,
    sha1_hex: Optional[str] = Form(None, alias="sha1Hex"),
    url: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    accept: Optional[str] = Header(None),
    service: ValidationService = Depends(get_validation_service)
):
    """
    Validate a PDF against a PDF/A profile.

    Exactly one of ``file`` or ``url`` must be supplied. When ``sha1Hex`` is
    given and the received bytes do not hash to it, a parse failure is
    reported as a server error rather than "not a PDF".

    Args:
        profile_id: Profile identifier, e.g. "1b" or "2u"
        sha1_hex: Optional SHA-1 hex digest of the document
        url: Location to fetch the document from
        file: Uploaded document
        accept: Accept header selecting JSON, XML or an HTML report

    Returns:
        Validation result in the negotiated representation
    """
    media_type = negotiate_media_type(accept)
    request = ValidationRequest(
        profile_id=profile_id,
        expected_digest_hex=sha1_hex,
        source_url=url,
        upload=file.file if file is not None else None,
        upload_filename=file.filename if file is not None else None,
    )

    if media_type == MEDIA_TYPE_HTML:
        report = service.render_report(request)
        return Response(content=report.content, media_type=report.media_type)

    result = service.validate(request)
    logger.info(
        f"Profile {profile_id}: compliant={result.is_compliant}, "
        f"failed_rules={len(result.failed_rules)}"
    )
    if media_type == MEDIA_TYPE_XML:
        return Response(content=result.to_xml_bytes(), media_type=MEDIA_TYPE_XML)
    return Response(content=result.model_dump_json(by_alias=True), media_type=media_type)
