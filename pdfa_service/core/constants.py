"""
Shared constants for PDF/A validation.

This module consolidates constants used across the codebase to ensure
consistency and make it easier to modify common values.
"""

# Digest used by clients to fingerprint the document they submit
DIGEST_ALGORITHM = "sha1"

# Media types offered on the validation route
MEDIA_TYPE_JSON = "application/json"
MEDIA_TYPE_XML = "application/xml"
MEDIA_TYPE_HTML = "text/html"
MEDIA_TYPE_TEXT = "text/plain"

NOT_A_PDF_MESSAGE = "File does not appear to be a PDF."

# Parsing
PDF_HEADER_MARKER = b"%PDF-"
PDF_EOF_MARKER = b"%%EOF"
HEADER_SCAN_BYTES = 1024
TRAILER_SCAN_BYTES = 1024

# Machine-readable report
MRR_RELEASE_ID = "pdfa-validation-service"
MRR_RELEASE_VERSION = "1.0.0"
