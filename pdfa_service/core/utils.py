"""
Request helpers shared by the API routes.
"""
import logging
from typing import List, Optional, Tuple

from fastapi import HTTPException

from pdfa_service.core.constants import MEDIA_TYPE_HTML, MEDIA_TYPE_JSON, MEDIA_TYPE_XML

logger = logging.getLogger(__name__)

# Accepted media ranges and the representation each selects
_MEDIA_ALIASES = {
    "application/json": MEDIA_TYPE_JSON,
    "application/xml": MEDIA_TYPE_XML,
    "text/xml": MEDIA_TYPE_XML,
    "text/html": MEDIA_TYPE_HTML,
}
_SUPPORTED = (MEDIA_TYPE_JSON, MEDIA_TYPE_XML, MEDIA_TYPE_HTML)


def _parse_accept(accept: str) -> List[Tuple[str, float, int]]:
    """Split an Accept header into (media range, quality, position) entries."""
    entries = []
    for position, part in enumerate(accept.split(",")):
        fields = [field.strip() for field in part.split(";")]
        media_range = fields[0].lower()
        if not media_range:
            continue
        quality = 1.0
        for param in fields[1:]:
            name, _, value = param.partition("=")
            if name.strip().lower() == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0
        entries.append((media_range, quality, position))
    return entries


def negotiate_media_type(accept: Optional[str]) -> str:
    """
    Choose the response representation for an Accept header.

    JSON is returned when the header is absent or allows anything. Exact
    media types win over wildcards of the same quality.

    Args:
        accept: Raw Accept header value

    Returns:
        One of application/json, application/xml or text/html

    Raises:
        HTTPException: 406 if no supported representation is acceptable
    """
    if not accept or not accept.strip():
        return MEDIA_TYPE_JSON

    candidates = []
    for media_range, quality, position in _parse_accept(accept):
        if quality <= 0:
            continue
        if media_range in _MEDIA_ALIASES:
            candidates.append((quality, 1, -position, _MEDIA_ALIASES[media_range]))
        elif media_range == "*/*":
            candidates.append((quality, 0, -position, MEDIA_TYPE_JSON))
        elif media_range.endswith("/*"):
            family = media_range[:-1]
            for media_type in _SUPPORTED:
                if media_type.startswith(family):
                    candidates.append((quality, 0, -position, media_type))
                    break

    if not candidates:
        logger.info(f"No acceptable representation for Accept: {accept}")
        raise HTTPException(
            status_code=406,
            detail=f"Supported media types: {', '.join(_SUPPORTED)}",
        )
    return max(candidates)[3]
