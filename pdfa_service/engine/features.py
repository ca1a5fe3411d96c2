"""
Feature extraction over parsed documents.

The default configuration enables no features, so the report pipeline
carries an empty feature stage unless a caller asks for specific features.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, List

from pdfa_service.engine.document import PDFADocument, resolve

logger = logging.getLogger(__name__)


class FeatureType(str, Enum):
    """Document features that can be extracted."""
    INFORMATION_DICTIONARY = "informationDict"
    METADATA = "metadata"
    DOCUMENT_SECURITY = "documentSecurity"
    PAGE = "pages"
    FONT = "fonts"


@dataclass(frozen=True)
class FeatureConfig:
    """Which features to extract."""

    enabled: FrozenSet[FeatureType] = frozenset()

    @classmethod
    def default(cls) -> "FeatureConfig":
        return cls()

    @property
    def is_inert(self) -> bool:
        return not self.enabled


class FeatureExtractor:
    """Extracts the configured features from a document."""

    def __init__(self, config: FeatureConfig):
        self.config = config

    def extract(self, document: PDFADocument) -> Dict[str, Any]:
        """Return a mapping of feature name to extracted values."""
        extractors = {
            FeatureType.INFORMATION_DICTIONARY: self._information_dictionary,
            FeatureType.METADATA: self._metadata,
            FeatureType.DOCUMENT_SECURITY: self._security,
            FeatureType.PAGE: self._pages,
            FeatureType.FONT: self._fonts,
        }
        features: Dict[str, Any] = {}
        for feature in FeatureType:
            if feature in self.config.enabled:
                features[feature.value] = extractors[feature](document)
        logger.debug(f"Extracted features: {', '.join(features) or 'none'}")
        return features

    def _information_dictionary(self, document: PDFADocument) -> Dict[str, str]:
        info = document.reader.metadata or {}
        return {str(key).lstrip("/"): str(value) for key, value in info.items()}

    def _metadata(self, document: PDFADocument) -> Dict[str, Any]:
        packet = document.metadata_bytes()
        return {"present": packet is not None, "size": len(packet) if packet else 0}

    def _security(self, document: PDFADocument) -> Dict[str, Any]:
        return {"encrypted": document.reader.is_encrypted}

    def _pages(self, document: PDFADocument) -> List[Dict[str, Any]]:
        pages = []
        for index, page in enumerate(document.reader.pages):
            box = page.mediabox
            pages.append({
                "number": index + 1,
                "width": float(box.width),
                "height": float(box.height),
                "rotation": page.rotation,
            })
        return pages

    def _fonts(self, document: PDFADocument) -> List[Dict[str, Any]]:
        fonts: Dict[str, Dict[str, Any]] = {}
        for page in document.reader.pages:
            resources = resolve(page.get("/Resources"))
            page_fonts = resolve(resources.get("/Font")) if resources is not None else None
            if not page_fonts:
                continue
            for ref in page_fonts.values():
                font = resolve(ref)
                base_font = str(font.get("/BaseFont", "unknown")).lstrip("/")
                fonts.setdefault(base_font, {
                    "baseFont": base_font,
                    "subtype": str(font.get("/Subtype", "")).lstrip("/"),
                    "hasToUnicode": "/ToUnicode" in font,
                })
        return list(fonts.values())
