"""
Parsed document handed from the parser to rule checks.
"""
from dataclasses import dataclass
from typing import Optional

from pypdf import PdfReader
from pypdf.generic import DictionaryObject

from pdfa_service.core.constants import PDF_HEADER_MARKER


def resolve(obj):
    """Dereference a pypdf indirect object (no-op for direct objects and None)."""
    if obj is None:
        return None
    return obj.get_object() if hasattr(obj, "get_object") else obj


@dataclass
class PDFADocument:
    """Parsed document plus the raw bytes rules need to inspect."""

    reader: PdfReader
    header: bytes
    tail: bytes
    size: int

    @property
    def catalog(self) -> DictionaryObject:
        return resolve(self.reader.trailer["/Root"])

    @property
    def header_offset(self) -> int:
        return self.header.find(PDF_HEADER_MARKER)

    @property
    def version(self) -> Optional[str]:
        offset = self.header_offset
        if offset < 0:
            return None
        line = self.header[offset + len(PDF_HEADER_MARKER):].split(b"\n", 1)[0].split(b"\r", 1)[0]
        return line.strip().decode("ascii", errors="replace") or None

    def metadata_bytes(self) -> Optional[bytes]:
        """Raw XMP packet from the catalog's /Metadata stream, if any."""
        metadata = resolve(self.catalog.get("/Metadata"))
        if metadata is None or not hasattr(metadata, "get_data"):
            return None
        return metadata.get_data()
