"""
PDF parser for the validation engine.

The input stream is spooled once (in memory up to a threshold, on disk
beyond it) because pypdf needs random access; spooling reads the stream to
exhaustion before any parsing happens.
"""
import logging
import shutil
import tempfile
from typing import BinaryIO

from pypdf import PasswordType, PdfReader
from pypdf.errors import FileNotDecryptedError, PyPdfError

from pdfa_service.core.constants import (
    HEADER_SCAN_BYTES,
    PDF_HEADER_MARKER,
    TRAILER_SCAN_BYTES,
)
from pdfa_service.core.error_handling import EncryptedDocumentError, ModelParsingError
from pdfa_service.engine.document import PDFADocument, resolve
from pdfa_service.engine.profiles import ValidationProfile

logger = logging.getLogger(__name__)

DEFAULT_SPOOL_MAX_SIZE = 16 * 1024 * 1024


class PDFAParser:
    """
    Opens a document stream for validation under a profile.

    Use as a context manager; the spool is released on exit whatever the
    outcome. OSError raised while reading the stream propagates unchanged.
    """

    def __init__(self, stream: BinaryIO, profile: ValidationProfile, spool_max_size: int = DEFAULT_SPOOL_MAX_SIZE):
        self.profile = profile
        self._spool = tempfile.SpooledTemporaryFile(max_size=spool_max_size)
        try:
            shutil.copyfileobj(stream, self._spool)
            self._document = self._parse()
        except BaseException:
            self.close()
            raise

    def _parse(self) -> PDFADocument:
        size = self._spool.tell()
        self._spool.seek(0)
        header = self._spool.read(HEADER_SCAN_BYTES)
        if PDF_HEADER_MARKER not in header:
            raise ModelParsingError(f"Couldn't parse stream: no PDF header in the first {HEADER_SCAN_BYTES} bytes")

        self._spool.seek(max(0, size - TRAILER_SCAN_BYTES))
        tail = self._spool.read()
        self._spool.seek(0)

        try:
            reader = PdfReader(self._spool, strict=False)
            # An empty user password opens the document; anything else needs a password we do not have
            if reader.is_encrypted and reader.decrypt("") == PasswordType.NOT_DECRYPTED:
                raise EncryptedDocumentError("Document is encrypted with a user password")
            # Force the trailer, catalog and page tree to load now so that
            # structural damage is reported as a parse failure
            resolve(reader.trailer["/Root"])
            page_count = len(reader.pages)
        except FileNotDecryptedError as exc:
            raise EncryptedDocumentError(f"Document is encrypted: {exc}") from exc
        except (PyPdfError, KeyError, ValueError) as exc:
            raise ModelParsingError(f"Couldn't parse stream: {exc}") from exc

        logger.debug(f"Parsed {size} byte document with {page_count} pages for profile {self.profile.id}")
        return PDFADocument(reader=reader, header=header, tail=tail, size=size)

    @property
    def document(self) -> PDFADocument:
        return self._document

    def close(self):
        self._spool.close()

    def __enter__(self) -> "PDFAParser":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
