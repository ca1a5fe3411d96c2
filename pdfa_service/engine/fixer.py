"""
Metadata fixer.

Writes a repaired copy of a document whose only problems are missing or
inconsistent PDF/A identification metadata. The default configuration is
used in the report flow, where fixing is not among the enabled tasks.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from pypdf import PdfWriter
from pypdf.errors import PyPdfError
from pypdf.generic import NameObject

from pdfa_service.engine.document import PDFADocument
from pdfa_service.engine.profiles import ValidationProfile
from pdfa_service.engine.results import ValidationResult

logger = logging.getLogger(__name__)

# Rules whose failures the fixer can repair, by part
_METADATA_CLAUSES = {
    1: {"6.7.2", "6.7.11"},
    2: {"6.6.2.1", "6.6.4"},
    3: {"6.6.2.1", "6.6.4"},
}

XMP_TEMPLATE = """<?xpacket begin="\ufeff" id="W5M0MpCehiHzreSzNTczkc9d"?>
<x:xmpmeta xmlns:x="adobe:ns:meta/">
  <rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#">
    <rdf:Description rdf:about="" xmlns:pdfaid="http://www.aiim.org/pdfa/ns/id/">
      <pdfaid:part>{part}</pdfaid:part>
      <pdfaid:conformance>{conformance}</pdfaid:conformance>
    </rdf:Description>
    <rdf:Description rdf:about="" xmlns:pdf="http://ns.adobe.com/pdf/1.3/">
      <pdf:Producer>{producer}</pdf:Producer>
    </rdf:Description>
  </rdf:RDF>
</x:xmpmeta>
<?xpacket end="w"?>"""


class FixerStatus(str, Enum):
    NO_ACTION = "NO_ACTION"
    FIX_APPLIED = "FIX_APPLIED"
    FIXES_FAILED = "FIXES_FAILED"


@dataclass(frozen=True)
class FixerConfig:
    """Metadata fixer settings."""

    fixes_prefix: str = "veraFixMd_"
    producer: str = "pdfa-validation-service"
    output_dir: Optional[str] = None  # Defaults to the source file's directory

    @classmethod
    def default(cls) -> "FixerConfig":
        return cls()


@dataclass
class FixerResult:
    status: FixerStatus
    applied_fixes: List[str] = field(default_factory=list)
    output_path: Optional[Path] = None
    message: Optional[str] = None


class MetadataFixer:
    """Repairs PDF/A identification metadata."""

    def __init__(self, config: FixerConfig):
        self.config = config

    def fix(
        self,
        source: Path,
        document: PDFADocument,
        result: ValidationResult,
        profile: ValidationProfile
    ) -> FixerResult:
        """
        Write a copy of ``source`` carrying identification metadata for
        ``profile`` when the validation result shows metadata failures.

        Returns:
            FixerResult with NO_ACTION when nothing fixable failed,
            FIX_APPLIED with the output path, or FIXES_FAILED on write errors
        """
        if result.is_compliant:
            return FixerResult(status=FixerStatus.NO_ACTION, message="Document is already compliant")

        fixable = result.failed_clauses() & _METADATA_CLAUSES[profile.part]
        if not fixable:
            return FixerResult(status=FixerStatus.NO_ACTION, message="No metadata fixes applicable")

        conformance = profile.level.upper()
        xmp = XMP_TEMPLATE.format(part=profile.part, conformance=conformance, producer=self.config.producer)
        output_dir = Path(self.config.output_dir) if self.config.output_dir else source.parent
        output_path = output_dir / f"{self.config.fixes_prefix}{source.name}"

        try:
            writer = PdfWriter(clone_from=document.reader)
            writer.xmp_metadata = xmp.encode("utf-8")
            metadata = writer.root_object["/Metadata"].get_object()
            metadata[NameObject("/Type")] = NameObject("/Metadata")
            metadata[NameObject("/Subtype")] = NameObject("/XML")
            writer.add_metadata({"/Producer": self.config.producer})
            with open(output_path, "wb") as fh:
                writer.write(fh)
        except (PyPdfError, OSError) as exc:
            logger.warning(f"Metadata fix failed for {source}: {exc}")
            return FixerResult(status=FixerStatus.FIXES_FAILED, message=str(exc))

        applied = [f"Set PDF/A identification to part {profile.part}, conformance {conformance}"]
        logger.info(f"Wrote fixed document {output_path} ({', '.join(sorted(fixable))})")
        return FixerResult(status=FixerStatus.FIX_APPLIED, applied_fixes=applied, output_path=output_path)
