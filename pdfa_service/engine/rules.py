"""
Structural rule checks.

Each check takes the parsed document and the profile being applied and
returns the deviations it found; an empty list means the rule passed.
"""
from dataclasses import dataclass
from typing import Callable, List, NamedTuple, Optional, Tuple

from lxml import etree

from pdfa_service.core.constants import PDF_EOF_MARKER
from pdfa_service.engine.document import PDFADocument, resolve

PDFAID_NS = "http://www.aiim.org/pdfa/ns/id/"
RDF_NS = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"

_XMP_PARSER = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=False)


class Deviation(NamedTuple):
    """A failed check: where it happened and why."""
    context: str
    message: str


@dataclass(frozen=True)
class Rule:
    """A profile rule bound to the check that evaluates it."""

    clause: str
    test_number: int
    description: str
    object_type: str
    check: Callable[[PDFADocument, "object"], List[Deviation]]


def _conformance_levels(profile) -> Tuple[str, ...]:
    """Conformance letters acceptable in the identification schema."""
    if profile.level == "a":
        return ("A",)
    if profile.level == "u":
        return ("A", "U")
    if profile.part == 1:
        return ("A", "B")
    return ("A", "B", "U")


def _read_identification(packet: bytes) -> Tuple[Optional[str], Optional[str]]:
    """Extract (part, conformance) from an XMP packet.

    Both the attribute form and the element form of rdf:Description are
    accepted.
    """
    root = etree.fromstring(packet.strip(), parser=_XMP_PARSER)
    part = conformance = None
    for description in root.iter(f"{{{RDF_NS}}}Description"):
        part = part or description.get(f"{{{PDFAID_NS}}}part")
        conformance = conformance or description.get(f"{{{PDFAID_NS}}}conformance")
        for child in description:
            if child.tag == f"{{{PDFAID_NS}}}part" and child.text:
                part = part or child.text.strip()
            elif child.tag == f"{{{PDFAID_NS}}}conformance" and child.text:
                conformance = conformance or child.text.strip()
    return part, conformance


# ----------------------------------------------------------------------
# File structure
# ----------------------------------------------------------------------

def check_header_offset(document: PDFADocument, profile) -> List[Deviation]:
    if document.header_offset != 0:
        return [Deviation("CosDocument", f"File header starts at offset {document.header_offset} instead of 0")]
    return []


def check_eof_marker(document: PDFADocument, profile) -> List[Deviation]:
    if not document.tail.rstrip().endswith(PDF_EOF_MARKER):
        return [Deviation("CosDocument", "Last line of the file is not the %%EOF marker")]
    return []


def check_not_encrypted(document: PDFADocument, profile) -> List[Deviation]:
    if "/Encrypt" in document.reader.trailer:
        return [Deviation("CosTrailer", "Trailer dictionary contains the Encrypt key")]
    return []


# ----------------------------------------------------------------------
# Metadata
# ----------------------------------------------------------------------

def check_metadata_present(document: PDFADocument, profile) -> List[Deviation]:
    if document.metadata_bytes() is None:
        return [Deviation("PDDocument", "Document catalog does not contain a metadata stream")]
    return []


def check_identification(document: PDFADocument, profile) -> List[Deviation]:
    packet = document.metadata_bytes()
    if packet is None:
        return [Deviation("MainXMPPackage", "No XMP metadata, PDF/A identification schema is missing")]
    try:
        part, conformance = _read_identification(packet)
    except etree.XMLSyntaxError as exc:
        return [Deviation("MainXMPPackage", f"XMP metadata is not well-formed: {exc}")]

    if part is None:
        return [Deviation("MainXMPPackage", "PDF/A identification schema is missing")]
    deviations = []
    if part != str(profile.part):
        deviations.append(Deviation(
            "PDFAIdentification",
            f"pdfaid:part is {part}, expected {profile.part}"
        ))
    allowed = _conformance_levels(profile)
    if (conformance or "").upper() not in allowed:
        deviations.append(Deviation(
            "PDFAIdentification",
            f"pdfaid:conformance is {conformance!r}, expected one of {', '.join(allowed)}"
        ))
    return deviations


# ----------------------------------------------------------------------
# Actions and interactive content
# ----------------------------------------------------------------------

def check_no_javascript(document: PDFADocument, profile) -> List[Deviation]:
    deviations = []
    catalog = document.catalog
    names = resolve(catalog.get("/Names"))
    if names is not None and "/JavaScript" in names:
        deviations.append(Deviation("PDNameTreeNode", "Names dictionary contains a JavaScript name tree"))
    open_action = resolve(catalog.get("/OpenAction"))
    if hasattr(open_action, "get") and resolve(open_action.get("/S")) == "/JavaScript":
        deviations.append(Deviation("PDAction", "Document open action is a JavaScript action"))
    return deviations


# ----------------------------------------------------------------------
# Part 1 restrictions
# ----------------------------------------------------------------------

def check_no_transparency_group(document: PDFADocument, profile) -> List[Deviation]:
    deviations = []
    for index, page in enumerate(document.reader.pages):
        group = resolve(page.get("/Group"))
        if group is not None and resolve(group.get("/S")) == "/Transparency":
            deviations.append(Deviation(f"page {index + 1}", "Page contains a transparency group"))
    return deviations


def check_no_embedded_files(document: PDFADocument, profile) -> List[Deviation]:
    names = resolve(document.catalog.get("/Names"))
    if names is not None and "/EmbeddedFiles" in names:
        return [Deviation("PDNameTreeNode", "Names dictionary contains an EmbeddedFiles name tree")]
    return []


# ----------------------------------------------------------------------
# Accessibility (level A) and Unicode (level U)
# ----------------------------------------------------------------------

def check_marked(document: PDFADocument, profile) -> List[Deviation]:
    mark_info = resolve(document.catalog.get("/MarkInfo"))
    marked = resolve(mark_info.get("/Marked")) if mark_info is not None else None
    if marked is None or not bool(getattr(marked, "value", marked)):
        return [Deviation("CosDocument", "Document catalog MarkInfo dictionary does not set Marked to true")]
    return []


def check_structure_tree(document: PDFADocument, profile) -> List[Deviation]:
    if resolve(document.catalog.get("/StructTreeRoot")) is None:
        return [Deviation("PDDocument", "Document catalog does not contain a StructTreeRoot")]
    return []


def check_fonts_to_unicode(document: PDFADocument, profile) -> List[Deviation]:
    deviations = []
    for index, page in enumerate(document.reader.pages):
        resources = resolve(page.get("/Resources"))
        fonts = resolve(resources.get("/Font")) if resources is not None else None
        if not fonts:
            continue
        for name, ref in fonts.items():
            font = resolve(ref)
            if "/ToUnicode" not in font:
                deviations.append(Deviation(
                    f"page {index + 1} font {name}",
                    "Font has no ToUnicode CMap"
                ))
    return deviations
