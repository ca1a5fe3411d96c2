"""
Renders machine-readable reports to HTML with the packaged XSLT stylesheet.
"""
import logging
from typing import Optional

from lxml import etree

from pdfa_service.core.constants import MEDIA_TYPE_HTML
from pdfa_service.core.error_handling import RenderTransformError
from pdfa_service.models.validation_models import BatchSummary, RenderedReport

logger = logging.getLogger(__name__)


def _secure_parser() -> etree.XMLParser:
    return etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        huge_tree=False,
        remove_blank_text=False,
    )


class ReportRenderer:
    """Applies the HTML report stylesheet to an MRR document."""

    def __init__(self, stylesheet: etree.XSLT):
        self.stylesheet = stylesheet

    def render(
        self,
        report_bytes: bytes,
        summary: Optional[BatchSummary],
        base_url: str,
        full_html: bool = False
    ) -> RenderedReport:
        """
        Render ``report_bytes`` to HTML.

        Args:
            report_bytes: The MRR XML document
            summary: Batch summary, used for the processing time shown in
                the report header
            base_url: Prefix for rule documentation links
            full_html: Produce a standalone page with embedded styles

        Returns:
            RenderedReport with text/html content

        Raises:
            RenderTransformError: If the report is malformed or the transform fails
        """
        try:
            document = etree.fromstring(report_bytes, _secure_parser())
        except etree.XMLSyntaxError as exc:
            raise RenderTransformError(f"Malformed report XML: {exc}") from exc

        processing_time = summary.duration_ms if summary is not None else 0
        try:
            html = self.stylesheet(
                document,
                wikiPath=etree.XSLT.strparam(base_url),
                isFullHTML=etree.XSLT.strparam(str(full_html).lower()),
                processingTime=etree.XSLT.strparam(f"{processing_time} ms"),
            )
        except (etree.XSLTApplyError, etree.XSLTParseError) as exc:
            raise RenderTransformError(f"Report transformation failed: {exc}") from exc

        if html.getroot() is None:
            raise RenderTransformError("Report transformation produced no output")
        content = etree.tostring(html, method="html", encoding="UTF-8", pretty_print=True)
        logger.debug(f"Rendered {len(report_bytes)} byte report to {len(content)} bytes of HTML")
        return RenderedReport(content=content, media_type=MEDIA_TYPE_HTML)
