"""
Machine-readable report (MRR) writer.

Batch jobs are collected as they complete and the full XML document is
serialized to the sink when the batch closes.
"""
import logging
from typing import BinaryIO, List

from lxml import etree

from pdfa_service.core.constants import MRR_RELEASE_ID, MRR_RELEASE_VERSION
from pdfa_service.core.error_handling import PipelineIOError
from pdfa_service.engine.results import AssertionStatus, ValidationResult
from pdfa_service.models.validation_models import BatchSummary, JobResult

logger = logging.getLogger(__name__)


def _iso(value) -> str:
    return value.isoformat() if value is not None else ""


class MrrReportHandler:
    """Writes batch jobs and the run summary as an MRR XML document."""

    def __init__(self, sink: BinaryIO, pretty_print: bool = True):
        self.sink = sink
        self.pretty_print = pretty_print
        self._jobs: List[JobResult] = []

    def handle_job(self, job: JobResult):
        self._jobs.append(job)

    def build_report(self, summary: BatchSummary) -> etree._Element:
        """Build the <report> element for the collected jobs."""
        report = etree.Element("report")
        build = etree.SubElement(report, "buildInformation")
        etree.SubElement(build, "releaseDetails", id=MRR_RELEASE_ID, version=MRR_RELEASE_VERSION)

        jobs = etree.SubElement(report, "jobs")
        for job in self._jobs:
            jobs.append(self._job_element(job))

        report.append(self._summary_element(summary))
        return report

    def close(self, summary: BatchSummary):
        """
        Serialize the report to the sink.

        Raises:
            PipelineIOError: If the sink cannot be written
        """
        payload = etree.tostring(
            self.build_report(summary),
            xml_declaration=True,
            encoding="UTF-8",
            pretty_print=self.pretty_print,
        )
        try:
            self.sink.write(payload)
            self.sink.flush()
        except (OSError, ValueError) as exc:
            raise PipelineIOError(f"Could not write report: {exc}") from exc
        logger.debug(f"Wrote {len(payload)} byte report for {len(self._jobs)} job(s)")

    def _job_element(self, job: JobResult) -> etree._Element:
        element = etree.Element("job")
        item = etree.SubElement(element, "item", size=str(job.size_bytes))
        etree.SubElement(item, "name").text = str(job.path)

        if job.validation_result is not None:
            element.append(self._validation_element(job.validation_result))

        if job.features is not None:
            features = etree.SubElement(element, "featuresReport")
            for name, value in job.features.items():
                etree.SubElement(features, "feature", name=name).text = str(value)

        if job.fixer_result is not None:
            fixer = etree.SubElement(element, "fixerReport", status=job.fixer_result.status.value)
            for fix in job.fixer_result.applied_fixes:
                etree.SubElement(fixer, "fix").text = fix
            if job.fixer_result.output_path is not None:
                fixer.set("outputPath", str(job.fixer_result.output_path))

        if job.task_exception is not None:
            exception = etree.SubElement(element, "taskException", type=job.exception_type or "")
            etree.SubElement(exception, "exceptionMessage").text = job.task_exception
        return element

    def _validation_element(self, result: ValidationResult) -> etree._Element:
        element = etree.Element(
            "validationReport",
            profileName=result.profile_name,
            statement=result.statement,
            isCompliant=str(result.is_compliant).lower(),
        )
        passed_checks = sum(rule.passed_checks for rule in result.rule_summaries)
        failed_checks = sum(rule.failed_checks for rule in result.rule_summaries)
        details = etree.SubElement(
            element,
            "details",
            passedRules=str(len(result.passed_rules)),
            failedRules=str(len(result.failed_rules)),
            passedChecks=str(passed_checks),
            failedChecks=str(failed_checks),
        )

        for summary in result.rule_summaries:
            rule_id = summary.rule_id
            rule = etree.SubElement(
                details,
                "rule",
                specification=rule_id.specification,
                clause=rule_id.clause,
                testNumber=str(rule_id.test_number),
                status=summary.status.value,
                passedChecks=str(summary.passed_checks),
                failedChecks=str(summary.failed_checks),
            )
            etree.SubElement(rule, "description").text = summary.description
            for assertion in result.assertions:
                if assertion.rule_id != rule_id:
                    continue
                check = etree.SubElement(rule, "check", status=assertion.status.value)
                etree.SubElement(check, "context").text = assertion.location.context
                if assertion.status is AssertionStatus.FAILED:
                    etree.SubElement(check, "errorMessage").text = assertion.message
        return element

    def _summary_element(self, summary: BatchSummary) -> etree._Element:
        element = etree.Element(
            "batchSummary",
            totalJobs=str(summary.total_jobs),
            failedToParse=str(summary.failed_to_parse),
            encrypted=str(summary.encrypted),
            validationExceptions=str(summary.validation_exceptions),
        )
        etree.SubElement(
            element,
            "validationReports",
            compliant=str(summary.compliant),
            nonCompliant=str(summary.non_compliant),
            failedJobs=str(summary.failed_jobs),
        )
        etree.SubElement(element, "featureReports").text = str(summary.feature_reports)
        etree.SubElement(element, "repairReports").text = str(summary.fixes_applied)
        duration = etree.SubElement(
            element,
            "duration",
            start=_iso(summary.started_at),
            finish=_iso(summary.finished_at),
        )
        duration.text = str(summary.duration_ms)
        return element
