"""
PDF/A validator: evaluates a profile's rules against a parsed document.
"""
import logging
from dataclasses import dataclass
from typing import List

from pypdf.errors import PyPdfError

from pdfa_service.core.error_handling import ValidationEngineError
from pdfa_service.engine.parser import PDFAParser
from pdfa_service.engine.profiles import ValidationProfile
from pdfa_service.engine.results import (
    AssertionStatus,
    Location,
    RuleAssertion,
    RuleSummary,
    ValidationResult,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidatorConfig:
    """Validator settings for one profile."""

    profile: ValidationProfile
    record_passed: bool = False
    max_failed_checks: int = -1  # -1 records every failed check


class PDFAValidator:
    """Validates parsed documents against a single profile."""

    def __init__(self, config: ValidatorConfig):
        self.config = config

    @property
    def profile(self) -> ValidationProfile:
        return self.config.profile

    def validate(self, parser: PDFAParser) -> ValidationResult:
        """
        Run every rule of the profile against the parser's document.

        All rules are evaluated so compliance is exact; only the number of
        failed assertions kept in the result is bounded by
        ``max_failed_checks``.

        Raises:
            ValidationEngineError: If a rule cannot be evaluated because the
                document structure is damaged
        """
        document = parser.document
        assertions: List[RuleAssertion] = []
        summaries: List[RuleSummary] = []
        total_assertions = 0
        recorded_failures = 0
        truncated = False
        limit = self.config.max_failed_checks

        for rule in self.profile.rules:
            rule_id = self.profile.rule_id(rule)
            try:
                deviations = rule.check(document, self.profile)
            except (PyPdfError, KeyError, ValueError, AttributeError) as exc:
                raise ValidationEngineError(f"Rule {rule_id} could not be evaluated: {exc}") from exc

            if not deviations:
                total_assertions += 1
                summaries.append(RuleSummary(
                    rule_id=rule_id,
                    description=rule.description,
                    status=AssertionStatus.PASSED,
                    passed_checks=1,
                ))
                if self.config.record_passed:
                    assertions.append(RuleAssertion(
                        rule_id=rule_id,
                        status=AssertionStatus.PASSED,
                        message=rule.description,
                        location=Location(level=rule.object_type, context="root"),
                    ))
                continue

            total_assertions += len(deviations)
            summaries.append(RuleSummary(
                rule_id=rule_id,
                description=rule.description,
                status=AssertionStatus.FAILED,
                failed_checks=len(deviations),
            ))
            for deviation in deviations:
                if 0 <= limit <= recorded_failures:
                    truncated = True
                    break
                assertions.append(RuleAssertion(
                    rule_id=rule_id,
                    status=AssertionStatus.FAILED,
                    message=deviation.message,
                    location=Location(level=rule.object_type, context=deviation.context),
                ))
                recorded_failures += 1

        is_compliant = all(summary.status is AssertionStatus.PASSED for summary in summaries)
        logger.debug(
            f"Validated against {self.profile.id}: compliant={is_compliant}, "
            f"assertions={total_assertions}, failed_rules={sum(1 for s in summaries if s.failed_checks)}"
        )
        return ValidationResult(
            pdfa_flavour=self.profile.id,
            profile_name=self.profile.name,
            is_compliant=is_compliant,
            total_assertions=total_assertions,
            assertions=assertions,
            rule_summaries=summaries,
            assertions_truncated=truncated,
        )


class ValidatorFactory:
    """Creates validators and their configurations."""

    @staticmethod
    def create_config(
        profile: ValidationProfile,
        record_passed: bool = False,
        max_failed_checks: int = -1
    ) -> ValidatorConfig:
        return ValidatorConfig(profile=profile, record_passed=record_passed, max_failed_checks=max_failed_checks)

    @staticmethod
    def create_validator(
        profile: ValidationProfile,
        record_passed: bool = False,
        max_failed_checks: int = -1
    ) -> PDFAValidator:
        return PDFAValidator(ValidatorFactory.create_config(profile, record_passed, max_failed_checks))

    @staticmethod
    def from_config(config: ValidatorConfig) -> PDFAValidator:
        return PDFAValidator(config)
