"""
Pydantic models for validation results.

Results serialize to camelCase JSON for API consumers and to XML for the
application/xml representation and the machine-readable report.
"""
from enum import Enum
from typing import List, Optional

from lxml import etree
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AssertionStatus(str, Enum):
    """Outcome of a single check."""
    PASSED = "PASSED"
    FAILED = "FAILED"


class RuleId(_CamelModel):
    """Identifies a rule by specification clause and test number."""

    specification: str
    clause: str
    test_number: int

    def __str__(self) -> str:
        return f"{self.specification} {self.clause}-{self.test_number}"


class Location(_CamelModel):
    """Where in the document a check was made."""

    level: str = "PDF"
    context: str = "root"


class RuleAssertion(_CamelModel):
    """A single check of a rule against part of the document."""

    rule_id: RuleId
    status: AssertionStatus
    message: str
    location: Location = Field(default_factory=Location)


class RuleSummary(_CamelModel):
    """Aggregate of every check made for one rule."""

    rule_id: RuleId
    description: str
    status: AssertionStatus
    passed_checks: int = 0
    failed_checks: int = 0


class ValidationResult(_CamelModel):
    """Result of validating one document against one profile."""

    pdfa_flavour: str
    profile_name: str
    is_compliant: bool
    total_assertions: int
    assertions: List[RuleAssertion] = Field(default_factory=list)
    rule_summaries: List[RuleSummary] = Field(default_factory=list)
    assertions_truncated: bool = False

    @property
    def failed_rules(self) -> List[RuleSummary]:
        return [rule for rule in self.rule_summaries if rule.status is AssertionStatus.FAILED]

    @property
    def passed_rules(self) -> List[RuleSummary]:
        return [rule for rule in self.rule_summaries if rule.status is AssertionStatus.PASSED]

    @property
    def statement(self) -> str:
        if self.is_compliant:
            return "PDF file is compliant with Validation Profile requirements."
        return "PDF file is not compliant with Validation Profile requirements."

    def failed_clauses(self) -> set:
        """Clause identifiers of every failed rule."""
        return {rule.rule_id.clause for rule in self.failed_rules}

    def to_xml_element(self) -> etree._Element:
        """Build the <validationResult> element."""
        root = etree.Element(
            "validationResult",
            flavour=self.pdfa_flavour,
            profileName=self.profile_name,
            isCompliant=str(self.is_compliant).lower(),
            totalAssertions=str(self.total_assertions),
        )
        assertions = etree.SubElement(root, "assertions")
        for assertion in self.assertions:
            node = etree.SubElement(
                assertions,
                "assertion",
                status=assertion.status.value,
            )
            etree.SubElement(
                node,
                "ruleId",
                specification=assertion.rule_id.specification,
                clause=assertion.rule_id.clause,
                testNumber=str(assertion.rule_id.test_number),
            )
            etree.SubElement(node, "message").text = assertion.message
            etree.SubElement(
                node,
                "location",
                level=assertion.location.level,
                context=assertion.location.context,
            )
        return root

    def to_xml_bytes(self, pretty_print: bool = True) -> bytes:
        return etree.tostring(
            self.to_xml_element(),
            xml_declaration=True,
            encoding="UTF-8",
            pretty_print=pretty_print,
        )


class RuleDescription(_CamelModel):
    """A rule as registered in a profile."""

    rule_id: RuleId
    description: str
    object_type: str


class ProfileSummary(_CamelModel):
    """Public description of a registered validation profile."""

    id: str
    name: str
    description: str
    specification: str
    rule_count: int
    rules: Optional[List[RuleDescription]] = None
