"""
Validation profile registry.

Profiles are identified by PDF/A flavour id (part number plus conformance
level, e.g. "1b", "2u"). The directory is built once at startup and is
read-only afterwards.
"""
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Tuple

from pdfa_service.core.error_handling import UnknownProfileError
from pdfa_service.engine import rules as checks
from pdfa_service.engine.results import ProfileSummary, RuleDescription, RuleId
from pdfa_service.engine.rules import Rule

SPECIFICATIONS = {
    1: "ISO 19005-1:2005",
    2: "ISO 19005-2:2011",
    3: "ISO 19005-3:2012",
}

LEVEL_NAMES = {
    "a": "Level A (accessible)",
    "b": "Level B (basic)",
    "u": "Level U (Unicode)",
}

FLAVOUR_IDS = ("1a", "1b", "2a", "2b", "2u", "3a", "3b", "3u")


@dataclass(frozen=True)
class ValidationProfile:
    """A named rule set for one PDF/A flavour."""

    id: str
    part: int
    level: str
    name: str
    description: str
    rules: Tuple[Rule, ...] = field(repr=False)

    @property
    def specification(self) -> str:
        return SPECIFICATIONS[self.part]

    def rule_id(self, rule: Rule) -> RuleId:
        return RuleId(specification=self.specification, clause=rule.clause, test_number=rule.test_number)

    def summary(self, include_rules: bool = False) -> ProfileSummary:
        rules = None
        if include_rules:
            rules = [
                RuleDescription(rule_id=self.rule_id(rule), description=rule.description, object_type=rule.object_type)
                for rule in self.rules
            ]
        return ProfileSummary(
            id=self.id,
            name=self.name,
            description=self.description,
            specification=self.specification,
            rule_count=len(self.rules),
            rules=rules,
        )


class ProfileDirectory:
    """Read-only registry of validation profiles keyed by flavour id."""

    def __init__(self, profiles: Mapping[str, ValidationProfile]):
        self._profiles = MappingProxyType(dict(profiles))

    def get(self, profile_id: str) -> ValidationProfile:
        """Look up a profile, case-insensitively.

        Raises:
            UnknownProfileError: If no profile is registered under the id
        """
        profile = self._profiles.get((profile_id or "").strip().lower())
        if profile is None:
            raise UnknownProfileError(profile_id)
        return profile

    def __contains__(self, profile_id: str) -> bool:
        return (profile_id or "").strip().lower() in self._profiles

    def __iter__(self) -> Iterator[ValidationProfile]:
        return iter(self._profiles.values())

    def __len__(self) -> int:
        return len(self._profiles)

    @property
    def ids(self) -> List[str]:
        return list(self._profiles)


def _rules_for(part: int, level: str) -> Tuple[Rule, ...]:
    """Assemble the rule list for one flavour."""
    if part == 1:
        rules = [
            Rule("6.1.2", 1, "The % character of the file header shall occur at byte offset 0 of the file",
                 "CosDocument", checks.check_header_offset),
            Rule("6.1.3", 3, "No data shall follow the last end-of-file marker", "CosDocument",
                 checks.check_eof_marker),
            Rule("6.1.3", 2, "The Encrypt key shall not be present in the trailer dictionary", "CosTrailer",
                 checks.check_not_encrypted),
            Rule("6.1.11", 1, "A file's name dictionary shall not contain the EmbeddedFiles key",
                 "PDNameTreeNode", checks.check_no_embedded_files),
            Rule("6.4", 3, "A Group object with an S key with a value of Transparency shall not be included "
                           "in a page dictionary", "PDPage", checks.check_no_transparency_group),
            Rule("6.6.1", 1, "The Launch, Sound, Movie, ResetForm, ImportData and JavaScript actions shall "
                             "not be permitted", "PDAction", checks.check_no_javascript),
            Rule("6.7.2", 1, "The document catalog dictionary shall contain a metadata stream", "PDDocument",
                 checks.check_metadata_present),
            Rule("6.7.11", 1, "The PDF/A version and conformance level of a file shall be specified using "
                              "the PDF/A Identification extension schema", "PDFAIdentification",
                 checks.check_identification),
        ]
        if level == "a":
            rules += [
                Rule("6.8.2.2", 1, "The document catalog dictionary shall include a MarkInfo dictionary with "
                                   "a Marked entry set to true", "CosDocument", checks.check_marked),
                Rule("6.8.3.3", 1, "The document catalog shall contain a logical structure tree",
                     "PDDocument", checks.check_structure_tree),
            ]
        return tuple(rules)

    rules = [
        Rule("6.1.2", 1, "The file header shall begin at byte zero", "CosDocument",
             checks.check_header_offset),
        Rule("6.1.3", 3, "No data shall follow the last end-of-file marker", "CosDocument",
             checks.check_eof_marker),
        Rule("6.1.3", 1, "The Encrypt key shall not be present in the trailer dictionary", "CosTrailer",
             checks.check_not_encrypted),
        Rule("6.6.1", 1, "The Launch, Sound, Movie, ResetForm, ImportData, Hide, SetOCGState, Rendition, "
                         "Trans, GoTo3DView and JavaScript actions shall not be permitted", "PDAction",
             checks.check_no_javascript),
        Rule("6.6.2.1", 1, "The Catalog dictionary of a conforming file shall contain the Metadata key",
             "PDDocument", checks.check_metadata_present),
        Rule("6.6.4", 1, "The PDF/A version and conformance level of a file shall be specified using the "
                         "PDF/A Identification extension schema", "PDFAIdentification",
             checks.check_identification),
    ]
    if level in ("a", "u"):
        rules.append(
            Rule("6.2.11.7", 1, "Fonts shall include a ToUnicode CMap so that text can be mapped to Unicode",
                 "PDFont", checks.check_fonts_to_unicode)
        )
    if level == "a":
        rules += [
            Rule("6.7.2.2", 1, "The document catalog dictionary shall include a MarkInfo dictionary with a "
                               "Marked entry set to true", "CosDocument", checks.check_marked),
            Rule("6.7.3.3", 1, "The document catalog shall contain a logical structure tree", "PDDocument",
                 checks.check_structure_tree),
        ]
    return tuple(rules)


def build_profile(flavour_id: str) -> ValidationProfile:
    part, level = int(flavour_id[0]), flavour_id[1]
    return ValidationProfile(
        id=flavour_id,
        part=part,
        level=level,
        name=f"PDF/A-{part}{level.upper()} validation profile",
        description=f"Validation rules against {SPECIFICATIONS[part]}, {LEVEL_NAMES[level]}",
        rules=_rules_for(part, level),
    )


def build_default_directory() -> ProfileDirectory:
    """Build the directory of every supported PDF/A flavour."""
    profiles: Dict[str, ValidationProfile] = {
        flavour_id: build_profile(flavour_id) for flavour_id in FLAVOUR_IDS
    }
    return ProfileDirectory(profiles)
