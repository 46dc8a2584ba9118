# SPDX-License-Identifier: Apache-2.0

"""
Eligibility rules for PAJ-SM+ intake.

This module contains pure functions that evaluate a candidate's declared facts
against the program's static rule table. Every check runs on every call so the
verdict lists all failing reasons at once.
"""

from typing import Any, Callable, List, Mapping, Tuple, Union
from pydantic import BaseModel

from models.enums import (
    VulnerabilityType,
    VULNERABILITY_LABELS,
    ProsecutionMode,
    ExclusionBucket
)
from models.requests import EligibilityInput
from models.responses import EligibilityVerdict, VulnerabilityTypeInfo


VALID_VULNERABILITIES: Tuple[str, ...] = tuple(v.value for v in VulnerabilityType)

ABSOLUTE_EXCLUSIONS: Tuple[str, ...] = (
    'death_resulting_offences',
    'attempted_or_conspired_death_offences',
    'superior_court_jurisdiction',
    'sexual_offences_against_minors',
    'transport_offences_causing_injury',
    'terrorism',
    'criminal_organization',
    'firearms_weapons_by_indictment',
)

# Excluded unless prosecuted summarily with victim consent
SUMMARY_ELIGIBLE_EXCEPTIONS: Tuple[str, ...] = (
    'domestic_violence',
    'sexual_violence',
    'elder_abuse',
)

# Published order of the exclusion list
EXCLUSIONS: Tuple[str, ...] = (
    'death_resulting_offences',
    'attempted_or_conspired_death_offences',
    'superior_court_jurisdiction',
    'sexual_offences_against_minors',
    'domestic_violence',
    'sexual_violence',
    'elder_abuse',
    'transport_offences_causing_injury',
    'terrorism',
    'criminal_organization',
    'firearms_weapons_by_indictment',
)

ELIGIBILITY_CRITERIA: Tuple[str, ...] = (
    'admissible_offence',
    'accepts_responsibility',
    'voluntary_participation',
    'capacity_to_learn',
    'waives_delay_rights',
    'criminally_fit_and_responsible',
)

ATTESTATIONS: Tuple[Tuple[str, str], ...] = (
    ('accepts_responsibility', 'Accused must accept responsibility'),
    ('is_voluntary', 'Participation must be voluntary'),
    ('waives_delay', 'Accused must waive delay rights'),
    ('criminally_fit', 'Accused must be criminally fit and responsible'),
)

EligibilityData = Union[EligibilityInput, Mapping[str, Any]]


def _as_facts(data: Any) -> Mapping[str, Any]:
    """Read declared facts from a request model or a raw mapping."""
    if isinstance(data, BaseModel):
        return data.model_dump()
    if isinstance(data, Mapping):
        return data
    return {}


def check_vulnerabilities(facts: Mapping[str, Any]) -> List[str]:
    """At least one declared vulnerability must be recognized."""
    vulnerabilities = facts.get('vulnerabilities')
    if isinstance(vulnerabilities, (str, bytes)) or not isinstance(vulnerabilities, (list, tuple, set, frozenset)):
        vulnerabilities = []

    if any(v in VALID_VULNERABILITIES for v in vulnerabilities):
        return []
    return ['At least one recognized vulnerability is required']


def check_absolute_exclusion(facts: Mapping[str, Any]) -> List[str]:
    """Absolutely excluded offences can never enter the program."""
    category = facts.get('offence_category')
    if category in ABSOLUTE_EXCLUSIONS:
        return [f'Offence category "{category}" is absolutely excluded from PAJ-SM+']
    return []


def check_conditional_exclusion(facts: Mapping[str, Any]) -> List[str]:
    """Summary-eligible exceptions need summary prosecution and victim consent."""
    category = facts.get('offence_category')
    if category not in SUMMARY_ELIGIBLE_EXCEPTIONS:
        return []

    reasons = []
    if facts.get('prosecution_mode') != ProsecutionMode.SUMMARY.value:
        reasons.append(f'Offence category "{category}" requires summary prosecution mode')
    if facts.get('victim_consent') is not True:
        reasons.append(f'Offence category "{category}" requires victim consent')
    return reasons


def check_attestations(facts: Mapping[str, Any]) -> List[str]:
    """Each attestation must be affirmed."""
    return [message for field_name, message in ATTESTATIONS if not facts.get(field_name)]


ELIGIBILITY_CHECKS: Tuple[Callable[[Mapping[str, Any]], List[str]], ...] = (
    check_vulnerabilities,
    check_absolute_exclusion,
    check_conditional_exclusion,
    check_attestations,
)


def evaluate(data: EligibilityData) -> EligibilityVerdict:
    """
    Evaluate a candidate against the PAJ-SM+ rule table.

    Missing or malformed fields count as failing conditions; this function
    never raises for bad input.

    Args:
        data: EligibilityInput or raw mapping of declared facts

    Returns:
        EligibilityVerdict listing every failing reason in check order
    """
    facts = _as_facts(data)

    reasons: List[str] = []
    for check in ELIGIBILITY_CHECKS:
        reasons.extend(check(facts))

    return EligibilityVerdict(eligible=not reasons, reasons=reasons)


def classify_offence(category: Any) -> ExclusionBucket:
    """Return the rule-table bucket of an offence category."""
    if category in ABSOLUTE_EXCLUSIONS:
        return ExclusionBucket.ABSOLUTE
    if category in SUMMARY_ELIGIBLE_EXCEPTIONS:
        return ExclusionBucket.CONDITIONAL
    return ExclusionBucket.UNRESTRICTED


def list_exclusion_categories() -> List[str]:
    """Full list of excluded offence categories, absolute and conditional."""
    return list(EXCLUSIONS)


def list_vulnerability_types() -> List[VulnerabilityTypeInfo]:
    """Recognized vulnerabilities with their display labels."""
    return [
        VulnerabilityTypeInfo(key=vulnerability.value, label=VULNERABILITY_LABELS[vulnerability])
        for vulnerability in VulnerabilityType
    ]


def list_eligibility_criteria() -> List[str]:
    """Published program admission criteria."""
    return list(ELIGIBILITY_CRITERIA)
