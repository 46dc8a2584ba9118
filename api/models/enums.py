# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Enumeration types for the PAJ-SM+ program core.
"""

from enum import Enum


class VulnerabilityType(str, Enum):
    """Recognized vulnerabilities that open access to the program."""
    MENTAL_HEALTH_DISORDER = "mental_health_disorder"
    INTELLECTUAL_DISABILITY = "intellectual_disability"
    ASD = "asd"
    SUBSTANCE_USE_DISORDER = "substance_use_disorder"
    TRAUMATIC_BRAIN_INJURY = "traumatic_brain_injury"

    @property
    def label(self) -> str:
        """Human-readable display label."""
        return VULNERABILITY_LABELS[self]


VULNERABILITY_LABELS = {
    VulnerabilityType.MENTAL_HEALTH_DISORDER: "Mental health disorder (DSM-5)",
    VulnerabilityType.INTELLECTUAL_DISABILITY: "Intellectual disability (DI)",
    VulnerabilityType.ASD: "Autism spectrum disorder (TSA)",
    VulnerabilityType.SUBSTANCE_USE_DISORDER: "Substance use disorder",
    VulnerabilityType.TRAUMATIC_BRAIN_INJURY: "Traumatic brain injury (TCC)",
}


class ProsecutionMode(str, Enum):
    """How the Crown proceeds with the charge."""
    SUMMARY = "summary"
    INDICTMENT = "indictment"


class VictimConsentMode(str, Enum):
    """How victim consent was collected."""
    WRITTEN = "written"
    VERBAL = "verbal"


class ExclusionBucket(str, Enum):
    """Rule-table classification of an offence category."""
    ABSOLUTE = "absolute"
    CONDITIONAL = "conditional"
    UNRESTRICTED = "unrestricted"


class Stage(str, Enum):
    """Program stages, declared in their fixed progression order."""
    REFERRAL = "referral"
    PROSECUTOR_EVALUATION = "prosecutor_evaluation"
    CLINICAL_ELIGIBILITY = "clinical_eligibility"
    INTERVENTION_PLAN = "intervention_plan"
    HEARING_FOLLOWUPS = "hearing_followups"
    PROGRAM_OUTCOME = "program_outcome"


STAGE_SEQUENCE = tuple(Stage)


class ProgramOutcome(str, Enum):
    """Terminal outcomes. Once recorded they never change."""
    COMPLETED = "completed"
    WITHDRAWN = "withdrawn"
    RETURNED_TO_COURT = "returned_to_court"


class ProgramAction(str, Enum):
    """Actions a caller can attempt on a participant."""
    ADVANCE_STAGE = "advance_stage"
    WITHDRAW = "withdraw"
    REVOKE_VICTIM_CONSENT = "revoke_victim_consent"
    CREATE_INTERVENTION_PLAN = "create_intervention_plan"
    ADD_FOLLOW_UP = "add_follow_up"
