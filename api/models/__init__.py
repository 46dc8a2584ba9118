# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Models package - Pydantic schemas and data models for the PAJ-SM+ program core.
"""

# Base models
from .base import BaseEntity, BaseEntityCreate, generate_id, utc_now

# Enumerations
from .enums import (
    VulnerabilityType,
    VULNERABILITY_LABELS,
    ProsecutionMode,
    VictimConsentMode,
    ExclusionBucket,
    Stage,
    STAGE_SEQUENCE,
    ProgramOutcome,
    ProgramAction
)

# Request models
from .requests import (
    EligibilityInput,
    EnrollmentRequest,
    CreateInterventionPlanRequest,
    CreateFollowUpRequest,
    ParticipantFilters
)

# Core entities
from .entities import (
    EligibilitySnapshot,
    Participant,
    InterventionPlan,
    FollowUp
)

# Response models
from .responses import (
    EligibilityVerdict,
    VulnerabilityTypeInfo
)

__all__ = [
    # Base models
    "BaseEntity",
    "BaseEntityCreate",
    "generate_id",
    "utc_now",

    # Enumerations
    "VulnerabilityType",
    "VULNERABILITY_LABELS",
    "ProsecutionMode",
    "VictimConsentMode",
    "ExclusionBucket",
    "Stage",
    "STAGE_SEQUENCE",
    "ProgramOutcome",
    "ProgramAction",

    # Request models
    "EligibilityInput",
    "EnrollmentRequest",
    "CreateInterventionPlanRequest",
    "CreateFollowUpRequest",
    "ParticipantFilters",

    # Core entities
    "EligibilitySnapshot",
    "Participant",
    "InterventionPlan",
    "FollowUp",

    # Response models
    "EligibilityVerdict",
    "VulnerabilityTypeInfo"
]
