# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Request models for program operations.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
from .base import BaseEntityCreate
from .enums import ProsecutionMode, VictimConsentMode, Stage, ProgramOutcome


class EligibilityInput(BaseEntityCreate):
    """Facts declared for a candidate at intake."""

    vulnerabilities: List[str] = Field(default_factory=list, description="Declared vulnerability keys")
    offence_category: Optional[str] = Field(None, description="Offence category identifier")
    prosecution_mode: Optional[ProsecutionMode] = Field(None, description="Summary or indictment")
    victim_consent: Optional[bool] = Field(None, description="Victim consent, for conditionally excluded offences")
    victim_consent_mode: Optional[VictimConsentMode] = Field(None, description="How consent was given")
    accepts_responsibility: bool = Field(default=False, description="Accused accepts responsibility")
    is_voluntary: bool = Field(default=False, description="Participation is voluntary")
    waives_delay: bool = Field(default=False, description="Accused waives delay rights")
    criminally_fit: bool = Field(default=False, description="Accused is criminally fit and responsible")
    diagnosed: bool = Field(default=False, description="Vulnerability has a formal diagnosis")
    offence_description: Optional[str] = Field(None, max_length=2000, description="Free-text offence summary")


class EnrollmentRequest(EligibilityInput):
    """Request model for enrolling a participant."""

    accused_name: str = Field(..., min_length=1, max_length=255, description="Accused full name")
    district: Optional[str] = Field(None, max_length=255, description="Judicial district")
    referral_id: Optional[str] = Field(None, description="Originating referral ID")

    @field_validator('accused_name')
    @classmethod
    def validate_accused_name(cls, v):
        """Validate accused name."""
        if not v.strip():
            raise ValueError('Accused name cannot be empty')
        return v.strip()


class CreateInterventionPlanRequest(BaseEntityCreate):
    """Request model for creating an intervention plan."""

    plan_details: Optional[str] = Field(None, max_length=5000, description="Plan narrative")
    objectives: List[str] = Field(default_factory=list, description="Plan objectives")

    @field_validator('objectives')
    @classmethod
    def validate_objectives(cls, v):
        """Drop blank objectives."""
        return [objective.strip() for objective in v if objective and objective.strip()]


class CreateFollowUpRequest(BaseEntityCreate):
    """Request model for recording a hearing follow-up."""

    follow_up_date: datetime = Field(..., description="Date of the follow-up hearing")
    notes: Optional[str] = Field(None, max_length=5000, description="Follow-up notes")


class ParticipantFilters(BaseModel):
    """Filters for participant queries."""

    stage: Optional[Stage] = Field(None, description="Filter by stage")
    outcome: Optional[ProgramOutcome] = Field(None, description="Filter by outcome")
    district: Optional[str] = Field(None, description="Filter by district")
    active_only: bool = Field(default=False, description="Only participants without an outcome")
    search: Optional[str] = Field(None, description="Search in accused name")
