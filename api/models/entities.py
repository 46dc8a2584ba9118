# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Core entity models for the PAJ-SM+ program.
"""

from datetime import datetime
from typing import List, Optional, Tuple
from pydantic import BaseModel, Field, field_validator, model_validator, ConfigDict
from .base import BaseEntity, utc_now
from .enums import (
    Stage,
    STAGE_SEQUENCE,
    ProgramOutcome,
    ProsecutionMode,
    VictimConsentMode
)
from .requests import EligibilityInput


class EligibilitySnapshot(BaseModel):
    """Frozen copy of the eligibility facts that qualified a participant."""

    model_config = ConfigDict(
        frozen=True,
        use_enum_values=True
    )

    vulnerabilities: Tuple[str, ...] = Field(..., description="Declared vulnerability keys")
    diagnosed: bool = Field(default=False, description="Vulnerability has a formal diagnosis")
    offence_description: Optional[str] = Field(None, description="Free-text offence summary")
    offence_category: Optional[str] = Field(None, description="Offence category identifier")
    prosecution_mode: Optional[ProsecutionMode] = Field(None, description="Summary or indictment")
    accepts_responsibility: bool = Field(..., description="Accused accepts responsibility")
    is_voluntary: bool = Field(..., description="Participation is voluntary")
    waives_delay: bool = Field(..., description="Accused waives delay rights")
    criminally_fit: bool = Field(..., description="Accused is criminally fit and responsible")
    victim_consent: Optional[bool] = Field(None, description="Victim consent")
    victim_consent_mode: Optional[VictimConsentMode] = Field(None, description="How consent was given")

    @classmethod
    def from_input(cls, data: EligibilityInput) -> "EligibilitySnapshot":
        """Capture the eligibility fields of an intake request."""
        return cls(**data.model_dump(include=set(cls.model_fields)))


class Participant(BaseEntity):
    """Person enrolled in the program and their position in it."""

    referral_id: Optional[str] = Field(None, description="Originating referral ID")
    accused_name: str = Field(..., min_length=1, max_length=255, description="Accused full name")
    district: Optional[str] = Field(None, max_length=255, description="Judicial district")
    eligibility: EligibilitySnapshot = Field(..., description="Facts that qualified the participant")
    stage: Stage = Field(default=Stage.REFERRAL, description="Current program stage")
    enrolled_at: Optional[datetime] = Field(None, description="Set when leaving the referral stage")
    completed_at: Optional[datetime] = Field(None, description="Set when a final outcome is recorded")
    outcome: Optional[ProgramOutcome] = Field(None, description="Final outcome")
    withdrawal_reason: Optional[str] = Field(None, description="Reason given on withdrawal")
    revision: int = Field(default=0, ge=0, description="Optimistic concurrency counter")

    @field_validator('accused_name')
    @classmethod
    def validate_accused_name(cls, v):
        """Validate accused name."""
        if not v.strip():
            raise ValueError('Accused name cannot be empty')
        return v.strip()

    @model_validator(mode='after')
    def validate_outcome_fields(self):
        """Validate outcome-dependent fields."""
        if self.outcome is not None and self.completed_at is None:
            raise ValueError('completed_at is required when an outcome is recorded')

        if self.outcome == ProgramOutcome.COMPLETED and self.stage != Stage.PROGRAM_OUTCOME:
            raise ValueError('A completed outcome requires the program_outcome stage')

        return self

    def has_final_outcome(self) -> bool:
        """Check if a terminal outcome has been recorded."""
        return self.outcome is not None

    def is_active(self) -> bool:
        """Check if participant is still progressing through the program."""
        return not self.has_final_outcome()

    def next_stage(self) -> Optional[Stage]:
        """Return the successor of the current stage, if any."""
        try:
            index = STAGE_SEQUENCE.index(Stage(self.stage))
        except ValueError:
            return None

        if index + 1 >= len(STAGE_SEQUENCE):
            return None
        return STAGE_SEQUENCE[index + 1]

    def advance(self, user_id: Optional[str], when: Optional[datetime] = None) -> None:
        """Move to the next stage and apply its side effects."""
        next_stage = self.next_stage()
        if next_stage is None:
            raise ValueError('Cannot advance beyond final stage')
        if self.has_final_outcome():
            raise ValueError('Participant already has a final outcome')

        when = when or utc_now()
        self.stage = next_stage

        if next_stage == Stage.PROSECUTOR_EVALUATION and self.enrolled_at is None:
            self.enrolled_at = when

        if next_stage == Stage.PROGRAM_OUTCOME:
            # completed_at first: the outcome validator runs on every assignment
            self.completed_at = when
            self.outcome = ProgramOutcome.COMPLETED

        self.update_timestamp(user_id, when)

    def withdraw(self, user_id: Optional[str], reason: Optional[str], when: Optional[datetime] = None) -> None:
        """Record a voluntary exit from the program."""
        if self.has_final_outcome():
            raise ValueError('Participant already has a final outcome')

        when = when or utc_now()
        self.completed_at = when
        self.outcome = ProgramOutcome.WITHDRAWN
        self.withdrawal_reason = reason
        self.update_timestamp(user_id, when)

    def revoke_victim_consent(self, user_id: Optional[str], when: Optional[datetime] = None) -> None:
        """Record revoked victim consent and return the case to court."""
        if self.has_final_outcome():
            raise ValueError('Participant already has a final outcome')

        when = when or utc_now()
        self.eligibility = self.eligibility.model_copy(update={"victim_consent": False})
        self.completed_at = when
        self.outcome = ProgramOutcome.RETURNED_TO_COURT
        self.update_timestamp(user_id, when)


class InterventionPlan(BaseEntity):
    """Clinical intervention plan drafted during the intervention_plan stage."""

    participant_id: str = Field(..., description="Owning participant ID")
    plan_details: Optional[str] = Field(None, description="Plan narrative")
    objectives: List[str] = Field(default_factory=list, description="Plan objectives")


class FollowUp(BaseEntity):
    """Judicial follow-up recorded during the hearing_followups stage."""

    participant_id: str = Field(..., description="Owning participant ID")
    follow_up_date: datetime = Field(..., description="Date of the follow-up hearing")
    notes: Optional[str] = Field(None, description="Follow-up notes")
