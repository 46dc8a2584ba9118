# SPDX-License-Identifier: Apache-2.0

"""
PAJ-SM+ stage progression logic.

This module contains pure functions for enrolling participants, moving them
through the fixed stage sequence, recording terminal outcomes, and creating
stage-scoped records. Operations never mutate the participant they receive;
they return a WorkflowResult holding an updated copy or a tagged failure.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar
from pydantic import BaseModel, ValidationError

from models.entities import (
    Participant,
    EligibilitySnapshot,
    InterventionPlan,
    FollowUp
)
from models.enums import Stage, ProgramAction
from models.requests import (
    EnrollmentRequest,
    CreateInterventionPlanRequest,
    CreateFollowUpRequest,
    ParticipantFilters
)
from .eligibility import evaluate
from .errors import ErrorKind
from .results import ValidationResult, WorkflowResult

RequestModel = TypeVar('RequestModel', bound=BaseModel)

NOT_ELIGIBLE_MESSAGE = "Participant is not eligible for PAJ-SM+"
FINAL_STAGE_MESSAGE = "Cannot advance beyond final stage"
FINAL_OUTCOME_MESSAGE = "Participant already has a final outcome"
PLAN_STAGE_MESSAGE = "Intervention plans can only be created during the intervention_plan stage"
FOLLOW_UP_STAGE_MESSAGE = "Follow-ups can only be added during the hearing_followups stage"


def format_validation_errors(validation_error: ValidationError) -> List[str]:
    """
    Format Pydantic validation errors as reason strings.

    Args:
        validation_error: Pydantic ValidationError

    Returns:
        List of "field: message" strings
    """
    errors = []

    for error in validation_error.errors():
        field_path = ".".join(str(loc) for loc in error["loc"])
        errors.append(f"{field_path}: {error['msg']}" if field_path else error["msg"])

    return errors


def parse_request(
    model_class: Type[RequestModel],
    data: Any
) -> Tuple[Optional[RequestModel], List[str]]:
    """Coerce raw details into a request model, collecting errors instead of raising."""
    if isinstance(data, model_class):
        return data, []

    if isinstance(data, BaseModel):
        data = data.model_dump()

    try:
        return model_class.model_validate(data or {}), []
    except ValidationError as e:
        return None, format_validation_errors(e)


def _audit_fields(actor_id: Optional[str], now: Optional[datetime]) -> Dict[str, Any]:
    fields = {"created_by": actor_id, "updated_by": actor_id}
    if now is not None:
        fields.update(created_at=now, updated_at=now)
    return fields


def enroll(
    request: Any,
    actor_id: Optional[str] = None,
    now: Optional[datetime] = None
) -> WorkflowResult:
    """
    Enroll a candidate at the referral stage.

    Args:
        request: EnrollmentRequest or raw mapping
        actor_id: User enrolling the participant
        now: Clock override

    Returns:
        WorkflowResult with the new Participant, or a validation failure
        carrying every eligibility reason
    """
    verdict = evaluate(request)
    if not verdict.eligible:
        return WorkflowResult.failure(ErrorKind.VALIDATION, NOT_ELIGIBLE_MESSAGE, verdict.reasons)

    enrollment, errors = parse_request(EnrollmentRequest, request)
    if enrollment is None:
        return WorkflowResult.failure(ErrorKind.VALIDATION, "Invalid enrollment request", errors)

    participant = Participant(
        referral_id=enrollment.referral_id,
        accused_name=enrollment.accused_name,
        district=enrollment.district,
        eligibility=EligibilitySnapshot.from_input(enrollment),
        stage=Stage.REFERRAL,
        **_audit_fields(actor_id, now)
    )

    return WorkflowResult.ok(participant)


def validate_advance_request(participant: Participant) -> ValidationResult:
    """
    Validate that a participant can move to the next stage.

    The final-stage check runs first so a participant sitting at
    program_outcome always reports the end of the sequence.
    """
    if participant.next_stage() is None:
        return ValidationResult(
            is_valid=False,
            errors=[FINAL_STAGE_MESSAGE],
            error_kind=ErrorKind.FINAL_STAGE
        )

    if participant.has_final_outcome():
        return ValidationResult(
            is_valid=False,
            errors=[FINAL_OUTCOME_MESSAGE],
            error_kind=ErrorKind.FINAL_OUTCOME
        )

    return ValidationResult(is_valid=True)


def validate_exit_request(participant: Participant) -> ValidationResult:
    """Validate that no final outcome has been recorded yet."""
    if participant.has_final_outcome():
        return ValidationResult(
            is_valid=False,
            errors=[FINAL_OUTCOME_MESSAGE],
            error_kind=ErrorKind.FINAL_OUTCOME
        )

    return ValidationResult(is_valid=True)


def validate_stage_gate(participant: Participant, required_stage: Stage, message: str) -> ValidationResult:
    """Validate that the participant sits in the stage owning a record type."""
    if participant.stage != required_stage:
        return ValidationResult(
            is_valid=False,
            errors=[message],
            error_kind=ErrorKind.WRONG_STAGE
        )

    return ValidationResult(is_valid=True)


def advance_stage(
    participant: Participant,
    actor_id: Optional[str] = None,
    now: Optional[datetime] = None
) -> WorkflowResult:
    """
    Move a participant to the next stage of the sequence.

    Entering prosecutor_evaluation stamps enrolled_at once; entering
    program_outcome stamps completed_at and records the completed outcome.

    Args:
        participant: Current participant record
        actor_id: User performing the transition
        now: Clock override

    Returns:
        WorkflowResult with the updated participant or a domain failure
    """
    validation = validate_advance_request(participant)
    if not validation.is_valid:
        return WorkflowResult.from_validation(validation, FINAL_STAGE_MESSAGE)

    updated = participant.model_copy()
    updated.advance(actor_id, now)

    return WorkflowResult.ok(updated)


def withdraw(
    participant: Participant,
    reason: Any = None,
    actor_id: Optional[str] = None,
    now: Optional[datetime] = None
) -> WorkflowResult:
    """
    Withdraw a participant from the program.

    The stage is left where it was; withdrawal is an exit, not a completion.
    """
    validation = validate_exit_request(participant)
    if not validation.is_valid:
        return WorkflowResult.from_validation(validation, FINAL_OUTCOME_MESSAGE)

    if reason is not None:
        reason = str(reason).strip() or None

    updated = participant.model_copy()
    updated.withdraw(actor_id, reason, now)

    return WorkflowResult.ok(updated)


def revoke_victim_consent(
    participant: Participant,
    actor_id: Optional[str] = None,
    now: Optional[datetime] = None
) -> WorkflowResult:
    """
    Record revoked victim consent and return the case to court.

    Eligibility is not evaluated again: revocation is an unconditional exit,
    including for offences that never required consent.
    """
    validation = validate_exit_request(participant)
    if not validation.is_valid:
        return WorkflowResult.from_validation(validation, FINAL_OUTCOME_MESSAGE)

    updated = participant.model_copy()
    updated.revoke_victim_consent(actor_id, now)

    return WorkflowResult.ok(updated)


def create_intervention_plan(
    participant: Participant,
    details: Any = None,
    actor_id: Optional[str] = None,
    now: Optional[datetime] = None
) -> WorkflowResult:
    """
    Create an intervention plan for a participant in the intervention_plan stage.

    Args:
        participant: Owning participant
        details: CreateInterventionPlanRequest or raw mapping
        actor_id: Clinician drafting the plan
        now: Clock override

    Returns:
        WorkflowResult with the InterventionPlan or a failure
    """
    validation = validate_stage_gate(participant, Stage.INTERVENTION_PLAN, PLAN_STAGE_MESSAGE)
    if not validation.is_valid:
        return WorkflowResult.from_validation(validation, PLAN_STAGE_MESSAGE)

    plan_request, errors = parse_request(CreateInterventionPlanRequest, details)
    if plan_request is None:
        return WorkflowResult.failure(ErrorKind.VALIDATION, "Invalid intervention plan", errors)

    plan = InterventionPlan(
        participant_id=participant.id,
        plan_details=plan_request.plan_details,
        objectives=plan_request.objectives,
        **_audit_fields(actor_id, now)
    )

    return WorkflowResult.ok(plan)


def add_follow_up(
    participant: Participant,
    details: Any = None,
    actor_id: Optional[str] = None,
    now: Optional[datetime] = None
) -> WorkflowResult:
    """
    Record a follow-up for a participant in the hearing_followups stage.

    Args:
        participant: Owning participant
        details: CreateFollowUpRequest or raw mapping
        actor_id: Tribunal member recording the follow-up
        now: Clock override

    Returns:
        WorkflowResult with the FollowUp or a failure
    """
    validation = validate_stage_gate(participant, Stage.HEARING_FOLLOWUPS, FOLLOW_UP_STAGE_MESSAGE)
    if not validation.is_valid:
        return WorkflowResult.from_validation(validation, FOLLOW_UP_STAGE_MESSAGE)

    follow_up_request, errors = parse_request(CreateFollowUpRequest, details)
    if follow_up_request is None:
        return WorkflowResult.failure(ErrorKind.VALIDATION, "Invalid follow-up", errors)

    follow_up = FollowUp(
        participant_id=participant.id,
        follow_up_date=follow_up_request.follow_up_date,
        notes=follow_up_request.notes,
        **_audit_fields(actor_id, now)
    )

    return WorkflowResult.ok(follow_up)


def allowed_actions(participant: Participant) -> List[ProgramAction]:
    """
    List the actions that would succeed on a participant right now.

    Args:
        participant: Participant record

    Returns:
        Ordered list of ProgramAction values
    """
    actions = []

    if validate_advance_request(participant).is_valid:
        actions.append(ProgramAction.ADVANCE_STAGE)

    if validate_exit_request(participant).is_valid:
        actions.append(ProgramAction.WITHDRAW)
        actions.append(ProgramAction.REVOKE_VICTIM_CONSENT)

    if participant.stage == Stage.INTERVENTION_PLAN:
        actions.append(ProgramAction.CREATE_INTERVENTION_PLAN)

    if participant.stage == Stage.HEARING_FOLLOWUPS:
        actions.append(ProgramAction.ADD_FOLLOW_UP)

    return actions


def filter_participants(
    participants: List[Participant],
    filters: ParticipantFilters
) -> List[Participant]:
    """
    Filter participants based on criteria.

    Args:
        participants: List of participants to filter
        filters: Filter criteria

    Returns:
        Filtered list of participants
    """
    filtered = participants

    # Filter by stage
    if filters.stage is not None:
        filtered = [p for p in filtered if p.stage == filters.stage]

    # Filter by outcome
    if filters.outcome is not None:
        filtered = [p for p in filtered if p.outcome == filters.outcome]

    if filters.active_only:
        filtered = [p for p in filtered if p.is_active()]

    if filters.district:
        district = filters.district.strip().lower()
        filtered = [p for p in filtered if p.district and p.district.lower() == district]

    # Search by accused name
    if filters.search and filters.search.strip():
        search_lower = filters.search.strip().lower()
        filtered = [p for p in filtered if search_lower in p.accused_name.lower()]

    return filtered
