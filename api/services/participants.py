# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Participant service: lookup, domain transition, commit.

The domain functions stay pure; this layer adds persistence through the
repository port, tracing, and structured logging.
"""

import logging
from typing import Any, Callable, List, Optional
from opentelemetry import trace

from domain import eligibility, program
from domain.errors import ErrorKind
from domain.results import WorkflowResult
from models.entities import Participant
from models.requests import ParticipantFilters
from models.responses import EligibilityVerdict, VulnerabilityTypeInfo
from .repository import ParticipantRepository, InMemoryParticipantRepository

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

NOT_FOUND_MESSAGE = "PAJ-SM+ participant not found"


class ParticipantService:
    """Service coordinating PAJ-SM+ participants with their repository."""

    def __init__(self, repository: ParticipantRepository):
        """Initialize participant service with repository dependency."""
        self.repository = repository
        logger.info("Participant service initialized")

    # Reference data

    def check_eligibility(self, data: Any) -> EligibilityVerdict:
        """Evaluate a candidate without enrolling them."""
        with tracer.start_as_current_span("participants.check_eligibility") as span:
            verdict = eligibility.evaluate(data)
            span.set_attributes({
                "eligibility.eligible": verdict.eligible,
                "eligibility.reason_count": len(verdict.reasons)
            })
            logger.debug(
                "Eligibility evaluated",
                extra={"eligible": verdict.eligible, "reasons": verdict.reasons}
            )
            return verdict

    def list_exclusions(self) -> List[str]:
        return eligibility.list_exclusion_categories()

    def list_vulnerability_types(self) -> List[VulnerabilityTypeInfo]:
        return eligibility.list_vulnerability_types()

    # Participants

    def enroll(self, request: Any, actor_id: Optional[str] = None) -> WorkflowResult:
        """
        Enroll an eligible candidate and commit the new participant.

        Args:
            request: EnrollmentRequest or raw mapping
            actor_id: User enrolling the participant

        Returns:
            WorkflowResult with the stored participant or the eligibility failure
        """
        with tracer.start_as_current_span("participants.enroll") as span:
            result = program.enroll(request, actor_id=actor_id)

            if not result.success:
                span.set_attributes({
                    "workflow.success": False,
                    "workflow.error_kind": result.error_kind.value
                })
                logger.info(
                    "Enrollment rejected",
                    extra={
                        "actor_id": actor_id,
                        "error_kind": result.error_kind.value,
                        "reasons": result.validation_errors
                    }
                )
                return result

            participant = self.repository.save_participant(result.record)
            span.set_attributes({
                "workflow.success": True,
                "participant.id": participant.id,
                "participant.stage": participant.stage
            })
            logger.info(
                f"Participant enrolled: {participant.id}",
                extra={
                    "participant_id": participant.id,
                    "actor_id": actor_id,
                    "offence_category": participant.eligibility.offence_category
                }
            )
            return WorkflowResult.ok(participant)

    def get(self, participant_id: str) -> WorkflowResult:
        """Look up a participant by identity."""
        with tracer.start_as_current_span("participants.get") as span:
            span.set_attribute("participant.id", participant_id)

            participant = self.repository.get_participant(participant_id)
            if participant is None:
                span.set_attribute("workflow.error_kind", ErrorKind.NOT_FOUND.value)
                logger.debug(f"Participant {participant_id} not found")
                return WorkflowResult.failure(ErrorKind.NOT_FOUND, NOT_FOUND_MESSAGE)

            return WorkflowResult.ok(participant)

    def list(self, filters: Optional[ParticipantFilters] = None) -> List[Participant]:
        """List participants, optionally filtered."""
        participants = self.repository.list_participants()
        if filters is None:
            return participants
        return program.filter_participants(participants, filters)

    def advance_stage(self, participant_id: str, actor_id: Optional[str] = None) -> WorkflowResult:
        """Move a participant to the next stage."""
        return self._transition(
            "advance_stage",
            participant_id,
            lambda participant: program.advance_stage(participant, actor_id=actor_id),
            actor_id
        )

    def withdraw(self, participant_id: str, reason: Optional[str] = None,
                 actor_id: Optional[str] = None) -> WorkflowResult:
        """Withdraw a participant from the program."""
        return self._transition(
            "withdraw",
            participant_id,
            lambda participant: program.withdraw(participant, reason, actor_id=actor_id),
            actor_id
        )

    def revoke_victim_consent(self, participant_id: str, actor_id: Optional[str] = None) -> WorkflowResult:
        """Return a participant's case to court after consent is revoked."""
        return self._transition(
            "revoke_victim_consent",
            participant_id,
            lambda participant: program.revoke_victim_consent(participant, actor_id=actor_id),
            actor_id
        )

    # Stage-scoped records

    def create_intervention_plan(self, participant_id: str, details: Any = None,
                                 actor_id: Optional[str] = None) -> WorkflowResult:
        """Create an intervention plan for a participant."""
        with tracer.start_as_current_span("participants.create_intervention_plan") as span:
            lookup = self.get(participant_id)
            if not lookup.success:
                return lookup

            result = program.create_intervention_plan(lookup.record, details, actor_id=actor_id)
            if not self._record_outcome(span, "create_intervention_plan", lookup.record, result):
                return result

            plan = self.repository.save_intervention_plan(result.record, expected_revision=lookup.record.revision)
            logger.info(
                f"Intervention plan created for participant {participant_id}",
                extra={"participant_id": participant_id, "plan_id": plan.id, "actor_id": actor_id}
            )
            return WorkflowResult.ok(plan)

    def add_follow_up(self, participant_id: str, details: Any = None,
                      actor_id: Optional[str] = None) -> WorkflowResult:
        """Record a hearing follow-up for a participant."""
        with tracer.start_as_current_span("participants.add_follow_up") as span:
            lookup = self.get(participant_id)
            if not lookup.success:
                return lookup

            result = program.add_follow_up(lookup.record, details, actor_id=actor_id)
            if not self._record_outcome(span, "add_follow_up", lookup.record, result):
                return result

            follow_up = self.repository.save_follow_up(result.record, expected_revision=lookup.record.revision)
            logger.info(
                f"Follow-up recorded for participant {participant_id}",
                extra={"participant_id": participant_id, "follow_up_id": follow_up.id, "actor_id": actor_id}
            )
            return WorkflowResult.ok(follow_up)

    def list_intervention_plans(self, participant_id: str) -> WorkflowResult:
        lookup = self.get(participant_id)
        if not lookup.success:
            return lookup
        return WorkflowResult.ok(self.repository.list_intervention_plans(participant_id))

    def list_follow_ups(self, participant_id: str) -> WorkflowResult:
        lookup = self.get(participant_id)
        if not lookup.success:
            return lookup
        return WorkflowResult.ok(self.repository.list_follow_ups(participant_id))

    def _transition(
        self,
        operation: str,
        participant_id: str,
        apply: Callable[[Participant], WorkflowResult],
        actor_id: Optional[str]
    ) -> WorkflowResult:
        """Run a participant transition and commit it against the revision read."""
        with tracer.start_as_current_span(f"participants.{operation}") as span:
            lookup = self.get(participant_id)
            if not lookup.success:
                return lookup

            participant = lookup.record
            result = apply(participant)
            if not self._record_outcome(span, operation, participant, result):
                return result

            stored = self.repository.save_participant(result.record, expected_revision=participant.revision)
            span.set_attributes({
                "participant.stage": stored.stage,
                "participant.outcome": stored.outcome or ""
            })
            logger.info(
                f"Participant {operation}: {participant_id}",
                extra={
                    "participant_id": participant_id,
                    "actor_id": actor_id,
                    "stage_before": participant.stage,
                    "stage_after": stored.stage,
                    "outcome": stored.outcome
                }
            )
            return WorkflowResult.ok(stored)

    @staticmethod
    def _record_outcome(span, operation: str, participant: Participant, result: WorkflowResult) -> bool:
        """Annotate the span with the domain result; log rejected transitions."""
        span.set_attributes({
            "participant.id": participant.id,
            "participant.stage_before": participant.stage,
            "workflow.success": result.success
        })

        if result.success:
            return True

        span.set_attribute("workflow.error_kind", result.error_kind.value)
        logger.warning(
            f"Participant {operation} rejected: {result.error_message}",
            extra={
                "participant_id": participant.id,
                "stage": participant.stage,
                "outcome": participant.outcome,
                "error_kind": result.error_kind.value
            }
        )
        return False


def create_participant_service(repository: Optional[ParticipantRepository] = None) -> ParticipantService:
    """Build a participant service, defaulting to the in-memory repository."""
    return ParticipantService(repository or InMemoryParticipantRepository())
