# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for the stage progression engine.
"""

import pytest
from datetime import datetime, timedelta, timezone

from domain import program
from domain.errors import ErrorKind, DomainException, ValidationException
from models.entities import Participant, InterventionPlan, FollowUp
from models.enums import Stage, STAGE_SEQUENCE, ProgramOutcome, ProgramAction
from models.requests import EnrollmentRequest, ParticipantFilters


class TestEnroll:
    """Test participant enrollment."""

    def test_enroll_eligible(self, enrollment_data, fixed_now):
        """Test enrollment creates a participant at referral."""
        result = program.enroll(enrollment_data, actor_id="clinician-1", now=fixed_now)

        assert result.success is True
        participant = result.record
        assert isinstance(participant, Participant)
        assert participant.stage == Stage.REFERRAL
        assert participant.enrolled_at is None
        assert participant.completed_at is None
        assert participant.outcome is None
        assert participant.accused_name == "Jean Tremblay"
        assert participant.created_by == "clinician-1"
        assert participant.created_at == fixed_now

    def test_enroll_snapshots_eligibility(self, enrollment_data):
        """Test the qualifying facts are frozen on the participant."""
        participant = program.enroll(EnrollmentRequest(**enrollment_data)).unwrap()

        assert participant.eligibility.vulnerabilities == ("mental_health_disorder",)
        assert participant.eligibility.offence_category == "theft"
        assert participant.eligibility.prosecution_mode == "summary"
        assert participant.eligibility.diagnosed is True

        with pytest.raises(Exception):
            participant.eligibility.victim_consent = False

    def test_enroll_ineligible_returns_all_reasons(self):
        """Ineligible enrollment creates nothing and reports every reason."""
        result = program.enroll({
            "accused_name": "Jean Tremblay",
            "vulnerabilities": [],
            "offence_category": "terrorism",
            "prosecution_mode": "indictment"
        })

        assert result.success is False
        assert result.record is None
        assert result.error_kind is ErrorKind.VALIDATION
        assert result.error_message == "Participant is not eligible for PAJ-SM+"
        assert len(result.validation_errors) == 6

    def test_enroll_ineligible_unwrap_raises(self, enrollment_data):
        """Test unwrap raises a ValidationException with the reasons."""
        enrollment_data["waives_delay"] = False

        with pytest.raises(ValidationException) as exc_info:
            program.enroll(enrollment_data).unwrap()

        assert exc_info.value.validation_errors == ["Accused must waive delay rights"]

    def test_enroll_requires_accused_name(self, eligible_data):
        """Eligible facts without identity fields are rejected."""
        result = program.enroll(eligible_data)

        assert result.success is False
        assert result.error_kind is ErrorKind.VALIDATION
        assert any(error.startswith("accused_name") for error in result.validation_errors)

    def test_enroll_blank_accused_name(self, enrollment_data):
        enrollment_data["accused_name"] = "   "

        result = program.enroll(enrollment_data)
        assert result.success is False
        assert any("Accused name cannot be empty" in error for error in result.validation_errors)


class TestAdvanceStage:
    """Test stage advancement."""

    def test_advance_one_stage(self, participant):
        """Test advancing from referral to prosecutor evaluation."""
        result = program.advance_stage(participant)

        assert result.success is True
        assert result.record.stage == Stage.PROSECUTOR_EVALUATION

    def test_advance_does_not_mutate_input(self, participant):
        program.advance_stage(participant)
        assert participant.stage == Stage.REFERRAL
        assert participant.enrolled_at is None

    def test_enrolled_at_set_on_leaving_referral(self, participant, fixed_now):
        """enrolled_at is stamped when entering prosecutor evaluation."""
        later = fixed_now + timedelta(days=3)

        advanced = program.advance_stage(participant, now=later).unwrap()
        assert advanced.enrolled_at == later
        assert advanced.outcome is None

    def test_enrolled_at_not_overwritten(self, participant, fixed_now):
        """Later transitions leave enrolled_at alone."""
        first = program.advance_stage(participant, now=fixed_now).unwrap()
        second = program.advance_stage(first, now=fixed_now + timedelta(days=10)).unwrap()

        assert second.stage == Stage.CLINICAL_ELIGIBILITY
        assert second.enrolled_at == fixed_now

    def test_full_walk_completes_program(self, participant, fixed_now):
        """Walking the whole sequence records a completed outcome."""
        current = participant
        visited = [current.stage]
        for step in range(len(STAGE_SEQUENCE) - 1):
            current = program.advance_stage(current, now=fixed_now + timedelta(days=step)).unwrap()
            visited.append(current.stage)

        assert visited == [stage.value for stage in STAGE_SEQUENCE]
        assert current.stage == Stage.PROGRAM_OUTCOME
        assert current.outcome == ProgramOutcome.COMPLETED
        assert current.completed_at == fixed_now + timedelta(days=len(STAGE_SEQUENCE) - 2)

    def test_cannot_advance_beyond_final_stage(self, participant_at):
        """Advancing from program_outcome fails, every time."""
        final = participant_at(Stage.PROGRAM_OUTCOME)

        for _ in range(2):
            result = program.advance_stage(final)
            assert result.success is False
            assert result.error_kind is ErrorKind.FINAL_STAGE
            assert "cannot advance beyond final stage" in result.error_message.lower()

    def test_no_side_effects_mid_sequence(self, participant_at):
        """Intermediate transitions set no terminal fields."""
        plan_stage = participant_at(Stage.INTERVENTION_PLAN)

        assert plan_stage.completed_at is None
        assert plan_stage.outcome is None
        assert plan_stage.enrolled_at is not None

    def test_advance_after_withdraw_fails(self, participant):
        """Withdrawn participants are frozen."""
        withdrawn = program.withdraw(participant, "Moved away").unwrap()

        result = program.advance_stage(withdrawn)
        assert result.success is False
        assert result.error_kind is ErrorKind.FINAL_OUTCOME
        assert "already has a final outcome" in result.error_message

    def test_unrecognized_stage_cannot_advance(self, participant):
        """A stage outside the sequence has no successor."""
        corrupted = participant.model_copy(update={"stage": "appeal"})

        result = program.advance_stage(corrupted)
        assert result.error_kind is ErrorKind.FINAL_STAGE

    def test_unwrap_raises_domain_exception(self, participant_at):
        with pytest.raises(DomainException) as exc_info:
            program.advance_stage(participant_at(Stage.PROGRAM_OUTCOME)).unwrap()

        assert exc_info.value.error_kind is ErrorKind.FINAL_STAGE
        assert exc_info.value.error_type == "final-stage"


class TestTerminalExits:
    """Test withdrawal and consent revocation."""

    def test_withdraw_keeps_stage(self, participant_at, fixed_now):
        """Withdrawal records the outcome without moving the stage."""
        clinical = participant_at(Stage.CLINICAL_ELIGIBILITY)

        withdrawn = program.withdraw(clinical, "  No longer interested  ", now=fixed_now).unwrap()
        assert withdrawn.stage == Stage.CLINICAL_ELIGIBILITY
        assert withdrawn.outcome == ProgramOutcome.WITHDRAWN
        assert withdrawn.completed_at == fixed_now
        assert withdrawn.withdrawal_reason == "No longer interested"

    @pytest.mark.parametrize("reason,expected", [
        (42, "42"),
        ("   ", None),
        (None, None),
    ])
    def test_withdraw_reason_normalized(self, participant, reason, expected):
        """Non-string and blank reasons never break withdrawal."""
        withdrawn = program.withdraw(participant, reason).unwrap()

        assert withdrawn.outcome == ProgramOutcome.WITHDRAWN
        assert withdrawn.withdrawal_reason == expected

    def test_withdraw_twice_fails(self, participant):
        withdrawn = program.withdraw(participant).unwrap()

        result = program.withdraw(withdrawn, "again")
        assert result.success is False
        assert result.error_kind is ErrorKind.FINAL_OUTCOME

    def test_withdraw_completed_participant_fails(self, participant_at):
        result = program.withdraw(participant_at(Stage.PROGRAM_OUTCOME))
        assert result.error_kind is ErrorKind.FINAL_OUTCOME

    def test_revoke_consent_returns_to_court(self, enrollment_data, fixed_now):
        """Revocation clears consent and records returned_to_court."""
        enrollment_data.update(
            offence_category="domestic_violence", victim_consent=True, victim_consent_mode="written"
        )
        participant = program.advance_stage(program.enroll(enrollment_data).unwrap()).unwrap()

        revoked = program.revoke_victim_consent(participant, now=fixed_now).unwrap()
        assert revoked.eligibility.victim_consent is False
        assert revoked.eligibility.victim_consent_mode == "written"
        assert revoked.outcome == ProgramOutcome.RETURNED_TO_COURT
        assert revoked.completed_at == fixed_now
        assert revoked.stage == Stage.PROSECUTOR_EVALUATION
        assert participant.eligibility.victim_consent is True

    def test_revoke_consent_for_unrestricted_offence(self, participant):
        """Revocation is not gated on the offence needing consent."""
        revoked = program.revoke_victim_consent(participant).unwrap()
        assert revoked.outcome == ProgramOutcome.RETURNED_TO_COURT

    def test_outcome_is_write_once(self, participant):
        """Every stage-changing operation fails once an outcome exists."""
        revoked = program.revoke_victim_consent(participant).unwrap()

        assert program.advance_stage(revoked).error_kind is ErrorKind.FINAL_OUTCOME
        assert program.withdraw(revoked).error_kind is ErrorKind.FINAL_OUTCOME
        assert program.revoke_victim_consent(revoked).error_kind is ErrorKind.FINAL_OUTCOME


class TestStageScopedRecords:
    """Test intervention plans and follow-ups."""

    @pytest.mark.parametrize("stage", [s for s in STAGE_SEQUENCE if s != Stage.INTERVENTION_PLAN])
    def test_plan_outside_stage_fails(self, participant_at, stage):
        result = program.create_intervention_plan(participant_at(stage), {"plan_details": "Weekly therapy"})

        assert result.success is False
        assert result.error_kind is ErrorKind.WRONG_STAGE
        assert "intervention_plan stage" in result.error_message

    def test_plan_in_stage(self, participant_at, fixed_now):
        participant = participant_at(Stage.INTERVENTION_PLAN)

        result = program.create_intervention_plan(
            participant,
            {"plan_details": "Weekly therapy", "objectives": ["Sobriety", " ", "Housing"]},
            actor_id="clinician-2",
            now=fixed_now
        )

        assert result.success is True
        plan = result.record
        assert isinstance(plan, InterventionPlan)
        assert plan.participant_id == participant.id
        assert plan.objectives == ["Sobriety", "Housing"]
        assert plan.created_by == "clinician-2"
        assert plan.created_at == fixed_now

    def test_plan_does_not_change_participant(self, participant_at):
        participant = participant_at(Stage.INTERVENTION_PLAN)
        before = participant.model_dump()

        program.create_intervention_plan(participant, None)
        assert participant.model_dump() == before

    @pytest.mark.parametrize("stage", [s for s in STAGE_SEQUENCE if s != Stage.HEARING_FOLLOWUPS])
    def test_follow_up_outside_stage_fails(self, participant_at, stage):
        result = program.add_follow_up(participant_at(stage), {"follow_up_date": "2026-04-01T10:00:00"})

        assert result.error_kind is ErrorKind.WRONG_STAGE
        assert "hearing_followups stage" in result.error_message

    def test_follow_up_in_stage(self, participant_at):
        participant = participant_at(Stage.HEARING_FOLLOWUPS)

        follow_up = program.add_follow_up(
            participant,
            {"follow_up_date": "2026-04-01T10:00:00+00:00", "notes": "Good progress"}
        ).unwrap()

        assert isinstance(follow_up, FollowUp)
        assert follow_up.participant_id == participant.id
        assert follow_up.follow_up_date == datetime(2026, 4, 1, 10, tzinfo=timezone.utc)
        assert follow_up.notes == "Good progress"

    def test_follow_up_requires_date(self, participant_at):
        result = program.add_follow_up(participant_at(Stage.HEARING_FOLLOWUPS), {"notes": "No date"})

        assert result.error_kind is ErrorKind.VALIDATION
        assert any(error.startswith("follow_up_date") for error in result.validation_errors)


class TestAllowedActions:
    """Test action listing per state."""

    def test_referral(self, participant):
        assert program.allowed_actions(participant) == [
            ProgramAction.ADVANCE_STAGE,
            ProgramAction.WITHDRAW,
            ProgramAction.REVOKE_VICTIM_CONSENT
        ]

    def test_intervention_plan_stage(self, participant_at):
        actions = program.allowed_actions(participant_at(Stage.INTERVENTION_PLAN))
        assert ProgramAction.CREATE_INTERVENTION_PLAN in actions
        assert ProgramAction.ADD_FOLLOW_UP not in actions

    def test_hearing_followups_stage(self, participant_at):
        actions = program.allowed_actions(participant_at(Stage.HEARING_FOLLOWUPS))
        assert ProgramAction.ADD_FOLLOW_UP in actions

    def test_completed(self, participant_at):
        assert program.allowed_actions(participant_at(Stage.PROGRAM_OUTCOME)) == []


class TestFilterParticipants:
    """Test participant filtering."""

    @pytest.fixture
    def participants(self, enrollment_data, participant_at):
        laval = program.enroll({**enrollment_data, "accused_name": "Marie Gagnon", "district": "Laval"}).unwrap()
        withdrawn = program.withdraw(participant_at(Stage.CLINICAL_ELIGIBILITY)).unwrap()
        return [laval, participant_at(Stage.HEARING_FOLLOWUPS), withdrawn]

    def test_filter_by_stage(self, participants):
        filtered = program.filter_participants(participants, ParticipantFilters(stage=Stage.HEARING_FOLLOWUPS))
        assert [p.stage for p in filtered] == ["hearing_followups"]

    def test_filter_by_outcome(self, participants):
        filtered = program.filter_participants(participants, ParticipantFilters(outcome=ProgramOutcome.WITHDRAWN))
        assert len(filtered) == 1

    def test_active_only(self, participants):
        filtered = program.filter_participants(participants, ParticipantFilters(active_only=True))
        assert len(filtered) == 2

    def test_district_and_search(self, participants):
        assert len(program.filter_participants(participants, ParticipantFilters(district="laval"))) == 1
        assert len(program.filter_participants(participants, ParticipantFilters(search="tremblay"))) == 2
