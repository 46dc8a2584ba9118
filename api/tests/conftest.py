# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Pytest configuration and fixtures.
"""

import os
import pytest
from datetime import datetime, timezone

from domain import program
from models.enums import Stage, STAGE_SEQUENCE
from services.repository import InMemoryParticipantRepository
from services.participants import ParticipantService

# Set test environment
os.environ['ENVIRONMENT'] = 'test'
os.environ['OTEL_ENABLED'] = 'false'


@pytest.fixture
def fixed_now():
    """Deterministic clock value."""
    return datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def eligible_data():
    """Eligibility facts that pass every check."""
    return {
        "vulnerabilities": ["mental_health_disorder"],
        "offence_category": "theft",
        "prosecution_mode": "summary",
        "accepts_responsibility": True,
        "is_voluntary": True,
        "waives_delay": True,
        "criminally_fit": True
    }


@pytest.fixture
def enrollment_data(eligible_data):
    """Enrollment payload for an eligible candidate."""
    return {
        **eligible_data,
        "accused_name": "Jean Tremblay",
        "district": "Montreal",
        "referral_id": "ref-001",
        "diagnosed": True,
        "offence_description": "Shoplifting at a pharmacy"
    }


@pytest.fixture
def participant(enrollment_data, fixed_now):
    """Freshly enrolled participant at the referral stage."""
    return program.enroll(enrollment_data, actor_id="clinician-1", now=fixed_now).unwrap()


@pytest.fixture
def participant_at(participant):
    """Factory returning the participant advanced to a given stage."""
    def _advance_to(stage: Stage):
        current = participant
        for _ in range(STAGE_SEQUENCE.index(stage)):
            current = program.advance_stage(current).unwrap()
        return current
    return _advance_to


@pytest.fixture
def repository():
    """Empty in-memory participant repository."""
    return InMemoryParticipantRepository()


@pytest.fixture
def service(repository):
    """Participant service backed by the in-memory repository."""
    return ParticipantService(repository)
