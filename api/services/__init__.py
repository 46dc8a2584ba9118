# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Services package - Persistence port and orchestration around the domain.
"""

from .repository import ParticipantRepository, InMemoryParticipantRepository
from .participants import ParticipantService, create_participant_service

__all__ = [
    "ParticipantRepository",
    "InMemoryParticipantRepository",
    "ParticipantService",
    "create_participant_service"
]
