# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Participant persistence port and in-memory implementation.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from models.entities import Participant, InterventionPlan, FollowUp
from domain.errors import ConflictException

logger = logging.getLogger(__name__)


class ParticipantRepository(ABC):
    """
    Lookup and commit operations the program core relies on.

    Implementations must reject a commit whose expected revision no longer
    matches the stored record, so two concurrent mutations of one participant
    cannot both succeed.
    """

    @abstractmethod
    def get_participant(self, participant_id: str) -> Optional[Participant]:
        """Return the participant or None if absent."""

    @abstractmethod
    def list_participants(self) -> List[Participant]:
        """Return all participants, newest first."""

    @abstractmethod
    def save_participant(self, participant: Participant, expected_revision: Optional[int] = None) -> Participant:
        """
        Commit a participant record.

        Args:
            participant: Record to store
            expected_revision: Revision the caller read, or None for a new record

        Returns:
            The stored participant with its revision bumped

        Raises:
            ConflictException: if the stored revision moved or the record already exists
        """

    @abstractmethod
    def save_intervention_plan(self, plan: InterventionPlan, expected_revision: Optional[int] = None) -> InterventionPlan:
        """
        Commit an intervention plan.

        Raises:
            ConflictException: if the owning participant moved past expected_revision
        """

    @abstractmethod
    def list_intervention_plans(self, participant_id: str) -> List[InterventionPlan]:
        """Return plans for a participant, oldest first."""

    @abstractmethod
    def save_follow_up(self, follow_up: FollowUp, expected_revision: Optional[int] = None) -> FollowUp:
        """
        Commit a follow-up.

        Raises:
            ConflictException: if the owning participant moved past expected_revision
        """

    @abstractmethod
    def list_follow_ups(self, participant_id: str) -> List[FollowUp]:
        """Return follow-ups for a participant, oldest first."""


class InMemoryParticipantRepository(ParticipantRepository):
    """Thread-safe dictionary-backed repository."""

    def __init__(self):
        self._lock = threading.Lock()
        self._participants: Dict[str, Participant] = {}
        self._plans: Dict[str, List[InterventionPlan]] = {}
        self._follow_ups: Dict[str, List[FollowUp]] = {}
        logger.info("In-memory participant repository initialized")

    def get_participant(self, participant_id: str) -> Optional[Participant]:
        with self._lock:
            participant = self._participants.get(participant_id)
            return participant.model_copy(deep=True) if participant else None

    def list_participants(self) -> List[Participant]:
        with self._lock:
            participants = [p.model_copy(deep=True) for p in self._participants.values()]
        return sorted(participants, key=lambda p: p.created_at, reverse=True)

    def save_participant(self, participant: Participant, expected_revision: Optional[int] = None) -> Participant:
        with self._lock:
            current = self._participants.get(participant.id)

            if expected_revision is None and current is not None:
                raise ConflictException(f"Participant {participant.id} already exists")

            self._check_owner_revision(participant.id, expected_revision)

            next_revision = 0 if current is None else current.revision + 1
            stored = participant.model_copy(update={"revision": next_revision}, deep=True)
            self._participants[stored.id] = stored

        logger.debug(f"Stored participant {stored.id} at revision {stored.revision}")
        return stored.model_copy(deep=True)

    def save_intervention_plan(self, plan: InterventionPlan, expected_revision: Optional[int] = None) -> InterventionPlan:
        with self._lock:
            self._check_owner_revision(plan.participant_id, expected_revision)
            self._plans.setdefault(plan.participant_id, []).append(plan.model_copy(deep=True))
        return plan

    def list_intervention_plans(self, participant_id: str) -> List[InterventionPlan]:
        with self._lock:
            return [plan.model_copy(deep=True) for plan in self._plans.get(participant_id, [])]

    def save_follow_up(self, follow_up: FollowUp, expected_revision: Optional[int] = None) -> FollowUp:
        with self._lock:
            self._check_owner_revision(follow_up.participant_id, expected_revision)
            self._follow_ups.setdefault(follow_up.participant_id, []).append(follow_up.model_copy(deep=True))
        return follow_up

    def list_follow_ups(self, participant_id: str) -> List[FollowUp]:
        with self._lock:
            return [follow_up.model_copy(deep=True) for follow_up in self._follow_ups.get(participant_id, [])]

    def _check_owner_revision(self, participant_id: str, expected_revision: Optional[int]) -> None:
        """Reject a commit made against a participant revision that is no longer stored. Caller holds the lock."""
        if expected_revision is None:
            return

        current = self._participants.get(participant_id)
        if current is None:
            raise ConflictException(f"Participant {participant_id} no longer exists")

        if current.revision != expected_revision:
            logger.warning(
                f"Stale commit rejected for participant {participant_id}",
                extra={
                    "participant_id": participant_id,
                    "expected_revision": expected_revision,
                    "stored_revision": current.revision
                }
            )
            raise ConflictException(
                f"Participant {participant_id} was modified concurrently "
                f"(expected revision {expected_revision}, found {current.revision})"
            )
