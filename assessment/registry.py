"""
In-memory assessment registry with per-assessment write serialization.

The aggregate is the only shared mutable state in the engine. Each
assessment id gets its own lock, so writers to the same assessment run one
at a time while writers to different assessments never contend.
"""

import itertools
import logging
import threading
from typing import Any, Dict, List, Optional, Union

from scoring.weighted_scorer import ScoredResult
from utils.errors import AssessmentNotFound
from .aggregate import (
    AssessmentAggregate,
    ModalitySlot,
    merge_modality,
    finalize,
    set_status,
    update_questionnaire,
)

logger = logging.getLogger(__name__)


class AssessmentRegistry:
    """
    Holds aggregates keyed by assessment id.

    Usage:
        registry = AssessmentRegistry()
        aggregate = registry.create(child_name="Sam", child_age=6, user_id=1)
        registry.merge_modality(aggregate.assessment_id, 'attention', result)
        registry.finalize(aggregate.assessment_id)
    """

    def __init__(self):
        self._aggregates: Dict[Union[int, str], AssessmentAggregate] = {}
        self._locks: Dict[Union[int, str], threading.Lock] = {}
        # Guards the two dicts above only, never held while an aggregate is written
        self._registry_lock = threading.Lock()
        self._ids = itertools.count(1)

    def create(
        self,
        child_name: str = "",
        child_age: Optional[int] = None,
        user_id: Optional[int] = None,
        assessment_id: Optional[Union[int, str]] = None
    ) -> AssessmentAggregate:
        """Register a new aggregate with empty modality slots."""
        with self._registry_lock:
            if assessment_id is None:
                assessment_id = next(self._ids)
                while assessment_id in self._aggregates:
                    assessment_id = next(self._ids)
            elif assessment_id in self._aggregates:
                raise ValueError(f"Assessment {assessment_id} already exists")

            aggregate = AssessmentAggregate(
                assessment_id=assessment_id,
                child_name=child_name,
                child_age=child_age,
                user_id=user_id,
            )
            self._aggregates[assessment_id] = aggregate
            self._locks[assessment_id] = threading.Lock()

        logger.info(f"Created assessment {assessment_id}")
        return aggregate

    def get(self, assessment_id: Union[int, str]) -> AssessmentAggregate:
        with self._registry_lock:
            if assessment_id not in self._aggregates:
                raise AssessmentNotFound(f"Assessment {assessment_id} not found")
            return self._aggregates[assessment_id]

    def list_for_user(self, user_id: int) -> List[AssessmentAggregate]:
        with self._registry_lock:
            return [a for a in self._aggregates.values() if a.user_id == user_id]

    def _lock_for(self, assessment_id: Union[int, str]) -> threading.Lock:
        with self._registry_lock:
            if assessment_id not in self._locks:
                raise AssessmentNotFound(f"Assessment {assessment_id} not found")
            return self._locks[assessment_id]

    def merge_modality(
        self,
        assessment_id: Union[int, str],
        slot: Union[ModalitySlot, str],
        result: ScoredResult
    ) -> AssessmentAggregate:
        with self._lock_for(assessment_id):
            return merge_modality(self.get(assessment_id), slot, result)

    def update_questionnaire(self, assessment_id: Union[int, str], **answers: Any) -> AssessmentAggregate:
        with self._lock_for(assessment_id):
            return update_questionnaire(self.get(assessment_id), **answers)

    def set_status(self, assessment_id: Union[int, str], status: str) -> AssessmentAggregate:
        with self._lock_for(assessment_id):
            return set_status(self.get(assessment_id), status)

    def finalize(self, assessment_id: Union[int, str]) -> AssessmentAggregate:
        with self._lock_for(assessment_id):
            return finalize(self.get(assessment_id))
