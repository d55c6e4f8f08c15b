"""
Assessment aggregate and its completion state machine.

One aggregate per assessment id holds at most one ScoredResult per modality
slot, the questionnaire answers and the status.

States:
    in_progress -> completed (terminal)

Merge semantics:
- A modality write replaces the whole slot (no field-level merge, so
  metrics scored under different profiles never mix)
- Idempotent: the same result written twice leaves the aggregate unchanged
- Last write wins within a slot, by call order
- Any write after completion raises AssessmentClosed

Callers sharing an aggregate across threads go through AssessmentRegistry,
which serializes writers per assessment id.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from scoring.weighted_scorer import ScoredResult
from utils.errors import AssessmentClosed

logger = logging.getLogger(__name__)


class ModalitySlot(Enum):
    """Assessment channels that each hold one ScoredResult."""
    VOICE = "voice"
    FACIAL = "facial"
    WRITING = "writing"
    ATTENTION = "attention"


class AssessmentStatus(Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass
class AssessmentAggregate:
    """
    Mutable per-assessment record.

    Attributes:
        assessment_id: Aggregate key
        child_name: Child being assessed
        child_age: Age in years (forwarded to diagnostic synthesis)
        user_id: Parent/clinician account that owns the assessment
        date_created: ISO-8601 creation time
        status: in_progress or completed
        slots: ModalitySlot -> latest ScoredResult
        questionnaire: Free-form questionnaire answers (e.g. eye_contact,
            name_response)
    """
    assessment_id: Union[int, str]
    child_name: str = ""
    child_age: Optional[int] = None
    user_id: Optional[int] = None
    date_created: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    status: AssessmentStatus = AssessmentStatus.IN_PROGRESS
    slots: Dict[ModalitySlot, ScoredResult] = field(default_factory=dict)
    questionnaire: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_completed(self) -> bool:
        return self.status is AssessmentStatus.COMPLETED

    def result_for(self, slot: Union[ModalitySlot, str]) -> Optional[ScoredResult]:
        return self.slots.get(ModalitySlot(slot))

    def populated_slots(self) -> List[ModalitySlot]:
        """Populated slots in declaration order."""
        return [slot for slot in ModalitySlot if slot in self.slots]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.assessment_id,
            'childName': self.child_name,
            'childAge': self.child_age,
            'userId': self.user_id,
            'dateCreated': self.date_created,
            'status': self.status.value,
            'questionnaireData': dict(self.questionnaire),
            **{
                f"{slot.value}AnalysisData": (
                    self.slots[slot].to_dict() if slot in self.slots else None
                )
                for slot in ModalitySlot
            },
        }


def _ensure_open(aggregate: AssessmentAggregate, action: str) -> None:
    if aggregate.is_completed:
        raise AssessmentClosed(
            f"Assessment {aggregate.assessment_id} is completed; cannot {action}"
        )


def merge_modality(
    aggregate: AssessmentAggregate,
    slot: Union[ModalitySlot, str],
    result: ScoredResult
) -> AssessmentAggregate:
    """
    Replace one modality slot with `result`.

    Args:
        aggregate: Assessment to update (mutated in place)
        slot: Target slot (ModalitySlot or its string value)
        result: Scored result for that modality

    Returns:
        The updated aggregate

    Raises:
        AssessmentClosed: If the assessment is completed
        ValueError: If slot is not a known modality
    """
    slot = ModalitySlot(slot)
    _ensure_open(aggregate, f"write {slot.value} results")

    previous = aggregate.slots.get(slot)
    aggregate.slots[slot] = result

    if previous is None:
        logger.info(f"Assessment {aggregate.assessment_id}: {slot.value} slot populated")
    elif previous != result:
        logger.info(f"Assessment {aggregate.assessment_id}: {slot.value} slot replaced")

    return aggregate


def update_questionnaire(aggregate: AssessmentAggregate, **answers: Any) -> AssessmentAggregate:
    """
    Merge questionnaire answers field by field.

    Unlike modality slots, questionnaire fields are independent free-form
    answers, so new keys are added and existing keys overwritten.

    Raises:
        AssessmentClosed: If the assessment is completed
    """
    _ensure_open(aggregate, "update the questionnaire")
    aggregate.questionnaire.update(answers)
    return aggregate


def finalize(aggregate: AssessmentAggregate) -> AssessmentAggregate:
    """
    Mark the assessment completed.

    No slot needs to be populated: a questionnaire-only assessment may be
    completed with partial data.

    Raises:
        AssessmentClosed: If the assessment is already completed
    """
    _ensure_open(aggregate, "finalize again")
    aggregate.status = AssessmentStatus.COMPLETED

    populated = [slot.value for slot in aggregate.populated_slots()]
    logger.info(
        f"Assessment {aggregate.assessment_id} completed with "
        f"{len(populated)} modality results: {populated}"
    )

    return aggregate


def set_status(
    aggregate: AssessmentAggregate,
    status: Union[AssessmentStatus, str]
) -> AssessmentAggregate:
    """
    Apply a requested status value.

    in_progress -> in_progress is a no-op, in_progress -> completed
    finalizes, and any request on a completed assessment raises
    AssessmentClosed (there is no way back to in_progress).
    """
    status = AssessmentStatus(status)
    if status is AssessmentStatus.COMPLETED:
        return finalize(aggregate)

    _ensure_open(aggregate, f"change status to {status.value}")
    return aggregate
