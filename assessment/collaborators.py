"""
Interface boundaries to external collaborators.

The engine owns no model: facial expression and handwriting analysis are
delegated to an inference collaborator that returns a MetricSet directly,
and diagnostic synthesis is delegated to a hosted language model that
receives the whole aggregate.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional

from scoring.modality_profiles import ModalityProfile, score_external_modality
from scoring.weighted_scorer import ScoredResult
from .aggregate import AssessmentAggregate, ModalitySlot


class MetricSetProducer(ABC):
    """Model-backed modality that turns a raw capture into a 0-1 MetricSet."""

    modality: ModalitySlot

    @abstractmethod
    def produce(self, capture: Any) -> Dict[str, float]:
        """Run inference on one capture (frame, stroke set) and return metrics."""
        pass


class DiagnosticSynthesizer(ABC):
    """Hosted diagnostic synthesis; its document is returned uninterpreted."""

    @abstractmethod
    def synthesize(self, request: Mapping[str, Any]) -> Any:
        """Produce a diagnostic document from build_diagnostic_request output."""
        pass


def score_with_producer(
    producer: MetricSetProducer,
    capture: Any,
    profiles: Optional[Dict[str, ModalityProfile]] = None
) -> ScoredResult:
    """Run an external producer and score its MetricSet with the matching profile."""
    metric_set = producer.produce(capture)
    return score_external_modality(producer.modality.value, metric_set, profiles)


def build_diagnostic_request(aggregate: AssessmentAggregate) -> Dict[str, Any]:
    """
    Payload for the diagnostic collaborator.

    Only populated slots are included, keyed as `<modality>Analysis`, plus
    the questionnaire when answered and the child's age.
    """
    assessment_data: Dict[str, Any] = {
        f"{slot.value}Analysis": aggregate.slots[slot].to_dict()
        for slot in aggregate.populated_slots()
    }
    if aggregate.questionnaire:
        assessment_data['questionnaire'] = dict(aggregate.questionnaire)

    return {
        'assessmentData': assessment_data,
        'childAge': aggregate.child_age,
    }


def request_diagnosis(synthesizer: DiagnosticSynthesizer, aggregate: AssessmentAggregate) -> Any:
    return synthesizer.synthesize(build_diagnostic_request(aggregate))
