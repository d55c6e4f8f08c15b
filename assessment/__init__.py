"""
Assessment aggregate, merge rules and collaborator boundaries.
"""

from .aggregate import (
    AssessmentAggregate,
    AssessmentStatus,
    ModalitySlot,
    merge_modality,
    finalize,
    set_status,
    update_questionnaire,
)
from .registry import AssessmentRegistry
from .collaborators import (
    MetricSetProducer,
    DiagnosticSynthesizer,
    score_with_producer,
    build_diagnostic_request,
    request_diagnosis,
)

__all__ = [
    'AssessmentAggregate',
    'AssessmentStatus',
    'ModalitySlot',
    'merge_modality',
    'finalize',
    'set_status',
    'update_questionnaire',
    'AssessmentRegistry',
    'MetricSetProducer',
    'DiagnosticSynthesizer',
    'score_with_producer',
    'build_diagnostic_request',
    'request_diagnosis',
]
