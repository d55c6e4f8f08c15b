"""
Unit tests for the assessment aggregate, registry and collaborator payloads.

Tests merge semantics, the completion state machine, per-assessment
serialization and the diagnostic request.
"""

import threading
import unittest
from pathlib import Path
from typing import Any, Dict

# Import modules to test
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from assessment import (
    AssessmentAggregate,
    AssessmentStatus,
    AssessmentRegistry,
    ModalitySlot,
    MetricSetProducer,
    merge_modality,
    finalize,
    set_status,
    update_questionnaire,
    build_diagnostic_request,
    score_with_producer,
)
from scoring.weighted_scorer import score
from utils.errors import AssessmentClosed, AssessmentNotFound


def _result(value: float, timestamp: str = '2024-05-01T10:00:00+00:00'):
    return score({'a': value, 'b': 1.0 - value}, {'a': 0.5, 'b': 0.5}, timestamp=timestamp)


class FixedWritingModel(MetricSetProducer):
    """Stand-in for an external handwriting model."""

    modality = ModalitySlot.WRITING

    def produce(self, capture: Any) -> Dict[str, float]:
        return {'legibility': 0.6, 'consistency': 0.8, 'spacing': 0.9,
                'alignment': 0.85, 'pressure': 0.75}


class TestMergeModality(unittest.TestCase):
    """Test slot merge semantics."""

    def setUp(self):
        self.aggregate = AssessmentAggregate(assessment_id=1, child_name="Sam", child_age=6)

    def test_new_aggregate_is_empty(self):
        self.assertEqual(self.aggregate.status, AssessmentStatus.IN_PROGRESS)
        self.assertEqual(self.aggregate.populated_slots(), [])

    def test_merge_populates_slot(self):
        result = _result(0.8)
        returned = merge_modality(self.aggregate, ModalitySlot.VOICE, result)

        self.assertIs(returned, self.aggregate)
        self.assertEqual(self.aggregate.result_for('voice'), result)

    def test_merge_is_idempotent(self):
        result = _result(0.8)
        merge_modality(self.aggregate, 'attention', result)
        snapshot = self.aggregate.to_dict()

        merge_modality(self.aggregate, 'attention', result)

        self.assertEqual(self.aggregate.to_dict(), snapshot)

    def test_last_write_wins(self):
        merge_modality(self.aggregate, 'voice', _result(0.2, '2024-05-01T10:00:05+00:00'))
        later_call = _result(0.9, '2024-05-01T10:00:00+00:00')
        merge_modality(self.aggregate, 'voice', later_call)

        # Call order decides, not the result timestamp
        self.assertEqual(self.aggregate.result_for(ModalitySlot.VOICE), later_call)

    def test_whole_slot_replaced(self):
        merge_modality(self.aggregate, 'writing', score({'x': 1.0}, {'x': 1.0}))
        merge_modality(self.aggregate, 'writing', score({'y': 0.0}, {'y': 1.0}))

        self.assertEqual(set(self.aggregate.result_for('writing').metrics), {'y'})

    def test_different_slots_commute(self):
        voice, attention = _result(0.3), _result(0.7)
        other = AssessmentAggregate(assessment_id=1)

        merge_modality(self.aggregate, 'voice', voice)
        merge_modality(self.aggregate, 'attention', attention)
        merge_modality(other, 'attention', attention)
        merge_modality(other, 'voice', voice)

        self.assertEqual(self.aggregate.slots, other.slots)

    def test_unknown_slot(self):
        with self.assertRaises(ValueError):
            merge_modality(self.aggregate, 'gait', _result(0.5))


class TestCompletion(unittest.TestCase):
    """Test the in_progress -> completed state machine."""

    def setUp(self):
        self.aggregate = AssessmentAggregate(assessment_id='a-1')

    def test_finalize_without_modalities(self):
        """Questionnaire-only assessments may complete with empty slots."""
        update_questionnaire(self.aggregate, eye_contact="Brief but frequent")
        finalize(self.aggregate)

        self.assertTrue(self.aggregate.is_completed)
        self.assertEqual(self.aggregate.populated_slots(), [])

    def test_merge_after_finalize_rejected(self):
        finalize(self.aggregate)
        with self.assertRaises(AssessmentClosed):
            merge_modality(self.aggregate, 'voice', _result(0.5))

    def test_finalize_twice_rejected(self):
        finalize(self.aggregate)
        with self.assertRaises(AssessmentClosed):
            finalize(self.aggregate)

    def test_no_way_back_to_in_progress(self):
        finalize(self.aggregate)
        with self.assertRaises(AssessmentClosed):
            set_status(self.aggregate, 'in_progress')

    def test_set_status_completed_finalizes(self):
        set_status(self.aggregate, 'completed')
        self.assertEqual(self.aggregate.status, AssessmentStatus.COMPLETED)

    def test_set_status_in_progress_noop(self):
        set_status(self.aggregate, AssessmentStatus.IN_PROGRESS)
        self.assertFalse(self.aggregate.is_completed)

    def test_questionnaire_after_finalize_rejected(self):
        finalize(self.aggregate)
        with self.assertRaises(AssessmentClosed):
            update_questionnaire(self.aggregate, name_response="Turns head")

    def test_questionnaire_field_merge(self):
        update_questionnaire(self.aggregate, eye_contact="Rarely")
        update_questionnaire(self.aggregate, name_response="Sometimes")
        update_questionnaire(self.aggregate, eye_contact="Often")

        self.assertEqual(
            self.aggregate.questionnaire,
            {'eye_contact': "Often", 'name_response': "Sometimes"}
        )


class TestRegistry(unittest.TestCase):
    """Test the per-assessment registry."""

    def setUp(self):
        self.registry = AssessmentRegistry()

    def test_create_assigns_ids(self):
        first = self.registry.create(child_name="A", user_id=7)
        second = self.registry.create(child_name="B", user_id=7)

        self.assertNotEqual(first.assessment_id, second.assessment_id)
        self.assertEqual(len(self.registry.list_for_user(7)), 2)

    def test_duplicate_id_rejected(self):
        self.registry.create(assessment_id='x')
        with self.assertRaises(ValueError):
            self.registry.create(assessment_id='x')

    def test_unknown_id(self):
        with self.assertRaises(AssessmentNotFound):
            self.registry.get(404)
        with self.assertRaises(AssessmentNotFound):
            self.registry.merge_modality(404, 'voice', _result(0.5))

    def test_finalize_then_merge(self):
        aggregate = self.registry.create()
        self.registry.finalize(aggregate.assessment_id)
        with self.assertRaises(AssessmentClosed):
            self.registry.merge_modality(aggregate.assessment_id, 'voice', _result(0.5))

    def test_concurrent_writers(self):
        """Many threads writing to several assessments all land."""
        ids = [self.registry.create().assessment_id for _ in range(4)]
        results = {slot: _result(0.25) for slot in ModalitySlot}
        errors = []

        def writer(assessment_id, slot):
            try:
                for _ in range(50):
                    self.registry.merge_modality(assessment_id, slot, results[slot])
            except Exception as e:  # surfaced through the assertion below
                errors.append(e)

        threads = [
            threading.Thread(target=writer, args=(assessment_id, slot))
            for assessment_id in ids
            for slot in ModalitySlot
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(errors, [])
        for assessment_id in ids:
            self.assertEqual(len(self.registry.get(assessment_id).populated_slots()), 4)


class TestCollaborators(unittest.TestCase):
    """Test collaborator boundaries."""

    def test_diagnostic_request_includes_populated_slots_only(self):
        aggregate = AssessmentAggregate(assessment_id=3, child_age=7)
        merge_modality(aggregate, 'attention', _result(0.6))
        update_questionnaire(aggregate, eye_contact="Avoids")

        request = build_diagnostic_request(aggregate)

        self.assertEqual(request['childAge'], 7)
        self.assertEqual(set(request['assessmentData']), {'attentionAnalysis', 'questionnaire'})
        self.assertEqual(
            request['assessmentData']['attentionAnalysis']['overallScore'],
            aggregate.result_for('attention').overall_score
        )

    def test_producer_scoring(self):
        result = score_with_producer(FixedWritingModel(), capture=None)

        self.assertEqual(result.suggestions, ("Focus on forming letters more clearly",))
        self.assertAlmostEqual(
            result.overall_score,
            0.3 * 0.6 + 0.2 * 0.8 + 0.2 * 0.9 + 0.15 * 0.85 + 0.15 * 0.75
        )

    def test_aggregate_dict_shape(self):
        aggregate = AssessmentAggregate(assessment_id=9, child_name="Ana", child_age=5, user_id=2)
        data = aggregate.to_dict()

        self.assertEqual(data['status'], 'in_progress')
        self.assertIsNone(data['voiceAnalysisData'])
        self.assertIn('attentionAnalysisData', data)


if __name__ == '__main__':
    unittest.main()
