"""
Unit tests for pointer-tracking attention metrics.

Tests cover:
- Accuracy, focus, distractibility and response time on hand-built runs
- Irregular sampling (time weighting, not sample counting)
- Degenerate runs (too short, unordered, no relocation, no recovery)
"""

import pytest # pyright: ignore[reportMissingImports]
from pathlib import Path

# Import modules to test
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from attention_tracking import (
    TrackingSample,
    TrackingConfig,
    ResponseTimeStatus,
    synthesize_attention_metrics,
    tracking_samples_from_records,
)
from utils.errors import ConfigurationMismatch, InsufficientData


CONFIG = TrackingConfig(normalization_radius=600.0, engaged_radius=40.0,
                        dip_threshold=0.7, max_response_ms=2000.0)


def sample(px, py, tx, ty, t):
    return TrackingSample(pointer_x=px, pointer_y=py, target_x=tx, target_y=ty, timestamp_ms=t)


class TestTrackingSample:
    """Test TrackingSample dataclass."""

    def test_distance(self):
        assert sample(0, 0, 3, 4, 0).distance_to_target() == 5.0

    def test_from_camel_case_record(self):
        s = TrackingSample.from_dict(
            {'pointerX': 1, 'pointerY': 2, 'targetX': 3, 'targetY': 4, 'timestamp': 99}
        )
        assert s == sample(1.0, 2.0, 3.0, 4.0, 99.0)

    def test_missing_field(self):
        with pytest.raises(KeyError):
            TrackingSample.from_dict({'pointer_x': 1, 'pointer_y': 2, 'timestamp_ms': 0})


class TestPerfectTracking:
    """Pointer always on the target."""

    def setup_method(self):
        self.samples = [
            sample(100, 100, 100, 100, 0),
            sample(100, 100, 100, 100, 100),
            sample(300, 200, 300, 200, 200),  # relocation, pointer follows
            sample(300, 200, 300, 200, 300),
        ]

    def test_scores(self):
        metrics = synthesize_attention_metrics(self.samples, CONFIG)

        assert metrics.tracking_accuracy == 1.0
        assert metrics.focus_duration == 1.0
        assert metrics.distractibility == 1.0
        # recovered at the next sample, 100ms later
        assert metrics.mean_response_ms == 100.0
        assert metrics.response_time == pytest.approx(0.95)
        assert metrics.response_time_status is ResponseTimeStatus.MEASURED
        assert metrics.relocation_count == 1
        assert metrics.recovered_count == 1

    def test_metric_set_keys(self):
        metric_set = synthesize_attention_metrics(self.samples, CONFIG).to_metric_set()
        assert set(metric_set) == {'focus_duration', 'tracking_accuracy', 'distractibility', 'response_time'}
        assert all(0.0 <= v <= 1.0 for v in metric_set.values())


class TestDistractedRun:
    """Relocation followed by an accuracy dip and slow recovery."""

    def setup_method(self):
        self.samples = [
            sample(0, 0, 0, 0, 0),
            sample(0, 0, 0, 0, 100),
            sample(0, 0, 300, 0, 200),    # relocation, pointer left behind
            sample(10, 0, 300, 0, 300),   # dip: accuracy 1 - 290/600
            sample(300, 0, 300, 0, 700),  # recovered 500ms after relocation
        ]
        self.metrics = synthesize_attention_metrics(self.samples, CONFIG)

    def test_tracking_accuracy(self):
        expected = (1.0 + 1.0 + 0.5 + (1.0 - 290.0 / 600.0) + 1.0) / 5
        assert self.metrics.tracking_accuracy == pytest.approx(expected)

    def test_focus_duration_uses_elapsed_time(self):
        """Only the first 100ms interval has both endpoints engaged."""
        assert self.metrics.focus_duration == pytest.approx(100.0 / 700.0)

    def test_distractibility(self):
        """One relocation, one dip."""
        assert self.metrics.distractibility == 0.0

    def test_response_time(self):
        assert self.metrics.mean_response_ms == 500.0
        assert self.metrics.response_time == pytest.approx(0.75)

    def test_counts(self):
        assert self.metrics.sample_count == 5
        assert self.metrics.elapsed_ms == 700.0


class TestIrregularSampling:
    """Focus is weighted by elapsed time, not by sample count."""

    def test_long_disengaged_gap(self):
        samples = [
            sample(0, 0, 0, 0, 0),
            sample(0, 0, 0, 0, 10),
            sample(200, 0, 0, 0, 1000),
        ]
        metrics = synthesize_attention_metrics(samples, CONFIG)
        assert metrics.focus_duration == pytest.approx(0.01)


class TestDegenerateRuns:
    """Edge cases for short or unusual runs."""

    def test_single_sample_is_insufficient(self):
        with pytest.raises(InsufficientData):
            synthesize_attention_metrics([sample(0, 0, 0, 0, 0)], CONFIG)

    def test_empty_run_is_insufficient(self):
        with pytest.raises(InsufficientData):
            synthesize_attention_metrics([], CONFIG)

    def test_zero_elapsed_time(self):
        with pytest.raises(InsufficientData):
            synthesize_attention_metrics([sample(0, 0, 0, 0, 5), sample(0, 0, 0, 0, 5)], CONFIG)

    def test_unordered_timestamps(self):
        with pytest.raises(ConfigurationMismatch):
            synthesize_attention_metrics(
                [sample(0, 0, 0, 0, 100), sample(0, 0, 0, 0, 50), sample(0, 0, 0, 0, 200)],
                CONFIG
            )

    def test_no_relocations_is_neutral(self):
        samples = [sample(0, 0, 0, 0, 0), sample(5, 0, 0, 0, 100)]
        metrics = synthesize_attention_metrics(samples, CONFIG)

        assert metrics.response_time_status is ResponseTimeStatus.NO_RELOCATIONS
        assert metrics.distractibility == 0.5
        assert metrics.response_time == 0.5
        assert metrics.mean_response_ms is None

    def test_no_recovery_is_flagged(self):
        """Target moves away and the pointer never returns."""
        samples = [
            sample(0, 0, 0, 0, 0),
            sample(0, 0, 400, 0, 100),
            sample(0, 0, 400, 0, 200),
        ]
        metrics = synthesize_attention_metrics(samples, CONFIG)

        assert metrics.response_time_status is ResponseTimeStatus.NO_RECOVERY
        assert metrics.response_time == 0.0
        assert metrics.mean_response_ms is None
        assert metrics.recovered_count == 0
        assert metrics.relocation_count == 1

    def test_unrecovered_events_excluded_from_mean(self):
        samples = [
            sample(0, 0, 0, 0, 0),
            sample(0, 0, 100, 0, 100),     # relocation 1
            sample(100, 0, 100, 0, 300),   # recovered after 200ms
            sample(100, 0, 500, 0, 400),   # relocation 2, never recovered
            sample(100, 0, 500, 0, 500),
        ]
        metrics = synthesize_attention_metrics(samples, CONFIG)

        assert metrics.relocation_count == 2
        assert metrics.recovered_count == 1
        assert metrics.mean_response_ms == 200.0

    def test_recovery_search_stops_at_next_relocation(self):
        """Reaching the following target does not recover the previous event."""
        samples = [
            sample(0, 0, 0, 0, 0),
            sample(0, 0, 300, 0, 100),     # relocation 1, never reached
            sample(0, 0, 300, 0, 1000),
            sample(0, 0, 0, 0, 1900),      # relocation 2 lands on the pointer
            sample(0, 0, 0, 0, 2000),      # recovered 100ms after relocation 2
        ]
        metrics = synthesize_attention_metrics(samples, CONFIG)

        assert metrics.relocation_count == 2
        assert metrics.recovered_count == 1
        assert metrics.mean_response_ms == 100.0
        assert metrics.response_time == pytest.approx(0.95)

    def test_relocation_on_last_sample_cannot_dip(self):
        samples = [sample(0, 0, 0, 0, 0), sample(0, 0, 500, 0, 100)]
        metrics = synthesize_attention_metrics(samples, CONFIG)
        assert metrics.distractibility == 1.0

    def test_accuracy_clamped_at_zero(self):
        """Distances beyond the normalization radius floor at 0."""
        samples = [sample(0, 0, 1000, 1000, 0), sample(0, 0, 1000, 1000, 100)]
        metrics = synthesize_attention_metrics(samples, CONFIG)
        assert metrics.tracking_accuracy == 0.0


class TestConfig:
    """Test TrackingConfig construction."""

    def test_from_config(self):
        config = TrackingConfig.from_config({'attention': {'engaged_radius': 25}})
        assert config.engaged_radius == 25.0
        assert config.max_response_ms == 2000.0

    def test_invalid_radius(self):
        with pytest.raises(ValueError):
            TrackingConfig(normalization_radius=0)

    def test_records_conversion(self):
        records = [
            {'pointer_x': 0, 'pointer_y': 0, 'target_x': 0, 'target_y': 0, 'timestamp_ms': 0},
            {'pointer_x': 1, 'pointer_y': 1, 'target_x': 0, 'target_y': 0, 'timestamp_ms': 16},
        ]
        samples = tracking_samples_from_records(records)
        assert len(samples) == 2
        assert samples[1].timestamp_ms == 16.0


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
