"""
Attention metric synthesis from pointer-tracking exercise runs.

The child follows a target that relocates on the canvas every few seconds.
One completed run (ordered TrackingSamples) is reduced to four scores:
- Tracking accuracy: mean distance-based closeness to the target
- Focus duration: share of elapsed time spent engaged (within radius)
- Distractibility: how often a relocation is followed by an accuracy dip
- Response time: how quickly the pointer returns to a relocated target

Engineering approach:
- Batch computation over the whole run (off the latency-sensitive path)
- Elapsed-time weighting rather than sample counting, since pointer events
  arrive irregularly
- Unmeasurable response time is reported through a status flag, never NaN
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from utils.errors import ConfigurationMismatch, InsufficientData
from .data_models import (
    TrackingSample, TrackingConfig, AttentionMetrics, ResponseTimeStatus
)

logger = logging.getLogger(__name__)


def synthesize_attention_metrics(
    samples: Sequence[TrackingSample],
    config: Optional[TrackingConfig] = None
) -> AttentionMetrics:
    """
    Compute AttentionMetrics for one completed exercise run.

    Args:
        samples: Time-ordered tracking samples for the run
        config: Geometry and thresholds (defaults match a 500x300 canvas)

    Returns:
        AttentionMetrics with every score in [0, 1]

    Raises:
        InsufficientData: Fewer than config.min_samples samples, or the run
            has zero elapsed time
        ConfigurationMismatch: Timestamps are not in non-decreasing order
    """
    config = config or TrackingConfig()

    if len(samples) < config.min_samples:
        raise InsufficientData(
            f"Exercise too short: {len(samples)} samples, need at least {config.min_samples}"
        )

    pointer, target, times = _to_arrays(samples)

    deltas = np.diff(times)
    if np.any(deltas < 0):
        raise ConfigurationMismatch("Tracking samples must be ordered by timestamp")

    elapsed = float(times[-1] - times[0])
    if elapsed <= 0:
        raise InsufficientData("Exercise too short: no elapsed time between samples")

    logger.info(f"Computing attention metrics from {len(samples)} samples over {elapsed:.0f}ms")

    distances = np.hypot(*(pointer - target).T)
    accuracy = 1.0 - np.minimum(1.0, distances / config.normalization_radius)
    engaged = distances < config.engaged_radius

    # Target differs from the previous sample's target
    moved = np.any(target[1:] != target[:-1], axis=1)
    relocations = np.flatnonzero(moved) + 1

    tracking_accuracy = float(np.clip(np.mean(accuracy), 0.0, 1.0))
    focus_duration = _compute_focus_duration(engaged, deltas, elapsed)

    if relocations.size == 0:
        logger.warning("No target relocations in run; relocation metrics set to neutral")
        distractibility = config.neutral_score
        response_time = config.neutral_score
        status = ResponseTimeStatus.NO_RELOCATIONS
        mean_response_ms = None
        recovered = 0
    else:
        distractibility = _compute_distractibility(accuracy, relocations, config.dip_threshold)
        response_time, status, mean_response_ms, recovered = _compute_response_time(
            engaged, times, relocations, config.max_response_ms
        )

    metrics = AttentionMetrics(
        focus_duration=focus_duration,
        tracking_accuracy=tracking_accuracy,
        distractibility=float(distractibility),
        response_time=float(response_time),
        response_time_status=status,
        mean_response_ms=mean_response_ms,
        relocation_count=int(relocations.size),
        recovered_count=recovered,
        sample_count=len(samples),
        elapsed_ms=elapsed,
    )

    logger.info(
        f"Attention metrics: focus={metrics.focus_duration:.2f}, "
        f"accuracy={metrics.tracking_accuracy:.2f}, "
        f"distractibility={metrics.distractibility:.2f}, "
        f"response={metrics.response_time:.2f} ({status.value})"
    )

    return metrics


def _to_arrays(samples: Sequence[TrackingSample]) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Split samples into (n, 2) pointer, (n, 2) target and (n,) time arrays."""
    data = np.array(
        [
            (s.pointer_x, s.pointer_y, s.target_x, s.target_y, s.timestamp_ms)
            for s in samples
        ],
        dtype=np.float64
    )
    return data[:, 0:2], data[:, 2:4], data[:, 4]


def _compute_focus_duration(engaged: np.ndarray, deltas: np.ndarray, elapsed: float) -> float:
    """
    Share of elapsed time where consecutive samples are both engaged.

    Each interval between samples i-1 and i contributes its duration when
    both endpoints are within the engaged radius.
    """
    engaged_intervals = engaged[:-1] & engaged[1:]
    focused_ms = float(np.sum(deltas[engaged_intervals]))
    return float(np.clip(focused_ms / elapsed, 0.0, 1.0))


def _compute_distractibility(
    accuracy: np.ndarray,
    relocations: np.ndarray,
    dip_threshold: float
) -> float:
    """
    1 - (relocations followed by an accuracy dip) / (relocations).

    The dip is judged on the sample immediately after the relocation sample;
    a relocation on the final sample has no follower and cannot dip.
    """
    followers = relocations + 1
    followers = followers[followers < accuracy.size]
    dips = int(np.count_nonzero(accuracy[followers] < dip_threshold))

    logger.debug(f"Distractibility: {dips} dips over {relocations.size} relocations")

    return float(np.clip(1.0 - dips / relocations.size, 0.0, 1.0))


def _compute_response_time(
    engaged: np.ndarray,
    times: np.ndarray,
    relocations: np.ndarray,
    max_response_ms: float
) -> Tuple[float, ResponseTimeStatus, Optional[float], int]:
    """
    Mean recovery latency after relocations, normalized to [0, 1].

    For each relocation at index i, latency runs to the first later sample
    (j > i) within the engaged radius of that relocated target. The search
    stops at the next relocation (or the run end); relocations without
    recovery inside that span are excluded from the mean.

    Returns:
        (score, status, mean_latency_ms, recovered_count)
    """
    engaged_indices = np.flatnonzero(engaged)
    positions = np.searchsorted(engaged_indices, relocations, side='right')
    # Sentinel index past the last sample closes the final span
    span_ends = np.append(relocations[1:], engaged.size)
    candidates = np.append(engaged_indices, engaged.size)[positions]
    recovered_mask = candidates < span_ends

    if not np.any(recovered_mask):
        logger.warning(
            f"No recovery after any of {relocations.size} target relocations; "
            f"response time reported as {ResponseTimeStatus.NO_RECOVERY.value}"
        )
        return 0.0, ResponseTimeStatus.NO_RECOVERY, None, 0

    recovery_indices = candidates[recovered_mask]
    latencies = times[recovery_indices] - times[relocations[recovered_mask]]
    mean_latency = float(np.mean(latencies))

    score = 1.0 - min(1.0, mean_latency / max_response_ms)
    return float(np.clip(score, 0.0, 1.0)), ResponseTimeStatus.MEASURED, mean_latency, int(recovered_mask.sum())


def tracking_samples_from_records(records: Sequence[Dict]) -> List[TrackingSample]:
    """Convert capture records (dicts) into TrackingSamples."""
    return [TrackingSample.from_dict(record) for record in records]
