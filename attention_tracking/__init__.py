"""
Pointer-tracking attention analysis.

Turns one completed target-following exercise run into attention metrics:
1. Tracking accuracy (distance to target)
2. Focus duration (time spent engaged)
3. Distractibility (accuracy dips after target relocation)
4. Response time (recovery latency after relocation)
"""

from .data_models import (
    TrackingSample,
    TrackingConfig,
    AttentionMetrics,
    ResponseTimeStatus,
)
from .tracking_metrics import synthesize_attention_metrics, tracking_samples_from_records

__all__ = [
    'TrackingSample',
    'TrackingConfig',
    'AttentionMetrics',
    'ResponseTimeStatus',
    'synthesize_attention_metrics',
    'tracking_samples_from_records',
]
