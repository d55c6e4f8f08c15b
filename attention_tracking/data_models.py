"""
Data models for the pointer-tracking attention exercise.
"""

import math
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict, Optional

from utils.config_loader import get_nested_config


class ResponseTimeStatus(Enum):
    """How the response_time metric was obtained."""
    MEASURED = "measured"  # At least one relocation was followed by recovery
    NO_RECOVERY = "no_recovery"  # Relocations happened, none recovered before run end
    NO_RELOCATIONS = "no_relocations"  # Target never moved during the run


@dataclass(frozen=True)
class TrackingSample:
    """One pointer/target observation during an attention exercise."""
    pointer_x: float
    pointer_y: float
    target_x: float
    target_y: float
    timestamp_ms: float

    def distance_to_target(self) -> float:
        """Euclidean pointer-to-target distance in px."""
        return math.hypot(self.pointer_x - self.target_x, self.pointer_y - self.target_y)

    def same_target(self, other: 'TrackingSample') -> bool:
        return self.target_x == other.target_x and self.target_y == other.target_y

    @classmethod
    def from_dict(cls, data: Dict) -> 'TrackingSample':
        """
        Build from a capture record.

        Accepts snake_case keys or the capture UI's camelCase keys
        (pointerX, targetX, timestamp).
        """
        def pick(*keys):
            for key in keys:
                if key in data:
                    return float(data[key])
            raise KeyError(f"Tracking sample missing field: {keys[0]}")

        return cls(
            pointer_x=pick('pointer_x', 'pointerX', 'x'),
            pointer_y=pick('pointer_y', 'pointerY', 'y'),
            target_x=pick('target_x', 'targetX'),
            target_y=pick('target_y', 'targetY'),
            timestamp_ms=pick('timestamp_ms', 'timestampMs', 'timestamp'),
        )


@dataclass(frozen=True)
class TrackingConfig:
    """
    Geometry and thresholds for attention metrics.

    Attributes:
        normalization_radius: Worst-case distance in px (canvas diagonal)
        engaged_radius: Pointer within this distance counts as on target (px)
        dip_threshold: Accuracy below this right after a relocation is a dip
        max_response_ms: Recovery latency mapped to response_time 0
        neutral_score: Value used for relocation metrics when the target
            never moved
        min_samples: Minimum samples per run
    """
    normalization_radius: float = 583.095
    engaged_radius: float = 40.0
    dip_threshold: float = 0.7
    max_response_ms: float = 2000.0
    neutral_score: float = 0.5
    min_samples: int = 2

    def __post_init__(self):
        if self.normalization_radius <= 0:
            raise ValueError(f"normalization_radius must be positive, got {self.normalization_radius}")
        if self.engaged_radius <= 0:
            raise ValueError(f"engaged_radius must be positive, got {self.engaged_radius}")
        if self.max_response_ms <= 0:
            raise ValueError(f"max_response_ms must be positive, got {self.max_response_ms}")
        if self.min_samples < 2:
            raise ValueError(f"min_samples must be at least 2, got {self.min_samples}")

    @classmethod
    def from_config(cls, config: Optional[Dict]) -> 'TrackingConfig':
        """Build from the 'attention' section of the engine config."""
        config = config or {}
        return cls(
            normalization_radius=float(get_nested_config(config, 'attention.normalization_radius', 583.095)),
            engaged_radius=float(get_nested_config(config, 'attention.engaged_radius', 40.0)),
            dip_threshold=float(get_nested_config(config, 'attention.dip_threshold', 0.7)),
            max_response_ms=float(get_nested_config(config, 'attention.max_response_ms', 2000.0)),
            neutral_score=float(get_nested_config(config, 'attention.neutral_score', 0.5)),
            min_samples=int(get_nested_config(config, 'attention.min_samples', 2)),
        )


@dataclass(frozen=True)
class AttentionMetrics:
    """
    Attention metrics for one completed exercise run (all scores 0-1).

    Attributes:
        focus_duration: Fraction of elapsed time spent engaged with the target
        tracking_accuracy: Mean distance-based accuracy
        distractibility: 1 - share of relocations followed by an accuracy dip
            (higher = less distractible)
        response_time: 1 - normalized mean recovery latency (higher = faster)
        response_time_status: How response_time was obtained
        mean_response_ms: Mean recovery latency, None when nothing recovered
        relocation_count: Target relocation events in the run
        recovered_count: Relocations followed by a return to the target
        sample_count: Samples in the run
        elapsed_ms: Run duration
    """
    focus_duration: float
    tracking_accuracy: float
    distractibility: float
    response_time: float
    response_time_status: ResponseTimeStatus = ResponseTimeStatus.MEASURED
    mean_response_ms: Optional[float] = None
    relocation_count: int = 0
    recovered_count: int = 0
    sample_count: int = 0
    elapsed_ms: float = 0.0

    def to_metric_set(self) -> Dict[str, float]:
        """Normalized metrics consumed by the weighted scorer."""
        return {
            'focus_duration': self.focus_duration,
            'tracking_accuracy': self.tracking_accuracy,
            'distractibility': self.distractibility,
            'response_time': self.response_time,
        }

    def to_dict(self) -> Dict:
        data = asdict(self)
        data['response_time_status'] = self.response_time_status.value
        return data
