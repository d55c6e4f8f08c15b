"""
Generic weighted scoring and rule-based suggestions.

Shared by every modality (voice, attention, facial, writing): only the
weight table and the rule list differ, never the code path.

Formula:
    overall = clip(sum(weight_i * metric_i), 0, 1)

No implicit renormalization: a weight table that does not sum to 1 is a
configuration error in the calling profile. It is logged, not raised.

Suggestions:
- Rules are evaluated in the order given
- Each rule contributes at most one suggestion
- Output order follows rule order, independent of metric dict ordering
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from utils.errors import ConfigurationMismatch, UnknownMetric, WeightOutOfRange

logger = logging.getLogger(__name__)

WEIGHT_SUM_TOLERANCE = 0.01


class Comparator(Enum):
    """Threshold comparison used by a suggestion rule."""
    LESS_THAN = "less_than"
    GREATER_THAN = "greater_than"

    def matches(self, value: float, threshold: float) -> bool:
        if self is Comparator.LESS_THAN:
            return value < threshold
        return value > threshold


@dataclass(frozen=True)
class SuggestionRule:
    """Emit `suggestion` when `metric` compares true against `threshold`."""
    metric: str
    comparator: Comparator
    threshold: float
    suggestion: str

    @classmethod
    def from_dict(cls, data: Mapping) -> 'SuggestionRule':
        return cls(
            metric=str(data['metric']),
            comparator=Comparator(data['comparator']),
            threshold=float(data['threshold']),
            suggestion=str(data['suggestion']),
        )


@dataclass(frozen=True)
class ScoredResult:
    """
    Scored output of one modality invocation.

    Attributes:
        metrics: Normalized metric values (0-1) that were scored
        overall_score: Weighted overall score (0-1)
        suggestions: Suggestion strings in rule order
        timestamp: ISO-8601 UTC time of scoring
    """
    metrics: Mapping[str, float]
    overall_score: float
    suggestions: Tuple[str, ...] = field(default_factory=tuple)
    timestamp: str = ""

    def __post_init__(self):
        # Read-only view over a private copy
        object.__setattr__(self, 'metrics', MappingProxyType(dict(self.metrics)))
        object.__setattr__(self, 'suggestions', tuple(self.suggestions))

    def to_dict(self) -> Dict:
        return {
            'metrics': dict(self.metrics),
            'overallScore': self.overall_score,
            'suggestions': list(self.suggestions),
            'timestamp': self.timestamp,
        }


def score(
    metrics: Mapping[str, float],
    weights: Mapping[str, float],
    rules: Sequence[SuggestionRule] = (),
    timestamp: Optional[str] = None
) -> ScoredResult:
    """
    Score a MetricSet against a weight table and suggestion rules.

    Args:
        metrics: Metric name -> normalized value (0-1)
        weights: Metric name -> weight (0-1); should sum to 1 per modality
        rules: Ordered suggestion rules
        timestamp: Optional ISO timestamp (defaults to now, UTC)

    Returns:
        ScoredResult

    Raises:
        UnknownMetric: A weight or rule names a metric absent from `metrics`
        WeightOutOfRange: A weight lies outside [0, 1]
        ConfigurationMismatch: A weighted metric value is NaN or infinite
    """
    _validate_weights(metrics, weights)
    _validate_rules(metrics, rules)

    total = sum(weight * float(metrics[name]) for name, weight in weights.items())
    overall = float(np.clip(total, 0.0, 1.0))

    suggestions = tuple(
        rule.suggestion
        for rule in rules
        if rule.comparator.matches(float(metrics[rule.metric]), rule.threshold)
    )

    return ScoredResult(
        metrics={name: float(value) for name, value in metrics.items()},
        overall_score=overall,
        suggestions=suggestions,
        timestamp=timestamp or datetime.now(timezone.utc).isoformat(),
    )


def _validate_weights(metrics: Mapping[str, float], weights: Mapping[str, float]) -> None:
    for name, weight in weights.items():
        if name not in metrics:
            raise UnknownMetric(f"Weight references unknown metric '{name}'")
        if not 0.0 <= weight <= 1.0:
            raise WeightOutOfRange(f"Weight for '{name}' is {weight}, must be within [0, 1]")
        if not math.isfinite(float(metrics[name])):
            raise ConfigurationMismatch(f"Metric '{name}' is {metrics[name]}, must be a finite number")

    weight_sum = sum(weights.values())
    if weights and abs(weight_sum - 1.0) > WEIGHT_SUM_TOLERANCE:
        logger.warning(f"Weight table sums to {weight_sum:.3f}, expected 1.0")


def _validate_rules(metrics: Mapping[str, float], rules: Sequence[SuggestionRule]) -> None:
    for rule in rules:
        if rule.metric not in metrics:
            raise UnknownMetric(f"Suggestion rule references unknown metric '{rule.metric}'")


def rules_from_config(rule_dicts: Sequence[Mapping]) -> List[SuggestionRule]:
    """Parse a list of rule mappings (as written in the YAML config)."""
    return [SuggestionRule.from_dict(rule) for rule in rule_dicts]
