"""
Per-modality scoring profiles.

A profile is configuration, not code: a weight table plus ordered
suggestion rules fed to the shared weighted scorer.

Modalities:
- voice: normalized VoiceMetrics (volume, clarity, speaking rate, fluency)
- attention: AttentionMetrics from the tracking exercise
- facial: emotion probabilities from an external expression model
- writing: handwriting scores from an external vision model

Defaults below are overridden by the `scoring.<modality>` section of the
engine config (weights and/or rules).
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from audio_pipeline.voice_metrics import VoiceMetrics
from attention_tracking.data_models import AttentionMetrics
from utils.config_loader import get_nested_config
from utils.errors import ConfigurationMismatch
from .weighted_scorer import (
    Comparator, SuggestionRule, ScoredResult, score, rules_from_config
)

logger = logging.getLogger(__name__)

LT = Comparator.LESS_THAN
GT = Comparator.GREATER_THAN


@dataclass(frozen=True)
class ModalityProfile:
    """Weight table and ordered suggestion rules for one modality."""
    name: str
    weights: Dict[str, float]
    rules: List[SuggestionRule] = field(default_factory=list)

    def score(self, metrics: Mapping[str, float], timestamp: Optional[str] = None) -> ScoredResult:
        return score(metrics, self.weights, self.rules, timestamp=timestamp)


DEFAULT_PROFILES = {
    'voice': ModalityProfile(
        name='voice',
        weights={'volume': 0.25, 'clarity': 0.35, 'speaking_rate': 0.2, 'fluency': 0.2},
        rules=[
            SuggestionRule('volume', LT, 0.3, "Encourage speaking a little louder"),
            SuggestionRule('clarity', LT, 0.3, "Practice clear articulation with short repeated words"),
            SuggestionRule('speaking_rate', LT, 0.6, "Practice speaking at a steady, comfortable pace"),
            SuggestionRule('fluency', LT, 0.5, "Reading aloud together may help reduce long pauses"),
        ],
    ),
    'attention': ModalityProfile(
        name='attention',
        weights={
            'focus_duration': 0.3,
            'tracking_accuracy': 0.3,
            'distractibility': 0.2,
            'response_time': 0.2,
        },
        rules=[
            SuggestionRule('focus_duration', LT, 0.7, "Consider shorter work periods with regular breaks"),
            SuggestionRule('tracking_accuracy', LT, 0.7, "Visual tracking exercises may be beneficial"),
            SuggestionRule('distractibility', LT, 0.7, "Recommend minimizing environmental distractions during tasks"),
            SuggestionRule('response_time', LT, 0.7, "Practice activities that improve processing speed"),
        ],
    ),
    'facial': ModalityProfile(
        name='facial',
        weights={
            'happiness': 0.3,
            'sadness': 0.15,
            'anger': 0.15,
            'surprise': 0.15,
            'neutral': 0.15,
            'fear': 0.1,
        },
        rules=[
            SuggestionRule('happiness', GT, 0.7, "Strong positive emotional engagement detected"),
            SuggestionRule('sadness', GT, 0.7, "Consider activities to improve emotional state"),
            SuggestionRule('anger', GT, 0.6, "Recommend calming exercises or breaks"),
            SuggestionRule('fear', GT, 0.6, "Consider reducing environmental stressors"),
            SuggestionRule('neutral', GT, 0.8, "Encourage more emotional expression and engagement"),
        ],
    ),
    'writing': ModalityProfile(
        name='writing',
        weights={
            'legibility': 0.3,
            'consistency': 0.2,
            'spacing': 0.2,
            'alignment': 0.15,
            'pressure': 0.15,
        },
        rules=[
            SuggestionRule('legibility', LT, 0.7, "Focus on forming letters more clearly"),
            SuggestionRule('consistency', LT, 0.7, "Practice maintaining consistent letter size"),
            SuggestionRule('spacing', LT, 0.7, "Work on spacing between words"),
            SuggestionRule('alignment', LT, 0.7, "Try using lined paper to improve alignment"),
            SuggestionRule('pressure', LT, 0.7, "Adjust grip pressure for more comfortable writing"),
        ],
    ),
}


def load_profiles(config: Optional[Dict] = None) -> Dict[str, ModalityProfile]:
    """
    Build modality profiles, applying overrides from the engine config.

    A modality section may override `weights`, `rules`, or both; anything
    missing falls back to the defaults.
    """
    scoring_config = (config or {}).get('scoring', {})
    profiles = {}

    for name, default in DEFAULT_PROFILES.items():
        section = scoring_config.get(name, {}) or {}

        weights = section.get('weights')
        weights = {k: float(v) for k, v in weights.items()} if weights else dict(default.weights)

        rules = section.get('rules')
        rules = rules_from_config(rules) if rules else list(default.rules)

        profiles[name] = ModalityProfile(name=name, weights=weights, rules=rules)

    logger.debug(f"Loaded scoring profiles: {sorted(profiles)}")

    return profiles


def voice_metric_set(voice: VoiceMetrics, config: Optional[Dict] = None) -> Dict[str, float]:
    """
    Normalize VoiceMetrics into a 0-1 MetricSet.

    - volume, clarity: rescaled from 0-100
    - speaking_rate: closeness to target_wpm (1 at target, 0 at 0 or 2x target)
    - fluency: 1 - pause_count / max_pauses (clipped)
    """
    config = config or {}
    target_wpm = float(get_nested_config(config, 'voice_normalization.target_wpm', 120.0))
    max_pauses = float(get_nested_config(config, 'voice_normalization.max_pauses', 200))

    rate_deviation = abs(voice.speaking_rate_wpm - target_wpm) / target_wpm

    return {
        'volume': min(1.0, max(0.0, voice.volume / 100.0)),
        'clarity': min(1.0, max(0.0, voice.clarity / 100.0)),
        'speaking_rate': 1.0 - min(1.0, rate_deviation),
        'fluency': 1.0 - min(1.0, voice.pause_count / max_pauses),
    }


def score_voice(
    voice: VoiceMetrics,
    profiles: Optional[Dict[str, ModalityProfile]] = None,
    config: Optional[Dict] = None
) -> ScoredResult:
    """Score one callback's VoiceMetrics with the voice profile."""
    profiles = profiles or DEFAULT_PROFILES
    return profiles['voice'].score(voice_metric_set(voice, config))


def score_attention(
    attention: AttentionMetrics,
    profiles: Optional[Dict[str, ModalityProfile]] = None
) -> ScoredResult:
    """Score an exercise run's AttentionMetrics with the attention profile."""
    profiles = profiles or DEFAULT_PROFILES
    result = profiles['attention'].score(attention.to_metric_set())
    logger.info(f"Attention score: {result.overall_score:.2f} ({len(result.suggestions)} suggestions)")
    return result


def score_external_modality(
    modality: str,
    metric_set: Mapping[str, float],
    profiles: Optional[Dict[str, ModalityProfile]] = None
) -> ScoredResult:
    """
    Score a MetricSet produced by an external model (facial, writing).

    Raises:
        ConfigurationMismatch: Unknown modality, or a value that is not a
            finite number in [0, 1]
    """
    profiles = profiles or DEFAULT_PROFILES
    if modality not in profiles:
        raise ConfigurationMismatch(f"No scoring profile for modality '{modality}'")

    for name, value in metric_set.items():
        value = float(value)
        if not math.isfinite(value) or not 0.0 <= value <= 1.0:
            raise ConfigurationMismatch(
                f"{modality} metric '{name}' = {value} is not a normalized value in [0, 1]"
            )

    result = profiles[modality].score(metric_set)
    logger.info(f"{modality.capitalize()} score: {result.overall_score:.2f}")
    return result
