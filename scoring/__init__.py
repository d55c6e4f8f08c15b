"""
Weighted scoring module.

One generic scorer is shared by every assessment modality:
1. Voice (normalized per-callback voice metrics)
2. Attention (pointer-tracking exercise metrics)
3. Facial (external expression model probabilities)
4. Writing (external handwriting model scores)

All scores are:
- Normalized (0-1 scale, weighted sum of 0-1 metrics)
- Explainable (fixed weight tables, ordered threshold rules)
- Configurable (weights and rules live in the engine config)
"""

from .weighted_scorer import score, ScoredResult, SuggestionRule, Comparator
from .modality_profiles import (
    ModalityProfile,
    DEFAULT_PROFILES,
    load_profiles,
    voice_metric_set,
    score_voice,
    score_attention,
    score_external_modality,
)

__all__ = [
    'score',
    'ScoredResult',
    'SuggestionRule',
    'Comparator',
    'ModalityProfile',
    'DEFAULT_PROFILES',
    'load_profiles',
    'voice_metric_set',
    'score_voice',
    'score_attention',
    'score_external_modality',
]
