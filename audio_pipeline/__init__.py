"""
Audio feature extraction for the voice assessment.

This package turns each capture callback into voice metrics:
1. Sample-window reduction (RMS volume, pause runs, zero crossings)
2. Spectral feature extraction (dominant pitch, centroid clarity, peaks)
3. VoiceMetrics synthesis (word count, speaking rate)
"""

from .spectral import (
    rms_volume,
    dominant_frequency,
    spectral_centroid_clarity,
    run_length_below_threshold,
    count_spectral_peaks,
    zero_crossing_rate,
)
from .voice_metrics import synthesize_voice_metrics, VoiceMetrics, VoiceAnalysisConfig

__all__ = [
    'rms_volume',
    'dominant_frequency',
    'spectral_centroid_clarity',
    'run_length_below_threshold',
    'count_spectral_peaks',
    'zero_crossing_rate',
    'synthesize_voice_metrics',
    'VoiceMetrics',
    'VoiceAnalysisConfig',
]
