"""
Per-callback voice metric synthesis.

Each audio-processing callback delivers one SampleWindow (time domain) and
the analyser Spectrum captured at the same instant. Both are reduced to a
VoiceMetrics record:
- Volume: RMS energy (0-100)
- Pitch: dominant spectral bin converted to Hz
- Clarity: spectral centroid position (0-100)
- Word count: spectral peaks above half byte scale, 5 peaks ~ 1 word
- Speaking rate: words * 60 (each callback treated as one second of audio)
- Pause count: contiguous runs of near-silent samples

Engineering notes:
- Called on a latency-sensitive callback path: no I/O, vectorized math only
- Sample rate and FFT size are passed explicitly per call instead of living
  in shared audio-context state
- Buffers that disagree with the configured sizes are rejected, never
  truncated
"""

import logging
from dataclasses import dataclass, asdict
from typing import Dict, Optional

import numpy as np

from utils.config_loader import get_nested_config
from utils.errors import ConfigurationMismatch
from .spectral import (
    rms_volume,
    dominant_frequency,
    spectral_centroid_clarity,
    run_length_below_threshold,
    count_spectral_peaks,
    zero_crossing_rate,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VoiceAnalysisConfig:
    """
    Fixed-per-session audio analysis parameters.

    Attributes:
        window_length: Samples per callback buffer
        fft_size: Analyser FFT size; spectrum carries fft_size // 2 bins
        pause_threshold: Absolute amplitude below which a sample is silent
        peak_threshold: Byte-scale magnitude a spectral peak must exceed
        peaks_per_word: Calibration constant (spectral peaks per word)
    """
    window_length: int = 4096
    fft_size: int = 2048
    pause_threshold: float = 0.01
    peak_threshold: float = 128.0
    peaks_per_word: int = 5

    def __post_init__(self):
        if self.window_length <= 0:
            raise ValueError(f"window_length must be positive, got {self.window_length}")
        if self.fft_size < 2:
            raise ValueError(f"fft_size must be at least 2, got {self.fft_size}")
        if self.pause_threshold < 0:
            raise ValueError(f"pause_threshold must be non-negative, got {self.pause_threshold}")
        if self.peaks_per_word <= 0:
            raise ValueError(f"peaks_per_word must be positive, got {self.peaks_per_word}")

    @property
    def spectrum_length(self) -> int:
        return self.fft_size // 2

    @classmethod
    def from_config(cls, config: Optional[Dict]) -> 'VoiceAnalysisConfig':
        """Build from the 'audio' section of the engine config."""
        config = config or {}
        return cls(
            window_length=int(get_nested_config(config, 'audio.window_length', 4096)),
            fft_size=int(get_nested_config(config, 'audio.fft_size', 2048)),
            pause_threshold=float(get_nested_config(config, 'audio.pause_threshold', 0.01)),
            peak_threshold=float(get_nested_config(config, 'audio.peak_threshold', 128.0)),
            peaks_per_word=int(get_nested_config(config, 'audio.peaks_per_word', 5)),
        )


@dataclass(frozen=True)
class VoiceMetrics:
    """
    Voice features derived from a single audio callback.

    Attributes:
        pitch_hz: Dominant frequency in Hz
        volume: RMS volume (0-100)
        clarity: Spectral centroid clarity (0-100)
        word_count: Estimated words in the window (>= 1)
        speaking_rate_wpm: Words per minute (word_count * 60)
        pause_count: Contiguous silent runs in the window
        zero_crossing_rate: Fraction of adjacent samples changing sign (0-1)
    """
    pitch_hz: float
    volume: float
    clarity: float
    word_count: int
    speaking_rate_wpm: int
    pause_count: int
    zero_crossing_rate: float = 0.0

    def to_dict(self) -> Dict:
        return asdict(self)


def synthesize_voice_metrics(
    window: np.ndarray,
    spectrum: np.ndarray,
    sample_rate: float,
    fft_size: int,
    config: Optional[VoiceAnalysisConfig] = None
) -> VoiceMetrics:
    """
    Compute VoiceMetrics for one audio callback.

    Args:
        window: Time-domain samples (length config.window_length)
        spectrum: Byte-scale magnitudes (length fft_size // 2)
        sample_rate: Capture device sample rate in Hz
        fft_size: Analyser FFT size used to produce the spectrum
        config: Analysis parameters (defaults: 4096 window, 2048 FFT)

    Returns:
        VoiceMetrics for this window

    Raises:
        ConfigurationMismatch: If buffer sizes disagree with configuration
    """
    config = config or VoiceAnalysisConfig()
    window = np.asarray(window, dtype=np.float64)
    spectrum = np.asarray(spectrum, dtype=np.float64)

    _validate_buffers(window, spectrum, sample_rate, fft_size, config)

    volume = rms_volume(window)
    pitch = dominant_frequency(spectrum, sample_rate, fft_size)
    clarity = spectral_centroid_clarity(spectrum)

    peaks = count_spectral_peaks(spectrum, config.peak_threshold)
    word_count = max(1, peaks // config.peaks_per_word)

    # One callback is treated as one second of speech
    speaking_rate = word_count * 60

    pause_count = run_length_below_threshold(window, config.pause_threshold)

    metrics = VoiceMetrics(
        pitch_hz=float(pitch),
        volume=float(volume),
        clarity=float(clarity),
        word_count=int(word_count),
        speaking_rate_wpm=int(speaking_rate),
        pause_count=int(pause_count),
        zero_crossing_rate=float(zero_crossing_rate(window)),
    )

    logger.debug(
        f"Voice metrics: pitch={metrics.pitch_hz:.1f}Hz, volume={metrics.volume:.1f}, "
        f"clarity={metrics.clarity:.1f}, words={metrics.word_count}, pauses={metrics.pause_count}"
    )

    return metrics


def _validate_buffers(
    window: np.ndarray,
    spectrum: np.ndarray,
    sample_rate: float,
    fft_size: int,
    config: VoiceAnalysisConfig
) -> None:
    """Reject buffers whose shape disagrees with the session configuration."""
    if window.ndim != 1 or spectrum.ndim != 1:
        raise ConfigurationMismatch(
            f"Expected 1-D buffers, got window ndim={window.ndim}, spectrum ndim={spectrum.ndim}"
        )

    if sample_rate <= 0:
        raise ConfigurationMismatch(f"Sample rate must be positive, got {sample_rate}")

    if fft_size != config.fft_size:
        raise ConfigurationMismatch(
            f"FFT size {fft_size} does not match configured {config.fft_size}"
        )

    if window.size != config.window_length:
        raise ConfigurationMismatch(
            f"Window has {window.size} samples, expected {config.window_length}"
        )

    if spectrum.size != config.spectrum_length:
        raise ConfigurationMismatch(
            f"Spectrum has {spectrum.size} bins, expected {config.spectrum_length} "
            f"(fft_size={fft_size})"
        )
