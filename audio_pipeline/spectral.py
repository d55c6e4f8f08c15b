"""
Sample-window and spectral reducers.

Pure, total functions that turn one capture callback's buffers into scalar
summaries:
- Time domain (SampleWindow): RMS volume, sub-threshold runs, zero crossings
- Frequency domain (Spectrum): dominant frequency, centroid clarity, peaks

Engineering notes:
- Vectorized numpy only; these run once per audio callback (tens of ms)
- Every function is defined for empty input (returns 0) so no call divides
  by zero
"""

import numpy as np


def rms_volume(window: np.ndarray) -> float:
    """
    Root-mean-square energy on a 0-100 scale.

    volume = 100 * min(1, sqrt(mean(x^2)))
    """
    window = np.asarray(window, dtype=np.float64)
    if window.size == 0:
        return 0.0

    rms = np.sqrt(np.mean(window ** 2))
    return float(100.0 * min(1.0, rms))


def dominant_frequency(spectrum: np.ndarray, sample_rate: float, fft_size: int) -> float:
    """
    Frequency (Hz) of the maximum-magnitude bin.

    Ties resolve to the first (lowest-frequency) bin since np.argmax returns
    the first maximal index.
    """
    spectrum = np.asarray(spectrum, dtype=np.float64)
    if spectrum.size == 0:
        return 0.0

    index = int(np.argmax(spectrum))
    return index * sample_rate / fft_size


def spectral_centroid_clarity(spectrum: np.ndarray) -> float:
    """
    Spectral centroid as a fraction of the spectrum length, on a 0-100 scale.

    clarity = 100 * min(1, (sum(i * m_i) / sum(m_i)) / len(spectrum))
    Silent spectrum (sum(m_i) == 0) gives 0.
    """
    spectrum = np.asarray(spectrum, dtype=np.float64)
    total = float(np.sum(spectrum))
    if spectrum.size == 0 or total == 0.0:
        return 0.0

    centroid = float(np.dot(np.arange(spectrum.size), spectrum)) / total
    return 100.0 * min(1.0, centroid / spectrum.size)


def run_length_below_threshold(window: np.ndarray, threshold: float) -> int:
    """
    Count contiguous runs of samples with |x| < threshold.

    A run is counted once, at its first sample (the transition into the
    sub-threshold region), not per sample.

    Example:
        [0.02, 0.0, 0.0, 0.02, 0.0] with threshold 0.01 -> 2
    """
    window = np.asarray(window, dtype=np.float64)
    if window.size == 0:
        return 0

    below = np.abs(window) < threshold
    run_starts = np.count_nonzero(below[1:] & ~below[:-1])
    return int(below[0]) + int(run_starts)


def count_spectral_peaks(spectrum: np.ndarray, threshold: float) -> int:
    """
    Count interior local maxima strictly above threshold.

    A peak must strictly exceed both neighbours, so plateaus and the two
    edge bins never count.
    """
    spectrum = np.asarray(spectrum, dtype=np.float64)
    if spectrum.size < 3:
        return 0

    center = spectrum[1:-1]
    peaks = (center > spectrum[:-2]) & (center > spectrum[2:]) & (center > threshold)
    return int(np.count_nonzero(peaks))


def zero_crossing_rate(window: np.ndarray) -> float:
    """Fraction of adjacent sample pairs whose product is negative."""
    window = np.asarray(window, dtype=np.float64)
    if window.size < 2:
        return 0.0

    crossings = np.count_nonzero(window[1:] * window[:-1] < 0)
    return crossings / (window.size - 1)
