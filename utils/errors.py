"""
Error taxonomy for the signal feature extraction and scoring engine.

All failures are deterministic given the same input: nothing here is
transient, so callers never retry automatically.

- ConfigurationMismatch: input size or ordering disagrees with configuration
  (caller bug)
- InsufficientData: too few samples for a metric ("exercise too short",
  the child may retry the exercise)
- UnknownMetric / WeightOutOfRange: broken static modality configuration
- AssessmentClosed: write attempted after the assessment was finalized
- AssessmentNotFound: registry lookup for an id that was never created
"""


class SignalEngineError(Exception):
    """Base class for every error raised by the engine."""


class ConfigurationMismatch(SignalEngineError, ValueError):
    """Input buffer shape or ordering does not match the configured layout."""


class InsufficientData(SignalEngineError, ValueError):
    """Not enough samples to compute the requested metrics."""


class UnknownMetric(SignalEngineError, KeyError):
    """A weight or rule references a metric missing from the MetricSet."""

    def __str__(self):
        # KeyError quotes its argument; keep the plain message
        return str(self.args[0]) if self.args else ''


class WeightOutOfRange(SignalEngineError, ValueError):
    """A weight table entry lies outside [0, 1]."""


class AssessmentClosed(SignalEngineError):
    """The assessment is completed and rejects further writes."""


class AssessmentNotFound(SignalEngineError, KeyError):
    """No assessment is registered under the requested id."""

    def __str__(self):
        return str(self.args[0]) if self.args else ''
