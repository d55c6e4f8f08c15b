"""Shared utilities for the signal feature extraction and scoring engine."""

from .config_loader import load_config, get_nested_config
from .errors import (
    SignalEngineError,
    ConfigurationMismatch,
    InsufficientData,
    UnknownMetric,
    WeightOutOfRange,
    AssessmentClosed,
    AssessmentNotFound,
)

__all__ = [
    'load_config',
    'get_nested_config',
    'SignalEngineError',
    'ConfigurationMismatch',
    'InsufficientData',
    'UnknownMetric',
    'WeightOutOfRange',
    'AssessmentClosed',
    'AssessmentNotFound',
]
