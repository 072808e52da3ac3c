"""
Tap Features - feature tables from touchscreen keyboard tap logs.

Reconstructs per-trial tap sequences from raw capture logs and emits one
feature row per key press: travel deltas, hand crossing and letter
n-gram indicators, ready for classifier training.
"""

from tap_features.config import Config, DataFormat
from tap_features.errors import ConfigurationError, FormatError
from tap_features.models.keyboard import KeyboardLayout
from tap_features.processing.pipeline import DatasetPipeline
from tap_features.processing.processor import TapSequenceProcessor

__version__ = "0.1.0"
__all__ = [
    "Config",
    "ConfigurationError",
    "DataFormat",
    "DatasetPipeline",
    "FormatError",
    "KeyboardLayout",
    "TapSequenceProcessor",
]
