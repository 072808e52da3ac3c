"""Trial-aware tap processing and the dataset pipeline."""

from tap_features.processing.pipeline import DatasetPipeline, format_row, process_dataset
from tap_features.processing.processor import TapSequenceProcessor, TrialContext, advance

__all__ = [
    "DatasetPipeline",
    "TapSequenceProcessor",
    "TrialContext",
    "advance",
    "format_row",
    "process_dataset",
]
