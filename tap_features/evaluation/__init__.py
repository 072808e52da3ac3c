"""Post-processing and visualization of feature tables."""

from tap_features.evaluation.outliers import filter_outliers, is_outlier
from tap_features.evaluation.visualization import plot_layout

__all__ = ["filter_outliers", "is_outlier", "plot_layout"]
