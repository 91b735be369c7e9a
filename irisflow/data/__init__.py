"""Data handling module."""

from .loader import DataLoader
from .splitter import DataSplit, initial_split
from .multicollinearity_analyzer import MulticollinearityAnalyzer
from .feature_scaler import FeatureScaler
from .preprocessing_pipeline import PreprocessingPipeline, PreprocessingState

__all__ = [
    "DataLoader",
    "DataSplit",
    "initial_split",
    "MulticollinearityAnalyzer",
    "FeatureScaler",
    "PreprocessingPipeline",
    "PreprocessingState"
]
