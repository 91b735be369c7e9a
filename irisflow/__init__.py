"""Tabular classification workflow: recipes, interchangeable engines, evaluation."""

from .data import DataLoader, PreprocessingPipeline, initial_split
from .models import ModelFactory, rand_forest
from .utils import Config, glimpse
from .visualization import Plotter
from .metrics import MetricsWrapper, roc_curve, gain_curve
from .evaluation import augment, predict_class, predict_prob

__version__ = '1.0.0'

__all__ = [
    'DataLoader',
    'PreprocessingPipeline',
    'initial_split',
    'ModelFactory',
    'rand_forest',
    'Config',
    'glimpse',
    'Plotter',
    'MetricsWrapper',
    'roc_curve',
    'gain_curve',
    'augment',
    'predict_class',
    'predict_prob',
]
