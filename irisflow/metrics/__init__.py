"""Evaluation metrics and threshold curves."""

from .metrics_wrapper import MetricsWrapper, probability_columns
from .curves import roc_curve, gain_curve, auc_from_curve

__all__ = ['MetricsWrapper', 'probability_columns', 'roc_curve', 'gain_curve', 'auc_from_curve']
