"""Prediction and evaluation helpers."""

from .predictor import predict_class, predict_prob, augment, check_probabilities

__all__ = ['predict_class', 'predict_prob', 'augment', 'check_probabilities']
