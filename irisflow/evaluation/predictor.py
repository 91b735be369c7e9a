"""Prediction tables bound back to the rows they were made for."""

import logging
from typing import Optional

import numpy as np
import pandas as pd

from ..models.base import BaseModel
from ..metrics.metrics_wrapper import PRED_CLASS, PRED_PREFIX

logger = logging.getLogger(__name__)

PREDICTION_TYPES = ('class', 'prob', 'both')


def _features(model: BaseModel, data: pd.DataFrame, outcome: Optional[str]) -> pd.DataFrame:
    # Models trained on frames pick their own columns; the outcome only matters otherwise
    if outcome is not None and outcome in data.columns:
        data = data.drop(columns=[outcome])
    return data


def predict_class(model: BaseModel, data: pd.DataFrame, outcome: Optional[str] = None) -> pd.DataFrame:
    """
    One predicted label per row.

    Returns:
        Single-column frame 'pred_class', indexed like data
    """
    labels = model.predict(_features(model, data, outcome))
    return pd.DataFrame({PRED_CLASS: labels}, index=data.index)


def predict_prob(model: BaseModel, data: pd.DataFrame, outcome: Optional[str] = None) -> pd.DataFrame:
    """
    Class probabilities per row.

    Returns:
        Frame with one 'pred_<class>' column per class, rows summing to 1
    """
    proba = model.predict_proba(_features(model, data, outcome))
    columns = [f"{PRED_PREFIX}{c}" for c in model.classes_]
    return pd.DataFrame(proba, columns=columns, index=data.index)


def augment(model: BaseModel, data: pd.DataFrame, type: str = 'class',
            outcome: Optional[str] = None) -> pd.DataFrame:
    """
    Bind prediction columns to the rows they were computed for.

    Args:
        model: Trained model
        data: Processed rows, optionally including the outcome column
        type: 'class', 'prob' or 'both'
        outcome: Outcome column to exclude from the features

    Returns:
        Prediction columns followed by the original columns
    """
    if type not in PREDICTION_TYPES:
        raise ValueError(f"type must be one of {PREDICTION_TYPES}, got '{type}'")

    parts = []
    if type in ('class', 'both'):
        parts.append(predict_class(model, data, outcome))
    if type in ('prob', 'both'):
        parts.append(predict_prob(model, data, outcome))
    parts.append(data)

    augmented = pd.concat([p.reset_index(drop=True) for p in parts], axis=1)
    logger.debug(f"Augmented {len(augmented)} rows with {type} predictions from {model.engine}")
    return augmented


def check_probabilities(prob: pd.DataFrame, atol: float = 1e-6) -> bool:
    """True when every row of a probability table sums to one."""
    return bool(np.allclose(prob.sum(axis=1).to_numpy(), 1.0, atol=atol))
