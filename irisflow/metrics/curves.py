"""
Threshold Curves
================

One-vs-all ROC and gain curve tables for multi-class probability predictions.
Each table stacks one curve per class, identified by the ``level`` column.

"""

import logging
from typing import Optional, Sequence

import numpy as np
import pandas as pd
from sklearn import metrics as skm

from .metrics_wrapper import PRED_PREFIX, probability_columns

logger = logging.getLogger(__name__)


def _resolve(df: pd.DataFrame, truth: str, prob_columns: Optional[Sequence[str]]):
    if truth not in df.columns:
        raise ValueError(f"Truth column '{truth}' not found")
    prob_columns = list(prob_columns) if prob_columns else probability_columns(df)
    if not prob_columns:
        raise ValueError("No probability columns given or found")
    missing = [c for c in prob_columns if c not in df.columns]
    if missing:
        raise ValueError(f"Probability columns not found: {missing}")
    return [(c, c[len(PRED_PREFIX):] if c.startswith(PRED_PREFIX) else c) for c in prob_columns]


def roc_curve(df: pd.DataFrame, truth: str, prob_columns: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """
    ROC curve of every class against the rest.

    Args:
        df: Frame with the truth column and probability columns
        truth: Name of the true label column
        prob_columns: ``pred_<class>`` columns; every such column when None

    Returns:
        DataFrame with columns level, threshold, specificity, sensitivity
    """
    frames = []
    for column, level in _resolve(df, truth, prob_columns):
        events = (df[truth].astype(str) == level).to_numpy()
        if events.all() or not events.any():
            logger.warning(f"Skipping ROC curve for '{level}': needs both events and non-events")
            continue
        fpr, tpr, thresholds = skm.roc_curve(events, df[column].to_numpy(), drop_intermediate=False)
        frames.append(pd.DataFrame({
            'level': level,
            'threshold': thresholds,
            'specificity': 1 - fpr,
            'sensitivity': tpr,
        }))
    if not frames:
        raise ValueError("No class has both events and non-events")
    return pd.concat(frames, ignore_index=True)


def gain_curve(df: pd.DataFrame, truth: str, prob_columns: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """
    Cumulative gain curve of every class against the rest.

    Rows are ranked by descending probability; tied probabilities form a
    single step. Each curve starts at (0, 0) and ends at (100, 100).

    Returns:
        DataFrame with columns level, n, n_events, percent_tested, percent_found
    """
    frames = []
    n_total = len(df)
    for column, level in _resolve(df, truth, prob_columns):
        events = (df[truth].astype(str) == level).astype(int)
        total_events = int(events.sum())
        if total_events == 0:
            logger.warning(f"Skipping gain curve for '{level}': no events")
            continue

        ranked = pd.DataFrame({'p': df[column].to_numpy(), 'event': events.to_numpy()})
        steps = (ranked.groupby('p', sort=True)
                 .agg(n=('event', 'size'), n_events=('event', 'sum'))
                 .iloc[::-1])
        n = np.concatenate([[0], steps['n'].cumsum().to_numpy()])
        n_events = np.concatenate([[0], steps['n_events'].cumsum().to_numpy()])

        frames.append(pd.DataFrame({
            'level': level,
            'n': n,
            'n_events': n_events,
            'percent_tested': n / n_total * 100,
            'percent_found': n_events / total_events * 100,
        }))
    if not frames:
        raise ValueError("No class has any events")
    return pd.concat(frames, ignore_index=True)


def auc_from_curve(curve: pd.DataFrame) -> pd.Series:
    """Area under each level's ROC curve, by trapezoidal rule."""
    return pd.Series({
        level: skm.auc(1 - group['specificity'], group['sensitivity'])
        for level, group in curve.groupby('level', sort=False)
    }, name='auc')
