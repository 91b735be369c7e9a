import logging
import numpy as np
import pandas as pd
from typing import Union, List, Dict, Optional, Sequence
from sklearn.metrics import (
    accuracy_score, precision_score, recall_score, f1_score,
    roc_auc_score, matthews_corrcoef, balanced_accuracy_score,
    cohen_kappa_score, log_loss
)

logger = logging.getLogger(__name__)

PRED_PREFIX = 'pred_'
PRED_CLASS = 'pred_class'


def probability_columns(df: pd.DataFrame) -> List[str]:
    """Columns holding per-class probabilities (``pred_<class>``)."""
    return [c for c in df.columns if c.startswith(PRED_PREFIX) and c != PRED_CLASS]


class MetricsWrapper:
    """
    A metrics wrapper for multi-class classification evaluation.

    Provides a unified interface for class-based and probability-based
    metrics, computed either as a dict of named scores or as a tidy table.
    """

    # Define once, use everywhere
    METRICS = {
        # Prediction-based metrics
        'accuracy': accuracy_score,
        'kap': cohen_kappa_score,
        'balanced_accuracy': balanced_accuracy_score,
        'mcc': matthews_corrcoef,
        'f1_macro': lambda y_t, y_p: f1_score(y_t, y_p, average='macro', zero_division=0),
        'precision_macro': lambda y_t, y_p: precision_score(y_t, y_p, average='macro', zero_division=0),
        'recall_macro': lambda y_t, y_p: recall_score(y_t, y_p, average='macro', zero_division=0),

        # Probability-based metrics; take the label order as third argument
        'roc_auc': lambda y_t, p, labels: roc_auc_score(y_t, p, multi_class='ovo', average='macro', labels=labels),
        'roc_auc_ovr': lambda y_t, p, labels: roc_auc_score(y_t, p, multi_class='ovr', average='macro', labels=labels),
        'mn_log_loss': lambda y_t, p, labels: log_loss(y_t, p, labels=labels),
    }

    PROB_METRICS = {'roc_auc', 'roc_auc_ovr', 'mn_log_loss'}

    # Estimator name reported in tidy tables
    ESTIMATORS = {'roc_auc': 'hand_till', 'roc_auc_ovr': 'macro'}

    CLASS_DEFAULTS = ('accuracy', 'kap')
    PROB_DEFAULTS = ('mn_log_loss', 'roc_auc')

    @staticmethod
    def get_eval_metrics(metrics_names: Union[str, List[str]] = None,
                         y_true=None, y_pred=None,
                         labels: Optional[Sequence] = None) -> Union[Dict, float, None]:
        """
        Compute named scores.

        Args:
            metrics_names: Metric name(s) to compute. If None, computes all metrics.
            y_true: True labels. If None, returns None.
            y_pred: Predicted labels (1D) or class probabilities (2D, columns ordered like labels)
            labels: Class values matching probability columns; sorted unique y_true when None

        Returns:
            Dict of scores, or a single float when one metric name is given.

        Examples:
            >>> scores = MetricsWrapper.get_eval_metrics(['accuracy', 'kap'], y_true, y_pred)
            >>> auc = MetricsWrapper.get_eval_metrics('roc_auc', y_true, proba, labels=model.classes_)
        """
        if y_true is None:
            return None

        is_single_metric = isinstance(metrics_names, str)

        if metrics_names is None:
            names = list(MetricsWrapper.METRICS)
        else:
            names = [metrics_names] if is_single_metric else list(metrics_names)
            for name in names:
                if name not in MetricsWrapper.METRICS:
                    raise ValueError(f"Metric '{name}' not found. Available metrics: {list(MetricsWrapper.METRICS.keys())}")

        y_true = np.asarray(y_true)
        y_pred = np.asarray(y_pred)
        is_proba = y_pred.ndim > 1

        if labels is None:
            labels = np.unique(y_true)
        labels = np.asarray(labels)
        if is_proba and y_pred.shape[1] != len(labels):
            raise ValueError(f"Got {y_pred.shape[1]} probability columns for {len(labels)} labels")

        results = {}
        for name in names:
            func = MetricsWrapper.METRICS[name]
            if name in MetricsWrapper.PROB_METRICS:
                if not is_proba:
                    # No probabilities available for probability metrics
                    results[name] = np.nan
                    continue
                try:
                    results[name] = float(func(y_true, y_pred, list(labels)))
                except ValueError as e:
                    # e.g. a class absent from the truth column
                    logger.warning(f"Could not compute {name}: {e}")
                    results[name] = np.nan
            else:
                # Convert probabilities to predictions
                y_p = labels[np.argmax(y_pred, axis=1)] if is_proba else y_pred
                results[name] = float(func(y_true, y_p))

        if is_single_metric:
            return results[metrics_names]
        return results

    @staticmethod
    def metrics(df: pd.DataFrame, truth: str, estimate: Optional[str] = PRED_CLASS,
                probs: Optional[Sequence[str]] = None,
                metric_names: Optional[Sequence[str]] = None) -> pd.DataFrame:
        """
        Tidy metric table for a frame of truth, predictions and probabilities.

        Args:
            df: Frame with the truth column and prediction columns
            truth: Name of the true label column
            estimate: Name of the predicted label column; None to skip class metrics
            probs: Probability columns named ``pred_<class>``; None to skip probability metrics
            metric_names: Metrics to report; accuracy, kap, mn_log_loss and roc_auc when None

        Returns:
            DataFrame with columns metric, estimator, estimate
        """
        if truth not in df.columns:
            raise ValueError(f"Truth column '{truth}' not found")

        if metric_names is None:
            metric_names = MetricsWrapper.CLASS_DEFAULTS + MetricsWrapper.PROB_DEFAULTS
        class_names = [m for m in metric_names if m not in MetricsWrapper.PROB_METRICS]
        prob_names = [m for m in metric_names if m in MetricsWrapper.PROB_METRICS]

        rows = []
        if estimate is not None and class_names:
            if estimate not in df.columns:
                raise ValueError(f"Estimate column '{estimate}' not found")
            scores = MetricsWrapper.get_eval_metrics(class_names, df[truth], df[estimate])
            rows.extend({'metric': name, 'estimator': 'multiclass', 'estimate': value}
                        for name, value in scores.items())

        if probs and prob_names:
            probs = list(probs)
            missing = [c for c in probs if c not in df.columns]
            if missing:
                raise ValueError(f"Probability columns not found: {missing}")
            # Column names carry the class as text
            labels = [c[len(PRED_PREFIX):] if c.startswith(PRED_PREFIX) else c for c in probs]
            scores = MetricsWrapper.get_eval_metrics(prob_names, df[truth].astype(str),
                                                     df[probs].to_numpy(), labels=labels)
            rows.extend({'metric': name, 'estimator': MetricsWrapper.ESTIMATORS.get(name, 'multiclass'),
                         'estimate': value}
                        for name, value in scores.items())

        return pd.DataFrame(rows, columns=['metric', 'estimator', 'estimate'])
