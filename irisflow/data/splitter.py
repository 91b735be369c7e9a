"""
Train/Test Splitting
====================

Partitions a table into training and testing rows once, up front.

"""

import math
import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd
from sklearn.model_selection import train_test_split

logger = logging.getLogger(__name__)


@dataclass
class DataSplit:
    """Row positions of a single train/test partition."""
    data: pd.DataFrame
    train_indices: np.ndarray
    test_indices: np.ndarray
    prop: float
    random_state: Optional[int] = None
    strata: Optional[str] = None

    def training(self) -> pd.DataFrame:
        """Rows assigned to training."""
        return self.data.iloc[self.train_indices].copy()

    def testing(self) -> pd.DataFrame:
        """Rows assigned to testing."""
        return self.data.iloc[self.test_indices].copy()

    def __repr__(self) -> str:
        return (f"<Training/Testing/Total>\n"
                f"<{len(self.train_indices)}/{len(self.test_indices)}/{len(self.data)}>")


def initial_split(
    data: pd.DataFrame,
    prop: float = 0.6,
    strata: Optional[str] = None,
    random_state: Optional[int] = None
) -> DataSplit:
    """
    Randomly assign rows to training and testing without replacement.

    Args:
        data: Full table
        prop: Fraction of rows used for training; floor(n * prop) rows are drawn
        strata: Optional column to stratify the draw on
        random_state: Seed for the draw; None leaves the split non-deterministic

    Returns:
        DataSplit holding sorted row positions for each subset
    """
    if not 0 < prop < 1:
        raise ValueError(f"prop must be in (0, 1), got {prop}")

    n_rows = len(data)
    n_train = math.floor(n_rows * prop)
    if n_train == 0 or n_train == n_rows:
        raise ValueError(f"prop={prop} leaves an empty subset for {n_rows} rows")

    if strata is not None and strata not in data.columns:
        raise ValueError(f"Strata column '{strata}' not found")

    positions = np.arange(n_rows)
    train_idx, test_idx = train_test_split(
        positions,
        train_size=n_train,
        random_state=random_state,
        stratify=data[strata].to_numpy() if strata else None
    )

    split = DataSplit(
        data=data,
        train_indices=np.sort(train_idx),
        test_indices=np.sort(test_idx),
        prop=prop,
        random_state=random_state,
        strata=strata
    )

    logger.info(f"Data split (seed={random_state}):")
    logger.info(f"  Train: {len(train_idx)} samples ({len(train_idx) / n_rows * 100:.1f}%)")
    logger.info(f"  Test: {len(test_idx)} samples ({len(test_idx) / n_rows * 100:.1f}%)")
    return split
