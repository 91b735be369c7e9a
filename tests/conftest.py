"""
Common test fixtures for irisflow tests.
"""
import matplotlib

matplotlib.use('Agg')

import numpy as np
import pandas as pd
import pytest

from irisflow.data import DataLoader, PreprocessingPipeline, initial_split


@pytest.fixture(scope='session')
def iris():
    return DataLoader().load_iris()


@pytest.fixture
def split(iris):
    return initial_split(iris, prop=0.6, random_state=42)


@pytest.fixture
def prepped(split):
    """Pipeline prepped on the training rows of the 60/40 split."""
    pipeline = PreprocessingPipeline()
    pipeline.prep(split.training())
    return pipeline


@pytest.fixture
def correlated_frame():
    """Four predictors: b is almost a copy of a, c and d are independent noise."""
    rng = np.random.default_rng(0)
    a = rng.normal(size=200)
    return pd.DataFrame({
        'a': a,
        'b': a + rng.normal(scale=0.05, size=200),
        'c': rng.normal(size=200),
        'd': rng.normal(size=200),
        'label': rng.choice(['x', 'y'], size=200),
    })
