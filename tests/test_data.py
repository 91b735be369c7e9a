import numpy as np
import pandas as pd
import pytest

from irisflow.data import DataLoader, initial_split
from irisflow.data.loader import IRIS_COLUMNS


def test_load_iris_shape(iris):
    assert iris.shape == (150, 5)
    assert list(iris.columns) == IRIS_COLUMNS + ['species']
    assert sorted(iris['species'].unique()) == ['setosa', 'versicolor', 'virginica']
    assert (iris['species'].value_counts() == 50).all()


def test_load_from_config_defaults_to_iris():
    df = DataLoader().load_from_config({})
    assert df.shape == (150, 5)


def test_load_from_config_unknown_source():
    with pytest.raises(ValueError, match="Unknown data source"):
        DataLoader().load_from_config({'source': 'mtcars'})


def test_load_csv_moves_label_last(tmp_path):
    path = tmp_path / 'data.csv'
    pd.DataFrame({'cls': ['a', 'b'], 'x': [1.0, 2.0], 'y': [3.0, 4.0]}).to_csv(path, index=False)

    df = DataLoader().load_from_config({'source': 'csv', 'file': 'data.csv', 'label_column': 'cls'},
                                       project_root=tmp_path)

    assert list(df.columns) == ['x', 'y', 'cls']


def test_load_csv_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        DataLoader().load_csv(tmp_path / 'missing.csv', 'cls')


def test_split_sizes(split):
    assert len(split.train_indices) == 90
    assert len(split.test_indices) == 60


def test_split_disjoint_and_covering(iris, split):
    train, test = set(split.train_indices), set(split.test_indices)
    assert not train & test
    assert train | test == set(range(len(iris)))

    rows = pd.concat([split.training(), split.testing()]).sort_index()
    pd.testing.assert_frame_equal(rows, iris)


def test_split_seed_reproducible(iris):
    first = initial_split(iris, prop=0.6, random_state=7)
    second = initial_split(iris, prop=0.6, random_state=7)
    np.testing.assert_array_equal(first.train_indices, second.train_indices)


def test_split_does_not_mutate_source(iris):
    before = iris.copy()
    initial_split(iris, prop=0.6, random_state=1).training().iloc[0, 0] = -1.0
    pd.testing.assert_frame_equal(iris, before)


def test_split_stratified_keeps_class_balance(iris):
    split = initial_split(iris, prop=0.6, strata='species', random_state=3)
    assert (split.training()['species'].value_counts() == 30).all()


@pytest.mark.parametrize('prop', [0, 1, 1.5, -0.2])
def test_split_rejects_bad_prop(iris, prop):
    with pytest.raises(ValueError):
        initial_split(iris, prop=prop)


def test_split_unknown_strata(iris):
    with pytest.raises(ValueError, match="Strata"):
        initial_split(iris, strata='genus')
