import numpy as np
import pandas as pd
import pytest

from irisflow.metrics import gain_curve, roc_curve
from irisflow.visualization import Plotter


@pytest.fixture
def plotter():
    return Plotter(show=False)


@pytest.fixture
def scored():
    rng = np.random.default_rng(5)
    truth = np.repeat(['a', 'b', 'c'], 20)
    raw = rng.random((60, 3)) + np.eye(3)[np.repeat([0, 1, 2], 20)]
    probs = raw / raw.sum(axis=1, keepdims=True)
    return pd.DataFrame({'truth': truth, 'pred_a': probs[:, 0], 'pred_b': probs[:, 1], 'pred_c': probs[:, 2]})


def test_correlation_heatmap_writes_html(plotter, iris, tmp_path):
    path = tmp_path / 'plots' / 'corr.html'
    corr, fig = plotter.plot_correlation_heatmap(iris, save_path=path)

    assert path.exists()
    assert corr.shape == (4, 4)
    assert 'species' not in corr.columns
    np.testing.assert_allclose(np.diag(corr.to_numpy()), 1.0)
    assert fig.data[0].type == 'heatmap'


def test_correlation_matrix_needs_two_numeric_columns():
    with pytest.raises(ValueError, match="two numeric"):
        Plotter.correlation_matrix(pd.DataFrame({'x': [1.0, 2.0], 'y': ['a', 'b']}))


def test_petal_measurements_are_strongly_correlated(iris):
    corr = Plotter.correlation_matrix(iris)
    assert corr.loc['petal_length', 'petal_width'] > 0.9


def test_curve_plots_are_saved(plotter, scored, tmp_path):
    roc_path = tmp_path / 'roc.png'
    gain_path = tmp_path / 'gain.png'

    plotter.plot_roc_curve(roc_curve(scored, 'truth'), save_path=roc_path)
    plotter.plot_gain_curve(gain_curve(scored, 'truth'), save_path=gain_path)

    assert roc_path.exists()
    assert gain_path.exists()


def test_confusion_matrix_plot(plotter, tmp_path):
    path = tmp_path / 'cm.png'
    cm = np.array([[5, 1, 0], [0, 6, 0], [0, 0, 0]])
    plotter.plot_confusion_matrix(cm, labels=['a', 'b', 'c'], save_path=path)
    assert path.exists()


def test_heatmap_title_and_show_setting(iris):
    plotter = Plotter(show=False)
    _, fig = plotter.plot_correlation_heatmap(iris, title='Iris measurements')

    assert fig.layout.title.text == 'Iris measurements'
    assert plotter.show is False
