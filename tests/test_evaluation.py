import numpy as np
import pandas as pd
import pytest

from irisflow.evaluation import augment, check_probabilities, predict_class, predict_prob
from irisflow.metrics import MetricsWrapper, auc_from_curve, gain_curve, probability_columns, roc_curve
from irisflow.models import rand_forest


@pytest.fixture
def test_frame(prepped, split):
    return prepped.bake(split.testing())


@pytest.fixture
def model(prepped):
    return rand_forest(engine='sklearn', trees=100).fit_xy(prepped.juice(), 'species')


@pytest.fixture
def toy_probs():
    """Two-class table where 'a' rows get high pred_a."""
    return pd.DataFrame({
        'truth': ['a', 'a', 'b', 'b', 'a', 'b'],
        'pred_a': [0.9, 0.8, 0.3, 0.2, 0.6, 0.6],
        'pred_b': [0.1, 0.2, 0.7, 0.8, 0.4, 0.4],
    })


class TestPredictor:

    def test_predict_class_column(self, model, test_frame):
        pred = predict_class(model, test_frame)
        assert list(pred.columns) == ['pred_class']
        assert pred.index.equals(test_frame.index)

    def test_predict_prob_columns(self, model, test_frame):
        prob = predict_prob(model, test_frame)
        assert list(prob.columns) == ['pred_setosa', 'pred_versicolor', 'pred_virginica']
        assert check_probabilities(prob)

    def test_augment_binds_positionally(self, model, test_frame):
        augmented = augment(model, test_frame, type='both')

        assert len(augmented) == len(test_frame)
        assert list(augmented.columns[:4]) == ['pred_class', 'pred_setosa', 'pred_versicolor', 'pred_virginica']
        np.testing.assert_array_equal(augmented['species'].to_numpy(), test_frame['species'].to_numpy())
        assert augmented['pred_class'].notna().all()

    def test_augment_invalid_type(self, model, test_frame):
        with pytest.raises(ValueError, match="type must be"):
            augment(model, test_frame, type='raw')

    def test_check_probabilities_rejects_bad_rows(self):
        assert not check_probabilities(pd.DataFrame({'pred_a': [0.5, 0.2], 'pred_b': [0.5, 0.2]}))


class TestMetricsWrapper:

    def test_metrics_table(self, model, test_frame):
        augmented = augment(model, test_frame, type='both')
        table = MetricsWrapper.metrics(augmented, truth='species', estimate='pred_class',
                                       probs=probability_columns(augmented))

        assert list(table['metric']) == ['accuracy', 'kap', 'mn_log_loss', 'roc_auc']
        assert list(table['estimator']) == ['multiclass', 'multiclass', 'multiclass', 'hand_till']
        scores = dict(zip(table['metric'], table['estimate']))
        assert scores['accuracy'] > 1 / 3
        assert 0 <= scores['roc_auc'] <= 1
        assert scores['mn_log_loss'] >= 0

    def test_class_metrics_only(self):
        df = pd.DataFrame({'truth': ['a', 'b', 'a', 'b'], 'pred_class': ['a', 'b', 'b', 'b']})
        table = MetricsWrapper.metrics(df, truth='truth')

        scores = dict(zip(table['metric'], table['estimate']))
        assert set(scores) == {'accuracy', 'kap'}
        assert scores['accuracy'] == pytest.approx(0.75)
        assert scores['kap'] == pytest.approx(0.5)

    def test_named_scores(self):
        y_true = np.array(['a', 'b', 'c', 'a'])
        y_pred = np.array(['a', 'b', 'c', 'b'])
        scores = MetricsWrapper.get_eval_metrics(['accuracy', 'balanced_accuracy'], y_true, y_pred)
        assert scores['accuracy'] == pytest.approx(0.75)
        assert scores['balanced_accuracy'] == pytest.approx((0.5 + 1 + 1) / 3)

    def test_probability_metric_without_probabilities_is_nan(self):
        score = MetricsWrapper.get_eval_metrics('roc_auc', ['a', 'b'], ['a', 'b'])
        assert np.isnan(score)

    def test_class_metrics_from_probabilities(self, toy_probs):
        accuracy = MetricsWrapper.get_eval_metrics('accuracy', toy_probs['truth'],
                                                   toy_probs[['pred_a', 'pred_b']].to_numpy(), labels=['a', 'b'])
        assert accuracy == pytest.approx(5 / 6)

    def test_unknown_metric(self):
        with pytest.raises(ValueError, match="not found"):
            MetricsWrapper.get_eval_metrics('lift', ['a'], ['a'])

    def test_label_count_mismatch(self):
        with pytest.raises(ValueError, match="probability columns"):
            MetricsWrapper.get_eval_metrics('roc_auc', ['a', 'b'], np.array([[0.2, 0.3, 0.5]] * 2),
                                            labels=['a', 'b'])


class TestCurves:

    def test_roc_curve_columns_and_levels(self, toy_probs):
        curve = roc_curve(toy_probs, 'truth')
        assert list(curve.columns) == ['level', 'threshold', 'specificity', 'sensitivity']
        assert list(dict.fromkeys(curve['level'])) == ['a', 'b']

    def test_roc_curve_end_points(self, toy_probs):
        curve = roc_curve(toy_probs, 'truth', ['pred_a'])
        assert curve.iloc[0][['specificity', 'sensitivity']].tolist() == [1.0, 0.0]
        assert curve.iloc[-1][['specificity', 'sensitivity']].tolist() == [0.0, 1.0]

    def test_roc_auc_matches_perfect_ranking(self):
        df = pd.DataFrame({'truth': ['a', 'a', 'b', 'b'], 'pred_a': [0.9, 0.8, 0.2, 0.1],
                           'pred_b': [0.1, 0.2, 0.8, 0.9]})
        aucs = auc_from_curve(roc_curve(df, 'truth'))
        assert aucs['a'] == pytest.approx(1.0)
        assert aucs['b'] == pytest.approx(1.0)

    def test_gain_curve_steps(self, toy_probs):
        curve = gain_curve(toy_probs, 'truth', ['pred_a'])

        assert list(curve.columns) == ['level', 'n', 'n_events', 'percent_tested', 'percent_found']
        # Ranked probabilities 0.9, 0.8, 0.6 (tied pair), 0.3, 0.2
        assert curve['n'].tolist() == [0, 1, 2, 4, 5, 6]
        assert curve['n_events'].tolist() == [0, 1, 2, 3, 3, 3]
        assert curve['percent_tested'].iloc[-1] == pytest.approx(100.0)
        assert curve['percent_found'].iloc[-1] == pytest.approx(100.0)

    def test_gain_curve_is_monotone(self, model, test_frame):
        augmented = augment(model, test_frame, type='prob')
        curve = gain_curve(augmented, 'species')
        for _, part in curve.groupby('level'):
            assert part['percent_found'].is_monotonic_increasing
            assert part['percent_tested'].is_monotonic_increasing
            assert part['percent_found'].iloc[0] == 0

    def test_missing_truth_column(self, toy_probs):
        with pytest.raises(ValueError, match="Truth column"):
            roc_curve(toy_probs, 'label')

    def test_no_probability_columns(self):
        with pytest.raises(ValueError, match="No probability columns"):
            gain_curve(pd.DataFrame({'truth': ['a'], 'x': [1.0]}), 'truth')
