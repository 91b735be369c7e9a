import numpy as np
import pytest

from irisflow.models import ModelFactory, RandomForestModel, XGBRandomForestModel, rand_forest

ENGINES = ['sklearn', 'xgboost']


@pytest.fixture
def train_test(prepped, split):
    return prepped.juice(), prepped.bake(split.testing())


def test_registered_engines():
    assert 'rand_forest' in ModelFactory.list_models()
    assert set(ENGINES) <= set(ModelFactory.list_engines('rand_forest'))


def test_create_model_picks_engine_class():
    assert isinstance(ModelFactory.create_model('rand_forest', engine='sklearn'), RandomForestModel)
    assert isinstance(ModelFactory.create_model('rand_forest', engine='xgboost'), XGBRandomForestModel)


def test_unknown_family_and_engine():
    with pytest.raises(ValueError, match="Unknown model"):
        ModelFactory.create_model('boost_tree')
    with pytest.raises(ValueError, match="Unknown engine"):
        ModelFactory.create_model('rand_forest', engine='ranger')


def test_regression_mode_rejected():
    with pytest.raises(ValueError, match="Unsupported mode"):
        rand_forest(mode='regression')


def test_set_engine_keeps_arguments():
    model = rand_forest(engine='sklearn', trees=100, min_n=2)
    other = model.set_engine('xgboost')
    assert other.engine == 'xgboost'
    assert other.config == {'trees': 100, 'min_n': 2}
    assert not other.fitted


def test_unified_arguments_are_translated():
    sk = rand_forest(engine='sklearn', trees=100, mtry=2, min_n=3)
    xg = rand_forest(engine='xgboost', trees=100, mtry=2, min_n=3)

    sk_params = sk._engine_params(n_features=4)
    xg_params = xg._engine_params(n_features=4)

    assert sk_params['n_estimators'] == 100
    assert sk_params['max_features'] == 2
    assert sk_params['min_samples_leaf'] == 3
    assert xg_params['n_estimators'] == 100
    assert xg_params['colsample_bynode'] == pytest.approx(0.5)
    assert xg_params['min_child_weight'] == 3


def test_mtry_out_of_range():
    model = rand_forest(engine='sklearn', mtry=9)
    with pytest.raises(ValueError, match="mtry"):
        model._engine_params(n_features=3)


def test_predict_before_training():
    with pytest.raises(ValueError, match="not trained"):
        rand_forest().predict(np.zeros((1, 3)))


@pytest.mark.parametrize('engine', ENGINES)
def test_fit_predict_returns_original_labels(engine, train_test):
    train, test = train_test
    model = rand_forest(engine=engine, trees=100).fit_xy(train, 'species')

    predicted = model.predict(test.drop(columns=['species']))

    assert list(model.classes_) == ['setosa', 'versicolor', 'virginica']
    assert set(predicted) <= set(model.classes_)
    assert len(predicted) == len(test)


@pytest.mark.parametrize('engine', ENGINES)
def test_probabilities_sum_to_one(engine, train_test):
    train, test = train_test
    model = rand_forest(engine=engine, trees=100).fit_xy(train, 'species')

    proba = model.predict_proba(test.drop(columns=['species']))

    assert proba.shape == (len(test), 3)
    np.testing.assert_allclose(proba.sum(axis=1), 1.0, atol=1e-6)
    assert (proba >= 0).all()


@pytest.mark.parametrize('engine', ENGINES)
def test_accuracy_above_chance(engine, train_test):
    train, test = train_test
    model = rand_forest(engine=engine, trees=100).fit_xy(train, 'species')

    accuracy = np.mean(model.predict(test) == test['species'].to_numpy())

    assert accuracy > 1 / 3


def test_prediction_aligns_columns_by_name(train_test):
    train, test = train_test
    model = rand_forest(engine='sklearn', trees=50).fit_xy(train, 'species')
    features = test.drop(columns=['species'])

    shuffled = features[features.columns[::-1]]

    np.testing.assert_array_equal(model.predict(shuffled), model.predict(features))


def test_single_class_rejected():
    with pytest.raises(ValueError, match="two classes"):
        rand_forest().train(np.zeros((4, 2)), ['a'] * 4)


@pytest.mark.parametrize('engine', ENGINES)
def test_save_and_load(engine, train_test, tmp_path):
    train, test = train_test
    model = rand_forest(engine=engine, trees=20).fit_xy(train, 'species')
    path = model.save(tmp_path / 'rf')

    restored = ModelFactory.create_model('rand_forest', engine=engine)
    restored.load(path)

    np.testing.assert_allclose(restored.predict_proba(test), model.predict_proba(test))


def test_save_unfitted_model(tmp_path):
    with pytest.raises(ValueError, match="unfitted"):
        rand_forest().save(tmp_path / 'rf')
