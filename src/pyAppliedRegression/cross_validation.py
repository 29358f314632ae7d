# -*- coding: utf-8 -*-
"""Cross-validation schemes and bias-variance simulations."""

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator, RegressorMixin, clone
from sklearn.model_selection import (
    KFold, LeaveOneOut, RepeatedKFold, ShuffleSplit, cross_val_score)
from statsmodels.formula.api import ols
from tqdm import tqdm


class formula_regressor(RegressorMixin, BaseEstimator):
    """
    Scikit-learn compatible wrapper of an OLS model given as formula.

    Allows to use the cross-validation drivers of scikit-learn with models
    like 'ys ~ x1s + I(x1s**2)'. X must be a DataFrame containing the columns
    used on the right hand side of the formula.
    """

    def __init__(self, formula='y ~ 1'):
        self.formula = formula

    def fit(self, X, y):
        response_name = self.formula.split('~')[0].strip()
        data = X.copy()
        data[response_name] = np.asarray(y)
        self.fit_result_ = ols(self.formula, data=data).fit()
        return self

    def predict(self, X):
        return np.asarray(self.fit_result_.predict(X))


def cv_splitter(scheme='kfold', n_splits=10, n_repeats=5, test_size=0.2,
                random_state=None):
    """
    Create the cross-validation splitter for a validation scheme.

    Parameters
    ----------
    scheme : str, optional
        'holdout' (one random train/test split), 'loo' (leave-one-out),
        'kfold' (shuffled k-fold), 'repeated_kfold' (k-fold repeated with
        different shuffles) or 'monte_carlo' (n_splits random train/test
        splits). The default is 'kfold'.
    n_splits : int, optional
        The number of folds for 'kfold' and 'repeated_kfold', the number of
        random splits for 'monte_carlo'. The default is 10.
    n_repeats : int, optional
        The number of repetitions for 'repeated_kfold'. The default is 5.
    test_size : float, optional
        The fraction of data in the test set for 'holdout' and 'monte_carlo'.
        The default is 0.2.
    random_state : None or int, optional
        Seed for the random splits. The default is None.

    Returns
    -------
    splitter : scikit-learn cross-validator

    """
    schemes = ['holdout', 'loo', 'kfold', 'repeated_kfold', 'monte_carlo']
    if scheme == schemes[0]:  # holdout
        return ShuffleSplit(n_splits=1, test_size=test_size,
                            random_state=random_state)
    elif scheme == schemes[1]:  # loo
        return LeaveOneOut()
    elif scheme == schemes[2]:  # kfold
        return KFold(n_splits=n_splits, shuffle=True,
                     random_state=random_state)
    elif scheme == schemes[3]:  # repeated_kfold
        return RepeatedKFold(n_splits=n_splits, n_repeats=n_repeats,
                             random_state=random_state)
    elif scheme == schemes[4]:  # monte_carlo
        return ShuffleSplit(n_splits=n_splits, test_size=test_size,
                            random_state=random_state)
    else:
        raise ValueError('No valid scheme given, allowed values are '
                         '{}.'.format(schemes))


def cross_validation_error(estimator, x, y, scheme='kfold', metric='mse',
                           **kwargs):
    """
    Estimate the prediction error of an estimator by cross-validation.

    Parameters
    ----------
    estimator : scikit-learn estimator
        Any regressor, e.g. formula_regressor or a scikit-learn pipeline.
    x : ndarray or DataFrame
        The predictors.
    y : ndarray or Series
        The response.
    scheme : str, optional
        See cv_splitter. The default is 'kfold'.
    metric : str, optional
        'mse', 'rmse' or 'mae'. The default is 'mse'.
    **kwargs :
        Passed to cv_splitter.

    Returns
    -------
    Series
        The error of every split. Its mean is the cross-validation estimate
        of the prediction error.

    """
    metrics = ['mse', 'rmse', 'mae']
    if metric not in metrics:
        raise ValueError('No valid metric given, allowed values are '
                         '{}.'.format(metrics))

    scoring = ('neg_mean_absolute_error' if metric == metrics[2]
               else 'neg_mean_squared_error')
    errors = -cross_val_score(estimator, x, y, scoring=scoring,
                              cv=cv_splitter(scheme, **kwargs))
    if metric == metrics[1]:  # rmse
        errors = np.sqrt(errors)

    return pd.Series(errors, index=pd.Index(np.arange(1, len(errors)+1),
                                            name='split'), name=metric)


def compare_cv_schemes(estimator, x, y,
                       schemes=('holdout', 'loo', 'kfold', 'repeated_kfold'),
                       metric='mse', **kwargs):
    """
    Apply several cross-validation schemes to the same estimator.

    Returns
    -------
    DataFrame
        Index are the schemes, columns are 'mean', 'std' and 'n_splits'.

    """
    summary = pd.DataFrame([], index=pd.Index(schemes, name='scheme'),
                           columns=['mean', 'std', 'n_splits'],
                           dtype='float')
    for curr_scheme in schemes:
        curr_errors = cross_validation_error(estimator, x, y, curr_scheme,
                                             metric=metric, **kwargs)
        summary.loc[curr_scheme] = [curr_errors.mean(), curr_errors.std(),
                                    len(curr_errors)]

    return summary


def loocv_shortcut(fit_result):
    """
    Leave-one-out cross-validation error of an OLS fit without refitting.

    Uses mean((e_i/(1-h_ii))**2) with the residuals e_i and the leverages
    h_ii, which is exact for least squares fits.

    Parameters
    ----------
    fit_result : statsmodels RegressionResults
        A fitted OLS model.

    Returns
    -------
    float
        The leave-one-out mean squared error.

    """
    leverage = fit_result.get_influence().hat_matrix_diag
    residuals = np.asarray(fit_result.resid)
    return np.mean((residuals / (1 - leverage))**2)


def bias_variance_simulation(true_function, estimator, x_test, n_train=50,
                             noise_sd=1, x_range=(0, 1), n_sim=200,
                             random_state=None, progress=False):
    """
    Decompose the expected test error at fixed points by simulation.

    In every run a new training set is drawn, the estimator is fitted and
    predictions at x_test are made. Over all runs, the squared bias and the
    variance of the predictions are calculated.

    Parameters
    ----------
    true_function : callable
        The true regression function of one variable.
    estimator : scikit-learn estimator
        A regressor accepting x in the shape (n_samples, 1).
    x_test : ndarray
        The 1D test points.
    n_train : int, optional
        Size of the training sets. The default is 50.
    noise_sd : float, optional
        Standard deviation of the noise. The default is 1.
    x_range : tuple of float, optional
        Range of the uniformly drawn training x values. The default is (0, 1).
    n_sim : int, optional
        The number of simulated training sets. The default is 200.
    random_state : None or int, optional
        Seed of the simulation. The default is None.
    progress : bool, optional
        Show a progress bar. The default is False.

    Returns
    -------
    DataFrame
        Index are the test points, columns are 'bias_squared', 'variance',
        'noise' and 'expected_mse' (sum of the three).

    """
    rng = np.random.default_rng(random_state)
    x_test = np.asarray(x_test, dtype='float')

    predictions = np.empty((n_sim, len(x_test)))
    for ii in tqdm(range(n_sim), disable=not progress):
        x_train = rng.uniform(x_range[0], x_range[1], n_train)
        y_train = true_function(x_train) + rng.normal(0, noise_sd, n_train)
        curr_model = clone(estimator).fit(x_train[:, np.newaxis], y_train)
        predictions[ii] = curr_model.predict(x_test[:, np.newaxis])

    decomposition = pd.DataFrame(
        {'bias_squared': (predictions.mean(axis=0) -
                          true_function(x_test))**2,
         'variance': predictions.var(axis=0),
         'noise': noise_sd**2},
        index=pd.Index(x_test, name='x'))
    decomposition['expected_mse'] = decomposition.sum(axis=1)

    return decomposition


def bias_variance_tradeoff(true_function, estimators, x_test, **kwargs):
    """
    Average bias-variance decomposition for several estimators.

    Parameters
    ----------
    true_function : callable
        See bias_variance_simulation.
    estimators : dict
        Labels as keys and scikit-learn estimators as values, e.g. KNN
        regressors with different numbers of neighbors.
    x_test : ndarray
        See bias_variance_simulation.
    **kwargs :
        Passed to bias_variance_simulation.

    Returns
    -------
    DataFrame
        Index are the labels, columns like in bias_variance_simulation, each
        averaged over the test points.

    """
    tradeoff = {}
    for curr_label, curr_estimator in estimators.items():
        tradeoff[curr_label] = bias_variance_simulation(
            true_function, curr_estimator, x_test, **kwargs).mean()

    return pd.DataFrame(tradeoff).T
