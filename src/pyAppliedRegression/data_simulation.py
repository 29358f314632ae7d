# -*- coding: utf-8 -*-
"""Simulated datasets for regression exercises."""

import numpy as np
import pandas as pd


def simulate_linear_data(n_samples=30, coefs=(1, 2, 3, 0), noise_sd=10,
                         x_range=(0, 10), random_state=None, x_names=None,
                         response_name='ys'):
    """
    Simulate a dataset from a multiple linear model with normal errors.

    The predictors are drawn from a uniform distribution, the response is
    calculated as coefs[0] + coefs[1]*x_1 + ... + coefs[p]*x_p plus normally
    distributed noise.

    Parameters
    ----------
    n_samples : int, optional
        The number of observations. The default is 30.
    coefs : list of float, optional
        The intercept followed by one slope per predictor, so the number of
        predictors is len(coefs)-1. The default is (1, 2, 3, 0), i.e. three
        predictors of which the last one has no effect.
    noise_sd : float, optional
        The standard deviation of the errors. The default is 10.
    x_range : tuple of float, optional
        Lower and upper limit of the uniform distribution the predictors are
        drawn from. The default is (0, 10).
    random_state : None, int or numpy Generator, optional
        Seed or generator for reproducible data. The default is None.
    x_names : list of str or None, optional
        Names of the predictors. The default is None, resulting in 'x1s',
        'x2s' etc.
    response_name : str, optional
        The column name of the response. The default is 'ys'.

    Returns
    -------
    data : DataFrame
        The predictors and the response in the columns, one row per
        observation.

    """
    rng = np.random.default_rng(random_state)
    coefs = np.asarray(coefs, dtype='float')
    n_predictors = len(coefs) - 1

    if x_names is None:
        x_names = ['x{}s'.format(ii) for ii in range(1, n_predictors+1)]
    elif len(x_names) != n_predictors:
        raise ValueError(
            'Number of predictor names does not match number of slopes. '
            'Number of slopes is {} and predictor name number is {}.'.format(
                n_predictors, len(x_names)))

    x = rng.uniform(x_range[0], x_range[1], size=(n_samples, n_predictors))
    data = pd.DataFrame(x, columns=x_names)
    data[response_name] = (coefs[0] + x.dot(coefs[1:]) +
                           rng.normal(0, noise_sd, n_samples))

    return data


def resimulate_response(data, coefs, noise_sd, predictors, rng=None,
                        response_name='ys'):
    """
    Draw a new response for fixed predictor values.

    Used in simulation studies where the design stays fixed and only the
    errors are redrawn, e.g. to obtain the null distribution of a test
    statistic.

    Parameters
    ----------
    data : DataFrame
        Contains at least the columns given in predictors.
    coefs : list of float
        The intercept followed by one slope per entry in predictors.
    noise_sd : float
        The standard deviation of the errors.
    predictors : list of str
        The predictors the new response depends on. May be a subset of the
        columns in data.
    rng : None, int or numpy Generator, optional
        Seed or generator. The default is None.
    response_name : str, optional
        The column that is overwritten. The default is 'ys'.

    Returns
    -------
    new_data : DataFrame
        A copy of data with the new response.

    """
    rng = np.random.default_rng(rng)
    coefs = np.asarray(coefs, dtype='float')
    if len(coefs) != len(predictors) + 1:
        raise ValueError(
            'coefs must contain an intercept and one slope per predictor, '
            'but {} values for {} predictors were given.'.format(
                len(coefs), len(predictors)))

    new_data = data.copy()
    new_data[response_name] = (
        coefs[0] + data[list(predictors)].to_numpy().dot(coefs[1:]) +
        rng.normal(0, noise_sd, len(data)))

    return new_data


def simulate_curve_data(func, n_samples=100, noise_sd=1, x_range=(0, 1),
                        random_state=None):
    """
    Simulate noisy observations of a one-dimensional function.

    Parameters
    ----------
    func : callable
        The true regression function, must accept a 1D ndarray.
    n_samples : int, optional
        The number of observations. The default is 100.
    noise_sd : float, optional
        Standard deviation of the additive normal noise. The default is 1.
    x_range : tuple of float, optional
        The range the x values are drawn from uniformly. The default is
        (0, 1).
    random_state : None, int or numpy Generator, optional
        Seed or generator. The default is None.

    Returns
    -------
    x : ndarray
        The sorted x values with shape (n_samples,).
    y : ndarray
        The noisy function values with shape (n_samples,).

    """
    rng = np.random.default_rng(random_state)
    x = np.sort(rng.uniform(x_range[0], x_range[1], n_samples))
    y = func(x) + rng.normal(0, noise_sd, n_samples)

    return x, y
