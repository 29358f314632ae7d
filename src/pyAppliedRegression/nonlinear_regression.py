# -*- coding: utf-8 -*-
"""
Created on Thu Mar  3 13:29:12 2022

@author: aso
"""

import warnings
import numpy as np
import pandas as pd
import lmfit
from scipy.stats import gaussian_kde


def nonlinear_regression(func, x, y, initial_guess, bounds=None,
                         alg='least_squares', weights=None, non_fit_par={},
                         **kwargs):
    """
    Fit a model that is non-linear in its parameters by least squares.

    The objective function to be minimized is the (weighted) sum of the
    squared residuals.

    Parameters
    ----------
    func: a callable function
        The model function. Must accept the independent variable as the first
        argument and the fit parameters as well as non-fit parameters as
        keyword arguments.
    x : ndarray
        A 1D array containing the independent variable.
    y : ndarray
        A 1D array containing the dependent variable. Must contain the same
        number of elements like x.
    initial_guess : dict
        A dictionary with keys that are the names of the parameters passed to
        func. The values are the initial guesses for the fit.
    bounds : dict or None, optional
        A dictionary with the parameter names as keys and lists with two
        entries as values, the first being the lower limit and the second
        being the upper limit of the fit parameter. Global methods like
        'differential_evolution' need finite bounds for all parameters. The
        default is None, meaning no bounds.
    alg : string, optional
        The algorithm used to minimize the sum of the squared residuals.
        Allowed values are all methods possible for lmfit.minimize. The
        default is 'least_squares'.
    weights : 'string' or None, optional
        Defines the method of weight calculation. Can be 'kde' (weights
        determined by the inverse kernel density estimate of x, so sparse
        regions are not underrepresented) or 'inverse_y' (weights are the
        inverse of y). Default is None, meaning that all weights are equal.
    non_fit_par : dict, optional
        A dictionary containing additional parameters used when calling
        func that are fixed during the fit. Default is an empty dictionary.
    **kwargs :
        All **fit_kws possible for lmfit.minimize. For weights='kde', the
        keyword bandwidth is passed to scipy.stats.gaussian_kde.

    Returns
    -------
    MinimizerResult
        The lmfit object containing the optimization result.

    """
    x = np.asarray(x, dtype='float')
    y = np.asarray(y, dtype='float')
    if len(x) != len(y):
        raise ValueError('x and y must have same lengths, but have {} and '
                         '{}.'.format(len(x), len(y)))
    if bounds is None:
        bounds = {}

    params = lmfit.Parameters()
    for curr_key, curr_guess in initial_guess.items():
        curr_bounds = bounds.get(curr_key, [-np.inf, np.inf])
        params.add(curr_key, curr_guess, min=curr_bounds[0],
                   max=curr_bounds[1])

    if weights is None:
        weights = np.ones_like(x)
    elif weights == 'kde':  # kernel density estimation
        bw_method = kwargs.pop('bandwidth', None)
        kde = gaussian_kde(x, bw_method=bw_method)
        weights = 1/kde.evaluate(x)
    elif weights == 'inverse_y':
        weights = 1/y
    else:
        weights = np.ones_like(x)
        warnings.warn('Invalid value for weights given, so uniform weights '
                      'are used')

    result = lmfit.minimize(fit_error, params,
                            args=(func, x, y, weights, 'residuals',
                                  non_fit_par), method=alg, **kwargs)
    return result


def fit_error(params, func, x, y, weights, mode='sum_of_squares',
              non_fit_par={}):
    """
    The objective function to be minimized with nonlinear_regression.

    Parameters
    ----------
    params : lmfit Parameters
        The current values and boundaries of the fit parameters.
    func : callable
        See docstring of nonlinear_regression.
    x : ndarray
        See docstring of nonlinear_regression.
    y : ndarray
        See docstring of nonlinear_regression.
    weights : ndarray
        An array containing the weights of the different data points. Must
        contain as many elements as x.
    mode : string, optional
        Determines if the sum of squares of the residuals is returned
        ('sum_of_squares') or the residuals themselves ('residuals'). The
        default is 'sum_of_squares'.
    non_fit_par : dict, optional
        See docstring of nonlinear_regression.

    Returns
    -------
    float or ndarray
        The sum of squared residuals or the residuals, depending on mode.

    """
    curr_values = func(x, **params.valuesdict(), **non_fit_par)

    modes = ['sum_of_squares', 'residuals']
    if mode == modes[0]:  # sum_of_squares
        return np.sum(weights*(curr_values - y)**2)
    elif mode == modes[1]:  # residuals
        return weights*(curr_values - y)
    else:
        raise ValueError(
            'No valid fit error mode given, allowed values are {}.'.format(
                modes))


def parameter_table(result):
    """
    Collect the fitted parameters of a nonlinear_regression result.

    Returns
    -------
    DataFrame
        Index are the parameter names, columns are 'value', 'stderr', 'min'
        and 'max'. stderr is NaN if lmfit could not estimate it.

    """
    rows = {}
    for curr_name, curr_par in result.params.items():
        rows[curr_name] = {
            'value': curr_par.value,
            'stderr': np.nan if curr_par.stderr is None else curr_par.stderr,
            'min': curr_par.min, 'max': curr_par.max}

    return pd.DataFrame(rows).T
