# -*- coding: utf-8 -*-
"""
Created on Sun Dec  1 14:17:41 2019

@author: Alexander Southan
"""

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
from scipy.stats import f as f_dist, gaussian_kde
from statsmodels.formula.api import ols
from statsmodels.stats.anova import anova_lm
from tqdm import tqdm

from .data_simulation import resimulate_response


class linear_model:
    """Multiple linear regression with classical inference."""

    def __init__(self, data, formula=None, response_name=None,
                 predictors=None):
        """
        Fit a linear model by ordinary least squares.

        Parameters
        ----------
        data : DataFrame
            Contains the response and the predictors in its columns.
        formula : str or None, optional
            A model formula like 'ys ~ x1s + x2s'. If given, response_name and
            predictors are ignored. The default is None.
        response_name : str or None, optional
            The column of data used as the response if no formula is given.
            The default is None.
        predictors : list of str or None, optional
            The columns used as predictors if no formula is given. The default
            is None, meaning that all columns except the response are used. An
            empty list results in the intercept-only model.

        Raises
        ------
        ValueError
            If neither formula nor response_name is given.

        Returns
        -------
        None.

        """
        if formula is None:
            if response_name is None:
                raise ValueError(
                    'Either formula or response_name must be given.')
            if predictors is None:
                predictors = [curr_col for curr_col in data.columns
                              if curr_col != response_name]
            formula = build_formula(response_name, predictors)

        self.formula = formula
        self.data = data
        self.fit_result = ols(self.formula, data=self.data).fit()

    @property
    def params(self):
        return self.fit_result.params

    @property
    def sigma(self):
        """The residual standard error."""
        return np.sqrt(self.fit_result.scale)

    @property
    def df_resid(self):
        return int(self.fit_result.df_resid)

    @property
    def rss(self):
        return self.fit_result.ssr

    @property
    def r_squared(self):
        return self.fit_result.rsquared

    @property
    def adj_r_squared(self):
        return self.fit_result.rsquared_adj

    @property
    def aic(self):
        return self.fit_result.aic

    @property
    def bic(self):
        return self.fit_result.bic

    @property
    def n_samples(self):
        return int(self.fit_result.nobs)

    def coefficient_table(self):
        """
        Collect the coefficient estimates and their t-tests.

        Returns
        -------
        DataFrame
            Index are the model terms, columns are 'estimate', 'std_error',
            't_value' and 'p_value'.

        """
        return pd.DataFrame({'estimate': self.fit_result.params,
                             'std_error': self.fit_result.bse,
                             't_value': self.fit_result.tvalues,
                             'p_value': self.fit_result.pvalues})

    def conf_int(self, alpha=0.05):
        """
        Confidence intervals of the coefficients.

        Parameters
        ----------
        alpha : float, optional
            The significance level, so the confidence level is 1-alpha. The
            default is 0.05.

        Returns
        -------
        DataFrame
            The lower and upper limits in the columns 'lower' and 'upper'.

        """
        intervals = self.fit_result.conf_int(alpha=alpha)
        intervals.columns = ['lower', 'upper']
        return intervals

    def predict(self, new_data, interval=None, alpha=0.05):
        """
        Predict the response for new predictor values.

        Parameters
        ----------
        new_data : DataFrame
            Contains the predictor columns used in the model formula.
        interval : None or str, optional
            None returns only the predictions, 'confidence' adds the
            confidence interval of the mean response and 'prediction' adds
            the prediction interval for a new observation. The default is
            None.
        alpha : float, optional
            The significance level of the interval. The default is 0.05.

        Returns
        -------
        DataFrame
            Contains the column 'fit' and for interval other than None the
            columns 'lower' and 'upper'.

        """
        intervals = [None, 'confidence', 'prediction']
        if interval not in intervals:
            raise ValueError('No valid interval given, allowed values are '
                             '{}.'.format(intervals))

        pred_frame = self.fit_result.get_prediction(new_data).summary_frame(
            alpha=alpha)
        prediction = pd.DataFrame({'fit': pred_frame['mean'].to_numpy()},
                                  index=new_data.index)
        if interval == intervals[1]:  # confidence
            prediction['lower'] = pred_frame['mean_ci_lower'].to_numpy()
            prediction['upper'] = pred_frame['mean_ci_upper'].to_numpy()
        elif interval == intervals[2]:  # prediction
            prediction['lower'] = pred_frame['obs_ci_lower'].to_numpy()
            prediction['upper'] = pred_frame['obs_ci_upper'].to_numpy()

        return prediction

    def anova_table(self, typ=1):
        """
        ANOVA table of the model terms.

        Parameters
        ----------
        typ : int, optional
            1 for sequential sums of squares, 2 for sums of squares that
            respect marginality. The default is 1.

        Returns
        -------
        DataFrame
            The ANOVA table as produced by statsmodels.

        """
        return anova_lm(self.fit_result, typ=typ)

    def overall_f_test(self):
        """F-test of the model against the intercept-only model."""
        return self.fit_result.fvalue, self.fit_result.f_pvalue


def build_formula(response_name, predictors):
    """Build a model formula with main effects only."""
    predictors = list(predictors)
    if len(predictors) == 0:
        return '{} ~ 1'.format(response_name)
    return '{} ~ {}'.format(response_name, ' + '.join(predictors))


def _check_nested(reduced, full):
    if reduced.n_samples != full.n_samples:
        raise ValueError(
            'Models were fitted on different numbers of observations ({} and '
            '{}).'.format(reduced.n_samples, full.n_samples))
    if reduced.df_resid <= full.df_resid:
        raise ValueError(
            'The reduced model must have more residual degrees of freedom '
            'than the full model, but has {} compared to {}.'.format(
                reduced.df_resid, full.df_resid))


def compare_models(reduced, full):
    """
    Compare two nested linear models with an F-test.

    Parameters
    ----------
    reduced : linear_model
        The smaller model.
    full : linear_model
        The larger model, the terms of reduced must be a subset of its terms.

    Returns
    -------
    DataFrame
        The ANOVA table with the columns 'df_resid', 'ssr', 'df_diff',
        'ss_diff', 'F' and 'Pr(>F)'.

    """
    _check_nested(reduced, full)
    return anova_lm(reduced.fit_result, full.fit_result)


def partial_f_statistic(sigma_reduced, df_reduced, sigma_full, df_full):
    """
    Calculate the partial F statistic from residual standard errors.

    The residual sums of squares are recovered as df*sigma**2, so the
    statistic is ((RSS_r - RSS_f)/(df_r - df_f)) / (RSS_f/df_f).

    Parameters
    ----------
    sigma_reduced : float
        The residual standard error of the reduced model.
    df_reduced : int
        The residual degrees of freedom of the reduced model.
    sigma_full : float
        The residual standard error of the full model.
    df_full : int
        The residual degrees of freedom of the full model.

    Returns
    -------
    float
        The F statistic with (df_reduced-df_full, df_full) degrees of
        freedom.

    """
    rss_reduced = df_reduced * sigma_reduced**2
    rss_full = df_full * sigma_full**2
    return ((rss_reduced - rss_full) / (df_reduced - df_full) /
            (rss_full / df_full))


def partial_f_test(reduced, full):
    """
    Partial F-test based on the residual standard errors of two models.

    Returns
    -------
    f_stat : float
        The F statistic.
    p_value : float
        The upper tail probability of the F distribution.

    """
    _check_nested(reduced, full)
    f_stat = partial_f_statistic(reduced.sigma, reduced.df_resid,
                                 full.sigma, full.df_resid)
    p_value = f_dist.sf(f_stat, reduced.df_resid - full.df_resid,
                        full.df_resid)
    return f_stat, p_value


def simulate_f_null(data, reduced_predictors, full_predictors, coefs,
                    noise_sd, n_sim=1000, response_name='ys',
                    random_state=None, progress=False):
    """
    Simulate the distribution of the partial F statistic under H0.

    For every run, a new response is drawn from the reduced model with the
    predictor values in data kept fixed. Both models are then fitted and the
    partial F statistic is calculated.

    Parameters
    ----------
    data : DataFrame
        Contains at least the columns in full_predictors.
    reduced_predictors : list of str
        The predictors of the reduced (true) model.
    full_predictors : list of str
        The predictors of the full model, must contain reduced_predictors.
    coefs : list of float
        Intercept and slopes of the true reduced model.
    noise_sd : float
        Standard deviation of the errors.
    n_sim : int, optional
        The number of simulation runs. The default is 1000.
    response_name : str, optional
        The name of the simulated response. The default is 'ys'.
    random_state : None, int or numpy Generator, optional
        Seed for reproducible simulations. The default is None.
    progress : bool, optional
        Show a progress bar. The default is False.

    Returns
    -------
    f_stats : ndarray
        The n_sim simulated F statistics.

    """
    if not set(reduced_predictors).issubset(full_predictors):
        raise ValueError('The reduced predictors must be a subset of the full '
                         'predictors.')

    rng = np.random.default_rng(random_state)
    reduced_formula = build_formula(response_name, reduced_predictors)
    full_formula = build_formula(response_name, full_predictors)

    f_stats = np.empty(n_sim)
    for ii in tqdm(range(n_sim), disable=not progress):
        sim_data = resimulate_response(data, coefs, noise_sd,
                                       reduced_predictors, rng=rng,
                                       response_name=response_name)
        reduced = linear_model(sim_data, formula=reduced_formula)
        full = linear_model(sim_data, formula=full_formula)
        f_stats[ii] = partial_f_statistic(reduced.sigma, reduced.df_resid,
                                          full.sigma, full.df_resid)

    return f_stats


def plot_f_null(f_stats, dfn, dfd):
    """
    Compare simulated F statistics with the theoretical F density.

    Parameters
    ----------
    f_stats : ndarray
        The simulated statistics, e.g. from simulate_f_null.
    dfn : int
        Numerator degrees of freedom.
    dfd : int
        Denominator degrees of freedom.

    Returns
    -------
    fig : matplotlib Figure
        The plot with the kernel density estimate and the F density.

    """
    x_values = np.linspace(1e-3, np.quantile(f_stats, 0.99), 300)
    kde = gaussian_kde(f_stats)

    fig, ax = plt.subplots()
    ax.plot(x_values, kde.evaluate(x_values), label='simulated')
    ax.plot(x_values, f_dist.pdf(x_values, dfn, dfd), label='F({}, {})'.format(
        dfn, dfd))
    ax.set_xlabel('F statistic')
    ax.set_ylabel('Density')
    ax.legend()

    return fig


def normal_equations_fit(x, y, intercept=True):
    """
    Solve the least squares problem with the normal equations.

    Calculates (X'X)^-1 X'y directly. Produces the same coefficients like
    linear_model, but without any inference.

    Parameters
    ----------
    x : ndarray
        The predictors in the shape (n_samples, n_variables) or (n_samples,)
        for one predictor.
    y : ndarray
        The response in the shape (n_samples,).
    intercept : bool, optional
        Add a column of ones to the design matrix. The default is True.

    Returns
    -------
    coefficients : ndarray
        The coefficients, the intercept first if present.
    y_fit : ndarray
        The fitted values.

    """
    design = _design_matrix(x, intercept)
    y = np.asarray(y, dtype='float')
    coefficients = np.linalg.solve(design.T.dot(design), design.T.dot(y))

    return coefficients, design.dot(coefficients)


def hat_matrix(x, intercept=True):
    """The projection matrix X(X'X)^-1X' mapping y onto the fitted values."""
    design = _design_matrix(x, intercept)
    return design.dot(np.linalg.solve(design.T.dot(design), design.T))


def _design_matrix(x, intercept):
    x = np.asarray(x, dtype='float')
    if x.ndim == 1:
        x = x[:, np.newaxis]
    if intercept:
        x = np.column_stack([np.ones(len(x)), x])
    return x
