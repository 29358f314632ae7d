#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Mon Aug  1 21:03:24 2022

@author: Alexander Southan
"""

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
from scipy.stats import percentileofscore, shapiro
from scipy.special import erfinv
from statsmodels.stats.outliers_influence import (
    OLSInfluence, variance_inflation_factor)
from statsmodels.tools.tools import add_constant


def percentiles(data):
    data = np.asarray(data)
    percentiles = np.empty_like(data, dtype='float')

    for ii, curr_data in enumerate(data):
        percentiles[ii] = percentileofscore(data, curr_data, kind='mean')

    return percentiles


def theo_residual_percentiles(residuals):
    # Calculation with the probit function,
    # see https://en.wikipedia.org/wiki/Probit
    theo_resid_percentiles = np.sqrt(2)*erfinv(2*percentiles(residuals)/100-1)

    return theo_resid_percentiles


def influence_table(fit_result):
    """
    Collect observation-wise influence measures of an OLS fit.

    Parameters
    ----------
    fit_result : statsmodels RegressionResults
        A fitted OLS model, e.g. linear_model.fit_result.

    Returns
    -------
    DataFrame
        One row per observation with the columns 'residual', 'leverage'
        (diagonal of the hat matrix), 'studentized' (externally studentized
        residuals) and 'cooks_distance'.

    """
    influence = OLSInfluence(fit_result)
    return pd.DataFrame(
        {'residual': np.asarray(fit_result.resid),
         'leverage': influence.hat_matrix_diag,
         'studentized': influence.resid_studentized_external,
         'cooks_distance': influence.cooks_distance[0]},
        index=fit_result.model.data.row_labels)


def variance_inflation_factors(data, predictors):
    """
    Variance inflation factors of the predictors.

    Parameters
    ----------
    data : DataFrame
        Contains the predictor columns.
    predictors : list of str
        The predictors to be checked for collinearity.

    Returns
    -------
    Series
        The VIF for every predictor. Values above 10 are usually regarded as
        a sign of strong collinearity.

    """
    design = add_constant(data[list(predictors)].astype('float'),
                          has_constant='add')
    # Index 0 is the constant
    vifs = [variance_inflation_factor(design.to_numpy(), ii)
            for ii in range(1, design.shape[1])]
    return pd.Series(vifs, index=list(predictors), name='VIF')


def residual_normality(residuals):
    """Shapiro-Wilk test of the residuals, returns (statistic, p_value)."""
    result = shapiro(np.asarray(residuals))
    return result.statistic, result.pvalue


def diagnostic_plots(fit_result):
    """
    The four standard residual plots of a linear model.

    The panels are residuals vs. fitted values, a normal QQ plot, a
    scale-location plot and studentized residuals vs. leverage.

    Parameters
    ----------
    fit_result : statsmodels RegressionResults
        A fitted OLS model.

    Returns
    -------
    fig : matplotlib Figure
        The figure containing the four panels.

    """
    influence = influence_table(fit_result)
    fitted = np.asarray(fit_result.fittedvalues)
    std_resid = OLSInfluence(fit_result).resid_studentized_internal

    fig, axes = plt.subplots(2, 2, figsize=(10, 8))
    axes[0, 0].scatter(fitted, influence['residual'], edgecolors='k')
    axes[0, 0].axhline(0, color='grey', ls='--')
    axes[0, 0].set_xlabel('Fitted values')
    axes[0, 0].set_ylabel('Residuals')

    axes[0, 1].scatter(theo_residual_percentiles(std_resid), std_resid,
                       edgecolors='k')
    axes[0, 1].plot([-3, 3], [-3, 3], color='grey', ls='--')
    axes[0, 1].set_xlabel('Theoretical quantiles')
    axes[0, 1].set_ylabel('Standardized residuals')

    axes[1, 0].scatter(fitted, np.sqrt(np.abs(std_resid)), edgecolors='k')
    axes[1, 0].set_xlabel('Fitted values')
    axes[1, 0].set_ylabel('$\\sqrt{|Standardized\\ residuals|}$')

    axes[1, 1].scatter(influence['leverage'], influence['studentized'],
                       edgecolors='k')
    axes[1, 1].set_xlabel('Leverage')
    axes[1, 1].set_ylabel('Studentized residuals')
    fig.tight_layout()

    return fig
