# -*- coding: utf-8 -*-
"""
Created on Fri Apr 14 14:50:48 2023

@author: southan
"""

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
from sklearn.cross_decomposition import PLSRegression
from sklearn.preprocessing import StandardScaler
from sklearn.model_selection import cross_val_predict
from sklearn.metrics import mean_squared_error, r2_score


class pls_regression():
    """Class for performing partial least squares regression."""

    def __init__(self, x, y, scale_std=False):
        """
        Store input data and initialize results DataFrame.

        Parameters
        ----------
        x : ndarray
            Sample training data in the shape (n_samples, n_variables).
        y : ndarray
            Target values in the shape (n_samples,) for a single target or
            (n_samples, n_targets) for multiple targets.
        scale_std : bool, optional
            True means the data will be scaled to unit variance. Default is
            False.

        Returns
        -------
        None.

        """
        self.x_raw = np.asarray(x, dtype='float')
        self.y = np.asarray(y, dtype='float')
        self.scale_std = scale_std

        self.scaler = StandardScaler(with_std=self.scale_std)
        self.x = self.scaler.fit_transform(self.x_raw)

        results_index = pd.MultiIndex.from_product(
            [['plsr_objects', 'y', 'r2', 'mse'], ['c', 'cv']],
            names=['result_name', 'cal_or_crossval'])
        results_columns = pd.Index(
            [], name='n_components')
        self.plsr_results = pd.DataFrame([], index=results_index,
                                         columns=results_columns,
                                         dtype='object')

    def plsr_fit(self, n_components, cv_percentage=10, **kwargs):
        """
        Perform partial least squares regression for one number of components.

        Parameters
        ----------
        n_components : int
            Number of components kept after PLSR.
        cv_percentage : float, optional
            Percentage of data used for cross-validation. The default is 10.
        **kwargs :
            All **kwargs from sklearn.cross_decomposition.PLSRegression are
            allowed, see the documentation of those classes for details.

        Returns
        -------
        DataFrame
            Contains the predicted sample values ('y') of the training data
            ('c'), the corresponding predictions ('y') after cross-validation
            ('cv'), the coefficient of determination ('r2') for 'c' and 'cv',
            and the mean squared error ('mse') for 'c' and 'cv' (given in the
            DataFrame index). The DataFrame columns give the number of
            components used to calculate the values.

        """
        if n_components not in self.plsr_results.columns:
            self.plsr_results[n_components] = pd.Series(
                [None]*len(self.plsr_results), index=self.plsr_results.index,
                dtype='object')

        # The data is already centered and scaled by self.scaler
        self.plsr_results.at[('plsr_objects', 'c'), n_components] = (
            PLSRegression(n_components=n_components, scale=False, **kwargs))
        self.plsr_results.at[('plsr_objects', 'c'), n_components].fit(
            self.x, self.y)
        # Predict sample values according to PLSR model
        self.plsr_results.at[('y', 'c'), n_components] = self.predict(
            self.x, n_components, scale=False)
        # Cross-validate the PLSR model
        self.plsr_results.at[('y', 'cv'), n_components] = np.squeeze(
            cross_val_predict(
                PLSRegression(n_components=n_components, scale=False,
                              **kwargs),
                self.x, self.y, cv=round(100/cv_percentage)))

        # Calculate metrics for PLSR model
        for curr_type in ['c', 'cv']:
            self.plsr_results.at[('r2', curr_type), n_components] = r2_score(
                self.y, self.plsr_results.at[('y', curr_type), n_components])
            self.plsr_results.at[('mse', curr_type), n_components] = (
                mean_squared_error(
                    self.y, self.plsr_results.at[('y', curr_type),
                                                 n_components]))

        return self.plsr_results

    def plsr_sweep(self, max_components=20, **kwargs):
        """
        Perform PLSR for all number of components between 1 and max_components.

        Parameters
        ----------
        max_components : int, optional
            The upper limit of components used for PLSR. The default is 20,
            but at most the number of variables is used.
        **kwargs :
            The same **kwargs as in self.plsr_fit.

        Returns
        -------
        DataFrame
            See Docstring of self.plsr_fit.

        """
        for ii in range(1, min(max_components, self.x.shape[1])+1):
            self.plsr_fit(ii, **kwargs)
        return self.plsr_results

    def predict(self, samples, n_components, scale=True):
        """
        Predict unknown sample target values.

        Parameters
        ----------
        samples : ndarray
            Sample data in the shape (n_samples, n_variables).
        n_components : int
            Number of components used in the PLSR model for the prediction.
        scale : bool, optional
            Defines if the sample data is scaled like the input data or not.
            If called from within the class, should be False. Default is True.

        Returns
        -------
        prediction : ndarray
            Predicted target values in the shape (n_samples,) for a single
            target or (n_samples, n_targets) for multiple targets.

        """
        if scale:
            samples = self.scaler.transform(np.asarray(samples,
                                                       dtype='float'))

        return np.squeeze(
            self.plsr_results.at[('plsr_objects', 'c'),
                                 n_components].predict(samples))

    def x_weights(self, n_components):
        """The PLS directions of the fitted model as a (n_variables,
        n_components) array."""
        return self.plsr_results.at[('plsr_objects', 'c'),
                                    n_components].x_weights_

    def generate_plots(self, plot_names, **kwargs):
        """
        Generate some basic plots of partial least squares regression results.

        Parameters
        ----------
        plot_names : list of str
            List of plots to be generated. Allowed entries are
            'actual_vs_pred' (actual target values vs. predicted values),
            'r2_vs_comp' (coefficient of determination vs. number of
            components), 'mse_vs_comp' (mean squared error vs. number of
            components).
        **kwargs :
            n_components : int
                Needed for plot_name 'actual_vs_pred'.
            cv : boolean
                State if cross-validation data should be plotted, too.
                Default is False.
        Returns
        -------
        plots : list of matplotlib Figures

        """
        plots = []
        plot_cv_data = kwargs.get('cv', False)
        if 'actual_vs_pred' in plot_names:
            n_components = kwargs.get('n_components')
            curr_y = self.y.reshape(len(self.y), -1)[:, 0]
            curr_c = np.reshape(
                self.plsr_results.at[('y', 'c'), n_components],
                (len(curr_y), -1))[:, 0]
            curr_cv = np.reshape(
                self.plsr_results.at[('y', 'cv'), n_components],
                (len(curr_y), -1))[:, 0]

            z_c = np.polyfit(curr_y, curr_c, 1)
            z_cv = np.polyfit(curr_y, curr_cv, 1)
            with plt.style.context(('ggplot')):
                fig1, ax1 = plt.subplots(figsize=(9, 5))
                ax1.scatter(curr_y, curr_c, c='red', edgecolors='k')
                if plot_cv_data:
                    ax1.scatter(curr_y, curr_cv, c='blue', edgecolors='k')
                    ax1.plot(curr_y, z_cv[1]+z_cv[0]*curr_y, c='blue',
                             linewidth=1)
                ax1.plot(curr_y, z_c[1]+z_c[0]*curr_y, c='red', linewidth=1)
                ax1.plot(curr_y, curr_y, color='green', linewidth=1)
                ax1.set_title('$R^{2}$ (CV): ' + '{:.3f}'.format(
                    self.plsr_results.at[('r2', 'cv'), n_components]))
                ax1.set_xlabel('Measured')
                ax1.set_ylabel('Predicted')
            plots.append(fig1)
        for curr_plot, curr_label in zip(['r2_vs_comp', 'mse_vs_comp'],
                                         ['$R^{2}$', 'MSE']):
            if curr_plot not in plot_names:
                continue
            curr_metric = curr_plot.split('_')[0]
            with plt.style.context(('ggplot')):
                fig, ax = plt.subplots(figsize=(9, 5))
                ax.plot(self.plsr_results.loc[(curr_metric, 'c')].astype(
                    float), linestyle='--', marker='o')
                if plot_cv_data:
                    ax.plot(self.plsr_results.loc[(curr_metric, 'cv')].astype(
                        float), linestyle='--', marker='o')
                ax.set_ylabel(curr_label)
                ax.set_xlabel('Number of components')
            plots.append(fig)

        return plots


def pls_directions(x, y, n_components, scale_std=False):
    """
    Derive the partial least squares directions step by step.

    Each direction is proportional to the covariances of the predictors with
    the response, i.e. to the slopes of the simple regressions of y on the
    individual centered predictors. The predictors and the response are
    regressed on the resulting score and replaced by the residuals before the
    next direction is searched, so all scores are orthogonal.

    Parameters
    ----------
    x : ndarray
        Predictors in the shape (n_samples, n_variables).
    y : ndarray
        Response in the shape (n_samples,).
    n_components : int
        The number of directions.
    scale_std : bool, optional
        Scale the predictors to unit variance first. The default is False.

    Returns
    -------
    dict
        'weights' (n_variables, n_components) with the unit direction vectors,
        'scores' (n_samples, n_components), 'x_loadings' (n_variables,
        n_components), 'y_loadings' (n_components,), 'coefs' (n_variables,)
        being the regression coefficients for the centered (and possibly
        scaled) predictors and 'intercept'.

    Raises
    ------
    ValueError
        If a direction vanishes, e.g. for n_components larger than the rank
        of the predictors or a constant response.

    """
    x_work = StandardScaler(with_std=scale_std).fit_transform(
        np.asarray(x, dtype='float'))
    y = np.asarray(y, dtype='float')
    y_work = y - y.mean()
    n_samples, n_variables = x_work.shape

    weights = np.empty((n_variables, n_components))
    scores = np.empty((n_samples, n_components))
    x_loadings = np.empty((n_variables, n_components))
    y_loadings = np.empty(n_components)

    first_norm = None
    for ii in range(n_components):
        direction = x_work.T.dot(y_work)
        direction_norm = np.linalg.norm(direction)
        if first_norm is None:
            first_norm = direction_norm
        if direction_norm <= 1e-10 * first_norm:
            raise ValueError(
                'Direction {} has zero length, the predictors contain no '
                'further information about the response. Use fewer than '
                '{} components.'.format(ii+1, n_components))
        direction /= direction_norm
        curr_scores = x_work.dot(direction)
        scores_ss = curr_scores.dot(curr_scores)

        weights[:, ii] = direction
        scores[:, ii] = curr_scores
        x_loadings[:, ii] = x_work.T.dot(curr_scores) / scores_ss
        y_loadings[ii] = y_work.dot(curr_scores) / scores_ss

        # deflation
        x_work = x_work - np.outer(curr_scores, x_loadings[:, ii])
        y_work = y_work - y_loadings[ii] * curr_scores

    coefs = weights.dot(np.linalg.solve(x_loadings.T.dot(weights),
                                        y_loadings))

    return {'weights': weights, 'scores': scores, 'x_loadings': x_loadings,
            'y_loadings': y_loadings, 'coefs': coefs, 'intercept': y.mean()}
