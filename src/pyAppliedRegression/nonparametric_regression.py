# -*- coding: utf-8 -*-
"""Support vector and nearest neighbor regression."""

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
from sklearn.neighbors import KNeighborsRegressor
from sklearn.svm import SVR
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler
from sklearn.model_selection import GridSearchCV, KFold


def knn_predict(x_train, y_train, x_new, n_neighbors=5):
    """
    Predict by averaging the responses of the nearest training points.

    Parameters
    ----------
    x_train : ndarray
        Training predictors in the shape (n_samples, n_variables) or
        (n_samples,) for one predictor.
    y_train : ndarray
        Training responses in the shape (n_samples,).
    x_new : ndarray
        The points to predict, same number of variables like x_train.
    n_neighbors : int, optional
        The number of neighbors averaged. The default is 5.

    Returns
    -------
    ndarray
        The predictions in the shape (n_new,).

    """
    x_train = np.asarray(x_train, dtype='float')
    x_new = np.asarray(x_new, dtype='float')
    y_train = np.asarray(y_train, dtype='float')
    if x_train.ndim == 1:
        x_train = x_train[:, np.newaxis]
    if x_new.ndim == 1:
        x_new = x_new[:, np.newaxis]
    if not 1 <= n_neighbors <= len(x_train):
        raise ValueError('n_neighbors must be between 1 and the number of '
                         'training samples ({}), but is {}.'.format(
                             len(x_train), n_neighbors))

    # Euclidean distances in the shape (n_new, n_train)
    distances = np.linalg.norm(
        x_new[:, np.newaxis, :] - x_train[np.newaxis, :, :], axis=2)
    neighbors = np.argsort(distances, axis=1, kind='stable')[:, :n_neighbors]

    return y_train[neighbors].mean(axis=1)


class tuned_regressor():
    """Support vector or nearest neighbor regression with tuning by CV."""

    def __init__(self, x, y, method='svr', scale_std=True, x_names=None):
        """
        Store input data.

        Parameters
        ----------
        x : ndarray or DataFrame
            Training predictors in the shape (n_samples, n_variables) or
            (n_samples,) for one predictor.
        y : ndarray or Series
            Training responses in the shape (n_samples,).
        method : str, optional
            'svr' for epsilon support vector regression or 'knn' for
            k-nearest neighbors regression. The default is 'svr'.
        scale_std : bool, optional
            True means the predictors are standardized inside the model
            pipeline, which is important for both distance-based methods. The
            default is True.
        x_names : list of str or None, optional
            Variable names. The default is None, resulting in 'factor_1',
            'factor_2' etc.

        Returns
        -------
        None.

        """
        self.methods = ['svr', 'knn']
        if method not in self.methods:
            raise ValueError('No valid method given, allowed values are '
                             '{}.'.format(self.methods))
        self.method = method
        self.scale_std = scale_std

        if isinstance(x, pd.DataFrame):
            x_names = x.columns.to_list()
        self.x = np.asarray(x, dtype='float')
        if self.x.ndim == 1:
            self.x = self.x[:, np.newaxis]
        self.y = np.asarray(y, dtype='float')
        if len(self.y) != len(self.x):
            raise ValueError(
                'Number of responses does not match number of samples. Number '
                'of responses is {} and sample number is {}.'.format(
                    len(self.y), len(self.x)))
        if x_names is None:
            x_names = ['factor_{}'.format(ii)
                       for ii in range(1, self.x.shape[1]+1)]
        self.x_names = list(x_names)

        self.grid_search = None
        self.cv_results = pd.DataFrame([])

    def pipeline(self):
        """The unfitted scaler and model pipeline."""
        if self.method == self.methods[0]:  # svr
            model = SVR()
        else:  # knn
            model = KNeighborsRegressor()
        return Pipeline([('scaler', StandardScaler(with_std=self.scale_std)),
                         (self.method, model)])

    def default_grid(self, cv=10):
        """
        Default tuning grid of the method.

        For 'svr', the cost C, the tube width epsilon and the RBF kernel
        width gamma are varied. For 'knn', the number of neighbors is varied
        from 1 to 30 at most, limited by the size of the training folds.

        """
        if self.method == self.methods[0]:  # svr
            return {'svr__C': [0.1, 1, 10, 100],
                    'svr__epsilon': [0.01, 0.1, 0.5],
                    'svr__gamma': ['scale', 0.1, 1]}
        max_neighbors = min(30, int(len(self.y) * (cv-1) / cv))
        return {'knn__n_neighbors': list(range(1, max_neighbors+1))}

    def tune(self, param_grid=None, cv=10, random_state=None, **kwargs):
        """
        Select the hyperparameters by grid search with k-fold CV.

        Parameters
        ----------
        param_grid : dict or None, optional
            The grid in the format of GridSearchCV, the parameter names are
            prefixed with the method name, e.g. 'svr__C'. The default is None,
            meaning self.default_grid(cv).
        cv : int, optional
            Number of folds. The default is 10.
        random_state : None or int, optional
            Seed for the fold assignment. The default is None.
        **kwargs :
            Passed to sklearn.model_selection.GridSearchCV.

        Returns
        -------
        DataFrame
            One row per parameter combination with the parameters, 'mse'
            (mean CV error) and 'mse_std'.

        """
        if param_grid is None:
            param_grid = self.default_grid(cv)
        self.grid_search = GridSearchCV(
            self.pipeline(), param_grid, scoring='neg_mean_squared_error',
            cv=KFold(n_splits=cv, shuffle=True, random_state=random_state),
            **kwargs)
        self.grid_search.fit(self.x, self.y)

        results = pd.DataFrame(self.grid_search.cv_results_)
        self.cv_results = pd.DataFrame(results['params'].to_list())
        self.cv_results['mse'] = -results['mean_test_score']
        self.cv_results['mse_std'] = results['std_test_score']

        return self.cv_results

    @property
    def best_params(self):
        return self.grid_search.best_params_

    @property
    def best_estimator(self):
        return self.grid_search.best_estimator_

    def predict(self, samples):
        """Predict with the tuned model refitted on all training data."""
        samples = np.asarray(samples, dtype='float')
        if samples.ndim == 1:
            samples = samples[:, np.newaxis]
        return self.best_estimator.predict(samples)

    def generate_plots(self, plot_names):
        """
        Generate plots of the tuning and the fit.

        Parameters
        ----------
        plot_names : list of str
            Allowed entries are 'cv_curve' (CV error vs. number of neighbors
            for 'knn', vs. C for the best epsilon and gamma for 'svr') and
            'fit' (data and fitted curve, only for one predictor).

        Returns
        -------
        plots : list of matplotlib Figures

        """
        plots = []
        if 'cv_curve' in plot_names:
            if self.method == self.methods[0]:  # svr
                curve_par = 'svr__C'
                curve_data = self.cv_results
                for curr_par in ['svr__epsilon', 'svr__gamma']:
                    if curr_par in curve_data:
                        curve_data = curve_data[
                            curve_data[curr_par] == self.best_params[
                                curr_par]]
            else:
                curve_par = 'knn__n_neighbors'
                curve_data = self.cv_results
            fig1, ax1 = plt.subplots(figsize=(9, 5))
            ax1.plot(curve_data[curve_par], curve_data['mse'], linestyle='--',
                     marker='o')
            if self.method == self.methods[0]:
                ax1.set_xscale('log')
            ax1.set_xlabel(curve_par.split('__')[1])
            ax1.set_ylabel('CV MSE')
            plots.append(fig1)
        if 'fit' in plot_names and self.x.shape[1] == 1:
            x_grid = np.linspace(self.x.min(), self.x.max(), 300)
            fig2, ax2 = plt.subplots(figsize=(9, 5))
            ax2.scatter(self.x[:, 0], self.y, edgecolors='k')
            ax2.plot(x_grid, self.predict(x_grid), color='red')
            ax2.set_xlabel(self.x_names[0])
            ax2.set_ylabel('Response')
            plots.append(fig2)

        return plots
