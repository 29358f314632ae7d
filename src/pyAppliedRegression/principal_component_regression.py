# -*- coding: utf-8 -*-
"""Principal component regression."""

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
from sklearn.decomposition import PCA
from sklearn.linear_model import LinearRegression
from sklearn.pipeline import make_pipeline
from sklearn.preprocessing import StandardScaler
from sklearn.model_selection import cross_val_predict
from sklearn.metrics import mean_squared_error, r2_score


class principal_component_regression():
    """Class for performing principal component regression."""

    def __init__(self, x, y, x_names=None, scale_std=True):
        """
        Store input data and initialize results DataFrame.

        Parameters
        ----------
        x : ndarray or DataFrame
            Sample training data in the shape (n_samples, n_variables). Data
            is mean centered automatically. If a DataFrame, the columns are
            used as variable names.
        y : ndarray or Series
            Target values in the shape (n_samples,).
        x_names : list of str or None, optional
            A list containing the names of the n_variables factors. Default is
            None which results in 'factor_1', 'factor_2' etc.
        scale_std : bool, optional
            True means the data will be scaled to unit variance. Default is
            True.

        Returns
        -------
        None.

        """
        self.scale_std = scale_std
        self.n_samples, self.n_variables = np.shape(x)

        if isinstance(x, pd.DataFrame):
            self.x_names = x.columns.to_list()
        elif x_names is None:
            self.x_names = ['factor_{}'.format(ii) for ii in np.arange(
                1, self.n_variables+1)]
        elif len(x_names) == self.n_variables:
            self.x_names = list(x_names)
        else:
            raise ValueError(
                'Number of factor names does not match number of factors. '
                'Number of factors is {} and factor name number is '
                '{}.'.format(self.n_variables, len(x_names)))

        self.y = np.asarray(y, dtype='float')
        if len(self.y) != self.n_samples:
            raise ValueError(
                'Number of responses does not match number of samples. '
                'Number of responses is {} and sample number is {}.'.format(
                    len(self.y), self.n_samples))

        self.scaler = StandardScaler(with_std=self.scale_std)
        self.x = self.scaler.fit_transform(np.asarray(x, dtype='float'))

        self.pca = None
        self.pca_scores = pd.DataFrame([])
        self.pca_eigenvalues = pd.Series([], dtype='float64')
        self.pca_eigenvectors = pd.DataFrame([])
        self.pca_explained_variance = pd.DataFrame([], columns=['each', 'cum'])

        results_index = pd.MultiIndex.from_product(
            [['pcr_objects', 'y', 'r2', 'mse'], ['c', 'cv']],
            names=['result_name', 'cal_or_crossval'])
        results_columns = pd.Index([], name='n_components')
        self.pcr_results = pd.DataFrame([], index=results_index,
                                        columns=results_columns,
                                        dtype='object')

    def perform_pca(self):
        """
        Perform a principal component analysis with all components.

        Stores scores, eigenvectors, eigenvalues and the explained variance
        in the corresponding attributes.

        Returns
        -------
        DataFrame
            The explained variance ratio of each PC ('each') and cumulated
            ('cum').

        """
        self.pca = PCA().fit(self.x)
        pc_index = pd.Index(np.arange(1, self.pca.n_components_+1),
                            name='PC number')

        self.pca_scores = pd.DataFrame(self.pca.transform(self.x),
                                       columns=pc_index)
        self.pca_eigenvalues = pd.Series(self.pca.explained_variance_,
                                         index=pc_index)
        self.pca_eigenvectors = pd.DataFrame(
            self.pca.components_.T, index=self.x_names, columns=pc_index)
        self.pca_explained_variance = pd.DataFrame(
            self.pca.explained_variance_ratio_, columns=['each'],
            index=pc_index)
        self.pca_explained_variance['cum'] = (
            self.pca_explained_variance['each'].cumsum())

        return self.pca_explained_variance

    def pcr_fit(self, n_components, cv_percentage=10):
        """
        Perform principal component regression for one number of components.

        The first n_components scores in the order of explained variance are
        used as predictors in a least squares regression.

        Parameters
        ----------
        n_components : int
            Number of components used for the regression.
        cv_percentage : float, optional
            Percentage of data used for cross-validation. The default is 10.

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
        if self.pca is None:
            self.perform_pca()
        if not 1 <= n_components <= self.pca.n_components_:
            raise ValueError(
                'n_components must be between 1 and {}, but is {}.'.format(
                    self.pca.n_components_, n_components))
        if n_components not in self.pcr_results.columns:
            self.pcr_results[n_components] = pd.Series(
                [None]*len(self.pcr_results), index=self.pcr_results.index,
                dtype='object')

        # The regression on the scores
        self.pcr_results.at[('pcr_objects', 'c'), n_components] = (
            LinearRegression().fit(
                self.pca_scores.loc[:, 1:n_components].to_numpy(), self.y))
        self.pcr_results.at[('y', 'c'), n_components] = self.predict(
            self.x, n_components, scale=False)
        # The PCA is part of the cross-validated pipeline so that the test
        # folds do not influence the components
        self.pcr_results.at[('y', 'cv'), n_components] = cross_val_predict(
            make_pipeline(PCA(n_components=n_components), LinearRegression()),
            self.x, self.y, cv=round(100/cv_percentage))

        for curr_type in ['c', 'cv']:
            self.pcr_results.at[('r2', curr_type), n_components] = r2_score(
                self.y, self.pcr_results.at[('y', curr_type), n_components])
            self.pcr_results.at[('mse', curr_type), n_components] = (
                mean_squared_error(
                    self.y, self.pcr_results.at[('y', curr_type),
                                                n_components]))

        return self.pcr_results

    def pcr_sweep(self, max_components=None, **kwargs):
        """
        Perform PCR for all numbers of components up to max_components.

        Parameters
        ----------
        max_components : int or None, optional
            The upper limit of components used for PCR. The default is None,
            meaning all components.
        **kwargs :
            The same **kwargs as in self.pcr_fit.

        Returns
        -------
        DataFrame
            See Docstring of self.pcr_fit.

        """
        if self.pca is None:
            self.perform_pca()
        if max_components is None:
            max_components = self.pca.n_components_
        for ii in range(1, max_components+1):
            self.pcr_fit(ii, **kwargs)
        return self.pcr_results

    def coefficients(self, n_components):
        """
        Regression coefficients with respect to the scaled variables.

        The coefficients of the scores are projected back with the
        eigenvectors, so they can be compared to the coefficients of an
        ordinary least squares fit. With all components, both are identical.

        Returns
        -------
        Series
            One coefficient per variable.

        """
        score_coefs = self.pcr_results.at[('pcr_objects', 'c'),
                                          n_components].coef_
        return pd.Series(
            self.pca_eigenvectors.loc[:, 1:n_components].to_numpy().dot(
                score_coefs), index=self.x_names)

    def predict(self, samples, n_components, scale=True):
        """
        Predict unknown sample target values.

        Parameters
        ----------
        samples : ndarray
            Sample data in the shape (n_samples, n_variables).
        n_components : int
            Number of components used in the PCR model for the prediction.
        scale : bool, optional
            Defines if the sample data is scaled like the input data or not.
            If called from within the class, should be False. Default is True.

        Returns
        -------
        prediction : ndarray
            Predicted target values in the shape (n_samples,).

        """
        samples = np.asarray(samples, dtype='float')
        if scale:
            samples = self.scaler.transform(samples)
        scores = self.pca.transform(samples)[:, :n_components]

        return self.pcr_results.at[('pcr_objects', 'c'),
                                   n_components].predict(scores)

    def generate_plots(self, plot_names):
        """
        Generate some basic plots of principal component regression results.

        Parameters
        ----------
        plot_names : list of str
            List of plots to be generated. Allowed entries are 'scree'
            (explained variance vs. number of components), 'r2_vs_comp'
            (coefficient of determination vs. number of components) and
            'mse_vs_comp' (mean squared error vs. number of components).

        Returns
        -------
        plots : list of matplotlib Figures

        """
        plots = []
        if 'scree' in plot_names:
            with plt.style.context(('ggplot')):
                fig1, ax1 = plt.subplots(figsize=(9, 5))
                ax1.plot(self.pca_explained_variance['each'], linestyle='--',
                         marker='o', label='each')
                ax1.plot(self.pca_explained_variance['cum'], linestyle='--',
                         marker='o', label='cumulative')
                ax1.set_ylabel('Explained variance ratio')
                ax1.set_xlabel('Number of components')
                ax1.legend()
            plots.append(fig1)
        for curr_plot, curr_label in zip(['r2_vs_comp', 'mse_vs_comp'],
                                         ['$R^{2}$', 'MSE']):
            if curr_plot not in plot_names:
                continue
            curr_metric = curr_plot.split('_')[0]
            with plt.style.context(('ggplot')):
                fig, ax = plt.subplots(figsize=(9, 5))
                ax.plot(self.pcr_results.loc[(curr_metric, 'c')].astype(float),
                        linestyle='--', marker='o', label='calibration')
                ax.plot(self.pcr_results.loc[(curr_metric, 'cv')].astype(
                    float), linestyle='--', marker='o', label='CV')
                ax.set_ylabel(curr_label)
                ax.set_xlabel('Number of components')
                ax.legend()
            plots.append(fig)

        return plots
