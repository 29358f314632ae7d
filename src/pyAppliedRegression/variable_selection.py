# -*- coding: utf-8 -*-
"""Subset selection and shrinkage methods for linear models."""

import warnings
from itertools import combinations
import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
from sklearn.linear_model import Lasso, Ridge, ElasticNet
from sklearn.preprocessing import StandardScaler
from sklearn.model_selection import KFold, cross_val_score

from .linear_models import linear_model, build_formula
from .model_tools import model_tools


def model_criterion(model, criterion='aic'):
    """
    Return the value of a selection criterion, smaller is better.

    Parameters
    ----------
    model : linear_model
        The fitted model.
    criterion : str, optional
        'aic', 'bic' or 'adj_r2'. The adjusted R^2 is returned with a
        negative sign so that all criteria are minimized. The default is
        'aic'.

    Returns
    -------
    float
        The criterion value.

    """
    criteria = ['aic', 'bic', 'adj_r2']
    if criterion == criteria[0]:
        return model.aic
    elif criterion == criteria[1]:
        return model.bic
    elif criterion == criteria[2]:
        return -model.adj_r_squared
    else:
        raise ValueError('No valid criterion given, allowed values are '
                         '{}.'.format(criteria))


def stepwise_selection(data, response_name, candidates=None, direction='both',
                       criterion='aic', start=None, model_type='linear',
                       respect_hierarchy=True, max_steps=100):
    """
    Greedy stepwise model selection.

    In every step, all models that differ from the current model by one added
    or one removed term are fitted and the move that improves the criterion
    most is done. The selection stops if no move improves the criterion.

    Parameters
    ----------
    data : DataFrame
        Contains the response and the candidate predictors.
    response_name : str
        The column used as the response.
    candidates : list of str or None, optional
        The candidate predictors. The default is None, meaning all columns
        except the response.
    direction : str, optional
        'forward' only adds terms, 'backward' only removes terms and 'both'
        does both. The default is 'both'.
    criterion : str, optional
        The criterion to be minimized, see model_criterion. The default is
        'aic'.
    start : list of str or None, optional
        The terms of the starting model. The default is None, meaning the
        intercept-only model for 'forward' and the full model otherwise.
    model_type : str, optional
        Defines the candidate terms, see model_tools. The default is
        'linear', i.e. main effects only.
    respect_hierarchy : bool, optional
        If True, a term can only be added if all its lower-order terms are
        in the model, and a term can only be removed if it is not part of a
        higher-order term in the model. The default is True.
    max_steps : int, optional
        The maximum number of moves. The default is 100.

    Returns
    -------
    final_model : linear_model
        The selected model.
    history : DataFrame
        One row per step with the columns 'step', 'action', 'term',
        'criterion' and 'formula'. The first row is the starting model.

    """
    directions = ['forward', 'backward', 'both']
    if direction not in directions:
        raise ValueError('No valid direction given, allowed values are '
                         '{}.'.format(directions))
    if candidates is None:
        candidates = [curr_col for curr_col in data.columns
                      if curr_col != response_name]

    terms = model_tools(model_type, candidates, response_name=response_name)
    if start is None:
        start_mask = pd.Series(direction != 'forward', index=terms.terms)
    else:
        start_mask = pd.Series(False, index=terms.terms)
        start_mask[list(start)] = True
    terms.model_string(combi_mask=start_mask)

    def evaluate(mask):
        curr_model = linear_model(data, formula=terms.model_string(
            combi_mask=mask))
        return curr_model, model_criterion(curr_model, criterion)

    current_mask = terms.param_combinations['mask'].copy()
    current_model, current_score = evaluate(current_mask)
    history = [{'step': 0, 'action': 'start', 'term': None,
                'criterion': current_score, 'formula': current_model.formula}]

    for step in range(1, max_steps+1):
        moves = []
        if direction in directions[0:3:2]:  # forward, both
            for curr_term in current_mask[~current_mask].index:
                if respect_hierarchy and not current_mask[
                        terms.sub_terms(curr_term)].all():
                    continue
                moves.append(('add', curr_term))
        if direction in directions[1:3]:  # backward, both
            for curr_term in current_mask[current_mask].index:
                if respect_hierarchy and current_mask[
                        terms.contained_in(curr_term)].any():
                    continue
                moves.append(('drop', curr_term))

        best_move = None
        for curr_action, curr_term in moves:
            curr_mask = current_mask.copy()
            curr_mask[curr_term] = curr_action == 'add'
            curr_model, curr_score = evaluate(curr_mask)
            if curr_score < current_score and (
                    best_move is None or curr_score < best_move[2]):
                best_move = (curr_action, curr_term, curr_score, curr_model,
                             curr_mask)

        if best_move is None:
            break

        (curr_action, curr_term, current_score, current_model,
         current_mask) = best_move
        history.append({'step': step, 'action': curr_action,
                        'term': curr_term, 'criterion': current_score,
                        'formula': current_model.formula})
    else:
        warnings.warn('Stepwise selection stopped after max_steps={} without '
                      'convergence.'.format(max_steps))

    terms.model_string(combi_mask=current_mask)

    return current_model, pd.DataFrame(history)


def best_subset_selection(data, response_name, candidates=None, max_size=None,
                          criterion='bic'):
    """
    Exhaustive search for the best model of every size.

    For every number of predictors, the model with the smallest residual sum
    of squares is kept. The overall best model is selected among those with
    the given criterion.

    Parameters
    ----------
    data : DataFrame
        Contains the response and the candidate predictors.
    response_name : str
        The column used as the response.
    candidates : list of str or None, optional
        The candidate predictors. The default is None, meaning all columns
        except the response.
    max_size : int or None, optional
        The largest model size considered. The default is None, meaning all
        candidates. Values larger than the number of candidates
        raise a ValueError.
    criterion : str, optional
        'aic', 'bic' or 'adj_r2', see model_criterion. The default is 'bic'.

    Returns
    -------
    subsets : DataFrame
        Index is the model size. Columns are 'predictors', 'rss',
        'r_squared', 'adj_r_squared', 'aic' and 'bic'.
    best_predictors : list of str
        The predictors of the selected model.

    """
    if candidates is None:
        candidates = [curr_col for curr_col in data.columns
                      if curr_col != response_name]
    if max_size is None:
        max_size = len(candidates)
    elif not 0 <= max_size <= len(candidates):
        raise ValueError(
            'max_size must be between 0 and the number of candidates ({}), '
            'but is {}.'.format(len(candidates), max_size))
    if len(candidates) > 15:
        warnings.warn('Best subset selection with {} candidates requires '
                      'fitting {} models, consider stepwise_selection '
                      'instead.'.format(len(candidates), 2**len(candidates)))

    rows = []
    best_models = {}
    for size in range(0, max_size+1):
        best_model = None
        for subset in combinations(candidates, size):
            curr_model = linear_model(data, formula=build_formula(
                response_name, subset))
            if best_model is None or curr_model.rss < best_model.rss:
                best_model = curr_model
                best_subset = list(subset)
        best_models[size] = best_model
        rows.append({'predictors': best_subset, 'rss': best_model.rss,
                     'r_squared': best_model.r_squared,
                     'adj_r_squared': best_model.adj_r_squared,
                     'aic': best_model.aic, 'bic': best_model.bic})
    subsets = pd.DataFrame(rows, index=pd.Index(range(0, max_size+1),
                                                name='size'))

    scores = pd.Series({size: model_criterion(curr_model, criterion)
                        for size, curr_model in best_models.items()})
    best_predictors = subsets.at[scores.idxmin(), 'predictors']

    return subsets, best_predictors


class penalized_regression():
    """Class for ridge, lasso and elastic net regression."""

    def __init__(self, x, y, penalty='lasso', l1_ratio=0.5, scale_std=True,
                 x_names=None):
        """
        Store and scale input data.

        Parameters
        ----------
        x : ndarray or DataFrame
            Predictors in the shape (n_samples, n_variables). If a DataFrame,
            the columns are used as variable names.
        y : ndarray or Series
            The response in the shape (n_samples,).
        penalty : str, optional
            'lasso' (L1), 'ridge' (L2) or 'elastic_net'. The default is
            'lasso'.
        l1_ratio : float, optional
            The mixing parameter for the elastic net, must be larger than 0
            and at most 1. The default is 0.5.
        scale_std : bool, optional
            True means the predictors are scaled to unit variance before the
            fit, which is usually necessary because the penalty depends on the
            scale. The default is True.
        x_names : list of str or None, optional
            Variable names. The default is None, resulting in 'factor_1',
            'factor_2' etc.

        Returns
        -------
        None.

        """
        self.penalties = ['lasso', 'ridge', 'elastic_net']
        if penalty not in self.penalties:
            raise ValueError('No valid penalty given, allowed values are '
                             '{}.'.format(self.penalties))
        if penalty == self.penalties[2] and not 0 < l1_ratio <= 1:
            raise ValueError('l1_ratio must be in the interval (0, 1], but is '
                             '{}.'.format(l1_ratio))
        self.penalty = penalty
        self.l1_ratio = l1_ratio
        self.scale_std = scale_std

        if isinstance(x, pd.DataFrame):
            self.x_names = x.columns.to_list()
        elif x_names is not None:
            self.x_names = list(x_names)
        else:
            self.x_names = ['factor_{}'.format(ii)
                            for ii in range(1, np.shape(x)[1]+1)]

        self.y = np.asarray(y, dtype='float')
        if len(self.y) != len(x):
            raise ValueError(
                'Number of responses does not match number of samples. Number '
                'of responses is {} and sample number is {}.'.format(
                    len(self.y), len(x)))

        self.scaler = StandardScaler(with_std=self.scale_std)
        self.x = self.scaler.fit_transform(np.asarray(x, dtype='float'))

        self.coef_path = pd.DataFrame([])
        self.cv_curve = pd.DataFrame([])
        self.alpha_min = None
        self.alpha_1se = None
        self.models = {}

    def _estimator(self, alpha):
        if self.penalty == self.penalties[0]:  # lasso
            return Lasso(alpha=alpha, max_iter=50000)
        elif self.penalty == self.penalties[1]:  # ridge
            return Ridge(alpha=alpha)
        else:  # elastic_net
            return ElasticNet(alpha=alpha, l1_ratio=self.l1_ratio,
                              max_iter=50000)

    def default_alphas(self, n_alphas=100):
        """
        Logarithmically spaced penalty values in decreasing order.

        For lasso and elastic net, the grid starts at the smallest alpha that
        sets all coefficients to zero. For ridge, a fixed range relative to
        the number of samples is used.

        """
        if self.penalty == self.penalties[1]:  # ridge
            return np.logspace(4, -3, n_alphas)
        l1_ratio = 1 if self.penalty == self.penalties[0] else self.l1_ratio
        alpha_max = np.abs(self.x.T.dot(self.y - self.y.mean())).max() / (
            len(self.y) * l1_ratio)
        return np.logspace(np.log10(alpha_max), np.log10(alpha_max*1e-3),
                           n_alphas)

    def fit_path(self, alphas=None, n_alphas=100):
        """
        Calculate the coefficient path.

        Parameters
        ----------
        alphas : list of float or None, optional
            The penalty values. The default is None, meaning
            self.default_alphas(n_alphas).
        n_alphas : int, optional
            The number of default alphas. The default is 100.

        Returns
        -------
        DataFrame
            The coefficients on the scaled predictors, the index is alpha and
            the columns are the variable names.

        """
        if alphas is None:
            alphas = self.default_alphas(n_alphas)

        coefs = [self._estimator(curr_alpha).fit(self.x, self.y).coef_
                 for curr_alpha in alphas]
        self.coef_path = pd.DataFrame(
            coefs, index=pd.Index(alphas, name='alpha'), columns=self.x_names)

        return self.coef_path

    def cross_validate(self, alphas=None, n_alphas=50, cv=10,
                       random_state=None):
        """
        Select the penalty by k-fold cross-validation.

        Besides the alpha with the smallest cross-validated mean squared error
        ('min'), the largest alpha with an error within one standard error of
        that minimum is determined ('1se').

        Parameters
        ----------
        alphas : list of float or None, optional
            The penalty values. The default is None, meaning
            self.default_alphas(n_alphas).
        n_alphas : int, optional
            The number of default alphas. The default is 50.
        cv : int, optional
            The number of folds. The default is 10.
        random_state : None or int, optional
            Seed for the fold assignment. The default is None.

        Returns
        -------
        DataFrame
            The index is alpha, the columns are 'mse' and 'mse_se', i.e. the
            mean and the standard error of the fold errors.

        """
        if alphas is None:
            alphas = self.default_alphas(n_alphas)
        folds = KFold(n_splits=cv, shuffle=True, random_state=random_state)

        mse = []
        mse_se = []
        for curr_alpha in alphas:
            fold_mse = -cross_val_score(
                self._estimator(curr_alpha), self.x, self.y, cv=folds,
                scoring='neg_mean_squared_error')
            mse.append(fold_mse.mean())
            mse_se.append(fold_mse.std(ddof=1) / np.sqrt(cv))
        self.cv_curve = pd.DataFrame(
            {'mse': mse, 'mse_se': mse_se},
            index=pd.Index(alphas, name='alpha'))

        min_idx = self.cv_curve['mse'].idxmin()
        self.alpha_min = min_idx
        threshold = (self.cv_curve.at[min_idx, 'mse'] +
                     self.cv_curve.at[min_idx, 'mse_se'])
        self.alpha_1se = self.cv_curve.index[
            self.cv_curve['mse'] <= threshold].max()

        self.models['min'] = self._estimator(self.alpha_min).fit(
            self.x, self.y)
        self.models['1se'] = self._estimator(self.alpha_1se).fit(
            self.x, self.y)

        return self.cv_curve

    def _check_rule(self, rule):
        if rule not in ['min', '1se']:
            raise ValueError('rule must either be \'min\' or \'1se\'.')
        if rule not in self.models:
            raise ValueError('No model selected yet, call cross_validate '
                             'first.')

    def coefficients(self, rule='min', original_scale=True):
        """
        Coefficients of the model selected by cross-validation.

        Parameters
        ----------
        rule : str, optional
            'min' or '1se'. The default is 'min'.
        original_scale : bool, optional
            True transforms the coefficients back to the unscaled predictors,
            False returns the coefficients of the scaled predictors. The
            default is True.

        Returns
        -------
        Series
            The intercept followed by the coefficients of the predictors.

        """
        self._check_rule(rule)
        model = self.models[rule]
        coefs = model.coef_
        intercept = model.intercept_
        if original_scale:
            if self.scale_std:
                coefs = coefs / self.scaler.scale_
            intercept = intercept - coefs.dot(self.scaler.mean_)

        return pd.Series(np.append(intercept, coefs),
                         index=['Intercept'] + self.x_names)

    def predict(self, samples, rule='min'):
        """Predict the response of unscaled samples."""
        self._check_rule(rule)
        return self.models[rule].predict(
            self.scaler.transform(np.asarray(samples, dtype='float')))

    def generate_plots(self, plot_names):
        """
        Generate plots of the coefficient path and the CV curve.

        Parameters
        ----------
        plot_names : list of str
            Allowed entries are 'coef_path' (needs self.fit_path) and
            'cv_curve' (needs self.cross_validate).

        Returns
        -------
        plots : list of matplotlib Figures

        """
        plots = []
        if 'coef_path' in plot_names:
            fig1, ax1 = plt.subplots(figsize=(9, 5))
            for curr_name in self.coef_path.columns:
                ax1.plot(self.coef_path.index, self.coef_path[curr_name],
                         label=curr_name)
            ax1.set_xscale('log')
            ax1.set_xlabel('alpha')
            ax1.set_ylabel('Coefficient')
            ax1.legend()
            plots.append(fig1)
        if 'cv_curve' in plot_names:
            fig2, ax2 = plt.subplots(figsize=(9, 5))
            ax2.errorbar(self.cv_curve.index, self.cv_curve['mse'],
                         yerr=self.cv_curve['mse_se'], marker='o',
                         linestyle='--')
            ax2.axvline(self.alpha_min, color='grey')
            ax2.axvline(self.alpha_1se, color='grey', linestyle=':')
            ax2.set_xscale('log')
            ax2.set_xlabel('alpha')
            ax2.set_ylabel('CV MSE')
            plots.append(fig2)

        return plots
