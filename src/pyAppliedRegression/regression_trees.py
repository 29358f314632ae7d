# -*- coding: utf-8 -*-
"""Regression trees, model trees and tree ensembles."""

import copy
import warnings
import numpy as np
import pandas as pd
from sklearn.tree import DecisionTreeRegressor
from sklearn.ensemble import BaggingRegressor, RandomForestRegressor
from sklearn.inspection import permutation_importance
from sklearn.model_selection import KFold, cross_val_score
from sklearn.metrics import mean_squared_error


def split_search(x, y, min_samples_leaf=1):
    """
    Find the best binary split on one predictor.

    All midpoints between consecutive distinct x values are tried as
    thresholds. Observations with x <= threshold go to the left node. The
    best threshold minimizes the sum of the residual sums of squares of the
    two nodes, each predicting its mean.

    Parameters
    ----------
    x : ndarray
        The predictor in the shape (n_samples,).
    y : ndarray
        The response in the shape (n_samples,).
    min_samples_leaf : int, optional
        The minimum number of observations in each node. The default is 1.

    Returns
    -------
    threshold : float or None
        The best threshold, None if no valid split exists.
    rss : float
        The summed residual sum of squares of both nodes, inf if no valid
        split exists.

    """
    x = np.asarray(x, dtype='float')
    y = np.asarray(y, dtype='float')
    n_samples = len(y)
    if n_samples < 2*min_samples_leaf or n_samples < 2:
        return None, np.inf

    order = np.argsort(x, kind='stable')
    x_sorted = x[order]
    # Centered so that the sums of squares below keep their precision for
    # responses with a large offset
    y_sorted = y[order] - y.mean()

    # The sums for all splits between position ii and ii+1 are obtained from
    # cumulative sums, so the search is linear after sorting.
    cum_sum = np.cumsum(y_sorted)
    cum_sum_sq = np.cumsum(y_sorted**2)
    n_left = np.arange(1, n_samples)
    n_right = n_samples - n_left
    sum_left = cum_sum[:-1]
    sum_right = cum_sum[-1] - sum_left
    rss = (cum_sum_sq[:-1] - sum_left**2/n_left +
           (cum_sum_sq[-1] - cum_sum_sq[:-1]) - sum_right**2/n_right)

    valid = ((x_sorted[:-1] < x_sorted[1:]) &
             (n_left >= min_samples_leaf) & (n_right >= min_samples_leaf))
    if not valid.any():
        return None, np.inf

    rss = np.where(valid, rss, np.inf)
    best = np.argmin(rss)
    threshold = (x_sorted[best] + x_sorted[best+1]) / 2

    return threshold, rss[best]


def best_split(x, y, min_samples_leaf=1):
    """
    Find the best binary split over all predictors.

    Parameters
    ----------
    x : ndarray
        The predictors in the shape (n_samples, n_variables).
    y : ndarray
        The response in the shape (n_samples,).
    min_samples_leaf : int, optional
        See split_search. The default is 1.

    Returns
    -------
    feature : int or None
        The column index of the split variable.
    threshold : float or None
        The split threshold.
    rss : float
        The summed residual sum of squares of both nodes.

    """
    x = np.asarray(x, dtype='float')
    best = (None, None, np.inf)
    for feature in range(x.shape[1]):
        threshold, rss = split_search(x[:, feature], y, min_samples_leaf)
        if rss < best[2]:
            best = (feature, threshold, rss)

    return best


class _tree_base():
    """Node bookkeeping shared by regression_tree and model_tree."""

    def _leaf_id(self, sample):
        node_id = 0
        while self.nodes[node_id]['left'] is not None:
            node = self.nodes[node_id]
            if sample[node['feature']] <= node['threshold']:
                node_id = node['left']
            else:
                node_id = node['right']
        return node_id

    def apply(self, x):
        """Return the leaf node id of every sample."""
        x = _as_2d(x)
        return np.array([self._leaf_id(curr_sample) for curr_sample in x])

    def _subtree_nodes(self, node_id=0):
        stack = [node_id]
        subtree = []
        while stack:
            curr_id = stack.pop()
            subtree.append(curr_id)
            if self.nodes[curr_id]['left'] is not None:
                stack.extend([self.nodes[curr_id]['right'],
                              self.nodes[curr_id]['left']])
        return subtree

    def _subtree_leaves(self, node_id=0):
        return [curr_id for curr_id in self._subtree_nodes(node_id)
                if self.nodes[curr_id]['left'] is None]

    @property
    def n_leaves(self):
        return len(self._subtree_leaves())

    @property
    def depth(self):
        return max(self.nodes[curr_id]['depth']
                   for curr_id in self._subtree_leaves())

    def export_text(self, feature_names=None, decimals=3):
        """
        Text representation of the tree structure.

        Parameters
        ----------
        feature_names : list of str or None, optional
            Names of the predictors. The default is None, resulting in
            'x_0', 'x_1' etc.
        decimals : int, optional
            Digits shown for thresholds and leaf values. The default is 3.

        Returns
        -------
        str
            One line per split condition and per leaf.

        """
        lines = []
        stack = [(0, 0, None)]
        while stack:
            node_id, indent, condition = stack.pop()
            node = self.nodes[node_id]
            if condition is not None:
                lines.append('|   '*(indent-1) + '|--- ' + condition)
            if node['left'] is None:
                lines.append('|   '*indent + '|--- ' + self._leaf_text(
                    node, decimals))
                continue
            if feature_names is None:
                name = 'x_{}'.format(node['feature'])
            else:
                name = feature_names[node['feature']]
            threshold = round(node['threshold'], decimals)
            stack.append((node['right'], indent+1,
                          '{} >  {}'.format(name, threshold)))
            stack.append((node['left'], indent+1,
                          '{} <= {}'.format(name, threshold)))

        return '\n'.join(lines)


class regression_tree(_tree_base):
    """Regression tree grown by recursive binary splitting (CART)."""

    def __init__(self, max_depth=None, min_samples_split=2,
                 min_samples_leaf=1, min_impurity_decrease=0.0):
        """
        Store the growing parameters.

        Parameters
        ----------
        max_depth : int or None, optional
            The maximum depth of the tree. The default is None, meaning that
            nodes are split until another criterion stops the growth.
        min_samples_split : int, optional
            Nodes with less observations are not split. The default is 2.
        min_samples_leaf : int, optional
            Minimum number of observations in each leaf. The default is 1.
        min_impurity_decrease : float, optional
            A split is only done if it decreases the RSS divided by the number
            of training samples by at least this value. The default is 0.

        Returns
        -------
        None.

        """
        self.max_depth = max_depth
        self.min_samples_split = min_samples_split
        self.min_samples_leaf = min_samples_leaf
        self.min_impurity_decrease = min_impurity_decrease
        self.nodes = []

    def fit(self, x, y):
        """
        Grow the tree on the training data.

        Parameters
        ----------
        x : ndarray
            The predictors in the shape (n_samples, n_variables) or
            (n_samples,) for one predictor.
        y : ndarray
            The response in the shape (n_samples,).

        Returns
        -------
        self

        """
        x = _as_2d(x)
        y = np.asarray(y, dtype='float')
        self.n_samples_ = len(y)
        self.nodes = []
        self._grow(x, y, 0)
        return self

    def _grow(self, x, y, depth):
        node_id = len(self.nodes)
        node = {'value': y.mean(), 'n_samples': len(y),
                'rss': ((y - y.mean())**2).sum(), 'depth': depth,
                'feature': None, 'threshold': None, 'left': None,
                'right': None}
        self.nodes.append(node)

        if ((self.max_depth is not None and depth >= self.max_depth) or
                len(y) < self.min_samples_split or
                node['rss'] <= _rounding_rss(y)):
            return node_id

        feature, threshold, split_rss = best_split(x, y,
                                                   self.min_samples_leaf)
        if feature is None or ((node['rss'] - split_rss) / self.n_samples_ <
                               self.min_impurity_decrease):
            return node_id

        mask = x[:, feature] <= threshold
        node['feature'] = feature
        node['threshold'] = threshold
        node['left'] = self._grow(x[mask], y[mask], depth+1)
        node['right'] = self._grow(x[~mask], y[~mask], depth+1)

        return node_id

    def predict(self, x):
        """Predict the leaf means for the samples in x."""
        return np.array([self.nodes[curr_id]['value']
                         for curr_id in self.apply(x)])

    def _leaf_text(self, node, decimals):
        return 'value: {} (n={})'.format(round(node['value'], decimals),
                                         node['n_samples'])

    def _collapse(self, node_id):
        self.nodes[node_id].update({'feature': None, 'threshold': None,
                                    'left': None, 'right': None})

    def _weakest_link(self):
        """
        Find the internal node whose subtree contributes least per leaf.

        For every internal node t, g(t) = (R(t) - R(T_t)) / (|T_t| - 1) with
        R being the RSS divided by the number of training samples and |T_t|
        the number of leaves in the subtree of t.

        Returns
        -------
        tuple or None
            (node_id, g) of the weakest link, None for a tree without splits.

        """
        weakest = None
        for curr_id in self._subtree_nodes():
            if self.nodes[curr_id]['left'] is None:
                continue
            leaves = self._subtree_leaves(curr_id)
            subtree_rss = sum(self.nodes[curr_leaf]['rss']
                              for curr_leaf in leaves)
            curr_g = ((self.nodes[curr_id]['rss'] - subtree_rss) /
                      self.n_samples_ / (len(leaves) - 1))
            if weakest is None or curr_g < weakest[1]:
                weakest = (curr_id, curr_g)

        return weakest

    def cost_complexity_path(self):
        """
        The sequence of subtrees obtained by weakest link pruning.

        Returns
        -------
        DataFrame
            One row per subtree with the columns 'alpha' (the complexity
            parameter at which the subtree becomes optimal), 'n_leaves' and
            'impurity' (total leaf RSS divided by the number of samples).

        """
        tree = copy.deepcopy(self)
        path = [{'alpha': 0.0, 'n_leaves': tree.n_leaves,
                 'impurity': tree._total_impurity()}]
        weakest = tree._weakest_link()
        while weakest is not None:
            tree._collapse(weakest[0])
            path.append({'alpha': max(weakest[1], path[-1]['alpha']),
                         'n_leaves': tree.n_leaves,
                         'impurity': tree._total_impurity()})
            weakest = tree._weakest_link()

        return pd.DataFrame(path)

    def _total_impurity(self):
        return sum(self.nodes[curr_leaf]['rss']
                   for curr_leaf in self._subtree_leaves()) / self.n_samples_

    def prune(self, alpha):
        """
        Minimal cost-complexity pruning.

        Weakest links are collapsed as long as their g value is smaller or
        equal to alpha.

        Parameters
        ----------
        alpha : float
            The complexity parameter, in the same units like the ccp_alpha of
            scikit-learn trees.

        Returns
        -------
        regression_tree
            A pruned copy, the tree itself is not changed.

        """
        tree = copy.deepcopy(self)
        weakest = tree._weakest_link()
        while weakest is not None and weakest[1] <= alpha:
            tree._collapse(weakest[0])
            weakest = tree._weakest_link()

        return tree


class model_tree(_tree_base):
    """Tree with linear regression models in the leaves."""

    def __init__(self, max_depth=3, min_samples_leaf=None, n_thresholds=20):
        """
        Store the growing parameters.

        Parameters
        ----------
        max_depth : int, optional
            The maximum depth of the tree. The default is 3.
        min_samples_leaf : int or None, optional
            Minimum number of observations in each leaf. Must be larger than
            the number of predictors plus one so that the leaf models can be
            estimated. The default is None, meaning 2*(n_variables+1) or 5,
            whichever is larger.
        n_thresholds : int, optional
            If a predictor has more distinct values, only this number of
            quantiles is tried as thresholds. The default is 20.

        Returns
        -------
        None.

        """
        self.max_depth = max_depth
        self.min_samples_leaf = min_samples_leaf
        self.n_thresholds = n_thresholds
        self.nodes = []

    def fit(self, x, y):
        """
        Grow the tree by minimizing the summed RSS of the leaf models.

        Parameters
        ----------
        x : ndarray
            The predictors in the shape (n_samples, n_variables) or
            (n_samples,) for one predictor.
        y : ndarray
            The response in the shape (n_samples,).

        Returns
        -------
        self

        """
        x = _as_2d(x)
        y = np.asarray(y, dtype='float')
        n_variables = x.shape[1]

        if self.min_samples_leaf is None:
            self.min_leaf_ = max(2*(n_variables+1), 5)
        elif self.min_samples_leaf < n_variables + 2:
            self.min_leaf_ = n_variables + 2
            warnings.warn('min_samples_leaf={} is too small for linear leaf '
                          'models with {} predictors, {} is used '
                          'instead.'.format(self.min_samples_leaf,
                                            n_variables, self.min_leaf_))
        else:
            self.min_leaf_ = self.min_samples_leaf

        self.nodes = []
        self._grow(x, y, 0)
        return self

    def _candidate_thresholds(self, values):
        unique_values = np.unique(values)
        midpoints = (unique_values[:-1] + unique_values[1:]) / 2
        if len(midpoints) <= self.n_thresholds:
            return midpoints
        return np.unique(np.quantile(
            values, np.linspace(0, 1, self.n_thresholds+2)[1:-1]))

    def _grow(self, x, y, depth):
        coefs, rss = leaf_regression(x, y)
        node_id = len(self.nodes)
        node = {'coefs': coefs, 'n_samples': len(y), 'rss': rss,
                'depth': depth, 'feature': None, 'threshold': None,
                'left': None, 'right': None}
        self.nodes.append(node)

        if depth >= self.max_depth or len(y) < 2*self.min_leaf_:
            return node_id

        best = (None, None, rss)
        for feature in range(x.shape[1]):
            for curr_threshold in self._candidate_thresholds(x[:, feature]):
                mask = x[:, feature] <= curr_threshold
                n_left = mask.sum()
                if (n_left < self.min_leaf_ or
                        len(y) - n_left < self.min_leaf_):
                    continue
                curr_rss = (leaf_regression(x[mask], y[mask])[1] +
                            leaf_regression(x[~mask], y[~mask])[1])
                if curr_rss < best[2]:
                    best = (feature, curr_threshold, curr_rss)

        if best[0] is None:
            return node_id

        mask = x[:, best[0]] <= best[1]
        node['feature'] = best[0]
        node['threshold'] = best[1]
        node['left'] = self._grow(x[mask], y[mask], depth+1)
        node['right'] = self._grow(x[~mask], y[~mask], depth+1)

        return node_id

    def predict(self, x):
        """Predict with the linear model of the leaf of each sample."""
        x = _as_2d(x)
        leaf_ids = self.apply(x)
        return np.array([
            self.nodes[curr_id]['coefs'][0] +
            curr_sample.dot(self.nodes[curr_id]['coefs'][1:])
            for curr_id, curr_sample in zip(leaf_ids, x)])

    def _leaf_text(self, node, decimals):
        return 'model: {} (n={})'.format(
            np.round(node['coefs'], decimals).tolist(), node['n_samples'])


def leaf_regression(x, y):
    """Least squares fit with intercept, returns (coefs, rss)."""
    design = np.column_stack([np.ones(len(y)), x])
    coefs = np.linalg.lstsq(design, y, rcond=None)[0]
    rss = ((y - design.dot(coefs))**2).sum()
    return coefs, rss


def cost_complexity_cv(x, y, cv=10, random_state=None):
    """
    Select the complexity parameter of a scikit-learn tree by k-fold CV.

    Parameters
    ----------
    x : ndarray or DataFrame
        The predictors in the shape (n_samples, n_variables).
    y : ndarray or Series
        The response in the shape (n_samples,).
    cv : int, optional
        The number of folds. The default is 10.
    random_state : None or int, optional
        Seed for the tree and the fold assignment. The default is None.

    Returns
    -------
    table : DataFrame
        One row per alpha of the pruning path with the columns 'alpha',
        'n_leaves', 'cv_mse' and 'cv_mse_se'.
    best_alpha : float
        The alpha with the smallest cross-validated MSE.

    """
    x = _as_2d(x)
    y = np.asarray(y, dtype='float')
    path = DecisionTreeRegressor(
        random_state=random_state).cost_complexity_pruning_path(x, y)
    # Rounding errors can give tiny negative values
    alphas = np.unique(np.clip(path.ccp_alphas, 0, None))
    folds = KFold(n_splits=cv, shuffle=True, random_state=random_state)

    rows = []
    for curr_alpha in alphas:
        curr_tree = DecisionTreeRegressor(ccp_alpha=curr_alpha,
                                          random_state=random_state)
        fold_mse = -cross_val_score(curr_tree, x, y, cv=folds,
                                    scoring='neg_mean_squared_error')
        rows.append({'alpha': curr_alpha,
                     'n_leaves': curr_tree.fit(x, y).get_n_leaves(),
                     'cv_mse': fold_mse.mean(),
                     'cv_mse_se': fold_mse.std(ddof=1) / np.sqrt(cv)})
    table = pd.DataFrame(rows)
    best_alpha = table.at[table['cv_mse'].idxmin(), 'alpha']

    return table, best_alpha


class tree_ensemble():
    """Bagged regression trees and random forests."""

    def __init__(self, x, y, method='random_forest', n_estimators=500,
                 max_features=None, random_state=None, x_names=None,
                 **kwargs):
        """
        Store input data and ensemble settings.

        Parameters
        ----------
        x : ndarray or DataFrame
            The predictors in the shape (n_samples, n_variables).
        y : ndarray or Series
            The response in the shape (n_samples,).
        method : str, optional
            'bagging' (all predictors are candidates at every split) or
            'random_forest' (a random subset of max_features predictors is
            drawn at every split). The default is 'random_forest'.
        n_estimators : int, optional
            The number of trees. The default is 500.
        max_features : int or None, optional
            Only used for 'random_forest'. The default is None, meaning
            max(1, n_variables // 3).
        random_state : None or int, optional
            Seed for bootstrap samples and feature subsets. The default is
            None.
        x_names : list of str or None, optional
            Variable names. The default is None, resulting in 'factor_1',
            'factor_2' etc.
        **kwargs :
            Passed to the scikit-learn ensemble, e.g. min_samples_leaf.

        Returns
        -------
        None.

        """
        self.methods = ['bagging', 'random_forest']
        if method not in self.methods:
            raise ValueError('No valid method given, allowed values are '
                             '{}.'.format(self.methods))
        self.method = method

        if isinstance(x, pd.DataFrame):
            x_names = x.columns.to_list()
        self.x = _as_2d(x)
        self.y = np.asarray(y, dtype='float')
        if x_names is None:
            x_names = ['factor_{}'.format(ii)
                       for ii in range(1, self.x.shape[1]+1)]
        self.x_names = list(x_names)

        self.n_estimators = n_estimators
        if max_features is None:
            max_features = max(1, self.x.shape[1] // 3)
        self.max_features = max_features
        self.random_state = random_state
        self.kwargs = kwargs
        self.model = None

    def _estimator(self, n_estimators):
        if self.method == self.methods[0]:  # bagging
            return BaggingRegressor(
                estimator=DecisionTreeRegressor(**self.kwargs),
                n_estimators=n_estimators, oob_score=True,
                random_state=self.random_state)
        return RandomForestRegressor(
            n_estimators=n_estimators, max_features=self.max_features,
            oob_score=True, random_state=self.random_state, **self.kwargs)

    def fit(self):
        """Fit the ensemble on the stored data, returns self."""
        self.model = self._estimator(self.n_estimators).fit(self.x, self.y)
        return self

    @property
    def oob_mse(self):
        """Mean squared out-of-bag prediction error."""
        return mean_squared_error(self.y, self.model.oob_prediction_)

    def feature_importance(self):
        """
        Impurity-based importance of the predictors.

        Returns
        -------
        Series
            The mean decrease of the RSS due to splits on each predictor,
            normalized to sum one and sorted in descending order.

        """
        if self.method == self.methods[0]:  # bagging
            # Every tree sees the features in the order of its
            # estimators_features_ entry
            importance = np.zeros(self.x.shape[1])
            for curr_tree, curr_features in zip(
                    self.model.estimators_, self.model.estimators_features_):
                importance[curr_features] += curr_tree.feature_importances_
            importance /= len(self.model.estimators_)
        else:
            importance = self.model.feature_importances_

        return pd.Series(importance, index=self.x_names,
                         name='importance').sort_values(ascending=False)

    def permutation_importance(self, n_repeats=10, random_state=None):
        """
        Increase of the MSE if the values of one predictor are permuted.

        Returns
        -------
        DataFrame
            Index are the predictors, columns are 'mse_increase' and 'std'.

        """
        result = permutation_importance(
            self.model, self.x, self.y, scoring='neg_mean_squared_error',
            n_repeats=n_repeats, random_state=random_state)
        return pd.DataFrame({'mse_increase': result.importances_mean,
                             'std': result.importances_std},
                            index=self.x_names).sort_values(
                                'mse_increase', ascending=False)

    def oob_error_curve(self, n_trees):
        """
        Out-of-bag MSE for different numbers of trees.

        Parameters
        ----------
        n_trees : list of int
            The ensemble sizes. Very small ensembles leave samples without
            out-of-bag prediction.

        Returns
        -------
        Series
            The out-of-bag MSE indexed by the number of trees.

        """
        errors = []
        for curr_n in n_trees:
            curr_model = self._estimator(curr_n).fit(self.x, self.y)
            errors.append(mean_squared_error(self.y,
                                             curr_model.oob_prediction_))

        return pd.Series(errors, index=pd.Index(n_trees, name='n_trees'),
                         name='oob_mse')

    def predict(self, samples):
        return self.model.predict(_as_2d(samples))


def _as_2d(x):
    x = np.asarray(x, dtype='float')
    if x.ndim == 1:
        x = x[:, np.newaxis]
    return x


def _rounding_rss(y):
    # RSS that can result from rounding errors alone for a constant response
    return len(y) * (len(y) * np.finfo(float).eps * np.abs(y).max())**2
