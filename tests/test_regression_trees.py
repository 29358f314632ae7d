# -*- coding: utf-8 -*-

import numpy as np
import unittest
from sklearn.tree import DecisionTreeRegressor

from pyAppliedRegression.regression_trees import (
    split_search, best_split, regression_tree, model_tree,
    cost_complexity_cv, tree_ensemble)


class TestRegressionTrees(unittest.TestCase):

    def setUp(self):
        rng = np.random.default_rng(7)
        self.x = rng.uniform(0, 10, size=(80, 3))
        self.y = (np.where(self.x[:, 0] > 5, 4, 0) + 0.5*self.x[:, 1] +
                  rng.normal(0, 0.5, 80))

    def test_split_search(self):
        threshold, rss = split_search([1, 2, 3, 4, 5, 6],
                                      [1, 1, 1, 5, 5, 5])
        self.assertEqual(threshold, 3.5)
        self.assertAlmostEqual(rss, 0)

        # unsorted input and tied x values
        threshold, rss = split_search([2, 1, 2, 1], [1, 0, 1, 0])
        self.assertEqual(threshold, 1.5)

        self.assertEqual(split_search([1, 2, 3, 4, 5, 6],
                                      [1, 1, 1, 5, 5, 5],
                                      min_samples_leaf=4), (None, np.inf))
        self.assertEqual(split_search([1, 1, 1], [1, 2, 3]), (None, np.inf))

        # a large offset of the response does not change the split
        x_values = np.arange(1, 21)
        threshold, rss = split_search(x_values, 1e9 + (x_values > 13))
        self.assertEqual(threshold, 13.5)
        self.assertAlmostEqual(rss, 0)

        feature, threshold, rss = best_split(self.x, self.y)
        self.assertEqual(feature, 0)
        self.assertAlmostEqual(threshold, 5, 0)

    def test_regression_tree(self):
        tree = regression_tree(max_depth=2).fit(self.x, self.y)
        library = DecisionTreeRegressor(max_depth=2, random_state=0).fit(
            self.x, self.y)
        self.assertTrue(np.allclose(tree.predict(self.x),
                                    library.predict(self.x)))
        self.assertEqual(tree.n_leaves, 4)
        self.assertEqual(tree.depth, 2)
        self.assertIn('x_0 <= ', tree.export_text())
        self.assertIn('a <= ', tree.export_text(feature_names=['a', 'b',
                                                               'c']))

        stump = regression_tree(min_samples_split=100).fit(self.x, self.y)
        self.assertEqual(stump.n_leaves, 1)
        self.assertTrue(np.allclose(stump.predict(self.x), self.y.mean()))

        # responses on a very small scale are split as well
        x_values = np.arange(10)
        small = regression_tree().fit(x_values,
                                      np.where(x_values > 4, 1e-5, 0))
        self.assertEqual(small.n_leaves, 2)
        self.assertEqual(small.nodes[0]['threshold'], 4.5)
        offset = regression_tree(max_depth=2).fit(self.x, 1e9 + self.y)
        self.assertTrue(np.allclose(offset.predict(self.x) - 1e9,
                                    tree.predict(self.x)))

        restricted = regression_tree(min_impurity_decrease=1).fit(
            self.x, self.y)
        self.assertLess(restricted.n_leaves,
                        regression_tree().fit(self.x, self.y).n_leaves)

    def test_pruning(self):
        tree = regression_tree(max_depth=3).fit(self.x, self.y)
        path = tree.cost_complexity_path()
        self.assertTrue((np.diff(path['alpha']) >= 0).all())
        self.assertTrue((np.diff(path['impurity']) >= -1e-12).all())
        self.assertEqual(path['n_leaves'].iloc[0], tree.n_leaves)
        self.assertEqual(path['n_leaves'].iloc[-1], 1)

        self.assertEqual(tree.prune(0).n_leaves, tree.n_leaves)
        root_only = tree.prune(1e6)
        self.assertEqual(root_only.n_leaves, 1)
        self.assertTrue(np.allclose(root_only.predict(self.x),
                                    self.y.mean()))
        # pruning works on a copy
        self.assertEqual(tree.n_leaves, path['n_leaves'].iloc[0])

        # same subtrees like the scikit-learn implementation
        alphas = np.unique(path['alpha'].to_numpy())
        for curr_alpha in (alphas[:-1] + alphas[1:]) / 2:
            library = DecisionTreeRegressor(
                max_depth=3, ccp_alpha=curr_alpha, random_state=0).fit(
                    self.x, self.y)
            self.assertEqual(tree.prune(curr_alpha).n_leaves,
                             library.get_n_leaves())

    def test_model_tree(self):
        x = np.linspace(0, 10, 101)
        y = np.where(x <= 5, 2*x, 10 - 3*(x - 5))

        tree = model_tree(max_depth=1, n_thresholds=200).fit(x, y)
        self.assertEqual(tree.n_leaves, 2)
        self.assertTrue(4.9 < tree.nodes[0]['threshold'] < 5.1)
        self.assertTrue(np.allclose(tree.predict(x), y, atol=1e-6))
        self.assertIn('model: ', tree.export_text())

        # a regression tree needs many leaves for the same data
        self.assertGreater(regression_tree(max_depth=3).fit(x, y).n_leaves,
                           tree.n_leaves)

        with self.assertWarns(UserWarning):
            model_tree(min_samples_leaf=1).fit(self.x, self.y)

        coarse = model_tree(max_depth=2, n_thresholds=5).fit(self.x, self.y)
        self.assertLessEqual(coarse.n_leaves, 4)
        self.assertEqual(coarse.predict(self.x[:4]).shape, (4,))

    def test_cost_complexity_cv(self):
        table, best_alpha = cost_complexity_cv(self.x, self.y, cv=5,
                                               random_state=0)
        self.assertListEqual(table.columns.to_list(),
                             ['alpha', 'n_leaves', 'cv_mse', 'cv_mse_se'])
        self.assertIn(best_alpha, table['alpha'].to_list())
        self.assertTrue((np.diff(table['n_leaves']) <= 0).all())

    def test_ensembles(self):
        forest = tree_ensemble(self.x, self.y, n_estimators=100,
                               random_state=0,
                               x_names=['a', 'b', 'c']).fit()
        self.assertEqual(forest.method, 'random_forest')
        self.assertEqual(forest.max_features, 1)
        self.assertGreater(forest.oob_mse, 0)
        importance = forest.feature_importance()
        self.assertAlmostEqual(importance.sum(), 1)
        self.assertEqual(importance.index[0], 'a')
        self.assertEqual(importance.index[-1], 'c')
        self.assertEqual(forest.permutation_importance(
            n_repeats=3, random_state=0).index[0], 'a')

        bagging = tree_ensemble(self.x, self.y, method='bagging',
                                n_estimators=100, random_state=0).fit()
        bag_importance = bagging.feature_importance()
        self.assertAlmostEqual(bag_importance.sum(), 1)
        self.assertEqual(bag_importance.index[0], 'factor_1')
        self.assertEqual(bagging.predict(self.x[:5]).shape, (5,))

        curve = bagging.oob_error_curve([30, 60])
        self.assertListEqual(curve.index.to_list(), [30, 60])
        self.assertTrue((curve > 0).all())

        self.assertRaises(ValueError, tree_ensemble, self.x, self.y,
                          method='boosting')
