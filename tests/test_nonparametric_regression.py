# -*- coding: utf-8 -*-

import numpy as np
import unittest
import matplotlib
matplotlib.use('Agg')
from sklearn.neighbors import KNeighborsRegressor

from pyAppliedRegression.data_simulation import simulate_curve_data
from pyAppliedRegression.nonparametric_regression import (
    knn_predict, tuned_regressor)


class TestNonparametricRegression(unittest.TestCase):

    def setUp(self):
        self.x, self.y = simulate_curve_data(
            lambda x: np.sin(2*np.pi*x), n_samples=80, noise_sd=0.2,
            random_state=11)

    def test_knn_predict(self):
        rng = np.random.default_rng(1)
        x_train = rng.uniform(size=(50, 3))
        y_train = rng.normal(size=50)
        x_new = rng.uniform(size=(10, 3))

        manual = knn_predict(x_train, y_train, x_new, n_neighbors=5)
        library = KNeighborsRegressor(n_neighbors=5).fit(
            x_train, y_train).predict(x_new)
        self.assertTrue(np.allclose(manual, library))

        # one neighbor reproduces the training data
        self.assertTrue(np.allclose(
            knn_predict(self.x, self.y, self.x, n_neighbors=1), self.y))
        # all neighbors give the mean
        self.assertTrue(np.allclose(
            knn_predict(self.x, self.y, [0.2, 0.7], n_neighbors=80),
            self.y.mean()))

        self.assertRaises(ValueError, knn_predict, self.x, self.y, self.x,
                          n_neighbors=0)

    def test_knn_tuning(self):
        knn = tuned_regressor(self.x, self.y, method='knn')
        cv_results = knn.tune(cv=5, random_state=0)
        self.assertEqual(len(cv_results), 30)
        self.assertIn(knn.best_params['knn__n_neighbors'], range(1, 31))
        self.assertAlmostEqual(
            cv_results['mse'].min(),
            cv_results.loc[cv_results['knn__n_neighbors'] ==
                           knn.best_params['knn__n_neighbors'],
                           'mse'].iloc[0])
        self.assertEqual(knn.predict(np.linspace(0, 1, 7)).shape, (7,))

        plots = knn.generate_plots(['cv_curve', 'fit'])
        self.assertEqual(len(plots), 2)

    def test_svr_tuning(self):
        svr = tuned_regressor(self.x, self.y, method='svr')
        svr.tune(param_grid={'svr__C': [1, 10], 'svr__epsilon': [0.1],
                             'svr__gamma': ['scale', 1]},
                 cv=5, random_state=0)
        self.assertEqual(len(svr.cv_results), 4)
        residuals = self.y - svr.predict(self.x)
        self.assertLess(np.mean(residuals**2), np.var(self.y))

        plots = svr.generate_plots(['cv_curve'])
        self.assertEqual(len(plots), 1)

        self.assertRaises(ValueError, tuned_regressor, self.x, self.y,
                          method='gp')
        self.assertRaises(ValueError, tuned_regressor, self.x, self.y[:5])
