# -*- coding: utf-8 -*-

import numpy as np
import unittest
import matplotlib
matplotlib.use('Agg')
from sklearn.cross_decomposition import PLSRegression
from sklearn.linear_model import LinearRegression

from pyAppliedRegression.principal_component_regression import (
    principal_component_regression)
from pyAppliedRegression.partial_least_squares_regression import (
    pls_regression, pls_directions)


class TestDimensionReduction(unittest.TestCase):

    def setUp(self):
        rng = np.random.default_rng(42)
        latent = rng.normal(size=(60, 2))
        mixing = rng.normal(size=(2, 5))
        self.x = latent.dot(mixing) + 0.3*rng.normal(size=(60, 5))
        self.y = (self.x.dot([1, -2, 0.5, 0, 1.5]) +
                  rng.normal(0, 0.5, size=60))

    def test_pcr(self):
        pcr = principal_component_regression(
            self.x, self.y, x_names=['a', 'b', 'c', 'd', 'e'])
        explained = pcr.perform_pca()
        self.assertAlmostEqual(explained['cum'].iloc[-1], 1, 8)
        self.assertTrue((np.diff(explained['each']) <= 0).all())

        results = pcr.pcr_sweep()
        self.assertListEqual(results.columns.to_list(), [1, 2, 3, 4, 5])
        r2_c = results.loc[('r2', 'c')].astype(float).to_numpy()
        self.assertTrue((np.diff(r2_c) >= -1e-10).all())

        # with all components, PCR is ordinary least squares
        ols = LinearRegression().fit(pcr.x, self.y)
        self.assertTrue(np.allclose(pcr.coefficients(5), ols.coef_))
        self.assertListEqual(pcr.coefficients(2).index.to_list(),
                             ['a', 'b', 'c', 'd', 'e'])

        self.assertTrue(np.allclose(pcr.predict(self.x, 3),
                                    results.at[('y', 'c'), 3]))

        plots = pcr.generate_plots(['scree', 'r2_vs_comp', 'mse_vs_comp'])
        self.assertEqual(len(plots), 3)

        self.assertRaises(ValueError, pcr.pcr_fit, 6)
        self.assertRaises(ValueError, principal_component_regression,
                          self.x, self.y[:10])

    def test_pls_directions(self):
        manual = pls_directions(self.x, self.y, 2)
        manual_pred = manual['intercept'] + (
            self.x - self.x.mean(axis=0)).dot(manual['coefs'])
        library_pred = PLSRegression(n_components=2, scale=False).fit(
            self.x, self.y).predict(self.x).ravel()
        self.assertTrue(np.allclose(manual_pred, library_pred))

        # the first direction is proportional to the covariances with y
        first = self.x.T.dot(self.y - self.y.mean())
        self.assertTrue(np.allclose(manual['weights'][:, 0],
                                    first / np.linalg.norm(first)))

        # scores are orthogonal
        score_products = manual['scores'].T.dot(manual['scores'])
        self.assertAlmostEqual(score_products[0, 1], 0, 6)

        # with all directions, PLS is ordinary least squares
        full = pls_directions(self.x, self.y, 5)
        ols = LinearRegression().fit(self.x, self.y)
        self.assertTrue(np.allclose(full['coefs'], ols.coef_))

        # two identical columns only give one direction
        collinear = np.column_stack([self.x[:, 0], self.x[:, 0]])
        self.assertEqual(pls_directions(collinear, self.y, 1)['coefs'].shape,
                         (2,))
        self.assertRaises(ValueError, pls_directions, collinear, self.y, 2)
        self.assertRaises(ValueError, pls_directions, self.x,
                          np.ones(60), 1)

    def test_pls_regression(self):
        plsr = pls_regression(self.x, self.y)
        results = plsr.plsr_sweep(max_components=3)
        self.assertListEqual(results.columns.to_list(), [1, 2, 3])

        manual = pls_directions(self.x, self.y, 2)
        self.assertTrue(np.allclose(
            plsr.predict(self.x, 2),
            manual['intercept'] + (self.x - self.x.mean(axis=0)).dot(
                manual['coefs'])))
        self.assertTrue(np.allclose(np.abs(plsr.x_weights(2)),
                                    np.abs(manual['weights'])))

        self.assertLess(results.at[('mse', 'c'), 3],
                        results.at[('mse', 'c'), 1])

        plots = plsr.generate_plots(['actual_vs_pred', 'r2_vs_comp'],
                                    n_components=2, cv=True)
        self.assertEqual(len(plots), 2)
