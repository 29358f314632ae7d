# -*- coding: utf-8 -*-

import numpy as np
import unittest
import matplotlib
matplotlib.use('Agg')

from pyAppliedRegression.data_simulation import simulate_linear_data
from pyAppliedRegression.linear_models import linear_model
from pyAppliedRegression.model_diagnostics import (
    percentiles, theo_residual_percentiles, influence_table,
    variance_inflation_factors, residual_normality, diagnostic_plots)


class TestModelDiagnostics(unittest.TestCase):

    def setUp(self):
        self.data = simulate_linear_data(n_samples=50, random_state=4)
        self.model = linear_model(self.data, response_name='ys')

    def test_percentiles(self):
        self.assertTrue(np.allclose(percentiles([3, 1, 2, 4]),
                                    [62.5, 12.5, 37.5, 87.5]))
        theo = theo_residual_percentiles(np.arange(11))
        self.assertAlmostEqual(theo[5], 0)
        self.assertAlmostEqual(theo[0], -theo[10])

    def test_influence(self):
        table = influence_table(self.model.fit_result)
        self.assertListEqual(table.columns.to_list(), [
            'residual', 'leverage', 'studentized', 'cooks_distance'])
        self.assertEqual(len(table), 50)
        # the leverages sum up to the number of coefficients
        self.assertAlmostEqual(table['leverage'].sum(), 4)
        self.assertTrue((table['cooks_distance'] >= 0).all())

        # an outlier with high leverage dominates Cook's distance
        outlier_data = self.data.copy()
        outlier_data.loc[0, ['x1s', 'ys']] = [30, -200]
        outlier_table = influence_table(
            linear_model(outlier_data, response_name='ys').fit_result)
        self.assertEqual(outlier_table['cooks_distance'].idxmax(), 0)

    def test_vif(self):
        collinear = self.data.copy()
        collinear['x4s'] = (collinear['x1s'] +
                            np.random.default_rng(0).normal(0, 0.1, 50))
        vifs = variance_inflation_factors(collinear,
                                          ['x1s', 'x2s', 'x3s', 'x4s'])
        self.assertGreater(vifs['x1s'], 10)
        self.assertGreater(vifs['x4s'], 10)
        self.assertLess(vifs['x2s'], 2)

    def test_normality_and_plots(self):
        statistic, p_value = residual_normality(self.model.fit_result.resid)
        self.assertTrue(0 < statistic <= 1)
        self.assertTrue(0 <= p_value <= 1)

        fig = diagnostic_plots(self.model.fit_result)
        self.assertEqual(len(fig.axes), 4)

        # both axes of the QQ plot are ranked by the same residuals
        qq_points = fig.axes[1].collections[0].get_offsets()
        order = np.argsort(qq_points[:, 0])
        self.assertTrue((np.diff(qq_points[order, 1]) >= 0).all())
