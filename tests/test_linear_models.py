# -*- coding: utf-8 -*-

import numpy as np
import unittest
import matplotlib
matplotlib.use('Agg')

from pyAppliedRegression.data_simulation import simulate_linear_data
from pyAppliedRegression.linear_models import (
    linear_model, compare_models, partial_f_test, partial_f_statistic,
    simulate_f_null, plot_f_null, normal_equations_fit, hat_matrix)


class TestLinearModels(unittest.TestCase):

    def setUp(self):
        self.data = simulate_linear_data(random_state=1262020)
        self.reduced = linear_model(self.data, formula='ys ~ x1s')
        self.full = linear_model(self.data, response_name='ys')

    def test_fit(self):
        self.assertEqual(self.full.formula, 'ys ~ x1s + x2s + x3s')
        self.assertEqual(self.full.n_samples, 30)
        self.assertEqual(self.full.df_resid, 26)
        self.assertAlmostEqual(self.full.rss,
                               self.full.df_resid * self.full.sigma**2, 8)

        table = self.full.coefficient_table()
        self.assertListEqual(table.columns.to_list(),
                             ['estimate', 'std_error', 't_value', 'p_value'])
        self.assertListEqual(table.index.to_list(),
                             ['Intercept', 'x1s', 'x2s', 'x3s'])

        # the normal equations give the same coefficients
        coefs, y_fit = normal_equations_fit(
            self.data[['x1s', 'x2s', 'x3s']].to_numpy(),
            self.data['ys'].to_numpy())
        for curr_coef, curr_control in zip(coefs, self.full.params):
            self.assertAlmostEqual(curr_coef, curr_control, 8)
        self.assertTrue(np.allclose(y_fit, self.full.fit_result.fittedvalues))

    def test_intervals(self):
        conf_int = self.full.conf_int()
        self.assertTrue((conf_int['lower'] < self.full.params).all())
        self.assertTrue((conf_int['upper'] > self.full.params).all())
        self.assertTrue(((conf_int['upper'] - conf_int['lower']) >
                         (self.full.conf_int(alpha=0.2)['upper'] -
                          self.full.conf_int(alpha=0.2)['lower'])).all())

        new_data = self.data.iloc[:5]
        confidence = self.full.predict(new_data, interval='confidence')
        prediction = self.full.predict(new_data, interval='prediction')
        self.assertTrue(np.allclose(
            confidence['fit'], self.full.fit_result.fittedvalues.iloc[:5]))
        self.assertTrue(((prediction['upper'] - prediction['lower']) >
                         (confidence['upper'] - confidence['lower'])).all())
        self.assertListEqual(self.full.predict(new_data).columns.to_list(),
                             ['fit'])
        self.assertRaises(ValueError, self.full.predict, new_data,
                          interval='tolerance')

    def test_f_tests(self):
        anova = compare_models(self.reduced, self.full)
        f_stat, p_value = partial_f_test(self.reduced, self.full)
        self.assertAlmostEqual(anova['F'].iloc[1], f_stat, 8)
        self.assertAlmostEqual(anova['Pr(>F)'].iloc[1], p_value, 8)

        manual = partial_f_statistic(self.reduced.sigma, 28,
                                     self.full.sigma, 26)
        self.assertAlmostEqual(manual, f_stat, 8)

        self.assertRaises(ValueError, compare_models, self.full, self.reduced)
        self.assertRaises(ValueError, partial_f_test, self.full, self.reduced)

        null_model = linear_model(self.data, response_name='ys',
                                  predictors=[])
        self.assertEqual(null_model.formula, 'ys ~ 1')
        overall_f, overall_p = self.full.overall_f_test()
        self.assertAlmostEqual(
            compare_models(null_model, self.full)['F'].iloc[1], overall_f, 8)

        anova_table = self.full.anova_table()
        self.assertListEqual(anova_table.index.to_list(),
                             ['x1s', 'x2s', 'x3s', 'Residual'])

    def test_f_null_simulation(self):
        f_stats = simulate_f_null(self.data, ['x1s'], ['x1s', 'x2s', 'x3s'],
                                  [1, 2], 10, n_sim=300, random_state=0)
        self.assertEqual(len(f_stats), 300)
        self.assertTrue((f_stats >= 0).all())
        # mean of F(2, 26) is 26/24
        self.assertLess(abs(f_stats.mean() - 26/24), 0.35)

        fig = plot_f_null(f_stats, 2, 26)
        self.assertEqual(len(fig.axes[0].lines), 2)

        self.assertRaises(ValueError, simulate_f_null, self.data, ['x2s'],
                          ['x1s', 'x3s'], [1, 2], 10, n_sim=2)

    def test_hat_matrix(self):
        x = self.data[['x1s', 'x2s']].to_numpy()
        hat = hat_matrix(x)
        self.assertAlmostEqual(np.trace(hat), 3, 8)
        self.assertTrue(np.allclose(hat.dot(hat), hat))
