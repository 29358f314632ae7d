# -*- coding: utf-8 -*-

import numpy as np
import unittest
import matplotlib
matplotlib.use('Agg')

from pyAppliedRegression.data_simulation import simulate_linear_data
from pyAppliedRegression.linear_models import normal_equations_fit
from pyAppliedRegression.variable_selection import (
    stepwise_selection, best_subset_selection, penalized_regression,
    model_criterion)


class TestVariableSelection(unittest.TestCase):

    def setUp(self):
        self.data = simulate_linear_data(
            n_samples=100, coefs=(1, 2, 3, 0, 0), noise_sd=2, random_state=0)
        self.predictors = ['x1s', 'x2s', 'x3s', 'x4s']

    def test_stepwise(self):
        for direction in ['forward', 'backward', 'both']:
            final_model, history = stepwise_selection(
                self.data, 'ys', direction=direction)
            self.assertIn('x1s', final_model.params.index)
            self.assertIn('x2s', final_model.params.index)
            self.assertEqual(history.at[0, 'action'], 'start')
            # every accepted move improves the criterion
            self.assertTrue((np.diff(history['criterion']) < 0).all())
            self.assertAlmostEqual(history['criterion'].iloc[-1],
                                   final_model.aic, 8)

        _, history = stepwise_selection(self.data, 'ys',
                                        direction='forward')
        self.assertEqual(history.at[0, 'formula'], 'ys ~ 1')
        self.assertTrue((history['action'].iloc[1:] == 'add').all())

        self.assertRaises(ValueError, stepwise_selection, self.data, 'ys',
                          direction='sideways')
        self.assertRaises(ValueError, model_criterion, final_model, 'cp')

    def test_stepwise_hierarchy(self):
        final_model, history = stepwise_selection(
            self.data, 'ys', candidates=['x1s', 'x2s', 'x3s'],
            direction='both', model_type='2fi', criterion='bic')
        terms = final_model.params.index.to_list()
        for curr_term in terms:
            if ':' in curr_term:
                for curr_main in curr_term.split(':'):
                    self.assertIn(curr_main, terms)

        _, start_history = stepwise_selection(
            self.data, 'ys', direction='backward', start=['x1s', 'x2s'])
        self.assertEqual(start_history.at[0, 'formula'], 'ys ~ x1s + x2s')

    def test_best_subset(self):
        subsets, best_predictors = best_subset_selection(self.data, 'ys')
        self.assertListEqual(subsets.index.to_list(), [0, 1, 2, 3, 4])
        self.assertTrue((np.diff(subsets['rss'].astype(float)) <= 0).all())
        self.assertListEqual(subsets.at[0, 'predictors'], [])
        self.assertTrue({'x1s', 'x2s'}.issubset(best_predictors))

        subsets_2, _ = best_subset_selection(self.data, 'ys', max_size=2)
        self.assertEqual(len(subsets_2), 3)
        self.assertEqual(set(subsets_2.at[2, 'predictors']), {'x1s', 'x2s'})

        self.assertRaises(ValueError, best_subset_selection,
                          self.data[['x1s', 'x2s', 'x3s', 'ys']], 'ys',
                          max_size=5)

    def test_lasso(self):
        lasso = penalized_regression(self.data[self.predictors],
                                     self.data['ys'], penalty='lasso')
        path = lasso.fit_path(n_alphas=30)
        self.assertEqual(path.shape, (30, 4))
        # the largest default alpha sets all coefficients to zero
        self.assertTrue(np.allclose(path.iloc[0], 0))
        self.assertFalse(np.allclose(path.iloc[-1], 0))

        cv_curve = lasso.cross_validate(n_alphas=20, cv=5, random_state=0)
        self.assertListEqual(cv_curve.columns.to_list(), ['mse', 'mse_se'])
        self.assertGreaterEqual(lasso.alpha_1se, lasso.alpha_min)

        coefs = lasso.coefficients(rule='1se')
        self.assertListEqual(coefs.index.to_list(),
                             ['Intercept'] + self.predictors)
        self.assertEqual(lasso.predict(
            self.data[self.predictors].iloc[:3]).shape, (3,))

        plots = lasso.generate_plots(['coef_path', 'cv_curve'])
        self.assertEqual(len(plots), 2)

        self.assertRaises(ValueError, lasso.coefficients, rule='max')
        self.assertRaises(ValueError, penalized_regression,
                          self.data[self.predictors], self.data['ys'],
                          penalty='l0')
        self.assertRaises(ValueError, penalized_regression,
                          self.data[self.predictors], self.data['ys'],
                          penalty='elastic_net', l1_ratio=0)

    def test_ridge_back_transform(self):
        ridge = penalized_regression(self.data[self.predictors],
                                     self.data['ys'], penalty='ridge')
        self.assertRaises(ValueError, ridge.coefficients)
        ridge.cross_validate(alphas=[1e-8, 1e-7], cv=5, random_state=0)

        # a negligible penalty gives the least squares coefficients
        ols_coefs, _ = normal_equations_fit(
            self.data[self.predictors].to_numpy(), self.data['ys'].to_numpy())
        self.assertTrue(np.allclose(ridge.coefficients().to_numpy(),
                                    ols_coefs, atol=1e-5))
        self.assertTrue(np.allclose(
            ridge.coefficients(original_scale=False).iloc[1:],
            ols_coefs[1:] * ridge.scaler.scale_, atol=1e-5))
