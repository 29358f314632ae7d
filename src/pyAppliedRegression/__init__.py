# -*- coding: utf-8 -*-
from . import data_simulation
from .linear_models import (linear_model, compare_models, partial_f_test,
                            partial_f_statistic, simulate_f_null)
from .model_tools import model_tools
from .model_diagnostics import (theo_residual_percentiles, percentiles,
                                influence_table, variance_inflation_factors)
from .variable_selection import (stepwise_selection, best_subset_selection,
                                 penalized_regression)
from .principal_component_regression import principal_component_regression
from .partial_least_squares_regression import pls_regression, pls_directions
from . import cross_validation
from .nonlinear_regression import nonlinear_regression
from .nonparametric_regression import knn_predict, tuned_regressor
from .regression_trees import (regression_tree, model_tree, tree_ensemble,
                               cost_complexity_cv)
