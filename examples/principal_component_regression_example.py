# -*- coding: utf-8 -*-

import numpy as np
import matplotlib.pyplot as plt

from pyAppliedRegression import (
    principal_component_regression, pls_regression, penalized_regression)

# Twenty strongly correlated predictors are generated from three latent
# factors. The response only depends on the latent factors, so regressions on
# a few directions (PCR and PLS) or with a penalty (ridge) should perform
# better than ordinary least squares with 20 predictors and 40 observations.
rng = np.random.default_rng(0)
latent = rng.normal(size=(40, 3))
loadings = rng.normal(size=(3, 20))
x = latent.dot(loadings) + rng.normal(0, 0.3, size=(40, 20))
y = latent.dot([3, -2, 1]) + rng.normal(0, 1, 40)

pcr = principal_component_regression(x, y)
pcr.pcr_sweep(max_components=10)
pcr_plots = pcr.generate_plots(['scree', 'mse_vs_comp'])

plsr = pls_regression(x, y, scale_std=True)
plsr.plsr_sweep(max_components=10)
plsr_plots = plsr.generate_plots(['mse_vs_comp'])

ridge = penalized_regression(x, y, penalty='ridge')
ridge.fit_path()
ridge.cross_validate(cv=10, random_state=0)
print('Ridge: alpha_min = {:.3g}, alpha_1se = {:.3g}'.format(
    ridge.alpha_min, ridge.alpha_1se))
ridge_plots = ridge.generate_plots(['coef_path', 'cv_curve'])

plt.show()
