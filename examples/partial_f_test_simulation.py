# -*- coding: utf-8 -*-

import matplotlib.pyplot as plt

from pyAppliedRegression import (
    data_simulation, linear_model, compare_models, partial_f_test,
    simulate_f_null)
from pyAppliedRegression.linear_models import plot_f_null

# This example simulates 30 observations of three predictors where only x1s
# and x2s have an effect on the response. The model with x1s only is compared
# to the model containing all three predictors by a partial F-test. Then, the
# null distribution of the F statistic is simulated by drawing new responses
# from the reduced model and is compared to the F(2, 26) density.

data = data_simulation.simulate_linear_data(
    n_samples=30, coefs=[1, 2, 3, 0], noise_sd=10, random_state=1262020)

mod1 = linear_model(data, formula='ys ~ x1s')
mod2 = linear_model(data, response_name='ys')

print(compare_models(mod1, mod2))
f_stat, p_value = partial_f_test(mod1, mod2)
print('F = {:.3f}, p = {:.4f}'.format(f_stat, p_value))

f_stats = simulate_f_null(data, ['x1s'], ['x1s', 'x2s', 'x3s'], [1, 2],
                          noise_sd=10, n_sim=1000, random_state=1262020,
                          progress=True)

fig = plot_f_null(f_stats, 2, mod2.df_resid)
fig.axes[0].set_title('Null distribution of the partial F statistic')
plt.show()
