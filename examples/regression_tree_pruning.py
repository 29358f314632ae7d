# -*- coding: utf-8 -*-

import numpy as np
import matplotlib.pyplot as plt

from pyAppliedRegression import (
    regression_tree, cost_complexity_cv, tree_ensemble)

# A step function with noise is fitted by a fully grown regression tree which
# is then pruned back with the cost complexity parameter chosen by
# cross-validation. A random forest is fitted for comparison.
rng = np.random.default_rng(3)
x = rng.uniform(0, 10, size=(150, 2))
y = (np.where(x[:, 0] > 4, 3, 0) + np.where(x[:, 1] > 7, 2, 0) +
     rng.normal(0, 0.7, 150))

tree = regression_tree(min_samples_leaf=3).fit(x, y)
print('Full tree with {} leaves'.format(tree.n_leaves))

cv_table, best_alpha = cost_complexity_cv(x, y, cv=10, random_state=0)
pruned = tree.prune(best_alpha)
print('Pruned tree with {} leaves:'.format(pruned.n_leaves))
print(pruned.export_text(feature_names=['x1', 'x2']))

forest = tree_ensemble(x, y, n_estimators=300, random_state=0,
                       x_names=['x1', 'x2']).fit()
print('Random forest OOB MSE: {:.3f}'.format(forest.oob_mse))
print(forest.feature_importance())

fig, ax = plt.subplots()
ax.errorbar(cv_table['n_leaves'], cv_table['cv_mse'],
            yerr=cv_table['cv_mse_se'], marker='o', capsize=3)
ax.set_xlabel('Number of leaves')
ax.set_ylabel('CV MSE')
plt.show()
