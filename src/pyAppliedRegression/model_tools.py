# -*- coding: utf-8 -*-
"""
Created on Fri Nov  5 21:26:39 2021

@author: Alexander Southan
"""

import numpy as np
import pandas as pd
from itertools import combinations


class model_tools:
    def __init__(self, model_type, param_names, param_types=None,
                 response_name='R'):
        """
        Initialize model_tools instance.

        Parameters
        ----------
        model_type : string
            The model type, must be an element of self.model_types, so
            currently ['linear', '2fi', '3fi', 'quadratic', 'quadratic+3fi'].
        param_names : list of string
            The parameter names used in the model string. Must be valid
            column names for the formula API of statsmodels.
        param_types : None or list of string, optional
            Defines the type of the parameters. Can be a list with as many
            entries as param_names. Allowed entries are 'cont' for continuous
            parameters and 'categ' for categorial parameters. The default is
            None, meaning that all parameters are continuous.
        response_name : string, optional
            The name of the response. The default is 'R'.

        Raises
        ------
        ValueError
            If invalid model_type or param_types are given.

        Returns
        -------
        None.

        """
        # Careful when adding another model, all references to the following
        # list have to be updated
        self.model_types = ['linear', '2fi', '3fi', 'quadratic',
                            'quadratic+3fi']
        self.model_type = model_type
        self.param_names = np.asarray(param_names, dtype='object')
        if param_types is None:
            self.param_types = ['cont']*len(param_names)
        else:
            self.param_types = list(param_types)
        self.response_name = response_name

        if self.model_type not in self.model_types:
            raise ValueError('No valid model_type given. Should be an element '
                             'of {}, but is \'{}\'.'.format(
                                 self.model_types, self.model_type))
        if len(self.param_types) != len(self.param_names):
            raise ValueError(
                'param_types must have as many entries as param_names, but '
                'has {} instead of {}.'.format(len(self.param_types),
                                               len(self.param_names)))

        param_numbers = np.arange(len(self.param_names))
        term_names = []
        term_strings = []
        exponents = []

        # linear part is used for all models
        for curr_number, curr_name in zip(param_numbers, self.param_names):
            curr_exp = np.zeros(len(self.param_names), dtype='int')
            curr_exp[curr_number] = 1
            term_names.append(curr_name)
            term_strings.append(curr_name)
            exponents.append(curr_exp)

        # two-factor interactions, '2fi', '3fi', 'quadratic', 'quadratic+3fi'
        if self.model_type in self.model_types[1:5]:
            for subset in combinations(param_numbers, 2):
                curr_exp = np.zeros(len(self.param_names), dtype='int')
                curr_exp[list(subset)] = 1
                # the index equals the name statsmodels gives to the params
                term_names.append(':'.join(self.param_names[list(subset)]))
                term_strings.append(':'.join(self.param_names[list(subset)]))
                exponents.append(curr_exp)

        # quadratic terms, 'quadratic', 'quadratic+3fi'
        if self.model_type in self.model_types[3:5]:
            for curr_number, (curr_name, curr_type) in enumerate(
                    zip(self.param_names, self.param_types)):
                # Squares of categoric factors make no sense
                if curr_type == 'categ':
                    continue
                curr_exp = np.zeros(len(self.param_names), dtype='int')
                curr_exp[curr_number] = 2
                curr_string = 'I({} * {})'.format(curr_name, curr_name)
                term_names.append(curr_string)
                term_strings.append(curr_string)
                exponents.append(curr_exp)

        # three-factor interactions, '3fi', 'quadratic+3fi'
        if self.model_type in [self.model_types[2], self.model_types[4]]:
            for subset in combinations(param_numbers, 3):
                curr_exp = np.zeros(len(self.param_names), dtype='int')
                curr_exp[list(subset)] = 1
                term_names.append(':'.join(self.param_names[list(subset)]))
                term_strings.append(':'.join(self.param_names[list(subset)]))
                exponents.append(curr_exp)

        self.param_combinations = pd.DataFrame(
            np.array(exponents, dtype='int').reshape(
                len(term_names), len(self.param_names)),
            index=pd.Index(term_names, name='term'),
            columns=self.param_names)
        self.param_combinations['string'] = term_strings
        self.param_combinations['mask'] = True
        self.param_combinations['for_hierarchy'] = False

    @property
    def terms(self):
        """All model terms in the order they appear in model strings."""
        return self.param_combinations.index.to_list()

    def active_terms(self):
        """Return the names of the terms currently included in the model."""
        return self.param_combinations.index[
            self.param_combinations['mask']].to_list()

    def model_string(self, combi_mask=None, check_hierarchy=False):
        """
        Generate the model string necessary for OLS fitting.

        Parameters
        ----------
        combi_mask : pd.Series, list of bool or None
            Boolean values which define if certain parameter combinations are
            included into the model string. The index should be identical to
            the index of self.param_combinations. The default is None, meaning
            that the current mask is used.
        check_hierarchy : bool, optional
            Defines if the model hierarchy is checked and corrected if
            necessary. The deafult is False.

        Returns
        -------
        model_string : string
            The model string in the correct format to be used by the ols
            function of statsmodels.formula.api. Without any active term, the
            intercept-only model 'R ~ 1' is returned.

        """
        if isinstance(combi_mask, pd.Series):
            self.param_combinations['mask'] = combi_mask.reindex(
                self.param_combinations.index, fill_value=False).astype(bool)
        elif combi_mask is not None:
            self.param_combinations['mask'] = np.asarray(combi_mask,
                                                         dtype='bool')
        if check_hierarchy:
            self.check_hierarchy()

        active_strings = self.param_combinations.loc[
            self.param_combinations['mask'], 'string']
        if len(active_strings) == 0:
            return '{} ~ 1'.format(self.response_name)
        return '{} ~ {}'.format(self.response_name,
                                active_strings.str.cat(sep=' + '))

    def sub_terms(self, term):
        """
        Find all terms that are contained in the given term.

        A term is contained in another one if all its exponents are smaller
        or equal, e.g. A is contained in A:B and in I(A * A).

        Parameters
        ----------
        term : str
            An element of self.param_combinations.index.

        Returns
        -------
        list of str
            The names of the lower-order terms, the term itself is excluded.

        """
        exponents = self.param_combinations[self.param_names]
        term_exp = exponents.loc[term]
        contained = (exponents <= term_exp).all(axis=1)
        contained[term] = False
        return exponents.index[contained].to_list()

    def contained_in(self, term, active_only=False):
        """
        Find all higher-order terms the given term is contained in.

        Parameters
        ----------
        term : str
            An element of self.param_combinations.index.
        active_only : bool, optional
            If True, only terms with True in self.param_combinations['mask']
            are returned. The default is False.

        Returns
        -------
        list of str
            The names of the higher-order terms.

        """
        exponents = self.param_combinations[self.param_names]
        term_exp = exponents.loc[term]
        containing = (exponents >= term_exp).all(axis=1)
        containing[term] = False
        if active_only:
            containing &= self.param_combinations['mask']
        return exponents.index[containing].to_list()

    def check_hierarchy(self):
        """
        Check for hierarchy of the model implemented.

        All entries with False in self.param_combinations['mask'] are checked
        if they should be included in the model for hierarchy. If this is
        found for a parameter or a parameter combination, the corresponding
        entry in the DataFrame is set to True and the value in the column
        'for_hierarchy' is also set to True in order to show that this term is
        only included for hierarchy and not due to a significant contribution.

        Returns
        -------
        None.

        """
        self.param_combinations['for_hierarchy'] = False
        excluded = self.param_combinations.index[
            ~self.param_combinations['mask']]

        for curr_term in excluded:
            if self.contained_in(curr_term, active_only=True):
                self.param_combinations.at[curr_term, 'for_hierarchy'] = True
                self.param_combinations.at[curr_term, 'mask'] = True

    def calc_front_factors(self, param_values):
        """
        Calculate the front factors of the individual model terms.

        The result is useful for a quick calculation of model predictions
        using self.calc_model_value.

        Parameters
        ----------
        param_values : list of float
            One value per element in self.param_names.

        Returns
        -------
        front_factors : Series
            The front factors for the active model terms. The index is the
            same like in the params property of the statsmodels results, so
            the two Series can be used for calculations easily.

        """
        front_factors = pd.Series([1], index=['Intercept'], dtype='float')

        param_values = np.asarray(param_values, dtype='float')
        combi_matrix = self.param_combinations.loc[
            self.param_combinations['mask'], self.param_names]
        for curr_combi in combi_matrix.index:
            front_factors[curr_combi] = np.prod(
                param_values**combi_matrix.loc[curr_combi].to_numpy(
                    dtype='int'))

        return front_factors

    def calc_model_value(self, param_values, model_coefs):
        """
        Calculate one value the model predicts.

        Parameters
        ----------
        param_values : list of float
            One set of parameter values, one value per element in
            self.param_names.
        model_coefs : Series or list of float
            The model coefficients, for example the params of a fitted
            statsmodels model. A Series is aligned by the term names, a list
            must follow the order of the intercept and the active terms.

        Returns
        -------
        float
            The predicted response value for the parameter settings.

        """
        front_factors = self.calc_front_factors(param_values)
        if isinstance(model_coefs, pd.Series):
            model_coefs = model_coefs[front_factors.index]
        return float((front_factors.to_numpy() *
                      np.asarray(model_coefs, dtype='float')).sum())
